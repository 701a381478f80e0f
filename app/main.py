# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Tech Spec API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.config import settings
from app.exceptions import TechSpecException, techspec_exception_handler
from app.routers import (
    canvas,
    channels,
    exports,
    health,
    icons,
    items,
    pairing,
    shared,
    tasks,
    tech_specs,
)
from core.services.editor_service import editor_sessions

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the active configuration on startup and drops editor states on
    shutdown.
    """
    logger.info(f"Starting Tech Spec API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(
        f"Channel policy: {settings.CHANNEL_NUMBER_POLICY}, "
        f"atomic writes: {settings.ATOMIC_STAGE_PLOT_WRITES}"
    )

    yield

    logger.info(f"Shutting down Tech Spec API ({len(editor_sessions)} open editor states)")
    editor_sessions.clear()


app = FastAPI(
    title="Tech Spec API",
    description="""
## Stage Plot & Tech Spec API

Build band tech specs: lay out equipment on a stage plot, pair monitor
wedges, assign input channels and export a printable PDF.

### How It Works

1. **Create a Tech Spec** - `POST /api/v1/tech-specs`
2. **Drop Equipment** - `POST /api/v1/tech-specs/{id}/canvas/drop`
3. **Pair Monitors** - `POST .../pairing/start` then `POST .../pairing/click`
4. **Arrange Channels** - `GET .../channels`, `POST .../channels/reorder`
5. **Export** - `GET .../export.pdf` or share a public link

Positions are percentages of the stage canvas, with (0, 0) at the top-left
(upstage left) corner and the audience below.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Verify tokens and read the caller's profile"},
        {"name": "Icons", "description": "Equipment palette and mic types"},
        {"name": "Tech Specs", "description": "Create, share and manage tech specs"},
        {"name": "Items", "description": "Stage plot items"},
        {"name": "Canvas", "description": "Drop, click, rotate and drum kit placement"},
        {"name": "Pairing", "description": "Pair monitor wedges"},
        {"name": "Channels", "description": "Input list and equipment list"},
        {"name": "Exports", "description": "PDF export"},
        {"name": "Tasks", "description": "Track background exports"},
        {"name": "Shared", "description": "Public read-only tech specs"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(TechSpecException)
async def handle_techspec_exception(request: Request, exc: TechSpecException):
    """Handle custom Tech Spec exceptions."""
    return await techspec_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(icons.router, prefix=f"{API_PREFIX}/icons", tags=["Icons"])
app.include_router(tech_specs.router, prefix=f"{API_PREFIX}/tech-specs", tags=["Tech Specs"])
app.include_router(items.router, prefix=f"{API_PREFIX}/tech-specs", tags=["Items"])
app.include_router(canvas.router, prefix=f"{API_PREFIX}/tech-specs", tags=["Canvas"])
app.include_router(pairing.router, prefix=f"{API_PREFIX}/tech-specs", tags=["Pairing"])
app.include_router(channels.router, prefix=f"{API_PREFIX}/tech-specs", tags=["Channels"])
app.include_router(exports.router, prefix=f"{API_PREFIX}/tech-specs", tags=["Exports"])
app.include_router(tasks.router, prefix=f"{API_PREFIX}/tasks", tags=["Tasks"])
app.include_router(shared.router, prefix=f"{API_PREFIX}/shared", tags=["Shared"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Tech Spec API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
