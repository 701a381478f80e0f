# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - icons.py: Equipment palette and mic types
# - tech_specs.py: Tech spec CRUD and sharing
# - items.py: Stage plot item store
# - canvas.py: Drops, clicks, drum kit and rotation on the canvas
# - pairing.py: Monitor pairing flow
# - channels.py: Input list, channel reorder and equipment list
# - exports.py: PDF download and background export
# - tasks.py: Background task status endpoints
# - shared.py: Public read-only view of shared tech specs
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import icons
from . import tech_specs
from . import items
from . import canvas
from . import pairing
from . import channels
from . import exports
from . import tasks
from . import shared

__all__ = [
    "health",
    "icons",
    "tech_specs",
    "items",
    "canvas",
    "pairing",
    "channels",
    "exports",
    "tasks",
    "shared",
]
