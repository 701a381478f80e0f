# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Poll background exports queued with POST /tech-specs/{id}/export.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter()

TaskId = Annotated[str, Path(description="Celery task ID")]

# Default progress/message per Celery state
STATE_DEFAULTS = {
    "PENDING": (0, "Waiting in queue..."),
    "STARTED": (0, "Starting..."),
    "SUCCESS": (100, "Complete"),
    "FAILURE": (None, "Failed"),
    "REVOKED": (None, "Cancelled"),
}


# =============================================================================
# Response Models
# =============================================================================

class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


class TaskCancelResponse(BaseModel):
    task_id: str
    cancelled: bool
    message: str


def _async_result(task_id: str):
    from workers.celery_app import celery_app

    return celery_app.AsyncResult(task_id)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(task_id: TaskId):
    """
    Get the status of a background task.

    - PENDING / STARTED: queued or picked up by a worker
    - PROGRESS: running; `progress` and `message` describe the current step
    - SUCCESS: `result` holds the storage path and signed download URL
    - FAILURE: `error` holds the reason
    """
    try:
        result = _async_result(task_id)
        state = result.status
    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {e}")

    progress, message = STATE_DEFAULTS.get(state, (None, None))
    response = TaskStatusResponse(task_id=task_id, status=state, progress=progress, message=message)

    if state == "PROGRESS":
        info = result.info or {}
        response.progress = info.get("percent", 0)
        response.message = info.get("message", "Processing...")
    elif state == "SUCCESS":
        response.result = result.result
    elif state == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"

    return response


@router.delete("/{task_id}", response_model=TaskCancelResponse)
async def cancel_task(task_id: TaskId):
    """Cancel a task that hasn't finished yet."""
    try:
        result = _async_result(task_id)

        if result.status in ("SUCCESS", "FAILURE"):
            return TaskCancelResponse(
                task_id=task_id,
                cancelled=False,
                message=f"Task already {result.status.lower()}, cannot cancel",
            )

        result.revoke(terminate=True)
    except Exception as e:
        logger.error(f"Error cancelling task: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to cancel task: {e}")

    return TaskCancelResponse(task_id=task_id, cancelled=True, message="Task cancelled")
