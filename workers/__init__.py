# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background PDF exports.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (PDF export)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info -Q default,exports
#
#   # Submit task (from API)
#   from workers.tasks import export_tech_spec_pdf
#   result = export_tech_spec_pdf.delay(tech_spec_id, user_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
