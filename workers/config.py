# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a crashed worker's export is redelivered
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Keep results as long as the signed URL they carry is valid
    result_expires = settings.EXPORT_URL_TTL_SECONDS

    # Rendering a PDF takes seconds; anything near a minute is stuck
    task_time_limit = 120
    task_soft_time_limit = 90

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "exports": {
            "exchange": "exports",
            "routing_key": "exports",
        },
    }

    task_routes = {
        "workers.tasks.export_tech_spec_pdf": {"queue": "exports"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Retry Settings
    # -------------------------------------------------------------------------

    task_annotations = {
        "workers.tasks.export_tech_spec_pdf": {
            "max_retries": 3,
            "default_retry_delay": 10,
        }
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
