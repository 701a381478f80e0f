# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the stage plot business logic:
# - models/: Pydantic schemas for data validation
# - stage_plot/: pure editor logic (icons, canvas, pairing, channels, equipment)
# - services/: Supabase-backed stores, the editor controller and PDF export
#
# Code in this package should NOT import from FastAPI routers or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
