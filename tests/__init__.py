# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Tech Spec API:
# - test_icons/canvas/pairing/channels/equipment.py: pure stage plot logic
# - test_models.py: Unit tests for Pydantic model validation
# - test_*_service.py: services against the in-memory Supabase in conftest.py
# - test_tasks.py: the Celery export task, called directly
# - test_api.py: Integration tests for API endpoints
#
# Run tests with: pytest
# =============================================================================
