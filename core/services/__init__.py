# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .tech_spec_service import TechSpecService
from .item_service import ItemService
from .editor_service import EditorSessionStore, StagePlotEditor, editor_sessions
from .export_service import ExportService, export_filename, render_tech_spec_pdf

__all__ = [
    "TechSpecService",
    "ItemService",
    "EditorSessionStore",
    "StagePlotEditor",
    "editor_sessions",
    "ExportService",
    "export_filename",
    "render_tech_spec_pdf",
]
