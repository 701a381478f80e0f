# =============================================================================
# core/services/export_service.py - Tech Spec PDF Export
# =============================================================================
# Renders a printable tech spec with reportlab:
#   header (name, creator contact) -> description -> stage drawing
#   -> legend -> equipment table -> provider summary -> footer
#
# Stage markers are numbered in item order (oldest first), and the same
# numbers are used in the equipment table so the two can be read together.
#
# Exports can also be uploaded to Supabase storage and shared through a
# signed URL (used by the background export task).
# =============================================================================

import io
import logging
from datetime import date
from typing import Any, Callable

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from app.config import settings
from app.exceptions import ExportError, StorageUploadError
from core.models.stage_plot import ProvidedBy, StagePlotItem
from core.models.tech_spec import AuthorProfile, TechSpec
from core.stage_plot.equipment import summarize_providers
from core.stage_plot.icons import default_label_for, mic_label_for
from lib.supabase_client import SupabaseClient
from lib.utils import safe_filename

logger = logging.getLogger(__name__)

ProgressFunc = Callable[[str], None]

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
STAGE_HEIGHT = 80 * mm
FRONT_BAND_HEIGHT = 8 * mm
MARKER_RADIUS = 4 * mm
ROW_HEIGHT = 8 * mm

# (fill, stroke) per provider
MARKER_COLORS = {
    ProvidedBy.VENUE: (colors.Color(200 / 255, 220 / 255, 1), colors.Color(100 / 255, 130 / 255, 200 / 255)),
    ProvidedBy.ARTIST: (colors.white, colors.Color(100 / 255, 100 / 255, 100 / 255)),
    ProvidedBy.UNSPECIFIED: (colors.Color(230 / 255, 230 / 255, 230 / 255), colors.Color(150 / 255, 150 / 255, 150 / 255)),
}
PAIR_LINE_COLOR = colors.Color(200 / 255, 180 / 255, 50 / 255)
STAGE_FILL = colors.Color(245 / 255, 245 / 255, 245 / 255)
STAGE_STROKE = colors.Color(180 / 255, 180 / 255, 180 / 255)
FRONT_BAND_FILL = colors.Color(1, 240 / 255, 200 / 255)
FRONT_BAND_TEXT = colors.Color(150 / 255, 120 / 255, 50 / 255)
HEADER_FILL = colors.Color(50 / 255, 50 / 255, 50 / 255)
STRIPE_FILL = colors.Color(248 / 255, 248 / 255, 248 / 255)
VENUE_ROW_FILL = colors.Color(240 / 255, 245 / 255, 1)
VENUE_TEXT = colors.Color(80 / 255, 100 / 255, 180 / 255)
MUTED_TEXT = colors.Color(100 / 255, 100 / 255, 100 / 255)

PROVIDER_TEXT = {
    ProvidedBy.VENUE: "Venue",
    ProvidedBy.ARTIST: "Artist",
    ProvidedBy.UNSPECIFIED: "TBD",
}


def export_filename(name: str) -> str:
    """
    Download filename for a tech spec.

    Example:
        export_filename("Summer Tour 2025!")  # "Summer_Tour_2025__tech_spec.pdf"
    """
    return f"{safe_filename(name)}_tech_spec.pdf"


def _truncate(text: str, limit: int = 20) -> str:
    return text[:limit]


class _PdfWriter:
    """Tracks the write cursor (distance from the top) across pages."""

    def __init__(self, buffer: io.BytesIO, title: str):
        self.pdf = canvas.Canvas(buffer, pagesize=A4)
        self.pdf.setTitle(title)
        self.top = MARGIN

    def y(self, offset: float = 0) -> float:
        """reportlab measures from the bottom of the page."""
        return PAGE_HEIGHT - self.top - offset

    def text(self, value: str, x: float, font: str = "Helvetica", size: float = 9, color=colors.black) -> None:
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        self.pdf.drawString(x, self.y(), value)

    def ensure_space(self, needed: float) -> None:
        if self.top + needed > PAGE_HEIGHT - MARGIN:
            self.pdf.showPage()
            self.top = MARGIN


def _draw_header(writer: _PdfWriter, tech_spec: TechSpec, profile: AuthorProfile | None) -> None:
    writer.top += 8 * mm
    writer.text(tech_spec.name, MARGIN, font="Helvetica-Bold", size=22)
    writer.top += 8 * mm

    if profile:
        for line in (profile.display_name, profile.email, profile.phone):
            if line:
                writer.text(line, MARGIN, size=10, color=MUTED_TEXT)
                writer.top += 5 * mm

    if tech_spec.description:
        writer.top += 3 * mm
        for line in simpleSplit(tech_spec.description, "Helvetica", 10, CONTENT_WIDTH):
            writer.text(line, MARGIN, size=10)
            writer.top += 5 * mm

    writer.top += 5 * mm


def _draw_stage(writer: _PdfWriter, items: list[StagePlotItem]) -> None:
    pdf = writer.pdf

    writer.ensure_space(STAGE_HEIGHT + 30 * mm)
    writer.text("Stage Plot", MARGIN, font="Helvetica-Bold", size=14)
    writer.top += 4 * mm

    stage_top = writer.top
    stage_bottom_y = writer.y(STAGE_HEIGHT)

    pdf.setFillColor(STAGE_FILL)
    pdf.setStrokeColor(STAGE_STROKE)
    pdf.roundRect(MARGIN, stage_bottom_y, CONTENT_WIDTH, STAGE_HEIGHT, 3 * mm, stroke=1, fill=1)

    pdf.setFillColor(FRONT_BAND_FILL)
    pdf.rect(MARGIN, stage_bottom_y, CONTENT_WIDTH, FRONT_BAND_HEIGHT, stroke=0, fill=1)
    pdf.setFillColor(FRONT_BAND_TEXT)
    pdf.setFont("Helvetica", 7)
    pdf.drawCentredString(PAGE_WIDTH / 2, stage_bottom_y + 2 * mm, "FRONT OF STAGE (AUDIENCE)")

    def point(item: StagePlotItem) -> tuple[float, float]:
        x = MARGIN + item.position_x / 100 * CONTENT_WIDTH
        y = PAGE_HEIGHT - stage_top - item.position_y / 100 * STAGE_HEIGHT
        return x, y

    # Pair lines go under the markers, one line per pair
    by_id = {item.id: item for item in items}
    pdf.setStrokeColor(PAIR_LINE_COLOR)
    pdf.setDash([2 * mm, 2 * mm])
    for item in items:
        partner = by_id.get(item.paired_with_id) if item.paired_with_id else None
        if partner is None or item.id > partner.id:
            continue
        x1, y1 = point(item)
        x2, y2 = point(partner)
        pdf.line(x1, y1, x2, y2)
    pdf.setDash([])

    for number, item in enumerate(items, start=1):
        x, y = point(item)
        fill, stroke = MARKER_COLORS[item.provided_by]
        pdf.setFillColor(fill)
        pdf.setStrokeColor(stroke)
        pdf.circle(x, y, MARKER_RADIUS, stroke=1, fill=1)
        pdf.setFillColor(colors.Color(50 / 255, 50 / 255, 50 / 255))
        pdf.setFont("Helvetica-Bold", 6)
        pdf.drawCentredString(x, y - 2, str(number))

    writer.top = stage_top + STAGE_HEIGHT + 8 * mm


def _draw_legend(writer: _PdfWriter) -> None:
    pdf = writer.pdf
    y = writer.y()

    for offset, provider, label in (
        (0, ProvidedBy.ARTIST, "Artist provides"),
        (45 * mm, ProvidedBy.VENUE, "Venue provides"),
    ):
        fill, stroke = MARKER_COLORS[provider]
        pdf.setFillColor(fill)
        pdf.setStrokeColor(stroke)
        pdf.circle(MARGIN + 3 * mm + offset, y, 3 * mm, stroke=1, fill=1)
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica", 8)
        pdf.drawString(MARGIN + 8 * mm + offset, y - 1 * mm, label)

    line_x = MARGIN + 95 * mm
    pdf.setStrokeColor(PAIR_LINE_COLOR)
    pdf.setDash([2 * mm, 2 * mm])
    pdf.line(line_x, y, line_x + 10 * mm, y)
    pdf.setDash([])
    pdf.drawString(line_x + 13 * mm, y - 1 * mm, "Paired monitors")

    writer.top += 12 * mm


def _draw_equipment_table(writer: _PdfWriter, items: list[StagePlotItem]) -> None:
    pdf = writer.pdf
    columns = {
        "#": MARGIN + 3 * mm,
        "Equipment": MARGIN + 15 * mm,
        "Label": MARGIN + 55 * mm,
        "Mic/Input": MARGIN + 100 * mm,
        "Provided By": MARGIN + 145 * mm,
    }

    writer.ensure_space(3 * ROW_HEIGHT)
    writer.text("Equipment List", MARGIN, font="Helvetica-Bold", size=14)
    writer.top += 4 * mm

    pdf.setFillColor(HEADER_FILL)
    pdf.rect(MARGIN, writer.y(ROW_HEIGHT), CONTENT_WIDTH, ROW_HEIGHT, stroke=0, fill=1)
    writer.top += 5.5 * mm
    for title, x in columns.items():
        writer.text(title, x, font="Helvetica-Bold", size=9, color=colors.white)
    writer.top += ROW_HEIGHT

    for index, item in enumerate(items):
        writer.ensure_space(ROW_HEIGHT + 10 * mm)
        row_bottom = writer.y(2.5 * mm)

        if item.provided_by is ProvidedBy.VENUE:
            pdf.setFillColor(VENUE_ROW_FILL)
            pdf.rect(MARGIN, row_bottom, CONTENT_WIDTH, ROW_HEIGHT, stroke=0, fill=1)
        elif index % 2 == 0:
            pdf.setFillColor(STRIPE_FILL)
            pdf.rect(MARGIN, row_bottom, CONTENT_WIDTH, ROW_HEIGHT, stroke=0, fill=1)

        writer.text(str(index + 1), columns["#"])
        writer.text(_truncate(default_label_for(item.icon_type)), columns["Equipment"])
        writer.text(_truncate(item.label or "-"), columns["Label"])
        writer.text(_truncate(mic_label_for(item.mic_type) or "-"), columns["Mic/Input"])

        if item.provided_by is ProvidedBy.VENUE:
            writer.text("Venue", columns["Provided By"], font="Helvetica-Bold", color=VENUE_TEXT)
        else:
            writer.text(PROVIDER_TEXT[item.provided_by], columns["Provided By"])
        writer.top += ROW_HEIGHT

        if item.notes:
            for line in simpleSplit(f"Note: {item.notes}", "Helvetica", 7, CONTENT_WIDTH - 20 * mm):
                writer.ensure_space(4 * mm)
                writer.text(line, columns["Equipment"], size=7, color=MUTED_TEXT)
                writer.top += 4 * mm
            writer.top += 2 * mm


def _draw_summary(writer: _PdfWriter, items: list[StagePlotItem]) -> None:
    summary = summarize_providers(items)

    writer.ensure_space(30 * mm)
    writer.top += 6 * mm
    writer.text("Summary", MARGIN, font="Helvetica-Bold", size=10)
    writer.top += 6 * mm

    lines = [
        f"Total items: {summary.total}",
        f"Artist provides: {summary.artist} items",
        f"Venue to provide: {summary.venue} items",
    ]
    if summary.unspecified:
        lines.append(f"Unspecified: {summary.unspecified} items")

    for line in lines:
        writer.text(line, MARGIN)
        writer.top += 5 * mm


def _draw_footer(writer: _PdfWriter, tech_spec: TechSpec) -> None:
    pdf = writer.pdf
    pdf.setFont("Helvetica", 7)
    pdf.setFillColor(colors.Color(150 / 255, 150 / 255, 150 / 255))
    pdf.drawCentredString(
        PAGE_WIDTH / 2,
        10 * mm,
        f"Tech Spec: {tech_spec.name} | Generated {date.today().isoformat()}",
    )


def render_tech_spec_pdf(
    tech_spec: TechSpec,
    items: list[StagePlotItem],
    profile: AuthorProfile | None = None,
) -> bytes:
    """
    Render a tech spec to PDF.

    Args:
        tech_spec: The document being exported
        items: Its stage plot items, in creation order
        profile: Creator contact details for the header, if known

    Returns:
        The PDF file content

    Raises:
        ExportError: If rendering fails
    """
    buffer = io.BytesIO()

    try:
        writer = _PdfWriter(buffer, title=tech_spec.name)
        _draw_header(writer, tech_spec, profile)
        _draw_stage(writer, items)
        _draw_legend(writer)
        _draw_equipment_table(writer, items)
        _draw_summary(writer, items)
        _draw_footer(writer, tech_spec)
        writer.pdf.showPage()
        writer.pdf.save()
    except Exception as e:
        logger.error(f"PDF rendering failed for tech spec {tech_spec.id}: {e}")
        raise ExportError(tech_spec.id, str(e))

    content = buffer.getvalue()
    logger.info(f"Rendered tech spec {tech_spec.id} to PDF ({len(content)} bytes, {len(items)} items)")
    return content


class ExportService:
    """Stores rendered PDFs in Supabase storage."""

    @staticmethod
    def upload_pdf(tech_spec: TechSpec, content: bytes) -> str:
        """
        Upload an export, replacing the previous one.

        Returns:
            Storage path inside EXPORT_BUCKET

        Raises:
            StorageUploadError: If the upload fails
        """
        client = SupabaseClient.get_client()
        path = f"{tech_spec.user_id}/{tech_spec.id}/{export_filename(tech_spec.name)}"

        try:
            client.storage.from_(settings.EXPORT_BUCKET).upload(
                path=path,
                file=content,
                file_options={"content-type": "application/pdf", "upsert": "true"}
            )
        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

        logger.info(f"Uploaded tech spec export to storage: {path}")
        return path

    @staticmethod
    def get_signed_url(path: str, expires_in: int | None = None) -> str:
        """Time-limited download URL for an uploaded export."""
        client = SupabaseClient.get_client()
        expires_in = expires_in or settings.EXPORT_URL_TTL_SECONDS

        try:
            result = client.storage.from_(settings.EXPORT_BUCKET).create_signed_url(path, expires_in)
        except Exception as e:
            logger.error(f"Failed to sign export URL: {e}")
            raise StorageUploadError(str(e))

        # storage3 has used both spellings
        url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise StorageUploadError(f"No signed URL returned for {path}")
        return url

    @staticmethod
    def export_tech_spec(
        tech_spec: TechSpec,
        items: list[StagePlotItem],
        profile: AuthorProfile | None = None,
        on_step: ProgressFunc | None = None,
    ) -> dict[str, Any]:
        """
        Render, upload and sign in one go.

        Args:
            on_step: Called with a status message before each step

        Returns:
            Dict with storage_path, signed_url, filename and size_bytes
        """
        report = on_step or (lambda message: None)

        report("Rendering PDF...")
        content = render_tech_spec_pdf(tech_spec, items, profile)

        report("Uploading...")
        path = ExportService.upload_pdf(tech_spec, content)

        report("Creating download link...")
        signed_url = ExportService.get_signed_url(path)

        return {
            "storage_path": path,
            "signed_url": signed_url,
            "filename": export_filename(tech_spec.name),
            "size_bytes": len(content),
        }
