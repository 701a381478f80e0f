# =============================================================================
# app/routers/icons.py - Equipment Palette Endpoint
# =============================================================================
# Serves the icon catalog grouped by palette category, plus the mic picker
# options. Public: the catalog is the same for everyone.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel

from core.models.stage_plot import IconType, MicType
from core.stage_plot.icons import (
    CATEGORY_LABELS,
    MIC_TYPES,
    group_icons_by_category,
    search_icons,
)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class IconResponse(BaseModel):
    """One palette entry."""
    type: IconType
    label: str
    supports_mic_type: bool
    supports_pairing: bool


class IconCategoryResponse(BaseModel):
    """Palette entries of one category, in catalog order."""
    category: str
    label: str
    icons: list[IconResponse]


class MicTypeResponse(BaseModel):
    value: MicType
    label: str


class PaletteResponse(BaseModel):
    categories: list[IconCategoryResponse]
    mic_types: list[MicTypeResponse]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=PaletteResponse)
async def get_palette(
    search: Annotated[str, Query(max_length=100, description="Filter by label or type")] = "",
):
    """
    Get the equipment palette.

    With `search`, only icons whose label or type contains the term
    (case-insensitive) are returned; empty categories are left out.
    """
    grouped = group_icons_by_category(search_icons(search))

    return PaletteResponse(
        categories=[
            IconCategoryResponse(
                category=category,
                label=CATEGORY_LABELS.get(category, category.title()),
                icons=[
                    IconResponse(
                        type=icon.type,
                        label=icon.label,
                        supports_mic_type=icon.supports_mic_type,
                        supports_pairing=icon.supports_pairing,
                    )
                    for icon in icons
                ],
            )
            for category, icons in grouped.items()
        ],
        mic_types=[MicTypeResponse(value=value, label=label) for value, label in MIC_TYPES],
    )
