"""
Offshoot API Schemas
Pydantic models for palette and harvesting request/response validation.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("offshoot-core", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


# ============================================================================
# PALETTE SCHEMAS
# ============================================================================

class PaletteResponse(BaseModel):
    """Reference palette derived from a batch of images."""
    request_id: str
    palette: List[str] = Field(
        ...,
        max_length=8,
        description="Hex colors (#rrggbb), most frequent first"
    )
    styles: List[str] = Field(default_factory=list, description="Coarse style tags")
    images_received: int = Field(..., ge=0)


class ColorMatchEntry(BaseModel):
    reference: str = Field(..., pattern=r"^#[0-9a-f]{6}$")
    candidate: str = Field(..., pattern=r"^#[0-9a-f]{6}$")


class MatchReportResponse(BaseModel):
    """How many reference colors appear in a candidate image."""
    score: float = Field(..., ge=0.0, le=100.0)
    matches: List[ColorMatchEntry] = Field(default_factory=list)


class ClosestColorResponse(BaseModel):
    hex: str
    closest: Optional[str] = Field(None, description="Nearest palette color, null when no palette")


# ============================================================================
# HARVEST SCHEMAS
# ============================================================================

class HarvestRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048, description="Absolute product page URL")


class HarvestResponse(BaseModel):
    request_id: str
    url: str
    images: List[str] = Field(..., max_length=20)
    count: int = Field(..., ge=0)
