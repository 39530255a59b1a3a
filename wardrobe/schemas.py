"""
Wardrobe Colors API Schemas
Pydantic models for color extraction, harmony and outfit analysis requests/responses.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from wardrobe.services.colors.harmony import HARMONY_TYPES

HEX_PATTERN = r"^#[0-9a-f]{6}$"


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("wardrobe-colors", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


# ============================================================================
# COLOR EXTRACTION
# ============================================================================

class ExtractionDebug(BaseModel):
    """Intermediate statistics of one extraction."""
    background: Optional[str] = Field(
        None, description="Estimated background color, null when the border is transparent"
    )
    opaque_pixels: int = Field(..., ge=0)
    foreground_pixels: int = Field(..., ge=0, description="Pixels farther than sensitivity from the background")
    counted_pixels: int = Field(..., ge=0, description="Foreground pixels that entered the histogram")
    bucket_counts: List[int] = Field(default_factory=list, description="Pixel count per returned color")
    resized: bool = Field(False, description="Whether the image was downscaled before extraction")


class ColorExtractResponse(BaseModel):
    """Dominant colors of a garment photo."""
    width: int = Field(..., description="Width of the analyzed image in pixels")
    height: int = Field(..., description="Height of the analyzed image in pixels")
    sensitivity: int = Field(..., description="Background distance threshold used")
    colors: List[str] = Field(..., description="Lowercase hex colors, most frequent first")
    fallback_used: bool = Field(False, description="Whether a fallback produced the colors")
    fallback_method: Optional[str] = Field(None, description="'kmeans' or 'center_pixel'")
    swatch_png_b64: Optional[str] = Field(None, description="Base64-encoded PNG strip of the colors")
    debug: ExtractionDebug


class ColorPickResponse(BaseModel):
    """Color of a single pixel."""
    x: int
    y: int
    hex: str = Field(..., pattern=HEX_PATTERN)


# ============================================================================
# HARMONY
# ============================================================================

class ColorsRequest(BaseModel):
    """A set of colors to analyze; unparseable entries are tolerated."""
    colors: List[str] = Field(..., max_length=50, description="Color strings, usually hex")
    include_swatch: bool = Field(False, description="Render the colors as a PNG strip")


class ContrastRequest(BaseModel):
    color1: str = Field(..., description="First color")
    color2: str = Field(..., description="Second color")


class ContrastResponse(BaseModel):
    color1: str
    color2: str
    ratio: float = Field(..., description="WCAG contrast ratio, 1 to 21")


class HarmonyResponse(BaseModel):
    """Harmony classification."""
    type: str = Field(..., description=f"One of {', '.join(HARMONY_TYPES)}")
    display_name: str = Field(..., description="Human readable harmony name")
    confidence: float = Field(..., ge=0.0, le=1.0)
    description: str
    suggestions: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)


class ColorAnalysisResponse(BaseModel):
    """Overall color properties of a look."""
    primary: str = Field(..., pattern=HEX_PATTERN, description="Most saturated color")
    secondary: List[str] = Field(default_factory=list)
    harmony: HarmonyResponse
    contrast: float = Field(..., ge=0.0, description="Mean pairwise WCAG contrast, 0 for fewer than 2 colors")
    saturation: float = Field(..., ge=0.0, le=1.0)
    brightness: float = Field(..., ge=0.0, le=1.0)
    swatch_png_b64: Optional[str] = None


# ============================================================================
# OUTFIT ANALYSIS
# ============================================================================

class PartClassification(BaseModel):
    category: Optional[Any] = None
    name: str
    probability: float = Field(..., ge=0.0)
    percentage: str


class OutfitPart(BaseModel):
    image: Optional[str] = None
    classification: PartClassification
    detected_type: str


class OutfitAnalysisResponse(BaseModel):
    """Normalized reply of the external outfit analysis service."""
    session_id: Optional[str] = None
    parts: Dict[str, OutfitPart]
    compatibility: Optional[Dict[str, Any]] = None
    full_image: Optional[Dict[str, Any]] = None
