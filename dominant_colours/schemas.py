"""
Dominant Colours API Schemas
Pydantic models for the colour extraction request/response validation.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from dominant_colours.services.colors.clustering import ClusterResult
from dominant_colours.services.colors.formatting import rgb_to_hex


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("dominant-colours", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


class ColourEntry(BaseModel):
    """Single colour in a palette with its share of the sampled pixels."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex color code in format #rrggbb"
    )
    rgb: List[int] = Field(
        ...,
        min_length=3,
        max_length=3,
        description="RGB channels, each 0-255"
    )
    ratio: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Fraction (0.0-1.0) of working-set samples in this cluster"
    )
    percentage: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="ratio expressed as a percentage"
    )


class ExtractionMetadata(BaseModel):
    """How the palette was produced."""
    request_id: str = Field(..., description="Request identifier for tracing")
    requested_k: int = Field(..., description="Number of clusters requested")
    cluster_count: int = Field(..., description="Number of clusters returned")
    seed: int = Field(..., description="Seed used for sampling and initialization")
    pixel_count: int = Field(..., description="Pixels decoded after downscaling")
    sample_count: int = Field(..., description="Working set size that was clustered")
    iterations: int = Field(..., description="K-means iterations run")
    converged: bool = Field(..., description="Whether the tolerance was reached")
    timings_ms: Dict[str, float] = Field(default_factory=dict, description="Per-stage durations")


class DominantColoursResponse(BaseModel):
    """Main colour extraction response."""
    colours: List[ColourEntry] = Field(
        ...,
        description="Colours sorted by prevalence, most dominant first"
    )
    metadata: ExtractionMetadata
    swatch_png_b64: Optional[str] = Field(
        None,
        description="Base64-encoded PNG showing the palette strip"
    )


def colour_entries(result: ClusterResult) -> List[ColourEntry]:
    """Convert a clustering result into response entries."""
    return [
        ColourEntry(
            hex=rgb_to_hex(colour.rgb),
            rgb=list(colour.rgb),
            ratio=colour.weight,
            percentage=colour.weight * 100,
        )
        for colour in result
    ]
