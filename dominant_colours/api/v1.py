"""
Dominant Colours v1 API Routes
Implements the /v1/colours extraction endpoint and the metrics view.
"""
from typing import Any, Dict

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from dominant_colours.config import config
from dominant_colours.schemas import (
    DominantColoursResponse,
    ErrorResponse,
    ExtractionMetadata,
    colour_entries,
)
from dominant_colours.services.colors.errors import (
    DegenerateClusteringError,
    InvalidInputError,
    InvalidKError,
)
from dominant_colours.services.colors.extraction import extract_dominant_colors
from dominant_colours.services.colors.formatting import rgb_to_hex
from dominant_colours.services.colors.swatches import render_swatch_strip
from dominant_colours.services.imaging import ImageDecodeError
from dominant_colours.services.observability import get_metrics_collector
from dominant_colours.utils.ids import generate_request_id
from dominant_colours.utils.logging import get_logger

router = APIRouter(prefix="/v1", tags=["Dominant colours"])


@router.post("/colours",
             response_model=DominantColoursResponse,
             responses={400: {"model": ErrorResponse}, 415: {"model": ErrorResponse},
                        422: {"model": ErrorResponse}},
             summary="Extract dominant colours",
             description="Cluster the pixels of an uploaded image into its k dominant colours")
async def extract_colours(
    file: UploadFile = File(..., description="Image file (JPEG, PNG, GIF, BMP or WebP)"),
    k: int = Query(config.DEFAULT_K, ge=1, le=config.MAX_K, description="Number of colours"),
    seed: int = Query(config.SEED, ge=0, description="Seed for sampling and initialization"),
    sample_cap: int = Query(config.SAMPLE_CAP, ge=1, le=200000, description="Maximum pixels to cluster"),
    max_iterations: int = Query(config.MAX_ITERATIONS, ge=1, le=1000, description="K-means iteration bound"),
    tolerance: float = Query(config.TOLERANCE, ge=0.0, description="Convergence tolerance"),
    degenerate_policy: str = Query(config.DEGENERATE_POLICY, pattern="^(raise|reduce)$",
                                   description="Handling of unrecoverable empty clusters"),
    include_swatch: bool = Query(False, description="Include a PNG palette strip"),
) -> DominantColoursResponse:
    """Decode the upload, cluster its pixels and return the weight-ordered palette."""
    log = get_logger()
    request_id = generate_request_id("api")
    log.info("Starting colour extraction", extra={"request_id": request_id, "k": k})

    if file.content_type and file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    try:
        file_bytes = await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    try:
        report = await run_in_threadpool(
            extract_dominant_colors,
            file_bytes,
            k=k,
            seed=seed,
            sample_cap=sample_cap,
            max_iterations=max_iterations,
            tolerance=tolerance,
            degenerate_policy=degenerate_policy,
        )
    except ImageDecodeError as e:
        log.warning(f"Rejected upload: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))
    except (InvalidKError, DegenerateClusteringError) as e:
        log.warning(f"Clustering rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = report.result
    swatch = None
    if include_swatch:
        swatch = render_swatch_strip([rgb_to_hex(c.rgb) for c in result], highlight_index=0)

    log.info("Colour extraction complete",
             extra={"request_id": request_id, "colours": len(result), "iterations": result.iterations})

    return DominantColoursResponse(
        colours=colour_entries(result),
        metadata=ExtractionMetadata(
            request_id=request_id,
            requested_k=k,
            cluster_count=len(result),
            seed=seed,
            pixel_count=report.pixel_count,
            sample_count=report.sample_count,
            iterations=result.iterations,
            converged=result.converged,
            timings_ms=report.timings_ms,
        ),
        swatch_png_b64=swatch,
    )


@router.get("/metrics", summary="Pipeline metrics")
async def get_metrics() -> Dict[str, Any]:
    """Aggregated per-stage timings and memory usage."""
    collector = get_metrics_collector()
    return {
        **collector.get_all_stats(),
        "recent": collector.get_recent_metrics(limit=10),
    }
