"""
Dominant colour extraction pipeline.

Ties the stages together: decode -> downscale -> pixels -> working set ->
k-means. Each stage runs under a performance monitor so timings and
memory land in the metrics collector.
"""

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
from PIL import Image
from loguru import logger

from dominant_colours.config import config
from dominant_colours.services import imaging
from dominant_colours.services.observability import (
    log_memory_usage,
    performance_monitor,
)
from .clustering import ClusterResult, DegeneratePolicy, cluster
from .errors import InvalidInputError
from .sampling import reduce

ImageSource = Union[str, Path, bytes, Image.Image, np.ndarray]


@dataclass
class ExtractionReport:
    """Clustering result plus the bookkeeping of how it was produced."""
    result: ClusterResult
    pixel_count: int
    sample_count: int
    image_size: tuple = (0, 0)
    timings_ms: Dict[str, float] = field(default_factory=dict)


def load_pixels(source: ImageSource, max_edge: Optional[int] = None) -> tuple:
    """
    Decode an image source into an (N, 3) uint8 pixel array.

    Accepts a file path, raw bytes, a PIL image, or an already-decoded
    pixel array (used as is).

    Returns:
        Tuple of (pixels, (width, height))
    """
    if isinstance(source, np.ndarray):
        if source.ndim == 3 and source.shape[-1] == 3:
            height, width = source.shape[:2]
            return source.reshape(-1, 3), (int(width), int(height))
        return source, (int(source.shape[0]), 1)

    if isinstance(source, (bytes, bytearray)):
        pil_image = imaging.decode_image_bytes(bytes(source))
    elif isinstance(source, Image.Image):
        pil_image = source.convert('RGB')
    else:
        pil_image = imaging.load_image(source)

    logger.debug(f"Decoded image of size {pil_image.size}")
    resized = imaging.downscale(pil_image, max_edge)
    return imaging.image_to_pixels(resized), resized.size


def extract_dominant_colors(
    source: ImageSource,
    k: Optional[int] = None,
    seed: Optional[int] = None,
    sample_cap: Optional[int] = None,
    sample_method: Optional[str] = None,
    max_iterations: Optional[int] = None,
    tolerance: Optional[float] = None,
    degenerate_policy: Optional[Union[str, DegeneratePolicy]] = None,
    workers: Optional[int] = None,
    max_edge: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> ExtractionReport:
    """
    Extract the dominant colours of an image.

    Unset parameters fall back to the values in Config.

    Raises:
        InvalidInputError: Unreadable image, empty pixel set, or unknown
            sampling method, degenerate policy or negative tolerance
        InvalidKError: k outside [1, working set size]
        DegenerateClusteringError: Unrecoverable empty clusters under the
            "raise" policy
    """
    k = config.DEFAULT_K if k is None else k
    seed = config.SEED if seed is None else seed
    sample_cap = config.SAMPLE_CAP if sample_cap is None else sample_cap
    sample_method = sample_method or config.SAMPLE_METHOD
    max_iterations = config.MAX_ITERATIONS if max_iterations is None else max_iterations
    tolerance = config.TOLERANCE if tolerance is None else tolerance
    degenerate_policy = degenerate_policy or config.DEGENERATE_POLICY
    workers = config.WORKERS if workers is None else workers

    if not config.validate_sample_method(sample_method):
        raise InvalidInputError(f"Unknown sampling method '{sample_method}'")
    if not config.validate_degenerate_policy(degenerate_policy):
        raise InvalidInputError(f"Unknown degenerate policy '{degenerate_policy}'")
    if not config.validate_tolerance(tolerance):
        raise InvalidInputError(f"Tolerance must be >= 0, got {tolerance}")

    timings: Dict[str, float] = {}

    with performance_monitor("image_decoding"):
        start_time = time.perf_counter()
        pixels, image_size = load_pixels(source, max_edge)
        timings["decode"] = (time.perf_counter() - start_time) * 1000
    log_memory_usage("image_decode_complete")

    with performance_monitor("pixel_sampling", pixel_count=len(pixels)):
        start_time = time.perf_counter()
        samples = reduce(pixels, sample_cap, seed=seed, method=sample_method)
        timings["sampling"] = (time.perf_counter() - start_time) * 1000

    with performance_monitor("color_clustering", pixel_count=len(samples), cluster_count=k):
        start_time = time.perf_counter()
        result = cluster(
            samples,
            k,
            seed=seed,
            max_iterations=max_iterations,
            tolerance=tolerance,
            degenerate_policy=degenerate_policy,
            workers=workers,
            cancel=cancel,
        )
        timings["clustering"] = (time.perf_counter() - start_time) * 1000
    log_memory_usage("clustering_complete")

    if len(result) < k:
        logger.warning(f"Image yielded {len(result)} colours, fewer than the {k} requested")

    return ExtractionReport(
        result=result,
        pixel_count=int(len(pixels)),
        sample_count=int(len(samples)),
        image_size=tuple(image_size),
        timings_ms=timings,
    )
