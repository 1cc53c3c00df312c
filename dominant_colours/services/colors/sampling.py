"""
Pixel sampling for colour clustering.

Reduces the full pixel population of an image to a bounded working set
while keeping its colour distribution. Selection is deterministic for a
given seed so repeated runs cluster exactly the same samples.
"""

import numpy as np
from loguru import logger

from .errors import InvalidInputError

SAMPLE_METHODS = ("random", "stride")


def validate_samples(pixels) -> np.ndarray:
    """
    Coerce a pixel sequence to an (N, 3) array and reject unusable input.

    Args:
        pixels: Sequence of 3-channel colours or an (N, 3) array

    Returns:
        The pixels as a numpy array (dtype preserved for arrays)

    Raises:
        InvalidInputError: If ragged, empty, not 3-channel, or containing NaN/inf
    """
    try:
        arr = np.asarray(pixels)
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"Pixels must form a rectangular (N, 3) array: {e}") from e

    if arr.size == 0:
        raise InvalidInputError("No pixels to sample: the image has zero decodable pixels")

    if arr.ndim != 2 or arr.shape[1] != 3:
        raise InvalidInputError(f"Expected pixels shaped (N, 3), got {arr.shape}")

    if not np.issubdtype(arr.dtype, np.number) or np.issubdtype(arr.dtype, np.complexfloating):
        raise InvalidInputError(f"Pixel channels must be real numbers, got dtype {arr.dtype}")

    if np.issubdtype(arr.dtype, np.floating) and not np.all(np.isfinite(arr)):
        raise InvalidInputError("Pixel channels contain NaN or infinite values")

    return arr


def reduce(pixels, cap: int, seed: int = 42, method: str = "random") -> np.ndarray:
    """
    Build the working set of colour samples for clustering.

    Args:
        pixels: (N, 3) colour samples in any order
        cap: Maximum working set size
        seed: Seed for the "random" method
        method: "random" (seeded selection without replacement) or
            "stride" (evenly spaced indices)

    Returns:
        (M, 3) array with 1 <= M <= cap. When N <= cap the input is
        returned unchanged and in order.

    Raises:
        InvalidInputError: If pixels are empty or malformed, cap < 1,
            or method is unknown
    """
    if cap is None or int(cap) < 1:
        raise InvalidInputError(f"Sample cap must be a positive integer, got {cap}")
    cap = int(cap)

    if method not in SAMPLE_METHODS:
        raise InvalidInputError(f"Unknown sampling method '{method}', expected one of {SAMPLE_METHODS}")

    samples = validate_samples(pixels)
    n = samples.shape[0]

    if n <= cap:
        logger.debug(f"Working set keeps all {n} pixels (cap={cap})")
        return samples

    if method == "random":
        rng = np.random.default_rng(seed)
        indices = np.sort(rng.choice(n, size=cap, replace=False))
    else:
        # floor(i * n / cap) is strictly increasing because n > cap
        indices = (np.arange(cap, dtype=np.int64) * n) // cap

    logger.info(f"Downsampled {n} pixels to {cap} ({method})")
    return samples[indices]
