"""
Dominant Colours Configuration
Manages environment variables and defaults for the extraction pipeline,
the CLI and the HTTP API.
"""
import os
from typing import Literal

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for dominant colour extraction."""

    # Clustering defaults
    DEFAULT_K: int = int(os.environ.get("DOMINANT_COLOURS_DEFAULT_K", "6"))
    MAX_K: int = int(os.environ.get("DOMINANT_COLOURS_MAX_K", "32"))
    SEED: int = int(os.environ.get("DOMINANT_COLOURS_SEED", "42"))
    MAX_ITERATIONS: int = int(os.environ.get("DOMINANT_COLOURS_MAX_ITERATIONS", "100"))
    TOLERANCE: float = float(os.environ.get("DOMINANT_COLOURS_TOLERANCE", "1e-4"))
    DEGENERATE_POLICY: Literal["raise", "reduce"] = os.environ.get("DOMINANT_COLOURS_DEGENERATE_POLICY", "reduce")
    WORKERS: int = int(os.environ.get("DOMINANT_COLOURS_WORKERS", "1"))

    # Sampling
    SAMPLE_CAP: int = int(os.environ.get("DOMINANT_COLOURS_SAMPLE_CAP", "20000"))
    SAMPLE_METHOD: Literal["random", "stride"] = os.environ.get("DOMINANT_COLOURS_SAMPLE_METHOD", "random")

    # Image decoding
    RESIZE_EDGE: int = int(os.environ.get("DOMINANT_COLOURS_RESIZE_EDGE", "150"))
    MAX_FILE_MB: int = int(os.environ.get("DOMINANT_COLOURS_MAX_FILE_MB", "10"))

    # Logging
    LOG_LEVEL: str = os.environ.get("DOMINANT_COLOURS_LOG_LEVEL", "INFO")

    # Supported image formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/gif", "image/bmp", "image/webp"]

    @classmethod
    def validate_k(cls, k: int) -> bool:
        """Validate requested cluster count against the configured bound."""
        return 1 <= k <= cls.MAX_K

    @classmethod
    def validate_degenerate_policy(cls, policy: str) -> bool:
        """Validate degenerate-cluster policy name."""
        return policy in ["raise", "reduce"]

    @classmethod
    def validate_sample_method(cls, method: str) -> bool:
        """Validate sampling method name."""
        return method in ["random", "stride"]

    @classmethod
    def validate_tolerance(cls, tolerance: float) -> bool:
        """Validate convergence tolerance."""
        return tolerance >= 0.0


# Global config instance
config = Config()
