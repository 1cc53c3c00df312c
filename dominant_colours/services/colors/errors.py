"""
Colour Extraction Errors
Exception taxonomy shared by the sampling, clustering and decoding stages.
"""


class ColorExtractionError(Exception):
    """Base class for colour extraction failures."""
    pass


class InvalidInputError(ColorExtractionError, ValueError):
    """Empty or malformed sample source, or an unusable sampling parameter."""
    pass


class InvalidKError(ColorExtractionError, ValueError):
    """Requested cluster count is incompatible with the sample count."""

    def __init__(self, k: int, n_samples: int):
        self.k = k
        self.n_samples = n_samples
        super().__init__(f"Invalid cluster count k={k} for {n_samples} samples (need 1 <= k <= {n_samples})")


class DegenerateClusteringError(ColorExtractionError, RuntimeError):
    """Clusters stayed empty after the empty-cluster recovery budget was spent."""

    def __init__(self, message: str, empty_clusters: int = 0, iteration: int = 0):
        self.empty_clusters = empty_clusters
        self.iteration = iteration
        super().__init__(message)
