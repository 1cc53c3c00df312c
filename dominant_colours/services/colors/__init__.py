"""
Colour sampling, clustering and rendering.

Provides the working-set reducer, the k-means clustering engine and the
text, JSON and swatch renderings of its results.
"""

from .clustering import ClusterResult, DegeneratePolicy, DominantColor, cluster
from .errors import (
    ColorExtractionError,
    DegenerateClusteringError,
    InvalidInputError,
    InvalidKError,
)
from .sampling import reduce

__all__ = [
    'ClusterResult',
    'DegeneratePolicy',
    'DominantColor',
    'cluster',
    'reduce',
    'ColorExtractionError',
    'DegenerateClusteringError',
    'InvalidInputError',
    'InvalidKError',
]
