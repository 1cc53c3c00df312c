"""
Dominant Colours

Extracts the dominant colours of an image with seeded k-means clustering
and reports each colour's share of the image.
"""

__version__ = "1.0.0"
