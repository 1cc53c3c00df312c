"""
Swatch Rendering Module

Turns a clustering result into visual palette swatches: an SVG document
with one labelled chip per colour, and a compact PNG strip for API
responses.
"""

import base64
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np
from loguru import logger

from .clustering import ClusterResult

SVG_CHIP_SIZE = 100
SVG_MIN_WIDTH = 600
SVG_HEIGHT = 140


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to BGR tuple for OpenCV."""
    hex_color = hex_color.lstrip('#')
    r, g, b = tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))
    return (b, g, r)  # BGR for OpenCV


def render_svg_swatch(result: ClusterResult) -> str:
    """
    Render the palette as an SVG swatch.

    Each colour gets a 100x100 chip laid out left to right in result
    order, labelled with its RGB triple and percentage underneath.
    """
    width = max(SVG_MIN_WIDTH, SVG_CHIP_SIZE * len(result))
    parts = [
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {SVG_HEIGHT}">'
    ]

    for i, colour in enumerate(result):
        x = i * SVG_CHIP_SIZE
        r, g, b = colour.rgb
        percentage = colour.weight * 100
        parts.append(
            f'\n    <rect x="{x}" y="0" width="{SVG_CHIP_SIZE}" height="{SVG_CHIP_SIZE}" fill="rgb({r}, {g}, {b})"/>'
            f'\n    <text x="{x + 5}" y="115" font-family="Arial" font-size="10" fill="black">{r}, {g}, {b}</text>'
            f'\n    <text x="{x + 5}" y="130" font-family="Arial" font-size="10" fill="black">{percentage:.1f}%</text>'
        )

    parts.append("\n</svg>")
    return "".join(parts)


def save_svg_swatch(result: ClusterResult, output_file: Union[str, Path]) -> Path:
    """Write the SVG swatch to disk and return its path."""
    path = Path(output_file)
    path.write_text(render_svg_swatch(result), encoding="utf-8")
    logger.info(f"Saved colour swatch with {len(result)} colours to {path}")
    return path


def render_swatch_strip(hex_colors: List[str],
                       chip_size: int = 40,
                       highlight_index: Optional[int] = None,
                       border_color: Tuple[int, int, int] = (0, 0, 0),
                       border_width: int = 2) -> str:
    """
    Render a horizontal strip of color swatches.

    Args:
        hex_colors: List of hex color strings
        chip_size: Size of each color chip in pixels
        highlight_index: Index of color to highlight with border
        border_color: BGR color for highlight border
        border_width: Width of highlight border in pixels

    Returns:
        Base64-encoded PNG image string
    """
    validate_swatch_params(hex_colors, chip_size, highlight_index)

    k = len(hex_colors)
    logger.debug(f"Rendering swatch strip with {k} colors, chip_size={chip_size}")

    img = np.zeros((chip_size, chip_size * k, 3), dtype=np.uint8)

    for i, hex_color in enumerate(hex_colors):
        img[:, i * chip_size:(i + 1) * chip_size, :] = hex_to_bgr(hex_color)

    if highlight_index is not None:
        x_start = highlight_index * chip_size
        cv2.rectangle(
            img,
            (x_start, 0),
            (x_start + chip_size - 1, chip_size - 1),
            border_color,
            border_width
        )

    success, buffer = cv2.imencode('.png', img)
    if not success:
        raise RuntimeError("Failed to encode swatch strip as PNG")

    b64_string = base64.b64encode(buffer.tobytes()).decode('ascii')
    logger.debug(f"Encoded swatch strip: {chip_size * k}x{chip_size} -> {len(b64_string)} chars")
    return b64_string


def validate_swatch_params(hex_colors: List[str], chip_size: int, highlight_index: Optional[int]) -> None:
    """Validate swatch rendering parameters."""
    if not hex_colors:
        raise ValueError("hex_colors cannot be empty")

    if chip_size <= 0:
        raise ValueError("chip_size must be positive")

    if highlight_index is not None and (highlight_index < 0 or highlight_index >= len(hex_colors)):
        raise ValueError(f"highlight_index {highlight_index} out of range [0, {len(hex_colors)})")

    for i, hex_color in enumerate(hex_colors):
        if not isinstance(hex_color, str):
            raise ValueError(f"Color at index {i} is not a string: {type(hex_color)}")

        if not hex_color.startswith('#') or len(hex_color) != 7:
            raise ValueError(f"Invalid hex color format at index {i}: {hex_color}")

        try:
            int(hex_color[1:], 16)
        except ValueError:
            raise ValueError(f"Invalid hex color digits at index {i}: {hex_color}")
