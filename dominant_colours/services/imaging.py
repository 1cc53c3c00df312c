"""
Dominant Colours Imaging Utilities
Decodes image files into RGB pixel arrays for the sampling stage.
"""
import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from dominant_colours.config import config
from dominant_colours.services.colors.errors import InvalidInputError


class ImageDecodeError(InvalidInputError):
    """The image could not be read or decoded."""
    pass


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Validate file magic bytes to ensure it's actually an image.

    Args:
        file_bytes: Raw file bytes

    Returns:
        Detected MIME type

    Raises:
        ImageDecodeError: For truncated or unsupported files
    """
    if len(file_bytes) < 12:
        raise ImageDecodeError("File too small or corrupt")

    if file_bytes.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    elif file_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
        return "image/png"
    elif file_bytes.startswith((b'GIF87a', b'GIF89a')):
        return "image/gif"
    elif file_bytes.startswith(b'BM'):
        return "image/bmp"
    elif file_bytes[:4] == b'RIFF' and file_bytes[8:12] == b'WEBP':
        return "image/webp"
    else:
        raise ImageDecodeError("Invalid image file. Magic bytes don't match supported formats.")


def _to_rgb(pil_image: Image.Image) -> Image.Image:
    # Multi-frame formats contribute their first frame only
    if getattr(pil_image, "n_frames", 1) > 1:
        pil_image.seek(0)
    if pil_image.mode != 'RGB':
        pil_image = pil_image.convert('RGB')
    return pil_image


def decode_image_bytes(file_bytes: bytes) -> Image.Image:
    """
    Decode raw image bytes to an RGB PIL image.

    Raises:
        ImageDecodeError: If the bytes are not a supported, decodable image
    """
    if config.MAX_FILE_MB and len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise ImageDecodeError(f"File too large. Maximum size: {config.MAX_FILE_MB}MB")

    validate_magic_bytes(file_bytes)

    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        pil_image.load()
        return _to_rgb(pil_image)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to decode image: {str(e)}") from e


def load_image(path: Union[str, Path]) -> Image.Image:
    """
    Open an image file from disk as RGB.

    Raises:
        ImageDecodeError: If the file is missing or cannot be decoded
    """
    path = Path(path)
    try:
        with Image.open(path) as pil_image:
            pil_image.load()
            return _to_rgb(pil_image).copy()
    except FileNotFoundError as e:
        raise ImageDecodeError(f"Image file not found: {path}") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to open image file {path}: {str(e)}") from e


def downscale(pil_image: Image.Image, max_edge: int = None) -> Image.Image:
    """
    Shrink the image to fit in a max_edge square, keeping the aspect ratio.

    Images already within bounds are returned unchanged.
    """
    if max_edge is None:
        max_edge = config.RESIZE_EDGE

    if max_edge <= 0 or max(pil_image.size) <= max_edge:
        return pil_image

    resized = pil_image.copy()
    resized.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)
    return resized


def image_to_pixels(pil_image: Image.Image) -> np.ndarray:
    """Flatten an RGB image into an (N, 3) uint8 pixel array."""
    rgb_array = np.asarray(pil_image.convert('RGB'), dtype=np.uint8)
    return rgb_array.reshape(-1, 3)
