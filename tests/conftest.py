"""
Test configuration and fixtures for dominant colour extraction tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from dominant_colours.main import app
from dominant_colours.services.observability import get_metrics_collector


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    get_metrics_collector().reset()


def make_banded_image(width: int = 100, height: int = 100) -> Image.Image:
    """50% red, 30% green, 20% blue horizontal bands."""
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    red_rows = height * 50 // 100
    green_rows = height * 80 // 100
    arr[:red_rows] = (255, 0, 0)
    arr[red_rows:green_rows] = (0, 255, 0)
    arr[green_rows:] = (0, 0, 255)
    return Image.fromarray(arr)


def image_bytes(image: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def banded_image():
    """Test image with known colour proportions."""
    return make_banded_image()


@pytest.fixture
def banded_png(banded_image):
    """PNG bytes of the banded test image."""
    return image_bytes(banded_image)


@pytest.fixture
def solid_png():
    """PNG bytes of a single-colour image."""
    return image_bytes(Image.new("RGB", (40, 40), (12, 34, 56)))


@pytest.fixture
def banded_path(tmp_path, banded_image):
    """Banded test image saved to disk."""
    path = tmp_path / "test_image.png"
    banded_image.save(path)
    return path
