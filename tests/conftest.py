"""
Test configuration and fixtures for the wardrobe color services.
"""
import io
import struct
import zlib

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import app
from wardrobe.utils.metrics import reset_metrics as _reset_metrics


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    _reset_metrics()


def solid_rgba(height, width, rgb, alpha=255):
    """(H, W, 4) uint8 image filled with one color."""
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :, :3] = rgb
    img[:, :, 3] = alpha
    return img


def encode_png(rgba):
    """Encode an RGBA array as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(rgba).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def garment_on_white():
    """40x40 white photo with a 20x20 navy garment and a smaller red patch."""
    img = solid_rgba(40, 40, (255, 255, 255))
    img[10:30, 10:30, :3] = (20, 40, 120)
    img[12:16, 12:16, :3] = (230, 10, 10)
    return img


def oversized_png_header(width=30000, height=30000):
    """PNG signature and IHDR chunk only, declaring a huge canvas."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    chunk = b"IHDR" + ihdr
    return b"\x89PNG\r\n\x1a\n" + struct.pack(">I", len(ihdr)) + chunk + struct.pack(">I", zlib.crc32(chunk))
