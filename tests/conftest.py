"""Global test configuration and fixtures."""

import base64
import io

import pytest
from PIL import Image


def make_image_base64(size=(64, 32), mode="RGB", fmt="PNG", color="red") -> str:
    """Create a bare base64 encoded test image."""
    if mode == "RGBA" and isinstance(color, str):
        color = (255, 0, 0, 128)
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def decode_image(data: str) -> Image.Image:
    """Decode bare base64 into a PIL image."""
    image = Image.open(io.BytesIO(base64.b64decode(data)))
    image.load()
    return image


@pytest.fixture
def png_base64():
    """Small PNG image as bare base64."""
    return make_image_base64(fmt="PNG")


@pytest.fixture
def jpeg_data_url():
    """Small JPEG image as a data URL."""
    return "data:image/jpeg;base64," + make_image_base64(fmt="JPEG")


@pytest.fixture
def large_png_base64():
    """PNG larger than the compression limit on both sides."""
    return make_image_base64(size=(1024, 512), fmt="PNG")


@pytest.fixture
def make_image():
    """Factory for bare base64 test images."""
    return make_image_base64


@pytest.fixture
def load_image():
    """Decoder for bare base64 images produced by the compressor."""
    return decode_image
