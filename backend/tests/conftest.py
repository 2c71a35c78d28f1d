import base64
import io

import pytest
from PIL import Image

from gallery.limiter import limiter
from gallery.models.schemas import ImageAnalysis
from gallery.services.text_generator import TextGenerator


def make_image_base64(fmt: str = "PNG", size=(16, 16)) -> str:
    """Encode a small solid-color image so python-magic sees real magic bytes."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color="red").save(buffer, format=fmt)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class FakeTextGenerator(TextGenerator):
    """Records every call instead of reaching a provider."""

    def __init__(self, analysis: ImageAnalysis | None = None, text: str | None = "pong"):
        self.analysis = analysis or ImageAnalysis(
            title="Harbor Dusk",
            caption="Boats resting at dusk",
            tags=["boat", "harbor"],
            semantic_description="Fishing boats moored in a harbor at sunset.",
        )
        self.text = text
        self.image_calls: list[str] = []
        self.text_calls: list[str] = []
        self.closed = False

    async def analyze_image(self, image_base64: str) -> ImageAnalysis:
        self.image_calls.append(image_base64)
        return self.analysis

    async def generate_text(self, prompt: str) -> str | None:
        self.text_calls.append(prompt)
        return self.text

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_route_limiter():
    """Per-IP counters are process-wide; start every test from zero."""
    limiter.reset()
    yield


@pytest.fixture
def png_base64():
    return make_image_base64("PNG")


@pytest.fixture
def jpeg_base64():
    return make_image_base64("JPEG")


@pytest.fixture
def fake_generator():
    return FakeTextGenerator()
