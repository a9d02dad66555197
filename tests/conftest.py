import asyncio
import base64
from io import BytesIO

import pytest
from google.genai import types
from PIL import Image

from character_generator.state import InlineImage


class FakeGeminiClient:
    """Stands in for `GeminiClient`; records calls and can be held mid-request."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.gate = None

    async def generate_content(self, image, prompt):
        self.calls.append((image, prompt))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


def make_response(*parts):
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(content=types.Content(role="model", parts=list(parts)))
        ]
    )


def image_part(data: bytes, mime_type="image/png"):
    return types.Part(inline_data=types.Blob(data=data, mime_type=mime_type))


def text_part(text: str):
    return types.Part(text=text)


@pytest.fixture
def png_bytes():
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_image():
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color=(10, 120, 10)).save(buffer, format="JPEG")
    return InlineImage(
        data=base64.b64encode(buffer.getvalue()).decode("ascii"),
        mime_type="image/jpeg",
    )


@pytest.fixture
def fake_client():
    return FakeGeminiClient(response=make_response(image_part(b"generated")))


def run(coro):
    return asyncio.run(coro)
