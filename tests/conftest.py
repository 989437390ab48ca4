"""Shared pytest fixtures for studio tests."""
import base64
import os
import tempfile
from types import SimpleNamespace
from typing import List, Optional

import pytest

# Keep test logs out of the working tree; must be set before utils.logger is imported
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="studio-test-logs-"))

from common.models import ReferenceImage  # noqa: E402

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-body"


class FakeStudioClient:
    """Stands in for StudioClient; records calls and replays canned results.

    Args:
        description: Text returned by describe_images
        images: Bytes per generated entry (None = entry without bytes).
            When omitted, one entry per requested image is returned.
        describe_error: Exception raised by describe_images
        generate_error: Exception raised by generate_images
    """

    def __init__(
        self,
        description: str = "",
        images: Optional[List[Optional[bytes]]] = None,
        describe_error: Optional[Exception] = None,
        generate_error: Optional[Exception] = None,
    ):
        self.description = description
        self.images = images
        self.describe_error = describe_error
        self.generate_error = generate_error
        self.describe_calls = []
        self.generate_calls = []

    def describe_images(self, images, instruction, system_instruction):
        self.describe_calls.append(
            {"images": list(images), "instruction": instruction, "system_instruction": system_instruction}
        )
        if self.describe_error:
            raise self.describe_error
        return self.description

    def generate_images(self, prompt, number_of_images):
        self.generate_calls.append({"prompt": prompt, "number_of_images": number_of_images})
        if self.generate_error:
            raise self.generate_error
        payloads = self.images
        if payloads is None:
            payloads = [f"image-{i}".encode() for i in range(1, number_of_images + 1)]
        return [
            SimpleNamespace(image=SimpleNamespace(image_bytes=data) if data is not None else None)
            for data in payloads
        ]


@pytest.fixture
def fake_client() -> FakeStudioClient:
    return FakeStudioClient()


@pytest.fixture
def reference_image() -> ReferenceImage:
    return ReferenceImage(mime_type="image/png", data=base64.b64encode(PNG_BYTES).decode("ascii"))


@pytest.fixture
def test_app(fake_client):
    """The FastAPI app wired to a fake client and a fresh session."""
    from app import app
    from image.session import GenerationSession

    saved = (app.state.studio_client, app.state.config_error, app.state.session)
    app.state.studio_client = fake_client
    app.state.config_error = None
    app.state.session = GenerationSession()
    try:
        yield app
    finally:
        app.state.studio_client, app.state.config_error, app.state.session = saved


@pytest.fixture
def test_client(test_app):
    from fastapi.testclient import TestClient

    return TestClient(test_app)


@pytest.fixture
def make_client():
    """Factory for FakeStudioClient with canned results."""
    return FakeStudioClient


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES
