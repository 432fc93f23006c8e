# tests/conftest.py
import os
import sys
import io
import asyncio
from typing import Optional

from PIL import Image

import pytest
from fastapi.testclient import TestClient

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from product_form.config import settings  # noqa: E402
from product_form.api import deps  # noqa: E402
from product_form.controller import FormController  # noqa: E402
from product_form.main import app  # noqa: E402
from product_form.models.draft import ImageFile  # noqa: E402


class GatedImage(ImageFile):
    """An image whose read() only completes once `gate` is set."""

    def __init__(self, filename: str, data: bytes = b"", content_type: Optional[str] = None,
                 size: Optional[int] = None, gate: Optional[asyncio.Event] = None):
        super().__init__(filename, data, content_type, size)
        self.gate = gate or asyncio.Event()

    async def read(self) -> bytes:
        await self.gate.wait()
        return await super().read()


class RecordingSink:
    """Submit sink that records what it receives; can be gated or made to fail."""

    def __init__(self, fail_with: Optional[Exception] = None, gate: Optional[asyncio.Event] = None):
        self.calls = []
        self.fail_with = fail_with
        self.gate = gate

    async def __call__(self, submission):
        self.calls.append(submission)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return {"ok": True, "submission_id": f"rec_{len(self.calls)}"}


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    """No simulated network delay in tests; everything else keeps its default."""
    monkeypatch.setattr(settings, "SUBMIT_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(settings, "MAX_IMAGE_BYTES", 5_000_000)
    yield settings


@pytest.fixture
def form(monkeypatch):
    """A fresh controller, also installed as the one the API serves."""
    controller = FormController()
    monkeypatch.setattr(deps, "controller", controller)
    return controller


@pytest.fixture
def client(form):
    return TestClient(app)


@pytest.fixture
def valid_values():
    return {
        "name": "Desk Lamp",
        "price": 25.5,
        "category": "home",
        "description": "A modern desk lamp with adjustable brightness.",
    }


@pytest.fixture
def make_sample_jpeg_bytes():
    """
    Return a callable that generates JPEG bytes for tests that need image uploads.
    Usage: jpg = make_sample_jpeg_bytes(size=(200,200))
    """
    def _fn(size=(200, 200), color=(180, 120, 60)):
        bio = io.BytesIO()
        im = Image.new("RGB", size, color)
        im.save(bio, format="JPEG", quality=85)
        bio.seek(0)
        return bio.read()
    return _fn
