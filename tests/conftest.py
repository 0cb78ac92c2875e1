"""
Shared pytest fixtures for all test modules.

IMPORTANT: environment overrides must be set before the app is imported so
the shared `settings` instance sees them.
"""

import io
import json
import os

os.environ["TESTING"] = "true"
# The lifespan builds a real SDK client; a non-empty stub key keeps it from
# treating the service as unconfigured. Real API calls never happen in tests —
# every route test injects a FakeClassifier.
os.environ["OPENAI_API_KEY"] = "stub-key-for-tests"
os.environ["APP_ENV"] = "production"
os.environ.pop("DEBUG", None)

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from tests.mocks.classifier_mock import FakeClassifier

# App import happens AFTER the environment is prepared above.
from app.main import app  # noqa: E402
from app.config import settings  # noqa: E402
from app.core.dependencies import get_classifier, get_settings  # noqa: E402


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_classifier():
    """Classifier answering with a confident AI-generated verdict."""
    return FakeClassifier(text=json.dumps(AI_ANSWER))


@pytest.fixture
def test_settings():
    """Per-test copy of the shared settings; mutate freely."""
    return settings.model_copy()


@pytest.fixture
def client(fake_classifier, test_settings):
    """
    FastAPI TestClient with the classifier and settings dependencies overridden.

    Reassign `fake_classifier.text` / `.error` or `test_settings.debug` inside a
    test to change behaviour; the overrides read them at request time.
    """
    app.dependency_overrides[get_classifier] = lambda: fake_classifier
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg() -> bytes:
    """Create a minimal 10×10 JPEG in memory — fast and valid."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(128, 128, 128)).save(buf, format="JPEG")
    return buf.getvalue()


def make_tiny_png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4)).save(buf, format="PNG")
    return buf.getvalue()


AI_ANSWER = {
    "classification": "AI Generated",
    "confidence_raw": 85,
    "reason": "visible artifacts",
}
