"""
FastAPI dependencies shared by the route modules.

The vision classifier is built once in the lifespan and stored on
`app.state`; routes receive it through `get_classifier` so tests can swap in
a fake via `app.dependency_overrides`.
"""

from typing import Optional

from fastapi import Request

from app.config import Settings, settings
from app.integrations.vision.client import ImageClassifier


def get_settings() -> Settings:
    return settings


def get_classifier(request: Request) -> Optional[ImageClassifier]:
    return getattr(request.app.state, "classifier", None)
