"""
OpenAI vision client — forensic image classification.

`build_classifier` is called once from the FastAPI lifespan and picks one of
two call shapes:

  - ResponsesClassifier        → client.responses.create(...)
  - ChatCompletionsClassifier  → client.chat.completions.create(...)

Both send the same prompt and image and return the model's raw answer text.
Exactly one API call is made per classification; SDK retries are disabled.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from openai import AsyncOpenAI

from app.config import Settings
from app.integrations.vision.prompts import get_classification_prompt

logger = logging.getLogger(__name__)

API_STYLE_RESPONSES = "responses"
API_STYLE_CHAT = "chat"
API_STYLE_AUTO = "auto"

_TEXT_BLOCK_TYPES = ("output_text", "text")


class InferenceError(Exception):
    """The vision API answered, but without usable text."""

    def __init__(self, message: str, status: int = 502):
        super().__init__(message)
        self.status = status


def to_data_url(image_bytes: bytes, media_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def _field(obj: Any, name: str) -> Any:
    # SDK models and raw dicts are both accepted.
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _join_text_blocks(content: Any) -> str:
    if isinstance(content, str):
        return content
    if not isinstance(content, (list, tuple)):
        return ""

    texts = []
    for block in content:
        if isinstance(block, str):
            texts.append(block)
            continue
        if _field(block, "type") in _TEXT_BLOCK_TYPES:
            text = _field(block, "text")
            if isinstance(text, str):
                texts.append(text)
    return "".join(texts)


def extract_output_text(response: Any) -> str:
    """
    Pull the answer text out of a vision API response.

    Handles the flat `output_text` string, nested `output[].content[]` blocks
    and chat-style `choices[0].message.content` (string or block list).
    Raises InferenceError when none of them carries text.
    """
    flat = _field(response, "output_text")
    if isinstance(flat, str) and flat.strip():
        return flat.strip()

    nested = "".join(_join_text_blocks(_field(item, "content")) for item in _field(response, "output") or [])
    if nested.strip():
        return nested.strip()

    choices = _field(response, "choices") or []
    if choices:
        message = _field(choices[0], "message")
        text = _join_text_blocks(_field(message, "content"))
        if text.strip():
            return text.strip()

    raise InferenceError("no text output")


class ImageClassifier(ABC):
    """One forensic classification call per image."""

    api_style: str = ""

    def __init__(self, client: Any, model: str, image_detail: str = "auto"):
        self.client = client
        self.model = model
        self.image_detail = image_detail

    @abstractmethod
    async def _create(self, data_url: str) -> Any:
        ...

    async def classify(self, image_bytes: bytes, media_type: str) -> str:
        data_url = to_data_url(image_bytes, media_type)
        logger.info(
            f"[VISION] {self.api_style} call | model={self.model} | "
            f"{media_type} | {len(image_bytes) / 1024:.1f} KB"
        )
        response = await self._create(data_url)
        return extract_output_text(response)


class ResponsesClassifier(ImageClassifier):
    api_style = API_STYLE_RESPONSES

    async def _create(self, data_url: str) -> Any:
        return await self.client.responses.create(
            model=self.model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": get_classification_prompt()},
                        {"type": "input_image", "image_url": data_url, "detail": self.image_detail},
                    ],
                }
            ],
        )


class ChatCompletionsClassifier(ImageClassifier):
    api_style = API_STYLE_CHAT

    async def _create(self, data_url: str) -> Any:
        return await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": get_classification_prompt()},
                        {"type": "image_url", "image_url": {"url": data_url, "detail": self.image_detail}},
                    ],
                }
            ],
        )


def build_classifier(settings: Settings, client: Any = None) -> Optional[ImageClassifier]:
    """Create the classifier for this process, or None when no API key is configured."""
    if not settings.has_api_key:
        logger.warning("[STARTUP] OPENAI_API_KEY is missing; /detect will answer 500")
        return None

    if client is None:
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout_sec,
            max_retries=0,
        )

    style = settings.openai_api_style.strip().lower()
    if style == API_STYLE_AUTO:
        style = API_STYLE_RESPONSES if hasattr(client, "responses") else API_STYLE_CHAT

    if style == API_STYLE_RESPONSES:
        classifier_cls = ResponsesClassifier
    elif style == API_STYLE_CHAT:
        classifier_cls = ChatCompletionsClassifier
    else:
        raise ValueError(f"Unknown OPENAI_API_STYLE: {settings.openai_api_style!r}")

    logger.info(f"[STARTUP] Vision classifier ready ({classifier_cls.api_style}, model={settings.openai_model})")
    return classifier_cls(client, settings.openai_model, settings.openai_image_detail)
