"""
Detection request helpers: request IDs, timing, memory usage logging,
and the classify → parse → map pipeline.
"""

import logging
import os
import secrets
import time

import psutil

from app.detection.verdict import VerdictParseError, map_verdict, parse_verdict
from app.integrations.vision.client import ImageClassifier
from app.schemas.detection import Verdict

logger = logging.getLogger(__name__)

REQUEST_ID_PREFIX = "vero"


def generate_request_id() -> str:
    return f"{REQUEST_ID_PREFIX}_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


def elapsed_ms(start: float) -> int:
    """Milliseconds since a `time.perf_counter()` reading, never negative."""
    return max(0, int(round((time.perf_counter() - start) * 1000)))


def log_memory(stage: str) -> None:
    """Log current process and system memory usage. Only runs when DEBUG logging is active."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    process = psutil.Process(os.getpid())
    mem_info = process.memory_info()
    sys_mem = psutil.virtual_memory()
    logger.debug(
        f"[MEMORY] {stage} | "
        f"PID: {os.getpid()} | "
        f"Process RSS: {mem_info.rss / 1024 / 1024:.2f} MB | "
        f"System Available: {sys_mem.available / 1024 / 1024:.2f} MB / {sys_mem.total / 1024 / 1024:.2f} MB"
    )


async def analyze_image(classifier: ImageClassifier, image_bytes: bytes, media_type: str) -> Verdict:
    """
    Run one forensic classification.

    Vision API errors propagate unchanged; an answer without a JSON object
    raises VerdictParseError.
    """
    text = await classifier.classify(image_bytes, media_type)

    parsed = parse_verdict(text)
    if parsed is None:
        logger.warning(f"[DETECT] Non-JSON model output ({len(text)} chars)")
        raise VerdictParseError("model returned non-JSON output")

    verdict = map_verdict(parsed)
    logger.info(
        f"[DETECT] classification={parsed.classification!r} "
        f"confidence={parsed.confidence_raw:g} -> {verdict.result}"
    )
    return verdict
