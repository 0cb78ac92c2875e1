"""
Detection route: /detect

Accepts multipart/form-data with a single 'image' file field, classifies it
with the vision API and replies with a verdict envelope. Every reply (200,
400, 413 or 500) carries request_id and processing_ms.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings
from app.core.dependencies import get_classifier, get_settings
from app.core.file_validator import sanitize_log_message, validate_upload
from app.detection.verdict import RESULT_INCONCLUSIVE
from app.integrations.vision.client import ImageClassifier
from app.schemas.detection import DebugInfo, DetectionResponse, Verdict
from app.services.detection_service import analyze_image, elapsed_ms, generate_request_id, log_memory

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Detection"])

INTERNAL_ERROR_MESSAGE = "Internal error during analysis"
MISSING_KEY_MESSAGE = "Detection service is not configured"


class MissingCredentialError(Exception):
    pass


def _error_status(exc: Exception) -> int:
    for attr in ("status_code", "status"):
        status = getattr(exc, attr, None)
        if isinstance(status, int):
            return status
    return 500


def _reply(
    status_code: int,
    request_id: str,
    start: float,
    verdict: Optional[Verdict] = None,
    why: str = "",
    debug: Optional[DebugInfo] = None,
) -> JSONResponse:
    if verdict is None:
        verdict = Verdict(result=RESULT_INCONCLUSIVE, confidence=0, why=why)
    body = DetectionResponse(
        result=verdict.result,
        confidence=verdict.confidence,
        why=verdict.why,
        request_id=request_id,
        processing_ms=elapsed_ms(start),
        debug=debug,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post("/detect", response_model=DetectionResponse, response_model_exclude_none=True)
async def detect(
    request: Request,
    classifier: Optional[ImageClassifier] = Depends(get_classifier),
    config: Settings = Depends(get_settings),
):
    """
    Classify an uploaded image as AI generated, manipulated or real.
    """
    start = time.perf_counter()
    request_id = generate_request_id()
    form = None

    try:
        form = await request.form()
        upload = form.get("image")
        if not isinstance(upload, UploadFile):
            upload = None

        max_bytes = config.max_image_upload_bytes
        content_type = upload.content_type if upload is not None else None
        declared_size = (upload.size or 0) if upload is not None else 0

        # Starlette records the spooled size; oversized uploads are rejected unread.
        media_type = validate_upload(upload, content_type, declared_size, max_bytes)
        content = await upload.read()
        validate_upload(upload, content_type, len(content), max_bytes)

        if classifier is None:
            raise MissingCredentialError("OPENAI_API_KEY is missing")

        log_memory(f"Pre-Detect: {request_id}")
        verdict = await analyze_image(classifier, content, media_type)
        log_memory(f"Post-Detect: {request_id}")

        logger.info(f"[DETECT] {request_id} -> {verdict.result} ({verdict.confidence:g}) in {elapsed_ms(start)}ms")
        return _reply(200, request_id, start, verdict=verdict)

    except StarletteHTTPException as e:
        logger.info(f"[DETECT] {request_id} rejected ({e.status_code}): {e.detail}")
        return _reply(e.status_code, request_id, start, why=str(e.detail))

    except MissingCredentialError as e:
        logger.error(f"[DETECT] {request_id} {e}")
        debug = DebugInfo(message=str(e), status=500) if config.is_debug else None
        return _reply(500, request_id, start, why=MISSING_KEY_MESSAGE, debug=debug)

    except Exception as e:
        logger.error(sanitize_log_message(f"[DETECT] {request_id} failed: {type(e).__name__}: {e}"))
        debug = DebugInfo(message=str(e), status=_error_status(e)) if config.is_debug else None
        return _reply(500, request_id, start, why=INTERNAL_ERROR_MESSAGE, debug=debug)

    finally:
        if form is not None:
            await form.close()
