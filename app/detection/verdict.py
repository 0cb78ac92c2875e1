"""
Verdict parsing and mapping.

The vision model is asked for JSON but answers in free text, so decoding is
two-stage: strict parse of the whole answer, then a greedy `{...}` scan.
`map_verdict` turns the decoded answer into one of four fixed labels and
never raises.
"""

import json
import logging
import math
import re
from typing import Any, Optional

from app.schemas.detection import ParsedVerdict, Verdict

logger = logging.getLogger(__name__)

CONFIDENCE_THRESHOLD = 70

RESULT_AI = "AI-generated detected"
RESULT_MANIPULATED = "manipulation detected"
RESULT_REAL = "verified as real"
RESULT_INCONCLUSIVE = "inconclusive"

LOW_CONFIDENCE_REASON = "Confidence too low to reach a reliable verdict."
FALLBACK_REASON = "No explanation provided by the analysis."
MAX_REASON_LENGTH = 200

_CLASSIFICATION_RESULTS = {
    "ai generated": RESULT_AI,
    "manipulated": RESULT_MANIPULATED,
    "real photograph": RESULT_REAL,
}

# Leftmost '{' to last '}'; greedy, not brace-balanced.
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class VerdictParseError(Exception):
    """Model answer could not be decoded into a JSON object."""


def _loads_object(text: str) -> Optional[dict]:
    try:
        value = json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def parse_json_object(text: str) -> Optional[dict]:
    """Decode the first JSON object in `text`, or return None."""
    if not isinstance(text, str):
        return None

    obj = _loads_object(text)
    if obj is not None:
        return obj

    match = _JSON_OBJECT_RE.search(text)
    if not match:
        return None
    return _loads_object(match.group(0))


def coerce_confidence(value: Any) -> float:
    """Numbers (or numeric strings) within 0-100 pass through; everything else is 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0 or number > 100:
        return 0.0
    return number


def parse_verdict(text: str) -> Optional[ParsedVerdict]:
    payload = parse_json_object(text)
    if payload is None:
        return None

    classification = payload.get("classification")
    reason = payload.get("reason")
    return ParsedVerdict(
        classification=classification if isinstance(classification, str) else "",
        confidence_raw=coerce_confidence(payload.get("confidence_raw")),
        reason=None if reason is None else str(reason),
    )


def map_verdict(parsed: ParsedVerdict) -> Verdict:
    confidence = coerce_confidence(parsed.confidence_raw)

    if confidence < CONFIDENCE_THRESHOLD:
        return Verdict(result=RESULT_INCONCLUSIVE, confidence=confidence, why=LOW_CONFIDENCE_REASON)

    label = (parsed.classification or "").strip().lower()
    result = _CLASSIFICATION_RESULTS.get(label, RESULT_INCONCLUSIVE)
    if result == RESULT_INCONCLUSIVE:
        logger.warning(f"[VERDICT] Unrecognized classification: {parsed.classification!r}")

    reason = (parsed.reason or "").strip()
    why = reason[:MAX_REASON_LENGTH] if reason else FALLBACK_REASON
    return Verdict(result=result, confidence=confidence, why=why)
