from app.schemas.detection import DebugInfo, DetectionResponse, ParsedVerdict, Verdict

__all__ = [
    "DebugInfo",
    "DetectionResponse",
    "ParsedVerdict",
    "Verdict",
]
