from pydantic import BaseModel, Field
from typing import Optional


class ParsedVerdict(BaseModel):
    """Model answer decoded from the vision API's free-form text."""
    classification: str = Field(description="AI Generated | Manipulated | Real Photograph")
    confidence_raw: float = Field(description="Coerced confidence on a 0-100 scale")
    reason: Optional[str] = Field(default=None, description="One-sentence explanation")


class Verdict(BaseModel):
    result: str        # one of the four verdict labels
    confidence: float  # 0-100
    why: str           # user-facing explanation


class DebugInfo(BaseModel):
    message: str
    status: int


class DetectionResponse(BaseModel):
    result: str
    confidence: float
    why: str
    request_id: str
    processing_ms: int
    debug: Optional[DebugInfo] = None
