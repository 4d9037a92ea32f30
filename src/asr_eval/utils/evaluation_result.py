from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class RecognitionResponse(BaseModel):
    text: str
    raw_payload: Optional[str] = None


class RecognitionOutcome(BaseModel):
    """What happened when a vendor was asked to transcribe one test case.

    An empty ``hypothesis_text`` means the vendor heard no speech. ``None``
    means the call failed before producing any text, in which case ``error``
    holds the failure message.
    """

    hypothesis_text: Optional[str] = None
    raw_payload: Optional[str] = None
    error: Optional[str] = None
    latency_ms: int = 0

    @model_validator(mode="after")
    def _successful_calls_have_text(self) -> "RecognitionOutcome":
        if self.error is None and self.hypothesis_text is None:
            raise ValueError("A successful recognition must carry hypothesis text")
        return self

    @property
    def succeeded(self) -> bool:
        return self.error is None


class EvaluationResult(BaseModel):
    job_id: int
    test_case_id: int
    vendor_id: int
    outcome: RecognitionOutcome
    # None means the metric was not computed and must not be read as 0.0
    cer: Optional[float] = None
    wer: Optional[float] = None
    ser: Optional[float] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_scored(self) -> bool:
        return self.cer is not None or self.wer is not None
