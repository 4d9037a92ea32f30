from typing import List, Optional

from pydantic import BaseModel, Field


class ASRTestCase(BaseModel):
    id: int
    name: str
    audio_ref: str = Field(
        description="Opaque audio reference handed to the recognizer, e.g. an object storage key"
    )
    language_code: Optional[str] = None
    ground_truth_text: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    @property
    def has_ground_truth(self) -> bool:
        return bool(self.ground_truth_text)
