"""
Exception hierarchy for ASR vendor evaluation.

Metric computation reports degenerate input through a status rather than by
raising; the orchestration layer catches lookup, recognition and persistence
errors at the pair level and keeps going.
"""

from typing import List, Optional


class ASREvalError(Exception):
    """Base class for all errors raised by this package."""


class DegenerateInputError(ASREvalError):
    """A metric was requested for a zero-length reference and a non-empty hypothesis."""


class EntityNotFoundError(ASREvalError, LookupError):
    entity: str = "entity"

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class TestCaseNotFoundError(EntityNotFoundError):
    __test__ = False
    entity = "ASR test case"


class VendorNotFoundError(EntityNotFoundError):
    entity = "Vendor config"


class JobNotFoundError(EntityNotFoundError):
    entity = "Evaluation job"


class RecognitionError(ASREvalError):
    """A recognizer failed to produce a transcript."""

    def __init__(self, message: str, raw_payload: Optional[str] = None):
        super().__init__(message)
        self.raw_payload = raw_payload


class RecognizerNotFoundError(RecognitionError):
    def __init__(self, vendor_type: str, available: List[str]):
        super().__init__(
            f"No recognizer registered for vendor type '{vendor_type}'. "
            f"Available types: {sorted(available)}"
        )
        self.vendor_type = vendor_type


class PersistenceError(ASREvalError):
    """A result could not be written to its sink."""


class EvaluationCancelled(ASREvalError):
    """The evaluation run was cancelled between pairs."""
