"""
Character and word error rates.

Both metrics run the same unit-cost Levenshtein alignment (computed by jiwer)
and differ only in how the two strings are tokenized:

- CER aligns Unicode code points, whitespace included.
- WER aligns words, splitting on runs of any whitespace.

The error rate is the edit distance divided by the number of reference
tokens. It is not clamped, so insertions can push it above 1.0. A reference
with zero tokens cannot be normalized: an empty hypothesis against it scores
0.0, anything else is reported as DEGENERATE.
"""

from enum import Enum
from typing import List, Optional

import jiwer
from pydantic import BaseModel, ConfigDict

from asr_eval.utils.errors import DegenerateInputError

DEGENERATE_PLACEHOLDER = 1.0

_CHARS = jiwer.ReduceToListOfListOfChars()
_WORDS = jiwer.ReduceToListOfListOfWords(word_delimiter=" ")


class MetricStatus(str, Enum):
    OK = "OK"
    DEGENERATE = "DEGENERATE"


class MetricValue(BaseModel):
    """An error rate together with the alignment counts it was derived from.

    When ``status`` is DEGENERATE, ``value`` is informational only and must not
    be stored as a score. Use :meth:`as_score` to get ``None`` instead.
    """

    model_config = ConfigDict(frozen=True)

    value: float
    status: MetricStatus
    reference_length: int
    hits: int = 0
    substitutions: int = 0
    deletions: int = 0
    insertions: int = 0

    @property
    def is_ok(self) -> bool:
        return self.status == MetricStatus.OK

    @property
    def distance(self) -> int:
        return self.substitutions + self.deletions + self.insertions

    def as_score(self) -> Optional[float]:
        return self.value if self.is_ok else None

    def require_score(self) -> float:
        if not self.is_ok:
            raise DegenerateInputError(
                "Reference is empty, cannot normalize "
                f"{self.insertions} inserted token(s)"
            )
        return self.value


def tokenize_characters(text: str) -> List[str]:
    return list(text)


def tokenize_words(text: str) -> List[str]:
    return text.split()


def _error_rate(
    reference_tokens: List[str], hypothesis_tokens: List[str], transform, separator: str
) -> MetricValue:
    if not reference_tokens:
        if not hypothesis_tokens:
            return MetricValue(value=0.0, status=MetricStatus.OK, reference_length=0)
        return MetricValue(
            value=DEGENERATE_PLACEHOLDER,
            status=MetricStatus.DEGENERATE,
            reference_length=0,
            insertions=len(hypothesis_tokens),
        )

    # jiwer only accepts strings, so tokens are re-joined with a separator the
    # transform splits on again. For characters the separator is empty.
    output = jiwer.process_words(
        separator.join(reference_tokens),
        separator.join(hypothesis_tokens),
        reference_transform=transform,
        hypothesis_transform=transform,
    )
    distance = output.substitutions + output.deletions + output.insertions
    return MetricValue(
        value=distance / len(reference_tokens),
        status=MetricStatus.OK,
        reference_length=len(reference_tokens),
        hits=output.hits,
        substitutions=output.substitutions,
        deletions=output.deletions,
        insertions=output.insertions,
    )


def compute_cer(reference: str, hypothesis: str) -> MetricValue:
    """Character error rate of ``hypothesis`` against ``reference``."""
    return _error_rate(
        tokenize_characters(reference), tokenize_characters(hypothesis), _CHARS, ""
    )


def compute_wer(reference: str, hypothesis: str) -> MetricValue:
    """Word error rate of ``hypothesis`` against ``reference``."""
    return _error_rate(
        tokenize_words(reference), tokenize_words(hypothesis), _WORDS, " "
    )


def calculate_latency(duration_ms: int) -> int:
    return duration_ms
