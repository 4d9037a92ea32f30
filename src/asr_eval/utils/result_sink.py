"""
Destinations for evaluation results.

A sink stores each result exactly once; results are never updated in place.
Failures surface as :class:`PersistenceError` so the evaluation runner can log
them and move on to the next pair.
"""

import threading
from abc import ABC, abstractmethod
from logging import getLogger
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from asr_eval.utils.errors import PersistenceError
from asr_eval.utils.evaluation_result import EvaluationResult


class ResultSink(ABC):
    @abstractmethod
    def save(self, result: EvaluationResult) -> None:
        pass

    @abstractmethod
    def list_results(self, job_id: Optional[int] = None) -> List[EvaluationResult]:
        pass

    def last_job_id(self) -> int:
        """Highest job id among stored results, 0 if there are none."""
        return max((result.job_id for result in self.list_results()), default=0)


class InMemoryResultSink(ResultSink):
    def __init__(self):
        self._results: List[EvaluationResult] = []

    def save(self, result: EvaluationResult) -> None:
        self._results.append(result)

    def list_results(self, job_id: Optional[int] = None) -> List[EvaluationResult]:
        return [r for r in self._results if job_id is None or r.job_id == job_id]


class JsonlResultSink(ResultSink):
    """Appends one JSON object per result to a file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._log = getLogger(__name__)

    def save(self, result: EvaluationResult) -> None:
        line = result.model_dump_json()
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except OSError as e:
            raise PersistenceError(
                f"Could not write result for test case {result.test_case_id}, "
                f"vendor {result.vendor_id} to {self.path}: {e}"
            ) from e

    def list_results(self, job_id: Optional[int] = None) -> List[EvaluationResult]:
        if not self.path.exists():
            return []
        results = []
        with self.path.open("r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    result = EvaluationResult.model_validate_json(line)
                except ValidationError as e:
                    self._log.warning(
                        f"Skipping malformed line {line_number} in {self.path}: {e}"
                    )
                    continue
                if job_id is None or result.job_id == job_id:
                    results.append(result)
        return results
