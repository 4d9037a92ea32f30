import itertools
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from asr_eval.utils.errors import JobNotFoundError

JOB_TYPE_ASR = "ASR"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_finished(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)


class EvaluationJob(BaseModel):
    id: int
    job_name: Optional[str] = None
    job_type: str = JOB_TYPE_ASR
    status: JobStatus = JobStatus.PENDING
    test_case_ids: List[int] = Field(default_factory=list)
    vendor_ids: List[int] = Field(default_factory=list)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class JobStore:
    """In-memory job records with auto-incrementing ids starting at ``first_id``."""

    def __init__(self, first_id: int = 1):
        if first_id < 1:
            raise ValueError(f"first_id must be at least 1, got {first_id}")
        self._jobs: Dict[int, EvaluationJob] = {}
        self._ids = itertools.count(first_id)
        self._lock = threading.Lock()

    def create(
        self,
        test_case_ids: List[int],
        vendor_ids: List[int],
        job_name: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> EvaluationJob:
        with self._lock:
            job = EvaluationJob(
                id=next(self._ids),
                job_name=job_name,
                test_case_ids=list(test_case_ids),
                vendor_ids=list(vendor_ids),
                parameters=dict(parameters or {}),
            )
            self._jobs[job.id] = job
        return job.model_copy()

    def get(self, job_id: int) -> EvaluationJob:
        try:
            return self._jobs[job_id].model_copy()
        except KeyError:
            raise JobNotFoundError(job_id) from None

    def update_status(
        self, job_id: int, status: JobStatus, error: Optional[str] = None
    ) -> EvaluationJob:
        with self._lock:
            if job_id not in self._jobs:
                raise JobNotFoundError(job_id)
            job = self._jobs[job_id]
            now = _now()
            updates: Dict[str, Any] = {"status": status, "updated_at": now}
            if status == JobStatus.RUNNING:
                updates["started_at"] = now
            if status.is_finished:
                updates["completed_at"] = now
            if error is not None:
                updates["error"] = error
            job = job.model_copy(update=updates)
            self._jobs[job_id] = job
        return job.model_copy()

    def list_jobs(self) -> List[EvaluationJob]:
        return [job.model_copy() for job in self._jobs.values()]
