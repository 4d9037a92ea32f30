import threading
from logging import getLogger
from typing import Any, Dict, List, Optional

from asr_eval.evaluation.evaluation_job import EvaluationJob, JobStatus, JobStore
from asr_eval.evaluation.evaluation_runner import EvaluationRunner
from asr_eval.utils.errors import EvaluationCancelled
from asr_eval.utils.evaluation_result import EvaluationResult


class JobService:
    """Creates evaluation jobs and runs them synchronously.

    A job whose matrix was fully attempted is COMPLETED no matter how many of
    its pairs failed. It is FAILED only if the run itself raised, and CANCELLED
    if it was stopped through the cancel event.
    """

    def __init__(self, runner: EvaluationRunner, job_store: Optional[JobStore] = None):
        self.runner = runner
        self.job_store = job_store if job_store is not None else JobStore()
        self._log = getLogger(__name__)

    def create_and_run_asr_job(
        self,
        test_case_ids: List[int],
        vendor_ids: List[int],
        job_name: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> EvaluationJob:
        job = self.job_store.create(test_case_ids, vendor_ids, job_name, parameters)
        self._log.info(
            f"Job {job.id} ({job.job_name or 'unnamed'}) "
            f"created with {job.status.value} status"
        )

        job = self.job_store.update_status(job.id, JobStatus.RUNNING)
        self._log.info(f"Job {job.id} status updated to {job.status.value}")

        try:
            self.runner.run(
                job.id,
                job.test_case_ids,
                job.vendor_ids,
                parameters=job.parameters,
                cancel_event=cancel_event,
            )
        except EvaluationCancelled:
            job = self.job_store.update_status(job.id, JobStatus.CANCELLED)
        except Exception as e:
            self._log.exception(f"ASR evaluation for job {job.id} failed: {e}")
            job = self.job_store.update_status(
                job.id, JobStatus.FAILED, error=f"{type(e).__name__}: {e}"
            )
        else:
            job = self.job_store.update_status(job.id, JobStatus.COMPLETED)

        self._log.info(f"Job {job.id} finished with status {job.status.value}")
        return job

    def get_job(self, job_id: int) -> EvaluationJob:
        return self.job_store.get(job_id)

    def list_results(self, job_id: int) -> List[EvaluationResult]:
        # Raises JobNotFoundError for unknown jobs
        self.job_store.get(job_id)
        return self.runner.result_sink.list_results(job_id)
