import threading
from unittest.mock import Mock

import pytest

from asr_eval.datasets.asr_test_case import ASRTestCase
from asr_eval.datasets.case_store import ASRTestCaseStore
from asr_eval.evaluation.evaluation_job import JobStatus, JobStore
from asr_eval.evaluation.evaluation_runner import EvaluationRunner
from asr_eval.evaluation.job_service import JobService
from asr_eval.recognizers.vendor_config import VendorConfig, VendorStore
from asr_eval.utils.errors import EvaluationCancelled, JobNotFoundError
from asr_eval.utils.result_sink import InMemoryResultSink


@pytest.fixture
def service():
    test_cases = ASRTestCaseStore(
        [
            ASRTestCase(id=1, name="a", audio_ref="a.wav", ground_truth_text="hello world"),
            ASRTestCase(id=2, name="b", audio_ref="b.wav", ground_truth_text="good morning"),
        ]
    )
    vendors = VendorStore(
        [
            VendorConfig(
                id=1,
                name="MockASR",
                vendor_type="mock",
                other_configs={"transcripts": {"a.wav": "hello world"}},
            ),
            VendorConfig(id=2, name="MockASR-Error", vendor_type="mock"),
        ]
    )
    runner = EvaluationRunner(test_cases, vendors, InMemoryResultSink())
    return JobService(runner)


def test_job_with_failing_pairs_is_completed(service):
    job = service.create_and_run_asr_job([1, 2, 3], [1, 2], job_name="nightly")

    assert job.status == JobStatus.COMPLETED
    assert job.job_name == "nightly"
    assert job.job_type == "ASR"
    assert job.error is None
    assert job.started_at is not None
    assert job.completed_at >= job.started_at

    results = service.list_results(job.id)
    assert len(results) == 4
    assert sum(1 for r in results if r.outcome.error) == 2


def test_jobs_get_distinct_ids_and_results(service):
    first = service.create_and_run_asr_job([1], [1])
    second = service.create_and_run_asr_job([2], [1, 2])

    assert first.id != second.id
    assert len(service.list_results(first.id)) == 1
    assert len(service.list_results(second.id)) == 2
    assert service.get_job(second.id).status == JobStatus.COMPLETED


def test_job_parameters_reach_the_runner():
    runner = Mock()
    service = JobService(runner)

    job = service.create_and_run_asr_job([1], [2], parameters={"model": "latest_long"})

    runner.run.assert_called_once()
    args, kwargs = runner.run.call_args
    assert args == (job.id, [1], [2])
    assert kwargs["parameters"] == {"model": "latest_long"}


def test_orchestration_exception_fails_the_job():
    runner = Mock()
    runner.run.side_effect = RuntimeError("store connection lost")
    service = JobService(runner)

    job = service.create_and_run_asr_job([1], [1])

    assert job.status == JobStatus.FAILED
    assert job.error == "RuntimeError: store connection lost"
    assert job.completed_at is not None


def test_cancelled_run_is_marked_cancelled(service):
    cancel_event = threading.Event()
    cancel_event.set()

    job = service.create_and_run_asr_job([1, 2], [1, 2], cancel_event=cancel_event)

    assert job.status == JobStatus.CANCELLED
    assert service.list_results(job.id) == []


def test_runner_cancellation_is_not_a_failure():
    runner = Mock()
    runner.run.side_effect = EvaluationCancelled("stop")

    job = JobService(runner).create_and_run_asr_job([1], [1])

    assert job.status == JobStatus.CANCELLED
    assert job.error is None


def test_unknown_job_raises_lookup_error(service):
    with pytest.raises(JobNotFoundError):
        service.get_job(404)
    with pytest.raises(LookupError):
        service.list_results(404)


def test_job_store_tracks_lifecycle():
    store = JobStore()
    job = store.create([1, 2], [3], job_name="manual")
    assert job.status == JobStatus.PENDING
    assert job.started_at is None

    running = store.update_status(job.id, JobStatus.RUNNING)
    assert running.started_at is not None
    assert running.completed_at is None

    done = store.update_status(job.id, JobStatus.COMPLETED)
    assert done.completed_at is not None
    assert done.started_at == running.started_at
    assert [j.status for j in store.list_jobs()] == [JobStatus.COMPLETED]


def test_job_store_starts_at_first_id():
    store = JobStore(first_id=8)

    assert [store.create([1], [1]).id for _ in range(2)] == [8, 9]
    with pytest.raises(ValueError):
        JobStore(first_id=0)
