"""
Evaluation of one job's test case × vendor matrix.

For every test case (outer loop) and every vendor (inner loop) the runner asks
the vendor's recognizer for a transcript, scores it against the test case's
ground truth and hands exactly one result to the result sink. A failure at one
step only drops that step:

- a test case that cannot be looked up drops all of its pairs
- a vendor that cannot be looked up drops that one pair
- a failed recognition is recorded on the result, with metrics left unset
- a result the sink cannot store is logged and lost

The run only raises when the orchestration itself breaks or when it is
cancelled between pairs.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from logging import getLogger
from typing import Any, Callable, Dict, List, Optional

from asr_eval.datasets.asr_test_case import ASRTestCase
from asr_eval.datasets.case_store import ASRTestCaseStore
from asr_eval.metrics.error_rates import (
    MetricValue,
    calculate_latency,
    compute_cer,
    compute_wer,
)
from asr_eval.recognizers.recognizer_base import RecognizerBase
from asr_eval.recognizers.recognizer_registry import get_recognizer
from asr_eval.recognizers.vendor_config import VendorConfig, VendorStore
from asr_eval.utils.errors import EvaluationCancelled, RecognitionError
from asr_eval.utils.evaluation_result import EvaluationResult, RecognitionOutcome
from asr_eval.utils.progress_manager import ProgressManager
from asr_eval.utils.result_sink import ResultSink

RecognizerResolver = Callable[[VendorConfig], RecognizerBase]


class EvaluationRunner:
    def __init__(
        self,
        test_case_store: ASRTestCaseStore,
        vendor_store: VendorStore,
        result_sink: ResultSink,
        recognizer_resolver: RecognizerResolver = get_recognizer,
        max_workers: int = 1,
        show_progress: bool = False,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.test_case_store = test_case_store
        self.vendor_store = vendor_store
        self.result_sink = result_sink
        self.recognizer_resolver = recognizer_resolver
        self.max_workers = max_workers
        self.show_progress = show_progress
        self._log = getLogger(__name__)

    def run(
        self,
        job_id: int,
        test_case_ids: List[int],
        vendor_ids: List[int],
        parameters: Optional[Dict[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Evaluate every (test case, vendor) pair of a job and store the results.

        Args:
            job_id: Id stamped on every result
            test_case_ids: Test cases to evaluate, in order
            vendor_ids: Vendors to evaluate each test case against, in order
            parameters: Parameter bag passed to every recognizer call
            cancel_event: When set, the run stops before the next pair

        Raises:
            EvaluationCancelled: if ``cancel_event`` was set before the matrix
                was fully attempted
        """
        parameters = parameters or {}
        stats = {"saved": 0, "recognition_errors": 0, "unsaved": 0, "skipped": 0}
        self._log.info(
            f"Starting ASR evaluation for job {job_id}: "
            f"test cases {test_case_ids}, vendors {vendor_ids}"
        )

        executor = (
            ThreadPoolExecutor(max_workers=self.max_workers)
            if self.max_workers > 1
            else None
        )
        try:
            with ProgressManager(enabled=self.show_progress) as progress:
                progress.start_test_case_processing(job_id, len(test_case_ids))
                for test_case_id in test_case_ids:
                    self._check_cancelled(job_id, cancel_event)
                    test_case = self._resolve_test_case(job_id, test_case_id)
                    if test_case is None:
                        stats["skipped"] += len(vendor_ids)
                    else:
                        self._evaluate_test_case(
                            job_id,
                            test_case,
                            vendor_ids,
                            parameters,
                            cancel_event,
                            progress,
                            executor,
                            stats,
                        )
                    progress.advance_test_case()
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        self._log.info(
            f"Completed ASR evaluation for job {job_id}: "
            f"{stats['saved']} results saved "
            f"({stats['recognition_errors']} with recognition errors), "
            f"{stats['unsaved']} lost to persistence errors, "
            f"{stats['skipped']} pairs skipped"
        )

    def _evaluate_test_case(
        self,
        job_id: int,
        test_case: ASRTestCase,
        vendor_ids: List[int],
        parameters: Dict[str, Any],
        cancel_event: Optional[threading.Event],
        progress: ProgressManager,
        executor: Optional[ThreadPoolExecutor],
        stats: Dict[str, int],
    ) -> None:
        """Run the inner loop over vendors for a single test case.

        With an executor the recognizer calls run concurrently, but results are
        still stored in vendor order from this thread.
        """
        self._log.info(f"Processing test case '{test_case.name}' (id {test_case.id})")
        progress.start_vendor_processing(test_case.name, len(vendor_ids))
        pending: List[Future] = []
        cancelled = False
        try:
            for vendor_id in vendor_ids:
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    break
                vendor = self._resolve_vendor(job_id, test_case.id, vendor_id)
                if vendor is None:
                    stats["skipped"] += 1
                    progress.advance_vendor()
                    continue

                if executor is None:
                    result = self._evaluate_pair(job_id, test_case, vendor, parameters)
                    self._store(result, stats)
                    progress.advance_vendor()
                else:
                    pending.append(
                        executor.submit(
                            self._evaluate_pair, job_id, test_case, vendor, parameters
                        )
                    )

            for future in pending:
                self._store(future.result(), stats)
                progress.advance_vendor()
        finally:
            progress.finish_vendor_processing()

        if cancelled:
            self._raise_cancelled(job_id)

    def _evaluate_pair(
        self,
        job_id: int,
        test_case: ASRTestCase,
        vendor: VendorConfig,
        parameters: Dict[str, Any],
    ) -> EvaluationResult:
        self._log.info(
            f"Using vendor '{vendor.name}' (id {vendor.id}) "
            f"for test case '{test_case.name}' (id {test_case.id})"
        )
        outcome = self._recognize(test_case, vendor, parameters)

        cer = wer = None
        if not outcome.succeeded:
            self._log.warning(
                f"Metrics not calculated for test case {test_case.id}, "
                f"vendor {vendor.id}: recognition failed"
            )
        elif not test_case.has_ground_truth:
            self._log.info(
                f"No ground truth for test case {test_case.id}. "
                "CER and WER will not be calculated."
            )
        else:
            reference = test_case.ground_truth_text
            hypothesis = outcome.hypothesis_text
            cer = self._score(
                "CER", compute_cer(reference, hypothesis), test_case, vendor
            )
            wer = self._score(
                "WER", compute_wer(reference, hypothesis), test_case, vendor
            )

        return EvaluationResult(
            job_id=job_id,
            test_case_id=test_case.id,
            vendor_id=vendor.id,
            outcome=outcome,
            cer=cer,
            wer=wer,
            ser=None,
        )

    def _recognize(
        self, test_case: ASRTestCase, vendor: VendorConfig, parameters: Dict[str, Any]
    ) -> RecognitionOutcome:
        try:
            recognizer = self.recognizer_resolver(vendor)
        except Exception as e:
            self._log.error(
                f"No recognizer for vendor '{vendor.name}' (id {vendor.id}): {e}"
            )
            return RecognitionOutcome(error=_describe_error(e))

        start_time = time.perf_counter()
        try:
            response = recognizer.recognize(
                test_case.audio_ref,
                test_case.language_code,
                dict(parameters),
                vendor,
            )
        except Exception as e:
            latency_ms = self._elapsed_ms(start_time)
            self._log.error(
                f"Error during ASR recognition for test case {test_case.id}, "
                f"vendor {vendor.id}: {e}"
            )
            return RecognitionOutcome(
                error=_describe_error(e),
                raw_payload=getattr(e, "raw_payload", None),
                latency_ms=latency_ms,
            )

        latency_ms = self._elapsed_ms(start_time)
        self._log.debug(
            f"Vendor {vendor.id} recognized test case {test_case.id} in {latency_ms} ms"
        )
        return RecognitionOutcome(
            hypothesis_text=response.text,
            raw_payload=response.raw_payload,
            latency_ms=latency_ms,
        )

    def _score(
        self,
        metric_name: str,
        metric: MetricValue,
        test_case: ASRTestCase,
        vendor: VendorConfig,
    ) -> Optional[float]:
        score = metric.as_score()
        if score is None:
            self._log.warning(
                f"{metric_name} for test case {test_case.id}, vendor {vendor.id} "
                f"is degenerate (empty reference, {metric.insertions} inserted "
                "tokens); leaving it unset"
            )
        return score

    def _store(self, result: EvaluationResult, stats: Dict[str, int]) -> None:
        if not result.outcome.succeeded:
            stats["recognition_errors"] += 1
        try:
            self.result_sink.save(result)
        except Exception as e:
            stats["unsaved"] += 1
            self._log.error(
                f"Error saving result for test case {result.test_case_id}, "
                f"vendor {result.vendor_id}, job {result.job_id}: {e}"
            )
            return
        stats["saved"] += 1
        self._log.info(
            f"Saved result for test case {result.test_case_id}, "
            f"vendor {result.vendor_id}, job {result.job_id} "
            f"(CER={result.cer}, WER={result.wer})"
        )

    def _resolve_test_case(
        self, job_id: int, test_case_id: int
    ) -> Optional[ASRTestCase]:
        try:
            return self.test_case_store.get(test_case_id)
        except Exception as e:
            self._log.error(
                f"Error fetching test case {test_case_id}: {e}. "
                f"Skipping this test case for job {job_id}."
            )
            return None

    def _resolve_vendor(
        self, job_id: int, test_case_id: int, vendor_id: int
    ) -> Optional[VendorConfig]:
        try:
            return self.vendor_store.get(vendor_id)
        except Exception as e:
            self._log.error(
                f"Error fetching vendor {vendor_id}: {e}. "
                f"Skipping this vendor for test case {test_case_id}, job {job_id}."
            )
            return None

    def _check_cancelled(
        self, job_id: int, cancel_event: Optional[threading.Event]
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self._raise_cancelled(job_id)

    def _raise_cancelled(self, job_id: int) -> None:
        self._log.warning(f"ASR evaluation for job {job_id} cancelled")
        raise EvaluationCancelled(f"Job {job_id} was cancelled")

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return calculate_latency(int((time.perf_counter() - start_time) * 1000))


def _describe_error(error: Exception) -> str:
    if isinstance(error, RecognitionError):
        return str(error)
    return f"{type(error).__name__}: {error}"
