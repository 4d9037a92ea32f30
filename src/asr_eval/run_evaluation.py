import logging
from typing import List, Tuple

import hydra
from omegaconf import DictConfig, OmegaConf

from asr_eval.config.evaluation_config import EvaluationConfig
from asr_eval.datasets.case_store import ASRTestCaseStore
from asr_eval.evaluation.evaluation_job import EvaluationJob, JobStore
from asr_eval.evaluation.evaluation_runner import EvaluationRunner
from asr_eval.evaluation.job_service import JobService
from asr_eval.recognizers.vendor_config import VendorStore
from asr_eval.utils.configure_logging import configure_logging
from asr_eval.utils.result_sink import InMemoryResultSink, JsonlResultSink, ResultSink
from asr_eval.utils.results_analyzer import print_summary, summarize_results

logger = logging.getLogger(__name__)


def build_test_case_store(cfg: EvaluationConfig) -> ASRTestCaseStore:
    if cfg.test_case_catalog is not None:
        store = ASRTestCaseStore.from_file(cfg.test_case_catalog)
    else:
        store = ASRTestCaseStore()
    for test_case in cfg.test_cases:
        store.add(test_case)
    return store


def build_result_sink(cfg: EvaluationConfig) -> ResultSink:
    if cfg.results_path is not None:
        return JsonlResultSink(cfg.results_path)
    return InMemoryResultSink()


def build_job_service(cfg: EvaluationConfig) -> Tuple[JobService, List[int], List[int]]:
    """Wire stores, sink and runner from the config.

    Returns the job service together with the test case and vendor ids the job
    should run, defaulting to everything the stores know about.
    """
    test_case_store = build_test_case_store(cfg)
    vendor_store = VendorStore(cfg.vendors)
    result_sink = build_result_sink(cfg)
    runner = EvaluationRunner(
        test_case_store,
        vendor_store,
        result_sink,
        max_workers=cfg.max_workers,
        show_progress=cfg.show_progress,
    )
    # Job ids continue after the last one already in the results file
    job_store = JobStore(first_id=result_sink.last_job_id() + 1)
    test_case_ids = (
        cfg.test_case_ids if cfg.test_case_ids is not None else test_case_store.ids()
    )
    vendor_ids = cfg.vendor_ids if cfg.vendor_ids is not None else vendor_store.ids()
    return JobService(runner, job_store), test_case_ids, vendor_ids


def run_job(cfg: EvaluationConfig) -> EvaluationJob:
    service, test_case_ids, vendor_ids = build_job_service(cfg)
    job = service.create_and_run_asr_job(
        test_case_ids,
        vendor_ids,
        job_name=cfg.job_name,
        parameters=cfg.parameters,
    )

    if cfg.print_summary:
        vendor_names = {vendor.id: vendor.name for vendor in cfg.vendors}
        print_summary(summarize_results(service.list_results(job.id), vendor_names))
    return job


@hydra.main(config_path="config", config_name="config.yaml", version_base=None)
def run_evaluation(cfg: DictConfig) -> None:
    evaluation_cfg = EvaluationConfig(**OmegaConf.to_container(cfg, resolve=True))
    configure_logging(evaluation_cfg.logging)
    job = run_job(evaluation_cfg)
    logger.info(f"Job {job.id} finished with status {job.status.value}")


if __name__ == "__main__":
    run_evaluation()
