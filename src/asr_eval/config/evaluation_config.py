from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from asr_eval.datasets.asr_test_case import ASRTestCase
from asr_eval.recognizers.vendor_config import VendorConfig


class LoggerConfig(BaseModel):
    """Configuration for logging settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="The logging level to use"
    )
    log_file: Optional[Path] = Field(
        default=None, description="Path to log file. If None, logs only to console"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Format string for log messages",
    )
    use_rich_logging: bool = Field(
        default=True, description="Whether to use rich formatting for console output"
    )
    show_terminal_logs: bool = Field(
        default=True, description="Whether to show logs in the terminal/console"
    )


class EvaluationConfig(BaseModel):
    job_name: Optional[str] = Field(
        default=None, description="Human readable name of the evaluation job"
    )
    test_cases: List[ASRTestCase] = Field(
        default_factory=list, description="Test cases defined inline in the config"
    )
    test_case_catalog: Optional[Path] = Field(
        default=None,
        description="CSV, Parquet or JSON-lines file with additional test cases",
    )
    vendors: List[VendorConfig] = Field(
        default_factory=list, description="Vendor configurations available to the job"
    )
    test_case_ids: Optional[List[int]] = Field(
        default=None,
        description="Test case ids to evaluate, in order. If None, all known test cases",
    )
    vendor_ids: Optional[List[int]] = Field(
        default=None,
        description="Vendor ids to evaluate, in order. If None, all configured vendors",
    )
    parameters: Dict[str, Any] = Field(
        default_factory=dict,
        description="Parameters passed to every recognizer call of the job",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Number of vendors recognized concurrently per test case. 1 runs sequentially",
    )
    results_path: Optional[Path] = Field(
        default=None,
        description="JSON-lines file to append results to. If None, results are kept in memory",
    )
    show_progress: bool = Field(
        default=True, description="Whether to display progress bars while evaluating"
    )
    print_summary: bool = Field(
        default=True, description="Whether to print a per-vendor summary after the job"
    )
    # Logging configuration
    logging: LoggerConfig = Field(
        default_factory=LoggerConfig, description="Logging configuration settings"
    )
