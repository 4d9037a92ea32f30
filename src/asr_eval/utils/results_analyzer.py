"""
Per-vendor summaries of evaluation results.

Unset metrics stay null in the analysis frame, so they drop out of means and
standard deviations instead of counting as perfect scores.
"""

from typing import Dict, List, Optional

import polars as pl
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from asr_eval.utils.evaluation_result import EvaluationResult

_SCHEMA = {
    "job_id": pl.Int64,
    "test_case_id": pl.Int64,
    "vendor_id": pl.Int64,
    "failed": pl.Boolean,
    "cer": pl.Float64,
    "wer": pl.Float64,
    "latency_ms": pl.Int64,
}


class VendorSummary(BaseModel):
    """Summary statistics for one vendor across a job's test cases"""

    vendor_id: int
    vendor_name: Optional[str] = None
    pair_count: int
    recognition_errors: int
    scored_count: int
    mean_cer: Optional[float] = None
    std_cer: Optional[float] = None
    mean_wer: Optional[float] = None
    std_wer: Optional[float] = None
    mean_latency_ms: Optional[float] = None


def results_to_dataframe(evaluation_results: List[EvaluationResult]) -> pl.DataFrame:
    """Convert evaluation results to a polars DataFrame"""
    data = [
        {
            "job_id": result.job_id,
            "test_case_id": result.test_case_id,
            "vendor_id": result.vendor_id,
            "failed": not result.outcome.succeeded,
            "cer": result.cer,
            "wer": result.wer,
            "latency_ms": result.outcome.latency_ms,
        }
        for result in evaluation_results
    ]
    return pl.DataFrame(data, schema=_SCHEMA)


def summarize_results(
    evaluation_results: List[EvaluationResult],
    vendor_names: Optional[Dict[int, str]] = None,
) -> List[VendorSummary]:
    if not evaluation_results:
        return []

    vendor_names = vendor_names or {}
    df = results_to_dataframe(evaluation_results)
    grouped = (
        df.group_by("vendor_id", maintain_order=True)
        .agg(
            [
                pl.len().alias("pair_count"),
                pl.col("failed").sum().alias("recognition_errors"),
                pl.col("cer").is_not_null().sum().alias("scored_count"),
                pl.col("cer").mean().alias("mean_cer"),
                pl.col("cer").std().alias("std_cer"),
                pl.col("wer").mean().alias("mean_wer"),
                pl.col("wer").std().alias("std_wer"),
                pl.col("latency_ms").mean().alias("mean_latency_ms"),
            ]
        )
        .sort("vendor_id")
    )

    return [
        VendorSummary(vendor_name=vendor_names.get(row["vendor_id"]), **row)
        for row in grouped.to_dicts()
    ]


def _format_metric(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.4f}"


def print_summary(
    summaries: List[VendorSummary], console: Optional[Console] = None
) -> None:
    console = console or Console()
    if not summaries:
        console.print("[yellow]No evaluation results to summarize[/yellow]")
        return

    table = Table(title="ASR Vendor Evaluation Summary")
    table.add_column("Vendor")
    table.add_column("Pairs", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Scored", justify="right")
    table.add_column("Mean CER", justify="right")
    table.add_column("Mean WER", justify="right")
    table.add_column("Mean latency (ms)", justify="right")

    for summary in summaries:
        vendor = summary.vendor_name or str(summary.vendor_id)
        table.add_row(
            f"{vendor} ({summary.vendor_id})" if summary.vendor_name else vendor,
            str(summary.pair_count),
            str(summary.recognition_errors),
            str(summary.scored_count),
            _format_metric(summary.mean_cer),
            _format_metric(summary.mean_wer),
            (
                "-"
                if summary.mean_latency_ms is None
                else f"{summary.mean_latency_ms:.0f}"
            ),
        )

    console.print(table)
