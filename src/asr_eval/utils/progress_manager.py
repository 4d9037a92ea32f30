"""
Progress tracking for evaluation jobs.

Shows one bar for the job's test cases and a nested bar for the vendors of the
test case currently being evaluated.
"""

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressManager:
    """Manages progress tracking for the test case × vendor matrix."""

    def __init__(self, enabled: bool = True):
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            disable=not enabled,
        )
        self.test_case_task: TaskID | None = None
        self.vendor_task: TaskID | None = None

    def __enter__(self):
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()

    def start_test_case_processing(self, job_id: int, total_test_cases: int) -> None:
        self.test_case_task = self.progress.add_task(
            f"[cyan]Evaluating job {job_id}...", total=total_test_cases
        )

    def start_vendor_processing(self, test_case_name: str, total_vendors: int) -> None:
        self.vendor_task = self.progress.add_task(
            f"[green]Recognizing {test_case_name}...", total=total_vendors
        )

    def advance_test_case(self) -> None:
        if self.test_case_task is not None:
            self.progress.advance(self.test_case_task)

    def advance_vendor(self) -> None:
        if self.vendor_task is not None:
            self.progress.advance(self.vendor_task)

    def finish_vendor_processing(self) -> None:
        """Remove the vendor progress task."""
        if self.vendor_task is not None:
            self.progress.remove_task(self.vendor_task)
            self.vendor_task = None
