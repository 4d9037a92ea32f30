from logging import getLogger
from pathlib import Path
from typing import Any, Dict, Iterable, List

import polars as pl

from asr_eval.datasets.asr_test_case import ASRTestCase
from asr_eval.utils.errors import TestCaseNotFoundError

_READERS = {
    ".csv": pl.read_csv,
    ".parquet": pl.read_parquet,
    ".jsonl": pl.read_ndjson,
    ".ndjson": pl.read_ndjson,
}


class ASRTestCaseStore:
    """In-memory test case lookup, keyed by test case id."""

    def __init__(self, test_cases: Iterable[ASRTestCase] = ()):
        self._log = getLogger(__name__)
        self._test_cases: Dict[int, ASRTestCase] = {}
        for test_case in test_cases:
            self.add(test_case)

    def add(self, test_case: ASRTestCase) -> None:
        if test_case.id in self._test_cases:
            self._log.warning(f"Replacing test case {test_case.id} ({test_case.name})")
        self._test_cases[test_case.id] = test_case

    def get(self, test_case_id: int) -> ASRTestCase:
        try:
            return self._test_cases[test_case_id]
        except KeyError:
            raise TestCaseNotFoundError(test_case_id) from None

    def ids(self) -> List[int]:
        return list(self._test_cases)

    def __len__(self) -> int:
        return len(self._test_cases)

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "ASRTestCaseStore":
        return cls(ASRTestCase(**_normalize_record(record)) for record in records)

    @classmethod
    def from_file(cls, path: Path) -> "ASRTestCaseStore":
        """Load a test case catalog from a CSV, Parquet or JSON-lines file."""
        path = Path(path)
        reader = _READERS.get(path.suffix.lower())
        if reader is None:
            raise ValueError(
                f"Unsupported catalog format: {path.suffix}. "
                f"Supported formats: {list(_READERS)}"
            )
        df = reader(path)
        missing = {"id", "name", "audio_ref"} - set(df.columns)
        if missing:
            raise ValueError(f"Catalog {path} is missing columns: {sorted(missing)}")

        store = cls.from_records(df.to_dicts())
        store._log.info(f"Loaded {len(store)} test cases from {path}")
        return store


def _normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    record = {key: value for key, value in record.items() if value is not None}
    tags = record.get("tags")
    # CSV catalogs store tags as a single ';'-separated cell
    if isinstance(tags, str):
        record["tags"] = [tag.strip() for tag in tags.split(";") if tag.strip()]
    return record
