import json

import polars as pl
import pytest

from asr_eval.datasets.asr_test_case import ASRTestCase
from asr_eval.datasets.case_store import ASRTestCaseStore
from asr_eval.utils.errors import TestCaseNotFoundError


def test_get_returns_test_case():
    store = ASRTestCaseStore([ASRTestCase(id=1, name="a", audio_ref="a.wav")])

    assert store.get(1).audio_ref == "a.wav"
    assert len(store) == 1


def test_missing_test_case_is_a_lookup_error():
    store = ASRTestCaseStore()

    with pytest.raises(TestCaseNotFoundError) as exc_info:
        store.get(42)

    assert isinstance(exc_info.value, LookupError)
    assert exc_info.value.entity_id == 42


def test_ground_truth_presence():
    assert not ASRTestCase(id=1, name="a", audio_ref="a.wav").has_ground_truth
    assert not ASRTestCase(
        id=1, name="a", audio_ref="a.wav", ground_truth_text=""
    ).has_ground_truth
    assert ASRTestCase(
        id=1, name="a", audio_ref="a.wav", ground_truth_text="hi"
    ).has_ground_truth


def test_load_csv_catalog(tmp_path):
    catalog = tmp_path / "catalog.csv"
    catalog.write_text(
        "id,name,audio_ref,language_code,ground_truth_text,tags\n"
        "1,greeting,asr/greeting.wav,en-US,hello world,short;clean\n"
        "2,silence,asr/silence.wav,en-US,,\n",
        encoding="utf-8",
    )

    store = ASRTestCaseStore.from_file(catalog)

    assert store.ids() == [1, 2]
    greeting = store.get(1)
    assert greeting.ground_truth_text == "hello world"
    assert greeting.tags == ["short", "clean"]
    assert not store.get(2).has_ground_truth
    assert store.get(2).tags == []


def test_load_jsonl_catalog(tmp_path):
    catalog = tmp_path / "catalog.jsonl"
    rows = [
        {"id": 3, "name": "noisy", "audio_ref": "n.wav", "tags": ["noisy"]},
        {"id": 4, "name": "clean", "audio_ref": "c.wav", "tags": []},
    ]
    catalog.write_text("\n".join(json.dumps(row) for row in rows), encoding="utf-8")

    store = ASRTestCaseStore.from_file(catalog)

    assert store.get(3).tags == ["noisy"]
    assert store.get(4).language_code is None


def test_load_parquet_catalog(tmp_path):
    catalog = tmp_path / "catalog.parquet"
    pl.DataFrame(
        {
            "id": [1],
            "name": ["zh"],
            "audio_ref": ["zh.wav"],
            "language_code": ["zh-CN"],
            "ground_truth_text": ["你好世界"],
        }
    ).write_parquet(catalog)

    store = ASRTestCaseStore.from_file(catalog)

    assert store.get(1).ground_truth_text == "你好世界"


def test_unsupported_catalog_format(tmp_path):
    with pytest.raises(ValueError, match="Unsupported catalog format"):
        ASRTestCaseStore.from_file(tmp_path / "catalog.xlsx")


def test_catalog_missing_columns(tmp_path):
    catalog = tmp_path / "catalog.csv"
    catalog.write_text("id,name\n1,a\n", encoding="utf-8")

    with pytest.raises(ValueError, match="audio_ref"):
        ASRTestCaseStore.from_file(catalog)
