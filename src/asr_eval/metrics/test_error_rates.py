import pytest

from asr_eval.metrics.error_rates import (
    DEGENERATE_PLACEHOLDER,
    MetricStatus,
    calculate_latency,
    compute_cer,
    compute_wer,
)
from asr_eval.utils.errors import DegenerateInputError


@pytest.mark.parametrize(
    "text", ["hello", "the cat sat on the mat", "你好世界", "a"]
)
def test_identical_strings_score_zero(text):
    assert compute_cer(text, text).value == 0.0
    assert compute_wer(text, text).value == 0.0
    assert compute_cer(text, text).status == MetricStatus.OK


def test_normalization_uses_reference_length_only():
    forward = compute_cer("hello", "hello world")
    backward = compute_cer("hello world", "hello")

    assert forward.value == pytest.approx(6 / 5)
    assert backward.value == pytest.approx(6 / 11)
    assert forward.value != backward.value


def test_empty_reference_and_hypothesis_is_ok():
    cer = compute_cer("", "")
    wer = compute_wer("", "")

    assert (cer.value, cer.status) == (0.0, MetricStatus.OK)
    assert (wer.value, wer.status) == (0.0, MetricStatus.OK)


def test_empty_reference_with_hypothesis_is_degenerate():
    cer = compute_cer("", "x")

    assert cer.status == MetricStatus.DEGENERATE
    assert cer.value == DEGENERATE_PLACEHOLDER
    assert cer.as_score() is None
    assert cer.insertions == 1
    with pytest.raises(DegenerateInputError):
        cer.require_score()

    assert compute_wer("", "some words").status == MetricStatus.DEGENERATE


def test_whitespace_only_reference_has_no_words():
    assert compute_wer("   \t", "word").status == MetricStatus.DEGENERATE
    assert compute_wer("   \t", "").value == 0.0
    # ...but it still has characters
    assert compute_cer("   ", "hello").status == MetricStatus.OK


def test_error_rate_is_not_clamped():
    wer = compute_wer("a", "a a a a a a")

    assert wer.value == pytest.approx(5.0)
    assert wer.insertions == 5
    assert wer.hits == 1


def test_single_word_substitution():
    wer = compute_wer("the cat sat", "the hat sat")
    cer = compute_cer("the cat sat", "the hat sat")

    assert wer.value == pytest.approx(1 / 3)
    assert wer.substitutions == 1
    assert wer.reference_length == 3
    assert cer.value == pytest.approx(1 / 11)
    assert cer.reference_length == 11


def test_characters_are_code_points():
    # precomposed e-acute is one code point but two UTF-8 bytes
    cer = compute_cer("h\u00e9llo", "hello")

    assert cer.reference_length == 5
    assert cer.value == pytest.approx(1 / 5)


def test_whitespace_counts_as_a_character():
    assert compute_cer("a b", "ab").value == pytest.approx(1 / 3)


def test_words_split_on_runs_of_any_whitespace():
    wer = compute_wer("the  cat\tsat\n", "the cat sat")

    assert wer.value == 0.0
    assert wer.reference_length == 3


def test_empty_hypothesis_is_all_deletions():
    wer = compute_wer("the cat sat", "")

    assert wer.value == pytest.approx(1.0)
    assert wer.deletions == 3
    assert wer.distance == 3


def test_repeated_calls_are_identical():
    first = compute_wer("one two three four", "one too three for five")
    for _ in range(5):
        assert compute_wer("one two three four", "one too three for five") == first
    assert compute_cer("abc", "abd") == compute_cer("abc", "abd")


def test_latency_is_passed_through():
    assert calculate_latency(0) == 0
    assert calculate_latency(1234) == 1234
