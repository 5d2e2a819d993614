import pytest

from src.access_control.matching.similarity import template_similarity


def test_identical_templates_are_fully_similar():
    t = bytes(range(128))
    assert template_similarity(t, t) == 100.0


@pytest.mark.parametrize("first, second", [(None, b"abc"), (b"abc", None), (b"", b""), (None, None)])
def test_missing_template_scores_zero(first, second):
    assert template_similarity(first, second) == 0.0


def test_length_mismatch_scores_zero():
    assert template_similarity(b"\x01\x02\x03", b"\x01\x02\x03\x04") == 0.0


def test_positional_byte_equality():
    a = bytes([1, 2, 3, 4])
    b = bytes([1, 2, 9, 9])
    assert template_similarity(a, b) == 50.0


def test_similarity_is_symmetric():
    a = bytes([0, 5, 5, 7, 9, 1, 2, 3, 4, 0])
    b = bytes([0, 5, 6, 7, 9, 0, 2, 3, 8, 8])
    assert template_similarity(a, b) == template_similarity(b, a)
    assert template_similarity(a, b) == pytest.approx(60.0)
