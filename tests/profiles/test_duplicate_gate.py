import pytest

from src.access_control.core.exceptions import DuplicateCheckUnavailable
from src.access_control.profiles.duplicate_gate import DuplicateGate
from tests.fakes import InMemoryProfiles, make_profile


def _perturb(template: bytes, positions: int) -> bytes:
    out = bytearray(template)
    for i in range(positions):
        out[i] = (out[i] + 1) % 256
    return bytes(out)


BASE = bytes(range(100))


def test_identical_template_is_duplicate():
    stored = make_profile(1, "E001", BASE)
    gate = DuplicateGate(InMemoryProfiles([stored]))

    result = gate.check(BASE)

    assert result.is_duplicate
    assert result.matched_profile == stored
    assert result.similarity == 100.0


def test_templates_differing_in_21_percent_are_not_duplicates():
    repo = InMemoryProfiles([
        make_profile(1, "E001", _perturb(BASE, 21)),
        make_profile(2, "E002", _perturb(BASE, 50)),
    ])

    result = DuplicateGate(repo).check(BASE)

    assert not result.is_duplicate
    assert result.matched_profile is None
    assert result.similarity == pytest.approx(79.0)


def test_threshold_is_inclusive():
    repo = InMemoryProfiles([make_profile(1, "E001", _perturb(BASE, 20))])

    result = DuplicateGate(repo, threshold=80).check(BASE)

    assert result.is_duplicate
    assert result.similarity == pytest.approx(80.0)


def test_first_profile_wins_on_tie():
    first = make_profile(1, "E001", BASE)
    second = make_profile(2, "E002", BASE)

    result = DuplicateGate(InMemoryProfiles([first, second])).check(BASE)

    assert result.matched_profile.external_id == "E001"


def test_best_match_is_reported():
    repo = InMemoryProfiles([
        make_profile(1, "E001", _perturb(BASE, 15)),
        make_profile(2, "E002", _perturb(BASE, 5)),
    ])

    result = DuplicateGate(repo).check(BASE)

    assert result.matched_profile.external_id == "E002"
    assert result.similarity == pytest.approx(95.0)


def test_length_mismatch_never_matches():
    repo = InMemoryProfiles([make_profile(1, "E001", BASE + b"\x00")])

    result = DuplicateGate(repo).check(BASE)

    assert not result.is_duplicate
    assert result.similarity == 0.0


def test_empty_store_is_not_duplicate():
    result = DuplicateGate(InMemoryProfiles()).check(BASE)
    assert not result.is_duplicate


def test_scan_failure_is_reported_as_unavailable():
    class BrokenSource:
        def scan_templates(self):
            raise ConnectionError("db down")

    with pytest.raises(DuplicateCheckUnavailable):
        DuplicateGate(BrokenSource()).check(BASE)
