import pytest

from labtrack.services.marker_aliases import resolve_canonical_marker


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Testosterone, Total", "Total Testosterone"),
        ("TESTOSTERONE TOTAL", "Total Testosterone"),
        ("E2", "Estradiol"),
        ("HDL-C", "HDL Cholesterol"),
        ("SGPT", "ALT"),
        ("hs-CRP", "hsCRP"),
        ("Hct", "Hematocrit"),
    ],
)
def test_exact_aliases(raw, expected):
    assert resolve_canonical_marker(raw) == expected


def test_fuzzy_match_above_threshold():
    assert resolve_canonical_marker("Prolactinn", threshold=85) == "Prolactin"


def test_unknown_names_resolve_to_none():
    assert resolve_canonical_marker("Sodium") is None
    assert resolve_canonical_marker("   ") is None


def test_threshold_is_respected():
    assert resolve_canonical_marker("Prolactinn", threshold=100) is None
