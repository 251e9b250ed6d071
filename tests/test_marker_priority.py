import pytest

from labtrack.schemas.bloodwork import MarkerDataPoint, MarkerSeries
from labtrack.services.marker_priority import PRIORITIZED_MARKERS, is_prioritized_marker, split_by_priority


def _series(name: str) -> MarkerSeries:
    return MarkerSeries(marker=name, data_points=[MarkerDataPoint(date="2024-01-01", value="1")])


@pytest.mark.parametrize(
    "name",
    [
        "Total Testosterone",
        "testosterone, total",
        "TESTOSTERONE",
        "Free Testosterone",
        "Estradiol, Sensitive",
        "  prolactin  ",
        "LDL Cholesterol Calc",
        "Alanine Aminotransferase (ALT)",
        "hs-CRP",
        "Hematocrit",
        "PSA",
        "Cholesterol",
        # Containment works in both directions.
        "Testo",
    ],
)
def test_prioritized_names(name):
    assert is_prioritized_marker(name) is True


@pytest.mark.parametrize("name", ["Ferritin", "Vitamin D", "Sodium", "Glucose"])
def test_non_prioritized_names(name):
    assert is_prioritized_marker(name) is False


def test_short_entries_can_overmatch():
    # Known looseness: "e2" appears inside unrelated names.
    assert is_prioritized_marker("Vitamin E2 Isomer") is True


def test_every_canonical_entry_matches_itself():
    assert all(is_prioritized_marker(entry) for entry in PRIORITIZED_MARKERS)


def test_split_uses_flagged_markers_case_insensitively():
    series = [_series("Ferritin"), _series("Total Testosterone"), _series("Sodium"), _series("Glucose")]

    prioritized, other = split_by_priority(series, [" ferritin ", "GLUCOSE"])

    assert [s.marker for s in prioritized] == ["Ferritin", "Total Testosterone", "Glucose"]
    assert [s.marker for s in other] == ["Sodium"]


def test_split_is_a_partition():
    names = ["ALT", "Sodium", "HDL", "Ferritin", "Potassium", "Estradiol", "Zinc"]
    series = [_series(n) for n in names]

    prioritized, other = split_by_priority(series, ["Zinc"])

    assert len(prioritized) + len(other) == len(series)
    assert {id(s) for s in prioritized}.isdisjoint({id(s) for s in other})
    assert [s.marker for s in prioritized] == ["ALT", "HDL", "Estradiol", "Zinc"]
    assert [s.marker for s in other] == ["Sodium", "Ferritin", "Potassium"]


def test_split_without_flags():
    prioritized, other = split_by_priority([])
    assert prioritized == [] and other == []
