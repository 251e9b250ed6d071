"""Decide which marker series get a chart and trend badge by default.

Everything else is shown as a raw list only.
"""

from collections.abc import Iterable, Sequence

from labtrack.schemas.bloodwork import MarkerSeries

PRIORITIZED_MARKERS = (
    "Testosterone Total",
    "Total Testosterone",
    "Testosterone",
    "Testosterone Free",
    "Free Testosterone",
    "Estradiol",
    "E2",
    "Prolactin",
    "HDL Cholesterol",
    "HDL",
    "LDL Cholesterol",
    "LDL",
    "Total Cholesterol",
    "Cholesterol",
    "ALT",
    "Alanine Aminotransferase",
    "AST",
    "Aspartate Aminotransferase",
    "hsCRP",
    "CRP",
    "High Sensitivity CRP",
    "Hematocrit",
    "Hct",
    "PSA Total",
    "PSA",
)


def _normalize(name: str) -> str:
    return name.strip().lower()


def names_overlap(name: str, candidate: str) -> bool:
    """Case-insensitive containment in either direction.

    Loose on purpose: "Total Testosterone" and "Testosterone" match each other.
    Short names can overmatch (e.g. "E2" inside an unrelated name).
    """
    a, b = _normalize(name), _normalize(candidate)
    return b in a or a in b


def is_prioritized_marker(name: str, canonical: Iterable[str] = PRIORITIZED_MARKERS) -> bool:
    return any(names_overlap(name, entry) for entry in canonical)


def split_by_priority(
    series: Sequence[MarkerSeries],
    flagged_markers: Iterable[str] = (),
) -> tuple[list[MarkerSeries], list[MarkerSeries]]:
    """Partition series into (prioritized, other), keeping input order."""
    flagged = {_normalize(name) for name in flagged_markers}
    prioritized: list[MarkerSeries] = []
    other: list[MarkerSeries] = []
    for item in series:
        if is_prioritized_marker(item.marker) or _normalize(item.marker) in flagged:
            prioritized.append(item)
        else:
            other.append(item)
    return prioritized, other
