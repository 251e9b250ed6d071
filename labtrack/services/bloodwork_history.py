"""Turn stored bloodwork payloads into per-marker time series.

Payloads come in two shapes:

* analysis shape, produced by the educational analysis step::

    {"markerAnalysis": [{"marker": "Total Testosterone", "value": "450 ng/dL", ...}]}

* key-value shape, as entered by the user::

    {"Total Testosterone": {"value": "450", "unit": "ng/dL"}, "HDL": "52 mg/dL"}

The shape is detected once and each variant has its own extractor. Nothing in
this module raises on malformed payloads; bad entries are skipped.
"""

import math
import re
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from labtrack.schemas.bloodwork import MarkerDataPoint, MarkerSeries, MarkerValue, ReportMarkers

ANALYSIS_KEYS = ("markerAnalysis", "marker_analysis")

# Top-level sections of an analysis payload that are not lab markers.
NON_MARKER_KEYS = frozenset(
    {
        "analysisSummary",
        "markerAnalysis",
        "patternRecognition",
        "flags",
        "projections",
        "harmReductionObservations",
        "harmReductionPlainLanguage",
        "mitigationObservations",
        "educationalRecommendations",
    }
)

FLAGGED_STATUSES = frozenset({"above_range", "below_range"})
TREND_EPSILON = 0.01

_NON_NUMERIC_RUN = re.compile(r"[^0-9.\-]+")
_NUMBER_TOKEN = re.compile(r"-?\d+(?:\.\d+)?")


def parse_numeric_value(raw: Any) -> float | None:
    """Return the first number in a lab value string ("450 ng/dL" -> 450.0)."""
    if not isinstance(raw, str):
        return None
    # Collapse removed runs to a space so "10mg5ml" reads as "10 5", not "105".
    cleaned = _NON_NUMERIC_RUN.sub(" ", raw).strip()
    match = _NUMBER_TOKEN.search(cleaned)
    if not match:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class AnalysisPayload:
    entries: list[Any]


@dataclass(frozen=True)
class KeyValuePayload:
    fields: Mapping[str, Any]


PayloadShape = AnalysisPayload | KeyValuePayload | None


def _analysis_entries(raw: Mapping[str, Any]) -> list[Any] | None:
    for key in ANALYSIS_KEYS:
        entries = raw.get(key)
        if isinstance(entries, (list, tuple)):
            return list(entries)
    return None


def detect_payload_shape(raw: Any) -> PayloadShape:
    if not isinstance(raw, Mapping):
        return None
    entries = _analysis_entries(raw)
    if entries is not None:
        return AnalysisPayload(entries=entries)
    return KeyValuePayload(fields=raw)


def _display_text(value: Any) -> str:
    """Render a JSON scalar the way it was written in the payload."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _marker_value(name: Any, value: Any) -> MarkerValue | None:
    marker = str(name).strip()
    display = _display_text(value).strip()
    if not marker or not display:
        return None
    return MarkerValue(marker=marker, value=display, numeric_value=parse_numeric_value(display))


def _extract_analysis_markers(payload: AnalysisPayload) -> list[MarkerValue]:
    markers = []
    for entry in payload.entries:
        if not isinstance(entry, Mapping) or "marker" not in entry or "value" not in entry:
            continue
        marker = _marker_value(entry["marker"], entry["value"])
        if marker is not None:
            markers.append(marker)
    return markers


def _extract_key_value_markers(payload: KeyValuePayload) -> list[MarkerValue]:
    markers = []
    for key, value in payload.fields.items():
        if key in NON_MARKER_KEYS:
            continue
        if isinstance(value, Mapping) and "value" in value:
            display = value["value"]
        elif isinstance(value, str):
            display = value
        else:
            continue
        marker = _marker_value(key, display)
        if marker is not None:
            markers.append(marker)
    return markers


def extract_markers_from_report(raw_payload: Any, report_id: str, report_date: str) -> ReportMarkers:
    """Flatten one report payload into marker readings, in source order.

    An analysis array, when present, is the only source of markers; the
    payload's other top-level keys are not scanned in that case.
    """
    shape = detect_payload_shape(raw_payload)
    if isinstance(shape, AnalysisPayload):
        markers = _extract_analysis_markers(shape)
    elif isinstance(shape, KeyValuePayload):
        markers = _extract_key_value_markers(shape)
    else:
        markers = []
    return ReportMarkers(report_id=report_id, report_date=report_date, markers=markers)


def compute_trend(points: list[MarkerDataPoint]) -> str:
    """Compare the first and last reading only; intermediate points are ignored."""
    if len(points) < 2:
        return "stable"
    first = points[0].numeric_value
    last = points[-1].numeric_value
    if first is None or last is None:
        return "stable"
    diff = last - first
    if abs(diff) <= TREND_EPSILON:
        return "stable"
    return "up" if diff > 0 else "down"


def aggregate_marker_series(reports: Iterable[ReportMarkers]) -> list[MarkerSeries]:
    """Group readings by exact marker name into date-sorted series.

    Reports are folded in the order given. When two reports share a date, the
    reading from the later one replaces the earlier for that marker.
    """
    by_marker: dict[str, list[MarkerDataPoint]] = defaultdict(list)

    for report in reports:
        for reading in report.markers:
            key = reading.marker.strip()
            if not key:
                continue
            points = [p for p in by_marker[key] if p.date != report.report_date]
            points.append(
                MarkerDataPoint(date=report.report_date, value=reading.value, numeric_value=reading.numeric_value)
            )
            by_marker[key] = points

    series = []
    for marker, points in by_marker.items():
        if not points:
            continue
        ordered = sorted(points, key=lambda p: p.date)
        series.append(MarkerSeries(marker=marker, data_points=ordered, trend=compute_trend(ordered)))

    return sorted(series, key=lambda s: s.marker)


def detect_flagged_markers(raw_payload: Any) -> list[str]:
    """Markers the report's own analysis put outside the reference range."""
    if not isinstance(raw_payload, Mapping):
        return []
    flagged = []
    for entry in _analysis_entries(raw_payload) or []:
        if not isinstance(entry, Mapping) or "marker" not in entry or "status" not in entry:
            continue
        if entry["status"] in FLAGGED_STATUSES:
            flagged.append(str(entry["marker"]).strip())
    return flagged


def report_highlights(raw_payload: Any, limit: int = 3) -> list[str]:
    """Short list of key observations and flag descriptions for the timeline."""
    if not isinstance(raw_payload, Mapping):
        return []
    highlights: list[str] = []
    summary = raw_payload.get("analysisSummary")
    if isinstance(summary, Mapping) and isinstance(summary.get("keyObservations"), list):
        highlights.extend(str(item) for item in summary["keyObservations"][:3])
    flags = raw_payload.get("flags")
    if isinstance(flags, list):
        for flag in flags[:2]:
            description = flag.get("description") if isinstance(flag, Mapping) else None
            if description:
                highlights.append(str(description))
    return highlights[:limit]


def series_for_prompt(series: Iterable[MarkerSeries]) -> list[dict[str, Any]]:
    return [
        {
            "marker": s.marker,
            "trend": s.trend,
            "points": len(s.data_points),
            "latest": s.data_points[-1].value if s.data_points else None,
            "history": [{"date": p.date, "value": p.value} for p in s.data_points],
        }
        for s in series
    ]
