import pytest

from labtrack.schemas.bloodwork import MarkerValue, ReportMarkers
from labtrack.services.bloodwork_history import (
    AnalysisPayload,
    KeyValuePayload,
    aggregate_marker_series,
    detect_flagged_markers,
    detect_payload_shape,
    extract_markers_from_report,
    parse_numeric_value,
    report_highlights,
    series_for_prompt,
)
from labtrack.services.marker_priority import is_prioritized_marker


def _report(report_id: str, report_date: str, **values: str) -> ReportMarkers:
    return ReportMarkers(
        report_id=report_id,
        report_date=report_date,
        markers=[
            MarkerValue(marker=name, value=value, numeric_value=parse_numeric_value(value))
            for name, value in values.items()
        ],
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("450", 450.0),
        ("450 ng/dL", 450.0),
        ("-3.2", -3.2),
        ("-3.2 mmol/L", -3.2),
        ("12.5", 12.5),
        ("<0.5", 0.5),
        ("10mg5ml", 10.0),
        ("4-6", 4.0),
        ("1.2.3", 1.2),
    ],
)
def test_parse_numeric_value_takes_first_number(raw, expected):
    assert parse_numeric_value(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "abc", "-", "n/a", None, 450, "1" * 400])
def test_parse_numeric_value_returns_none_when_unparseable(raw):
    assert parse_numeric_value(raw) is None


def test_detect_payload_shape():
    assert detect_payload_shape(None) is None
    assert detect_payload_shape("450 ng/dL") is None
    assert detect_payload_shape([{"marker": "HDL", "value": "50"}]) is None
    assert isinstance(detect_payload_shape({"markerAnalysis": []}), AnalysisPayload)
    assert isinstance(detect_payload_shape({"marker_analysis": []}), AnalysisPayload)
    assert isinstance(detect_payload_shape({"HDL": "50"}), KeyValuePayload)
    # A non-list analysis field does not make it the analysis shape.
    assert isinstance(detect_payload_shape({"markerAnalysis": {"marker": "HDL"}}), KeyValuePayload)


@pytest.mark.parametrize("raw", [None, "text", 42, [], ["HDL"]])
def test_extract_from_unrecognized_payload_is_empty(raw):
    result = extract_markers_from_report(raw, "r1", "2024-01-01")
    assert result.report_id == "r1"
    assert result.report_date == "2024-01-01"
    assert result.markers == []


def test_analysis_array_is_the_only_source_when_present():
    raw = {
        "markerAnalysis": [
            {"marker": " LDL Cholesterol ", "value": " 130 mg/dL ", "status": "above_range"},
            {"marker": "Missing value"},
            "not an object",
            {"marker": "Estradiol", "value": "28 pg/mL"},
        ],
        "Total Testosterone": "450 ng/dL",
        "HDL": {"value": "52"},
    }

    markers = extract_markers_from_report(raw, "r1", "2024-01-01").markers

    assert [m.marker for m in markers] == ["LDL Cholesterol", "Estradiol"]
    assert markers[0].value == "130 mg/dL"
    assert markers[0].numeric_value == 130.0


def test_snake_case_analysis_array_is_accepted():
    raw = {"marker_analysis": [{"marker": "Prolactin", "value": "12 ng/mL"}]}
    markers = extract_markers_from_report(raw, "r1", "2024-01-01").markers
    assert [(m.marker, m.numeric_value) for m in markers] == [("Prolactin", 12.0)]


def test_key_value_payload_skips_sections_and_non_string_values():
    raw = {
        "Total Testosterone": {"value": "450", "unit": "ng/dL"},
        "analysisSummary": "summary text",
        "HDL": " 52 mg/dL ",
        "age": 34,
        "notes": ["fasted"],
        "panel": {"unit": "mg/dL"},
        "flags": "none",
        "Glucose": {"value": 95},
        "Comment": "see lab",
    }

    markers = extract_markers_from_report(raw, "r1", "2024-01-01").markers

    assert [m.marker for m in markers] == ["Total Testosterone", "HDL", "Glucose", "Comment"]
    assert markers[0].value == "450"
    assert markers[1].value == "52 mg/dL"
    assert markers[1].numeric_value == 52.0
    assert markers[2].value == "95"
    assert markers[3].numeric_value is None


def test_blank_names_and_values_are_dropped():
    raw = {"   ": "50", "HDL": "   "}
    assert extract_markers_from_report(raw, "r1", "2024-01-01").markers == []


def test_later_report_wins_on_same_date():
    series = aggregate_marker_series(
        [
            _report("r1", "2024-01-01", HDL="50 mg/dL"),
            _report("r2", "2024-01-01", HDL="55 mg/dL"),
        ]
    )

    assert len(series) == 1
    assert [(p.date, p.value) for p in series[0].data_points] == [("2024-01-01", "55 mg/dL")]


def test_points_are_sorted_by_date_and_series_by_marker():
    series = aggregate_marker_series(
        [
            _report("r3", "2024-06-01", LDL="120", HDL="60"),
            _report("r1", "2024-01-01", LDL="140"),
            _report("r2", "2024-03-15", HDL="55", ALT="30"),
        ]
    )

    assert [s.marker for s in series] == ["ALT", "HDL", "LDL"]
    for item in series:
        dates = [p.date for p in item.data_points]
        assert dates == sorted(dates)
    ldl = series[2]
    assert [p.date for p in ldl.data_points] == ["2024-01-01", "2024-06-01"]
    assert ldl.trend == "down"


def test_grouping_is_case_sensitive():
    series = aggregate_marker_series(
        [
            _report("r1", "2024-01-01", Testosterone="450"),
            _report("r2", "2024-02-01", testosterone="600"),
        ]
    )
    assert [s.marker for s in series] == ["Testosterone", "testosterone"]
    assert all(len(s.data_points) == 1 for s in series)


def test_blank_marker_names_are_not_grouped():
    report = ReportMarkers(
        report_id="r1",
        report_date="2024-01-01",
        markers=[MarkerValue(marker="  ", value="1"), MarkerValue(marker="HDL", value="50")],
    )
    assert [s.marker for s in aggregate_marker_series([report])] == ["HDL"]


@pytest.mark.parametrize(
    "values, expected",
    [
        (["100"], "stable"),
        (["100", "100.005"], "stable"),
        (["100", "100.02"], "up"),
        (["100", "99"], "down"),
        (["100", "200", "100.005"], "stable"),
        (["100", "pending"], "stable"),
        (["n/a", "120"], "stable"),
    ],
)
def test_trend_compares_first_and_last_points(values, expected):
    reports = [_report(f"r{i}", f"2024-0{i + 1}-01", Ferritin=value) for i, value in enumerate(values)]
    assert aggregate_marker_series(reports)[0].trend == expected


def test_aggregate_of_nothing_is_empty():
    assert aggregate_marker_series([]) == []


def test_end_to_end_total_testosterone():
    reports = [
        extract_markers_from_report({"Total Testosterone": "450 ng/dL"}, "r1", "2024-01-01"),
        extract_markers_from_report({"Total Testosterone": "620 ng/dL"}, "r2", "2024-03-01"),
    ]

    series = aggregate_marker_series(reports)

    assert len(series) == 1
    payload = series[0].model_dump(by_alias=True)
    assert payload == {
        "marker": "Total Testosterone",
        "dataPoints": [
            {"date": "2024-01-01", "value": "450 ng/dL", "numericValue": 450.0},
            {"date": "2024-03-01", "value": "620 ng/dL", "numericValue": 620.0},
        ],
        "trend": "up",
    }
    assert is_prioritized_marker("Total Testosterone") is True


def test_detect_flagged_markers_reads_status():
    raw = {
        "markerAnalysis": [
            {"marker": " Hematocrit ", "value": "52%", "status": "above_range"},
            {"marker": "HDL", "value": "35", "status": "below_range"},
            {"marker": "ALT", "value": "25", "status": "within_range"},
            {"marker": "AST", "value": "25"},
        ]
    }
    assert detect_flagged_markers(raw) == ["Hematocrit", "HDL"]
    assert detect_flagged_markers({"HDL": "35"}) == []
    assert detect_flagged_markers(None) == []


def test_report_highlights_combines_observations_and_flags():
    raw = {
        "analysisSummary": {"keyObservations": ["Lipids shifted", "Hematocrit rising"]},
        "flags": [{"description": "Hematocrit above range"}, {"severity": "low"}, {"description": "extra"}],
    }
    assert report_highlights(raw) == ["Lipids shifted", "Hematocrit rising", "Hematocrit above range"]
    assert report_highlights({"HDL": "50"}) == []


def test_series_for_prompt_shape():
    series = aggregate_marker_series(
        [_report("r1", "2024-01-01", HDL="50 mg/dL"), _report("r2", "2024-02-01", HDL="58 mg/dL")]
    )
    assert series_for_prompt(series) == [
        {
            "marker": "HDL",
            "trend": "up",
            "points": 2,
            "latest": "58 mg/dL",
            "history": [{"date": "2024-01-01", "value": "50 mg/dL"}, {"date": "2024-02-01", "value": "58 mg/dL"}],
        }
    ]


@pytest.mark.parametrize(
    "value, expected",
    [(450.0, "450"), (4.5, "4.5"), (95, "95"), (True, "true"), (False, "false"), (None, "null")],
)
def test_nested_scalar_values_render_as_json_text(value, expected):
    markers = extract_markers_from_report({"Marker": {"value": value}}, "r1", "2024-01-01").markers
    assert [m.value for m in markers] == [expected]
