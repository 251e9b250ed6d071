from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TrendDirection = Literal["up", "down", "stable"]
MarkerStatus = Literal["within_range", "above_range", "below_range"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MarkerValue(CamelModel):
    """One marker reading pulled out of a single report."""
    marker: str
    value: str
    numeric_value: float | None = None


class ReportMarkers(CamelModel):
    report_id: str
    report_date: str
    markers: list[MarkerValue] = Field(default_factory=list)


class MarkerDataPoint(CamelModel):
    date: str
    value: str
    numeric_value: float | None = None


class MarkerSeries(CamelModel):
    """Chronological readings of one marker across a user's reports."""
    marker: str
    data_points: list[MarkerDataPoint]
    trend: TrendDirection = "stable"


class CreateReportRequest(CamelModel):
    bloodwork_data: dict[str, Any]
    test_date: date | None = None
    lab_source: str | None = None
    location: str | None = None
    other_metadata: dict[str, Any] | None = None


class AnalyzeBloodworkRequest(CamelModel):
    bloodwork_data: dict[str, Any]
    test_date: date | None = None
    source: str | None = None


# Shape of the educational analysis returned by the LLM for a single panel.


class MarkerAnalysisEntry(CamelModel):
    marker: str
    value: str
    reference_range: str
    status: MarkerStatus
    educational_notes: str
    common_influences: list[str] = Field(default_factory=list)
    monitoring_importance: str


class AnalysisSummary(CamelModel):
    test_date: str
    total_markers: int
    markers_analyzed: int
    key_observations: list[str] = Field(default_factory=list)


class AnalysisFlag(CamelModel):
    severity: Literal["low", "medium", "high"]
    category: str
    description: str
    educational_context: str
    recommendations: list[str] = Field(default_factory=list)


class Projections(CamelModel):
    short_term: str
    medium_term: str
    long_term: str
    influencing_factors: list[str] = Field(default_factory=list)


class BloodworkAnalysis(CamelModel):
    analysis_summary: AnalysisSummary
    marker_analysis: list[MarkerAnalysisEntry] = Field(default_factory=list)
    pattern_recognition: dict[str, Any]
    flags: list[AnalysisFlag] = Field(default_factory=list)
    projections: Projections
    harm_reduction_observations: list[str] = Field(default_factory=list)
    harm_reduction_plain_language: str | None = None
    mitigation_observations: list[dict[str, Any]] = Field(default_factory=list)
    educational_recommendations: list[str] = Field(default_factory=list)
