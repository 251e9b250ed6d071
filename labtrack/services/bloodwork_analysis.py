import json
from typing import Any

from pydantic import ValidationError

from labtrack.schemas.bloodwork import BloodworkAnalysis

DISCLAIMER = "Educational only, not medical advice. Individual variability is high. Consult a physician."
HISTORY_DISCLAIMER = (
    "Educational only, not medical advice. Green up: often associated with positive patterns in forums. "
    "Red down: may correlate with risk patterns in literature; variability is high. "
    "Individual responses vary. Consult a physician."
)

PANEL_PROMPT = """
You are an educational assistant that summarizes a bloodwork panel using community and literature framing only.
Never personalize, diagnose or recommend changing any compound. Always redirect to physician oversight.

Return STRICT JSON only with keys:
analysisSummary {{testDate, totalMarkers, markersAnalyzed, keyObservations[]}},
markerAnalysis [{{marker, value, referenceRange, status (within_range|above_range|below_range),
educationalNotes, commonInfluences[], monitoringImportance}}],
patternRecognition {{hormonalProfile, metabolicMarkers, inflammationMarkers, liverKidneyFunction}},
flags [{{severity (low|medium|high), category, description, educationalContext, recommendations[]}}],
projections {{shortTerm, mediumTerm, longTerm, influencingFactors[]}},
harmReductionObservations[], mitigationObservations[], educationalRecommendations[].

## User Bloodwork Data
Test Date: {test_date}
Source: {source}
Data: {data}
"""

HISTORY_PROMPT = """
The user has bloodwork history with the following marker trends. Analyze and provide educational insights.

{series}

Provide a JSON object with trendSummary, patternNotes (array), and markerInsights (array of objects with marker,
trend, laymanWhatItIs, laymanWhyMonitor, observationalRisk, commonlyDiscussedSupports). Use ONLY community and
literature framing. NEVER personalize. Mention Quest or LetsGetChecked retesting in patternNotes.
Return ONLY valid JSON.
"""


def build_panel_prompt(bloodwork_data: dict[str, Any], test_date: str | None, source: str | None) -> str:
    return PANEL_PROMPT.format(
        test_date=test_date or "Not specified",
        source=source or "User provided",
        data=json.dumps(bloodwork_data, indent=2),
    )


def build_history_prompt(series_payload: list[dict[str, Any]]) -> str:
    return HISTORY_PROMPT.format(series=json.dumps(series_payload, indent=2))


def validate_bloodwork_analysis(raw: Any) -> tuple[BloodworkAnalysis | None, str | None]:
    """Check an LLM panel analysis against the expected structure."""
    try:
        return BloodworkAnalysis.model_validate(raw), None
    except ValidationError as exc:
        issues = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return None, f"Invalid bloodwork response structure: {issues}"


def coerce_history_analysis(data: Any) -> dict[str, Any]:
    """Keep only well-typed fields of a history analysis answer."""
    payload = data if isinstance(data, dict) else {}
    trend_summary = payload.get("trendSummary")
    pattern_notes = payload.get("patternNotes")
    marker_insights = payload.get("markerInsights")
    return {
        "trendSummary": trend_summary if isinstance(trend_summary, str) else "",
        "patternNotes": pattern_notes if isinstance(pattern_notes, list) else [],
        "markerInsights": marker_insights if isinstance(marker_insights, list) else [],
    }
