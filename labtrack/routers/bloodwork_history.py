import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from labtrack.config import settings
from labtrack.database import get_db
from labtrack.models.bloodwork import BloodworkHistoryAnalysis, BloodworkReport
from labtrack.models.user import User
from labtrack.routers.deps import require_feature
from labtrack.schemas.bloodwork import MarkerSeries, ReportMarkers
from labtrack.services.bloodwork_analysis import (
    DISCLAIMER,
    HISTORY_DISCLAIMER,
    build_history_prompt,
    coerce_history_analysis,
)
from labtrack.services.bloodwork_history import (
    aggregate_marker_series,
    detect_flagged_markers,
    extract_markers_from_report,
    report_highlights,
    series_for_prompt,
)
from labtrack.services.llm import LLMCallError, call_llm
from labtrack.services.marker_aliases import resolve_canonical_marker
from labtrack.services.marker_priority import split_by_priority
from labtrack.services.trend_indicators import get_layman_notes, get_trend_indicator

router = APIRouter(prefix="/api/bloodwork-history", tags=["bloodwork-history"])
logger = logging.getLogger(__name__)

require_history_access = require_feature("/bloodwork-history", settings.history_required_tier)


def _load_reports(db: Session, user_id: str) -> list[BloodworkReport]:
    # Fold order decides which reading wins when two reports share a date.
    return (
        db.query(BloodworkReport)
        .filter(BloodworkReport.user_id == user_id)
        .order_by(BloodworkReport.report_date.asc(), BloodworkReport.created_at.asc())
        .all()
    )


def _extract_all(reports: list[BloodworkReport]) -> list[ReportMarkers]:
    return [extract_markers_from_report(r.raw_json, r.id, r.report_date.isoformat()) for r in reports]


def _series_payload(series: MarkerSeries) -> dict:
    return {
        **series.model_dump(by_alias=True),
        "canonicalMarker": resolve_canonical_marker(series.marker),
        "indicator": asdict(get_trend_indicator(series.marker, series.trend)),
        "laymanNotes": get_layman_notes(series.marker),
    }


def _analysis_payload(row: BloodworkHistoryAnalysis) -> dict:
    return {
        "id": row.id,
        "trendSummary": row.trend_summary or "",
        "patternNotes": row.pattern_notes if isinstance(row.pattern_notes, list) else [],
        "markerInsights": row.marker_insights if isinstance(row.marker_insights, list) else [],
        "createdAt": row.created_at.isoformat(),
    }


def _get_owned_analysis(db: Session, analysis_id: str, user_id: str) -> BloodworkHistoryAnalysis:
    row = (
        db.query(BloodworkHistoryAnalysis)
        .filter(BloodworkHistoryAnalysis.id == analysis_id, BloodworkHistoryAnalysis.user_id == user_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return row


@router.get("")
def get_history(db: Session = Depends(get_db), current_user: User = Depends(require_history_access)):
    reports = _load_reports(db, current_user.id)
    if not reports:
        # Nothing to trend yet, so the general panel disclaimer is returned.
        return {
            "statusCode": 200,
            "message": "Success",
            "data": {"reports": [], "prioritized": [], "other": [], "flaggedMarkers": [], "disclaimer": DISCLAIMER},
        }

    series = aggregate_marker_series(_extract_all(reports))
    flagged_markers = detect_flagged_markers(reports[-1].raw_json)
    prioritized, other = split_by_priority(series, flagged_markers)
    logger.info(
        "Bloodwork history user=%s reports=%d series=%d prioritized=%d",
        current_user.id,
        len(reports),
        len(series),
        len(prioritized),
    )

    return {
        "statusCode": 200,
        "message": "Success",
        "data": {
            "reports": [
                {
                    "id": r.id,
                    "reportDate": r.report_date.isoformat(),
                    "highlights": report_highlights(r.raw_json),
                    "labSource": r.lab_source,
                    "location": r.location,
                    "otherMetadata": r.other_metadata,
                }
                for r in reports
            ],
            "prioritized": [_series_payload(s) for s in prioritized],
            "other": [_series_payload(s) for s in other],
            "flaggedMarkers": flagged_markers,
            "disclaimer": HISTORY_DISCLAIMER,
        },
    }


@router.post("/analyze")
def analyze_history(db: Session = Depends(get_db), current_user: User = Depends(require_history_access)):
    reports = _load_reports(db, current_user.id)
    if not reports:
        raise HTTPException(status_code=400, detail="No bloodwork history to analyze")

    series = aggregate_marker_series(_extract_all(reports))
    if not series:
        raise HTTPException(status_code=400, detail="No marker series to analyze")

    prompt = build_history_prompt(series_for_prompt(series))
    try:
        result = call_llm(db, prompt, user_id=current_user.id, feature="bloodwork-history-analyze")
    except LLMCallError as exc:
        raise HTTPException(status_code=500, detail=str(exc) or "AI analysis failed") from exc

    analysis = coerce_history_analysis(result.data)
    row = BloodworkHistoryAnalysis(
        user_id=current_user.id,
        trend_summary=analysis["trendSummary"],
        pattern_notes=analysis["patternNotes"],
        marker_insights=analysis["markerInsights"],
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    return {
        "statusCode": 200,
        "message": "Analysis complete",
        "data": {**_analysis_payload(row), "disclaimer": DISCLAIMER},
    }


@router.get("/analyses")
def list_analyses(db: Session = Depends(get_db), current_user: User = Depends(require_history_access)):
    rows = (
        db.query(BloodworkHistoryAnalysis)
        .filter(BloodworkHistoryAnalysis.user_id == current_user.id)
        .order_by(BloodworkHistoryAnalysis.created_at.desc())
        .limit(settings.max_history_analyses)
        .all()
    )
    return {"statusCode": 200, "message": "Success", "data": {"analyses": [_analysis_payload(r) for r in rows]}}


@router.get("/analyses/{analysis_id}")
def get_analysis(
    analysis_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_history_access),
):
    row = _get_owned_analysis(db, analysis_id, current_user.id)
    return {"statusCode": 200, "message": "Success", "data": {**_analysis_payload(row), "disclaimer": DISCLAIMER}}


@router.delete("/analyses/{analysis_id}")
def delete_analysis(
    analysis_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_history_access),
):
    row = _get_owned_analysis(db, analysis_id, current_user.id)
    db.delete(row)
    db.commit()
    return {"statusCode": 200, "message": "Analysis deleted", "data": None}
