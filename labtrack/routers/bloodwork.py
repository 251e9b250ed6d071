import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from labtrack.database import get_db
from labtrack.models.bloodwork import BloodworkReport
from labtrack.models.user import User
from labtrack.routers.deps import require_feature
from labtrack.schemas.bloodwork import AnalyzeBloodworkRequest, CreateReportRequest
from labtrack.services.bloodwork_analysis import DISCLAIMER, build_panel_prompt, validate_bloodwork_analysis
from labtrack.services.bloodwork_history import detect_flagged_markers, extract_markers_from_report
from labtrack.services.llm import LLMCallError, call_llm

router = APIRouter(prefix="/api/bloodwork", tags=["bloodwork"])
logger = logging.getLogger(__name__)

require_parser_access = require_feature("/bloodwork-parser")


def _get_owned_report(db: Session, report_id: str, user_id: str) -> BloodworkReport:
    report = (
        db.query(BloodworkReport)
        .filter(BloodworkReport.id == report_id, BloodworkReport.user_id == user_id)
        .first()
    )
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


def _report_summary(report: BloodworkReport) -> dict:
    extracted = extract_markers_from_report(report.raw_json, report.id, report.report_date.isoformat())
    return {
        "id": report.id,
        "reportDate": report.report_date.isoformat(),
        "labSource": report.lab_source,
        "location": report.location,
        "markerCount": len(extracted.markers),
        "createdAt": report.created_at.isoformat(),
    }


@router.post("/reports")
def create_report(
    payload: CreateReportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_parser_access),
):
    report = BloodworkReport(
        user_id=current_user.id,
        report_date=payload.test_date or date.today(),
        raw_json=payload.bloodwork_data,
        lab_source=payload.lab_source,
        location=payload.location,
        other_metadata=payload.other_metadata,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("Stored bloodwork report id=%s user=%s", report.id, current_user.id)
    return {"statusCode": 200, "message": "Report saved", "data": _report_summary(report)}


@router.get("/reports")
def list_reports(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_parser_access),
):
    query = db.query(BloodworkReport).filter(BloodworkReport.user_id == current_user.id)
    total = query.count()
    rows = (
        query.order_by(BloodworkReport.report_date.desc(), BloodworkReport.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {"reports": [_report_summary(r) for r in rows], "total": total, "page": page, "limit": limit},
    }


@router.get("/reports/{report_id}")
def get_report(
    report_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_parser_access),
):
    report = _get_owned_report(db, report_id, current_user.id)
    extracted = extract_markers_from_report(report.raw_json, report.id, report.report_date.isoformat())
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {
            **_report_summary(report),
            "otherMetadata": report.other_metadata,
            "rawJson": report.raw_json,
            "markers": [m.model_dump(by_alias=True) for m in extracted.markers],
            "flaggedMarkers": detect_flagged_markers(report.raw_json),
        },
    }


@router.delete("/reports/{report_id}")
def delete_report(
    report_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_parser_access),
):
    report = _get_owned_report(db, report_id, current_user.id)
    db.delete(report)
    db.commit()
    return {"statusCode": 200, "message": "Report deleted", "data": None}


@router.post("/analyze")
def analyze_bloodwork(
    payload: AnalyzeBloodworkRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_parser_access),
):
    if not payload.bloodwork_data:
        raise HTTPException(status_code=400, detail="Bloodwork data is required")

    report_date = payload.test_date or date.today()
    prompt = build_panel_prompt(payload.bloodwork_data, report_date.isoformat(), payload.source)
    try:
        result = call_llm(db, prompt, user_id=current_user.id, feature="bloodwork-analysis")
    except LLMCallError as exc:
        raise HTTPException(status_code=500, detail=str(exc) or "Failed to analyze bloodwork") from exc

    analysis, error = validate_bloodwork_analysis(result.data)
    if analysis is None:
        logger.warning("Rejected bloodwork analysis for user=%s: %s", current_user.id, error)
        raise HTTPException(status_code=500, detail=error)

    analysis_json = analysis.model_dump(by_alias=True, exclude_none=True)
    # An empty analysis array would hide the submitted key-value markers.
    if not analysis_json.get("markerAnalysis"):
        analysis_json.pop("markerAnalysis", None)

    report = BloodworkReport(
        user_id=current_user.id,
        report_date=report_date,
        raw_json={**payload.bloodwork_data, **analysis_json},
        lab_source=payload.source,
    )
    db.add(report)
    db.commit()
    db.refresh(report)

    return {
        "statusCode": 200,
        "message": "Analysis complete",
        "data": {
            "analysis": analysis_json,
            "reportId": report.id,
            "tokensUsed": result.tokens_used,
            "disclaimer": DISCLAIMER,
        },
    }
