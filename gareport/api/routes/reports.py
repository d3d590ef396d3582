from dataclasses import asdict

import requests
from fastapi import APIRouter, Depends, HTTPException, status

from gareport.api.errors import ReportingError
from gareport.api.models.requests import ReportRef
from gareport.api.models.responses import (
    ReportListResponse,
    ReportStatusResponse,
    TrackedReportResponse,
)
from gareport.api.services.query_engine import get_service
from gareport.deps.validation import ValidatedReport, validate_report_payload

router = APIRouter(prefix="/reports", tags=["reports"])


def _upstream_failure(exc: requests.RequestException) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Reporting API request failed: {exc}"
    )


@router.post("", response_model=TrackedReportResponse, status_code=status.HTTP_201_CREATED)
async def submit_report(
    validated: ValidatedReport = Depends(validate_report_payload),
) -> TrackedReportResponse:
    try:
        tracked = get_service().submit_report(validated.title, validated.report)
    except ReportingError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except requests.RequestException as exc:
        raise _upstream_failure(exc) from exc
    return TrackedReportResponse.model_validate(asdict(tracked))


@router.get("", response_model=ReportListResponse)
async def list_reports() -> ReportListResponse:
    """List unsampled reports submitted through this service.

    Useful to discover the ids to poll with /reports/{report_id}/status.
    """
    reports = get_service().list_reports()
    return ReportListResponse(
        reports=[TrackedReportResponse.model_validate(report) for report in reports]
    )


@router.get("/{report_id}/status", response_model=ReportStatusResponse)
async def report_status(
    report_id: str, account_id: str, property_id: str, view_id: str
) -> ReportStatusResponse:
    ref = ReportRef(
        account_id=account_id, property_id=property_id, view_id=view_id, report_id=report_id
    )
    try:
        result = get_service().report_status(ref)
    except requests.RequestException as exc:
        raise _upstream_failure(exc) from exc
    return ReportStatusResponse.model_validate(result)
