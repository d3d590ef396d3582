"""Submission and status lookups for asynchronous unsampled reports.

Both calls are single request/response passthroughs: no retries, no polling.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from gareport.api.errors import BadQueryError, ReportingError
from gareport.api.models.requests import ReportJobDescription, ReportRef
from gareport.api.services.query_builder import format_date, validation_errors

if TYPE_CHECKING:
    from gareport.api.transport import ReportingTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportJob:
    created_at: Optional[str]
    status: Optional[str]
    title: Optional[str]
    id: str


@dataclass(frozen=True)
class DownloadDetails:
    object_id: Optional[str]
    bucket_id: Optional[str]


@dataclass(frozen=True)
class ReportStatus:
    title: Optional[str]
    status: Optional[str]
    type: Optional[str]
    id: Optional[str]
    download_details: DownloadDetails


def validate_model(model, raw):
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise BadQueryError(validation_errors(exc)) from exc


def build_unsampled_report_body(title: str, description: ReportJobDescription) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "title": title,
        "start-date": format_date(description.start_date),
        "end-date": format_date(description.end_date),
        "downloadType": "CLOUD_STORAGE",
        "cloudStorageDownloadDetails": {
            "bucketId": description.bucket,
            "objectId": description.object_id,
        },
    }
    if description.metrics:
        body["metrics"] = ",".join(description.metrics)
    if description.dimensions:
        body["dimensions"] = ",".join(description.dimensions)
    if description.filters:
        body["filters"] = description.filters
    return body


def create_report_job(
    transport: "ReportingTransport",
    title: str,
    description: Union[ReportJobDescription, Mapping[str, Any]],
) -> ReportJob:
    report = validate_model(ReportJobDescription, description)
    body = build_unsampled_report_body(title, report)
    logger.info("Submitting unsampled report '%s' for view %s", title, report.view_id)
    result = transport.insert_unsampled_report(
        report.account_id, report.property_id, report.view_id, body
    )
    if not result.get("id"):
        raise ReportingError(f"Unsampled report '{title}' was accepted without an id")
    return ReportJob(
        created_at=result.get("created"),
        status=result.get("status"),
        title=result.get("title"),
        id=str(result["id"]),
    )


def get_report_status(
    transport: "ReportingTransport", job_ref: Union[ReportRef, Mapping[str, Any]]
) -> ReportStatus:
    ref = validate_model(ReportRef, job_ref)
    report = transport.get_unsampled_report(
        ref.account_id, ref.property_id, ref.view_id, ref.report_id
    )
    # Pending reports carry no download details yet.
    details = report.get("cloudStorageDownloadDetails") or {}
    return ReportStatus(
        title=report.get("title"),
        status=report.get("status"),
        type=report.get("downloadType"),
        id=report.get("id"),
        download_details=DownloadDetails(
            object_id=details.get("objectId"),
            bucket_id=details.get("bucketId"),
        ),
    )
