from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from gareport.api.models.base import CellSchema, ColumnHeaderSchema, DownloadDetailsSchema


class QueryResultResponse(BaseModel):
    total_results: int
    sampled: bool
    columns: List[ColumnHeaderSchema]
    records: List[List[CellSchema]]
    metrics: Dict[str, Any]


class QueryHistoryResponse(BaseModel):
    history: List[dict]


class TrackedReportResponse(BaseModel):
    report_id: str
    title: Optional[str]
    account_id: str
    property_id: str
    view_id: str
    status: Optional[str] = None
    created_at: Optional[str] = None
    download_type: Optional[str] = None
    download_details: DownloadDetailsSchema = DownloadDetailsSchema()


class ReportListResponse(BaseModel):
    reports: List[TrackedReportResponse]


class ReportStatusResponse(BaseModel):
    title: Optional[str]
    status: Optional[str]
    type: Optional[str]
    id: Optional[str]
    download_details: DownloadDetailsSchema
