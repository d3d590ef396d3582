from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from gareport.api.config import Settings
from gareport.api.services.job_tracker import ReportJobStore
from gareport.api.services.query_engine import ReportingService


class FakeTransport:
    """Serves slices of an in-memory table and records every page request."""

    def __init__(
        self,
        headers: List[Dict[str, str]],
        rows: List[List[str]],
        total_results: Optional[int] = None,
        sampled: bool = False,
        fail_at: Optional[int] = None,
    ) -> None:
        self.headers = headers
        self.rows = rows
        self.total_results = len(rows) if total_results is None else total_results
        self.sampled = sampled
        self.fail_at = fail_at
        self.requests: List[Any] = []
        self.inserted: List[Dict[str, Any]] = []
        self.report_payload: Dict[str, Any] = {}

    @property
    def start_indexes(self) -> List[int]:
        return [request.start_index for request in self.requests]

    def get_data(self, request) -> Dict[str, Any]:
        self.requests.append(request)
        if self.fail_at is not None and request.start_index == self.fail_at:
            raise ConnectionError(f"connection reset at {request.start_index}")
        offset = request.start_index - 1
        page = self.rows[offset : offset + request.max_results]
        payload: Dict[str, Any] = {
            "totalResults": self.total_results,
            "columnHeaders": self.headers,
            "containsSampledData": self.sampled,
        }
        if page:
            payload["rows"] = page
        return payload

    def insert_unsampled_report(self, account_id, property_id, view_id, body) -> Dict[str, Any]:
        self.inserted.append(
            {"account_id": account_id, "property_id": property_id, "view_id": view_id, "body": body}
        )
        return {
            "kind": "analytics#unsampledReport",
            "id": "report-1",
            "title": body["title"],
            "status": "PENDING",
            "created": "2023-02-01T10:00:00.000Z",
        }

    def get_unsampled_report(self, account_id, property_id, view_id, report_id) -> Dict[str, Any]:
        return {"id": report_id, **self.report_payload}


@pytest.fixture
def make_transport():
    return FakeTransport


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def make_service(settings):
    def _make(transport) -> ReportingService:
        return ReportingService(transport, settings=settings, job_store=ReportJobStore())

    return _make


@pytest.fixture
def base_query() -> Dict[str, Any]:
    return {
        "start_date": "2023-01-01",
        "end_date": "2023-01-31",
        "metrics": ["ga:sessions"],
        "view_id": "ga:1234",
    }
