from __future__ import annotations

import copy
import logging
import time
from dataclasses import asdict, dataclass
from functools import lru_cache
from itertools import chain, islice
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from gareport.api.config import Settings, get_settings
from gareport.api.models.requests import QueryDescription, ReportJobDescription, ReportRef
from gareport.api.services.cache import ResultCache, query_fingerprint
from gareport.api.services.job_tracker import TrackedReport, make_job_store
from gareport.api.services.pagination import paginate
from gareport.api.services.query_builder import (
    DEFAULT_MAX_RESULTS,
    build_request,
    validate_query,
)
from gareport.api.services.query_history import QueryLog
from gareport.api.services.records import ColumnHeader, Record, parse_headers, parse_records
from gareport.api.services.report_jobs import (
    create_report_job,
    get_report_status,
    validate_model,
)
from gareport.api.transport import ReportingTransport, get_transport

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Summary of the first page plus a lazy stream over every record.

    ``total_results`` and ``sampled`` are taken from the first response and
    never recomputed. ``records`` is a single-use iterator: once drained it
    stays empty and no request is repeated.
    """

    total_results: int
    columns: Tuple[ColumnHeader, ...]
    sampled: bool
    records: Iterator[Record]

    def materialize(self, limit: Optional[int] = None) -> List[Record]:
        return list(islice(self.records, limit))


def execute(
    transport: ReportingTransport,
    query_description: Union[QueryDescription, Mapping[str, Any]],
    default_max_results: int = DEFAULT_MAX_RESULTS,
) -> QueryResult:
    """Validate a query, fetch its first page and chain the remaining pages lazily."""
    query = validate_query(query_description)
    request = build_request(query, default_max_results)
    response = transport.get_data(request)

    headers = parse_headers(response.get("columnHeaders"))
    total_results = int(response.get("totalResults") or 0)
    sampled = bool(response.get("containsSampledData", False))
    first_page = parse_records(headers, response.get("rows"), start_index=request.start_index)
    logger.info(
        "Query on %s: %d total results, %d on first page, sampled=%s",
        query.view_id,
        total_results,
        len(first_page),
        sampled,
    )

    return QueryResult(
        total_results=total_results,
        columns=headers,
        sampled=sampled,
        records=chain(first_page, paginate(transport, headers, total_results, request)),
    )


def _cells(record: Record) -> List[Dict[str, Any]]:
    return [{"name": cell.name, "column_type": cell.column_type, "value": cell.value} for cell in record]


class ReportingService:
    """Runs report queries and unsampled report jobs against one transport."""

    def __init__(
        self,
        transport: ReportingTransport,
        settings: Optional[Settings] = None,
        job_store=None,
    ) -> None:
        self._transport = transport
        self._settings = settings or get_settings()
        self.cache = ResultCache(
            ttl_seconds=self._settings.cache.ttl_seconds,
            max_size=self._settings.cache.max_size,
        )
        self.history = QueryLog()
        self.jobs = job_store if job_store is not None else make_job_store(self._settings.jobs)

    def run_query(
        self,
        description: Union[QueryDescription, Mapping[str, Any]],
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        start_time = time.perf_counter()
        query = validate_query(description)
        key = query_fingerprint(query.model_dump(mode="json"), limit)

        cached = self.cache.get(key)
        if cached is not None:
            self.history.record(query.view_id, query.metrics, cached["total_results"], cache_hit=True)
            response = copy.deepcopy(cached)
            response["metrics"]["cache_hit"] = True
            return response

        result = execute(self._transport, query, self._settings.analytics.default_max_results)
        records = result.materialize(limit)
        response = {
            "total_results": result.total_results,
            "sampled": result.sampled,
            "columns": [header.to_dict() for header in result.columns],
            "records": [_cells(record) for record in records],
            "metrics": {
                "response_ms": round((time.perf_counter() - start_time) * 1000, 2),
                "cache_hit": False,
                "record_count": len(records),
            },
        }
        self.cache.put(key, copy.deepcopy(response))
        self.history.record(query.view_id, query.metrics, result.total_results, cache_hit=False)
        return response

    def get_history(self) -> List[Dict[str, Any]]:
        return self.history.list()

    def submit_report(
        self, title: str, description: Union[ReportJobDescription, Mapping[str, Any]]
    ) -> TrackedReport:
        report = validate_model(ReportJobDescription, description)
        job = create_report_job(self._transport, title, report)
        tracked = TrackedReport.from_job(job, report.account_id, report.property_id, report.view_id)
        return self.jobs.add(tracked)

    def report_status(self, job_ref: Union[ReportRef, Mapping[str, Any]]) -> Dict[str, Any]:
        ref = validate_model(ReportRef, job_ref)
        status = get_report_status(self._transport, ref)
        if self.jobs.update_status(ref.report_id, status) is None:
            logger.debug("Status fetched for untracked report %s", ref.report_id)
        return asdict(status)

    def list_reports(self) -> List[Dict[str, Any]]:
        return [asdict(report) for report in self.jobs.list().values()]


@lru_cache(maxsize=1)
def get_service() -> ReportingService:
    return ReportingService(get_transport())


def reset_service() -> None:
    get_service.cache_clear()  # type: ignore[attr-defined]
