from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass, field
from typing import Dict, Optional

from redis import Redis

from gareport.api.config import JobsConfig
from gareport.api.services.report_jobs import ReportJob, ReportStatus


@dataclass
class TrackedReport:
    report_id: str
    title: Optional[str]
    account_id: str
    property_id: str
    view_id: str
    status: Optional[str] = None
    created_at: Optional[str] = None
    download_type: Optional[str] = None
    download_details: Dict[str, Optional[str]] = field(default_factory=dict)

    @classmethod
    def from_job(cls, job: ReportJob, account_id: str, property_id: str, view_id: str) -> "TrackedReport":
        return cls(
            report_id=job.id,
            title=job.title,
            account_id=account_id,
            property_id=property_id,
            view_id=view_id,
            status=job.status,
            created_at=job.created_at,
        )

    def apply_status(self, status: ReportStatus) -> None:
        self.status = status.status
        self.title = status.title or self.title
        self.download_type = status.type
        self.download_details = asdict(status.download_details)


class ReportJobStore:
    """In-memory tracker for submitted unsampled reports."""

    def __init__(self) -> None:
        self._reports: Dict[str, TrackedReport] = {}
        self._lock = threading.Lock()

    def add(self, report: TrackedReport) -> TrackedReport:
        with self._lock:
            self._reports[report.report_id] = report
        return report

    def update_status(self, report_id: str, status: ReportStatus) -> Optional[TrackedReport]:
        with self._lock:
            report = self._reports.get(report_id)
            if report is not None:
                report.apply_status(status)
            return report

    def get(self, report_id: str) -> Optional[TrackedReport]:
        with self._lock:
            return self._reports.get(report_id)

    def list(self) -> Dict[str, TrackedReport]:
        with self._lock:
            return dict(self._reports)


class RedisReportJobStore:
    """Redis-backed report tracker so several app processes share one view."""

    def __init__(self, conn: Redis, namespace: str = "unsampled_reports") -> None:
        if conn is None:
            raise RuntimeError("Redis connection is required for RedisReportJobStore")
        self._r = conn
        self._ns = namespace
        self._index_key = f"{self._ns}:index"

    def _key(self, report_id: str) -> str:
        return f"{self._ns}:{report_id}"

    def _save(self, report: TrackedReport) -> None:
        self._r.set(self._key(report.report_id), json.dumps(asdict(report)))

    def add(self, report: TrackedReport) -> TrackedReport:
        self._r.sadd(self._index_key, report.report_id)
        self._save(report)
        return report

    def update_status(self, report_id: str, status: ReportStatus) -> Optional[TrackedReport]:
        report = self.get(report_id)
        if report is None:
            return None
        report.apply_status(status)
        self._save(report)
        return report

    def get(self, report_id: str) -> Optional[TrackedReport]:
        data = self._r.get(self._key(report_id))
        if not data:
            return None
        return TrackedReport(**json.loads(data))

    def list(self) -> Dict[str, TrackedReport]:
        out: Dict[str, TrackedReport] = {}
        for raw_id in self._r.smembers(self._index_key):
            report_id = raw_id.decode("utf-8") if isinstance(raw_id, (bytes, bytearray)) else raw_id
            report = self.get(report_id)
            if report:
                out[report_id] = report
        return out


def make_job_store(config: JobsConfig):
    if config.backend == "redis":
        return RedisReportJobStore(Redis.from_url(config.redis_url), namespace=config.namespace)
    if config.backend != "memory":
        raise ValueError(f"Unknown jobs backend '{config.backend}' (expected 'memory' or 'redis')")
    return ReportJobStore()
