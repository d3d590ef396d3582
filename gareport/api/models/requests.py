from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DIMENSION = re.compile(r"ga:\w+")

# Largest page the reporting API serves in one response.
MAX_PAGE_SIZE = 10000


def _instant_to_date(value: Any) -> Any:
    # Aware instants are reported in UTC, naive ones are taken as-is.
    if isinstance(value, str) and ("T" in value or " " in value.strip()):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


class QueryDescription(BaseModel):
    """Schema every report query must satisfy before a request is issued."""

    model_config = ConfigDict(extra="forbid")

    start_date: date
    end_date: date
    metrics: List[str] = Field(..., min_length=1)
    view_id: str = Field(..., pattern=r"^ga:\d+$")
    max_results: Optional[int] = Field(default=None, ge=1, le=MAX_PAGE_SIZE)
    dimensions: Optional[List[str]] = None
    filters: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates(cls, value: Any) -> Any:
        return _instant_to_date(value)

    @field_validator("dimensions")
    @classmethod
    def _dimension_names(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        bad = [name for name in value if not _DIMENSION.fullmatch(name)]
        if bad:
            raise ValueError(f"dimensions must match 'ga:<word>', got {', '.join(bad)}")
        return value


class ReportJobDescription(BaseModel):
    """Input for an asynchronous unsampled report."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    start_date: date
    end_date: date
    metrics: Optional[List[str]] = None
    dimensions: Optional[List[str]] = None
    filters: Optional[str] = None
    account_id: str
    property_id: str
    view_id: str
    bucket: str
    object_id: str = Field(..., alias="object")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates(cls, value: Any) -> Any:
        return _instant_to_date(value)


class ReportRef(BaseModel):
    account_id: str
    property_id: str
    view_id: str
    report_id: str


class QueryRequest(BaseModel):
    query: Dict[str, Any]
    limit: Optional[int] = Field(default=None, ge=1)


class ReportJobRequest(BaseModel):
    title: str = Field(..., min_length=1)
    report: Dict[str, Any]
