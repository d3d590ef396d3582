from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from gareport.api.errors import BadQueryError
from gareport.api.models.requests import QueryDescription

DEFAULT_MAX_RESULTS = 10000
FIRST_START_INDEX = 1


@dataclass(frozen=True)
class DataRequest:
    """Transport-ready page request for the tabular report endpoint."""

    view_id: str
    start_date: str
    end_date: str
    metrics: str
    max_results: int = DEFAULT_MAX_RESULTS
    start_index: int = FIRST_START_INDEX
    dimensions: Optional[str] = None
    filters: Optional[str] = None

    def with_start_index(self, start_index: int) -> "DataRequest":
        return replace(self, start_index=start_index)

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "ids": self.view_id,
            "start-date": self.start_date,
            "end-date": self.end_date,
            "metrics": self.metrics,
            "max-results": self.max_results,
            "start-index": self.start_index,
        }
        if self.dimensions:
            params["dimensions"] = self.dimensions
        if self.filters:
            params["filters"] = self.filters
        return params


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def validation_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "query"
        errors.append({"field": field, "message": err.get("msg", "invalid value")})
    return errors


def validate_query(description: Union[QueryDescription, Mapping[str, Any]]) -> QueryDescription:
    """Validate a raw query description, raising ``BadQueryError`` on failure."""
    if isinstance(description, QueryDescription):
        return description
    try:
        return QueryDescription.model_validate(description)
    except ValidationError as exc:
        raise BadQueryError(validation_errors(exc)) from exc


def build_request(
    query: QueryDescription, default_max_results: int = DEFAULT_MAX_RESULTS
) -> DataRequest:
    return DataRequest(
        view_id=query.view_id,
        start_date=format_date(query.start_date),
        end_date=format_date(query.end_date),
        metrics=",".join(query.metrics),
        max_results=query.max_results or default_max_results,
        start_index=FIRST_START_INDEX,
        dimensions=",".join(query.dimensions) if query.dimensions else None,
        filters=query.filters,
    )
