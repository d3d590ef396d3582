from typing import NamedTuple, Optional

from fastapi import Body, HTTPException, status

from gareport.api.errors import BadQueryError
from gareport.api.models.requests import (
    QueryDescription,
    QueryRequest,
    ReportJobDescription,
    ReportJobRequest,
)
from gareport.api.services.query_builder import validate_query
from gareport.api.services.report_jobs import validate_model


class ValidatedQuery(NamedTuple):
    query: QueryDescription
    limit: Optional[int]


class ValidatedReport(NamedTuple):
    title: str
    report: ReportJobDescription


def _bad_request(exc: BadQueryError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": "Bad query", "errors": exc.errors},
    )


def validate_query_payload(payload: QueryRequest = Body(...)) -> ValidatedQuery:
    """
    FastAPI dependency that checks the embedded query description against the
    query schema before any reporting request is made.
    Raises HTTPException(400) listing every violated constraint.
    """
    try:
        query = validate_query(payload.query)
    except BadQueryError as exc:
        raise _bad_request(exc) from exc
    return ValidatedQuery(query=query, limit=payload.limit)


def validate_report_payload(payload: ReportJobRequest = Body(...)) -> ValidatedReport:
    title = payload.title.strip()
    if not title:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Report title cannot be empty after trimming whitespace.",
        )
    try:
        report = validate_model(ReportJobDescription, payload.report)
    except BadQueryError as exc:
        raise _bad_request(exc) from exc
    return ValidatedReport(title=title, report=report)
