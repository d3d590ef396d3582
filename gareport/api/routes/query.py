import logging

import requests
from fastapi import APIRouter, Depends, HTTPException, status

from gareport.api.errors import ReportingError
from gareport.api.models.responses import QueryHistoryResponse, QueryResultResponse
from gareport.api.services.query_engine import get_service
from gareport.deps.validation import ValidatedQuery, validate_query_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/query", tags=["query"])


@router.post("", response_model=QueryResultResponse)
async def run_query(
    validated: ValidatedQuery = Depends(validate_query_payload),
) -> QueryResultResponse:
    try:
        result = get_service().run_query(validated.query, limit=validated.limit)
    except ReportingError as exc:
        logger.error("Report data for %s could not be normalized: %s", validated.query.view_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except requests.RequestException as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Reporting API request failed: {exc}"
        ) from exc
    return QueryResultResponse.model_validate(result)


@router.get("/history", response_model=QueryHistoryResponse)
async def get_history() -> QueryHistoryResponse:
    return QueryHistoryResponse(history=get_service().get_history())
