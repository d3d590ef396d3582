from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, Tuple

import requests

from gareport.api.config import get_settings
from gareport.api.services.query_builder import DataRequest

logger = logging.getLogger(__name__)


class ReportingTransport(Protocol):
    def get_data(self, request: DataRequest) -> Dict[str, Any]: ...

    def insert_unsampled_report(
        self, account_id: str, property_id: str, view_id: str, body: Dict[str, Any]
    ) -> Dict[str, Any]: ...

    def get_unsampled_report(
        self, account_id: str, property_id: str, view_id: str, report_id: str
    ) -> Dict[str, Any]: ...


class HttpTransport:
    """Reporting API client over a shared ``requests.Session``.

    Every response goes through ``raise_for_status`` so HTTP failures surface
    as ``requests.HTTPError`` to whoever demanded the page.
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        if access_token:
            self._session.headers["Authorization"] = f"Bearer {access_token}"

    def _reports_url(self, account_id: str, property_id: str, view_id: str) -> str:
        return (
            f"{self._base_url}/management/accounts/{account_id}"
            f"/webproperties/{property_id}/profiles/{view_id}/unsampledReports"
        )

    def get_data(self, request: DataRequest) -> Dict[str, Any]:
        logger.debug(
            "GET data/ga ids=%s start-index=%s max-results=%s",
            request.view_id,
            request.start_index,
            request.max_results,
        )
        response = self._session.get(
            f"{self._base_url}/data/ga", params=request.to_params(), timeout=self._timeout
        )
        response.raise_for_status()
        return response.json()

    def insert_unsampled_report(
        self, account_id: str, property_id: str, view_id: str, body: Dict[str, Any]
    ) -> Dict[str, Any]:
        response = self._session.post(
            self._reports_url(account_id, property_id, view_id), json=body, timeout=self._timeout
        )
        response.raise_for_status()
        return response.json()

    def get_unsampled_report(
        self, account_id: str, property_id: str, view_id: str, report_id: str
    ) -> Dict[str, Any]:
        response = self._session.get(
            f"{self._reports_url(account_id, property_id, view_id)}/{report_id}",
            timeout=self._timeout,
        )
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self._session.close()


_TRANSPORT_CACHE: Dict[Tuple[str, str], HttpTransport] = {}


def get_transport(base_url: str | None = None, access_token: str | None = None) -> HttpTransport:
    settings = get_settings()
    url = base_url or settings.analytics.base_url
    token = access_token or settings.analytics.access_token
    if not token:
        raise ValueError("An analytics access token is required.")

    key = (url, token)
    if key not in _TRANSPORT_CACHE:
        logger.info("Creating reporting transport for %s", url)
        _TRANSPORT_CACHE[key] = HttpTransport(
            url, access_token=token, timeout_seconds=settings.analytics.timeout_seconds
        )
    return _TRANSPORT_CACHE[key]


def clear_transports() -> None:
    for transport in _TRANSPORT_CACHE.values():
        transport.close()
    _TRANSPORT_CACHE.clear()
