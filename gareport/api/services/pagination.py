"""Lazy pagination over the pages that follow an already fetched first page.

The cursor trusts ``total_results`` from the first response: a page is only
requested while rows beyond the ones already covered remain, so a result of
``n`` rows with page size ``p`` costs exactly ``ceil(n / p) - 1`` follow-up
requests.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, List, Sequence

from gareport.api.services.query_builder import DataRequest
from gareport.api.services.records import ColumnHeader, Record, parse_records

if TYPE_CHECKING:
    from gareport.api.transport import ReportingTransport

logger = logging.getLogger(__name__)


class PaginationCursor:
    def __init__(
        self,
        transport: "ReportingTransport",
        headers: Sequence[ColumnHeader],
        total_results: int,
        template: DataRequest,
    ) -> None:
        self._transport = transport
        self._headers = tuple(headers)
        self._total_results = total_results
        self._template = template
        self.start_index = template.start_index
        self.page_size = template.max_results
        self.pages_fetched = 0

    @property
    def remaining(self) -> int:
        covered = self.start_index - 1 + self.page_size
        return self._total_results - covered

    def has_next(self) -> bool:
        return self.remaining > 0

    def next_page(self) -> List[Record]:
        if not self.has_next():
            return []
        next_index = self.start_index + self.page_size
        request = self._template.with_start_index(next_index)
        try:
            response = self._transport.get_data(request)
        except Exception:
            logger.error("Page fetch failed at start-index=%s for %s", next_index, request.view_id)
            raise
        self.start_index = next_index
        self.pages_fetched += 1
        rows = response.get("rows") or []
        logger.debug("Fetched %d rows at start-index=%s", len(rows), next_index)
        return parse_records(self._headers, rows, start_index=next_index)

    def __iter__(self) -> Iterator[Record]:
        while self.has_next():
            yield from self.next_page()


def paginate(
    transport: "ReportingTransport",
    headers: Sequence[ColumnHeader],
    total_results: int,
    first_request: DataRequest,
) -> Iterator[Record]:
    """Records of every page after ``first_request``, fetched on demand."""
    return iter(PaginationCursor(transport, headers, total_results, first_request))
