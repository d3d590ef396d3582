from __future__ import annotations

from decimal import Decimal

import pytest

from gareport.api.errors import ShapeMismatchError
from gareport.api.services.query_engine import execute
from gareport.api.services.records import ColumnHeader

SESSIONS_HEADER = {"name": "ga:sessions", "columnType": "METRIC", "dataType": "INTEGER"}
REVENUE_HEADER = {"name": "ga:transactionRevenue", "columnType": "METRIC", "dataType": "CURRENCY"}


def test_end_to_end_single_page(make_transport, base_query):
    transport = make_transport([SESSIONS_HEADER], [["10"], ["20"], ["30"]], sampled=True)

    result = execute(transport, base_query)

    assert result.total_results == 3
    assert result.sampled is True
    assert result.columns == (ColumnHeader("ga:sessions", "METRIC", "INTEGER"),)
    records = result.materialize()
    assert [(record[0].name, record[0].value) for record in records] == [
        ("ga:sessions", 10),
        ("ga:sessions", 20),
        ("ga:sessions", 30),
    ]
    assert transport.start_indexes == [1]
    assert transport.requests[0].max_results == 10000


def test_summary_comes_from_first_page_only(make_transport, base_query):
    transport = make_transport([SESSIONS_HEADER], [[str(n)] for n in range(15)], sampled=False)
    result = execute(transport, {**base_query, "max_results": 10})

    # Later pages disagree about sampling and size; the summary must not move.
    transport.sampled = True
    transport.total_results = 999
    records = result.materialize()

    assert len(records) == 15
    assert result.sampled is False
    assert result.total_results == 15
    assert transport.start_indexes == [1, 11]


def test_empty_report_has_no_records(make_transport, base_query):
    transport = make_transport([SESSIONS_HEADER], [])

    result = execute(transport, base_query)

    assert result.total_results == 0
    assert result.materialize() == []
    assert transport.start_indexes == [1]


def test_malformed_later_page_aborts_the_stream(make_transport, base_query):
    rows = [[str(n)] for n in range(10)] + [["1", "extra"]]
    transport = make_transport([SESSIONS_HEADER], rows)
    result = execute(transport, {**base_query, "max_results": 10})

    with pytest.raises(ShapeMismatchError) as excinfo:
        result.materialize()
    assert excinfo.value.row_number == 11


def test_service_materializes_and_caches(make_transport, make_service, base_query):
    transport = make_transport(
        [SESSIONS_HEADER, REVENUE_HEADER], [["10", "1.10"], ["20", "2.20"], ["30", "3.30"]]
    )
    service = make_service(transport)

    first = service.run_query(base_query)
    second = service.run_query(base_query)

    assert first["total_results"] == 3
    assert first["metrics"]["cache_hit"] is False
    assert first["metrics"]["record_count"] == 3
    assert first["records"][0][1] == {
        "name": "ga:transactionRevenue",
        "column_type": "METRIC",
        "value": Decimal("1.10"),
    }
    assert second["metrics"]["cache_hit"] is True
    assert second["records"] == first["records"]
    assert transport.start_indexes == [1]


def test_cached_response_is_not_shared_with_callers(make_transport, make_service, base_query):
    transport = make_transport([SESSIONS_HEADER], [["10"], ["20"]])
    service = make_service(transport)

    first = service.run_query(base_query)
    first["records"].clear()
    first["metrics"]["record_count"] = 0
    second = service.run_query(base_query)
    second["total_results"] = 99
    third = service.run_query(base_query)

    assert [record[0]["value"] for record in second["records"]] == [10, 20]
    assert third["total_results"] == 2
    assert third["metrics"]["record_count"] == 2
    assert first["metrics"]["cache_hit"] is False
    assert transport.start_indexes == [1]


def test_service_limit_stops_paging(make_transport, make_service, base_query):
    transport = make_transport([SESSIONS_HEADER], [[str(n)] for n in range(30)])
    service = make_service(transport)

    response = service.run_query({**base_query, "max_results": 10}, limit=5)

    assert response["total_results"] == 30
    assert len(response["records"]) == 5
    assert transport.start_indexes == [1]


def test_service_history_lists_newest_first(make_transport, make_service, base_query):
    transport = make_transport([SESSIONS_HEADER], [["1"]])
    service = make_service(transport)

    service.run_query(base_query)
    service.run_query({**base_query, "view_id": "ga:999"})

    history = service.get_history()
    assert [entry["view_id"] for entry in history] == ["ga:999", "ga:1234"]
    assert history[0]["total_results"] == 1
