"""Unit tests for the record store HTTP client"""

import asyncio
import httpx
import pytest
from datetime import date
from unittest.mock import AsyncMock, patch
from pocket_cfo.domain.exceptions import RecordStoreError
from pocket_cfo.domain.models import ExpenseCategory
from pocket_cfo.infrastructure.clients.records import RecordStoreClient

BASE_URL = "http://records.test"


def _response(status_code: int, payload, resource: str) -> httpx.Response:
    return httpx.Response(
        status_code,
        json=payload,
        request=httpx.Request("GET", f"{BASE_URL}/{resource}"),
    )


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
def test_list_expenses_parses_records(mock_get: AsyncMock):
    mock_get.return_value = _response(
        200,
        {
            "expenses": [
                {
                    "id": 7,
                    "user_id": "user_1",
                    "amount": "1200.50",
                    "category": "Bills",
                    "description": "EMI – Car Loan",
                    "date": "2024-05-10",
                    "payment_type": "EMI",
                    "status": "Completed",
                },
                {"id": "8", "user_id": "user_1", "amount": 90, "category": "Food", "date": "2024-05-11"},
            ]
        },
        "expenses",
    )

    expenses = asyncio.run(RecordStoreClient(base_url=BASE_URL).list_expenses("user_1"))

    assert len(expenses) == 2
    assert expenses[0].id == "7"
    assert expenses[0].amount == 1200.5
    assert expenses[0].category == ExpenseCategory.BILLS
    assert expenses[0].date == date(2024, 5, 10)
    assert expenses[0].payment.payment_type == "EMI"
    assert expenses[1].payment is None
    assert expenses[1].description == ""
    mock_get.assert_awaited_once_with(f"{BASE_URL}/expenses", params={"user_id": "user_1"})


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
def test_list_incomes_parses_records(mock_get: AsyncMock):
    mock_get.return_value = _response(
        200,
        {"incomes": [{"id": "i1", "user_id": "user_1", "amount": 50000, "source": "Salary", "date": "2024-05-01"}]},
        "incomes",
    )

    incomes = asyncio.run(RecordStoreClient(base_url=BASE_URL).list_incomes("user_1"))

    assert incomes[0].amount == 50_000
    assert incomes[0].source == "Salary"


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
def test_timeout_raises_record_store_error(mock_get: AsyncMock):
    mock_get.side_effect = httpx.ReadTimeout("too slow")

    with pytest.raises(RecordStoreError, match="timeout"):
        asyncio.run(RecordStoreClient(base_url=BASE_URL, timeout=1.5).list_incomes("user_1"))


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
def test_http_error_raises_record_store_error(mock_get: AsyncMock):
    mock_get.return_value = _response(500, {"error": "boom"}, "incomes")

    with pytest.raises(RecordStoreError, match="500"):
        asyncio.run(RecordStoreClient(base_url=BASE_URL).list_incomes("user_1"))


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
def test_unknown_category_raises_record_store_error(mock_get: AsyncMock):
    mock_get.return_value = _response(
        200,
        {"expenses": [{"id": "1", "user_id": "u", "amount": 5, "category": "Travel", "date": "2024-05-01"}]},
        "expenses",
    )

    with pytest.raises(RecordStoreError, match="Invalid expense data"):
        asyncio.run(RecordStoreClient(base_url=BASE_URL).list_expenses("u"))


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
def test_malformed_payload_raises_record_store_error(mock_get: AsyncMock):
    mock_get.return_value = _response(200, ["not", "an", "object"], "incomes")

    with pytest.raises(RecordStoreError):
        asyncio.run(RecordStoreClient(base_url=BASE_URL).list_incomes("user_1"))
