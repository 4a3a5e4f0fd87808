"""Record store HTTP client for fetching a user's income and expense entries"""

import httpx
from datetime import date
from typing import Any, Dict, List
from pocket_cfo.domain.models import ExpenseCategory, ExpenseEntry, IncomeEntry, PaymentMetadata
from pocket_cfo.domain.exceptions import RecordStoreError
from pocket_cfo.config import settings


def _parse_payment(record: Dict[str, Any]) -> PaymentMetadata | None:
    if not any(key in record for key in ("payment_method", "status", "payment_type")):
        return None
    return PaymentMetadata(
        method=record.get("payment_method"),
        status=record.get("status"),
        payment_type=record.get("payment_type"),
    )


class RecordStoreClient:
    """Read-only client for the income/expense record store"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.records_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def _fetch(self, resource: str, user_id: str) -> List[Dict[str, Any]]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/{resource}",
                    params={"user_id": user_id},
                )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise RecordStoreError(f"Record store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise RecordStoreError(f"Record store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise RecordStoreError(f"Record store unreachable: {e}") from e
            except ValueError as e:
                raise RecordStoreError(f"Record store sent invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise RecordStoreError(f"Unexpected {resource} payload from record store")
        return data.get(resource, [])

    async def list_incomes(self, user_id: str) -> List[IncomeEntry]:
        """
        Fetch every income entry for a user.

        Raises:
            RecordStoreError: On timeout, HTTP errors, or invalid records
        """
        records = await self._fetch("incomes", user_id)
        try:
            return [
                IncomeEntry(
                    id=str(rec["id"]),
                    user_id=rec["user_id"],
                    amount=float(rec["amount"]),
                    source=rec["source"],
                    date=date.fromisoformat(rec["date"]),
                )
                for rec in records
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise RecordStoreError(f"Invalid income data from record store: {e}") from e

    async def list_expenses(self, user_id: str) -> List[ExpenseEntry]:
        """
        Fetch every expense entry for a user.

        Raises:
            RecordStoreError: On timeout, HTTP errors, unknown categories, or invalid records
        """
        records = await self._fetch("expenses", user_id)
        try:
            return [
                ExpenseEntry(
                    id=str(rec["id"]),
                    user_id=rec["user_id"],
                    amount=float(rec["amount"]),
                    category=ExpenseCategory(rec["category"]),
                    description=rec.get("description", ""),
                    date=date.fromisoformat(rec["date"]),
                    payment=_parse_payment(rec),
                )
                for rec in records
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise RecordStoreError(f"Invalid expense data from record store: {e}") from e
