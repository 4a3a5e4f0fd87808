"""GET /v1/users/{user_id}/dashboard and /insights - analytics over a user's records"""

import time
import logging
from datetime import date
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Request

from pocket_cfo.api.v1.schemas import DashboardResponse, InsightsResponse
from pocket_cfo.api.dependencies import get_records_client, get_request_id
from pocket_cfo.infrastructure.clients.records import RecordStoreClient
from pocket_cfo.domain.dashboard import build_dashboard
from pocket_cfo.domain.insights import generate_insights
from pocket_cfo.domain.models import ExpenseEntry, IncomeEntry
from pocket_cfo.domain.exceptions import RecordStoreError
from pocket_cfo.infrastructure.observability.metrics import (
    record_health,
    record_insights,
    records_fetch_failures_counter,
)
from pocket_cfo.infrastructure.observability.logging import log_computation

router = APIRouter()


async def _load_records(
    records_client: RecordStoreClient,
    user_id: str,
    request_id: str,
) -> Tuple[List[IncomeEntry], List[ExpenseEntry]]:
    try:
        incomes = await records_client.list_incomes(user_id)
        expenses = await records_client.list_expenses(user_id)
    except RecordStoreError as e:
        records_fetch_failures_counter.inc()
        logging.error(f"Record store error: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(status_code=503, detail="Record store unavailable")
    return incomes, expenses


@router.get("/users/{user_id}/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user_id: str,
    request: Request,
    as_of: Optional[date] = None,
    records_client: RecordStoreClient = Depends(get_records_client),
):
    """
    Every analytics view for a user at one evaluation date.

    Flow:
    1. Fetch income and expense records from the record store
    2. Aggregate, forecast, score health and generate insights for as_of (default today)
    3. Record metrics and logs
    """
    start_time = time.time()
    request_id = get_request_id(request)
    incomes, expenses = await _load_records(records_client, user_id, request_id)

    try:
        dashboard = build_dashboard(incomes, expenses, as_of)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_health(dashboard.health.grade)
    record_insights(dashboard.insights)
    log_computation(
        request_id,
        "dashboard",
        (time.time() - start_time) * 1000,
        user_id=user_id,
        income_count=len(incomes),
        expense_count=len(expenses),
        health_score=dashboard.health.score,
        health_grade=dashboard.health.grade,
        insight_count=len(dashboard.insights),
    )

    return DashboardResponse(user_id=user_id, dashboard=dashboard)


@router.get("/users/{user_id}/insights", response_model=InsightsResponse)
async def get_insights(
    user_id: str,
    request: Request,
    as_of: Optional[date] = None,
    records_client: RecordStoreClient = Depends(get_records_client),
):
    """Ordered insight list for a user; a single welcome insight when there are no records"""
    start_time = time.time()
    request_id = get_request_id(request)
    as_of = as_of or date.today()
    incomes, expenses = await _load_records(records_client, user_id, request_id)

    try:
        insights = generate_insights(incomes, expenses, as_of)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_insights(insights)
    log_computation(
        request_id,
        "insights",
        (time.time() - start_time) * 1000,
        user_id=user_id,
        income_count=len(incomes),
        expense_count=len(expenses),
        insight_count=len(insights),
    )

    return InsightsResponse(user_id=user_id, as_of=as_of, insights=insights)
