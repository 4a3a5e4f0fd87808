"""POST /v1/planner/* - purchase simulation and financing schedules"""

import time
import logging
from fastapi import APIRouter, HTTPException, Request

from pocket_cfo.api.v1.schemas import (
    ScheduleRequest,
    ScheduleResponse,
    SimulationRequest,
    SimulationResponse,
)
from pocket_cfo.api.dependencies import get_request_id
from pocket_cfo.domain.simulation import run_simulation
from pocket_cfo.domain.installments import generate_emi_schedule
from pocket_cfo.domain.exceptions import PlannerValidationError
from pocket_cfo.infrastructure.observability.metrics import record_insights, record_simulation
from pocket_cfo.infrastructure.observability.logging import log_computation
from pocket_cfo.utils.numbers import round_half_up

router = APIRouter()


@router.post("/planner/simulate", response_model=SimulationResponse)
def simulate_purchase(request_body: SimulationRequest, request: Request):
    """
    Evaluate a purchase against the user's monthly finances.

    Flow:
    1. Analyse the chosen mode and its alternative
    2. Compare, score and generate planner insights
    3. Record metrics and logs
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = run_simulation(
            request_body.profile.to_domain(),
            request_body.purchase.to_domain(),
            as_of=request_body.as_of,
        )
    except PlannerValidationError as e:
        logging.warning(f"Invalid simulation: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_simulation(result.purchase_details.mode.value, result.purchase_score.feasibility.value)
    record_insights(result.insights)
    log_computation(
        request_id,
        "simulation",
        (time.time() - start_time) * 1000,
        simulation_id=result.id,
        mode=result.purchase_details.mode.value,
        purchase_score=result.purchase_score.score,
        feasibility=result.purchase_score.feasibility.value,
        insight_count=len(result.insights),
    )

    return SimulationResponse(simulation=result)


@router.post("/planner/schedule", response_model=ScheduleResponse)
def create_schedule(request_body: ScheduleRequest, request: Request):
    """
    Month-by-month amortisation of a financing option.

    Rejects an end_date that is not after start_date with 422.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        installments = generate_emi_schedule(
            request_body.principal,
            request_body.annual_rate,
            tenure_months=request_body.tenure_months,
            start_date=request_body.start_date,
            end_date=request_body.end_date,
        )
    except PlannerValidationError as e:
        logging.warning(f"Invalid schedule: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    log_computation(
        request_id,
        "schedule",
        (time.time() - start_time) * 1000,
        tenure_months=len(installments),
    )

    return ScheduleResponse(
        tenure_months=len(installments),
        total_paid=round_half_up(sum(inst.amount for inst in installments), 2),
        total_interest=round_half_up(sum(inst.interest for inst in installments), 2),
        installments=installments,
    )
