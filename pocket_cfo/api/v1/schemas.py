"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional

from pocket_cfo.domain.models import (
    Dashboard,
    FinancialProfile,
    Insight,
    Installment,
    PurchaseDetails,
    PurchaseMode,
    SimulationResult,
)


class FinancialProfileSchema(BaseModel):
    """Monthly money picture the planner evaluates a purchase against"""

    monthly_income: float = Field(..., ge=0, description="Monthly income")
    monthly_expenses: float = Field(0, ge=0, description="Monthly discretionary expenses")
    monthly_routine_bills: float = Field(0, ge=0, description="Fixed monthly bills")
    existing_savings: float = Field(0, ge=0, description="Savings already set aside")
    extra_saving_per_month: float = Field(0, ge=0, description="Extra saving the user can commit per month")

    def to_domain(self) -> FinancialProfile:
        return FinancialProfile(**self.model_dump())


class PurchaseSchema(BaseModel):
    """Item being considered and how the user wants to pay for it"""

    item_name: str = Field(..., min_length=1)
    actual_price: float = Field(..., gt=0)
    mode: PurchaseMode
    down_payment: Optional[float] = Field(None, ge=0)
    emi_tenure_months: Optional[int] = Field(None, gt=0)
    interest_rate: Optional[float] = Field(None, ge=0, description="Annual rate in percent")
    start_date: Optional[date] = None
    monthly_saving_for_purchase: Optional[float] = Field(None, ge=0)

    def to_domain(self) -> PurchaseDetails:
        return PurchaseDetails(**self.model_dump())


class SimulationRequest(BaseModel):
    """Request body for POST /v1/planner/simulate"""

    profile: FinancialProfileSchema
    purchase: PurchaseSchema
    as_of: Optional[date] = None


class ScheduleRequest(BaseModel):
    """Request body for POST /v1/planner/schedule"""

    principal: float = Field(..., ge=0, description="Amount financed")
    annual_rate: float = Field(0, ge=0, description="Annual rate in percent")
    tenure_months: Optional[int] = Field(None, gt=0)
    start_date: date
    end_date: Optional[date] = None


class DashboardResponse(BaseModel):
    """Response for GET /v1/users/{user_id}/dashboard"""

    user_id: str
    dashboard: Dashboard


class InsightsResponse(BaseModel):
    """Response for GET /v1/users/{user_id}/insights"""

    user_id: str
    as_of: date
    insights: List[Insight]


class SimulationResponse(BaseModel):
    """Response for POST /v1/planner/simulate"""

    simulation: SimulationResult


class ScheduleResponse(BaseModel):
    """Response for POST /v1/planner/schedule"""

    tenure_months: int
    total_paid: float
    total_interest: float
    installments: List[Installment]
