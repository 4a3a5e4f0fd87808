"""Financing facility lifecycle - create, track status, pay installments"""

import uuid
from dataclasses import replace
from datetime import date
from typing import Iterable, Tuple

from pocket_cfo.domain.exceptions import FacilityAlreadyPaidError, FacilityNotFoundError
from pocket_cfo.domain.installments import schedule_tenure
from pocket_cfo.domain.models import (
    ExpenseCategory,
    ExpenseEntry,
    FacilityStatus,
    FinancingFacility,
    PaymentMetadata,
)
from pocket_cfo.utils.date_utils import add_months


def create_facility(
    user_id: str,
    name: str,
    total_amount: float,
    emi_amount: float,
    start_date: date,
    end_date: date,
    facility_id: str | None = None,
) -> FinancingFacility:
    """
    Open a facility with nothing repaid yet.

    Duration is whole months between the dates; at least one installment is
    due, the first one month after start_date.
    """
    duration = schedule_tenure(start_date, end_date)
    return FinancingFacility(
        id=facility_id or str(uuid.uuid4()),
        user_id=user_id,
        name=name,
        total_amount=total_amount,
        emi_amount=emi_amount,
        remaining_amount=total_amount,
        start_date=start_date,
        end_date=end_date,
        next_due_date=add_months(start_date, 1),
        duration_months=duration,
        total_emis=duration,
    )


def facility_status(facility: FinancingFacility, as_of: date | None = None) -> FacilityStatus:
    as_of = as_of or date.today()
    if facility.remaining_amount <= 0:
        return FacilityStatus.COMPLETED
    if as_of > facility.end_date:
        return FacilityStatus.OVERDUE
    return FacilityStatus.ACTIVE


def find_facility(facilities: Iterable[FinancingFacility], user_id: str, facility_id: str) -> FinancingFacility:
    for facility in facilities:
        if facility.id == facility_id and facility.user_id == user_id:
            return facility
    raise FacilityNotFoundError(f"Facility {facility_id} not found for user {user_id}")


def pay_installment(
    facility: FinancingFacility,
    as_of: date | None = None,
    expense_id: str | None = None,
) -> Tuple[FinancingFacility, ExpenseEntry]:
    """
    Record one installment payment.

    Flow:
    1. Reject facilities with nothing left to repay
    2. Reduce the balance by one EMI (never below zero), advance the due date a month
    3. Return the updated facility and the Bills expense the caller appends to the record store

    Overdue facilities still accept payments.
    """
    as_of = as_of or date.today()
    if facility_status(facility, as_of) == FacilityStatus.COMPLETED:
        raise FacilityAlreadyPaidError(f"Facility {facility.id} is already fully paid")

    updated = replace(
        facility,
        remaining_amount=max(0.0, facility.remaining_amount - facility.emi_amount),
        completed_emis=facility.completed_emis + 1,
        next_due_date=add_months(facility.next_due_date, 1),
    )
    expense = ExpenseEntry(
        id=expense_id or str(uuid.uuid4()),
        user_id=facility.user_id,
        amount=facility.emi_amount,
        category=ExpenseCategory.BILLS,
        description=f"EMI – {facility.name}",
        date=as_of,
        payment=PaymentMetadata(method="Manual", status="Completed", payment_type="EMI"),
    )
    return updated, expense
