"""Amortisation schedule for an installment-financed purchase"""

from datetime import date
from typing import List

from pocket_cfo.domain.exceptions import InvalidFinancingScheduleError
from pocket_cfo.domain.models import Installment
from pocket_cfo.domain.planner import DEFAULT_TENURE_MONTHS, calculate_emi
from pocket_cfo.utils.date_utils import add_months, months_between
from pocket_cfo.utils.numbers import round_half_up


def schedule_tenure(start_date: date, end_date: date) -> int:
    """
    Installment count for a financing window.

    Raises InvalidFinancingScheduleError unless end_date is after start_date.
    A window shorter than a calendar month still carries one installment.
    """
    if end_date <= start_date:
        raise InvalidFinancingScheduleError(
            f"End date {end_date.isoformat()} must be after start date {start_date.isoformat()}"
        )
    return max(1, months_between(start_date, end_date))


def generate_emi_schedule(
    principal: float,
    annual_rate: float,
    tenure_months: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> List[Installment]:
    """
    Split a financed amount into monthly installments.

    Requirements:
    - Equal installments from the standard EMI formula
    - Each installment split into interest on the running balance and principal
    - Due dates one calendar month apart, the first one month after start_date
    - Last installment absorbs rounding so principal repaid equals the financed amount
    - With end_date given, the tenure is the whole months between start and end

    Args:
        principal: Amount financed (price minus down payment)
        annual_rate: Annual interest rate in percent
        tenure_months: Number of installments (default 12, ignored when end_date is given)
        start_date: Financing start (default: today)
        end_date: Financing end; must be after start_date

    Returns:
        List of Installment rows, empty when nothing is financed

    Example:
        10000 at 0% over 3 months -> 3333.33, 3333.33, 3333.34
    """
    start_date = start_date or date.today()
    if end_date is not None:
        tenure_months = schedule_tenure(start_date, end_date)
    tenure_months = tenure_months or DEFAULT_TENURE_MONTHS

    if principal <= 0 or tenure_months <= 0:
        return []

    emi = round_half_up(calculate_emi(principal, annual_rate, tenure_months), 2)
    monthly_rate = annual_rate / 12 / 100
    balance = round_half_up(principal, 2)

    schedule = []
    for number in range(1, tenure_months + 1):
        interest = round_half_up(balance * monthly_rate, 2)
        if number == tenure_months:
            principal_part = balance
        else:
            principal_part = min(round_half_up(emi - interest, 2), balance)
        balance = round_half_up(balance - principal_part, 2)

        schedule.append(
            Installment(
                number=number,
                due_date=add_months(start_date, number),
                amount=round_half_up(principal_part + interest, 2),
                interest=interest,
                principal=principal_part,
                balance=balance,
            )
        )

    return schedule
