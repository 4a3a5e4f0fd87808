"""Recency-weighted forecasting of the next three months"""

from datetime import date
from typing import List, Sequence

from pocket_cfo.domain.aggregation import active_months
from pocket_cfo.domain.models import MonthlyAggregate, Prediction, ProjectedMonth, Trend
from pocket_cfo.utils.date_utils import month_key, month_label, shift_month
from pocket_cfo.utils.numbers import round_amount, safe_percent

PROJECTION_MONTHS = 3
GROWTH_WINDOW = 3
TREND_BAND_PP = 3.0  # savings-rate change needed before the label moves off "stable"


def _weighted_average(values: Sequence[float]) -> float:
    """sum(value_i * i) / sum(i) with i = 1 for the oldest value"""
    weights = range(1, len(values) + 1)
    return sum(v * w for v, w in zip(values, weights)) / sum(weights)


def _growth(first: float, last: float, window_length: int) -> float:
    """Per-month growth between the first and last month of the window"""
    return (last - first) / max(first, 1) / window_length


def classify_trend(delta_pp: float) -> Trend:
    if delta_pp > TREND_BAND_PP:
        return Trend.IMPROVING
    if delta_pp < -TREND_BAND_PP:
        return Trend.DECLINING
    return Trend.STABLE


def predict(monthly: Sequence[MonthlyAggregate], as_of: date | None = None) -> Prediction:
    """
    Forecast income and expenses from monthly aggregates.

    Needs at least two active months; otherwise returns a zeroed, stable
    prediction with no projection.

    Method:
    - Level: recency-weighted average of every active month
    - Slope: growth between first and last of the last 3 active months
    - Projection for t = 1..3: level * (1 + slope * t), rounded to whole units
    - Trend: savings-rate change across those same last 3 active months, with
      a +/-3pp band so noisy data does not flip the label
    """
    as_of = as_of or date.today()
    active = active_months(monthly)

    if len(active) < 2:
        return Prediction(
            next_month_income=0,
            next_month_expense=0,
            next_month_savings_rate=0.0,
            three_month_projection=[],
            trend=Trend.STABLE,
        )

    avg_income = _weighted_average([m.income for m in active])
    avg_expense = _weighted_average([m.expenses for m in active])

    recent = active[-GROWTH_WINDOW:]
    first, last = recent[0], recent[-1]
    income_growth = _growth(first.income, last.income, len(recent))
    expense_growth = _growth(first.expenses, last.expenses, len(recent))

    year, month_index = month_key(as_of)
    projection: List[ProjectedMonth] = []
    for t in range(1, PROJECTION_MONTHS + 1):
        _, projected_index = shift_month(year, month_index, t)
        income = round_amount(avg_income * (1 + income_growth * t))
        spent = round_amount(avg_expense * (1 + expense_growth * t))
        projection.append(
            ProjectedMonth(
                month=month_label(projected_index),
                income=income,
                expenses=spent,
                savings=income - spent,
            )
        )

    next_month = projection[0]
    return Prediction(
        next_month_income=next_month.income,
        next_month_expense=next_month.expenses,
        next_month_savings_rate=safe_percent(next_month.income - next_month.expenses, next_month.income),
        three_month_projection=projection,
        trend=classify_trend(last.savings_rate - first.savings_rate),
    )
