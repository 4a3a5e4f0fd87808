"""Financial health scoring - weighted composite of five behavioural factors"""

import math
from datetime import date
from typing import Sequence

from pocket_cfo.domain.aggregation import get_category_summaries, get_monthly_aggregates, get_yearly_summary
from pocket_cfo.domain.models import (
    CategorySummary,
    ExpenseEntry,
    FinancialHealthScore,
    IncomeEntry,
    MonthlyAggregate,
    YearlySummary,
)
from pocket_cfo.domain.weighting import band, build_factors, composite_score

GRADE_BANDS = [(85, "A"), (70, "B"), (55, "C"), (40, "D")]

DEFAULT_CONSISTENCY_SCORE = 80.0
STABLE_INCOME_SCORE = 80.0
INCOME_MONTH_SCORE = 25.0
NEUTRAL_TREND_SCORE = 50.0


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation over mean; 0 for an empty or zero-mean series"""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    if mean <= 0:
        return 0.0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / mean


def savings_rate_score(yearly: YearlySummary) -> float:
    return yearly.savings_rate * 3.33


def diversity_score(categories: Sequence[CategorySummary]) -> float:
    top_share = categories[0].percentage if categories else 0.0
    return 100 - top_share


def consistency_score(monthly: Sequence[MonthlyAggregate]) -> float:
    spending_months = [m.expenses for m in monthly if m.expenses > 0]
    if len(spending_months) < 2:
        return DEFAULT_CONSISTENCY_SCORE
    return 100 - coefficient_of_variation(spending_months) * 100


def income_stability_score(monthly: Sequence[MonthlyAggregate]) -> float:
    income_months = sum(1 for m in monthly if m.income > 0)
    if income_months >= 3:
        return STABLE_INCOME_SCORE
    return income_months * INCOME_MONTH_SCORE


def trend_score(monthly: Sequence[MonthlyAggregate]) -> float:
    """Latest spending month's savings rate against the one before it"""
    spending_months = [m for m in monthly if m.expenses > 0]
    if len(spending_months) < 2:
        return NEUTRAL_TREND_SCORE
    prev, last = spending_months[-2], spending_months[-1]
    if last.savings_rate > prev.savings_rate:
        return 90.0
    if last.savings_rate < prev.savings_rate:
        return 20.0
    return NEUTRAL_TREND_SCORE


def calculate_health_score(
    monthly: Sequence[MonthlyAggregate],
    categories: Sequence[CategorySummary],
    yearly: YearlySummary,
) -> FinancialHealthScore:
    """
    Score financial health from 0 to 100 and grade it A-F.

    Weights:
    - 35%: Savings rate (yearly rate x 3.33, so 30% saved scores ~100)
    - 20%: Expense diversity (100 - share of the top category)
    - 20%: Spending consistency (100 - CV of monthly expenses x 100)
    - 15%: Income stability (months with income)
    - 10%: Financial trend (last vs previous spending month)

    Every factor is clamped to [0, 100] before weighting.
    """
    factors = build_factors(
        [
            ("Savings Rate", savings_rate_score(yearly), 0.35),
            ("Expense Diversity", diversity_score(categories), 0.2),
            ("Spending Consistency", consistency_score(monthly), 0.2),
            ("Income Stability", income_stability_score(monthly), 0.15),
            ("Financial Trend", trend_score(monthly), 0.1),
        ]
    )
    score = composite_score(factors)
    return FinancialHealthScore(score=score, grade=band(score, GRADE_BANDS, "F"), factors=factors)


def get_financial_health_score(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> FinancialHealthScore:
    """Main entry point: score a user's records as of a given day"""
    as_of = as_of or date.today()
    return calculate_health_score(
        get_monthly_aggregates(incomes, expenses, as_of),
        get_category_summaries(expenses, as_of),
        get_yearly_summary(incomes, expenses, as_of),
    )
