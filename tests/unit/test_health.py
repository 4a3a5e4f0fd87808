"""Unit tests for financial health scoring and the weighted-factor evaluator"""

import pytest
from datetime import date
from pocket_cfo.domain.aggregation import get_monthly_aggregates
from pocket_cfo.domain.health import (
    coefficient_of_variation,
    consistency_score,
    get_financial_health_score,
    income_stability_score,
    trend_score,
)
from pocket_cfo.domain.models import ExpenseCategory, ScoreFactor
from pocket_cfo.domain.weighting import band, build_factors, composite_score


def test_health_score_without_records_is_neutral(as_of):
    """Savings 0, diversity 100, consistency 80, income 0, trend 50"""
    health = get_financial_health_score([], [], as_of)

    assert health.score == 41
    assert health.grade == "D"
    assert [f.label for f in health.factors] == [
        "Savings Rate",
        "Expense Diversity",
        "Spending Consistency",
        "Income Stability",
        "Financial Trend",
    ]


def test_health_score_is_bounded_and_graded(sample_incomes, sample_expenses, as_of):
    health = get_financial_health_score(sample_incomes, sample_expenses, as_of)

    assert 0 <= health.score <= 100
    assert all(0 <= f.score <= 100 for f in health.factors)
    assert health.grade == band(health.score, [(85, "A"), (70, "B"), (55, "C"), (40, "D")], "F")


def test_health_score_clamps_negative_savings_rate(make_income, make_expense, as_of):
    health = get_financial_health_score(
        [make_income(1_000, as_of)], [make_expense(5_000, as_of, ExpenseCategory.SHOPPING)], as_of
    )

    assert health.factors[0].score == 0
    assert health.factors[1].score == 0  # one category holds 100%


def test_coefficient_of_variation():
    assert coefficient_of_variation([]) == 0
    assert coefficient_of_variation([0, 0]) == 0
    assert coefficient_of_variation([10, 10, 10]) == 0
    assert coefficient_of_variation([5, 15]) == pytest.approx(0.5)


def test_consistency_score_needs_two_spending_months(make_expense, as_of):
    monthly = get_monthly_aggregates([], [make_expense(100, as_of)], as_of)

    assert consistency_score(monthly) == 80


def test_income_stability_score(make_income, as_of):
    two_months = get_monthly_aggregates(
        [make_income(1, date(2024, 5, 1)), make_income(1, date(2024, 6, 1))], [], as_of
    )
    three_months = get_monthly_aggregates(
        [make_income(1, date(2024, month, 1)) for month in (4, 5, 6)], [], as_of
    )

    assert income_stability_score(two_months) == 50
    assert income_stability_score(three_months) == 80


def test_trend_score_compares_last_two_spending_months(make_income, make_expense, as_of):
    incomes = [make_income(10_000, date(2024, 5, 1)), make_income(10_000, date(2024, 6, 1))]
    improving = get_monthly_aggregates(
        incomes, [make_expense(8_000, date(2024, 5, 2)), make_expense(4_000, date(2024, 6, 2))], as_of
    )
    worsening = get_monthly_aggregates(
        incomes, [make_expense(4_000, date(2024, 5, 2)), make_expense(8_000, date(2024, 6, 2))], as_of
    )

    assert trend_score(improving) == 90
    assert trend_score(worsening) == 20
    assert trend_score(get_monthly_aggregates([], [], as_of)) == 50


def test_build_factors_clamps_scores():
    factors = build_factors([("High", 140, 0.5), ("Low", -20, 0.5)])

    assert [f.score for f in factors] == [100, 0]


def test_build_factors_rejects_weights_not_summing_to_one():
    with pytest.raises(ValueError):
        build_factors([("Only", 50, 0.7)])


def test_composite_score_rounds_half_up():
    factors = [ScoreFactor("A", 51, 0.5), ScoreFactor("B", 50, 0.5)]

    assert composite_score(factors) == 51


def test_band_falls_back_below_lowest_bound():
    bands = [(65, "safe"), (40, "moderate")]

    assert band(65, bands, "risky") == "safe"
    assert band(40, bands, "risky") == "moderate"
    assert band(39.9, bands, "risky") == "risky"
