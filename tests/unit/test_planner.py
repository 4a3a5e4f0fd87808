"""Unit tests for the purchase feasibility planner"""

import pytest
from dataclasses import replace
from datetime import date
from pocket_cfo.domain.models import Feasibility, PurchaseDetails, PurchaseMode
from pocket_cfo.domain.planner import (
    analyze_emi,
    analyze_savings,
    calculate_emi,
    calculate_purchase_score,
    find_break_even_month,
    generate_comparison,
)


def _installment(price=120_000, **kwargs) -> PurchaseDetails:
    fields = dict(down_payment=0, emi_tenure_months=12, interest_rate=0)
    fields.update(kwargs)
    return PurchaseDetails(item_name="Laptop", actual_price=price, mode=PurchaseMode.INSTALLMENT, **fields)


def _saving(price=60_000, **kwargs) -> PurchaseDetails:
    return PurchaseDetails(item_name="Phone", actual_price=price, mode=PurchaseMode.LUMP_SUM_SAVINGS, **kwargs)


def test_calculate_emi_zero_rate_is_straight_split():
    assert calculate_emi(120_000, 0, 12) == 120_000 / 12
    assert calculate_emi(1_000, 0, 3) == 1_000 / 3


def test_calculate_emi_amortising():
    assert calculate_emi(100_000, 12, 12) == pytest.approx(8_884.88, abs=0.01)


def test_calculate_emi_non_positive_tenure():
    assert calculate_emi(50_000, 10, 0) == 0


def test_analyze_emi_burden_exactly_at_limit_is_not_affordable(profile):
    """Disposable 25,000; EMI 10,000 is a 40% burden, and the limit is strict"""
    emi = analyze_emi(profile, _installment())

    assert emi.emi_amount == 10_000
    assert emi.disposable_income == 25_000
    assert emi.emi_burden_percent == 40.0
    assert emi.is_affordable is False
    assert emi.total_interest_paid == 0
    assert emi.total_amount_with_interest == 120_000
    assert emi.impact_on_yearly_savings == 120_000
    assert emi.emi_to_disposable_ratio == 0.4
    assert emi.new_savings_rate == 25.0


def test_analyze_emi_just_below_limit_is_affordable(profile):
    emi = analyze_emi(profile, _installment(price=119_988))

    assert emi.emi_amount == 9_999
    assert emi.is_affordable is True


def test_analyze_emi_with_down_payment_and_interest(profile):
    emi = analyze_emi(profile, _installment(price=120_000, down_payment=20_000, interest_rate=12))

    assert emi.emi_amount == 8_885
    assert emi.total_interest_paid == round(8_884.88 * 12 - 100_000)
    assert emi.total_amount_with_interest == round(8_884.88 * 12 + 20_000)


def test_analyze_emi_without_disposable_income_is_full_burden(profile):
    broke = replace(profile, monthly_expenses=55_000)

    emi = analyze_emi(broke, _installment())

    assert emi.emi_burden_percent == 100
    assert emi.is_affordable is False
    assert emi.emi_to_disposable_ratio == 10_000.0


def test_analyze_emi_defaults_tenure_and_rate(profile):
    details = PurchaseDetails(item_name="TV", actual_price=24_000, mode=PurchaseMode.INSTALLMENT)

    assert analyze_emi(profile, details).emi_amount == 2_000


def test_analyze_savings_existing_covers_price(profile, as_of):
    rich = replace(profile, existing_savings=60_000)

    savings = analyze_savings(rich, _saving(monthly_saving_for_purchase=5_000), as_of)

    assert savings.months_required == 0
    assert savings.projected_purchase_date == as_of
    assert savings.delay_benefit_amount == 0
    assert len(savings.savings_growth_timeline) == 1


def test_analyze_savings_timeline(profile, as_of):
    savings = analyze_savings(profile, _saving(monthly_saving_for_purchase=10_000), as_of)

    assert savings.months_required == 6
    assert savings.projected_purchase_date == date(2024, 12, 15)
    assert savings.years_required == 0.5
    assert savings.is_feasible_within_year is True
    assert savings.delay_benefit_amount == 3_600
    assert savings.savings_growth_timeline[-1].accumulated == 60_000
    assert savings.savings_growth_timeline[-1].remaining == 0


def test_analyze_savings_uses_start_date(profile, as_of):
    details = _saving(monthly_saving_for_purchase=10_000, start_date=date(2025, 1, 31))

    assert analyze_savings(profile, details, as_of).projected_purchase_date == date(2025, 7, 31)


def test_analyze_savings_without_plan_saves_one_unit_a_month(profile, as_of):
    savings = analyze_savings(profile, _saving(price=100), as_of)

    assert savings.months_required == 100
    assert savings.is_feasible_within_year is False
    assert len(savings.savings_growth_timeline) == 61


def test_find_break_even_month():
    assert find_break_even_month(10_000, 10_000, 60) == 1
    assert find_break_even_month(10_000, 5_000, 60) == 0


def test_comparison_falls_back_to_savings_months(profile, as_of):
    details = _installment(monthly_saving_for_purchase=5_000)
    emi = analyze_emi(profile, details)
    savings = analyze_savings(profile, details, as_of)

    comparison = generate_comparison(emi, savings, details, profile)

    assert savings.months_required == 24
    assert comparison.break_even_month == 24
    assert comparison.time_difference_months == 12
    assert comparison.monthly_burden_emi == 10_000
    assert comparison.monthly_burden_savings == 5_000
    assert comparison.total_cost_savings == 120_000


def test_comparison_uses_extra_saving_when_no_purchase_saving_set(profile, as_of):
    saver = replace(profile, extra_saving_per_month=10_000)
    details = PurchaseDetails(item_name="Laptop", actual_price=120_000, mode=PurchaseMode.SAVE_THEN_BUY)
    emi = analyze_emi(saver, _installment())
    savings = analyze_savings(saver, details, as_of)

    comparison = generate_comparison(emi, savings, details, saver)

    assert savings.months_required == 12
    assert comparison.monthly_burden_savings == 10_000
    assert comparison.break_even_month == 1


def test_purchase_score_installment(profile, as_of):
    details = _installment()
    emi = analyze_emi(profile, details)
    savings = analyze_savings(profile, replace(details, monthly_saving_for_purchase=10_000), as_of)

    score = calculate_purchase_score(profile, emi, savings)

    # 30*.3 + 90*.25 + 15*.2 + 70*.15 + 40*.1
    assert score.score == 49
    assert score.feasibility == Feasibility.MODERATE
    assert sum(f.weight for f in score.factors) == pytest.approx(1.0)


def test_purchase_score_savings_only(profile, as_of):
    savings = analyze_savings(profile, _saving(price=50_000, monthly_saving_for_purchase=10_000), as_of)

    score = calculate_purchase_score(profile, None, savings)

    # 80*.3 + 90*.25 + 15*.2 + 90*.15 + 90*.1
    assert score.score == 72
    assert score.feasibility == Feasibility.SAFE


def test_purchase_score_without_analyses_is_bounded(profile):
    score = calculate_purchase_score(replace(profile, monthly_income=0, monthly_expenses=0, monthly_routine_bills=0))

    assert 0 <= score.score <= 100
    assert score.feasibility in set(Feasibility)
