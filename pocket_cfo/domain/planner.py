"""Purchase feasibility planner - installment vs saving-to-buy"""

import math
from datetime import date
from typing import Optional

from pocket_cfo.config import settings
from pocket_cfo.domain.models import (
    ComparisonData,
    EMIAnalysis,
    Feasibility,
    FinancialProfile,
    PurchaseDetails,
    PurchaseScore,
    SavingsAnalysis,
    SavingsMilestone,
)
from pocket_cfo.domain.weighting import band, build_factors, composite_score
from pocket_cfo.utils.date_utils import add_months
from pocket_cfo.utils.numbers import round_amount, round_half_up, safe_percent

DEFAULT_TENURE_MONTHS = 12
BREAK_EVEN_MIN_HORIZON = 60
BREAK_EVEN_MAX_HORIZON = 600

FEASIBILITY_BANDS = [(65, Feasibility.SAFE), (40, Feasibility.MODERATE)]


def calculate_emi(principal: float, annual_rate: float, tenure_months: int) -> float:
    """
    Equated monthly installment for an amortising loan.

    payment = P * r * (1 + r)^n / ((1 + r)^n - 1), r = annual_rate / 12 / 100.
    A zero rate is a straight split: P / n. A non-positive tenure pays nothing.
    """
    if tenure_months <= 0:
        return 0.0
    if annual_rate == 0:
        return principal / tenure_months
    r = annual_rate / 12 / 100
    growth = (1 + r) ** tenure_months
    return principal * r * growth / (growth - 1)


def _financed_principal(details: PurchaseDetails) -> float:
    return max(0.0, details.actual_price - (details.down_payment or 0))


def analyze_emi(profile: FinancialProfile, details: PurchaseDetails) -> EMIAnalysis:
    """
    Cost and budget impact of buying on installments.

    Burden is the EMI as a share of disposable income (income - expenses -
    routine bills); with no disposable income the burden is 100%.
    Affordable means burden strictly below the configured limit (40%).
    """
    down_payment = details.down_payment or 0
    tenure = details.emi_tenure_months or DEFAULT_TENURE_MONTHS
    principal = _financed_principal(details)

    emi = calculate_emi(principal, details.interest_rate or 0, tenure)
    total_with_interest = emi * tenure + down_payment
    total_interest = max(0.0, emi * tenure - principal)

    disposable = profile.disposable_income
    burden = safe_percent(emi, disposable) if disposable > 0 else 100.0
    new_monthly_savings = disposable - emi

    return EMIAnalysis(
        emi_amount=round_amount(emi),
        total_amount_with_interest=round_amount(total_with_interest),
        total_interest_paid=round_amount(total_interest),
        emi_burden_percent=round_half_up(burden, 1),
        new_savings_rate=round_half_up(safe_percent(new_monthly_savings, profile.monthly_income), 1),
        is_affordable=burden < settings.emi_affordability_limit_percent,
        impact_on_yearly_savings=round_amount(emi * 12),
        disposable_income=round_amount(disposable),
        emi_to_disposable_ratio=round_half_up(emi / max(disposable, 1), 2),
    )


def _monthly_saving(profile: FinancialProfile, details: PurchaseDetails) -> float:
    """Planned saving per month, never below 1 so timelines stay finite"""
    return max(details.monthly_saving_for_purchase or profile.extra_saving_per_month or 1, 1)


def analyze_savings(
    profile: FinancialProfile,
    details: PurchaseDetails,
    as_of: date | None = None,
) -> SavingsAnalysis:
    """
    How long saving up for the item takes.

    Existing savings count towards the price; the accumulation timeline is
    capped for display. Interest avoided assumes the purchase would
    otherwise be financed at the configured annual rate for that long.
    """
    as_of = as_of or date.today()
    monthly_saving = _monthly_saving(profile, details)
    target = max(details.actual_price, 0.0)
    existing = profile.existing_savings
    remaining = max(0.0, target - existing)

    months_required = math.ceil(remaining / monthly_saving) if remaining > 0 else 0
    start = details.start_date or as_of

    timeline = []
    for month in range(min(months_required, settings.savings_timeline_cap_months) + 1):
        accumulated = existing + monthly_saving * month
        timeline.append(
            SavingsMilestone(
                month=month,
                accumulated=min(accumulated, target),
                remaining=max(0.0, target - accumulated),
            )
        )

    avoided_interest = target * settings.assumed_financing_rate_percent / 100 * (months_required / 12)

    return SavingsAnalysis(
        months_required=months_required,
        projected_purchase_date=add_months(start, months_required),
        years_required=round_half_up(months_required / 12, 1),
        is_feasible_within_year=months_required <= 12,
        savings_growth_timeline=timeline,
        delay_benefit_amount=round_amount(avoided_interest),
    )


def find_break_even_month(emi_amount: float, monthly_saving: float, horizon: int) -> int:
    """First month where cumulative saving reaches cumulative installments, 0 if never"""
    paid = saved = 0.0
    for month in range(1, horizon + 1):
        paid += emi_amount
        saved += monthly_saving
        if saved >= paid:
            return month
    return 0


def generate_comparison(
    emi: EMIAnalysis,
    savings: SavingsAnalysis,
    details: PurchaseDetails,
    profile: FinancialProfile,
) -> ComparisonData:
    """
    Side-by-side cost and time of financing against saving first.

    The saving side uses the same monthly contribution as analyze_savings.
    """
    tenure = details.emi_tenure_months or DEFAULT_TENURE_MONTHS
    monthly_saving = details.monthly_saving_for_purchase or profile.extra_saving_per_month or 0
    horizon = min(max(tenure, savings.months_required, BREAK_EVEN_MIN_HORIZON), BREAK_EVEN_MAX_HORIZON)
    break_even = find_break_even_month(emi.emi_amount, monthly_saving, horizon)

    return ComparisonData(
        total_cost_emi=emi.total_amount_with_interest,
        total_cost_savings=details.actual_price,
        time_difference_months=abs(savings.months_required - tenure),
        monthly_burden_emi=emi.emi_amount,
        monthly_burden_savings=round_amount(monthly_saving),
        interest_saved=emi.total_interest_paid,
        break_even_month=break_even or savings.months_required,
    )


# ─── Purchase score ──────────────────────────────────────────


def _affordability(emi: Optional[EMIAnalysis], savings: Optional[SavingsAnalysis]) -> float:
    if emi is not None:
        burden = emi.emi_burden_percent
        if burden < 20:
            return 95
        if burden < 30:
            return 75
        if burden < 40:
            return 55
        if burden < 60:
            return 30
        return 10
    if savings is not None:
        months = savings.months_required
        if months <= 3:
            return 95
        if months <= 6:
            return 80
        if months <= 12:
            return 60
        if months <= 24:
            return 35
        return 15
    return 50


def _savings_impact(profile: FinancialProfile, emi: Optional[EMIAnalysis]) -> float:
    if emi is not None:
        rate = emi.new_savings_rate
    else:
        rate = safe_percent(profile.disposable_income, profile.monthly_income)
    if rate >= 20:
        return 90
    if rate >= 10:
        return 65
    if rate >= 0:
        return 35
    return 10


def _cushion(profile: FinancialProfile) -> float:
    """Existing savings measured in months of disposable income"""
    disposable = profile.disposable_income
    months = profile.existing_savings / disposable if disposable > 0 else 0.0
    if months >= 6:
        return 95
    if months >= 3:
        return 70
    if months >= 1:
        return 40
    return 15


def _time_efficiency(savings: Optional[SavingsAnalysis]) -> float:
    if savings is None:
        return 60
    months = savings.months_required
    if months <= 6:
        return 90
    if months <= 12:
        return 70
    if months <= 24:
        return 45
    return 20


def _debt_risk(emi: Optional[EMIAnalysis]) -> float:
    if emi is None:
        return 90
    if emi.is_affordable:
        return 85
    if emi.emi_burden_percent < 60:
        return 40
    return 10


def calculate_purchase_score(
    profile: FinancialProfile,
    emi_analysis: Optional[EMIAnalysis] = None,
    savings_analysis: Optional[SavingsAnalysis] = None,
) -> PurchaseScore:
    """
    Score a purchase from 0 to 100 and label it safe / moderate / risky.

    Weights:
    - 30%: Affordability (EMI burden, or months to save without an EMI)
    - 25%: Savings impact (savings rate left after the purchase)
    - 20%: Financial cushion (existing savings in months of disposable income)
    - 15%: Time efficiency (months to save)
    - 10%: Debt risk (EMI affordability)
    """
    factors = build_factors(
        [
            ("Affordability", _affordability(emi_analysis, savings_analysis), 0.3),
            ("Savings Impact", _savings_impact(profile, emi_analysis), 0.25),
            ("Financial Cushion", _cushion(profile), 0.2),
            ("Time Efficiency", _time_efficiency(savings_analysis), 0.15),
            ("Debt Risk", _debt_risk(emi_analysis), 0.1),
        ]
    )
    score = composite_score(factors)
    return PurchaseScore(
        score=score,
        feasibility=band(score, FEASIBILITY_BANDS, Feasibility.RISKY),
        factors=factors,
    )
