"""Full purchase simulation - chosen mode, its alternative, score and insights"""

import uuid
from dataclasses import replace
from datetime import date

from pocket_cfo.config import settings
from pocket_cfo.domain.models import FinancialProfile, PurchaseDetails, PurchaseMode, SimulationResult
from pocket_cfo.domain.planner import (
    analyze_emi,
    analyze_savings,
    calculate_purchase_score,
    generate_comparison,
)
from pocket_cfo.domain.planner_insights import generate_planner_insights


def run_simulation(
    profile: FinancialProfile,
    details: PurchaseDetails,
    as_of: date | None = None,
    simulation_id: str | None = None,
) -> SimulationResult:
    """
    Main entry point: analyse a purchase in the chosen mode plus its alternative.

    Flow:
    1. Analyse the chosen mode
    2. Analyse the other mode for comparison:
       - installments -> saving up at the planned extra saving (or the EMI amount)
       - saving up -> financing at the configured comparison tenure and rate
    3. Compare both
    4. Score the purchase; an EMI only counts when the user chose installments
    5. Generate planner insights over both analyses
    """
    as_of = as_of or date.today()

    if details.mode == PurchaseMode.INSTALLMENT:
        emi_analysis = analyze_emi(profile, details)
        savings_details = replace(
            details,
            mode=PurchaseMode.LUMP_SUM_SAVINGS,
            monthly_saving_for_purchase=profile.extra_saving_per_month or emi_analysis.emi_amount,
        )
        savings_analysis = analyze_savings(profile, savings_details, as_of)
        comparison = generate_comparison(emi_analysis, savings_analysis, savings_details, profile)
        purchase_score = calculate_purchase_score(profile, emi_analysis, savings_analysis)
    else:
        savings_analysis = analyze_savings(profile, details, as_of)
        emi_details = replace(
            details,
            mode=PurchaseMode.INSTALLMENT,
            emi_tenure_months=settings.comparison_tenure_months,
            interest_rate=settings.assumed_financing_rate_percent,
        )
        emi_analysis = analyze_emi(profile, emi_details)
        comparison = generate_comparison(emi_analysis, savings_analysis, emi_details, profile)
        purchase_score = calculate_purchase_score(profile, None, savings_analysis)

    insights = generate_planner_insights(profile, details, emi_analysis, savings_analysis, purchase_score)

    return SimulationResult(
        id=simulation_id or str(uuid.uuid4()),
        created_at=as_of,
        financial_profile=profile,
        purchase_details=details,
        emi_analysis=emi_analysis,
        savings_analysis=savings_analysis,
        comparison=comparison,
        purchase_score=purchase_score,
        insights=insights,
    )
