"""Unit tests for full purchase simulations and planner insights"""

from dataclasses import replace
from pocket_cfo.domain.models import Feasibility, FinancialProfile, Insight, PurchaseDetails, PurchaseMode, Severity
from pocket_cfo.domain.planner import analyze_emi, calculate_emi
from pocket_cfo.domain.planner_insights import generate_planner_insights
from pocket_cfo.domain.simulation import run_simulation


def _messages(insights, severity=None):
    return [i.message for i in insights if severity is None or i.type == severity]


def _laptop_on_emi() -> PurchaseDetails:
    return PurchaseDetails(
        item_name="Laptop",
        actual_price=120_000,
        mode=PurchaseMode.INSTALLMENT,
        down_payment=0,
        emi_tenure_months=12,
        interest_rate=0,
    )


def test_installment_simulation(profile, as_of):
    result = run_simulation(profile, _laptop_on_emi(), as_of, simulation_id="sim_1")

    assert result.id == "sim_1"
    assert result.created_at == as_of
    assert result.emi_analysis.emi_amount == 10_000
    assert result.emi_analysis.is_affordable is False
    # Savings alternative saves the EMI amount when no extra saving is planned
    assert result.savings_analysis.months_required == 12
    assert result.comparison.break_even_month == 1
    assert result.purchase_score.score == 49
    assert result.purchase_score.feasibility == Feasibility.MODERATE


def test_installment_simulation_insights(profile, as_of):
    insights = run_simulation(profile, _laptop_on_emi(), as_of).insights

    assert insights[0] == Insight(
        Severity.DANGER, "This purchase is not recommended based on your current financial health."
    )
    assert insights[1].type == Severity.INFO
    assert "2.0x your monthly income" in insights[1].message
    assert any("above the safe 40% limit" in m for m in _messages(insights, Severity.DANGER))
    assert "Extending tenure to 18 months reduces EMI to ₹6,667/month." in _messages(insights, Severity.TIP)
    assert "Saving for 12 months avoids ₹14,400 in interest." in _messages(insights, Severity.INFO)
    assert any("0.0 months of emergency fund" in m for m in _messages(insights, Severity.WARNING))
    # EMI already sits at the limit, so no spending cut is suggested
    assert not any(m.startswith("Cut ") for m in _messages(insights))


def test_installment_simulation_uses_planned_extra_saving(profile, as_of):
    saver = replace(profile, extra_saving_per_month=20_000)

    result = run_simulation(saver, _laptop_on_emi(), as_of)

    assert result.savings_analysis.months_required == 6
    assert result.comparison.monthly_burden_savings == 20_000


def test_savings_simulation_compares_against_configured_financing(profile, as_of):
    details = PurchaseDetails(
        item_name="Phone",
        actual_price=60_000,
        mode=PurchaseMode.LUMP_SUM_SAVINGS,
        monthly_saving_for_purchase=10_000,
    )

    result = run_simulation(profile, details, as_of)

    assert result.savings_analysis.months_required == 6
    assert result.emi_analysis.emi_amount == round(calculate_emi(60_000, 12, 12))
    assert result.purchase_score.score == 72
    assert result.purchase_details is details


def test_existing_savings_equal_to_price_buys_outright(profile, as_of):
    rich = replace(profile, existing_savings=60_000)
    details = PurchaseDetails(item_name="Phone", actual_price=60_000, mode=PurchaseMode.SAVE_THEN_BUY)

    result = run_simulation(rich, details, as_of)
    successes = _messages(result.insights, Severity.SUCCESS)

    assert result.savings_analysis.months_required == 0
    assert "You already have enough savings to buy this outright! No EMI or waiting needed." in successes
    assert "Your existing savings cover 100% of the price." in _messages(result.insights, Severity.INFO)
    assert not any("very close" in m for m in successes)


def test_no_disposable_income_is_flagged(profile, as_of):
    broke = replace(profile, monthly_expenses=60_000)

    insights = run_simulation(broke, _laptop_on_emi(), as_of).insights

    assert "Your expenses exceed your income. Focus on reducing expenses before new purchases." in _messages(
        insights, Severity.DANGER
    )
    assert any("0.0 months of emergency fund" in m for m in _messages(insights, Severity.WARNING))


def test_planner_insights_skip_missing_sections(profile):
    details = _laptop_on_emi()

    insights = generate_planner_insights(profile, details, emi_analysis=analyze_emi(profile, details))

    assert insights[0].message.startswith("This item costs 2.0x")
    assert not any("save for this item" in m for m in _messages(insights))
    assert not any(m.startswith("This purchase") for m in _messages(insights))


def test_spending_cut_tip_when_emi_exceeds_limit(profile):
    details = replace(_laptop_on_emi(), actual_price=180_000)

    insights = generate_planner_insights(profile, details, emi_analysis=analyze_emi(profile, details))

    # EMI 15,000 against a 10,000 ceiling (40% of 25,000 disposable)
    assert "Cut ₹5,000/month from discretionary expenses to make this EMI feasible." in _messages(
        insights, Severity.TIP
    )
    assert "EMI burden exceeds 50% — high risk of financial stress and missed payments." in _messages(
        insights, Severity.DANGER
    )


def test_simulation_is_deterministic_with_fixed_id(profile, as_of):
    first = run_simulation(profile, _laptop_on_emi(), as_of, simulation_id="fixed")
    second = run_simulation(profile, _laptop_on_emi(), as_of, simulation_id="fixed")

    assert first == second


def test_save_extra_simulation_compares_with_planned_extra_saving(profile, as_of):
    saver = replace(profile, extra_saving_per_month=10_000)
    details = PurchaseDetails(item_name="Laptop", actual_price=120_000, mode=PurchaseMode.SAVE_THEN_BUY)

    result = run_simulation(saver, details, as_of)

    assert result.savings_analysis.months_required == 12
    assert result.comparison.monthly_burden_savings == 10_000


def test_savings_without_outgoings_count_as_strong_emergency_fund(as_of):
    profile = FinancialProfile(
        monthly_income=50_000,
        monthly_expenses=0,
        monthly_routine_bills=0,
        existing_savings=1_000_000,
        extra_saving_per_month=0,
    )
    details = PurchaseDetails(
        item_name="Phone",
        actual_price=30_000,
        mode=PurchaseMode.LUMP_SUM_SAVINGS,
        monthly_saving_for_purchase=5_000,
    )

    insights = run_simulation(profile, details, as_of).insights

    assert "You have a strong emergency fund — this purchase won't compromise your safety net." in _messages(
        insights, Severity.SUCCESS
    )
    assert not any("months of emergency fund" in m for m in _messages(insights, Severity.WARNING))
