"""Insight rules scoped to one simulated purchase"""

import math
from dataclasses import dataclass
from typing import List, Optional

from pocket_cfo.config import settings
from pocket_cfo.domain.models import (
    EMIAnalysis,
    FinancialProfile,
    Insight,
    PurchaseDetails,
    PurchaseScore,
    SavingsAnalysis,
    Severity,
)
from pocket_cfo.domain.planner import calculate_emi
from pocket_cfo.domain.rules import Rule, always, evaluate_rules, say
from pocket_cfo.utils.formatting import fmt
from pocket_cfo.utils.numbers import safe_ratio

MAX_SUGGESTED_TENURE = 36
TENURE_STEP_MONTHS = 6


@dataclass(frozen=True)
class PlannerContext:
    profile: FinancialProfile
    details: PurchaseDetails
    emi: Optional[EMIAnalysis]
    savings: Optional[SavingsAnalysis]
    score: Optional[PurchaseScore]

    @property
    def disposable(self) -> float:
        return self.profile.disposable_income

    @property
    def price(self) -> float:
        return self.details.actual_price

    @property
    def price_to_income(self) -> float:
        return self.price / max(self.profile.monthly_income, 1)

    @property
    def emergency_months(self) -> float:
        """
        Existing savings in months of expenses plus bills.

        0 without disposable income; unbounded when savings exist and there are no outgoings.
        """
        if self.disposable <= 0:
            return 0.0
        outgoings = self.profile.monthly_expenses + self.profile.monthly_routine_bills
        if outgoings <= 0 and self.profile.existing_savings > 0:
            return math.inf
        return safe_ratio(self.profile.existing_savings, outgoings)

    @property
    def planned_saving(self) -> float:
        return self.details.monthly_saving_for_purchase or self.profile.extra_saving_per_month or 0


def _has_emi(ctx: PlannerContext) -> bool:
    return ctx.emi is not None


def _has_savings(ctx: PlannerContext) -> bool:
    return ctx.savings is not None


def _emi_unaffordable(ctx: PlannerContext) -> bool:
    return ctx.emi is not None and not ctx.emi.is_affordable


# ─── Multi-branch builders ───────────────────────────────────


def verdict(ctx: PlannerContext) -> List[Insight]:
    if ctx.score.score >= 75:
        return [Insight(Severity.SUCCESS, "This purchase looks financially comfortable for you.")]
    if ctx.score.score >= 50:
        return [Insight(Severity.WARNING, "This purchase is feasible but will stretch your budget. Plan carefully.")]
    return [Insight(Severity.DANGER, "This purchase is not recommended based on your current financial health.")]


def price_to_income(ctx: PlannerContext) -> List[Insight]:
    ratio = ctx.price_to_income
    if ratio > 6:
        return [Insight(
            Severity.DANGER,
            f"This item costs {ratio:.1f}x your monthly income — a significant financial commitment.",
        )]
    if ratio > 3:
        return [Insight(Severity.WARNING, f"At {ratio:.1f}x your monthly income, this requires careful planning.")]
    return [Insight(Severity.INFO, f"This item costs {ratio:.1f}x your monthly income — relatively manageable.")]


def emi_verdict(ctx: PlannerContext) -> List[Insight]:
    if ctx.emi.is_affordable:
        return [Insight(Severity.SUCCESS, "You can afford this EMI comfortably.")]
    return [Insight(
        Severity.DANGER,
        f"This EMI takes {ctx.emi.emi_burden_percent:.0f}% of your disposable income — "
        f"above the safe {settings.emi_affordability_limit_percent:.0f}% limit.",
    )]


def longer_tenure_tip(ctx: PlannerContext) -> List[Insight]:
    longer = ctx.details.emi_tenure_months + TENURE_STEP_MONTHS
    principal = max(0.0, ctx.price - (ctx.details.down_payment or 0))
    new_emi = calculate_emi(principal, ctx.details.interest_rate or 0, longer)
    return [Insight(
        Severity.TIP,
        f"Extending tenure to {longer} months reduces EMI to {fmt(new_emi)}/month.",
    )]


def down_payment_tip(ctx: PlannerContext) -> List[Insight]:
    suggested = min(ctx.profile.existing_savings * 0.5, ctx.price * 0.5)
    return [Insight(
        Severity.TIP,
        f"Increasing down payment to {fmt(suggested)} would significantly reduce your EMI.",
    )]


def savings_verdict(ctx: PlannerContext) -> List[Insight]:
    months = ctx.savings.months_required
    if ctx.savings.is_feasible_within_year:
        return [Insight(Severity.SUCCESS, f"You can save for this item in {months} months — completely interest-free!")]
    return [Insight(
        Severity.WARNING,
        f"Saving requires {months} months ({ctx.savings.years_required} years) — consider if you can wait that long.",
    )]


def boost_savings_tip(ctx: PlannerContext) -> List[Insight]:
    boost = round(ctx.planned_saving * 0.5)
    boosted_months = math.ceil(
        max(0.0, ctx.price - ctx.profile.existing_savings) / (ctx.planned_saving + boost)
    )
    return [Insight(
        Severity.TIP,
        f"Increase savings by {fmt(boost)}/month to reduce timeline to {boosted_months} months.",
    )]


def emergency_fund(ctx: PlannerContext) -> List[Insight]:
    months = ctx.emergency_months
    if months < 3:
        return [Insight(
            Severity.WARNING,
            f"You only have {months:.1f} months of emergency fund. Build this up before large purchases.",
        )]
    if months >= 6:
        return [Insight(
            Severity.SUCCESS,
            "You have a strong emergency fund — this purchase won't compromise your safety net.",
        )]
    return []


def _cut_needed(ctx: PlannerContext) -> float:
    """Monthly spending cut that would bring the EMI down to the affordability limit"""
    return ctx.emi.emi_amount - ctx.disposable * settings.emi_affordability_limit_percent / 100


# ─── The rule bank, in presentation order ────────────────────

PLANNER_RULES: List[Rule[PlannerContext]] = [
    # Overall verdict
    Rule("verdict", lambda ctx: ctx.score is not None, verdict),
    Rule("verdict", always, price_to_income),
    # Installment
    Rule("emi", _has_emi, emi_verdict),
    Rule("emi", lambda ctx: _has_emi(ctx) and ctx.emi.new_savings_rate < 15, say(
        Severity.WARNING,
        lambda ctx: f"This EMI will reduce your savings rate below 15% to {ctx.emi.new_savings_rate:.1f}%.",
    )),
    Rule("emi", lambda ctx: _has_emi(ctx) and ctx.emi.new_savings_rate < 0, say(
        Severity.DANGER,
        lambda ctx: "Taking this EMI will push you into negative savings — you'll be spending more than you earn.",
    )),
    Rule("emi", lambda ctx: _has_emi(ctx) and ctx.emi.total_interest_paid > 0, say(
        Severity.INFO,
        lambda ctx: f"You'll pay {fmt(ctx.emi.total_interest_paid)} extra in interest over the EMI period.",
    )),
    Rule("emi", lambda ctx: _has_emi(ctx) and ctx.emi.impact_on_yearly_savings > 0, say(
        Severity.WARNING,
        lambda ctx: f"This EMI will reduce your yearly savings by {fmt(ctx.emi.impact_on_yearly_savings)}.",
    )),
    Rule("emi", lambda ctx: _has_emi(ctx) and ctx.emi.emi_burden_percent > 50, say(
        Severity.DANGER,
        lambda ctx: "EMI burden exceeds 50% — high risk of financial stress and missed payments.",
    )),
    Rule("emi", lambda ctx: _has_emi(ctx) and ctx.emi.emi_burden_percent <= 25, say(
        Severity.SUCCESS,
        lambda ctx: "EMI burden is under 25% — a comfortable and sustainable debt level.",
    )),
    Rule("emi", lambda ctx: _emi_unaffordable(ctx)
         and bool(ctx.details.emi_tenure_months)
         and ctx.details.emi_tenure_months < MAX_SUGGESTED_TENURE, longer_tenure_tip),
    Rule("emi", lambda ctx: _emi_unaffordable(ctx)
         and ctx.profile.existing_savings > (ctx.details.down_payment or 0), down_payment_tip),
    # Saving up
    Rule("savings", _has_savings, savings_verdict),
    Rule("savings", lambda ctx: _has_savings(ctx) and _has_emi(ctx) and ctx.savings.delay_benefit_amount > 0, say(
        Severity.INFO,
        lambda ctx: f"Saving for {ctx.savings.months_required} months avoids "
                    f"{fmt(ctx.savings.delay_benefit_amount)} in interest.",
    )),
    Rule("savings", lambda ctx: _has_savings(ctx) and ctx.savings.months_required > 36, say(
        Severity.DANGER,
        lambda ctx: "Saving for 3+ years is impractical. Consider EMI with a higher down payment instead.",
    )),
    Rule("savings", lambda ctx: _has_savings(ctx) and 0 < ctx.savings.months_required <= 3, say(
        Severity.SUCCESS,
        lambda ctx: f"You're very close! Just {ctx.savings.months_required} more month(s) of saving "
                    "and you can buy outright.",
    )),
    Rule("savings", lambda ctx: _has_savings(ctx)
         and ctx.savings.months_required > 12
         and ctx.planned_saving > 0, boost_savings_tip),
    Rule("savings", lambda ctx: _has_savings(ctx) and ctx.profile.existing_savings >= ctx.price, say(
        Severity.SUCCESS,
        lambda ctx: "You already have enough savings to buy this outright! No EMI or waiting needed.",
    )),
    Rule("savings", lambda ctx: _has_savings(ctx)
         and ctx.price > 0
         and ctx.profile.existing_savings >= ctx.price * 0.5, say(
        Severity.INFO,
        lambda ctx: f"Your existing savings cover {round(ctx.profile.existing_savings / ctx.price * 100)}% "
                    "of the price.",
    )),
    # General risk
    Rule("risk", lambda ctx: ctx.disposable <= 0, say(
        Severity.DANGER,
        lambda ctx: "Your expenses exceed your income. Focus on reducing expenses before new purchases.",
    )),
    Rule("risk", always, emergency_fund),
    Rule("risk", lambda ctx: ctx.score is not None and ctx.score.score < 50, say(
        Severity.TIP,
        lambda ctx: "Delay by 6 months for better financial stability before committing.",
    )),
    Rule("risk", lambda ctx: _emi_unaffordable(ctx) and _cut_needed(ctx) > 0, say(
        Severity.TIP,
        lambda ctx: f"Cut {fmt(_cut_needed(ctx))}/month from discretionary expenses to make this EMI feasible.",
    )),
    Rule("risk", lambda ctx: ctx.disposable > 0 and ctx.price > 0, say(
        Severity.INFO,
        lambda ctx: "With normal saving alone (no extra effort), this purchase would take "
                    f"{ctx.price / (ctx.disposable * 12):.1f} years.",
    )),
]


def generate_planner_insights(
    profile: FinancialProfile,
    details: PurchaseDetails,
    emi_analysis: Optional[EMIAnalysis] = None,
    savings_analysis: Optional[SavingsAnalysis] = None,
    purchase_score: Optional[PurchaseScore] = None,
) -> List[Insight]:
    """Ordered insights for one simulated purchase; sections without their analysis are skipped"""
    ctx = PlannerContext(
        profile=profile,
        details=details,
        emi=emi_analysis,
        savings=savings_analysis,
        score=purchase_score,
    )
    return evaluate_rules(ctx, PLANNER_RULES)
