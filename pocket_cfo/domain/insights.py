"""
Rule-based insight generator.

The rule bank is an ordered list of (group, predicate, builder) entries.
Every rule is evaluated on every call and may emit any number of insights;
output order is the declaration order below, which puts structural findings
first and generic tips last. The only short-circuit is "no records at all".
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

from pocket_cfo.domain.aggregation import (
    active_months,
    get_category_summaries,
    get_current_month_stats,
    get_monthly_aggregates,
    get_yearly_summary,
)
from pocket_cfo.domain.forecasting import predict
from pocket_cfo.domain.health import calculate_health_score, coefficient_of_variation
from pocket_cfo.domain.models import (
    CategorySummary,
    CurrentMonthStats,
    ExpenseCategory,
    ExpenseEntry,
    FinancialHealthScore,
    IncomeEntry,
    Insight,
    MonthlyAggregate,
    Prediction,
    Severity,
    Trend,
    YearlySummary,
)
from pocket_cfo.domain.rules import Rule, always, evaluate_rules, say, say_all
from pocket_cfo.utils.date_utils import month_label
from pocket_cfo.utils.formatting import fmt, pct
from pocket_cfo.utils.numbers import safe_percent, safe_ratio

WELCOME_MESSAGE = (
    "Welcome! Start by adding your income and expenses to unlock personalized financial insights."
)

NEEDS_CATEGORIES = (ExpenseCategory.FOOD.value, ExpenseCategory.BILLS.value, ExpenseCategory.TRANSPORT.value)


@dataclass(frozen=True)
class InsightContext:
    """Everything the rule bank reads, computed once per call"""

    as_of: date
    income_count: int
    expense_count: int
    total_income: float
    total_expenses: float
    balance: float
    savings_rate: float
    monthly: List[MonthlyAggregate]
    active: List[MonthlyAggregate]
    categories: List[CategorySummary]
    yearly: YearlySummary
    health: FinancialHealthScore
    current_month: CurrentMonthStats
    prediction: Prediction

    @property
    def this_month_name(self) -> str:
        return month_label(self.as_of.month - 1)

    def category(self, label: str) -> Optional[CategorySummary]:
        return next((c for c in self.categories if c.category == label), None)


def build_context(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date,
) -> InsightContext:
    total_income = sum(i.amount for i in incomes)
    total_expenses = sum(e.amount for e in expenses)
    balance = total_income - total_expenses

    monthly = get_monthly_aggregates(incomes, expenses, as_of)
    categories = get_category_summaries(expenses, as_of)
    yearly = get_yearly_summary(incomes, expenses, as_of)

    return InsightContext(
        as_of=as_of,
        income_count=len(incomes),
        expense_count=len(expenses),
        total_income=total_income,
        total_expenses=total_expenses,
        balance=balance,
        savings_rate=safe_percent(balance, total_income),
        monthly=monthly,
        active=active_months(monthly),
        categories=categories,
        yearly=yearly,
        health=calculate_health_score(monthly, categories, yearly),
        current_month=get_current_month_stats(incomes, expenses, as_of),
        prediction=predict(monthly, as_of),
    )


Predicate = Callable[[InsightContext], bool]


def savings_tier(low: float, high: float) -> Predicate:
    return lambda ctx: low <= ctx.savings_rate < high


# ─── Multi-insight builders ──────────────────────────────────


def category_share_insights(ctx: InsightContext) -> List[Insight]:
    insights = []
    for cat in ctx.categories:
        if cat.percentage > 50:
            insights.append(Insight(
                Severity.DANGER,
                f"🚨 {cat.category} alone accounts for {pct(cat.percentage)} of all expenses — that's dangerously high.",
            ))
        elif cat.percentage > 30:
            insights.append(Insight(
                Severity.WARNING,
                f"{cat.category} spending is {pct(cat.percentage)} of total — above the 30% recommended limit.",
            ))
        elif cat.percentage > 20:
            insights.append(Insight(
                Severity.INFO,
                f"{cat.category} at {pct(cat.percentage)} of expenses is manageable but worth monitoring.",
            ))
    return insights


def category_spike_insights(ctx: InsightContext) -> List[Insight]:
    insights = []
    for cat in ctx.categories:
        if cat.growth > 50:
            insights.append(Insight(
                Severity.DANGER,
                f"📈 {cat.category} spending spiked {pct(cat.growth)} this month compared to last — investigate!",
            ))
        elif cat.growth > 20:
            insights.append(Insight(
                Severity.WARNING,
                f"{cat.category} costs rose {pct(cat.growth)} month-over-month. Is this a one-time event?",
            ))
        elif cat.growth < -20:
            insights.append(Insight(
                Severity.SUCCESS,
                f"You reduced {cat.category} spending by {pct(abs(cat.growth))} — great cost control!",
            ))
    return insights


def month_over_month_insights(ctx: InsightContext) -> List[Insight]:
    insights = []
    prev, last = ctx.active[-2], ctx.active[-1]

    if last.expenses > prev.expenses and prev.expenses > 0:
        increase = safe_percent(last.expenses - prev.expenses, prev.expenses)
        insights.append(Insight(
            Severity.WARNING,
            f"Expenses increased {pct(increase)} from {prev.month} to {last.month}. Review recent transactions.",
        ))
        if increase > 30:
            insights.append(Insight(
                Severity.DANGER,
                f"A {pct(increase)} expense jump is alarming. Check for unusual or unplanned purchases.",
            ))
    elif last.expenses < prev.expenses:
        decrease = safe_percent(prev.expenses - last.expenses, prev.expenses)
        insights.append(Insight(
            Severity.SUCCESS,
            f"Spending dropped {pct(decrease)} from {prev.month} to {last.month} — excellent discipline!",
        ))

    if last.income > prev.income:
        insights.append(Insight(
            Severity.SUCCESS,
            f"Income grew from {prev.month} to {last.month} — capitalize on this by saving the difference.",
        ))
    elif 0 < last.income < prev.income:
        insights.append(Insight(
            Severity.WARNING,
            f"Income decreased from {prev.month}. Diversify income sources to reduce risk.",
        ))

    if last.savings_rate > prev.savings_rate + 5:
        insights.append(Insight(
            Severity.SUCCESS,
            f"Your savings rate improved by {pct(last.savings_rate - prev.savings_rate)} — strong financial progress.",
        ))
    if last.savings_rate < prev.savings_rate - 5:
        insights.append(Insight(
            Severity.WARNING,
            f"Savings rate dropped {pct(prev.savings_rate - last.savings_rate)} — recalibrate your budget.",
        ))
    return insights


def best_worst_month_insights(ctx: InsightContext) -> List[Insight]:
    best = max(ctx.active, key=lambda m: m.savings_rate)
    worst = max(ctx.active, key=lambda m: m.expenses)
    insights = [
        Insight(Severity.SUCCESS, f"🏆 {best.month} was your best month with {pct(best.savings_rate)} savings rate."),
        Insight(
            Severity.WARNING,
            f"{worst.month} had the highest spending at {fmt(worst.expenses)}. Learn from that pattern.",
        ),
    ]

    spending = [m for m in ctx.active if m.expenses > 0]
    if spending:
        lowest = min(spending, key=lambda m: m.expenses)
        insights.append(Insight(
            Severity.SUCCESS,
            f"{lowest.month} had the lowest expenses at {fmt(lowest.expenses)} — can you replicate that?",
        ))

    average = sum(m.expenses for m in ctx.active) / len(ctx.active)
    above_average = [m for m in ctx.active if m.expenses > average * 1.2]
    if above_average:
        insights.append(Insight(
            Severity.INFO,
            f"{len(above_average)} month(s) exceeded your average spending by 20%+. Look for seasonal patterns.",
        ))
    return insights


def consistency_insights(ctx: InsightContext) -> List[Insight]:
    cv = coefficient_of_variation([m.expenses for m in ctx.active if m.expenses > 0])
    if cv < 0.15:
        return [Insight(Severity.SUCCESS, "Your spending is very consistent month-to-month — a sign of strong budgeting.")]
    if cv < 0.3:
        return [Insight(Severity.INFO, "Moderate spending variation detected. Consider setting monthly budget targets.")]
    return [
        Insight(Severity.WARNING, "High spending variance across months. Volatile expenses make planning difficult."),
        Insight(Severity.INFO, "Try creating a fixed monthly budget to reduce spending swings."),
    ]


def health_score_insight(ctx: InsightContext) -> List[Insight]:
    health = ctx.health
    if health.score >= 80:
        return [Insight(
            Severity.SUCCESS,
            f"Your Financial Health Score is {health.score}/100 (Grade {health.grade}) — outstanding!",
        )]
    if health.score >= 60:
        return [Insight(
            Severity.INFO,
            f"Financial Health Score: {health.score}/100 (Grade {health.grade}). Room for improvement.",
        )]
    return [Insight(
        Severity.WARNING,
        f"Financial Health Score: {health.score}/100 (Grade {health.grade}). Focus on savings and expense control.",
    )]


def saving_streak(active: Sequence[MonthlyAggregate]) -> int:
    """
    Number of most recent active months in a row with positive savings.

    A single non-positive month resets the count, so this is lower than a plain
    tally of positive months and the 3- and 6-month streak insights fire less often.
    """
    streak = 0
    for month in reversed(active):
        if month.savings <= 0:
            break
        streak += 1
    return streak


def streak_insights(ctx: InsightContext) -> List[Insight]:
    streak = saving_streak(ctx.active)
    if streak >= 6:
        return [Insight(Severity.SUCCESS, f"{streak} months of positive savings — remarkable consistency!")]
    if streak >= 3:
        return [Insight(Severity.SUCCESS, f"{streak} months of positive savings in a row. Keep the streak alive!")]
    return []


def forecast_insights(ctx: InsightContext) -> List[Insight]:
    prediction = ctx.prediction
    insights = []
    if prediction.next_month_income > 0:
        insights.append(Insight(
            Severity.INFO,
            f"📊 Predicted next month: Income {fmt(prediction.next_month_income)}, "
            f"Expenses {fmt(prediction.next_month_expense)}.",
        ))
        if prediction.next_month_savings_rate > 0:
            insights.append(Insight(
                Severity.INFO,
                f"Projected savings rate next month: {pct(prediction.next_month_savings_rate)}.",
            ))
    if prediction.trend == Trend.IMPROVING:
        insights.append(Insight(
            Severity.SUCCESS,
            "📈 Your financial trend is improving — savings rate is climbing over recent months.",
        ))
    elif prediction.trend == Trend.DECLINING:
        insights.append(Insight(
            Severity.WARNING,
            "📉 Declining financial trend detected — expenses are growing faster than income.",
        ))
    return insights


def named_category_rule(
    category: ExpenseCategory, threshold: float, severity: Severity, advice: str
) -> Rule[InsightContext]:
    """Fires when one named category's share of expenses passes a threshold"""

    def when(ctx: InsightContext) -> bool:
        cat = ctx.category(category.value)
        return cat is not None and cat.percentage > threshold

    def build(ctx: InsightContext) -> List[Insight]:
        cat = ctx.category(category.value)
        return [Insight(severity, advice.format(share=pct(cat.percentage)))]

    return Rule("category-heuristics", when, build)


def needs_ratio_insight(ctx: InsightContext) -> List[Insight]:
    needs_total = sum(c.total for c in ctx.categories if c.category in NEEDS_CATEGORIES)
    needs_pct = safe_percent(needs_total, ctx.total_income)
    if needs_pct > 50:
        return [Insight(
            Severity.WARNING,
            f"Needs (Food, Bills, Transport) consume {pct(needs_pct)} of income — the 50/30/20 rule suggests max 50%.",
        )]
    return [Insight(
        Severity.SUCCESS,
        f"Essential spending at {pct(needs_pct)} of income — within the 50% guideline. Well managed!",
    )]


def needs_threshold(ctx: InsightContext) -> float:
    """Half of typical monthly income, the 'needs' ceiling of the 50/30/20 rule"""
    return (ctx.yearly.average_monthly_income or ctx.current_month.income) * 0.5


def _average_active_expense(ctx: InsightContext) -> float:
    return safe_ratio(sum(m.expenses for m in ctx.active), len(ctx.active))


def _names(categories: Iterable[CategorySummary]) -> str:
    return ", ".join(c.category for c in categories)


# ─── The rule bank, in presentation order ────────────────────

RULES: List[Rule[InsightContext]] = [
    # Savings performance
    Rule("savings", lambda ctx: ctx.savings_rate < 0, say_all(
        (Severity.DANGER, lambda ctx: f"⚠️ You're overspending by {fmt(ctx.balance)}! "
                                      "Your expenses exceed income. Immediate action needed."),
        (Severity.DANGER, lambda ctx: "Running a negative savings rate means you're depleting reserves. "
                                      "Cut non-essential spending today."),
    )),
    Rule("savings", savings_tier(0, 5), say_all(
        (Severity.DANGER, lambda ctx: f"Your savings rate is critically low at {pct(ctx.savings_rate)}. "
                                      "You're saving almost nothing."),
        (Severity.WARNING, lambda ctx: "With less than 5% savings, you have no emergency buffer. Aim for at least 20%."),
    )),
    Rule("savings", savings_tier(5, 10), say(
        Severity.WARNING,
        lambda ctx: f"Savings rate of {pct(ctx.savings_rate)} is below recommended. Try reducing discretionary spending.",
    )),
    Rule("savings", savings_tier(10, 20), say_all(
        (Severity.WARNING, lambda ctx: f"You're saving {pct(ctx.savings_rate)} — good progress, "
                                       "but the 20% target is the sweet spot."),
        (Severity.INFO, lambda ctx: "At your current rate, consider automating a small portion into a savings account."),
    )),
    Rule("savings", savings_tier(20, 35), say_all(
        (Severity.SUCCESS, lambda ctx: f"Excellent! {pct(ctx.savings_rate)} savings rate beats the recommended 20%. "
                                       "You're building wealth."),
        (Severity.SUCCESS, lambda ctx: "Your savings discipline is strong. Consider diversifying into mutual funds or SIPs."),
    )),
    Rule("savings", savings_tier(35, 50), say_all(
        (Severity.SUCCESS, lambda ctx: f"Outstanding {pct(ctx.savings_rate)} savings rate! "
                                       "You're in the top tier of financial discipline."),
        (Severity.INFO, lambda ctx: "With 35%+ savings, explore tax-saving instruments like PPF, ELSS, or NPS."),
    )),
    Rule("savings", lambda ctx: ctx.savings_rate >= 50, say_all(
        (Severity.SUCCESS, lambda ctx: f"Incredible {pct(ctx.savings_rate)} savings rate! "
                                       "You could achieve FIRE (Financial Independence) at this pace."),
        (Severity.INFO, lambda ctx: "Consider investing aggressively — index funds, real estate, or starting a side business."),
    )),
    Rule("savings", lambda ctx: ctx.balance > 0, say(
        Severity.SUCCESS,
        lambda ctx: f"You've accumulated {fmt(ctx.balance)} in net savings. Keep this momentum going!",
    )),
    Rule("savings", lambda ctx: ctx.yearly.total_savings >= 100_000, say(
        Severity.SUCCESS,
        lambda ctx: f"🏆 Milestone! You've saved over {fmt(100_000)} so far. Financial freedom is within reach!",
    )),
    Rule("savings", lambda ctx: 50_000 <= ctx.yearly.total_savings < 100_000, say(
        Severity.SUCCESS,
        lambda ctx: f"You've saved {fmt(ctx.yearly.total_savings)} so far. Halfway to the {fmt(100_000)} milestone!",
    )),
    Rule("savings", lambda ctx: 10_000 <= ctx.yearly.total_savings < 50_000, say(
        Severity.INFO,
        lambda ctx: f"{fmt(ctx.yearly.total_savings)} saved so far. Consistency will get you to bigger milestones.",
    )),
    # Overspending
    Rule("overspending", always, category_share_insights),
    Rule("overspending", lambda ctx: len(ctx.categories) > 0, say(
        Severity.INFO,
        lambda ctx: f"Your top spending category is {ctx.categories[0].category} at {fmt(ctx.categories[0].total)}.",
    )),
    Rule("overspending", lambda ctx: len(ctx.categories) >= 2, say(
        Severity.INFO,
        lambda ctx: f"{ctx.categories[0].category} and {ctx.categories[1].category} together make up "
                    f"{pct(ctx.categories[0].percentage + ctx.categories[1].percentage)} of spending.",
    )),
    Rule("overspending", lambda ctx: ctx.total_expenses > ctx.total_income * 0.9, say(
        Severity.DANGER,
        lambda ctx: "You're spending over 90% of your income. One unexpected expense could put you in debt.",
    )),
    # Category spikes
    Rule("category-spikes", always, category_spike_insights),
    # Month over month
    Rule("month-over-month", lambda ctx: len(ctx.active) >= 2, month_over_month_insights),
    # Best / worst month
    Rule("best-worst", lambda ctx: len(ctx.active) >= 3, best_worst_month_insights),
    # Spending consistency
    Rule("consistency", lambda ctx: len(ctx.active) >= 3, consistency_insights),
    # Risk alerts
    Rule("risk", lambda ctx: ctx.yearly.average_monthly_expense > ctx.yearly.average_monthly_income * 0.95, say(
        Severity.DANGER,
        lambda ctx: "Your average monthly expenses nearly match income — zero margin for emergencies.",
    )),
    Rule("risk", lambda ctx: len(ctx.categories) == 1, say(
        Severity.WARNING,
        lambda ctx: "All expenses in one category — diversify tracking for better insights.",
    )),
    Rule("risk", lambda ctx: ctx.income_count < 3 and ctx.expense_count > 10, say(
        Severity.WARNING,
        lambda ctx: "You've logged many expenses but few income entries. Are you tracking all income sources?",
    )),
    Rule("risk", lambda ctx: ctx.yearly.months_tracked < 3, say(
        Severity.INFO,
        lambda ctx: "Track at least 3 months of data for meaningful trend analysis and predictions.",
    )),
    Rule("risk", lambda ctx: any(m.income == 0 and m.expenses > 0 for m in ctx.active), say(
        Severity.WARNING,
        lambda ctx: f"{sum(1 for m in ctx.active if m.income == 0 and m.expenses > 0)} month(s) show expenses "
                    "but no income. Ensure all income is recorded.",
    )),
    Rule("risk", lambda ctx: 0 < ctx.balance < ctx.yearly.average_monthly_expense * 3, say(
        Severity.WARNING,
        lambda ctx: "Your savings cover less than 3 months of expenses. "
                    f"Build a 6-month emergency fund ({fmt(ctx.yearly.average_monthly_expense * 6)}).",
    )),
    Rule("risk", lambda ctx: ctx.yearly.average_monthly_expense > 0
         and ctx.balance >= ctx.yearly.average_monthly_expense * 6, say(
        Severity.SUCCESS,
        lambda ctx: "You have 6+ months of expenses saved — your emergency fund is solid!",
    )),
    # Positive reinforcement
    Rule("reinforcement", always, health_score_insight),
    Rule("reinforcement", lambda ctx: ctx.current_month.savings_rate > ctx.savings_rate, say(
        Severity.SUCCESS,
        lambda ctx: f"This month's savings rate ({pct(ctx.current_month.savings_rate)}) beats your overall "
                    "average — trending up!",
    )),
    Rule("reinforcement", always, streak_insights),
    # Investment suggestions
    Rule("investment", lambda ctx: ctx.savings_rate >= 20 and ctx.balance >= 10_000, say_all(
        (Severity.INFO, lambda ctx: "With strong savings, consider starting a SIP in index funds for long-term growth."),
        (Severity.INFO, lambda ctx: "PPF and ELSS offer tax benefits under Section 80C — maximize your deductions."),
    )),
    Rule("investment", lambda ctx: ctx.savings_rate >= 30, say(
        Severity.INFO,
        lambda ctx: "At 30%+ savings rate, explore fixed deposits for guaranteed returns on idle cash.",
    )),
    Rule("investment", lambda ctx: ctx.balance >= 50_000, say(
        Severity.INFO,
        lambda ctx: f"With {fmt(ctx.balance)} saved, diversify: 50% equity, 30% debt, 20% gold/alternatives.",
    )),
    # Forecast
    Rule("forecast", always, forecast_insights),
    # Named category heuristics
    named_category_rule(
        ExpenseCategory.FOOD, 35, Severity.WARNING,
        "Food spending at {share} is high. Try meal prepping to save 20-30%.",
    ),
    named_category_rule(
        ExpenseCategory.TRANSPORT, 15, Severity.INFO,
        "Transport costs at {share} — consider carpooling or public transit.",
    ),
    named_category_rule(
        ExpenseCategory.ENTERTAINMENT, 15, Severity.INFO,
        "Entertainment spending at {share}. Balance enjoyment with savings goals.",
    ),
    named_category_rule(
        ExpenseCategory.BILLS, 40, Severity.WARNING,
        "Bills account for {share} — review subscriptions and negotiate rates.",
    ),
    named_category_rule(
        ExpenseCategory.SHOPPING, 20, Severity.WARNING,
        "Shopping at {share} of expenses. Apply the 24-hour rule before purchases.",
    ),
    # Anomaly detection
    Rule("anomaly", lambda ctx: len(ctx.active) >= 3
         and ctx.active[-1].expenses > _average_active_expense(ctx) * 1.5, say(
        Severity.DANGER,
        lambda ctx: f"⚠️ Anomaly: {ctx.active[-1].month} expenses are 50%+ above your average — "
                    "investigate large transactions.",
    )),
    Rule("anomaly", lambda ctx: len(ctx.active) >= 3
         and ctx.active[-1].income > 0
         and ctx.active[-1].income > ctx.yearly.average_monthly_income * 1.5, say(
        Severity.SUCCESS,
        lambda ctx: f"Income anomaly: {ctx.active[-1].month} income was 50%+ above average — save the windfall!",
    )),
    Rule("anomaly", lambda ctx: len(ctx.active) >= 3 and len(ctx.categories) > 4, say(
        Severity.INFO,
        lambda ctx: f"You're spending across {len(ctx.categories)} categories. "
                    "Good tracking — detailed data = better insights.",
    )),
    # Budget breach
    Rule("budget", lambda ctx: needs_threshold(ctx) > 0 and ctx.current_month.expenses > needs_threshold(ctx), say(
        Severity.WARNING,
        lambda ctx: f"This month's expenses ({fmt(ctx.current_month.expenses)}) exceed 50% of income. "
                    "You're past the needs threshold.",
    )),
    Rule("budget", lambda ctx: 0 < ctx.current_month.income < ctx.current_month.expenses, say(
        Severity.DANGER,
        lambda ctx: f"🔴 Budget breach! {ctx.this_month_name} expenses ({fmt(ctx.current_month.expenses)}) "
                    f"exceed income ({fmt(ctx.current_month.income)}).",
    )),
    Rule("budget", lambda ctx: ctx.total_income > 0, needs_ratio_insight),
    # Category growth trends
    Rule("growth", lambda ctx: any(c.growth > 10 for c in ctx.categories), say(
        Severity.WARNING,
        lambda ctx: f"Growing expenses: {_names(c for c in ctx.categories if c.growth > 10)} — monitor these categories.",
    )),
    Rule("growth", lambda ctx: any(c.growth < -10 for c in ctx.categories), say(
        Severity.SUCCESS,
        lambda ctx: f"Declining expenses: {_names(c for c in ctx.categories if c.growth < -10)} — "
                    "great cost optimization!",
    )),
    # General tips
    Rule("tips", always, say_all(
        (Severity.INFO, lambda ctx: f"💡 Tip: Track every expense, no matter how small. "
                                    f"{fmt(50)} daily = {fmt(50 * 360)} yearly."),
        (Severity.INFO, lambda ctx: "💡 Tip: Review your subscriptions quarterly — cancel what you don't actively use."),
        (Severity.INFO, lambda ctx: "💡 Tip: Set up automatic transfers to savings on payday to pay yourself first."),
    )),
]


def insights_from_context(ctx: InsightContext) -> List[Insight]:
    """Ordered insights for an already built context"""
    if ctx.total_income == 0 and ctx.total_expenses == 0:
        return [Insight(Severity.INFO, WELCOME_MESSAGE)]
    return evaluate_rules(ctx, RULES)


def generate_insights(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> List[Insight]:
    """
    Main entry point: ordered insights for one user's records.

    With no income and no expenses, returns exactly one welcome insight.
    """
    as_of = as_of or date.today()
    return insights_from_context(build_context(incomes, expenses, as_of))
