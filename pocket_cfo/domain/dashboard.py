"""Dashboard bundle - every analytics view computed once for one evaluation instant"""

from datetime import date
from typing import Sequence

from pocket_cfo.domain.aggregation import get_peak_analysis, get_quarter_data, get_stacked_category_data
from pocket_cfo.domain.insights import build_context, insights_from_context
from pocket_cfo.domain.models import Dashboard, ExpenseEntry, IncomeEntry


def build_dashboard(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> Dashboard:
    """
    Main entry point for presentation: aggregates, forecast, health score and insights.

    The same as_of is used by every view so the bundle is internally consistent.
    """
    as_of = as_of or date.today()
    ctx = build_context(incomes, expenses, as_of)

    return Dashboard(
        as_of=as_of,
        current_month=ctx.current_month,
        monthly=ctx.monthly,
        categories=ctx.categories,
        stacked_categories=get_stacked_category_data(expenses, as_of),
        yearly=ctx.yearly,
        peaks=get_peak_analysis(incomes, expenses, as_of),
        quarters=get_quarter_data(incomes, expenses, as_of),
        prediction=ctx.prediction,
        health=ctx.health,
        insights=insights_from_context(ctx),
    )
