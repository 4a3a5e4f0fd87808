"""Aggregation and categorisation of raw ledger records"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Sequence, Tuple

from pocket_cfo.domain.models import (
    CategorySummary,
    CurrentMonthStats,
    ExpenseEntry,
    IncomeEntry,
    MonthlyAggregate,
    PeakAnalysis,
    PeakMonthInfo,
    QuarterData,
    StackedCategoryData,
    StackedCategoryMonth,
    YearlySummary,
)
from pocket_cfo.utils.date_utils import month_key, month_label, trailing_months
from pocket_cfo.utils.numbers import safe_percent, safe_ratio

NOT_AVAILABLE = "N/A"


def _category_label(expense: ExpenseEntry) -> str:
    return getattr(expense.category, "value", expense.category)


def active_months(monthly: Sequence[MonthlyAggregate]) -> List[MonthlyAggregate]:
    """Months with any income or expense, in input order"""
    return [m for m in monthly if m.is_active]


def get_monthly_aggregates(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> List[MonthlyAggregate]:
    """
    Bucket records into the trailing 12 calendar months ending at as_of, oldest first.

    Months without records are zero-filled. Records outside the window are ignored.
    """
    as_of = as_of or date.today()
    window = trailing_months(as_of)
    income_by_month: Dict[Tuple[int, int], float] = {key: 0.0 for key in window}
    expense_by_month: Dict[Tuple[int, int], float] = {key: 0.0 for key in window}

    for entry in incomes:
        key = month_key(entry.date)
        if key in income_by_month:
            income_by_month[key] += entry.amount

    for entry in expenses:
        key = month_key(entry.date)
        if key in expense_by_month:
            expense_by_month[key] += entry.amount

    aggregates = []
    for year, month_index in window:
        income = income_by_month[(year, month_index)]
        spent = expense_by_month[(year, month_index)]
        savings = income - spent
        aggregates.append(
            MonthlyAggregate(
                month=month_label(month_index),
                month_index=month_index,
                year=year,
                income=income,
                expenses=spent,
                savings=savings,
                savings_rate=safe_percent(savings, income),
            )
        )
    return aggregates


def get_current_month_stats(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> CurrentMonthStats:
    """Income, expenses and savings for as_of's calendar month only"""
    as_of = as_of or date.today()
    current = month_key(as_of)

    income = sum(i.amount for i in incomes if month_key(i.date) == current)
    spent = sum(e.amount for e in expenses if month_key(e.date) == current)

    return CurrentMonthStats(
        income=income,
        expenses=spent,
        savings=income - spent,
        savings_rate=safe_percent(income - spent, income),
    )


def get_category_summaries(
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> List[CategorySummary]:
    """
    Per-category totals over all supplied expenses, largest first.

    The monthly breakdown is keyed by month label only, so growth compares
    as_of's month label against the previous label (Jan wraps to Dec) and
    sums same-named months of different years together.
    """
    as_of = as_of or date.today()
    total_all = sum(e.amount for e in expenses)

    totals: Dict[str, float] = {}
    breakdowns: Dict[str, Dict[str, float]] = {}
    for entry in expenses:
        label = _category_label(entry)
        if label not in totals:
            totals[label] = 0.0
            breakdowns[label] = {}
        totals[label] += entry.amount
        month = month_label(entry.date.month - 1)
        breakdowns[label][month] = breakdowns[label].get(month, 0.0) + entry.amount

    this_month = month_label(as_of.month - 1)
    last_month = month_label(as_of.month - 2)

    summaries = []
    for label, total in totals.items():
        breakdown = breakdowns[label]
        this_value = breakdown.get(this_month, 0.0)
        last_value = breakdown.get(last_month, 0.0)
        summaries.append(
            CategorySummary(
                category=label,
                total=total,
                percentage=safe_percent(total, total_all),
                monthly_breakdown=breakdown,
                growth=safe_percent(this_value - last_value, last_value),
            )
        )

    # sorted() is stable: equal totals keep first-seen order
    return sorted(summaries, key=lambda c: c.total, reverse=True)


def get_stacked_category_data(
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> StackedCategoryData:
    """Per-category expense totals for each month of the trailing 12-month window"""
    as_of = as_of or date.today()
    window = trailing_months(as_of)
    per_month: Dict[Tuple[int, int], Dict[str, float]] = {key: {} for key in window}
    categories: List[str] = []

    for entry in expenses:
        key = month_key(entry.date)
        if key not in per_month:
            continue
        label = _category_label(entry)
        per_month[key][label] = per_month[key].get(label, 0.0) + entry.amount
        if label not in categories:
            categories.append(label)

    months = [
        StackedCategoryMonth(month=month_label(month_index), year=year, totals=per_month[(year, month_index)])
        for year, month_index in window
    ]
    return StackedCategoryData(months=months, categories=categories)


def get_yearly_summary(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> YearlySummary:
    """
    All-time totals plus best/worst month over the trailing window.

    Totals use every supplied record; month statistics use only the active
    months of the trailing 12-month window. Ties go to the earliest month.
    """
    as_of = as_of or date.today()
    total_income = sum(i.amount for i in incomes)
    total_expenses = sum(e.amount for e in expenses)
    total_savings = total_income - total_expenses

    categories = get_category_summaries(expenses, as_of)
    active = active_months(get_monthly_aggregates(incomes, expenses, as_of))

    best_month = max(active, key=lambda m: m.savings_rate).month if active else NOT_AVAILABLE
    worst_month = max(active, key=lambda m: m.expenses).month if active else NOT_AVAILABLE

    return YearlySummary(
        total_income=total_income,
        total_expenses=total_expenses,
        total_savings=total_savings,
        savings_rate=safe_percent(total_savings, total_income),
        highest_spending_category=categories[0].category if categories else NOT_AVAILABLE,
        highest_spending_amount=categories[0].total if categories else 0.0,
        best_month=best_month,
        worst_month=worst_month,
        average_monthly_expense=safe_ratio(total_expenses, len(active)),
        average_monthly_income=safe_ratio(total_income, len(active)),
        months_tracked=len(active),
    )


def _peak(active: Sequence[MonthlyAggregate], attr: str) -> PeakMonthInfo:
    # max() keeps the first of equal maxima
    peak = max(active, key=lambda m: getattr(m, attr))
    value = getattr(peak, attr)
    average = sum(getattr(m, attr) for m in active) / len(active)
    # A non-positive mean has no meaningful "percent above"
    percent_above = safe_percent(value - average, average) if average > 0 else 0.0
    return PeakMonthInfo(month=peak.month, value=value, percent_above_avg=percent_above)


def get_peak_analysis(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> PeakAnalysis:
    """Peak income, expense and savings months of the trailing window, earliest month on ties"""
    active = active_months(get_monthly_aggregates(incomes, expenses, as_of))

    if not active:
        empty = PeakMonthInfo(month=NOT_AVAILABLE, value=0.0, percent_above_avg=0.0)
        return PeakAnalysis(peak_income=empty, peak_expense=empty, peak_savings=empty)

    return PeakAnalysis(
        peak_income=_peak(active, "income"),
        peak_expense=_peak(active, "expenses"),
        peak_savings=_peak(active, "savings"),
    )


def get_quarter_data(
    incomes: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    as_of: date | None = None,
) -> List[QuarterData]:
    """Calendar quarters of as_of's year"""
    as_of = as_of or date.today()
    income_by_quarter: Dict[int, float] = defaultdict(float)
    expense_by_quarter: Dict[int, float] = defaultdict(float)

    for entry in incomes:
        if entry.date.year == as_of.year:
            income_by_quarter[(entry.date.month - 1) // 3] += entry.amount

    for entry in expenses:
        if entry.date.year == as_of.year:
            expense_by_quarter[(entry.date.month - 1) // 3] += entry.amount

    quarters = []
    for index in range(4):
        income = income_by_quarter[index]
        spent = expense_by_quarter[index]
        quarters.append(
            QuarterData(
                quarter=f"Q{index + 1}",
                income=income,
                expenses=spent,
                savings=income - spent,
                savings_rate=safe_percent(income - spent, income),
            )
        )
    return quarters
