"""Domain models - pure Python dataclasses representing ledger records and derived views"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional


class ExpenseCategory(str, Enum):
    FOOD = "Food"
    TRANSPORT = "Transport"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills"
    SHOPPING = "Shopping"
    OTHERS = "Others"


class Severity(str, Enum):
    """Insight tag; TIP is only emitted by the purchase planner"""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    TIP = "tip"


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


# ─── Records ─────────────────────────────────────────────────


@dataclass(frozen=True)
class IncomeEntry:
    """Income record owned by the record store"""

    id: str
    user_id: str
    amount: float
    source: str
    date: date


@dataclass(frozen=True)
class PaymentMetadata:
    """Opaque to analytics; carried through for presentation"""

    method: Optional[str] = None  # "Razorpay" | "Manual"
    status: Optional[str] = None  # "Pending" | "Completed" | "Failed"
    payment_type: Optional[str] = None  # "Bill" | "EMI" | "Subscription" | "Manual"


@dataclass(frozen=True)
class ExpenseEntry:
    """Expense record owned by the record store"""

    id: str
    user_id: str
    amount: float
    category: ExpenseCategory
    description: str
    date: date
    payment: Optional[PaymentMetadata] = None


# ─── Aggregates ──────────────────────────────────────────────


@dataclass(frozen=True)
class MonthlyAggregate:
    month: str  # "Jan", "Feb", ...
    month_index: int  # 0-11
    year: int
    income: float
    expenses: float
    savings: float
    savings_rate: float

    @property
    def is_active(self) -> bool:
        return self.income > 0 or self.expenses > 0


@dataclass(frozen=True)
class CurrentMonthStats:
    income: float
    expenses: float
    savings: float
    savings_rate: float


@dataclass(frozen=True)
class CategorySummary:
    category: str
    total: float
    percentage: float
    monthly_breakdown: Dict[str, float]  # keyed by month label across all years
    growth: float  # % change, current month vs previous month


@dataclass(frozen=True)
class StackedCategoryMonth:
    month: str
    year: int
    totals: Dict[str, float]


@dataclass(frozen=True)
class StackedCategoryData:
    months: List[StackedCategoryMonth]
    categories: List[str]


@dataclass(frozen=True)
class YearlySummary:
    total_income: float
    total_expenses: float
    total_savings: float
    savings_rate: float
    highest_spending_category: str
    highest_spending_amount: float
    best_month: str
    worst_month: str
    average_monthly_expense: float
    average_monthly_income: float
    months_tracked: int


@dataclass(frozen=True)
class PeakMonthInfo:
    month: str
    value: float
    percent_above_avg: float


@dataclass(frozen=True)
class PeakAnalysis:
    peak_income: PeakMonthInfo
    peak_expense: PeakMonthInfo
    peak_savings: PeakMonthInfo


@dataclass(frozen=True)
class QuarterData:
    quarter: str
    income: float
    expenses: float
    savings: float
    savings_rate: float


# ─── Forecast / scoring ──────────────────────────────────────


@dataclass(frozen=True)
class ProjectedMonth:
    month: str
    income: int
    expenses: int
    savings: int


@dataclass(frozen=True)
class Prediction:
    next_month_income: int
    next_month_expense: int
    next_month_savings_rate: float
    three_month_projection: List[ProjectedMonth]
    trend: Trend


@dataclass(frozen=True)
class ScoreFactor:
    """One weighted input to a composite score"""

    label: str
    score: float  # 0-100, clamped
    weight: float


@dataclass(frozen=True)
class FinancialHealthScore:
    score: int  # 0-100
    grade: str  # A-F
    factors: List[ScoreFactor]


@dataclass(frozen=True)
class Insight:
    type: Severity
    message: str


@dataclass(frozen=True)
class Dashboard:
    """Every aggregate view for one user at one evaluation instant"""

    as_of: date
    current_month: CurrentMonthStats
    monthly: List[MonthlyAggregate]
    categories: List[CategorySummary]
    stacked_categories: StackedCategoryData
    yearly: YearlySummary
    peaks: PeakAnalysis
    quarters: List[QuarterData]
    prediction: Prediction
    health: FinancialHealthScore
    insights: List[Insight] = field(default_factory=list)


# ─── Purchase planner ────────────────────────────────────────


class PurchaseMode(str, Enum):
    INSTALLMENT = "emi"
    LUMP_SUM_SAVINGS = "savings"
    SAVE_THEN_BUY = "save-extra"


class Feasibility(str, Enum):
    SAFE = "safe"
    MODERATE = "moderate"
    RISKY = "risky"


@dataclass(frozen=True)
class FinancialProfile:
    monthly_income: float
    monthly_expenses: float
    monthly_routine_bills: float
    existing_savings: float
    extra_saving_per_month: float

    @property
    def disposable_income(self) -> float:
        return self.monthly_income - self.monthly_expenses - self.monthly_routine_bills


@dataclass(frozen=True)
class PurchaseDetails:
    item_name: str
    actual_price: float
    mode: PurchaseMode
    # Installment fields
    down_payment: Optional[float] = None
    emi_tenure_months: Optional[int] = None
    interest_rate: Optional[float] = None  # annual, percent
    # Savings fields
    start_date: Optional[date] = None
    monthly_saving_for_purchase: Optional[float] = None


@dataclass(frozen=True)
class EMIAnalysis:
    emi_amount: int
    total_amount_with_interest: int
    total_interest_paid: int
    emi_burden_percent: float
    new_savings_rate: float
    is_affordable: bool
    impact_on_yearly_savings: int
    disposable_income: int
    emi_to_disposable_ratio: float


@dataclass(frozen=True)
class SavingsMilestone:
    month: int
    accumulated: float
    remaining: float


@dataclass(frozen=True)
class SavingsAnalysis:
    months_required: int
    projected_purchase_date: date
    years_required: float
    is_feasible_within_year: bool
    savings_growth_timeline: List[SavingsMilestone]
    delay_benefit_amount: int


@dataclass(frozen=True)
class ComparisonData:
    total_cost_emi: int
    total_cost_savings: float
    time_difference_months: int
    monthly_burden_emi: int
    monthly_burden_savings: int
    interest_saved: int
    break_even_month: int


@dataclass(frozen=True)
class PurchaseScore:
    score: int  # 0-100
    feasibility: Feasibility
    factors: List[ScoreFactor]


@dataclass(frozen=True)
class SimulationResult:
    id: str
    created_at: date
    financial_profile: FinancialProfile
    purchase_details: PurchaseDetails
    emi_analysis: EMIAnalysis
    savings_analysis: SavingsAnalysis
    comparison: ComparisonData
    purchase_score: PurchaseScore
    insights: List[Insight]


# ─── Financing facilities ────────────────────────────────────


class FacilityStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    OVERDUE = "Overdue"


@dataclass(frozen=True)
class Installment:
    """Single payment in an amortisation schedule"""

    number: int
    due_date: date
    amount: float
    interest: float
    principal: float
    balance: float


@dataclass(frozen=True)
class FinancingFacility:
    """A loan or financed purchase being repaid in equal installments"""

    id: str
    user_id: str
    name: str
    total_amount: float
    emi_amount: float
    remaining_amount: float
    start_date: date
    end_date: date
    next_due_date: date
    duration_months: int
    total_emis: int
    completed_emis: int = 0
