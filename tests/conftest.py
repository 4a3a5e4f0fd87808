"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Callable
from fastapi.testclient import TestClient
from pocket_cfo.api.main import create_app
from pocket_cfo.domain.models import (
    ExpenseCategory,
    ExpenseEntry,
    FinancialProfile,
    IncomeEntry,
)


# Every test pins its evaluation date
AS_OF = date(2024, 6, 15)


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def make_income() -> Callable[..., IncomeEntry]:
    counter = iter(range(1, 10_000))

    def _make(amount: float, day: date, source: str = "Salary", user_id: str = "user_1") -> IncomeEntry:
        return IncomeEntry(id=f"inc_{next(counter)}", user_id=user_id, amount=amount, source=source, date=day)

    return _make


@pytest.fixture
def make_expense() -> Callable[..., ExpenseEntry]:
    counter = iter(range(1, 10_000))

    def _make(
        amount: float,
        day: date,
        category: ExpenseCategory = ExpenseCategory.FOOD,
        description: str = "Expense",
        user_id: str = "user_1",
    ) -> ExpenseEntry:
        return ExpenseEntry(
            id=f"exp_{next(counter)}",
            user_id=user_id,
            amount=amount,
            category=category,
            description=description,
            date=day,
        )

    return _make


@pytest.fixture
def sample_incomes(make_income) -> list[IncomeEntry]:
    """Six months of salary, Jan-Jun 2024, plus a one-off freelance payment"""
    incomes = [make_income(60_000, date(2024, month, 1)) for month in range(1, 7)]
    incomes.append(make_income(15_000, date(2024, 4, 20), source="Freelance"))
    return incomes


@pytest.fixture
def sample_expenses(make_expense) -> list[ExpenseEntry]:
    """Steady monthly spending across four categories, Jan-Jun 2024"""
    expenses = []
    for month in range(1, 7):
        expenses.append(make_expense(12_000, date(2024, month, 5), ExpenseCategory.FOOD, "Groceries"))
        expenses.append(make_expense(8_000, date(2024, month, 10), ExpenseCategory.BILLS, "Rent share"))
        expenses.append(make_expense(3_000, date(2024, month, 12), ExpenseCategory.TRANSPORT, "Metro card"))
        expenses.append(make_expense(2_000 + month * 500, date(2024, month, 18), ExpenseCategory.SHOPPING, "Clothes"))
    return expenses


@pytest.fixture
def profile() -> FinancialProfile:
    """Income 60k, spends 30k plus 5k of bills: 25k disposable each month"""
    return FinancialProfile(
        monthly_income=60_000,
        monthly_expenses=30_000,
        monthly_routine_bills=5_000,
        existing_savings=0,
        extra_saving_per_month=0,
    )
