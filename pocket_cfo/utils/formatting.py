"""Human-readable amounts for insight messages"""

from pocket_cfo.config import settings
from pocket_cfo.utils.numbers import round_amount


def fmt(amount: float) -> str:
    """Absolute amount in whole currency units with thousands separators, e.g. ₹18,000"""
    return f"{settings.currency_symbol}{abs(round_amount(amount)):,}"


def pct(value: float) -> str:
    return f"{value:.1f}%"
