"""Weighted-factor composite scoring shared by health and purchase scores"""

import math
from typing import Iterable, List, Sequence, Tuple

from pocket_cfo.domain.models import ScoreFactor
from pocket_cfo.utils.numbers import clamp, round_amount


def build_factors(specs: Iterable[Tuple[str, float, float]]) -> List[ScoreFactor]:
    """
    Turn (label, raw score, weight) triples into clamped factors.

    Raises ValueError if the weights do not sum to 1.0; factor tables are
    module constants, so this only fires on a programming error.
    """
    factors = [ScoreFactor(label=label, score=clamp(score), weight=weight) for label, score, weight in specs]
    total_weight = sum(f.weight for f in factors)
    if not math.isclose(total_weight, 1.0, abs_tol=1e-9):
        raise ValueError(f"Factor weights must sum to 1.0, got {total_weight}")
    return factors


def composite_score(factors: Sequence[ScoreFactor]) -> int:
    """Round(sum(score * weight)), kept within [0, 100]"""
    weighted = sum(f.score * f.weight for f in factors)
    return int(clamp(round_amount(weighted)))


def band(score: float, bands: Sequence[Tuple[float, str]], fallback: str) -> str:
    """First label whose lower bound the score reaches; bands are ordered high to low"""
    for lower_bound, label in bands:
        if score >= lower_bound:
            return label
    return fallback
