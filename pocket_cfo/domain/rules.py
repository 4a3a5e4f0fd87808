"""Ordered condition -> message rule banks"""

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Sequence, Tuple, TypeVar

from pocket_cfo.domain.models import Insight, Severity

C = TypeVar("C")

Template = Callable[[C], str]


@dataclass(frozen=True)
class Rule(Generic[C]):
    """A predicate and the builder that runs when it holds; builders may emit several insights"""

    group: str
    when: Callable[[C], bool]
    build: Callable[[C], Iterable[Insight]]


def say(severity: Severity, template: Template) -> Callable[[C], List[Insight]]:
    """Builder emitting a single insight"""
    return lambda ctx: [Insight(severity, template(ctx))]


def say_all(*messages: Tuple[Severity, Template]) -> Callable[[C], List[Insight]]:
    """Builder emitting one insight per (severity, template) pair, in order"""
    return lambda ctx: [Insight(severity, template(ctx)) for severity, template in messages]


def always(ctx: object) -> bool:
    return True


def evaluate_rules(ctx: C, rules: Sequence[Rule[C]]) -> List[Insight]:
    """Run every rule in declaration order; no early exit"""
    insights: List[Insight] = []
    for rule in rules:
        if rule.when(ctx):
            insights.extend(rule.build(ctx))
    return insights
