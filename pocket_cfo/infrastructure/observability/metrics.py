"""Prometheus metrics for insight output, purchase simulations, and health grades"""

from typing import Iterable
from prometheus_client import Counter, Histogram

from pocket_cfo.domain.models import Insight

# Insight metrics
insights_counter = Counter(
    "pocket_cfo_insights_total",
    "Insights emitted",
    ["severity"],  # info | success | warning | danger | tip
)

# Planner metrics
simulation_counter = Counter(
    "pocket_cfo_simulations_total",
    "Purchase simulations run",
    ["mode", "feasibility"],
)

# Health metrics
health_grade_counter = Counter(
    "pocket_cfo_health_grade_total",
    "Financial health grades computed",
    ["grade"],
)

# Record store metrics
records_fetch_failures_counter = Counter(
    "records_fetch_failures_total",
    "Failed record store calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_insights(insights: Iterable[Insight]) -> None:
    for insight in insights:
        insights_counter.labels(severity=insight.type.value).inc()


def record_simulation(mode: str, feasibility: str) -> None:
    simulation_counter.labels(mode=mode, feasibility=feasibility).inc()


def record_health(grade: str) -> None:
    health_grade_counter.labels(grade=grade).inc()
