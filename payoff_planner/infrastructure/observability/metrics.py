"""Prometheus metrics for monitoring plan outcomes and advisory reliability"""

from prometheus_client import Counter, Histogram

# Plan metrics
plan_counter = Counter(
    "payoff_plan_total",
    "Total payment plans produced",
    ["requested_policy", "policy_used"],
)

invalid_plan_counter = Counter(
    "payoff_plan_invalid_total",
    "Plans whose budget could not fund every minimum payment",
)

advisory_fallback_counter = Counter(
    "advisory_fallback_total",
    "Advisory plans replaced by the deterministic engine",
)

# Advisory transport metrics
advisory_latency_histogram = Histogram(
    "advisory_latency_seconds",
    "Advisory endpoint response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

advisory_failure_counter = Counter(
    "advisory_failures_total",
    "Failed advisory calls (transport or parse)",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_plan(requested_policy: str, policy_used: str, is_valid: bool) -> None:
    """Record plan metrics for monitoring policy mix and advisory fallbacks"""
    plan_counter.labels(requested_policy=requested_policy, policy_used=policy_used).inc()

    if not is_valid:
        invalid_plan_counter.inc()

    # An advisory request answered by any other policy fell back
    if requested_policy == "advisory" and policy_used != "advisory":
        advisory_fallback_counter.inc()
