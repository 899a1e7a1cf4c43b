"""Prometheus metrics for sales, debt classification and transfers"""

from prometheus_client import Counter, Histogram

# Sale metrics
sales_committed_counter = Counter(
    "retail_sales_committed_total",
    "Sales committed from the point-of-sale cart",
    ["payment_method"],
)

sale_amount_histogram = Histogram(
    "retail_sale_amount_cents",
    "Distribution of committed sale totals in cents",
    buckets=[1_000, 5_000, 10_000, 50_000, 100_000, 500_000, 1_000_000],
)

sale_side_effect_failures_counter = Counter(
    "retail_sale_side_effect_failures_total",
    "Secondary writes that failed after the sale itself was committed",
    ["effect"],  # financial_entry
)

# Debt classification metrics
debt_status_counter = Counter(
    "retail_debt_status_total",
    "Client debt recomputations by resulting status",
    ["status"],  # regular | debtor | defaulter
)

debt_recompute_failures_counter = Counter(
    "retail_debt_recompute_failures_total",
    "Client debt recomputations that failed",
    ["trigger"],  # installment_paid | batch
)

# Transfer metrics
transfer_completions_counter = Counter(
    "retail_transfer_completions_total",
    "Money transfers that reached completed status",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_sale(payment_method: str, total_cents: int) -> None:
    """Record a committed sale"""
    sales_committed_counter.labels(payment_method=payment_method).inc()
    sale_amount_histogram.observe(total_cents)


def record_debt_status(status: str) -> None:
    """Record the outcome of one client debt recomputation"""
    debt_status_counter.labels(status=status).inc()
