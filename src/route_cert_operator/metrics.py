"""Prometheus metrics for the Route Certificate Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "route_cert_operator_reconcile_total",
    "Total number of Route reconciliations",
    ["state", "result"],
)

reconcile_duration_seconds = Histogram(
    "route_cert_operator_reconcile_duration_seconds",
    "Duration of Route reconciliations in seconds",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Certificate and Route mutations
certificate_operations_total = Counter(
    "route_cert_operator_certificate_operations_total",
    "Total number of operations on Certificates and Routes",
    ["operation", "result"],
)

# Sweep repairs of the back-reference index
index_repairs_total = Counter(
    "route_cert_operator_index_repairs_total",
    "Total number of missing back-reference entries repaired by the sweep",
)

error_total = Counter(
    "route_cert_operator_error_total",
    "Total number of reconciliation errors",
    ["error_type"],
)

# API call metrics
api_call_total = Counter(
    "route_cert_operator_api_call_total",
    "Total number of Kubernetes API calls",
    ["kind", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "route_cert_operator_api_call_duration_seconds",
    "Duration of Kubernetes API calls in seconds",
    ["kind", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "route_cert_operator_rate_limit_hits_total",
    "Total number of Kubernetes API rate limit hits",
)
