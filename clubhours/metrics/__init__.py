# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Prometheus metrics for the club hours backend."""
from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)
RECORDS_REQUESTS = Counter(
    "records_requests_total",
    "Calls to the Records Service",
    ["operation", "outcome"],
)
RECORDS_LATENCY = Histogram(
    "records_request_duration_seconds",
    "Latency of Records Service calls",
    ["operation"],
)
WORK_HOUR_SUBMISSIONS = Counter(
    "work_hour_submissions_total",
    "Work-hour create/update/delete commands",
    ["operation", "outcome"],
)
VALIDATION_REJECTIONS = Counter(
    "work_hour_validation_rejections_total",
    "Work-hour submissions rejected by validation",
    ["code"],
)
DASHBOARD_BUILDS = Counter(
    "dashboard_builds_total",
    "Dashboards assembled",
    ["scope"],
)
RATE_LIMITED = Counter(
    "rate_limited_total",
    "Requests rejected by rate limiting",
    ["tier"],
)
