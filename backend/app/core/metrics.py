"""
Prometheus metrics of the monitoring sweep.

Exposed by the API process at GET /metrics. Celery workers keep their own
process-local registry.
"""
from prometheus_client import Counter, Histogram

VIOLATIONS_DETECTED = Counter(
    "shiftwatch_violations_detected_total",
    "Violations recorded from detected shift events",
    ["type", "severity", "source"],
)

MONITORING_RUNS = Counter(
    "shiftwatch_monitoring_runs_total",
    "Per-company monitoring sweeps by outcome",
    ["status"],          # success | error | timeout
)

MONITORING_DURATION = Histogram(
    "shiftwatch_monitoring_duration_seconds",
    "Duration of per-company monitoring sweeps in seconds",
    buckets=(1, 5, 10, 30, 60, 120),
)
