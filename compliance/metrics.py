"""
Prometheus метрики для мониторинга проверок.
"""

from prometheus_client import Counter, Gauge, Histogram

# Результаты проверок
check_results = Counter(
    "compliance_check_results_total",
    "Check results by status",
    ["check", "status"]
)

# Латентность
check_duration = Histogram(
    "compliance_check_duration_seconds",
    "Check duration",
    ["check"],
    buckets=[0.1, 0.3, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0]
)

# Запуски
runs_total = Counter(
    "compliance_runs_total",
    "Completed check runs"
)

# Журнал
evidence_entries = Gauge(
    "compliance_evidence_entries",
    "Entries currently held in the evidence log"
)
