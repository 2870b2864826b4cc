"""
Shared metrics configuration for the Cart Conditions service.
"""

from prometheus_client import Counter, Histogram, CollectorRegistry
from typing import Dict, Any, Optional
import time
from contextlib import contextmanager


class MetricsCollector:
    """Prometheus metrics for condition evaluations.

    Each collector owns a private registry unless one is passed in, so several
    collectors can coexist in one process (tests, multiple hosts).
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up condition metrics for the service."""

        self._metrics["condition_evaluations_total"] = Counter(
            "condition_evaluations_total",
            "Total condition evaluations",
            ["condition", "operator", "outcome"],
            registry=self.registry
        )

        self._metrics["condition_evaluation_duration_seconds"] = Histogram(
            "condition_evaluation_duration_seconds",
            "Condition evaluation duration in seconds",
            ["condition"],
            registry=self.registry
        )

        self._metrics["condition_errors_total"] = Counter(
            "condition_errors_total",
            "Total failed condition evaluations",
            ["condition", "error_type"],
            registry=self.registry
        )

    def record_evaluation(self, condition: str, operator: str, outcome: bool):
        """Record a completed evaluation."""
        self._metrics["condition_evaluations_total"].labels(
            condition=condition,
            operator=operator,
            outcome=str(outcome).lower()
        ).inc()

    def record_error(self, condition: str, error_type: str):
        """Record a failed evaluation."""
        self._metrics["condition_errors_total"].labels(
            condition=condition,
            error_type=error_type
        ).inc()

    @contextmanager
    def time(self, condition: str):
        """Time an evaluation; failures are counted by exception type."""
        start_time = time.time()
        try:
            yield
        except Exception as e:
            self.record_error(condition, type(e).__name__)
            raise
        finally:
            self._metrics["condition_evaluation_duration_seconds"].labels(
                condition=condition
            ).observe(time.time() - start_time)

