"""Prometheus metrics infrastructure.

Operational metrics for the session service: HTTP traffic plus session
activity counters (votes, proposals, tally runs). Nothing here records
who voted for what; only volumes and outcomes.

Labels: service, environment on every metric.
"""

import os
import threading

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_collector_lock = threading.Lock()

# Histogram buckets for request duration (10ms to 10s)
DEFAULT_HISTOGRAM_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """Collects and manages Prometheus metrics.

    Implements SessionMetricsProtocol for the application services.

    Attributes:
        http_request_duration_seconds: Histogram for request latency.
        http_requests_total: Counter for all HTTP requests.
        http_requests_failed_total: Counter for failed requests (4xx, 5xx).
        votes_submitted_total: Accepted ballots by choice.
        proposals_created_total: Created proposals by class.
        tally_runs_total: End-voting runs by outcome.
        proposals_closed_total: Proposals tallied.
        meeting_number: Current meeting number.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "parliament-session")

        self.http_request_duration_seconds = Histogram(
            name="http_request_duration_seconds",
            documentation="HTTP request duration in seconds",
            labelnames=["service", "environment", "method", "endpoint"],
            buckets=DEFAULT_HISTOGRAM_BUCKETS,
            registry=self._registry,
        )

        self.http_requests_total = Counter(
            name="http_requests_total",
            documentation="Total HTTP requests",
            labelnames=["service", "environment", "method", "endpoint", "status"],
            registry=self._registry,
        )

        self.http_requests_failed_total = Counter(
            name="http_requests_failed_total",
            documentation="Total failed HTTP requests (4xx, 5xx)",
            labelnames=[
                "service",
                "environment",
                "method",
                "endpoint",
                "status",
                "error_type",
            ],
            registry=self._registry,
        )

        self.votes_submitted_total = Counter(
            name="votes_submitted_total",
            documentation="Accepted vote submissions",
            labelnames=["service", "environment", "choice"],
            registry=self._registry,
        )

        self.proposals_created_total = Counter(
            name="proposals_created_total",
            documentation="Proposals created",
            labelnames=["service", "environment", "priority"],
            registry=self._registry,
        )

        self.tally_runs_total = Counter(
            name="tally_runs_total",
            documentation="End-voting runs",
            labelnames=["service", "environment", "outcome"],
            registry=self._registry,
        )

        self.proposals_closed_total = Counter(
            name="proposals_closed_total",
            documentation="Proposals tallied by end-voting runs",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.meeting_number = Gauge(
            name="meeting_number",
            documentation="Current meeting number",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def _base_labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    def observe_request_duration(
        self, method: str, endpoint: str, duration: float
    ) -> None:
        self.http_request_duration_seconds.labels(
            method=method, endpoint=endpoint, **self._base_labels()
        ).observe(duration)

    def increment_requests(self, method: str, endpoint: str, status: str) -> None:
        self.http_requests_total.labels(
            method=method, endpoint=endpoint, status=status, **self._base_labels()
        ).inc()

    def increment_failed_requests(
        self, method: str, endpoint: str, status: str, error_type: str
    ) -> None:
        self.http_requests_failed_total.labels(
            method=method,
            endpoint=endpoint,
            status=status,
            error_type=error_type,
            **self._base_labels(),
        ).inc()

    def record_vote_submitted(self, choice: str) -> None:
        self.votes_submitted_total.labels(choice=choice, **self._base_labels()).inc()

    def record_proposal_created(self, is_priority: bool) -> None:
        self.proposals_created_total.labels(
            priority="true" if is_priority else "false", **self._base_labels()
        ).inc()

    def record_tally_run(
        self, outcome: str, proposals_closed: int, meeting_number: int
    ) -> None:
        self.tally_runs_total.labels(outcome=outcome, **self._base_labels()).inc()
        self.proposals_closed_total.labels(**self._base_labels()).inc(proposals_closed)
        self.meeting_number.labels(**self._base_labels()).set(meeting_number)

    def get_registry(self) -> CollectorRegistry:
        """Get the Prometheus registry.

        Returns:
            The CollectorRegistry containing all metrics.
        """
        return self._registry


# Global singleton instance
_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector singleton.

    Returns:
        The global MetricsCollector instance.
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            # Double-checked locking pattern
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Generate Prometheus metrics output.

    Returns:
        Metrics in Prometheus exposition format.
    """
    return generate_latest(get_metrics_collector().get_registry())


def reset_metrics_collector() -> None:
    """Reset the global metrics collector (for testing)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
