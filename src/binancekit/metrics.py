"""
Prometheus metrics for the REST dispatcher and the streaming session.

Only low-cardinality labels: response outcome, frame kind and event kind.
No symbol, endpoint, stream or listen-key labels.

Usage:
    registry = CollectorRegistry()
    metrics = ClientMetrics(registry=registry)
    client = RestClient(host, metrics=metrics)
    # generate_latest(registry) -> bytes for a /metrics endpoint
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge
from prometheus_client.registry import CollectorRegistry

# Forbidden labels that would cause cardinality explosion
FORBIDDEN_LABELS = frozenset(
    {
        "symbol",
        "endpoint",
        "path",
        "query",
        "ip",
        "listen_key",
        "stream",
        "api_key",
    }
)


class ClientMetrics:
    """
    Metric families shared by RestClient and StreamSession.

    Metric names:
    - binancekit_rest_* : REST dispatcher
    - binancekit_ws_*   : WebSocket session
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize metric families.

        Args:
            registry: Prometheus CollectorRegistry. A fresh one is created if None.
        """
        self._registry = registry or CollectorRegistry()

        # === REST ===
        self._rest_responses = Counter(
            "binancekit_rest_responses",
            "REST responses by classified outcome",
            ["outcome"],
            registry=self._registry,
        )
        self._rest_transport_errors = Counter(
            "binancekit_rest_transport_errors",
            "REST requests that failed before a response was received",
            registry=self._registry,
        )
        self._rest_used_weight = Gauge(
            "binancekit_rest_used_weight",
            "Last request weight reported by the exchange for the current window",
            registry=self._registry,
        )

        # === WebSocket ===
        self._ws_connects = Counter(
            "binancekit_ws_connects",
            "Successful WebSocket handshakes",
            registry=self._registry,
        )
        self._ws_handshake_failures = Counter(
            "binancekit_ws_handshake_failures",
            "Failed WebSocket handshakes",
            registry=self._registry,
        )
        self._ws_frames = Counter(
            "binancekit_ws_frames",
            "WebSocket frames received by kind",
            ["kind"],
            registry=self._registry,
        )
        self._ws_events = Counter(
            "binancekit_ws_events",
            "Decoded stream events by event kind",
            ["kind"],
            registry=self._registry,
        )
        self._ws_unrecognized = Counter(
            "binancekit_ws_unrecognized_events",
            "Text frames that matched no known event shape",
            registry=self._registry,
        )
        self._ws_terminations = Counter(
            "binancekit_ws_terminations",
            "Sessions ended by a terminal receive outcome",
            ["reason"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Get the Prometheus CollectorRegistry."""
        return self._registry

    def record_response(self, outcome: str) -> None:
        self._rest_responses.labels(outcome=outcome).inc()

    def record_transport_error(self) -> None:
        self._rest_transport_errors.inc()

    def set_used_weight(self, weight: int) -> None:
        self._rest_used_weight.set(weight)

    def record_connect(self) -> None:
        self._ws_connects.inc()

    def record_handshake_failure(self) -> None:
        self._ws_handshake_failures.inc()

    def record_frame(self, kind: str) -> None:
        self._ws_frames.labels(kind=kind).inc()

    def record_event(self, kind: str) -> None:
        self._ws_events.labels(kind=kind).inc()

    def record_unrecognized(self) -> None:
        self._ws_unrecognized.inc()

    def record_termination(self, reason: str) -> None:
        self._ws_terminations.labels(reason=reason).inc()


# Counters are exported with _total suffix by prometheus_client
REQUIRED_METRIC_NAMES: frozenset[str] = frozenset(
    {
        "binancekit_rest_responses_total",
        "binancekit_rest_transport_errors_total",
        "binancekit_rest_used_weight",
        "binancekit_ws_connects_total",
        "binancekit_ws_handshake_failures_total",
        "binancekit_ws_frames_total",
        "binancekit_ws_events_total",
        "binancekit_ws_unrecognized_events_total",
        "binancekit_ws_terminations_total",
    }
)
