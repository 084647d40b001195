"""Prometheus Metrics Configuration"""

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST

# Create a custom registry for our metrics
registry = CollectorRegistry()

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0)
)

# ============================================================================
# Tool Invocation Metrics
# ============================================================================

tool_invocations_total = Counter(
    'tool_invocations_total',
    'Total MCP tool invocations by classified outcome',
    ['tool', 'outcome'],  # outcome: success, warning, error, transport_error
    registry=registry
)

tool_invocation_duration_seconds = Histogram(
    'tool_invocation_duration_seconds',
    'Wall-clock duration of the remote MCP call in seconds',
    ['tool'],
    registry=registry,
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
)

gateway_errors_total = Counter(
    'gateway_errors_total',
    'Total transport-level failures calling the MCP server',
    ['tool'],
    registry=registry
)

# ============================================================================
# WebSocket Metrics
# ============================================================================

websocket_connections_active = Gauge(
    'websocket_connections_active',
    'Number of active WebSocket connections',
    registry=registry
)

websocket_messages_total = Counter(
    'websocket_messages_total',
    'Total WebSocket messages',
    ['direction'],  # 'sent' or 'received'
    registry=registry
)

# ============================================================================
# Helper Functions
# ============================================================================

def get_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format.

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST


class MetricsCollector:
    """Helper class for collecting and updating metrics"""

    @staticmethod
    def record_http_request(method: str, endpoint: str, status: int, duration: float):
        """Record HTTP request metrics"""
        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    @staticmethod
    def record_tool_invocation(tool: str, outcome: str, duration: float):
        """Record a completed tool invocation"""
        tool_invocations_total.labels(tool=tool, outcome=outcome).inc()
        tool_invocation_duration_seconds.labels(tool=tool).observe(duration)

    @staticmethod
    def record_gateway_error(tool: str):
        """Record a transport-level gateway failure"""
        gateway_errors_total.labels(tool=tool).inc()

    @staticmethod
    def update_websocket_connections(count: int):
        """Update active WebSocket connections count"""
        websocket_connections_active.set(count)

    @staticmethod
    def record_websocket_message(direction: str, count: int = 1):
        """Record WebSocket message"""
        websocket_messages_total.labels(direction=direction).inc(count)


__all__ = [
    'registry',
    'get_metrics',
    'get_metrics_content_type',
    'MetricsCollector',
    'tool_invocations_total',
    'gateway_errors_total',
    'websocket_connections_active',
]
