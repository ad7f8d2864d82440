"""
Prometheus metrics for the server loop.

Registered in the default registry; nothing here starts an HTTP listener.
"""

from prometheus_client import Counter, Gauge

REQUESTS_HANDLED = Counter(
    'api_server_requests_handled',
    'Total request lines emitted by the server loop'
)

LOOP_INTERVAL = Gauge(
    'api_server_loop_interval_seconds',
    'Interval between request lines, drawn once at startup'
)

LOOP_RUNNING = Gauge(
    'api_server_loop_running',
    'Server loop is in the looping state (1=looping, 0=otherwise)'
)
