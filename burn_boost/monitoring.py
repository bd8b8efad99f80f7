# burn_boost/monitoring.py
import psutil
import socket
from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry
from prometheus_client.exposition import make_wsgi_app
from wsgiref.simple_server import make_server, WSGIServer
from socketserver import ThreadingMixIn
import threading
import logging

logger = logging.getLogger(__name__)


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """A WSGI server that runs in a separate thread to not block the program."""
    allow_reuse_address = True


class Monitor:
    def __init__(self, host="127.0.0.1", port=9090, start_server=False):
        self.host = host
        self.port = port
        self.server = None
        self.thread = None

        # Isolated registry so several programs can live in one process
        self.registry = CollectorRegistry()

        self.operations = Counter('burn_boost_operations_total', 'Operations processed', ['operation', 'status'], registry=self.registry)
        self.burn_latency = Histogram('burn_boost_burn_latency_seconds', 'Latency of burn transactions', registry=self.registry)
        self.burned_units = Counter('burn_boost_burned_units_total', 'Token units burned', ['symbol'], registry=self.registry)
        self.total_burned = Gauge('burn_boost_total_burned', 'Cumulative units burned', ['symbol'], registry=self.registry)
        self.current_supply = Gauge('burn_boost_current_supply', 'Units remaining in supply', ['symbol'], registry=self.registry)
        self.boost_multiplier = Gauge('burn_boost_multiplier_bp', 'Current boost multiplier in basis points', ['symbol'], registry=self.registry)
        self.cpu_usage = Gauge('system_cpu_percent', 'Current CPU usage percent', registry=self.registry)
        self.memory_usage = Gauge('system_memory_percent', 'Current memory usage percent', registry=self.registry)
        # Read at scrape time
        self.cpu_usage.set_function(psutil.cpu_percent)
        self.memory_usage.set_function(lambda: psutil.virtual_memory().percent)

        if start_server:
            self.start_server()

    def start_server(self):
        """Creates and starts the Prometheus HTTP server in a daemon thread."""
        app = make_wsgi_app(self.registry)
        self.server = make_server(self.host, self.port, app, ThreadingWSGIServer)
        self.server.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        self.thread = threading.Thread(target=self.server.serve_forever)
        self.thread.daemon = True
        self.thread.start()
        logger.info(f"Prometheus server started on http://{self.host}:{self.port}")

    def stop_server(self):
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.server = None
            logger.info("Prometheus server stopped.")

    def record_operation(self, operation: str, status: str):
        self.operations.labels(operation=operation, status=status).inc()

    def record_burn(self, token_state, amount: int, latency: float):
        symbol = token_state.symbol
        self.record_operation("burn", "success")
        self.burn_latency.observe(latency)
        self.burned_units.labels(symbol=symbol).inc(amount)
        self.update_token(token_state)

    def update_token(self, token_state):
        symbol = token_state.symbol
        self.total_burned.labels(symbol=symbol).set(token_state.total_burned)
        self.current_supply.labels(symbol=symbol).set(token_state.current_supply)
        self.boost_multiplier.labels(symbol=symbol).set(token_state.current_boost_multiplier)
