"""linkchain.core.metrics

Per-node counters and gauges, read back through ``/health``.

Counters only grow: ``blocks_appended``, ``blocks_rejected``, ``chains_replaced``,
``chains_rejected``, ``broadcasts``. Gauges hold the last value set:
``chain_length``, ``peers_connected``.
"""

from __future__ import annotations

from threading import Lock


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[str, float] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, amount: float = 1.0) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0.0) + amount

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = float(value)

    def counter(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0.0)

    def gauge(self, name: str) -> float:
        with self._lock:
            return self._gauges.get(name, 0.0)

    def snapshot(self) -> dict[str, float]:
        """Flat view keyed ``counter.<name>`` / ``gauge.<name>``."""

        with self._lock:
            data = {f"counter.{k}": v for k, v in self._counters.items()}
            data.update({f"gauge.{k}": v for k, v in self._gauges.items()})
            return data


# Default registry for a process running a single node.
REGISTRY = MetricsRegistry()
