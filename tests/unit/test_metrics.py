from __future__ import annotations

import threading

from linkchain.core.metrics import MetricsRegistry


def test_counters_accumulate_and_gauges_keep_last_value() -> None:
    m = MetricsRegistry()
    m.inc("broadcasts")
    m.inc("broadcasts", 2)
    m.set_gauge("chain_length", 7)
    m.set_gauge("chain_length", 4)

    assert m.counter("broadcasts") == 3.0
    assert m.gauge("chain_length") == 4.0
    assert m.counter("never_touched") == 0.0
    assert m.snapshot() == {"counter.broadcasts": 3.0, "gauge.chain_length": 4.0}


def test_concurrent_increments_are_not_lost() -> None:
    m = MetricsRegistry()

    def bump() -> None:
        for _ in range(1000):
            m.inc("blocks_appended")

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert m.counter("blocks_appended") == 4000.0


def test_ledger_and_registry_report_into_injected_registry(ledger, registry, metrics) -> None:
    ledger.append(ledger.next_block("x"))

    assert metrics.gauge("chain_length") == 2.0
    assert metrics.counter("blocks_appended") == 1.0
    assert metrics.gauge("peers_connected") == 0.0
