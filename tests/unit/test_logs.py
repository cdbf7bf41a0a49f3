from __future__ import annotations

import json
import logging

from linkchain.core.config import LoggingConfig
from linkchain.core.logs import JsonFormatter, KeyValueFormatter, configure_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("linkchain.test", logging.INFO, __file__, 1, "block_appended", None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_formatter_carries_extras() -> None:
    line = JsonFormatter().format(_record(index=3, hash="abc"))
    body = json.loads(line)
    assert body["event"] == "block_appended"
    assert body["index"] == 3
    assert body["hash"] == "abc"
    assert body["level"] == "INFO"


def test_key_value_formatter_appends_extras() -> None:
    line = KeyValueFormatter("%(message)s").format(_record(peer="10.0.0.1:6001"))
    assert line == "block_appended peer=10.0.0.1:6001"


def test_configure_logging_sets_level_and_single_handler() -> None:
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    try:
        configure_logging(LoggingConfig(level="DEBUG", json_output=True))
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.setLevel(saved[0])
        root.handlers[:] = saved[1]
