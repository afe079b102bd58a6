import logging

import pytest

from tunequeue.logging import configure_logging, get_logger
from tunequeue.logging_events import log_event


def test_log_event_puts_fields_into_record(caplog) -> None:
    logger = get_logger("tunequeue.test")

    with caplog.at_level(logging.INFO):
        log_event(
            logger, "pipeline.commit", component="queue_commit", added=3, meta={"ids": [1, 2]}
        )

    record = caplog.records[-1]
    assert record.getMessage() == "pipeline.commit"
    assert record.event == "pipeline.commit"
    assert record.added == 3
    assert record.meta == {"ids": [1, 2]}


def test_log_event_rejects_nested_fields() -> None:
    logger = get_logger("tunequeue.test")

    with pytest.raises(TypeError):
        log_event(logger, "pipeline.search", variants=["a"])
    with pytest.raises(TypeError):
        log_event(logger, "pipeline.search", meta=["a"])
    with pytest.raises(ValueError):
        log_event(logger, "  ")


def test_configure_logging_adds_file_handler(tmp_path) -> None:
    log_file = tmp_path / "tunequeue.log"
    root = logging.getLogger()
    previous = list(root.handlers)
    previous_level = root.level
    try:
        configure_logging("warning", str(log_file))
        get_logger("tunequeue.test").warning("hello")
        assert root.level == logging.WARNING
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = previous
        root.setLevel(previous_level)
