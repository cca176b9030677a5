import logging
import math

from slope_api.logging_utils import log_event

LOGGER = logging.getLogger("slope_api.tests.logging")


def test_log_event_tags_message_and_encodes_context(caplog) -> None:
    with caplog.at_level(logging.INFO, logger=LOGGER.name):
        log_event(LOGGER, "elevation.batch", "Batch finished", requested=120, failed=3, skipped=None)

    record = caplog.records[-1]
    assert record.getMessage() == '[elevation.batch] Batch finished | {"failed": 3, "requested": 120}'
    assert record.event == "elevation.batch"
    assert record.failed == 3
    assert not hasattr(record, "skipped")


def test_log_event_respects_level_and_nan_fields(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger=LOGGER.name):
        log_event(LOGGER, "elevation.fetch", "debug noise", level="debug", lat=35.0)
        log_event(LOGGER, "elevation.fetch", "Lookup failed", level="warning", elevation=math.nan)

    assert [r.levelno for r in caplog.records] == [logging.WARNING]
    assert '"elevation": "nan"' in caplog.records[0].getMessage()


def test_log_event_accepts_fields_that_shadow_record_attributes(caplog) -> None:
    with caplog.at_level(logging.INFO, logger=LOGGER.name):
        log_event(LOGGER, "slope.grid", "Computed", name="ring-a", lineno=7)

    assert '"name": "ring-a"' in caplog.records[-1].getMessage()
    assert caplog.records[-1].name == LOGGER.name
