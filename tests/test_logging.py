"""Tests for the structured logging system (ledger_kernel/logging_config.py)."""

import asyncio
import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "ledger_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("paginated", extra={"page_count": 3, "capacity": 17})

        record = _parse_log(stream)
        assert record["page_count"] == 3
        assert record["capacity"] == 17

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", dealer_id="dealer-9")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["dealer_id"] == "dealer-9"

    def test_decimal_and_date_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "balance", extra={"balance": Decimal("300.50"), "as_of": date(2024, 1, 20)},
        )

        record = _parse_log(stream)
        assert record["balance"] == "300.50"
        assert record["as_of"] == "2024-01-20"

    def test_unserializable_extra_falls_back_to_repr(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("odd", extra={"channels": {"local"}, "obj": object()})

        record = _parse_log(stream)
        assert record["channels"] == ["local"]
        assert record["obj"].startswith("<object object")

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info("with_uuid", extra={"entry_id": uid})

        assert _parse_log(stream)["entry_id"] == str(uid)

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_reporting_exception_code_extracted(self):
        """Reporting core exceptions carry a .code attribute."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        from ledger_kernel.exceptions import ChannelUnavailable

        try:
            raise ChannelUnavailable("native", "no host bridge")
        except ChannelUnavailable:
            get_logger("test").error("channel_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "CHANNEL_UNAVAILABLE"
        assert record["exc_type"] == "ChannelUnavailable"
        assert record["exc_channel"] == "native"
        assert record["exc_reason"] == "no host bridge"

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= record.keys()


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", channel="native")
        assert LogContext.get_all() == {"correlation_id": "x", "channel": "native"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(channel="outer")
        with LogContext.bind(channel="inner"):
            assert LogContext.get_all()["channel"] == "inner"
        assert LogContext.get_all()["channel"] == "outer"

    def test_bind_restores_none(self):
        assert "document_name" not in LogContext.get_all()
        with LogContext.bind(document_name="LEDGER-D001.pdf"):
            assert LogContext.get_all()["document_name"] == "LEDGER-D001.pdf"
        assert "document_name" not in LogContext.get_all()

    def test_nested_bind(self):
        with LogContext.bind(dealer_id="a"):
            with LogContext.bind(dealer_id="b", channel="native"):
                assert LogContext.get_all() == {"dealer_id": "b", "channel": "native"}
            assert LogContext.get_all() == {"dealer_id": "a"}
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(tenant="x")
        with pytest.raises(TypeError):
            with LogContext.bind(tenant="x"):
                pass

    def test_concurrent_tasks_do_not_share_context(self):
        async def request(dealer_id, delay):
            with LogContext.bind(dealer_id=dealer_id):
                await asyncio.sleep(delay)
                return LogContext.get_all()["dealer_id"]

        async def main():
            return await asyncio.gather(request("d1", 0.02), request("d2", 0.0))

        assert asyncio.run(main()) == ["d1", "d2"]

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            dealer_id="d",
            document_name="n",
            channel="local",
        )
        assert len(LogContext.get_all()) == 4


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        assert len(logging.getLogger("ledger_kernel").handlers) == 1

    def test_get_logger_returns_child(self):
        assert get_logger("engines.balance").name == "ledger_kernel.engines.balance"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "ledger_kernel.deep.nested.module"
