"""
Tests for structured logging.
"""
import json
import logging

from delivery_tracking.core.config import Settings
from delivery_tracking.core.logging import JSONFormatter, order_id_var, setup_logging


def make_record(message="Tracking update dispatched"):
    return logging.LogRecord(
        name="delivery_tracking.services.realtime.hub",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Tracking update dispatched"
        assert data["logger"] == "delivery_tracking.services.realtime.hub"
        assert "order_id" not in data

    def test_order_id_context(self):
        token = order_id_var.set("order-9")
        try:
            data = json.loads(JSONFormatter().format(make_record()))
        finally:
            order_id_var.reset(token)

        assert data["order_id"] == "order-9"

    def test_extra_fields(self):
        record = make_record()
        record.extra_fields = {"batch": 2}

        data = json.loads(JSONFormatter().format(record))

        assert data["batch"] == 2


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_levels(self):
        setup_logging(level="DEBUG", json_format=True)

        assert logging.getLogger("delivery_tracking").level == logging.DEBUG
        assert logging.getLogger("socketio").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_level_defaults_to_settings(self, monkeypatch):
        monkeypatch.setattr(
            "delivery_tracking.core.logging.settings",
            Settings(_env_file=None, LOG_LEVEL="WARNING"),
        )

        setup_logging()

        assert logging.getLogger("delivery_tracking").level == logging.WARNING
        assert logging.getLogger().level == logging.WARNING
