"""Unit tests for the logging utilities."""

from __future__ import annotations

import json
import logging

from wrenchlog.core.logger import JSONFormatter, configure_logging, fingerprint


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("INFO")


def test_json_formatter_emits_structured_extras() -> None:
    record = logging.LogRecord(
        name="wrenchlog.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="refresh token stored",
        args=(),
        exc_info=None,
    )
    record.user_id = "u-1"
    record.token_fp = "abc123"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "refresh token stored"
    assert payload["level"] == "INFO"
    assert payload["user_id"] == "u-1"
    assert payload["token_fp"] == "abc123"
    assert "owner_id" not in payload


def test_fingerprint_is_short_and_stable() -> None:
    value = "eyJhbGciOiJIUzI1NiJ9.payload.signature"

    assert fingerprint(value) == fingerprint(value)
    assert len(fingerprint(value)) == 12
    assert value not in fingerprint(value)
    assert fingerprint(value) != fingerprint(value + "x")
