"""Unit tests for structured logging setup."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest
import structlog

from logo_gallery.utils.logger import configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_one_object_per_line(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", json_output=True)

        get_logger("logo_gallery.test").info("logo_upload_accepted", logo_id=3)

        lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
        event = json.loads(lines[-1])
        assert event["event"] == "logo_upload_accepted"
        assert event["logo_id"] == 3
        assert event["level"] == "info"
        assert event["logger"] == "logo_gallery.test"
        assert "timestamp" in event

    def test_console_output_is_not_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO")

        get_logger("logo_gallery.test").warning("stored_features_unreadable", logo_id=9)

        err = capsys.readouterr().err
        assert "stored_features_unreadable" in err
        assert "logo_id=9" in err

    def test_level_filters_lower_events(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("WARNING", json_output=True)

        get_logger("logo_gallery.test").info("logo_upload_accepted")

        assert "logo_upload_accepted" not in capsys.readouterr().err
