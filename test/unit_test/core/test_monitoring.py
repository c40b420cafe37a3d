"""
Unit tests for the Logfire monitoring module.

Logfire itself is replaced with a mock so no telemetry leaves the process.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI

from assistant_army.core import monitoring


@pytest.fixture
def fake_logfire():
    fake = MagicMock()
    with patch.dict(sys.modules, {"logfire": fake}):
        yield fake


class TestInitializeLogfire:
    def test_disabled_does_nothing(self, fake_logfire):
        with patch.object(monitoring, "LOGFIRE_ENABLED", False):
            monitoring.initialize_logfire()

        fake_logfire.configure.assert_not_called()

    def test_enabled_without_token_does_nothing(self, fake_logfire):
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(monitoring, "LOGFIRE_TOKEN", ""):
            monitoring.initialize_logfire()

        fake_logfire.configure.assert_not_called()

    def test_enabled_instruments_everything(self, fake_logfire):
        app = FastAPI()

        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(monitoring, "LOGFIRE_TOKEN", "tok"):
            monitoring.initialize_logfire(app)

        fake_logfire.configure.assert_called_once()
        assert fake_logfire.configure.call_args.kwargs["token"] == "tok"
        fake_logfire.instrument_pydantic_ai.assert_called_once()
        fake_logfire.instrument_sqlalchemy.assert_called_once()
        fake_logfire.instrument_fastapi.assert_called_once_with(app=app)

    def test_configure_failure_is_logged_not_raised(self, fake_logfire):
        fake_logfire.configure.side_effect = RuntimeError("bad token")

        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(monitoring, "LOGFIRE_TOKEN", "tok"):
            monitoring.initialize_logfire()

        fake_logfire.instrument_pydantic_ai.assert_not_called()


class TestLogChatTurn:
    def test_disabled_skips_logfire(self, fake_logfire):
        with patch.object(monitoring, "LOGFIRE_ENABLED", False):
            monitoring.log_chat_turn(1, "support", 5, "completed")

        fake_logfire.info.assert_not_called()

    def test_enabled_records_turn(self, fake_logfire):
        with patch.object(monitoring, "LOGFIRE_ENABLED", True):
            monitoring.log_chat_turn(1, "support", 5, "errored")

        fake_logfire.info.assert_called_once_with(
            "Chat turn finished", owner_id=1, agent_slug="support", conversation_id=5, status="errored"
        )
