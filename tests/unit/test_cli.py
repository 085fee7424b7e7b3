"""
Tests for the CLI commands.

  elpris-chat serve [--host H] [--port P]
  elpris-chat ask QUESTION
  elpris-chat config
"""

from argparse import Namespace
from unittest.mock import AsyncMock, patch

import pytest

from elpris_chat.__main__ import cmd_ask, cmd_config, cmd_serve, create_parser
from elpris_chat.config.settings import LLMSettings, Settings
from elpris_chat.llm.models import ChatFailure, ChatReply


@pytest.fixture
def settings():
    return Settings(llm=LLMSettings(api_key="test-api-key"))


class TestParser:
    def test_serve_defaults_to_config_values(self):
        args = create_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None

    def test_serve_port_override(self):
        args = create_parser().parse_args(["serve", "--port", "9000"])
        assert args.port == 9000

    def test_ask_question_positional(self):
        args = create_parser().parse_args(["ask", "Vad kostar elen i SE3 idag?"])
        assert args.command == "ask"
        assert args.question == "Vad kostar elen i SE3 idag?"

    def test_ask_requires_question(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["ask"])

    def test_log_level_choices(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--log-level", "LOUD", "config"])


class TestCommands:
    def test_config_succeeds(self, settings):
        assert cmd_config(settings) == 0

    def test_serve_without_api_key_fails(self):
        args = Namespace(host=None, port=None)
        with patch("uvicorn.run") as mock_run:
            assert cmd_serve(args, Settings(llm=LLMSettings(api_key=""))) == 1
        mock_run.assert_not_called()

    def test_serve_runs_uvicorn_with_overrides(self, settings):
        args = Namespace(host="0.0.0.0", port=9000)
        with patch("uvicorn.run") as mock_run:
            assert cmd_serve(args, settings) == 0
        assert mock_run.call_args.kwargs["host"] == "0.0.0.0"
        assert mock_run.call_args.kwargs["port"] == 9000
        assert mock_run.call_args.kwargs["log_config"] is None

    @pytest.mark.asyncio
    async def test_ask_without_api_key_fails(self):
        args = Namespace(question="Hej")
        assert await cmd_ask(args, Settings(llm=LLMSettings(api_key=""))) == 1

    @pytest.mark.asyncio
    async def test_ask_prints_reply(self, settings, capsys):
        args = Namespace(question="Vad kostar elen?")
        with patch(
            "elpris_chat.llm.orchestrator.ChatOrchestrator.handle_turn",
            new=AsyncMock(return_value=ChatReply(reply="1.23 SEK/kWh")),
        ):
            assert await cmd_ask(args, settings) == 0
        assert "1.23 SEK/kWh" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_ask_failure_returns_error_code(self, settings):
        args = Namespace(question="Vad kostar elen?")
        with patch(
            "elpris_chat.llm.orchestrator.ChatOrchestrator.handle_turn",
            new=AsyncMock(side_effect=ChatFailure("overloaded", status_code=503)),
        ):
            assert await cmd_ask(args, settings) == 1
