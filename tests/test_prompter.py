# tests/test_prompter.py
import io
from unittest.mock import patch

import pytest
from rich.console import Console

from devlift.prompter import RichPrompter, ScriptedPrompter

OPTIONS = [("Development", "dev"), ("Production", "prod")]


def test_scripted_confirmations_then_default():
    prompter = ScriptedPrompter(confirmations=[False], default_confirm=True)
    assert prompter.confirm("first?") is False
    assert prompter.confirm("second?") is True
    assert prompter.confirm_messages == ["first?", "second?"]


def test_scripted_selections_run_out():
    prompter = ScriptedPrompter(selections=["prod"])
    assert prompter.select("Mode?", OPTIONS) == "prod"
    with pytest.raises(LookupError, match="No scripted selection left"):
        prompter.select("Again?", OPTIONS)


def test_rich_confirm_delegates_to_confirm_ask():
    prompter = RichPrompter(console=Console(file=io.StringIO()))
    with patch("devlift.prompter.Confirm.ask", return_value=False) as ask:
        assert prompter.confirm("Proceed?", default=True) is False
    ask.assert_called_once()
    assert ask.call_args.args[0] == "Proceed?"


def test_rich_select_returns_value_of_numbered_option():
    out = io.StringIO()
    prompter = RichPrompter(console=Console(file=out))
    with patch("devlift.prompter.Prompt.ask", return_value="2") as ask:
        assert prompter.select("Mode?", OPTIONS) == "prod"
    assert ask.call_args.kwargs["choices"] == ["1", "2"]
    assert "Development" in out.getvalue()


def test_rich_select_needs_options():
    with pytest.raises(ValueError):
        RichPrompter().select("Mode?", [])
