# tests/conftest.py
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import pytest
from devlift.mock_executor import MockExecutor
from devlift.prompter import ScriptedPrompter
from devlift.settings import DevliftSettings


@pytest.fixture
def executor():
    return MockExecutor()


@pytest.fixture
def prompter():
    return ScriptedPrompter()


@pytest.fixture
def settings(tmp_path):
    return DevliftSettings(clone_root=tmp_path / "clones")


@pytest.fixture
def write_config():
    """
    Write a dev.yml (or another config filename) into a directory.
    Use it like:
        write_config(tmp_path, "version: '1'\\nsetup_steps: []")
    """

    def _write(directory, text, filename="dev.yml"):
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(text, encoding="utf-8")
        return path

    return _write
