# tests/test_load_config.py

import json
import logging
from pathlib import Path

import pytest

from devlift import load_config
from devlift.exceptions import (
    ConfigParseError,
    ConfigSchemaError,
    ConfigValidationError,
)
from devlift.load_config import config_exists, find_config_file, parse_config
from devlift.setup_config import (
    ChoiceStep,
    DockerComposeStep,
    MessageAction,
    OpenAction,
    PackageManagerStep,
    PostSetupChoiceAction,
    ShellStep,
)

logging.getLogger("devlift").setLevel(logging.DEBUG)


FULL_YAML = """
version: '1'
project_name: shop
environment:
  example_file: .env.example
  variables:
    - name: DATABASE_URL
      prompt: Database URL
      default: postgres://localhost/shop
setup_steps:
  - name: install
    type: package-manager
    command: install
  - name: db
    type: docker-compose
    command: up -d
    depends_on: [install]
  - name: mode
    type: choice
    prompt: Which mode?
    choices:
      - name: Development
        value: dev
        actions:
          - name: seed
            type: shell
            command: make seed
      - name: Skip
        value: skip
dependencies:
  - name: api
    repository: https://github.com/acme/api.git
    branch: develop
  - name: lib
    path: ../lib
post_setup:
  - type: message
    content: All done
  - type: open
    target: editor
    path: .
  - type: choice
    name: after
    prompt: Start the server?
    choices:
      - name: Start it
        value: start
        actions:
          - type: open
            target: browser
"""


def test_load_full_yaml_config(tmp_path, write_config):
    write_config(tmp_path, FULL_YAML)
    config = load_config(tmp_path)

    assert config.version == "1"
    assert config.project_name == "shop"
    assert config.environment.example_file == ".env.example"
    assert config.environment.variables[0].name == "DATABASE_URL"

    install, db, mode = config.setup_steps
    assert isinstance(install, PackageManagerStep)
    assert install.manager is None
    assert isinstance(db, DockerComposeStep)
    assert db.file == "docker-compose.yml"
    assert db.depends_on == ("install",)
    assert isinstance(mode, ChoiceStep)
    assert mode.values == ["dev", "skip"]
    assert isinstance(mode.get_choice("dev").actions[0], ShellStep)
    assert mode.get_choice("skip").actions == ()

    api, lib = config.dependencies
    assert api.ref == "develop"
    assert api.identity == "https://github.com/acme/api.git#develop"
    assert lib.is_local
    assert lib.identity == "../lib#main"

    message, editor, choice = config.post_setup
    assert isinstance(message, MessageAction)
    assert message.content == "All done"
    assert isinstance(editor, OpenAction)
    assert editor.target == "editor"
    assert isinstance(choice, PostSetupChoiceAction)
    assert choice.key == "after"


def test_numeric_version_is_accepted(tmp_path, write_config):
    write_config(tmp_path, "version: 1\nsetup_steps: []\n")
    assert load_config(tmp_path).version == "1"


def test_setup_key_is_alias_for_setup_steps():
    config = parse_config(
        "version: '1'\nsetup:\n  - name: hello\n    type: shell\n    command: echo hi\n",
        "yaml",
    )
    assert [s.name for s in config.setup_steps] == ["hello"]


def test_json_config(tmp_path, write_config):
    data = {
        "version": "1",
        "setup_steps": [{"name": "build", "type": "shell", "command": "make"}],
    }
    write_config(tmp_path, json.dumps(data), filename="dev.json")
    config = load_config(tmp_path)
    assert config.setup_steps[0].command == "make"


def test_discovery_prefers_yml_over_yaml_over_json(tmp_path, write_config):
    write_config(tmp_path, '{"version": "1"}', filename="dev.json")
    assert find_config_file(tmp_path)[0].name == "dev.json"

    write_config(tmp_path, "version: '1'\n", filename="dev.yaml")
    assert find_config_file(tmp_path) == (tmp_path / "dev.yaml", "yaml")

    write_config(tmp_path, "version: '1'\n", filename="dev.yml")
    assert find_config_file(tmp_path) == (tmp_path / "dev.yml", "yaml")


def test_missing_config_returns_none(tmp_path):
    assert load_config(tmp_path) is None
    assert not config_exists(tmp_path)


def test_malformed_yaml_raises_parse_error():
    with pytest.raises(ConfigParseError, match="Failed to parse YAML"):
        parse_config("setup_steps: [", "yaml")


def test_malformed_json_raises_parse_error():
    with pytest.raises(ConfigParseError, match="Failed to parse JSON"):
        parse_config("{not json", "json")


@pytest.mark.parametrize("text", ["- just\n- a list\n", "plain string\n", ""])
def test_non_mapping_root_raises_schema_error(text):
    with pytest.raises(ConfigSchemaError, match="does not contain a valid object"):
        parse_config(text, "yaml")


def test_step_without_type_is_rejected():
    with pytest.raises(ConfigValidationError, match="Missing required field: type"):
        parse_config("version: '1'\nsetup_steps:\n  - name: x\n    command: ls\n", "yaml")


def test_unknown_step_type_is_rejected():
    with pytest.raises(ConfigValidationError, match="Invalid step type: kubernetes"):
        parse_config(
            "version: '1'\nsetup_steps:\n  - name: x\n    type: kubernetes\n    command: ls\n",
            "yaml",
        )


def test_setup_steps_must_be_a_list():
    with pytest.raises(ConfigValidationError, match="'setup_steps' must be a list"):
        parse_config("version: '1'\nsetup_steps: {name: x}\n", "yaml")


def test_unknown_post_setup_type_is_rejected():
    with pytest.raises(ConfigValidationError, match="Invalid post-setup action type: email"):
        parse_config("version: '1'\npost_setup:\n  - type: email\n", "yaml")


def test_validation_runs_after_parsing(tmp_path, write_config):
    write_config(tmp_path, "version: '2'\n")
    with pytest.raises(ConfigValidationError, match="Unsupported configuration version: 2"):
        load_config(tmp_path)


def test_bundled_example_config_is_valid():
    example = Path(__file__).parent.parent / "examples" / "basic" / "web_app"
    config = load_config(example)
    assert config.project_name == "web-app"
    assert [s.name for s in config.setup_steps] == ["install", "database", "migrate", "seed-data"]
    assert config.post_setup[1].key == "open-project"


def test_invalid_utf8_raises_parse_error(tmp_path):
    (tmp_path / "dev.yml").write_bytes(b"version: '1'\nproject_name: \xff\xfe\n")
    with pytest.raises(ConfigParseError, match="Failed to read configuration file") as exc:
        load_config(tmp_path)
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)


@pytest.mark.parametrize("value", ["yes", "1", "1.5"])
def test_unquoted_choice_value_is_rejected(value):
    text = f"""
version: '1'
setup_steps:
  - name: mode
    type: choice
    prompt: Mode?
    choices:
      - name: Pick
        value: {value}
"""
    with pytest.raises(ConfigValidationError, match="must be a string"):
        parse_config(text, "yaml")


def test_unquoted_post_setup_choice_value_is_rejected():
    text = """
version: '1'
post_setup:
  - type: choice
    prompt: Start?
    choices:
      - name: Start it
        value: true
"""
    with pytest.raises(ConfigValidationError, match="must be a string"):
        parse_config(text, "yaml")


def test_quoted_choice_value_is_kept_as_text():
    text = """
version: '1'
setup_steps:
  - name: mode
    type: choice
    prompt: Mode?
    choices:
      - name: Pick
        value: 'yes'
"""
    assert parse_config(text, "yaml").setup_steps[0].values == ["yes"]
