# devlift/settings.py
"""
User-level settings, read from ``~/.devlift/config.toml``.

Example::

    clone_root = "~/code/deps"
    editor_commands = ["code", "subl"]
    default_browser_url = "http://localhost:8080"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # <3.11

from .exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

CLONE_ROOT_ENV_VAR = "DEVLIFT_CLONE_ROOT"


def default_settings_path() -> Path:
    return Path.home() / ".devlift" / "config.toml"


def default_clone_root() -> Path:
    return Path.home() / "devlift" / "clones"


@dataclass(frozen=True)
class DevliftSettings:
    """Settings shared by every run on this machine."""

    clone_root: Path = field(default_factory=default_clone_root)
    """Directory remote dependencies are cloned under."""

    editor_commands: tuple[str, ...] = ("code", "subl")
    """Editors tried in order by ``open`` post-setup actions targeting "editor"."""

    default_browser_url: str = "http://localhost:3000"
    """URL opened by ``open`` actions targeting "browser" when no path is given."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "clone_root", Path(self.clone_root).expanduser())
        editors = self.editor_commands
        if isinstance(editors, str):
            editors = (editors,)
        object.__setattr__(self, "editor_commands", tuple(editors))
        if not self.editor_commands:
            logger.warning("Invalid settings: editor_commands cannot be empty")
            raise ConfigValidationError("editor_commands cannot be empty")
        if not self.default_browser_url.strip():
            logger.warning("Invalid settings: default_browser_url cannot be empty")
            raise ConfigValidationError("default_browser_url cannot be empty")


def load_settings(path: str | Path | None = None) -> DevliftSettings:
    """
    Load settings from TOML, falling back to defaults when the file is absent.

    ``DEVLIFT_CLONE_ROOT`` in the environment overrides ``clone_root``.
    """
    settings_path = Path(path) if path is not None else default_settings_path()
    data: dict = {}

    if settings_path.is_file():
        with open(settings_path, "rb") as f:
            try:
                data = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigValidationError(f"Invalid settings file {settings_path}: {e}") from None
        logger.debug(f"Loaded settings from {settings_path}")
    else:
        logger.debug(f"No settings file at {settings_path}, using defaults")

    env_root = os.environ.get(CLONE_ROOT_ENV_VAR)
    if env_root:
        data["clone_root"] = env_root

    try:
        return DevliftSettings(**data)
    except TypeError as e:
        raise ConfigValidationError(f"Invalid settings in {settings_path}: {e}") from None
