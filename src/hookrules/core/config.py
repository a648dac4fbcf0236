"""Configuration: environment snapshot, rules file path, TOML loading."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli
from dotenv import load_dotenv

from .errors import ConfigNotFound, ConfigParseError, IoError
from .utils import resolve_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".claude") / "hooks-rules.toml"

# Environment variables read once into Config.
WORKSPACE_ROOT_ENV = "CLAUDE_PROJECT_DIR"
BRANCH_ENV = "HOOKRULES_BRANCH"
CONFIG_ENV = "HOOKRULES_CONFIG"


@dataclass
class Config:
    """Process-wide state captured once and threaded through the pipeline."""

    cwd: Path = field(default_factory=Path.cwd)
    config_path: Path | None = None  # explicit override; None = cwd / DEFAULT_CONFIG_PATH
    workspace_root_override: str | None = None
    branch_override: str | None = None
    verbose: bool = False

    @property
    def rules_path(self) -> Path:
        if self.config_path is not None:
            return resolve_path(str(self.config_path), self.cwd)
        return self.cwd / DEFAULT_CONFIG_PATH

    @property
    def workspace_root(self) -> str:
        return self.workspace_root_override or str(self.cwd)


def load_config(
    config_path: str | None = None,
    verbose: bool = False,
    cwd: Path | None = None,
) -> Config:
    """Load config with priority: CLI args > env > .env > defaults."""
    config = Config(cwd=cwd or Path.cwd())
    config.verbose = verbose

    load_dotenv(config.cwd / ".env")

    if root := os.getenv(WORKSPACE_ROOT_ENV):
        config.workspace_root_override = root
    if (branch := os.getenv(BRANCH_ENV)) is not None:
        config.branch_override = branch
    if env_path := os.getenv(CONFIG_ENV):
        config.config_path = Path(env_path)

    if config_path:
        config.config_path = Path(config_path)

    return config


def load_rules_document(path: Path) -> dict[str, Any]:
    """Read and parse the TOML rules file.

    Raises ConfigNotFound when the file is absent, ConfigParseError on invalid
    TOML and IoError when the file exists but cannot be read.
    """
    if not path.exists():
        raise ConfigNotFound(str(path))
    try:
        with open(path, "rb") as f:
            data = tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigParseError(str(e), path=str(path)) from e
    except UnicodeDecodeError as e:
        raise ConfigParseError(f"file is not valid UTF-8: {e}", path=str(path)) from e
    except OSError as e:
        raise IoError(str(path), e) from e
    logger.debug("loaded rules document from %s", path)
    return data


def rule_tables(data: dict[str, Any]) -> dict[str, Any]:
    """Return the name -> rule mapping, unwrapping a top-level ``[rules]`` table."""
    inner = data.get("rules")
    # A bare rule named "rules" has a string event.
    if isinstance(inner, dict) and not isinstance(inner.get("event"), str):
        return inner
    return data
