"""Path helpers, git branch lookup, single-line message formatting."""

from __future__ import annotations

import subprocess
from pathlib import Path


def git_branch(cwd: Path | None = None) -> str | None:
    """Return current git branch name, or None if not in a repo."""
    try:
        r = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
        )
    except (OSError, UnicodeDecodeError):
        return None
    return r.stdout.strip() if r.returncode == 0 else None


def expand_home(path: str, home: Path | None = None) -> str:
    """Replace a leading ``~`` with the home directory."""
    if path != "~" and not path.startswith("~/"):
        return path
    home = home or Path.home()
    return str(home) + path[1:]


def resolve_path(path: str, cwd: Path | None = None) -> Path:
    """Resolve *path* relative to *cwd* (default: ``Path.cwd()``)."""
    cwd = cwd or Path.cwd()
    return cwd / path


def one_line(text: str) -> str:
    """Collapse a possibly multi-line message to a single line."""
    return " ".join(part.strip() for part in text.splitlines() if part.strip())
