"""Variable context for one event and ``${name}`` template expansion."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from pathlib import Path

from ..core.config import Config
from ..core.utils import git_branch
from .models import Event

VARIABLES = ("command", "file_path", "file_dir", "workspace_root", "tool_name", "branch")

_TOKEN = re.compile(r"\$\{(" + "|".join(VARIABLES) + r")\}")


@dataclass(frozen=True)
class Context:
    """Resolved template variables for one event. Every value is a string."""

    command: str = ""
    file_path: str = ""
    file_dir: str = ""
    workspace_root: str = ""
    tool_name: str = ""
    branch: str = ""

    def variables(self) -> dict[str, str]:
        return asdict(self)

    def expand(self, template: str) -> str:
        return expand(template, self.variables())


def expand(template: str, variables: Mapping[str, str]) -> str:
    """Replace each known ``${name}`` token in one pass.

    Substituted text is never re-scanned. Unknown tokens are kept verbatim.
    """
    return _TOKEN.sub(lambda m: variables.get(m.group(1), m.group(0)), template)


def build_context(
    event: Event,
    config: Config,
    branch_resolver: Callable[[Path], str | None] = git_branch,
) -> Context:
    """Resolve the variables for *event*. Order matters: file_dir needs file_path."""
    tool_name = event.tool_name
    command = event.tool_input.command or ""
    file_path = event.tool_input.file_path or ""

    if file_path:
        file_dir = str((config.cwd / file_path).parent)
    else:
        file_dir = str(config.cwd)

    workspace_root = config.workspace_root

    if config.branch_override is not None:
        branch = config.branch_override
    else:
        # No repository, no git binary or a failing git all mean "no branch".
        branch = branch_resolver(config.cwd) or ""

    return Context(
        command=command,
        file_path=file_path,
        file_dir=file_dir,
        workspace_root=workspace_root,
        tool_name=tool_name,
        branch=branch,
    )
