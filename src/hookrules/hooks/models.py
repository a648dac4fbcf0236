"""Hook data models: Event, CompiledRule and its action variants, ActionOutcome."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from .context import Context

EVENT_TYPES = ("PreToolUse", "PostToolUse")
ACTION_TYPES = ("block", "transform", "run", "log")
ON_ERROR_POLICIES = ("ignore", "fail")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class ToolInput:
    command: str | None = None
    file_path: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Event:
    """One hook invocation: event kind from the CLI, the rest from stdin."""

    kind: str  # "PreToolUse" | "PostToolUse"
    tool_name: str
    tool_input: ToolInput = field(default_factory=ToolInput)
    tool_response: Any = None


# ── Actions ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BlockAction:
    message: str | None = None


@dataclass(frozen=True)
class TransformAction:
    pattern: re.Pattern
    replacement: str


@dataclass(frozen=True)
class RunAction:
    command: str | None
    working_dir: str = "${file_dir}"
    on_error: str = "ignore"  # "ignore" | "fail"


@dataclass(frozen=True)
class LogAction:
    log_file: str
    log_format: str = "text"  # "text" | "json"


Action = Union[BlockAction, TransformAction, RunAction, LogAction]


# ── Rules ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WhenConditions:
    """Extra filters. Alternatives within a field are OR-ed, fields are AND-ed."""

    command: tuple[re.Pattern, ...] | None = None
    file_path: tuple[re.Pattern, ...] | None = None
    branch: tuple[str, ...] | None = None


@dataclass(frozen=True)
class CompiledRule:
    name: str
    event: str
    matcher: re.Pattern
    action: Action
    priority: int = 0
    when: WhenConditions = field(default_factory=WhenConditions)

    @property
    def action_type(self) -> str:
        return {
            BlockAction: "block",
            TransformAction: "transform",
            RunAction: "run",
            LogAction: "log",
        }[type(self.action)]


@dataclass(frozen=True)
class MatchResult:
    rule: CompiledRule
    context: Context


@dataclass(frozen=True)
class ActionOutcome:
    """What the process emits: exit code, stdout payload, stderr payload."""

    exit_code: int = 0
    stdout: str | None = None
    stderr: str | None = None
