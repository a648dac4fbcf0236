"""Action execution: execute_action, run_command, ActionOutcome builders."""

from __future__ import annotations

import json
import logging
import subprocess
from datetime import datetime
from pathlib import Path

from ..core.config import Config
from ..core.utils import expand_home, one_line, resolve_path
from .context import Context, expand
from .models import (
    ActionOutcome,
    BlockAction,
    LogAction,
    MatchResult,
    RunAction,
    TransformAction,
)

logger = logging.getLogger(__name__)


def allow_outcome() -> ActionOutcome:
    return ActionOutcome(exit_code=0)


def block_outcome(message: str | None) -> ActionOutcome:
    return ActionOutcome(exit_code=2, stderr=message)


def transform_outcome(event: str, command: str) -> ActionOutcome:
    payload = {
        "hookSpecificOutput": {
            "hookEventName": event,
            "permissionDecision": "allow",
            "updatedInput": {"command": command},
        }
    }
    return ActionOutcome(
        exit_code=0, stdout=json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    )


def execute_action(match: MatchResult, config: Config) -> ActionOutcome:
    """Run the matched rule's action. Exactly one branch executes."""
    rule, ctx = match.rule, match.context
    action = rule.action

    if isinstance(action, BlockAction):
        message = ctx.expand(action.message) if action.message is not None else None
        return block_outcome(message)

    if isinstance(action, TransformAction):
        return transform_outcome(rule.event, _transform(action, ctx))

    if isinstance(action, RunAction):
        return _run(action, ctx, config)

    if isinstance(action, LogAction):
        return _log(action, rule.event, ctx, config)

    raise TypeError(f"unhandled action {type(action).__name__} in rule {rule.name!r}")


# ── transform ───────────────────────────────────────────────────────


def _transform(action: TransformAction, ctx: Context) -> str:
    # Expanded values go into a re replacement template; escape backslashes
    # so they are inserted literally.
    escaped = {k: v.replace("\\", "\\\\") for k, v in ctx.variables().items()}
    replacement = expand(action.replacement, escaped)
    return action.pattern.sub(replacement, ctx.command, count=1)


# ── run ─────────────────────────────────────────────────────────────


def run_command(command: str, cwd: Path) -> tuple[int, str, str]:
    """Execute a shell command in *cwd*. Returns (exit_code, stdout, stderr).

    Raises OSError if the shell cannot be started.
    """
    result = subprocess.run(command, shell=True, cwd=cwd, capture_output=True, text=True)
    return result.returncode, result.stdout, result.stderr


def resolve_working_dir(working_dir: str, ctx: Context, config: Config) -> Path:
    """Empty means the process cwd; relative paths hang off the workspace root."""
    if not working_dir:
        return config.cwd
    return resolve_path(expand_home(working_dir), Path(ctx.workspace_root))


def _run_failed(action: RunAction, message: str) -> ActionOutcome:
    if action.on_error == "fail":
        return block_outcome(message)
    return allow_outcome()


def _run(action: RunAction, ctx: Context, config: Config) -> ActionOutcome:
    if not action.command:
        return allow_outcome()

    command = ctx.expand(action.command)
    cwd = resolve_working_dir(ctx.expand(action.working_dir), ctx, config)
    if not cwd.is_dir():
        return _run_failed(action, f"Working directory does not exist: {cwd}")

    logger.debug("running %r in %s", command, cwd)
    try:
        exit_code, _, stderr = run_command(command, cwd)
    except OSError as e:
        return _run_failed(action, f"Failed to run command: {e}")

    if exit_code == 0:
        return allow_outcome()
    logger.debug("command exited with %d (on_error=%s)", exit_code, action.on_error)
    return _run_failed(action, f"Command failed: {stderr.strip()}")


# ── log ─────────────────────────────────────────────────────────────


def format_log_entry(
    log_format: str, event: str, ctx: Context, now: datetime | None = None
) -> str:
    timestamp = (now or datetime.now().astimezone()).isoformat(timespec="seconds")
    if log_format == "json":
        return json.dumps(
            {
                "timestamp": timestamp,
                "event": event,
                "tool": ctx.tool_name,
                "command": ctx.command,
                "file_path": ctx.file_path,
            },
            ensure_ascii=False,
        )
    content = ctx.command or ctx.file_path
    return f"[{timestamp}] {event} {ctx.tool_name}: {content}"


def append_log_entry(path: Path, entry: str) -> Exception | None:
    """Append one line to *path*. Returns the error instead of raising it."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(entry + "\n")
    except (OSError, ValueError) as e:
        return e
    return None


def _log(action: LogAction, event: str, ctx: Context, config: Config) -> ActionOutcome:
    path = resolve_path(expand_home(ctx.expand(action.log_file)), config.cwd)

    entry = format_log_entry(action.log_format, event, ctx)
    error = append_log_entry(path, one_line(entry) if action.log_format == "text" else entry)
    if error is not None:
        # Logging never blocks the tool call it observes.
        return ActionOutcome(
            exit_code=0, stderr=f"warning: failed to write log file '{path}': {error}"
        )
    return allow_outcome()
