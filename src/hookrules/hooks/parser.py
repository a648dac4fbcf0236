"""Rule compilation and event parsing: compile_rule/rules, parse_event."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from ..core.errors import (
    ConfigParseError,
    InputParseError,
    InvalidActionType,
    InvalidEventType,
    LogFileMissing,
    RegexError,
)
from .models import (
    ACTION_TYPES,
    EVENT_TYPES,
    LOG_FORMATS,
    ON_ERROR_POLICIES,
    BlockAction,
    CompiledRule,
    Event,
    LogAction,
    RunAction,
    ToolInput,
    TransformAction,
    WhenConditions,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKING_DIR = "${file_dir}"


def parse_event_type(value: str, rule: str | None = None) -> str:
    if value not in EVENT_TYPES:
        raise InvalidEventType(value, EVENT_TYPES, rule=rule)
    return value


# ── Rules ───────────────────────────────────────────────────────────


def _compile(rule: str, field: str, pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise RegexError(rule, field, pattern, str(e)) from e


def _string(rule: str, raw: dict, key: str, required: bool = False) -> str | None:
    value = raw.get(key)
    if value is None:
        if required:
            raise ConfigParseError(f"missing required field '{key}'", rule=rule)
        return None
    if not isinstance(value, str):
        raise ConfigParseError(f"field '{key}' must be a string", rule=rule)
    return value


def _choice(rule: str, raw: dict, key: str, choices: tuple[str, ...]) -> str:
    value = _string(rule, raw, key)
    if value is None:
        return choices[0]
    if value not in choices:
        raise ConfigParseError(
            f"field '{key}' must be one of {', '.join(choices)}, got '{value}'", rule=rule
        )
    return value


def _alternatives(rule: str, field: str, value: Any) -> list[str]:
    """A when-field is either one string or an array of strings."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    raise ConfigParseError(f"'{field}' must be a string or an array of strings", rule=rule)


def parse_when(rule: str, raw: Any) -> WhenConditions:
    if raw is None:
        return WhenConditions()
    if not isinstance(raw, dict):
        raise ConfigParseError("'when' must be a table", rule=rule)

    def patterns(key: str) -> tuple[re.Pattern, ...] | None:
        if key not in raw:
            return None
        field = f"when.{key}"
        alts = _alternatives(rule, field, raw[key])
        return tuple(_compile(rule, f"{field}[{i}]", p) for i, p in enumerate(alts))

    branch = None
    if "branch" in raw:
        branch = tuple(_alternatives(rule, "when.branch", raw["branch"]))

    return WhenConditions(
        command=patterns("command"),
        file_path=patterns("file_path"),
        branch=branch,
    )


def _parse_action(name: str, action: str, raw: dict):
    if action == "block":
        return BlockAction(message=_string(name, raw, "message"))

    if action == "transform":
        table = raw.get("transform")
        pair = table.get("command") if isinstance(table, dict) else None
        is_pair = isinstance(pair, list) and len(pair) == 2
        if not (is_pair and all(isinstance(p, str) for p in pair)):
            raise ConfigParseError(
                "transform action requires transform.command = [pattern, replacement]", rule=name
            )
        pattern, replacement = pair
        compiled = _compile(name, "transform.command", pattern)
        try:
            # re parses the replacement template before searching.
            compiled.sub(replacement, "", count=1)
        except (re.error, IndexError) as e:
            raise RegexError(name, "transform.command", replacement, str(e)) from e
        return TransformAction(pattern=compiled, replacement=replacement)

    if action == "run":
        return RunAction(
            command=_string(name, raw, "command"),
            working_dir=_string(name, raw, "working_dir") or DEFAULT_WORKING_DIR,
            on_error=_choice(name, raw, "on_error", ON_ERROR_POLICIES),
        )

    # log
    log_file = _string(name, raw, "log_file")
    if not log_file:
        raise LogFileMissing(name)
    return LogAction(log_file=log_file, log_format=_choice(name, raw, "log_format", LOG_FORMATS))


def compile_rule(name: str, raw: Any) -> CompiledRule:
    """Validate one raw rule table and compile its patterns.

    Raises a HookRulesError subclass naming the rule on the first defect.
    """
    if not isinstance(raw, dict):
        raise ConfigParseError("rule must be a table", rule=name)

    event = parse_event_type(_string(name, raw, "event", required=True), rule=name)
    matcher = _string(name, raw, "matcher", required=True)
    action = _string(name, raw, "action", required=True)
    if action not in ACTION_TYPES:
        raise InvalidActionType(action, ACTION_TYPES, rule=name)

    priority = raw.get("priority", 0)
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ConfigParseError("field 'priority' must be an integer", rule=name)

    return CompiledRule(
        name=name,
        event=event,
        matcher=_compile(name, "matcher", matcher),
        action=_parse_action(name, action, raw),
        priority=priority,
        when=parse_when(name, raw.get("when")),
    )


def compile_rules(tables: dict[str, Any]) -> list[CompiledRule]:
    """Compile every rule in document order. One bad rule fails the whole load."""
    rules = [compile_rule(name, raw) for name, raw in tables.items()]
    logger.debug("compiled %d rule(s)", len(rules))
    return rules


# ── Events ──────────────────────────────────────────────────────────


def parse_event(kind: str, raw: str) -> Event:
    """Parse the hook JSON read from stdin into an Event of *kind*."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, ValueError) as e:
        raise InputParseError(str(e)) from e
    if not isinstance(data, dict):
        raise InputParseError("expected a JSON object")

    tool_name = data.get("tool_name")
    if not isinstance(tool_name, str):
        raise InputParseError("missing or non-string field 'tool_name'")

    tool_input = data.get("tool_input", {})
    if tool_input is None:
        tool_input = {}
    if not isinstance(tool_input, dict):
        raise InputParseError("field 'tool_input' must be an object")

    for key in ("command", "file_path"):
        value = tool_input.get(key)
        if value is not None and not isinstance(value, str):
            raise InputParseError(f"field 'tool_input.{key}' must be a string")

    return Event(
        kind=parse_event_type(kind),
        tool_name=tool_name,
        tool_input=ToolInput(
            command=tool_input.get("command"),
            file_path=tool_input.get("file_path"),
            extra={k: v for k, v in tool_input.items() if k not in ("command", "file_path")},
        ),
        tool_response=data.get("tool_response"),
    )
