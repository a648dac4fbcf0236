"""Hooks: rule compilation, matching and action execution."""

from .context import VARIABLES, Context, build_context, expand
from .engine import ActionOutcome, execute_action, run_command
from .matcher import evaluate_rules, rule_matches, sort_rules
from .models import (
    ACTION_TYPES,
    EVENT_TYPES,
    BlockAction,
    CompiledRule,
    Event,
    LogAction,
    MatchResult,
    RunAction,
    ToolInput,
    TransformAction,
    WhenConditions,
)
from .parser import compile_rule, compile_rules, parse_event, parse_event_type

__all__ = [
    "ACTION_TYPES",
    "EVENT_TYPES",
    "VARIABLES",
    "ActionOutcome",
    "BlockAction",
    "CompiledRule",
    "Context",
    "Event",
    "LogAction",
    "MatchResult",
    "RunAction",
    "ToolInput",
    "TransformAction",
    "WhenConditions",
    "build_context",
    "compile_rule",
    "compile_rules",
    "evaluate_rules",
    "execute_action",
    "expand",
    "parse_event",
    "parse_event_type",
    "rule_matches",
    "run_command",
    "sort_rules",
]
