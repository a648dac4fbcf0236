"""Rule selection: priority ordering and first-match evaluation."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from pathlib import Path

from ..core.config import Config
from ..core.utils import git_branch
from .context import Context, build_context
from .models import CompiledRule, Event, MatchResult

logger = logging.getLogger(__name__)


def sort_rules(rules: Sequence[CompiledRule]) -> list[CompiledRule]:
    """Highest priority first. Equal priorities keep their original order."""
    return sorted(rules, key=lambda r: -r.priority)


def _any_search(patterns: tuple[re.Pattern, ...], value: str) -> bool:
    return any(p.search(value) is not None for p in patterns)


def rule_matches(rule: CompiledRule, event: Event, context: Context) -> bool:
    """Check *rule* against *event*, stopping at the first failing condition."""
    if rule.event != event.kind:
        return False
    if rule.matcher.search(event.tool_name) is None:
        return False

    when = rule.when
    if when.command is not None and not _any_search(when.command, context.command):
        logger.debug("rule %r: when.command did not match", rule.name)
        return False
    if when.file_path is not None and not _any_search(when.file_path, context.file_path):
        logger.debug("rule %r: when.file_path did not match", rule.name)
        return False
    if when.branch is not None and context.branch not in when.branch:
        logger.debug("rule %r: branch %r not in %r", rule.name, context.branch, when.branch)
        return False
    return True


def evaluate_rules(
    rules: Sequence[CompiledRule],
    event: Event,
    config: Config,
    branch_resolver: Callable[[Path], str | None] = git_branch,
) -> MatchResult | None:
    """Return the first rule (by priority) whose conditions all hold, or None."""
    context = build_context(event, config, branch_resolver)
    for rule in sort_rules(rules):
        if rule_matches(rule, event, context):
            logger.debug("matched rule %r (priority %d)", rule.name, rule.priority)
            return MatchResult(rule=rule, context=context)
    logger.debug("no rule matched %s %s", event.kind, event.tool_name)
    return None
