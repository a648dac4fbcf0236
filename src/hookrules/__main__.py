"""CLI entry point: read one hook event, apply the rules, emit the outcome."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from .core.config import Config, load_config, load_rules_document, rule_tables
from .core.errors import HookRulesError, InputParseError
from .core.utils import one_line
from .hooks import (
    ActionOutcome,
    compile_rules,
    evaluate_rules,
    execute_action,
    parse_event,
    parse_event_type,
)

VERSION = "0.1.0"

console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _say(text: str, style: str | None = None) -> None:
    console.print(text, style=style, markup=False, highlight=False, soft_wrap=True)


def emit(outcome: ActionOutcome) -> None:
    """Write the outcome payloads: stdout verbatim, stderr with a trailing newline."""
    if outcome.stdout is not None:
        click.echo(outcome.stdout, nl=False)
    if outcome.stderr is not None:
        click.echo(outcome.stderr, err=True)


def run(event: str | None, raw_input: str, config: Config) -> ActionOutcome:
    """The whole pipeline for one event. HookRulesError propagates to the caller."""
    if not event:
        raise InputParseError("missing event argument. Usage: hookrules <EVENT>")
    kind = parse_event_type(event)
    hook_event = parse_event(kind, raw_input)

    try:
        document = load_rules_document(config.rules_path)
    except HookRulesError as e:
        if not e.is_warning:
            raise
        _say(f"warning: {e}", style="yellow")
        return ActionOutcome()

    rules = compile_rules(rule_tables(document))
    match = evaluate_rules(rules, hook_event, config)
    if match is None:
        return ActionOutcome()
    return execute_action(match, config)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("event", required=False, default=None)
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Rules file (default: .claude/hooks-rules.toml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug output on stderr")
@click.version_option(VERSION, "--version", prog_name="hookrules")
@click.pass_context
def cli(ctx: click.Context, event: str | None, config_path: str | None, verbose: bool):
    """hookrules - rule-driven PreToolUse / PostToolUse hook engine.

    EVENT is PreToolUse or PostToolUse. The hook JSON is read from stdin.
    """
    config = load_config(config_path=config_path, verbose=verbose)
    _setup_logging(config.verbose)

    try:
        raw_input = "" if not event else sys.stdin.read()
        outcome = run(event, raw_input, config)
    except HookRulesError as e:
        _say(f"hookrules: error: {e.kind}: {one_line(str(e))}", style="bold red")
        ctx.exit(e.exit_code)
    except OSError as e:
        _say(f"hookrules: error: IoError: {one_line(str(e))}", style="bold red")
        ctx.exit(1)
    except Exception as e:
        _say(f"hookrules: error: {type(e).__name__}: {one_line(str(e))}", style="bold red")
        if config.verbose:
            console.print_exception()
        ctx.exit(1)

    emit(outcome)
    ctx.exit(outcome.exit_code)


def main() -> None:
    """True entry point. Usage errors exit 1, never 2 (2 means "block")."""
    try:
        code = cli.main(standalone_mode=False)
    except click.ClickException as e:
        _say(f"hookrules: error: {e.format_message()}", style="bold red")
        sys.exit(1)
    except click.Abort:
        sys.exit(1)
    sys.exit(code or 0)


if __name__ == "__main__":
    main()
