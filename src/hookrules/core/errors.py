"""Error taxonomy: every failure the CLI can report, with its exit code."""

from __future__ import annotations


class HookRulesError(Exception):
    """Base error. ``kind`` is the name shown in ``hookrules: error: <kind>: ...``."""

    exit_code = 1
    is_warning = False

    @property
    def kind(self) -> str:
        return type(self).__name__


class ConfigNotFound(HookRulesError):
    """Missing rules file. Hooks are optional, so this only warns."""

    exit_code = 0
    is_warning = True

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"config file not found: {path}")


class ConfigParseError(HookRulesError):
    def __init__(self, detail: str, path: str = "", rule: str | None = None):
        self.path = path
        self.rule = rule
        self.detail = detail
        where = f"rule '{rule}'" if rule else f"'{path}'"
        super().__init__(f"failed to parse {where}: {detail}")


class InputParseError(HookRulesError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"failed to parse input JSON: {detail}")


class RegexError(HookRulesError):
    def __init__(self, rule: str, field: str, pattern: str, detail: str):
        self.rule = rule
        self.field = field
        self.pattern = pattern
        self.detail = detail
        super().__init__(
            f"invalid regex in rule '{rule}' field '{field}': pattern '{pattern}' - {detail}"
        )


class InvalidEventType(HookRulesError):
    def __init__(self, value: str, valid: tuple[str, ...], rule: str | None = None):
        self.value = value
        self.valid = valid
        self.rule = rule
        prefix = f"rule '{rule}': " if rule else ""
        super().__init__(
            f"{prefix}invalid event type '{value}'. Valid values: {', '.join(valid)}"
        )


class InvalidActionType(HookRulesError):
    def __init__(self, value: str, valid: tuple[str, ...], rule: str):
        self.value = value
        self.valid = valid
        self.rule = rule
        super().__init__(
            f"rule '{rule}': invalid action type '{value}'. Valid values: {', '.join(valid)}"
        )


class LogFileMissing(HookRulesError):
    def __init__(self, rule: str):
        self.rule = rule
        super().__init__(f"rule '{rule}' uses log action but log_file is not specified")


class IoError(HookRulesError):
    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"{path}: {error.strerror or error}")
