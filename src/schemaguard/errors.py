"""Error handling framework for schemaguard."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """schemaguard CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Configuration error (user fixable)
    SCHEMA_ERROR = 2  # Schema could not be loaded
    FATAL_ERROR = 3  # Unexpected crash
    BREAKING_CHANGES = 4  # Diff concluded with failure


class SchemaGuardError(Exception):
    """Base exception for schemaguard errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            **self.context,
        }


class ConfigError(SchemaGuardError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class SchemaLoadError(SchemaGuardError):
    """SDL parsing or validation errors."""

    exit_code = ExitCode.SCHEMA_ERROR

    def __init__(self, message: str, file_path: str, line: int | None = None, **context: Any):
        super().__init__(message, file_path=file_path, line=line, **context)
        self.file_path = file_path
        self.line = line


class InterceptorError(SchemaGuardError):
    """Interceptor round-trip failed. Always recovered by the differ."""

    exit_code = ExitCode.FATAL_ERROR


class UnknownRuleError(SchemaGuardError):
    """A rule id has no entry in the criticality table."""

    exit_code = ExitCode.FATAL_ERROR

    def __init__(self, rule_id: str):
        super().__init__(f"No criticality registered for rule: {rule_id}", rule_id=rule_id)
        self.rule_id = rule_id
