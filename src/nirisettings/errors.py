"""Exception taxonomy for nirisettings.

Only :class:`MergeError` is ever raised out of a top-level operation; the
importer and the per-category loader recover from everything else locally.
"""

from __future__ import annotations

from typing import Any, Mapping


class NiriSettingsError(Exception):
    """Base exception for nirisettings."""

    context: dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = dict(context) if context is not None else {}


class ParseError(NiriSettingsError, ValueError):
    """Malformed KDL text."""

    def __init__(self, message: str, *, line: int = 0, column: int = 0) -> None:
        super().__init__(
            f"{message} (line {line}, column {column})",
            context={"line": line, "column": column},
        )
        self.line = line
        self.column = column


class ConfigIOError(NiriSettingsError, OSError):
    """A settings file or directory could not be read or written."""

    def __init__(self, message: str, *, path: Any = None) -> None:
        NiriSettingsError.__init__(self, message, context={"path": str(path) if path else None})
        self.path = path


class SaveError(ConfigIOError):
    """One or more category files failed to write.

    Every other category in the batch was still attempted; ``report`` holds
    what succeeded and what failed.
    """

    def __init__(self, message: str, *, report: Any) -> None:
        super().__init__(message)
        self.report = report


class ValidationError(NiriSettingsError, ValueError):
    """A value could not be interpreted for its field."""


class MergeError(NiriSettingsError):
    """The smart merge cannot proceed without risking the user's content."""


class ContextPoisonedError(NiriSettingsError, RuntimeError):
    """An edit failed while holding the settings lock."""
