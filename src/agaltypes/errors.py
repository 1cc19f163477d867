"""Backend diagnostics and errors.

The backend can fail in two ways: with a diagnostic that points at a place
in the source (a parse or compile error the editor should display), or with
anything else. Only the former is surfaced to callers; the latter is logged
by the token index and degrades to an empty token set.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Diagnostic:
    """A compile error reported by the backend, with zero-based coordinates."""

    message: str
    line: int
    column: int
    length: int
    file: str

    def __post_init__(self) -> None:
        if self.length < 1:
            msg = f"Diagnostic length must be at least 1, got {self.length}"
            raise ValueError(msg)

    @property
    def end_column(self) -> int:
        return self.column + self.length

    def format(self) -> str:
        """Format the diagnostic for display."""
        return f"{self.file}:{self.line + 1}:{self.column + 1}: error: {self.message}"


class BackendError(Exception):
    """Base class for failures of the tokenizer backend."""


class BackendStructuredFailure(BackendError):
    """The backend reported a diagnostic with a source location."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.format())
        self.diagnostic = diagnostic


class BackendUnstructuredFailure(BackendError):
    """The backend failed without a parseable diagnostic."""
