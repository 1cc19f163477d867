"""Boundary to the external tokenizer backend.

The backend lexes, parses and infers types; this package only consumes
its output. Backend is the seam: CommandBackend runs the Agal executable
synchronously, and other transports can replace it without touching the
token index.
"""

from __future__ import annotations

import json
import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from agaltypes.codecs import from_builtins, token_from_builtins
from agaltypes.errors import (
    BackendStructuredFailure,
    BackendUnstructuredFailure,
    Diagnostic,
)
from agaltypes.tokens import SemanticToken
from agaltypes.types import ClassType

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")
_ERROR_PREFIX = "error:"
_LOCATION_MARKER = ">"
# error, location, gutter, source line, underline
_MIN_DIAGNOSTIC_LINES = 5


@dataclass(frozen=True)
class BackendResult:
    """Tokens of one file, in backend order, and its module descriptor."""

    tokens: tuple[SemanticToken, ...]
    module: ClassType | None = None


class Backend(ABC):
    """Source of semantic tokens for files."""

    @abstractmethod
    def fetch(self, path: str) -> BackendResult:
        """Return the tokens and module descriptor of a file.

        Raises:
            BackendStructuredFailure: If the file has a compile error
            BackendUnstructuredFailure: On any other failure

        """
        ...


class CommandBackend(Backend):
    """Runs `<executable> tokens <path>` and parses its JSON output."""

    def __init__(self, executable: str, timeout: float | None = None) -> None:
        self.executable = executable
        self.timeout = timeout

    def fetch(self, path: str) -> BackendResult:
        cmd = [self.executable, "tokens", path]
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            msg = f"Backend executable not found: {self.executable}"
            raise BackendUnstructuredFailure(msg) from exc
        except OSError as exc:
            msg = f"Could not run backend {self.executable}: {exc}"
            raise BackendUnstructuredFailure(msg) from exc
        except UnicodeDecodeError as exc:
            msg = f"Backend output is not valid UTF-8: {exc}"
            raise BackendUnstructuredFailure(msg) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"Backend timed out after {self.timeout}s: {cmd}"
            raise BackendUnstructuredFailure(msg) from exc

        if proc.returncode != 0:
            if diagnostic := parse_diagnostic(proc.stderr):
                raise BackendStructuredFailure(diagnostic)
            msg = (
                f"Backend failed with exit code {proc.returncode}.\n"
                f"cmd={cmd}\nstderr:\n{proc.stderr}"
            )
            raise BackendUnstructuredFailure(msg)

        return parse_output(proc.stdout)


def parse_output(output: str) -> BackendResult:
    """Parse the backend's `{"file": [...], "mod": {...}}` document.

    Raises:
        BackendUnstructuredFailure: If the document is malformed

    """
    try:
        data: Any = json.loads(output)
        tokens = tuple(token_from_builtins(t) for t in data["file"])
        module = from_builtins(data.get("mod"))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        msg = f"Malformed backend output: {exc}"
        raise BackendUnstructuredFailure(msg) from exc

    if module is not None and not isinstance(module, ClassType):
        msg = f"Module descriptor must be a class type, got {type(module).__name__}"
        raise BackendUnstructuredFailure(msg)
    return BackendResult(tokens=tokens, module=module)


def parse_diagnostic(stderr: str) -> Diagnostic | None:
    """Parse a compiler error report into a Diagnostic.

    The expected layout is:

        error: <message>
          --> <file>:<line>:<column>
           |
        12 |  <source line>
           |  -----

    with one-based coordinates and ANSI colouring optional. The number of
    dashes on the fifth line is the length of the error span.

    Returns:
        The diagnostic with zero-based coordinates, or None if stderr does
        not follow the layout

    """
    lines = _ANSI_ESCAPE.sub("", stderr).split("\n")
    if len(lines) < 2 or not lines[0].startswith(_ERROR_PREFIX):  # noqa: PLR2004
        return None
    message = lines[0].removeprefix(_ERROR_PREFIX).strip()

    _, marker, rest = lines[1].partition(_LOCATION_MARKER)
    if not marker:
        return None
    file, _, coordinates = rest.strip().rpartition(":")
    file, _, line_str = file.rpartition(":")
    try:
        line = int(line_str) - 1
        column = int(coordinates) - 1
    except ValueError:
        return None
    if not file or line < 0 or column < 0:
        return None

    length = lines[4].count("-") if len(lines) >= _MIN_DIAGNOSTIC_LINES else 0
    return Diagnostic(
        message=message,
        line=line,
        column=column,
        length=max(length, 1),
        file=file,
    )
