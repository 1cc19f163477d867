"""Tests for agaltypes.backend."""

import json
import subprocess
from typing import Any

import pytest

from agaltypes.backend import CommandBackend, parse_diagnostic, parse_output
from agaltypes.errors import (
    BackendStructuredFailure,
    BackendUnstructuredFailure,
    Diagnostic,
)
from agaltypes.locations import Position
from agaltypes.tokens import TokenKind
from agaltypes.types import ClassType, FunctionType

PLAIN_ERROR = (
    "error: Se esperaba una expresion\n"
    "  --> /src/main.agal:3:5\n"
    "   |\n"
    " 3 | def x = \n"
    "   |     ----\n"
)
COLORED_ERROR = (
    "\x1b[1;31merror:\x1b[0m Se esperaba una expresion\n"
    "  \x1b[34m-->\x1b[0m /src/main.agal:3:5\n"
    "   \x1b[34m|\x1b[0m\n"
    " 3 \x1b[34m|\x1b[0m def x = \n"
    "   \x1b[34m|\x1b[0m     \x1b[31m--\x1b[0m\n"
)

TOKEN_WIRE = {
    "definition": {"line": 0, "column": 3},
    "location": {"start": {"line": 0, "column": 3}, "end": {"line": 0, "column": 8}},
    "token_type": "Function",
    "token_modifier": [],
    "data_type": {"class": "fn", "params": [], "ret": None},
    "is_original_decl": True,
}
MODULE_WIRE = {
    "class": "clase",
    "name": "main",
    "static_props": {},
    "instance_props": {},
}


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestParseDiagnostic:
    """Test parsing compiler error reports."""

    def test_plain(self) -> None:
        """Test an uncoloured report."""
        assert parse_diagnostic(PLAIN_ERROR) == Diagnostic(
            message="Se esperaba una expresion",
            line=2,
            column=4,
            length=4,
            file="/src/main.agal",
        )

    def test_colored(self) -> None:
        """Test that ANSI colouring is ignored."""
        diagnostic = parse_diagnostic(COLORED_ERROR)
        assert diagnostic is not None
        assert diagnostic.message == "Se esperaba una expresion"
        assert (diagnostic.line, diagnostic.column, diagnostic.length) == (2, 4, 2)
        assert diagnostic.end_column == 6

    def test_missing_underline_defaults_length(self) -> None:
        """Test that a report without the underline spans one character."""
        stderr = "error: fallo\n  --> a.agal:1:1\n"
        diagnostic = parse_diagnostic(stderr)
        assert diagnostic is not None
        assert diagnostic.length == 1
        assert (diagnostic.line, diagnostic.column) == (0, 0)

    def test_windows_path(self) -> None:
        """Test that colons inside the file name survive."""
        stderr = "error: fallo\n  --> C:\\src\\main.agal:2:7\n"
        diagnostic = parse_diagnostic(stderr)
        assert diagnostic is not None
        assert diagnostic.file == "C:\\src\\main.agal"
        assert (diagnostic.line, diagnostic.column) == (1, 6)

    @pytest.mark.parametrize(
        "stderr",
        [
            "",
            "panic: something broke\n",
            "error: sin ubicacion\n",
            "error: fallo\n  sin marcador\n",
            "error: fallo\n  --> main.agal:x:1\n",
            "error: fallo\n  --> main.agal:0:1\n",
            "error: fallo\n  --> :3:1\n",
        ],
    )
    def test_unparseable(self, stderr: str) -> None:
        """Test that anything off the layout yields None."""
        assert parse_diagnostic(stderr) is None


class TestParseOutput:
    """Test parsing the backend's token document."""

    def test_tokens_and_module(self) -> None:
        """Test a complete document."""
        result = parse_output(json.dumps({"file": [TOKEN_WIRE], "mod": MODULE_WIRE}))
        assert len(result.tokens) == 1
        token = result.tokens[0]
        assert token.kind is TokenKind.FUNCTION
        assert token.location.start == Position(0, 3)
        assert token.data_type == FunctionType()
        assert result.module == ClassType("main")

    def test_without_module(self) -> None:
        """Test that the module descriptor is optional."""
        result = parse_output('{"file": []}')
        assert result.tokens == ()
        assert result.module is None

    @pytest.mark.parametrize(
        "output",
        [
            "not json",
            "[]",
            '{"mod": null}',
            '{"file": [{"definition": {"line": 0, "column": 0}}]}',
            '{"file": [], "mod": {"class": "mystery"}}',
            '{"file": [], "mod": {"class": "clase", "name": "m", "static_props": []}}',
            '{"file": [], "mod": {"class": "clase", "name": null}}',
        ],
    )
    def test_malformed(self, output: str) -> None:
        """Test that malformed documents are unstructured failures."""
        with pytest.raises(BackendUnstructuredFailure, match="Malformed"):
            parse_output(output)

    def test_module_must_be_class(self) -> None:
        """Test that a non-class module descriptor is rejected."""
        output = json.dumps({"file": [], "mod": {"class": "mod", "path": "x"}})
        with pytest.raises(BackendUnstructuredFailure, match="class type"):
            parse_output(output)


class TestCommandBackend:
    """Test running the backend executable."""

    def test_runs_tokens_subcommand(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the command line and output parsing."""
        seen: dict[str, Any] = {}

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            seen["cmd"] = cmd
            seen.update(kwargs)
            return completed(stdout=json.dumps({"file": [TOKEN_WIRE]}))

        monkeypatch.setattr("agaltypes.backend.subprocess.run", fake_run)
        result = CommandBackend("/opt/agal/bin/agal", timeout=5).fetch("/src/main.agal")

        assert seen["cmd"] == ["/opt/agal/bin/agal", "tokens", "/src/main.agal"]
        assert seen["timeout"] == 5
        assert seen["check"] is False
        assert len(result.tokens) == 1

    def test_structured_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a diagnostic on stderr raises a structured failure."""
        monkeypatch.setattr(
            "agaltypes.backend.subprocess.run",
            lambda *_, **__: completed(returncode=1, stderr=PLAIN_ERROR),
        )
        with pytest.raises(BackendStructuredFailure) as excinfo:
            CommandBackend("agal").fetch("/src/main.agal")
        assert excinfo.value.diagnostic.line == 2
        assert "Se esperaba una expresion" in str(excinfo.value)

    def test_unstructured_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that other failures keep stderr in the message."""
        monkeypatch.setattr(
            "agaltypes.backend.subprocess.run",
            lambda *_, **__: completed(returncode=101, stderr="thread main panicked"),
        )
        with pytest.raises(BackendUnstructuredFailure, match="panicked"):
            CommandBackend("agal").fetch("/src/main.agal")

    def test_missing_executable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a missing executable is an unstructured failure."""

        def fake_run(*_: Any, **__: Any) -> subprocess.CompletedProcess[str]:
            raise FileNotFoundError("agal")

        monkeypatch.setattr("agaltypes.backend.subprocess.run", fake_run)
        with pytest.raises(BackendUnstructuredFailure, match="not found"):
            CommandBackend("agal").fetch("/src/main.agal")

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a timeout is an unstructured failure."""

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr("agaltypes.backend.subprocess.run", fake_run)
        with pytest.raises(BackendUnstructuredFailure, match="timed out"):
            CommandBackend("agal", timeout=0.5).fetch("/src/main.agal")

    def test_permission_denied(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an executable that cannot be run is an unstructured failure."""

        def fake_run(*_: Any, **__: Any) -> subprocess.CompletedProcess[str]:
            raise PermissionError(13, "Permission denied", "./agal")

        monkeypatch.setattr("agaltypes.backend.subprocess.run", fake_run)
        with pytest.raises(BackendUnstructuredFailure, match="Could not run backend"):
            CommandBackend("./agal").fetch("/src/main.agal")

    def test_undecodable_output(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that output that is not UTF-8 is an unstructured failure."""

        def fake_run(*_: Any, **__: Any) -> subprocess.CompletedProcess[str]:
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        monkeypatch.setattr("agaltypes.backend.subprocess.run", fake_run)
        with pytest.raises(BackendUnstructuredFailure, match="not valid UTF-8"):
            CommandBackend("agal").fetch("/src/main.agal")
