"""Tests for agaltypes.cli."""

import json
import subprocess
from pathlib import Path
from typing import Any

import pytest

from agaltypes.cli import build_parser, main

SOURCE = "def x = 0x1F\nimprime(x)\n"
DECLARATION = {"start": {"line": 0, "column": 4}, "end": {"line": 0, "column": 5}}
# Backend order: the use of x comes before its declaration
TOKENS = {
    "file": [
        {
            "definition": {"line": 0, "column": 4},
            "location": {"start": {"line": 1, "column": 8}, "end": {"line": 1, "column": 9}},
            "token_type": "Variable",
            "token_modifier": [],
            "data_type": {"class": "id", "location": DECLARATION},
            "is_original_decl": False,
        },
        {
            "definition": {"line": 0, "column": 4},
            "location": DECLARATION,
            "token_type": "Variable",
            "token_modifier": ["Constant"],
            "data_type": {"class": "agal", "type": "numero"},
            "is_original_decl": False,
        },
    ],
}
COMPILE_ERROR = "error: Se esperaba una expresion\n  --> main.agal:1:9\n   |\n 1 | def x =\n   |         -\n"


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "main.agal"
    path.write_text(SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def commands(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Answer every backend run with TOKENS and record the command lines."""
    seen: list[list[str]] = []

    def fake_run(cmd: list[str], **_: Any) -> subprocess.CompletedProcess[str]:
        seen.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(TOKENS), stderr="")

    monkeypatch.setattr("agaltypes.backend.subprocess.run", fake_run)
    return seen


class TestParser:
    """Test argument parsing."""

    def test_position_arguments(self) -> None:
        """Test that hover takes a file and a position."""
        args = build_parser().parse_args(["hover", "main.agal", "3", "7"])
        assert (args.command, args.file, args.line, args.column) == (
            "hover",
            Path("main.agal"),
            3,
            7,
        )

    def test_command_required(self) -> None:
        """Test that a subcommand is mandatory."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    """Test each subcommand against a fake backend."""

    def test_tokens(
        self,
        source: Path,
        commands: list[list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test listing tokens in document order."""
        assert main(["tokens", str(source)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("0,4-0,5\tVARIABLE\tx\t")
        assert lines[1].startswith("1,8-1,9\tVARIABLE\tx\t")
        assert commands == [["agal", "tokens", str(source)]]

    def test_hints(
        self,
        source: Path,
        commands: list[list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test printing inline hints for declarations."""
        assert main(["hints", str(source)]) == 0
        assert capsys.readouterr().out == "0,4\tx: Numero\n"

    def test_hover_symbol(
        self,
        source: Path,
        commands: list[list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test hovering a use resolves to the declared type."""
        assert main(["hover", str(source), "1", "8"]) == 0
        assert capsys.readouterr().out == "Numero\n"

    def test_hover_literal(
        self,
        source: Path,
        commands: list[list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test hovering a literal without a token."""
        assert main(["hover", str(source), "0", "9"]) == 0
        assert capsys.readouterr().out == "number: 0x1F (base 16, value 31)\n"

    def test_hover_nothing(
        self,
        source: Path,
        commands: list[list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test hovering empty space."""
        assert main(["hover", str(source), "1", "2"]) == 1
        assert "Nothing" in capsys.readouterr().err

    def test_definition(
        self,
        source: Path,
        commands: list[list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test jumping to a declaration."""
        assert main(["definition", str(source), "1", "8"]) == 0
        assert capsys.readouterr().out == "0,4\n"

    def test_exe_override(self, source: Path, commands: list[list[str]]) -> None:
        """Test that --exe selects the backend executable."""
        main(["--exe", "/opt/agal", "tokens", str(source)])
        assert commands[0][0] == "/opt/agal"

    def test_config_file(
        self,
        tmp_path: Path,
        source: Path,
        commands: list[list[str]],
    ) -> None:
        """Test that the executable can come from a settings file."""
        config = tmp_path / "agaltypes.yaml"
        config.write_text("agalang:\n  exe_path: /usr/bin/agal\n", encoding="utf-8")
        main(["--config", str(config), "tokens", str(source)])
        assert commands[0][0] == "/usr/bin/agal"


class TestFailures:
    """Test exit codes on errors."""

    def test_compile_error(
        self,
        source: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that compile errors are printed with their location."""
        monkeypatch.setattr(
            "agaltypes.backend.subprocess.run",
            lambda cmd, **_: subprocess.CompletedProcess(cmd, 1, stdout="", stderr=COMPILE_ERROR),
        )
        assert main(["hints", str(source)]) == 1
        assert capsys.readouterr().err == "main.agal:1:9: error: Se esperaba una expresion\n"

    @pytest.mark.parametrize(
        "command",
        [["hover", "0", "4"], ["definition", "0", "4"]],
    )
    def test_compile_error_on_lookup(
        self,
        source: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        command: list[str],
    ) -> None:
        """Test that position commands report compile errors too."""
        monkeypatch.setattr(
            "agaltypes.backend.subprocess.run",
            lambda cmd, **_: subprocess.CompletedProcess(cmd, 1, stdout="", stderr=COMPILE_ERROR),
        )
        name, line, column = command
        assert main([name, str(source), line, column]) == 1
        assert capsys.readouterr().err == "main.agal:1:9: error: Se esperaba una expresion\n"

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that an unreadable source file exits with 2."""
        assert main(["tokens", str(tmp_path / "nope.agal")]) == 2
        assert capsys.readouterr().err.startswith("agaltypes: ")

    def test_bad_config(self, tmp_path: Path, source: Path) -> None:
        """Test that an invalid settings file exits with 2."""
        config = tmp_path / "bad.yaml"
        config.write_text("agalang: 3\n", encoding="utf-8")
        assert main(["--config", str(config), "tokens", str(source)]) == 2
