"""Shared fixtures: an in-memory backend and token builders."""

from collections.abc import Callable
from typing import TypeAlias

import pytest

from agaltypes.backend import Backend, BackendResult
from agaltypes.index import TokenIndex
from agaltypes.locations import Location, Position
from agaltypes.tokens import Document, SemanticToken, TokenKind
from agaltypes.types import DataType

DOC_PATH = "/src/main.agal"


class FakeBackend(Backend):
    """Backend serving canned results and recording every fetch."""

    def __init__(self) -> None:
        self.results: dict[str, BackendResult | Exception] = {}
        self.calls: list[str] = []

    def fetch(self, path: str) -> BackendResult:
        self.calls.append(path)
        result = self.results.get(path, BackendResult(tokens=()))
        if isinstance(result, Exception):
            raise result
        return result

    def serve(self, *tokens: SemanticToken, path: str = DOC_PATH) -> None:
        self.results[path] = BackendResult(tokens=tokens)


TokenFactory: TypeAlias = Callable[..., SemanticToken]


def build_token(
    line: int,
    column: int,
    end_column: int,
    data_type: DataType | None = None,
    *,
    kind: TokenKind = TokenKind.VARIABLE,
    definition: Position | None = None,
    end_line: int | None = None,
    original: bool = False,
) -> SemanticToken:
    start = Position(line, column)
    return SemanticToken(
        definition=definition or start,
        location=Location(start, Position(end_line or line, end_column)),
        kind=kind,
        data_type=data_type,
        is_original_declaration=original,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def index(backend: FakeBackend) -> TokenIndex:
    return TokenIndex(backend)


@pytest.fixture
def doc() -> Document:
    return Document(DOC_PATH, "x = 1\n", version=1)


@pytest.fixture
def make_token() -> TokenFactory:
    """Build a single-line token: make_token(line, column, end_column, type)."""
    return build_token
