"""Per-document cache of semantic tokens with position lookups."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from agaltypes.errors import BackendStructuredFailure, BackendUnstructuredFailure

if TYPE_CHECKING:
    from agaltypes.backend import Backend
    from agaltypes.errors import Diagnostic
    from agaltypes.locations import Position
    from agaltypes.tokens import Document, SemanticToken
    from agaltypes.types import ClassType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    """Cached state of one document. Replaced whole, never mutated."""

    tokens: tuple[SemanticToken, ...]
    content_hash: str
    version: int | None
    module: ClassType | None


def _start_key(token: SemanticToken) -> Position:
    return token.location.start


class TokenIndex:
    """Token sets of open documents, keyed by document path.

    Tokens are fetched from the backend on first read and again whenever
    the document changed. One index serves a whole editing session; call
    clear() when a document closes.

    Example:
        index = TokenIndex(CommandBackend("agal"))
        doc = Document.from_path("main.agal", version=1)
        token = index.find_at(doc, Position(3, 8))

    """

    def __init__(self, backend: Backend) -> None:
        self.backend = backend
        self._entries: dict[str, _Entry] = {}
        self._errors: dict[str, Diagnostic] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def should_refresh(self, doc: Document) -> bool:
        """Return True if the cached tokens of doc are missing or stale.

        A matching version is enough to keep the cache; otherwise a matching
        content hash is. Editors without versions rely on the hash alone.
        """
        entry = self._entries.get(doc.path)
        if entry is None:
            return True
        if doc.version is not None and doc.version == entry.version:
            return False
        if doc.content_hash == entry.content_hash:
            if doc.version != entry.version:
                self._entries[doc.path] = replace(entry, version=doc.version)
            return False
        return True

    def read(self, doc: Document) -> tuple[SemanticToken, ...]:
        """Return the tokens of doc sorted by start position.

        Raises:
            BackendStructuredFailure: If the backend reported a compile
                error. The previous cache entry is kept and the diagnostic
                is available from last_error().

        """
        if self.should_refresh(doc):
            return self._refresh(doc)
        return self._entries[doc.path].tokens

    def _refresh(self, doc: Document) -> tuple[SemanticToken, ...]:
        logger.debug("Refreshing tokens of %s (version %s)", doc.path, doc.version)
        try:
            result = self.backend.fetch(doc.path)
        except BackendStructuredFailure as exc:
            self._errors[doc.path] = exc.diagnostic
            raise
        except BackendUnstructuredFailure:
            logger.warning("Could not read tokens of %s", doc.path, exc_info=True)
            return ()
        except Exception:
            # Backends other than CommandBackend may fail in their own ways
            logger.warning(
                "Backend %s failed on %s",
                type(self.backend).__name__,
                doc.path,
                exc_info=True,
            )
            return ()

        tokens = tuple(sorted(result.tokens, key=_start_key))
        self._entries[doc.path] = _Entry(
            tokens=tokens,
            content_hash=doc.content_hash,
            version=doc.version,
            module=result.module,
        )
        self._errors.pop(doc.path, None)
        logger.debug("Cached %d tokens for %s", len(tokens), doc.path)
        return tokens

    def _read_lenient(self, doc: Document) -> tuple[SemanticToken, ...]:
        try:
            return self.read(doc)
        except BackendStructuredFailure:
            return ()

    def find_at(self, doc: Document, position: Position) -> SemanticToken | None:
        """Return the first token whose location contains position."""
        for token in self._read_lenient(doc):
            if token.location.contains(position):
                return token
        return None

    def filter_at(self, doc: Document, position: Position) -> list[SemanticToken]:
        """Return every token whose location contains position."""
        return [t for t in self._read_lenient(doc) if t.location.contains(position)]

    def read_module(self, path: str) -> ClassType | None:
        """Return the cached module descriptor of a file, if any."""
        entry = self._entries.get(path)
        return entry.module if entry is not None else None

    def last_error(self, path: str) -> Diagnostic | None:
        """Return the most recent compile error reported for a file."""
        return self._errors.get(path)

    def clear(self, path: str) -> None:
        """Forget everything cached for a file."""
        self._entries.pop(path, None)
        self._errors.pop(path, None)
