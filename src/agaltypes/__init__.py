"""agaltypes - type lookup and rendering for Agal editor tooling."""

from agaltypes.backend import (
    Backend,
    BackendResult,
    CommandBackend,
)
from agaltypes.codecs import (
    canonical_key,
    from_builtins,
    to_builtins,
)
from agaltypes.config import (
    Settings,
    load_settings,
)
from agaltypes.errors import (
    BackendError,
    BackendStructuredFailure,
    BackendUnstructuredFailure,
    Diagnostic,
)
from agaltypes.formats.json import (
    from_json,
    to_json,
)
from agaltypes.index import TokenIndex
from agaltypes.locations import (
    Location,
    Position,
)
from agaltypes.printer import (
    RenderOptions,
    render,
)
from agaltypes.queries import (
    InlineHint,
    TypeHover,
    definition_at,
    describe,
    hover,
    inline_hints,
    rename_locations,
)
from agaltypes.resolver import resolve
from agaltypes.simplifier import simplify
from agaltypes.tokens import (
    Document,
    SemanticToken,
    TokenKind,
    TokenModifier,
)
from agaltypes.types import DataType

__all__ = [
    # Backend
    "Backend",
    "BackendError",
    "BackendResult",
    "BackendStructuredFailure",
    "BackendUnstructuredFailure",
    "CommandBackend",
    # Types
    "DataType",
    "Diagnostic",
    # Tokens
    "Document",
    # Queries
    "InlineHint",
    "Location",
    "Position",
    # Rendering
    "RenderOptions",
    "SemanticToken",
    # Configuration
    "Settings",
    "TokenIndex",
    "TokenKind",
    "TokenModifier",
    "TypeHover",
    # Serialization
    "canonical_key",
    "definition_at",
    "describe",
    "from_builtins",
    "from_json",
    "hover",
    "inline_hints",
    "load_settings",
    "rename_locations",
    "render",
    "resolve",
    "simplify",
    "to_builtins",
    "to_json",
]
