"""Settings loaded from YAML.

The file mirrors the editor extension's settings:

    agalang:
      exe_path: /usr/local/bin/agal
      timeout: 10
      types:
        showString: true
        maxLength: 15

Every key is optional.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from agaltypes.printer import RenderOptions

_SECTION = "agalang"


@dataclass(frozen=True)
class Settings:
    """Backend and rendering settings."""

    executable: str = "agal"
    show_string: bool = True
    max_length: int = 15
    timeout: float | None = None

    def render_options(self) -> RenderOptions:
        """Options for inline hints: bounded, single-line strings."""
        return RenderOptions(
            max_length=self.max_length,
            show_string_contents=self.show_string,
            multiline_strings=False,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from a parsed document.

        Raises:
            ValueError: If a section is not a mapping or a value has the
                wrong type

        """
        section = _mapping(data.get(_SECTION), _SECTION)
        types = _mapping(section.get("types"), f"{_SECTION}.types")
        defaults = cls()
        return cls(
            executable=_typed(section, "exe_path", str, defaults.executable),
            show_string=_typed(types, "showString", bool, defaults.show_string),
            max_length=_typed(types, "maxLength", int, defaults.max_length),
            timeout=_typed(section, "timeout", (int, float), defaults.timeout),
        )


def _mapping(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{name}' must be a mapping, got {type(value).__name__}"
        raise ValueError(msg)
    return value


def _typed(
    section: dict[str, Any],
    key: str,
    expected: type | tuple[type, ...],
    default: Any,
) -> Any:
    value = section.get(key)
    if value is None:
        return default
    # bool is an int subclass; only accept it where a bool is expected
    if not isinstance(value, expected) or (
        isinstance(value, bool) and expected is not bool
    ):
        msg = f"'{key}' has invalid value {value!r}"
        raise ValueError(msg)
    return value


def load_settings(path: str | Path) -> Settings:
    """Load settings from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML or has the wrong shape

    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"Failed to parse configuration: {exc}"
        raise ValueError(msg) from exc
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        msg = "Configuration root must be a mapping"
        raise ValueError(msg)
    return Settings.from_dict(data)
