"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationValueError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def _read(name: str) -> str | None:
    """Trimmed value of ``name``; blank counts as unset."""

    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise naming every missing one."""

    values = {name: _read(name) for name in names}
    missing = sorted(name for name, value in values.items() if value is None)
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return {name: value for name, value in values.items() if value is not None}


def require_env_var(name: str) -> str:
    return require_env_vars([name])[name]


def optional_env_str(name: str, default: str) -> str:
    value = _read(name)
    return default if value is None else value


def optional_env_int(name: str, default: int) -> int:
    value = _read(name)
    if value is None:
        return default
    if not value.isdigit():
        raise InvalidConfigurationValueError(name, value, "a non-negative integer")
    return int(value)


def optional_env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Split a comma-separated override, dropping blank entries."""

    value = _read(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())
