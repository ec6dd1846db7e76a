"""Configuration helpers: XDG cache paths and option files.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.smartfetch/`` on macOS and Windows.  See :func:`get_cache_dir`.
* **Option files** -- a JSON document deserialised into
  :class:`~smartfetch.models.FetchOptions` by :func:`load_options`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path

from smartfetch.exceptions import ConfigError
from smartfetch.models import FetchOptions

_APP_NAME = "smartfetch"


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/smartfetch/`` (default ``~/.cache/smartfetch/``).
    On macOS/Windows: ``~/.smartfetch/cache/``.

    Returns:
        Absolute path to the cache directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CACHE_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".cache"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_options(path: str | Path) -> FetchOptions:
    """Load and validate fetch options from a JSON file.

    Unknown keys are rejected; missing keys fall back to the defaults.

    Raises:
        ConfigError: If the file is missing, contains invalid JSON, or
            fails Pydantic validation.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Options file not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return FetchOptions.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid options at {path}: {exc}") from exc
