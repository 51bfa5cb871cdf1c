"""Generator configuration with XDG paths and precedence resolution.

This module resolves the :class:`~spectype.models.GeneratorConfig` used by a
generation run and knows where spectype keeps its own files:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.spectype/`` on macOS and Windows.  Only the data directory is used,
  for crash logs.  See :func:`get_data_dir`.
* **Project config** -- an optional ``spectype.json`` in the working
  directory (or any file passed with ``--config``) holding
  :class:`~spectype.models.GeneratorConfig` fields.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project config and the defaults.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from spectype.exceptions import ConfigError
from spectype.models import GeneratorConfig

_APP_NAME = "spectype"
_PROJECT_CONFIG_FILENAME = "spectype.json"

ENV_REMOVE_TAG = "SPECTYPE_REMOVE_TAG_FROM_OPERATION_ID"
ENV_READONLY_WRITEONLY = "SPECTYPE_READONLY_WRITEONLY"
ENV_TYPE_NAMESPACE = "SPECTYPE_TYPE_NAMESPACE"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/spectype/`` (default ``~/.local/share/spectype/``).
    On macOS/Windows: ``~/.spectype/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config(path: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project configuration from *path* or ``./spectype.json``.

    An explicit *path* must exist; the implicit ``./spectype.json`` is
    optional.

    Returns:
        The parsed JSON object, or ``None`` if no implicit file exists.

    Raises:
        ConfigError: If the file is missing (explicit path only), is not
            valid JSON, or is not a JSON object.
    """
    explicit = path is not None
    if path is None:
        path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Environment ---


def _env_flag(name: str, allow_auto: bool = False) -> Optional[bool]:
    """Read a boolean environment variable; unset (or ``auto``) gives ``None``."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    if allow_auto and value == "auto":
        return None
    expected = "true/false" + ("/auto" if allow_auto else "")
    raise ConfigError(f"Invalid value for {name}: {raw!r} (expected {expected})")


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    remove_tag = _env_flag(ENV_REMOVE_TAG)
    if remove_tag is not None:
        overrides["remove_tag_from_operation_id"] = remove_tag
    modifiers = _env_flag(ENV_READONLY_WRITEONLY, allow_auto=True)
    if modifiers is not None:
        overrides["add_readonly_writeonly_modifiers"] = modifiers
    namespace = os.environ.get(ENV_TYPE_NAMESPACE)
    if namespace:
        overrides["type_namespace"] = namespace
    return overrides


# --- Precedence resolution ---


def resolve_config(
    cli_remove_tag: Optional[bool] = None,
    cli_modifiers: Optional[bool] = None,
    cli_namespace: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> GeneratorConfig:
    """Resolve the generator configuration.

    Precedence (high to low):
        1. CLI flags (``cli_remove_tag``, ``cli_modifiers``, ``cli_namespace``)
        2. Environment variables (``SPECTYPE_REMOVE_TAG_FROM_OPERATION_ID``,
           ``SPECTYPE_READONLY_WRITEONLY``, ``SPECTYPE_TYPE_NAMESPACE``)
        3. Project config (``--config`` file or ``./spectype.json``)
        4. Defaults

    ``None`` for a CLI argument means "not given on the command line".

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    merged: dict[str, Any] = {}

    project = load_project_config(config_path)
    if project is not None:
        merged.update(project)

    merged.update(_env_overrides())

    if cli_remove_tag is not None:
        merged["remove_tag_from_operation_id"] = cli_remove_tag
    if cli_modifiers is not None:
        merged["add_readonly_writeonly_modifiers"] = cli_modifiers
    if cli_namespace is not None:
        merged["type_namespace"] = cli_namespace or None

    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
