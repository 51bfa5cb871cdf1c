"""Shared test fixtures for spectype.

Provides reusable fixtures for loading document fixtures, building small
documents inline, creating isolated config environments, managing output
state, and running CLI commands.  These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from spectype.models import Document
from spectype.output import OutputFormat, OutputManager, reset_output, set_output
from spectype.parser import SchemaResolver, parse_document


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES_DIR / "petstore.json"


@pytest.fixture
def petstore_raw(petstore_path: Path) -> dict[str, Any]:
    """Load the raw petstore document dict."""
    with open(petstore_path) as f:
        return json.load(f)


@pytest.fixture
def petstore(petstore_raw: dict[str, Any]) -> Document:
    """Parsed petstore document."""
    return parse_document(petstore_raw, "3.0.3")


@pytest.fixture
def petstore_resolver(petstore: Document) -> SchemaResolver:
    return SchemaResolver.from_document(petstore)


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory building a parsed document from ``paths`` and ``schemas`` dicts.

    Example::

        document = make_document(
            paths={"/pets": {"get": {"responses": {"200": {"description": "ok"}}}}},
            schemas={"Pet": {"type": "object"}},
        )
    """

    def _make(
        paths: dict[str, Any] | None = None,
        schemas: dict[str, Any] | None = None,
        version: str = "3.0.3",
        **components: Any,
    ) -> Document:
        raw: dict[str, Any] = {
            "openapi": version,
            "info": {"title": "Test API", "version": "1.0.0"},
            "paths": paths or {},
            "components": {"schemas": schemas or {}, **components},
        }
        return parse_document(raw, version)

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs never
    land in the real user directory, clears all SPECTYPE_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "SPECTYPE_REMOVE_TAG_FROM_OPERATION_ID",
        "SPECTYPE_READONLY_WRITEONLY",
        "SPECTYPE_TYPE_NAMESPACE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Set up a quiet output manager for tests that don't care about output.

    Installs a PLAIN-format, quiet OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
