"""Generate command -- turn an OpenAPI document into TypeScript sources.

Runs the full pipeline for one document: load, parse, generate, render and
write.  Artifacts are isolated from each other, so a client that cannot be
built (for example because two operations share a method name) does not stop
``definitions.ts`` from being written; the command still exits with
:data:`~spectype.exit_codes.EXIT_GENERATION_FAILED` in that case.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from spectype.commands._common import load_document
from spectype.config import resolve_config
from spectype.exceptions import GenerationError, SpectypeError
from spectype.generator import generate
from spectype.models import GenerationResult
from spectype.output import OutputFormat, error, get_output, success
from spectype.render import render_all
from spectype.writer import write_artifacts


def generate_command(
    ctx: typer.Context,
    source: str = typer.Argument(
        ..., help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    out_dir: Path = typer.Option(
        Path("."), "--out", "-o", help="Directory the generated files are written to."
    ),
    remove_tag: bool = typer.Option(
        False,
        "--remove-tag-from-operation-id",
        "-r",
        help="Strip the tag name from exposed method names (userList -> List).",
    ),
    modifiers: Optional[bool] = typer.Option(
        None,
        "--readonly-writeonly/--no-readonly-writeonly",
        help="Force readOnly/writeOnly projections on or off (default: detect).",
    ),
    namespace: Optional[str] = typer.Option(
        None, "--namespace", help="Import the type library as this namespace."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Project config file (default: ./spectype.json)."
    ),
) -> None:
    """Generate definitions.ts and api.ts from an OpenAPI 3.x document.

    Example::

        spectype generate openapi.yaml --out src/api
        spectype generate https://example.com/openapi.json -r --namespace Types
        cat openapi.json | spectype --dry-run generate -
    """
    dry_run = bool(ctx.obj and ctx.obj.get("dry_run"))

    try:
        config = resolve_config(
            cli_remove_tag=True if remove_tag else None,
            cli_modifiers=modifiers,
            cli_namespace=namespace,
            config_path=config_path,
        )
        document = load_document(source)
        result = generate(document, config)
        _report(result)

        files = render_all(result.artifacts, config.client_name)
        output = get_output()
        if dry_run:
            if output.format != OutputFormat.JSON:
                for filename, text in files.items():
                    output.print_source(text, filename)
            written: list[Path] = []
        else:
            written = write_artifacts(files, out_dir)
            for filename in files:
                path = out_dir / filename
                state = "wrote" if path in written else "unchanged"
                success(f"{state} {path}")

        if output.format == OutputFormat.JSON:
            output.print_json(_summary(result, files, written, dry_run))

        if not result.ok:
            names = ", ".join(failure.name for failure in result.failures)
            raise GenerationError(f"Failed to generate: {names}")
    except SpectypeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _report(result: GenerationResult) -> None:
    output = get_output()
    for item in result.diagnostics:
        output.diagnostic(item)
    output.debug(f"readOnly/writeOnly projections: {'on' if result.modifiers else 'off'}")


def _summary(
    result: GenerationResult,
    files: dict[str, str],
    written: list[Path],
    dry_run: bool,
) -> dict:
    return {
        "ok": result.ok,
        "dry_run": dry_run,
        "files": list(files),
        "written": [str(path) for path in written],
        "failures": [failure.model_dump() for failure in result.failures],
        "diagnostics": [item.model_dump(mode="json") for item in result.diagnostics],
    }
