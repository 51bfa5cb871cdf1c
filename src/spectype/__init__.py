"""spectype -- Generate a TypeScript type library and typed client from OpenAPI 3.x.

This package reads an OpenAPI document and derives two artifacts from it: a
*type library* with one declaration per named schema, and a *typed client*
exposing one callable per operation, grouped by tag into namespace accessors.

Typical workflow::

    spectype generate openapi.yaml --out src/api   # writes definitions.ts + api.ts
    spectype inspect operations openapi.yaml       # list the analysed operations

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Generator configuration resolution (flags, env, project file).
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    writer: Atomic persistence of rendered artifacts.
"""

__version__ = "0.1.0"
