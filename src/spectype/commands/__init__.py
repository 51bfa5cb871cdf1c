"""Built-in CLI sub-commands for spectype.

* :mod:`~spectype.commands.generate` -- write ``definitions.ts`` and
  ``api.ts`` for an OpenAPI document.
* :mod:`~spectype.commands.inspect` -- list the operations and schemas the
  generator would see, without writing anything.

Single commands are plain callback functions registered on the root app;
multi-command groups export a :class:`typer.Typer` sub-application.
"""
