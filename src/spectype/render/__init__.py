"""TypeScript rendering of generated declaration lists.

See :mod:`spectype.render.typescript`.
"""

from spectype.render.typescript import render_all, render_artifact, render_type

__all__ = ["render_all", "render_artifact", "render_type"]
