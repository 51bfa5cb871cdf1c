"""Persist rendered artifacts to disk.

Every file is written with a temp-file-then-rename strategy
(:func:`atomic_write`) so that a crash or an interrupted run never leaves a
half-written ``api.ts`` next to a fresh ``definitions.ts``.  Files whose
content is unchanged are left alone, which keeps their modification times
stable for build tools watching the output directory.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from spectype.exceptions import SpectypeError

logger = logging.getLogger(__name__)


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    handle = None
    tmp_path: Optional[str] = None
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="\n",
        )
        tmp_path = handle.name
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
        handle.close()
        handle = None
        os.replace(tmp_path, path)
    except BaseException:
        if handle is not None:
            handle.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def write_artifacts(files: dict[str, str], out_dir: Path) -> list[Path]:
    """Write ``{filename: text}`` into *out_dir*.

    Returns:
        The paths whose content actually changed.

    Raises:
        SpectypeError: If the directory or a file cannot be written.
    """
    changed: list[Path] = []
    for filename, text in files.items():
        path = out_dir / filename
        try:
            if path.is_file() and path.read_text(encoding="utf-8") == text:
                logger.debug("%s is up to date", path)
                continue
            atomic_write(path, text)
        except OSError as exc:
            raise SpectypeError(f"Cannot write {path}: {exc}") from exc
        logger.debug("Wrote %s (%d bytes)", path, len(text.encode("utf-8")))
        changed.append(path)
    return changed
