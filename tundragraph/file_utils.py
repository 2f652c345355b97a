"""Helpers for reading and writing whole text files."""

from __future__ import annotations

import os
from pathlib import Path


def write_to_file(file_path: str | os.PathLike[str], content: str) -> bool:
    """Write ``content`` to ``file_path``, creating parent directories.

    Returns True on success; raises OSError when the file cannot be written.
    """
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
    except OSError as exc:
        raise OSError(f"Error writing to file: {exc}") from exc
    return True


def read_from_file(file_path: str | os.PathLike[str]) -> str:
    """Return the whole content of ``file_path``.

    Raises FileNotFoundError when the file is missing and OSError when it
    cannot be read.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File does not exist: {file_path}")
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except OSError as exc:
        raise OSError(f"Error reading from file: {exc}") from exc


def file_exists(file_path: str | os.PathLike[str]) -> bool:
    """Return whether anything exists at ``file_path``."""
    return Path(file_path).exists()