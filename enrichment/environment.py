"""Helpers for loading environment variable files across the project."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Tuple

from dotenv import load_dotenv

# Files already processed; the CLI and uvicorn may both import the package.
_LOADED_FILES: Tuple[Path, ...] | None = None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _iter_candidate_files() -> Iterable[Path]:
    """Yield potential dotenv files in order of precedence."""

    explicit_paths = os.environ.get("ENRICHMENT_ENV_FILE")
    if explicit_paths:
        for value in explicit_paths.split(os.pathsep):
            if value.strip():
                yield Path(value.strip()).expanduser()
        return

    root = _project_root()
    yield root / ".env.local"
    yield root / ".env"


def load_environment() -> Tuple[Path, ...]:
    """Load dotenv files once and return the paths that were applied."""

    global _LOADED_FILES
    if _LOADED_FILES is not None:
        return _LOADED_FILES

    loaded = []
    for candidate in _iter_candidate_files():
        if candidate.is_file():
            load_dotenv(candidate, override=False)
            loaded.append(candidate)
    _LOADED_FILES = tuple(loaded)
    return _LOADED_FILES


__all__ = ["load_environment"]
