"""Asynchronous word enrichment pipeline."""

from .environment import load_environment

# Load .env-style files on import.
load_environment()

__all__ = ["load_environment"]
