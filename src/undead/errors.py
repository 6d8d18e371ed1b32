"""
Error taxonomy for undead.

Fatal errors (RootNotFound, TargetNotFound, ConfigError) abort a run; the
per-file and per-statement ones are absorbed by the pipeline and reported on
the scan result.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class UndeadError(Exception):
    """Base class for every error raised by undead."""

    fatal = True

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class RootNotFound(UndeadError):
    """No ancestor of the start path carries a project root marker."""


class TargetNotFound(UndeadError):
    """A target path given on the command line does not exist."""


class ConfigError(UndeadError):
    """The configuration file is unreadable or has invalid values."""


class ParseError(UndeadError):
    """A source file could not be parsed into import statements."""

    fatal = False


class InvalidRelativeImport(UndeadError):
    """A relative import climbs above the filesystem or project root."""

    fatal = False


class FileVanished(UndeadError):
    """A file disappeared (or became unreadable) after it was enumerated."""

    fatal = False
