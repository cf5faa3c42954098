"""Patcher errors.

Fatal conditions abort the current run; ``post_db_load`` catches and logs
them so the host never sees an exception.  Field-level problems are not
errors at all: the validator records a ``FieldCorrection`` and moves on.
"""

from __future__ import annotations


class PatcherError(Exception):
    """Base class for all patcher failures."""


class DependencyError(PatcherError):
    """A required host service is missing at startup."""


class LoadError(PatcherError):
    """The config file exists but cannot be used (empty or unparseable)."""


class CatalogUnavailable(PatcherError):
    """The host's database tables never became available."""


class WriteBackError(PatcherError):
    """Writing the corrected config back to disk failed."""
