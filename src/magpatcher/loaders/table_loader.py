"""Table loader — reads a host database dump for running outside a host.

The dump mirrors the host's table layout::

    templates:
      items:
        <item id>: {_id, _name, _parent, _props: {...}}
    globals:
      config:
        SkillsSettings:
          Reloading: {BaseLoadTime, BaseUnloadTime}

YAML and JSON dumps are both accepted (JSON goes through the YAML parser).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from magpatcher.persistence.table_save import save_tables
from magpatcher.util.constants import DEFAULT_TABLES_PATH

log = logging.getLogger(__name__)


def load_tables(path: str | Path = DEFAULT_TABLES_PATH) -> dict[str, Any]:
    """Load a table dump.

    Args:
        path: YAML or JSON file.

    Returns:
        The table mapping (empty for an empty file).

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: The top level is not a mapping.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Table dump {path} must be a mapping, got {type(data).__name__}")

    items = (data.get("templates") or {}).get("items") or {}
    log.info("Loaded tables from %s (%d item templates)", path, len(items))
    return data


class FileTableProvider:
    """File-backed stand-in for the host's database server.

    ``get_tables()`` returns None until the dump file exists, which is how
    a host that is still loading looks to the patcher.

    Args:
        path: Location of the table dump.
    """

    def __init__(self, path: str | Path = DEFAULT_TABLES_PATH) -> None:
        self._path = Path(path)
        self._tables: Optional[dict[str, Any]] = None

    def get_tables(self) -> Optional[dict[str, Any]]:
        """Return the loaded tables, loading them on first success."""
        if self._tables is None:
            if not self._path.exists():
                log.debug("Table dump %s not present yet", self._path)
                return None
            self._tables = load_tables(self._path)
        return self._tables

    def save(self, path: str | Path | None = None) -> None:
        """Write the (patched) tables back, to *path* or the source file."""
        if self._tables is None:
            raise RuntimeError("No tables loaded; nothing to save")
        save_tables(self._tables, path or self._path)
