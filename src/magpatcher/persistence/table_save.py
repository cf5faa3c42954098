"""Table save — writes patched host tables back to a dump file.

``.json`` targets are written as indented JSON, everything else as YAML.
The write goes through a temporary file that replaces the target.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)


def _render(tables: dict[str, Any], suffix: str) -> str:
    if suffix == ".json":
        return json.dumps(tables, indent=2, ensure_ascii=False) + "\n"
    return yaml.dump(tables, default_flow_style=False, allow_unicode=True, sort_keys=False)


def save_tables(tables: dict[str, Any], path: str | Path) -> None:
    """Serialize *tables* to *path* atomically.

    Args:
        tables: Host table mapping.
        path: Output file; the suffix selects JSON or YAML.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_suffix(out.suffix + ".tmp")
    try:
        tmp.write_text(_render(tables, out.suffix.lower()), encoding="utf-8")
        tmp.replace(out)
        log.info("Tables saved to %s", out)
    except Exception:
        log.exception("Failed to save tables to %s", out)
        if tmp.exists():
            tmp.unlink(missing_ok=True)
        raise
