"""Config loader — reads config/config.jsonc into a raw key/value document.

The file is JSON with ``//`` and ``/* */`` comments.  Parsing happens in two
phases: comment syntax is stripped first, then the rest is decoded as
strict JSON.  Field-level checking is left to ``engine.config_validator``;
this module only fails when the document as a whole is unusable.

If the file does not exist, a default file with guidance comments is
written and the default document is returned.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable

from magpatcher.errors import LoadError
from magpatcher.models.patch_config import default_document
from magpatcher.util.constants import DEFAULT_CONFIG_PATH

log = logging.getLogger(__name__)

DEFAULT_COMMENTS: tuple[str, ...] = (
    "Default config created. Adjust values as needed.",
    "ammo.loadspeed and ammo.unloadspeed: 0 to 1,",
    "min.MagazineSize: -1, 2-60,",
    "max.MagazineSize: -1, 10-100",
    "useGlobalTimes: true for global times, false for per-magazine",
    "baseLoadTime and baseUnloadTime: 0.01 to 1, 2 decimals",
    "DisableMagazineAmmoLoadPenalty: true to set LoadUnloadModifier to 0",
    "Resize3to2SlotMagazine: true to resize 3x1 magazines to 2x1",
    "Vanilla Timings are 0.85 (baseLoadTime) and 0.3 (baseUnloadTime)",
)

UPDATE_COMMENTS: tuple[str, ...] = (
    "Updated with validated values",
    "See initial comments for details",
)

# String literals are matched first so comment markers inside them survive.
_COMMENT_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)


def strip_comments(text: str) -> str:
    """Remove ``//`` line comments and ``/* */`` block comments."""
    return _COMMENT_RE.sub(lambda m: m.group(1) or "", text)


def render_config(document: dict[str, Any], comment_lines: Iterable[str] = ()) -> str:
    """Serialize *document* with 2-space indentation plus trailing comments."""
    lines = [json.dumps(document, indent=2, ensure_ascii=False)]
    lines.extend(f"// {line}" for line in comment_lines)
    return "\n".join(lines) + "\n"


def write_config(
    path: str | Path,
    document: dict[str, Any],
    comment_lines: Iterable[str] = (),
) -> None:
    """Write *document* to *path* atomically via a temporary sibling file.

    Raises:
        OSError: The file could not be written.
    """
    out = Path(path)
    tmp = out.with_suffix(out.suffix + ".tmp")
    try:
        tmp.write_text(render_config(document, comment_lines), encoding="utf-8")
        tmp.replace(out)
    except OSError:
        log.exception("Failed to write config to %s", out)
        if tmp.exists():
            tmp.unlink(missing_ok=True)
        raise


def load_or_create_config(path: str | Path = DEFAULT_CONFIG_PATH) -> tuple[dict[str, Any], bool]:
    """Load the raw config document, creating a default file if needed.

    Args:
        path: Location of the ``.jsonc`` config file.

    Returns:
        Tuple of (document, created_default).  *created_default* is True
        when the file did not exist and the defaults were just written.

    Raises:
        LoadError: The file is empty, unreadable, not valid JSON once
            comments are removed, or not a JSON object.  Also raised when
            the default file cannot be created.
    """
    p = Path(path)

    try:
        if not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)
            log.info("Config directory created: %s", p.parent)

        if not p.exists():
            log.info("Config file not found at %s, creating default", p)
            document = default_document()
            write_config(p, document, DEFAULT_COMMENTS)
            return document, True

        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Config file {p} could not be read or created: {e}") from e

    if not text.strip():
        raise LoadError(f"Config file {p} is empty")

    try:
        document = json.loads(strip_comments(text).strip())
    except json.JSONDecodeError as e:
        raise LoadError(f"Config file {p} is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise LoadError(f"Config file {p} must contain a JSON object, got {type(document).__name__}")

    log.info("Loaded config from %s (%d keys)", p, len(document))
    return document, False
