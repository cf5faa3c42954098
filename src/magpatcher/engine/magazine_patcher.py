"""Magazine patcher — applies the validated config to the host tables.

Four independent passes, each a single scan over the magazine templates:

- per-magazine unload speed (``CheckOverride``), or
- global base load/unload times (``SkillsSettings.Reloading``),
- load/unload penalty (``LoadUnloadModifier``),
- 3x1 → 2x1 resize (``Height``).

``useGlobalTimes`` selects exactly one of the first two.  All passes mutate
the host's records in place and return how many values they changed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from magpatcher.engine.catalog import ItemRecord, MagazineCatalog
from magpatcher.errors import CatalogUnavailable
from magpatcher.models.patch_config import PatchConfig

log = logging.getLogger(__name__)

MODE_GLOBAL = "global"
MODE_PER_MAGAZINE = "per-magazine"


@dataclass
class PatchSummary:
    """What one run changed.

    Attributes:
        mode: ``global`` or ``per-magazine``.
        magazines: Usable magazine templates found.
        speeds_adjusted: Magazines whose ``CheckOverride`` was set.
        global_times_adjusted: Global reload fields changed (0–2).
        global_block_missing: The host had no reloading settings block.
        penalties_adjusted: Magazines whose ``LoadUnloadModifier`` changed.
        magazines_resized: Magazines shrunk from 3 to 2 cells.
    """

    mode: str = MODE_PER_MAGAZINE
    magazines: int = 0
    speeds_adjusted: int = 0
    global_times_adjusted: int = 0
    global_block_missing: bool = False
    penalties_adjusted: int = 0
    magazines_resized: int = 0


# ===================================================================
# Passes
# ===================================================================


def adjust_magazine_speeds(items: Mapping[str, ItemRecord], config: PatchConfig) -> int:
    """Set ``CheckOverride`` on every magazine inside the size window."""
    catalog = MagazineCatalog(items)
    changed = 0
    for item_id, record, props in catalog.magazines():
        size = catalog.capacity(props)
        if size == 0:
            log.debug("Skipping %s: invalid size", item_id)
            continue
        if not config.accepts_capacity(size):
            continue
        props["CheckOverride"] = config.ammo_unload_speed * 100
        changed += 1
        log.debug("Adjusted %s: CheckOverride=%s",
                  catalog.display_name(item_id, record), props["CheckOverride"])
    return changed


def _reloading_settings(tables: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    node: Any = tables
    for key in ("globals", "config", "SkillsSettings", "Reloading"):
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node if isinstance(node, dict) else None


def adjust_global_times(tables: Mapping[str, Any], config: PatchConfig) -> Optional[int]:
    """Overwrite the global base load/unload times.

    Returns:
        Number of fields changed, or None if the host has no reloading
        settings block (nothing is changed in that case).
    """
    reloading = _reloading_settings(tables)
    if reloading is None:
        log.error("Globals or Reloading settings missing; skipping global time adjustments")
        return None

    changes = []
    for field_name, value in (("BaseLoadTime", config.base_load_time),
                              ("BaseUnloadTime", config.base_unload_time)):
        old = reloading.get(field_name)
        if old != value:
            changes.append(f"{field_name}={old}->{value}")
            reloading[field_name] = value

    if changes:
        log.debug("Global times adjusted: %s", ", ".join(changes))
    return len(changes)


def adjust_load_penalty(items: Mapping[str, ItemRecord], disable: bool) -> int:
    """Zero the ammo load penalty, or restore the neutral modifier 1."""
    catalog = MagazineCatalog(items)
    changed = 0
    for item_id, record, props in catalog.magazines():
        old = props.get("LoadUnloadModifier")
        if disable:
            props["LoadUnloadModifier"] = 0
        elif old != 1:
            props["LoadUnloadModifier"] = 1
        if old != props["LoadUnloadModifier"]:
            changed += 1
            log.debug("Adjusted %s: LoadUnloadModifier=%s",
                      catalog.display_name(item_id, record), props["LoadUnloadModifier"])
    return changed


def resize_magazines(items: Mapping[str, ItemRecord]) -> int:
    """Shrink every 1-wide, 3-high magazine to 2 high."""
    catalog = MagazineCatalog(items)
    changed = 0
    for item_id, record, props in catalog.magazines():
        if props.get("Height") == 3 and props.get("Width") == 1:
            props["Height"] = 2
            changed += 1
            log.debug("Resized %s: Height=%s, Width=%s",
                      catalog.display_name(item_id, record), props["Height"], props["Width"])
    return changed


# ===================================================================
# Orchestration
# ===================================================================


def apply_adjustments(tables: Mapping[str, Any], config: PatchConfig) -> PatchSummary:
    """Run every pass the config enables against the host tables.

    Raises:
        CatalogUnavailable: ``templates.items`` is missing.
    """
    templates = tables.get("templates")
    items = templates.get("items") if isinstance(templates, Mapping) else None
    if items is None:
        raise CatalogUnavailable("templates.items is missing; no adjustments applied")

    summary = PatchSummary(magazines=MagazineCatalog(items).count())

    if config.use_global_times:
        summary.mode = MODE_GLOBAL
        changed = adjust_global_times(tables, config)
        if changed is None:
            summary.global_block_missing = True
        else:
            summary.global_times_adjusted = changed
    else:
        summary.speeds_adjusted = adjust_magazine_speeds(items, config)
        log.info("CheckOverride set on %d of %d magazines",
                 summary.speeds_adjusted, summary.magazines)

    if config.disable_load_penalty:
        summary.penalties_adjusted = adjust_load_penalty(items, disable=True)
        log.info("Load penalty removed from %d magazines", summary.penalties_adjusted)

    if config.resize_3to2_slot:
        summary.magazines_resized = resize_magazines(items)
        log.info("Resized %d magazines from 3x1 to 2x1", summary.magazines_resized)

    return summary
