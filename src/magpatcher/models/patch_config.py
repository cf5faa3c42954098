"""Patch configuration — the ten user-editable settings.

Provides a single ``PatchConfig`` dataclass that is produced once by the
validator and then passed to every patch pass.  On disk the settings keep
the key names players already know (``ammo.loadspeed``,
``DisableMagazineAmmoLoadPenalty``, …); ``FIELD_KEYS`` maps attribute
names to those keys.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from magpatcher.util.constants import (
    EFFECTIVE_MIN_MAGAZINE_SIZE,
    UNBOUNDED,
    VANILLA_BASE_LOAD_TIME,
    VANILLA_BASE_UNLOAD_TIME,
)

# On-disk keys, in file order.
KEY_LOAD_SPEED = "ammo.loadspeed"
KEY_UNLOAD_SPEED = "ammo.unloadspeed"
KEY_MIN_SIZE = "min.MagazineSize"
KEY_MAX_SIZE = "max.MagazineSize"
KEY_USE_GLOBAL_TIMES = "useGlobalTimes"
KEY_BASE_LOAD_TIME = "baseLoadTime"
KEY_BASE_UNLOAD_TIME = "baseUnloadTime"
KEY_DISABLE_LOAD_PENALTY = "DisableMagazineAmmoLoadPenalty"
KEY_RESIZE_3TO2 = "Resize3to2SlotMagazine"
KEY_DEBUG = "debug"

FIELD_KEYS: dict[str, str] = {
    "ammo_load_speed": KEY_LOAD_SPEED,
    "ammo_unload_speed": KEY_UNLOAD_SPEED,
    "min_magazine_size": KEY_MIN_SIZE,
    "max_magazine_size": KEY_MAX_SIZE,
    "use_global_times": KEY_USE_GLOBAL_TIMES,
    "base_load_time": KEY_BASE_LOAD_TIME,
    "base_unload_time": KEY_BASE_UNLOAD_TIME,
    "disable_load_penalty": KEY_DISABLE_LOAD_PENALTY,
    "resize_3to2_slot": KEY_RESIZE_3TO2,
    "debug": KEY_DEBUG,
}


@dataclass(frozen=True)
class PatchConfig:
    """All settings that drive the magazine patch passes.

    Every field has the documented default, so ``PatchConfig()`` is the
    configuration written to a freshly created file.

    Attributes:
        ammo_load_speed: Per-magazine load speed, 0–1. Not applied by any
            pass; kept so the file round-trips.
        ammo_unload_speed: Per-magazine unload speed, 0–1. Written to
            ``CheckOverride`` as a percentage.
        min_magazine_size: Smallest capacity patched, or -1 for no minimum.
        max_magazine_size: Largest capacity patched, or -1 for no maximum.
        use_global_times: Patch the global reload block instead of
            individual magazines.
        base_load_time: Global base load time, 0.01–1.
        base_unload_time: Global base unload time, 0.01–1.
        disable_load_penalty: Zero every magazine's ``LoadUnloadModifier``.
        resize_3to2_slot: Shrink 1x3 magazines to 1x2.
        debug: Log every item touched.
    """

    # -- Per-magazine mode -------------------------------------------
    ammo_load_speed: float = 0.85
    ammo_unload_speed: float = 0.3
    min_magazine_size: int = 10
    max_magazine_size: int = 60

    # -- Global mode -------------------------------------------------
    use_global_times: bool = False
    base_load_time: float = VANILLA_BASE_LOAD_TIME
    base_unload_time: float = VANILLA_BASE_UNLOAD_TIME

    # -- Toggles -----------------------------------------------------
    disable_load_penalty: bool = False
    resize_3to2_slot: bool = False
    debug: bool = False

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> PatchConfig:
        """Build a config from an on-disk key/value mapping.

        Unknown keys are ignored, missing keys keep their defaults.  No
        validation happens here; see ``engine.config_validator``.
        """
        return cls(**{
            attr: document[key]
            for attr, key in FIELD_KEYS.items()
            if key in document
        })

    def to_document(self) -> dict[str, Any]:
        """Return the settings keyed by their on-disk names, in file order."""
        return {key: getattr(self, attr) for attr, key in FIELD_KEYS.items()}

    @property
    def effective_min_size(self) -> int:
        if self.min_magazine_size == UNBOUNDED:
            return EFFECTIVE_MIN_MAGAZINE_SIZE
        return self.min_magazine_size

    @property
    def effective_max_size(self) -> float:
        if self.max_magazine_size == UNBOUNDED:
            return math.inf
        return self.max_magazine_size

    def accepts_capacity(self, capacity: int) -> bool:
        """Whether a magazine of *capacity* rounds falls inside the size window."""
        return self.effective_min_size <= capacity <= self.effective_max_size


def default_document() -> dict[str, Any]:
    """A fresh copy of the default on-disk document."""
    return PatchConfig().to_document()
