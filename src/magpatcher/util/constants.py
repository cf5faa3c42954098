"""Patcher constants — item markers, field domains, retry timing.

All magic numbers used by the loader, validator and patch passes,
centralized here.
"""

# -- Paths ---------------------------------------------------------------

DEFAULT_CONFIG_PATH: str = "config/config.jsonc"
"""Config file location, relative to the working directory."""

DEFAULT_TABLES_PATH: str = "database/tables.yaml"
"""Table dump used by the file-backed host."""

# -- Host catalog --------------------------------------------------------

MAGAZINE_PARENT_ID: str = "5448bc234bdc2d3c308b4569"
"""``_parent`` marker of every ammunition-container (magazine) template."""

UNBOUNDED: int = -1
"""Sentinel for a disabled magazine size bound."""

EFFECTIVE_MIN_MAGAZINE_SIZE: int = 2
"""Lower capacity bound used when ``min.MagazineSize`` is -1."""

# -- Startup -------------------------------------------------------------

TABLE_RETRY_ATTEMPTS: int = 5
"""How often the host tables are polled before giving up."""

TABLE_RETRY_DELAY_S: float = 1.0
"""Pause between two table polls in seconds."""

# -- Field domains -------------------------------------------------------

SPEED_RANGE: tuple[float, float] = (0.0, 1.0)
"""Allowed range for ``ammo.loadspeed`` / ``ammo.unloadspeed``."""

SPEED_FALLBACK: float = 1.0
"""Value substituted for an invalid speed."""

BASE_TIME_RANGE: tuple[float, float] = (0.01, 1.0)
"""Allowed range for ``baseLoadTime`` / ``baseUnloadTime``."""

MIN_MAGAZINE_SIZE_RANGE: tuple[int, int] = (2, 60)
MAX_MAGAZINE_SIZE_RANGE: tuple[int, int] = (10, 100)

DECIMALS: int = 2
"""Validated floats are rounded to this many places."""

# -- Vanilla reload timings ----------------------------------------------

VANILLA_BASE_LOAD_TIME: float = 0.85
VANILLA_BASE_UNLOAD_TIME: float = 0.3
