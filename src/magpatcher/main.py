"""Patcher entry point.

Runs once, after the host has loaded its database:
1. Load configuration (config/config.jsonc, created with defaults if absent)
2. Validate it and write corrections back
3. Wait for the host's database tables
4. Apply the magazine adjustments

Every fatal problem is logged and ends the run early; nothing is raised
into the host.

Usage:
    python -m magpatcher.main --tables database/tables.yaml
    # or via entry point:
    magpatcher --tables database/tables.yaml --output patched.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

from magpatcher.engine.config_validator import validate_and_persist
from magpatcher.engine.magazine_patcher import PatchSummary, apply_adjustments
from magpatcher.errors import CatalogUnavailable, DependencyError, PatcherError
from magpatcher.loaders.config_loader import load_or_create_config
from magpatcher.loaders.table_loader import FileTableProvider
from magpatcher.models.patch_config import PatchConfig
from magpatcher.util.constants import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_TABLES_PATH,
    TABLE_RETRY_ATTEMPTS,
    TABLE_RETRY_DELAY_S,
)
from magpatcher.util.log import SUCCESS, apply_debug_flag, setup_logging

log = logging.getLogger(__name__)


class TableSource(Protocol):
    """What the patcher needs from the host's database server."""

    def get_tables(self) -> Optional[dict[str, Any]]:
        ...


# ---------------------------------------------------------------------------
# Host-provided services
# ---------------------------------------------------------------------------


@dataclass
class HostServices:
    """Services handed over by the host at startup.

    Attributes:
        database_server: Source of the database tables.
        config_path: Location of the patcher's config file.
    """

    database_server: Optional[TableSource] = None
    config_path: str | Path = DEFAULT_CONFIG_PATH


# ===================================================================
# 1 + 2. Load and validate configuration
# ===================================================================


def load_configuration(config_path: str | Path = DEFAULT_CONFIG_PATH) -> PatchConfig:
    """Load, validate and (if needed) write back the config file.

    Raises:
        LoadError: The config file exists but is unusable.
    """
    document, created_default = load_or_create_config(config_path)
    report = validate_and_persist(document, created_default, config_path)
    apply_debug_flag(report.config.debug)
    return report.config


# ===================================================================
# 3. Wait for the host tables
# ===================================================================


async def wait_for_tables(
    database_server: TableSource,
    attempts: int = TABLE_RETRY_ATTEMPTS,
    delay: float = TABLE_RETRY_DELAY_S,
) -> dict[str, Any]:
    """Poll the host until its tables are available.

    Sleeps *delay* seconds between attempts without blocking the event
    loop.  There is no sleep after the final attempt.

    Raises:
        CatalogUnavailable: Still no tables after *attempts* polls.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    started = time.monotonic()
    for attempt in range(1, attempts + 1):
        tables = database_server.get_tables()
        if tables is not None:
            log.info("Database loaded in %dms on attempt %d",
                     (time.monotonic() - started) * 1000, attempt)
            return tables
        if attempt < attempts:
            log.warning("Database not ready on attempt %d/%d, retrying in %.1fs",
                        attempt, attempts, delay)
            await asyncio.sleep(delay)

    elapsed_ms = (time.monotonic() - started) * 1000
    raise CatalogUnavailable(f"Database unavailable after {attempts} attempts ({elapsed_ms:.0f}ms)")


# ===================================================================
# 4. Full startup sequence
# ===================================================================


async def post_db_load(
    services: Optional[HostServices],
    attempts: int = TABLE_RETRY_ATTEMPTS,
    delay: float = TABLE_RETRY_DELAY_S,
) -> Optional[PatchSummary]:
    """Run the whole patch sequence for the host.

    Args:
        services: Host services; None counts as a missing dependency.
        attempts: Table polls before giving up.
        delay: Seconds between table polls.

    Returns:
        A :class:`PatchSummary`, or None if the run was aborted.
    """
    try:
        return await _run(services, attempts, delay)
    except PatcherError as e:
        log.error("%s. Aborting.", e)
    except Exception:
        log.exception("Unexpected failure while patching. Aborting.")
    return None


async def _run(services: Optional[HostServices], attempts: int, delay: float) -> PatchSummary:
    if services is None:
        raise DependencyError("Host services are missing")
    if services.database_server is None:
        raise DependencyError("Database server could not be resolved")

    config = load_configuration(services.config_path)

    log.info("Loading database …")
    tables = await wait_for_tables(services.database_server, attempts, delay)

    summary = apply_adjustments(tables, config)
    log.log(SUCCESS, "All adjustments completed.")
    return summary


# ===================================================================
# Entry points
# ===================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="magpatcher",
        description="Apply magazine reload settings to a host database dump.",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH,
                        help=f"config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--tables", default=DEFAULT_TABLES_PATH,
                        help=f"YAML/JSON table dump (default: {DEFAULT_TABLES_PATH})")
    parser.add_argument("--output", default=None,
                        help="where to write the patched dump (default: overwrite --tables)")
    parser.add_argument("--retries", type=int, default=TABLE_RETRY_ATTEMPTS,
                        help="table polls before giving up")
    parser.add_argument("--retry-delay", type=float, default=TABLE_RETRY_DELAY_S,
                        help="seconds between table polls")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the patcher against a table dump.  Returns the exit code."""
    args = build_parser().parse_args(argv)
    setup_logging()
    log.info("=== Magazine patcher starting ===")

    provider = FileTableProvider(args.tables)
    services = HostServices(database_server=provider, config_path=args.config)
    summary = asyncio.run(post_db_load(services, attempts=args.retries, delay=args.retry_delay))
    if summary is None:
        return 1

    try:
        provider.save(args.output)
    except OSError:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
