"""Magazine catalog — read view over the host's item templates.

Wraps the host's ``templates.items`` mapping and yields only the
ammunition-container templates the patch passes work on.  The records are
the host's own dicts; callers mutate them in place.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping

from magpatcher.util.constants import MAGAZINE_PARENT_ID

log = logging.getLogger(__name__)

ItemRecord = dict[str, Any]


class MagazineCatalog:
    """Magazine lookup over a host item mapping.

    Args:
        items: Host item templates keyed by item id.
    """

    def __init__(self, items: Mapping[str, ItemRecord]) -> None:
        self.items = items

    def magazines(self) -> Iterator[tuple[str, ItemRecord, dict[str, Any]]]:
        """Yield ``(item_id, record, props)`` for every usable magazine.

        Magazines without ``_props`` or without a ``Cartridges`` entry are
        skipped, as are records whose props or cartridge entry is not a
        mapping.
        """
        for item_id, record in self.items.items():
            if not isinstance(record, dict) or record.get("_parent") != MAGAZINE_PARENT_ID:
                continue
            props = record.get("_props")
            if not props or not isinstance(props, dict) or not props.get("Cartridges"):
                log.debug("Skipping %s: no props or cartridges", item_id)
                continue
            cartridges = props["Cartridges"]
            if not isinstance(cartridges, list) or not isinstance(cartridges[0], Mapping):
                log.debug("Skipping %s: malformed cartridges", item_id)
                continue
            yield item_id, record, props

    def count(self) -> int:
        """Number of usable magazines."""
        return sum(1 for _ in self.magazines())

    @staticmethod
    def capacity(props: Mapping[str, Any]) -> int:
        """Cartridge capacity of a magazine, 0 if unknown or not an integer."""
        count = props["Cartridges"][0].get("_max_count")
        if isinstance(count, bool):
            return 0
        if isinstance(count, float) and count.is_integer():
            return int(count)
        return count if isinstance(count, int) else 0

    @staticmethod
    def display_name(item_id: str, record: Mapping[str, Any]) -> str:
        return record.get("_name") or item_id
