"""
Place hierarchy resolution.

"London, England" is stored as two places: "England" under the implicit
root (ID 0), and "London" under "England". Resolution walks the name
from the right, creating missing places on the way.
"""

import logging
import re
import threading
from typing import Optional

from gedkeeper.genealogy.soundex import metaphone_soundex, standard_soundex
from gedkeeper.ontology import PLACE_NAME_MAX_LENGTH
from gedkeeper.storage import PlaceStore

logger = logging.getLogger(__name__)

_FIRST_SEGMENT = re.compile(r"([^,]*), (.+)")


class PlaceCache:
    """
    Place IDs already resolved during one unit of work, keyed by
    data set and full place name.

    IDs come from the database, so a cache must not outlive the
    transaction that produced them.
    """

    def __init__(self):
        self._ids: dict[tuple[int, str], int] = {}
        self.lock = threading.RLock()

    def get(self, data_set_id: int, place: str) -> Optional[int]:
        return self._ids.get((data_set_id, place))

    def set(self, data_set_id: int, place: str, place_id: int) -> None:
        self._ids[(data_set_id, place)] = place_id

    def clear(self, data_set_id: Optional[int] = None) -> None:
        with self.lock:
            if data_set_id is None:
                self._ids.clear()
            else:
                for key in [key for key in self._ids if key[0] == data_set_id]:
                    del self._ids[key]

    def __len__(self) -> int:
        return len(self._ids)


class PlaceResolver:
    """Find (or create) the place ID for a place name."""

    def __init__(self, store: PlaceStore, cache: PlaceCache):
        self.store = store
        self.cache = cache

    def resolve(self, place: str) -> int:
        # The global, top-level, place has an ID of zero.
        if place == "":
            return 0

        with self.cache.lock:
            place_id = self.cache.get(self.store.data_set_id, place)
            if place_id is not None:
                return place_id

            # Find the parent place ID first
            match = _FIRST_SEGMENT.match(place)
            if match:
                name = match.group(1)
                parent_id = self.resolve(match.group(2))
            else:
                name = place
                parent_id = 0
            name = name[:PLACE_NAME_MAX_LENGTH]

            place_id = self.store.find(parent_id, name)
            if place_id is None:
                place_id = self.store.upsert(
                    parent_id,
                    name,
                    std_soundex=standard_soundex(name),
                    dm_soundex=metaphone_soundex(name),
                )
                logger.debug("Created place %d %r under %d", place_id, name, parent_id)

            self.cache.set(self.store.data_set_id, place, place_id)
            return place_id
