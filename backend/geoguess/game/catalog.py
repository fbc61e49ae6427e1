from __future__ import annotations

import json
import logging
import random
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .models import Location


log = logging.getLogger(__name__)


def format_category_name(category: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in category.split("-"))


class LocationCatalog:
    """Read-only pool of guessable locations, grouped by category."""

    def __init__(self, locations: Mapping[str, Iterable[Mapping[str, Any]]], rng: random.Random | None = None) -> None:
        self._locations: dict[str, list[Location]] = {
            category: [Location.from_dict(item) for item in items]
            for category, items in locations.items()
        }
        self._rng = rng or random.Random()

    @classmethod
    def from_file(cls, path: str | Path, rng: random.Random | None = None) -> LocationCatalog:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            log.error("Location file %s not found, starting with an empty catalog", path)
            data = {}
        log.info("Loaded %d location categories from %s", len(data), path)
        return cls(data, rng=rng)

    def list_categories(self) -> list[str]:
        return list(self._locations.keys())

    def has_category(self, category: str) -> bool:
        return category in self._locations

    def list_locations(self, category: str) -> list[Location]:
        return list(self._locations.get(category, []))

    def index_of(self, category: str, location: Location) -> int | None:
        for idx, candidate in enumerate(self._locations.get(category, [])):
            if candidate == location:
                return idx
        return None

    def pick_unused_location(self, category: str, used_indices: Iterable[int] = ()) -> Location | None:
        """Pick a random location not in ``used_indices``.

        Once every location has been served, any location may be returned
        again so a game never runs out of targets.
        """
        locations = self._locations.get(category, [])
        if not locations:
            return None

        used = set(used_indices)
        available = [loc for idx, loc in enumerate(locations) if idx not in used]
        if not available:
            return self._rng.choice(locations)
        return self._rng.choice(available)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            category: [loc.to_dict() for loc in locations]
            for category, locations in self._locations.items()
        }
