from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from .game.catalog import LocationCatalog
from .game.coordinator import RoundCoordinator
from .game.registry import RoomRegistry


EXTENSION_KEY = "geoguess"


@dataclass
class GameServices:
    registry: RoomRegistry
    catalog: LocationCatalog
    coordinator: RoundCoordinator
    sessions: dict = field(default_factory=dict)


def get_services() -> GameServices:
    return current_app.extensions[EXTENSION_KEY]
