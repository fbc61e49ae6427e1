from __future__ import annotations

import logging
import random
from threading import RLock

from ..config import Config
from ..utils.coerce import coerce_positive_int
from .catalog import LocationCatalog
from .errors import GameInProgress, RoomNotFound, UsernameTaken
from .models import PLAYER_COLORS, Player, Room


log = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every live room, keyed by its 6-digit code."""

    def __init__(
        self,
        catalog: LocationCatalog | None = None,
        config: type[Config] | object = Config,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._catalog = catalog
        self._config = config
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code in self._rooms

    def _generate_code(self) -> str:
        code = str(self._rng.randint(100000, 999999))
        while code in self._rooms:
            code = str(self._rng.randint(100000, 999999))
        return code

    def _resolve_game_mode(self, game_mode: object) -> str:
        mode = str(game_mode).strip() if game_mode is not None else ""
        default = getattr(self._config, "DEFAULT_GAME_MODE", "countries")
        if self._catalog is None:
            return mode or default
        if mode and self._catalog.has_category(mode):
            return mode
        if self._catalog.has_category(default):
            return default
        categories = self._catalog.list_categories()
        return categories[0] if categories else default

    def create_room(
        self,
        host_id: str,
        username: str,
        game_mode: object = None,
        round_duration: object = None,
        total_rounds: object = None,
        result_delay: object = None,
    ) -> Room:
        cfg = self._config
        with self._lock:
            code = self._generate_code()
            room = Room(
                code=code,
                game_mode=self._resolve_game_mode(game_mode),
                round_duration=coerce_positive_int(
                    round_duration,
                    getattr(cfg, "DEFAULT_ROUND_DURATION_SEC", 60),
                    getattr(cfg, "MAX_ROUND_DURATION_SEC", 600),
                ),
                total_rounds=coerce_positive_int(
                    total_rounds,
                    getattr(cfg, "DEFAULT_TOTAL_ROUNDS", 10),
                    getattr(cfg, "MAX_TOTAL_ROUNDS", 50),
                ),
                result_delay=coerce_positive_int(
                    result_delay,
                    getattr(cfg, "DEFAULT_RESULT_DELAY_SEC", 10),
                    getattr(cfg, "MAX_RESULT_DELAY_SEC", 120),
                ),
            )
            room.players.append(Player(id=host_id, username=username, color=PLAYER_COLORS[0], is_host=True))
            self._rooms[code] = room

        log.info("Room %s created by %s (mode=%s)", code, username, room.game_mode)
        return room

    def get_room(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def delete_room(self, code: str, room: Room | None = None) -> bool:
        """Drop a room and cancel its timer. With ``room`` given, only that exact room is dropped."""
        with self._lock:
            current = self._rooms.get(code)
            if current is None or (room is not None and current is not room):
                return False
            del self._rooms[code]
        with current.lock:
            current.cancel_timer()
        log.info("Room %s deleted", code)
        return True

    def join_room(self, code: str, player_id: str, username: str) -> Room:
        room = self.get_room(code)
        if room is None:
            raise RoomNotFound()

        with room.lock:
            if room.active:
                raise GameInProgress()
            if room.has_username(username):
                raise UsernameTaken()

            color = PLAYER_COLORS[len(room.players) % len(PLAYER_COLORS)]
            room.players.append(Player(id=player_id, username=username, color=color))

        log.info("Player %s joined room %s", username, code)
        return room

    def remove_player(self, code: str, player_id: str) -> Room | None:
        """Remove a player; returns the room, or None if it was deleted or unknown."""
        room = self.get_room(code)
        if room is None:
            return None

        with room.lock:
            player = room.get_player(player_id)
            if player is None:
                return room

            room.players.remove(player)
            room.guesses.pop(player_id, None)
            log.info("Player %s left room %s", player.username, code)

            if not room.players:
                if not self.delete_room(code, room):
                    room.cancel_timer()
                return None

            if player.is_host:
                new_host = room.players[0]
                new_host.is_host = True
                log.info("Host of room %s transferred to %s", code, new_host.username)

        return room
