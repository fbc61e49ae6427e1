"""Round lifecycle for a room.

States: ``lobby -> in_round -> round_results -> (in_round | game over -> lobby)``.

Every mutation runs under ``room.lock``. Each room owns at most one live
timer: the per-second tick while a round runs, or the result delay before the
next round. Timer callbacks carry the room's ``timer_generation`` at scheduling
time and do nothing if the room was deleted or the timer was superseded.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from ..realtime import events
from .catalog import LocationCatalog
from .errors import GameInProgress, NotHost, RoomNotFound, RoundNotActive
from .models import Guess, Room
from .registry import RoomRegistry
from .scheduler import Scheduler
from .scoring import COUNTRIES_MODE, GuessScore, evaluate_guess, is_correct_country


log = logging.getLogger(__name__)


class Emitter(Protocol):
    def emit(self, event: str, *args: Any, **kwargs: Any) -> Any: ...


class RoundCoordinator:
    def __init__(
        self,
        registry: RoomRegistry,
        catalog: LocationCatalog,
        scheduler: Scheduler,
        emitter: Emitter,
    ) -> None:
        self.registry = registry
        self.catalog = catalog
        self.scheduler = scheduler
        self.emitter = emitter

    # -- helpers -----------------------------------------------------------

    def _require_room(self, code: str) -> Room:
        room = self.registry.get_room(code)
        if room is None:
            raise RoomNotFound()
        return room

    def _emit_room(self, room: Room, event: str, payload: dict) -> None:
        self.emitter.emit(event, payload, to=room.code)

    def _broadcast_leaderboard(self, room: Room) -> None:
        self._emit_room(room, events.LEADERBOARD_UPDATE, {"leaderboard": room.leaderboard()})

    def _guarded(self, room: Room, callback: Callable[[Room], None]) -> Callable[[], None]:
        generation = room.timer_generation

        def _fire() -> None:
            if self.registry.get_room(room.code) is not room:
                log.debug("Timer fired for deleted room %s", room.code)
                return
            with room.lock:
                if room.timer_generation != generation:
                    log.debug("Stale timer for room %s ignored", room.code)
                    return
                callback(room)

        return _fire

    # -- game lifecycle ----------------------------------------------------

    def start_game(self, code: str, player_id: str) -> None:
        room = self._require_room(code)
        with room.lock:
            host = room.host
            if host is None or host.id != player_id:
                raise NotHost("Only the host can start the game")
            if room.active:
                raise GameInProgress()
            self._begin_game(room)

    def restart_game(self, code: str, player_id: str) -> None:
        room = self._require_room(code)
        with room.lock:
            host = room.host
            if host is None or host.id != player_id:
                raise NotHost("Only the host can restart the game")
            self._begin_game(room)

    def _begin_game(self, room: Room) -> None:
        room.reset_for_game()
        room.active = True
        log.info("Game started in room %s (%d rounds)", room.code, room.total_rounds)
        self._broadcast_leaderboard(room)
        self._next_round_locked(room)

    def next_round(self, code: str) -> None:
        room = self.registry.get_room(code)
        if room is None:
            return
        with room.lock:
            self._next_round_locked(room)

    def _next_round_locked(self, room: Room) -> None:
        room.cancel_timer()
        if not room.active:
            return

        room.round += 1
        if room.round > room.total_rounds:
            self._end_game_locked(room)
            return

        for p in room.players:
            p.has_guessed = False
        room.guesses = {}

        target = self.catalog.pick_unused_location(room.game_mode, room.used_location_indices)
        if target is None:
            log.error("No locations for mode %s, ending game in room %s", room.game_mode, room.code)
            self._end_game_locked(room)
            return

        idx = self.catalog.index_of(room.game_mode, target)
        if idx is not None:
            room.used_location_indices.add(idx)

        room.current_target = target
        room.state = "in_round"
        room.time_remaining = room.round_duration
        room.timer = self.scheduler.call_every(1, self._guarded(room, self._tick_locked))

        log.info("Room %s round %d/%d: %s", room.code, room.round, room.total_rounds, target.name)
        self._emit_room(
            room,
            events.NEW_ROUND,
            {
                "round": room.round,
                "totalRounds": room.total_rounds,
                "location": {"name": target.name},
                "timeRemaining": room.time_remaining,
                "gameMode": room.game_mode,
            },
        )
        self._broadcast_leaderboard(room)

    def _tick_locked(self, room: Room) -> None:
        if room.state != "in_round":
            return
        room.time_remaining = max(0, room.time_remaining - 1)
        self._emit_room(room, events.TIME_UPDATE, {"timeRemaining": room.time_remaining})
        if room.time_remaining <= 0:
            self._end_round_locked(room)

    # -- guesses -----------------------------------------------------------

    def submit_guess(self, code: str, player_id: str, guess: Guess) -> GuessScore | None:
        """Score a guess; returns None when the player already guessed this round."""
        room = self._require_room(code)
        with room.lock:
            player = room.get_player(player_id)
            if player is None:
                return None
            if not room.active or room.state != "in_round" or room.current_target is None:
                raise RoundNotActive()
            if player.has_guessed:
                return None

            room.guesses[player_id] = guess
            player.has_guessed = True

            result = evaluate_guess(room.game_mode, room.current_target, guess)
            player.score += result.points
            player.last_guess = result.summary

            self.emitter.emit(
                events.GUESS_RESULT,
                {
                    "distance": round(result.distance_km) if result.distance_km is not None else None,
                    "points": result.points,
                    "isCorrectCountry": result.is_correct_country,
                    "label": result.label,
                },
                to=player_id,
            )
            self._emit_room(room, events.PLAYER_GUESSED, {"username": player.username, "hasGuessed": True})
            self._broadcast_leaderboard(room)

            if room.all_guessed():
                self._end_round_locked(room)

            return result

    # -- round / game end --------------------------------------------------

    def end_round(self, code: str) -> None:
        room = self.registry.get_room(code)
        if room is None:
            return
        with room.lock:
            self._end_round_locked(room)

    def _end_round_locked(self, room: Room) -> None:
        if room.state != "in_round" or room.current_target is None:
            return

        room.cancel_timer()
        room.state = "round_results"
        target = room.current_target

        guesses = []
        for player_id, guess in room.guesses.items():
            player = room.get_player(player_id)
            if player is None:
                continue
            guesses.append(
                {
                    "username": player.username,
                    "lat": guess.lat,
                    "lng": guess.lng,
                    "color": player.color,
                    "selectedCountry": guess.selected_country,
                    "isCorrectCountry": room.game_mode == COUNTRIES_MODE and is_correct_country(target, guess),
                }
            )

        log.info("Room %s round %d ended (%d guesses)", room.code, room.round, len(guesses))
        self._emit_room(
            room,
            events.ROUND_ENDED,
            {
                "actualLocation": {"name": target.name, "lat": target.lat, "lng": target.lng},
                "guesses": guesses,
                "leaderboard": room.leaderboard(),
                "resultDelay": room.result_delay,
            },
        )

        room.timer = self.scheduler.call_later(room.result_delay, self._guarded(room, self._next_round_locked))

    def end_game(self, code: str) -> None:
        room = self.registry.get_room(code)
        if room is None:
            return
        with room.lock:
            self._end_game_locked(room)

    def _end_game_locked(self, room: Room) -> None:
        room.cancel_timer()
        ranked = sorted(room.players, key=lambda p: p.score, reverse=True)
        self._emit_room(
            room,
            events.GAME_OVER,
            {"leaderboard": [{"username": p.username, "score": p.score, "color": p.color} for p in ranked]},
        )
        log.info("Game over in room %s", room.code)

        room.reset_for_game()
        room.active = False

    # -- membership --------------------------------------------------------

    def remove_player(self, code: str, player_id: str) -> Room | None:
        room = self.registry.get_room(code)
        if room is None:
            return None

        with room.lock:
            if self.registry.remove_player(code, player_id) is None:
                return None

            self._emit_room(room, events.PLAYER_LIST, {"players": room.player_list()})
            if room.active:
                self._broadcast_leaderboard(room)
            if room.active and room.state == "in_round" and room.all_guessed():
                self._end_round_locked(room)

        return room

    def send_leaderboard(self, code: str, player_id: str) -> None:
        room = self._require_room(code)
        with room.lock:
            self.emitter.emit(events.LEADERBOARD_UPDATE, {"leaderboard": room.leaderboard()}, to=player_id)
