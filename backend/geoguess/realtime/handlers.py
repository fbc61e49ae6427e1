from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.coordinator import RoundCoordinator
from ..game.errors import GameError, InvalidPayload, NotHost, RoomNotFound
from ..game.models import Guess
from ..game.registry import RoomRegistry
from ..utils.coerce import coerce_float, coerce_text
from . import events


log = logging.getLogger(__name__)

MAX_NAME_LENGTH = 20


@dataclass
class Session:
    room_code: str
    player_id: str


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > MAX_NAME_LENGTH:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def _parse_guess(payload: dict) -> Guess:
    selected = coerce_text(payload.get("selectedCountry")) or None
    return Guess(
        lat=coerce_float(payload.get("lat")),
        lng=coerce_float(payload.get("lng")),
        selected_country=selected,
        is_within_target_country=payload.get("isWithinTargetCountry") is True,
    )


def register_socketio_handlers(
    socketio: SocketIO,
    registry: RoomRegistry,
    coordinator: RoundCoordinator,
) -> dict[str, Session]:
    """Wire Socket.IO events to the room registry and round coordinator.

    Returns the sid -> session map so callers (and tests) can inspect bindings.
    """
    sessions: dict[str, Session] = {}

    def _error(exc: GameError) -> None:
        emit(events.ERROR, exc.to_payload())

    def _leave_current(sid: str) -> None:
        session = sessions.pop(sid, None)
        if session is None:
            return
        leave_room(session.room_code)
        coordinator.remove_player(session.room_code, session.player_id)

    def _bind(sid: str, room_code: str) -> None:
        sessions[sid] = Session(room_code=room_code, player_id=sid)
        join_room(room_code)

    def _ack(event: str, room, is_host: bool) -> None:
        emit(event, {**room.settings(), "isHost": is_host})

    def _join(sid: str, room_code: str, username: str) -> None:
        current = sessions.get(sid)
        if current is not None and current.room_code == room_code:
            room = registry.get_room(room_code)
            player = room.get_player(sid) if room else None
            if player is not None:
                # Rejoin of a room this connection already sits in.
                _ack(events.ROOM_JOINED, room, player.is_host)
                emit(events.PLAYER_LIST, {"players": room.player_list()}, to=room_code)
                return

        room = registry.join_room(room_code, sid, username)
        if current is not None and current.room_code != room_code:
            _leave_current(sid)
        _bind(sid, room_code)
        _ack(events.ROOM_JOINED, room, False)
        emit(events.PLAYER_LIST, {"players": room.player_list()}, to=room_code)

    @socketio.on(events.CREATE_ROOM)
    def create_room(data=None):
        payload = data if isinstance(data, dict) else {}
        username = coerce_text(payload.get("username"))
        if not _validate_name(username):
            _error(InvalidPayload("Invalid username"))
            return

        sid = request.sid
        _leave_current(sid)

        room = registry.create_room(
            host_id=sid,
            username=username,
            game_mode=payload.get("gameMode"),
            round_duration=payload.get("roundDuration"),
            total_rounds=payload.get("totalRounds"),
            result_delay=payload.get("resultDelay"),
        )
        _bind(sid, room.code)
        _ack(events.ROOM_CREATED, room, True)
        emit(events.PLAYER_LIST, {"players": room.player_list()}, to=room.code)

    @socketio.on(events.JOIN_ROOM)
    def join_room_event(data=None):
        payload = data if isinstance(data, dict) else {}
        room_code = coerce_text(payload.get("roomCode"))
        username = coerce_text(payload.get("username"))
        if not room_code or not _validate_name(username):
            _error(InvalidPayload("Invalid username or room code"))
            return

        try:
            _join(request.sid, room_code, username)
        except GameError as exc:
            _error(exc)

    @socketio.on(events.START_GAME)
    def start_game(data=None):
        session = sessions.get(request.sid)
        if session is None:
            return
        try:
            coordinator.start_game(session.room_code, session.player_id)
        except GameError as exc:
            _error(exc)

    @socketio.on(events.RESTART_GAME)
    def restart_game(data=None):
        sid = request.sid
        session = sessions.get(sid)
        if session is None:
            return
        try:
            coordinator.restart_game(session.room_code, session.player_id)
        except NotHost:
            # Non-hosts rejoin the same room instead.
            room = registry.get_room(session.room_code)
            player = room.get_player(sid) if room else None
            if player is None:
                _error(RoomNotFound())
                return
            try:
                _join(sid, session.room_code, player.username)
            except GameError as exc:
                _error(exc)
        except GameError as exc:
            _error(exc)

    @socketio.on(events.SUBMIT_GUESS)
    def submit_guess(data=None):
        session = sessions.get(request.sid)
        if session is None:
            return
        payload = data if isinstance(data, dict) else {}
        try:
            coordinator.submit_guess(session.room_code, session.player_id, _parse_guess(payload))
        except GameError as exc:
            _error(exc)

    @socketio.on(events.REQUEST_LEADERBOARD)
    def request_leaderboard(data=None):
        session = sessions.get(request.sid)
        if session is None:
            return
        try:
            coordinator.send_leaderboard(session.room_code, session.player_id)
        except GameError as exc:
            _error(exc)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        session = sessions.pop(request.sid, None)
        if session is None:
            return
        log.info("Connection %s closed, leaving room %s", request.sid, session.room_code)
        coordinator.remove_player(session.room_code, session.player_id)

    return sessions
