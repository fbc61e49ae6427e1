from __future__ import annotations

from flask import Blueprint, jsonify

from ..services import get_services

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    room = get_services().registry.get_room(code)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    with room.lock:
        return jsonify(room.public_state())
