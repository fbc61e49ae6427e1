from __future__ import annotations

from flask import Blueprint, jsonify

from ..services import get_services

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    rooms = get_services().registry.list_rooms()
    return jsonify({"ok": True, "rooms": len(rooms), "activeGames": sum(1 for r in rooms if r.active)})
