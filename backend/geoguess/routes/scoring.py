from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..game.models import Guess, Location
from ..game.scoring import evaluate_guess
from ..utils.coerce import coerce_float, coerce_text

bp = Blueprint("scoring", __name__)


@bp.post("/score")
def score_guess():
    """Score a single-player guess with the same table multiplayer rooms use."""
    data = request.get_json(silent=True) or {}

    target_raw = data.get("target")
    if not isinstance(target_raw, dict):
        return jsonify({"error": "invalid_target"}), 400
    lat = coerce_float(target_raw.get("lat"))
    lng = coerce_float(target_raw.get("lng"))
    name = coerce_text(target_raw.get("name"))
    if lat is None or lng is None or not name:
        return jsonify({"error": "invalid_target"}), 400
    target = Location(name=name, lat=lat, lng=lng, canonical_name=target_raw.get("english_name") or None)

    guess = Guess(
        lat=coerce_float(data.get("lat")),
        lng=coerce_float(data.get("lng")),
        selected_country=coerce_text(data.get("selectedCountry")) or None,
        is_within_target_country=data.get("isWithinTargetCountry") is True,
    )
    if not guess.has_position and not guess.selected_country and not guess.is_within_target_country:
        guess = None

    result = evaluate_guess(coerce_text(data.get("gameMode")), target, guess)
    return jsonify(
        {
            "points": result.points,
            "label": result.label,
            "distance": round(result.distance_km) if result.distance_km is not None else None,
            "isCorrectCountry": result.is_correct_country,
        }
    )
