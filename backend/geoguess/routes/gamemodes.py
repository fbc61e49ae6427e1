from __future__ import annotations

from flask import Blueprint, jsonify

from ..game.catalog import format_category_name
from ..services import get_services

bp = Blueprint("gamemodes", __name__)


@bp.get("/gamemodes")
def get_gamemodes():
    catalog = get_services().catalog
    modes = [
        {
            "id": category,
            "name": format_category_name(category),
            "count": len(catalog.list_locations(category)),
        }
        for category in catalog.list_categories()
    ]
    return jsonify(modes)


@bp.get("/locations")
def get_locations():
    return jsonify(get_services().catalog.to_dict())
