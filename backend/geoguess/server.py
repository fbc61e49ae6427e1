from __future__ import annotations

import logging
import sys

from flask import Flask
from flask.logging import default_handler
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.catalog import LocationCatalog
from .game.coordinator import RoundCoordinator
from .game.registry import RoomRegistry
from .game.scheduler import Scheduler, SocketIOScheduler
from .realtime.handlers import register_socketio_handlers
from .routes.gamemodes import bp as gamemodes_bp
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .routes.scoring import bp as scoring_bp
from .services import EXTENSION_KEY, GameServices


def _configure_logging(app: Flask) -> None:
    logger = logging.getLogger("geoguess")
    logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if default_handler not in logger.handlers:
        logger.addHandler(default_handler)


def _select_async_mode(app: Flask) -> str:
    env_async_mode = app.config.get("SOCKETIO_ASYNC_MODE", "")
    if env_async_mode:
        return env_async_mode
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(
    config_class: type = Config,
    scheduler: Scheduler | None = None,
    catalog: LocationCatalog | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=_select_async_mode(app),
    )

    if catalog is None:
        catalog = LocationCatalog.from_file(app.config["LOCATIONS_PATH"])
    if scheduler is None:
        scheduler = SocketIOScheduler(socketio)

    registry = RoomRegistry(catalog=catalog, config=config_class)
    coordinator = RoundCoordinator(registry, catalog, scheduler, socketio)
    sessions = register_socketio_handlers(socketio, registry, coordinator)
    app.extensions[EXTENSION_KEY] = GameServices(
        registry=registry,
        catalog=catalog,
        coordinator=coordinator,
        sessions=sessions,
    )

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(gamemodes_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(scoring_bp, url_prefix="/api")

    return app, socketio
