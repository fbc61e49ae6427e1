import os
from pathlib import Path


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO async mode ("" picks a default per platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Content
    LOCATIONS_PATH = os.environ.get(
        "LOCATIONS_PATH",
        str(Path(__file__).resolve().parent / "data" / "locations.json"),
    )

    # Game defaults, used when the host omits a value or sends garbage
    DEFAULT_GAME_MODE = os.environ.get("DEFAULT_GAME_MODE", "countries")
    DEFAULT_ROUND_DURATION_SEC = int(os.environ.get("DEFAULT_ROUND_DURATION_SEC", "60"))
    DEFAULT_TOTAL_ROUNDS = int(os.environ.get("DEFAULT_TOTAL_ROUNDS", "10"))
    DEFAULT_RESULT_DELAY_SEC = int(os.environ.get("DEFAULT_RESULT_DELAY_SEC", "10"))

    # Upper bounds for host-supplied settings
    MAX_ROUND_DURATION_SEC = int(os.environ.get("MAX_ROUND_DURATION_SEC", "600"))
    MAX_TOTAL_ROUNDS = int(os.environ.get("MAX_TOTAL_ROUNDS", "50"))
    MAX_RESULT_DELAY_SEC = int(os.environ.get("MAX_RESULT_DELAY_SEC", "120"))
