from __future__ import annotations


class GameError(Exception):
    """Player-facing failure, reported through the ``error`` event."""

    code = "game_error"
    message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, str]:
        return {"message": self.message, "error": self.code}


class RoomNotFound(GameError):
    code = "room_not_found"
    message = "Room not found"


class GameInProgress(GameError):
    code = "game_in_progress"
    message = "Game already in progress"


class UsernameTaken(GameError):
    code = "username_taken"
    message = "Username already taken"


class NotHost(GameError):
    code = "not_host"
    message = "Only the host can start the game"


class RoundNotActive(GameError):
    code = "round_not_active"
    message = "Round is not active"


class InvalidPayload(GameError):
    code = "invalid_payload"
    message = "Invalid payload"
