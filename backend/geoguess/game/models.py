from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Literal, Protocol


RoomState = Literal["lobby", "in_round", "round_results"]

PLAYER_COLORS = (
    "#ef8354", "#2e4057", "#4f5d75", "#58a4b0",
    "#a9c25d", "#73628a", "#7e8d85", "#5085a5",
    "#ce796b", "#666a86", "#687864", "#f67e7d",
)

NO_GUESS_SUMMARY = "--"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


@dataclass(frozen=True)
class Location:
    name: str
    lat: float
    lng: float
    # Name used for country matching when the display name is localized.
    canonical_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Location:
        return cls(
            name=str(data["name"]),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            canonical_name=data.get("english_name") or data.get("canonical_name"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name, "lat": self.lat, "lng": self.lng}
        if self.canonical_name:
            d["english_name"] = self.canonical_name
        return d


@dataclass
class Guess:
    lat: float | None = None
    lng: float | None = None
    selected_country: str | None = None
    is_within_target_country: bool = False

    @property
    def has_position(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass
class Player:
    id: str
    username: str
    color: str
    is_host: bool = False
    score: int = 0
    last_guess: str = NO_GUESS_SUMMARY
    has_guessed: bool = False

    def reset_for_game(self) -> None:
        self.score = 0
        self.last_guess = NO_GUESS_SUMMARY
        self.has_guessed = False


@dataclass
class Room:
    code: str
    game_mode: str
    round_duration: int = 60
    total_rounds: int = 10
    result_delay: int = 10
    players: list[Player] = field(default_factory=list)
    active: bool = False
    state: RoomState = "lobby"
    round: int = 0
    current_target: Location | None = None
    used_location_indices: set[int] = field(default_factory=set)
    guesses: dict[str, Guess] = field(default_factory=dict)
    time_remaining: int = 0
    timer: TimerHandle | None = field(default=None, repr=False)
    timer_generation: int = 0
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @property
    def host(self) -> Player | None:
        for p in self.players:
            if p.is_host:
                return p
        return None

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_username(self, username: str) -> bool:
        return any(p.username == username for p in self.players)

    def all_guessed(self) -> bool:
        return bool(self.players) and all(p.has_guessed for p in self.players)

    def cancel_timer(self) -> None:
        """Cancel the live timer, if any, and invalidate pending callbacks."""
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        self.timer_generation += 1

    def reset_for_game(self) -> None:
        self.cancel_timer()
        self.round = 0
        self.state = "lobby"
        self.current_target = None
        self.used_location_indices = set()
        self.guesses = {}
        self.time_remaining = 0
        for p in self.players:
            p.reset_for_game()

    def leaderboard(self) -> list[dict[str, Any]]:
        # sorted() is stable: equal scores keep join order.
        ranked = sorted(self.players, key=lambda p: p.score, reverse=True)
        return [
            {
                "username": p.username,
                "score": p.score,
                "lastGuess": p.last_guess,
                "color": p.color,
            }
            for p in ranked
        ]

    def player_list(self) -> list[dict[str, Any]]:
        return [
            {
                "username": p.username,
                "isHost": p.is_host,
                "color": p.color,
                "score": p.score,
                "lastGuess": p.last_guess,
            }
            for p in self.players
        ]

    def settings(self) -> dict[str, Any]:
        return {
            "roomCode": self.code,
            "gameMode": self.game_mode,
            "roundDuration": self.round_duration,
            "totalRounds": self.total_rounds,
            "resultDelay": self.result_delay,
        }

    def public_state(self) -> dict[str, Any]:
        payload = {
            **self.settings(),
            "active": self.active,
            "state": self.state,
            "round": self.round,
            "timeRemaining": self.time_remaining,
            "players": self.player_list(),
            "location": None,
        }
        if self.current_target is not None:
            payload["location"] = {"name": self.current_target.name}
            # Coordinates are only safe once the round has been revealed.
            if self.state == "round_results":
                payload["location"].update(
                    {"lat": self.current_target.lat, "lng": self.current_target.lng}
                )
        return payload
