"""Canonical scoring table shared by multiplayer rooms and single-player clients.

A score is a step function of the great-circle distance between guess and
target. Each game mode has its own distance thresholds; points and labels are
the same for every mode.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import NO_GUESS_SUMMARY, Guess, Location


EARTH_RADIUS_KM = 6371.0
MAX_DISTANCE_KM = 20000.0

MAX_POINTS = 100
CORRECT_LABEL = "Correct!"
NO_GUESS_LABEL = "no guess"

COUNTRIES_MODE = "countries"


@dataclass(frozen=True)
class Tier:
    max_km: float
    points: int
    label: str


@dataclass(frozen=True)
class Score:
    points: int
    label: str


@dataclass(frozen=True)
class GuessScore:
    points: int
    label: str
    distance_km: float | None
    is_correct_country: bool

    @property
    def summary(self) -> str:
        if self.is_correct_country:
            return CORRECT_LABEL
        if self.distance_km is None:
            return NO_GUESS_SUMMARY
        return f"{round(self.distance_km)} km"


_TIER_POINTS = (
    (MAX_POINTS, "Excellent!"),
    (75, "Great!"),
    (50, "Good"),
    (25, "Not bad"),
    (10, "Far off"),
)


def _tiers(*thresholds: float) -> tuple[Tier, ...]:
    limits = (*thresholds, math.inf)
    return tuple(Tier(limit, points, label) for limit, (points, label) in zip(limits, _TIER_POINTS))


SCORING_TIERS: dict[str, tuple[Tier, ...]] = {
    "german-cities": _tiers(25, 50, 100, 200),
    "european-cities": _tiers(50, 150, 300, 600),
    "world-landmarks": _tiers(100, 300, 700, 1500),
    "capitals": _tiers(100, 300, 700, 1500),
    COUNTRIES_MODE: _tiers(300, 600, 1200, 2500),
}


def tiers_for(game_mode: str) -> tuple[Tier, ...]:
    return SCORING_TIERS.get(game_mode, SCORING_TIERS[COUNTRIES_MODE])


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Float error can push a slightly outside [0, 1] near the antipode.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    distance = EARTH_RADIUS_KM * c

    if math.isnan(distance):
        return MAX_DISTANCE_KM
    return min(MAX_DISTANCE_KM, max(0.0, distance))


def score(game_mode: str, distance_km: float | None = None, country_match: bool = False) -> Score:
    if country_match:
        return Score(MAX_POINTS, CORRECT_LABEL)
    if distance_km is None:
        return Score(0, NO_GUESS_LABEL)

    for tier in tiers_for(game_mode):
        if distance_km < tier.max_km:
            return Score(tier.points, tier.label)
    # Unreachable: the last tier is unbounded.
    return Score(0, NO_GUESS_LABEL)


def is_correct_country(target: Location, guess: Guess) -> bool:
    if guess.is_within_target_country:
        return True
    selected = guess.selected_country
    if not selected:
        return False
    return selected == target.name or (target.canonical_name is not None and selected == target.canonical_name)


def evaluate_guess(game_mode: str, target: Location, guess: Guess | None) -> GuessScore:
    if guess is None:
        result = score(game_mode)
        return GuessScore(result.points, result.label, None, False)

    if game_mode == COUNTRIES_MODE and (guess.selected_country or guess.is_within_target_country):
        if is_correct_country(target, guess):
            result = score(game_mode, country_match=True)
            return GuessScore(result.points, result.label, 0.0, True)

    distance = None
    if guess.has_position:
        distance = haversine_km(guess.lat, guess.lng, target.lat, target.lng)

    result = score(game_mode, distance_km=distance)
    return GuessScore(result.points, result.label, distance, False)
