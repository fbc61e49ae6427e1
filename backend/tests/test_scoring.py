import math

import pytest

from geoguess.game.models import Guess, Location
from geoguess.game.scoring import (
    MAX_DISTANCE_KM,
    MAX_POINTS,
    NO_GUESS_LABEL,
    SCORING_TIERS,
    evaluate_guess,
    haversine_km,
    score,
)


GERMANY = Location(name="Deutschland", lat=51.1657, lng=10.4515, canonical_name="Germany")


def test_haversine_same_point_is_zero():
    assert haversine_km(52.52, 13.405, 52.52, 13.405) == 0


def test_haversine_berlin_paris():
    assert haversine_km(52.52, 13.405, 48.8566, 2.3522) == pytest.approx(878, abs=5)


def test_antipode_is_capped_and_never_nan():
    d = haversine_km(0, 0, 0, 180)
    assert not math.isnan(d)
    assert d == MAX_DISTANCE_KM

    d = haversine_km(90, 0, -90, 0)
    assert 0 <= d <= MAX_DISTANCE_KM


def test_every_mode_ends_with_unbounded_tier():
    for tiers in SCORING_TIERS.values():
        assert tiers[-1].max_km == math.inf
        limits = [t.max_km for t in tiers]
        assert limits == sorted(limits)


def test_tier_boundaries_german_cities():
    assert score("german-cities", 0).points == 100
    assert score("german-cities", 24.9).points == 100
    assert score("german-cities", 25).points == 75
    assert score("german-cities", 99).points == 50
    assert score("german-cities", 150).points == 25
    assert score("german-cities", 5000).points == 10


def test_unknown_mode_uses_countries_thresholds():
    assert score("atlantis", 299).points == score("countries", 299).points == 100
    assert score("atlantis", 2600).points == 10


@pytest.mark.parametrize("mode", list(SCORING_TIERS))
def test_score_is_non_increasing_with_distance(mode):
    points = [score(mode, d).points for d in range(0, 21000, 50)]
    assert all(a >= b for a, b in zip(points, points[1:]))


def test_no_guess_scores_zero():
    result = score("capitals")
    assert result.points == 0
    assert result.label == NO_GUESS_LABEL

    assert evaluate_guess("capitals", GERMANY, None).points == 0
    assert evaluate_guess("capitals", GERMANY, Guess()).points == 0


def test_country_exact_name_match():
    result = evaluate_guess("countries", GERMANY, Guess(selected_country="Deutschland"))
    assert result.is_correct_country
    assert result.points == MAX_POINTS
    assert result.summary == "Correct!"


def test_country_canonical_name_match():
    result = evaluate_guess("countries", GERMANY, Guess(selected_country="Germany", lat=0, lng=0))
    assert result.is_correct_country
    assert result.distance_km == 0


def test_country_within_target_flag_counts_as_correct():
    result = evaluate_guess("countries", GERMANY, Guess(selected_country="Austria", lat=47.5, lng=14.5, is_within_target_country=True))
    assert result.is_correct_country


def test_country_match_is_case_sensitive_and_falls_back_to_distance():
    # Paris: roughly 880 km from the centre of Germany.
    result = evaluate_guess("countries", GERMANY, Guess(selected_country="germany", lat=48.8566, lng=2.3522))
    assert not result.is_correct_country
    assert result.points == 50
    assert result.summary.endswith(" km")


def test_selected_country_ignored_outside_countries_mode():
    berlin = Location(name="Berlin", lat=52.52, lng=13.405)
    result = evaluate_guess("german-cities", berlin, Guess(selected_country="Berlin", lat=53.5511, lng=9.9937))
    assert not result.is_correct_country
    assert result.points == 10
