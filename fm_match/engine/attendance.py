"""Home attendance model for a fixture."""

import random
from dataclasses import dataclass

from fm_match.core.models import Team
from fm_match.engine.tactics import clamp

MIN_FILL_RATE = 0.35
MAX_FILL_RATE = 0.98


@dataclass(frozen=True)
class AttendanceRange:
    min: int
    max: int
    expected: int


def _round_progress(round_number: int | None, total_rounds: int | None) -> float:
    if not round_number or not total_rounds or total_rounds <= 1:
        return 0.0
    return clamp((round_number - 1) / (total_rounds - 1), 0.0, 1.0)


def calculate_attendance_expectation(
    home_team: Team,
    away_team: Team,
    capacity: int | None = None,
    round_number: int | None = None,
    total_rounds: int | None = None,
) -> int:
    """Deterministic central estimate of the crowd.

    Driven by home reputation and momentum, the visitors' pull, how evenly
    matched the clubs are, and a small late-season uplift.
    """
    capacity = max(0, int(home_team.capacity if capacity is None else capacity))
    if capacity == 0:
        return 0

    home_reputation = clamp(home_team.reputation, 1, 100)
    away_reputation = clamp(away_team.reputation, 1, 100)
    home_momentum = clamp(home_team.momentum, 1, 100)

    base_fill = 0.35 + home_reputation * 0.004
    opponent_attraction = away_reputation * 0.0018
    momentum_effect = (home_momentum - 50) / 50 * 0.06

    balance = clamp(1 - abs(home_reputation - away_reputation) / 40, 0.0, 1.0)
    quality = (home_reputation + away_reputation) / 200
    prestige = balance * quality * 0.03

    late_season = _round_progress(round_number, total_rounds) * 0.04

    fill_rate = clamp(
        base_fill + opponent_attraction + momentum_effect + prestige + late_season,
        MIN_FILL_RATE,
        MAX_FILL_RATE,
    )
    return round(capacity * fill_rate)


def calculate_attendance_range(
    home_team: Team,
    away_team: Team,
    capacity: int | None = None,
    round_number: int | None = None,
    total_rounds: int | None = None,
) -> AttendanceRange:
    """Band of 6-10% around the expectation, wider for smaller clubs."""
    capacity = max(0, int(home_team.capacity if capacity is None else capacity))
    if capacity == 0:
        return AttendanceRange(min=0, max=0, expected=0)

    expected = calculate_attendance_expectation(
        home_team, away_team, capacity, round_number, total_rounds
    )
    home_reputation = clamp(home_team.reputation, 1, 100)
    uncertainty = clamp(
        0.08
        + (100 - home_reputation) / 100 * 0.02
        - _round_progress(round_number, total_rounds) * 0.02,
        0.06,
        0.10,
    )

    low = int(clamp(round(expected * (1 - uncertainty)), 0, capacity))
    high = int(clamp(round(expected * (1 + uncertainty)), 0, capacity))
    return AttendanceRange(min=min(low, high), max=max(low, high), expected=expected)


def sample_attendance(
    rng: random.Random,
    home_team: Team,
    away_team: Team,
    capacity: int | None = None,
    round_number: int | None = None,
    total_rounds: int | None = None,
) -> int:
    """Centre-weighted draw inside the attendance range."""
    band = calculate_attendance_range(home_team, away_team, capacity, round_number, total_rounds)
    if band.min >= band.max:
        return band.min
    # Mean of two uniforms peaks at the middle of the band
    centered = (rng.random() + rng.random()) / 2
    return round(band.min + centered * (band.max - band.min))
