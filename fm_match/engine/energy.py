"""Energy and fatigue model.

Energy (0-100) is the within-match fatigue resource, distinct from fitness.
Only players on the pitch drain; the penalty curve turns low energy into a
strength multiplier.
"""

from fm_match.core.models import Player, Position, TacticalPosture
from fm_match.engine.constants import (
    ENERGY_AGE_BASELINE,
    ENERGY_AGE_MAX_MULTIPLIER,
    ENERGY_AGE_SLOPE,
    ENERGY_PENALTY_CURVE,
    ENERGY_PENALTY_MAX,
    GOALKEEPER_ENERGY_MULTIPLIER,
    LIVE_ENERGY_DRAIN_BASE_PER_MINUTE,
    MATCH_LENGTH,
    OPPONENT_ENERGY_FLOOR,
    OPPONENT_ENERGY_START,
    POST_MATCH_ENERGY_DRAIN_PER_90,
    POSTURE_ENERGY_MULTIPLIER,
)

NEUTRAL_STAMINA = 70


def _posture_multiplier(posture: TacticalPosture | str) -> float:
    key = posture.value if isinstance(posture, TacticalPosture) else str(posture)
    return POSTURE_ENERGY_MULTIPLIER.get(key, 1.0)


def _age_multiplier(age: int) -> float:
    """1.0 up to the baseline age, then linear, capped for veterans."""
    if age <= ENERGY_AGE_BASELINE:
        return 1.0
    multiplier = 1.0 + (age - ENERGY_AGE_BASELINE) * ENERGY_AGE_SLOPE
    return min(ENERGY_AGE_MAX_MULTIPLIER, multiplier)


def _stamina_multiplier(stamina: int) -> float:
    """Low stamina drains faster; 70 is neutral."""
    return max(0.85, min(1.2, 1.0 + (NEUTRAL_STAMINA - stamina) * 0.005))


def _position_multiplier(position: Position) -> float:
    return GOALKEEPER_ENERGY_MULTIPLIER if position == Position.GK else 1.0


def calculate_live_energy_drain_per_minute(
    player: Player,
    posture: TacticalPosture | str = TacticalPosture.BALANCED,
) -> float:
    """Energy lost by an on-pitch player in one simulated minute."""
    return (
        LIVE_ENERGY_DRAIN_BASE_PER_MINUTE
        * _posture_multiplier(posture)
        * _age_multiplier(player.age)
        * _stamina_multiplier(player.attributes.stamina)
        * _position_multiplier(player.position)
    )


def calculate_energy_modifier(energy: float) -> float:
    """Strength penalty for a given energy level.

    Piecewise linear through (85, 0), (70, 0.06), (55, 0.16), (40, 0.28) and
    (0, 0.40). The result is multiplied into strength as ``1 - penalty``.
    """
    upper_energy, upper_penalty = ENERGY_PENALTY_CURVE[0]
    if energy >= upper_energy:
        return 0.0

    for lower_energy, lower_penalty in ENERGY_PENALTY_CURVE[1:]:
        if energy >= lower_energy:
            span = upper_energy - lower_energy
            ratio = (upper_energy - energy) / span
            return upper_penalty + (lower_penalty - upper_penalty) * ratio
        upper_energy, upper_penalty = lower_energy, lower_penalty

    return ENERGY_PENALTY_MAX


def get_opponent_effective_energy(round_number: int, total_rounds: int) -> float:
    """Approximate season-long fatigue for squads that are not persisted.

    Starts fresh in round one and decays linearly to a floor by the last round.
    """
    if total_rounds <= 1 or round_number <= 1:
        return OPPONENT_ENERGY_START
    progress = min(1.0, (round_number - 1) / (total_rounds - 1))
    return OPPONENT_ENERGY_START - (OPPONENT_ENERGY_START - OPPONENT_ENERGY_FLOOR) * progress


def calculate_post_match_energy_drain(
    minutes_played: int,
    posture: TacticalPosture | str,
    age: int,
    position: Position,
) -> float:
    """Energy removed by playing a match; the caller clamps to 0-100."""
    minutes_factor = min(1.0, max(0.0, minutes_played / MATCH_LENGTH))
    drain = (
        POST_MATCH_ENERGY_DRAIN_PER_90
        * minutes_factor
        * _posture_multiplier(posture)
        * _age_multiplier(age)
        * _position_multiplier(position)
    )
    return max(0.0, min(100.0, round(drain, 1)))
