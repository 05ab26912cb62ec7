"""Player and lineup strength model.

A lineup's strength is the average of each player's position-weighted overall,
scaled by form, fitness and live energy, then adjusted for team momentum and
red cards.
"""

import math
from typing import Iterable, Mapping

from fm_match.core.models import Player, calculate_overall
from fm_match.engine.constants import (
    ADDITIONAL_RED_CARD_PENALTY,
    FITNESS_PENALTY_FACTOR,
    FITNESS_PENALTY_MAX,
    FITNESS_THRESHOLD,
    LATE_GAME_FITNESS_MINUTE,
    LATE_GAME_FITNESS_MULTIPLIER,
    NEUTRAL_FORM,
    NEUTRAL_MOMENTUM,
    PLAYER_FORM_WEIGHT,
    RED_CARD_STRENGTH_PENALTY,
    TEAM_MOMENTUM_WEIGHT,
)
from fm_match.engine.energy import calculate_energy_modifier

NEUTRAL_STRENGTH = 50.0
NEUTRAL_FITNESS = 100.0
NEUTRAL_ENERGY = 100.0


def _finite_or(value, default: float) -> float:
    """Numeric, finite values pass through; anything else becomes ``default``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value if math.isfinite(value) else default


def calculate_form_modifier(form: float) -> float:
    """Roughly +/-0.15 at the extremes of the 1-100 form scale."""
    return (form - NEUTRAL_FORM) / 100 * PLAYER_FORM_WEIGHT


def calculate_momentum_modifier(momentum: float) -> float:
    return (momentum - NEUTRAL_MOMENTUM) / 100 * TEAM_MOMENTUM_WEIGHT


def calculate_fitness_penalty(fitness: float, minute: int = 0) -> float:
    """Zero from the fitness threshold up, linear below, harsher late on."""
    if fitness >= FITNESS_THRESHOLD:
        return 0.0
    penalty = (FITNESS_THRESHOLD - fitness) * FITNESS_PENALTY_FACTOR
    if minute > LATE_GAME_FITNESS_MINUTE:
        penalty *= LATE_GAME_FITNESS_MULTIPLIER
    return min(FITNESS_PENALTY_MAX, penalty)


def red_card_strength_penalty(red_cards: int) -> float:
    """8 points for the first send-off, 5 more for each one after."""
    if red_cards <= 0:
        return 0.0
    return RED_CARD_STRENGTH_PENALTY + ADDITIONAL_RED_CARD_PENALTY * (red_cards - 1)


def calculate_player_strength(
    player: Player,
    minute: int = 0,
    energy: float | None = None,
) -> float:
    """Effective strength of one player at a given minute.

    ``energy`` overrides the player's stored energy (live match value).
    """
    overall = calculate_overall(player)
    form = _finite_or(player.form.form if player.form is not None else None, NEUTRAL_FORM)
    fitness = _finite_or(player.fitness, NEUTRAL_FITNESS)
    stored_energy = _finite_or(player.energy, NEUTRAL_ENERGY)
    current_energy = stored_energy if energy is None else _finite_or(energy, stored_energy)

    return (
        overall
        * (1 + calculate_form_modifier(form))
        * (1 - calculate_fitness_penalty(fitness, minute))
        * (1 - calculate_energy_modifier(current_energy))
    )


def calculate_team_strength(
    players: Iterable[Player],
    lineup_ids: Iterable[str] | None = None,
    *,
    momentum: float = NEUTRAL_MOMENTUM,
    minute: int = 0,
    live_energy: Mapping[str, float] | None = None,
    red_cards: int = 0,
) -> float:
    """Average effective strength of the players in the lineup.

    Args:
        players: Candidate players (squad or on-pitch list)
        lineup_ids: Restrict the average to these ids; all players if None
        momentum: Team momentum (1-100)
        minute: Current match minute (late-game fitness amplification)
        live_energy: Live energy by player id; falls back to stored energy
        red_cards: Number of players sent off

    Returns:
        Team strength, neutral 50 for an empty lineup
    """
    if lineup_ids is not None:
        allowed = set(lineup_ids)
        selected = [p for p in players if p.id in allowed]
    else:
        selected = list(players)

    if not selected:
        return NEUTRAL_STRENGTH

    live_energy = live_energy or {}
    total = sum(
        calculate_player_strength(p, minute, live_energy.get(p.id))
        for p in selected
    )
    average = total / len(selected)

    momentum = _finite_or(momentum, NEUTRAL_MOMENTUM)
    strength = average * (1 + calculate_momentum_modifier(momentum))
    return strength - red_card_strength_penalty(red_cards)
