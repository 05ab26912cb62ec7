"""Goal resolution: shooters, scorers, assisters and conversion odds.

Every selection is attribute-weighted roulette sampling over the relevant part
of a lineup. Empty pools return None and the caller emits nothing.
"""

import random
from dataclasses import dataclass
from enum import Enum

from fm_match.core.models import Player, Position
from fm_match.engine.constants import (
    BASE_GOAL_CONVERSION,
    GK_CLEAN_SHEET_BONUS,
    GK_IN_FORM_RATING,
    HOME_CONVERSION_BONUS,
    MAX_GOAL_CONVERSION,
    MIN_GOAL_CONVERSION,
    OWN_GOAL_SHARE,
    PENALTY_BASE_CONVERSION,
    PENALTY_MAX_CONVERSION,
    PENALTY_MIN_CONVERSION,
    PENALTY_SKILL_WEIGHT,
    STRENGTH_DIFF_CONVERSION_WEIGHT,
    STREAK_WINDOW,
    STRIKER_DROUGHT_PENALTY,
    STRIKER_DROUGHT_RATING,
    STRIKER_DROUGHT_THRESHOLD,
    STRIKER_HOT_STREAK_BONUS,
    STRIKER_HOT_STREAK_RATING,
    UNASSISTED_GOAL_SHARE,
)
from fm_match.engine.selection import weighted_choice
from fm_match.engine.tactics import TacticalImpact, clamp

ATTACKING_POSITIONS = frozenset({Position.ATT, Position.MID})
DEFENSIVE_POSITIONS = frozenset({Position.DEF, Position.GK})


class GoalOutcome(Enum):
    """How a successful attacking chance ends up in the net."""
    OWN_GOAL = "own_goal"
    UNASSISTED = "unassisted"
    ASSISTED = "assisted"


@dataclass
class ChanceEvaluation:
    """Conversion probability of an attacking chance and its components."""
    probability: float
    base: float
    strength_component: float
    creation: float
    prevention: float
    home_bonus: float
    streak_modifier: float
    goalkeeper_modifier: float

    def as_dict(self) -> dict[str, float]:
        return {
            "probability": self.probability,
            "base": self.base,
            "strength_component": self.strength_component,
            "creation": self.creation,
            "prevention": self.prevention,
            "home_bonus": self.home_bonus,
            "streak_modifier": self.streak_modifier,
            "goalkeeper_modifier": self.goalkeeper_modifier,
        }


@dataclass
class GoalResolution:
    outcome: GoalOutcome
    scorer: Player | None = None
    assister: Player | None = None
    culprit: Player | None = None


def _attr(player: Player, name: str) -> int:
    return player.attributes.get(name)


def _recent_ratings(player: Player, count: int) -> list[float]:
    if player.form is None:
        return []
    return list(player.form.last_five_ratings[-count:])


def outfield(players: list[Player]) -> list[Player]:
    return [p for p in players if p.position != Position.GK]


def find_goalkeeper(players: list[Player]) -> Player | None:
    for player in players:
        if player.position == Position.GK:
            return player
    return None


# ============================================================================
# Modifiers
# ============================================================================

def striker_streak_modifier(player: Player) -> float:
    """Hot-streak bonus or drought penalty for attackers, from recent ratings."""
    if player.position != Position.ATT:
        return 0.0

    recent = _recent_ratings(player, STREAK_WINDOW)
    if len(recent) == STREAK_WINDOW and sum(recent) / len(recent) >= STRIKER_HOT_STREAK_RATING:
        return STRIKER_HOT_STREAK_BONUS

    window = _recent_ratings(player, STRIKER_DROUGHT_THRESHOLD)
    if len(window) == STRIKER_DROUGHT_THRESHOLD and all(
        rating < STRIKER_DROUGHT_RATING for rating in window
    ):
        return -STRIKER_DROUGHT_PENALTY
    return 0.0


def goalkeeper_form_modifier(goalkeeper: Player | None) -> float:
    """An in-form goalkeeper makes chances harder to convert."""
    if goalkeeper is None:
        return 0.0
    recent = _recent_ratings(goalkeeper, STREAK_WINDOW)
    if len(recent) == STREAK_WINDOW and sum(recent) / len(recent) >= GK_IN_FORM_RATING:
        return -GK_CLEAN_SHEET_BONUS
    return 0.0


def calculate_chance_success(
    attack_strength: float,
    defense_strength: float,
    attacking_impact: TacticalImpact,
    defending_impact: TacticalImpact,
    *,
    is_home: bool,
    neutral_venue: bool = False,
    shooter: Player | None = None,
    goalkeeper: Player | None = None,
) -> ChanceEvaluation:
    """Probability that an attacking chance becomes a goal."""
    strength_component = (attack_strength - defense_strength) / 100 * STRENGTH_DIFF_CONVERSION_WEIGHT
    home_bonus = HOME_CONVERSION_BONUS if is_home and not neutral_venue else 0.0
    streak = striker_streak_modifier(shooter) if shooter is not None else 0.0
    keeper = goalkeeper_form_modifier(goalkeeper)

    raw = (
        BASE_GOAL_CONVERSION
        + strength_component
        + attacking_impact.creation
        - defending_impact.prevention
        + home_bonus
        + streak
        + keeper
    )
    return ChanceEvaluation(
        probability=clamp(raw, MIN_GOAL_CONVERSION, MAX_GOAL_CONVERSION),
        base=BASE_GOAL_CONVERSION,
        strength_component=strength_component,
        creation=attacking_impact.creation,
        prevention=defending_impact.prevention,
        home_bonus=home_bonus,
        streak_modifier=streak,
        goalkeeper_modifier=keeper,
    )


def calculate_penalty_conversion(taker: Player, goalkeeper: Player | None) -> float:
    """Spot-kick odds from the taker's technique against the keeper's shot-stopping."""
    taker_skill = (
        _attr(taker, "shooting") + _attr(taker, "composure") + _attr(taker, "positioning")
    ) / 3
    if goalkeeper is None:
        return PENALTY_MAX_CONVERSION
    keeper_skill = (
        _attr(goalkeeper, "reflexes") + _attr(goalkeeper, "diving") + _attr(goalkeeper, "handling")
    ) / 3
    conversion = PENALTY_BASE_CONVERSION + (taker_skill - keeper_skill) / 100 * PENALTY_SKILL_WEIGHT
    return clamp(conversion, PENALTY_MIN_CONVERSION, PENALTY_MAX_CONVERSION)


# ============================================================================
# Selection
# ============================================================================

def pick_shooter(rng: random.Random, lineup: list[Player]) -> Player | None:
    """Attackers and midfielders, weighted by shooting + positioning."""
    candidates = [p for p in lineup if p.position in ATTACKING_POSITIONS]
    return weighted_choice(
        rng, candidates, lambda p: _attr(p, "shooting") + _attr(p, "positioning")
    )


def pick_assister(rng: random.Random, lineup: list[Player], scorer: Player) -> Player | None:
    """Outfield team-mates of the scorer, weighted by passing + vision."""
    candidates = [p for p in outfield(lineup) if p.id != scorer.id]
    return weighted_choice(rng, candidates, lambda p: _attr(p, "passing") + _attr(p, "vision"))


def pick_own_goal_culprit(rng: random.Random, defending_lineup: list[Player]) -> Player | None:
    """Low composure is riskier; defenders and goalkeepers are twice as likely."""
    def weight(player: Player) -> float:
        base = max(1, 100 - _attr(player, "composure"))
        return base * (2 if player.position in DEFENSIVE_POSITIONS else 1)

    return weighted_choice(rng, list(defending_lineup), weight)


def pick_header_scorer(rng: random.Random, lineup: list[Player]) -> Player | None:
    """Corner headers: outfield players weighted by heading + positioning."""
    return weighted_choice(
        rng, outfield(lineup), lambda p: _attr(p, "heading") + _attr(p, "positioning")
    )


def pick_set_piece_taker(lineup: list[Player], exclude: Player | None = None) -> Player | None:
    """Best crosser among outfield players (deterministic)."""
    candidates = [p for p in outfield(lineup) if exclude is None or p.id != exclude.id]
    if not candidates:
        return None
    return max(candidates, key=lambda p: _attr(p, "passing") + _attr(p, "vision"))


def pick_free_kick_scorer(rng: random.Random, lineup: list[Player]) -> Player | None:
    """Direct free kicks: outfield players weighted by shooting + composure."""
    return weighted_choice(
        rng, outfield(lineup), lambda p: _attr(p, "shooting") + _attr(p, "composure")
    )


def pick_penalty_taker(lineup: list[Player]) -> Player | None:
    """The designated taker is the best finisher on the pitch."""
    candidates = outfield(lineup) or list(lineup)
    if not candidates:
        return None
    return max(
        candidates,
        key=lambda p: _attr(p, "shooting") + _attr(p, "composure") + _attr(p, "positioning"),
    )


def roll_goal_outcome(rng: random.Random) -> GoalOutcome:
    """3% own goal, 24% unassisted, 73% assisted."""
    roll = rng.random()
    if roll < OWN_GOAL_SHARE:
        return GoalOutcome.OWN_GOAL
    if roll < OWN_GOAL_SHARE + UNASSISTED_GOAL_SHARE:
        return GoalOutcome.UNASSISTED
    return GoalOutcome.ASSISTED


def resolve_goal(
    rng: random.Random,
    shooter: Player,
    attacking_lineup: list[Player],
    defending_lineup: list[Player],
) -> GoalResolution:
    """Decide goal type and the players credited with it.

    An own goal with nobody to blame, or an assist with nobody to give it to,
    falls back to an unassisted goal by the shooter.
    """
    outcome = roll_goal_outcome(rng)

    if outcome == GoalOutcome.OWN_GOAL:
        culprit = pick_own_goal_culprit(rng, defending_lineup)
        if culprit is not None:
            return GoalResolution(outcome=outcome, culprit=culprit)
        return GoalResolution(outcome=GoalOutcome.UNASSISTED, scorer=shooter)

    if outcome == GoalOutcome.ASSISTED:
        assister = pick_assister(rng, attacking_lineup, shooter)
        if assister is not None:
            return GoalResolution(outcome=outcome, scorer=shooter, assister=assister)

    return GoalResolution(outcome=GoalOutcome.UNASSISTED, scorer=shooter)
