"""Tactical impact model.

Possession, creation and prevention deltas derived from the formation
matchup and the tactical posture. Pure functions of static configuration.
"""

from dataclasses import dataclass
from enum import Enum

from fm_match.core.models import (
    FORMATION_LINES,
    FormationType,
    Position,
    TacticalPosture,
    Tactics,
)

TACTICAL_IMPACT_MIN = -0.2
TACTICAL_IMPACT_MAX = 0.2

# Threshold for turning a numeric delta into a qualitative hint
HINT_BUCKET_THRESHOLD = 0.02


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _clamp_impact(value: float) -> float:
    return clamp(value, TACTICAL_IMPACT_MIN, TACTICAL_IMPACT_MAX)


@dataclass(frozen=True)
class TacticalImpact:
    """Bounded deltas applied to a side's possession, chance creation and prevention."""
    possession: float = 0.0
    creation: float = 0.0
    prevention: float = 0.0

    def clamped(self) -> "TacticalImpact":
        return TacticalImpact(
            possession=_clamp_impact(self.possession),
            creation=_clamp_impact(self.creation),
            prevention=_clamp_impact(self.prevention),
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "possession": self.possession,
            "creation": self.creation,
            "prevention": self.prevention,
        }


NEUTRAL_IMPACT = TacticalImpact()

POSTURE_IMPACT: dict[TacticalPosture, TacticalImpact] = {
    TacticalPosture.DEFENSIVE: TacticalImpact(possession=-0.03, creation=-0.06, prevention=0.08),
    TacticalPosture.BALANCED: TacticalImpact(),
    TacticalPosture.ATTACKING: TacticalImpact(possession=0.03, creation=0.08, prevention=-0.06),
}


def get_posture_impact(posture: TacticalPosture) -> TacticalImpact:
    return POSTURE_IMPACT[TacticalPosture(posture)]


def calculate_formation_matchup_impact(
    formation: FormationType,
    opponent_formation: FormationType,
) -> TacticalImpact:
    """Line-count deltas against the opponent's shape.

    Midfield numbers drive possession, attackers against defenders drive
    creation, defenders against attackers drive prevention.
    """
    own = FORMATION_LINES[FormationType.parse(formation)]
    opp = FORMATION_LINES[FormationType.parse(opponent_formation)]

    mid_delta = own[Position.MID] - opp[Position.MID]
    cover_delta = own[Position.DEF] - opp[Position.ATT]
    threat_delta = own[Position.ATT] - opp[Position.DEF]

    possession = mid_delta * 0.012 + cover_delta * 0.006 + threat_delta * 0.004
    creation = threat_delta * 0.018 + mid_delta * 0.008
    prevention = cover_delta * 0.018 + mid_delta * 0.006

    return TacticalImpact(possession, creation, prevention).clamped()


def merge_tactical_impacts(*impacts: TacticalImpact) -> TacticalImpact:
    """Sum impacts component-wise, then clamp."""
    return TacticalImpact(
        possession=sum(i.possession for i in impacts),
        creation=sum(i.creation for i in impacts),
        prevention=sum(i.prevention for i in impacts),
    ).clamped()


def calculate_tactical_impact(tactics: Tactics, opponent_tactics: Tactics) -> TacticalImpact:
    """Formation matchup merged with posture for one side."""
    return merge_tactical_impacts(
        calculate_formation_matchup_impact(tactics.formation, opponent_tactics.formation),
        get_posture_impact(tactics.posture),
    )


# ============================================================================
# Half-time hints
# ============================================================================

class MatchSituation(Enum):
    WINNING = "winning"
    DRAWING = "drawing"
    LOSING = "losing"


class PostureHint(Enum):
    INCREASES_CREATION = "increases_creation"
    INCREASES_PREVENTION = "increases_prevention"
    NEUTRAL = "neutral"


class FormationMatchupHint(Enum):
    ATTACK_FAVOURABLE = "attack_favourable"
    ATTACK_UNDER_PRESSURE = "attack_under_pressure"
    DEFENCE_FAVOURABLE = "defence_favourable"
    DEFENCE_UNDER_PRESSURE = "defence_under_pressure"
    MIDFIELD_FAVOURABLE = "midfield_favourable"
    MIDFIELD_UNDER_PRESSURE = "midfield_under_pressure"
    NEUTRAL = "neutral"


POSTURE_HINTS: dict[TacticalPosture, PostureHint] = {
    TacticalPosture.DEFENSIVE: PostureHint.INCREASES_PREVENTION,
    TacticalPosture.BALANCED: PostureHint.NEUTRAL,
    TacticalPosture.ATTACKING: PostureHint.INCREASES_CREATION,
}


@dataclass(frozen=True)
class HalfTimeHints:
    """Qualitative guidance for the half-time team talk screen."""
    situation: MatchSituation
    goal_difference: int
    posture_hints: dict[TacticalPosture, PostureHint]
    formation_matchup_hints: list[FormationMatchupHint]


def _bucket(value: float) -> int:
    if value >= HINT_BUCKET_THRESHOLD:
        return 1
    if value <= -HINT_BUCKET_THRESHOLD:
        return -1
    return 0


def get_half_time_hints(
    own_score: int,
    opponent_score: int,
    formation: FormationType,
    opponent_formation: FormationType,
) -> HalfTimeHints:
    """Bucket the formation matchup into hint keys without exposing numbers."""
    goal_difference = own_score - opponent_score
    if goal_difference > 0:
        situation = MatchSituation.WINNING
    elif goal_difference < 0:
        situation = MatchSituation.LOSING
    else:
        situation = MatchSituation.DRAWING

    impact = calculate_formation_matchup_impact(formation, opponent_formation)
    pairs = (
        (impact.creation, FormationMatchupHint.ATTACK_FAVOURABLE,
         FormationMatchupHint.ATTACK_UNDER_PRESSURE),
        (impact.prevention, FormationMatchupHint.DEFENCE_FAVOURABLE,
         FormationMatchupHint.DEFENCE_UNDER_PRESSURE),
        (impact.possession, FormationMatchupHint.MIDFIELD_FAVOURABLE,
         FormationMatchupHint.MIDFIELD_UNDER_PRESSURE),
    )

    hints = []
    for value, favourable, under_pressure in pairs:
        bucket = _bucket(value)
        if bucket > 0:
            hints.append(favourable)
        elif bucket < 0:
            hints.append(under_pressure)
    if not hints:
        hints.append(FormationMatchupHint.NEUTRAL)

    return HalfTimeHints(
        situation=situation,
        goal_difference=abs(goal_difference),
        posture_hints=dict(POSTURE_HINTS),
        formation_matchup_hints=hints,
    )
