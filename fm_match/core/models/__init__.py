"""Core models for FM Match."""

from fm_match.core.models.player import (
    Player,
    PlayerAttributes,
    PlayerForm,
    Position,
    POSITION_WEIGHTS,
    calculate_overall,
)
from fm_match.core.models.team import (
    FORMATION_LINES,
    FormationType,
    TacticalPosture,
    Tactics,
    Team,
    TeamControl,
    formation_slot_count,
)
from fm_match.core.models.match import (
    SCORING_EVENT_TYPES,
    CardEvent,
    CardReason,
    ChanceMissedEvent,
    CornerEvent,
    Fixture,
    FreeKickEvent,
    FullTimeEvent,
    GoalEvent,
    GoalType,
    HalfTimeEvent,
    KickoffEvent,
    MatchEvent,
    MatchEventType,
    MatchPhase,
    MatchResult,
    OwnGoalEvent,
    PenaltyEvent,
    SaveEvent,
    Side,
    SubstitutionEvent,
    other_side,
)

__all__ = [
    # Player
    "Player",
    "PlayerAttributes",
    "PlayerForm",
    "Position",
    "POSITION_WEIGHTS",
    "calculate_overall",
    # Team
    "FORMATION_LINES",
    "FormationType",
    "TacticalPosture",
    "Tactics",
    "Team",
    "TeamControl",
    "formation_slot_count",
    # Match
    "SCORING_EVENT_TYPES",
    "CardEvent",
    "CardReason",
    "ChanceMissedEvent",
    "CornerEvent",
    "Fixture",
    "FreeKickEvent",
    "FullTimeEvent",
    "GoalEvent",
    "GoalType",
    "HalfTimeEvent",
    "KickoffEvent",
    "MatchEvent",
    "MatchEventType",
    "MatchPhase",
    "MatchResult",
    "OwnGoalEvent",
    "PenaltyEvent",
    "SaveEvent",
    "Side",
    "SubstitutionEvent",
    "other_side",
]
