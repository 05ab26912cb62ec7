"""Core module for FM Match."""

from fm_match.core.config import Settings, get_settings
from fm_match.core.logging import configure_logging
from fm_match.core.models import (
    FormationType,
    MatchEvent,
    MatchEventType,
    MatchPhase,
    MatchResult,
    Player,
    Position,
    TacticalPosture,
    Tactics,
    Team,
    TeamControl,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "configure_logging",
    # Models
    "FormationType",
    "MatchEvent",
    "MatchEventType",
    "MatchPhase",
    "MatchResult",
    "Player",
    "Position",
    "TacticalPosture",
    "Tactics",
    "Team",
    "TeamControl",
]
