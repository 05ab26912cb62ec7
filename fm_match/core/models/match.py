"""Match event and result definitions.

Events are a tagged union: each kind is its own frozen dataclass carrying only
the fields that kind needs. ``MatchEvent`` is the common base.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import ClassVar, Literal

Side = Literal["home", "away"]


def other_side(side: Side) -> Side:
    return "away" if side == "home" else "home"


class MatchPhase(Enum):
    """Match phase, strictly linear."""
    FIRST_HALF = "first_half"
    HALF_TIME = "half_time"
    SECOND_HALF = "second_half"
    FULL_TIME = "full_time"


class MatchEventType(Enum):
    """Types of match events."""
    KICKOFF = "kickoff"
    GOAL = "goal"
    OWN_GOAL = "own_goal"
    PENALTY_SCORED = "penalty_scored"
    PENALTY_MISSED = "penalty_missed"
    YELLOW_CARD = "yellow_card"
    RED_CARD = "red_card"
    SUBSTITUTION = "substitution"
    CHANCE_MISSED = "chance_missed"
    SAVE = "save"
    CORNER = "corner"
    FREE_KICK = "free_kick"
    HALF_TIME = "half_time"
    FULL_TIME = "full_time"


class GoalType(Enum):
    ASSISTED = "assisted"
    UNASSISTED = "unassisted"
    HEADER = "header"
    FREE_KICK = "free_kick"


class CardReason(Enum):
    RECKLESS_CHALLENGE = "reckless_challenge"
    TACTICAL_FOUL = "tactical_foul"
    DISSENT = "dissent"
    TIME_WASTING = "time_wasting"
    SECOND_YELLOW = "second_yellow"
    VIOLENT_CONDUCT = "violent_conduct"
    PROFESSIONAL_FOUL = "professional_foul"


@dataclass(frozen=True)
class MatchEvent:
    """Fields shared by every event."""
    minute: int
    team: Side
    description: str = ""

    event_type: ClassVar[MatchEventType]

    @property
    def player_id(self) -> str | None:
        """Primary actor, when the kind has one."""
        return None

    def to_dict(self) -> dict:
        data = {"type": self.event_type.value}
        for key, value in asdict(self).items():
            data[key] = value.value if isinstance(value, Enum) else value
        return data


@dataclass(frozen=True)
class KickoffEvent(MatchEvent):
    event_type: ClassVar[MatchEventType] = MatchEventType.KICKOFF


@dataclass(frozen=True)
class HalfTimeEvent(MatchEvent):
    home_score: int = 0
    away_score: int = 0

    event_type: ClassVar[MatchEventType] = MatchEventType.HALF_TIME


@dataclass(frozen=True)
class FullTimeEvent(MatchEvent):
    home_score: int = 0
    away_score: int = 0

    event_type: ClassVar[MatchEventType] = MatchEventType.FULL_TIME


@dataclass(frozen=True)
class GoalEvent(MatchEvent):
    scorer_id: str = ""
    scorer_name: str = ""
    assist_id: str | None = None
    assist_name: str | None = None
    goal_type: GoalType = GoalType.UNASSISTED

    event_type: ClassVar[MatchEventType] = MatchEventType.GOAL

    @property
    def player_id(self) -> str | None:
        return self.scorer_id


@dataclass(frozen=True)
class OwnGoalEvent(MatchEvent):
    """``team`` is the side credited with the goal; the culprit defends."""
    culprit_id: str = ""
    culprit_name: str = ""

    event_type: ClassVar[MatchEventType] = MatchEventType.OWN_GOAL

    @property
    def player_id(self) -> str | None:
        return self.culprit_id


@dataclass(frozen=True)
class PenaltyEvent(MatchEvent):
    taker_id: str = ""
    taker_name: str = ""
    scored: bool = False

    @property
    def event_type(self) -> MatchEventType:  # type: ignore[override]
        return MatchEventType.PENALTY_SCORED if self.scored else MatchEventType.PENALTY_MISSED

    @property
    def player_id(self) -> str | None:
        return self.taker_id


@dataclass(frozen=True)
class CardEvent(MatchEvent):
    offender_id: str = ""
    offender_name: str = ""
    red: bool = False
    reason: CardReason = CardReason.RECKLESS_CHALLENGE

    @property
    def event_type(self) -> MatchEventType:  # type: ignore[override]
        return MatchEventType.RED_CARD if self.red else MatchEventType.YELLOW_CARD

    @property
    def player_id(self) -> str | None:
        return self.offender_id


@dataclass(frozen=True)
class SubstitutionEvent(MatchEvent):
    player_in_id: str = ""
    player_in_name: str = ""
    player_out_id: str = ""
    player_out_name: str = ""
    reason: str | None = None  # AI reason code, None for manual changes

    event_type: ClassVar[MatchEventType] = MatchEventType.SUBSTITUTION

    @property
    def player_id(self) -> str | None:
        return self.player_in_id


@dataclass(frozen=True)
class ChanceMissedEvent(MatchEvent):
    shooter_id: str = ""
    shooter_name: str = ""

    event_type: ClassVar[MatchEventType] = MatchEventType.CHANCE_MISSED

    @property
    def player_id(self) -> str | None:
        return self.shooter_id


@dataclass(frozen=True)
class SaveEvent(MatchEvent):
    """``team`` is the goalkeeper's side."""
    goalkeeper_id: str = ""
    goalkeeper_name: str = ""

    event_type: ClassVar[MatchEventType] = MatchEventType.SAVE

    @property
    def player_id(self) -> str | None:
        return self.goalkeeper_id


@dataclass(frozen=True)
class CornerEvent(MatchEvent):
    event_type: ClassVar[MatchEventType] = MatchEventType.CORNER


@dataclass(frozen=True)
class FreeKickEvent(MatchEvent):
    event_type: ClassVar[MatchEventType] = MatchEventType.FREE_KICK


SCORING_EVENT_TYPES = frozenset({
    MatchEventType.GOAL,
    MatchEventType.OWN_GOAL,
    MatchEventType.PENALTY_SCORED,
})


@dataclass(frozen=True)
class Fixture:
    """A scheduled match supplied by the season layer."""
    id: str
    round: int
    home_team_id: str
    away_team_id: str
    date: str = ""  # ISO date
    played: bool = False


@dataclass(frozen=True)
class MatchResult:
    """Immutable outcome handed back to the season and persistence layers."""
    id: str
    home_team_id: str
    away_team_id: str
    home_score: int
    away_score: int
    events: tuple[MatchEvent, ...] = field(default_factory=tuple)
    attendance: int = 0
    date: str = ""

    @property
    def score_string(self) -> str:
        """Get score as string (e.g., '2-1')."""
        return f"{self.home_score}-{self.away_score}"

    @property
    def winner_id(self) -> str | None:
        """Winner's team id, or None for a draw."""
        if self.home_score > self.away_score:
            return self.home_team_id
        if self.away_score > self.home_score:
            return self.away_team_id
        return None
