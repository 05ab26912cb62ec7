"""Team and tactics model definitions."""

from dataclasses import dataclass, field
from enum import Enum

from fm_match.core.models.player import Player, Position


class FormationType(Enum):
    """Supported formations."""
    F_442 = "4-4-2"
    F_433 = "4-3-3"
    F_4231 = "4-2-3-1"
    F_352 = "3-5-2"
    F_451 = "4-5-1"
    F_532 = "5-3-2"
    F_541 = "5-4-1"
    F_343 = "3-4-3"

    @classmethod
    def parse(cls, value: "str | FormationType") -> "FormationType":
        """Accept either an enum member or its "4-3-3" style tag."""
        if isinstance(value, cls):
            return value
        return cls(value)


class TacticalPosture(Enum):
    """Tactical stance shifting possession, creation and prevention."""
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    ATTACKING = "attacking"


class TeamControl(Enum):
    """Who manages a side during a match."""
    HUMAN = "human"
    AI = "ai"


# Line counts per formation. 4-2-3-1 plays its three advanced midfielders
# as a midfield line with a lone striker.
FORMATION_LINES: dict[FormationType, dict[Position, int]] = {
    FormationType.F_442: {Position.DEF: 4, Position.MID: 4, Position.ATT: 2},
    FormationType.F_433: {Position.DEF: 4, Position.MID: 3, Position.ATT: 3},
    FormationType.F_4231: {Position.DEF: 4, Position.MID: 5, Position.ATT: 1},
    FormationType.F_352: {Position.DEF: 3, Position.MID: 5, Position.ATT: 2},
    FormationType.F_451: {Position.DEF: 4, Position.MID: 5, Position.ATT: 1},
    FormationType.F_532: {Position.DEF: 5, Position.MID: 3, Position.ATT: 2},
    FormationType.F_541: {Position.DEF: 5, Position.MID: 4, Position.ATT: 1},
    FormationType.F_343: {Position.DEF: 3, Position.MID: 4, Position.ATT: 3},
}


def formation_slot_count(formation: FormationType) -> int:
    """Outfield lines plus the goalkeeper."""
    return sum(FORMATION_LINES[formation].values()) + 1


@dataclass
class Tactics:
    """Match tactics: shape, stance, starting eleven and bench."""
    formation: FormationType = FormationType.F_433
    posture: TacticalPosture = TacticalPosture.BALANCED
    lineup: list[str] = field(default_factory=list)  # Player ids in formation order
    substitutes: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.formation = FormationType.parse(self.formation)
        self.posture = TacticalPosture(self.posture)

    def copy(self) -> "Tactics":
        """Independent copy (lists are not shared)."""
        return Tactics(
            formation=self.formation,
            posture=self.posture,
            lineup=list(self.lineup),
            substitutes=list(self.substitutes),
        )

    def validate(self) -> list[str]:
        """Return human-readable problems; empty when the tactics are usable."""
        problems = []
        expected = formation_slot_count(self.formation)
        if len(self.lineup) != expected:
            problems.append(
                f"lineup has {len(self.lineup)} players, "
                f"{self.formation.value} needs {expected}"
            )
        if len(set(self.lineup)) != len(self.lineup):
            problems.append("lineup contains duplicate players")
        overlap = set(self.lineup) & set(self.substitutes)
        if overlap:
            problems.append(f"players both starting and on the bench: {sorted(overlap)}")
        return problems


@dataclass
class Team:
    """A club squad as supplied to the match engine."""
    id: str
    name: str
    players: list[Player] = field(default_factory=list)
    short_name: str = ""
    momentum: float = 50.0  # 1-100, derived from recent results
    reputation: int = 50  # 1-100
    capacity: int = 30000

    def __post_init__(self):
        if not self.short_name:
            self.short_name = self.name[:3].upper()

    def get_player(self, player_id: str) -> Player | None:
        """Find a player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None
