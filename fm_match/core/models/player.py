"""Player model definition."""

import math
from dataclasses import dataclass, field, fields
from enum import Enum


class Position(Enum):
    """Player positions on the field (four-line taxonomy)."""
    GK = "GK"  # Goalkeeper
    DEF = "DEF"  # Defender (CB, LB, RB, wing-backs)
    MID = "MID"  # Midfielder (CDM, CM, CAM, LM, RM)
    ATT = "ATT"  # Attacker (ST, CF, wingers)


@dataclass
class PlayerAttributes:
    """Numeric attributes on a 1-99 scale."""

    # Physical
    speed: int = 50
    strength: int = 50
    stamina: int = 50

    # Technical
    shooting: int = 50
    passing: int = 50
    dribbling: int = 50
    heading: int = 50
    tackling: int = 50

    # Mental
    positioning: int = 50
    vision: int = 50
    composure: int = 50
    aggression: int = 50

    # Goalkeeping
    reflexes: int = 50
    handling: int = 50
    diving: int = 50

    @classmethod
    def uniform(cls, value: int) -> "PlayerAttributes":
        """Every attribute set to the same value."""
        return cls(**{f.name: value for f in fields(cls)})

    def get(self, name: str, default: int = 50) -> int:
        return getattr(self, name, default)


@dataclass
class PlayerForm:
    """Rolling form record, updated by the season layer after each match."""
    form: float = 70.0  # 1-100, 70 is neutral-positive
    last_five_ratings: list[float] = field(default_factory=list)  # 0-10
    season_goals: int = 0
    season_assists: int = 0
    season_minutes: int = 0
    season_avg_rating: float = 0.0


@dataclass
class Player:
    """A football player as seen by the match engine."""

    id: str
    name: str
    position: Position
    attributes: PlayerAttributes = field(default_factory=PlayerAttributes)
    nickname: str | None = None
    age: int = 25
    nationality: str = "Unknown"

    potential: int = 50
    morale: int = 70  # 1-100
    fitness: float = 100.0  # 0-100, durability across matches
    energy: float = 100.0  # 0-100, fatigue within a match

    # Disciplinary counters (season)
    yellow_cards: int = 0
    red_cards: int = 0

    injured: bool = False
    form: PlayerForm = field(default_factory=PlayerForm)

    @property
    def display_name(self) -> str:
        """Nickname when the player has one."""
        return self.nickname or self.name

    @property
    def is_goalkeeper(self) -> bool:
        return self.position == Position.GK

    def __repr__(self) -> str:
        pos = self.position.value if isinstance(self.position, Position) else self.position
        return f"<Player(id={self.id!r}, name={self.display_name!r}, pos={pos})>"


# Attribute weights for the overall rating of each position
POSITION_WEIGHTS: dict[Position, dict[str, int]] = {
    Position.GK: {"reflexes": 3, "handling": 3, "diving": 3, "positioning": 2, "composure": 1},
    Position.DEF: {"tackling": 3, "heading": 2, "strength": 2, "positioning": 2, "speed": 1},
    Position.MID: {
        "passing": 3,
        "vision": 2,
        "stamina": 2,
        "dribbling": 1,
        "positioning": 1,
        "tackling": 1,
    },
    Position.ATT: {"shooting": 3, "positioning": 2, "dribbling": 2, "speed": 2, "composure": 1},
}

NEUTRAL_RATING = 50


def calculate_overall(player: Player) -> int:
    """Position-weighted attribute blend.

    Corrupted or missing data (unknown position, no attributes, non-numeric
    or non-finite values) yields the neutral rating instead of propagating.
    """
    attributes = getattr(player, "attributes", None)
    weights = POSITION_WEIGHTS.get(getattr(player, "position", None))
    if attributes is None or weights is None:
        return NEUTRAL_RATING

    total = 0.0
    weight_sum = 0
    for attr, weight in weights.items():
        value = getattr(attributes, attr, None)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if not math.isfinite(value):
            continue
        total += value * weight
        weight_sum += weight

    return round(total / weight_sum) if weight_sum > 0 else NEUTRAL_RATING
