"""Shared factories for match engine tests."""

import random
from collections.abc import Iterable

import pytest

from fm_match.core.models import (
    Player,
    PlayerAttributes,
    Position,
    TacticalPosture,
    Tactics,
    Team,
    TeamControl,
)
from fm_match.engine.match_engine import MatchConfig

STARTING_SHAPE = (
    [Position.GK]
    + [Position.DEF] * 4
    + [Position.MID] * 3
    + [Position.ATT] * 3
)
BENCH_SHAPE = [Position.GK, Position.DEF, Position.DEF, Position.MID, Position.MID, Position.ATT, Position.ATT]


class ScriptedRandom(random.Random):
    """Returns queued values from ``random()`` before falling back to a seeded stream."""

    def __init__(self, values: Iterable[float] = (), seed: int = 42):
        super().__init__(seed)
        self.queue = list(values)

    def push(self, *values: float) -> None:
        self.queue.extend(values)

    def random(self) -> float:
        if self.queue:
            return self.queue.pop(0)
        return super().random()

    # Keeps randint/choice on the bit stream instead of the scripted values
    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


def make_player(
    player_id: str,
    position: Position = Position.MID,
    level: int = 60,
    **overrides,
) -> Player:
    attribute_overrides = overrides.pop("attributes", {})
    attributes = PlayerAttributes.uniform(level)
    for name, value in attribute_overrides.items():
        setattr(attributes, name, value)
    return Player(id=player_id, name=f"Player {player_id}", position=position, attributes=attributes, **overrides)


def make_team(
    team_id: str,
    level: int = 60,
    bench_level: int | None = None,
    energy: float = 100.0,
    bench_energy: float = 100.0,
    **team_kwargs,
) -> Team:
    """Eleven starters in a 4-3-3 plus a seven-man bench."""
    players = [
        make_player(f"{team_id}-s{i}", position, level, energy=energy)
        for i, position in enumerate(STARTING_SHAPE)
    ]
    players += [
        make_player(f"{team_id}-b{i}", position, bench_level or level, energy=bench_energy)
        for i, position in enumerate(BENCH_SHAPE)
    ]
    return Team(id=team_id, name=f"Team {team_id.upper()}", players=players, **team_kwargs)


def make_tactics(team: Team, posture: TacticalPosture = TacticalPosture.BALANCED, formation: str = "4-3-3") -> Tactics:
    starters = [p.id for p in team.players if "-s" in p.id]
    bench = [p.id for p in team.players if "-b" in p.id]
    return Tactics(formation=formation, posture=posture, lineup=starters, substitutes=bench)


def make_config(
    home: Team | None = None,
    away: Team | None = None,
    home_control: TeamControl = TeamControl.AI,
    away_control: TeamControl = TeamControl.AI,
    home_posture: TacticalPosture = TacticalPosture.BALANCED,
    away_posture: TacticalPosture = TacticalPosture.BALANCED,
    **kwargs,
) -> MatchConfig:
    home = home or make_team("h")
    away = away or make_team("a")
    return MatchConfig(
        home_team=home,
        away_team=away,
        home_tactics=make_tactics(home, home_posture),
        away_tactics=make_tactics(away, away_posture),
        home_control=home_control,
        away_control=away_control,
        **kwargs,
    )


@pytest.fixture
def home_team() -> Team:
    return make_team("h")


@pytest.fixture
def away_team() -> Team:
    return make_team("a")


@pytest.fixture
def config(home_team, away_team) -> MatchConfig:
    return make_config(home_team, away_team)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)
