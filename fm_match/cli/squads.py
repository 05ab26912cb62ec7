"""Deterministic demo squads for the live viewer."""

import random
from dataclasses import fields

from fm_match.core.models import (
    Fixture,
    Player,
    PlayerAttributes,
    PlayerForm,
    Position,
    Team,
)

CLUB_NAMES = [
    "Northbridge Rovers",
    "Harbour City",
    "Old Mill Athletic",
    "Kingsford United",
    "Redcastle Town",
    "Westmoor Albion",
    "Lakeside Wanderers",
    "Ironvale FC",
    "Seaton Park",
    "Ashgrove Rangers",
    "Brookfield Villa",
    "Stonehill Borough",
]

FIRST_NAMES = [
    "Alex", "Ben", "Carlos", "Dani", "Emil", "Felix", "Gabriel", "Hugo",
    "Ivan", "Jonas", "Kai", "Luca", "Marco", "Nico", "Oscar", "Pablo",
    "Rafael", "Sami", "Tomas", "Viktor",
]
LAST_NAMES = [
    "Almeida", "Berg", "Costa", "Duarte", "Eriksen", "Fischer", "Garcia",
    "Hansen", "Ibrahim", "Jensen", "Kowalski", "Lindqvist", "Moreau",
    "Novak", "Okafor", "Petrov", "Quinn", "Rossi", "Silva", "Tanaka",
]

# 2 GK, 7 DEF, 7 MID, 4 ATT
SQUAD_SHAPE = (
    [Position.GK] * 2
    + [Position.DEF] * 7
    + [Position.MID] * 7
    + [Position.ATT] * 4
)

KEY_ATTRIBUTES = {
    Position.GK: ("reflexes", "handling", "diving", "positioning"),
    Position.DEF: ("tackling", "heading", "strength", "positioning"),
    Position.MID: ("passing", "vision", "stamina", "dribbling"),
    Position.ATT: ("shooting", "positioning", "dribbling", "speed", "composure"),
}


def _rating(value: int) -> int:
    return max(1, min(99, value))


def _attributes(rng: random.Random, position: Position, level: int) -> PlayerAttributes:
    values = {f.name: _rating(level - 15 + rng.randint(-8, 8)) for f in fields(PlayerAttributes)}
    for name in KEY_ATTRIBUTES[position]:
        values[name] = _rating(level + rng.randint(-6, 8))
    return PlayerAttributes(**values)


def build_demo_team(rng: random.Random, index: int, level: int) -> Team:
    name = CLUB_NAMES[index % len(CLUB_NAMES)]
    team_id = f"club-{index + 1}"
    players = []
    for number, position in enumerate(SQUAD_SHAPE, start=1):
        player_level = level + rng.randint(-5, 5)
        players.append(Player(
            id=f"{team_id}-p{number}",
            name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
            position=position,
            attributes=_attributes(rng, position, player_level),
            age=rng.randint(18, 34),
            form=PlayerForm(
                form=rng.uniform(55, 85),
                last_five_ratings=[round(rng.uniform(5.5, 8.0), 1) for _ in range(5)],
            ),
        ))

    return Team(
        id=team_id,
        name=name,
        players=players,
        momentum=rng.uniform(35, 65),
        reputation=max(1, min(100, level + rng.randint(-10, 10))),
        capacity=rng.choice([18000, 24000, 32000, 41000, 52000]),
    )


def build_demo_league(seed: int, team_count: int = 8) -> list[Team]:
    """Same seed, same squads."""
    rng = random.Random(seed)
    return [build_demo_team(rng, i, rng.randint(58, 80)) for i in range(team_count)]


def build_round_fixtures(teams: list[Team], round_number: int = 1) -> list[Fixture]:
    """Pair clubs for one round with the circle method."""
    ids = [t.id for t in teams]
    if len(ids) % 2:
        ids.append("")
    rotation = (round_number - 1) % (len(ids) - 1) if len(ids) > 2 else 0
    fixed, rest = ids[0], ids[1:]
    rest = rest[-rotation:] + rest[:-rotation] if rotation else rest
    order = [fixed] + rest

    half = len(order) // 2
    fixtures = []
    for i in range(half):
        home, away = order[i], order[-(i + 1)]
        if not home or not away:
            continue
        if round_number % 2 == 0:
            home, away = away, home
        fixtures.append(Fixture(
            id=f"r{round_number}-m{i + 1}",
            round=round_number,
            home_team_id=home,
            away_team_id=away,
        ))
    return fixtures
