"""Live round of matches stepped in lock-step.

The manager's own fixture is human-controlled; every other side is run by the
AI with a best-eleven default selection. Each match owns its own generator,
derived from the round generator, so one match never perturbs another.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from fm_match.core.models import (
    FORMATION_LINES,
    Fixture,
    FormationType,
    MatchEvent,
    MatchPhase,
    MatchResult,
    Player,
    Position,
    TacticalPosture,
    Tactics,
    Team,
    TeamControl,
    calculate_overall,
)
from fm_match.engine.attendance import sample_attendance
from fm_match.engine.energy import get_opponent_effective_energy
from fm_match.engine.match_engine import MatchConfig, MatchSimulation
from fm_match.engine.trace import TraceConfig

logger = logging.getLogger(__name__)

DEFAULT_FORMATION = FormationType.F_433
DEFAULT_BENCH_SIZE = 7


@dataclass
class LiveMatchState:
    """One fixture of a live round."""
    fixture: Fixture
    home_team: Team
    away_team: Team
    simulation: MatchSimulation
    attendance: int = 0
    home_control: TeamControl = TeamControl.AI
    away_control: TeamControl = TeamControl.AI

    @property
    def fixture_id(self) -> str:
        return self.fixture.id

    @property
    def is_finished(self) -> bool:
        return self.simulation.is_finished

    @property
    def phase(self) -> MatchPhase:
        return self.simulation.phase

    @property
    def latest_event(self) -> MatchEvent | None:
        events = self.simulation.state.events
        return events[-1] if events else None

    def score_string(self) -> str:
        return self.simulation.state.score_string()


@dataclass
class RoundStep:
    """Outcome of stepping every match in a round once."""
    finished: bool
    events: list[tuple[str, MatchEvent]] = field(default_factory=list)  # (fixture id, event)


def _available(team: Team) -> list[Player]:
    return sorted(
        (p for p in team.players if not p.injured),
        key=calculate_overall,
        reverse=True,
    )


def create_default_tactics(
    team: Team,
    formation: FormationType = DEFAULT_FORMATION,
    posture: TacticalPosture = TacticalPosture.BALANCED,
    bench_size: int = DEFAULT_BENCH_SIZE,
) -> Tactics:
    """Best available eleven for the formation, next best on the bench.

    Short lines are filled with the best remaining outfield players.
    """
    pool = _available(team)
    chosen: list[Player] = []

    def unused(player: Player) -> bool:
        return all(player.id != c.id for c in chosen)

    goalkeepers = [p for p in pool if p.position == Position.GK]
    if goalkeepers:
        chosen.append(goalkeepers[0])

    lines = FORMATION_LINES[formation]
    for position in (Position.DEF, Position.MID, Position.ATT):
        in_role = [p for p in pool if p.position == position and unused(p)]
        chosen.extend(in_role[:lines[position]])

    outfield_needed = sum(lines.values()) + 1 - len(chosen)
    if outfield_needed > 0:
        spare = [p for p in pool if unused(p) and p.position != Position.GK]
        chosen.extend(spare[:outfield_needed])

    bench = [p for p in pool if unused(p)][:bench_size]
    return Tactics(
        formation=formation,
        posture=posture,
        lineup=[p.id for p in chosen],
        substitutes=[p.id for p in bench],
    )


def _tactics_for(team: Team, control: TeamControl, player_tactics: Tactics | None) -> Tactics:
    if control == TeamControl.HUMAN and player_tactics is not None:
        return player_tactics
    return create_default_tactics(team)


def create_multi_match_state(
    fixtures: Iterable[Fixture],
    teams: Mapping[str, Team],
    player_team_id: str | None,
    player_tactics: Tactics | None,
    rng: random.Random,
    current_round: int = 1,
    total_rounds: int = 1,
    trace: TraceConfig | None = None,
    match_date: date | None = None,
) -> list[LiveMatchState]:
    """Build a live state for every playable fixture of a round.

    Args:
        fixtures: Fixtures of the round; already played ones are skipped
        teams: Teams by id
        player_team_id: The manager's club, human-controlled
        player_tactics: The manager's tactics; defaults when None
        rng: Round generator (attendance draws and per-match seeds)
        current_round: 1-based round number
        total_rounds: Rounds in the season
        trace: Optional trace policy applied to every match
        match_date: Date recorded on the results

    Returns:
        One LiveMatchState per fixture, in fixture order
    """
    ai_energy_cap = get_opponent_effective_energy(current_round, total_rounds)
    matches = []

    for fixture in fixtures:
        if fixture.played:
            continue
        home = teams.get(fixture.home_team_id)
        away = teams.get(fixture.away_team_id)
        if home is None or away is None:
            logger.warning("Skipping fixture %s: unknown team", fixture.id)
            continue

        home_control = TeamControl.HUMAN if home.id == player_team_id else TeamControl.AI
        away_control = TeamControl.HUMAN if away.id == player_team_id else TeamControl.AI

        config = MatchConfig(
            home_team=home,
            away_team=away,
            home_tactics=_tactics_for(home, home_control, player_tactics),
            away_tactics=_tactics_for(away, away_control, player_tactics),
            home_control=home_control,
            away_control=away_control,
            fixture_id=fixture.id,
            trace=trace,
            match_date=match_date,
            home_energy_cap=ai_energy_cap if home_control == TeamControl.AI else None,
            away_energy_cap=ai_energy_cap if away_control == TeamControl.AI else None,
        )

        attendance = sample_attendance(
            rng, home, away, round_number=current_round, total_rounds=total_rounds
        )
        match_rng = random.Random(rng.getrandbits(64))
        matches.append(LiveMatchState(
            fixture=fixture,
            home_team=home,
            away_team=away,
            simulation=MatchSimulation(config, rng=match_rng),
            attendance=attendance,
            home_control=home_control,
            away_control=away_control,
        ))

    logger.debug("Round %d: %d matches ready", current_round, len(matches))
    return matches


def simulate_all_matches_step(matches: Iterable[LiveMatchState]) -> RoundStep:
    """Step every unfinished match once.

    Matches parked at half-time stay parked; the caller resumes them.
    """
    matches = list(matches)
    events: list[tuple[str, MatchEvent]] = []
    for match in matches:
        if match.is_finished:
            continue
        for event in match.simulation.step():
            events.append((match.fixture_id, event))

    return RoundStep(finished=all(m.is_finished for m in matches), events=events)


def all_at_half_time(matches: Iterable[LiveMatchState]) -> bool:
    return all(m.phase == MatchPhase.HALF_TIME or m.is_finished for m in matches)


def resume_all_from_half_time(matches: Iterable[LiveMatchState]) -> int:
    """Start the second half everywhere; returns how many matches resumed."""
    return sum(1 for m in matches if m.simulation.resume_from_half_time())


def match_state_to_result(live_match: LiveMatchState) -> MatchResult:
    return live_match.simulation.to_result(attendance=live_match.attendance)
