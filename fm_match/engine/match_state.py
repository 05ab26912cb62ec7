"""Match configuration and the mutable per-match state aggregate."""

import copy
import random
from dataclasses import dataclass, field
from datetime import date

from fm_match.core.models import (
    MatchEvent,
    MatchPhase,
    Player,
    Side,
    Tactics,
    Team,
    TeamControl,
)
from fm_match.engine.constants import (
    MATCH_LENGTH,
    MAX_STOPPAGE_TIME,
    MIN_STOPPAGE_TIME,
)
from fm_match.engine.tactics import NEUTRAL_IMPACT, TacticalImpact
from fm_match.engine.trace import TraceConfig


@dataclass(frozen=True)
class MatchConfig:
    """Immutable per-match inputs."""
    home_team: Team
    away_team: Team
    home_tactics: Tactics
    away_tactics: Tactics
    home_control: TeamControl = TeamControl.AI
    away_control: TeamControl = TeamControl.AI
    neutral_venue: bool = False
    fixture_id: str | None = None
    trace: TraceConfig | None = None
    match_date: date | None = None
    # Upper bound on starting live energy (season fatigue of non-persisted squads)
    home_energy_cap: float | None = None
    away_energy_cap: float | None = None

    def team(self, side: Side) -> Team:
        return self.home_team if side == "home" else self.away_team

    def tactics(self, side: Side) -> Tactics:
        return self.home_tactics if side == "home" else self.away_tactics

    def control(self, side: Side) -> TeamControl:
        return self.home_control if side == "home" else self.away_control

    def energy_cap(self, side: Side) -> float | None:
        return self.home_energy_cap if side == "home" else self.away_energy_cap


@dataclass
class SideState:
    """Everything the engine tracks for one side of a match."""
    tactics: Tactics
    lineup: list[Player] = field(default_factory=list)
    bench: list[Player] = field(default_factory=list)
    live_energy: dict[str, float] = field(default_factory=dict)
    subs_used: int = 0
    bookings: dict[str, int] = field(default_factory=dict)
    sent_off: dict[str, bool] = field(default_factory=dict)
    red_cards: int = 0
    impact: TacticalImpact = NEUTRAL_IMPACT

    def lineup_player(self, player_id: str) -> Player | None:
        for player in self.lineup:
            if player.id == player_id:
                return player
        return None

    def bench_player(self, player_id: str) -> Player | None:
        for player in self.bench:
            if player.id == player_id:
                return player
        return None

    def energy_of(self, player: Player) -> float:
        return self.live_energy.get(player.id, player.energy)

    def is_sent_off(self, player_id: str) -> bool:
        return self.sent_off.get(player_id, False)


@dataclass
class MatchState:
    """The single mutable aggregate for one match."""
    home: SideState
    away: SideState
    stoppage_time: int
    minute: int = 0
    home_score: int = 0
    away_score: int = 0
    events: list[MatchEvent] = field(default_factory=list)
    phase: MatchPhase = MatchPhase.FIRST_HALF
    possession: Side = "home"
    kicked_off: bool = False

    def side(self, side: Side) -> SideState:
        return self.home if side == "home" else self.away

    @property
    def total_minutes(self) -> int:
        """Regulation time plus stoppage."""
        return MATCH_LENGTH + self.stoppage_time

    @property
    def is_finished(self) -> bool:
        return self.phase == MatchPhase.FULL_TIME

    def score(self, side: Side) -> int:
        return self.home_score if side == "home" else self.away_score

    def goal_difference(self, side: Side) -> int:
        """Goals for minus goals against, from ``side``'s point of view."""
        diff = self.home_score - self.away_score
        return diff if side == "home" else -diff

    def add_goal(self, side: Side) -> None:
        if side == "home":
            self.home_score += 1
        else:
            self.away_score += 1

    def score_string(self) -> str:
        """Get current score as string."""
        return f"{self.home_score}-{self.away_score}"


def _snapshot(team: Team, player_ids: list[str]) -> list[Player]:
    """Deep copies of the listed players, in the given order."""
    by_id = {p.id: p for p in team.players}
    return [copy.deepcopy(by_id[pid]) for pid in player_ids if pid in by_id]


def _create_side_state(
    team: Team,
    tactics: Tactics,
    energy_cap: float | None,
) -> SideState:
    own_tactics = tactics.copy()
    lineup = _snapshot(team, own_tactics.lineup)
    bench = _snapshot(team, own_tactics.substitutes)

    live_energy = {}
    for player in lineup + bench:
        energy = player.energy if energy_cap is None else min(player.energy, energy_cap)
        live_energy[player.id] = max(0.0, min(100.0, float(energy)))

    return SideState(
        tactics=own_tactics,
        lineup=lineup,
        bench=bench,
        live_energy=live_energy,
    )


def create_match_state(config: MatchConfig, rng: random.Random) -> MatchState:
    """Initial state at minute 0: first half, zeroed counters, random stoppage."""
    return MatchState(
        home=_create_side_state(config.home_team, config.home_tactics, config.home_energy_cap),
        away=_create_side_state(config.away_team, config.away_tactics, config.away_energy_cap),
        stoppage_time=rng.randint(MIN_STOPPAGE_TIME, MAX_STOPPAGE_TIME),
    )
