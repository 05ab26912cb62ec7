"""Match simulation driver.

``MatchSimulation`` owns one match's state and advances it one step at a time
through ``first_half -> half_time -> second_half -> full_time``. Callers that
just want a result use ``simulate_match``; live consumers pull ``StepDelta``s
from a ``LiveMatchFeed``.
"""

import logging
import random
from dataclasses import dataclass, field

from fm_match.core.config import get_settings
from fm_match.core.models import (
    FullTimeEvent,
    HalfTimeEvent,
    KickoffEvent,
    MatchEvent,
    MatchEventType,
    MatchPhase,
    MatchResult,
    Side,
    SubstitutionEvent,
    other_side,
)
from fm_match.engine.constants import HALF_TIME_MINUTE, MATCH_LENGTH
from fm_match.engine.energy import calculate_post_match_energy_drain
from fm_match.engine.events import EventEngine
from fm_match.engine.match_state import MatchConfig, MatchState, SideState, create_match_state
from fm_match.engine.substitutions import (
    AISubstitutionPolicy,
    SubstitutionResult,
    make_substitution,
)
from fm_match.engine.tactics import HalfTimeHints, get_half_time_hints
from fm_match.engine.trace import DISABLED_TRACER, MatchTracer

logger = logging.getLogger(__name__)

__all__ = [
    "LiveMatchFeed",
    "MatchConfig",
    "MatchSimulation",
    "MatchState",
    "SideState",
    "StepDelta",
    "create_match_state",
    "simulate_match",
]


class MatchSimulation:
    """Step-wise simulation of a single match.

    All randomness comes from ``rng``. Two simulations built from equal
    configs and equally seeded generators produce identical event logs.
    """

    def __init__(
        self,
        config: MatchConfig,
        rng: random.Random | None = None,
        tracer: MatchTracer | None = None,
    ):
        self.config = config
        self.rng = rng if rng is not None else random.Random(get_settings().random_seed)
        if tracer is None:
            tracer = MatchTracer(config.trace) if config.trace is not None else DISABLED_TRACER
        self.tracer = tracer
        self.engine = EventEngine(self.rng, self.tracer)
        self.ai_policy = AISubstitutionPolicy(self.tracer)
        self.state = create_match_state(config, self.rng)

    @property
    def phase(self) -> MatchPhase:
        return self.state.phase

    @property
    def is_finished(self) -> bool:
        return self.state.is_finished

    def step(self) -> list[MatchEvent]:
        """Advance the match by one step and return the events produced.

        The first call kicks off without advancing the clock. The match
        parks at half-time after minute 45 and stays there until
        ``resume_from_half_time``. Once regulation plus stoppage has been
        played the next call blows the final whistle.
        """
        state = self.state
        if state.is_finished or state.phase == MatchPhase.HALF_TIME:
            return []

        start = len(state.events)

        if not state.kicked_off:
            state.kicked_off = True
            state.events.append(KickoffEvent(
                minute=0,
                team="home",
                description=f"Kick off: {self.config.home_team.name} vs {self.config.away_team.name}",
            ))
            return state.events[start:]

        if state.minute >= state.total_minutes:
            self._full_time()
            return state.events[start:]

        state.minute += 1
        self.engine.simulate_minute(state, self.config)
        self.ai_policy.apply(state, self.config)

        if state.minute == HALF_TIME_MINUTE and state.phase == MatchPhase.FIRST_HALF:
            state.phase = MatchPhase.HALF_TIME
            state.events.append(HalfTimeEvent(
                minute=state.minute,
                team="home",
                home_score=state.home_score,
                away_score=state.away_score,
                description=f"Half Time: {state.score_string()}",
            ))
            logger.debug("Half time %s", state.score_string())

        return state.events[start:]

    def _full_time(self) -> None:
        state = self.state
        state.phase = MatchPhase.FULL_TIME
        state.events.append(FullTimeEvent(
            minute=state.minute,
            team="home",
            home_score=state.home_score,
            away_score=state.away_score,
            description=f"Full Time: {state.score_string()}",
        ))
        logger.debug(
            "Full time: %s %s %s",
            self.config.home_team.name, state.score_string(), self.config.away_team.name,
        )

    def resume_from_half_time(self) -> bool:
        """Start the second half; False unless the match is parked at half-time."""
        if self.state.phase != MatchPhase.HALF_TIME:
            return False
        self.state.phase = MatchPhase.SECOND_HALF
        logger.debug("Second half under way")
        return True

    def substitute(
        self,
        side: Side,
        player_out_id: str,
        player_in_id: str,
        *,
        require_same_position: bool = False,
    ) -> SubstitutionResult:
        """Manual substitution request (allowed at half-time)."""
        return make_substitution(
            self.state,
            side,
            player_out_id,
            player_in_id,
            require_same_position=require_same_position,
        )

    def half_time_hints(self, side: Side) -> HalfTimeHints:
        """Qualitative tactical guidance for ``side`` at the interval."""
        opponent_side = other_side(side)
        own = self.state.side(side).tactics
        opponent = self.state.side(opponent_side).tactics
        return get_half_time_hints(
            self.state.score(side),
            self.state.score(opponent_side),
            own.formation,
            opponent.formation,
        )

    def run(self) -> MatchState:
        """Play to the final whistle, resuming automatically at half-time."""
        while not self.state.is_finished:
            if self.state.phase == MatchPhase.HALF_TIME:
                self.resume_from_half_time()
            self.step()
        return self.state

    def minutes_played(self, side: Side) -> dict[str, int]:
        """Minutes on the pitch per player id, derived from the event log."""
        state = self.state
        end = state.minute
        on_at = {pid: 0 for pid in self.config.tactics(side).lineup}
        played: dict[str, int] = {}

        for event in state.events:
            if event.team != side:
                continue
            if isinstance(event, SubstitutionEvent):
                started = on_at.pop(event.player_out_id, None)
                if started is not None:
                    played[event.player_out_id] = event.minute - started
                on_at[event.player_in_id] = event.minute
            elif event.event_type == MatchEventType.RED_CARD:
                started = on_at.pop(event.player_id, None)
                if started is not None:
                    played[event.player_id] = event.minute - started

        for player_id, started in on_at.items():
            played[player_id] = end - started
        return played

    def post_match_energy(self, side: Side) -> dict[str, float]:
        """Stored energy each participant should carry out of this match."""
        team = self.config.team(side)
        posture = self.state.side(side).tactics.posture
        updated = {}
        for player_id, minutes in self.minutes_played(side).items():
            player = team.get_player(player_id)
            if player is None:
                continue
            drain = calculate_post_match_energy_drain(
                min(minutes, MATCH_LENGTH), posture, player.age, player.position
            )
            updated[player_id] = max(0.0, min(100.0, player.energy - drain))
        return updated

    def to_result(self, attendance: int = 0) -> MatchResult:
        """Immutable summary of the match as it stands."""
        config = self.config
        state = self.state
        return MatchResult(
            id=config.fixture_id or f"{config.home_team.id}-{config.away_team.id}",
            home_team_id=config.home_team.id,
            away_team_id=config.away_team.id,
            home_score=state.home_score,
            away_score=state.away_score,
            events=tuple(state.events),
            attendance=attendance,
            date=config.match_date.isoformat() if config.match_date else "",
        )


def simulate_match(
    config: MatchConfig,
    rng: random.Random | None = None,
    tracer: MatchTracer | None = None,
    attendance: int = 0,
) -> MatchResult:
    """Simulate a complete match and return its result."""
    simulation = MatchSimulation(config, rng=rng, tracer=tracer)
    simulation.run()
    return simulation.to_result(attendance=attendance)


@dataclass(frozen=True)
class StepDelta:
    """What changed in one step of a live match."""
    minute: int
    phase: MatchPhase
    home_score: int
    away_score: int
    events: list[MatchEvent] = field(default_factory=list)


class LiveMatchFeed:
    """Pull-based cursor over a running simulation.

    ``advance`` returns None once the match is over, or while it is parked at
    half-time when ``auto_resume`` is off (the caller resumes the simulation).
    """

    def __init__(self, simulation: MatchSimulation, auto_resume: bool = True):
        self.simulation = simulation
        self.auto_resume = auto_resume

    def advance(self) -> StepDelta | None:
        simulation = self.simulation
        if simulation.is_finished:
            return None
        if simulation.phase == MatchPhase.HALF_TIME:
            if not self.auto_resume:
                return None
            simulation.resume_from_half_time()

        events = simulation.step()
        state = simulation.state
        return StepDelta(
            minute=state.minute,
            phase=state.phase,
            home_score=state.home_score,
            away_score=state.away_score,
            events=events,
        )

    def __iter__(self):
        while True:
            delta = self.advance()
            if delta is None:
                return
            yield delta
