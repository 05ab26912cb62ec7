"""Substitutions: the manual request path and the AI policy.

A rejected request never raises; it comes back as a ``SubstitutionResult``
carrying a ``SubstitutionFailure`` code so a UI can explain it.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from fm_match.core.models import (
    Player,
    Position,
    Side,
    SubstitutionEvent,
    TacticalPosture,
    TeamControl,
)
from fm_match.engine.constants import (
    AI_FATIGUE_ENERGY_FLOOR,
    AI_FATIGUE_MIN_ENERGY_GAIN,
    AI_MAX_SUBS_PER_WINDOW,
    AI_PROTECT_LEAD_MINUTE,
    AI_SUBS_EARLIEST_MINUTE,
    AI_TACTICAL_MINUTE,
    MAX_SUBSTITUTIONS,
)
from fm_match.engine.match_state import MatchConfig, MatchState, SideState
from fm_match.engine.strength import calculate_player_strength
from fm_match.engine.trace import (
    DISABLED_TRACER,
    MatchTracer,
    TraceRecord,
    TraceSeverity,
    TraceType,
)

logger = logging.getLogger(__name__)


class SubstitutionFailure(Enum):
    """Why a substitution request was refused."""
    MATCH_FINISHED = "match_finished"
    LIMIT_REACHED = "limit_reached"
    PLAYER_SENT_OFF = "player_sent_off"
    NOT_IN_LINEUP = "not_in_lineup"
    NOT_ON_BENCH = "not_on_bench"
    POSITION_MISMATCH = "position_mismatch"


class AISubReason(Enum):
    FATIGUE = "fatigue"
    TACTICAL = "tactical"
    PROTECT_LEAD = "protect_lead"


@dataclass(frozen=True)
class SubstitutionResult:
    success: bool
    failure: SubstitutionFailure | None = None
    event: SubstitutionEvent | None = None

    @property
    def message(self) -> str:
        if self.success:
            return "ok"
        return self.failure.value if self.failure else "unknown"


def ai_reason_tag(reason: AISubReason) -> str:
    """Marker embedded in event descriptions for AI-made changes."""
    return f"[ai_reason:{reason.value}]"


def _fail(failure: SubstitutionFailure, side: Side, minute: int) -> SubstitutionResult:
    logger.debug("Substitution refused for %s side in minute %d: %s", side, minute, failure.value)
    return SubstitutionResult(success=False, failure=failure)


def make_substitution(
    state: MatchState,
    side: Side,
    player_out_id: str,
    player_in_id: str,
    *,
    require_same_position: bool = False,
    reason: AISubReason | None = None,
) -> SubstitutionResult:
    """Swap a bench player for someone on the pitch.

    Args:
        state: Match state to mutate
        side: "home" or "away"
        player_out_id: Player leaving the pitch
        player_in_id: Bench player coming on
        require_same_position: Refuse cross-position changes when True
        reason: AI reason, tagged into the event description

    Returns:
        Result with the appended event on success, a failure code otherwise
    """
    side_state = state.side(side)

    if state.is_finished:
        return _fail(SubstitutionFailure.MATCH_FINISHED, side, state.minute)
    if side_state.subs_used >= MAX_SUBSTITUTIONS:
        return _fail(SubstitutionFailure.LIMIT_REACHED, side, state.minute)
    if side_state.is_sent_off(player_out_id):
        return _fail(SubstitutionFailure.PLAYER_SENT_OFF, side, state.minute)

    player_out = side_state.lineup_player(player_out_id)
    if player_out is None:
        return _fail(SubstitutionFailure.NOT_IN_LINEUP, side, state.minute)
    player_in = side_state.bench_player(player_in_id)
    if player_in is None:
        return _fail(SubstitutionFailure.NOT_ON_BENCH, side, state.minute)
    if require_same_position and player_in.position != player_out.position:
        return _fail(SubstitutionFailure.POSITION_MISMATCH, side, state.minute)

    index = side_state.lineup.index(player_out)
    side_state.lineup[index] = player_in
    side_state.bench = [p for p in side_state.bench if p.id != player_in_id]

    tactics = side_state.tactics
    tactics.lineup = [player_in_id if pid == player_out_id else pid for pid in tactics.lineup]
    tactics.substitutes = [pid for pid in tactics.substitutes if pid != player_in_id]
    side_state.subs_used += 1

    description = f"Substitution: {player_in.display_name} replaces {player_out.display_name}"
    if reason is not None:
        description = f"{description} {ai_reason_tag(reason)}"

    event = SubstitutionEvent(
        minute=state.minute,
        team=side,
        player_in_id=player_in.id,
        player_in_name=player_in.display_name,
        player_out_id=player_out.id,
        player_out_name=player_out.display_name,
        reason=reason.value if reason else None,
        description=description,
    )
    state.events.append(event)
    return SubstitutionResult(success=True, event=event)


@dataclass(frozen=True)
class SubCandidate:
    """A proposed change considered by the AI."""
    reason: AISubReason
    player_out: Player
    player_in: Player
    energy_out: float
    energy_in: float


class AISubstitutionPolicy:
    """Automatic changes for AI-controlled sides.

    Runs after each second-half minute. Priority is fatigue, then chasing the
    game when behind, then protecting a late lead.
    """

    def __init__(self, tracer: MatchTracer | None = None):
        self.tracer = tracer or DISABLED_TRACER

    def apply(self, state: MatchState, config: MatchConfig) -> list[SubstitutionEvent]:
        """Run the policy for both sides; returns the substitutions made."""
        events = []
        for side in ("home", "away"):
            events.extend(self.plan(state, config, side))
        return events

    def plan(self, state: MatchState, config: MatchConfig, side: Side) -> list[SubstitutionEvent]:
        """Make up to three changes for ``side`` in the current minute."""
        if config.control(side) != TeamControl.AI:
            return []
        if state.is_finished or state.minute < AI_SUBS_EARLIEST_MINUTE:
            return []

        side_state = state.side(side)
        made = []
        while len(made) < AI_MAX_SUBS_PER_WINDOW and side_state.subs_used < MAX_SUBSTITUTIONS:
            candidate = self._next_candidate(state, config, side)
            if candidate is None:
                break

            result = make_substitution(
                state,
                side,
                candidate.player_out.id,
                candidate.player_in.id,
                reason=candidate.reason,
            )
            self._trace_executed(state, config, side, candidate, result)
            if not result.success:
                break

            logger.debug(
                "%s: %s on for %s (%s)",
                config.team(side).name,
                candidate.player_in.display_name,
                candidate.player_out.display_name,
                candidate.reason.value,
            )
            made.append(result.event)
        return made

    # ------------------------------------------------------------------
    # Candidate search
    # ------------------------------------------------------------------

    def _next_candidate(self, state: MatchState, config: MatchConfig, side: Side) -> SubCandidate | None:
        side_state = state.side(side)
        if not side_state.bench:
            return None

        candidate = self._fatigue_candidate(state, config, side)
        if candidate is not None:
            return candidate

        goal_difference = state.goal_difference(side)
        if goal_difference < 0 and state.minute >= AI_TACTICAL_MINUTE:
            candidate = self._tactical_candidate(state, config, side)
            if candidate is not None:
                return candidate

        if goal_difference > 0 and state.minute >= AI_PROTECT_LEAD_MINUTE:
            return self._protect_lead_candidate(state, config, side)
        return None

    def _fatigue_candidate(self, state: MatchState, config: MatchConfig, side: Side) -> SubCandidate | None:
        side_state = state.side(side)
        tired = sorted(
            (p for p in side_state.lineup if side_state.energy_of(p) < AI_FATIGUE_ENERGY_FLOOR),
            key=side_state.energy_of,
        )
        for player_out in tired:
            energy_out = side_state.energy_of(player_out)
            for player_in in self._in_role_bench(side_state, player_out):
                candidate = self._candidate(side_state, AISubReason.FATIGUE, player_out, player_in)
                accepted = candidate.energy_in - energy_out >= AI_FATIGUE_MIN_ENERGY_GAIN
                self._trace_candidate(state, config, side, candidate, accepted)
                if accepted:
                    return candidate
        return None

    def _tactical_candidate(self, state: MatchState, config: MatchConfig, side: Side) -> SubCandidate | None:
        side_state = state.side(side)
        attackers = [p for p in side_state.lineup if p.position == Position.ATT]
        bench_attackers = sorted(
            (p for p in side_state.bench if p.position == Position.ATT),
            key=lambda p: self._live_strength(side_state, p, state.minute),
            reverse=True,
        )

        if attackers and bench_attackers:
            weakest = min(attackers, key=lambda p: self._live_strength(side_state, p, state.minute))
            best = bench_attackers[0]
            candidate = self._candidate(side_state, AISubReason.TACTICAL, weakest, best)
            accepted = (
                self._live_strength(side_state, best, state.minute)
                > self._live_strength(side_state, weakest, state.minute)
            )
            self._trace_candidate(state, config, side, candidate, accepted)
            if accepted:
                return candidate

        if side_state.tactics.posture != TacticalPosture.ATTACKING:
            return None

        # Chasing the game: refresh the most tired player with someone in role
        for player_out in sorted(side_state.lineup, key=side_state.energy_of):
            for player_in in self._in_role_bench(side_state, player_out):
                candidate = self._candidate(side_state, AISubReason.TACTICAL, player_out, player_in)
                accepted = (
                    candidate.energy_in - candidate.energy_out >= AI_FATIGUE_MIN_ENERGY_GAIN
                )
                self._trace_candidate(state, config, side, candidate, accepted)
                if accepted:
                    return candidate
        return None

    def _protect_lead_candidate(
        self,
        state: MatchState,
        config: MatchConfig,
        side: Side,
    ) -> SubCandidate | None:
        side_state = state.side(side)
        attackers = [p for p in side_state.lineup if p.position == Position.ATT]
        # Never take off the last striker
        if len(attackers) < 2:
            return None

        player_out = min(attackers, key=side_state.energy_of)
        cover = [p for p in side_state.bench if p.position in (Position.DEF, Position.MID)]
        if not cover:
            return None

        player_in = max(cover, key=lambda p: (p.position == Position.DEF, side_state.energy_of(p)))
        candidate = self._candidate(side_state, AISubReason.PROTECT_LEAD, player_out, player_in)
        self._trace_candidate(state, config, side, candidate, True)
        return candidate

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _in_role_bench(side_state: SideState, player_out: Player) -> list[Player]:
        """Bench players in the same position, freshest first."""
        return sorted(
            (p for p in side_state.bench if p.position == player_out.position),
            key=side_state.energy_of,
            reverse=True,
        )

    @staticmethod
    def _live_strength(side_state: SideState, player: Player, minute: int) -> float:
        return calculate_player_strength(player, minute, side_state.energy_of(player))

    @staticmethod
    def _candidate(
        side_state: SideState,
        reason: AISubReason,
        player_out: Player,
        player_in: Player,
    ) -> SubCandidate:
        return SubCandidate(
            reason=reason,
            player_out=player_out,
            player_in=player_in,
            energy_out=side_state.energy_of(player_out),
            energy_in=side_state.energy_of(player_in),
        )

    def _trace_candidate(
        self,
        state: MatchState,
        config: MatchConfig,
        side: Side,
        candidate: SubCandidate,
        accepted: bool,
    ) -> None:
        self.tracer.emit(TraceType.SUB_CANDIDATE, lambda: TraceRecord(
            type=TraceType.SUB_CANDIDATE,
            team=config.team(side).id,
            minute=state.minute,
            inputs={
                "outgoing_player_id": candidate.player_out.id,
                "incoming_player_id": candidate.player_in.id,
                "energy_out": candidate.energy_out,
                "energy_in": candidate.energy_in,
            },
            computed={"energy_gain": candidate.energy_in - candidate.energy_out},
            outcome={"accepted": accepted},
            tags=(candidate.reason.value,),
        ))

    def _trace_executed(
        self,
        state: MatchState,
        config: MatchConfig,
        side: Side,
        candidate: SubCandidate,
        result: SubstitutionResult,
    ) -> None:
        self.tracer.emit(TraceType.SUB_EXECUTED, lambda: TraceRecord(
            type=TraceType.SUB_EXECUTED,
            team=config.team(side).id,
            minute=state.minute,
            severity=TraceSeverity.INFO,
            inputs={
                "outgoing_player_id": candidate.player_out.id,
                "incoming_player_id": candidate.player_in.id,
                "subs_used": state.side(side).subs_used,
            },
            outcome={
                "success": result.success,
                "reason": candidate.reason.value,
                "failure": result.failure.value if result.failure else None,
            },
            tags=(candidate.reason.value,),
        ))
