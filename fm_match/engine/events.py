"""Per-minute event engine.

Each simulated minute drains energy, recomputes tactical impact and strength
for both sides, decides who has the ball, whether anything happens, and which
kind of event it is. Events are appended to the match state in order.
"""

import logging
import random

from fm_match.core.models import (
    CardEvent,
    CardReason,
    ChanceMissedEvent,
    CornerEvent,
    FreeKickEvent,
    GoalEvent,
    GoalType,
    MatchEvent,
    OwnGoalEvent,
    PenaltyEvent,
    Player,
    SaveEvent,
    Side,
    TacticalPosture,
    TeamControl,
    other_side,
)
from fm_match.engine.constants import (
    BASE_POSSESSION,
    CORNER_GOAL_RATE,
    EVENT_PROBABILITY_PER_MINUTE,
    EVENT_THRESHOLD_ATTACKING_CHANCE,
    EVENT_THRESHOLD_CORNER,
    EVENT_THRESHOLD_FREE_KICK,
    EVENT_THRESHOLD_RED_CARD,
    EVENT_THRESHOLD_SAVE,
    EVENT_THRESHOLD_YELLOW_CARD,
    FREE_KICK_GOAL_RATE,
    HOME_POSSESSION_BONUS,
    MAX_EVENT_PROBABILITY,
    MIN_EVENT_PROBABILITY,
    PENALTY_AWARD_RATE,
    POSSESSION_CHANCE_MAX,
    POSSESSION_CHANCE_MIN,
    POSSESSION_STRENGTH_DIVISOR,
)
from fm_match.engine.energy import calculate_live_energy_drain_per_minute
from fm_match.engine.goals import (
    GoalOutcome,
    calculate_chance_success,
    calculate_penalty_conversion,
    find_goalkeeper,
    pick_free_kick_scorer,
    pick_header_scorer,
    pick_penalty_taker,
    pick_set_piece_taker,
    pick_shooter,
    resolve_goal,
)
from fm_match.engine.match_state import MatchConfig, MatchState, SideState
from fm_match.engine.selection import weighted_choice
from fm_match.engine.strength import calculate_team_strength
from fm_match.engine.tactics import TacticalImpact, calculate_tactical_impact, clamp
from fm_match.engine.trace import (
    DISABLED_TRACER,
    MatchTracer,
    TraceRecord,
    TraceSeverity,
    TraceType,
)

logger = logging.getLogger(__name__)

YELLOW_CARD_REASONS = (
    CardReason.RECKLESS_CHALLENGE,
    CardReason.TACTICAL_FOUL,
    CardReason.DISSENT,
    CardReason.TIME_WASTING,
)
RED_CARD_REASONS = (
    CardReason.PROFESSIONAL_FOUL,
    CardReason.VIOLENT_CONDUCT,
    CardReason.RECKLESS_CHALLENGE,
)

# Posture an AI side falls back to after losing a player
POSTURE_AFTER_RED_CARD = {
    TacticalPosture.ATTACKING: TacticalPosture.BALANCED,
    TacticalPosture.BALANCED: TacticalPosture.DEFENSIVE,
    TacticalPosture.DEFENSIVE: TacticalPosture.DEFENSIVE,
}


def calculate_possession_chance(
    home_strength: float,
    away_strength: float,
    home_impact: TacticalImpact,
    away_impact: TacticalImpact,
    neutral_venue: bool = False,
) -> float:
    """Probability that the home side has the ball this minute."""
    chance = (
        BASE_POSSESSION
        + (home_strength - away_strength) / POSSESSION_STRENGTH_DIVISOR
        + home_impact.possession
        - away_impact.possession
    )
    if not neutral_venue:
        chance += HOME_POSSESSION_BONUS
    return clamp(chance, POSSESSION_CHANCE_MIN, POSSESSION_CHANCE_MAX)


def calculate_event_chance(attacking: TacticalImpact, defending: TacticalImpact) -> float:
    """Probability that anything notable happens this minute."""
    chance = EVENT_PROBABILITY_PER_MINUTE + attacking.creation - defending.prevention
    return clamp(chance, MIN_EVENT_PROBABILITY, MAX_EVENT_PROBABILITY)


class EventEngine:
    """Simulates single minutes against a shared match state.

    All randomness is drawn from ``rng``; the tracer only observes.
    """

    def __init__(self, rng: random.Random, tracer: MatchTracer | None = None):
        self.rng = rng
        self.tracer = tracer or DISABLED_TRACER

    # ------------------------------------------------------------------
    # Minute flow
    # ------------------------------------------------------------------

    def simulate_minute(self, state: MatchState, config: MatchConfig) -> list[MatchEvent]:
        """Simulate ``state.minute`` and return the events it produced."""
        start = len(state.events)
        minute = state.minute

        self.drain_energy(state, config)

        state.home.impact = calculate_tactical_impact(state.home.tactics, state.away.tactics)
        state.away.impact = calculate_tactical_impact(state.away.tactics, state.home.tactics)

        strengths = {
            side: self._side_strength(state, config, side) for side in ("home", "away")
        }

        self.tracer.emit(TraceType.MINUTE_CONTEXT, lambda: TraceRecord(
            type=TraceType.MINUTE_CONTEXT,
            team=None,
            minute=minute,
            inputs={
                "home_score": state.home_score,
                "away_score": state.away_score,
                "home_lineup_size": len(state.home.lineup),
                "away_lineup_size": len(state.away.lineup),
            },
            computed={
                "home_strength": strengths["home"],
                "away_strength": strengths["away"],
                "home_impact": state.home.impact.as_dict(),
                "away_impact": state.away.impact.as_dict(),
            },
        ))

        home_chance = calculate_possession_chance(
            strengths["home"],
            strengths["away"],
            state.home.impact,
            state.away.impact,
            neutral_venue=config.neutral_venue,
        )
        attacking: Side = "home" if self.rng.random() < home_chance else "away"
        defending = other_side(attacking)
        state.possession = attacking

        attacking_state = state.side(attacking)
        defending_state = state.side(defending)
        event_chance = calculate_event_chance(attacking_state.impact, defending_state.impact)
        event_roll = self.rng.random()
        happened = event_roll < event_chance

        self.tracer.emit(TraceType.EVENT_PROBABILITY, lambda: TraceRecord(
            type=TraceType.EVENT_PROBABILITY,
            team=config.team(attacking).id,
            minute=minute,
            inputs={
                "possession_home": home_chance,
                "creation": attacking_state.impact.creation,
                "prevention": defending_state.impact.prevention,
            },
            computed={"event_chance": event_chance, "roll": event_roll},
            outcome={"event": happened},
        ))

        if happened:
            self._dispatch(state, config, attacking, strengths)

        return state.events[start:]

    def drain_energy(self, state: MatchState, config: MatchConfig) -> None:
        """Tire every player on the pitch; the bench stays untouched."""
        for side in ("home", "away"):
            side_state = state.side(side)
            drained = {}
            for player in side_state.lineup:
                drain = calculate_live_energy_drain_per_minute(player, side_state.tactics.posture)
                before = side_state.energy_of(player)
                side_state.live_energy[player.id] = max(0.0, before - drain)
                drained[player.id] = drain

            self.tracer.emit(TraceType.ENERGY_TICK, lambda: TraceRecord(
                type=TraceType.ENERGY_TICK,
                team=config.team(side).id,
                minute=state.minute,
                inputs={"posture": side_state.tactics.posture.value},
                computed={
                    "drain": dict(drained),
                    "energy": {p.id: side_state.live_energy[p.id] for p in side_state.lineup},
                },
            ))

    def _side_strength(self, state: MatchState, config: MatchConfig, side: Side) -> float:
        side_state = state.side(side)
        return calculate_team_strength(
            side_state.lineup,
            momentum=config.team(side).momentum,
            minute=state.minute,
            live_energy=side_state.live_energy,
            red_cards=side_state.red_cards,
        )

    def _dispatch(
        self,
        state: MatchState,
        config: MatchConfig,
        attacking: Side,
        strengths: dict[str, float],
    ) -> None:
        roll = self.rng.random()
        defending = other_side(attacking)

        if roll < EVENT_THRESHOLD_ATTACKING_CHANCE:
            self._attacking_chance(state, config, attacking, strengths)
        elif roll < EVENT_THRESHOLD_YELLOW_CARD:
            self._yellow_card(state, config, defending)
        elif roll < EVENT_THRESHOLD_RED_CARD:
            self._red_card(state, config, defending)
        elif roll < EVENT_THRESHOLD_CORNER:
            self._corner(state, config, attacking)
        elif roll < EVENT_THRESHOLD_FREE_KICK:
            self._free_kick(state, config, attacking)
        elif roll < EVENT_THRESHOLD_SAVE:
            self._save(state, defending)

    # ------------------------------------------------------------------
    # Event kinds
    # ------------------------------------------------------------------

    def _attacking_chance(
        self,
        state: MatchState,
        config: MatchConfig,
        attacking: Side,
        strengths: dict[str, float],
    ) -> None:
        defending = other_side(attacking)
        attacking_state = state.side(attacking)
        defending_state = state.side(defending)

        shooter = pick_shooter(self.rng, attacking_state.lineup)
        if shooter is None:
            return

        goalkeeper = find_goalkeeper(defending_state.lineup)
        evaluation = calculate_chance_success(
            strengths[attacking],
            strengths[defending],
            attacking_state.impact,
            defending_state.impact,
            is_home=attacking == "home",
            neutral_venue=config.neutral_venue,
            shooter=shooter,
            goalkeeper=goalkeeper,
        )
        roll = self.rng.random()
        scored = roll < evaluation.probability

        self.tracer.emit(TraceType.CHANCE_EVALUATION, lambda: TraceRecord(
            type=TraceType.CHANCE_EVALUATION,
            team=config.team(attacking).id,
            minute=state.minute,
            inputs={
                "shooter_id": shooter.id,
                "attack_strength": strengths[attacking],
                "defense_strength": strengths[defending],
            },
            computed={**evaluation.as_dict(), "roll": roll},
            outcome={"scored": scored},
            severity=TraceSeverity.INFO if scored else TraceSeverity.DEBUG,
        ))

        if not scored:
            state.events.append(ChanceMissedEvent(
                minute=state.minute,
                team=attacking,
                shooter_id=shooter.id,
                shooter_name=shooter.display_name,
                description=f"{shooter.display_name} misses a chance",
            ))
            return

        resolution = resolve_goal(
            self.rng, shooter, attacking_state.lineup, defending_state.lineup
        )
        state.add_goal(attacking)

        if resolution.outcome == GoalOutcome.OWN_GOAL:
            culprit = resolution.culprit
            state.events.append(OwnGoalEvent(
                minute=state.minute,
                team=attacking,
                culprit_id=culprit.id,
                culprit_name=culprit.display_name,
                description=f"OWN GOAL! {culprit.display_name} turns it into the wrong net",
            ))
            return

        scorer = resolution.scorer
        assister = resolution.assister
        description = f"GOAL! {scorer.display_name} scores!"
        if assister is not None:
            description = f"GOAL! {scorer.display_name} scores, assisted by {assister.display_name}"

        state.events.append(GoalEvent(
            minute=state.minute,
            team=attacking,
            scorer_id=scorer.id,
            scorer_name=scorer.display_name,
            assist_id=assister.id if assister else None,
            assist_name=assister.display_name if assister else None,
            goal_type=GoalType.ASSISTED if assister else GoalType.UNASSISTED,
            description=description,
        ))

    def _pick_fouler(self, side_state: SideState) -> Player | None:
        return weighted_choice(
            self.rng, side_state.lineup, lambda p: p.attributes.aggression
        )

    def _yellow_card(self, state: MatchState, config: MatchConfig, side: Side) -> None:
        side_state = state.side(side)
        player = self._pick_fouler(side_state)
        if player is None:
            return

        reason = self.rng.choice(YELLOW_CARD_REASONS)
        side_state.bookings[player.id] = side_state.bookings.get(player.id, 0) + 1
        player.yellow_cards += 1
        state.events.append(CardEvent(
            minute=state.minute,
            team=side,
            offender_id=player.id,
            offender_name=player.display_name,
            red=False,
            reason=reason,
            description=f"Yellow card for {player.display_name}",
        ))

        if side_state.bookings[player.id] >= 2:
            self._send_off(state, config, side, player, CardReason.SECOND_YELLOW)

    def _red_card(self, state: MatchState, config: MatchConfig, side: Side) -> None:
        player = self._pick_fouler(state.side(side))
        if player is None:
            return
        self._send_off(state, config, side, player, self.rng.choice(RED_CARD_REASONS))

    def _send_off(
        self,
        state: MatchState,
        config: MatchConfig,
        side: Side,
        player: Player,
        reason: CardReason,
    ) -> None:
        side_state = state.side(side)
        player.red_cards += 1
        state.events.append(CardEvent(
            minute=state.minute,
            team=side,
            offender_id=player.id,
            offender_name=player.display_name,
            red=True,
            reason=reason,
            description=f"RED CARD! {player.display_name} is sent off!",
        ))

        side_state.lineup = [p for p in side_state.lineup if p.id != player.id]
        side_state.tactics.lineup = [pid for pid in side_state.tactics.lineup if pid != player.id]
        side_state.sent_off[player.id] = True
        side_state.red_cards += 1
        logger.debug(
            "%s: %s sent off in minute %d (%s)",
            config.team(side).name, player.display_name, state.minute, reason.value,
        )

        if config.control(side) == TeamControl.AI:
            self._adjust_posture_after_red(state, config, side)

    def _adjust_posture_after_red(self, state: MatchState, config: MatchConfig, side: Side) -> None:
        side_state = state.side(side)
        before = side_state.tactics.posture
        after = POSTURE_AFTER_RED_CARD[before]
        if after == before:
            return

        side_state.tactics.posture = after
        logger.debug("%s drops to a %s posture", config.team(side).name, after.value)
        self.tracer.emit(TraceType.POSTURE_ADJUSTMENT, lambda: TraceRecord(
            type=TraceType.POSTURE_ADJUSTMENT,
            team=config.team(side).id,
            minute=state.minute,
            severity=TraceSeverity.NOTICE,
            inputs={"red_cards": side_state.red_cards},
            outcome={"from": before.value, "to": after.value},
            tags=("red_card",),
        ))

    def _corner(self, state: MatchState, config: MatchConfig, side: Side) -> None:
        team = config.team(side)
        state.events.append(CornerEvent(
            minute=state.minute,
            team=side,
            description=f"Corner to {team.name}",
        ))
        if self.rng.random() >= CORNER_GOAL_RATE:
            return

        lineup = state.side(side).lineup
        scorer = pick_header_scorer(self.rng, lineup)
        if scorer is None:
            return
        taker = pick_set_piece_taker(lineup, exclude=scorer)

        state.add_goal(side)
        state.events.append(GoalEvent(
            minute=state.minute,
            team=side,
            scorer_id=scorer.id,
            scorer_name=scorer.display_name,
            assist_id=taker.id if taker else None,
            assist_name=taker.display_name if taker else None,
            goal_type=GoalType.HEADER,
            description=f"GOAL! {scorer.display_name} heads in from the corner!",
        ))

    def _free_kick(self, state: MatchState, config: MatchConfig, side: Side) -> None:
        team = config.team(side)
        state.events.append(FreeKickEvent(
            minute=state.minute,
            team=side,
            description=f"Free kick to {team.name}",
        ))

        if self.rng.random() < PENALTY_AWARD_RATE:
            self._penalty(state, side)
            return

        if self.rng.random() >= FREE_KICK_GOAL_RATE:
            return
        scorer = pick_free_kick_scorer(self.rng, state.side(side).lineup)
        if scorer is None:
            return

        state.add_goal(side)
        state.events.append(GoalEvent(
            minute=state.minute,
            team=side,
            scorer_id=scorer.id,
            scorer_name=scorer.display_name,
            goal_type=GoalType.FREE_KICK,
            description=f"GOAL! {scorer.display_name} curls the free kick in!",
        ))

    def _penalty(self, state: MatchState, side: Side) -> None:
        taker = pick_penalty_taker(state.side(side).lineup)
        if taker is None:
            return

        goalkeeper = find_goalkeeper(state.side(other_side(side)).lineup)
        scored = self.rng.random() < calculate_penalty_conversion(taker, goalkeeper)
        if scored:
            state.add_goal(side)
            description = f"PENALTY! {taker.display_name} converts from the spot"
        else:
            description = f"Penalty missed by {taker.display_name}"

        state.events.append(PenaltyEvent(
            minute=state.minute,
            team=side,
            taker_id=taker.id,
            taker_name=taker.display_name,
            scored=scored,
            description=description,
        ))

    def _save(self, state: MatchState, side: Side) -> None:
        goalkeeper = find_goalkeeper(state.side(side).lineup)
        if goalkeeper is None:
            return
        state.events.append(SaveEvent(
            minute=state.minute,
            team=side,
            goalkeeper_id=goalkeeper.id,
            goalkeeper_name=goalkeeper.display_name,
            description=f"Great save by {goalkeeper.display_name}",
        ))
