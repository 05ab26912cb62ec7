"""Tests for the per-minute event engine."""

import random

import pytest

from fm_match.core.models import (
    CardEvent,
    CardReason,
    ChanceMissedEvent,
    CornerEvent,
    FreeKickEvent,
    GoalEvent,
    GoalType,
    MatchEventType,
    OwnGoalEvent,
    PenaltyEvent,
    Position,
    SaveEvent,
    TacticalPosture,
    TeamControl,
)
from fm_match.engine.events import (
    EventEngine,
    calculate_event_chance,
    calculate_possession_chance,
)
from fm_match.engine.match_state import create_match_state
from fm_match.engine.tactics import NEUTRAL_IMPACT, TacticalImpact
from fm_match.engine.trace import MatchTracer, TraceConfig, TraceType

from conftest import ScriptedRandom, make_config

# Scripted rolls: possession, event happens, event bucket
HOME_ATTACKS = [0.0, 0.0]
AWAY_ATTACKS = [0.99, 0.0]
ATTACKING_CHANCE = 0.1
YELLOW = 0.45
RED = 0.56
CORNER = 0.6
FREE_KICK = 0.68
SAVE = 0.75


def _setup(values, config=None, tracer=None):
    config = config or make_config()
    state = create_match_state(config, random.Random(1))
    state.minute = 10
    engine = EventEngine(ScriptedRandom(values), tracer)
    return engine, state, config


class TestProbabilities:
    """Tests for possession and event chance."""

    def test_possession_clamped(self):
        """Test possession clamped."""
        assert calculate_possession_chance(100, 0, NEUTRAL_IMPACT, NEUTRAL_IMPACT) == pytest.approx(0.8)
        assert calculate_possession_chance(0, 100, NEUTRAL_IMPACT, NEUTRAL_IMPACT) == pytest.approx(0.2)

    def test_home_possession_bonus(self):
        """Test home possession bonus."""
        assert calculate_possession_chance(60, 60, NEUTRAL_IMPACT, NEUTRAL_IMPACT) == pytest.approx(0.58)
        neutral = calculate_possession_chance(60, 60, NEUTRAL_IMPACT, NEUTRAL_IMPACT, neutral_venue=True)
        assert neutral == pytest.approx(0.5)

    def test_possession_impact_difference(self):
        """Test possession impact difference."""
        home = TacticalImpact(possession=0.1)
        away = TacticalImpact(possession=-0.05)
        assert calculate_possession_chance(60, 60, home, away, neutral_venue=True) == pytest.approx(0.65)

    def test_event_chance_clamped(self):
        """Test event chance clamped."""
        attacking = TacticalImpact(creation=0.2, prevention=-0.2)
        defending = TacticalImpact(creation=-0.2, prevention=0.2)
        assert calculate_event_chance(attacking, attacking) == pytest.approx(0.35)
        assert calculate_event_chance(defending, defending) == pytest.approx(0.05)
        assert calculate_event_chance(NEUTRAL_IMPACT, NEUTRAL_IMPACT) == pytest.approx(0.15)


class TestMinuteFlow:
    """Tests for energy drain and quiet minutes."""

    def test_quiet_minute(self):
        """Test quiet minute."""
        engine, state, config = _setup([0.0, 0.99])
        assert engine.simulate_minute(state, config) == []
        assert state.possession == "home"

    def test_only_lineup_drains(self):
        """Test only lineup drains."""
        engine, state, config = _setup([0.0, 0.99])
        engine.simulate_minute(state, config)
        for side in (state.home, state.away):
            assert all(side.live_energy[p.id] < 100 for p in side.lineup)
            assert all(side.live_energy[p.id] == 100 for p in side.bench)

    def test_energy_strictly_decreases_each_minute(self):
        """Test energy strictly decreases each minute."""
        engine, state, config = _setup([])
        engine.rng = random.Random(11)
        previous = dict(state.home.live_energy)
        for minute in range(1, 30):
            state.minute = minute
            engine.simulate_minute(state, config)
            for player in state.home.lineup:
                assert state.home.live_energy[player.id] < previous[player.id]
            for player in state.home.bench:
                assert state.home.live_energy[player.id] == previous[player.id]
            previous = dict(state.home.live_energy)


class TestAttackingChances:
    """Tests for shots, goals and own goals."""

    def test_assisted_goal(self):
        """Test assisted goal."""
        engine, state, config = _setup(HOME_ATTACKS + [ATTACKING_CHANCE, 0.0, 0.0, 0.5, 0.0])
        events = engine.simulate_minute(state, config)
        assert len(events) == 1
        goal = events[0]
        assert isinstance(goal, GoalEvent)
        assert goal.team == "home"
        assert goal.scorer_id == "h-s5"
        assert goal.assist_id == "h-s1"
        assert goal.goal_type == GoalType.ASSISTED
        assert state.home_score == 1

    def test_unassisted_goal(self):
        """Test unassisted goal."""
        engine, state, config = _setup(HOME_ATTACKS + [ATTACKING_CHANCE, 0.0, 0.0, 0.1])
        goal = engine.simulate_minute(state, config)[0]
        assert goal.goal_type == GoalType.UNASSISTED
        assert goal.assist_id is None

    def test_missed_chance(self):
        """Test missed chance."""
        engine, state, config = _setup(HOME_ATTACKS + [ATTACKING_CHANCE, 0.0, 0.99])
        events = engine.simulate_minute(state, config)
        assert len(events) == 1
        assert isinstance(events[0], ChanceMissedEvent)
        assert state.home_score == 0

    def test_own_goal_credits_attackers(self):
        """Test own goal credits attackers."""
        engine, state, config = _setup(HOME_ATTACKS + [ATTACKING_CHANCE, 0.0, 0.0, 0.01, 0.0])
        events = engine.simulate_minute(state, config)
        own_goal = events[0]
        assert isinstance(own_goal, OwnGoalEvent)
        assert own_goal.team == "home"
        assert own_goal.culprit_id.startswith("a-")
        assert state.home_score == 1
        assert state.away_score == 0

    def test_no_shooter_no_event(self):
        """Test no shooter no event."""
        engine, state, config = _setup(HOME_ATTACKS + [ATTACKING_CHANCE])
        state.home.lineup = [p for p in state.home.lineup if p.position in (Position.GK, Position.DEF)]
        assert engine.simulate_minute(state, config) == []


class TestDiscipline:
    """Tests for cards and send-offs."""

    def test_yellow_card_for_defending_side(self):
        """Test yellow card for defending side."""
        engine, state, config = _setup(AWAY_ATTACKS + [YELLOW, 0.0])
        events = engine.simulate_minute(state, config)
        assert len(events) == 1
        card = events[0]
        assert isinstance(card, CardEvent)
        assert card.team == "home"
        assert not card.red
        assert card.reason != CardReason.SECOND_YELLOW
        assert state.home.bookings[card.offender_id] == 1

    def test_second_yellow_becomes_red(self):
        """Test second yellow becomes red."""
        engine, state, config = _setup(AWAY_ATTACKS + [YELLOW, 0.0] + AWAY_ATTACKS + [YELLOW, 0.0])
        engine.simulate_minute(state, config)
        state.minute = 11
        events = engine.simulate_minute(state, config)

        assert [e.event_type for e in events] == [MatchEventType.YELLOW_CARD, MatchEventType.RED_CARD]
        assert events[1].reason == CardReason.SECOND_YELLOW
        offender = events[1].offender_id
        assert state.home.is_sent_off(offender)
        assert state.home.lineup_player(offender) is None
        assert offender not in state.home.tactics.lineup
        assert len(state.home.lineup) == 10
        assert state.home.red_cards == 1

    def test_red_card_downgrades_ai_posture(self):
        """Test red card downgrades ai posture."""
        records = []
        tracer = MatchTracer(TraceConfig(enabled=True, sink=records.append))
        config = make_config(home_posture=TacticalPosture.ATTACKING)
        engine, state, config = _setup(AWAY_ATTACKS + [RED, 0.0], config=config, tracer=tracer)
        events = engine.simulate_minute(state, config)

        assert events[0].event_type == MatchEventType.RED_CARD
        assert state.home.tactics.posture == TacticalPosture.BALANCED
        assert config.home_tactics.posture == TacticalPosture.ATTACKING
        adjustments = [r for r in records if r.type == TraceType.POSTURE_ADJUSTMENT]
        assert len(adjustments) == 1
        assert adjustments[0].outcome == {"from": "attacking", "to": "balanced"}

    def test_human_posture_untouched(self):
        """Test human posture untouched."""
        config = make_config(home_control=TeamControl.HUMAN)
        engine, state, config = _setup(AWAY_ATTACKS + [RED, 0.0], config=config)
        engine.simulate_minute(state, config)
        assert state.home.red_cards == 1
        assert state.home.tactics.posture == TacticalPosture.BALANCED


class TestSetPieces:
    """Tests for corners, free kicks, penalties and saves."""

    def test_corner_header_goal(self):
        """Test corner header goal."""
        engine, state, config = _setup(HOME_ATTACKS + [CORNER, 0.0, 0.0])
        events = engine.simulate_minute(state, config)
        assert isinstance(events[0], CornerEvent)
        assert isinstance(events[1], GoalEvent)
        assert events[1].goal_type == GoalType.HEADER
        assert state.home_score == 1

    def test_corner_without_goal(self):
        """Test corner without goal."""
        engine, state, config = _setup(HOME_ATTACKS + [CORNER, 0.5])
        events = engine.simulate_minute(state, config)
        assert [e.event_type for e in events] == [MatchEventType.CORNER]

    def test_penalty_scored(self):
        """Test penalty scored."""
        engine, state, config = _setup(HOME_ATTACKS + [FREE_KICK, 0.05, 0.0])
        events = engine.simulate_minute(state, config)
        assert isinstance(events[0], FreeKickEvent)
        assert isinstance(events[1], PenaltyEvent)
        assert events[1].scored
        assert events[1].event_type == MatchEventType.PENALTY_SCORED
        assert state.home_score == 1

    def test_penalty_missed(self):
        """Test penalty missed."""
        engine, state, config = _setup(HOME_ATTACKS + [FREE_KICK, 0.05, 0.99])
        events = engine.simulate_minute(state, config)
        assert events[1].event_type == MatchEventType.PENALTY_MISSED
        assert state.home_score == 0

    def test_direct_free_kick_goal(self):
        """Test direct free kick goal."""
        engine, state, config = _setup(HOME_ATTACKS + [FREE_KICK, 0.5, 0.0, 0.0])
        events = engine.simulate_minute(state, config)
        assert events[1].goal_type == GoalType.FREE_KICK
        assert state.home_score == 1

    def test_save_by_defending_keeper(self):
        """Test save by defending keeper."""
        engine, state, config = _setup(AWAY_ATTACKS + [SAVE])
        events = engine.simulate_minute(state, config)
        assert len(events) == 1
        assert isinstance(events[0], SaveEvent)
        assert events[0].team == "home"
        assert events[0].goalkeeper_id == "h-s0"

    def test_no_keeper_no_save(self):
        """Test no keeper no save."""
        engine, state, config = _setup(AWAY_ATTACKS + [SAVE])
        state.home.lineup = [p for p in state.home.lineup if not p.is_goalkeeper]
        assert engine.simulate_minute(state, config) == []
