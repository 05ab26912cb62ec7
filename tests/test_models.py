"""Tests for core domain models."""

import math

import pytest

from fm_match.core.models import (
    CardEvent,
    CardReason,
    FormationType,
    GoalEvent,
    GoalType,
    MatchEventType,
    MatchResult,
    PenaltyEvent,
    Position,
    TacticalPosture,
    Tactics,
    calculate_overall,
    formation_slot_count,
)

from conftest import make_player, make_tactics, make_team


class TestCalculateOverall:
    """Tests for the position-weighted overall rating."""

    def test_uniform_attributes(self):
        """A player with every attribute at 70 rates 70 in any position."""
        for position in Position:
            assert calculate_overall(make_player("p", position, 70)) == 70

    def test_position_weights_matter(self):
        """Shooting dominates for attackers, not for defenders."""
        striker = make_player("a", Position.ATT, 50, attributes={"shooting": 95})
        defender = make_player("d", Position.DEF, 50, attributes={"shooting": 95})
        assert calculate_overall(striker) > calculate_overall(defender)
        assert calculate_overall(defender) == 50

    def test_unknown_position_is_neutral(self):
        """Test unknown position is neutral."""
        player = make_player("p", Position.MID, 80)
        player.position = "winger"
        assert calculate_overall(player) == 50

    def test_missing_attributes_are_neutral(self):
        """Test missing attributes are neutral."""
        player = make_player("p", Position.MID, 80)
        player.attributes = None
        assert calculate_overall(player) == 50

    def test_non_finite_values_are_skipped(self):
        """Test non finite values are skipped."""
        player = make_player("p", Position.GK, 80)
        for name in ("reflexes", "handling", "diving", "positioning", "composure"):
            setattr(player.attributes, name, math.nan)
        assert calculate_overall(player) == 50


class TestTactics:
    """Tests for tactics parsing, copying and validation."""

    def test_formation_string_is_parsed(self):
        """Test formation string is parsed."""
        tactics = Tactics(formation="4-2-3-1", posture="attacking")
        assert tactics.formation == FormationType.F_4231
        assert tactics.posture == TacticalPosture.ATTACKING

    def test_copy_is_independent(self):
        """Test copy is independent."""
        tactics = make_tactics(make_team("h"))
        clone = tactics.copy()
        clone.lineup.pop()
        clone.substitutes.clear()
        assert len(tactics.lineup) == 11
        assert len(tactics.substitutes) == 7

    def test_valid_tactics_have_no_problems(self):
        """Test valid tactics have no problems."""
        assert make_tactics(make_team("h")).validate() == []

    def test_short_lineup_reported(self):
        """Test short lineup reported."""
        tactics = make_tactics(make_team("h"))
        tactics.lineup = tactics.lineup[:10]
        problems = tactics.validate()
        assert len(problems) == 1
        assert "needs 11" in problems[0]

    def test_overlap_reported(self):
        """Test overlap reported."""
        tactics = make_tactics(make_team("h"))
        tactics.substitutes.append(tactics.lineup[0])
        assert any("bench" in p for p in tactics.validate())

    def test_every_formation_has_eleven_slots(self):
        """Test every formation has eleven slots."""
        for formation in FormationType:
            assert formation_slot_count(formation) == 11


class TestMatchEvents:
    """Tests for the event union."""

    def test_card_event_type_follows_colour(self):
        """Test card event type follows colour."""
        yellow = CardEvent(minute=10, team="home", offender_id="p1", red=False)
        red = CardEvent(minute=10, team="home", offender_id="p1", red=True, reason=CardReason.SECOND_YELLOW)
        assert yellow.event_type == MatchEventType.YELLOW_CARD
        assert red.event_type == MatchEventType.RED_CARD
        assert red.player_id == "p1"

    def test_penalty_event_type_follows_outcome(self):
        """Test penalty event type follows outcome."""
        assert PenaltyEvent(minute=5, team="away", scored=True).event_type == MatchEventType.PENALTY_SCORED
        assert PenaltyEvent(minute=5, team="away", scored=False).event_type == MatchEventType.PENALTY_MISSED

    def test_to_dict(self):
        """Test to dict."""
        event = GoalEvent(
            minute=33,
            team="home",
            scorer_id="p9",
            scorer_name="Nine",
            goal_type=GoalType.HEADER,
            description="GOAL!",
        )
        data = event.to_dict()
        assert data["type"] == "goal"
        assert data["goal_type"] == "header"
        assert data["scorer_id"] == "p9"
        assert data["minute"] == 33

    def test_events_are_immutable(self):
        """Test events are immutable."""
        event = GoalEvent(minute=1, team="home", scorer_id="p")
        with pytest.raises(AttributeError):
            event.minute = 2


class TestMatchResult:
    """Tests for match results."""

    def test_winner(self):
        """Test winner."""
        assert MatchResult("m", "h", "a", 2, 1).winner_id == "h"
        assert MatchResult("m", "h", "a", 0, 3).winner_id == "a"
        assert MatchResult("m", "h", "a", 1, 1).winner_id is None

    def test_score_string(self):
        """Test score string."""
        assert MatchResult("m", "h", "a", 2, 1).score_string == "2-1"
