"""Tests for the tactical impact model and half-time hints."""

import itertools

import pytest

from fm_match.core.models import FormationType, TacticalPosture, Tactics
from fm_match.engine.tactics import (
    NEUTRAL_IMPACT,
    FormationMatchupHint,
    MatchSituation,
    PostureHint,
    TacticalImpact,
    calculate_formation_matchup_impact,
    calculate_tactical_impact,
    get_half_time_hints,
    get_posture_impact,
    merge_tactical_impacts,
)


def _in_bounds(impact: TacticalImpact) -> bool:
    return all(-0.2 <= value <= 0.2 for value in impact.as_dict().values())


class TestTacticalImpact:
    """Tests for formation matchup and posture deltas."""

    def test_mirror_matchup_is_neutral(self):
        """Test mirror matchup is neutral."""
        for formation in FormationType:
            assert calculate_formation_matchup_impact(formation, formation) == NEUTRAL_IMPACT

    def test_all_combinations_are_bounded(self):
        """Test all combinations are bounded."""
        for own, opp in itertools.product(FormationType, repeat=2):
            for posture in TacticalPosture:
                impact = calculate_tactical_impact(
                    Tactics(formation=own, posture=posture),
                    Tactics(formation=opp),
                )
                assert _in_bounds(impact)

    def test_posture_direction(self):
        """Test posture direction."""
        assert get_posture_impact(TacticalPosture.ATTACKING).creation > 0
        assert get_posture_impact(TacticalPosture.DEFENSIVE).prevention > 0
        assert get_posture_impact(TacticalPosture.BALANCED) == NEUTRAL_IMPACT

    def test_merge_clamps(self):
        """Test merge clamps."""
        big = TacticalImpact(possession=0.15, creation=0.15, prevention=-0.15)
        merged = merge_tactical_impacts(big, big)
        assert merged == TacticalImpact(possession=0.2, creation=0.2, prevention=-0.2)

    def test_extra_midfielder_wins_possession(self):
        """Test extra midfielder wins possession."""
        impact = calculate_formation_matchup_impact(FormationType.F_352, FormationType.F_433)
        assert impact.possession > 0

    def test_posture_applied_on_top_of_shape(self):
        """Test posture applied on top of shape."""
        impact = calculate_tactical_impact(
            Tactics(formation="4-4-2", posture="attacking"),
            Tactics(formation="4-4-2"),
        )
        assert impact.creation == pytest.approx(0.08)
        assert impact.prevention == pytest.approx(-0.06)


class TestHalfTimeHints:
    """Tests for qualitative half-time guidance."""

    def test_situation(self):
        """Test situation."""
        assert get_half_time_hints(2, 1, "4-4-2", "4-4-2").situation == MatchSituation.WINNING
        assert get_half_time_hints(0, 0, "4-4-2", "4-4-2").situation == MatchSituation.DRAWING
        hints = get_half_time_hints(0, 3, "4-4-2", "4-4-2")
        assert hints.situation == MatchSituation.LOSING
        assert hints.goal_difference == 3

    def test_mirror_matchup_is_neutral(self):
        """Test mirror matchup is neutral."""
        hints = get_half_time_hints(0, 0, "4-3-3", "4-3-3")
        assert hints.formation_matchup_hints == [FormationMatchupHint.NEUTRAL]

    def test_attack_against_packed_defence(self):
        """Test attack against packed defence."""
        hints = get_half_time_hints(0, 0, FormationType.F_433, FormationType.F_541)
        assert hints.formation_matchup_hints == [
            FormationMatchupHint.ATTACK_UNDER_PRESSURE,
            FormationMatchupHint.DEFENCE_FAVOURABLE,
        ]

    def test_posture_hints(self):
        """Test posture hints."""
        hints = get_half_time_hints(1, 0, "4-4-2", "4-4-2")
        assert hints.posture_hints[TacticalPosture.ATTACKING] == PostureHint.INCREASES_CREATION
        assert hints.posture_hints[TacticalPosture.DEFENSIVE] == PostureHint.INCREASES_PREVENTION
