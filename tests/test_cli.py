"""Tests for the demo league and the live viewer."""

import io
import random

from rich.console import Console

from fm_match.cli import main as cli
from fm_match.cli.squads import SQUAD_SHAPE, build_demo_league, build_round_fixtures
from fm_match.core.models import calculate_overall
from fm_match.engine.multi_match import create_multi_match_state


class TestDemoLeague:
    """Tests for generated squads and fixtures."""

    def test_league_is_deterministic(self):
        """Test league is deterministic."""
        first = build_demo_league(3, 4)
        second = build_demo_league(3, 4)
        assert [t.name for t in first] == [t.name for t in second]
        assert [calculate_overall(p) for p in first[0].players] == [
            calculate_overall(p) for p in second[0].players
        ]

    def test_squad_shape(self):
        """Test squad shape."""
        team = build_demo_league(1, 2)[0]
        assert len(team.players) == len(SQUAD_SHAPE)
        assert team.players[0].id == "club-1-p1"
        assert all(1 <= value <= 99 for value in vars(team.players[5].attributes).values())

    def test_every_club_plays_once(self):
        """Test every club plays once."""
        teams = build_demo_league(1, 8)
        fixtures = build_round_fixtures(teams, round_number=3)
        assert len(fixtures) == 4
        ids = [f.home_team_id for f in fixtures] + [f.away_team_id for f in fixtures]
        assert sorted(ids) == sorted(t.id for t in teams)
        assert fixtures[0].id == "r3-m1"

    def test_odd_club_count_has_a_bye(self):
        """Test odd club count has a bye."""
        teams = build_demo_league(1, 5)
        fixtures = build_round_fixtures(teams)
        assert len(fixtures) == 2

    def test_rounds_differ(self):
        """Test rounds differ."""
        teams = build_demo_league(1, 6)
        first = {(f.home_team_id, f.away_team_id) for f in build_round_fixtures(teams, 1)}
        second = {(f.home_team_id, f.away_team_id) for f in build_round_fixtures(teams, 2)}
        assert first != second


class TestViewer:
    """Tests for the rich live viewer."""

    def test_render_round(self):
        """Test render round."""
        teams = build_demo_league(2, 4)
        matches = create_multi_match_state(
            build_round_fixtures(teams),
            {t.id: t for t in teams},
            player_team_id=teams[0].id,
            player_tactics=None,
            rng=random.Random(2),
        )
        table = cli.render_round(matches, 1)
        assert table.row_count == 2

    def test_too_few_clubs(self, monkeypatch):
        """Test too few clubs."""
        monkeypatch.setattr(cli, "console", Console(file=io.StringIO()))
        assert cli.main(["--teams", "1"]) == 1

    def test_full_round(self, monkeypatch):
        """Test full round."""
        output = io.StringIO()
        monkeypatch.setattr(cli, "console", Console(file=output, width=120))
        assert cli.main(["--teams", "4", "--seed", "3", "--tick", "0"]) == 0
        assert "Full-time results" in output.getvalue()
