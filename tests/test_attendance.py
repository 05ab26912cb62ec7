"""Tests for the attendance model."""

import random

from fm_match.engine.attendance import (
    calculate_attendance_expectation,
    calculate_attendance_range,
    sample_attendance,
)

from conftest import make_team


class TestAttendance:
    """Tests for expected crowds and sampling."""

    def test_empty_stadium(self):
        """Test empty stadium."""
        home, away = make_team("h", capacity=0), make_team("a")
        assert calculate_attendance_expectation(home, away) == 0
        band = calculate_attendance_range(home, away)
        assert (band.min, band.max, band.expected) == (0, 0, 0)
        assert sample_attendance(random.Random(1), home, away) == 0

    def test_fill_rate_bounds(self):
        """Test fill rate bounds."""
        small = make_team("h", reputation=1, momentum=1, capacity=10000)
        big = make_team("h", reputation=100, momentum=100, capacity=10000)
        away_small = make_team("a", reputation=1)
        away_big = make_team("a", reputation=100)

        assert calculate_attendance_expectation(small, away_small) >= 3500
        assert calculate_attendance_expectation(big, away_big) <= 9800

    def test_reputation_draws_crowds(self):
        """Test reputation draws crowds."""
        away = make_team("a", reputation=50)
        modest = calculate_attendance_expectation(make_team("h", reputation=30), away)
        famous = calculate_attendance_expectation(make_team("h", reputation=90), away)
        assert famous > modest

    def test_late_season_uplift(self):
        """Test late season uplift."""
        home, away = make_team("h"), make_team("a")
        early = calculate_attendance_expectation(home, away, round_number=1, total_rounds=30)
        late = calculate_attendance_expectation(home, away, round_number=30, total_rounds=30)
        assert late > early

    def test_range_width(self):
        """Test range width."""
        home, away = make_team("h", reputation=50, capacity=40000), make_team("a")
        band = calculate_attendance_range(home, away)
        spread = (band.max - band.min) / 2 / band.expected
        assert 0.055 <= spread <= 0.105
        assert band.min <= band.expected <= band.max

    def test_explicit_capacity_overrides_team(self):
        """Test explicit capacity overrides team."""
        home, away = make_team("h", capacity=50000), make_team("a")
        band = calculate_attendance_range(home, away, capacity=5000)
        assert band.max <= 5000

    def test_samples_stay_in_band(self):
        """Test samples stay in band."""
        home, away = make_team("h"), make_team("a")
        band = calculate_attendance_range(home, away)
        rng = random.Random(11)
        for _ in range(200):
            assert band.min <= sample_attendance(rng, home, away) <= band.max
