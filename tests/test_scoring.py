"""Unit tests for scoring functions."""

import pytest

from matchday.models import Match, MatchPlayer, MatchRules, Player
from matchday.schemas import LeagueSettings
from matchday.scoring import (
    apply_delta,
    bonus_by_side,
    derive_form,
    match_point_changes,
    player_deltas,
    result_for_scores,
    revert_delta,
    rules_for,
)

RULES = MatchRules(late_penalty=2, no_show_penalty=3, bonus_point=1)


def make_match(
    match_id='m1',
    result='A',
    score_a=3,
    score_b=1,
    penalties=None,
    team_a=('a1', 'a2', 'a3'),
    team_b=('b1', 'b2', 'b3'),
    guests=(),
    rules=RULES,
):
    def side(ids):
        return tuple(MatchPlayer(id=i, name=i.upper(), is_guest=i in guests) for i in ids)

    return Match(
        id=match_id,
        date='2026-01-01T00:00:00+00:00',
        team_a=side(team_a),
        team_b=side(team_b),
        result=result,
        score_a=score_a,
        score_b=score_b,
        penalties=penalties or {},
        rules=rules,
    )


class TestResult:
    """Tests for result and bonus helpers."""

    @pytest.mark.parametrize('score_a,score_b,expected', [
        (3, 1, 'A'),
        (0, 2, 'B'),
        (2, 2, 'Draw'),
        (0, 0, 'Draw'),
    ])
    def test_result_for_scores(self, score_a, score_b, expected):
        """Test that the result is decided by comparing scores."""
        assert result_for_scores(score_a, score_b) == expected

    def test_bonus_to_side_with_fewer_no_shows(self):
        """Test that Team A gets the bonus when Team B has more no-shows."""
        assert bonus_by_side(0, 2, 1) == (1, 0)
        assert bonus_by_side(3, 1, 1) == (0, 1)

    def test_no_bonus_when_equal(self):
        """Test that equal no-show counts give no bonus."""
        assert bonus_by_side(1, 1, 1) == (0, 0)
        assert bonus_by_side(0, 0, 5) == (0, 0)


class TestPlayerDeltas:
    """Tests for per-player match contributions."""

    def test_win_and_loss(self):
        """Test 3 points for winners and 0 for losers."""
        deltas = player_deltas(make_match(), RULES)
        assert deltas['a1'].outcome == 'W'
        assert deltas['a1'].total == 3
        assert deltas['b1'].outcome == 'L'
        assert deltas['b1'].total == 0

    def test_draw(self):
        """Test 2 points each for a draw."""
        deltas = player_deltas(make_match(result='Draw', score_a=1, score_b=1), RULES)
        assert {d.total for d in deltas.values()} == {2}
        assert {d.outcome for d in deltas.values()} == {'D'}

    def test_late_penalty(self):
        """Test that a late winner gets 3 minus the late penalty."""
        deltas = player_deltas(make_match(penalties={'a1': 'late'}), RULES)
        assert deltas['a1'].result_points == 3
        assert deltas['a1'].penalty_points == 2
        assert deltas['a1'].total == 1

    def test_no_show_on_winning_team(self):
        """Test that a winning no-show gets no result points, no bonus, and the penalty."""
        deltas = player_deltas(make_match(penalties={'a1': 'no-show'}), RULES)
        assert deltas['a1'].result_points == 0
        assert deltas['a1'].bonus_points == 0
        assert deltas['a1'].total == -3

    def test_no_show_bonus_to_other_team(self):
        """Test that the side without no-shows gets the bonus, except nobody on the short side."""
        deltas = player_deltas(make_match(penalties={'a1': 'no-show'}), RULES)
        assert deltas['a2'].bonus_points == 0
        assert deltas['b1'].bonus_points == 1
        assert deltas['b1'].total == 1

    def test_no_show_on_losing_team(self):
        """Test that a losing no-show gets 0 result points and the penalty."""
        deltas = player_deltas(make_match(penalties={'b1': 'no-show'}), RULES)
        assert deltas['b1'].result_points == 0
        assert deltas['b1'].total == -3
        # Team A has fewer no-shows
        assert deltas['a2'].total == 4

    def test_no_show_draw(self):
        """Test that a no-show gets nothing from a draw."""
        match = make_match(result='Draw', score_a=0, score_b=0, penalties={'b2': 'no-show'})
        deltas = player_deltas(match, RULES)
        assert deltas['b2'].result_points == 0
        assert deltas['a1'].total == 3

    def test_guests_excluded(self):
        """Test that guests get no delta and do not count as no-shows."""
        match = make_match(guests=('a3',), penalties={'a3': 'no-show'})
        deltas = player_deltas(match, RULES)
        assert 'a3' not in deltas
        assert deltas['b1'].bonus_points == 0

    def test_rules_snapshot_preferred(self):
        """Test that stored rules win over current settings."""
        match = make_match(rules=MatchRules(late_penalty=5, no_show_penalty=7, bonus_point=2))
        settings = LeagueSettings(late_penalty=1)
        assert rules_for(match, settings).late_penalty == 5

    def test_rules_fall_back_to_settings(self):
        """Test that entries without rules use the current settings."""
        match = make_match(rules=None)
        settings = LeagueSettings(late_penalty=4)
        assert rules_for(match, settings).late_penalty == 4


class TestForm:
    """Tests for form derivation and updates."""

    def test_derive_form_newest_first(self):
        """Test that form lists results most recent first."""
        history = [
            make_match('m3', result='B', score_a=0, score_b=1),
            make_match('m2', result='Draw', score_a=1, score_b=1),
            make_match('m1'),
        ]
        assert derive_form('a1', history) == ['L', 'D', 'W']
        assert derive_form('b1', history) == ['W', 'D', 'L']

    def test_derive_form_truncates(self):
        """Test that only the last five results are kept."""
        history = [make_match(f'm{i}') for i in range(8)]
        assert derive_form('a1', history) == ['W'] * 5

    def test_derive_form_skips_absent(self):
        """Test that matches a player missed are ignored."""
        history = [make_match('m1', team_a=('x',), team_b=('y',)), make_match('m2')]
        assert derive_form('a1', history) == ['W']

    def test_apply_then_revert(self):
        """Test that reverting a delta restores the player exactly."""
        before = Player(
            id='a1', name='A1', points=40, matches_played=2, wins=1, losses=1,
            form=['W', 'L'], late_count=1,
        )
        history = [make_match('m0', result='A'), make_match('m-1', result='B', score_a=0, score_b=1)]
        match = make_match('m1', penalties={'a1': 'late'})
        delta = player_deltas(match, RULES)['a1']

        after = apply_delta(before, delta)
        assert after.points == 41
        assert after.form == ['W', 'W', 'L']
        assert after.late_count == 2

        restored = revert_delta(after, delta, history)
        assert restored.points == before.points
        assert restored.matches_played == before.matches_played
        assert restored.wins == before.wins
        assert restored.late_count == before.late_count
        assert restored.form == ['W', 'L']

    def test_revert_clamps_counters(self):
        """Test that counters never go below zero on revert."""
        player = Player(id='a1', name='A1')
        delta = player_deltas(make_match(), RULES)['a1']
        reverted = revert_delta(player, delta, [])
        assert reverted.matches_played == 0
        assert reverted.wins == 0
        assert reverted.points == -3


class TestPointChanges:
    """Tests for the per-entry history view."""

    def test_guests_reported_as_none(self):
        """Test that guests show no point change."""
        match = make_match(guests=('b3',))
        changes = match_point_changes(match, LeagueSettings())
        assert changes['a1'] == 3
        assert changes['b1'] == 0
        assert changes['b3'] is None
