"""Unit tests for validation functions."""

from dataclasses import replace

from matchday.models import LeagueState, Match, MatchPlayer, Player
from matchday.validators import (
    validate_availability,
    validate_form,
    validate_match,
    validate_player_stats,
    validate_state,
)


def roster_of(count, status='in'):
    return tuple(Player(id=f'p{i}', name=f'Player {i}', status=status) for i in range(count))


class TestAvailabilityValidation:
    """Tests for availability bucket checks."""

    def test_valid(self, league):
        """Test that the seed state passes."""
        assert validate_availability(league) == []

    def test_over_capacity(self, league):
        """Test that more than 14 'in' is reported."""
        state = replace(league, players=roster_of(15))
        errors = validate_availability(state)
        assert len(errors) == 1
        assert '15 participants are in (max 14)' in errors[0]

    def test_waiting_without_timestamp(self, league):
        """Test that a waiting player needs a timestamp."""
        state = replace(league, players=(Player(id='p1', name='Ann', status='waiting'),))
        errors = validate_availability(state)
        assert errors == ['Ann is waiting without a timestamp']

    def test_stray_timestamp(self, league):
        """Test that non-waiting players must not carry a timestamp."""
        state = replace(
            league, players=(Player(id='p1', name='Ann', status='out', waiting_timestamp=5),)
        )
        errors = validate_availability(state)
        assert errors == ['Ann is out but has a waiting timestamp']

    def test_duplicate_ids(self, league):
        """Test that ids must be unique across roster and guests."""
        player = Player(id='p1', name='Ann')
        state = replace(league, players=(player, replace(player, name='Bob')))
        errors = validate_availability(state)
        assert errors == ['Duplicate participant ids: p1']


class TestPlayerStatsValidation:
    """Tests for per-player statistics."""

    def test_valid_player(self):
        """Test that consistent stats pass."""
        player = Player(id='p1', name='Ann', matches_played=3, wins=1, draws=1, losses=1,
                        form=['W', 'D', 'L'])
        assert validate_player_stats(player) == []

    def test_played_mismatch(self):
        """Test that played must equal W + D + L."""
        player = Player(id='p1', name='Ann', matches_played=3, wins=1)
        errors = validate_player_stats(player)
        assert errors == ['Ann played 3 but has 1 results']

    def test_negative_counter(self):
        """Test that negative counters are reported."""
        player = Player(id='p1', name='Ann', late_count=-1)
        errors = validate_player_stats(player)
        assert 'Ann has negative late_count' in errors

    def test_form_too_long(self):
        """Test that form holds at most five entries."""
        player = Player(id='p1', name='Ann', matches_played=6, wins=6, form=['W'] * 6)
        errors = validate_player_stats(player)
        assert len(errors) == 1
        assert 'max 5' in errors[0]


class TestMatchValidation:
    """Tests for ledger entries."""

    def _match(self, **overrides):
        values = dict(
            id='m1',
            date='2026-01-01',
            team_a=(MatchPlayer(id='a', name='A'), MatchPlayer(id='g', name='G', is_guest=True)),
            team_b=(MatchPlayer(id='b', name='B'),),
            result='A',
            score_a=2,
            score_b=1,
        )
        values.update(overrides)
        return Match(**values)

    def test_valid_match(self):
        """Test that a consistent entry passes."""
        assert validate_match(self._match(penalties={'a': 'late'})) == []

    def test_result_mismatch(self):
        """Test that the result must follow from the score."""
        errors = validate_match(self._match(result='B'))
        assert len(errors) == 1
        assert 'does not match score 2-1' in errors[0]

    def test_penalty_for_absent_player(self):
        """Test that penalties must name players from the match."""
        errors = validate_match(self._match(penalties={'zz': 'late'}))
        assert errors == ['Match m1 penalizes zz who did not play']

    def test_penalty_for_guest(self):
        """Test that guests cannot carry penalties."""
        errors = validate_match(self._match(penalties={'g': 'no-show'}))
        assert errors == ['Match m1 penalizes guest G']

    def test_player_on_both_teams(self):
        """Test that nobody plays for both sides."""
        errors = validate_match(self._match(team_b=(MatchPlayer(id='a', name='A'),)))
        assert errors == ['Match m1 lists a on both teams']


class TestStateValidation:
    """Tests for whole-state validation."""

    def test_form_drift_is_a_warning(self, drafted):
        """Test that a stale cached form is reported as a warning, not an error."""
        player = replace(drafted.players[0], form=['W'], matches_played=1, wins=1)
        state = replace(drafted, players=(player,) + drafted.players[1:])
        errors, warnings = validate_state(state)
        assert errors == []
        assert len(warnings) == 1
        assert validate_form(state) == warnings

    def test_collects_errors(self, league):
        """Test that errors from every check are combined."""
        bad = Player(id='x', name='Bad', matches_played=1, status='waiting')
        state = LeagueState(settings=league.settings, players=(bad,))
        errors, warnings = validate_state(state)
        assert 'Bad is waiting without a timestamp' in errors
        assert 'Bad played 1 but has 0 results' in errors
        assert warnings == []
