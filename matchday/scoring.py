"""Point rules for recorded matches and their exact inverse."""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from .constants import (
    FORM_LENGTH,
    PENALTY_LATE,
    PENALTY_NO_SHOW,
    RESULT_A,
    RESULT_B,
    RESULT_DRAW,
    RESULT_POINTS,
    SIDE_A,
    SIDE_B,
)
from .models import Match, MatchRules, Player
from .schemas import LeagueSettings


@dataclass(frozen=True)
class PlayerDelta:
    """Everything one match contributes to one roster player."""
    player_id: str
    outcome: str  # W, D or L
    result_points: int
    bonus_points: int
    penalty: Optional[str] = None
    penalty_points: int = 0  # deduction, stored as a positive number

    @property
    def total(self) -> int:
        return self.result_points + self.bonus_points - self.penalty_points


def result_for_scores(score_a: int, score_b: int) -> str:
    """A if Team A scored more, B if Team B did, otherwise Draw."""
    if score_a > score_b:
        return RESULT_A
    if score_b > score_a:
        return RESULT_B
    return RESULT_DRAW


def outcome_for_side(result: str, side: str) -> str:
    """Result letter (W/D/L) for one side of a match."""
    if result == RESULT_DRAW:
        return 'D'
    return 'W' if result == side else 'L'


def bonus_by_side(no_shows_a: int, no_shows_b: int, bonus_point: int) -> tuple[int, int]:
    """
    Bonus points per player for each side.

    Only the side with fewer no-shows receives the bonus, and only when the
    counts differ.

    Returns:
        (bonus for Team A, bonus for Team B)
    """
    if no_shows_b > no_shows_a:
        return bonus_point, 0
    if no_shows_a > no_shows_b:
        return 0, bonus_point
    return 0, 0


def penalty_deduction(penalty: Optional[str], rules: MatchRules) -> int:
    if penalty == PENALTY_LATE:
        return rules.late_penalty
    if penalty == PENALTY_NO_SHOW:
        return rules.no_show_penalty
    return 0


def rules_for(match: Match, settings: LeagueSettings) -> MatchRules:
    """Rules stored on the match, or the current settings for older entries."""
    return match.rules if match.rules is not None else settings.rules()


def player_deltas(match: Match, rules: MatchRules) -> dict[str, PlayerDelta]:
    """
    Compute what a match contributes to each roster player in it.

    Scoring:
        - Result points: win 3, draw 2, loss 0
        - No-shows get no result points for a win or draw
        - Late / no-show: deduct the configured penalty
        - Side with fewer no-shows: +bonus per player, except its no-shows
        - Guests get nothing

    Args:
        match: Ledger entry (snapshots, result, penalties)
        rules: Point rules to apply

    Returns:
        Dict mapping player id to PlayerDelta (guests omitted)
    """
    no_shows_a, no_shows_b = match.no_show_counts()
    bonus_a, bonus_b = bonus_by_side(no_shows_a, no_shows_b, rules.bonus_point)

    deltas: dict[str, PlayerDelta] = {}
    sides = (
        (SIDE_A, match.team_a, bonus_a),
        (SIDE_B, match.team_b, bonus_b),
    )
    for side, snapshots, bonus in sides:
        outcome = outcome_for_side(match.result, side)
        for snapshot in snapshots:
            if snapshot.is_guest:
                continue
            penalty = match.penalties.get(snapshot.id)
            was_no_show = penalty == PENALTY_NO_SHOW
            result_points = RESULT_POINTS[outcome]
            if was_no_show and outcome in ('W', 'D'):
                result_points = 0
            deltas[snapshot.id] = PlayerDelta(
                player_id=snapshot.id,
                outcome=outcome,
                result_points=result_points,
                bonus_points=0 if was_no_show else bonus,
                penalty=penalty,
                penalty_points=penalty_deduction(penalty, rules),
            )
    return deltas


def derive_form(player_id: str, history: Iterable[Match]) -> list[str]:
    """
    Rebuild a player's form from the ledger.

    Args:
        player_id: Roster player id
        history: Ledger entries, newest first

    Returns:
        Up to FORM_LENGTH result letters, most recent first
    """
    form: list[str] = []
    for match in history:
        outcome = match.outcome_for(player_id)
        if outcome is not None:
            form.append(outcome)
            if len(form) == FORM_LENGTH:
                break
    return form


def _counter_for(outcome: str) -> str:
    return {'W': 'wins', 'D': 'draws', 'L': 'losses'}[outcome]


def _penalty_counter(penalty: Optional[str]) -> Optional[str]:
    if penalty == PENALTY_LATE:
        return 'late_count'
    if penalty == PENALTY_NO_SHOW:
        return 'no_show_count'
    return None


def apply_delta(player: Player, delta: PlayerDelta) -> Player:
    """Add one match's contribution to a player."""
    changes = {
        'points': player.points + delta.total,
        'matches_played': player.matches_played + 1,
        'form': [delta.outcome, *player.form][:FORM_LENGTH],
    }
    counter = _counter_for(delta.outcome)
    changes[counter] = getattr(player, counter) + 1
    penalty_counter = _penalty_counter(delta.penalty)
    if penalty_counter:
        changes[penalty_counter] = getattr(player, penalty_counter) + 1
    return replace(player, **changes)


def revert_delta(player: Player, delta: PlayerDelta, remaining: Sequence[Match]) -> Player:
    """
    Remove one match's contribution from a player.

    Counters never drop below zero. Form is rebuilt from ``remaining``
    rather than edited in place.
    """
    changes = {
        'points': player.points - delta.total,
        'matches_played': max(0, player.matches_played - 1),
        'form': derive_form(player.id, remaining),
    }
    counter = _counter_for(delta.outcome)
    changes[counter] = max(0, getattr(player, counter) - 1)
    penalty_counter = _penalty_counter(delta.penalty)
    if penalty_counter:
        changes[penalty_counter] = max(0, getattr(player, penalty_counter) - 1)
    return replace(player, **changes)


def apply_match(players: Sequence[Player], match: Match, rules: MatchRules) -> tuple[Player, ...]:
    """Apply a newly recorded match to the roster."""
    deltas = player_deltas(match, rules)
    return tuple(
        apply_delta(p, deltas[p.id]) if p.id in deltas else p
        for p in players
    )


def revert_match(
    players: Sequence[Player],
    match: Match,
    rules: MatchRules,
    remaining: Sequence[Match],
) -> tuple[Player, ...]:
    """
    Undo a match's effect on the roster.

    Args:
        players: Current roster
        match: Ledger entry being deleted
        rules: Rules the match was recorded under
        remaining: Ledger after removing ``match``, newest first

    Returns:
        Roster as if ``match`` had never been recorded
    """
    deltas = player_deltas(match, rules)
    return tuple(
        revert_delta(p, deltas[p.id], remaining) if p.id in deltas else p
        for p in players
    )


def match_point_changes(match: Match, settings: LeagueSettings) -> dict[str, Optional[int]]:
    """
    Net point change per participant for one ledger entry.

    Guests map to None. Used by the match history view.
    """
    deltas = player_deltas(match, rules_for(match, settings))
    changes: dict[str, Optional[int]] = {}
    for snapshot in (*match.team_a, *match.team_b):
        delta = deltas.get(snapshot.id)
        changes[snapshot.id] = None if delta is None else delta.total
    return changes
