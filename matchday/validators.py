"""Validation functions for availability, rosters, teams, and the ledger."""

from .constants import (
    FORM_LENGTH,
    MAX_PLAYERS_IN,
    PENALTIES,
    STATUS_IN,
    STATUS_WAITING,
    TEAM_SIZE,
)
from .models import LeagueState, Match, Player
from .scoring import derive_form, result_for_scores


def validate_availability(state: LeagueState) -> list[str]:
    """
    Check the availability buckets.

    Checks:
    - No more than MAX_PLAYERS_IN participants are in
    - Every waiting participant has a queue timestamp
    - Nobody else has one

    Args:
        state: League state to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    in_count = state.count_with_status(STATUS_IN)
    if in_count > MAX_PLAYERS_IN:
        errors.append(f'{in_count} participants are in (max {MAX_PLAYERS_IN})')

    for participant in state.participants:
        if participant.status == STATUS_WAITING and participant.waiting_timestamp is None:
            errors.append(f'{participant.name} is waiting without a timestamp')
        elif participant.status != STATUS_WAITING and participant.waiting_timestamp is not None:
            errors.append(f'{participant.name} is {participant.status} but has a waiting timestamp')

    ids = [p.id for p in state.participants]
    duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
    if duplicates:
        errors.append(f'Duplicate participant ids: {", ".join(duplicates)}')

    return errors


def validate_player_stats(player: Player) -> list[str]:
    """
    Check that a player's statistics are internally consistent.

    Checks:
    - matches_played == wins + draws + losses
    - Counters are non-negative
    - Form holds at most FORM_LENGTH W/D/L entries

    Args:
        player: Player to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    results = player.wins + player.draws + player.losses
    if player.matches_played != results:
        errors.append(
            f'{player.name} played {player.matches_played} but has {results} results'
        )

    for counter in ('matches_played', 'wins', 'draws', 'losses', 'late_count', 'no_show_count'):
        if getattr(player, counter) < 0:
            errors.append(f'{player.name} has negative {counter}')

    if len(player.form) > FORM_LENGTH:
        errors.append(f'{player.name} form has {len(player.form)} entries (max {FORM_LENGTH})')
    if any(letter not in ('W', 'D', 'L') for letter in player.form):
        errors.append(f'{player.name} form has invalid entries: {player.form}')

    return errors


def validate_match(match: Match) -> list[str]:
    """
    Check a ledger entry.

    Checks:
    - Result agrees with the scores
    - Penalties name only non-guest players from the match
    - Nobody appears on both teams

    Args:
        match: Ledger entry to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    expected = result_for_scores(match.score_a, match.score_b)
    if match.result != expected:
        errors.append(
            f'Match {match.id} result {match.result} does not match score '
            f'{match.score_a}-{match.score_b}'
        )

    snapshots = {p.id: p for p in (*match.team_a, *match.team_b)}
    for player_id, penalty in match.penalties.items():
        if penalty not in PENALTIES:
            errors.append(f'Match {match.id} has unknown penalty {penalty!r} for {player_id}')
        snapshot = snapshots.get(player_id)
        if snapshot is None:
            errors.append(f'Match {match.id} penalizes {player_id} who did not play')
        elif snapshot.is_guest:
            errors.append(f'Match {match.id} penalizes guest {snapshot.name}')

    both = {p.id for p in match.team_a} & {p.id for p in match.team_b}
    if both:
        errors.append(f'Match {match.id} lists {", ".join(sorted(both))} on both teams')

    return errors


def validate_manual_teams(state: LeagueState) -> list[str]:
    """
    Check a manual draft before it is confirmed.

    Checks:
    - Both teams have exactly TEAM_SIZE players
    - Every confirmed participant is assigned

    Args:
        state: League state in the manual-draft phase

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    teams = state.match.manual_teams

    for label, side in (('Team A', teams.team_a), ('Team B', teams.team_b)):
        if len(side) != TEAM_SIZE:
            errors.append(f'{label} has {len(side)} players (needs exactly {TEAM_SIZE})')

    assigned = set(teams.all_ids())
    unassigned = [p.name for p in state.players_in if p.id not in assigned]
    if unassigned:
        errors.append(f'{len(unassigned)} unassigned: {", ".join(unassigned)}')

    return errors


def validate_form(state: LeagueState) -> list[str]:
    """
    Compare each player's cached form with the form derived from the ledger.

    Returns:
        List of warning messages (empty if every form matches)
    """
    warnings = []
    for player in state.players:
        derived = derive_form(player.id, state.history)
        if player.form != derived:
            warnings.append(f'{player.name} form {player.form} differs from ledger {derived}')
    return warnings


def validate_state(state: LeagueState) -> tuple[list[str], list[str]]:
    """
    Validate a complete league state.

    Args:
        state: League state to validate

    Returns:
        Tuple of (errors, warnings)
        - errors: Broken invariants
        - warnings: Drift worth reviewing (cached form vs ledger)
    """
    errors: list[str] = []
    warnings: list[str] = []

    errors.extend(validate_availability(state))
    for player in state.players:
        errors.extend(validate_player_stats(player))
    for match in state.history:
        errors.extend(validate_match(match))
    warnings.extend(validate_form(state))

    return errors, warnings
