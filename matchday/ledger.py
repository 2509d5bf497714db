"""Match ledger: recording results, deleting them, and resetting the matchday."""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from .config import default_settings, update_settings_values
from .constants import (
    PENALTIES,
    PHASE_RESULTS,
    PHASE_TEAMS,
    STATUS_UNDECIDED,
)
from .errors import PreconditionError
from .models import GuestPlayer, LeagueState, Match, MatchPlayer, MatchState, Player
from .roster import seed_players
from .schemas import LeagueSettings
from .scoring import apply_match, player_deltas, result_for_scores, revert_match, rules_for

logger = logging.getLogger('matchday.ledger')


def new_league_state(
    players: Optional[tuple[Player, ...]] = None,
    settings: Optional[LeagueSettings] = None,
) -> LeagueState:
    """Fresh state: seed roster (unless given), default settings, no history."""
    return LeagueState(
        settings=settings if settings is not None else default_settings(),
        players=seed_players() if players is None else tuple(players),
    )


def set_penalty(state: LeagueState, player_id: str, penalty: Optional[str]) -> LeagueState:
    """
    Mark a roster player in the active teams as late or no-show.

    Setting the penalty a player already has (or None) clears it.

    Raises:
        PreconditionError: Outside the teams phase, for guests, for players
            not in the active teams, or for an unknown penalty
    """
    if state.match.phase != PHASE_TEAMS or state.match.teams is None:
        raise PreconditionError('Penalties can only be set while teams are on the pitch')
    if penalty is not None and penalty not in PENALTIES:
        raise PreconditionError(f'Unknown penalty: {penalty}')

    participant = state.find_participant(player_id)
    if participant is None or state.match.teams.side_of(player_id) is None:
        raise PreconditionError(f'{player_id} is not playing in this match')
    match participant:
        case GuestPlayer():
            raise PreconditionError(f'{participant.name} is a guest and cannot be penalized')

    penalties = dict(state.match.penalties)
    if penalty is None or penalties.get(player_id) == penalty:
        penalties.pop(player_id, None)
    else:
        penalties[player_id] = penalty
    return replace(state, match=replace(state.match, penalties=penalties))


def set_scores(state: LeagueState, score_a: int, score_b: int) -> LeagueState:
    """
    Enter the final score of the active match.

    Raises:
        PreconditionError: Outside the teams phase or for negative scores
    """
    if state.match.phase != PHASE_TEAMS:
        raise PreconditionError('Scores can only be entered while teams are on the pitch')
    if score_a < 0 or score_b < 0:
        raise PreconditionError('Scores cannot be negative')
    return replace(state, match=replace(state.match, score_a=score_a, score_b=score_b))


def _snapshot(state: LeagueState, ids: tuple[str, ...]) -> tuple[MatchPlayer, ...]:
    snapshots = []
    for participant_id in ids:
        participant = state.find_participant(participant_id)
        if participant is None:
            raise PreconditionError(f'{participant_id} is no longer registered')
        snapshots.append(
            MatchPlayer(
                id=participant.id,
                name=participant.name,
                photo_url=participant.photo_url,
                is_guest=participant.is_guest,
            )
        )
    return tuple(snapshots)


def record_result(
    state: LeagueState,
    match_id: Optional[str] = None,
    date: Optional[str] = None,
) -> LeagueState:
    """
    Record the active match using the entered scores and penalties.

    Penalties and result points are applied to roster players, a ledger
    entry is prepended to the history, and the phase moves to results.

    Args:
        state: State in the teams phase
        match_id: Ledger id (generated if omitted)
        date: ISO timestamp (now, UTC, if omitted)

    Raises:
        PreconditionError: If no teams are set
    """
    current = state.match
    if current.phase != PHASE_TEAMS or current.teams is None:
        raise PreconditionError('There are no active teams to record a result for')

    team_a = _snapshot(state, current.teams.team_a)
    team_b = _snapshot(state, current.teams.team_b)
    playing = {p.id for p in (*team_a, *team_b) if not p.is_guest}
    penalties = {pid: pen for pid, pen in current.penalties.items() if pid in playing}

    result = result_for_scores(current.score_a, current.score_b)
    match = Match(
        id=match_id or f'm{uuid.uuid4().hex[:12]}',
        date=date or datetime.now(timezone.utc).isoformat(),
        team_a=team_a,
        team_b=team_b,
        result=result,
        score_a=current.score_a,
        score_b=current.score_b,
        penalties=penalties,
        rules=state.settings.rules(),
    )

    players = apply_match(state.players, match, match.rules)
    for player_id, delta in player_deltas(match, match.rules).items():
        if delta.penalty:
            logger.info(f'Penalty {delta.penalty} for {player_id}: -{delta.penalty_points}pts')
    logger.info(f'Match {match.id} recorded: {current.score_a}-{current.score_b} ({result})')

    return replace(
        state,
        players=players,
        history=(match,) + state.history,
        match=replace(current, phase=PHASE_RESULTS, penalties=penalties, winner=result),
    )


def delete_match(state: LeagueState, match_id: str) -> LeagueState:
    """
    Delete a ledger entry and undo its effect on the roster.

    Penalties, result points, bonus points and counters are reversed using
    the rules the match was recorded under. Form is rebuilt from the
    remaining history. Players no longer on the roster are skipped.

    Raises:
        PreconditionError: If the match is not in the ledger
    """
    match = state.find_match(match_id)
    if match is None:
        raise PreconditionError(f'Unknown match: {match_id}')

    remaining = tuple(m for m in state.history if m.id != match_id)
    players = revert_match(state.players, match, rules_for(match, state.settings), remaining)
    logger.info(f'Match {match_id} deleted and player stats reverted')
    return replace(state, players=players, history=remaining)


def reset_game(state: LeagueState) -> LeagueState:
    """Start a new matchday: clear the match, drop guests, everyone undecided."""
    players = tuple(
        replace(p, status=STATUS_UNDECIDED, waiting_timestamp=None) for p in state.players
    )
    logger.info('New matchday started')
    return replace(state, players=players, guests=(), match=MatchState())


def reset_league(state: LeagueState) -> LeagueState:
    """Start a new season: keep the roster, zero every statistic, clear history and settings."""
    players = tuple(
        Player(id=p.id, name=p.name, photo_url=p.photo_url) for p in state.players
    )
    logger.info('League statistics reset for a new season')
    return reset_game(
        replace(state, players=players, history=(), settings=default_settings())
    )


def update_settings(state: LeagueState, **changes: Any) -> LeagueState:
    """
    Change league settings.

    Raises:
        PreconditionError: If a change is unknown or invalid
    """
    try:
        settings = update_settings_values(state.settings, **changes)
    except ValueError as e:
        raise PreconditionError(str(e)) from e
    logger.info(f'Settings updated: {", ".join(sorted(changes))}')
    return replace(state, settings=settings)
