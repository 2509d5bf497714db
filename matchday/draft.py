"""Team drafting: automatic snake draft by points and manual assignment."""

import logging
from collections import deque
from dataclasses import replace
from typing import Optional, Sequence

from .constants import (
    DRAFT_MANUAL,
    DRAFT_POINTS,
    MAX_PLAYERS_IN,
    PHASE_AVAILABILITY,
    PHASE_MANUAL_DRAFT,
    PHASE_TEAMS,
    SIDE_A,
    SIDE_B,
)
from .errors import PreconditionError
from .models import LeagueState, MatchState, Participant, Teams
from .validators import validate_manual_teams

logger = logging.getLogger('matchday.draft')


def snake_draft(participants: Sequence[Participant]) -> Teams:
    """
    Split participants into two balanced teams by points.

    Participants are ranked by points descending (ties keep input order).
    Team A takes the highest pick and Team B the lowest; then each round
    hands the next-highest to the side that last took a low pick:

        A: high, B: low
        B: high, A: low
        A: high, B: low
        ...

    This is the 1-2-2-...-2-1 serpent pattern. With 14 participants each
    team ends with 7.

    Args:
        participants: Participants to distribute

    Returns:
        Teams holding participant ids in pick order
    """
    picks = deque(sorted(participants, key=lambda p: p.points, reverse=True))
    team_a: list[str] = []
    team_b: list[str] = []

    def take(high_side: list[str], low_side: list[str]) -> None:
        if picks:
            high_side.append(picks.popleft().id)
        if picks:
            low_side.append(picks.pop().id)

    take(team_a, team_b)
    while picks:
        take(team_b, team_a)
        take(team_a, team_b)

    return Teams(team_a=tuple(team_a), team_b=tuple(team_b))


def draft_teams(state: LeagueState, method: str) -> LeagueState:
    """
    Draft two teams from the "in" participants.

    ``points`` runs the snake draft and moves to the teams phase. ``manual``
    opens an empty manual draft.

    Raises:
        PreconditionError: Outside the availability phase, with an unknown
            method, or unless exactly MAX_PLAYERS_IN participants are in
    """
    if state.match.phase != PHASE_AVAILABILITY:
        raise PreconditionError(f'Cannot draft during the {state.match.phase} phase')
    if method not in (DRAFT_POINTS, DRAFT_MANUAL):
        raise PreconditionError(f'Unknown draft method: {method}')

    players_in = state.players_in
    if len(players_in) != MAX_PLAYERS_IN:
        raise PreconditionError(
            f"Drafting requires exactly {MAX_PLAYERS_IN} players to be 'in' for a "
            f'{MAX_PLAYERS_IN // 2} vs {MAX_PLAYERS_IN // 2} match. You have {len(players_in)}.'
        )

    if method == DRAFT_MANUAL:
        logger.info('Manual draft started')
        return replace(state, match=MatchState(phase=PHASE_MANUAL_DRAFT))

    teams = snake_draft(players_in)
    logger.info(f'Teams drafted by points: A={list(teams.team_a)} B={list(teams.team_b)}')
    return replace(state, match=MatchState(phase=PHASE_TEAMS, teams=teams))


def assign_player(state: LeagueState, participant_id: str, team: Optional[str]) -> LeagueState:
    """
    Place a participant on team 'A' or 'B', or unassign with None.

    The participant is first removed from whichever side holds them, so
    repeated calls never duplicate membership.

    Raises:
        PreconditionError: Outside the manual draft, for participants who are
            not in, or for an unknown team
    """
    if state.match.phase != PHASE_MANUAL_DRAFT:
        raise PreconditionError('Players can only be assigned during a manual draft')
    if team not in (SIDE_A, SIDE_B, None):
        raise PreconditionError(f'Unknown team: {team}')
    if participant_id not in {p.id for p in state.players_in}:
        raise PreconditionError(f'{participant_id} is not confirmed for this match')

    current = state.match.manual_teams
    team_a = [pid for pid in current.team_a if pid != participant_id]
    team_b = [pid for pid in current.team_b if pid != participant_id]
    if team == SIDE_A:
        team_a.append(participant_id)
    elif team == SIDE_B:
        team_b.append(participant_id)

    manual_teams = Teams(team_a=tuple(team_a), team_b=tuple(team_b))
    return replace(state, match=replace(state.match, manual_teams=manual_teams))


def confirm_manual_draft(state: LeagueState) -> LeagueState:
    """
    Lock in the manual teams.

    Raises:
        PreconditionError: Outside the manual draft, or when a team does not
            have exactly 7 players or someone is unassigned
    """
    if state.match.phase != PHASE_MANUAL_DRAFT:
        raise PreconditionError('There is no manual draft to confirm')

    errors = validate_manual_teams(state)
    if errors:
        raise PreconditionError('; '.join(errors))

    logger.info('Manual teams confirmed')
    return replace(
        state,
        match=MatchState(phase=PHASE_TEAMS, teams=state.match.manual_teams),
    )


def cancel_draft(state: LeagueState) -> LeagueState:
    """
    Abandon drafted teams and return to availability.

    Availability is kept; teams, scores and penalties are cleared.

    Raises:
        PreconditionError: If no draft is in progress
    """
    if state.match.phase not in (PHASE_MANUAL_DRAFT, PHASE_TEAMS):
        raise PreconditionError(f'No draft to cancel during the {state.match.phase} phase')
    logger.info('Draft cancelled')
    return replace(state, match=MatchState())
