"""Roster player CRUD and the matchday guest registry."""

import logging
import uuid
from dataclasses import replace
from typing import Any, Iterable, Optional

from .availability import (
    APPLIED,
    current_timestamp,
    promote_waitlist,
    set_availability,
    with_participants,
)
from .constants import (
    DEFAULT_GUEST_POINTS,
    MAX_GUESTS,
    MAX_PLAYERS_IN,
    PHASE_AVAILABILITY,
    SEED_PLAYERS,
    STATUS_IN,
    STATUS_OUT,
    STATUS_WAITING,
)
from .errors import PreconditionError
from .models import GuestPlayer, LeagueState, Player

logger = logging.getLogger('matchday.roster')

# Fields an organizer may edit on an existing player
EDITABLE_FIELDS = (
    'name',
    'photo_url',
    'points',
    'matches_played',
    'wins',
    'draws',
    'losses',
    'late_count',
    'no_show_count',
)
COUNTER_FIELDS = ('matches_played', 'wins', 'draws', 'losses', 'late_count', 'no_show_count')


def seed_players() -> tuple[Player, ...]:
    """Initial roster used when nothing has been saved yet."""
    return tuple(
        Player(id=f'p{index}', name=name, points=points)
        for index, (name, points) in enumerate(SEED_PLAYERS, start=1)
    )


def median_points(players: Iterable[Player]) -> int:
    """
    Points of the middle roster player, ranked by points descending.

    Guests are seeded at this value so they land mid-table in the draft.
    An empty roster yields DEFAULT_GUEST_POINTS.
    """
    ranked = sorted(players, key=lambda p: p.points, reverse=True)
    if not ranked:
        return DEFAULT_GUEST_POINTS
    return ranked[len(ranked) // 2].points


def _check_player_fields(values: dict[str, Any]) -> None:
    name = values.get('name')
    if name is not None and not str(name).strip():
        raise PreconditionError('Player name cannot be empty')
    for counter in COUNTER_FIELDS:
        if values.get(counter, 0) < 0:
            raise PreconditionError(f'{counter} cannot be negative')
    played = values.get('matches_played', 0)
    results = values.get('wins', 0) + values.get('draws', 0) + values.get('losses', 0)
    if played != results:
        raise PreconditionError(
            f'matches_played ({played}) must equal wins + draws + losses ({results})'
        )


def add_player(
    state: LeagueState,
    name: str,
    points: int = 0,
    *,
    matches_played: int = 0,
    wins: int = 0,
    draws: int = 0,
    losses: int = 0,
    late_count: int = 0,
    no_show_count: int = 0,
    photo_url: Optional[str] = None,
    player_id: Optional[str] = None,
) -> LeagueState:
    """
    Register a new roster player as undecided.

    Raises:
        PreconditionError: If the name is blank, the id is taken, or the
            statistics are inconsistent
    """
    values = {
        'name': name,
        'matches_played': matches_played,
        'wins': wins,
        'draws': draws,
        'losses': losses,
        'late_count': late_count,
        'no_show_count': no_show_count,
    }
    _check_player_fields(values)

    if player_id is None:
        player_id = f'p{uuid.uuid4().hex[:10]}'
    if state.find_participant(player_id) is not None:
        raise PreconditionError(f'Participant id {player_id} already exists')

    player = Player(
        id=player_id,
        name=name.strip(),
        points=points,
        photo_url=photo_url,
        **{k: v for k, v in values.items() if k != 'name'},
    )
    logger.info(f'Player added: {player.name} ({player.id})')
    return replace(state, players=state.players + (player,))


def update_player(state: LeagueState, player_id: str, **changes: Any) -> LeagueState:
    """
    Edit a roster player's details and statistics.

    Availability and form are not editable here.

    Raises:
        PreconditionError: If the player is unknown, a field is not editable,
            or the result would break matches_played == wins + draws + losses
    """
    player = state.find_player(player_id)
    if player is None:
        raise PreconditionError(f'Unknown player: {player_id}')

    not_editable = set(changes) - set(EDITABLE_FIELDS)
    if not_editable:
        raise PreconditionError(f'Fields not editable: {", ".join(sorted(not_editable))}')

    values = {field: getattr(player, field) for field in EDITABLE_FIELDS}
    values.update(changes)
    _check_player_fields(values)
    values['name'] = values['name'].strip()

    updated = replace(player, **values)
    players = tuple(updated if p.id == player_id else p for p in state.players)
    logger.info(f'Player updated: {updated.name} ({player_id})')
    return replace(state, players=players)


def delete_player(state: LeagueState, player_id: str) -> LeagueState:
    """
    Remove a roster player.

    Past ledger entries keep their snapshot of the player. A freed "in"
    slot is refilled from the waitlist.

    Raises:
        PreconditionError: If the player is unknown or sits in the active teams
    """
    player = state.find_player(player_id)
    if player is None:
        raise PreconditionError(f'Unknown player: {player_id}')

    active = state.match.teams.all_ids() if state.match.teams else ()
    if player_id in active or player_id in state.match.manual_teams.all_ids():
        raise PreconditionError(f'{player.name} is in the current match and cannot be removed')

    remaining = [p for p in state.participants if p.id != player_id]
    if state.match.phase == PHASE_AVAILABILITY:
        remaining = promote_waitlist(remaining)
    logger.info(f'Player removed: {player.name} ({player_id})')
    return with_participants(state, remaining)


def add_guest(state: LeagueState, now: Optional[int] = None) -> LeagueState:
    """
    Add a guest slot for this matchday.

    The guest is seeded at the roster median points and joins as "in" when
    capacity allows, otherwise at the back of the waitlist.

    Raises:
        PreconditionError: Outside the availability phase or when MAX_GUESTS
            guests already exist
    """
    if state.match.phase != PHASE_AVAILABILITY:
        raise PreconditionError('Guests can only be added while setting availability')
    if len(state.guests) >= MAX_GUESTS:
        raise PreconditionError(f'A matchday allows at most {MAX_GUESTS} guests')

    taken = {p.id for p in state.participants}
    number = 1
    while f'guest-{number}' in taken:
        number += 1

    if state.count_with_status(STATUS_IN) < MAX_PLAYERS_IN:
        status, timestamp = STATUS_IN, None
    else:
        status = STATUS_WAITING
        timestamp = now if now is not None else current_timestamp()

    guest = GuestPlayer(
        id=f'guest-{number}',
        name=f'Guest {number}',
        points=median_points(state.players),
        status=status,
        waiting_timestamp=timestamp,
    )
    logger.info(f'{guest.name} added as {status}')
    return replace(state, guests=state.guests + (guest,))


def remove_guest(state: LeagueState, guest_id: str) -> LeagueState:
    """
    Remove a guest, promoting from the waitlist if a slot frees up.

    Raises:
        PreconditionError: If the guest is unknown or availability is locked
    """
    if not any(g.id == guest_id for g in state.guests):
        raise PreconditionError(f'Unknown guest: {guest_id}')
    change = set_availability(state, guest_id, STATUS_OUT)
    if change.outcome != APPLIED:
        raise PreconditionError('Guests can only be removed while setting availability')
    return change.state
