"""Availability buckets and the capacity-bounded waitlist."""

import logging
import time
from dataclasses import replace
from typing import NamedTuple, Optional, Sequence

from .constants import (
    MAX_PLAYERS_IN,
    PHASE_AVAILABILITY,
    STATUS_IN,
    STATUS_OUT,
    STATUS_UNDECIDED,
    STATUS_WAITING,
)
from .errors import PreconditionError
from .models import GuestPlayer, LeagueState, Participant, Player

logger = logging.getLogger('matchday.availability')

APPLIED = 'applied'
LOCKED = 'locked'
UNKNOWN = 'unknown'

REQUESTABLE_STATUSES = (STATUS_IN, STATUS_OUT, STATUS_UNDECIDED)


class AvailabilityChange(NamedTuple):
    """Outcome of an availability request."""
    state: LeagueState
    outcome: str


def current_timestamp() -> int:
    """Milliseconds since the epoch, used to order the waitlist."""
    return int(time.time() * 1000)


def with_participants(state: LeagueState, participants: Sequence[Participant]) -> LeagueState:
    """Split a combined participant list back into roster and guests."""
    players: list[Player] = []
    guests: list[GuestPlayer] = []
    for participant in participants:
        match participant:
            case Player():
                players.append(participant)
            case GuestPlayer():
                guests.append(participant)
    return replace(state, players=tuple(players), guests=tuple(guests))


def promote_waitlist(
    participants: Sequence[Participant],
    capacity: int = MAX_PLAYERS_IN,
) -> list[Participant]:
    """
    Fill open "in" slots from the waitlist.

    The earliest ``waiting_timestamp`` is promoted first, across roster and
    guests combined. Equal timestamps keep list order (roster before guests);
    entries without a timestamp go last.

    Args:
        participants: Roster players followed by guests
        capacity: Maximum number of "in" participants

    Returns:
        New list with promoted participants replaced
    """
    promoted = list(participants)
    open_slots = capacity - sum(1 for p in promoted if p.status == STATUS_IN)
    if open_slots <= 0:
        return promoted

    queue = sorted(
        (i for i, p in enumerate(promoted) if p.status == STATUS_WAITING),
        key=lambda i: (promoted[i].waiting_timestamp is None, promoted[i].waiting_timestamp or 0, i),
    )
    for i in queue[:open_slots]:
        logger.info(f'Promoted {promoted[i].name} from the waitlist')
        promoted[i] = replace(promoted[i], status=STATUS_IN, waiting_timestamp=None)
    return promoted


def _request_in(participant: Participant, others_in: int, now: int) -> Participant:
    if participant.status == STATUS_IN:
        return participant
    if others_in < MAX_PLAYERS_IN:
        return replace(participant, status=STATUS_IN, waiting_timestamp=None)
    if participant.status == STATUS_WAITING:
        # Keeps its place in the queue
        return participant
    return replace(participant, status=STATUS_WAITING, waiting_timestamp=now)


def set_availability(
    state: LeagueState,
    participant_id: str,
    status: str,
    now: Optional[int] = None,
) -> AvailabilityChange:
    """
    Move a participant between the in / waiting / undecided / out buckets.

    Requests for "in" beyond capacity land on the waitlist. Leaving the "in"
    bucket promotes from the waitlist. A guest set to "out" is removed from
    the guest registry entirely.

    Outside the availability phase the request is a no-op reported as
    ``locked``; an unknown id is reported as ``unknown``.

    Raises:
        PreconditionError: If ``status`` is not in, out or undecided
    """
    if status not in REQUESTABLE_STATUSES:
        raise PreconditionError(f'Cannot request status {status!r}; use in, out or undecided')

    if state.match.phase != PHASE_AVAILABILITY:
        logger.debug(f'Availability locked during {state.match.phase} phase')
        return AvailabilityChange(state, LOCKED)

    participants = state.participants
    index = next((i for i, p in enumerate(participants) if p.id == participant_id), None)
    if index is None:
        return AvailabilityChange(state, UNKNOWN)

    target = participants[index]
    if now is None:
        now = current_timestamp()

    match target:
        case GuestPlayer() if status == STATUS_OUT:
            del participants[index]
        case _ if status == STATUS_IN:
            others_in = sum(
                1 for i, p in enumerate(participants) if i != index and p.status == STATUS_IN
            )
            participants[index] = _request_in(target, others_in, now)
        case _:
            participants[index] = replace(target, status=status, waiting_timestamp=None)

    participants = promote_waitlist(participants)
    return AvailabilityChange(with_participants(state, participants), APPLIED)
