"""Data models for the matchday tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Union

from .constants import (
    PHASE_AVAILABILITY,
    PENALTY_NO_SHOW,
    RESULT_DRAW,
    STATUS_IN,
    STATUS_UNDECIDED,
    STATUS_WAITING,
)

if TYPE_CHECKING:
    from .schemas import LeagueSettings


@dataclass
class Player:
    """Registered roster member with cumulative season statistics."""
    id: str
    name: str
    points: int = 0
    status: str = STATUS_UNDECIDED
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    form: list[str] = field(default_factory=list)  # most recent first
    late_count: int = 0
    no_show_count: int = 0
    waiting_timestamp: int | None = None
    photo_url: str | None = None

    is_guest: ClassVar[bool] = False


@dataclass
class GuestPlayer:
    """Matchday-only participant; never carries season statistics."""
    id: str
    name: str
    points: int
    status: str = STATUS_IN
    waiting_timestamp: int | None = None
    photo_url: str | None = None

    is_guest: ClassVar[bool] = True


Participant = Union[Player, GuestPlayer]


@dataclass(frozen=True)
class Teams:
    """Two sides of the active match, held as participant ids."""
    team_a: tuple[str, ...] = ()
    team_b: tuple[str, ...] = ()

    def side_of(self, participant_id: str) -> str | None:
        if participant_id in self.team_a:
            return 'A'
        if participant_id in self.team_b:
            return 'B'
        return None

    def all_ids(self) -> tuple[str, ...]:
        return self.team_a + self.team_b


@dataclass(frozen=True)
class MatchPlayer:
    """Frozen snapshot of a participant stored inside a ledger entry."""
    id: str
    name: str
    photo_url: str | None = None
    is_guest: bool = False


@dataclass(frozen=True)
class MatchRules:
    """Point rules in force when a match was recorded."""
    late_penalty: int
    no_show_penalty: int
    bonus_point: int


@dataclass(frozen=True)
class Match:
    """Ledger entry for one completed match."""
    id: str
    date: str
    team_a: tuple[MatchPlayer, ...]
    team_b: tuple[MatchPlayer, ...]
    result: str
    score_a: int
    score_b: int
    penalties: dict[str, str] = field(default_factory=dict)
    rules: MatchRules | None = None

    def side_of(self, player_id: str) -> str | None:
        if any(p.id == player_id for p in self.team_a):
            return 'A'
        if any(p.id == player_id for p in self.team_b):
            return 'B'
        return None

    def outcome_for(self, player_id: str) -> str | None:
        """Return 'W', 'D' or 'L' for a player in this match, else None."""
        side = self.side_of(player_id)
        if side is None:
            return None
        if self.result == RESULT_DRAW:
            return 'D'
        return 'W' if self.result == side else 'L'

    def no_show_counts(self) -> tuple[int, int]:
        """Count no-show penalties on each side (guests never count)."""
        def count(side: tuple[MatchPlayer, ...]) -> int:
            return sum(
                1 for p in side
                if not p.is_guest and self.penalties.get(p.id) == PENALTY_NO_SHOW
            )
        return count(self.team_a), count(self.team_b)


@dataclass(frozen=True)
class MatchState:
    """In-progress match between availability and the next reset."""
    phase: str = PHASE_AVAILABILITY
    teams: Teams | None = None
    manual_teams: Teams = field(default_factory=Teams)
    score_a: int = 0
    score_b: int = 0
    penalties: dict[str, str] = field(default_factory=dict)
    winner: str | None = None


@dataclass(frozen=True)
class LeagueState:
    """Complete application state owned by one session."""
    settings: LeagueSettings
    players: tuple[Player, ...] = ()
    guests: tuple[GuestPlayer, ...] = ()
    history: tuple[Match, ...] = ()  # newest first
    match: MatchState = field(default_factory=MatchState)

    @property
    def participants(self) -> list[Participant]:
        return [*self.players, *self.guests]

    def find_participant(self, participant_id: str) -> Participant | None:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def find_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def find_match(self, match_id: str) -> Match | None:
        for match in self.history:
            if match.id == match_id:
                return match
        return None

    def count_with_status(self, status: str) -> int:
        return sum(1 for p in self.participants if p.status == status)

    @property
    def players_in(self) -> list[Participant]:
        return [p for p in self.participants if p.status == STATUS_IN]

    @property
    def waitlist(self) -> list[Participant]:
        """Waiting participants ordered by queue time."""
        waiting = [p for p in self.participants if p.status == STATUS_WAITING]
        return sorted(waiting, key=lambda p: (p.waiting_timestamp is None, p.waiting_timestamp or 0))

