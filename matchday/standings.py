"""Read-only projections of the league state."""

from dataclasses import dataclass, field
from typing import Optional

from .constants import MAX_PLAYERS_IN, STATUS_IN, STATUS_OUT, STATUS_UNDECIDED
from .models import LeagueState, Match, Participant, Player
from .scoring import match_point_changes


@dataclass(frozen=True)
class StandingRow:
    rank: int
    player_id: str
    name: str
    points: int
    matches_played: int
    wins: int
    draws: int
    losses: int
    form: tuple[str, ...]
    late_count: int
    no_show_count: int
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class AvailabilityBoard:
    """The availability screen: confirmed, waitlist and the rest."""
    confirmed: tuple[Participant, ...]
    waiting: tuple[Participant, ...]
    others: tuple[Player, ...]
    capacity: int = MAX_PLAYERS_IN
    roster_in: int = 0
    guests_in: int = 0
    roster_waiting: int = 0
    guests_waiting: int = 0


@dataclass(frozen=True)
class SeasonProgress:
    played: int
    total: int

    @property
    def percentage(self) -> float:
        return (self.played / self.total) * 100 if self.total > 0 else 0.0

    @property
    def is_complete(self) -> bool:
        return self.played >= self.total


@dataclass(frozen=True)
class HistoryEntry:
    match: Match
    point_changes: dict[str, Optional[int]] = field(default_factory=dict)


def ranked_players(state: LeagueState) -> list[Player]:
    """Roster players by points, highest first; ties keep roster order."""
    return sorted(state.players, key=lambda p: p.points, reverse=True)


def league_standings(state: LeagueState) -> list[StandingRow]:
    """League table. Guests never appear."""
    return [
        StandingRow(
            rank=rank,
            player_id=p.id,
            name=p.name,
            points=p.points,
            matches_played=p.matches_played,
            wins=p.wins,
            draws=p.draws,
            losses=p.losses,
            form=tuple(p.form),
            late_count=p.late_count,
            no_show_count=p.no_show_count,
            photo_url=p.photo_url,
        )
        for rank, p in enumerate(ranked_players(state), start=1)
    ]


def availability_board(state: LeagueState) -> AvailabilityBoard:
    ranked = ranked_players(state)
    confirmed = [p for p in ranked if p.status == STATUS_IN]
    confirmed += [g for g in state.guests if g.status == STATUS_IN]
    waiting = state.waitlist
    return AvailabilityBoard(
        confirmed=tuple(confirmed),
        waiting=tuple(waiting),
        others=tuple(p for p in ranked if p.status in (STATUS_UNDECIDED, STATUS_OUT)),
        roster_in=sum(1 for p in confirmed if not p.is_guest),
        guests_in=sum(1 for p in confirmed if p.is_guest),
        roster_waiting=sum(1 for p in waiting if not p.is_guest),
        guests_waiting=sum(1 for p in waiting if p.is_guest),
    )


def season_progress(state: LeagueState) -> SeasonProgress:
    return SeasonProgress(played=len(state.history), total=state.settings.total_matches)


def match_history_view(state: LeagueState) -> list[HistoryEntry]:
    """Ledger entries, newest first, with each participant's point change."""
    return [
        HistoryEntry(match=m, point_changes=match_point_changes(m, state.settings))
        for m in state.history
    ]
