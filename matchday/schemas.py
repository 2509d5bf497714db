"""Pydantic schemas for persisted JSON data.

Every key in the local store and the backup document is validated through
these models. Field names are camelCase on the wire and snake_case in Python.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .constants import (
    FORM_LENGTH,
    PENALTIES,
    PHASES,
    RESULTS,
    STATUS_OUT,
    STATUS_WAITING,
    STATUSES,
)
from .models import GuestPlayer, Match, MatchPlayer, MatchRules, Player, Teams


class LeagueSettings(BaseModel):
    """League configuration settings."""

    league_name: str = Field(default='Hirafus League', min_length=1)
    location: str = 'City Arena'
    total_matches: int = Field(default=38, ge=0)
    late_penalty: int = Field(default=2, ge=0)
    no_show_penalty: int = Field(default=3, ge=0)
    bonus_point: int = Field(default=1, ge=0)

    def rules(self) -> MatchRules:
        """Snapshot the point rules for a ledger entry."""
        return MatchRules(
            late_penalty=self.late_penalty,
            no_show_penalty=self.no_show_penalty,
            bonus_point=self.bonus_point,
        )

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'
        frozen = True


class PlayerRecord(BaseModel):
    """Roster player as stored on disk."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    points: int = 0
    status: str = 'undecided'
    matches_played: int = Field(default=0, ge=0)
    wins: int = Field(default=0, ge=0)
    draws: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    form: list[str] = Field(default_factory=list)
    late_count: int = Field(default=0, ge=0)
    no_show_count: int = Field(default=0, ge=0)
    waiting_timestamp: int | None = None
    photo_url: str | None = Field(default=None, alias='photoURL')
    is_guest: bool = False

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """Ensure status is a known availability state."""
        if v not in STATUSES:
            raise ValueError(f'Invalid status: {v}')
        return v

    @field_validator('form')
    @classmethod
    def validate_form(cls, v):
        """Ensure form holds only result letters, most recent first."""
        for letter in v:
            if letter not in ('W', 'D', 'L'):
                raise ValueError(f'Invalid form entry: {letter}')
        return v[:FORM_LENGTH]

    @model_validator(mode='after')
    def check_waiting_timestamp(self):
        """A waiting player must carry a queue timestamp."""
        if self.status == STATUS_WAITING and self.waiting_timestamp is None:
            raise ValueError(f'Waiting player {self.id} has no waitingTimestamp')
        if self.status != STATUS_WAITING:
            self.waiting_timestamp = None
        return self

    def to_model(self) -> Player:
        return Player(
            id=self.id,
            name=self.name,
            points=self.points,
            status=self.status,
            matches_played=self.matches_played,
            wins=self.wins,
            draws=self.draws,
            losses=self.losses,
            form=list(self.form),
            late_count=self.late_count,
            no_show_count=self.no_show_count,
            waiting_timestamp=self.waiting_timestamp,
            photo_url=self.photo_url,
        )

    @classmethod
    def from_model(cls, player: Player) -> 'PlayerRecord':
        return cls(
            id=player.id,
            name=player.name,
            points=player.points,
            status=player.status,
            matches_played=player.matches_played,
            wins=player.wins,
            draws=player.draws,
            losses=player.losses,
            form=list(player.form),
            late_count=player.late_count,
            no_show_count=player.no_show_count,
            waiting_timestamp=player.waiting_timestamp,
            photo_url=player.photo_url,
        )

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'


class GuestRecord(BaseModel):
    """Guest participant as stored on disk."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    points: int = 0
    status: str = 'in'
    waiting_timestamp: int | None = None
    photo_url: str | None = Field(default=None, alias='photoURL')
    is_guest: bool = True

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """Guests are removed rather than stored as out."""
        if v not in STATUSES or v == STATUS_OUT:
            raise ValueError(f'Invalid guest status: {v}')
        return v

    def to_model(self) -> GuestPlayer:
        return GuestPlayer(
            id=self.id,
            name=self.name,
            points=self.points,
            status=self.status,
            waiting_timestamp=self.waiting_timestamp if self.status == STATUS_WAITING else None,
            photo_url=self.photo_url,
        )

    @classmethod
    def from_model(cls, guest: GuestPlayer) -> 'GuestRecord':
        return cls(
            id=guest.id,
            name=guest.name,
            points=guest.points,
            status=guest.status,
            waiting_timestamp=guest.waiting_timestamp,
            photo_url=guest.photo_url,
        )

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'


class MatchPlayerRecord(BaseModel):
    """Participant snapshot inside a ledger entry."""

    id: str
    name: str
    photo_url: str | None = Field(default=None, alias='photoURL')
    is_guest: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'


class MatchTeamsRecord(BaseModel):
    team_a: list[MatchPlayerRecord]
    team_b: list[MatchPlayerRecord]

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'forbid'


class MatchRulesRecord(BaseModel):
    late_penalty: int = Field(..., ge=0)
    no_show_penalty: int = Field(..., ge=0)
    bonus_point: int = Field(..., ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'forbid'


class MatchRecord(BaseModel):
    """Completed match in the ledger."""

    id: str = Field(..., min_length=1)
    date: str
    teams: MatchTeamsRecord
    result: str
    score_a: int = Field(..., ge=0)
    score_b: int = Field(..., ge=0)
    penalties: dict[str, str | None] = Field(default_factory=dict)
    rules: MatchRulesRecord | None = None

    @field_validator('result')
    @classmethod
    def validate_result(cls, v):
        """Ensure result is A, B or Draw."""
        if v not in RESULTS:
            raise ValueError(f'Invalid result: {v}')
        return v

    @field_validator('penalties')
    @classmethod
    def validate_penalties(cls, v):
        """Drop empty entries and reject unknown penalty types."""
        cleaned = {}
        for player_id, penalty in v.items():
            if penalty is None:
                continue
            if penalty not in PENALTIES:
                raise ValueError(f'Invalid penalty for {player_id}: {penalty}')
            cleaned[player_id] = penalty
        return cleaned

    def to_model(self) -> Match:
        def snapshot(records: list[MatchPlayerRecord]) -> tuple[MatchPlayer, ...]:
            return tuple(
                MatchPlayer(id=r.id, name=r.name, photo_url=r.photo_url, is_guest=r.is_guest)
                for r in records
            )

        rules = None
        if self.rules is not None:
            rules = MatchRules(
                late_penalty=self.rules.late_penalty,
                no_show_penalty=self.rules.no_show_penalty,
                bonus_point=self.rules.bonus_point,
            )
        return Match(
            id=self.id,
            date=self.date,
            team_a=snapshot(self.teams.team_a),
            team_b=snapshot(self.teams.team_b),
            result=self.result,
            score_a=self.score_a,
            score_b=self.score_b,
            penalties=dict(self.penalties),
            rules=rules,
        )

    @classmethod
    def from_model(cls, match: Match) -> 'MatchRecord':
        def records(side: tuple[MatchPlayer, ...]) -> list[MatchPlayerRecord]:
            return [
                MatchPlayerRecord(id=p.id, name=p.name, photo_url=p.photo_url, is_guest=p.is_guest)
                for p in side
            ]

        rules = None
        if match.rules is not None:
            rules = MatchRulesRecord(
                late_penalty=match.rules.late_penalty,
                no_show_penalty=match.rules.no_show_penalty,
                bonus_point=match.rules.bonus_point,
            )
        return cls(
            id=match.id,
            date=match.date,
            teams=MatchTeamsRecord(team_a=records(match.team_a), team_b=records(match.team_b)),
            result=match.result,
            score_a=match.score_a,
            score_b=match.score_b,
            penalties=dict(match.penalties),
            rules=rules,
        )

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'


class TeamsRecord(BaseModel):
    """In-progress team assignment, stored as participant ids."""

    team_a: list[str] = Field(default_factory=list)
    team_b: list[str] = Field(default_factory=list)

    def to_model(self) -> Teams:
        return Teams(team_a=tuple(self.team_a), team_b=tuple(self.team_b))

    @classmethod
    def from_model(cls, teams: Teams) -> 'TeamsRecord':
        return cls(team_a=list(teams.team_a), team_b=list(teams.team_b))

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'forbid'


class ScoresRecord(BaseModel):
    team_a: int = Field(default=0, ge=0)
    team_b: int = Field(default=0, ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'forbid'


class PhaseRecord(BaseModel):
    phase: str

    @field_validator('phase')
    @classmethod
    def validate_phase(cls, v):
        """Ensure phase is one of the match phases."""
        if v not in PHASES:
            raise ValueError(f'Invalid phase: {v}')
        return v


class BackupFile(BaseModel):
    """Complete full-state export document."""

    players: list[PlayerRecord]
    guest_players: list[GuestRecord] = Field(default_factory=list)
    match_history: list[MatchRecord]
    settings: LeagueSettings

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'
