"""League session: owns the state, applies operations, persists every change."""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Optional

from .availability import APPLIED, LOCKED, AvailabilityChange, current_timestamp, set_availability
from .backup import export_backup, import_backup, read_backup, write_backup
from .config import default_settings, merge_settings
from .constants import (
    KEY_GUESTS,
    KEY_HISTORY,
    KEY_PENALTIES,
    KEY_PHASE,
    KEY_PLAYERS,
    KEY_SCORES,
    KEY_SETTINGS,
    KEY_TEAMS,
    IN_PROGRESS_KEYS,
    PENALTIES,
    PHASE_AVAILABILITY,
    PHASE_RESULTS,
    PHASE_TEAMS,
    RESULT_A,
    RESULT_B,
    STATUS_UNDECIDED,
)
from .draft import assign_player, cancel_draft, confirm_manual_draft, draft_teams
from .errors import ImportRejected, StorageError
from .ledger import (
    delete_match,
    record_result,
    reset_game,
    reset_league,
    set_penalty,
    set_scores,
    update_settings,
)
from .logging_config import setup_logging
from .models import LeagueState, MatchState, Teams
from .roster import add_guest, add_player, delete_player, remove_guest, seed_players, update_player
from .schemas import GuestRecord, MatchRecord, PhaseRecord, PlayerRecord, ScoresRecord, TeamsRecord
from .scoring import result_for_scores
from .standings import (
    availability_board,
    league_standings,
    match_history_view,
    season_progress,
)
from .storage import LocalStore
from .validators import validate_availability, validate_state

logger = logging.getLogger('matchday.session')

INFO = 'info'
WARNING = 'warning'
ERROR = 'error'


@dataclass(frozen=True)
class Notification:
    """A user-visible message about something the session did or could not do."""
    level: str
    title: str
    message: str


def _records(raw: Any, schema) -> list:
    if not isinstance(raw, list):
        raise TypeError(f'expected a list, got {type(raw).__name__}')
    return [schema.model_validate(item).to_model() for item in raw]


def _parse_penalties(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        raise TypeError(f'expected an object, got {type(raw).__name__}')
    penalties = {}
    for player_id, penalty in raw.items():
        if penalty is None:
            continue
        if penalty not in PENALTIES:
            raise ValueError(f'Invalid penalty for {player_id}: {penalty}')
        penalties[player_id] = penalty
    return penalties


def _reset_availability(state: LeagueState) -> LeagueState:
    """Everyone undecided, no queue, no guests; repeated player ids keep the first record."""
    seen = set()
    players = []
    for player in state.players:
        if player.id in seen:
            continue
        seen.add(player.id)
        players.append(replace(player, status=STATUS_UNDECIDED, waiting_timestamp=None))
    return replace(state, players=tuple(players), guests=(), match=MatchState())


class LeagueSession:
    """
    Controller for one league on one device.

    Holds the current LeagueState, runs every operation through the pure
    functions in roster/availability/draft/ledger, and writes each store
    key after every successful change. Precondition failures propagate as
    PreconditionError and leave the state untouched. Persistence failures
    never roll back the in-memory state; they are logged and reported in
    ``notifications``.

    Example:
        session = LeagueSession('data/league')
        session.set_availability('p1', 'in')
        for row in session.standings():
            print(row.rank, row.name, row.points)
    """

    def __init__(
        self,
        store: LocalStore | Path | str,
        state: Optional[LeagueState] = None,
        clock: Optional[Callable[[], int]] = None,
        log_dir: Optional[Path | str] = None,
    ):
        self.store = store if isinstance(store, LocalStore) else LocalStore(store)
        if log_dir is not None:
            setup_logging(Path(log_dir), log_to_console=False)
        self.clock = clock or current_timestamp
        self.notifications: list[Notification] = []
        self.state = state if state is not None else self._load()

    def _notify(self, level: str, title: str, message: str) -> None:
        self.notifications.append(Notification(level, title, message))

    def drain_notifications(self) -> list[Notification]:
        """Return and clear pending notifications."""
        pending, self.notifications = self.notifications, []
        return pending

    def _load_key(self, key: str, parse: Callable[[Any], Any], default: Any) -> Any:
        try:
            raw = self.store.load(key)
        except StorageError as e:
            logger.error(f'Could not load {e}')
            self._notify(ERROR, 'Error Loading Data', f'Saved {key} could not be read and was reset.')
            return default
        if raw is None:
            return default
        try:
            return parse(raw)
        except (TypeError, ValueError) as e:
            logger.error(f'Invalid data under {key}: {e}')
            self._notify(ERROR, 'Error Loading Data', f'Saved {key} is corrupted and was reset.')
            return default

    def _load(self) -> LeagueState:
        players = self._load_key(KEY_PLAYERS, lambda raw: tuple(_records(raw, PlayerRecord)), None)
        if players is None:
            players = seed_players()
        guests = self._load_key(KEY_GUESTS, lambda raw: tuple(_records(raw, GuestRecord)), ())
        history = self._load_key(KEY_HISTORY, lambda raw: tuple(_records(raw, MatchRecord)), ())
        settings = self._load_key(KEY_SETTINGS, merge_settings, None) or default_settings()

        state = LeagueState(settings=settings, players=players, guests=guests, history=history)
        availability_errors = validate_availability(state)
        if availability_errors:
            for message in availability_errors:
                logger.error(f'Loaded availability: {message}')
            state = _reset_availability(state)
            self._notify(
                ERROR,
                'Availability Reset',
                'Saved availability was inconsistent. Everyone is undecided again.',
            )
        else:
            state = replace(state, match=self._load_match(state))

        errors, warnings = validate_state(state)
        for message in errors:
            logger.warning(f'Loaded state: {message}')
        for message in warnings:
            logger.debug(f'Loaded state: {message}')
        logger.info(
            f'Loaded {len(state.players)} players, {len(state.guests)} guests, {len(history)} matches '
            f'({state.match.phase} phase)'
        )
        return state

    def _load_match(self, state: LeagueState) -> MatchState:
        """Restore an in-progress match, falling back to availability if it no longer fits."""
        phase = self._load_key(
            KEY_PHASE, lambda raw: PhaseRecord(phase=raw).phase, PHASE_AVAILABILITY
        )
        if phase == PHASE_AVAILABILITY:
            return MatchState()

        teams = self._load_key(KEY_TEAMS, lambda raw: TeamsRecord.model_validate(raw).to_model(), None)
        scores = self._load_key(KEY_SCORES, ScoresRecord.model_validate, ScoresRecord())
        penalties = self._load_key(KEY_PENALTIES, _parse_penalties, {})

        if phase not in (PHASE_TEAMS, PHASE_RESULTS):
            # Manual assignments are not kept across reloads
            return MatchState(phase=phase)

        known = {p.id for p in state.participants}
        if teams is None or not teams.all_ids() or not set(teams.all_ids()) <= known:
            logger.warning(f'Saved {phase} phase has no usable teams; returning to availability')
            self._notify(WARNING, 'Match Not Restored', 'The saved match could not be restored.')
            return MatchState()

        return MatchState(
            phase=phase,
            teams=teams,
            score_a=scores.team_a,
            score_b=scores.team_b,
            penalties=penalties,
            winner=result_for_scores(scores.team_a, scores.team_b) if phase == PHASE_RESULTS else None,
        )

    def _payloads(self) -> dict[str, Any]:
        state = self.state
        match = state.match
        return {
            KEY_PLAYERS: [PlayerRecord.from_model(p).model_dump(by_alias=True) for p in state.players],
            KEY_GUESTS: [GuestRecord.from_model(g).model_dump(by_alias=True) for g in state.guests],
            KEY_HISTORY: [MatchRecord.from_model(m).model_dump(by_alias=True) for m in state.history],
            KEY_SETTINGS: state.settings.model_dump(by_alias=True),
            KEY_PHASE: match.phase,
            KEY_TEAMS: TeamsRecord.from_model(match.teams).model_dump(by_alias=True) if match.teams else None,
            KEY_SCORES: ScoresRecord(team_a=match.score_a, team_b=match.score_b).model_dump(by_alias=True),
            KEY_PENALTIES: dict(match.penalties),
        }

    def _persist(self) -> None:
        """Write every key; a failing key is reported and the rest still saved."""
        failed = []
        for key, payload in self._payloads().items():
            try:
                self.store.save(key, payload)
            except StorageError as e:
                logger.warning(f'Save failed for {e}')
                failed.append(key)
        if failed:
            self._notify(
                WARNING,
                'Save Failed',
                f'Could not save {", ".join(failed)}. Changes are kept until the app closes.',
            )

    def _commit(self, state: LeagueState, title: Optional[str] = None, message: str = '') -> LeagueState:
        self.state = state
        self._persist()
        if title:
            self._notify(INFO, title, message)
        return state

    def set_availability(self, participant_id: str, status: str) -> AvailabilityChange:
        change = set_availability(self.state, participant_id, status, now=self.clock())
        if change.outcome == APPLIED:
            self._commit(change.state)
        elif change.outcome == LOCKED:
            self._notify(WARNING, 'Availability Locked', 'Availability can only change before the draft.')
        return change

    def add_player(self, name: str, points: int = 0, **fields: Any) -> LeagueState:
        state = add_player(self.state, name, points, **fields)
        player = state.players[-1]
        return self._commit(state, 'Player Added', f'{player.name} has joined the roster.')

    def update_player(self, player_id: str, **changes: Any) -> LeagueState:
        state = update_player(self.state, player_id, **changes)
        name = state.find_player(player_id).name
        return self._commit(state, 'Player Updated', f"{name}'s details have been saved.")

    def delete_player(self, player_id: str) -> LeagueState:
        player = self.state.find_player(player_id)
        state = delete_player(self.state, player_id)
        return self._commit(state, 'Player Removed', f'{player.name} has been removed.')

    def add_guest(self) -> LeagueState:
        return self._commit(add_guest(self.state, now=self.clock()))

    def remove_guest(self, guest_id: str) -> LeagueState:
        return self._commit(remove_guest(self.state, guest_id))

    def draft_teams(self, method: str) -> LeagueState:
        state = draft_teams(self.state, method)
        if state.match.phase == PHASE_TEAMS:
            return self._commit(state, 'Teams Drafted by Points!', '7 vs 7 teams have been selected.')
        return self._commit(state, 'Manual Draft', 'Assign players to Team A or Team B.')

    def assign_player(self, participant_id: str, team: Optional[str]) -> LeagueState:
        return self._commit(assign_player(self.state, participant_id, team))

    def confirm_manual_draft(self) -> LeagueState:
        state = confirm_manual_draft(self.state)
        return self._commit(
            state, 'Manual Teams Confirmed!', 'The 7 vs 7 teams you selected are locked in.'
        )

    def cancel_draft(self) -> LeagueState:
        state = cancel_draft(self.state)
        return self._commit(state, 'Draft Cancelled', 'You have returned to the availability screen.')

    def set_penalty(self, player_id: str, penalty: Optional[str]) -> LeagueState:
        return self._commit(set_penalty(self.state, player_id, penalty))

    def set_scores(self, score_a: int, score_b: int) -> LeagueState:
        return self._commit(set_scores(self.state, score_a, score_b))

    def record_result(self) -> LeagueState:
        state = record_result(self.state)
        result = state.match.winner
        if result == RESULT_A:
            message = 'Team A wins!'
        elif result == RESULT_B:
            message = 'Team B wins!'
        else:
            message = "It's a draw!"
        return self._commit(state, 'Game Over!', message)

    def delete_match(self, match_id: str) -> LeagueState:
        state = delete_match(self.state, match_id)
        return self._commit(
            state,
            'Match Deleted',
            'The match has been removed and player stats have been reverted.',
        )

    def reset_game(self) -> LeagueState:
        state = self._commit(reset_game(self.state))
        self._remove_in_progress()
        self._notify(INFO, 'New Game Started', 'Player availability has been reset. Good luck!')
        return state

    def reset_league(self) -> LeagueState:
        state = self._commit(reset_league(self.state))
        self._remove_in_progress()
        self._notify(INFO, 'League Reset', 'All statistics and match history have been cleared.')
        return state

    def _remove_in_progress(self) -> None:
        for key in IN_PROGRESS_KEYS:
            try:
                self.store.remove(key)
            except StorageError as e:
                logger.warning(f'Remove failed for {e}')

    def update_settings(self, **changes: Any) -> LeagueState:
        state = update_settings(self.state, **changes)
        return self._commit(state, 'Settings Saved', 'League settings have been updated.')

    def export_backup(self) -> dict[str, Any]:
        return export_backup(self.state)

    def write_backup(self, path: Path | str) -> Optional[Path]:
        """Write a backup file; failures are reported, not raised."""
        try:
            written = write_backup(self.state, path)
        except (TypeError, OSError) as e:
            logger.warning(f'Export failed: {e}')
            self._notify(ERROR, 'Export Failed', 'Could not export your data.')
            return None
        self._notify(INFO, 'Data Exported', 'Your league data has been saved to a backup file.')
        return written

    def import_backup(self, source: dict[str, Any] | Path | str) -> bool:
        """
        Replace the league with a backup document or file.

        Returns:
            True if the backup was imported; False if it was rejected, in
            which case the current state is unchanged
        """
        try:
            document = source if isinstance(source, dict) else read_backup(source)
            state = import_backup(self.state, document)
        except ImportRejected as e:
            logger.warning(f'Import rejected: {e}')
            self._notify(ERROR, 'Import Failed', 'The selected file is not a valid backup.')
            return False
        self._commit(state, 'Data Imported', 'Your league data has been successfully restored.')
        return True

    def standings(self):
        return league_standings(self.state)

    def availability(self):
        return availability_board(self.state)

    def progress(self):
        return season_progress(self.state)

    def history(self):
        return match_history_view(self.state)

    def manual_teams(self) -> Teams:
        return self.state.match.manual_teams
