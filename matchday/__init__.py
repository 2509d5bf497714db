from .models import (
    GuestPlayer,
    LeagueState,
    Match,
    MatchPlayer,
    MatchRules,
    MatchState,
    Participant,
    Player,
    Teams,
)
from .schemas import LeagueSettings, BackupFile
from .errors import MatchdayError, PreconditionError, ImportRejected, StorageError
from .availability import AvailabilityChange, set_availability, promote_waitlist
from .roster import (
    add_player,
    update_player,
    delete_player,
    add_guest,
    remove_guest,
    median_points,
    seed_players,
)
from .draft import snake_draft, draft_teams, assign_player, confirm_manual_draft, cancel_draft
from .scoring import player_deltas, derive_form, match_point_changes
from .ledger import (
    new_league_state,
    set_penalty,
    set_scores,
    record_result,
    delete_match,
    reset_game,
    reset_league,
    update_settings,
)
from .standings import league_standings, availability_board, season_progress, match_history_view
from .validators import validate_state
from .storage import LocalStore
from .backup import export_backup, import_backup, read_backup, write_backup
from .session import LeagueSession, Notification

__all__ = [
    # Models
    'GuestPlayer',
    'LeagueState',
    'Match',
    'MatchPlayer',
    'MatchRules',
    'MatchState',
    'Participant',
    'Player',
    'Teams',
    'LeagueSettings',
    'BackupFile',
    # Errors
    'MatchdayError',
    'PreconditionError',
    'ImportRejected',
    'StorageError',
    # Availability and roster
    'AvailabilityChange',
    'set_availability',
    'promote_waitlist',
    'add_player',
    'update_player',
    'delete_player',
    'add_guest',
    'remove_guest',
    'median_points',
    'seed_players',
    # Draft
    'snake_draft',
    'draft_teams',
    'assign_player',
    'confirm_manual_draft',
    'cancel_draft',
    # Scoring and ledger
    'player_deltas',
    'derive_form',
    'match_point_changes',
    'new_league_state',
    'set_penalty',
    'set_scores',
    'record_result',
    'delete_match',
    'reset_game',
    'reset_league',
    'update_settings',
    # Views
    'league_standings',
    'availability_board',
    'season_progress',
    'match_history_view',
    'validate_state',
    # Persistence
    'LocalStore',
    'export_backup',
    'import_backup',
    'read_backup',
    'write_backup',
    'LeagueSession',
    'Notification',
]
