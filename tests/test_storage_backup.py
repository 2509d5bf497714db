"""Tests for the local store, configuration, and backup export/import."""

import json
import logging
from dataclasses import replace
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from matchday.backup import export_backup, import_backup, read_backup, write_backup
from matchday.config import get_config, merge_settings
from matchday.errors import ImportRejected, StorageError
from matchday.ledger import record_result, set_penalty, set_scores
from matchday.logging_config import get_logger, setup_logging
from matchday.roster import add_guest
from matchday.schemas import PlayerRecord
from matchday.storage import LocalStore, read_json, write_json


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / 'store')


@pytest.fixture
def played(drafted):
    """A league with one recorded match including penalties."""
    state = set_scores(drafted, 3, 1)
    state = set_penalty(state, 'p13', 'no-show')
    state = set_penalty(state, 'p2', 'late')
    return record_result(state, match_id='m1', date='2026-03-01T18:00:00+00:00')


class TestJsonFiles:
    """Tests for read_json / write_json."""

    def test_write_then_read(self, tmp_path):
        """Test that data written to disk reads back unchanged."""
        path = tmp_path / 'nested' / 'data.json'
        write_json(path, {'name': 'Léo', 'points': [1, 2]})
        assert read_json(path) == {'name': 'Léo', 'points': [1, 2]}

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_json(tmp_path / 'missing.json')

    def test_malformed_json(self, tmp_path):
        """Test that malformed JSON raises JSONDecodeError."""
        path = tmp_path / 'bad.json'
        path.write_text('{not json', encoding='utf-8')
        with pytest.raises(json.JSONDecodeError):
            read_json(path)

    def test_schema_failure(self, tmp_path):
        """Test that schema validation failures raise ValueError."""
        path = tmp_path / 'player.json'
        path.write_text(json.dumps({'id': 'p1', 'name': 'Ann', 'status': 'maybe'}))
        with pytest.raises(ValueError, match='Schema validation failed'):
            read_json(path, schema=PlayerRecord)

    def test_unserializable_keeps_old_file(self, tmp_path):
        """Test that a bad payload leaves the previous file intact."""
        path = tmp_path / 'data.json'
        write_json(path, {'ok': True})
        with pytest.raises(TypeError):
            write_json(path, {'bad': object()})
        assert read_json(path) == {'ok': True}


class TestLocalStore:
    """Tests for the key/value store."""

    def test_missing_key(self, store):
        """Test that a missing key loads as None."""
        assert store.load('players') is None
        assert store.load_safe('players', default=[]) == []

    def test_save_and_load(self, store):
        """Test that each key is stored in its own file."""
        store.save('settings', {'leagueName': 'X'})
        assert store.path_for('settings').name == 'settings.json'
        assert store.load('settings') == {'leagueName': 'X'}

    def test_corrupt_key(self, store):
        """Test that corrupt JSON raises StorageError naming the key."""
        store.root.mkdir(parents=True)
        store.path_for('players').write_text('[{', encoding='utf-8')
        with pytest.raises(StorageError) as exc_info:
            store.load('players')
        assert exc_info.value.key == 'players'
        assert store.load_safe('players', default='fallback') == 'fallback'

    def test_non_utf8_key(self, store):
        """Test that bytes that are not UTF-8 raise StorageError naming the key."""
        store.root.mkdir(parents=True)
        store.path_for('players').write_bytes(b'\xff\xfe\x00garbage')
        with pytest.raises(StorageError, match='not UTF-8') as exc_info:
            store.load('players')
        assert exc_info.value.key == 'players'
        assert store.load_safe('players', default=[]) == []

    def test_save_failure_wrapped(self, store):
        """Test that OS errors on save become StorageError."""
        with patch('matchday.storage.write_json', side_effect=OSError('disk full')):
            with pytest.raises(StorageError, match='disk full'):
                store.save('players', [])

    def test_remove(self, store):
        """Test that removing a key deletes its file and tolerates absence."""
        store.save('teams', None)
        store.remove('teams')
        assert not store.exists('teams')
        store.remove('teams')


class TestConfig:
    """Tests for default settings."""

    def test_packaged_defaults(self):
        """Test the packaged default settings."""
        settings = get_config()
        assert settings.league_name == 'Hirafus League'
        assert settings.location == 'City Arena'
        assert settings.total_matches == 38
        assert (settings.late_penalty, settings.no_show_penalty, settings.bonus_point) == (2, 3, 1)

    def test_cached(self):
        """Test that the defaults are loaded once."""
        assert get_config() is get_config()

    def test_merge_fills_missing_keys(self):
        """Test that older settings without newer keys still load."""
        settings = merge_settings({'leagueName': 'Old League', 'latePenalty': 1})
        assert settings.league_name == 'Old League'
        assert settings.late_penalty == 1
        assert settings.bonus_point == 1

    def test_merge_rejects_invalid(self):
        """Test that invalid values fail validation."""
        with pytest.raises(ValidationError):
            merge_settings({'bonusPoint': -2})


class TestExport:
    """Tests for backup export."""

    def test_document_shape(self, played):
        """Test the top-level keys and camelCase field names."""
        document = export_backup(played)
        assert set(document) == {'players', 'guestPlayers', 'matchHistory', 'settings'}
        player = document['players'][0]
        assert {'matchesPlayed', 'lateCount', 'noShowCount', 'waitingTimestamp', 'photoURL'} <= set(player)
        match = document['matchHistory'][0]
        assert match['scoreA'] == 3
        assert match['teams']['teamA'][0]['isGuest'] is False
        assert match['penalties'] == {'p13': 'no-show', 'p2': 'late'}
        assert document['settings']['noShowPenalty'] == 3

    def test_round_trip(self, played):
        """Test that export then import reproduces roster, ledger and settings."""
        restored = import_backup(played, json.loads(json.dumps(export_backup(played))))
        assert restored.players == played.players
        assert restored.history == played.history
        assert restored.settings == played.settings

    def test_write_and_read_file(self, played, tmp_path):
        """Test that a backup file can be read back."""
        path = write_backup(played, tmp_path / 'backup.json')
        document = read_backup(path)
        assert len(document.players) == 16
        assert document.match_history[0].id == 'm1'


class TestImport:
    """Tests for backup import."""

    def test_import_resets_match(self, played):
        """Test that import always returns to the availability phase."""
        state = import_backup(played, export_backup(played))
        assert state.match.phase == 'availability'
        assert state.match.teams is None

    def test_guests_optional(self, league):
        """Test that backups without guestPlayers are accepted."""
        document = export_backup(add_guest(league, now=1))
        del document['guestPlayers']
        state = import_backup(league, document)
        assert state.guests == ()

    @pytest.mark.parametrize('missing', ['players', 'matchHistory', 'settings'])
    def test_required_keys(self, league, missing):
        """Test that each required key must be present."""
        document = export_backup(league)
        del document[missing]
        with pytest.raises(ImportRejected):
            import_backup(league, document)

    def test_not_an_object(self, league):
        """Test that non-object documents are rejected."""
        with pytest.raises(ImportRejected):
            import_backup(league, ['players'])

    def test_inconsistent_result_rejected(self, played):
        """Test that ledger entries whose result contradicts the score are rejected."""
        document = export_backup(played)
        document['matchHistory'][0]['result'] = 'B'
        with pytest.raises(ImportRejected, match='does not match score'):
            import_backup(played, document)

    def test_over_capacity_rejected(self, league):
        """Test that more than 14 'in' players are rejected."""
        everyone_in = replace(
            league, players=tuple(replace(p, status='in') for p in league.players)
        )
        with pytest.raises(ImportRejected, match='max 14'):
            import_backup(league, export_backup(everyone_in))

    def test_partial_settings_merged(self, league):
        """Test that settings missing keys fall back to defaults."""
        document = export_backup(league)
        document['settings'] = {'leagueName': 'Imported'}
        state = import_backup(league, document)
        assert state.settings.league_name == 'Imported'
        assert state.settings.total_matches == 38

    def test_read_backup_bad_json(self, tmp_path):
        """Test that unreadable files are rejected."""
        path = tmp_path / 'backup.json'
        path.write_text('not json', encoding='utf-8')
        with pytest.raises(ImportRejected):
            read_backup(path)
        with pytest.raises(ImportRejected):
            read_backup(tmp_path / 'missing.json')

    def test_read_backup_not_utf8(self, tmp_path):
        """Test that a binary file is rejected rather than raising a decode error."""
        path = tmp_path / 'backup.json'
        path.write_bytes(b'\xff\xfe{}')
        with pytest.raises(ImportRejected, match='not UTF-8'):
            read_backup(path)

    def test_read_backup_directory(self, tmp_path):
        """Test that a directory path is rejected as unreadable."""
        with pytest.raises(ImportRejected, match='Cannot read backup'):
            read_backup(tmp_path)


class TestLogging:
    """Tests for logging setup."""

    def test_file_and_console_handlers(self, tmp_path):
        """Test that setup installs one file and one console handler."""
        logger = setup_logging(log_dir=tmp_path / 'logs', level=logging.DEBUG)
        try:
            assert len(logger.handlers) == 2
            get_logger('ledger').info('Match m1 recorded')
            for handler in logger.handlers:
                handler.flush()
            log_files = list((tmp_path / 'logs').glob('matchday_*.log'))
            assert len(log_files) == 1
            assert 'matchday.ledger - INFO' in log_files[0].read_text(encoding='utf-8')
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers = []

    def test_repeat_setup_does_not_duplicate(self):
        """Test that calling setup twice keeps a single handler."""
        setup_logging(log_to_file=False)
        logger = setup_logging(log_to_file=False)
        assert len(logger.handlers) == 1
        logger.handlers = []

    def test_get_logger_namespace(self):
        """Test that short names are placed under the matchday logger."""
        assert get_logger('storage').name == 'matchday.storage'
        assert get_logger('matchday.session').name == 'matchday.session'
        assert get_logger().name == 'matchday'
