"""Full-state backup export and import."""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import merge_settings
from .errors import ImportRejected
from .models import LeagueState, MatchState
from .schemas import BackupFile, GuestRecord, MatchRecord, PlayerRecord
from .storage import read_json, write_json
from .validators import validate_availability, validate_match

logger = logging.getLogger('matchday.backup')


def export_backup(state: LeagueState) -> dict[str, Any]:
    """
    Serialize the league to a backup document.

    Returns:
        Dict with ``players``, ``guestPlayers``, ``matchHistory`` and
        ``settings`` in their on-disk (camelCase) form
    """
    document = BackupFile(
        players=[PlayerRecord.from_model(p) for p in state.players],
        guest_players=[GuestRecord.from_model(g) for g in state.guests],
        match_history=[MatchRecord.from_model(m) for m in state.history],
        settings=state.settings,
    )
    return document.model_dump(by_alias=True)


def write_backup(state: LeagueState, path: Path | str) -> Path:
    """Export the league to a JSON file and return its path."""
    path = Path(path)
    write_json(path, export_backup(state))
    logger.info(f'Backup written to {path}')
    return path


def parse_backup(data: Any) -> BackupFile:
    """
    Validate a backup document.

    Raises:
        ImportRejected: If the document is not a complete backup
    """
    if not isinstance(data, dict):
        raise ImportRejected('Backup must be a JSON object')
    try:
        return BackupFile.model_validate(data)
    except ValidationError as e:
        raise ImportRejected(f'Invalid backup file:\n{e}') from e


def read_backup(path: Path | str) -> BackupFile:
    """
    Load and validate a backup file.

    Raises:
        ImportRejected: If the file cannot be read, is malformed, or is
            incomplete
    """
    try:
        data = read_json(path)
    except FileNotFoundError as e:
        raise ImportRejected(str(e)) from e
    except json.JSONDecodeError as e:
        raise ImportRejected(f'Backup is not valid JSON: {e.msg}') from e
    except UnicodeDecodeError as e:
        raise ImportRejected(f'Backup is not UTF-8 text: {e.reason}') from e
    except OSError as e:
        raise ImportRejected(f'Cannot read backup {path}: {e}') from e
    return parse_backup(data)


def import_backup(state: LeagueState, data: Any) -> LeagueState:
    """
    Replace the league with the contents of a backup.

    Players, guests, history and settings are replaced wholesale; the
    in-progress match is reset to availability. Settings missing from the
    backup fall back to the defaults.

    Args:
        state: Current state (discarded on success)
        data: Parsed backup document or a BackupFile

    Returns:
        New league state

    Raises:
        ImportRejected: If the backup is invalid; ``state`` is left untouched
    """
    document = data if isinstance(data, BackupFile) else parse_backup(data)

    try:
        settings = merge_settings(document.settings.model_dump(by_alias=True))
    except ValidationError as e:
        raise ImportRejected(f'Invalid settings in backup:\n{e}') from e

    imported = replace(
        state,
        settings=settings,
        players=tuple(r.to_model() for r in document.players),
        guests=tuple(r.to_model() for r in document.guest_players),
        history=tuple(r.to_model() for r in document.match_history),
        match=MatchState(),
    )

    errors = validate_availability(imported)
    for match in imported.history:
        errors.extend(validate_match(match))
    match_ids = [m.id for m in imported.history]
    if len(match_ids) != len(set(match_ids)):
        errors.append('Duplicate match ids in history')
    if errors:
        raise ImportRejected('Backup rejected: ' + '; '.join(errors))

    logger.info(
        f'Backup imported: {len(imported.players)} players, '
        f'{len(imported.guests)} guests, {len(imported.history)} matches'
    )
    return imported
