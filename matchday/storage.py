"""Local key/value JSON store and file helpers."""

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import StorageError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('matchday.storage')


def read_json(
    path: Path | str,
    schema: type[T] | None = None,
) -> Any | T:
    """
    Read a JSON file with optional schema validation.

    Args:
        path: Path to JSON file (str or Path object)
        schema: Optional Pydantic model to validate against

    Returns:
        Parsed JSON (validated if schema provided)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        ValueError: If schema validation fails
    """
    path = Path(path)

    logger.debug(f'Loading JSON from: {path}')

    if not path.exists():
        raise FileNotFoundError(f'File not found: {path}')

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
        raise json.JSONDecodeError(f'Invalid JSON in {path}: {e.msg}', e.doc, e.pos) from e

    if schema:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.error(f'Schema validation failed for {path}: {e}')
            raise ValueError(f'Schema validation failed for {path}:\n{e}') from e

    return data


def write_json(path: Path | str, data: Any, indent: int = 2) -> None:
    """
    Write data as a JSON file, creating parent directories.

    Pydantic models are dumped with their camelCase aliases.

    Raises:
        TypeError: If data is not JSON-serializable
        OSError: If file cannot be written
    """
    path = Path(path)

    logger.debug(f'Saving JSON to: {path}')
    path.parent.mkdir(parents=True, exist_ok=True)

    json_data = data.model_dump(by_alias=True) if isinstance(data, BaseModel) else data

    # Serialize before the existing file is truncated
    try:
        text = json.dumps(json_data, indent=indent, ensure_ascii=False)
    except TypeError as e:
        raise TypeError(f'Data is not JSON-serializable: {e}') from e

    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)


class LocalStore:
    """
    Single-device key/value store, one ``<key>.json`` file per key.

    Each key is loaded and saved independently so a corrupt key never
    prevents the others from loading.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f'{key}.json'

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def load(self, key: str) -> Any | None:
        """
        Load the raw JSON stored under ``key``.

        Returns:
            Parsed JSON, or None if nothing is stored under ``key``

        Raises:
            StorageError: If the file cannot be read, is not UTF-8, or holds
                malformed JSON
        """
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return read_json(path)
        except json.JSONDecodeError as e:
            raise StorageError(key, f'corrupt JSON ({e.msg})') from e
        except UnicodeDecodeError as e:
            raise StorageError(key, f'not UTF-8 text ({e.reason})') from e
        except OSError as e:
            raise StorageError(key, f'cannot read {path}: {e}') from e

    def load_safe(self, key: str, default: Any = None) -> Any:
        """Like load, but returns ``default`` for missing or unreadable keys."""
        try:
            value = self.load(key)
        except StorageError as e:
            logger.error(f'Load failed for {e}')
            return default
        return default if value is None else value

    def save(self, key: str, data: Any) -> None:
        """
        Write ``data`` under ``key``.

        Raises:
            StorageError: If the value cannot be serialized or written
        """
        try:
            write_json(self.path_for(key), data)
        except (TypeError, OSError) as e:
            raise StorageError(key, f'save failed: {e}') from e

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(key, f'remove failed: {e}') from e
