"""League settings defaults and merging."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .schemas import LeagueSettings
from .storage import read_json

DEFAULT_SETTINGS_PATH = Path(__file__).parent / 'data' / 'default_settings.json'


@lru_cache(maxsize=1)
def get_config() -> LeagueSettings:
    """
    Load default league settings from data/default_settings.json.

    Settings are cached after first load.

    Returns:
        LeagueSettings with validated defaults

    Raises:
        FileNotFoundError: If default_settings.json doesn't exist
        ValueError: If the file has an invalid structure

    Example:
        from matchday.config import get_config
        settings = get_config()
        print(f"No-show penalty: {settings.no_show_penalty}")
    """
    return read_json(DEFAULT_SETTINGS_PATH, schema=LeagueSettings)


def default_settings() -> LeagueSettings:
    """Get the default settings used for new and reset leagues."""
    return get_config()


def merge_settings(data: dict[str, Any] | None) -> LeagueSettings:
    """
    Overlay saved settings on the defaults.

    Settings written by older versions may lack newer keys; those keys
    fall back to the defaults instead of failing validation.

    Raises:
        ValidationError: If a supplied value is invalid
    """
    merged = get_config().model_dump(by_alias=True)
    merged.update(data or {})
    return LeagueSettings.model_validate(merged)


def update_settings_values(settings: LeagueSettings, **changes: Any) -> LeagueSettings:
    """Return a validated copy of ``settings`` with ``changes`` applied.

    Raises:
        ValueError: If a change names an unknown field or fails validation
    """
    unknown = set(changes) - set(LeagueSettings.model_fields)
    if unknown:
        raise ValueError(f'Unknown settings: {", ".join(sorted(unknown))}')
    values = settings.model_dump()
    values.update(changes)
    try:
        return LeagueSettings.model_validate(values)
    except ValidationError as e:
        raise ValueError(f'Invalid settings:\n{e}') from e


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if default_settings.json is modified during runtime.
    """
    get_config.cache_clear()
