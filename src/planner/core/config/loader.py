"""
Configuration loading.

Settings come from four layers, later layers winning key by key:
built-in defaults, ``~/.config/planner/config.json``, ``.planner.json`` in
the project directory, and ``PLANNER_*`` environment variables. Nested
sections merge; lists (``trackers``) are replaced whole.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import PlannerConfig

logger = logging.getLogger(__name__)

Layer = dict[str, Any]

_loaded: PlannerConfig | None = None

# env var -> dotted config key
ENV_KEYS: dict[str, str] = {
    "PLANNER_DATABASE_URL": "remote.database_url",
    "PLANNER_AUTH_TOKEN": "remote.auth_token",
    "PLANNER_BOOTSTRAP_URL": "ideas.bootstrap_url",
    "PLANNER_DATA_DIR": "ideas.data_dir",
    "PLANNER_AUTHOR": "author",
}


def _xdg_dir(variable: str, fallback: Path) -> Path:
    value = os.environ.get(variable)
    return Path(value) if value else fallback


def get_xdg_config_home() -> Path:
    return _xdg_dir("XDG_CONFIG_HOME", Path.home() / ".config")


def get_xdg_data_home() -> Path:
    return _xdg_dir("XDG_DATA_HOME", Path.home() / ".local" / "share")


def get_user_config_path() -> Path:
    return get_xdg_config_home() / "planner" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """``.planner.json`` inside ``cwd`` (the current directory by default)."""
    return (cwd or Path.cwd()) / ".planner.json"


def get_data_dir(config: PlannerConfig) -> Path:
    """Directory holding the local idea cache."""
    if config.ideas.data_dir is not None:
        return Path(config.ideas.data_dir).expanduser()
    return get_xdg_data_home() / "planner"


def default_layer() -> Layer:
    return {
        "remote": {"timeout": 10.0},
        "ideas": {"slot_name": "solution-planner-incubator"},
        "http": {"timeout": 10.0, "max_retries": 2, "base_delay": 0.5},
        "trackers": [],
        "author": "me",
    }


def read_layer(path: Path) -> Layer:
    """
    Read one JSON config file.

    A missing file is an empty layer. So is an unreadable or malformed one,
    after a warning: a broken user file must not stop the CLI.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: top level is not an object", path)
        return {}
    return data


def env_layer(environ: dict[str, str] | None = None) -> Layer:
    """Translate non-empty ``PLANNER_*`` variables into a nested layer."""
    environ = dict(os.environ) if environ is None else environ
    layer: Layer = {}
    for variable, dotted in ENV_KEYS.items():
        value = environ.get(variable)
        if not value:
            continue
        *sections, key = dotted.split(".")
        target = layer
        for section in sections:
            target = target.setdefault(section, {})
        target[key] = value
    return layer


def merge_layers(lower: Layer, upper: Layer) -> Layer:
    """Overlay ``upper`` on ``lower`` without mutating either."""
    merged = dict(lower)
    for key, value in upper.items():
        below = merged.get(key)
        if isinstance(below, dict) and isinstance(value, dict):
            merged[key] = merge_layers(below, value)
        else:
            merged[key] = value
    return merged


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> PlannerConfig:
    """
    Build the validated configuration from every layer.

    The result is cached for the rest of the process unless ``use_cache`` is
    False; ``clear_cache`` forgets it.

    A layer whose values do not validate is logged and left out, so a bad
    setting in one file falls back to the layers below it.
    """
    global _loaded

    if use_cache and _loaded is not None:
        return _loaded

    user_path = get_user_config_path()
    project_path = get_project_config_path(project_dir)
    layers = [
        (str(user_path), read_layer(user_path)),
        (str(project_path), read_layer(project_path)),
        ("PLANNER_* environment", env_layer()),
    ]

    merged = default_layer()
    config = PlannerConfig.model_validate(merged)
    for origin, layer in layers:
        if not layer:
            continue
        candidate = merge_layers(merged, layer)
        try:
            config = PlannerConfig.model_validate(candidate)
        except ValidationError as e:
            logger.warning("Ignoring config from %s: %s", origin, e)
            continue
        merged = candidate

    _loaded = config
    return _loaded


def clear_cache() -> None:
    global _loaded
    _loaded = None
