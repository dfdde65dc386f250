"""
Configuration models and loading.

Pydantic models for planner configuration with multi-layer merging:
defaults < user < project < env vars.
"""

from .loader import (
    clear_cache,
    get_data_dir,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    get_xdg_data_home,
    load_config,
)
from .models import (
    HttpConfig,
    IdeasConfig,
    PlannerConfig,
    RemoteConfig,
    TrackerSource,
)

__all__ = [
    # Models
    "HttpConfig",
    "IdeasConfig",
    "PlannerConfig",
    "RemoteConfig",
    "TrackerSource",
    # Loader functions
    "clear_cache",
    "get_data_dir",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "get_xdg_data_home",
    "load_config",
]
