"""Load ``.env`` files into the process environment.

Two layers are read, user then project, and the project layer wins over the
user layer. Neither ever replaces a variable that was already exported
before loading started.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values


def user_env_files() -> list[Path]:
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return [Path(config_home) / "planner" / ".env"]


def project_env_files(project_dir: Path) -> list[Path]:
    return [project_dir / ".env", project_dir / ".env.local"]


def _merged(paths: Iterable[Path]) -> dict[str, str]:
    merged: dict[str, str] = {}
    for path in map(Path, paths):
        if path.is_file():
            merged.update({k: v for k, v in dotenv_values(path).items() if v is not None})
    return merged


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> None:
    """Apply user and project ``.env`` files; explicit path lists replace the defaults."""
    if user_env_paths is None:
        user_env_paths = user_env_files()
    if project_env_paths is None:
        project_env_paths = project_env_files(project_dir or Path.cwd())

    exported = set(os.environ)
    values = _merged([*user_env_paths, *project_env_paths])
    for key, value in values.items():
        if key not in exported:
            os.environ[key] = value
