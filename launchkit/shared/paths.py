"""
Launcher Directory Paths

Resolves the data, cache, config and log directories of a launcher title
from an explicit RuntimeEnvironment.
"""

import logging
from pathlib import Path
from typing import Optional

from ..backend.models.configuration import RuntimeEnvironment

logger = logging.getLogger(__name__)

DEFAULT_FOLDER_NAME = "launchkit"


def _home(runtime: RuntimeEnvironment) -> Path:
    return runtime.home or Path.home()


def launcher_dir(runtime: RuntimeEnvironment, folder_name: str = DEFAULT_FOLDER_NAME) -> Path:
    """
    Get the launcher data directory.

    LAUNCHER_FOLDER wins if set, otherwise $XDG_DATA_HOME/<folder_name>,
    otherwise $HOME/.local/share/<folder_name>.
    """
    if runtime.launcher_folder:
        return runtime.launcher_folder
    if runtime.xdg_data_home:
        return runtime.xdg_data_home / folder_name
    return _home(runtime) / ".local" / "share" / folder_name


def cache_dir(runtime: RuntimeEnvironment, folder_name: str = DEFAULT_FOLDER_NAME) -> Path:
    """
    Get the launcher cache directory.

    CACHE_FOLDER wins if set, otherwise $XDG_CACHE_HOME/<folder_name>,
    otherwise $HOME/.cache/<folder_name>.
    """
    if runtime.cache_folder:
        return runtime.cache_folder
    if runtime.xdg_cache_home:
        return runtime.xdg_cache_home / folder_name
    return _home(runtime) / ".cache" / folder_name


def config_file(runtime: RuntimeEnvironment, folder_name: str = DEFAULT_FOLDER_NAME) -> Path:
    """Get the launcher settings file (`<launcher_dir>/config.json`)."""
    return launcher_dir(runtime, folder_name) / "config.json"


def get_launchkit_logs_dir(runtime: Optional[RuntimeEnvironment] = None,
                           folder_name: str = DEFAULT_FOLDER_NAME) -> Path:
    """Get the log directory (`<launcher_dir>/logs`)."""
    if runtime is None:
        runtime = RuntimeEnvironment.from_environ()
    return launcher_dir(runtime, folder_name) / "logs"


def base_install_dir(runtime: RuntimeEnvironment, folder_name: str = DEFAULT_FOLDER_NAME) -> Path:
    """
    Get the directory games are installed below.

    Under Steam the game lives inside the Steam-owned prefix's C: drive, so
    the compat data path wins when Steam provides one.
    """
    if runtime.launched_from_steam and runtime.steam_compat_data_path:
        drive_c = runtime.steam_compat_data_path / "pfx" / "drive_c"
        logger.debug(f"Using Steam compat prefix as install base: {drive_c}")
        return drive_c
    return launcher_dir(runtime, folder_name)
