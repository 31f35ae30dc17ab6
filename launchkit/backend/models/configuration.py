"""
Configuration Data Models

Data structures passed from configuration assembly into the backend services.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any, List, Callable, Mapping
from dataclasses import dataclass, field


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name) == "1"


@dataclass(frozen=True)
class RuntimeEnvironment:
    """
    Snapshot of the process environment relevant to runner discovery.

    Computed once at startup and handed to services, so nothing below the
    frontend reads os.environ directly.
    """
    launched_from_steam: bool = False
    is_steam_deck: bool = False
    is_steam_os: bool = False
    steam_compat_data_path: Optional[Path] = None
    launcher_folder: Optional[Path] = None
    cache_folder: Optional[Path] = None
    xdg_data_home: Optional[Path] = None
    xdg_cache_home: Optional[Path] = None
    home: Optional[Path] = None

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> 'RuntimeEnvironment':
        """Build from an environment mapping (defaults to os.environ)."""
        if environ is None:
            environ = os.environ

        def _path(name: str) -> Optional[Path]:
            value = environ.get(name)
            return Path(value) if value else None

        return cls(
            launched_from_steam=_env_flag(environ, "SteamEnv"),
            is_steam_deck=_env_flag(environ, "SteamDeck"),
            is_steam_os=_env_flag(environ, "SteamOS"),
            steam_compat_data_path=_path("STEAM_COMPAT_DATA_PATH"),
            launcher_folder=_path("LAUNCHER_FOLDER"),
            cache_folder=_path("CACHE_FOLDER"),
            xdg_data_home=_path("XDG_DATA_HOME"),
            xdg_cache_home=_path("XDG_CACHE_HOME"),
            home=_path("HOME"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'launched_from_steam': self.launched_from_steam,
            'is_steam_deck': self.is_steam_deck,
            'is_steam_os': self.is_steam_os,
            'steam_compat_data_path': str(self.steam_compat_data_path) if self.steam_compat_data_path else None,
            'launcher_folder': str(self.launcher_folder) if self.launcher_folder else None,
            'cache_folder': str(self.cache_folder) if self.cache_folder else None,
            'home': str(self.home) if self.home else None,
        }


@dataclass(frozen=True)
class SelectedRunner:
    """The runner chosen in the launcher settings."""
    name: str
    managed: bool = False


@dataclass
class PatchSettings:
    """Patch mirrors and per-game patch toggles."""
    servers: List[str] = field(default_factory=list)
    folder: Optional[Path] = None
    apply_player_patch: bool = False
    apply_xlua_patch: bool = False

    def __post_init__(self):
        """Convert string paths to Path objects."""
        if isinstance(self.folder, str):
            self.folder = Path(self.folder)


@dataclass
class CheckContext:
    """
    Read-only snapshot handed to the launch readiness resolver.

    Built immediately before a resolution call and discarded afterwards.
    """
    wine_prefix: Path
    game_path: Path
    selected_runner: Optional[SelectedRunner] = None
    wine_builds: Optional[Path] = None
    game_edition: str = "global"
    selected_voices: List[str] = field(default_factory=list)
    patch: PatchSettings = field(default_factory=PatchSettings)
    telemetry_ignored: bool = False
    status_updater: Optional[Callable[..., None]] = None

    def __post_init__(self):
        """Convert string paths to Path objects."""
        if isinstance(self.wine_prefix, str):
            self.wine_prefix = Path(self.wine_prefix)
        if isinstance(self.game_path, str):
            self.game_path = Path(self.game_path)
        if isinstance(self.wine_builds, str):
            self.wine_builds = Path(self.wine_builds)

    @property
    def runner_managed(self) -> bool:
        return self.selected_runner is not None and self.selected_runner.managed


@dataclass(frozen=True)
class PathLayout:
    """
    Directory naming of one supported title.

    `editions` maps an edition name to the game folder, relative to the
    base install directory.
    """
    folder_name: str
    editions: Dict[str, str] = field(default_factory=dict)
    default_edition: str = "global"

    def game_subpath(self, edition: Optional[str] = None) -> str:
        edition = edition or self.default_edition
        try:
            return self.editions[edition]
        except KeyError:
            raise ValueError(f"Unknown edition '{edition}' for {self.folder_name}")
