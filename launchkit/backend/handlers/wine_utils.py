#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Wine Utilities Module
Runner directories, binary selection and launch template expansion
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..models.components import BundleKind, ComponentVersion, Features

# Initialize logger
logger = logging.getLogger(__name__)

TEMPLATE_KEYWORDS = ("build", "prefix", "temp", "launcher", "game")


@dataclass(frozen=True)
class WineBinaries:
    """Resolved binaries of a runner build."""
    runner_dir: Path
    wine: Path
    win64: bool
    wineserver: Optional[Path] = None
    wineboot: Optional[Path] = None
    # True when wineboot is a Windows executable run through wine itself
    wineboot_windows: bool = False
    winecfg: Optional[Path] = None
    proton: bool = False


class WineUtils:
    """
    Utilities for wine-related operations
    """

    @staticmethod
    def get_runner_dir(version: ComponentVersion, builds_dir: Path) -> Path:
        """
        Get the folder holding a runner build.

        Managed builds live where their owner installed them (their `uri`);
        everything else is unpacked into `builds_dir/<name>`.
        """
        if version.managed:
            return Path(version.uri)
        return Path(builds_dir) / version.name

    @staticmethod
    def is_prefix_created(prefix: Path) -> bool:
        """A prefix exists once wineboot has created its drive_c."""
        return (Path(prefix) / "drive_c").is_dir()

    @staticmethod
    def effective_prefix(prefix: Path, features: Features) -> Path:
        """Apply the runner's prefix sub-path (Proton keeps the prefix in `pfx`)."""
        if features.prefix_subdir:
            return Path(prefix) / features.prefix_subdir
        return Path(prefix)

    @staticmethod
    def select_wine_binary(version: ComponentVersion, runner_dir: Path,
                           features: Optional[Features] = None) -> WineBinaries:
        """
        Resolve the binaries of a build relative to its folder.

        `wine64` is preferred over `wine` when the build ships both.
        """
        runner_dir = Path(runner_dir)
        files = version.files

        if files.get('wine64'):
            wine, win64 = runner_dir / files['wine64'], True
        elif files.get('wine'):
            wine, win64 = runner_dir / files['wine'], False
        else:
            raise ValueError(f"Runner '{version.name}' does not list a wine binary")

        wineboot = None
        wineboot_windows = False
        if files.get('wineboot'):
            wineboot = runner_dir / files['wineboot']
            wineboot_windows = wineboot.suffix == ".exe"

        return WineBinaries(
            runner_dir=runner_dir,
            wine=wine,
            win64=win64,
            wineserver=runner_dir / files['wineserver'] if files.get('wineserver') else None,
            wineboot=wineboot,
            wineboot_windows=wineboot_windows,
            winecfg=runner_dir / files['winecfg'] if files.get('winecfg') else None,
            proton=features is not None and features.bundle == BundleKind.PROTON,
        )

    @staticmethod
    def expand_template(template: str, build: Path, prefix: Path,
                        temp: Optional[Path] = None, launcher: Optional[Path] = None,
                        game: Optional[Path] = None) -> str:
        """
        Substitute %build%, %prefix%, %temp%, %launcher% and %game%.

        Placeholders without a value expand to an empty string.
        """
        values = {
            'build': build,
            'prefix': prefix,
            'temp': temp,
            'launcher': launcher,
            'game': game,
        }
        result = template
        for keyword in TEMPLATE_KEYWORDS:
            value = values[keyword]
            result = result.replace(f"%{keyword}%", str(value) if value is not None else "")
        return result

    @staticmethod
    def launch_command(features: Features, build: Path, prefix: Path,
                       temp: Optional[Path] = None, launcher: Optional[Path] = None,
                       game: Optional[Path] = None) -> Optional[str]:
        """Expanded launch command, or None when the runner has no custom command."""
        if not features.command:
            return None
        return WineUtils.expand_template(features.command, build, prefix, temp, launcher, game)

    @staticmethod
    def launch_environment(features: Features, build: Path, prefix: Path,
                           temp: Optional[Path] = None, launcher: Optional[Path] = None,
                           game: Optional[Path] = None) -> Dict[str, str]:
        """Expand every environment value of the runner's features."""
        env = {
            key: WineUtils.expand_template(value, build, prefix, temp, launcher, game)
            for key, value in features.env.items()
        }
        logger.debug(f"Runner environment: {env}")
        return env
