#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Path Handler Module
Locates the Steam installation, its library folders and compatibility tools
"""

import logging
from pathlib import Path
from typing import List, Optional

import vdf

# Initialize logger
logger = logging.getLogger(__name__)

# Relative to the user's home directory, in probing order
STEAM_ROOT_CANDIDATES = [
    ".local/share/Steam",
    ".steam/steam",
    ".steam/root",
    ".var/app/com.valvesoftware.Steam/.local/share/Steam",  # Flatpak
    ".var/app/com.valvesoftware.Steam/data/Steam",  # Flatpak (legacy layout)
]

COMPAT_TOOLS_DIR = "compatibilitytools.d"


class PathHandler:
    """
    Handles Steam path discovery
    """

    @staticmethod
    def find_steam_root(home: Optional[Path] = None) -> Optional[Path]:
        """
        Find the Steam installation root.

        A candidate counts only if it has a `steamapps` directory, so stale
        ~/.steam symlinks without a client behind them are skipped.
        """
        home = home or Path.home()
        logger.debug("Searching for Steam installation root...")
        for candidate in STEAM_ROOT_CANDIDATES:
            steam_root = home / candidate
            if (steam_root / "steamapps").is_dir():
                logger.info(f"Found Steam installation at: {steam_root}")
                return steam_root

        logger.warning("Could not locate a Steam installation in standard locations.")
        return None

    @staticmethod
    def find_libraryfolders_vdf(steam_root: Path) -> Optional[Path]:
        """Find libraryfolders.vdf below a Steam root."""
        for relative in ("steamapps/libraryfolders.vdf", "config/libraryfolders.vdf"):
            candidate = steam_root / relative
            if candidate.is_file():
                logger.debug(f"Found libraryfolders.vdf at: {candidate}")
                return candidate
        return None

    @staticmethod
    def parse_library_folders(vdf_path: Path) -> List[Path]:
        """
        Parse library root paths from a libraryfolders.vdf file.

        Handles both the current layout (numbered blocks with a "path" key)
        and the legacy one (numbered keys mapping straight to a path).
        """
        try:
            with open(vdf_path, 'r', encoding='utf-8', errors='ignore') as f:
                data = vdf.load(f)
        except (OSError, SyntaxError) as e:
            logger.error(f"Failed to parse {vdf_path}: {e}")
            return []

        # Key case varies between Steam client versions
        folders = None
        for key, value in data.items():
            if key.lower() == "libraryfolders" and isinstance(value, dict):
                folders = value
                break
        if folders is None:
            logger.warning(f"No libraryfolders section in {vdf_path}")
            return []

        library_paths = []
        for key, value in folders.items():
            if not key.isdigit():
                continue
            if isinstance(value, dict):
                path_str = value.get("path")
            else:
                path_str = value
            if not path_str:
                continue
            library_path = Path(path_str.replace('\\\\', '\\'))
            if library_path not in library_paths:
                library_paths.append(library_path)

        logger.debug(f"Found {len(library_paths)} library folder(s) in {vdf_path}")
        return library_paths

    @staticmethod
    def get_all_steam_library_paths(steam_root: Path) -> List[Path]:
        """
        Get every Steam library root, the Steam root itself first.

        Returns:
            Library roots (without the steamapps/common suffix)
        """
        library_paths = [steam_root]
        vdf_path = PathHandler.find_libraryfolders_vdf(steam_root)
        if vdf_path is None:
            logger.debug("libraryfolders.vdf not found, using the Steam root only")
            return library_paths

        for library_path in PathHandler.parse_library_folders(vdf_path):
            if library_path not in library_paths and library_path.resolve() != steam_root.resolve():
                library_paths.append(library_path)

        logger.info(f"All detected Steam libraries: {[str(p) for p in library_paths]}")
        return library_paths

    @staticmethod
    def get_compatibility_tools_dir(steam_root: Path) -> Path:
        return steam_root / COMPAT_TOOLS_DIR
