#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Steam Runtime Discovery Service Module
Detects Steam-managed launches and inventories the Proton builds Steam owns
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.errors import DiscoveryError
from ..data.proton_profile import (
    PROTON_FILES,
    STEAM_PROTON_GROUP,
    STEAM_PROTON_TITLE,
    steam_proton_features,
)
from ..handlers.path_handler import PathHandler
from ..models.components import ComponentGroup, ComponentVersion
from ..models.configuration import RuntimeEnvironment
from ...shared.steam_utils import SteamEnvironment, detect_environment

# Initialize logger
logger = logging.getLogger(__name__)


class SteamRuntimeDiscovery:
    """
    Finds Proton builds installed through Steam.

    Candidates are directories (not symlinks) under each library's
    steamapps/common and under compatibilitytools.d that contain a `proton`
    launcher script.
    """

    def __init__(self, runtime_environment: RuntimeEnvironment, steam_root: Optional[Path] = None):
        """
        Initialize the discovery service

        Args:
            runtime_environment: Environment snapshot taken at startup
            steam_root: Explicit Steam root; probed under HOME when omitted
        """
        self.runtime_environment = runtime_environment
        self._steam_root = Path(steam_root) if steam_root else None
        logger.debug(f"SteamRuntimeDiscovery initialized (steam={runtime_environment.launched_from_steam})")

    def detect_environment(self) -> SteamEnvironment:
        return detect_environment(self.runtime_environment)

    @property
    def launched_from_steam(self) -> bool:
        return self.runtime_environment.launched_from_steam

    def locate_steam_root(self) -> Optional[Path]:
        if self._steam_root is not None:
            return self._steam_root if self._steam_root.is_dir() else None
        return PathHandler.find_steam_root(self.runtime_environment.home)

    def get_search_roots(self, steam_root: Optional[Path] = None) -> List[Path]:
        """
        List the directories scanned for Proton builds.

        Returns:
            compatibilitytools.d of the Steam root, then steamapps/common of
            every library; empty if Steam cannot be located
        """
        steam_root = steam_root or self.locate_steam_root()
        if steam_root is None:
            return []

        roots = [PathHandler.get_compatibility_tools_dir(steam_root)]
        for library in PathHandler.get_all_steam_library_paths(steam_root):
            roots.append(library / "steamapps" / "common")
        return roots

    def find_proton_launchers(self, steam_root: Optional[Path] = None) -> List[Path]:
        """Inventory directories holding a Proton launch script."""
        found = []
        for root in self.get_search_roots(steam_root):
            if not root.is_dir():
                logger.debug(f"Skipping missing search root: {root}")
                continue
            try:
                entries = sorted(root.iterdir())
            except OSError as e:
                logger.warning(f"Error scanning {root}: {e}")
                continue

            for candidate in entries:
                # Symlinked duplicates of real installs are not inventoried
                if candidate.is_symlink() or not candidate.is_dir():
                    continue
                if not (candidate / "proton").exists():
                    continue
                found.append(candidate)
                logger.debug(f"Found Proton launcher in {candidate}")

        return found

    @staticmethod
    def parse_version_file(proton_dir: Path) -> Optional[Tuple[str, str]]:
        """
        Read a Proton `version` file.

        Returns:
            (build_id, name) split on the first space, or None if the file is
            missing, unreadable, or has no space-separated second token
        """
        version_file = proton_dir / "version"
        try:
            content = version_file.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            logger.debug(f"Cannot read {version_file}: {e}")
            return None

        content = content.strip()
        if " " not in content:
            logger.debug(f"Proton at {proton_dir} has a version file without a name. Skipping.")
            return None

        build_id, name = content.split(" ", 1)
        name = name.strip()
        if not build_id or not name:
            logger.debug(f"Proton at {proton_dir} has a malformed version file. Skipping.")
            return None
        return build_id, name

    def discover_proton_installs(self) -> List[ComponentGroup]:
        """
        Build the runner group of Steam-managed Proton builds.

        Returns:
            Exactly one managed group named `steam-proton`

        Raises:
            DiscoveryError: if launched under Steam but Steam cannot be located
        """
        steam_root = self.locate_steam_root()
        if steam_root is None and self.launched_from_steam:
            raise DiscoveryError("Launched from Steam but the Steam installation could not be located")

        versions = []
        if steam_root is not None:
            for proton_dir in self.find_proton_launchers(steam_root):
                parsed = self.parse_version_file(proton_dir)
                if parsed is None:
                    continue
                _, name = parsed
                versions.append(ComponentVersion(
                    name=name,
                    title=proton_dir.name,
                    uri=str(proton_dir),
                    files=dict(PROTON_FILES),
                    features=None,
                    managed=True,
                ))

        logger.info(f"Discovered {len(versions)} Steam-managed Proton build(s)")
        return [ComponentGroup(
            name=STEAM_PROTON_GROUP,
            title=STEAM_PROTON_TITLE,
            features=steam_proton_features(str(steam_root) if steam_root else None),
            versions=versions,
            managed=True,
        )]

    def steam_proton_installed_paths(self) -> Optional[List[Path]]:
        """Proton launcher folders, or None when not running under a locatable Steam."""
        if not self.launched_from_steam:
            return None
        steam_root = self.locate_steam_root()
        if steam_root is None:
            return None
        return self.find_proton_launchers(steam_root)

    def valid_selected_runner(self, name: str) -> bool:
        """Check that `name` is one of the discovered Proton builds."""
        try:
            groups = self.discover_proton_installs()
        except DiscoveryError as e:
            logger.warning(f"Cannot validate runner '{name}': {e}")
            return False
        return any(group.find_version(name) is not None for group in groups)
