#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Component Registry Service Module
Cached lookups over the runner and DXVK catalog, with Steam Proton preference
"""

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.errors import DiscoveryError, NotFoundError
from ..core.features import resolve_features
from ..handlers.catalog_handler import CatalogHandler
from ..models.components import ComponentGroup, ComponentKind, ComponentVersion, Features

# Initialize logger
logger = logging.getLogger(__name__)

CacheKey = Tuple[Path, ComponentKind]


class ComponentRegistry:
    """
    Loads component groups from a catalog folder and answers lookups.

    Loaded groups are cached per (catalog path, kind) until `invalidate` or
    `reload` is called: a catalog edited on disk after its first load is not
    observed before then. The cache is guarded by a lock, and loading happens
    while holding it, so concurrent first loads of a key produce one entry.
    """

    def __init__(self, steam_discovery=None):
        """
        Initialize the registry

        Args:
            steam_discovery: Optional SteamRuntimeDiscovery; when it reports a
                Steam launch, wine groups come from Steam instead of the catalog
        """
        self.steam_discovery = steam_discovery
        self._cache: Dict[CacheKey, List[ComponentGroup]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(catalog_path: Path, kind: ComponentKind) -> CacheKey:
        return Path(catalog_path).resolve(), kind

    def load_groups(self, catalog_path: Path, kind: ComponentKind) -> List[ComponentGroup]:
        """
        Load the groups of `kind` from the catalog.

        Repeated calls with the same path return the same list object.

        Raises:
            StructuralConfigError: if the catalog has the wrong shape
        """
        key = self._key(catalog_path, kind)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Using cached {kind.value} groups for {key[0]}")
                return cached

            groups = CatalogHandler.load_groups(key[0], kind)
            self._cache[key] = groups
            return groups

    def invalidate(self, catalog_path: Optional[Path] = None) -> None:
        """Drop cached groups of one catalog path (both kinds), or of all paths."""
        with self._lock:
            if catalog_path is None:
                self._cache.clear()
                logger.debug("Cleared component cache")
                return
            resolved = Path(catalog_path).resolve()
            for key in [key for key in self._cache if key[0] == resolved]:
                del self._cache[key]
            logger.debug(f"Invalidated component cache for {resolved}")

    def reload(self, catalog_path: Path, kind: ComponentKind) -> List[ComponentGroup]:
        """Re-read the catalog, replacing any cached result."""
        self.invalidate(catalog_path)
        return self.load_groups(catalog_path, kind)

    def get_wine_groups(self, catalog_path: Path) -> List[ComponentGroup]:
        """
        Get the runner groups to offer.

        When launched under Steam, Steam-managed Proton builds replace the
        catalog; if Steam cannot be located the catalog is used instead.
        """
        discovery = self.steam_discovery
        if discovery is not None and discovery.launched_from_steam:
            try:
                return discovery.discover_proton_installs()
            except DiscoveryError as e:
                logger.warning(f"Steam Proton discovery failed, using catalog: {e}")
        return self.load_groups(catalog_path, ComponentKind.WINE)

    def get_dxvk_groups(self, catalog_path: Path) -> List[ComponentGroup]:
        return self.load_groups(catalog_path, ComponentKind.DXVK)

    def get_groups(self, catalog_path: Path, kind: ComponentKind) -> List[ComponentGroup]:
        if kind == ComponentKind.WINE:
            return self.get_wine_groups(catalog_path)
        return self.get_dxvk_groups(catalog_path)

    def find_group_by_name_or_member(self, catalog_path: Path, name: str,
                                     kind: ComponentKind = ComponentKind.WINE) -> Optional[ComponentGroup]:
        """
        Find a group by its own name or by any of its version names.

        Both `wine-ge-proton` and `lutris-GE-Proton7-37-x86_64` address the
        same group.
        """
        for group in self.get_groups(catalog_path, kind):
            if group.has_member(name):
                return group
        return None

    def find_version(self, catalog_path: Path, name: str,
                     kind: ComponentKind = ComponentKind.WINE) -> Optional[ComponentVersion]:
        for group in self.get_groups(catalog_path, kind):
            version = group.find_version(name)
            if version is not None:
                return version
        return None

    def get_version(self, catalog_path: Path, name: str,
                    kind: ComponentKind = ComponentKind.WINE) -> ComponentVersion:
        """
        Like find_version, but a missing version is an error.

        Raises:
            NotFoundError: if no version is named `name`
        """
        version = self.find_version(catalog_path, name, kind)
        if version is None:
            raise NotFoundError(name, kind.value)
        return version

    def find_version_group(self, catalog_path: Path, version_name: str,
                           kind: ComponentKind = ComponentKind.WINE) -> Optional[ComponentGroup]:
        """Find the group a version belongs to."""
        for group in self.get_groups(catalog_path, kind):
            if group.find_version(version_name) is not None:
                return group
        return None

    def latest_version(self, catalog_path: Path,
                       kind: ComponentKind = ComponentKind.WINE) -> ComponentVersion:
        """
        Get the recommended version: the first version of the first group.

        Raises:
            NotFoundError: if the catalog lists no versions
        """
        groups = self.get_groups(catalog_path, kind)
        if not groups or not groups[0].versions:
            raise NotFoundError("latest", kind.value)
        return groups[0].versions[0]

    def version_features(self, catalog_path: Path, version: ComponentVersion,
                         kind: ComponentKind = ComponentKind.WINE) -> Features:
        """Effective features of a version, falling back to its group's."""
        if version.features is not None:
            return version.features
        group = self.find_version_group(catalog_path, version.name, kind)
        return resolve_features(None, group.features if group else None)

    def list_downloaded(self, catalog_path: Path, local_folder: Path,
                        kind: ComponentKind = ComponentKind.WINE) -> List[ComponentGroup]:
        """
        Get groups restricted to the versions present in `local_folder`.

        A version counts as downloaded when `local_folder/<name>` is a
        directory. Managed groups are returned unfiltered, since their builds
        are installed by someone else. Groups left without versions are dropped.
        """
        local_folder = Path(local_folder)
        downloaded = []
        for group in self.get_groups(catalog_path, kind):
            if group.managed:
                downloaded.append(group)
                continue

            versions = [version for version in group.versions if version.is_downloaded_in(local_folder)]
            if versions:
                downloaded.append(replace(group, versions=versions))

        logger.debug(
            f"Downloaded {kind.value} versions in {local_folder}: "
            f"{sum(len(group.versions) for group in downloaded)}"
        )
        return downloaded
