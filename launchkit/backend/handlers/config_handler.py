#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration Handler Module
Handles launcher settings and assembles the context for readiness checks
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from packaging import version

from ..data.game_layouts import ANIME_GAME_LAYOUT
from ..models.configuration import (
    CheckContext,
    PatchSettings,
    PathLayout,
    RuntimeEnvironment,
    SelectedRunner,
)
from ...shared.paths import base_install_dir, config_file, launcher_dir
from ...shared.steam_utils import default_window_size, detect_environment

# Initialize logger
logger = logging.getLogger(__name__)

CONFIG_VERSION = "0.2.0"


class ConfigHandler:
    """
    Handles launcher configuration and settings

    Settings are a flat dict of defaults updated with the saved JSON file.
    """

    def __init__(self, config_path: Optional[Path] = None,
                 runtime_environment: Optional[RuntimeEnvironment] = None,
                 layout: PathLayout = ANIME_GAME_LAYOUT):
        """Initialize configuration handler with default settings"""
        self.runtime_environment = runtime_environment or RuntimeEnvironment.from_environ()
        self.layout = layout
        self.config_file = Path(config_path) if config_path else config_file(
            self.runtime_environment, layout.folder_name
        )
        self.config_dir = self.config_file.parent
        self.settings = self._default_settings()

        # Load configuration if exists
        self._load_config()

        # Perform version migrations
        self._migrate_config()

    def _default_settings(self) -> Dict[str, Any]:
        data_dir = launcher_dir(self.runtime_environment, self.layout.folder_name)
        install_base = base_install_dir(self.runtime_environment, self.layout.folder_name)
        width, height = default_window_size(detect_environment(self.runtime_environment))

        return {
            "version": CONFIG_VERSION,
            "components_path": str(data_dir / "components"),
            "wine_builds": str(data_dir / "runners"),
            "dxvk_builds": str(data_dir / "dxvks"),
            "selected_wine": None,
            "selected_dxvk": None,
            "wine_prefix": str(data_dir / "game"),
            "edition": self.layout.default_edition,
            "game_paths": {
                edition: str(install_base / subpath)
                for edition, subpath in self.layout.editions.items()
            },
            "voices": ["en-us"],
            "patch_servers": [],
            "patch_folder": str(data_dir / "patch"),
            "apply_player_patch": False,
            "apply_xlua_patch": False,
            "telemetry_ignored": False,
            "temp_folder": str(data_dir),
            "window_width": width,
            "window_height": height,
        }

    def _load_config(self):
        """Load configuration from file and update in-memory settings."""
        if not self.config_file.exists():
            logger.debug("No configuration file found, using defaults")
            return
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                saved_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading configuration: {e}")
            return

        if not isinstance(saved_config, dict):
            logger.error(f"Ignoring configuration file {self.config_file}: not a JSON object")
            return

        # Update settings with saved values while preserving defaults
        self.settings.update(saved_config)
        logger.debug("Loaded configuration from file")

    def _migrate_config(self):
        """
        Migrate configuration between versions
        Handles breaking changes and data format updates
        """
        current_version = str(self.settings.get("version") or "0.0.0")
        if current_version == CONFIG_VERSION:
            return

        logger.info(f"Migrating config from {current_version} to {CONFIG_VERSION}")

        # Migration: v0.1.x -> v0.2.0
        # Patch settings moved from a nested object to flat keys
        if version.parse(current_version) < version.parse("0.2.0"):
            patch = self.settings.pop("patch", None)
            if isinstance(patch, dict):
                if isinstance(patch.get("servers"), list):
                    self.settings["patch_servers"] = patch["servers"]
                if patch.get("path"):
                    self.settings["patch_folder"] = patch["path"]
                if "apply" in patch:
                    self.settings["apply_player_patch"] = bool(patch["apply"])
                logger.info("Moved nested patch settings to top-level keys")

        self.settings["version"] = CONFIG_VERSION
        self.save_config()
        logger.info("Config migration completed")

    def _create_config_dir(self):
        """Create configuration directory if it doesn't exist"""
        os.makedirs(self.config_dir, exist_ok=True)

    def save_config(self) -> bool:
        """Save current configuration to file"""
        try:
            self._create_config_dir()
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=2)
            logger.debug("Saved configuration to file")
            return True
        except OSError as e:
            logger.error(f"Error saving configuration: {e}")
            return False

    def get(self, key, default=None):
        """Get a configuration value by key."""
        return self.settings.get(key, default)

    def set(self, key, value):
        """Set a configuration value"""
        self.settings[key] = value
        return True

    def update(self, settings_dict):
        """Update multiple configuration values"""
        self.settings.update(settings_dict)
        return True

    def _path(self, key) -> Optional[Path]:
        value = self.settings.get(key)
        return Path(value) if value else None

    @property
    def components_path(self) -> Path:
        return self._path("components_path")

    def get_game_path(self, edition: Optional[str] = None) -> Path:
        """Get the game folder of an edition (the configured one by default)."""
        edition = edition or self.settings.get("edition") or self.layout.default_edition
        game_paths = self.settings.get("game_paths") or {}
        if edition in game_paths:
            return Path(game_paths[edition])
        install_base = base_install_dir(self.runtime_environment, self.layout.folder_name)
        return install_base / self.layout.game_subpath(edition)

    def get_selected_runner(self, registry) -> Optional[SelectedRunner]:
        """
        Look up the selected runner in the registry.

        A runner missing from the registry is treated as unmanaged.
        """
        name = self.settings.get("selected_wine")
        if not name:
            return None
        selected = registry.find_version(self.components_path, name)
        return SelectedRunner(name=name, managed=bool(selected and selected.managed))

    def get_wine_prefix(self, runner: Optional[SelectedRunner] = None) -> Path:
        """Get the prefix folder; Steam's compat data folder for managed runners."""
        compat_data = self.runtime_environment.steam_compat_data_path
        if runner is not None and runner.managed and compat_data:
            return compat_data
        return self._path("wine_prefix")

    def build_check_context(self, registry,
                            status_updater: Optional[Callable[..., None]] = None) -> CheckContext:
        """
        Assemble the readiness check context from the current settings.

        Raises:
            StructuralConfigError: if the components catalog is malformed
        """
        runner = self.get_selected_runner(registry)
        return CheckContext(
            wine_prefix=self.get_wine_prefix(runner),
            game_path=self.get_game_path(),
            selected_runner=runner,
            wine_builds=self._path("wine_builds"),
            game_edition=self.settings.get("edition") or self.layout.default_edition,
            selected_voices=list(self.settings.get("voices") or []),
            patch=PatchSettings(
                servers=list(self.settings.get("patch_servers") or []),
                folder=self._path("patch_folder"),
                apply_player_patch=bool(self.settings.get("apply_player_patch")),
                apply_xlua_patch=bool(self.settings.get("apply_xlua_patch")),
            ),
            telemetry_ignored=bool(self.settings.get("telemetry_ignored")),
            status_updater=status_updater,
        )
