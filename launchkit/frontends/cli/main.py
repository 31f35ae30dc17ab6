#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
launchkit CLI Frontend - Main Entry Point

Command-line interface over the runner registry and Steam discovery services.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from launchkit import __version__ as launchkit_version
from launchkit.backend.core.errors import LaunchKitError
from launchkit.backend.core.features import features_in
from launchkit.backend.data.game_layouts import ANIME_GAME_LAYOUT, LAYOUTS
from launchkit.backend.handlers.config_handler import ConfigHandler
from launchkit.backend.models.components import ComponentGroup, ComponentKind
from launchkit.backend.services.component_registry_service import ComponentRegistry
from launchkit.backend.services.steam_runtime_service import SteamRuntimeDiscovery
from launchkit.shared.steam_utils import default_window_size, detect_runtime_environment

logger = logging.getLogger(__name__)


class LaunchKitCLI:
    """Main application class for the launchkit CLI frontend"""

    def __init__(self, argv: Optional[List[str]] = None, environ=None):
        """Initialize the CLI frontend.

        Args:
            argv: Arguments to parse instead of sys.argv
            environ: Environment mapping to read instead of os.environ
        """
        self.argv = argv
        self._configure_logging_early()

        # Read the process environment once at startup
        self.runtime_environment = detect_runtime_environment(environ)
        self.discovery = SteamRuntimeDiscovery(self.runtime_environment)
        self.registry = ComponentRegistry(steam_discovery=self.discovery)

        self.parser = None
        self.args = None
        self.config_handler = None

    def _configure_logging_early(self):
        """Keep logging quiet until the arguments are parsed"""
        logging.getLogger().setLevel(logging.WARNING)
        if not logging.getLogger().handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            logging.getLogger().addHandler(handler)

    def _configure_logging_final(self):
        """Configure final logging level based on parsed arguments"""
        from launchkit.backend.handlers.logging_handler import LoggingHandler

        logging_handler = LoggingHandler(self.runtime_environment)
        logging_handler.cleanup_old_logs()
        logging_handler.rotate_log_for_logger('launchkit')
        cli_logger = logging_handler.setup_logger('launchkit')

        if self.args.debug:
            cli_logger.setLevel(logging.DEBUG)
            logging.getLogger().setLevel(logging.DEBUG)
        elif self.args.verbose:
            cli_logger.setLevel(logging.INFO)
            logging.getLogger().setLevel(logging.INFO)
        else:
            cli_logger.setLevel(logging.WARNING)

    def _parse_args(self):
        """Parse command-line arguments"""
        parser = argparse.ArgumentParser(
            prog="launchkit",
            description="launchkit: runner discovery and launch readiness for Windows games on Linux"
        )
        parser.add_argument("-V", "--version", action="store_true", help="Show launchkit version and exit")
        parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging (implies verbose)")
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable informational console output")
        parser.add_argument("--config", type=Path, help="Launcher settings file to use")
        parser.add_argument("--catalog", type=Path, help="Components catalog folder (overrides settings)")
        parser.add_argument("--game", choices=sorted(LAYOUTS), default=ANIME_GAME_LAYOUT.folder_name,
                            help="Launcher title whose settings to use")

        subparsers = parser.add_subparsers(dest="command", help="Command to run")
        subparsers.add_parser("environment", help="Show the detected Steam environment")

        runners = subparsers.add_parser("runners", help="List runner or DXVK groups")
        runners.add_argument("--kind", choices=[kind.value for kind in ComponentKind],
                             default=ComponentKind.WINE.value, help="Component kind to list")
        runners.add_argument("--downloaded", action="store_true",
                             help="Only list versions present in the builds folder")

        find = subparsers.add_parser("find", help="Find the group of a runner family or build")
        find.add_argument("name", help="Group name or version name")
        find.add_argument("--kind", choices=[kind.value for kind in ComponentKind],
                          default=ComponentKind.WINE.value, help="Component kind to search")

        subparsers.add_parser("proton", help="List Proton builds installed through Steam")

        args = parser.parse_args(self.argv)
        return parser, args

    def run(self) -> int:
        self.parser, self.args = self._parse_args()
        if self.args.version:
            print(f"launchkit version {launchkit_version}")
            return 0

        self._configure_logging_final()
        logger.debug(f"Parsed args: {self.args}")

        if not self.args.command:
            self.parser.print_help()
            return 0

        self.config_handler = ConfigHandler(
            self.args.config, self.runtime_environment, LAYOUTS[self.args.game]
        )
        try:
            return self._run_command(self.args.command, self.args)
        except LaunchKitError as e:
            logger.error(str(e))
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def _catalog_path(self, args) -> Path:
        return args.catalog or self.config_handler.components_path

    def _run_command(self, command, args) -> int:
        """Run a specific command"""
        if command == "environment":
            return self._cmd_environment()
        elif command == "runners":
            return self._cmd_runners(args)
        elif command == "find":
            return self._cmd_find(args)
        elif command == "proton":
            return self._cmd_proton()
        else:
            print(f"Unknown command: {command}")
            return 1

    def _cmd_environment(self) -> int:
        logger.debug(f"Runtime environment: {self.runtime_environment.to_dict()}")
        environment = self.discovery.detect_environment()
        width, height = default_window_size(environment)
        print(f"Environment: {environment.value}")
        print(f"Default window size: {width}x{height}")
        steam_root = self.discovery.locate_steam_root()
        print(f"Steam root: {steam_root if steam_root else 'not found'}")
        return 0

    def _print_groups(self, groups: List[ComponentGroup]):
        if not groups:
            print("No components found")
            return
        for group in groups:
            managed = " (managed)" if group.managed else ""
            print(f"{group.title} [{group.name}]{managed}")
            for version in group.versions:
                features = features_in(version, group)
                bundle = f" {features.bundle.value}" if features.bundle else ""
                print(f"  - {version.name}: {version.title}{bundle}")

    def _cmd_runners(self, args) -> int:
        kind = ComponentKind(args.kind)
        catalog = self._catalog_path(args)
        if args.downloaded:
            key = "wine_builds" if kind == ComponentKind.WINE else "dxvk_builds"
            groups = self.registry.list_downloaded(catalog, Path(self.config_handler.get(key)), kind)
        else:
            groups = self.registry.get_groups(catalog, kind)
        self._print_groups(groups)
        return 0

    def _cmd_find(self, args) -> int:
        group = self.registry.find_group_by_name_or_member(
            self._catalog_path(args), args.name, ComponentKind(args.kind)
        )
        if group is None:
            print(f"No group matches '{args.name}'")
            return 1
        self._print_groups([group])
        return 0

    def _cmd_proton(self) -> int:
        groups = self.discovery.discover_proton_installs()
        self._print_groups(groups)
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point"""
    try:
        return LaunchKitCLI(argv).run()
    except KeyboardInterrupt:
        print("\nExiting launchkit...")
        return 130


if __name__ == "__main__":
    sys.exit(main())
