#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Launch Readiness Service Module
Decides what the user has to do before a game can be launched
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Tuple

from ..handlers.wine_utils import WineUtils
from ..models.configuration import CheckContext, PathLayout, RuntimeEnvironment
from ..models.launch_state import (
    GAME_DIFF_STATES,
    PATCH_STATUS_STATES,
    VOICE_DIFF_STATES,
    DiffKind,
    Launch,
    LaunchReadinessState,
    PatchNotInstalled,
    PatchStatus,
    PatchUpdateAvailable,
    PredownloadAvailable,
    PrefixNotExists,
    StateUpdating,
    StatusUpdate,
    TelemetryNotDisabled,
    VersionDiff,
    WineNotInstalled,
)
from .steam_runtime_service import SteamRuntimeDiscovery

# Initialize logger
logger = logging.getLogger(__name__)


class GameVersionProvider(Protocol):
    """Compares installed game files and voice packages with the remote ones."""

    def get_game_diff(self, context: CheckContext) -> VersionDiff:
        ...

    def get_voice_diff(self, context: CheckContext, locale: str) -> VersionDiff:
        ...


class PatchProvider(Protocol):
    """Keeps the local patch cache in sync with a mirror."""

    def is_synced(self, servers: List[str]) -> bool:
        ...

    def sync(self, server: str) -> None:
        ...


class PatchCheck(Protocol):
    """A game-specific patch condition; returns a state to stop, None to continue."""

    def check(self, context: CheckContext) -> Optional[LaunchReadinessState]:
        ...


class TelemetryProvider(Protocol):
    """Resolves the game's telemetry domains."""

    def resolve(self, edition: str) -> Optional[str]:
        """Return a resolved telemetry host, or None if none resolves."""
        ...


class AppliedPatchCheck:
    """
    Checks a patch that gets applied to the game files.

    Used for binary-compatibility and scripting-engine patches. Only runs
    when the context toggle named `toggle` is on.

    `provider` needs `is_applied(game_path) -> bool` and may offer
    `descriptor()` returning what the frontend needs to apply the patch.
    """

    def __init__(self, name: str, provider: Any, toggle: str):
        self.name = name
        self.provider = provider
        self.toggle = toggle

    def check(self, context: CheckContext) -> Optional[LaunchReadinessState]:
        if not getattr(context.patch, self.toggle, False):
            logger.debug(f"{self.name} patch disabled, skipping")
            return None
        if self.provider.is_applied(context.game_path):
            return None

        descriptor = getattr(self.provider, "descriptor", None)
        patch = descriptor() if callable(descriptor) else self.name
        logger.debug(f"{self.name} patch is not applied")
        return PatchNotInstalled(patch=patch)


class InstalledPatchCheck:
    """
    Checks a patch installed into the patch folder.

    `provider` needs `is_installed(folder) -> bool`, `installed_version(folder)`
    and `latest_version()`; versions must be comparable.
    """

    def __init__(self, name: str, provider: Any):
        self.name = name
        self.provider = provider

    def check(self, context: CheckContext) -> Optional[LaunchReadinessState]:
        folder = context.patch.folder
        if folder is None or not self.provider.is_installed(folder):
            return PatchNotInstalled(patch=self.name)

        installed = self.provider.installed_version(folder)
        latest = self.provider.latest_version()
        if latest > installed:
            logger.debug(f"{self.name} patch update available: {installed} -> {latest}")
            return PatchUpdateAvailable(patch=self.name)
        return None


class VerificationStatusCheck:
    """
    Checks the patch maintainers' verdict for the installed game version.

    `provider` needs `get_status(context) -> PatchStatus`.
    """

    def __init__(self, provider: Any):
        self.provider = provider

    def check(self, context: CheckContext) -> Optional[LaunchReadinessState]:
        status = self.provider.get_status(context)
        if status == PatchStatus.VERIFIED:
            return None
        logger.debug(f"Patch status is {status.value}")
        return PATCH_STATUS_STATES[status]()


@dataclass
class GameProfile:
    """
    Capabilities of one supported title.

    The readiness checks are the same for every title; what differs is
    plugged in here.
    """
    name: str
    layout: PathLayout
    diff_provider: GameVersionProvider
    patch_provider: Optional[PatchProvider] = None
    patch_checks: List[PatchCheck] = field(default_factory=list)
    telemetry_provider: Optional[TelemetryProvider] = None


@dataclass
class MirrorSyncReport:
    """Outcome of the last patch mirror sync."""
    attempted: List[str] = field(default_factory=list)
    synced_from: Optional[str] = None
    failures: List[Tuple[str, Exception]] = field(default_factory=list)
    skipped: bool = False

    @property
    def exhausted(self) -> bool:
        """Every mirror was tried and none succeeded."""
        return not self.skipped and bool(self.attempted) and self.synced_from is None


class LaunchReadinessResolver:
    """
    Runs the launch readiness checks in order.

    The first unmet check decides the state; later checks are not run.
    No state is kept between calls except the last mirror sync report.
    """

    def __init__(self, profile: GameProfile, runtime_environment: RuntimeEnvironment,
                 steam_discovery: Optional[SteamRuntimeDiscovery] = None):
        """
        Initialize the resolver

        Args:
            profile: Title-specific providers and patch checks
            runtime_environment: Environment snapshot taken at startup
            steam_discovery: Validates runners when launched under Steam;
                built from `runtime_environment` when omitted
        """
        self.profile = profile
        self.runtime_environment = runtime_environment
        self.steam_discovery = steam_discovery or SteamRuntimeDiscovery(runtime_environment)
        self.last_sync_report: Optional[MirrorSyncReport] = None

    def _notify(self, context: CheckContext, stage: StateUpdating, locale: Optional[str] = None) -> None:
        if context.status_updater is None:
            return
        try:
            context.status_updater(StatusUpdate(stage, locale))
        except Exception as e:
            logger.warning(f"Status updater failed at {stage.value}: {e}")

    def _check_runner(self, context: CheckContext) -> Optional[LaunchReadinessState]:
        runner = context.selected_runner
        if runner is None:
            logger.debug("No runner selected")
            return WineNotInstalled()
        if self.runtime_environment.launched_from_steam:
            # Under Steam only the Proton builds Steam owns are valid
            if not self.steam_discovery.valid_selected_runner(runner.name):
                logger.debug(f"Runner {runner.name} is not a Steam-managed Proton build")
                return WineNotInstalled()
            return None
        if runner.managed:
            return None
        if context.wine_builds is not None and not (context.wine_builds / runner.name).exists():
            logger.debug(f"Runner {runner.name} is not downloaded in {context.wine_builds}")
            return WineNotInstalled()
        return None

    def _check_prefix(self, context: CheckContext) -> Optional[LaunchReadinessState]:
        # Managed runners own their prefix lifecycle
        if context.runner_managed:
            return None
        if not WineUtils.is_prefix_created(context.wine_prefix):
            logger.debug(f"Prefix {context.wine_prefix} has no drive_c")
            return PrefixNotExists()
        return None

    def _check_voices(self, context: CheckContext,
                      predownload_voices: List[VersionDiff]) -> Optional[LaunchReadinessState]:
        for locale in context.selected_voices:
            self._notify(context, StateUpdating.VOICE, locale)
            diff = self.profile.diff_provider.get_voice_diff(context, locale)
            logger.debug(f"Voice package {locale}: {diff.kind.value}")

            if diff.kind == DiffKind.LATEST:
                continue
            if diff.kind == DiffKind.PREDOWNLOAD:
                predownload_voices.append(diff)
                continue
            return VOICE_DIFF_STATES[diff.kind](diff)
        return None

    def sync_patch_mirrors(self, context: CheckContext) -> MirrorSyncReport:
        """
        Sync the local patch cache from the first mirror that works.

        Mirror errors are recorded in the report and otherwise ignored; the
        checks carry on with whatever the cache holds.
        """
        report = MirrorSyncReport()
        provider = self.profile.patch_provider
        servers = list(context.patch.servers)

        if provider is None or not servers:
            report.skipped = True
        elif provider.is_synced(servers):
            logger.debug("Patch folder already in sync")
            report.skipped = True
        else:
            for server in servers:
                report.attempted.append(server)
                try:
                    provider.sync(server)
                except Exception as e:
                    logger.debug(f"Patch mirror {server} failed: {e}")
                    report.failures.append((server, e))
                    continue
                report.synced_from = server
                logger.info(f"Patch folder synced from {server}")
                break

            if report.exhausted:
                logger.warning("All patch mirrors failed, using the cached patch folder")

        self.last_sync_report = report
        return report

    def _check_patches(self, context: CheckContext) -> Optional[LaunchReadinessState]:
        self.sync_patch_mirrors(context)
        for patch_check in self.profile.patch_checks:
            state = patch_check.check(context)
            if state is not None:
                return state
        return None

    def telemetry_disabled(self, context: CheckContext) -> bool:
        """
        Check whether the telemetry domains are blocked.

        A lookup error counts as disabled so a flaky resolver never blocks play.
        """
        provider = self.profile.telemetry_provider
        if provider is None:
            return True
        try:
            resolved = provider.resolve(context.game_edition)
        except Exception as e:
            logger.warning(f"Failed to check telemetry servers: {e}. Assuming they're disabled")
            return True
        if resolved is not None:
            logger.debug(f"Telemetry domain resolved: {resolved}")
        return resolved is None

    def resolve(self, context: CheckContext) -> LaunchReadinessState:
        """
        Get the launch readiness state for `context`.

        Provider errors (other than mirror sync and telemetry lookups)
        propagate to the caller unchanged.
        """
        state = self._resolve(context)
        logger.info(f"{self.profile.name} launch state: {state.name}")
        return state

    def _resolve(self, context: CheckContext) -> LaunchReadinessState:
        logger.debug(f"Resolving launch state for {self.profile.name}")

        state = self._check_runner(context)
        if state is not None:
            return state

        state = self._check_prefix(context)
        if state is not None:
            return state

        self._notify(context, StateUpdating.GAME)
        game_diff = self.profile.diff_provider.get_game_diff(context)
        logger.debug(f"Game diff: {game_diff.kind.value}")
        if not game_diff.is_playable:
            return GAME_DIFF_STATES[game_diff.kind](game_diff)

        predownload_voices: List[VersionDiff] = []
        state = self._check_voices(context, predownload_voices)
        if state is not None:
            return state

        self._notify(context, StateUpdating.PATCH)
        state = self._check_patches(context)
        if state is not None:
            return state

        self._notify(context, StateUpdating.TELEMETRY)
        if not self.telemetry_disabled(context) and not context.telemetry_ignored:
            return TelemetryNotDisabled()

        if game_diff.kind == DiffKind.PREDOWNLOAD:
            return PredownloadAvailable(game=game_diff, voices=tuple(predownload_voices))
        return Launch()
