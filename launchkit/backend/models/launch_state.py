"""
Launch State Models

Version diffs consumed from the game version provider, status updates sent
while checks run, and the closed set of launch readiness states.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class DiffKind(Enum):
    """Status of an installed game or voice package against the remote one."""
    LATEST = "latest"
    PREDOWNLOAD = "predownload"
    DIFF = "diff"
    OUTDATED = "outdated"
    NOT_INSTALLED = "not_installed"


@dataclass(frozen=True)
class VersionDiff:
    """
    Tagged diff result from a game version provider.

    `payload` is opaque to this package and handed back to the frontend
    untouched (download URLs, sizes, and so on).
    """
    kind: DiffKind
    current: Optional[str] = None
    latest: Optional[str] = None
    payload: Any = None

    @classmethod
    def latest_version(cls, version: str) -> 'VersionDiff':
        return cls(DiffKind.LATEST, current=version, latest=version)

    @property
    def is_playable(self) -> bool:
        """Latest and predownload diffs let the checks continue."""
        return self.kind in (DiffKind.LATEST, DiffKind.PREDOWNLOAD)


class StateUpdating(Enum):
    """Check stages reported to the status updater."""
    GAME = "game"
    VOICE = "voice"
    PATCH = "patch"
    TELEMETRY = "telemetry"


@dataclass(frozen=True)
class StatusUpdate:
    stage: StateUpdating
    locale: Optional[str] = None


class PatchStatus(Enum):
    """Verification status of a patch for the installed game version."""
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    BROKEN = "broken"
    UNSAFE = "unsafe"
    CONCERNING = "concerning"


class LaunchReadinessState:
    """Base class of every launch readiness outcome."""

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Launch(LaunchReadinessState):
    pass


@dataclass(frozen=True)
class PredownloadAvailable(LaunchReadinessState):
    """`game` always has DiffKind.PREDOWNLOAD."""
    game: VersionDiff
    voices: Tuple[VersionDiff, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class WineNotInstalled(LaunchReadinessState):
    pass


@dataclass(frozen=True)
class PrefixNotExists(LaunchReadinessState):
    pass


@dataclass(frozen=True)
class GameNotInstalled(LaunchReadinessState):
    diff: VersionDiff


@dataclass(frozen=True)
class GameOutdated(LaunchReadinessState):
    diff: VersionDiff


@dataclass(frozen=True)
class GameUpdateAvailable(LaunchReadinessState):
    diff: VersionDiff


@dataclass(frozen=True)
class VoiceNotInstalled(LaunchReadinessState):
    diff: VersionDiff


@dataclass(frozen=True)
class VoiceOutdated(LaunchReadinessState):
    diff: VersionDiff


@dataclass(frozen=True)
class VoiceUpdateAvailable(LaunchReadinessState):
    diff: VersionDiff


@dataclass(frozen=True)
class PatchNotInstalled(LaunchReadinessState):
    patch: Any = None


@dataclass(frozen=True)
class PatchUpdateAvailable(LaunchReadinessState):
    patch: Any = None


@dataclass(frozen=True)
class PatchNotVerified(LaunchReadinessState):
    pass


@dataclass(frozen=True)
class PatchBroken(LaunchReadinessState):
    pass


@dataclass(frozen=True)
class PatchUnsafe(LaunchReadinessState):
    pass


@dataclass(frozen=True)
class PatchConcerning(LaunchReadinessState):
    pass


@dataclass(frozen=True)
class TelemetryNotDisabled(LaunchReadinessState):
    pass


GAME_DIFF_STATES = {
    DiffKind.NOT_INSTALLED: GameNotInstalled,
    DiffKind.OUTDATED: GameOutdated,
    DiffKind.DIFF: GameUpdateAvailable,
}

VOICE_DIFF_STATES = {
    DiffKind.NOT_INSTALLED: VoiceNotInstalled,
    DiffKind.OUTDATED: VoiceOutdated,
    DiffKind.DIFF: VoiceUpdateAvailable,
}

PATCH_STATUS_STATES = {
    PatchStatus.UNVERIFIED: PatchNotVerified,
    PatchStatus.BROKEN: PatchBroken,
    PatchStatus.UNSAFE: PatchUnsafe,
    PatchStatus.CONCERNING: PatchConcerning,
}
