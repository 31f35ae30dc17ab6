"""
Pytest configuration and fixtures for launchkit tests.
"""

import json
from pathlib import Path

import pytest

from launchkit.backend.models.configuration import CheckContext, RuntimeEnvironment, SelectedRunner
from launchkit.backend.models.launch_state import DiffKind, VersionDiff


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


CATALOG_INDEX = {
    "wine": [
        {
            "name": "wine-ge-proton",
            "title": "Wine-GE-Proton",
            "features": {"need_dxvk": False, "env": {"WINEESYNC": "1"}},
        },
        {"name": "lutris", "title": "Lutris"},
    ],
    "dxvk": [
        {"name": "vanilla", "title": "Vanilla"},
    ],
}

CATALOG_GROUPS = {
    "wine/wine-ge-proton.json": [
        {
            "name": "lutris-GE-Proton8-26-x86_64",
            "title": "Wine-GE-Proton 8-26",
            "uri": "https://example.invalid/wine-lutris-GE-Proton8-26-x86_64.tar.xz",
            "files": {
                "wine": "bin/wine",
                "wine64": "bin/wine64",
                "wineserver": "bin/wineserver",
                "wineboot": "bin/wineboot",
                "winecfg": "lib64/wine/x86_64-windows/winecfg.exe",
            },
        },
        {
            "name": "lutris-GE-Proton7-37-x86_64",
            "title": "Wine-GE-Proton 7-37",
            "uri": "https://example.invalid/wine-lutris-GE-Proton7-37-x86_64.tar.xz",
            "files": {"wine": "bin/wine", "wine64": "bin/wine64"},
            "features": {"compact_launch": True},
        },
    ],
    "wine/lutris.json": [
        {
            "name": "lutris-7.2-2",
            "title": "Lutris 7.2-2",
            "uri": "https://example.invalid/wine-lutris-7.2-2-x86_64.tar.xz",
            "files": {"wine": "bin/wine", "wineboot": "lib/wine/x86_64-windows/wineboot.exe"},
        },
    ],
    "dxvk/vanilla.json": [
        {"name": "dxvk-2.3", "title": "DXVK 2.3", "uri": "https://example.invalid/dxvk-2.3.tar.gz"},
        {"name": "dxvk-2.2", "title": "DXVK 2.2", "uri": "https://example.invalid/dxvk-2.2.tar.gz"},
    ],
}


@pytest.fixture
def catalog_path(tmp_path: Path) -> Path:
    """A well-formed components catalog folder."""
    root = tmp_path / "components"
    write_json(root / "components.json", CATALOG_INDEX)
    for relative, versions in CATALOG_GROUPS.items():
        write_json(root / relative, versions)
    return root


def make_proton(root: Path, folder: str, version_line: str = None) -> Path:
    """Create a Proton build folder with a launcher script and version file."""
    proton_dir = root / folder
    proton_dir.mkdir(parents=True)
    (proton_dir / "proton").write_text("#!/usr/bin/env python3\n", encoding="utf-8")
    if version_line is not None:
        (proton_dir / "version").write_text(version_line + "\n", encoding="utf-8")
    return proton_dir


@pytest.fixture
def steam_home(tmp_path: Path) -> Path:
    """
    A home folder with a native Steam install and a second library.

    Valid builds: GE-Proton9-1 (compatibilitytools.d) and proton-8.0-5
    (root library). Everything else must be skipped.
    """
    home = tmp_path / "home"
    steam_root = home / ".local" / "share" / "Steam"
    (steam_root / "steamapps" / "common").mkdir(parents=True)
    library2 = tmp_path / "library2"
    (library2 / "steamapps" / "common").mkdir(parents=True)

    (steam_root / "steamapps" / "libraryfolders.vdf").write_text(
        '"libraryfolders"\n'
        '{\n'
        '\t"0"\n'
        '\t{\n'
        f'\t\t"path"\t\t"{steam_root}"\n'
        '\t}\n'
        '\t"1"\n'
        '\t{\n'
        f'\t\t"path"\t\t"{library2}"\n'
        '\t}\n'
        '}\n',
        encoding="utf-8",
    )

    compat = steam_root / "compatibilitytools.d"
    ge = make_proton(compat, "GE-Proton9-1", "1700000000 GE-Proton9-1")
    (compat / "Linked").symlink_to(ge, target_is_directory=True)
    make_proton(steam_root / "steamapps" / "common", "Proton 8.0", "1690000000 proton-8.0-5")
    make_proton(library2 / "steamapps" / "common", "Proton Experimental", "experimental")
    make_proton(library2 / "steamapps" / "common", "Proton Hotfix")
    (library2 / "steamapps" / "common" / "Some Game").mkdir()
    return home


@pytest.fixture
def runtime(tmp_path: Path) -> RuntimeEnvironment:
    """Independent (non-Steam) runtime rooted in a temporary home."""
    return RuntimeEnvironment(home=tmp_path / "home")


class FakeVersionProvider:
    """Game version provider with canned diffs and call counters."""

    def __init__(self, game_diff: VersionDiff, voice_diffs=None):
        self.game_diff = game_diff
        self.voice_diffs = voice_diffs or {}
        self.game_calls = 0
        self.voice_calls = []

    def get_game_diff(self, context):
        self.game_calls += 1
        return self.game_diff

    def get_voice_diff(self, context, locale):
        self.voice_calls.append(locale)
        return self.voice_diffs.get(locale, VersionDiff.latest_version("1.0.0"))


class FakePatchProvider:
    """Patch mirror provider; servers in `failing` raise on sync."""

    def __init__(self, failing=(), synced=False):
        self.failing = set(failing)
        self.synced = synced
        self.is_synced_calls = 0
        self.sync_calls = []

    def is_synced(self, servers):
        self.is_synced_calls += 1
        return self.synced

    def sync(self, server):
        self.sync_calls.append(server)
        if server in self.failing:
            raise ConnectionError(f"{server} unreachable")


class FakeTelemetryProvider:
    def __init__(self, resolved=None, error=None):
        self.resolved = resolved
        self.error = error
        self.calls = 0

    def resolve(self, edition):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.resolved


class FakeAppliedPatch:
    def __init__(self, applied=True):
        self.applied = applied
        self.calls = 0

    def is_applied(self, game_path):
        self.calls += 1
        return self.applied

    def descriptor(self):
        return {"name": "player", "version": "4.0.0"}


@pytest.fixture
def latest_diff() -> VersionDiff:
    return VersionDiff.latest_version("4.0.0")


@pytest.fixture
def predownload_diff() -> VersionDiff:
    return VersionDiff(DiffKind.PREDOWNLOAD, current="4.0.0", latest="4.1.0", payload={"size": 1024})


@pytest.fixture
def prefix(tmp_path: Path) -> Path:
    """A created wine prefix (has drive_c)."""
    path = tmp_path / "prefix"
    (path / "drive_c").mkdir(parents=True)
    return path


@pytest.fixture
def context(tmp_path: Path, prefix: Path) -> CheckContext:
    """Context with an unmanaged downloaded runner and a created prefix."""
    builds = tmp_path / "runners"
    (builds / "lutris-GE-Proton8-26-x86_64").mkdir(parents=True)
    return CheckContext(
        wine_prefix=prefix,
        game_path=tmp_path / "game",
        selected_runner=SelectedRunner("lutris-GE-Proton8-26-x86_64"),
        wine_builds=builds,
        selected_voices=["en-us"],
    )
