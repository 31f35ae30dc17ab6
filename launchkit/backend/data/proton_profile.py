"""
Fixed launch profile of Steam-managed Proton builds.
"""

from typing import Optional

from ..models.components import BundleKind, Features

STEAM_PROTON_GROUP = "steam-proton"
STEAM_PROTON_TITLE = "Proton Runners via Steam"

PROTON_COMMAND = "python3 '%build%/proton' waitforexitandrun"
PROTON_PREFIX_SUBDIR = "pfx"

# Relative to the Proton install directory
PROTON_FILES = {
    'wine': "files/bin/wine",
    'wine64': "files/bin/wine64",
    'wineserver': "files/bin/wineserver",
    'winecfg': "files/lib64/wine/x86_64-windows/winecfg.exe",
}


def steam_proton_features(steam_root: Optional[str] = None) -> Features:
    """Features shared by every discovered Proton build."""
    return Features(
        bundle=BundleKind.PROTON,
        need_dxvk=False,
        compact_launch=True,
        prefix_subdir=PROTON_PREFIX_SUBDIR,
        command=PROTON_COMMAND,
        env={
            'STEAM_COMPAT_DATA_PATH': "%prefix%",
            'STEAM_COMPAT_CLIENT_INSTALL_PATH': steam_root or "",
            'SteamAppId': "0",
        },
    )
