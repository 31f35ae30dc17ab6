"""
Component Data Models

Runner (Wine/Proton) and DXVK catalog entries, and the launch features
attached to them.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class ComponentKind(Enum):
    """Kinds of components listed in the catalog index."""
    WINE = "wine"
    DXVK = "dxvk"


class BundleKind(Enum):
    """Runner bundles that need special launch handling."""
    PROTON = "Proton"


@dataclass
class Features:
    """
    Launch configuration of a runner group or version.

    `command` and `env` values may contain the placeholders
    %build%, %prefix%, %temp%, %launcher% and %game%.
    """
    bundle: Optional[BundleKind] = None
    need_dxvk: bool = True
    compact_launch: bool = False
    prefix_subdir: Optional[str] = None
    command: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, value: Any) -> 'Features':
        """
        Build features from a catalog JSON value.

        Mistyped or unknown fields keep their defaults; a non-object value
        yields the defaults for every field.
        """
        features = cls()
        if not isinstance(value, dict):
            return features

        bundle = value.get("bundle")
        if isinstance(bundle, str):
            try:
                features.bundle = BundleKind(bundle)
            except ValueError:
                pass

        need_dxvk = value.get("need_dxvk")
        if isinstance(need_dxvk, bool):
            features.need_dxvk = need_dxvk

        compact_launch = value.get("compact_launch")
        if isinstance(compact_launch, bool):
            features.compact_launch = compact_launch

        prefix_subdir = value.get("prefix_subdir")
        if isinstance(prefix_subdir, str):
            features.prefix_subdir = prefix_subdir

        command = value.get("command")
        if isinstance(command, str):
            features.command = command

        env = value.get("env")
        if isinstance(env, dict):
            for key, item in env.items():
                features.env[str(key)] = item if isinstance(item, str) else json.dumps(item)

        return features

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the catalog JSON shape."""
        data: Dict[str, Any] = {
            'need_dxvk': self.need_dxvk,
            'compact_launch': self.compact_launch,
            'env': dict(self.env),
        }
        if self.bundle is not None:
            data['bundle'] = self.bundle.value
        if self.prefix_subdir is not None:
            data['prefix_subdir'] = self.prefix_subdir
        if self.command is not None:
            data['command'] = self.command
        return data


@dataclass
class ComponentVersion:
    """A single downloadable (or externally managed) build."""
    name: str
    title: str
    uri: str
    files: Dict[str, str] = field(default_factory=dict)
    features: Optional[Features] = None
    managed: bool = False

    def is_downloaded_in(self, folder: Path) -> bool:
        """Check whether this version's folder exists in `folder`."""
        return (Path(folder) / self.name).is_dir()


@dataclass
class ComponentGroup:
    """A family of builds sharing default features."""
    name: str
    title: str
    features: Optional[Features] = None
    versions: List[ComponentVersion] = field(default_factory=list)
    managed: bool = False

    def has_member(self, name: str) -> bool:
        """Check if `name` is this group's name or one of its version names."""
        return self.name == name or any(version.name == name for version in self.versions)

    def find_version(self, name: str) -> Optional[ComponentVersion]:
        for version in self.versions:
            if version.name == name:
                return version
        return None
