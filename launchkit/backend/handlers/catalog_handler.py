#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Catalog Handler Module
Reads the two-level components catalog (index + per-group version lists)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.errors import StructuralConfigError
from ..models.components import ComponentGroup, ComponentKind, ComponentVersion, Features

# Initialize logger
logger = logging.getLogger(__name__)

INDEX_FILE = "components.json"

# Optional binary paths of a wine build, next to the required `wine`
OPTIONAL_WINE_FILES = ("wine64", "wineserver", "wineboot", "winecfg")


class CatalogHandler:
    """
    Parses catalog documents into component groups.

    The catalog is shipped separately from the package, so required keys are
    checked strictly and reported with the path of the offending field.
    Optional `features` objects never fail a load.
    """

    @staticmethod
    def index_path(catalog_path: Path) -> Path:
        return Path(catalog_path) / INDEX_FILE

    @staticmethod
    def group_path(catalog_path: Path, kind: ComponentKind, group_name: str) -> Path:
        return Path(catalog_path) / kind.value / f"{group_name}.json"

    @staticmethod
    def read_json(path: Path) -> Any:
        """Read a JSON document, reporting I/O and syntax errors structurally."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            raise StructuralConfigError(str(path), "file not found")
        except json.JSONDecodeError as e:
            raise StructuralConfigError(str(path), f"invalid JSON ({e.msg} at line {e.lineno})")
        except OSError as e:
            raise StructuralConfigError(str(path), f"cannot be read: {e}")

    @staticmethod
    def _require_str(entry: Dict[str, Any], key: str, where: str) -> str:
        if key not in entry:
            raise StructuralConfigError(f"{where}.{key}", "entry not found")
        value = entry[key]
        if not isinstance(value, str):
            raise StructuralConfigError(f"{where}.{key}", "entry must be a string")
        return value

    @classmethod
    def _require_name(cls, entry: Dict[str, Any], where: str) -> str:
        """Names become file and folder names, so they must be a single path component."""
        name = cls._require_str(entry, "name", where)
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise StructuralConfigError(f"{where}.name", f"invalid name {name!r}")
        return name

    @staticmethod
    def _optional_features(entry: Dict[str, Any]) -> Optional[Features]:
        if "features" not in entry:
            return None
        return Features.from_json(entry["features"])

    @classmethod
    def parse_files(cls, entry: Dict[str, Any], kind: ComponentKind, where: str) -> Dict[str, str]:
        """
        Parse a version's `files` object.

        Wine builds must name at least the `wine` binary; DXVK builds may omit
        `files` altogether.
        """
        if "files" not in entry:
            if kind == ComponentKind.WINE:
                raise StructuralConfigError(f"{where}.files", "entry not found")
            return {}

        files = entry["files"]
        if not isinstance(files, dict):
            raise StructuralConfigError(f"{where}.files", "entry must be an object")

        if kind == ComponentKind.WINE:
            parsed = {'wine': cls._require_str(files, "wine", f"{where}.files")}
            for key in OPTIONAL_WINE_FILES:
                value = files.get(key)
                if value is None:
                    continue
                if not isinstance(value, str):
                    raise StructuralConfigError(f"{where}.files.{key}", "entry must be a string")
                parsed[key] = value
            return parsed

        return {str(key): value for key, value in files.items() if isinstance(value, str)}

    @classmethod
    def parse_versions(cls, document: Any, kind: ComponentKind, where: str) -> List[ComponentVersion]:
        """Parse a per-group version document."""
        if not isinstance(document, list):
            raise StructuralConfigError(where, f"{kind.value} versions must be a list")

        versions = []
        for i, entry in enumerate(document):
            entry_where = f"{where}[{i}]"
            if not isinstance(entry, dict):
                raise StructuralConfigError(entry_where, "version entry must be an object")

            versions.append(ComponentVersion(
                name=cls._require_name(entry, entry_where),
                title=cls._require_str(entry, "title", entry_where),
                uri=cls._require_str(entry, "uri", entry_where),
                files=cls.parse_files(entry, kind, entry_where),
                features=cls._optional_features(entry),
                managed=False,
            ))
        return versions

    @classmethod
    def load_groups(cls, catalog_path: Path, kind: ComponentKind) -> List[ComponentGroup]:
        """
        Load every group of `kind` with its versions.

        Raises:
            StructuralConfigError: if a document is missing, unreadable, or a
                required key is absent or mistyped
        """
        catalog_path = Path(catalog_path)
        index_file = cls.index_path(catalog_path)
        logger.debug(f"Loading {kind.value} groups from {index_file}")

        index = cls.read_json(index_file)
        if not isinstance(index, dict):
            raise StructuralConfigError(INDEX_FILE, "index must be an object")
        if kind.value not in index:
            raise StructuralConfigError(f"{INDEX_FILE}:{kind.value}", "entry not found")

        entries = index[kind.value]
        if not isinstance(entries, list):
            raise StructuralConfigError(f"{INDEX_FILE}:{kind.value}", "entry must be a list")

        groups = []
        for i, entry in enumerate(entries):
            where = f"{INDEX_FILE}:{kind.value}[{i}]"
            if not isinstance(entry, dict):
                raise StructuralConfigError(where, "group entry must be an object")

            name = cls._require_name(entry, where)
            title = cls._require_str(entry, "title", where)

            group_file = cls.group_path(catalog_path, kind, name)
            versions = cls.parse_versions(
                cls.read_json(group_file), kind, f"{kind.value}/{name}.json"
            )

            groups.append(ComponentGroup(
                name=name,
                title=title,
                features=cls._optional_features(entry),
                versions=versions,
                managed=False,
            ))
            logger.debug(f"Loaded {kind.value} group {name} with {len(versions)} version(s)")

        logger.info(f"Loaded {len(groups)} {kind.value} group(s) from {catalog_path}")
        return groups
