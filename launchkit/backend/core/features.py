"""
Feature resolution between a version and its group.
"""

from typing import Optional

from ..models.components import ComponentGroup, ComponentVersion, Features


def resolve_features(version_features: Optional[Features],
                     group_features: Optional[Features]) -> Features:
    """
    Return the effective features of a version.

    Whole-object fallback: version features win completely when present,
    otherwise the group's features, otherwise the defaults. Fields are never
    merged across the two levels, so a version entry that sets only `env`
    gets default values for everything else.
    """
    if version_features is not None:
        return version_features
    if group_features is not None:
        return group_features
    return Features()


def features_in(version: ComponentVersion, group: ComponentGroup) -> Features:
    """Effective features of `version` inside `group`."""
    return resolve_features(version.features, group.features)
