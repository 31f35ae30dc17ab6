"""
Unit tests for feature parsing and version/group feature resolution.
"""

from dataclasses import fields

from launchkit.backend.core.features import features_in, resolve_features
from launchkit.backend.models.components import (
    BundleKind,
    ComponentGroup,
    ComponentVersion,
    Features,
)


class TestResolveFeatures:
    """Whole-object fallback between version and group features."""

    def test_version_features_win_completely(self):
        version = Features(compact_launch=True)
        group = Features(need_dxvk=False, env={"WINEESYNC": "1"}, command="run %game%")

        resolved = resolve_features(version, group)

        assert resolved is version
        # Nothing leaks in from the group
        assert resolved.need_dxvk is True
        assert resolved.env == {}
        assert resolved.command is None

    def test_group_features_used_without_version_features(self):
        group = Features(need_dxvk=False, env={"WINEESYNC": "1"})
        assert resolve_features(None, group) is group

    def test_defaults_without_any_features(self):
        resolved = resolve_features(None, None)
        assert resolved == Features()
        assert resolved.need_dxvk is True
        assert resolved.env == {}
        assert resolved.bundle is None
        assert resolved.command is None
        assert resolved.compact_launch is False

    def test_defaults_are_fresh_objects(self):
        first = resolve_features(None, None)
        first.env["X"] = "1"
        assert resolve_features(None, None).env == {}

    def test_features_in_uses_version_and_group(self):
        group = ComponentGroup("ge", "GE", features=Features(need_dxvk=False))
        plain = ComponentVersion("a", "A", "uri")
        custom = ComponentVersion("b", "B", "uri", features=Features(prefix_subdir="pfx"))
        group.versions = [plain, custom]

        assert features_in(plain, group).need_dxvk is False
        assert features_in(custom, group).prefix_subdir == "pfx"
        assert features_in(custom, group).need_dxvk is True


class TestFeaturesFromJson:
    """Lenient parsing of catalog feature objects."""

    def test_full_object(self):
        features = Features.from_json({
            "bundle": "Proton",
            "need_dxvk": False,
            "compact_launch": True,
            "prefix_subdir": "pfx",
            "command": "python3 '%build%/proton' run",
            "env": {"STEAM_COMPAT_DATA_PATH": "%prefix%"},
        })

        assert features.bundle == BundleKind.PROTON
        assert features.need_dxvk is False
        assert features.compact_launch is True
        assert features.prefix_subdir == "pfx"
        assert features.command == "python3 '%build%/proton' run"
        assert features.env == {"STEAM_COMPAT_DATA_PATH": "%prefix%"}

    def test_mistyped_fields_keep_defaults(self):
        features = Features.from_json({
            "bundle": "Steam",
            "need_dxvk": "no",
            "compact_launch": 1,
            "prefix_subdir": ["pfx"],
            "command": 42,
            "env": ["A=1"],
        })
        assert features == Features()

    def test_unknown_fields_ignored(self):
        assert Features.from_json({"gamescope": True}) == Features()

    def test_non_object_yields_defaults(self):
        assert Features.from_json("proton") == Features()
        assert Features.from_json(None) == Features()

    def test_non_string_env_values_kept_as_json(self):
        features = Features.from_json({"env": {"DXVK_HUD": 1, "ENABLED": True, "NAME": "x"}})
        assert features.env == {"DXVK_HUD": "1", "ENABLED": "true", "NAME": "x"}

    def test_to_dict_omits_unset_fields(self):
        data = Features(env={"A": "1"}).to_dict()
        assert data == {"need_dxvk": True, "compact_launch": False, "env": {"A": "1"}}
        assert Features.from_json(Features(bundle=BundleKind.PROTON).to_dict()).bundle == BundleKind.PROTON

    def test_every_field_comes_from_catalog_json(self):
        full = {
            "bundle": "Proton",
            "need_dxvk": False,
            "compact_launch": True,
            "prefix_subdir": "pfx",
            "command": "'%build%/proton' run",
            "env": {"A": "1"},
        }
        assert {f.name for f in fields(Features)} == set(full)
        assert Features.from_json(full).to_dict() == full
