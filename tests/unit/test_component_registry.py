"""
Unit tests for the component registry.
"""

import threading
import time
from unittest.mock import Mock, patch

import pytest

from conftest import CATALOG_GROUPS, write_json
from launchkit.backend.core.errors import DiscoveryError, NotFoundError, StructuralConfigError
from launchkit.backend.handlers.catalog_handler import CatalogHandler
from launchkit.backend.models.components import ComponentGroup, ComponentKind, ComponentVersion
from launchkit.backend.services.component_registry_service import ComponentRegistry


def steam_group():
    return ComponentGroup(
        name="steam-proton",
        title="Proton Runners via Steam",
        versions=[ComponentVersion("GE-Proton9-1", "GE-Proton9-1", "/steam/GE-Proton9-1", managed=True)],
        managed=True,
    )


class TestLoadAndCache:
    """Tests for loading and memoization."""

    def test_version_count_matches_documents(self, catalog_path):
        registry = ComponentRegistry()
        for kind in ComponentKind:
            expected = sum(
                len(versions) for relative, versions in CATALOG_GROUPS.items()
                if relative.startswith(kind.value + "/")
            )
            groups = registry.load_groups(catalog_path, kind)
            assert sum(len(group.versions) for group in groups) == expected

    def test_reload_returns_cached_object(self, catalog_path):
        registry = ComponentRegistry()
        first = registry.load_groups(catalog_path, ComponentKind.WINE)
        second = registry.load_groups(catalog_path, ComponentKind.WINE)
        assert first is second

    def test_equivalent_paths_share_cache(self, catalog_path):
        registry = ComponentRegistry()
        first = registry.load_groups(catalog_path, ComponentKind.WINE)
        second = registry.load_groups(catalog_path / "wine" / "..", ComponentKind.WINE)
        assert first is second

    def test_edits_not_observed_until_invalidated(self, catalog_path):
        registry = ComponentRegistry()
        registry.load_groups(catalog_path, ComponentKind.DXVK)

        write_json(catalog_path / "dxvk" / "vanilla.json", [
            {"name": "dxvk-2.4", "title": "DXVK 2.4", "uri": "x"},
        ])
        stale = registry.load_groups(catalog_path, ComponentKind.DXVK)
        assert stale[0].versions[0].name == "dxvk-2.3"

        registry.invalidate(catalog_path)
        fresh = registry.load_groups(catalog_path, ComponentKind.DXVK)
        assert [version.name for version in fresh[0].versions] == ["dxvk-2.4"]

    def test_reload_rereads_catalog(self, catalog_path):
        registry = ComponentRegistry()
        first = registry.load_groups(catalog_path, ComponentKind.WINE)
        second = registry.reload(catalog_path, ComponentKind.WINE)
        assert first is not second
        assert [group.name for group in first] == [group.name for group in second]

    def test_invalidate_all(self, catalog_path):
        registry = ComponentRegistry()
        first = registry.load_groups(catalog_path, ComponentKind.WINE)
        registry.invalidate()
        assert registry.load_groups(catalog_path, ComponentKind.WINE) is not first

    def test_failed_load_not_cached(self, catalog_path):
        registry = ComponentRegistry()
        (catalog_path / "dxvk" / "vanilla.json").unlink()
        with pytest.raises(StructuralConfigError):
            registry.load_groups(catalog_path, ComponentKind.DXVK)

        write_json(catalog_path / "dxvk" / "vanilla.json", CATALOG_GROUPS["dxvk/vanilla.json"])
        groups = registry.load_groups(catalog_path, ComponentKind.DXVK)
        assert len(groups[0].versions) == 2

    def test_concurrent_first_load_runs_once(self, catalog_path):
        registry = ComponentRegistry()
        real_load = CatalogHandler.load_groups

        def slow_load(path, kind):
            time.sleep(0.05)
            return real_load(path, kind)

        results = []
        with patch.object(CatalogHandler, "load_groups", side_effect=slow_load) as mock_load:
            threads = [
                threading.Thread(target=lambda: results.append(
                    registry.load_groups(catalog_path, ComponentKind.WINE)))
                for _ in range(8)
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert mock_load.call_count == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)
        assert len(results[0]) == 2


class TestLookups:
    """Tests for group and version lookups."""

    def test_find_group_by_group_name(self, catalog_path):
        group = ComponentRegistry().find_group_by_name_or_member(catalog_path, "lutris")
        assert group.name == "lutris"

    def test_find_group_by_member_name(self, catalog_path):
        group = ComponentRegistry().find_group_by_name_or_member(
            catalog_path, "lutris-GE-Proton7-37-x86_64"
        )
        assert group.name == "wine-ge-proton"

    def test_find_group_in_dxvk(self, catalog_path):
        registry = ComponentRegistry()
        assert registry.find_group_by_name_or_member(catalog_path, "dxvk-2.2", ComponentKind.DXVK).name == "vanilla"
        assert registry.find_group_by_name_or_member(catalog_path, "dxvk-2.2") is None

    def test_find_group_unknown(self, catalog_path):
        assert ComponentRegistry().find_group_by_name_or_member(catalog_path, "proton-9") is None

    def test_get_version_raises_not_found(self, catalog_path):
        registry = ComponentRegistry()
        assert registry.get_version(catalog_path, "lutris-7.2-2").title == "Lutris 7.2-2"
        with pytest.raises(NotFoundError) as exc_info:
            registry.get_version(catalog_path, "lutris-0.1")
        assert exc_info.value.name == "lutris-0.1"

    def test_latest_version(self, catalog_path):
        registry = ComponentRegistry()
        assert registry.latest_version(catalog_path).name == "lutris-GE-Proton8-26-x86_64"
        assert registry.latest_version(catalog_path, ComponentKind.DXVK).name == "dxvk-2.3"

    def test_latest_version_of_empty_catalog(self, catalog_path):
        write_json(catalog_path / "components.json", {"wine": [], "dxvk": []})
        with pytest.raises(NotFoundError):
            ComponentRegistry().latest_version(catalog_path)

    def test_version_features_fall_back_to_group(self, catalog_path):
        registry = ComponentRegistry()
        inherited = registry.get_version(catalog_path, "lutris-GE-Proton8-26-x86_64")
        own = registry.get_version(catalog_path, "lutris-GE-Proton7-37-x86_64")
        bare = registry.get_version(catalog_path, "lutris-7.2-2")

        assert registry.version_features(catalog_path, inherited).need_dxvk is False
        assert registry.version_features(catalog_path, inherited).env == {"WINEESYNC": "1"}
        # Own features replace the group's entirely
        assert registry.version_features(catalog_path, own).need_dxvk is True
        assert registry.version_features(catalog_path, own).env == {}
        assert registry.version_features(catalog_path, bare).need_dxvk is True


class TestListDownloaded:
    """Tests for filtering by the local builds folder."""

    def test_only_present_versions_returned(self, catalog_path, tmp_path):
        builds = tmp_path / "runners"
        (builds / "lutris-GE-Proton7-37-x86_64").mkdir(parents=True)
        (builds / "not-in-catalog").mkdir()
        (builds / "lutris-7.2-2").write_text("a file, not a folder")

        groups = ComponentRegistry().list_downloaded(catalog_path, builds)

        assert [group.name for group in groups] == ["wine-ge-proton"]
        assert [version.name for version in groups[0].versions] == ["lutris-GE-Proton7-37-x86_64"]

    def test_filtering_does_not_touch_cache(self, catalog_path, tmp_path):
        registry = ComponentRegistry()
        registry.list_downloaded(catalog_path, tmp_path / "missing")
        groups = registry.load_groups(catalog_path, ComponentKind.WINE)
        assert len(groups[0].versions) == 2

    def test_managed_groups_returned_unfiltered(self, catalog_path, tmp_path):
        discovery = Mock(launched_from_steam=True)
        discovery.discover_proton_installs.return_value = [steam_group()]

        groups = ComponentRegistry(steam_discovery=discovery).list_downloaded(catalog_path, tmp_path / "empty")

        assert len(groups) == 1
        assert groups[0].managed
        assert groups[0].versions[0].name == "GE-Proton9-1"


class TestSteamPreference:
    """Tests for Steam-managed Proton replacing the catalog."""

    def test_steam_groups_when_launched_from_steam(self, catalog_path):
        discovery = Mock(launched_from_steam=True)
        discovery.discover_proton_installs.return_value = [steam_group()]

        groups = ComponentRegistry(steam_discovery=discovery).get_wine_groups(catalog_path)

        assert [group.name for group in groups] == ["steam-proton"]

    def test_catalog_when_discovery_fails(self, catalog_path):
        discovery = Mock(launched_from_steam=True)
        discovery.discover_proton_installs.side_effect = DiscoveryError("no steam")

        groups = ComponentRegistry(steam_discovery=discovery).get_wine_groups(catalog_path)

        assert [group.name for group in groups] == ["wine-ge-proton", "lutris"]

    def test_catalog_when_not_launched_from_steam(self, catalog_path):
        discovery = Mock(launched_from_steam=False)
        groups = ComponentRegistry(steam_discovery=discovery).get_wine_groups(catalog_path)
        discovery.discover_proton_installs.assert_not_called()
        assert len(groups) == 2

    def test_dxvk_never_from_steam(self, catalog_path):
        discovery = Mock(launched_from_steam=True)
        groups = ComponentRegistry(steam_discovery=discovery).get_dxvk_groups(catalog_path)
        discovery.discover_proton_installs.assert_not_called()
        assert groups[0].name == "vanilla"
