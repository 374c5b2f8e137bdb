"""
Tests for prerequisite resolution — missing features and add-on gating.
"""

from siteprep.core.models.feature import FeatureState
from siteprep.core.models.version import Version
from siteprep.core.services.prereqs import addon_required, resolve_missing

THRESHOLD = Version.parse("10.1.17763.1")


class TestResolveMissing:
    def test_declaration_order_and_unknowns(self):
        catalog = {"A": FeatureState.INSTALLED, "B": FeatureState.ABSENT}
        assert resolve_missing(["A", "B", "C"], catalog) == ["B", "C"]

    def test_all_installed(self):
        catalog = {"A": FeatureState.INSTALLED, "B": FeatureState.INSTALLED}
        assert resolve_missing(["A", "B"], catalog) == []

    def test_empty_required(self):
        assert resolve_missing([], {"A": FeatureState.ABSENT}) == []

    def test_empty_catalog_everything_missing(self):
        assert resolve_missing(["X", "Y"], {}) == ["X", "Y"]

    def test_duplicates_reported_once(self):
        assert resolve_missing(["B", "A", "B"], {"A": FeatureState.INSTALLED}) == ["B"]

    def test_duplicate_kept_at_first_position(self):
        assert resolve_missing(["C", "B", "C", "A"], {}) == ["C", "B", "A"]

    def test_order_follows_required_not_catalog(self):
        catalog = {"Z": FeatureState.ABSENT, "A": FeatureState.ABSENT}
        assert resolve_missing(["A", "Z"], catalog) == ["A", "Z"]

    def test_plain_string_states(self):
        assert resolve_missing(["A", "B"], {"A": "installed", "B": "absent"}) == ["B"]

    def test_catalog_not_mutated(self):
        catalog = {"A": FeatureState.ABSENT}
        resolve_missing(["A", "B"], catalog)
        assert catalog == {"A": FeatureState.ABSENT}


class TestAddonRequired:
    def test_at_threshold(self):
        assert addon_required(Version.parse("10.1.17763.1"), THRESHOLD)

    def test_just_below_threshold(self):
        assert not addon_required(Version.parse("10.1.17762.9"), THRESHOLD)

    def test_above_threshold(self):
        assert addon_required(Version.parse("10.1.22621.1"), THRESHOLD)

    def test_revision_below(self):
        assert not addon_required(Version.parse("10.1.17763.0"), THRESHOLD)

    def test_older_major(self):
        assert not addon_required(Version.parse("8.100.26866"), THRESHOLD)
