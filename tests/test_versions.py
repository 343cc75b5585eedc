"""Tests for version ordering and range expressions."""

import pytest

from dist_check.errors import ConfigurationError, InvalidRangeError
from dist_check.versions import Version, VersionRange


class TestVersionOrdering:
    def test_qualifiers_sort_before_release(self):
        ordered = [
            "1.0-alpha-1",
            "1.0-beta",
            "1.0-rc1",
            "1.0-SNAPSHOT",
            "1.0",
            "1.0-sp",
            "1.0.1",
            "1.1",
            "2",
        ]
        assert sorted(reversed(ordered), key=Version) == ordered

    def test_numeric_segments_compare_numerically(self):
        assert Version("3.10.1") > Version("3.9")
        assert Version("1.10") > Version("1.9.9")

    def test_trailing_zeros_are_equal(self):
        assert Version("1.0") == Version("1")
        assert Version("1.0.0") == Version("1")
        assert hash(Version("1.0.0")) == hash(Version("1"))

    @pytest.mark.parametrize(
        "left, right",
        [
            ("1", "1-ga"),
            ("1.0", "1.0-final"),
            ("1.0-release", "1"),
            ("1-alpha", "1-a"),
            ("1-beta", "1-b"),
            ("1-m1", "1-milestone-1"),
            ("1-rc1", "1-cr1"),
        ],
    )
    def test_qualifier_aliases_are_equal(self, left, right):
        assert Version(left) == Version(right)
        assert hash(Version(left)) == hash(Version(right))

    def test_unknown_qualifiers_keep_their_name(self):
        assert Version("1-foo") != Version("1-bar")
        assert Version("1-foo") > Version("1-sp")


class TestVersionRange:
    def test_half_open_range(self):
        r = VersionRange.parse("[1.0,2.0)")
        assert r.contains("1.0")
        assert r.contains("1.5")
        assert not r.contains("2.0")
        assert not r.contains("0.9")

    def test_exact_version(self):
        r = VersionRange.parse("[2.1]")
        assert r.contains("2.1")
        assert not r.contains("2.1.1")

    def test_exact_version_accepts_release_alias(self):
        assert VersionRange.parse("[1.0]").contains("1.0-ga")

    def test_union_of_ranges(self):
        r = VersionRange.parse("(,1.0],[1.2,)")
        assert r.contains("0.5")
        assert r.contains("1.0")
        assert r.contains("1.3")
        assert not r.contains("1.1")

    def test_soft_version_matches_everything(self):
        r = VersionRange.parse("1.0")
        assert r.recommended == Version("1.0")
        assert r.contains("0.1")
        assert r.contains("9.9")

    def test_match_version_picks_highest_in_range(self):
        r = VersionRange.parse("[1.0,2.0)")
        assert r.match_version(["1.0", "1.5", "1.10", "2.0"]) == "1.10"
        assert r.match_version(["2.0", "3.0"]) is None

    def test_str_is_range_text(self):
        assert str(VersionRange.parse("[1.0,2.0)")) == "[1.0,2.0)"

    @pytest.mark.parametrize(
        "spec",
        [
            "",
            "[1.0,2.0",
            "(1.0)",
            "[2.0,1.0]",
            "[1.0,2.0,3.0]",
            "[1.0,2.0)x",
            "[1.0,),[2.0,3.0]",
            "(1.0,1.0)",
            "[1.0,2.0),",
        ],
    )
    def test_malformed_ranges(self, spec):
        with pytest.raises(InvalidRangeError) as exc:
            VersionRange.parse(spec)
        assert isinstance(exc.value, ConfigurationError)
        assert exc.value.spec == spec
