"""Tests for the regex tag filter."""

import re

import pytest

from tagreflector.domain import Tag
from tagreflector.errors import PolicyConfigError
from tagreflector.policy import RegexFilter, expand_template


class TestRegexFilter:
    """Tests for RegexFilter."""

    def test_invalid_pattern(self):
        with pytest.raises(PolicyConfigError, match="invalid regular expression pattern"):
            RegexFilter("ver(", "")

    def test_empty_pattern_keeps_everything(self):
        tags = [Tag("a", "aa")]
        f = RegexFilter("")
        f.apply(tags)
        assert f.items() == [Tag("a", "aa")]
        assert f.get_original_tag("a") == Tag("a", "aa")

    def test_valid_pattern(self):
        tags = [
            Tag("ver1", "1rev"),
            Tag("ver2", "2rev"),
            Tag("ver3", "3rev"),
            Tag("rel1", "1ler"),
        ]
        f = RegexFilter("^ver")
        f.apply(tags)
        items = f.items()
        assert len(items) == 3
        assert set(items) == {Tag("ver1", "1rev"), Tag("ver2", "2rev"), Tag("ver3", "3rev")}
        assert f.get_original_tag("ver1") == tags[0]

    def test_pattern_with_capture_group(self):
        tags = [
            Tag("ver1", "foo"),
            Tag("ver2", "bar"),
            Tag("rel1", "qux"),
            Tag("ver3", "baz"),
        ]
        f = RegexFilter(r"ver(\d+)", "$1")
        f.apply(tags)
        assert set(f.items()) == {Tag("1", "foo"), Tag("2", "bar"), Tag("3", "baz")}
        assert f.get_original_tag("1") == tags[0]
        assert f.get_original_tag("2") == tags[1]
        assert f.get_original_tag("3") == tags[3]

    def test_pattern_matches_anywhere(self):
        f = RegexFilter("rc")
        f.apply([Tag("1.0.0-rc1"), Tag("1.0.0")])
        assert f.items() == [Tag("1.0.0-rc1")]

    def test_named_group(self):
        f = RegexFilter(r"^main-[a-f0-9]+-(?P<ts>\d+)$", "$ts")
        f.apply([Tag("main-abc123-1606364286", "d1"), Tag("feature-x-1")])
        assert f.items() == [Tag("1606364286", "d1")]
        assert f.get_original_tag("1606364286") == Tag("main-abc123-1606364286", "d1")

    def test_collision_last_wins(self):
        f = RegexFilter(r"^(\d+)-", "$1")
        f.apply([Tag("1-a", "first"), Tag("1-b", "second")])
        assert f.items() == [Tag("1", "second")]
        assert f.get_original_tag("1") == Tag("1-b", "second")

    def test_unknown_name_returns_zero_tag(self):
        f = RegexFilter("^ver")
        f.apply([Tag("ver1")])
        assert f.get_original_tag("missing") == Tag("", "")

    def test_apply_discards_previous_state(self):
        f = RegexFilter("^ver")
        f.apply([Tag("ver1"), Tag("ver2")])
        f.apply([Tag("ver3")])
        assert f.items() == [Tag("ver3")]
        assert f.get_original_tag("ver1") == Tag("", "")

    def test_items_before_apply(self):
        assert RegexFilter("^ver").items() == []

    def test_no_matches(self):
        f = RegexFilter("^ver")
        f.apply([Tag("rel1")])
        assert f.items() == []


class TestExpandTemplate:
    """Tests for dollar-reference template expansion."""

    def _match(self, pattern, text):
        return re.search(pattern, text)

    @pytest.mark.parametrize("template,expected", [
        ("$1", "1"),
        ("${1}", "1"),
        ("$1.$2", "1.2"),
        ("${1}x", "1x"),
        ("$1x", ""),
        ("$major-$minor", "1-2"),
        ("${major}_${minor}", "1_2"),
        ("$$1", "$1"),
        ("$0", "v1.2"),
        ("$9", ""),
        ("$missing", ""),
        ("plain", "plain"),
        ("$", "$"),
        ("${", "${"),
    ])
    def test_expand(self, template, expected):
        match = self._match(r"v(?P<major>\d+)\.(?P<minor>\d+)", "v1.2")
        assert expand_template(match, template) == expected

    def test_unmatched_optional_group(self):
        match = self._match(r"(a)?(b)", "b")
        assert expand_template(match, "[$1][$2]") == "[][b]"
