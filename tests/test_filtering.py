"""Tests for schemagen.filtering."""

from __future__ import annotations

from schemagen.filtering import filter_entries
from schemagen.models import AutogenEntry


def test_filter_entries_is_noop_without_allow_list() -> None:
    entries = [AutogenEntry(base_path="foo/bar", namespace="Microsoft.Foo")]

    assert filter_entries(entries) == entries


def test_filter_entries_rewrites_pointer_and_drops_unmatched() -> None:
    matching = AutogenEntry(base_path="foo/bar", namespace="Microsoft.Foo")
    other = AutogenEntry(base_path="baz/resource-manager", namespace="Microsoft.Baz")

    result = filter_entries(
        [matching, other],
        ["specification/foo/bar/readme.md", "specification/unrelated/readme.md"],
    )

    assert len(result) == 1
    assert result[0].base_path == "foo/bar"
    assert result[0].readme_file == "specification/foo/bar/readme.md"
    assert matching.readme_file is None


def test_filter_entries_first_match_wins() -> None:
    entry = AutogenEntry(base_path="foo/bar", namespace="Microsoft.Foo")

    result = filter_entries(
        [entry],
        ["specification/foo/bar/readme.md", "specification/foo/bar/Microsoft.Foo/readme.md"],
    )

    assert result[0].readme_file == "specification/foo/bar/readme.md"


def test_filter_entries_with_empty_allow_list_drops_everything() -> None:
    entry = AutogenEntry(base_path="foo/bar", namespace="Microsoft.Foo")

    assert filter_entries([entry], []) == []
