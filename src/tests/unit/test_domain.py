"""Tests for tag casing, slug rules and sort parsing."""

import pytest

from ctrlaltvibe.core.domain import CommentSort, ProjectSort, proper_case_tag, slugify


class TestProperCaseTag:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("ai tools", "AI Tools"),
            ("  GPT MODELS ", "GPT Models"),
            ("natural language processing", "Natural Language Processing"),
            ("web development", "Web Development"),
        ],
    )
    def test_known_tags(self, raw: str, expected: str) -> None:
        assert proper_case_tag(raw) == expected

    def test_unknown_tag_trimmed(self) -> None:
        """Unknown names keep their casing."""
        assert proper_case_tag("  rustLang ") == "rustLang"


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Hello, World!", "hello-world"),
            ("  Vibe   Coding 101 ", "vibe-coding-101"),
            ("Café au lait", "cafe-au-lait"),
            ("---", ""),
        ],
    )
    def test_slugify(self, text: str, expected: str) -> None:
        assert slugify(text) == expected


class TestSortParsing:
    def test_project_sort_known(self) -> None:
        assert ProjectSort.parse("mostLiked") is ProjectSort.MOST_LIKED

    @pytest.mark.parametrize("value", [None, "", "featured", "latest", "MOSTLIKED"])
    def test_project_sort_unknown(self, value) -> None:
        assert ProjectSort.parse(value) is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("oldest", CommentSort.OLDEST), (None, CommentSort.NEWEST), ("bogus", CommentSort.NEWEST)],
    )
    def test_comment_sort(self, value, expected) -> None:
        assert CommentSort.parse(value) is expected
