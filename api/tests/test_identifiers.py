"""Tests for identifier normalization in rankedin.services.identifiers."""

import pytest

from rankedin.exceptions import BadRequestError
from rankedin.services.identifiers import (
    INVALID_REPOSITORY_MESSAGE,
    normalize_username,
    parse_repository_full_name,
    parse_topic,
    parse_username,
)


class TestUsernames:
    def test_normalize_strips_and_lowercases(self):
        assert normalize_username("  Torvalds ") == "torvalds"

    def test_parse_accepts_hyphenated_login(self):
        assert parse_username("some-user42") == "some-user42"

    @pytest.mark.parametrize("raw", ["", "   ", "-leading", "has space", "x" * 40, "bad/name"])
    def test_parse_rejects_invalid(self, raw):
        with pytest.raises(BadRequestError):
            parse_username(raw)


class TestRepositoryFullName:
    def test_splits_owner_and_name(self):
        assert parse_repository_full_name("facebook/react") == ("facebook", "react")

    def test_preserves_case_and_trims(self):
        assert parse_repository_full_name(" Microsoft/TypeScript ") == ("Microsoft", "TypeScript")

    @pytest.mark.parametrize(
        "raw", ["not-a-valid-format", "owner/", "/repo", "a/b/c", "", " / "]
    )
    def test_rejects_anything_but_two_segments(self, raw):
        with pytest.raises(BadRequestError) as exc_info:
            parse_repository_full_name(raw)
        assert exc_info.value.message == INVALID_REPOSITORY_MESSAGE
        assert exc_info.value.status_code == 400


class TestTopics:
    def test_lowercases(self):
        assert parse_topic(" Machine-Learning ") == "machine-learning"

    @pytest.mark.parametrize("raw", ["", "-x", "under_score", "two words", "t" * 51])
    def test_rejects_invalid(self, raw):
        with pytest.raises(BadRequestError):
            parse_topic(raw)
