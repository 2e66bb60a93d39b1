"""Tests for codebottle.rest.endpoint -- templates, arity and URL building."""

from __future__ import annotations

import pytest

from codebottle.exceptions import InvalidUsageError
from codebottle.rest.endpoint import Endpoint


class TestParameterCount:
    @pytest.mark.parametrize(
        ("endpoint", "count"),
        [
            (Endpoint.LANGUAGES, 0),
            (Endpoint.CATEGORIES, 0),
            (Endpoint.SNIPPETS, 0),
            (Endpoint.LANGUAGE_SPECIFIC, 1),
            (Endpoint.CATEGORY_SPECIFIC, 1),
            (Endpoint.SNIPPET_SPECIFIC, 1),
            (Endpoint.SNIPPET_REVISIONS, 1),
            (Endpoint.SNIPPET_REVISION_SPECIFIC, 2),
        ],
    )
    def test_arity_matches_template(self, endpoint: Endpoint, count: int) -> None:
        assert endpoint.parameter_count == count


class TestPath:
    def test_fills_placeholders_in_order(self) -> None:
        assert Endpoint.SNIPPET_REVISION_SPECIFIC.path("abc123", 2) == "snippets/abc123/revisions/2"

    def test_no_parameters(self) -> None:
        assert Endpoint.SNIPPETS.path() == "snippets"

    def test_too_few_parameters(self) -> None:
        with pytest.raises(InvalidUsageError, match="actual: 1, expected: 2"):
            Endpoint.SNIPPET_REVISION_SPECIFIC.path("abc123")

    def test_too_many_parameters(self) -> None:
        with pytest.raises(InvalidUsageError, match="LANGUAGES"):
            Endpoint.LANGUAGES.path("extra")


class TestUrl:
    def test_default_base_url(self) -> None:
        assert Endpoint.LANGUAGES.url() == "https://api.codebottle.io/languages"

    def test_base_url_without_trailing_slash(self) -> None:
        url = Endpoint.SNIPPET_SPECIFIC.url("x", base_url="http://localhost:8080")
        assert url == "http://localhost:8080/snippets/x"

    def test_base_url_with_trailing_slash(self) -> None:
        url = Endpoint.CATEGORY_SPECIFIC.url(3, base_url="http://localhost:8080/")
        assert url == "http://localhost:8080/categories/3"


class TestEscaping:
    def test_slash_stays_in_one_segment(self) -> None:
        assert Endpoint.SNIPPET_SPECIFIC.path("abc/revisions") == "snippets/abc%2Frevisions"

    def test_query_and_fragment_characters(self) -> None:
        assert Endpoint.LANGUAGE_SPECIFIC.path("a?b#c") == "language/a%3Fb%23c"

    def test_plain_ids_unchanged(self) -> None:
        assert Endpoint.SNIPPET_REVISION_SPECIFIC.path("abc-123_x", 0) == "snippets/abc-123_x/revisions/0"
