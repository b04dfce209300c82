from __future__ import annotations

import pytest

from realitycheck.core.synthesis.crossref import (
    cross_reference,
    labels_match,
    levenshtein,
    normalize,
)


@pytest.mark.parametrize(
    "a, b",
    [
        ("user authentication", "auth"),
        ("caching layer", "cache"),
        ("Search-Index", "search_indexes"),
        ("dark mode", "darkmode"),
        ("webhook", "webhooks"),
    ],
)
def test_labels_that_match(a: str, b: str) -> None:
    assert labels_match(a, b)
    assert labels_match(b, a)


@pytest.mark.parametrize(
    "a, b",
    [
        ("completely unrelated thing", "auth"),
        ("payment gateway", "search index"),
        ("", "auth"),
        ("s", "s"),
        ("export the report", "fix the cache"),
        ("audit the logs", "the search page"),
        ("api for billing", "cache for images"),
        ("sync with github", "login with email"),
    ],
)
def test_labels_that_do_not_match(a: str, b: str) -> None:
    assert not labels_match(a, b)


def test_normalize() -> None:
    assert normalize("User  Auth-Flows") == "userauthflow"
    assert normalize("class") == "clas"


def test_levenshtein() -> None:
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


def test_cross_reference_partitions() -> None:
    result = cross_reference(
        ["auth", "billing", "search"],
        ["authentication module", "search index", "metrics"],
    )
    assert result.aligned == [
        {"documented": "auth", "implemented": "authentication module"},
        {"documented": "search", "implemented": "search index"},
    ]
    assert result.documented_not_implemented == ["billing"]
    assert result.implemented_not_documented == ["metrics"]
    assert result.partially_implemented == []


def test_cross_reference_empty_inputs() -> None:
    result = cross_reference([], [])
    assert result.to_dict() == {
        "documentedNotImplemented": [],
        "implementedNotDocumented": [],
        "aligned": [],
        "partiallyImplemented": [],
    }


def test_shared_stop_words_do_not_align() -> None:
    result = cross_reference(["audit the logs"], ["the search page"])
    assert result.aligned == []
    assert result.documented_not_implemented == ["audit the logs"]
    assert result.implemented_not_documented == ["the search page"]
