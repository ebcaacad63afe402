"""Slugs — tests for slugify and candidate generation."""

import re
from itertools import islice

from app.core.slugs import slugify, slug_candidates


def test_slugify_lowercases_and_hyphenates():
    assert slugify("Eclipse Test Radio") == "eclipse-test-radio"


def test_slugify_strips_punctuation_and_edges():
    assert slugify("  --Hello, World!!  ") == "hello-world"


def test_slugify_folds_accents():
    assert slugify("Café Crème") == "cafe-creme"


def test_slugify_empty_result_falls_back_to_hex():
    slug = slugify("!!!")
    assert re.fullmatch(r"[0-9a-f]{32}", slug)


def test_slugify_none():
    assert re.fullmatch(r"[0-9a-f]{32}", slugify(None))


def test_slug_candidates_sequence():
    assert list(islice(slug_candidates("radio"), 4)) == [
        "radio", "radio-1", "radio-2", "radio-3",
    ]
