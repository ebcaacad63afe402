"""Slug Generation — URL-friendly, collision-free product slugs.

Invariants:
    - slugify() output matches ^[a-z0-9]+(-[a-z0-9]+)*$ or is a hex fallback
    - slug_candidates() yields base, base-1, base-2, ... without end

Design Decisions:
    - Uniqueness is resolved by the shell (DB lookup per candidate); this module
      only produces candidates
"""

import re
import unicodedata
from collections.abc import Iterator
from uuid import uuid4


_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str | None) -> str:
    """Lower-case, ASCII-fold, and hyphenate a title."""
    condensed = " ".join(str(value or "").split()).lower()
    ascii_value = (
        unicodedata.normalize("NFKD", condensed)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    slug = _NON_ALNUM.sub("-", ascii_value).strip("-")
    if not slug:
        slug = uuid4().hex
    return slug


def slug_candidates(base: str) -> Iterator[str]:
    yield base
    suffix = 1
    while True:
        yield f"{base}-{suffix}"
        suffix += 1
