"""Ingredient name normalization."""

import re

_TRAILING_S = re.compile(r"s\Z")
_TRAILING_IES = re.compile(r"ies\Z")
_DISALLOWED = re.compile(r"[^a-z0-9_\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_ingredient_name(raw: str) -> str:
    """Return the canonical cache key for an ingredient name.

    The trailing "s" is stripped before the "ies" rewrite, so "berries"
    becomes "berrie". Underscores survive, so keys of ordinary names map to
    themselves.
    """
    name = raw.lower().strip()
    name = _TRAILING_S.sub("", name, count=1)
    name = _TRAILING_IES.sub("y", name, count=1)
    name = _DISALLOWED.sub("", name)
    return _WHITESPACE.sub("_", name)
