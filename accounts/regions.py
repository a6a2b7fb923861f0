"""
accounts/regions.py -- Area code validation against the ISO 3166 reference list.

A profile's area is either a country (ISO 3166-1 alpha-2, e.g. "ID") or a
country subdivision (ISO 3166-2, e.g. "ID-JK"). pycountry ships both lists,
so no network lookup is involved.
"""

from __future__ import annotations

import pycountry

from core.errors import InvalidInput


def normalize_area(code: str) -> str:
    """Return the canonical (upper-case) form of a known area code.

    Raises InvalidInput if the code is neither a country nor a subdivision.
    """
    candidate = code.strip().upper()
    if not candidate:
        raise InvalidInput("Area should not be empty")
    if "-" in candidate:
        known = pycountry.subdivisions.get(code=candidate)
    else:
        known = pycountry.countries.get(alpha_2=candidate)
    if known is None:
        raise InvalidInput(f"Unknown area code: {code!r}")
    return candidate
