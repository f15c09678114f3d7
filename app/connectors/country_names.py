"""
app/connectors/country_names.py

Normalization of upstream country labels onto the configured allow-list.
"""

from __future__ import annotations

from collections.abc import Iterable

COUNTRY_ALIASES: dict[str, str] = {
    "korea": "South Korea",
    "korea, rep. of": "South Korea",
    "rep. of korea": "South Korea",
    "republic of korea": "South Korea",
    "u.s.a.": "USA",
    "united states": "USA",
    "united states of america": "USA",
    "u.k.": "United Kingdom",
    "uk": "United Kingdom",
}


def normalize_country(raw: object, allow_list: Iterable[str]) -> str | None:
    """
    Map an upstream label to its canonical allow-list name.

    Returns None for labels that are not on the allow-list.
    """

    if not isinstance(raw, str):
        return None
    label = " ".join(raw.split())
    if not label:
        return None

    allowed = {name.lower(): name for name in allow_list}
    lowered = label.lower()
    if lowered in allowed:
        return allowed[lowered]
    alias = COUNTRY_ALIASES.get(lowered)
    if alias is not None and alias.lower() in allowed:
        return allowed[alias.lower()]
    return None
