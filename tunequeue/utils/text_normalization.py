"""Identity rules for catalog tracks.

The catalog returns singles, remasters and live cuts of one song under
different URIs. Dedup and the queue duplicate check both go through
:func:`dedup_key` so the two never disagree about what "the same song" is.
"""

from __future__ import annotations

import re
import unicodedata

from unidecode import unidecode

_QUOTES_TRANSLATION = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "„": '"',
        "«": '"',
        "»": '"',
        "‘": "'",
        "’": "'",
        "‚": "'",
        "′": "'",
    }
)

_QUALIFIER_KEYWORDS = (
    "single",
    "edit",
    "remaster",
    "remix",
    "radio",
    "version",
    "mix",
    "live",
    "acoustic",
    "cover",
)

# "- Remastered 2011", "– Radio Edit", "- Live at Wembley" ... to end of title
_DASH_QUALIFIER = re.compile(
    r"\s*[-–—]\s*(?:" + "|".join(_QUALIFIER_KEYWORDS) + r").*$",
    flags=re.IGNORECASE,
)
# one trailing group such as "(feat. X)", "(Live)" or "[Bonus Track]"
_TRAILING_BRACKETS = re.compile(r"\s*[\(\[][^\(\)\[\]]*[\)\]]$")


def normalize_quotes(value: str) -> str:
    if not value:
        return ""
    return value.translate(_QUOTES_TRANSLATION)


def normalize_track_name(name: str) -> str:
    """Lower-case ``name`` and strip trailing edition qualifiers.

    Trailing bracket groups are peeled one at a time. A title that consists
    only of qualifiers, such as "(Intro)", keeps its full lower-cased text so
    distinct songs never share an empty key.
    """

    if not name:
        return ""
    full = normalize_quotes(name).lower().strip()
    working = _DASH_QUALIFIER.sub("", full).strip()
    while working:
        stripped = _TRAILING_BRACKETS.sub("", working).strip()
        if not stripped or stripped == working:
            break
        working = stripped
    return working or full


def dedup_key(name: str, artist: str) -> str:
    return f"{normalize_track_name(name)}|{(artist or '').strip().lower()}"


def fold_text(value: str) -> str:
    """Return a lowercase ASCII rendering used for word matching."""

    if not value:
        return ""
    normalised = unicodedata.normalize("NFKC", value)
    normalised = normalize_quotes(normalised)
    normalised = unidecode(normalised)
    return normalised.lower().strip()


__all__ = ["dedup_key", "fold_text", "normalize_quotes", "normalize_track_name"]
