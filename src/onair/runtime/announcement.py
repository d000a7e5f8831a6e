"""
Announcement parser: find the "next is <title> by <artist>" hand-off in a script.

A script without a usable announcement is normal; the parser then picks a
song from a small fallback catalog.
"""

from __future__ import annotations

import random
import re

from ..domain.entities import SongRef

FALLBACK_SONGS: tuple[SongRef, ...] = (
    SongRef(title="Blinding Lights", artist="The Weeknd"),
    SongRef(title="Shape of You", artist="Ed Sheeran"),
    SongRef(title="Dance Monkey", artist="Tones and I"),
    SongRef(title="Someone You Loved", artist="Lewis Capaldi"),
    SongRef(title="Watermelon Sugar", artist="Harry Styles"),
)

_QUOTE = "[\"'‘’“”]"
_STRIP_CHARS = " \t\r\n\"'‘’“”"



def _quoted_field(name: str) -> str:
    # A double-quoted field only closes on a double quote, so apostrophes
    # inside it ("Guns N' Roses") are kept. A single-quoted field closes on
    # the first quote that ends a word.
    return (
        r"(?:[\"“”](?P<" + name + r"_dq>[^\"“”\n]+?)[\"“”]"
        r"|['‘’](?P<" + name + r"_sq>[^\"“”\n]+?)['‘’](?=\W|$))"
    )


# Both fields quoted: titles may contain " by " or apostrophes.
_QUOTED_RE = re.compile(
    r"next\s+is\s+" + _quoted_field("title") + r"\s+by\s+" + _quoted_field("artist"),
    re.IGNORECASE,
)

# Quotes optional: the artist runs to sentence punctuation (dots inside
# initials like "R.E.M" are kept).
_LOOSE_RE = re.compile(
    r"next\s+is\s+" + _QUOTE + r"?(?P<title>[^\"“”\n]+?)" + _QUOTE
    + r"?\s+by\s+" + _QUOTE + r"?(?P<artist>(?:[^\"“”!?,;\n.]|\.(?=\S))+)",
    re.IGNORECASE,
)


def _clean(value: str | None) -> str:
    return (value or "").strip(_STRIP_CHARS)


def _group(match: re.Match, name: str) -> str:
    groups = match.groupdict()
    if name in groups:
        return _clean(groups[name])
    return _clean(groups[name + "_dq"] or groups[name + "_sq"])


def pick_fallback_song(rng: random.Random | None = None) -> SongRef:
    """Return a song from the fallback catalog."""
    return (rng or random).choice(FALLBACK_SONGS)


def match_announcement(script: str) -> SongRef | None:
    """Return the announced song, or None if the script has no usable announcement."""
    for pattern in (_QUOTED_RE, _LOOSE_RE):
        match = pattern.search(script)
        if match is None:
            continue
        title = _group(match, "title")
        artist = _group(match, "artist")
        if title and artist:
            return SongRef(title=title, artist=artist)
    return None


def extract_song(script: str, rng: random.Random | None = None) -> SongRef:
    """
    Extract the announced (title, artist) from a DJ script.

    Args:
        script: Monologue text
        rng: Random source for the fallback pick; pass a seeded Random for
            deterministic results

    Returns:
        The announced SongRef, or a fallback catalog entry. Never raises.
    """
    return match_announcement(script or "") or pick_fallback_song(rng)
