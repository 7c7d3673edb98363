"""Utility helpers for estimating token counts.

Every character is worth a number of character units: 3.5 for East Asian
scripts (CJK ideographs, kana, hangul, fullwidth forms, CJK punctuation) and
1 for everything else. Three character units round to one token.

Weights are scaled by two so the arithmetic stays integral: East Asian = 7,
other = 2, one token = 6.
"""

from __future__ import annotations

from bisect import bisect_right

EAST_ASIAN_UNITS = 7
OTHER_UNITS = 2
UNITS_PER_TOKEN = 6

# Inclusive code point ranges, sorted by start and non-overlapping.
EAST_ASIAN_RANGES: tuple[tuple[int, int], ...] = (
    (0x1100, 0x11FF),  # Hangul jamo
    (0x2E80, 0x2EFF),  # CJK radicals supplement
    (0x2F00, 0x2FDF),  # Kangxi radicals
    (0x2FF0, 0x2FFF),  # Ideographic description characters
    (0x3000, 0x303F),  # CJK symbols and punctuation
    (0x3040, 0x309F),  # Hiragana
    (0x30A0, 0x30FF),  # Katakana
    (0x3400, 0x4DBF),  # CJK extension A
    (0x4E00, 0x9FFF),  # CJK unified ideographs
    (0xAC00, 0xD7AF),  # Hangul syllables
    (0xFF00, 0xFFEF),  # Halfwidth and fullwidth forms
    (0x20000, 0x2A6DF),  # CJK extension B
    (0x2A700, 0x2B73F),  # CJK extension C
    (0x2B740, 0x2B81F),  # CJK extension D
    (0x2B820, 0x2CEAF),  # CJK extension E
    (0x2CEB0, 0x2EBEF),  # CJK extension F
    (0x2F800, 0x2FA1F),  # CJK compatibility ideographs supplement
    (0x30000, 0x3134F),  # CJK extension G
    (0x31350, 0x323AF),  # CJK extension H
)

_RANGE_STARTS = tuple(start for start, _ in EAST_ASIAN_RANGES)


def is_east_asian_char(char: str) -> bool:
    """Return True when ``char`` falls into one of ``EAST_ASIAN_RANGES``."""

    code_point = ord(char)
    idx = bisect_right(_RANGE_STARTS, code_point) - 1
    if idx < 0:
        return False
    return code_point <= EAST_ASIAN_RANGES[idx][1]


def count_tokens(text: str) -> int:
    """Approximate tokens: East Asian char == 3.5 units, other == 1, 3 units == 1 token."""

    units = sum(EAST_ASIAN_UNITS if is_east_asian_char(char) else OTHER_UNITS for char in text)
    # round half up
    return (units + UNITS_PER_TOKEN // 2) // UNITS_PER_TOKEN


__all__ = [
    "EAST_ASIAN_RANGES",
    "count_tokens",
    "is_east_asian_char",
]
