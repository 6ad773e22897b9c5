"""
Key normalization shared by rule tables and the lexemizer.

Text is transliterated to the nearest ASCII rendering first and lowercased
second. Transliteration works one character at a time, so a normalized
slice always corresponds to the same slice of the raw text.
"""

from __future__ import annotations

import unicodedata
from functools import lru_cache
from typing import Dict

# Characters without a useful canonical decomposition
TRANSLITERATIONS: Dict[str, str] = {
    "ß": "ss",
    "ẞ": "SS",
    "æ": "ae",
    "Æ": "AE",
    "ø": "o",
    "Ø": "O",
    "œ": "oe",
    "Œ": "OE",
    "ł": "l",
    "Ł": "L",
    "đ": "d",
    "Đ": "D",
    "ð": "d",
    "Ð": "D",
    "þ": "th",
    "Þ": "Th",
    "ı": "i",
    "‘": "'",
    "’": "'",
    "‚": "'",
    "‛": "'",
    "′": "'",
    "´": "'",
    "“": '"',
    "”": '"',
    "„": '"',
    "«": '"',
    "»": '"',
    "–": "-",
    "—": "-",
    "−": "-",
    "…": "...",
    " ": " ",
}


@lru_cache(maxsize=4096)
def transliterate_char(char: str) -> str:
    if char < "\x80":
        return char
    mapped = TRANSLITERATIONS.get(char)
    if mapped is not None:
        return mapped
    if unicodedata.combining(char):
        return ""
    decomposed = unicodedata.normalize("NFKD", char)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    if stripped and all(c < "\x80" for c in stripped):
        return stripped
    # No ASCII rendering: keep the character so distinct words stay distinct
    return char


def transliterate(text: str) -> str:
    return "".join(transliterate_char(c) for c in text)


def normalize_key(text: str) -> str:
    """Transliterate ``text`` to ASCII where possible, then lowercase it."""
    return transliterate(text).lower()
