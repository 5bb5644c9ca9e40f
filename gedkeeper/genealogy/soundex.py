"""
Phonetic codes for fuzzy name and place search.

Each word of the input is coded separately; the distinct codes are
joined with ":" so that "Saint Helens" matches both "Saint" and "Helens".
"""

import re
import unicodedata

import jellyfish

_WORD_SPLIT = re.compile(r"[^A-Za-z]+")


def _words(text: str) -> list[str]:
    """Split text into ASCII words, folding accents."""
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return [word for word in _WORD_SPLIT.split(folded) if word]


def _join_codes(codes: list[str]) -> str:
    unique: list[str] = []
    for code in codes:
        if code and code not in unique:
            unique.append(code)
    return ":".join(unique)


def standard_soundex(text: str) -> str:
    """Russell/American soundex of every word."""
    return _join_codes([jellyfish.soundex(word) for word in _words(text)])


def metaphone_soundex(text: str) -> str:
    """Metaphone code of every word."""
    return _join_codes([jellyfish.metaphone(word).upper() for word in _words(text)])
