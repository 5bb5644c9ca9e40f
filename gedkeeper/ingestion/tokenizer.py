"""
Split raw GEDCOM text into lines of (level, xref, tag, data).

Input comes from third-party exports, so the grammar is permissive:
leading whitespace, tabs and missing separators are tolerated, and lines
that do not match at all are dropped without error.
"""

import re
from typing import NamedTuple

_LINE_ENDINGS = re.compile(r"[\r\n]+")
_LINE = re.compile(r"^[ \t]*(\d+)[ \t]*(@[^@]*@)?[ \t]*(\w+)[ \t]?(.*)$", re.MULTILINE)


class GedcomLine(NamedTuple):
    """One physical line of a GEDCOM record."""

    level: int
    xref: str
    tag: str
    data: str


def normalize_line_endings(text: str) -> str:
    """Convert mac/msdos line endings (and blank lines) to single newlines."""
    return _LINE_ENDINGS.sub("\n", text)


def tokenize(text: str) -> list[GedcomLine]:
    """Parse every well-formed line of a record."""
    text = normalize_line_endings(text)
    return [
        GedcomLine(int(level), xref or "", tag, data)
        for level, xref, tag, data in _LINE.findall(text)
    ]
