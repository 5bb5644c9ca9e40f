"""
Convert inline media into media objects.

Older GEDCOM files embed media as a sub-structure ("1 OBJE / 2 FILE ...")
rather than linking to a level 0 OBJE record. Each embedded block is
replaced by a link to a media record, created on first use.
"""

import logging
import re
from typing import Callable

from gedkeeper.storage import RecordStore

logger = logging.getLogger(__name__)

# Depths at which inline media is converted
INLINE_MEDIA_LEVELS = (1, 2, 3)

# Media structures written in the wrong order by other programs
VENDOR_MEDIA_FIXES = [
    # Legacy
    (re.compile(r"\n1 FORM (.+)\n1 FILE (.+)\n1 TITL (.+)"), r"\n1 FILE \2\n2 FORM \1\n2 TITL \3"),
    # Family Tree Builder
    (re.compile(r"\n1 FORM (.+)\n1 TITL (.+)\n1 FILE (.+)"), r"\n1 FILE \3\n2 FORM \1\n2 TITL \2"),
    # RootsMagic 7
    (re.compile(r"\n1 FILE (.+)\n1 FORM (.+)\n1 TITL (.+)"), r"\n1 FILE \1\n2 FORM \2\n2 TITL \3"),
]

_FILE = re.compile(r"\n\d FILE (.+)")
_TITLE = re.compile(r"\n\d TITL (.+)")
_LEVEL = re.compile(r"\n(\d+)")


def inline_media_pattern(level: int) -> re.Pattern:
    """An OBJE line without a link, followed by deeper lines."""
    return re.compile(rf"\n{level} OBJE(?:\n[{level + 1}-9].+)+")


def promote_media(level: int, subtree: str, xref: str) -> str:
    """Turn an inline OBJE block into the text of a level 0 media record."""
    gedcom = _LEVEL.sub(lambda match: f"\n{int(match.group(1)) - level}", subtree)
    gedcom = gedcom.replace("\n0 OBJE\n", f"0 @{xref}@ OBJE\n")
    for pattern, replacement in VENDOR_MEDIA_FIXES:
        gedcom = pattern.sub(replacement, gedcom)
    return gedcom


class InlineMediaExtractor:
    """
    Replace inline media with links to media records.

    on_create(xref, gedcom) is called to store each new media record.
    """

    def __init__(self, store: RecordStore, on_create: Callable[[str, str], object]):
        self.store = store
        self.on_create = on_create

    def convert(self, gedcom: str) -> str:
        for level in INLINE_MEDIA_LEVELS:
            pattern = inline_media_pattern(level)
            while True:
                match = pattern.search(gedcom)
                if match is None:
                    break
                subtree = match.group(0)
                gedcom = gedcom.replace(subtree, self.create_media_object(level, subtree))
        return gedcom

    def create_media_object(self, level: int, subtree: str) -> str:
        """Find or create the media record for a block; return the link line."""
        file_match = _FILE.search(subtree)
        title_match = _TITLE.search(subtree)
        filename = file_match.group(1) if file_match else ""
        title = title_match.group(1) if title_match else ""

        # Have we already created a media object with the same title/filename?
        xref = self.store.find_media(filename, title)
        if xref is None:
            xref = self.store.new_xref()
            self.on_create(xref, promote_media(level, subtree, xref))
            logger.debug("Converted inline media %r to @%s@", filename, xref)

        return f"\n{level} OBJE @{xref}@"
