"""
Tidy up a GEDCOM record on import, so that it can be accessed
consistently and efficiently afterwards.

reformat_record() is the only entry point: tokenize, map tags to their
canonical codes, rewrite values, then reassemble the canonical text.
"""

import re

from gedkeeper.ingestion.tags import (
    DATA_TRANSFORMS,
    EMPTY_LEVEL0_TAGS,
    VERBATIM_TAGS,
    canonical_tag,
    split_packed_coordinates,
)
from gedkeeper.ingestion.tokenizer import GedcomLine, tokenize

# Tags of qualifying sub-structures that make a "1 BIRT Y" style marker redundant
_QUALIFYING_TAGS = ("DATE", "PLAC")


def tidy_whitespace(data: str) -> str:
    """Remove tabs and multiple/leading/trailing spaces."""
    return re.sub(r" {2,}", " ", data.replace("\t", " ").strip())


def strip_media_path(data: str, media_path: str) -> str:
    """Remove the configured path prefix and use forward slashes."""
    if media_path and data.startswith(media_path):
        data = data[len(media_path):]
    return data.replace("\\", "/")


def suppress_redundant_marker(lines: list[GedcomLine], index: int, data: str) -> str:
    """
    Facts are asserted with "1 BIRT Y" when nothing more is known.
    The "Y" is dropped once a DATE or PLAC qualifies the fact.
    """
    if data == "y":
        data = "Y"
    if lines[index].level == 1 and data == "Y":
        for line in lines[index + 1:]:
            if line.level <= 1:
                break
            if line.tag in _QUALIFYING_TAGS:
                return ""
    return data


def format_line(level: int, xref: str, tag: str, data: str) -> str:
    """'level [xref] tag [data]'. Only level 0 lines keep their xref."""
    line = f"{level} "
    if level == 0 and xref:
        line += f"{xref} "
    line += tag
    if data != "" or tag == "NOTE":
        line += f" {data}"
    return line


def reassemble(lines: list[GedcomLine], word_wrapped_notes: bool = False) -> str:
    """
    Join normalized lines into one text. CONC data is merged into the
    previous physical line, to simplify access later on.
    """
    physical: list[str] = []
    for line in lines:
        if line.tag == "CONC":
            if physical:
                physical[-1] += (" " if word_wrapped_notes else "") + line.data
            continue
        physical.append(format_line(line.level, line.xref, line.tag, line.data))
    return "\n".join(physical)


def normalize_lines(
    lines: list[GedcomLine],
    media_path: str = "",
) -> list[GedcomLine]:
    """Apply the tag and value rewrites to every line."""
    lines = [line._replace(tag=canonical_tag(line.tag)) for line in lines]

    normalized: list[GedcomLine] = []
    for index, (level, xref, tag, data) in enumerate(lines):
        synthetic: list[GedcomLine] = []

        transform = DATA_TRANSFORMS.get(tag)
        if transform is not None:
            data = transform(data)

        if tag in EMPTY_LEVEL0_TAGS and level == 0:
            xref, data = "", ""
        elif tag == "PLAC":
            packed = split_packed_coordinates(data)
            if packed is not None:
                data, latitude, longitude = packed
                synthetic = [
                    GedcomLine(level + 1, "", "MAP", ""),
                    GedcomLine(level + 2, "", "LATI", latitude),
                    GedcomLine(level + 2, "", "LONG", longitude),
                ]
        elif tag == "FILE":
            data = strip_media_path(data, media_path)

        data = suppress_redundant_marker(lines, index, data)

        if tag not in VERBATIM_TAGS and tag != "CONC":
            data = tidy_whitespace(data)

        normalized.append(GedcomLine(level, xref, tag, data))
        normalized.extend(synthetic)

    return normalized


def reformat_record(gedcom: str, media_path: str = "", word_wrapped_notes: bool = False) -> str:
    """
    Standardise a raw GEDCOM record.

    Args:
        gedcom: Raw record text, any line endings
        media_path: Prefix to strip from FILE values
        word_wrapped_notes: Join CONC lines with a space

    Returns:
        Canonical record text
    """
    lines = normalize_lines(tokenize(gedcom), media_path=media_path)
    return reassemble(lines, word_wrapped_notes=word_wrapped_notes)
