"""
Read-only views of canonical GEDCOM records.

The record text is parsed with python-gedcom into an element tree;
this module only interprets the parts the indexes need: names, sex
and media files.
"""

import re
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from gedcom.element.element import Element
from gedcom.parser import Parser

from gedkeeper.ontology import UNKNOWN_GIVEN_NAME, UNKNOWN_SURNAME, RecordType

NAME_VARIANT_TAGS = ("ROMN", "FONE", "_HEB", "_AKA")

_LEVEL = re.compile(r"^\s*(\d+)")


@dataclass
class RecordName:
    """One searchable name of a record."""

    name_type: str
    full: str
    sort: str
    surname: Optional[str] = None
    surn: Optional[str] = None
    givn: Optional[str] = None


@dataclass
class RecordMediaFile:
    """One FILE of a media record."""

    filename: str
    format: str = ""
    source_media_type: str = ""
    title: str = ""


def clamp_levels(gedcom: str) -> str:
    """
    Limit each line to one level below the line before it.

    Exports often skip levels ("1 BIRT" then "3 DATE"), which the
    element tree parser rejects. Lines without a level are dropped.
    """
    lines = []
    previous = -1
    for line in gedcom.split("\n"):
        match = _LEVEL.match(line)
        if match is None:
            continue
        level = min(int(match.group(1)), previous + 1)
        lines.append(f"{level}{line[match.end():]}\n")
        previous = level
    return "".join(lines)


def _child(element: Element, tag: str) -> Optional[Element]:
    for child in element.get_child_elements():
        if child.get_tag() == tag:
            return child
    return None


def _children(element: Element, tag: str) -> list[Element]:
    return [child for child in element.get_child_elements() if child.get_tag() == tag]


def _child_value(element: Element, tag: str) -> str:
    child = _child(element, tag)
    return child.get_value().strip() if child is not None else ""


def _sort_part(value: str) -> str:
    return value.replace(UNKNOWN_SURNAME, "AAAA").replace(UNKNOWN_GIVEN_NAME, "AAAA").upper()


def parse_personal_name(value: str, name_type: str, element: Optional[Element] = None) -> RecordName:
    """
    Split a GEDCOM personal name ("John /Smith/ Jr") into its parts.

    GIVN and SURN sub-tags, when present, take precedence over the parts
    found in the name itself.
    """
    value = " ".join(value.split())
    if "/" in value:
        given, _, rest = value.partition("/")
        surname, _, suffix = rest.partition("/")
    else:
        given, surname, suffix = value, "", ""
    given, surname, suffix = given.strip(), surname.strip(), suffix.strip()

    givn = given
    surn = surname
    if element is not None:
        givn = _child_value(element, "GIVN") or givn
        surn = _child_value(element, "SURN") or surn

    if not givn:
        givn = UNKNOWN_GIVEN_NAME
    if not surname and ("/" in value or not given):
        surname = UNKNOWN_SURNAME
    if not surn:
        surn = UNKNOWN_SURNAME

    full = " ".join(part for part in (given or UNKNOWN_GIVEN_NAME, surname, suffix) if part)

    return RecordName(
        name_type=name_type,
        full=full,
        sort=f"{_sort_part(surn)},{_sort_part(givn)}",
        surname=surname,
        surn=surn.upper() if surn != UNKNOWN_SURNAME else surn,
        givn=givn,
    )


class GedcomRecord:
    """A level-0 record and its sub-structure."""

    def __init__(self, element: Element):
        self.element = element

    @classmethod
    def from_gedcom(cls, gedcom: str) -> "GedcomRecord":
        """Build a record from its canonical text."""
        lines = clamp_levels(gedcom)
        parser = Parser()
        parser.parse(BytesIO(lines.encode("utf-8")), strict=False)
        roots = parser.get_root_child_elements()
        if not roots:
            raise ValueError("GEDCOM text contains no level 0 record")
        return cls(roots[0])

    @property
    def xref(self) -> str:
        return self.element.get_pointer().strip("@")

    @property
    def record_type(self) -> str:
        return self.element.get_tag()

    def get_sex(self) -> str:
        sex = _child_value(self.element, "SEX")[:1].upper()
        return sex if sex in ("M", "F") else "U"

    def media_files(self) -> list[RecordMediaFile]:
        files = []
        fallback_title = _child_value(self.element, "TITL")
        for file_element in _children(self.element, "FILE"):
            form = _child(file_element, "FORM")
            files.append(
                RecordMediaFile(
                    filename=file_element.get_value().strip(),
                    format=form.get_value().strip() if form is not None else "",
                    source_media_type=_child_value(form, "TYPE") if form is not None else "",
                    title=_child_value(file_element, "TITL") or fallback_title,
                )
            )
        return files

    def get_all_names(self) -> list[RecordName]:
        """Every name variant under which this record can be found."""
        record_type = self.record_type
        if record_type == RecordType.INDIVIDUAL.value:
            return self._individual_names()
        if record_type == RecordType.SOURCE.value:
            title = _child_value(self.element, "TITL") or _child_value(self.element, "ABBR")
            return self._plain_names("TITL", [title])
        if record_type == RecordType.REPOSITORY.value:
            return self._plain_names("NAME", [_child_value(self.element, "NAME")])
        if record_type == RecordType.NOTE.value:
            return self._plain_names("NOTE", [self.element.get_value()])
        if record_type == RecordType.MEDIA.value:
            titles = [media_file.title or media_file.filename for media_file in self.media_files()]
            return self._plain_names("TITL", titles)
        return []

    def _plain_names(self, name_type: str, values: list[str]) -> list[RecordName]:
        names = []
        for value in values:
            value = " ".join(value.split())
            if value:
                names.append(RecordName(name_type=name_type, full=value, sort=value.upper()))
        return names

    def _individual_names(self) -> list[RecordName]:
        names = []
        for name_element in _children(self.element, "NAME"):
            name_type = _child_value(name_element, "TYPE") or "NAME"
            names.append(parse_personal_name(name_element.get_value(), name_type, name_element))
            for variant_tag in NAME_VARIANT_TAGS:
                for variant in _children(name_element, variant_tag):
                    names.append(parse_personal_name(variant.get_value(), variant_tag, variant))

        if not names:
            names.append(parse_personal_name(f"{UNKNOWN_GIVEN_NAME} /{UNKNOWN_SURNAME}/", "NAME"))
        return names
