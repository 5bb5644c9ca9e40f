"""
Derived indexes of a canonical record: places, dates, links and names.

Every function reads the canonical text (or record view) of one record
and writes rows through the RecordStore. They never delete; callers
tear down the old rows first.
"""

import logging
import re

from gedkeeper.genealogy.dates import CalendarDate, GedcomDate
from gedkeeper.genealogy.records import GedcomRecord
from gedkeeper.genealogy.soundex import metaphone_soundex, standard_soundex
from gedkeeper.ingestion.places import PlaceResolver
from gedkeeper.ingestion.tokenizer import tokenize
from gedkeeper.models import DateIndex, NameIndex
from gedkeeper.ontology import (
    NAME_MAX_LENGTH,
    TAG_PATTERN,
    UNKNOWN_GIVEN_NAME,
    UNKNOWN_SURNAME,
    XREF_PATTERN,
)
from gedkeeper.storage import RecordStore

logger = logging.getLogger(__name__)

_PLACE = re.compile(r"^[2-9] PLAC (.+)", re.MULTILINE)
_LINK = re.compile(rf"^\d+ ({TAG_PATTERN}) @({XREF_PATTERN})@", re.MULTILINE)
_FACT_TYPE = re.compile(r"[A-Z]{3,5}")


def extract_places(xref: str, gedcom: str, store: RecordStore, resolver: PlaceResolver) -> int:
    """Link the record to every place used by its facts."""
    places = list(dict.fromkeys(_PLACE.findall(gedcom)))
    for place in places:
        store.link_place(resolver.resolve(place), xref)
    return len(places)


def find_dated_facts(gedcom: str) -> list[tuple[str, str]]:
    """
    (fact, date) for each level 1 fact with a level 2 DATE.

    The last level 2 DATE of a fact wins. FACT and EVEN use the leading
    tag-like code of their TYPE instead, e.g. "EYES" for "2 TYPE EYES".
    """
    lines = tokenize(gedcom)
    facts = []
    for index, line in enumerate(lines):
        if line.level != 1:
            continue
        date = ""
        fact_type = ""
        for child in lines[index + 1:]:
            if child.level < 2:
                break
            if child.level == 2 and child.tag == "DATE" and child.data:
                date = child.data
            elif child.level == 2 and child.tag == "TYPE" and not fact_type:
                fact_type = child.data
        if not date:
            continue
        fact = line.tag
        if fact in ("FACT", "EVEN"):
            match = _FACT_TYPE.match(fact_type)
            if match:
                fact = match.group(0)
        facts.append((fact, date))
    return facts


def _date_row(xref: str, data_set_id: int, fact: str, date: CalendarDate) -> DateIndex:
    julian_day1, julian_day2 = date.julian_days
    return DateIndex(
        xref=xref,
        data_set_id=data_set_id,
        fact=fact,
        day=date.day,
        month=date.month_code,
        month_number=date.month,
        year=-date.year if date.bc else date.year,
        julian_day1=julian_day1,
        julian_day2=julian_day2,
        calendar=date.calendar.value,
    )


def extract_dates(xref: str, gedcom: str, store: RecordStore) -> int:
    """One row per dated fact, two when the date is a range."""
    count = 0
    for fact, text in find_dated_facts(gedcom):
        date = GedcomDate(text)
        endpoints = [date.minimum_date()]
        if date.is_range():
            endpoints.append(date.maximum_date())
        for endpoint in endpoints:
            store.add(_date_row(xref, store.data_set_id, fact, endpoint))
            count += 1
    return count


def extract_links(xref: str, gedcom: str, store: RecordStore) -> int:
    """
    One edge per distinct (tag, target), in order of appearance.

    Edges the database rejects as duplicates are skipped.
    """
    seen: set[tuple[str, str]] = set()
    stored = 0
    for tag, target in _LINK.findall(gedcom):
        if (tag, target) in seen:
            continue
        seen.add((tag, target))
        if store.add_link(xref, tag, target):
            stored += 1
    return stored


def extract_names(xref: str, record: GedcomRecord, store: RecordStore, soundex: bool = False) -> int:
    """
    One row per name of the record. Personal names (soundex=True) also
    get phonetic codes, except for unknown-name placeholders.
    """
    names = record.get_all_names()
    for num, name in enumerate(names):
        row = NameIndex(
            xref=xref,
            data_set_id=store.data_set_id,
            num=num,
            name_type=name.name_type,
            sort=name.sort[:NAME_MAX_LENGTH],
            full=name.full[:NAME_MAX_LENGTH],
        )
        if soundex:
            row.surname = (name.surname or "")[:NAME_MAX_LENGTH]
            row.surn = (name.surn or "")[:NAME_MAX_LENGTH]
            row.givn = name.givn
            if name.givn != UNKNOWN_GIVEN_NAME:
                row.soundex_givn_std = standard_soundex(name.givn)
                row.soundex_givn_dm = metaphone_soundex(name.givn)
            if name.surn != UNKNOWN_SURNAME:
                row.soundex_surn_std = standard_soundex(name.surname)
                row.soundex_surn_dm = metaphone_soundex(name.surname)
        store.add(row)
    return len(names)
