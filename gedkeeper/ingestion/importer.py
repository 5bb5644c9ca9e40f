"""
GEDCOM importer.

Imports records into the primary tables and maintains the derived
indexes (places, dates, names, links). Updates and deletions tear the
indexes down before re-importing, so that they always match the
stored text.

Nothing here commits. Callers run each import, update or delete in
a transaction (see gedkeeper.database.transaction) so that a failure
leaves no partially indexed record behind.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from sqlmodel import Session

from gedkeeper.genealogy.dates import GREGORIAN_MONTHS
from gedkeeper.genealogy.records import GedcomRecord
from gedkeeper.genealogy.uids import create_uid
from gedkeeper.ingestion.changes import ChangeLog
from gedkeeper.ingestion.errors import InvalidGedcomRecordError
from gedkeeper.ingestion.indexer import extract_dates, extract_links, extract_names, extract_places
from gedkeeper.ingestion.media import InlineMediaExtractor
from gedkeeper.ingestion.normalizer import reformat_record
from gedkeeper.ingestion.places import PlaceCache, PlaceResolver
from gedkeeper.ingestion.tokenizer import normalize_line_endings
from gedkeeper.models import DataSet, Family, Individual, Media, OtherRecord, SourceRecord
from gedkeeper.ontology import (
    RECORD_TYPE_MAX_LENGTH,
    SOURCE_NAME_MAX_LENGTH,
    TAG_PATTERN,
    XREF_PATTERN,
    ChangeStatus,
    RecordType,
)
from gedkeeper.storage import PlaceStore, RecordStore

logger = logging.getLogger(__name__)

_RECORD = re.compile(rf"^0 @({XREF_PATTERN})@ ({TAG_PATTERN})")
_PSEUDO_RECORD = re.compile(r"^0 (HEAD|TRLR)(?:\n|$)")
_RECORD_START = re.compile(r"\n(?=[ \t]*0[ \t])")


@dataclass
class ImportedRecord:
    """Result of importing one record."""

    xref: str
    record_type: str
    gedcom: str


def _first_match(pattern: str, gedcom: str) -> Optional[str]:
    match = re.search(pattern, gedcom)
    return match.group(1) if match else None


def _today() -> str:
    today = date.today()
    return f"{today.day} {GREGORIAN_MONTHS[today.month - 1]} {today.year}"


def split_records(text: str) -> list[str]:
    """Split the text of a GEDCOM file into level 0 records."""
    text = normalize_line_endings(text.lstrip("\ufeff"))
    return [chunk for chunk in _RECORD_START.split(text) if chunk.strip()]


class GedcomImporter:
    """Import, update and delete the records of one data set."""

    def __init__(self, session: Session, data_set: DataSet, place_cache: Optional[PlaceCache] = None):
        self.session = session
        self.data_set = data_set
        self.store = RecordStore(session, data_set)
        self.place_cache = place_cache if place_cache is not None else PlaceCache()
        self.places = PlaceResolver(PlaceStore(session, data_set.data_set_id), self.place_cache)
        self.media = InlineMediaExtractor(self.store, self._import_media)
        self.changes = ChangeLog(session, data_set.data_set_id)

    # Files

    def import_file(self, file_path: str) -> dict:
        """
        Import every record of a GEDCOM file.

        Returns summary statistics.
        """
        text = Path(file_path).read_text(encoding="utf-8-sig", errors="replace")
        return self.import_text(text)

    def import_text(self, text: str) -> dict:
        """Import every record of the text of a GEDCOM file."""
        counts: dict[str, int] = {}
        invalid = 0
        for chunk in split_records(text):
            try:
                record = self.import_record(chunk)
            except InvalidGedcomRecordError as exc:
                logger.warning("Skipped record: %s", exc)
                invalid += 1
                continue
            counts[record.record_type] = counts.get(record.record_type, 0) + 1

        logger.info(
            "Imported %d records into %s (%d invalid)",
            sum(counts.values()),
            self.data_set.name,
            invalid,
        )
        return {
            "records_imported": sum(counts.values()),
            "records_by_type": counts,
            "invalid_records": invalid,
            "places_cached": len(self.place_cache),
        }

    # Records

    def import_record(
        self,
        gedcom: str,
        update: bool = False,
        kept_media: Optional[list[str]] = None,
    ) -> ImportedRecord:
        """
        Parse a record and add it, with its indexes, to the database.

        Args:
            gedcom: Raw record text
            update: True for an accepted edit, False for a file import
            kept_media: Media links to restore when the data set keeps media

        Raises:
            InvalidGedcomRecordError: The text is not a GEDCOM record
        """
        # Escaped @ signs (only if importing from file)
        if not update:
            gedcom = gedcom.replace("@@", "@")

        # Standardise gedcom format
        gedcom = reformat_record(
            gedcom,
            media_path=self.data_set.media_path,
            word_wrapped_notes=self.data_set.word_wrapped_notes,
        )

        match = _RECORD.match(gedcom)
        if match:
            xref, record_type = match.groups()
            # Check for a _UID; if the record doesn't have one, add one
            if self.data_set.generate_uids and "\n1 _UID " not in gedcom:
                gedcom += "\n1 _UID " + create_uid()
        else:
            match = _PSEUDO_RECORD.match(gedcom)
            if not match:
                raise InvalidGedcomRecordError(gedcom)
            # HEAD and TRLR use their type as pseudo-xref
            xref = record_type = match.group(1)

        # Media links deleted by programs that do not support media are added back
        if self.data_set.keep_media:
            if kept_media is None:
                kept_media = self.store.linked_media(xref)
            for media_xref in kept_media:
                if f" OBJE @{media_xref}@" not in gedcom:
                    gedcom += f"\n1 OBJE @{media_xref}@"

        if record_type == RecordType.INDIVIDUAL.value:
            gedcom = self._import_individual(xref, gedcom)
        elif record_type == RecordType.FAMILY.value:
            gedcom = self._import_family(xref, gedcom)
        elif record_type == RecordType.SOURCE.value:
            gedcom = self._import_source(xref, gedcom)
        elif record_type == RecordType.REPOSITORY.value:
            gedcom = self.media.convert(gedcom)
            self._import_other(xref, record_type, gedcom, names=True)
        elif record_type == RecordType.NOTE.value:
            self._import_other(xref, record_type, gedcom, names=True)
        elif record_type == RecordType.MEDIA.value:
            self._import_media(xref, gedcom)
        else:
            # HEAD, TRLR, SUBM, SUBN and custom record types
            if record_type == RecordType.HEADER.value and "\n1 DATE " not in gedcom:
                gedcom += "\n1 DATE " + _today()
            self._import_other(xref, record_type, gedcom, names=False)

        logger.debug("Imported %s @%s@", record_type, xref)
        return ImportedRecord(xref=xref, record_type=record_type, gedcom=gedcom)

    def update_record(self, gedcom: str, delete: bool = False) -> str:
        """
        Replace (or delete) a stored record.

        All index rows of the old version are removed, as are places that
        nothing links to any more; unless deleting, the new text is then
        imported under the same xref.

        Returns the xref of the record.
        """
        match = _RECORD.match(gedcom)
        if match:
            xref, record_type = match.groups()
        else:
            # The HEAD record has no xref
            match = re.match(r"^0 (HEAD)(?:\n|$)", gedcom)
            if not match:
                raise InvalidGedcomRecordError(gedcom)
            xref = record_type = match.group(1)

        kept_media = self.store.linked_media(xref) if self.data_set.keep_media else None

        place_ids = self.store.delete_index_rows(xref)
        if self.store.delete_unlinked_places(place_ids):
            self.place_cache.clear(self.data_set.data_set_id)
        self.store.delete_record(xref, record_type)

        if not delete:
            self.import_record(gedcom, update=True, kept_media=kept_media)

        return xref

    def delete_record(self, gedcom: str) -> str:
        """Remove a record and all of its index rows."""
        return self.update_record(gedcom, delete=True)

    # Pending changes

    def accept_all_changes(self, xref: str) -> int:
        """Apply the pending changes of a record, oldest first."""
        changes = self.changes.pending(xref)
        for change in changes:
            if not change.new_gedcom:
                self.update_record(change.old_gedcom, delete=True)
            else:
                self.update_record(change.new_gedcom)
            self.changes.mark(change, ChangeStatus.ACCEPTED)
            logger.info(
                "Accepted change %s for %s / %s into database",
                change.change_id,
                xref,
                self.data_set.name,
            )
        return len(changes)

    def reject_all_changes(self, xref: str) -> int:
        """Discard the pending changes of a record."""
        changes = self.changes.pending(xref)
        for change in changes:
            self.changes.mark(change, ChangeStatus.REJECTED)
        if changes:
            logger.info("Rejected %d changes for %s / %s", len(changes), xref, self.data_set.name)
        return len(changes)

    # Record types

    def _index(self, xref: str, gedcom: str, places: bool = False, dates: bool = False) -> None:
        if places:
            extract_places(xref, gedcom, self.store, self.places)
        if dates:
            extract_dates(xref, gedcom, self.store)
        extract_links(xref, gedcom, self.store)

    def _import_individual(self, xref: str, gedcom: str) -> str:
        # Convert inline media into media objects
        gedcom = self.media.convert(gedcom)

        record = GedcomRecord.from_gedcom(gedcom)
        self.store.add(
            Individual(
                xref=xref,
                data_set_id=self.data_set.data_set_id,
                rin=_first_match(r"\n1 RIN (.+)", gedcom) or xref,
                sex=record.get_sex(),
                gedcom=gedcom,
            )
        )
        self._index(xref, gedcom, places=True, dates=True)
        extract_names(xref, record, self.store, soundex=True)
        return gedcom

    def _import_family(self, xref: str, gedcom: str) -> str:
        gedcom = self.media.convert(gedcom)

        children = len(re.findall(rf"\n1 CHIL @{XREF_PATTERN}@", gedcom))
        declared = _first_match(r"\n1 NCHI (\d+)", gedcom)
        if declared is not None:
            children = max(children, int(declared))

        self.store.add(
            Family(
                xref=xref,
                data_set_id=self.data_set.data_set_id,
                husband=_first_match(rf"\n1 HUSB @({XREF_PATTERN})@", gedcom) or "",
                wife=_first_match(rf"\n1 WIFE @({XREF_PATTERN})@", gedcom) or "",
                number_of_children=children,
                gedcom=gedcom,
            )
        )
        self._index(xref, gedcom, places=True, dates=True)
        return gedcom

    def _import_source(self, xref: str, gedcom: str) -> str:
        gedcom = self.media.convert(gedcom)

        name = _first_match(r"\n1 TITL (.+)", gedcom) or _first_match(r"\n1 ABBR (.+)", gedcom) or xref
        self.store.add(
            SourceRecord(
                xref=xref,
                data_set_id=self.data_set.data_set_id,
                name=name[:SOURCE_NAME_MAX_LENGTH],
                gedcom=gedcom,
            )
        )
        self._index(xref, gedcom)
        extract_names(xref, GedcomRecord.from_gedcom(gedcom), self.store)
        return gedcom

    def _import_media(self, xref: str, gedcom: str) -> str:
        record = GedcomRecord.from_gedcom(gedcom)
        self.store.add(Media(xref=xref, data_set_id=self.data_set.data_set_id, gedcom=gedcom))
        self.store.add_media_files(xref, record.media_files())
        self._index(xref, gedcom)
        extract_names(xref, record, self.store)
        return gedcom

    def _import_other(self, xref: str, record_type: str, gedcom: str, names: bool) -> None:
        self.store.add(
            OtherRecord(
                xref=xref,
                data_set_id=self.data_set.data_set_id,
                record_type=record_type[:RECORD_TYPE_MAX_LENGTH],
                gedcom=gedcom,
            )
        )
        self._index(xref, gedcom)
        if names:
            extract_names(xref, GedcomRecord.from_gedcom(gedcom), self.store)
