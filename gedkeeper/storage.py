"""
Storage interface of the import pipeline.

RecordStore reads and writes the primary record tables and the derived
index tables of one data set. PlaceStore owns the place hierarchy.
Neither commits: the caller owns the transaction.
"""

import logging
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from gedkeeper.models import (
    DataSet,
    DateIndex,
    Family,
    Individual,
    Link,
    Media,
    MediaFile,
    NameIndex,
    OtherRecord,
    Place,
    PlaceLink,
    SourceRecord,
)
from gedkeeper.ontology import (
    MEDIA_FILENAME_MAX_LENGTH,
    MEDIA_FORMAT_MAX_LENGTH,
    MEDIA_TITLE_MAX_LENGTH,
    MEDIA_TYPE_MAX_LENGTH,
    RecordType,
)

logger = logging.getLogger(__name__)

PRIMARY_TABLES = {
    RecordType.INDIVIDUAL.value: Individual,
    RecordType.FAMILY.value: Family,
    RecordType.SOURCE.value: SourceRecord,
    RecordType.MEDIA.value: Media,
}


def insert_ignoring_duplicates(session: Session, model):
    """
    INSERT that silently skips rows violating a unique key.

    Collation differences ("Quebec" and "Québec") can make two submitted
    values look distinct to us but equal to the database.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model).on_conflict_do_nothing()
    if dialect == "sqlite":
        return sqlite.insert(model).on_conflict_do_nothing()
    if dialect in ("mysql", "mariadb"):
        return mysql.insert(model).prefix_with("IGNORE")
    raise ValueError(f"No idempotent insert for dialect {dialect!r}")


class PlaceStore:
    """Lookup-or-insert access to the place hierarchy of one data set."""

    def __init__(self, session: Session, data_set_id: int):
        self.session = session
        self.data_set_id = data_set_id

    def find(self, parent_id: int, name: str) -> Optional[int]:
        """Lowest matching place ID; duplicates resolve to the first."""
        return self.session.exec(
            select(Place.place_id)
            .where(Place.data_set_id == self.data_set_id)
            .where(Place.parent_id == parent_id)
            .where(Place.place == name)
            .order_by(Place.place_id)
        ).first()

    def upsert(self, parent_id: int, name: str, std_soundex: str, dm_soundex: str) -> int:
        """Insert the place unless it exists, then return its ID."""
        statement = insert_ignoring_duplicates(self.session, Place).values(
            data_set_id=self.data_set_id,
            parent_id=parent_id,
            place=name,
            std_soundex=std_soundex,
            dm_soundex=dm_soundex,
        )
        self.session.execute(statement)
        place_id = self.find(parent_id, name)
        if place_id is None:
            raise LookupError(f"Place {name!r} under {parent_id} was not stored")
        return place_id


class RecordStore:
    """Primary and index rows of one data set."""

    def __init__(self, session: Session, data_set: DataSet):
        self.session = session
        self.data_set = data_set
        self.data_set_id = data_set.data_set_id

    # Primary records

    def add(self, row) -> None:
        """Insert a primary or index row. Storage errors propagate."""
        self.session.add(row)
        self.session.flush()

    def get_gedcom(self, xref: str) -> Optional[str]:
        """Canonical text of a record, from whichever table holds it."""
        for model in (*PRIMARY_TABLES.values(), OtherRecord):
            gedcom = self.session.exec(
                select(model.gedcom)
                .where(model.xref == xref)
                .where(model.data_set_id == self.data_set_id)
            ).first()
            if gedcom is not None:
                return gedcom
        return None

    def delete_record(self, xref: str, record_type: str) -> None:
        model = PRIMARY_TABLES.get(record_type, OtherRecord)
        self._delete(model, model.xref == xref)
        if model is Media:
            self._delete(MediaFile, MediaFile.xref == xref)

    def new_xref(self) -> str:
        """Allocate an identifier that no record of the data set uses."""
        while True:
            xref = f"X{self.data_set.next_xref}"
            self.data_set.next_xref += 1
            self.session.add(self.data_set)
            if self.get_gedcom(xref) is None:
                self.session.flush()
                return xref

    # Media

    def add_media_files(self, xref: str, media_files) -> None:
        for media_file in media_files:
            self.session.add(
                MediaFile(
                    xref=xref,
                    data_set_id=self.data_set_id,
                    filename=media_file.filename[:MEDIA_FILENAME_MAX_LENGTH],
                    format=media_file.format[:MEDIA_FORMAT_MAX_LENGTH],
                    source_media_type=media_file.source_media_type[:MEDIA_TYPE_MAX_LENGTH],
                    title=media_file.title[:MEDIA_TITLE_MAX_LENGTH],
                )
            )
        self.session.flush()

    def find_media(self, filename: str, title: str) -> Optional[str]:
        """A media object with exactly this filename and title."""
        return self.session.exec(
            select(MediaFile.xref)
            .where(MediaFile.data_set_id == self.data_set_id)
            .where(MediaFile.filename == filename)
            .where(MediaFile.title == title)
            .order_by(MediaFile.media_file_id)
        ).first()

    def linked_media(self, xref: str) -> list[str]:
        return list(
            self.session.exec(
                select(Link.to_xref)
                .where(Link.data_set_id == self.data_set_id)
                .where(Link.from_xref == xref)
                .where(Link.link_type == RecordType.MEDIA.value)
            ).all()
        )

    # Index rows

    def link_place(self, place_id: int, xref: str) -> None:
        statement = insert_ignoring_duplicates(self.session, PlaceLink).values(
            place_id=place_id,
            xref=xref,
            data_set_id=self.data_set_id,
        )
        self.session.execute(statement)

    def add_link(self, from_xref: str, link_type: str, to_xref: str) -> bool:
        """
        Store one edge. Returns False when the database rejects it as a
        duplicate of an existing edge, e.g. "S1" and "s1" under a
        case-insensitive collation.
        """
        try:
            with self.session.begin_nested():
                self.session.add(
                    Link(
                        data_set_id=self.data_set_id,
                        from_xref=from_xref,
                        link_type=link_type,
                        to_xref=to_xref,
                    )
                )
        except IntegrityError:
            logger.debug("Skipped duplicate link %s %s @%s@", from_xref, link_type, to_xref)
            return False
        return True

    def delete_index_rows(self, xref: str) -> list[int]:
        """
        Remove the place links, dates, names and links of a record.

        Returns the IDs of the places the record was linked to.
        """
        place_ids = list(
            self.session.exec(
                select(PlaceLink.place_id)
                .where(PlaceLink.xref == xref)
                .where(PlaceLink.data_set_id == self.data_set_id)
            ).all()
        )
        self._delete(PlaceLink, PlaceLink.xref == xref)
        self._delete(DateIndex, DateIndex.xref == xref)
        self._delete(NameIndex, NameIndex.xref == xref)
        self._delete(Link, Link.from_xref == xref)
        return place_ids

    def delete_unlinked_places(self, place_ids: list[int]) -> list[int]:
        """
        Delete places that no record links to and that have no children,
        then their parents under the same rule.
        """
        removed: list[int] = []
        pending = list(place_ids)
        while pending:
            place_id = pending.pop()
            if place_id == 0 or place_id in removed or self._place_in_use(place_id):
                continue
            place = self.session.get(Place, place_id)
            if place is None or place.data_set_id != self.data_set_id:
                continue
            pending.append(place.parent_id)
            self.session.delete(place)
            self.session.flush()
            removed.append(place_id)
        return removed

    def _place_in_use(self, place_id: int) -> bool:
        linked = self.session.exec(
            select(PlaceLink.xref)
            .where(PlaceLink.place_id == place_id)
            .where(PlaceLink.data_set_id == self.data_set_id)
        ).first()
        if linked is not None:
            return True
        child = self.session.exec(
            select(Place.place_id)
            .where(Place.parent_id == place_id)
            .where(Place.data_set_id == self.data_set_id)
        ).first()
        return child is not None

    def _delete(self, model, criterion) -> None:
        self.session.execute(
            delete(model).where(criterion).where(model.data_set_id == self.data_set_id)
        )
