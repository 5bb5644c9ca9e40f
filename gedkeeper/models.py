"""
Database models for GedKeeper.

All models use SQLModel for type-safe ORM with Pydantic validation.
Primary records keep their canonical GEDCOM text; the index tables
(places, place links, dates, names, links) are derived from it on import
and rebuilt whenever a record changes.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Text, UniqueConstraint
from sqlmodel import JSON, Column, Field, SQLModel

from gedkeeper.ontology import ChangeStatus, JobStatus, JobType


class DataSet(SQLModel, table=True):
    """
    One family tree. Holds the import preferences of its records.
    """

    __tablename__ = "data_sets"

    data_set_id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    name: str = Field(index=True, unique=True)
    title: Optional[str] = None

    # Import preferences
    media_path: str = ""  # Prefix stripped from FILE values
    word_wrapped_notes: bool = False  # Join CONC lines with a space
    generate_uids: bool = False  # Add a _UID to records that lack one
    keep_media: bool = False  # Re-attach media links dropped by external editors

    # Next number for allocated identifiers ("X1", "X2", ...)
    next_xref: int = Field(default=1)


class Individual(SQLModel, table=True):
    """INDI records."""

    __tablename__ = "individuals"

    xref: str = Field(primary_key=True)
    data_set_id: int = Field(primary_key=True, foreign_key="data_sets.data_set_id")
    rin: str
    sex: str = Field(default="U")
    gedcom: str = Field(sa_column=Column(Text, nullable=False))


class Family(SQLModel, table=True):
    """FAM records."""

    __tablename__ = "families"

    xref: str = Field(primary_key=True)
    data_set_id: int = Field(primary_key=True, foreign_key="data_sets.data_set_id")
    husband: str = ""
    wife: str = ""
    number_of_children: int = 0
    gedcom: str = Field(sa_column=Column(Text, nullable=False))


class SourceRecord(SQLModel, table=True):
    """SOUR records."""

    __tablename__ = "sources"

    xref: str = Field(primary_key=True)
    data_set_id: int = Field(primary_key=True, foreign_key="data_sets.data_set_id")
    name: str
    gedcom: str = Field(sa_column=Column(Text, nullable=False))


class Media(SQLModel, table=True):
    """OBJE records."""

    __tablename__ = "media"

    xref: str = Field(primary_key=True)
    data_set_id: int = Field(primary_key=True, foreign_key="data_sets.data_set_id")
    gedcom: str = Field(sa_column=Column(Text, nullable=False))


class MediaFile(SQLModel, table=True):
    """
    One FILE of a media record. Used to find existing media objects
    when inline media is converted.
    """

    __tablename__ = "media_files"

    media_file_id: Optional[int] = Field(default=None, primary_key=True)
    xref: str = Field(index=True)
    data_set_id: int = Field(foreign_key="data_sets.data_set_id")
    filename: str = ""
    format: str = ""
    source_media_type: str = ""
    title: str = ""


class OtherRecord(SQLModel, table=True):
    """REPO, NOTE, HEAD, TRLR, SUBM, SUBN and custom records."""

    __tablename__ = "other_records"

    xref: str = Field(primary_key=True)
    data_set_id: int = Field(primary_key=True, foreign_key="data_sets.data_set_id")
    record_type: str
    gedcom: str = Field(sa_column=Column(Text, nullable=False))


class Place(SQLModel, table=True):
    """
    One segment of a hierarchical place name.

    The implicit root has ID 0 and is never stored.
    """

    __tablename__ = "places"
    __table_args__ = (UniqueConstraint("data_set_id", "parent_id", "place"),)

    place_id: Optional[int] = Field(default=None, primary_key=True)
    data_set_id: int = Field(foreign_key="data_sets.data_set_id")
    parent_id: int = Field(default=0, index=True)
    place: str
    std_soundex: Optional[str] = None
    dm_soundex: Optional[str] = None


class PlaceLink(SQLModel, table=True):
    """Record -> place references."""

    __tablename__ = "placelinks"

    place_id: int = Field(primary_key=True)
    xref: str = Field(primary_key=True)
    data_set_id: int = Field(primary_key=True, foreign_key="data_sets.data_set_id")


class DateIndex(SQLModel, table=True):
    """
    Dated facts. A date range produces two rows, one per endpoint.
    """

    __tablename__ = "dates"

    date_id: Optional[int] = Field(default=None, primary_key=True)
    xref: str
    data_set_id: int = Field(foreign_key="data_sets.data_set_id")
    fact: str

    day: int = 0
    month: str = ""  # Month code, e.g. "MAY", "TSH", "VEND"
    month_number: int = 0
    year: int = 0
    julian_day1: int = 0
    julian_day2: int = 0
    calendar: str


class NameIndex(SQLModel, table=True):
    """
    Searchable names. Individuals also carry phonetic codes.
    """

    __tablename__ = "names"

    name_id: Optional[int] = Field(default=None, primary_key=True)
    xref: str
    data_set_id: int = Field(foreign_key="data_sets.data_set_id")
    num: int
    name_type: str
    sort: str
    full: str
    surname: Optional[str] = None
    surn: Optional[str] = None
    givn: Optional[str] = None

    soundex_givn_std: Optional[str] = None
    soundex_surn_std: Optional[str] = None
    soundex_givn_dm: Optional[str] = None
    soundex_surn_dm: Optional[str] = None


class Link(SQLModel, table=True):
    """Cross-reference edges between records."""

    __tablename__ = "links"

    data_set_id: int = Field(primary_key=True, foreign_key="data_sets.data_set_id")
    from_xref: str = Field(primary_key=True)
    link_type: str = Field(primary_key=True)
    to_xref: str = Field(primary_key=True)


class Change(SQLModel, table=True):
    """
    Pending edit of a record, awaiting moderation.

    old_gedcom is None for record creation; new_gedcom is None for deletion.
    """

    __tablename__ = "changes"

    change_id: Optional[int] = Field(default=None, primary_key=True)
    change_time: datetime = Field(default_factory=datetime.utcnow)
    data_set_id: int = Field(foreign_key="data_sets.data_set_id")
    xref: str = Field(index=True)

    old_gedcom: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    new_gedcom: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    status: ChangeStatus = Field(default=ChangeStatus.PENDING)
    user_name: Optional[str] = None


class Run(SQLModel, table=True):
    """
    Job execution tracking.
    """

    __tablename__ = "runs"

    run_id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    job_type: JobType
    status: JobStatus = Field(default=JobStatus.QUEUED)

    # Configuration
    config: dict = Field(default_factory=dict, sa_column=Column(JSON))

    # Results
    result_summary: dict = Field(default_factory=dict, sa_column=Column(JSON))
    error_message: Optional[str] = None
