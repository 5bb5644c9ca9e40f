"""
GedKeeper ontology.

Enumerations and fixed vocabulary shared by the import pipeline,
the storage layer and the API.
"""

from enum import Enum
from typing import Final

# Field lengths of the derived index tables
PLACE_NAME_MAX_LENGTH: Final[int] = 150
NAME_MAX_LENGTH: Final[int] = 255
SOURCE_NAME_MAX_LENGTH: Final[int] = 255
MEDIA_FILENAME_MAX_LENGTH: Final[int] = 512
MEDIA_FORMAT_MAX_LENGTH: Final[int] = 4
MEDIA_TYPE_MAX_LENGTH: Final[int] = 15
MEDIA_TITLE_MAX_LENGTH: Final[int] = 248
RECORD_TYPE_MAX_LENGTH: Final[int] = 15

# Placeholders for unknown name parts
UNKNOWN_SURNAME: Final[str] = "@N.N."
UNKNOWN_GIVEN_NAME: Final[str] = "@P.N."

# Identifier and tag grammar of the canonical record text
XREF_PATTERN: Final[str] = r"[A-Za-z0-9:_-]+"
TAG_PATTERN: Final[str] = r"[_A-Z][_A-Z0-9]*"


class RecordType(str, Enum):
    """Level-0 record types with dedicated storage."""

    INDIVIDUAL = "INDI"
    FAMILY = "FAM"
    SOURCE = "SOUR"
    REPOSITORY = "REPO"
    NOTE = "NOTE"
    MEDIA = "OBJE"
    HEADER = "HEAD"
    TRAILER = "TRLR"
    SUBMITTER = "SUBM"
    SUBMISSION = "SUBN"


class ChangeStatus(str, Enum):
    """Moderation states of a pending change."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Calendar(str, Enum):
    """GEDCOM calendar escapes."""

    GREGORIAN = "@#DGREGORIAN@"
    JULIAN = "@#DJULIAN@"
    HEBREW = "@#DHEBREW@"
    FRENCH = "@#DFRENCH R@"
    ROMAN = "@#DROMAN@"
    UNKNOWN = "@#DUNKNOWN@"


class JobType(str, Enum):
    """Background job types."""

    IMPORT_GEDCOM = "import_gedcom"
    ACCEPT_CHANGES = "accept_changes"


class JobStatus(str, Enum):
    """Job execution states."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
