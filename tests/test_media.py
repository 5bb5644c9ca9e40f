"""Inline media conversion tests."""

from sqlmodel import Session, select

from gedkeeper.ingestion.importer import GedcomImporter
from gedkeeper.ingestion.media import promote_media
from gedkeeper.models import DataSet, Link, Media, MediaFile
from gedkeeper.storage import RecordStore


def test_promote_media():
    """Test an inline block is shifted to level 0 and given an xref."""
    gedcom = promote_media(2, "\n2 OBJE\n3 FILE a.jpg\n4 FORM jpg", "X7")
    assert gedcom == "0 @X7@ OBJE\n1 FILE a.jpg\n2 FORM jpg"


def test_promote_legacy_media():
    gedcom = promote_media(1, "\n1 OBJE\n2 FORM jpg\n2 FILE a.jpg\n2 TITL Photo", "X1")
    assert gedcom == "0 @X1@ OBJE\n1 FILE a.jpg\n2 FORM jpg\n2 TITL Photo"


def test_inline_media_converted(session: Session, data_set: DataSet):
    """Test inline media becomes a linked media record."""
    record = GedcomImporter(session, data_set).import_record(
        "0 @I1@ INDI\n1 NAME Ann /Lee/\n1 OBJE\n2 FILE photos/ann.jpg\n2 TITL Ann\n1 SEX F"
    )
    assert record.gedcom == "0 @I1@ INDI\n1 NAME Ann /Lee/\n1 OBJE @X1@\n1 SEX F"

    media = session.get(Media, ("X1", data_set.data_set_id))
    assert media.gedcom == "0 @X1@ OBJE\n1 FILE photos/ann.jpg\n1 TITL Ann"

    (media_file,) = session.exec(select(MediaFile)).all()
    assert (media_file.xref, media_file.filename, media_file.title) == ("X1", "photos/ann.jpg", "Ann")

    links = session.exec(select(Link).where(Link.from_xref == "I1")).all()
    assert [(link.link_type, link.to_xref) for link in links] == [("OBJE", "X1")]


def test_inline_media_in_citation(session: Session, data_set: DataSet):
    record = GedcomImporter(session, data_set).import_record(
        "0 @I1@ INDI\n1 SOUR @S1@\n2 OBJE\n3 FILE scan.png"
    )
    assert record.gedcom == "0 @I1@ INDI\n1 SOUR @S1@\n2 OBJE @X1@"


def test_inline_media_reused(session: Session, data_set: DataSet):
    """Test identical inline media is converted to a single media record."""
    importer = GedcomImporter(session, data_set)
    block = "\n1 OBJE\n2 FILE photos/ann.jpg\n2 TITL Ann"
    importer.import_record("0 @I1@ INDI" + block)
    second = importer.import_record("0 @I2@ INDI" + block)

    assert second.gedcom == "0 @I2@ INDI\n1 OBJE @X1@"
    assert len(session.exec(select(Media)).all()) == 1


def test_new_xref_skips_used_ids(session: Session, data_set: DataSet):
    importer = GedcomImporter(session, data_set)
    importer.import_record("0 @X1@ NOTE Taken")
    record = importer.import_record("0 @I1@ INDI\n1 OBJE\n2 FILE a.jpg")

    assert record.gedcom == "0 @I1@ INDI\n1 OBJE @X2@"
    assert RecordStore(session, data_set).get_gedcom("X2") == "0 @X2@ OBJE\n1 FILE a.jpg"
    assert data_set.next_xref == 3
