"""Importer tests: primary rows, indexes, updates and deletions."""

import pytest
from sqlalchemy import insert
from sqlmodel import Session, select

from gedkeeper.database import transaction
from gedkeeper.ingestion.errors import InvalidGedcomRecordError
from gedkeeper.ingestion.importer import GedcomImporter, split_records
from gedkeeper.ingestion.indexer import extract_links, find_dated_facts
from gedkeeper.models import (
    DataSet,
    DateIndex,
    Family,
    Individual,
    Link,
    NameIndex,
    OtherRecord,
    Place,
    PlaceLink,
    SourceRecord,
)
from gedkeeper.storage import RecordStore

JOHN = (
    "0 @I1@ INDI\n"
    "1 NAME John /Smith/\n"
    "1 SEX M\n"
    "1 BIRT\n"
    "2 DATE 14 MAY 1900\n"
    "2 PLAC London, England\n"
    "1 FAMS @F1@\n"
    "1 SOUR @S1@\n"
    "2 PAGE 5\n"
    "1 SOUR @S1@"
)


def _rows(session: Session, model, xref: str) -> list:
    return list(session.exec(select(model).where(model.xref == xref)).all())


def _links(session: Session, xref: str) -> set:
    links = session.exec(select(Link).where(Link.from_xref == xref)).all()
    return {(link.link_type, link.to_xref) for link in links}


def test_import_individual(session: Session, data_set: DataSet):
    """Test an individual is stored with its places, dates, links and names."""
    record = GedcomImporter(session, data_set).import_record(JOHN)
    assert record.xref == "I1"
    assert record.record_type == "INDI"

    individual = session.get(Individual, ("I1", data_set.data_set_id))
    assert individual.sex == "M"
    assert individual.rin == "I1"
    assert individual.gedcom == JOHN

    (birth,) = _rows(session, DateIndex, "I1")
    assert (birth.fact, birth.day, birth.month, birth.month_number, birth.year) == ("BIRT", 14, "MAY", 5, 1900)
    assert birth.julian_day1 == birth.julian_day2 == 2415154
    assert birth.calendar == "@#DGREGORIAN@"

    (place_link,) = _rows(session, PlaceLink, "I1")
    london = session.get(Place, place_link.place_id)
    assert london.place == "London"
    assert session.get(Place, london.parent_id).place == "England"

    assert _links(session, "I1") == {("FAMS", "F1"), ("SOUR", "S1")}

    (name,) = _rows(session, NameIndex, "I1")
    assert name.full == "John Smith"
    assert name.sort == "SMITH,JOHN"
    assert name.soundex_givn_std == "J500"
    assert name.soundex_surn_std == "S530"


def test_date_ranges(session: Session, data_set: DataSet):
    """Test ranges give two date rows and single dates one."""
    GedcomImporter(session, data_set).import_record(
        "0 @I1@ INDI\n1 BIRT\n2 DATE BET 1700 AND 1750\n1 DEAT\n2 DATE ABT 1800\n1 BURI\n2 DATE 44 B.C."
    )
    dates = session.exec(select(DateIndex).order_by(DateIndex.date_id)).all()
    assert [(date.fact, date.year) for date in dates] == [
        ("BIRT", 1700),
        ("BIRT", 1750),
        ("DEAT", 1800),
        ("BURI", -44),
    ]


def test_fact_type_and_last_date():
    facts = find_dated_facts(
        "0 @I1@ INDI\n1 FACT Blue\n2 TYPE EYES\n2 DATE 1900\n"
        "1 EVEN\n2 TYPE Graduation\n2 DATE 1910\n"
        "1 RESI\n2 DATE 1920\n2 DATE 1930\n"
        "1 FACT\n2 TYPE MILITARY service\n2 DATE 1940\n"
        "1 OCCU Baker"
    )
    assert facts == [("EYES", "1900"), ("EVEN", "1910"), ("RESI", "1930"), ("MILIT", "1940")]


def test_import_family(session: Session, data_set: DataSet):
    GedcomImporter(session, data_set).import_record(
        "0 @F1@ FAM\n1 HUSB @I1@\n1 WIFE @I2@\n1 CHIL @I3@\n1 CHIL @I4@\n1 MARR\n2 DATE 1920\n2 PLAC Paris, France"
    )
    family = session.get(Family, ("F1", data_set.data_set_id))
    assert (family.husband, family.wife, family.number_of_children) == ("I1", "I2", 2)
    assert len(_rows(session, DateIndex, "F1")) == 1
    assert len(_rows(session, PlaceLink, "F1")) == 1
    assert _links(session, "F1") == {("HUSB", "I1"), ("WIFE", "I2"), ("CHIL", "I3"), ("CHIL", "I4")}


def test_declared_children(session: Session, data_set: DataSet):
    GedcomImporter(session, data_set).import_record("0 @F1@ FAM\n1 CHIL @I3@\n1 NCHI 5")
    assert session.get(Family, ("F1", data_set.data_set_id)).number_of_children == 5


def test_import_source_and_note(session: Session, data_set: DataSet):
    importer = GedcomImporter(session, data_set)
    importer.import_record("0 @S1@ SOUR\n1 TITL Parish register\n1 REPO @R1@")
    importer.import_record("0 @N1@ NOTE mail john@@example.com")

    assert session.get(SourceRecord, ("S1", data_set.data_set_id)).name == "Parish register"
    assert _links(session, "S1") == {("REPO", "R1")}

    note = session.get(OtherRecord, ("N1", data_set.data_set_id))
    assert note.record_type == "NOTE"
    assert note.gedcom == "0 @N1@ NOTE mail john@example.com"
    assert [name.full for name in _rows(session, NameIndex, "N1")] == ["mail john@example.com"]


def test_import_header(session: Session, data_set: DataSet):
    """Test HEAD uses its type as xref and gets a DATE."""
    record = GedcomImporter(session, data_set).import_record("0 HEAD\n1 CHAR UTF-8")
    assert record.xref == "HEAD"
    header = session.get(OtherRecord, ("HEAD", data_set.data_set_id))
    assert "\n1 DATE " in header.gedcom


def test_invalid_record(session: Session, data_set: DataSet):
    importer = GedcomImporter(session, data_set)
    with pytest.raises(InvalidGedcomRecordError):
        importer.import_record("1 NAME Nobody")
    with pytest.raises(InvalidGedcomRecordError):
        importer.import_record("this is not gedcom")


def test_generate_uids(session: Session, data_set: DataSet):
    data_set.generate_uids = True
    record = GedcomImporter(session, data_set).import_record("0 @I1@ INDI\n1 NAME Ann /Lee/")
    assert "\n1 _UID " in record.gedcom
    # Records that have one keep it
    record = GedcomImporter(session, data_set).import_record("0 @I2@ INDI\n1 _UID 1234")
    assert record.gedcom.count("_UID") == 1


def test_placeholder_names_have_no_soundex(session: Session, data_set: DataSet):
    GedcomImporter(session, data_set).import_record("0 @I1@ INDI\n1 NAME /Smith/")
    (name,) = _rows(session, NameIndex, "I1")
    assert name.givn == "@P.N."
    assert name.soundex_givn_std is None
    assert name.soundex_givn_dm is None
    assert name.soundex_surn_std == "S530"


def test_duplicate_link_skipped(session: Session, data_set: DataSet):
    """Test an edge the database already holds is skipped, not fatal."""
    session.execute(
        insert(Link).values(data_set_id=data_set.data_set_id, from_xref="I1", link_type="SOUR", to_xref="S1")
    )
    store = RecordStore(session, data_set)
    stored = extract_links("I1", "0 @I1@ INDI\n1 SOUR @S1@\n1 FAMS @F1@\n1 SOUR @S1@", store)
    assert stored == 1
    assert _links(session, "I1") == {("SOUR", "S1"), ("FAMS", "F1")}


def test_update_rebuilds_indexes(session: Session, data_set: DataSet):
    """Test an update leaves exactly the index rows of the new text."""
    importer = GedcomImporter(session, data_set)
    importer.import_record(JOHN)

    importer.update_record(
        "0 @I1@ INDI\n1 NAME Jack /Smyth/\n1 BIRT\n2 DATE 1901\n2 PLAC Paris, France\n1 FAMS @F9@"
    )

    individual = session.get(Individual, ("I1", data_set.data_set_id))
    assert "Jack /Smyth/" in individual.gedcom
    assert individual.sex == "U"

    assert [date.year for date in _rows(session, DateIndex, "I1")] == [1901]
    assert [name.full for name in _rows(session, NameIndex, "I1")] == ["Jack Smyth"]
    assert _links(session, "I1") == {("FAMS", "F9")}

    # London and England are no longer used by any record
    places = session.exec(select(Place.place)).all()
    assert sorted(places) == ["France", "Paris"]


def test_update_keeps_shared_places(session: Session, data_set: DataSet):
    importer = GedcomImporter(session, data_set)
    importer.import_record(JOHN)
    importer.import_record("0 @I2@ INDI\n1 BIRT\n2 PLAC York, England")

    importer.update_record("0 @I1@ INDI\n1 NAME John /Smith/")

    places = session.exec(select(Place.place)).all()
    assert sorted(places) == ["England", "York"]


def test_delete_record(session: Session, data_set: DataSet):
    importer = GedcomImporter(session, data_set)
    importer.import_record(JOHN)

    assert importer.delete_record(JOHN) == "I1"

    assert session.get(Individual, ("I1", data_set.data_set_id)) is None
    for model in (DateIndex, NameIndex, PlaceLink):
        assert _rows(session, model, "I1") == []
    assert _links(session, "I1") == set()
    assert session.exec(select(Place)).all() == []


def test_keep_media(session: Session, data_set: DataSet):
    """Test media links dropped by an external editor are restored."""
    data_set.keep_media = True
    importer = GedcomImporter(session, data_set)
    importer.import_record("0 @I1@ INDI\n1 NAME Ann /Lee/\n1 OBJE @M1@")

    importer.update_record("0 @I1@ INDI\n1 NAME Ann /Lee/\n1 SEX F")

    gedcom = RecordStore(session, data_set).get_gedcom("I1")
    assert gedcom.endswith("\n1 OBJE @M1@")
    assert ("OBJE", "M1") in _links(session, "I1")


def test_transaction_rolls_back(session: Session, data_set: DataSet):
    """Test a failure leaves no partially imported records behind."""
    importer = GedcomImporter(session, data_set)
    with pytest.raises(InvalidGedcomRecordError):
        with transaction(session):
            importer.import_record(JOHN)
            importer.import_record("not a record")

    assert session.get(Individual, ("I1", data_set.data_set_id)) is None
    assert session.exec(select(DateIndex)).all() == []


def test_split_records():
    text = "\ufeff0 HEAD\r\n1 CHAR UTF-8\r\n0 @I1@ INDI\r\n1 NAME A /B/\r\n\r\n0 TRLR\r\n"
    assert split_records(text) == ["0 HEAD\n1 CHAR UTF-8", "0 @I1@ INDI\n1 NAME A /B/", "0 TRLR\n"]


def test_import_file(session: Session, data_set: DataSet, tmp_path):
    """Test a whole file is imported and invalid records are counted."""
    path = tmp_path / "tree.ged"
    path.write_text(
        "\ufeff0 HEAD\r\n1 CHAR UTF-8\r\n"
        "0 @I1@ INDI\r\n1 NAME John /Smith/\r\n1 BIRT\r\n2 PLAC Leeds, England\r\n1 FAMS @F1@\r\n"
        "0 @F1@ FAM\r\n1 HUSB @I1@\r\n"
        "0 bogus record\r\n"
        "0 TRLR\r\n",
        encoding="utf-8",
    )

    result = GedcomImporter(session, data_set).import_file(str(path))

    assert result["records_imported"] == 4
    assert result["records_by_type"] == {"HEAD": 1, "INDI": 1, "FAM": 1, "TRLR": 1}
    assert result["invalid_records"] == 1
    assert result["places_cached"] == 2
    assert session.get(Family, ("F1", data_set.data_set_id)).husband == "I1"


def test_skipped_levels_imported(session: Session, data_set: DataSet):
    """Test records whose levels jump by more than one are still imported."""
    result = GedcomImporter(session, data_set).import_text(
        "0 HEAD\n"
        "0 @I1@ INDI\n1 NAME John /Smith/\n1 BIRT\n3 DATE 1900\n"
        "0 @I2@ INDI\n2 NAME Ann /Lee/\n"
        "0 @S1@ SOUR\n1 TITL Book\n5 NOTE deep\n"
        "0 TRLR\n"
    )
    assert result["records_imported"] == 5
    assert result["invalid_records"] == 0
    assert session.get(Individual, ("I2", data_set.data_set_id)) is not None
    assert session.get(SourceRecord, ("S1", data_set.data_set_id)) is not None


def test_reversed_range_order(session: Session, data_set: DataSet):
    GedcomImporter(session, data_set).import_record("0 @I1@ INDI\n1 BIRT\n2 DATE BET 1750 AND 1700")
    dates = session.exec(select(DateIndex).order_by(DateIndex.date_id)).all()
    assert [date.year for date in dates] == [1700, 1750]
    assert dates[0].julian_day1 <= dates[1].julian_day1
