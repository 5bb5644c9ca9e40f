"""Tokenizer, tag normalization and reassembly tests."""

import pytest

from gedkeeper.ingestion.date_rules import normalize_date
from gedkeeper.ingestion.normalizer import reassemble, reformat_record, tidy_whitespace
from gedkeeper.ingestion.tags import DATA_TRANSFORMS, TAG_ALIASES, canonical_tag, split_packed_coordinates
from gedkeeper.ingestion.tokenizer import GedcomLine, tokenize


def test_tokenize_lines():
    """Test splitting a record into (level, xref, tag, data)."""
    lines = tokenize("0 @I1@ INDI\r\n1 NAME John /Smith/\r2 GIVN John\n1 FAMS @F1@")
    assert lines == [
        GedcomLine(0, "@I1@", "INDI", ""),
        GedcomLine(1, "", "NAME", "John /Smith/"),
        GedcomLine(2, "", "GIVN", "John"),
        GedcomLine(1, "", "FAMS", "@F1@"),
    ]


def test_tokenize_permissive():
    """Test leading whitespace, tabs and blank lines are tolerated, garbage dropped."""
    lines = tokenize("  0 @I1@ INDI\n\n\t1\tSEX M\nnot a gedcom line\n")
    assert lines == [
        GedcomLine(0, "@I1@", "INDI", ""),
        GedcomLine(1, "", "SEX", "M"),
    ]


def test_tag_aliases_canonical():
    """Test every verbose tag maps to its canonical code with data untouched."""
    for alias, tag in TAG_ALIASES.items():
        if tag in DATA_TRANSFORMS or tag == "CONC":
            continue
        gedcom = reformat_record(f"0 @X1@ _TEST\n1 {alias} something")
        assert gedcom == f"0 @X1@ _TEST\n1 {tag} something"


def test_tags_are_uppercased():
    assert canonical_tag("birt") == "BIRT"
    assert canonical_tag("Marriage") == "MARR"
    assert canonical_tag("_CUSTOM") == "_CUSTOM"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("bet 1700-1750", "BET 1700 AND 1750"),
        ("BET 1700 - 1750", "BET 1700 AND 1750"),
        ("from 1700-1750", "FROM 1700 TO 1750"),
        ("cir 1800", "ABT 1800"),
        ("apx 1800", "ABT 1800"),
        ("Abt. 1800", "ABT 1800"),
        ("14MAY1900", "14 MAY 1900"),
        ("14-May, 1900", "14 MAY 1900"),
        ("EITHER 1750 OR 1751", "BET 1750 AND 1751"),
        ("@#DJULIAN@ AFT 1700", "AFT @#DJULIAN@ 1700"),
        ("@#DJULIAN@ BET 1700 AND 1750", "BET @#DJULIAN@ 1700 AND @#DJULIAN@ 1750"),
        ("44 B.C.", "44 B.C."),
        ("1 JAN 1699/00", "1 JAN 1699/00"),
        ("INT 1900 (about then, maybe.)", "INT 1900 (about then, maybe.)"),
    ],
)
def test_normalize_date(raw, expected):
    """Test DATE values are rewritten into the date grammar."""
    assert tidy_whitespace(normalize_date(raw)) == expected


def test_date_line_normalized():
    gedcom = reformat_record("0 @I1@ INDI\n1 BIRT\n2 DATE cir 1800")
    assert gedcom == "0 @I1@ INDI\n1 BIRT\n2 DATE ABT 1800"


def test_split_packed_coordinates():
    """Test TMG style coordinates inside a place name."""
    assert split_packed_coordinates("Pennsylvania, USA, 395945N0751013W") == (
        "Pennsylvania, USA",
        "N39.9958",
        "W75.1703",
    )
    assert split_packed_coordinates("Pennsylvania, USA") is None


def test_packed_coordinates_become_map():
    gedcom = reformat_record(
        "0 @I1@ INDI\n1 BIRT\n2 PLAC Pennsylvania, USA, 395945N0751013W\n2 DATE 1800"
    )
    assert gedcom == (
        "0 @I1@ INDI\n1 BIRT\n2 PLAC Pennsylvania, USA\n3 MAP\n"
        "4 LATI N39.9958\n4 LONG W75.1703\n2 DATE 1800"
    )


def test_place_commas_normalized():
    gedcom = reformat_record("0 @I1@ INDI\n1 BIRT\n2 PLAC London ,England")
    assert gedcom.endswith("2 PLAC London, England")


def test_redundant_marker_removed():
    """Test "1 BIRT Y" loses its Y once the fact has a date or place."""
    assert reformat_record("0 @I1@ INDI\n1 BIRT Y\n2 DATE 1900") == "0 @I1@ INDI\n1 BIRT\n2 DATE 1900"
    # The qualifying line may be the last line of the record
    assert reformat_record("0 @I1@ INDI\n1 DEAT Y\n2 SOUR @S1@\n2 PLAC Paris") == (
        "0 @I1@ INDI\n1 DEAT\n2 SOUR @S1@\n2 PLAC Paris"
    )


def test_redundant_marker_kept():
    assert reformat_record("0 @I1@ INDI\n1 DEAT y\n1 BIRT\n2 DATE 1900") == (
        "0 @I1@ INDI\n1 DEAT Y\n1 BIRT\n2 DATE 1900"
    )


def test_conc_merged():
    """Test CONC lines are merged into the previous line."""
    gedcom = reformat_record("0 @N1@ NOTE The quick\n1 CONC  brown fox\n1 CONT jumps")
    assert gedcom == "0 @N1@ NOTE The quick brown fox\n1 CONT jumps"


def test_conc_word_wrapped():
    gedcom = reformat_record("0 @N1@ NOTE The quick\n1 CONC brown fox", word_wrapped_notes=True)
    assert gedcom == "0 @N1@ NOTE The quick brown fox"


def test_leading_conc_dropped():
    assert reassemble([GedcomLine(1, "", "CONC", "orphan"), GedcomLine(1, "", "SEX", "M")]) == "1 SEX M"


def test_note_keeps_whitespace():
    gedcom = reformat_record("0 @I1@ INDI\n1 NOTE\n2 CONT   indented  text\n1 SEX   m")
    assert gedcom == "0 @I1@ INDI\n1 NOTE \n2 CONT   indented  text\n1 SEX M"


def test_file_prefix_stripped():
    gedcom = reformat_record(
        "0 @M1@ OBJE\n1 FILE C:\\Photos\\family\\me.jpg",
        media_path="C:\\Photos\\",
    )
    assert gedcom == "0 @M1@ OBJE\n1 FILE family/me.jpg"


def test_head_loses_data():
    gedcom = reformat_record("0 HEAD junk\n1 SOUR Program")
    assert gedcom == "0 HEAD\n1 SOUR Program"


def test_value_rewrites():
    gedcom = reformat_record(
        "0 @I1@ INDI\n1 RESN Invisible\n1 FAMC @F1@\n2 PEDI Birth\n1 NAME  John   /Smith/ "
    )
    assert gedcom == "0 @I1@ INDI\n1 RESN confidential\n1 FAMC @F1@\n2 PEDI birth\n1 NAME John /Smith/"


def test_code_value_rewrites():
    """Test ordinance status spelling, upper-cased codes and FORM comma spacing."""
    gedcom = reformat_record(
        "0 @I1@ INDI\n1 SEX f\n1 AFN 1abc-x2\n1 BAPL\n2 TEMP slake\n2 STAT CANCELLED\n1 OBJE\n2 FORM jpg ,png,  gif"
    )
    assert gedcom == (
        "0 @I1@ INDI\n1 SEX F\n1 AFN 1ABC-X2\n1 BAPL\n2 TEMP SLAKE\n2 STAT CANCELED\n1 OBJE\n2 FORM jpg, png, gif"
    )


def test_reformat_is_stable():
    """Test reformatting canonical text changes nothing."""
    gedcom = reformat_record("0 @I1@ INDI\n1 BIRTH Y\n2 DATE bet 1700-1750\n2 PLAC London,England")
    assert reformat_record(gedcom) == gedcom
