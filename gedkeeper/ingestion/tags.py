"""
Canonical GEDCOM tags.

TAG_ALIASES maps the verbose spellings written by Family Tree Maker and
friends ("BIRTH", "MARRIAGE_LICENSE"), and the private tags of
PhpGedView, to their canonical codes. DATA_TRANSFORMS holds the value
rewrites that apply to a canonical tag.
"""

import re
from typing import Callable

from gedkeeper.ingestion.date_rules import normalize_date

TAG_ALIASES: dict[str, str] = {
    # PhpGedView
    "_PGVU": "_WT_USER",
    "_PGV_OBJS": "_WT_OBJE_SORT",
    # Family Tree Maker style "TAG_FORMAL_NAME"
    "ABBREVIATION": "ABBR",
    "ADDRESS": "ADDR",
    "ADDRESS1": "ADR1",
    "ADDRESS2": "ADR2",
    "ADDRESS3": "ADR3",
    "ADOPTION": "ADOP",
    "ADULT_CHRISTENING": "CHRA",
    "AGENCY": "AGNC",
    "ALIAS": "ALIA",
    "ANCESTORS": "ANCE",
    "ANCES_INTEREST": "ANCI",
    "ANNULMENT": "ANUL",
    "ASSOCIATES": "ASSO",
    "AUTHOR": "AUTH",
    "BAPTISM": "BAPM",
    "BAPTISM_LDS": "BAPL",
    "BAR_MITZVAH": "BARM",
    "BAS_MITZVAH": "BASM",
    "BIRTH": "BIRT",
    "BLESSING": "BLES",
    "BURIAL": "BURI",
    "CALL_NUMBER": "CALN",
    "CASTE": "CAST",
    "CAUSE": "CAUS",
    "CENSUS": "CENS",
    "CHANGE": "CHAN",
    "CHARACTER": "CHAR",
    "CHILD": "CHIL",
    "CHILDREN_COUNT": "NCHI",
    "CHRISTENING": "CHR",
    "CONCATENATION": "CONC",
    "CONFIRMATION": "CONF",
    "CONFIRMATION_LDS": "CONL",
    "CONTINUED": "CONT",
    "COPYRIGHT": "COPR",
    "CORPORATE": "CORP",
    "COUNTRY": "CTRY",
    "CREMATION": "CREM",
    "DEATH": "DEAT",
    "_DEATH_OF_SPOUSE": "_DETS",
    "_DEGREE": "_DEG",
    "DESCENDANTS": "DESC",
    "DESCENDANT_INT": "DESI",
    "DESTINATION": "DEST",
    "DIVORCE": "DIV",
    "DIVORCE_FILED": "DIVF",
    "EDUCATION": "EDUC",
    "EMIGRATION": "EMIG",
    "ENDOWMENT": "ENDL",
    "ENGAGEMENT": "ENGA",
    "EVENT": "EVEN",
    "FACSIMILE": "FAX",
    "FAMILY": "FAM",
    "FAMILY_CHILD": "FAMC",
    "FAMILY_FILE": "FAMF",
    "FAMILY_SPOUSE": "FAMS",
    "FIRST_COMMUNION": "FCOM",
    "_FILE": "FILE",
    "FORMAT": "FORM",
    "GEDCOM": "GEDC",
    "GIVEN_NAME": "GIVN",
    "GRADUATION": "GRAD",
    "HEADER": "HEAD",
    "HUSBAND": "HUSB",
    "IDENT_NUMBER": "IDNO",
    "IMMIGRATION": "IMMI",
    "INDIVIDUAL": "INDI",
    "LANGUAGE": "LANG",
    "LATITUDE": "LATI",
    "LONGITUDE": "LONG",
    "MARRIAGE": "MARR",
    "MARRIAGE_BANN": "MARB",
    "MARRIAGE_COUNT": "NMR",
    "MARRIAGE_CONTRACT": "MARC",
    "MARRIAGE_LICENSE": "MARL",
    "MARRIAGE_SETTLEMENT": "MARS",
    "MEDIA": "MEDI",
    "_MEDICAL": "_MDCL",
    "_MILITARY_SERVICE": "_MILT",
    "NAME_PREFIX": "NPFX",
    "NAME_SUFFIX": "NSFX",
    "NATIONALITY": "NATI",
    "NATURALIZATION": "NATU",
    "NICKNAME": "NICK",
    "OBJECT": "OBJE",
    "OCCUPATION": "OCCU",
    "ORDINANCE": "ORDI",
    "ORDINATION": "ORDN",
    "PEDIGREE": "PEDI",
    "PHONE": "PHON",
    "PHONETIC": "FONE",
    "PHY_DESCRIPTION": "DSCR",
    "PLACE": "PLAC",
    "POSTAL_CODE": "POST",
    "PROBATE": "PROB",
    "PROPERTY": "PROP",
    "PUBLICATION": "PUBL",
    "QUALITY_OF_DATA": "QUAL",
    "REC_FILE_NUMBER": "RFN",
    "REC_ID_NUMBER": "RIN",
    "REFERENCE": "REFN",
    "RELATIONSHIP": "RELA",
    "RELIGION": "RELI",
    "REPOSITORY": "REPO",
    "RESIDENCE": "RESI",
    "RESTRICTION": "RESN",
    "RETIREMENT": "RETI",
    "ROMANIZED": "ROMN",
    "SEALING_CHILD": "SLGC",
    "SEALING_SPOUSE": "SLGS",
    "SOC_SEC_NUMBER": "SSN",
    "SOURCE": "SOUR",
    "STATE": "STAE",
    "STATUS": "STAT",
    "SUBMISSION": "SUBN",
    "SUBMITTER": "SUBM",
    "SURNAME": "SURN",
    "SURN_PREFIX": "SPFX",
    "TEMPLE": "TEMP",
    "TITLE": "TITL",
    "TRAILER": "TRLR",
    "VERSION": "VERS",
    "WEB": "WWW",
}

# Tags whose record line carries neither xref nor data at level 0
EMPTY_LEVEL0_TAGS = frozenset({"HEAD", "TRLR"})

# Tags whose data is written verbatim, without whitespace tidying
VERBATIM_TAGS = frozenset({"NOTE", "TEXT", "DATA", "CONT", "FILE"})

_PACKED_COORDINATES = re.compile(r"(.*), (\d\d)(\d\d)(\d\d)([NS])(\d\d\d)(\d\d)(\d\d)([EW])$")


def canonical_tag(tag: str) -> str:
    tag = tag.upper()
    return TAG_ALIASES.get(tag, tag)


def _upper(data: str) -> str:
    return data.upper()


def _lower(data: str) -> str:
    return data.lower()


def _restriction(data: str) -> str:
    data = data.lower()
    # From old versions of Legacy
    return "confidential" if data == "invisible" else data


def _status(data: str) -> str:
    # PhpGedView mis-spells this value
    return "CANCELED" if data == "CANCELLED" else data


def _name(data: str) -> str:
    return re.sub(r"  +", " ", data.strip())


def _form(data: str) -> str:
    return re.sub(r" *, *", ", ", data)


def _place(data: str) -> str:
    return re.sub(r" *(،|,) *", ", ", data)


def format_degrees(hemisphere: str, degrees: str, minutes: str, seconds: str) -> str:
    """'N', '39', '59', '45' -> 'N39.9958'."""
    value = round(int(degrees) + int(minutes) / 60 + int(seconds) / 3600, 4)
    return hemisphere + f"{value:.4f}".rstrip("0").rstrip(".")


def split_packed_coordinates(place: str):
    """
    The Master Genealogist stores coordinates in the PLAC value, e.g.
    "Pennsylvania, USA, 395945N0751013W".

    Returns (place, latitude, longitude), or None when there are none.
    """
    match = _PACKED_COORDINATES.match(place)
    if not match:
        return None
    name, lat_d, lat_m, lat_s, lat_h, lon_d, lon_m, lon_s, lon_h = match.groups()
    return (
        name,
        format_degrees(lat_h, lat_d, lat_m, lat_s),
        format_degrees(lon_h, lon_d, lon_m, lon_s),
    )


DATA_TRANSFORMS: dict[str, Callable[[str], str]] = {
    "AFN": _upper,
    "TEMP": _upper,
    "SEX": _upper,
    "PEDI": _lower,
    "RESN": _restriction,
    "STAT": _status,
    "NAME": _name,
    "FORM": _form,
    "PLAC": _place,
    "DATE": normalize_date,
}
