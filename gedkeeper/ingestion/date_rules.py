"""
Rewrite rules that bring DATE values into the GEDCOM date grammar.

Each rule is a small function from text to text. They run in the order
of DATE_RULES; later rules rely on the work of earlier ones, e.g.
punctuation is only removed after the keyword substitutions that need it.
While the rules run, the value is padded with one space at each end so
that whole words can be matched as " WORD ".
"""

import re
from typing import Callable

DateRule = Callable[[str], str]

_ESCAPE = r"@#[^@]+@"


def split_letters_and_digits(date: str) -> str:
    """'14MAY1900' -> '14 MAY 1900'."""
    date = re.sub(r"([A-Z])(\d)", r"\1 \2", date)
    return re.sub(r"(\d)([A-Z])", r"\1 \2", date)


def pad_calendar_escapes(date: str) -> str:
    """Ensure a space before and after '@#DJULIAN@' style escapes."""
    return re.sub(_ESCAPE, r" \g<0> ", date)


def strip_abbreviation_dots(date: str) -> str:
    """'BET.' -> 'BET', 'ABT.' -> 'ABT'."""
    return re.sub(r"(\w\w)\.", r"\1", date)


def replace_approximations(date: str) -> str:
    """'CIR' and 'APX' -> 'ABT'."""
    return date.replace(" CIR ", " ABT ").replace(" APX ", " ABT ")


def protect_bc(date: str) -> str:
    """'B.C.' -> 'BC', so that the dots survive punctuation removal."""
    return date.replace(" B.C. ", " BC ")


def either_or_to_between(date: str) -> str:
    """TMG uses 'EITHER X OR Y'."""
    return re.sub(r"^ EITHER (.+) OR (.+)", r" BET \1 AND \2", date)


def dash_to_and(date: str) -> str:
    """'BET X - Y' -> 'BET X AND Y', also for 'BET 1700-1750'."""
    date = re.sub(r"^(.* BET .+) - (.+)", r"\1 AND \2", date)
    return re.sub(r"^(.* BET (?:.* )?\d{3,4})-(\d{3,4}\b.*)", r"\1 AND \2", date)


def dash_to_to(date: str) -> str:
    """'FROM X - Y' -> 'FROM X TO Y', also for 'FROM 1700-1750'."""
    date = re.sub(r"^(.* FROM .+) - (.+)", r"\1 TO \2", date)
    return re.sub(r"^(.* FROM (?:.* )?\d{3,4})-(\d{3,4}\b.*)", r"\1 TO \2", date)


def distribute_calendar_escape(date: str) -> str:
    """'@#ESC@ FROM X TO Y' -> 'FROM @#ESC@ X TO @#ESC@ Y' (and BET/AND)."""
    date = re.sub(r"^ +(" + _ESCAPE + r") +FROM +(.+) +TO +(.+)", r" FROM \1 \2 TO \1 \3", date)
    return re.sub(r"^ +(" + _ESCAPE + r") +BET +(.+) +AND +(.+)", r" BET \1 \2 AND \1 \3", date)


def move_calendar_escape(date: str) -> str:
    """'@#ESC@ AFT X' -> 'AFT @#ESC@ X'."""
    return re.sub(
        r"^ +(" + _ESCAPE + r") +(FROM|BET|TO|AND|BEF|AFT|CAL|EST|INT|ABT) +(.+)",
        r" \2 \1 \3",
        date,
    )


def strip_punctuation(date: str) -> str:
    """'14-MAY, 1900' -> '14 MAY 1900'. The '/' of dual dates is kept."""
    return re.sub(r"[.,:;-]", " ", date)


def restore_bc(date: str) -> str:
    return date.replace(" BC ", " B.C. ")


DATE_RULES: list[DateRule] = [
    split_letters_and_digits,
    pad_calendar_escapes,
    strip_abbreviation_dots,
    replace_approximations,
    protect_bc,
    either_or_to_between,
    dash_to_and,
    dash_to_to,
    distribute_calendar_escape,
    move_calendar_escape,
    strip_punctuation,
    restore_bc,
]


def normalize_date(data: str) -> str:
    """
    Apply every rule to a DATE value.

    Text in parentheses (the phrase of an interpreted date) is kept as-is.
    The result may contain extra spaces; the caller tidies whitespace.
    """
    if "(" in data:
        date, text = data.split("(", 1)
        text = " (" + text
    else:
        date, text = data, ""

    date = f" {date.upper()} "
    for rule in DATE_RULES:
        date = rule(date)

    return date + text
