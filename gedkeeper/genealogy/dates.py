"""
GEDCOM date parsing.

A GEDCOM date is a loosely specified expression such as "ABT 1800",
"BET @#DJULIAN@ 1700 AND @#DJULIAN@ 1750" or "INT 1900 (about then)".
GedcomDate resolves it to one or two CalendarDate endpoints, each of
which spans a range of julian day numbers (a whole year for "1800",
a whole month for "MAY 1800", a single day for "14 MAY 1800").

Text that cannot be understood never raises: it produces an
indeterminate date, with year 0 and julian days 0.
"""

import re
from dataclasses import dataclass
from typing import Optional

from gedkeeper.ontology import Calendar

GREGORIAN_MONTHS = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")
HEBREW_MONTHS = ("TSH", "CSH", "KSL", "TVT", "SHV", "ADR", "ADS", "NSN", "IYR", "SVN", "TMZ", "AAV", "ELL")
FRENCH_MONTHS = (
    "VEND", "BRUM", "FRIM", "NIVO", "PLUV", "VENT",
    "GERM", "FLOR", "PRAI", "MESS", "THER", "FRUC", "COMP",
)

QUALIFIERS = ("FROM", "TO", "BEF", "AFT", "ABT", "CAL", "EST", "INT")

_ESCAPE = re.compile(r"^\s*(@#[^@]+@)\s*")
_SIMPLE_DATE = re.compile(
    r"^(?:(\d{1,2}) +)?(?:([A-Z]{3,4}) +)?(\d{1,4})(?:/(\d{1,2}))?(?: +(B\.?C\.?))?$"
)
_RANGE = re.compile(r"^(FROM|BET) +(.+?) +(TO|AND) +(.+)$")
_QUALIFIED = re.compile(r"^(" + "|".join(QUALIFIERS) + r") +(.+)$")


class CalendarSystem:
    """Arithmetic of one calendar, in terms of (year, month, day)."""

    months: tuple = GREGORIAN_MONTHS

    def ymd_to_jd(self, year: int, month: int, day: int) -> int:
        raise NotImplementedError

    def days_in_month(self, year: int, month: int) -> int:
        raise NotImplementedError

    def months_in_year(self, year: int) -> int:
        return len(self.months)


class GregorianCalendar(CalendarSystem):
    """Proleptic Gregorian calendar. Years are astronomical (1 B.C. = 0)."""

    def is_leap_year(self, year: int) -> bool:
        return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)

    def ymd_to_jd(self, year: int, month: int, day: int) -> int:
        a = (14 - month) // 12
        y = year + 4800 - a
        m = month + 12 * a - 3
        return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045

    def days_in_month(self, year: int, month: int) -> int:
        if month == 2:
            return 29 if self.is_leap_year(year) else 28
        return 30 if month in (4, 6, 9, 11) else 31


class JulianCalendar(GregorianCalendar):
    """Julian calendar. Years are astronomical (1 B.C. = 0)."""

    def is_leap_year(self, year: int) -> bool:
        return year % 4 == 0

    def ymd_to_jd(self, year: int, month: int, day: int) -> int:
        a = (14 - month) // 12
        y = year + 4800 - a
        m = month + 12 * a - 3
        return day + (153 * m + 2) // 5 + 365 * y + y // 4 - 32083


class FrenchCalendar(CalendarSystem):
    """French republican calendar: twelve months of 30 days and a short 13th month."""

    months = FRENCH_MONTHS

    def ymd_to_jd(self, year: int, month: int, day: int) -> int:
        return 2375444 + day + month * 30 + year * 365 + year // 4

    def days_in_month(self, year: int, month: int) -> int:
        if month < 13:
            return 30
        return 6 if year % 4 == 3 else 5


class HebrewCalendar(CalendarSystem):
    """
    Hebrew calendar. Months are numbered in GEDCOM order, from Tishri (1)
    to Elul (13); Adar Sheni (7) only exists in leap years.
    """

    months = HEBREW_MONTHS

    # Julian day of 1 Tishri AM 1
    EPOCH = 347998

    def is_leap_year(self, year: int) -> bool:
        return (7 * year + 1) % 19 < 7

    def _elapsed_days(self, year: int) -> int:
        months_elapsed = (235 * year - 234) // 19
        parts_elapsed = 12084 + 13753 * months_elapsed
        day = 29 * months_elapsed + parts_elapsed // 25920
        return day + 1 if (3 * (day + 1)) % 7 < 3 else day

    def _year_length_correction(self, year: int) -> int:
        ny0 = self._elapsed_days(year - 1)
        ny1 = self._elapsed_days(year)
        ny2 = self._elapsed_days(year + 1)
        if ny2 - ny1 == 356:
            return 2
        if ny1 - ny0 == 382:
            return 1
        return 0

    def new_year(self, year: int) -> int:
        return self.EPOCH + self._elapsed_days(year) + self._year_length_correction(year)

    def days_in_year(self, year: int) -> int:
        return self.new_year(year + 1) - self.new_year(year)

    def days_in_month(self, year: int, month: int) -> int:
        year_length = self.days_in_year(year)
        if month == 2:  # Cheshvan
            return 30 if year_length in (355, 385) else 29
        if month == 3:  # Kislev
            return 29 if year_length in (353, 383) else 30
        if month == 6:  # Adar (I)
            return 30 if self.is_leap_year(year) else 29
        if month == 7:  # Adar Sheni
            return 29 if self.is_leap_year(year) else 0
        return 30 if month in (1, 5, 8, 10, 12) else 29

    def ymd_to_jd(self, year: int, month: int, day: int) -> int:
        jd = self.new_year(year)
        for previous in range(1, month):
            jd += self.days_in_month(year, previous)
        return jd + day - 1


CALENDARS: dict[Calendar, CalendarSystem] = {
    Calendar.GREGORIAN: GregorianCalendar(),
    Calendar.JULIAN: JulianCalendar(),
    Calendar.HEBREW: HebrewCalendar(),
    Calendar.FRENCH: FrenchCalendar(),
}


@dataclass(frozen=True)
class CalendarDate:
    """
    One endpoint of a GEDCOM date. Zero means "not specified" for
    year, month and day.
    """

    calendar: Calendar = Calendar.GREGORIAN
    year: int = 0
    month: int = 0
    day: int = 0
    bc: bool = False

    @property
    def month_code(self) -> str:
        system = CALENDARS.get(self.calendar)
        if system is None or not 1 <= self.month <= len(system.months):
            return ""
        return system.months[self.month - 1]

    @property
    def is_indeterminate(self) -> bool:
        return self.year == 0 or self.calendar not in CALENDARS

    def _astronomical_year(self) -> int:
        if self.bc and self.calendar in (Calendar.GREGORIAN, Calendar.JULIAN):
            return 1 - self.year
        return self.year

    @property
    def julian_days(self) -> tuple[int, int]:
        """First and last julian day covered by this date."""
        if self.is_indeterminate:
            return 0, 0
        system = CALENDARS[self.calendar]
        year = self._astronomical_year()
        if self.month == 0:
            first = system.ymd_to_jd(year, 1, 1)
            return first, system.ymd_to_jd(year + 1, 1, 1) - 1
        first = system.ymd_to_jd(year, self.month, 1)
        if self.day == 0:
            return first, first + max(system.days_in_month(year, self.month), 1) - 1
        day = min(self.day, max(system.days_in_month(year, self.month), 1))
        jd = first + day - 1
        return jd, jd

    @property
    def min_julian_day(self) -> int:
        return self.julian_days[0]

    @property
    def max_julian_day(self) -> int:
        return self.julian_days[1]


def _month_lookup(code: str, calendar: Calendar) -> tuple[Calendar, int]:
    """Find a month code, switching calendar when the code belongs to another one."""
    system = CALENDARS.get(calendar)
    if system is not None and code in system.months:
        return calendar, system.months.index(code) + 1
    if calendar in (Calendar.GREGORIAN, Calendar.JULIAN):
        if code in HEBREW_MONTHS:
            return Calendar.HEBREW, HEBREW_MONTHS.index(code) + 1
        if code in FRENCH_MONTHS:
            return Calendar.FRENCH, FRENCH_MONTHS.index(code) + 1
    return calendar, 0


def parse_calendar_date(text: str) -> CalendarDate:
    """Parse "[@#Dxxx@] [day] [month] year[/yy] [B.C.]"."""
    text = " ".join(text.upper().split())

    calendar = Calendar.GREGORIAN
    match = _ESCAPE.match(text)
    if match:
        escape = match.group(1)
        text = text[match.end():]
        try:
            calendar = Calendar(escape)
        except ValueError:
            return CalendarDate(calendar=Calendar.UNKNOWN)

    match = _SIMPLE_DATE.match(text)
    if not match:
        return CalendarDate(calendar=calendar)

    day, month_code, year, dual_year, bc = match.groups()
    month = 0
    if month_code:
        calendar, month = _month_lookup(month_code, calendar)
        if month == 0:
            return CalendarDate(calendar=calendar)

    year_number = int(year)
    if dual_year and calendar in (Calendar.GREGORIAN, Calendar.JULIAN):
        # "1699/00" is 1699 old style, 1700 new style
        year_number += 1

    return CalendarDate(
        calendar=calendar,
        year=year_number,
        month=month,
        day=int(day) if day and month else 0,
        bc=bool(bc),
    )


class GedcomDate:
    """
    A GEDCOM date expression with one or two endpoints.
    """

    def __init__(self, text: str):
        self.text = text
        self.qualifier1 = ""
        self.qualifier2 = ""
        self.date2: Optional[CalendarDate] = None

        # Interpreted dates keep their phrase in parentheses
        expression = text.split("(", 1)[0]
        expression = " ".join(expression.upper().split())

        match = _RANGE.match(expression)
        if match:
            self.qualifier1, first, self.qualifier2, second = match.groups()
            self.date1 = parse_calendar_date(first)
            self.date2 = parse_calendar_date(second)
            return

        match = _QUALIFIED.match(expression)
        if match:
            self.qualifier1, expression = match.groups()
        self.date1 = parse_calendar_date(expression)

    def _endpoints(self) -> tuple[CalendarDate, CalendarDate]:
        """(earliest, latest). "BET 1900 AND 1800" is read as 1800 to 1900."""
        if self.date2 is None:
            return self.date1, self.date1
        if (
            not self.date1.is_indeterminate
            and not self.date2.is_indeterminate
            and self.date2.min_julian_day < self.date1.min_julian_day
        ):
            return self.date2, self.date1
        return self.date1, self.date2

    def minimum_date(self) -> CalendarDate:
        return self._endpoints()[0]

    def maximum_date(self) -> CalendarDate:
        return self._endpoints()[1]

    def is_range(self) -> bool:
        """True when the minimum and maximum endpoints differ."""
        return self.minimum_date() != self.maximum_date()

    def __repr__(self) -> str:
        return f"GedcomDate({self.text!r})"
