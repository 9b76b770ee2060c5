"""
Date expression parser for search queries
Pulls a year and/or month out of free text like "SEPLAT 2024",
"drilling June 2023" or "06/2024".
"""

import re
from dataclasses import dataclass
from typing import Optional

MONTH_NAMES = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

NUMERIC_MONTH_YEAR = re.compile(r"\b(\d{1,2})[/\-](20\d{2})\b")
YEAR = re.compile(r"\b(20\d{2})\b")
MONTH_NAME = re.compile(r"\b(" + "|".join(MONTH_NAMES) + r")\b", re.IGNORECASE)
WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParsedQuery:
    clean_query: str
    year: Optional[int] = None
    month: Optional[int] = None


def _remove_first(text: str, fragment: str) -> str:
    return text.replace(fragment, "", 1).strip()


def parse_date_from_query(query: str) -> ParsedQuery:
    """
    Split a search query into free text and an optional year/month.

    Order matters: numeric "MM/YYYY" first, then a bare year (only if no
    year was found yet), then a month name. A month name always overwrites
    the month, so "06/2024 June" ends up as June 2024 through the name.
    """
    clean_query = query
    year = None
    month = None

    numeric_match = NUMERIC_MONTH_YEAR.search(query)
    if numeric_match:
        parsed_month = int(numeric_match.group(1))
        if 1 <= parsed_month <= 12:
            month = parsed_month
            year = int(numeric_match.group(2))
            clean_query = _remove_first(clean_query, numeric_match.group(0))

    if year is None:
        year_match = YEAR.search(clean_query)
        if year_match:
            year = int(year_match.group(1))
            clean_query = _remove_first(clean_query, year_match.group(0))

    month_match = MONTH_NAME.search(clean_query)
    if month_match:
        month = MONTH_NAMES[month_match.group(1).lower()]
        clean_query = _remove_first(clean_query, month_match.group(0))

    clean_query = WHITESPACE.sub(" ", clean_query).strip()

    return ParsedQuery(clean_query=clean_query, year=year, month=month)
