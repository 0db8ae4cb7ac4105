"""Report date detection for free-form lab report text."""
from __future__ import annotations

import re
from datetime import date
from typing import Iterable, List, Optional

_MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")
_MONTH = r"(?P<month>jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"

# Numeric forms: the 4-digit group decides between MM/DD/YYYY and YYYY/MM/DD.
_MONTH_FIRST = re.compile(r"(?<!\d)(?P<month>\d{1,2})[/\-](?P<day>\d{1,2})[/\-](?P<year>\d{4})(?!\d)")
_YEAR_FIRST = re.compile(r"(?<!\d)(?P<year>\d{4})[/\-](?P<month>\d{1,2})[/\-](?P<day>\d{1,2})(?!\d)")
# Month-name forms: "15 Mar 2024" and "March 15, 2024".
_DAY_MONTH_NAME = re.compile(r"\b(?P<day>\d{1,2})\s+" + _MONTH + r"\s+(?P<year>\d{4})\b", re.IGNORECASE)
_MONTH_NAME_DAY = re.compile(r"\b" + _MONTH + r"\s+(?P<day>\d{1,2}),?\s+(?P<year>\d{4})\b", re.IGNORECASE)


def _month_number(token: str) -> int:
    if token.isdigit():
        return int(token)
    return _MONTHS.index(token[:3].lower()) + 1


def _to_iso(year: str, month: str, day: str) -> Optional[str]:
    try:
        return date(int(year), _month_number(month), int(day)).isoformat()
    except ValueError:
        return None


def find_dates(text: str) -> List[str]:
    """Return every parseable date in ``text`` as an ISO ``YYYY-MM-DD`` string."""
    found: List[str] = []
    patterns: Iterable[re.Pattern] = (_MONTH_FIRST, _YEAR_FIRST, _DAY_MONTH_NAME, _MONTH_NAME_DAY)
    for pattern in patterns:
        for match in pattern.finditer(text or ""):
            iso = _to_iso(match.group("year"), match.group("month"), match.group("day"))
            if iso:
                found.append(iso)
    return found


def resolve_report_date(text: str, today: Optional[date] = None) -> date:
    """Pick the most recent date mentioned in the text, else ``today``.

    Best-effort: a report that mentions a future follow-up date will resolve
    to that date.
    """
    candidates = find_dates(text)
    if candidates:
        return date.fromisoformat(max(candidates))
    return today or date.today()


__all__ = ["find_dates", "resolve_report_date"]
