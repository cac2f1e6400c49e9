"""
Resolve human-relative date expressions such as "last 7 days".

A month is treated as exactly 30 days. That is an approximation, not
calendar arithmetic: "last 1 month" on March 31st starts on March 1st.
Callers rely on the exact boundaries, so keep it that way.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

_RELATIVE_RE = re.compile(r"^(last|next)\s+(\d+)\s+(day|week|month)s?$", re.IGNORECASE)

UNIT_DAYS = {
    "day": 1,
    "week": 7,
    "month": 30,
}


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime


def resolve_relative_date(text: str, today: date | None = None) -> DateRange | None:
    """
    Turn "(last|next) <N> (day|week|month)[s]" into concrete boundaries.

    "today" is anchored at local midnight. "last" yields
    [today - N units, today] and "next" yields [today, today + N units].
    Returns None when the text does not match or the range falls outside
    what datetime can represent.
    """
    match = _RELATIVE_RE.match(text.strip())
    if not match:
        return None

    direction, amount, unit = match.groups()
    anchor = datetime.combine(today or date.today(), time.min)
    try:
        offset = timedelta(days=int(amount) * UNIT_DAYS[unit.lower()])
        if direction.lower() == "last":
            return DateRange(start=anchor - offset, end=anchor)
        return DateRange(start=anchor, end=anchor + offset)
    except (OverflowError, ValueError):
        # well-formed but outside the range datetime can represent
        return None
