"""
Due dates and day keys.

A task's `due` is an "MM/DD" string with an implicit year (the current one
unless told otherwise). Views index tasks by day key, the ISO date string
("2026-03-15"), and drag-to-reschedule turns a day key back into "MM/DD".
"""

from datetime import date, timedelta

# Sort position for due dates that cannot be parsed
FAR_FUTURE = date(3000, 1, 1)


def parse_due(due: str | None, year: int | None = None) -> date | None:
    """Parse "MM/DD" against `year`. Returns None for anything unparseable.

    Invalid calendar dates ("13/40", "02/30") are rejected, not rolled over.
    """
    if not due:
        return None
    parts = due.strip().split("/")
    if len(parts) < 2:
        return None
    try:
        month, day = int(parts[0]), int(parts[1])
        return date(year or date.today().year, month, day)
    except ValueError:
        return None


def day_key(d: date) -> str:
    return d.isoformat()


def parse_day_key(key: str) -> date:
    """Inverse of day_key. Raises ValueError on malformed keys."""
    return date.fromisoformat(key)


def format_due(d: date) -> str:
    return f"{d.month:02d}/{d.day:02d}"


def due_from_day_key(key: str) -> str:
    return format_due(parse_day_key(key))


def due_sort_key(due: str | None, year: int | None = None) -> date:
    return parse_due(due, year) or FAR_FUTURE


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def week_dates(anchor: date) -> list[date]:
    """Monday to Friday of the anchor's week."""
    start = monday_of(anchor)
    return [start + timedelta(days=i) for i in range(5)]


def weekday_month_grid(anchor: date) -> list[tuple[date, bool]]:
    """Weekday cells (Mon-Fri rows) covering the anchor's month.

    Returns (day, in_month) pairs. Rows run from the Monday on or before the
    1st; rows with no day inside the month are dropped.
    """
    first = anchor.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    last = next_month - timedelta(days=1)

    day = monday_of(first)
    end = monday_of(last) + timedelta(days=28)

    cells: list[tuple[date, bool]] = []
    week: list[tuple[date, bool]] = []
    while day <= end:
        if day.weekday() < 5:
            week.append((day, day.month == first.month and day.year == first.year))
        if len(week) == 5:
            if any(in_month for _, in_month in week):
                cells.extend(week)
            week = []
        day += timedelta(days=1)
    return cells
