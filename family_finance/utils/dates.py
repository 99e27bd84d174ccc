import calendar
from datetime import date, datetime

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"
DISPLAY_FORMAT = "%d/%m/%Y"

MONTH_NAMES_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


def parse_iso_date(date_str: str) -> date:
    """Parse 'YYYY-MM-DD' as a plain calendar date (no timezone involved)."""
    return datetime.strptime(date_str.strip(), DATE_FORMAT).date()


def format_display_date(d: date) -> str:
    return d.strftime(DISPLAY_FORMAT)


def month_key(d: date) -> str:
    """Return the 'YYYY-MM' bucket a date belongs to."""
    return d.strftime(MONTH_FORMAT)


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end.

    31 Jan + 1 month is 29 Feb in a leap year, never 2 March.
    """
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def shift_month(month_str: str, offset: int) -> str:
    """Move a 'YYYY-MM' key by offset months."""
    first = datetime.strptime(month_str, MONTH_FORMAT).date()
    return month_key(add_months(first, offset))


def month_label(month_str: str) -> str:
    """Convert YYYY-MM to e.g. 'Fevereiro de 2026'."""
    first = datetime.strptime(month_str, MONTH_FORMAT).date()
    name = MONTH_NAMES_PT[first.month - 1]
    return f"{name.capitalize()} de {first.year}"
