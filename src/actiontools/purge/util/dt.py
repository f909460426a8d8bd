import re
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta

AGE_PATTERN = re.compile(r'^\s*(-?\d+)\s*([A-Za-z]+)\s*$')

# Single letter units are case-sensitive (`m` minutes vs `M` months), words are not
_SHORT_UNITS = {
    's': 'seconds',
    'm': 'minutes',
    'h': 'hours',
    'd': 'days',
    'w': 'weeks',
    'M': 'months',
    'y': 'years',
}

_UNIT_ALIASES = {
    'seconds': ('second', 'seconds', 'sec', 'secs'),
    'minutes': ('minute', 'minutes', 'min', 'mins'),
    'hours': ('hour', 'hours', 'hr', 'hrs'),
    'days': ('day', 'days'),
    'weeks': ('week', 'weeks'),
    'months': ('month', 'months'),
    'years': ('year', 'years'),
}

_WORD_UNITS = {alias: unit for unit, aliases in _UNIT_ALIASES.items() for alias in aliases}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Naive values are considered to be already in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(str_ts):
    """
    Parse an ISO-8601 timestamp as returned by the platform API (e.g. `2024-03-01T10:15:00Z`).

    Returns:
        Timezone aware UTC datetime or None for an empty value

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if not str_ts:
        return None

    sep = "T" if "T" in str_ts else " "

    if "." in str_ts:
        dec = ".%f"
    elif "," in str_ts:
        dec = ",%f"
    else:
        dec = ""

    zone = "%z" if re.search(r'(Z|[+-]\d{2}:?\d{2})$', str_ts) else ""

    try:
        parsed = datetime.strptime(str_ts, "%Y-%m-%d" + sep + "%H:%M:%S" + dec + zone)
    except ValueError:
        parsed = datetime.strptime(str_ts, "%Y-%m-%d" + sep + "%H:%M" + zone)

    return to_utc(parsed)


def parse_age(age) -> relativedelta:
    """
    Parse an age expression in the format "<non-negative integer> <unit>", e.g. "30 days" or "6 months".

    Raises:
        ValueError: If the number is negative or not an integer or the unit is unknown
    """
    match = AGE_PATTERN.match(age or '')
    if not match:
        raise ValueError(f"Invalid age `{age}`, expected format: <number> <unit>")

    value = int(match.group(1))
    if value < 0:
        raise ValueError(f"Age must not be negative: {age}")

    unit = resolve_unit(match.group(2))
    return relativedelta(**{unit: value})


def resolve_unit(unit: str) -> str:
    if unit in _SHORT_UNITS:
        return _SHORT_UNITS[unit]

    try:
        return _WORD_UNITS[unit.lower()]
    except KeyError:
        raise ValueError(f"Unknown age unit `{unit}`, use one of: {', '.join(_UNIT_ALIASES)}") from None


def format_dt_iso(td):
    if td is None:
        return None
    return td.isoformat()
