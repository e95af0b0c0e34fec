"""
Repair Record Aggregator

Pure summaries over a list of repair records already held in memory.

Key rules:
- Never raises on malformed records; missing values become 0, "Unknown"
  or the "N/A" sentinel
- Never mutates the input list or its records
- Ties keep original order (Python's sort is stable, also with reverse=True)
"""

import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union


NOT_AVAILABLE = "N/A"
UNKNOWN_CLIENT = "Unknown"

SECONDS_PER_DAY = 60 * 60 * 24

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

Number = Union[int, float]
KeyFunc = Callable[[Dict], Any]


# ============== Coercion ==============

def as_records(value: Any) -> List[Dict]:
    """Coerce anything that is not a list to an empty list; drop non-dict items."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-ish date string (or date/datetime) to an aware UTC datetime.

    Returns None for missing or unparseable values.
    """
    if value is None or value == "" or value == NOT_AVAILABLE:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # offset pushes the instant past datetime.min/max
        return None


def parse_int(value: Any) -> int:
    """Integer parse of a number or numeric string; anything else is 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return 0
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


def parse_number(value: Any) -> Optional[float]:
    """Float parse for averages; None when the value is missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _field_getter(key: Union[str, KeyFunc]) -> KeyFunc:
    if callable(key):
        return key
    return lambda record: record.get(key)


def client_key(record: Mapping) -> str:
    """Name used to group a repair by client (string equality, not a foreign key)."""
    name = record.get("clientName")
    if isinstance(name, str) and name.strip():
        return name.strip()

    first = record.get("clientFirstName") or ""
    last = record.get("clientLastName") or ""
    full = f"{first} {last}".strip()
    if full:
        return full

    for fallback in ("email", "userID"):
        value = record.get(fallback)
        if isinstance(value, str) and value.strip():
            return value.strip()

    return UNKNOWN_CLIENT


def is_completed(record: Mapping) -> bool:
    return record.get("completed") is True


# ============== Counting & Ranking ==============

def count_by(records: Any, key: Union[str, KeyFunc] = client_key) -> Dict[str, int]:
    """
    Occurrences per key value, in first-seen order.

    Missing key values are counted under "Unknown".
    """
    getter = _field_getter(key)
    counts: Dict[str, int] = {}
    for record in as_records(records):
        value = getter(record)
        if value is None or value == "":
            value = UNKNOWN_CLIENT
        label = str(value)
        counts[label] = counts.get(label, 0) + 1
    return counts


def top_n_by_count(counts: Dict[str, int], n: int = 3) -> List[Tuple[str, int]]:
    """Highest counts first; equal counts keep first-seen order."""
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:max(n, 0)]


def most_recent(records: Any, n: int = 5, field: str = "createdAt") -> List[Dict]:
    """
    Newest records first by a date field.

    Records whose date does not parse go after every dated record, in
    their original order.
    """
    def sort_key(record):
        parsed = parse_date(record.get(field))
        return (parsed is not None, parsed or datetime.min.replace(tzinfo=timezone.utc))

    ranked = sorted(as_records(records), key=sort_key, reverse=True)
    return ranked[:max(n, 0)]


def upcoming_deadlines(records: Any, n: int = 5, field: str = "promiseDate") -> List[Dict]:
    """
    Records with a promise date, soonest first, at most n (default 5).

    Records without a promise date are excluded; a date that is present
    but unparseable sorts after the parseable ones.
    """
    with_deadline = [
        record for record in as_records(records)
        if record.get(field) not in (None, "", NOT_AVAILABLE)
    ]

    def sort_key(record):
        parsed = parse_date(record.get(field))
        return (parsed is None, parsed or datetime.max.replace(tzinfo=timezone.utc))

    ranked = sorted(with_deadline, key=sort_key)
    return ranked[:min(max(n, 0), 5)]


# ============== Numeric Summaries ==============

def sum_field(records: Any, field: str = "totalCost") -> int:
    """Integer-parsed sum; null or non-numeric values count as 0."""
    return sum(parse_int(record.get(field)) for record in as_records(records))


def _numeric_values(records: Any, field: str) -> List[float]:
    values = []
    for record in as_records(records):
        number = parse_number(record.get(field))
        if number is not None:
            values.append(number)
    return values


def average_field(records: Any, field: str = "totalCost") -> Union[float, str]:
    """Mean over records where the field is numeric; "N/A" when none are."""
    values = _numeric_values(records, field)
    if not values:
        return NOT_AVAILABLE
    return round(sum(values) / len(values), 2)


def min_field(records: Any, field: str = "totalCost") -> Union[float, str]:
    values = _numeric_values(records, field)
    return min(values) if values else NOT_AVAILABLE


def max_field(records: Any, field: str = "totalCost") -> Union[float, str]:
    values = _numeric_values(records, field)
    return max(values) if values else NOT_AVAILABLE


def completion_days(record: Mapping) -> Optional[float]:
    """Days from createdAt to completedAt, or None when not measurable."""
    if not is_completed(record):
        return None
    created = parse_date(record.get("createdAt"))
    finished = parse_date(record.get("completedAt"))
    if created is None or finished is None:
        return None
    return (finished - created).total_seconds() / SECONDS_PER_DAY


def average_completion_time(records: Any) -> Union[float, str]:
    """
    Mean days to complete, over completed records with both dates.

    Returns the literal "N/A" (not 0) when no record qualifies.
    """
    durations = []
    for record in as_records(records):
        days = completion_days(record)
        if days is not None:
            durations.append(days)

    if not durations:
        return NOT_AVAILABLE
    return round(sum(durations) / len(durations), 2)


def summarize_field(records: Any, field: str = "totalCost") -> Dict[str, Any]:
    """Sum/average/min/max for one field in a single response."""
    records = as_records(records)
    return {
        "field": field,
        "count": len(records),
        "sum": sum_field(records, field),
        "average": average_field(records, field),
        "min": min_field(records, field),
        "max": max_field(records, field),
    }
