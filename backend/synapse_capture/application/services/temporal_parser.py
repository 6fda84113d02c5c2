"""Temporal expression parser: finds date references in search prompts.

Recognised forms, evaluated top-down against the lower-cased prompt (first
match wins):
  1. Ordinal day + month name,    "8th november", "november 8th",
     or month name + day           "november 8" (suffix optional)
  2. Numeric date                 "2024-11-08", "11/08/2024"
  3. Bare day + month name        "8 november"
  4. Relative keywords            today, yesterday, last week, last month,
                                  this month, this week
  5. Weekday expressions          next|last|this + weekday name

The resulting TimeIntent is a soft signal: ``get_time_boost`` turns it into a
multiplicative weight, it never filters results out.
"""

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from synapse_capture.domain.entities import ContentItem, TimeIntent, TimeIntentKind

logger = logging.getLogger(__name__)

_MONTHS = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]
_MONTH_ALT = "|".join(_MONTHS)

# Weeks start on Sunday
_WEEKDAYS = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
_WEEKDAY_ALT = "|".join(_WEEKDAYS)

_ORDINAL_MONTH_PATTERN = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)\s+(?:of\s+)?({_MONTH_ALT})\b"
    rf"|\b({_MONTH_ALT})\s+(\d{{1,2}})(?:st|nd|rd|th)?\b"
)
_NUMERIC_DATE_PATTERN = re.compile(
    r"\b\d{4}[-/]\d{1,2}[-/]\d{1,2}\b|\b\d{1,2}[-/]\d{1,2}[-/]\d{4}\b"
)
_DAY_MONTH_PATTERN = re.compile(rf"\b(\d{{1,2}})\s+({_MONTH_ALT})\b")
_WEEKDAY_PATTERN = re.compile(rf"\b(next|last|this)\s+({_WEEKDAY_ALT})\b")
# Plain substrings: "databases" counts as containing "at"
_CONTEXT_WORDS = ("saved", "created", "added", "from", "on", "at", "in")

# Boost weights
_EXACT_MATCH_BOOST = 2.5
_EXACT_MISS_BOOST = 0.3
_RANGE_MATCH_BOOST = 2.0
_RANGE_MISS_BOOST = 0.4
_CONTEXT_MULTIPLIER = 1.5


def parse_time_intent(query: str, now: datetime | None = None) -> TimeIntent | None:
    """Parse a free-text query for a date reference.

    Args:
        query: The raw search prompt.
        now: Reference moment; defaults to the current local time.

    Returns:
        A TimeIntent, or None when the query has no temporal component.
    """
    if not query or not query.strip():
        return None

    now = _as_aware(now) if now is not None else datetime.now().astimezone()
    lower = query.lower()
    has_context = any(word in lower for word in _CONTEXT_WORDS)

    def exact(date: datetime) -> TimeIntent:
        return TimeIntent(
            kind=TimeIntentKind.EXACT, date=date, has_explicit_date_context=has_context
        )

    # 1. "8th november" / "november 8th"
    match = _ORDINAL_MONTH_PATTERN.search(lower)
    if match:
        if match.group(1):
            day, month_name = match.group(1), match.group(2)
        else:
            month_name, day = match.group(3), match.group(4)
        date = _calendar_date(now, month_name, int(day))
        if date is not None:
            return exact(date)

    # 2. Numeric dates: matched against the raw text
    match = _NUMERIC_DATE_PATTERN.search(query)
    if match:
        try:
            parsed = date_parser.parse(match.group(0))
            return exact(parsed.replace(tzinfo=now.tzinfo))
        except (ValueError, OverflowError):
            logger.debug("Ignoring unparseable date %r", match.group(0))

    # 3. "8 november"
    match = _DAY_MONTH_PATTERN.search(lower)
    if match:
        date = _calendar_date(now, match.group(2), int(match.group(1)))
        if date is not None:
            return exact(date)

    # 4. Relative keywords
    for keyword, resolve in _relative_keywords(now):
        if re.search(rf"\b{keyword}\b", lower):
            value = resolve()
            if isinstance(value, tuple):
                start, end = value
                return TimeIntent(
                    kind=TimeIntentKind.RANGE,
                    start=start,
                    end=end,
                    has_explicit_date_context=has_context,
                )
            return exact(value)

    # 5. "next friday", "last monday", "this sunday"
    match = _WEEKDAY_PATTERN.search(lower)
    if match:
        offset = _weekday_offset(now, match.group(1), match.group(2))
        return exact(now + timedelta(days=offset))

    return None


def get_time_boost(item: ContentItem, intent: TimeIntent | None) -> float:
    """Multiplicative relevance weight for how well ``item`` fits ``intent``."""
    if intent is None or item.created_at is None:
        return 1.0

    created = _as_aware(item.created_at)
    context = _CONTEXT_MULTIPLIER if intent.has_explicit_date_context else 1.0

    if intent.kind is TimeIntentKind.EXACT and intent.date is not None:
        if _same_day(created, intent.date):
            return _EXACT_MATCH_BOOST * context
        return _EXACT_MISS_BOOST

    if intent.start is not None and intent.end is not None:
        if intent.start <= created <= intent.end:
            return _RANGE_MATCH_BOOST * context
        return _RANGE_MISS_BOOST

    return 1.0


# ── Private helpers ──────────────────────────────────────────────────


def _relative_keywords(
    now: datetime,
) -> list[tuple[str, Callable[[], datetime | tuple[datetime, datetime]]]]:
    """Keyword → resolver, in matching order."""
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    days_since_sunday = (now.weekday() + 1) % 7
    return [
        ("today", lambda: now),
        ("yesterday", lambda: now - timedelta(days=1)),
        ("last week", lambda: now - timedelta(days=7)),
        ("last month", lambda: now - relativedelta(months=1)),
        ("this month", lambda: (start_of_day.replace(day=1), now)),
        ("this week", lambda: (start_of_day - timedelta(days=days_since_sunday), now)),
    ]


def _weekday_offset(now: datetime, modifier: str, weekday_name: str) -> int:
    """Signed day offset from ``now`` to the named weekday.

    next: 7–13 days ahead; last: 1–7 days back; this: inside the current
    Sunday-to-Saturday week.
    """
    current = (now.weekday() + 1) % 7
    target = _WEEKDAYS.index(weekday_name)
    if modifier == "next":
        return (target - current) % 7 + 7
    if modifier == "last":
        return (target - current) % 7 - 7
    return target - current


def _calendar_date(now: datetime, month_name: str, day: int) -> datetime | None:
    """Midnight of ``day month_name`` in the current year, or None if invalid."""
    try:
        return datetime(now.year, _MONTHS.index(month_name) + 1, day, tzinfo=now.tzinfo)
    except ValueError:
        return None


def _same_day(moment: datetime, reference: datetime) -> bool:
    reference = _as_aware(reference)
    return moment.astimezone(reference.tzinfo).date() == reference.date()


def _as_aware(moment: datetime) -> datetime:
    """Naive datetimes (e.g. read back from SQLite) are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
