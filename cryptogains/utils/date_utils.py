# cryptogains/utils/date_utils.py
from datetime import date, datetime
from typing import Iterable, Optional

import cryptogains.config as config
from cryptogains.domain.errors import InvalidDateError


def parse_transaction_date(date_str: Optional[str]) -> date:
    """
    Parses a transaction date written as YYYY/MM/DD or YYYY-MM-DD.
    Raises InvalidDateError for anything else, including time-of-day suffixes.
    """
    if date_str is None or not str(date_str).strip():
        raise InvalidDateError("Invalid date: empty value")

    s_date_str = str(date_str).strip()
    # Year, month and day must be zero-padded: 2020-01-05, never 2020-1-5.
    if len(s_date_str) != 10:
        raise InvalidDateError(f"Invalid date {date_str!r}: expected YYYY/MM/DD or YYYY-MM-DD")
    # The separator picks the format, so "2021/01-03" is rejected instead of guessed at.
    fmt = config.ACCEPTED_DATE_FORMATS[0] if "/" in s_date_str else config.ACCEPTED_DATE_FORMATS[1]
    try:
        return datetime.strptime(s_date_str, fmt).date()
    except ValueError as e:
        raise InvalidDateError(f"Invalid date {date_str!r}: expected YYYY/MM/DD or YYYY-MM-DD") from e


def holding_period_days(acquisition_date: date, disposal_date: date) -> int:
    return (disposal_date - acquisition_date).days


def is_long_term(acquisition_date: date, disposal_date: date) -> bool:
    return holding_period_days(acquisition_date, disposal_date) > config.LONG_TERM_THRESHOLD_DAYS


def format_acquisition_date_range(dates: Iterable[str]) -> str:
    """
    Human-readable acquisition dates for a report line:
    one date as is, two to four comma-joined, more than four as "earliest - latest".
    """
    ordered = sorted(set(dates))
    if not ordered:
        return ""
    if len(ordered) == 1:
        return ordered[0]
    if len(ordered) <= 4:
        return ",".join(ordered)
    return f"{ordered[0]} - {ordered[-1]}"
