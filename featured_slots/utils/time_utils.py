# featured_slots/utils/time_utils.py
"""
Clock and timezone helpers for slot scheduling.

All scheduling happens on absolute UTC instants. The pool timezone is only
used to read wall-clock input from editors and to format display strings.
"""

import re
from datetime import datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from featured_slots.core.exceptions import SlotValidationError

_LOCAL_INPUT_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[T ](\d{2}):(\d{2})(?::(\d{2}))?$"
)
_OFFSET_SUFFIX_RE = re.compile(r"([zZ]|[+-]\d{2}:?\d{2})$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def local_to_utc(naive: datetime, zone: tzinfo) -> datetime:
    """
    Interpret a naive wall-clock time in `zone` and return the UTC instant.

    Ambiguous times (DST fall-back) resolve to the first occurrence.
    Non-existent times (DST spring-forward gap) raise SlotValidationError.
    """
    local = naive.replace(tzinfo=zone, fold=0)
    try:
        instant = local.astimezone(timezone.utc)
    except OverflowError as e:
        raise SlotValidationError(
            f"{naive.isoformat(timespec='minutes')} is out of range"
        ) from e
    round_trip = instant.astimezone(zone).replace(tzinfo=None)
    if round_trip != naive.replace(fold=0):
        raise SlotValidationError(
            f"{naive.isoformat(timespec='minutes')} does not exist in {zone}"
        )
    return instant


def parse_requested_start(
    raw: Union[str, datetime, None],
    zone: tzinfo,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Normalize a requested start into an aware UTC instant.

    - None or blank: `now` ("feature immediately")
    - datetime: aware values are converted, naive values are wall-clock in `zone`
    - ISO string ending in Z or an offset: absolute instant
    - "YYYY-MM-DDTHH:MM[:SS]": wall-clock time in `zone`
    """
    if raw is None:
        return ensure_utc(now or utc_now())

    if isinstance(raw, datetime):
        if raw.tzinfo is None:
            return local_to_utc(raw, zone)
        return ensure_utc(raw)

    trimmed = raw.strip()
    if not trimmed:
        return ensure_utc(now or utc_now())

    if _OFFSET_SUFFIX_RE.search(trimmed):
        candidate = trimmed[:-1] + "+00:00" if trimmed[-1] in "zZ" else trimmed
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            parsed = None
        if parsed is not None and parsed.tzinfo is not None:
            try:
                return ensure_utc(parsed)
            except OverflowError as e:
                raise SlotValidationError(f'Schedule time "{raw}" is out of range') from e

    match = _LOCAL_INPUT_RE.match(trimmed)
    if not match:
        raise SlotValidationError(
            f'Invalid schedule time "{raw}". Use YYYY-MM-DDTHH:MM ({zone}) or full ISO.'
        )

    year, month, day, hour, minute = (int(part) for part in match.groups()[:5])
    second = int(match.group(6) or 0)
    try:
        naive = datetime(year, month, day, hour, minute, second)
    except ValueError as e:
        raise SlotValidationError(f'Invalid schedule time "{raw}": {e}') from e

    return local_to_utc(naive, zone)


def to_local_input(value: datetime, zone: tzinfo) -> str:
    """Format an instant as a `datetime-local` form value (YYYY-MM-DDTHH:MM) in `zone`."""
    return ensure_utc(value).astimezone(zone).strftime("%Y-%m-%dT%H:%M")


def format_local(value: Optional[datetime], zone: tzinfo) -> Optional[str]:
    """Human display string in `zone`, e.g. 20/06/2026, 12:00."""
    if value is None:
        return None
    return ensure_utc(value).astimezone(zone).strftime("%d/%m/%Y, %H:%M")
