import datetime
import time as _time
from typing import Any, Callable, Dict, List, Optional, Sequence

from .models import DisplayRow, SortKey, TargetRecord, UpDown, ViewState

DAY_S = 24 * 60 * 60
ABSOLUTE_FORMAT = "%Y-%m-%d %H:%M"


def _matches(record: TargetRecord, needle: str) -> bool:
    if needle in record.name.lower() or needle in record.state.lower():
        return True
    message = record.transition.message
    return isinstance(message, str) and needle in message.lower()


def filter_records(records: Sequence[TargetRecord], filter_text: str) -> List[TargetRecord]:
    """Keep records matching every whitespace-separated needle (substring, case-insensitive)."""
    needles = [n.lower() for n in filter_text.split()]
    if not needles:
        return list(records)
    return [r for r in records if all(_matches(r, n) for n in needles)]


_SORT_FIELDS: Dict[SortKey, Callable[[TargetRecord], Any]] = {
    SortKey.STATE: lambda r: r.state,
    SortKey.NAME: lambda r: r.name,
    SortKey.TRANSITION: lambda r: r.transition.label,
    SortKey.TIME: lambda r: r.time,
    SortKey.MESSAGE: lambda r: r.transition.message or "",
}


def sort_records(records: Sequence[TargetRecord], sort_key: SortKey | str, ascending: bool = True) -> List[TargetRecord]:
    key = _SORT_FIELDS[SortKey(sort_key)]
    out = sorted(records, key=key)
    if not ascending:
        out.reverse()
    return out


def up_or_down(record: TargetRecord) -> UpDown:
    # literal and case-sensitive, unlike the configurable health keywords
    return UpDown.DOWN if "Offline" in record.state else UpDown.UP


def _round(x: float) -> int:
    return int(x + 0.5)


def time_ago(delta_s: float) -> str:
    """Relative phrase for a delta in seconds (positive = in the past)."""
    seconds = abs(delta_s)
    minutes = _round(seconds / 60)
    hours = _round(seconds / 3600)
    days = _round(seconds / DAY_S)

    if _round(seconds) < 45:
        phrase = "a few seconds"
    elif minutes <= 1:
        phrase = "a minute"
    elif minutes < 45:
        phrase = f"{minutes} minutes"
    elif hours <= 1:
        phrase = "an hour"
    elif hours < 22:
        phrase = f"{hours} hours"
    elif days <= 1:
        phrase = "a day"
    else:
        phrase = f"{days} days"

    return f"{phrase} ago" if delta_s >= 0 else f"in {phrase}"


def format_time(ts: int, now: Optional[float] = None, tz: Optional[datetime.tzinfo] = None) -> str:
    now = _time.time() if now is None else now
    if now - ts >= DAY_S:
        try:
            dt = datetime.datetime.fromtimestamp(ts, tz)
        except (OverflowError, OSError, ValueError):
            # outside the platform's datetime range
            return str(ts)
        return dt.strftime(ABSOLUTE_FORMAT)
    return time_ago(now - ts)


def build(records: Sequence[TargetRecord], filter_text: str, sort_key: SortKey | str, ascending: bool,
          now: Optional[float] = None, tz: Optional[datetime.tzinfo] = None) -> List[DisplayRow]:
    now = _time.time() if now is None else now
    kept = filter_records(records, filter_text)
    return [
        DisplayRow(record=r, up_or_down=up_or_down(r), formatted_time=format_time(r.time, now, tz))
        for r in sort_records(kept, sort_key, ascending)
    ]


def build_view(records: Sequence[TargetRecord], state: ViewState,
               now: Optional[float] = None, tz: Optional[datetime.tzinfo] = None) -> List[DisplayRow]:
    return build(records, state.filter_text, state.sort_key, state.ascending, now, tz)
