"""Human-readable formatting for addresses, amounts and timestamps."""

from __future__ import annotations

from datetime import UTC, datetime


def truncate_address(address: str | None, chars: int = 4) -> str:
    if not address:
        return ""
    return f"{address[:chars]}...{address[-chars:]}"


def format_sol(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,} SOL"
    return f"{amount:,} SOL"


def _coerce(value: datetime | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(value)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def format_date(value: datetime | str | None) -> str:
    dt = _coerce(value)
    if dt is None:
        return "N/A"
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


def format_time_ago(value: datetime | str | None, now: datetime | None = None) -> str:
    past = _coerce(value)
    if past is None:
        return "N/A"
    now = now or datetime.now(UTC)
    seconds = int((now - past).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    return format_date(past)
