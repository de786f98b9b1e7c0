from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def is_past_or_now(self, utc_dt: datetime) -> bool:
        return utc_dt <= self.now_utc()

    def is_future(self, utc_dt: datetime, grace_seconds: int = 0) -> bool:
        return utc_dt > (self.now_utc() - timedelta(seconds=grace_seconds))


class FrozenClock:
    """Clock pinned to a given instant; advance it explicitly."""

    def __init__(self, start: datetime) -> None:
        self._now = start

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> None:
        self._now = self._now + timedelta(**delta)

    def is_past_or_now(self, utc_dt: datetime) -> bool:
        return utc_dt <= self._now

    def is_future(self, utc_dt: datetime, grace_seconds: int = 0) -> bool:
        return utc_dt > (self._now - timedelta(seconds=grace_seconds))
