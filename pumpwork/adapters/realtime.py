"""
In-process realtime hub.

Delivers committed row changes to subscribed channels. A channel registers
one or more ``postgres_changes`` bindings, each with an event/schema/table
filter and an optional ``column=eq.value`` predicate, then joins the hub
with ``subscribe()``.

Repositories publish after commit, possibly from a worker thread; channels
opened inside an event loop get their callbacks marshalled back onto that
loop.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from pumpwork.domain.entities import ChangeEvent

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], Any]
ChannelState = Literal["closed", "joined"]

POSTGRES_CHANGES = "postgres_changes"


@dataclass(frozen=True)
class ChangeFilter:
    event: str = "*"
    schema: str = "public"
    table: str | None = None
    filter: str | None = None

    def _predicate(self) -> tuple[str, str] | None:
        if not self.filter:
            return None
        column, sep, rest = self.filter.partition("=")
        if not sep or not rest.startswith("eq."):
            raise ValueError(f"Unsupported realtime filter: {self.filter!r}")
        return column, rest[3:]

    def matches(self, change: ChangeEvent) -> bool:
        if self.event != "*" and self.event != change.event:
            return False
        if self.schema not in ("*", change.schema_name):
            return False
        if self.table is not None and self.table != change.table:
            return False

        predicate = self._predicate()
        if predicate is None:
            return True
        column, expected = predicate
        row = change.new if change.event != "DELETE" else change.old
        value = row.get(column)
        return value is not None and str(value) == expected


@dataclass
class _Binding:
    change_filter: ChangeFilter
    callback: ChangeCallback


class RealtimeChannel:
    def __init__(self, hub: RealtimeHub, name: str) -> None:
        self._hub = hub
        self.name = name
        self.state: ChannelState = "closed"
        self._bindings: list[_Binding] = []
        self._loop: asyncio.AbstractEventLoop | None = None

    def on(
        self, kind: str, change_filter: ChangeFilter, callback: ChangeCallback
    ) -> RealtimeChannel:
        if kind != POSTGRES_CHANGES:
            raise ValueError(f"Unsupported binding type: {kind}")
        # Validate the predicate eagerly
        change_filter._predicate()
        self._bindings.append(_Binding(change_filter, callback))
        return self

    def subscribe(self) -> RealtimeChannel:
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self._hub._join(self)
        self.state = "joined"
        return self

    def unsubscribe(self) -> None:
        self._hub.remove_channel(self)

    def _deliver(self, change: ChangeEvent) -> int:
        matched = [b for b in self._bindings if b.change_filter.matches(change)]
        if not matched:
            return 0

        loop = self._loop
        if loop is not None and not loop.is_closed() and not _in_loop(loop):
            loop.call_soon_threadsafe(self._dispatch, matched, change)
        else:
            self._dispatch(matched, change)
        return len(matched)

    def _dispatch(self, bindings: list[_Binding], change: ChangeEvent) -> None:
        if self.state != "joined":
            return
        for binding in bindings:
            try:
                result = binding.callback(change)
            except Exception:
                logger.exception("Realtime callback failed on channel %s", self.name)
                continue
            if inspect.isawaitable(result):
                self._schedule(result)

    def _schedule(self, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Dropping async realtime callback on %s: no running loop", self.name)
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        task = loop.create_task(awaitable)
        task.add_done_callback(self._log_task_error)

    def _log_task_error(self, task: asyncio.Task[Any]) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Async realtime callback failed on channel %s: %s", self.name, task.exception()
            )


def _in_loop(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class RealtimeHub:
    """Fan-out of row changes to joined channels."""

    def __init__(self) -> None:
        self._channels: list[RealtimeChannel] = []
        self._lock = threading.Lock()

    def channel(self, name: str) -> RealtimeChannel:
        return RealtimeChannel(self, name)

    def _join(self, channel: RealtimeChannel) -> None:
        with self._lock:
            if channel not in self._channels:
                self._channels.append(channel)

    def remove_channel(self, channel: RealtimeChannel) -> None:
        with self._lock:
            if channel in self._channels:
                self._channels.remove(channel)
        channel.state = "closed"

    def remove_all_channels(self) -> None:
        with self._lock:
            channels, self._channels = self._channels, []
        for channel in channels:
            channel.state = "closed"

    def get_channels(self) -> list[RealtimeChannel]:
        with self._lock:
            return list(self._channels)

    def publish(self, change: ChangeEvent) -> int:
        """Deliver a change to every matching binding. Returns match count."""
        delivered = 0
        for channel in self.get_channels():
            delivered += channel._deliver(change)
        logger.debug(
            "Published %s on %s to %d binding(s)", change.event, change.table, delivered
        )
        return delivered
