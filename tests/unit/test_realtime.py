import asyncio

import pytest

from pumpwork.adapters.realtime import POSTGRES_CHANGES, ChangeFilter, RealtimeHub
from pumpwork.domain.entities import ChangeEvent


def _insert(table="messages", **row):
    return ChangeEvent(event="INSERT", table=table, new=row)


@pytest.fixture
def hub():
    return RealtimeHub()


def test_publish_to_matching_bindings(hub):
    seen = []
    hub.channel("all-messages").on(
        POSTGRES_CHANGES, ChangeFilter(event="INSERT", table="messages"), seen.append
    ).subscribe()
    hub.channel("jobs").on(
        POSTGRES_CHANGES, ChangeFilter(table="job_posts"), seen.append
    ).subscribe()

    assert hub.publish(_insert(content="gm")) == 1
    assert [c.new["content"] for c in seen] == ["gm"]


def test_event_filter(hub):
    seen = []
    hub.channel("updates").on(
        POSTGRES_CHANGES, ChangeFilter(event="UPDATE", table="profiles"), seen.append
    ).subscribe()
    hub.publish(_insert(table="profiles", id="p1"))
    hub.publish(ChangeEvent(event="UPDATE", table="profiles", new={"id": "p1"}))
    assert [c.event for c in seen] == ["UPDATE"]


def test_column_predicate(hub):
    seen = []
    hub.channel("conv").on(
        POSTGRES_CHANGES,
        ChangeFilter(table="messages", filter="conversation_id=eq.abc"),
        seen.append,
    ).subscribe()
    hub.publish(_insert(conversation_id="abc"))
    hub.publish(_insert(conversation_id="xyz"))
    hub.publish(ChangeEvent(event="DELETE", table="messages", old={"conversation_id": "abc"}))
    assert len(seen) == 2
    assert seen[1].event == "DELETE"


def test_bad_bindings_rejected(hub):
    channel = hub.channel("bad")
    with pytest.raises(ValueError):
        channel.on(POSTGRES_CHANGES, ChangeFilter(filter="id>5"), print)
    with pytest.raises(ValueError):
        channel.on("broadcast", ChangeFilter(), print)


def test_unjoined_channel_gets_nothing(hub):
    seen = []
    hub.channel("lazy").on(POSTGRES_CHANGES, ChangeFilter(), seen.append)
    assert hub.publish(_insert()) == 0
    assert seen == []


def test_remove_channel(hub):
    seen = []
    channel = hub.channel("c").on(POSTGRES_CHANGES, ChangeFilter(), seen.append).subscribe()
    assert channel.state == "joined"
    assert hub.get_channels() == [channel]

    hub.remove_channel(channel)
    assert channel.state == "closed"
    assert hub.publish(_insert()) == 0
    assert seen == []


def test_remove_all_channels(hub):
    a = hub.channel("a").on(POSTGRES_CHANGES, ChangeFilter(), print).subscribe()
    b = hub.channel("b").on(POSTGRES_CHANGES, ChangeFilter(), print).subscribe()
    hub.remove_all_channels()
    assert hub.get_channels() == []
    assert a.state == b.state == "closed"


def test_failing_callback_does_not_stop_others(hub):
    seen = []

    def boom(change):
        raise RuntimeError("boom")

    hub.channel("c").on(POSTGRES_CHANGES, ChangeFilter(), boom).on(
        POSTGRES_CHANGES, ChangeFilter(), seen.append
    ).subscribe()
    assert hub.publish(_insert()) == 2
    assert len(seen) == 1


def test_publish_from_worker_thread_lands_on_loop(hub):
    async def scenario():
        received: asyncio.Queue = asyncio.Queue()
        hub.channel("loop").on(
            POSTGRES_CHANGES, ChangeFilter(table="messages"), received.put_nowait
        ).subscribe()
        await asyncio.to_thread(hub.publish, _insert(content="from thread"))
        return await asyncio.wait_for(received.get(), timeout=1)

    change = asyncio.run(scenario())
    assert change.new["content"] == "from thread"


def test_async_callbacks_are_scheduled(hub):
    seen = []

    async def handler(change):
        seen.append(change.new["content"])

    async def scenario():
        hub.channel("async").on(POSTGRES_CHANGES, ChangeFilter(), handler).subscribe()
        hub.publish(_insert(content="gm"))
        for _ in range(3):
            await asyncio.sleep(0)

    asyncio.run(scenario())
    assert seen == ["gm"]
