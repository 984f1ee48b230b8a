import pytest

from src.ruang_belajar_backend.common.exceptions import UnknownEntityKindError
from src.ruang_belajar_backend.database.db_enums import EntityKind
from src.ruang_belajar_backend.services.change_feed import ChangeFeed


class TestChangeFeed:

    def test_publish_reaches_every_listener(self, change_feed: ChangeFeed):
        seen_a, seen_b = [], []
        change_feed.subscribe(seen_a.append)
        change_feed.subscribe(seen_b.append)

        change_feed.publish(EntityKind.PAYMENTS)
        change_feed.publish("students")

        assert seen_a == [EntityKind.PAYMENTS, EntityKind.STUDENTS]
        assert seen_b == seen_a

    def test_unsubscribe(self, change_feed: ChangeFeed):
        seen = []
        unsubscribe = change_feed.subscribe(seen.append)
        unsubscribe()
        unsubscribe()

        change_feed.publish(EntityKind.CLASSES)
        assert seen == []
        assert change_feed.listener_count == 0

    def test_unknown_kind_is_rejected(self, change_feed: ChangeFeed):
        with pytest.raises(UnknownEntityKindError):
            change_feed.publish("invoices")

    def test_failing_listener_does_not_block_others(self, change_feed: ChangeFeed):
        def broken(kind):
            raise RuntimeError("boom")

        seen = []
        change_feed.subscribe(broken)
        change_feed.subscribe(seen.append)

        change_feed.publish(EntityKind.EXPENSES)
        assert seen == [EntityKind.EXPENSES]


@pytest.mark.anyio
class TestChangeStream:

    async def test_stream_receives_published_kinds(self, change_feed: ChangeFeed):
        async with change_feed.stream() as queue:
            change_feed.publish(EntityKind.CLASSES)
            change_feed.publish(EntityKind.STUDENTS)
            assert await queue.get() == EntityKind.CLASSES
            assert await queue.get() == EntityKind.STUDENTS
        assert change_feed.listener_count == 0

    async def test_full_stream_drops_oldest(self, change_feed: ChangeFeed):
        async with change_feed.stream(max_pending=2) as queue:
            change_feed.publish(EntityKind.CLASSES)
            change_feed.publish(EntityKind.STUDENTS)
            change_feed.publish(EntityKind.PAYMENTS)
            assert queue.qsize() == 2
            assert queue.get_nowait() == EntityKind.STUDENTS
            assert queue.get_nowait() == EntityKind.PAYMENTS
