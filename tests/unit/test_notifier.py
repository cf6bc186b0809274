"""Unit tests for the job snapshot Notifier."""

from booktrans.core.events import Notifier
from booktrans.core.models import Job, WorkUnit


def _snapshot(completed=0):
    job = Job(owner_id="book1", title="Book", pending_units=[WorkUnit(text="A.")],
              batch_size=1, total_units=1)
    job.set_completed(completed)
    return job


class TestNotifier:

    def test_subscribe_replays_none_when_idle(self):
        notifier = Notifier()
        received = []

        notifier.subscribe(received.append)

        assert received == [None]

    def test_subscribe_replays_current_snapshot(self):
        notifier = Notifier()
        snapshot = _snapshot()
        notifier.publish(snapshot)
        received = []

        notifier.subscribe(received.append)

        assert received == [snapshot]

    def test_publish_reaches_every_listener(self):
        notifier = Notifier()
        first, second = [], []
        notifier.subscribe(first.append)
        notifier.subscribe(second.append)

        snapshot = _snapshot()
        notifier.publish(snapshot)
        notifier.publish(None)

        assert first == [None, snapshot, None]
        assert second == [None, snapshot, None]

    def test_unsubscribe(self):
        notifier = Notifier()
        received = []
        unsubscribe = notifier.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        notifier.publish(_snapshot())

        assert received == [None]

    def test_listener_exception_does_not_stop_others(self):
        notifier = Notifier()
        received = []

        def broken(snapshot):
            raise RuntimeError("listener bug")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)
        notifier.publish(_snapshot(1))

        assert len(received) == 2
        assert received[1].completed_units == 1

    def test_listener_may_unsubscribe_during_publish(self):
        notifier = Notifier()
        received = []
        handles = {}

        def once(snapshot):
            received.append(snapshot)
            if snapshot is not None:
                handles['once']()

        handles['once'] = notifier.subscribe(once)
        notifier.publish(_snapshot())
        notifier.publish(_snapshot())

        assert len(received) == 2

    def test_history(self):
        notifier = Notifier()
        notifier.publish(_snapshot())
        assert notifier.get_history() == []

        notifier.enable_history()
        notifier.publish(_snapshot(1))
        notifier.publish(None)
        history = notifier.get_history()
        assert len(history) == 2
        assert history[1] is None

        notifier.disable_history()
        notifier.publish(_snapshot())
        assert len(notifier.get_history()) == 2

        notifier.clear_history()
        assert notifier.get_history() == []
