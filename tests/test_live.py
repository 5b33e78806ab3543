"""Tests for live queries and combine-latest."""

from __future__ import annotations

from trackhabit.infra.live import ChangeNotifier, LiveQuery, Subscription, combine_latest


def test_live_query_emits_on_subscribe_and_on_notify():
    notifier = ChangeNotifier()
    source = {"value": 1}
    query = LiveQuery(lambda: source["value"], notifier)
    received = []

    subscription = query.subscribe(received.append)
    source["value"] = 2
    notifier.notify()

    assert received == [1, 2]
    assert query.get() == 2

    subscription.close()
    notifier.notify()
    assert received == [1, 2]
    assert notifier.listener_count == 0


def test_subscription_close_is_idempotent():
    calls = []
    subscription = Subscription(lambda: calls.append("closed"))
    with subscription:
        pass
    subscription.close()
    assert calls == ["closed"]
    assert subscription.closed


def test_map_transforms_each_emission():
    notifier = ChangeNotifier()
    items = [1, 2]
    query = LiveQuery(lambda: list(items), notifier).map(len)
    received = []

    query.subscribe(received.append)
    items.append(3)
    notifier.notify()

    assert received == [2, 3]
    assert query.get() == 3


def test_combine_latest_recomputes_when_either_side_emits():
    left_notifier, right_notifier = ChangeNotifier(), ChangeNotifier()
    state = {"left": "a", "right": 1}
    left = LiveQuery(lambda: state["left"], left_notifier)
    right = LiveQuery(lambda: state["right"], right_notifier)
    received = []

    subscription = combine_latest(left, right, lambda l, r: f"{l}{r}").subscribe(received.append)
    assert received == ["a1"]

    state["right"] = 2
    right_notifier.notify()
    state["left"] = "b"
    left_notifier.notify()

    assert received == ["a1", "a2", "b2"]

    subscription.close()
    assert left_notifier.listener_count == 0
    assert right_notifier.listener_count == 0


def test_combine_latest_get_reads_both_sources():
    notifier = ChangeNotifier()
    combined = combine_latest(
        LiveQuery(lambda: 2, notifier),
        LiveQuery(lambda: 3, notifier),
        lambda a, b: a * b,
    )
    assert combined.get() == 6
