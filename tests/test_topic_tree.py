from collections import defaultdict

import pytest

from wsforge.topic_tree import IteratorFlags, TopicTree, TopicTreeError


def make_tree():
    results = defaultdict(str)

    def callback(subscriber, message, flags):
        results[subscriber] += message
        return False

    return TopicTree(callback), results


def test_correctness():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    s2 = tree.create_subscriber()

    tree.publish(None, "topic3", "Nobody should see")
    tree.subscribe(s1, "topic3")
    tree.publish(s1, "topic3", "Nobody should see")
    tree.subscribe(s2, "topic3")
    tree.publish(None, "topic3", "Both should see")
    tree.publish(s2, "topic3", "s1 should see, not s2")
    tree.publish(s1, "topic3", "s2 should see, not s1")
    tree.publish(None, "topic3", "Again, both should see this as well")

    tree.drain()
    assert results[s1] == "Both should sees1 should see, not s2Again, both should see this as well"
    assert results[s2] == "Both should sees2 should see, not s1Again, both should see this as well"

    tree.free_subscriber(s1)
    tree.free_subscriber(s2)
    assert tree.lookup_topic("topic3") is None


def test_bug_report():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    s2 = tree.create_subscriber()
    tree.subscribe(s1, "b1")
    tree.subscribe(s2, "b2")

    tree.publish(s1, "b1", "b1")
    tree.publish(s1, "b2", "b2")
    tree.publish(s2, "b1", "b1")
    tree.publish(s2, "b2", "b2")

    tree.drain()
    assert results[s1] == "b1"
    assert results[s2] == "b2"


def test_reordering_v19():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    for i in range(100):
        tree.subscribe(s1, str(i))
    expected = ""
    for i in range(100):
        tree.publish(None, str(i), f"{i},")
        expected += f"{i},"
    tree.drain()
    assert results[s1] == expected


def test_publish_without_topic_returns_false():
    tree, _ = make_tree()
    assert tree.publish(None, "missing", "x") is False


def test_publish_only_sender_is_unreferenced():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    assert tree.publish(s1, "t", "x") is False
    tree.drain()
    assert results[s1] == ""


def test_subscribe_twice_returns_none():
    tree, _ = make_tree()
    s1 = tree.create_subscriber()
    first = tree.subscribe(s1, "t")
    assert first is tree.lookup_topic("t")
    assert tree.subscribe(s1, "t") is None
    assert len(first) == 1


def test_unsubscribe_results():
    tree, _ = make_tree()
    s1 = tree.create_subscriber()
    s2 = tree.create_subscriber()
    tree.subscribe(s1, "a")
    tree.subscribe(s2, "a")
    tree.subscribe(s2, "b")

    assert tree.unsubscribe(s1, "a") == (True, True, 1)
    assert tree.unsubscribe(s1, "a") == (False, False, -1)
    assert tree.unsubscribe(s1, "missing") == (False, False, -1)
    assert tree.unsubscribe(s2, "a") == (True, False, 0)
    assert tree.lookup_topic("a") is None
    assert tree.unsubscribe(s2, "b") == (True, True, 0)


def test_iterating_subscriber_cannot_modify_topics():
    tree, _ = make_tree()
    s1 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    tree.iterating_subscriber = s1
    with pytest.raises(TopicTreeError):
        tree.subscribe(s1, "other")
    with pytest.raises(TopicTreeError):
        tree.unsubscribe(s1, "t")


def test_flags_mark_first_and_last():
    seen = []
    tree = TopicTree(lambda s, m, f: seen.append((m, f)))
    s1 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    for message in ("a", "b", "c"):
        tree.publish(None, "t", message)
    tree.drain()
    assert seen == [
        ("a", IteratorFlags.FIRST),
        ("b", IteratorFlags.NONE),
        ("c", IteratorFlags.LAST),
    ]


def test_single_message_is_first_and_last():
    seen = []
    tree = TopicTree(lambda s, m, f: seen.append(f))
    s1 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    tree.publish(None, "t", "only")
    tree.drain(s1)
    assert seen == [IteratorFlags.FIRST | IteratorFlags.LAST]
    assert not s1.needs_drainage


def test_callback_returning_true_stops_batch():
    seen = []

    def callback(subscriber, message, flags):
        seen.append(message)
        return True

    tree = TopicTree(callback)
    s1 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    tree.publish(None, "t", "a")
    tree.publish(None, "t", "b")
    tree.drain()
    assert seen == ["a"]
    assert not s1.needs_drainage


def test_subscriber_drained_after_32_messages():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    for i in range(32):
        tree.publish(None, "t", f"{i},")
    assert results[s1] == ""
    tree.publish(None, "t", "last")
    assert results[s1] == "".join(f"{i}," for i in range(32))
    tree.drain()
    assert results[s1].endswith("last")


def test_drain_single_subscriber_leaves_others_pending():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    s2 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    tree.subscribe(s2, "t")
    tree.publish(None, "t", "m")
    tree.drain(s1)
    assert results[s1] == "m"
    assert results[s2] == ""
    assert s2.needs_drainage
    tree.drain()
    assert results[s2] == "m"


def test_free_subscriber_drops_pending_messages():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    s2 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    tree.subscribe(s2, "t")
    tree.subscribe(s1, "solo")
    tree.publish(None, "t", "m")
    tree.free_subscriber(s1)
    tree.free_subscriber(None)
    tree.drain()
    assert results[s1] == ""
    assert results[s2] == "m"
    assert tree.lookup_topic("solo") is None
    assert len(tree.lookup_topic("t")) == 1


def test_publish_big_bypasses_buffering():
    tree, results = make_tree()
    s1 = tree.create_subscriber()
    s2 = tree.create_subscriber()
    tree.subscribe(s1, "t")
    tree.subscribe(s2, "t")
    delivered = []
    assert tree.publish_big(s1, "t", "big", lambda s, m: delivered.append((s, m))) is True
    assert delivered == [(s2, "big")]
    assert tree.publish_big(None, "missing", "big", lambda s, m: delivered.append(m)) is False
    assert not s2.needs_drainage