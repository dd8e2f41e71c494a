"""Topic based publish/subscribe with batched, per-subscriber delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any, Callable, Generic, Iterator, TypeVar

T = TypeVar("T")
B = TypeVar("B")

MAX_OUTGOING_MESSAGES = 0xFFFF
MAX_MESSAGES_PER_SUBSCRIBER = 32


class IteratorFlags(IntFlag):
    """Position of a message within one subscriber's drained batch."""

    NONE = 0
    LAST = 1
    FIRST = 2


class TopicTreeError(RuntimeError):
    """Raised when a subscriber changes its topics while they are iterated."""


class Topic:
    """A named topic holding its subscribers in subscription order."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: dict[Subscriber, None] = {}

    def add(self, subscriber: Subscriber) -> None:
        self._subscribers[subscriber] = None

    def discard(self, subscriber: Subscriber) -> None:
        self._subscribers.pop(subscriber, None)

    def __contains__(self, subscriber: object) -> bool:
        return subscriber in self._subscribers

    def __iter__(self) -> Iterator[Subscriber]:
        return iter(list(self._subscribers))

    def __len__(self) -> int:
        return len(self._subscribers)

    def __repr__(self) -> str:
        return f"Topic({self.name!r}, subscribers={len(self)})"


@dataclass(eq=False)
class Subscriber:
    """A party subscribed to any number of topics."""

    topics: set[Topic] = field(default_factory=set)
    user: Any = None
    _message_indices: list[int] = field(default_factory=list, repr=False)

    @property
    def needs_drainage(self) -> bool:
        """True while published messages are waiting for this subscriber."""
        return bool(self._message_indices)


DrainCallback = Callable[[Subscriber, T, IteratorFlags], Any]


class TopicTree(Generic[T]):
    """Routes published messages to subscribers and delivers them on drain.

    The callback receives (subscriber, message, flags); returning a true value
    stops delivery of the rest of that subscriber's batch. The callback must
    not publish, subscribe or unsubscribe.
    """

    def __init__(self, callback: DrainCallback) -> None:
        self._callback = callback
        self._topics: dict[str, Topic] = {}
        # Most recently added subscriber is the head of the drain order.
        self._drainable: dict[Subscriber, None] = {}
        self._outgoing: list[T] = []
        self.iterating_subscriber: Subscriber | None = None

    def _check_iterating_subscriber(self, subscriber: Subscriber) -> None:
        if self.iterating_subscriber is subscriber:
            raise TopicTreeError(
                "a subscriber must not subscribe or unsubscribe while iterating its topics"
            )

    def _drain_impl(self, subscriber: Subscriber) -> None:
        indices = subscriber._message_indices
        subscriber._message_indices = []
        count = len(indices)
        for position, index in enumerate(indices):
            flags = IteratorFlags.NONE
            if position == count - 1:
                flags |= IteratorFlags.LAST
            if position == 0:
                flags |= IteratorFlags.FIRST
            if self._callback(subscriber, self._outgoing[index], flags):
                break

    def lookup_topic(self, topic: str) -> Topic | None:
        """Return the topic by name, or None if nobody subscribes to it."""
        return self._topics.get(topic)

    def subscribe(self, subscriber: Subscriber, topic: str) -> Topic | None:
        """Subscribe to a topic; returns None if already subscribed."""
        self._check_iterating_subscriber(subscriber)
        topic_obj = self._topics.get(topic)
        if topic_obj is None:
            topic_obj = Topic(topic)
            self._topics[topic] = topic_obj
        if topic_obj in subscriber.topics:
            return None
        subscriber.topics.add(topic_obj)
        topic_obj.add(subscriber)
        return topic_obj

    def unsubscribe(self, subscriber: Subscriber, topic: str) -> tuple[bool, bool, int]:
        """Unsubscribe from a topic.

        Returns (ok, holds_no_topics, remaining_subscriber_count); a failed
        unsubscribe gives (False, False, -1).
        """
        self._check_iterating_subscriber(subscriber)
        topic_obj = self._topics.get(topic)
        if topic_obj is None or topic_obj not in subscriber.topics:
            return False, False, -1
        subscriber.topics.discard(topic_obj)
        topic_obj.discard(subscriber)
        remaining = len(topic_obj)
        if not remaining:
            del self._topics[topic]
        return True, not subscriber.topics, remaining

    def create_subscriber(self) -> Subscriber:
        """Create a new subscriber bound to no topics."""
        return Subscriber()

    def free_subscriber(self, subscriber: Subscriber | None) -> None:
        """Remove a subscriber from all its topics and pending deliveries."""
        if subscriber is None:
            return
        for topic_obj in subscriber.topics:
            if len(topic_obj) == 1:
                self._topics.pop(topic_obj.name, None)
            else:
                topic_obj.discard(subscriber)
        subscriber.topics.clear()
        if subscriber.needs_drainage:
            self._drainable.pop(subscriber, None)
            subscriber._message_indices = []

    def drain(self, subscriber: Subscriber | None = None) -> None:
        """Deliver pending messages to one subscriber, or to all of them."""
        if subscriber is not None:
            if subscriber.needs_drainage:
                self._drainable.pop(subscriber, None)
                self._drain_impl(subscriber)
                if not self._drainable:
                    self._outgoing.clear()
            return
        if self._drainable:
            for pending in reversed(list(self._drainable)):
                self._drain_impl(pending)
            self._drainable.clear()
            self._outgoing.clear()

    def publish_big(
        self,
        sender: Subscriber | None,
        topic: str,
        message: B,
        callback: Callable[[Subscriber, B], Any],
    ) -> bool:
        """Hand a message straight to every subscriber except the sender."""
        topic_obj = self._topics.get(topic)
        if topic_obj is None:
            return False
        for subscriber in topic_obj:
            if subscriber is not sender:
                callback(subscriber, message)
        return True

    def publish(self, sender: Subscriber | None, topic: str, message: T) -> bool:
        """Queue a message for every subscriber of the topic except the sender.

        Returns True if at least one subscriber will receive it.
        """
        topic_obj = self._topics.get(topic)
        if topic_obj is None:
            return False
        if len(self._outgoing) == MAX_OUTGOING_MESSAGES:
            self.drain()

        referenced = False
        for subscriber in topic_obj:
            if subscriber is sender:
                continue
            referenced = True
            if len(subscriber._message_indices) == MAX_MESSAGES_PER_SUBSCRIBER:
                self.drain(subscriber)
            subscriber._message_indices.append(len(self._outgoing))
            if len(subscriber._message_indices) == 1:
                self._drainable[subscriber] = None

        if referenced:
            self._outgoing.append(message)
        return referenced