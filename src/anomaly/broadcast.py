"""
In-process publish/subscribe for engine outputs.

Each subscription owns a bounded buffer and a dedicated worker thread that
feeds its handler, so a slow or failing subscriber never stalls the
publisher or any other subscriber.

Delivery policy:
- Items reach a given subscriber in publish order.
- When a subscriber's buffer is full, its oldest undelivered item is dropped.
- Handler exceptions are logged and delivery continues with the next item.
- unsubscribe() is immediate, idempotent and terminal. Items still buffered
  for that subscriber are discarded; a handler call already running completes.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from src.core.exceptions import SubscriptionError

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]

_subscription_ids = itertools.count(1)

# Overflow is reported at WARNING on the first drop and every Nth drop after it.
DROP_LOG_INTERVAL = 100


class Topic(str, Enum):
    """The three output streams of the engine."""

    EVENTS = "events"
    ANOMALIES = "anomalies"
    METRICS = "metrics"


class Subscription:
    """
    One consumer's registration on a topic.

    Usable as a context manager; leaving the block unsubscribes.

    Attributes:
        topic: Stream this subscription receives
        delivered: Items handed to the handler (including ones it raised on)
        dropped: Items discarded because the buffer overflowed
        failures: Handler invocations that raised
    """

    def __init__(
        self,
        topic: Topic,
        handler: Handler,
        buffer_size: int,
        on_release: Optional[Callable[["Subscription"], None]] = None,
    ):
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")

        self.id = next(_subscription_ids)
        self.topic = topic
        self._handler = handler
        self._on_release = on_release
        self._buffer: Deque[Any] = deque()
        self._buffer_size = buffer_size
        self._cond = threading.Condition()
        self._active = True
        self._busy = False

        self.delivered = 0
        self.dropped = 0
        self.failures = 0

        self._thread = threading.Thread(
            target=self._run,
            name=f"Subscriber-{topic.value}-{self.id}",
            daemon=True,
        )
        self._thread.start()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def pending(self) -> int:
        """Items buffered but not yet handed to the handler."""
        with self._cond:
            return len(self._buffer)

    def offer(self, item: Any) -> bool:
        """
        Buffer an item for delivery without blocking.

        Returns:
            False if the subscription is no longer active
        """
        with self._cond:
            if not self._active:
                return False
            if len(self._buffer) >= self._buffer_size:
                self._buffer.popleft()
                self.dropped += 1
                level = (
                    logging.WARNING
                    if self.dropped == 1 or self.dropped % DROP_LOG_INTERVAL == 0
                    else logging.DEBUG
                )
                logger.log(
                    level,
                    f"Subscriber {self.id} ({self.topic.value}) buffer full; "
                    f"dropped oldest item ({self.dropped} dropped so far)",
                )
            self._buffer.append(item)
            self._cond.notify_all()
        return True

    def unsubscribe(self) -> None:
        """Stop future deliveries. Safe to call more than once."""
        with self._cond:
            if not self._active:
                return
            self._active = False
            discarded = len(self._buffer)
            self._buffer.clear()
            self._cond.notify_all()

        if self._on_release is not None:
            self._on_release(self)
        logger.info(
            f"Subscriber {self.id} ({self.topic.value}) unsubscribed; "
            f"discarded {discarded} undelivered items"
        )

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every buffered item has been handled.

        Returns:
            True if the buffer drained within ``timeout``
        """
        with self._cond:
            return self._cond.wait_for(lambda: not self._buffer and not self._busy, timeout)

    def close(self, timeout: Optional[float] = None) -> None:
        """Unsubscribe and wait for the worker thread to exit."""
        self.unsubscribe()
        if threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            with self._cond:
                while self._active and not self._buffer:
                    self._cond.wait()
                if not self._active:
                    return
                item = self._buffer.popleft()
                self._busy = True

            try:
                self._handler(item)
            except Exception:
                self.failures += 1
                logger.exception(f"Subscriber {self.id} ({self.topic.value}) handler failed")
            finally:
                with self._cond:
                    self.delivered += 1
                    self._busy = False
                    self._cond.notify_all()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        state = "active" if self._active else "released"
        return f"Subscription(id={self.id}, topic={self.topic.value}, {state})"


class Broadcaster:
    """
    Fan-out of published items to independent subscriptions per topic.

    publish() never blocks on a subscriber; it only appends to each
    subscriber's bounded buffer.
    """

    def __init__(self, buffer_size: int = 1000):
        self.buffer_size = buffer_size
        self._lock = threading.Lock()
        self._subscriptions: Dict[Topic, List[Subscription]] = {topic: [] for topic in Topic}
        self._closed = False

    def subscribe(
        self, topic: Topic, handler: Handler, buffer_size: Optional[int] = None
    ) -> Subscription:
        """
        Register a handler on a topic.

        Raises:
            SubscriptionError: If the broadcaster has been closed
        """
        topic = Topic(topic)
        with self._lock:
            if self._closed:
                raise SubscriptionError("Cannot subscribe to a closed broadcaster")
            subscription = Subscription(
                topic,
                handler,
                buffer_size or self.buffer_size,
                on_release=self._release,
            )
            self._subscriptions[topic].append(subscription)

        logger.info(f"Subscriber {subscription.id} registered on {topic.value}")
        return subscription

    def publish(self, topic: Topic, item: Any) -> int:
        """
        Offer an item to every active subscriber of a topic.

        Returns:
            Number of subscribers the item was buffered for
        """
        with self._lock:
            targets = list(self._subscriptions[Topic(topic)])
        return sum(1 for subscription in targets if subscription.offer(item))

    def subscriber_count(self, topic: Optional[Topic] = None) -> int:
        with self._lock:
            if topic is not None:
                return len(self._subscriptions[Topic(topic)])
            return sum(len(subs) for subs in self._subscriptions.values())

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every subscriber has handled its buffered items."""
        with self._lock:
            targets = [s for subs in self._subscriptions.values() for s in subs]
        return all(subscription.join(timeout) for subscription in targets)

    def close(self, timeout: Optional[float] = 1.0) -> None:
        """Release every subscription and refuse new ones."""
        with self._lock:
            self._closed = True
            targets = [s for subs in self._subscriptions.values() for s in subs]

        for subscription in targets:
            subscription.close(timeout)

    def _release(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions[subscription.topic]
            if subscription in subs:
                subs.remove(subscription)
