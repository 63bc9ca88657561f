"""
Notification Dispatcher
=======================

Dispatch operations hand their events to ``publish`` which only enqueues
(``put_nowait``) and returns immediately.  A background task drains the
queue and calls the injected SMS transport.

Delivery semantics
------------------
* At-most-once: no retries.  A full queue drops the event.
* A failed delivery (transport returns ``False`` or raises) is logged and
  kept in a bounded failure history for the operator.  It never reaches
  the caller of the dispatch operation and never rolls anything back.
* Operator-only events carry no phone number; they are logged, not sent.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from chauffeur.domain.events import NotificationEvent

logger = logging.getLogger(__name__)


# ── Transport contract ────────────────────────────────────────────────


class SmsTransport(ABC):
    @abstractmethod
    async def send(self, phone: str, message: str) -> bool:
        """Deliver *message* to *phone*.  Return ``True`` on success."""


class LoggingSmsTransport(SmsTransport):
    """Stand-in transport that writes every message to the log."""

    def __init__(self, latency_seconds: float = 0.0):
        self.latency_seconds = latency_seconds

    async def send(self, phone: str, message: str) -> bool:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        logger.info("SMS to %s: %s", phone, message)
        return True


@dataclass(frozen=True)
class DeliveryFailure:
    event: NotificationEvent
    reason: str
    failed_at: datetime = field(default_factory=datetime.now)


# ── Dispatcher ────────────────────────────────────────────────────────


class NotificationDispatcher:
    def __init__(
        self,
        transport: SmsTransport,
        queue_size: int = 1000,
        failure_history: int = 100,
    ):
        self.transport = transport
        self._queue: asyncio.Queue[NotificationEvent] = asyncio.Queue(
            maxsize=queue_size
        )
        self.failures: deque[DeliveryFailure] = deque(maxlen=failure_history)
        self.delivered = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def publish(self, events: Iterable[NotificationEvent]) -> None:
        """Hand events off for delivery.  Never blocks, never raises."""
        for event in events:
            if not event.is_sms:
                logger.info(
                    "[%s] booking #%s: %s",
                    event.type.value,
                    event.booking_id,
                    event.message,
                )
                continue
            try:
                self._queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    "Notification queue full, dropping %s for booking #%s",
                    event.type.value,
                    event.booking_id,
                )
                self.failures.append(DeliveryFailure(event, "queue full"))

    async def deliver(self, event: NotificationEvent) -> bool:
        try:
            ok = await self.transport.send(event.phone, event.message)
        except Exception as exc:
            logger.exception(
                "SMS transport error for %s (booking #%s)",
                event.type.value,
                event.booking_id,
            )
            self.failures.append(DeliveryFailure(event, f"transport error: {exc}"))
            return False

        if not ok:
            logger.warning(
                "SMS delivery failed for %s to %s (booking #%s)",
                event.type.value,
                event.phone,
                event.booking_id,
            )
            self.failures.append(DeliveryFailure(event, "transport reported failure"))
            return False

        self.delivered += 1
        logger.info(
            "Delivered %s to %s (booking #%s)",
            event.type.value,
            event.phone,
            event.booking_id,
        )
        return True

    async def deliver_pending(self) -> int:
        """Deliver everything currently queued.  Returns successful sends."""
        sent = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return sent
            try:
                sent += await self.deliver(event)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("Notification dispatcher started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self.pending:
            logger.warning(
                "Notification dispatcher stopped with %d undelivered event(s)",
                self.pending,
            )
        logger.info("Notification dispatcher stopped")

    async def _loop(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.deliver(event)
            finally:
                self._queue.task_done()
