"""Concrete event sinks.

- `CallbackEventSink` adapts a plain `callback(name, payload)` function
- `QueueEventSink` exposes a session's events as an async iterator
- `LoggingEventSink` records every event (used by the CLI in verbose mode)
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Optional

from acsdk.core.interfaces.event_sink import JobEventSink
from acsdk.core.models.tracking import CloseEvent, TrackingEvent, describe


logger = logging.getLogger(__name__)

EventCallback = Callable[[str, Optional[Any]], None]


class CallbackEventSink:
    """Translates typed events into `callback(name, payload)` calls.

    Job events are passed as `(event.name, JobEvent)`, errors as
    `("error", exception)` and the end of the session as `("close", None)`.
    """

    def __init__(self, callback: EventCallback):
        if not callable(callback):
            raise TypeError('"callback" must be callable.')
        self._callback = callback

    def on_event(self, event: TrackingEvent) -> None:
        self._callback(event.name, event.payload)


class QueueEventSink:
    """Buffers events for consumption with `async for`.

    Iteration ends after the CloseEvent has been yielded.

        sink = QueueEventSink()
        handle = client.track_job(job_id, sink)
        async for event in sink:
            ...
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()

    def on_event(self, event: TrackingEvent) -> None:
        self._queue.put_nowait(event)

    def __aiter__(self) -> AsyncIterator[TrackingEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[TrackingEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if isinstance(event, CloseEvent):
                return


class LoggingEventSink:
    """Logs each event, then forwards it to an optional inner sink."""

    def __init__(self, inner: Optional[JobEventSink] = None, level: int = logging.INFO):
        self._inner = inner
        self._level = level

    def on_event(self, event: TrackingEvent) -> None:
        logger.log(self._level, "[track:event] %s", describe(event))
        if self._inner is not None:
            self._inner.on_event(event)
