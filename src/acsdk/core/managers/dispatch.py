"""Event dispatch shared by both tracking strategies.

`SessionDispatcher` is the only place that talks to a session's sink. It
enforces the delivery rules every strategy relies on:

- nothing is delivered once the session is stopped
- `CloseEvent` is delivered exactly once, on the first `close()` call
- a sink raising an exception is logged and never breaks the session
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Union

from acsdk.core.interfaces.event_sink import JobEventSink
from acsdk.core.models.job_event import JobEvent
from acsdk.core.models.tracking import (
    CloseEvent,
    ErrorEvent,
    FailEvent,
    ProgressEvent,
    SuccessEvent,
    TrackingSession,
    event_for,
)
from acsdk.core.settings import logger


class SessionDispatcher:
    def __init__(self, session: TrackingSession, sink: JobEventSink):
        self.session = session
        self._sink = sink

    def _deliver(
        self,
        event: Union[ProgressEvent, SuccessEvent, FailEvent, ErrorEvent, CloseEvent],
    ) -> None:
        try:
            self._sink.on_event(event)
        except Exception as exc:
            logger.error(
                f"[track:sink] sink raised sink={type(self._sink).__name__} "
                f"job_id={self.session.job_id} event={event.name} error={exc!r}"
            )

    def job_event(self, job_event: JobEvent) -> bool:
        """Deliver one job event; close the session if it is terminal.

        Returns True while the session is still open afterwards.
        """
        if self.session.stopped:
            return False
        self._deliver(event_for(job_event))
        if job_event.is_terminal:
            logger.debug(
                f"[track:dispatch] terminal event name={job_event.name} job_id={self.session.job_id}"
            )
            self.close()
        return not self.session.stopped

    def error(self, exc: Exception) -> None:
        if self.session.stopped:
            return
        self._deliver(ErrorEvent(error=exc))

    def close(self) -> None:
        """Stop the session and deliver its single CloseEvent; idempotent."""
        if self.session.stopped:
            return
        self.session.stopped = True
        self._deliver(CloseEvent())
        self.session.mark_closed()


class TrackingHandle:
    """Cancellation handle returned to the caller of `track_job`.

    Calling the handle stops the session; extra calls are no-ops. The same
    handle type is returned by both strategies.
    """

    def __init__(
        self,
        dispatcher: SessionDispatcher,
        on_stop: Optional[Callable[[], None]] = None,
        task: Optional[asyncio.Task] = None,
    ):
        self._dispatcher = dispatcher
        self._on_stop = on_stop
        self._task = task

    @property
    def session(self) -> TrackingSession:
        return self._dispatcher.session

    @property
    def stopped(self) -> bool:
        return self.session.stopped

    def stop(self) -> None:
        if self.session.stopped:
            return
        logger.debug(f"[track:stop] stop requested job_id={self.session.job_id}")
        if self._on_stop is not None:
            self._on_stop()
        self._dispatcher.close()

    __call__ = stop

    async def wait(self) -> None:
        """Wait until the session has closed and its loop (if any) has exited."""
        if self._task is not None:
            await self._task
        await self.session.wait_closed()
