"""JobPoller: pull-based job tracking with offset resumption and linear backoff.

Each attempt waits the base interval, then fetches the job's events from the
current offset:

1. Success resets the backoff, sorts the batch by `createdAt`, advances the
   offset by the batch size and dispatches the events in order. A terminal
   event (`success`/`fail`) ends the session.
2. A client error (status < 500) or a response body that fails validation is
   reported once and ends the session.
3. A transient error (status >= 500 or no status) is reported, the backoff
   level grows by one and the next attempt waits an extra
   `backoff_level * interval` on top of the base interval, at the same offset.

The backoff has neither a cap nor a retry limit: a job whose API stays
unreachable is retried until the caller stops the session.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Awaitable, Callable, List, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    wait_incrementing,
)

from acsdk.core.config import TrackingConfig
from acsdk.core.exceptions import is_transient_error
from acsdk.core.interfaces.event_sink import JobEventSink
from acsdk.core.interfaces.job_events import JobEventsPort
from acsdk.core.logging_config import job_id_var
from acsdk.core.managers.dispatch import SessionDispatcher, TrackingHandle
from acsdk.core.models.job_event import JobEvent
from acsdk.core.models.tracking import TrackingSession, TrackingStrategy
from acsdk.core.settings import logger

Sleep = Callable[[float], Awaitable[None]]


class JobPoller:
    """Tracks jobs by polling `jobs/{jobId}/events?offset=N`.

    Attributes:
        config: Tracking configuration (base poll interval)
    """

    def __init__(
        self,
        events_source: JobEventsPort,
        config: Optional[TrackingConfig] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._events = events_source
        self.config = config or TrackingConfig()
        self._sleep = sleep

    def start(
        self,
        job_id: str,
        sink: JobEventSink,
        interval: Optional[float] = None,
    ) -> TrackingHandle:
        """Start a poll loop task for `job_id`; must be called with a running loop."""
        interval = self.config.poll_interval if interval is None else interval
        if interval <= 0:
            raise ValueError("interval must be greater than 0.")
        session = TrackingSession(job_id, TrackingStrategy.poll, interval=interval)
        dispatcher = SessionDispatcher(session, sink)
        logger.debug(f"[track:poll] starting job_id={job_id} interval={interval}s")
        task = asyncio.create_task(self._run(dispatcher), name=f"acsdk-poll-{job_id}")
        return TrackingHandle(dispatcher, task=task)

    async def _run(self, dispatcher: SessionDispatcher) -> None:
        session = dispatcher.session
        job_id_var.set(session.job_id)

        while not session.stopped:
            events = await self._fetch_next(dispatcher)
            if events is None or session.stopped:
                break
            self._deliver_batch(dispatcher, events)

        logger.debug(
            f"[track:poll] loop exited job_id={session.job_id} offset={session.offset}"
        )

    async def _fetch_next(self, dispatcher: SessionDispatcher) -> Optional[List[JobEvent]]:
        """Fetch the next batch, retrying transient failures.

        Returns None when the session ended while fetching (stop or client error).
        """
        session = dispatcher.session
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient_error),
            wait=wait_incrementing(start=session.interval, increment=session.interval),
            stop=lambda retry_state: session.stopped,
            after=partial(self._on_transient_error, dispatcher),
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    await self._sleep(session.interval)
                    if session.stopped:
                        return None
                    events = await self._events.get_job_events(session.job_id, session.offset)
        except Exception as exc:
            if session.stopped:
                # Result of a fetch that was in flight when the caller stopped
                return None
            logger.warning(
                f"[track:poll] non-retryable error job_id={session.job_id} "
                f"status={getattr(exc, 'status', None)} error={exc}"
            )
            dispatcher.error(exc)
            dispatcher.close()
            return None

        if session.stopped:
            return None
        session.backoff_level = 0
        return events

    def _on_transient_error(self, dispatcher: SessionDispatcher, retry_state: RetryCallState) -> None:
        """Report a retryable failure and grow the backoff before the next wait."""
        session = dispatcher.session
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if session.stopped or exc is None:
            return
        dispatcher.error(exc)
        session.backoff_level += 1
        retry_in = session.interval + session.backoff_level * session.interval
        logger.warning(
            f"[track:poll] error contacting API, retrying in {retry_in:.1f}s "
            f"job_id={session.job_id} attempt={retry_state.attempt_number} error={exc}"
        )

    def _deliver_batch(self, dispatcher: SessionDispatcher, events: List[JobEvent]) -> None:
        session = dispatcher.session
        ordered = sorted(events, key=lambda event: event.createdAt)
        session.offset += len(ordered)
        if ordered:
            logger.debug(
                f"[track:poll] batch job_id={session.job_id} size={len(ordered)} offset={session.offset}"
            )
        for event in ordered:
            if not dispatcher.job_event(event):
                break
