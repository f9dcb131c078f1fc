"""EventSourceTracker: push-based job tracking over a server-sent events channel.

One channel is opened per tracked job. The tracker is purely reactive: it
never schedules work of its own, it only reacts to the channel's message,
error and closed callbacks. Reconnection after a dropped connection is left
entirely to the channel; a channel that gives up ends the session.
"""

from __future__ import annotations

import json
from urllib.parse import quote, urlsplit, urlunsplit

from pydantic import ValidationError

from acsdk.core.interfaces.event_channel import EventChannelFactory, EventChannelPort
from acsdk.core.interfaces.event_sink import JobEventSink
from acsdk.core.managers.dispatch import SessionDispatcher, TrackingHandle
from acsdk.core.models.job_event import JOB_EVENT_OBJECT, JobEvent
from acsdk.core.models.tracking import TrackingSession, TrackingStrategy
from acsdk.core.settings import logger


def build_events_url(api_url: str, token: str, job_id: str) -> str:
    """Return `{api_url}/jobs/{job_id}/events` with `token` as URL userinfo.

    Push channels cannot set an Authorization header, so the token travels as
    the user part of the URL (empty password), which clients turn into the
    same Basic credentials the REST transport sends.
    """
    parts = urlsplit(api_url)
    host = parts.netloc.rsplit("@", 1)[-1]
    netloc = f"{quote(token, safe='')}:@{host}"
    path = parts.path.rstrip("/") + f"/jobs/{quote(job_id, safe='')}/events"
    return urlunsplit((parts.scheme, netloc, path, "", ""))


class EventSourceTracker:
    """Tracks jobs through a push channel built by `channel_factory`."""

    def __init__(self, api_url: str, token: str, channel_factory: EventChannelFactory):
        self._api_url = api_url
        self._token = token
        self._channel_factory = channel_factory

    def start(self, job_id: str, sink: JobEventSink) -> TrackingHandle:
        session = TrackingSession(job_id, TrackingStrategy.sse)
        dispatcher = SessionDispatcher(session, sink)
        channel = self._channel_factory(build_events_url(self._api_url, self._token, job_id))
        session_handlers = _ChannelHandlers(dispatcher, channel)

        logger.debug(f"[track:sse] opening channel job_id={job_id}")
        channel.open(
            session_handlers.on_message,
            session_handlers.on_error,
            session_handlers.on_closed,
        )
        return TrackingHandle(dispatcher, on_stop=session_handlers.close_channel)


class _ChannelHandlers:
    """Message/error callbacks binding one channel to one session."""

    def __init__(self, dispatcher: SessionDispatcher, channel: EventChannelPort):
        self._dispatcher = dispatcher
        self._channel = channel

    @property
    def _session(self) -> TrackingSession:
        return self._dispatcher.session

    def close_channel(self) -> None:
        if not self._channel.closed:
            self._channel.close()

    def on_message(self, data: str) -> None:
        if self._session.stopped:
            return

        try:
            message = json.loads(data)
        except ValueError as exc:
            logger.debug(f"[track:sse] unparseable message job_id={self._session.job_id}")
            error = ValueError("Error parsing event data.")
            error.__cause__ = exc
            self._dispatcher.error(error)
            return

        # Other message types share the stream; they are not ours to judge
        if not isinstance(message, dict) or message.get("object") != JOB_EVENT_OBJECT:
            return

        try:
            job_event = JobEvent.model_validate(message)
        except ValidationError as exc:
            logger.debug(
                f"[track:sse] invalid job event job_id={self._session.job_id} errors={exc.error_count()}"
            )
            self._dispatcher.error(exc)
            return

        if job_event.is_terminal:
            # Close the channel before the terminal event reaches the sink
            self.close_channel()
        self._dispatcher.job_event(job_event)

    def on_error(self, exc: Exception) -> None:
        if self._session.stopped:
            return
        logger.debug(f"[track:sse] channel error job_id={self._session.job_id} error={exc!r}")
        self._dispatcher.error(exc)

    def on_closed(self) -> None:
        """The channel gave up on its own; end the session with its close event."""
        if self._session.stopped:
            return
        logger.debug(f"[track:sse] channel ended job_id={self._session.job_id}")
        self._dispatcher.close()
