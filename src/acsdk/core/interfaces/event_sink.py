"""Sink protocol for tracking events.

A tracking session pushes every `TrackingEvent` into exactly one sink, in
order. Sinks decouple how callers consume events (plain callback, async
iteration, logging) from the strategy that produces them.
"""

from typing import Protocol, runtime_checkable

from acsdk.core.models.tracking import TrackingEvent


@runtime_checkable
class JobEventSink(Protocol):
    """Receiver of a tracking session's events.

    `on_event` is called synchronously from the session's task. It should
    return quickly; long work belongs in a task of the caller's own. An
    exception raised here is logged and does not interrupt the session.
    """

    def on_event(self, event: TrackingEvent) -> None:
        """Handle one event.

        Args:
            event: Progress/Success/Fail/Error/Close variant; `CloseEvent`
                arrives exactly once and is always the last event
        """
        ...
