"""JobTracker: picks the tracking strategy for each `track_job` call.

The choice is made once per call from injected values only:

- push channel when `capabilities.push_channel` AND `config.use_push_channel`
- polling at `config.poll_interval` otherwise

There is no fallback from one strategy to the other during a session.
"""

from __future__ import annotations

from typing import Optional, Union

from acsdk.core.config import TrackingCapabilities, TrackingConfig
from acsdk.core.interfaces.event_sink import JobEventSink
from acsdk.core.managers.dispatch import TrackingHandle
from acsdk.core.managers.event_source_tracker import EventSourceTracker
from acsdk.core.managers.poller import JobPoller
from acsdk.core.managers.sinks import CallbackEventSink, EventCallback
from acsdk.core.models.tracking import TrackingStrategy
from acsdk.core.settings import logger


class JobTracker:
    def __init__(
        self,
        poller: JobPoller,
        event_source: Optional[EventSourceTracker] = None,
        config: Optional[TrackingConfig] = None,
        capabilities: Optional[TrackingCapabilities] = None,
    ) -> None:
        self._poller = poller
        self._event_source = event_source
        self.config = config or TrackingConfig()
        self.capabilities = capabilities or TrackingCapabilities()

    def select_strategy(self) -> TrackingStrategy:
        if (
            self.capabilities.push_channel
            and self.config.use_push_channel
            and self._event_source is not None
        ):
            return TrackingStrategy.sse
        return TrackingStrategy.poll

    def track(
        self,
        job_id: str,
        callback: Union[JobEventSink, EventCallback],
    ) -> TrackingHandle:
        """Start tracking `job_id`, delivering events to `callback`.

        `callback` is either a JobEventSink or a plain `callback(name, payload)`
        function. The returned handle stops the session when called.
        """
        if not isinstance(job_id, str):
            raise TypeError('"jobId" must be a string.')
        sink = callback if isinstance(callback, JobEventSink) else CallbackEventSink(callback)

        strategy = self.select_strategy()
        logger.debug(f"[track] job_id={job_id} strategy={strategy}")
        if strategy == TrackingStrategy.sse:
            return self._event_source.start(job_id, sink)
        return self._poller.start(job_id, sink, interval=self.config.poll_interval)
