"""Tracking session state and the events delivered to callers.

A tracking session emits a sequence of typed events:

- `ProgressEvent` for every non-terminal job event
- `SuccessEvent` / `FailEvent` for the terminal job events
- `ErrorEvent` for every failed fetch, malformed message or channel error
- exactly one `CloseEvent` when the session ends

Each variant exposes `name` and `payload` so callers that think in terms of
`(name, payload)` pairs can consume them unchanged.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from acsdk.core.models.job_event import JobEvent


class TrackingStrategy(StrEnum):
    sse = "sse"
    poll = "poll"


class _LifecycleEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    job_event: JobEvent

    @property
    def name(self) -> str:
        return self.job_event.name

    @property
    def payload(self) -> JobEvent:
        return self.job_event


class ProgressEvent(_LifecycleEvent):
    kind: Literal["progress"] = "progress"


class SuccessEvent(_LifecycleEvent):
    kind: Literal["success"] = "success"


class FailEvent(_LifecycleEvent):
    kind: Literal["fail"] = "fail"


class ErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["error"] = "error"
    error: Exception

    @property
    def name(self) -> str:
        return "error"

    @property
    def payload(self) -> Exception:
        return self.error


class CloseEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["close"] = "close"

    @property
    def name(self) -> str:
        return "close"

    @property
    def payload(self) -> None:
        return None


TrackingEvent = Annotated[
    Union[ProgressEvent, SuccessEvent, FailEvent, ErrorEvent, CloseEvent],
    Field(discriminator="kind"),
]


def event_for(job_event: JobEvent) -> Union[ProgressEvent, SuccessEvent, FailEvent]:
    """Wrap a job event in the variant matching its name."""
    if job_event.name == "success":
        return SuccessEvent(job_event=job_event)
    if job_event.name == "fail":
        return FailEvent(job_event=job_event)
    return ProgressEvent(job_event=job_event)


class TrackingSession:
    """Mutable state of one `track_job` call.

    Owned by exactly one strategy (a poll loop or a push channel). `offset` and
    `backoff_level` only matter for polling; both stay 0 for the push channel.

    Attributes:
        job_id: Tracked job (immutable)
        strategy: Strategy chosen when the session started
        interval: Base poll interval in seconds (None for the push channel)
        offset: Number of job events already delivered; never decreases
        backoff_level: Consecutive transient failures; reset on success
        stopped: One-way flag; nothing is delivered once it is set
    """

    def __init__(
        self,
        job_id: str,
        strategy: TrackingStrategy,
        interval: Optional[float] = None,
    ):
        self._job_id = job_id
        self.strategy = strategy
        self.interval = interval
        self.offset = 0
        self.backoff_level = 0
        self.stopped = False
        self._closed = asyncio.Event()

    @property
    def job_id(self) -> str:
        return self._job_id

    def mark_closed(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    def __repr__(self) -> str:
        return (
            f"TrackingSession(job_id={self._job_id!r}, strategy={self.strategy}, "
            f"offset={self.offset}, backoff_level={self.backoff_level}, stopped={self.stopped})"
        )


def describe(event: Any) -> str:
    """Short human-readable rendering of a tracking event for logs and the CLI."""
    name = getattr(event, "name", "?")
    payload = getattr(event, "payload", None)
    if isinstance(payload, JobEvent):
        return f"{name} createdAt={payload.createdAt}"
    if isinstance(payload, Exception):
        return f"{name} {type(payload).__name__}: {payload}"
    return name
