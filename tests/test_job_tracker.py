"""Tests for JobTracker strategy selection and callback adaptation."""

import asyncio

import pytest

from acsdk.core.config import TrackingCapabilities, TrackingConfig
from acsdk.core.managers.event_source_tracker import EventSourceTracker
from acsdk.core.managers.job_tracker import JobTracker
from acsdk.core.managers.poller import JobPoller
from acsdk.core.models.job_event import JobEvent
from acsdk.core.models.tracking import TrackingStrategy


class FakeEventsSource:
    def __init__(self, batches):
        self.batches = list(batches)

    async def get_job_events(self, job_id, offset=0):
        return self.batches.pop(0) if self.batches else []


class FakeChannel:
    def __init__(self, url):
        self.url = url
        self.closed = False

    def open(self, on_message, on_error, on_closed=None):
        self.on_message = on_message

    def close(self):
        self.closed = True


async def no_sleep(seconds):
    await asyncio.sleep(0)


def make_tracker(push_channel=False, use_push_channel=False, batches=(), interval=0.05):
    config = TrackingConfig(poll_interval=interval, use_push_channel=use_push_channel)
    channels = []

    def factory(url):
        channels.append(FakeChannel(url))
        return channels[-1]

    tracker = JobTracker(
        poller=JobPoller(FakeEventsSource(batches), config, sleep=no_sleep),
        event_source=EventSourceTracker("https://api.example.test", "tok", factory),
        config=config,
        capabilities=TrackingCapabilities(push_channel=push_channel),
    )
    return tracker, channels


@pytest.mark.parametrize(
    "push_channel, use_push_channel, expected",
    [
        (True, True, TrackingStrategy.sse),
        (True, False, TrackingStrategy.poll),
        (False, True, TrackingStrategy.poll),
        (False, False, TrackingStrategy.poll),
    ],
)
def test_strategy_requires_capability_and_flag(push_channel, use_push_channel, expected):
    tracker, _ = make_tracker(push_channel, use_push_channel)
    assert tracker.select_strategy() == expected


def test_poll_is_used_without_event_source():
    config = TrackingConfig(use_push_channel=True)
    tracker = JobTracker(
        poller=JobPoller(FakeEventsSource([]), config),
        config=config,
        capabilities=TrackingCapabilities(push_channel=True),
    )
    assert tracker.select_strategy() == TrackingStrategy.poll


def test_defaults_to_polling_every_200ms():
    tracker = JobTracker(poller=JobPoller(FakeEventsSource([])))
    assert tracker.select_strategy() == TrackingStrategy.poll
    assert tracker.config.poll_interval == pytest.approx(0.2)


def test_job_id_must_be_a_string():
    tracker, _ = make_tracker()
    with pytest.raises(TypeError):
        tracker.track(123, lambda name, payload: None)


def test_callback_must_be_callable():
    tracker, _ = make_tracker(push_channel=True, use_push_channel=True)
    with pytest.raises(TypeError):
        tracker.track("job-1", "not callable")


def test_sse_session_returns_channel_handle():
    tracker, channels = make_tracker(push_channel=True, use_push_channel=True)
    calls = []

    handle = tracker.track("job-1", lambda name, payload: calls.append((name, payload)))
    handle()

    assert handle.session.strategy == TrackingStrategy.sse
    assert channels[0].closed is True
    assert calls == [("close", None)]


@pytest.mark.asyncio
async def test_plain_callback_receives_name_and_payload():
    tracker, channels = make_tracker(
        batches=[[JobEvent(name="processing", createdAt=1)], [JobEvent(name="success", createdAt=2)]],
        interval=0.05,
    )
    calls = []

    handle = tracker.track("job-1", lambda name, payload: calls.append((name, payload)))
    await handle.wait()

    assert [name for name, _ in calls] == ["processing", "success", "close"]
    assert isinstance(calls[0][1], JobEvent)
    assert calls[-1] == ("close", None)
    assert handle.session.strategy == TrackingStrategy.poll
    assert handle.session.interval == pytest.approx(0.05)
    assert channels == []
