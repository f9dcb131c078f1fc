"""Automation Cloud client SDK: authenticated API access and job event tracking."""

from acsdk.core.config import TrackingCapabilities, TrackingConfig
from acsdk.core.exceptions import ApiError, EventChannelError
from acsdk.core.managers.dispatch import TrackingHandle
from acsdk.core.managers.sinks import CallbackEventSink, QueueEventSink
from acsdk.core.models.job_event import JobEvent
from acsdk.core.models.tracking import (
    CloseEvent,
    ErrorEvent,
    FailEvent,
    ProgressEvent,
    SuccessEvent,
    TrackingEvent,
    TrackingSession,
    TrackingStrategy,
)
from acsdk.core.services.vault_client import VaultClient
from acsdk.sdk import create_client_sdk, create_end_user_sdk
