"""Configuration models for the tracking subsystem.

Pydantic models injected into the trackers, so strategy selection depends on
explicit values rather than on inspecting the environment.
"""

from pydantic import BaseModel, Field


class TrackingConfig(BaseModel):
    """Configuration for job tracking behavior.

    Attributes:
        poll_interval: Base wait in seconds before every poll attempt
        use_push_channel: Prefer the push channel when the host supports one
        push_reconnect_delay: Seconds a push channel waits before reconnecting
    """

    poll_interval: float = Field(
        default=0.2,
        gt=0,
        description="Base interval in seconds between job event poll requests",
    )

    use_push_channel: bool = Field(
        default=False,
        description="Track jobs over server-sent events when the push channel is available",
    )

    push_reconnect_delay: float = Field(
        default=3.0,
        gt=0,
        description="Initial reconnect delay in seconds for the push channel (the server may override it)",
    )

    model_config = {
        "frozen": True,  # Immutable after creation
        "extra": "forbid",  # Reject unknown fields
    }

    @classmethod
    def from_app_settings(cls, settings) -> "TrackingConfig":
        """Factory method to construct config from an AcSettings instance.

        Args:
            settings: AcSettings instance from core.settings

        Returns:
            TrackingConfig with values from app settings
        """
        return cls(
            poll_interval=settings.AC_TRACK_POLL_INTERVAL,
            use_push_channel=settings.AC_TRACK_USE_SSE,
            push_reconnect_delay=settings.AC_SSE_RECONNECT_DELAY,
        )


class TrackingCapabilities(BaseModel):
    """What the host environment can do, as decided by the composition root.

    Attributes:
        push_channel: A push channel implementation is available
    """

    push_channel: bool = False

    model_config = {"frozen": True}
