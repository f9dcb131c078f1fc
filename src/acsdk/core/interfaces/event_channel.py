"""Port for push channels (server-sent events) delivering raw job messages."""

from abc import ABC, abstractmethod
from typing import Callable, Optional

MessageCallback = Callable[[str], None]
ErrorCallback = Callable[[Exception], None]
ClosedCallback = Callable[[], None]


class EventChannelPort(ABC):
    """A live, server-initiated message stream for a single URL.

    The channel owns its reconnection behaviour: after `open` it keeps
    delivering until `close` is called or it fails permanently. Callbacks are
    invoked from the channel's own task, one message at a time, in delivery
    order.
    """

    @abstractmethod
    def open(
        self,
        on_message: MessageCallback,
        on_error: ErrorCallback,
        on_closed: Optional[ClosedCallback] = None,
    ) -> None:
        """Start receiving. `on_message` gets the raw `data` of each message.

        `on_closed` fires once if the channel stops on its own (permanent
        failure or the server ending the stream); never after `close()`.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop receiving; idempotent. No callback fires after close returns."""
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        pass


# Builds a channel for a fully qualified URL (credentials embedded as userinfo)
EventChannelFactory = Callable[[str], EventChannelPort]
