import asyncio
import aiohttp
from typing import Callable, List, Optional

from acsdk.core.exceptions import EventChannelError
from acsdk.core.interfaces.event_channel import (
    ClosedCallback,
    ErrorCallback,
    EventChannelPort,
    MessageCallback,
)
from acsdk.core.settings import logger


class AioHttpEventSource(EventChannelPort):
    """Server-sent events client on top of an aiohttp streaming GET.

    Mirrors the browser EventSource contract:
    - only `message` events (no `event:` field or `event: message`) are delivered
    - a dropped stream or network error is reported, then the channel
      reconnects after `reconnect_delay` (the server may change it with
      `retry:`), resuming with `Last-Event-ID`
    - a non-200 response or a non `text/event-stream` body fails the channel
      for good; 204 closes it without error
    - any other failure of the reader is reported and ends the channel

    Whenever the channel ends without `close()` having been called, `on_closed`
    fires exactly once.

    Credentials embedded in the URL (userinfo) are sent by aiohttp as Basic auth.
    """

    def __init__(
        self,
        url: str,
        reconnect_delay: float = 3.0,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp.ClientSession,
    ):
        self._url = url
        self._reconnect_delay = reconnect_delay
        self._session_factory = session_factory
        self._task: Optional[asyncio.Task] = None
        self._closed = False
        self._close_requested = False
        self._last_event_id = ""
        self._on_message: Optional[MessageCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._on_closed: Optional[ClosedCallback] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def open(
        self,
        on_message: MessageCallback,
        on_error: ErrorCallback,
        on_closed: Optional[ClosedCallback] = None,
    ) -> None:
        if self._task is not None:
            raise RuntimeError("Event source already opened.")
        self._on_message = on_message
        self._on_error = on_error
        self._on_closed = on_closed
        self._task = asyncio.create_task(self._run(), name="acsdk-event-source")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._close_requested = True
        # Cancelling from inside our own callbacks would abort the reader mid-dispatch
        if self._task is not None and self._task is not asyncio.current_task():
            self._task.cancel()

    async def _run(self) -> None:
        try:
            async with self._session_factory() as session:
                while not self._closed:
                    try:
                        reconnect = await self._consume(session)
                    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                        logger.debug("[sse] connection error url=%s error=%s", self._safe_url, exc)
                        self._report(exc)
                        reconnect = True
                    if not reconnect or self._closed:
                        return
                    await asyncio.sleep(self._reconnect_delay)
        except Exception as exc:
            logger.error("[sse] reader failed url=%s error=%r", self._safe_url, exc)
            self._report(exc)
        finally:
            self._finish()

    def _finish(self) -> None:
        self._closed = True
        if self._close_requested or self._on_closed is None:
            return
        logger.debug("[sse] channel ended url=%s", self._safe_url)
        on_closed, self._on_closed = self._on_closed, None
        on_closed()

    @property
    def _safe_url(self) -> str:
        # Never log the token carried in the userinfo
        scheme, _, rest = self._url.partition("//")
        return scheme + "//" + rest.rsplit("@", 1)[-1]

    def _report(self, exc: Exception) -> None:
        if not self._closed and self._on_error is not None:
            self._on_error(exc)

    async def _consume(self, session: aiohttp.ClientSession) -> bool:
        """Read one connection until it ends. Returns True to reconnect."""
        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}
        if self._last_event_id:
            headers["Last-Event-ID"] = self._last_event_id
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=10.0)

        async with session.get(self._url, headers=headers, timeout=timeout) as response:
            if response.status == 204:
                logger.debug("[sse] server closed stream (204) url=%s", self._safe_url)
                self._closed = True
                return False
            if response.status != 200 or response.content_type != "text/event-stream":
                self._report(
                    EventChannelError(
                        f"Unexpected event stream response: {response.status} {response.content_type}",
                        status=response.status,
                    )
                )
                self._closed = True
                return False

            logger.debug("[sse] connected url=%s", self._safe_url)
            data: List[str] = []
            event_type = ""
            async for raw_line in response.content:
                if self._closed:
                    return False
                line = raw_line.decode("utf-8", errors="replace").rstrip("\r\n")
                if not line:
                    self._dispatch(event_type, data)
                    if self._closed:
                        return False
                    data, event_type = [], ""
                    continue
                if line.startswith(":"):
                    continue
                field, _, value = line.partition(":")
                if value.startswith(" "):
                    value = value[1:]
                if field == "data":
                    data.append(value)
                elif field == "event":
                    event_type = value
                elif field == "id" and "\0" not in value:
                    self._last_event_id = value
                elif field == "retry" and value.isdigit():
                    self._reconnect_delay = int(value) / 1000

        self._report(EventChannelError("Event stream ended, reconnecting."))
        return True

    def _dispatch(self, event_type: str, data: List[str]) -> None:
        if not data or event_type not in ("", "message"):
            return
        if self._closed or self._on_message is None:
            return
        self._on_message("\n".join(data))
