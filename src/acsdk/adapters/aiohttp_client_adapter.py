import asyncio
import aiohttp
from typing import Any, Dict, Optional

from acsdk.core.interfaces.http_client import HttpClientPort
from acsdk.core.exceptions import ApiError
from acsdk.core.settings import logger


class AioHttpClientAdapter(HttpClientPort):
    """Authenticated JSON client bound to one API base URL.

    Every request carries `Authorization: Basic base64(token + ":")`. Failures
    are translated into `ApiError`: with the HTTP status for non-2xx
    responses, without one for network errors and timeouts.
    """

    def __init__(self, base_url: str, token: str, timeout: float = 10.0):
        if not token:
            raise ValueError("No token.")
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._auth = aiohttp.BasicAuth(token, "")
        self._session: Optional[aiohttp.ClientSession] = None
        self._default_sock_connect: float = 5.0
        # Applied to every request; callers never build ClientTimeout themselves
        self._client_timeout = aiohttp.ClientTimeout(
            total=timeout,
            sock_connect=self._default_sock_connect,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self):
        """Async context manager entry"""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    def build_url(self, path: str) -> str:
        return self._base_url + path.lstrip("/")

    async def request(
        self,
        path: str,
        method: str = "GET",
        query: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        parse: bool = True,
    ) -> Any:
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")

        url = self.build_url(path)
        params = {k: str(v) for k, v in (query or {}).items() if v is not None}
        request_headers = dict(headers or {})
        request_headers["Authorization"] = self._auth.encode()
        kwargs: Dict[str, Any] = {
            "params": params,
            "headers": request_headers,
            "timeout": self._client_timeout,
        }
        if body is not None:
            # aiohttp sets Content-Type: application/json for json payloads
            kwargs["json"] = body

        try:
            async with self._session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    raise await self._error_from_response(method, url, response)
                if not parse:
                    return await response.read()
                try:
                    return await response.json()
                except aiohttp.ContentTypeError:
                    text = await response.text()
                    logger.error(
                        "[http] invalid JSON response method=%s url=%s content=%s",
                        method,
                        url,
                        text[:500],
                    )
                    raise ApiError(
                        f"The response from {url} was not valid JSON",
                        status=502,
                        body=text,
                    )

        except asyncio.TimeoutError:
            logger.error("[http] timeout method=%s url=%s", method, url)
            raise ApiError(f"Request to {url} timed out.")

        except aiohttp.ClientError as client_error:
            logger.error(
                "[http] connection error method=%s url=%s error=%s",
                method,
                url,
                str(client_error),
            )
            raise ApiError(f"Connection error for {url}: {client_error}") from client_error

    async def _error_from_response(
        self, method: str, url: str, response: aiohttp.ClientResponse
    ) -> ApiError:
        """Build the ApiError for a non-2xx response, preferring the server message."""
        try:
            body = await response.json(content_type=None)
        except ValueError:
            body = await response.text()

        message = None
        if isinstance(body, dict):
            message = body.get("message")
        if response.status == 401:
            logger.warning("[http] authentication failed method=%s url=%s", method, url)
        else:
            logger.debug(
                "[http] error response method=%s url=%s status=%s",
                method,
                url,
                response.status,
            )
        return ApiError(message or "Unexpected response", status=response.status, body=body)

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
