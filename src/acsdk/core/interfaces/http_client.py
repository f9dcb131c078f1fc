# acsdk/core/interfaces/http_client.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

class HttpClientPort(ABC):
    @abstractmethod
    async def __aenter__(self) -> "HttpClientPort":
        """Async context manager entry method"""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit method"""
        pass

    @abstractmethod
    async def request(
        self,
        path: str,
        method: str = "GET",
        query: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        parse: bool = True,
    ) -> Any:
        """Make an authenticated request relative to the API base URL.

        Returns the parsed JSON body, or the raw response bytes when `parse`
        is False. Raises ApiError carrying the HTTP status on non-2xx
        responses and a status-less ApiError on network failure.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the HTTP client session"""
        pass
