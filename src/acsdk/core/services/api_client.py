"""ApiClient: job-facing surface of the SDK on top of the HTTP transport.

Only the calls the tracking subsystem needs are modelled here, plus the vault
one-time password and the end user's service lookup; every other API endpoint
is reachable through `raw`.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

from acsdk.core.interfaces.event_sink import JobEventSink
from acsdk.core.interfaces.http_client import HttpClientPort
from acsdk.core.managers.dispatch import TrackingHandle
from acsdk.core.managers.job_tracker import JobTracker
from acsdk.core.managers.sinks import EventCallback
from acsdk.core.models.job_event import JobEvent, JobEventList
from acsdk.core.services.vault_client import VaultClient

# `offset` travels as an unsigned 32-bit integer
MAX_OFFSET = 2**32


def assert_string_arguments(**arguments: Any) -> None:
    for key, value in arguments.items():
        if not isinstance(value, str):
            raise TypeError(f'"{key}" must be a string.')


class ApiClient:
    """Automation Cloud API client.

    `tracker` is attached by the composition root once it exists, because the
    tracker's poller reads events through this very client. `vault` talks to
    the separate vault host.
    """

    def __init__(
        self,
        http_client: HttpClientPort,
        tracker: Optional[JobTracker] = None,
        vault: Optional[VaultClient] = None,
    ):
        self._http = http_client
        self._tracker = tracker
        self._vault = vault

    def attach_tracker(self, tracker: JobTracker) -> None:
        self._tracker = tracker

    @property
    def vault(self) -> VaultClient:
        if self._vault is None:
            raise RuntimeError("No vault client attached to this client.")
        return self._vault

    async def __aenter__(self) -> "ApiClient":
        await self._http.__aenter__()
        if self._vault is not None:
            await self._vault.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if self._vault is not None:
                await self._vault.__aexit__(exc_type, exc_val, exc_tb)
        finally:
            await self._http.__aexit__(exc_type, exc_val, exc_tb)
        return False

    async def close(self) -> None:
        try:
            if self._vault is not None:
                await self._vault.close()
        finally:
            await self._http.close()

    async def raw(self, path: str, **options: Any) -> Any:
        """Call any endpoint: `options` are the transport's request arguments."""
        assert_string_arguments(path=path)
        return await self._http.request(path, **options)

    async def get_service(self, service_id: str) -> Any:
        assert_string_arguments(serviceId=service_id)
        return await self._http.request(f"services/{service_id}")

    async def get_job_events(self, job_id: str, offset: int = 0) -> List[JobEvent]:
        """Return the job's events starting at `offset`, in server order."""
        assert_string_arguments(jobId=job_id)
        if (
            isinstance(offset, bool)
            or not isinstance(offset, int)
            or not 0 <= offset < MAX_OFFSET
        ):
            raise ValueError("offset must be a positive integer.")

        body = await self._http.request(f"jobs/{job_id}/events", query={"offset": offset})
        return JobEventList.model_validate(body).data

    async def create_otp(self) -> str:
        return await self.vault.create_otp()

    def track_job(
        self,
        job_id: str,
        callback: Union[JobEventSink, EventCallback],
    ) -> TrackingHandle:
        """Follow a job to completion; see JobTracker.track."""
        if self._tracker is None:
            raise RuntimeError("No job tracker attached to this client.")
        return self._tracker.track(job_id, callback)


class EndUserSdk:
    """Client bound to one job and service, as handed to an end user's browser session."""

    def __init__(self, api: ApiClient, job_id: str, service_id: str):
        self._api = api
        self.job_id = job_id
        self.service_id = service_id

    async def __aenter__(self) -> "EndUserSdk":
        await self._api.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._api.__aexit__(exc_type, exc_val, exc_tb)

    async def get_service(self) -> Any:
        return await self._api.get_service(self.service_id)

    async def get_job_events(self, offset: int = 0) -> List[JobEvent]:
        return await self._api.get_job_events(self.job_id, offset)

    def track_job(self, callback: Union[JobEventSink, EventCallback]) -> TrackingHandle:
        return self._api.track_job(self.job_id, callback)

    async def create_otp(self) -> str:
        return await self._api.create_otp()

    async def vault_pan(self, pan: str) -> str:
        return await self._api.vault.vault_pan(pan)
