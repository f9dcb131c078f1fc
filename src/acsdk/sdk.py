# sdk.py
# Composition root of the client library: instantiates the concrete adapters
# and wires them into the core. Nothing in core/ imports from here.
from typing import Optional

from acsdk.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from acsdk.adapters.aiohttp_event_source import AioHttpEventSource
from acsdk.core.config import TrackingCapabilities, TrackingConfig
from acsdk.core.interfaces.event_channel import EventChannelFactory
from acsdk.core.interfaces.http_client import HttpClientPort
from acsdk.core.managers.event_source_tracker import EventSourceTracker
from acsdk.core.managers.job_tracker import JobTracker
from acsdk.core.managers.poller import JobPoller
from acsdk.core.services.api_client import ApiClient, EndUserSdk
from acsdk.core.services.vault_client import VaultClient
from acsdk.core.settings import app_settings


def _build_api_client(
    token: str,
    api_url: Optional[str],
    vault_url: Optional[str],
    http_client: Optional[HttpClientPort],
    vault_http_client: Optional[HttpClientPort],
    config: Optional[TrackingConfig],
    capabilities: Optional[TrackingCapabilities],
    channel_factory: Optional[EventChannelFactory],
) -> ApiClient:
    api_url = api_url or str(app_settings.AC_API_URL)
    vault_url = vault_url or str(app_settings.AC_VAULT_URL)
    config = config or TrackingConfig.from_app_settings(app_settings)

    if http_client is None:
        http_client = AioHttpClientAdapter(api_url, token, timeout=app_settings.AC_HTTP_TIMEOUT)
    # Same token, separate host: the vault gets its own session
    if vault_http_client is None:
        vault_http_client = AioHttpClientAdapter(
            vault_url, token, timeout=app_settings.AC_HTTP_TIMEOUT
        )

    if channel_factory is None:
        def channel_factory(url: str) -> AioHttpEventSource:
            return AioHttpEventSource(url, reconnect_delay=config.push_reconnect_delay)

    # aiohttp can always stream server-sent events; callers may still veto it
    if capabilities is None:
        capabilities = TrackingCapabilities(push_channel=True)

    api = ApiClient(http_client, vault=VaultClient(vault_http_client))
    tracker = JobTracker(
        poller=JobPoller(api, config),
        event_source=EventSourceTracker(api_url, token, channel_factory),
        config=config,
        capabilities=capabilities,
    )
    # Attach here (composition root): the poller reads events through the client
    api.attach_tracker(tracker)
    return api


def create_client_sdk(
    token: str,
    api_url: Optional[str] = None,
    vault_url: Optional[str] = None,
    http_client: Optional[HttpClientPort] = None,
    vault_http_client: Optional[HttpClientPort] = None,
    config: Optional[TrackingConfig] = None,
    capabilities: Optional[TrackingCapabilities] = None,
    channel_factory: Optional[EventChannelFactory] = None,
) -> ApiClient:
    """Build a client authenticated with a (secret) API token.

    Use it as an async context manager so the HTTP sessions are opened/closed:

        async with create_client_sdk(token) as client:
            handle = client.track_job(job_id, on_event)
            await handle.wait()
    """
    if not token:
        raise ValueError("Token required.")
    return _build_api_client(
        token, api_url, vault_url, http_client, vault_http_client,
        config, capabilities, channel_factory,
    )


def create_end_user_sdk(
    token: str,
    job_id: str,
    service_id: str,
    api_url: Optional[str] = None,
    vault_url: Optional[str] = None,
    http_client: Optional[HttpClientPort] = None,
    vault_http_client: Optional[HttpClientPort] = None,
    config: Optional[TrackingConfig] = None,
    capabilities: Optional[TrackingCapabilities] = None,
    channel_factory: Optional[EventChannelFactory] = None,
) -> EndUserSdk:
    """Build a client bound to a single job, authenticated with an end-user token."""
    if not token:
        raise ValueError("A token required.")
    if not job_id:
        raise ValueError("A jobId is required.")
    if not service_id:
        raise ValueError("A serviceId is required.")
    api = _build_api_client(
        token, api_url, vault_url, http_client, vault_http_client,
        config, capabilities, channel_factory,
    )
    return EndUserSdk(api, job_id, service_id)
