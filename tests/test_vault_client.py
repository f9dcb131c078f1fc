import pytest
from aioresponses import aioresponses

from acsdk.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from acsdk.core.exceptions import ApiError
from acsdk.core.services.vault_client import VaultClient
from acsdk.sdk import create_end_user_sdk

"""
Tests for VaultClient over the aiohttp transport.

The vault is a separate host from the API. Expected outcomes:
- `create_otp` POSTs to `otp` and returns the OTP id.
- `vault_pan` chains OTP, PAN write and temporary token exchange, and
  returns only the `panToken`.
- Vault failures surface as ApiError with the vault's status.
"""

VAULT = "http://vault.example.test"


def posted(m, path):
    return [
        call
        for (method, url), calls in m.requests.items()
        if method == "POST" and str(url) == f"{VAULT}/{path}"
        for call in calls
    ]


@pytest.mark.asyncio
async def test_create_otp_returns_id():
    with aioresponses() as m:
        m.post(f"{VAULT}/otp", payload={"id": "otp-1"}, status=201)

        async with VaultClient(AioHttpClientAdapter(VAULT, "tok")) as vault:
            assert await vault.create_otp() == "otp-1"


@pytest.mark.asyncio
async def test_vault_pan_chains_three_calls():
    with aioresponses() as m:
        m.post(f"{VAULT}/otp", payload={"id": "otp-1"}, status=201)
        m.post(f"{VAULT}/pan", payload={"id": "pan-1", "key": "k-1"}, status=201)
        m.post(f"{VAULT}/pan/temporary", payload={"panToken": "tmp-1"}, status=201)

        async with VaultClient(AioHttpClientAdapter(VAULT, "tok")) as vault:
            token = await vault.vault_pan("4111111111111111")

        assert token == "tmp-1"
        assert posted(m, "pan")[0].kwargs["json"] == {"otp": "otp-1", "pan": "4111111111111111"}
        assert posted(m, "pan/temporary")[0].kwargs["json"] == {"panId": "pan-1", "key": "k-1"}


@pytest.mark.asyncio
async def test_vault_error_stops_the_chain():
    with aioresponses() as m:
        m.post(f"{VAULT}/otp", payload={"id": "otp-1"}, status=201)
        m.post(f"{VAULT}/pan", payload={"message": "Invalid PAN"}, status=400)

        async with VaultClient(AioHttpClientAdapter(VAULT, "tok")) as vault:
            with pytest.raises(ApiError) as excinfo:
                await vault.vault_pan("0000")

        assert excinfo.value.status == 400
        assert excinfo.value.message == "Invalid PAN"
        assert posted(m, "pan/temporary") == []


@pytest.mark.asyncio
async def test_response_without_expected_field():
    with aioresponses() as m:
        m.post(f"{VAULT}/otp", payload={}, status=201)

        async with VaultClient(AioHttpClientAdapter(VAULT, "tok")) as vault:
            with pytest.raises(ApiError) as excinfo:
                await vault.create_otp()

        assert excinfo.value.status == 502


@pytest.mark.asyncio
async def test_pan_must_be_a_string():
    vault = VaultClient(AioHttpClientAdapter(VAULT, "tok"))
    with pytest.raises(TypeError):
        await vault.vault_pan(4111111111111111)


@pytest.mark.asyncio
async def test_end_user_sdk_uses_vault_host_and_its_service():
    api = "http://api.example.test"
    with aioresponses() as m:
        m.get(f"{api}/services/service-1", payload={"id": "service-1", "name": "Flights"})
        m.post(f"{VAULT}/otp", payload={"id": "otp-1"}, status=201)
        m.post(f"{VAULT}/otp", payload={"id": "otp-2"}, status=201)
        m.post(f"{VAULT}/pan", payload={"id": "pan-1", "key": "k-1"}, status=201)
        m.post(f"{VAULT}/pan/temporary", payload={"panToken": "tmp-1"}, status=201)

        async with create_end_user_sdk(
            "tok", "job-1", "service-1", api_url=api, vault_url=VAULT
        ) as sdk:
            service = await sdk.get_service()
            otp = await sdk.create_otp()
            pan_token = await sdk.vault_pan("4111111111111111")

        assert service["name"] == "Flights"
        assert otp == "otp-1"
        assert pan_token == "tmp-1"
        assert posted(m, "pan")[0].kwargs["json"]["otp"] == "otp-2"
