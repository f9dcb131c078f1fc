"""VaultClient: card data exchange with the Automation Cloud vault.

The vault lives on its own host. Card numbers (PANs) never touch the API: a
PAN is stored in the vault and only the short-lived `panToken` is handed to a
job as input.
"""

from __future__ import annotations

from typing import Any

from acsdk.core.exceptions import ApiError
from acsdk.core.interfaces.http_client import HttpClientPort
from acsdk.core.settings import logger


class VaultClient:
    def __init__(self, http_client: HttpClientPort):
        self._http = http_client

    async def __aenter__(self) -> "VaultClient":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._http.__aexit__(exc_type, exc_val, exc_tb)
        return False

    async def close(self) -> None:
        await self._http.close()

    async def create_otp(self) -> str:
        """Create a one-time password authorising a single vault write."""
        otp = await self._http.request("otp", method="POST")
        return _field(otp, "id", "otp")

    async def vault_pan(self, pan: str) -> str:
        """Store a card number and return a temporary token standing in for it.

        Three calls: a fresh OTP, the PAN write authorised by it, then the
        exchange of the stored PAN's id and key for a temporary `panToken`.
        """
        if not isinstance(pan, str):
            raise TypeError('"pan" must be a string.')
        otp = await self.create_otp()
        stored = await self._http.request(
            "pan", method="POST", body={"otp": otp, "pan": pan}
        )
        temporary = await self._http.request(
            "pan/temporary",
            method="POST",
            body={"panId": _field(stored, "id", "pan"), "key": _field(stored, "key", "pan")},
        )
        logger.debug("[vault] pan stored, temporary token issued")
        return _field(temporary, "panToken", "pan/temporary")


def _field(body: Any, key: str, path: str) -> Any:
    if not isinstance(body, dict) or key not in body:
        raise ApiError(f"Vault response from {path} has no {key!r}", status=502, body=body)
    return body[key]
