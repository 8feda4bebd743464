"""
Authenticated transport to the POLi web services API.

Every endpoint shares the same contract: JSON in, JSON out, Basic auth built
from the merchant login and password. HTTP error responses are decoded into
the caller's typed RequestError; network failures surface separately as
GatewayTransportError so callers can tell "rejected" from "unreachable".
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from polipay.gateway.errors import GatewayDecodeError, GatewayTransportError, RequestError

logger = logging.getLogger("polipay.gateway")

BASE_URL = "https://poliapi.apac.paywithpoli.com/api"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class Credentials:
    """Merchant login pair. The password never appears in repr or logs."""

    login: str
    password: str = field(repr=False)


def build_auth_header(login: str, password: str) -> str:
    token = base64.b64encode(f"{login}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class GatewayClient:
    """
    Base class for the POLi endpoint interfaces.

    Holds credentials and connection options only; nothing is mutated after
    construction, so one instance can serve concurrent calls.
    """

    error_class: type[RequestError] = RequestError

    def __init__(
        self,
        credentials: Credentials,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._credentials = credentials
        self._base_url = (base_url or BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def standard_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": build_auth_header(self._credentials.login, self._credentials.password),
        }

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, str]] = None,
        body: Optional[Any] = None,
    ) -> Any:
        """
        Send a request to the gateway and return the decoded JSON body.

        Raises:
            RequestError: Gateway answered with an HTTP error (subclass per endpoint).
            GatewayDecodeError: Body was not valid JSON.
            GatewayTransportError: Connection, read or timeout failure.
        """
        url = f"{self._base_url}{path}"
        content = json.dumps(body) if body is not None else None

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    content=content,
                    headers=self.standard_headers,
                )
        except httpx.TransportError as e:
            logger.error("POLi %s %s failed: %s", method, path, e)
            raise GatewayTransportError(f"Could not reach POLi gateway: {e}") from e

        logger.debug("POLi %s %s -> %d", method, path, response.status_code)

        if response.is_error:
            payload = self._decode(response)
            if not isinstance(payload, dict):
                raise GatewayDecodeError(
                    f"Unexpected error body from {path} (HTTP {response.status_code})"
                )
            error = self.error_class(payload, response.status_code)
            logger.warning(
                "POLi rejected %s %s: HTTP %d code=%s %s",
                method,
                path,
                response.status_code,
                error.error_code,
                error.error_code_text or error.error_message or "",
            )
            raise error

        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise GatewayDecodeError(
                f"Invalid JSON from POLi (HTTP {response.status_code}): {response.text[:200]}"
            ) from e
