"""
POLi endpoint interfaces.

  POST /Transaction/Initiate            -> navigation URL
  GET  /Transaction/GetTransaction      -> transaction record
  GET  /Entity/GetFinancialInstitutions -> financial institutions

See http://www.polipaymentdeveloper.com for the response formats.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from polipay.gateway.client import GatewayClient
from polipay.gateway.errors import (
    FinancialInstitutionsError,
    GatewayDecodeError,
    InitiateError,
    QueryError,
)

logger = logging.getLogger("polipay.gateway")

TransactionRecord = Mapping[str, Any]


@dataclass(frozen=True)
class FinancialInstitution:
    """A bank the payer can choose on the POLi payment page."""

    name: str
    code: str
    online: bool

    @classmethod
    def from_payload(cls, attrs: Mapping[str, Any]) -> "FinancialInstitution":
        try:
            return cls(
                name=attrs["Name"],
                code=attrs["Code"],
                online=bool(attrs["Online"]),
            )
        except (KeyError, TypeError) as e:
            raise GatewayDecodeError(f"Malformed financial institution entry: {attrs!r}") from e


class InitiateTransaction(GatewayClient):
    error_class = InitiateError
    path = "/Transaction/Initiate"

    async def initiate(self, fields: Mapping[str, str]) -> str:
        """Start a transaction and return the URL to redirect the payer to."""
        result = await self.request("POST", self.path, body=dict(fields))
        if not isinstance(result, dict) or not result.get("NavigateURL"):
            raise GatewayDecodeError("Initiate response did not include a NavigateURL")

        logger.info(
            "Initiated POLi transaction ref=%s for merchant reference %s",
            result.get("TransactionRefNo", "-"),
            fields.get("MerchantReference", "-"),
        )
        return result["NavigateURL"]


class QueryTransaction(GatewayClient):
    error_class = QueryError
    path = "/Transaction/GetTransaction"

    async def query(self, token: str) -> TransactionRecord:
        """
        Fetch the authoritative transaction record for a token.

        Raises:
            ValueError: Token is blank (no request is sent).
            QueryError: Gateway rejected the token.
        """
        if not token or not str(token).strip():
            raise ValueError("Token must be specified")

        result = await self.request("GET", self.path, params={"token": token})
        if not isinstance(result, dict):
            raise GatewayDecodeError("GetTransaction response was not a JSON object")
        return MappingProxyType(result)


class ListFinancialInstitutions(GatewayClient):
    error_class = FinancialInstitutionsError
    path = "/Entity/GetFinancialInstitutions"

    async def list(self) -> list[FinancialInstitution]:
        result = await self.request("GET", self.path)
        if not isinstance(result, list):
            raise GatewayDecodeError("GetFinancialInstitutions response was not a JSON array")
        return [FinancialInstitution.from_payload(attrs) for attrs in result]
