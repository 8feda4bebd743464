"""
Gateway error types and the POLi error-code taxonomy.

Error codes are documented per endpoint in the POLi Web Services MIG.
Lookups go through a static table keyed by endpoint kind; an unknown code
resolves to None rather than raising.

Categories:
  - RequestError: the gateway answered with an HTTP error and a JSON body.
  - GatewayDecodeError: a response body was not the JSON we expected.
  - GatewayTransportError: the gateway could not be reached at all.
"""

from typing import Any, Optional

from polipay.models.enums import EndpointKind

INITIATE_ERRORS = {
    "14050": "A transaction-specific error has occurred",
    "14053": "The amount specified exceeds the individual transaction limit set by the merchant",
    "14054": "The amount specified will cause the daily transaction limit to be exceeded",
    "14055": "General failure to initiate a transaction",
    "14056": "Error in merchant-defined data",
    "14057": "One or more values specified have failed a validation check",
    "14058": "The monetary amount specified is invalid",
    "14059": "A URL provided for one or more fields was not formatted correctly",
    "14060": "The currency code supplied is not supported by POLi or the specific merchant",
    "14061": "The MerchantReference field contains invalid characters",
    "14062": "One or more fields that are mandatory did not have values specified",
    "14099": "An unexpected error has occurred within transaction functionality",
}

QUERY_ERRORS = {
    "14050": "Transaction was initiated by another merchant or another transaction-based error",
    "14051": "The transaction was not found",
    "14052": "The token provided was incomplete, corrupted or doesn't exist",
}

ERROR_CODES: dict[EndpointKind, dict[str, str]] = {
    EndpointKind.INITIATE: INITIATE_ERRORS,
    EndpointKind.QUERY: QUERY_ERRORS,
}


def error_code_text(kind: EndpointKind, code: Any) -> Optional[str]:
    """Resolve a gateway error code to its documented meaning, or None."""
    if code is None:
        return None
    return ERROR_CODES.get(kind, {}).get(str(code))


class GatewayError(Exception):
    """Base exception for everything raised while talking to POLi."""

    retriable = False


class GatewayTransportError(GatewayError):
    """Network-level failure: the request never got a gateway response."""

    retriable = True


class GatewayDecodeError(GatewayError):
    """Response body was not valid JSON or lacked a required key."""


class RequestError(GatewayError):
    """
    The gateway rejected a request with an HTTP error status.

    Built from the decoded error body (Success, Message, ErrorMessage,
    ErrorCode). Subclasses pin the endpoint kind used for code lookups.
    """

    kind: Optional[EndpointKind] = None

    def __init__(self, body: dict[str, Any], status_code: int):
        self.response = body
        self.status_code = status_code
        self.success = bool(body.get("Success"))
        self.message = body.get("Message")
        self.error_message = body.get("ErrorMessage")
        self.error_code = body.get("ErrorCode")
        super().__init__(
            self.error_message or self.message or f"Gateway returned HTTP {status_code}"
        )

    @property
    def error_code_text(self) -> Optional[str]:
        if self.kind is None:
            return None
        return error_code_text(self.kind, self.error_code)


class InitiateError(RequestError):
    """Failure reported by /Transaction/Initiate."""

    kind = EndpointKind.INITIATE


class QueryError(RequestError):
    """Failure reported by /Transaction/GetTransaction."""

    kind = EndpointKind.QUERY


class FinancialInstitutionsError(RequestError):
    """Failure reported by /Entity/GetFinancialInstitutions."""

    kind = EndpointKind.FINANCIAL_INSTITUTIONS
