from polipay.gateway.client import BASE_URL, Credentials, GatewayClient, build_auth_header
from polipay.gateway.errors import (
    ERROR_CODES,
    FinancialInstitutionsError,
    GatewayDecodeError,
    GatewayError,
    GatewayTransportError,
    InitiateError,
    QueryError,
    RequestError,
    error_code_text,
)
from polipay.gateway.helper import TransactionFieldBuilder, format_amount
from polipay.gateway.interfaces import (
    FinancialInstitution,
    InitiateTransaction,
    ListFinancialInstitutions,
    QueryTransaction,
)
from polipay.gateway.notification import Notification, Return, notification, return_
from polipay.gateway.signing import sign

__all__ = [
    "BASE_URL",
    "Credentials",
    "ERROR_CODES",
    "FinancialInstitution",
    "FinancialInstitutionsError",
    "GatewayClient",
    "GatewayDecodeError",
    "GatewayError",
    "GatewayTransportError",
    "InitiateError",
    "InitiateTransaction",
    "ListFinancialInstitutions",
    "Notification",
    "QueryError",
    "QueryTransaction",
    "RequestError",
    "Return",
    "TransactionFieldBuilder",
    "build_auth_header",
    "error_code_text",
    "format_amount",
    "notification",
    "return_",
    "sign",
]
