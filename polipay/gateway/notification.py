"""
Verification of POLi callbacks.

Inbound nudges and browser returns only carry a token. Everything else is
read from GetTransaction, so a forged callback can at most trigger a query
for someone else's token, which the gateway rejects.

POLi nudges post the token as ``Token``; browser redirects use ``token``.
"""

from collections.abc import Mapping
from typing import Any, Optional, Union
from urllib.parse import parse_qsl

from polipay.gateway.client import Credentials
from polipay.gateway.interfaces import QueryTransaction, TransactionRecord
from polipay.models.enums import TransactionStatus

TOKEN_KEYS = ("Token", "token")


def extract_token(params: Mapping[str, Any]) -> str:
    for key in TOKEN_KEYS:
        if key in params:
            return params[key]
    raise ValueError("Callback parameters did not include a token")


class Notification:
    """
    A callback whose outcome has been confirmed with the gateway.

    Instances are only produced by ``verify``, which queries POLi before
    returning; accessors read the fetched record, never the inbound params.
    """

    def __init__(self, token: str, record: TransactionRecord):
        self._token = token
        self._record = record

    @classmethod
    async def verify(
        cls,
        params: Mapping[str, Any],
        credentials: Credentials,
        **client_kwargs: Any,
    ) -> "Notification":
        """
        Read the token from the callback and fetch the transaction it refers to.

        Raises:
            ValueError: No token in params, or the token is blank.
            QueryError: The gateway rejected the token.
        """
        token = extract_token(params)
        record = await QueryTransaction(credentials, **client_kwargs).query(token)
        return cls(token, record)

    @property
    def token(self) -> str:
        return self._token

    @property
    def record(self) -> TransactionRecord:
        return self._record

    def acknowledge(self) -> bool:
        # the record came straight from POLi
        return True

    def is_complete(self) -> bool:
        return self._record.get("TransactionStatusCode") == TransactionStatus.COMPLETED.value

    def is_success(self) -> bool:
        gross = self.gross_amount()
        return self.is_complete() and gross is not None and gross > 0

    def status(self) -> Optional[str]:
        return self._record.get("TransactionStatusCode")

    def gross_amount(self):
        return self._record.get("AmountPaid")

    def currency(self) -> Optional[str]:
        return self._record.get("CurrencyCode")

    def order_id(self) -> Optional[str]:
        return self._record.get("MerchantReference")

    def transaction_id(self) -> Optional[str]:
        return self._record.get("TransactionRefNo")

    def failure_message(self) -> Optional[str]:
        # only populated when the transaction failed
        return self._record.get("ErrorMessage")


class Return:
    """Browser return from the POLi payment page, backed by a verified notification."""

    def __init__(self, notification: Notification):
        self.notification = notification

    @classmethod
    async def verify(
        cls,
        query: Union[str, Mapping[str, Any]],
        credentials: Credentials,
        **client_kwargs: Any,
    ) -> "Return":
        params = dict(parse_qsl(query.lstrip("?"))) if isinstance(query, str) else query
        return cls(await Notification.verify(params, credentials, **client_kwargs))

    def is_success(self) -> bool:
        return self.notification.is_success()

    def message(self) -> Optional[str]:
        return self.notification.failure_message()


async def notification(
    params: Mapping[str, Any], credentials: Credentials, **client_kwargs: Any
) -> Notification:
    return await Notification.verify(params, credentials, **client_kwargs)


async def return_(
    query: Union[str, Mapping[str, Any]], credentials: Credentials, **client_kwargs: Any
) -> Return:
    return await Return.verify(query, credentials, **client_kwargs)
