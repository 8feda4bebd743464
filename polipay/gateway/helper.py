"""
Outbound field set for /Transaction/Initiate.

Validates the merchant reference, currency and amount up front so bad input
fails before any request is made, and fills the callback URLs the gateway
requires. Amounts are rounded half-up to two decimals.
"""

import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from polipay.gateway.client import Credentials
from polipay.gateway.interfaces import InitiateTransaction
from polipay.models.enums import Currency

SUPPORTED_CURRENCIES = {c.value for c in Currency}

ORDER_PATTERN = re.compile(r"[A-Za-z0-9_.:?/\-|]+")

CENTS = Decimal("0.01")

FIELD_MAPPINGS = {
    "order": "MerchantReference",
    "amount": "Amount",
    "currency": "CurrencyCode",
    "notify_url": "NotificationUrl",
}


def check_order(order: str) -> None:
    if not isinstance(order, str) or not ORDER_PATTERN.fullmatch(order):
        raise ValueError(
            "order not valid format, must only include alphanumeric, "
            "underscore (_), period (.), colon (:), question mark (?), "
            "forward slash (/), hyphen (-) or pipe (|)"
        )


def format_amount(value: Union[Decimal, float, int, str]) -> str:
    """Format an amount as a fixed two-decimal string (10 -> "10.00", 10.005 -> "10.01")."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return str(amount.quantize(CENTS, rounding=ROUND_HALF_UP))


def current_time_utc(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")


class TransactionFieldBuilder:
    """
    Builds the field set for initiating a POLi transaction.

    Success, failure and cancellation URLs fall back to return_url when not
    given individually. The homepage and notification URLs are mandatory.
    """

    def __init__(
        self,
        order: str,
        login: str,
        *,
        password: str,
        amount: Union[Decimal, float, int, str],
        currency: str,
        notify_url: str,
        homepage_url: str,
        return_url: Optional[str] = None,
        success_url: Optional[str] = None,
        failure_url: Optional[str] = None,
        cancellation_url: Optional[str] = None,
        timeout: Optional[int] = None,
        now: Optional[datetime] = None,
    ):
        check_order(order)
        self._credentials = Credentials(login=login, password=password)
        self._fields: dict[str, str] = {}

        self.add_field(FIELD_MAPPINGS["order"], order)
        self.set_amount(amount)
        self.set_currency(currency)
        self.add_field(FIELD_MAPPINGS["notify_url"], _require(notify_url, "notify_url"))
        self.add_field("MerchantDateTime", current_time_utc(now))
        if timeout is not None:
            self.add_field("Timeout", str(timeout))
        self.add_field("SuccessUrl", _require(success_url or return_url, "success_url or return_url"))
        self.add_field("FailureUrl", _require(failure_url or return_url, "failure_url or return_url"))
        self.add_field(
            "CancellationUrl",
            _require(cancellation_url or return_url, "cancellation_url or return_url"),
        )
        self.add_field("MerchantHomepageURL", _require(homepage_url, "homepage_url"))

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def form_fields(self) -> dict[str, str]:
        return dict(self._fields)

    def add_field(self, name: str, value: str) -> None:
        self._fields[name] = value

    def set_currency(self, code: str) -> None:
        if code not in SUPPORTED_CURRENCIES:
            raise ValueError("Unsupported currency")
        self.add_field(FIELD_MAPPINGS["currency"], code)

    def set_amount(self, value: Union[Decimal, float, int, str]) -> None:
        self.add_field(FIELD_MAPPINGS["amount"], format_amount(value))

    async def credential_based_url(self, **client_kwargs) -> str:
        """Initiate the transaction with the builder's credentials and return the navigation URL."""
        interface = InitiateTransaction(self._credentials, **client_kwargs)
        return await interface.initiate(self.form_fields)


def _require(value: Optional[str], name: str) -> str:
    if not value:
        raise ValueError(f"{name} must be specified")
    return value
