"""Shared test fixtures."""

from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from polipay.gateway.client import BASE_URL, Credentials
from polipay.database import init_db


class FakeGateway:
    """
    Stand-in for the POLi API behind an httpx.MockTransport.

    Responses are registered per endpoint path (without the /api prefix);
    every request that reaches the transport is recorded.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: dict[str, dict[str, Any]] = {}
        self._failure: Optional[type[httpx.TransportError]] = None

    def respond(self, path: str, status: int = 200, json: Any = None, text: Optional[str] = None):
        if text is not None:
            self._responses[path] = {"status_code": status, "text": text}
        else:
            self._responses[path] = {"status_code": status, "json": json}

    def fail_with(self, exc_type: type[httpx.TransportError]):
        self._failure = exc_type

    def recover(self):
        self._failure = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._failure is not None:
            raise self._failure("connection refused", request=request)
        path = request.url.path.removeprefix("/api")
        if path not in self._responses:
            return httpx.Response(404, json={"Success": False, "Message": "No such endpoint"})
        return httpx.Response(**self._responses[path])

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(login="SS64006543", password="s3cr3t")


@pytest.fixture
def client_options(gateway: FakeGateway) -> dict[str, Any]:
    return {"base_url": BASE_URL, "transport": gateway.transport}


@pytest.fixture
def completed_record() -> dict[str, Any]:
    return {
        "TransactionRefNo": "996117408041",
        "MerchantReference": "ORDER-1001",
        "CurrencyCode": "AUD",
        "AmountPaid": 100,
        "PaymentAmount": 100,
        "TransactionStatusCode": "Completed",
        "ErrorCode": None,
        "ErrorMessage": None,
    }


@pytest_asyncio.fixture
async def db_session():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    await init_db(engine)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
