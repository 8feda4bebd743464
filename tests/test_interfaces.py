"""Tests for the initiate, query and financial institution interfaces."""

import json

import pytest

from polipay.gateway.errors import (
    FinancialInstitutionsError,
    GatewayDecodeError,
    InitiateError,
    QueryError,
)
from polipay.gateway.interfaces import (
    FinancialInstitution,
    InitiateTransaction,
    ListFinancialInstitutions,
    QueryTransaction,
)

FIELDS = {
    "MerchantReference": "ORDER-1001",
    "Amount": "10.00",
    "CurrencyCode": "AUD",
}


class TestInitiate:
    @pytest.mark.asyncio
    async def test_returns_navigate_url(self, gateway, credentials, client_options):
        gateway.respond(
            "/Transaction/Initiate",
            json={
                "Success": True,
                "NavigateURL": "https://txn.apac.paywithpoli.com/?Token=abc",
                "TransactionRefNo": "996117408041",
            },
        )

        url = await InitiateTransaction(credentials, **client_options).initiate(FIELDS)

        assert url == "https://txn.apac.paywithpoli.com/?Token=abc"
        sent = gateway.requests[0]
        assert sent.method == "POST"
        assert sent.url.path == "/api/Transaction/Initiate"
        assert json.loads(sent.content) == FIELDS

    @pytest.mark.asyncio
    async def test_missing_navigate_url_is_decode_error(self, gateway, credentials, client_options):
        gateway.respond("/Transaction/Initiate", json={"Success": True})

        with pytest.raises(GatewayDecodeError) as exc_info:
            await InitiateTransaction(credentials, **client_options).initiate(FIELDS)

        assert not isinstance(exc_info.value, ValueError)

    @pytest.mark.asyncio
    async def test_gateway_rejection(self, gateway, credentials, client_options):
        gateway.respond(
            "/Transaction/Initiate",
            status=400,
            json={
                "Success": False,
                "Message": "",
                "ErrorMessage": "Invalid currency",
                "ErrorCode": "14060",
            },
        )

        with pytest.raises(InitiateError) as exc_info:
            await InitiateTransaction(credentials, **client_options).initiate(FIELDS)

        error = exc_info.value
        assert error.success is False
        assert error.error_code_text == (
            "The currency code supplied is not supported by POLi or the specific merchant"
        )


class TestQuery:
    @pytest.mark.asyncio
    async def test_returns_record(self, gateway, credentials, client_options, completed_record):
        gateway.respond("/Transaction/GetTransaction", json=completed_record)

        record = await QueryTransaction(credentials, **client_options).query("tok-123")

        assert record["TransactionStatusCode"] == "Completed"
        assert record["AmountPaid"] == 100

    @pytest.mark.asyncio
    async def test_token_is_url_encoded(self, gateway, credentials, client_options, completed_record):
        gateway.respond("/Transaction/GetTransaction", json=completed_record)

        await QueryTransaction(credentials, **client_options).query("a+b/c=")

        sent = gateway.requests[0]
        assert sent.method == "GET"
        assert sent.url.params["token"] == "a+b/c="

    @pytest.mark.asyncio
    async def test_record_is_read_only(self, gateway, credentials, client_options, completed_record):
        gateway.respond("/Transaction/GetTransaction", json=completed_record)

        record = await QueryTransaction(credentials, **client_options).query("tok-123")

        with pytest.raises(TypeError):
            record["AmountPaid"] = 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "   ", None])
    async def test_blank_token_rejected_without_network(self, gateway, credentials, client_options, token):
        with pytest.raises(ValueError, match="Token must be specified"):
            await QueryTransaction(credentials, **client_options).query(token)

        assert gateway.call_count == 0

    @pytest.mark.asyncio
    async def test_corrupted_token(self, gateway, credentials, client_options):
        gateway.respond(
            "/Transaction/GetTransaction",
            status=400,
            json={"Success": False, "Message": "", "ErrorMessage": "", "ErrorCode": "14052"},
        )

        with pytest.raises(QueryError) as exc_info:
            await QueryTransaction(credentials, **client_options).query("garbage")

        assert exc_info.value.error_code_text == (
            "The token provided was incomplete, corrupted or doesn't exist"
        )

    @pytest.mark.asyncio
    async def test_unknown_error_code_has_no_text(self, gateway, credentials, client_options):
        gateway.respond(
            "/Transaction/GetTransaction",
            status=400,
            json={"Success": False, "ErrorCode": "14999"},
        )

        with pytest.raises(QueryError) as exc_info:
            await QueryTransaction(credentials, **client_options).query("tok")

        assert exc_info.value.error_code_text is None


class TestFinancialInstitutions:
    @pytest.mark.asyncio
    async def test_maps_entries(self, gateway, credentials, client_options):
        gateway.respond(
            "/Entity/GetFinancialInstitutions",
            json=[
                {"Name": "iBank AU 01", "Code": "iBankAU01", "Online": True},
                {"Name": "Westpac", "Code": "WBC", "Online": False},
            ],
        )

        institutions = await ListFinancialInstitutions(credentials, **client_options).list()

        assert institutions == [
            FinancialInstitution(name="iBank AU 01", code="iBankAU01", online=True),
            FinancialInstitution(name="Westpac", code="WBC", online=False),
        ]
        assert gateway.requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_missing_key_is_decode_error(self, gateway, credentials, client_options):
        gateway.respond(
            "/Entity/GetFinancialInstitutions",
            json=[{"Name": "Westpac", "Code": "WBC"}],
        )

        with pytest.raises(GatewayDecodeError):
            await ListFinancialInstitutions(credentials, **client_options).list()

    @pytest.mark.asyncio
    async def test_non_list_response(self, gateway, credentials, client_options):
        gateway.respond("/Entity/GetFinancialInstitutions", json={"Name": "Westpac"})

        with pytest.raises(GatewayDecodeError):
            await ListFinancialInstitutions(credentials, **client_options).list()

    @pytest.mark.asyncio
    async def test_gateway_rejection(self, gateway, credentials, client_options):
        gateway.respond(
            "/Entity/GetFinancialInstitutions",
            status=401,
            json={"Success": False, "Message": "Unauthorized"},
        )

        with pytest.raises(FinancialInstitutionsError):
            await ListFinancialInstitutions(credentials, **client_options).list()
