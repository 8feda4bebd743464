"""
Financial institution lookup.

GET /financial-institutions — Banks available on the POLi payment page.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from polipay.api.dependencies import get_client_options, get_credentials
from polipay.gateway.client import Credentials
from polipay.gateway.errors import GatewayDecodeError, GatewayTransportError, RequestError
from polipay.gateway.interfaces import ListFinancialInstitutions

router = APIRouter(prefix="/financial-institutions", tags=["financial-institutions"])


class FinancialInstitutionOut(BaseModel):
    name: str
    code: str
    online: bool


@router.get("", response_model=list[FinancialInstitutionOut])
async def list_financial_institutions(
    credentials: Credentials = Depends(get_credentials),
    client_options: dict[str, Any] = Depends(get_client_options),
):
    """List the financial institutions payers can choose from."""
    try:
        institutions = await ListFinancialInstitutions(credentials, **client_options).list()
    except GatewayTransportError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except (RequestError, GatewayDecodeError) as e:
        raise HTTPException(status_code=502, detail=str(e))

    return [
        FinancialInstitutionOut(name=fi.name, code=fi.code, online=fi.online)
        for fi in institutions
    ]
