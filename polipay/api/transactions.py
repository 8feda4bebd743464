"""
Transaction endpoints.

POST /transactions                         — Initiate a POLi transaction, return the navigation URL.
POST /transactions/notify                  — POLi server-to-server nudge (form field ``Token``).
GET  /transactions/return                  — Payer returning from POLi (query param ``token``).
GET  /transactions/{merchant_reference}/trace — Transaction plus its audit trail.

Callback outcomes are always taken from GetTransaction; the inbound
parameters are used for the token and nothing else.
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from polipay.api.dependencies import get_client_options, get_credentials
from polipay.audit.logger import log_event
from polipay.config import settings
from polipay.database import get_session
from polipay.gateway.client import Credentials
from polipay.gateway.errors import (
    GatewayDecodeError,
    GatewayError,
    GatewayTransportError,
    RequestError,
)
from polipay.gateway.helper import TransactionFieldBuilder
from polipay.gateway.notification import Notification, Return
from polipay.models.enums import Currency, LocalStatus
from polipay.models.transaction import AuditLog, PaymentTransaction

logger = logging.getLogger("polipay.api")

router = APIRouter(prefix="/transactions", tags=["transactions"])


class InitiateRequest(BaseModel):
    merchant_reference: str
    amount: Decimal
    currency: Currency = Currency.AUD


class InitiateResponse(BaseModel):
    id: str
    merchant_reference: str
    amount: str
    currency: str
    status: str
    navigate_url: str


class VerifiedOutcome(BaseModel):
    merchant_reference: Optional[str]
    transaction_ref_no: Optional[str]
    status_code: Optional[str]
    complete: bool
    success: bool
    amount_paid: Optional[float]
    currency: Optional[str]
    message: Optional[str]


class TransactionDetail(BaseModel):
    id: str
    merchant_reference: str
    amount: str
    currency: str
    status: str
    transaction_ref_no: Optional[str]
    status_code: Optional[str]
    amount_paid: Optional[str]
    error_message: Optional[str]
    verified_at: Optional[str]
    created_at: Optional[str]


class AuditEntry(BaseModel):
    id: int
    action: str
    details: Optional[dict] = None
    timestamp: Optional[str]


class TransactionTrace(BaseModel):
    transaction: TransactionDetail
    audit_trail: list[AuditEntry]


def _gateway_http_error(e: GatewayError) -> HTTPException:
    """Map gateway failures onto HTTP statuses for our own callers."""
    if isinstance(e, GatewayTransportError):
        return HTTPException(status_code=503, detail="Payment gateway unavailable")
    if isinstance(e, RequestError):
        return HTTPException(
            status_code=502,
            detail={
                "error_code": e.error_code,
                "error_code_text": e.error_code_text,
                "message": e.error_message or e.message,
            },
        )
    return HTTPException(status_code=502, detail=str(e))


def _duplicate(merchant_reference: str) -> HTTPException:
    return HTTPException(status_code=409, detail=f"Transaction already exists: {merchant_reference}")


def _outcome(notification: Notification) -> VerifiedOutcome:
    gross = notification.gross_amount()
    return VerifiedOutcome(
        merchant_reference=notification.order_id(),
        transaction_ref_no=notification.transaction_id(),
        status_code=notification.status(),
        complete=notification.is_complete(),
        success=notification.is_success(),
        amount_paid=float(gross) if gross is not None else None,
        currency=notification.currency(),
        message=notification.failure_message(),
    )


def _transaction_to_detail(t: PaymentTransaction) -> TransactionDetail:
    return TransactionDetail(
        id=t.id,
        merchant_reference=t.merchant_reference,
        amount=t.amount,
        currency=t.currency,
        status=t.status,
        transaction_ref_no=t.transaction_ref_no,
        status_code=t.status_code,
        amount_paid=t.amount_paid,
        error_message=t.error_message,
        verified_at=t.verified_at.isoformat() if t.verified_at else None,
        created_at=t.created_at.isoformat() if t.created_at else None,
    )


async def _find_by_reference(
    session: AsyncSession, merchant_reference: Optional[str]
) -> Optional[PaymentTransaction]:
    if not merchant_reference:
        return None
    result = await session.execute(
        select(PaymentTransaction).where(PaymentTransaction.merchant_reference == merchant_reference)
    )
    return result.scalars().first()


async def _record_verification(
    session: AsyncSession, notification: Notification, source: str
) -> None:
    """Apply a verified record to the local transaction and audit it."""
    transaction = await _find_by_reference(session, notification.order_id())
    details = {
        "source": source,
        "status_code": notification.status(),
        "amount_paid": notification.gross_amount(),
        "currency": notification.currency(),
        "transaction_ref_no": notification.transaction_id(),
    }

    if transaction is None:
        logger.warning(
            "Verified POLi transaction %s for unknown merchant reference %s",
            notification.transaction_id(),
            notification.order_id(),
        )
        await log_event(
            session, "verified_unknown_reference",
            merchant_reference=notification.order_id(), details=details,
        )
        await session.commit()
        return

    gross = notification.gross_amount()
    transaction.status_code = notification.status()
    transaction.transaction_ref_no = notification.transaction_id()
    transaction.amount_paid = str(gross) if gross is not None else None
    transaction.error_message = notification.failure_message()
    transaction.status = (
        LocalStatus.COMPLETED.value if notification.is_success() else LocalStatus.INCOMPLETE.value
    )
    transaction.verified_at = datetime.now(timezone.utc)

    await log_event(
        session, "verified",
        merchant_reference=transaction.merchant_reference,
        transaction_id=transaction.id,
        details={**details, "success": notification.is_success()},
    )
    await session.commit()


@router.post("", response_model=InitiateResponse, status_code=201)
async def initiate_transaction(
    body: InitiateRequest,
    session: AsyncSession = Depends(get_session),
    credentials: Credentials = Depends(get_credentials),
    client_options: dict[str, Any] = Depends(get_client_options),
):
    """
    Initiate a POLi transaction and return the URL to redirect the payer to.

    Input is validated before anything is sent to the gateway. Each merchant
    reference can only be initiated once; a reference whose earlier attempt
    failed may be initiated again.
    """
    try:
        builder = TransactionFieldBuilder(
            body.merchant_reference,
            credentials.login,
            password=credentials.password,
            amount=body.amount,
            currency=body.currency.value,
            notify_url=settings.notification_url,
            homepage_url=settings.merchant_homepage_url,
            return_url=settings.return_url,
            timeout=settings.transaction_timeout,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    fields = builder.form_fields
    transaction = await _find_by_reference(session, body.merchant_reference)
    if transaction is None:
        transaction = PaymentTransaction(merchant_reference=body.merchant_reference)
        session.add(transaction)
    elif transaction.status != LocalStatus.INITIATE_FAILED.value:
        raise _duplicate(body.merchant_reference)

    transaction.amount = fields["Amount"]
    transaction.currency = fields["CurrencyCode"]
    transaction.status = LocalStatus.PENDING.value
    transaction.error_message = None
    try:
        await session.flush()
    except IntegrityError:
        # lost a race with another request for the same reference
        await session.rollback()
        raise _duplicate(body.merchant_reference)

    try:
        navigate_url = await builder.credential_based_url(**client_options)
    except RequestError as e:
        transaction.status = LocalStatus.INITIATE_FAILED.value
        transaction.error_message = e.error_message or e.message
        await log_event(
            session, "initiate_rejected",
            merchant_reference=transaction.merchant_reference,
            transaction_id=transaction.id,
            details={
                "error_code": e.error_code,
                "error_code_text": e.error_code_text,
                "status_code": e.status_code,
            },
        )
        await session.commit()
        raise _gateway_http_error(e)
    except (GatewayTransportError, GatewayDecodeError) as e:
        transaction.status = LocalStatus.INITIATE_FAILED.value
        transaction.error_message = str(e)
        await log_event(
            session, "initiate_failed",
            merchant_reference=transaction.merchant_reference,
            transaction_id=transaction.id,
            details={"error": str(e), "retriable": e.retriable},
        )
        await session.commit()
        raise _gateway_http_error(e)

    transaction.status = LocalStatus.INITIATED.value
    transaction.navigate_url = navigate_url
    await log_event(
        session, "initiated",
        merchant_reference=transaction.merchant_reference,
        transaction_id=transaction.id,
        details={"amount": transaction.amount, "currency": transaction.currency},
    )
    await session.commit()

    return InitiateResponse(
        id=transaction.id,
        merchant_reference=transaction.merchant_reference,
        amount=transaction.amount,
        currency=transaction.currency,
        status=transaction.status,
        navigate_url=navigate_url,
    )


@router.post("/notify")
async def receive_notification(
    request: Request,
    session: AsyncSession = Depends(get_session),
    credentials: Credentials = Depends(get_credentials),
    client_options: dict[str, Any] = Depends(get_client_options),
):
    """
    Handle the POLi nudge.

    The body is form-encoded and carries ``Token``; the outcome is fetched
    from the gateway before anything is recorded.
    """
    raw = (await request.body()).decode("utf-8", errors="replace")
    params = {**dict(request.query_params), **dict(parse_qsl(raw))}

    try:
        notification = await Notification.verify(params, credentials, **client_options)
    except GatewayError as e:
        raise _gateway_http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await _record_verification(session, notification, source="nudge")
    return {"acknowledged": notification.acknowledge()}


@router.get("/return", response_model=VerifiedOutcome)
async def payer_return(
    request: Request,
    session: AsyncSession = Depends(get_session),
    credentials: Credentials = Depends(get_credentials),
    client_options: dict[str, Any] = Depends(get_client_options),
):
    """Verify the payer's return from POLi and report the outcome."""
    try:
        verified = await Return.verify(request.url.query, credentials, **client_options)
    except GatewayError as e:
        raise _gateway_http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await _record_verification(session, verified.notification, source="return")
    return _outcome(verified.notification)


@router.get("/{merchant_reference}/trace", response_model=TransactionTrace)
async def get_transaction_trace(
    merchant_reference: str, session: AsyncSession = Depends(get_session)
):
    """Transaction details plus every audit entry, oldest first."""
    transaction = await _find_by_reference(session, merchant_reference)
    if not transaction:
        raise HTTPException(status_code=404, detail=f"Transaction not found: {merchant_reference}")

    result = await session.execute(
        select(AuditLog)
        .where(AuditLog.merchant_reference == merchant_reference)
        .order_by(AuditLog.timestamp.asc(), AuditLog.id.asc())
    )

    audit_trail = []
    for log in result.scalars().all():
        details = None
        if log.details:
            try:
                details = json.loads(log.details)
            except (json.JSONDecodeError, TypeError):
                details = {"raw": log.details}

        audit_trail.append(AuditEntry(
            id=log.id,
            action=log.action,
            details=details,
            timestamp=log.timestamp.isoformat() if log.timestamp else None,
        ))

    return TransactionTrace(
        transaction=_transaction_to_detail(transaction),
        audit_trail=audit_trail,
    )
