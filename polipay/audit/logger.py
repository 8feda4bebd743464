"""
Immutable audit trail for gateway interactions.

Every initiation, callback and verification gets an append-only entry with:
  - Merchant reference (which order it relates to)
  - Action (what happened)
  - Details (gateway error codes, verified status, amounts)
  - Timestamp (UTC)

Credentials and raw callback bodies are never written here.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from polipay.models.transaction import AuditLog

logger = logging.getLogger("polipay.audit")


async def log_event(
    session: AsyncSession,
    action: str,
    merchant_reference: Optional[str] = None,
    transaction_id: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """
    Create an immutable audit log entry.

    Args:
        session: Database session.
        action: What happened (e.g. "initiated", "initiate_rejected", "verified").
        merchant_reference: The order this event relates to.
        transaction_id: Local PaymentTransaction id, when one exists.
        details: Arbitrary context (serialized to JSON).

    Returns:
        The created AuditLog record.
    """
    entry = AuditLog(
        merchant_reference=merchant_reference,
        transaction_id=transaction_id,
        action=action,
        details=json.dumps(details, default=str) if details else None,
        timestamp=datetime.now(timezone.utc),
    )
    session.add(entry)
    logger.info(
        "AUDIT | ref=%s action=%s | %s",
        merchant_reference or "-",
        action,
        json.dumps(details, default=str)[:200] if details else "",
    )
    return entry
