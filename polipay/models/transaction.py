"""SQLAlchemy models for locally tracked POLi transactions."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class PaymentTransaction(Base):
    """
    A payment attempt started through POLi.

    Created when a transaction is initiated. The gateway fields
    (status_code, amount_paid, transaction_ref_no) are only ever written
    from a verified GetTransaction record, never from callback params.
    """

    __tablename__ = "payment_transactions"

    id = Column(String(12), primary_key=True, default=_new_id)
    merchant_reference = Column(String(100), nullable=False, unique=True, index=True)
    amount = Column(String(20), nullable=False)  # two-decimal string as sent to POLi
    currency = Column(String(3), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    navigate_url = Column(Text, nullable=True)

    # From the verified transaction record
    transaction_ref_no = Column(String(50), nullable=True)
    status_code = Column(String(40), nullable=True)
    amount_paid = Column(String(20), nullable=True)
    error_message = Column(Text, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class AuditLog(Base):
    """
    Immutable audit trail entry.

    Every initiation attempt, callback and verification outcome gets an
    entry. These are append-only and never modified.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(
        String(12), ForeignKey("payment_transactions.id"), nullable=True, index=True
    )
    merchant_reference = Column(String(100), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=_utcnow)
