from polipay.models.enums import Currency, EndpointKind, LocalStatus, TransactionStatus
from polipay.models.transaction import AuditLog, Base, PaymentTransaction

__all__ = [
    "Base",
    "PaymentTransaction",
    "AuditLog",
    "Currency",
    "EndpointKind",
    "LocalStatus",
    "TransactionStatus",
]
