"""Enumerations for the POLi gateway domain model."""

from enum import Enum


class EndpointKind(str, Enum):
    """Gateway endpoints, each with its own error-code table."""

    INITIATE = "initiate"
    QUERY = "query"
    FINANCIAL_INSTITUTIONS = "financial_institutions"


class Currency(str, Enum):
    """Currencies accepted by POLi."""

    AUD = "AUD"
    NZD = "NZD"


class TransactionStatus(str, Enum):
    """TransactionStatusCode values reported by GetTransaction."""

    INITIATED = "Initiated"
    FINANCIAL_INSTITUTION_SELECTED = "FinancialInstitutionSelected"
    EULA_ACCEPTED = "EULAAccepted"
    IN_PROCESS = "InProcess"
    UNKNOWN = "Unknown"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    FAILED = "Failed"
    RECEIPT_UNVERIFIED = "ReceiptUnverified"
    TIMED_OUT = "TimedOut"


class LocalStatus(str, Enum):
    """Lifecycle of a locally tracked payment transaction."""

    PENDING = "pending"
    INITIATED = "initiated"
    INITIATE_FAILED = "initiate_failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
