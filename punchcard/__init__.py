"""
Waffle Punch Card Ledger

This package provides:
- Customer punch cards keyed by 10-digit phone number
- Punch, reward-ready and redemption lifecycle
- Durable local storage of the whole customer mapping
- Best-effort mirroring to a remote customers table
"""

from .errors import (
    LoyaltyError,
    InvalidPhoneError,
    InvalidNameError,
    DuplicateCustomerError,
    CustomerNotFoundError,
    NotEligibleError,
    RemoteUnavailableError,
)
from .models import (
    ConnectionState,
    CustomerRecord,
    VisitEntry,
    PunchCard,
)
from .store import LedgerStore
from .sync import SyncClient
from .service import LoyaltyService

__all__ = [
    "LoyaltyError",
    "InvalidPhoneError",
    "InvalidNameError",
    "DuplicateCustomerError",
    "CustomerNotFoundError",
    "NotEligibleError",
    "RemoteUnavailableError",
    "ConnectionState",
    "CustomerRecord",
    "VisitEntry",
    "PunchCard",
    "LedgerStore",
    "SyncClient",
    "LoyaltyService",
]
