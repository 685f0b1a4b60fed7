import logging
import re
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional, Union

from pydantic import ValidationError

from .errors import (
    CustomerNotFoundError,
    DuplicateCustomerError,
    InvalidNameError,
    InvalidPhoneError,
    NotEligibleError,
)
from .models import CustomerRecord, VisitEntry
from .storage import InMemoryStorage, JsonFileStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "waffleCustomers"
PHONE_PATTERN = re.compile(r"[0-9]{10}")

Storage = Union[InMemoryStorage, JsonFileStorage]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def is_valid_phone(phone) -> bool:
    return isinstance(phone, str) and PHONE_PATTERN.fullmatch(phone) is not None


class LedgerStore:
    """
    Local ledger of customer punch cards, keyed by phone number.

    The whole mapping is written back to storage on every mutation. Mutations
    work on a copy of the record, so a rejected operation leaves storage as it was.
    """

    def __init__(self, storage: Optional[Storage] = None, clock: Callable[[], date] = utc_today):
        self.storage = storage if storage is not None else InMemoryStorage()
        self.clock = clock

    def lookup(self, phone: str) -> Optional[CustomerRecord]:
        return self._load().get(phone)

    def all(self) -> dict[str, CustomerRecord]:
        return self._load()

    def register(self, phone: str, name: str, email: str = "") -> CustomerRecord:
        if not is_valid_phone(phone):
            raise InvalidPhoneError(f"Phone number must be exactly 10 digits, got {phone!r}")
        name = (name or "").strip()
        if not name:
            raise InvalidNameError("Customer name is required")

        customers = self._load()
        if phone in customers:
            raise DuplicateCustomerError(f"Customer with phone {phone} already exists")

        today = self.clock()
        record = CustomerRecord(
            phone=phone,
            name=name,
            email=(email or "").strip(),
            punches=1,
            has_active_card=True,
            total_visits=1,
            rewards_redeemed=0,
            member_since=today,
            visit_history=[VisitEntry(date=today, punches=1)],
        )
        customers[phone] = record
        self._save(customers)
        logger.debug("Registered customer %s", phone)
        return record

    def add_punch(self, phone: str) -> CustomerRecord:
        customers = self._load()
        record = self._get_existing(customers, phone)

        if record.has_active_card:
            record.punches += 1
        else:
            record.has_active_card = True
            record.punches = 1
        record.total_visits += 1
        record.visit_history.insert(0, VisitEntry(date=self.clock(), punches=1))

        customers[phone] = record
        self._save(customers)
        logger.debug("Punch added for %s (punches=%d)", phone, record.punches)
        return record

    def redeem(self, phone: str) -> CustomerRecord:
        customers = self._load()
        record = self._get_existing(customers, phone)

        if not record.is_reward_ready():
            raise NotEligibleError(
                f"Customer {phone} is not eligible for a reward "
                f"(punches={record.punches}, active card={record.has_active_card})"
            )

        today = self.clock()
        record.punches = 0
        record.has_active_card = False
        record.rewards_redeemed += 1
        record.last_redemption = today
        record.visit_history.insert(0, VisitEntry(date=today, punches=0, redeemed=True))

        customers[phone] = record
        self._save(customers)
        logger.debug("Reward redeemed for %s", phone)
        return record

    def put(self, record: CustomerRecord) -> CustomerRecord:
        customers = self._load()
        customers[record.phone] = record
        self._save(customers)
        return record

    def seed(self, records: Iterable[CustomerRecord]) -> int:
        customers = self._load()
        if customers:
            return 0
        for record in records:
            customers[record.phone] = record
        self._save(customers)
        logger.info("Seeded %d sample customers", len(customers))
        return len(customers)

    def _get_existing(self, customers: dict[str, CustomerRecord], phone: str) -> CustomerRecord:
        record = customers.get(phone)
        if record is None:
            raise CustomerNotFoundError(f"Customer {phone} not found")
        return record

    def _load(self) -> dict[str, CustomerRecord]:
        raw = self.storage.get_item(STORAGE_KEY) or {}
        customers = {}
        for phone, data in raw.items():
            try:
                customers[phone] = CustomerRecord.model_validate(data)
            except ValidationError as e:
                logger.warning("Skipping unreadable customer record %s: %s", phone, e)
        return customers

    def _save(self, customers: dict[str, CustomerRecord]) -> None:
        # Records are never deleted, so stored keys missing from `customers`
        # are the unreadable ones skipped by _load; carry them over untouched.
        raw = self.storage.get_item(STORAGE_KEY) or {}
        document = {phone: data for phone, data in raw.items() if phone not in customers}
        document.update({phone: record.to_document() for phone, record in customers.items()})
        self.storage.set_item(STORAGE_KEY, document)
