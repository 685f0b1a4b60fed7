import logging
from typing import Optional

from .config import Settings
from .errors import CustomerNotFoundError, InvalidPhoneError
from .models import (
    CardView,
    ConnectionStatus,
    CustomerRecord,
    CustomerResponse,
    PunchCard,
    RegisterCustomerRequest,
)
from .remote import SupabaseRemoteStore
from .sample_data import sample_customers
from .storage import JsonFileStorage
from .store import LedgerStore, is_valid_phone
from .sync import SyncClient

logger = logging.getLogger(__name__)

LOCAL_SUFFIX = " (Saved locally)"


class LoyaltyService:
    """
    Session object the UI layer talks to.

    Every operation is served by the local ledger first; the sync client is
    then asked to mirror the result. The outcome of the remote call only
    changes the `synced` flag and the message of the response.
    """

    def __init__(self, store: Optional[LedgerStore] = None, sync: Optional[SyncClient] = None):
        self.store = store or LedgerStore()
        self.sync = sync or SyncClient(self.store)
        self.current_customer: Optional[CustomerRecord] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "LoyaltyService":
        store = LedgerStore(JsonFileStorage(settings.store_path))
        if settings.seed_sample_data:
            store.seed(sample_customers())

        remote = None
        if settings.remote_configured:
            remote = SupabaseRemoteStore(settings.supabase_url, settings.supabase_key)
        return cls(store, SyncClient(store, remote))

    def start(self) -> ConnectionStatus:
        self.sync.connect()
        return self.sync.status()

    def lookup_customer(self, phone: str) -> CustomerRecord:
        if not is_valid_phone(phone):
            raise InvalidPhoneError("Please enter a valid 10-digit phone number")

        customer = self.sync.try_fetch(phone)
        if customer is not None:
            # Remote wins on explicit lookup
            logger.debug("Replacing local record for %s with remote copy", phone)
            self.store.put(customer)
        else:
            customer = self.store.lookup(phone)

        if customer is None:
            raise CustomerNotFoundError(f"Customer {phone} not found. Please register them first.")
        self.current_customer = customer
        return customer

    def register_customer(self, request: RegisterCustomerRequest) -> CustomerResponse:
        customer = self.store.register(request.phone, request.name, request.email)
        synced = self.sync.try_upsert(customer)
        self.current_customer = customer

        if synced:
            message = f"Delicious! Welcome {customer.name}! First punch added! 🧇"
        else:
            message = f"Welcome {customer.name}! First punch added! 🧇" + LOCAL_SUFFIX
        return CustomerResponse(customer=customer, synced=synced, message=message)

    def add_punch(self, phone: str) -> CustomerResponse:
        customer = self.store.add_punch(phone)
        synced = self.sync.try_upsert(customer)
        self.current_customer = customer

        reward_ready = customer.is_reward_ready()
        if reward_ready:
            message = "Punch card complete! Free waffle earned! 🎉"
        elif synced:
            message = "Delicious! Punch Added! 🧇"
        else:
            message = "Punch Added! 🧇"
        if not synced:
            message += LOCAL_SUFFIX
        return CustomerResponse(customer=customer, synced=synced, reward_ready=reward_ready, message=message)

    def redeem_reward(self, phone: Optional[str] = None) -> CustomerResponse:
        if phone is None:
            if self.current_customer is None:
                raise CustomerNotFoundError("No customer selected")
            phone = self.current_customer.phone

        customer = self.store.redeem(phone)
        synced = self.sync.try_upsert(customer)
        self.current_customer = customer

        if synced:
            message = "Delicious! Free waffle redeemed! 🧇🎉 New punch card started!"
        else:
            message = "Free waffle redeemed! 🧇🎉 New punch card started!" + LOCAL_SUFFIX
        return CustomerResponse(customer=customer, synced=synced, message=message)

    def view_card(self, phone: str, view: CardView = CardView.STAFF) -> PunchCard:
        return PunchCard.from_record(self.lookup_customer(phone), view)

    def get_connection_state(self) -> ConnectionStatus:
        return self.sync.status()

    def reconnect(self) -> ConnectionStatus:
        self.sync.reconnect()
        return self.sync.status()
