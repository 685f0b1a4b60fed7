"""
Unit Tests for the Loyalty Service

Tests cover:
1. Lookup with remote-wins overwrite
2. Sync flags and user-facing messages
3. Remote outages never changing local outcomes
4. Punch card views
5. Building the service from settings
"""

from datetime import date

import pytest

from punchcard.config import Settings
from punchcard.errors import CustomerNotFoundError, InvalidPhoneError, NotEligibleError
from punchcard.models import CardStatus, CardView, ConnectionState, RegisterCustomerRequest
from punchcard.service import LoyaltyService
from punchcard.storage import InMemoryStorage
from punchcard.store import LedgerStore
from punchcard.sync import SyncClient

from .fakes import FakeRemoteStore, FixedClock


PHONE = "9876543210"


def make_service(clock, remote=None, scheduler=None):
    store = LedgerStore(InMemoryStorage(), clock=clock)
    sync = SyncClient(store, remote, scheduler=scheduler or (lambda delay, callback: None))
    service = LoyaltyService(store, sync)
    service.start()
    return service


def register(service, phone=PHONE, name="Asha", email=""):
    return service.register_customer(RegisterCustomerRequest(phone=phone, name=name, email=email))


class TestLookup:
    """Tests for customer lookup."""

    def test_lookup_local_customer(self, clock):
        service = make_service(clock)
        register(service)

        customer = service.lookup_customer(PHONE)

        assert customer.punches == 1
        assert service.current_customer == customer

    def test_remote_record_wins_and_is_stored_locally(self, clock):
        remote = FakeRemoteStore()
        service = make_service(clock, remote)
        register(service)
        remote.rows[PHONE]["punches"] = 5
        remote.rows[PHONE]["totalVisits"] = 5

        customer = service.lookup_customer(PHONE)

        assert customer.punches == 5
        assert service.store.lookup(PHONE).punches == 5

    def test_falls_back_to_local_when_remote_lacks_record(self, clock):
        remote = FakeRemoteStore()
        service = make_service(clock, remote)
        service.store.register(PHONE, "Asha", "")

        assert service.lookup_customer(PHONE).name == "Asha"

    def test_invalid_phone(self, clock):
        service = make_service(clock)
        with pytest.raises(InvalidPhoneError):
            service.lookup_customer("12345")

    def test_unknown_customer(self, clock):
        service = make_service(clock, FakeRemoteStore())
        with pytest.raises(CustomerNotFoundError):
            service.lookup_customer(PHONE)


class TestMutations:
    """Tests for register / punch / redeem responses."""

    def test_register_synced(self, clock):
        remote = FakeRemoteStore()
        service = make_service(clock, remote)

        response = register(service)

        assert response.synced is True
        assert response.message == "Delicious! Welcome Asha! First punch added! 🧇"
        assert remote.rows[PHONE]["punches"] == 1

    def test_register_saved_locally_when_offline(self, clock):
        service = make_service(clock, FakeRemoteStore(fail=True))

        response = register(service)

        assert response.synced is False
        assert response.message.endswith("(Saved locally)")
        assert service.store.lookup(PHONE) is not None

    def test_punch_reaching_full_card_is_reward_ready(self, clock):
        service = make_service(clock, FakeRemoteStore())
        register(service)
        for _ in range(8):
            response = service.add_punch(PHONE)
            assert response.reward_ready is False
            assert response.message == "Delicious! Punch Added! 🧇"

        response = service.add_punch(PHONE)

        assert response.reward_ready is True
        assert response.customer.punches == 10
        assert "Free waffle earned" in response.message

    def test_redeem_uses_current_customer(self, clock):
        service = make_service(clock)
        register(service)
        for _ in range(9):
            service.add_punch(PHONE)

        response = service.redeem_reward()

        assert response.customer.punches == 0
        assert response.customer.has_active_card is False
        assert response.customer.rewards_redeemed == 1
        assert response.message.startswith("Free waffle redeemed!")

    def test_redeem_without_selection(self, clock):
        service = make_service(clock)
        with pytest.raises(CustomerNotFoundError):
            service.redeem_reward()

    def test_redeem_not_eligible(self, clock):
        service = make_service(clock)
        register(service)
        with pytest.raises(NotEligibleError):
            service.redeem_reward(PHONE)


class TestRemoteOutage:
    """A failing remote store must not change any local outcome."""

    def _scenario(self, service):
        register(service)
        register(service, phone="8765432109", name="Priya")
        for _ in range(9):
            service.add_punch(PHONE)
        service.redeem_reward(PHONE)
        service.add_punch(PHONE)
        service.add_punch("8765432109")
        with pytest.raises(NotEligibleError):
            service.redeem_reward("8765432109")
        service.lookup_customer(PHONE)
        return {phone: record.model_dump() for phone, record in service.store.all().items()}

    def test_outage_matches_local_only(self):
        clock = FixedClock(date(2024, 10, 1))
        local_only = self._scenario(make_service(clock))

        failing = FakeRemoteStore(fail=True)
        offline = self._scenario(make_service(clock, failing))

        assert offline == local_only
        assert offline[PHONE]["punches"] == 1
        assert offline[PHONE]["total_visits"] == 11

    def test_outage_after_connect_matches_local_only(self):
        clock = FixedClock(date(2024, 10, 1))
        local_only = self._scenario(make_service(clock))

        remote = FakeRemoteStore()
        service = make_service(clock, remote)
        assert service.get_connection_state().state == ConnectionState.CONNECTED
        remote.fail = True

        assert self._scenario(service) == local_only


class TestPunchCardView:
    """Tests for the derived punch card."""

    def test_in_progress_card(self, clock):
        service = make_service(clock)
        register(service)
        for _ in range(2):
            service.add_punch(PHONE)

        card = service.view_card(PHONE)

        assert card.status == CardStatus.IN_PROGRESS
        assert card.filled_slots == 3
        assert card.punches_needed == 7
        assert card.progress_percent == 30
        assert card.can_redeem is False

    def test_reward_ready_card(self, clock):
        service = make_service(clock)
        register(service)
        for _ in range(9):
            service.add_punch(PHONE)

        card = service.view_card(PHONE)

        assert card.status == CardStatus.REWARD_READY
        assert card.can_redeem is True
        assert card.punches_needed == 0
        assert card.filled_slots == 0

    def test_new_card_after_redemption(self, clock):
        service = make_service(clock)
        register(service)
        for _ in range(9):
            service.add_punch(PHONE)
        service.redeem_reward(PHONE)

        card = service.view_card(PHONE, CardView.CUSTOMER)

        assert card.status == CardStatus.NEW_CARD
        assert card.punches_needed == 10
        assert card.last_redemption == clock.today

    def test_history_truncated_per_view(self, clock):
        service = make_service(clock)
        register(service)
        for _ in range(14):
            service.add_punch(PHONE)

        assert len(service.view_card(PHONE, CardView.STAFF).recent_visits) == 10
        assert len(service.view_card(PHONE, CardView.CUSTOMER).recent_visits) == 5
        assert len(service.store.lookup(PHONE).visit_history) == 15


class TestFromSettings:
    """Tests for wiring the service from configuration."""

    def test_seeded_local_only_service(self, tmp_path):
        settings = Settings(store_path=str(tmp_path / "customers.json"), seed_sample_data=True)

        service = LoyaltyService.from_settings(settings)

        assert len(service.store.all()) == 4
        assert service.start().state == ConnectionState.UNCONFIGURED

    def test_placeholder_credentials_are_unconfigured(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "YOUR_SUPABASE_URL")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "YOUR_SUPABASE_ANON_KEY")
        monkeypatch.setenv("PUNCHCARD_SEED_SAMPLE_DATA", "yes")

        settings = Settings.from_env()

        assert settings.remote_configured is False
        assert settings.seed_sample_data is True

    def test_real_credentials_are_configured(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")

        assert Settings.from_env().remote_configured is True

    def test_store_path_falls_back_to_given_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("PUNCHCARD_STORE_PATH", raising=False)
        default = str(tmp_path / "customers.json")

        assert Settings.from_env().store_path == "punchcard_data.json"
        assert Settings.from_env(default_store_path=default).store_path == default

    def test_store_path_from_env_wins_over_default(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PUNCHCARD_STORE_PATH", "/data/customers.json")

        settings = Settings.from_env(default_store_path=str(tmp_path / "customers.json"))

        assert settings.store_path == "/data/customers.json"
