"""
Best-effort mirror of the local ledger to the remote store.

Connectivity state machine:

    UNCONFIGURED                      (no remote store)
    CONNECTING -> CONNECTED           probe succeeded
    CONNECTING -> DISCONNECTED        probe failed; retry after attempt * 5s,
                                      at most MAX_RETRIES times

reconnect() resets the retry counter and starts over. Any retry still pending
from before belongs to an older generation and does nothing when it fires.

Nothing here raises to the caller: remote failures are logged and reported
as None / False.
"""

import logging
import threading
from typing import Callable, Optional

from .models import ConnectionState, ConnectionStatus, CustomerRecord
from .remote import RemoteStore
from .store import LedgerStore

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BACKOFF_SECONDS = 5

Scheduler = Callable[[float, Callable[[], None]], None]

_STATUS_MESSAGES = {
    ConnectionState.UNCONFIGURED: "Using offline mode",
    ConnectionState.CONNECTING: "Connecting",
    ConnectionState.CONNECTED: "Connected to cloud",
    ConnectionState.DISCONNECTED: "Offline mode",
}


def timer_scheduler(delay: float, callback: Callable[[], None]) -> None:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


class SyncClient:
    def __init__(
        self,
        store: LedgerStore,
        remote: Optional[RemoteStore] = None,
        scheduler: Scheduler = timer_scheduler,
        max_retries: int = MAX_RETRIES,
        backoff_seconds: float = RETRY_BACKOFF_SECONDS,
    ):
        self.store = store
        self.remote = remote
        self.scheduler = scheduler
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.state = ConnectionState.UNCONFIGURED
        self.retry_count = 0
        self._generation = 0
        self._reconciled = False

    @property
    def is_configured(self) -> bool:
        return self.remote is not None

    @property
    def is_online(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def status(self) -> ConnectionStatus:
        return ConnectionStatus(
            state=self.state,
            online=self.is_online,
            message=_STATUS_MESSAGES[self.state],
            retry_count=self.retry_count,
        )

    def connect(self) -> ConnectionState:
        if not self.is_configured:
            logger.info("Remote store not configured, using local storage only")
            self.state = ConnectionState.UNCONFIGURED
            return self.state

        self.state = ConnectionState.CONNECTING
        try:
            self.remote.probe()
        except Exception as e:
            self.state = ConnectionState.DISCONNECTED
            logger.warning("Remote store unavailable: %s", e)
            self._schedule_retry()
            return self.state

        self.state = ConnectionState.CONNECTED
        logger.info("Connected to remote store")
        if not self._reconciled:
            self._reconciled = True
            self.reconcile_on_startup()
        return self.state

    def reconnect(self) -> ConnectionState:
        self._generation += 1
        self.retry_count = 0
        return self.connect()

    def _schedule_retry(self) -> None:
        if self.retry_count >= self.max_retries:
            logger.info("Giving up after %d retries; waiting for manual reconnect", self.retry_count)
            return
        self.retry_count += 1
        delay = self.retry_count * self.backoff_seconds
        generation = self._generation
        logger.info("Retrying remote connection in %ss (attempt %d)", delay, self.retry_count)
        self.scheduler(delay, lambda: self._run_retry(generation))

    def _run_retry(self, generation: int) -> None:
        if generation != self._generation:
            return
        self.connect()

    def try_fetch(self, phone: str) -> Optional[CustomerRecord]:
        if not self.is_online:
            return None
        try:
            return self.remote.fetch(phone)
        except Exception as e:
            logger.warning("Remote fetch of %s failed: %s", phone, e)
            return None

    def try_upsert(self, record: CustomerRecord) -> bool:
        if not self.is_online:
            return False
        try:
            self.remote.upsert(record)
        except Exception as e:
            logger.warning("Remote upsert of %s failed: %s", record.phone, e)
            return False
        return True

    def reconcile_on_startup(self) -> int:
        """Push local records the remote store has never seen. Never pulls."""
        if not self.is_online:
            return 0

        local = self.store.all()
        try:
            existing = self.remote.existing_phones(local.keys())
        except Exception as e:
            logger.warning("Startup sync skipped: %s", e)
            return 0

        pushed = 0
        for phone, record in local.items():
            if phone in existing:
                continue
            if self.try_upsert(record):
                pushed += 1
        logger.info("Startup sync pushed %d local customers", pushed)
        return pushed
