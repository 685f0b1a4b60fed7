from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


CARD_SIZE = 10
STAFF_HISTORY_LIMIT = 10
CUSTOMER_HISTORY_LIMIT = 5


class ConnectionState(str, Enum):
    UNCONFIGURED = "UNCONFIGURED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    DISCONNECTED = "DISCONNECTED"


class CardView(str, Enum):
    STAFF = "staff"
    CUSTOMER = "customer"


class CardStatus(str, Enum):
    REWARD_READY = "reward_ready"
    IN_PROGRESS = "in_progress"
    NEW_CARD = "new_card"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VisitEntry(CamelModel):
    date: date
    punches: int = Field(default=1, ge=0)
    redeemed: Optional[bool] = None


class CustomerRecord(CamelModel):
    phone: str
    name: str
    email: Optional[str] = ""
    punches: int = Field(default=0, ge=0)
    has_active_card: bool = True
    total_visits: int = Field(default=0, ge=0)
    rewards_redeemed: int = Field(default=0, ge=0)
    member_since: date
    last_redemption: Optional[date] = None
    visit_history: list[VisitEntry] = Field(default_factory=list)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "phone": "9876543210",
            "name": "Rahul Kumar",
            "email": "rahul@example.com",
            "punches": 8,
            "hasActiveCard": True,
            "totalVisits": 18,
            "rewardsRedeemed": 1,
            "memberSince": "2024-01-15",
            "lastRedemption": "2024-08-15",
            "visitHistory": [{"date": "2024-09-30", "punches": 1}],
        }
    })

    @property
    def filled_slots(self) -> int:
        return self.punches % CARD_SIZE if self.has_active_card else 0

    def is_reward_ready(self) -> bool:
        return (
            self.has_active_card
            and self.punches >= CARD_SIZE
            and self.punches % CARD_SIZE == 0
        )

    def to_document(self) -> dict:
        """Plain JSON form used for local persistence and the remote table."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RegisterCustomerRequest(BaseModel):
    phone: str = Field(..., description="10-digit phone number")
    name: str
    email: Optional[str] = ""

    model_config = ConfigDict(json_schema_extra={
        "example": {"phone": "9876543210", "name": "Asha", "email": ""}
    })


class CustomerResponse(BaseModel):
    customer: CustomerRecord
    synced: bool = False
    reward_ready: bool = False
    message: str


class PunchCard(BaseModel):
    phone: str
    name: str
    view: CardView
    filled_slots: int
    card_size: int = CARD_SIZE
    punches_needed: int
    progress_percent: int
    can_redeem: bool
    status: CardStatus
    total_visits: int
    rewards_redeemed: int
    member_since: date
    last_redemption: Optional[date] = None
    recent_visits: list[VisitEntry]

    @classmethod
    def from_record(cls, record: CustomerRecord, view: CardView = CardView.STAFF) -> "PunchCard":
        can_redeem = record.is_reward_ready()
        filled = record.filled_slots
        if can_redeem:
            status = CardStatus.REWARD_READY
        elif record.has_active_card:
            status = CardStatus.IN_PROGRESS
        else:
            status = CardStatus.NEW_CARD

        limit = STAFF_HISTORY_LIMIT if view == CardView.STAFF else CUSTOMER_HISTORY_LIMIT
        return cls(
            phone=record.phone,
            name=record.name,
            view=view,
            filled_slots=filled,
            punches_needed=0 if can_redeem else CARD_SIZE - filled,
            progress_percent=filled * 100 // CARD_SIZE,
            can_redeem=can_redeem,
            status=status,
            total_visits=record.total_visits,
            rewards_redeemed=record.rewards_redeemed,
            member_since=record.member_since,
            last_redemption=record.last_redemption,
            recent_visits=record.visit_history[:limit],
        )


class ConnectionStatus(BaseModel):
    state: ConnectionState
    online: bool
    message: str
    retry_count: int = 0
