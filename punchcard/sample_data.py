from datetime import date

from .models import CustomerRecord, VisitEntry


def _visits(*days: str) -> list[VisitEntry]:
    return [VisitEntry(date=date.fromisoformat(d), punches=1) for d in days]


def sample_customers() -> list[CustomerRecord]:
    """Demo customers covering in-progress, reward-ready and just-redeemed cards."""
    return [
        CustomerRecord(
            phone="9876543210",
            name="Rahul Kumar",
            email="rahul@example.com",
            punches=8,
            has_active_card=True,
            total_visits=18,
            rewards_redeemed=1,
            member_since=date(2024, 1, 15),
            last_redemption=date(2024, 8, 15),
            visit_history=_visits(
                "2024-09-30", "2024-09-25", "2024-09-20", "2024-09-15",
                "2024-09-10", "2024-09-05", "2024-08-30", "2024-08-25",
            ),
        ),
        CustomerRecord(
            phone="8765432109",
            name="Priya Sharma",
            email="priya@example.com",
            punches=3,
            has_active_card=True,
            total_visits=8,
            rewards_redeemed=0,
            member_since=date(2024, 2, 10),
            visit_history=_visits("2024-09-28", "2024-09-22", "2024-09-15"),
        ),
        CustomerRecord(
            phone="7654321098",
            name="Amit Singh",
            email="amit@example.com",
            punches=10,
            has_active_card=True,
            total_visits=22,
            rewards_redeemed=2,
            member_since=date(2024, 3, 5),
            visit_history=_visits(
                "2024-09-30", "2024-09-28", "2024-09-26", "2024-09-24", "2024-09-22",
                "2024-09-20", "2024-09-18", "2024-09-16", "2024-09-14", "2024-09-12",
            ),
        ),
        CustomerRecord(
            phone="6543210987",
            name="Sneha Patel",
            email="sneha@example.com",
            punches=0,
            has_active_card=False,
            total_visits=12,
            rewards_redeemed=1,
            member_since=date(2024, 4, 20),
            last_redemption=date(2024, 9, 25),
            visit_history=[VisitEntry(date=date(2024, 9, 25), punches=0, redeemed=True)],
        ),
    ]
