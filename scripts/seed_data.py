"""Seed the database with demo accounts, houses and a few weekly bookings.

Creates one administrator, two renters with credits, three houses with
assignments, and books upcoming Tuesday-to-Monday weeks through the
booking service so balances are debited exactly as in production.

Run from the project root:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete

from weekstay.auth.security import hash_password
from weekstay.booking.ledger import CreditLedger
from weekstay.config import settings
from weekstay.database import async_session_factory, engine
from weekstay.models.house import House
from weekstay.models.user import User, UserRole
from weekstay.services.booking_service import BookingService

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN = {"username": "admin", "email": "admin@weekstay.local", "password": "admin1234"}

RENTERS = [
    {"username": "alice", "email": "alice@weekstay.local", "password": "alice1234", "credits": 4},
    {"username": "bob", "email": "bob@weekstay.local", "password": "bob12345", "credits": 2},
]

HOUSES = [
    {"name": "Lake House", "description": "Cabin on the water with a private jetty and two canoes."},
    {"name": "Beach House", "description": "Three bedrooms, five minutes' walk from the dunes."},
    {"name": "Mountain Lodge", "description": "Wood stove, sauna, and trailheads from the front door."},
]

# username -> house names
ASSIGNMENTS = {
    "alice": ["Lake House", "Beach House"],
    "bob": ["Beach House", "Mountain Lodge"],
}

# (username, house name, weeks after the first upcoming check-in day)
BOOKINGS = [
    ("alice", "Lake House", 0),
    ("alice", "Beach House", 3),
    ("bob", "Beach House", 0),
]


def _next_check_in(today: date) -> date:
    days_ahead = (settings.booking_check_in_weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days_ahead)


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with demo data.

    Idempotent: removes the demo accounts and houses (their bookings and
    assignments cascade) before creating them again.
    """
    usernames = [ADMIN["username"], *(r["username"] for r in RENTERS)]
    house_names = [h["name"] for h in HOUSES]

    async with async_session_factory() as session:
        await session.execute(delete(User).where(User.username.in_(usernames)))
        await session.execute(delete(House).where(House.name.in_(house_names)))
        await session.flush()

        # ------------------------------------------------------------------
        # 1. Houses
        # ------------------------------------------------------------------
        houses: dict[str, House] = {}
        for data in HOUSES:
            house = House(**data)
            session.add(house)
            houses[house.name] = house

        # ------------------------------------------------------------------
        # 2. Accounts, with their house assignments
        # ------------------------------------------------------------------
        admin = User(
            username=ADMIN["username"],
            email=ADMIN["email"],
            hashed_password=hash_password(ADMIN["password"]),
            role=UserRole.ADMIN.value,
            credits=0,
        )
        session.add(admin)

        renters: dict[str, User] = {}
        for data in RENTERS:
            renter = User(
                username=data["username"],
                email=data["email"],
                hashed_password=hash_password(data["password"]),
                role=UserRole.USER.value,
                credits=data["credits"],
                assigned_houses=[houses[name] for name in ASSIGNMENTS.get(data["username"], [])],
            )
            session.add(renter)
            renters[renter.username] = renter
        await session.flush()

        print(f"Created admin '{admin.username}' and {len(renters)} renters")
        print(f"Created {len(houses)} houses")

        # ------------------------------------------------------------------
        # 3. Bookings, through the lifecycle manager
        # ------------------------------------------------------------------
        service = BookingService(
            session,
            policy=settings.stay_policy(),
            ledger=CreditLedger(days_per_credit=settings.booking_days_per_credit),
        )
        first_check_in = _next_check_in(date.today())
        stay = timedelta(days=settings.booking_stay_days - 1)

        for username, house_name, weeks_ahead in BOOKINGS:
            check_in = first_check_in + timedelta(weeks=weeks_ahead)
            booking = await service.create(houses[house_name].id, renters[username], check_in, check_in + stay)
            print(f"   {username}: {house_name} {booking.check_in} .. {booking.check_out}")

        await session.commit()

        print()
        print("=" * 60)
        print(f"   Admin login:  {ADMIN['username']} / {ADMIN['password']}")
        for data in RENTERS:
            user = renters[data["username"]]
            print(f"   Renter login: {user.username} / {data['password']} ({user.credits} credits left)")
        print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
