"""Credit ledger — what a stay costs and how balances move.

One credit buys one week. Administrators book for free: debits and refunds
leave their balance untouched.
"""

import dataclasses
import logging
import uuid

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from weekstay.booking.errors import InsufficientCredits
from weekstay.booking.window import Window
from weekstay.models.user import User, UserRole

logger = logging.getLogger(__name__)

DAYS_PER_CREDIT = 7


@dataclasses.dataclass(frozen=True)
class CreditAccount:
    """The credit-relevant projection of a user."""

    user_id: uuid.UUID
    role: str
    credits: int

    @classmethod
    def of(cls, user: User) -> "CreditAccount":
        return cls(user_id=user.id, role=user.role, credits=user.credits)

    @property
    def is_exempt(self) -> bool:
        return self.role == UserRole.ADMIN


class CreditLedger:
    def __init__(self, days_per_credit: int = DAYS_PER_CREDIT) -> None:
        if days_per_credit < 1:
            raise ValueError("days_per_credit must be at least 1")
        self.days_per_credit = days_per_credit

    def cost(self, window: Window) -> int:
        """Credits charged for a window: whole credit periods, rounded up."""
        return -(-window.days // self.days_per_credit)

    def apply_debit(self, account: CreditAccount, weeks: int) -> CreditAccount:
        """Return the account after paying ``weeks`` credits.

        Raises:
            InsufficientCredits: If a regular user's balance is below ``weeks``.
        """
        if account.is_exempt:
            return account
        if account.credits < weeks:
            raise InsufficientCredits(
                "Not enough credits for this booking",
                details={"required": weeks, "available": account.credits},
            )
        return dataclasses.replace(account, credits=account.credits - weeks)

    def apply_refund(self, account: CreditAccount, weeks: int) -> CreditAccount:
        if account.is_exempt:
            return account
        return dataclasses.replace(account, credits=account.credits + weeks)

    async def debit(self, db: AsyncSession, user: User, weeks: int) -> User:
        """Take ``weeks`` credits from the stored balance.

        The decrement is a single conditional UPDATE, so two bookings racing
        on one balance cannot both spend the last credit.
        """
        if CreditAccount.of(user).is_exempt:
            return user

        result = await db.execute(
            update(User)
            .where(User.id == user.id, User.credits >= weeks)
            .values(credits=User.credits - weeks)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InsufficientCredits(
                "Not enough credits for this booking",
                details={"required": weeks},
            )
        await db.refresh(user, attribute_names=["credits"])
        logger.info("Debited %d credit(s) from user %s, balance now %d", weeks, user.id, user.credits)
        return user

    async def refund(self, db: AsyncSession, user: User, weeks: int) -> User:
        if CreditAccount.of(user).is_exempt:
            return user

        await db.execute(
            update(User)
            .where(User.id == user.id)
            .values(credits=User.credits + weeks)
            .execution_options(synchronize_session=False)
        )
        await db.refresh(user, attribute_names=["credits"])
        logger.info("Refunded %d credit(s) to user %s, balance now %d", weeks, user.id, user.credits)
        return user

    async def top_up(self, db: AsyncSession, user: User, amount: int) -> User:
        """Administrative credit grant. Applies to every role."""
        await db.execute(
            update(User)
            .where(User.id == user.id)
            .values(credits=User.credits + amount)
            .execution_options(synchronize_session=False)
        )
        await db.refresh(user, attribute_names=["credits"])
        logger.info("Added %d credit(s) to user %s, balance now %d", amount, user.id, user.credits)
        return user
