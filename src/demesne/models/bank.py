"""Banking models for the Demesne game system.

This module contains models for:
- BankAccounts (one per player per settlement with a bank)
- BankTransactions (deposit/withdrawal ledger entries)
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Select,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampCreatedMixin, TimestampMixin
from .enums import LocationKind, TransactionType, check_in
from .references import LocatedMixin

if TYPE_CHECKING:
    from .player import Player


class BankAccount(LocatedMixin, Base, TimestampMixin):
    """Represents a player's account at one settlement's bank.

    Banks only exist in villages, towns, and castles; each player holds at
    most one account per settlement.

    Attributes:
        id: Primary key
        player_id: Foreign key to the account holder
        location_type: Kind of settlement holding the account
        location_id: Id of that settlement
        balance: Gold held in the account
    """

    __tablename__ = "bank_accounts"

    LOCATION_TYPES = frozenset({LocationKind.VILLAGE, LocationKind.TOWN, LocationKind.CASTLE})

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    player: Mapped["Player"] = relationship("Player", back_populates="bank_accounts")
    transactions: Mapped[list["BankTransaction"]] = relationship(
        "BankTransaction",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="BankTransaction.id.desc()",
    )

    __table_args__ = (
        UniqueConstraint("player_id", "location_type", "location_id", name="uq_bank_accounts"),
        Index("idx_bank_accounts_location", "location_type", "location_id"),
    )

    def __repr__(self) -> str:
        return f"<BankAccount(id={self.id}, player={self.player_id}, balance={self.balance})>"

    @property
    def is_funded(self) -> bool:
        return self.balance > 0

    @classmethod
    def select_for_player(cls, player_id: int, *, funded_only: bool = True) -> Select:
        """Accounts held by a player, optionally only those holding gold."""
        stmt = select(cls).where(cls.player_id == player_id)
        if funded_only:
            stmt = stmt.where(cls.balance > 0)
        return stmt.order_by(cls.id)


class BankTransaction(Base, TimestampCreatedMixin):
    """A single ledger entry against a bank account.

    Attributes:
        id: Primary key
        player_id: Foreign key to the player who moved the gold
        bank_account_id: Foreign key to the account
        type: deposit or withdrawal
        amount: Gold moved (always positive)
        balance_after: Account balance once the entry was applied
        description: Free-text note shown in the ledger
    """

    __tablename__ = "bank_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    bank_account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=False
    )

    type: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)

    player: Mapped["Player"] = relationship("Player", back_populates="bank_transactions")
    account: Mapped[Optional["BankAccount"]] = relationship(
        "BankAccount", back_populates="transactions"
    )

    __table_args__ = (
        CheckConstraint(check_in("type", TransactionType), name="ck_bank_transactions_type"),
        Index("idx_bank_transactions_account", "bank_account_id"),
    )

    def __repr__(self) -> str:
        return f"<BankTransaction(id={self.id}, type='{self.type}', amount={self.amount})>"

    @property
    def is_deposit(self) -> bool:
        return self.type == TransactionType.DEPOSIT

    @property
    def signed_amount(self) -> int:
        """Amount as it affected the balance: negative for withdrawals."""
        return self.amount if self.is_deposit else -self.amount
