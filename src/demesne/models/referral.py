"""Referral model for the Demesne game system."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Select,
    String,
    select,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from demesne.rules_config import DEFAULT_RULES

from .base import Base, TimestampMixin, UTCDateTime
from .enums import ReferralStatus, check_in

if TYPE_CHECKING:
    from .player import Player


class Referral(Base, TimestampMixin):
    """A player brought into the game by another player's referral code.

    The referral qualifies once the new player meets the activity bar, and is
    rewarded once the referrer has been paid.

    Attributes:
        id: Primary key
        referrer_id: Player whose code was used
        referred_id: New player (unique: a player is referred at most once)
        status: pending/qualified/rewarded
        ip_address: Sign-up address, used to spot self-referrals
        reward_amount: Gold paid to the referrer
        qualified_at: When the referral qualified
        rewarded_at: When the reward was paid
    """

    __tablename__ = "referrals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    referrer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    referred_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True, unique=True
    )

    status: Mapped[str] = mapped_column(String, nullable=False, default=ReferralStatus.PENDING)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    reward_amount: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_RULES.referrals.referrer_reward
    )
    qualified_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    rewarded_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    referrer: Mapped["Player"] = relationship(
        "Player", foreign_keys=[referrer_id], back_populates="referrals_made"
    )
    referred: Mapped[Optional["Player"]] = relationship(
        "Player", foreign_keys=[referred_id], back_populates="referred_by"
    )

    __table_args__ = (
        CheckConstraint(check_in("status", ReferralStatus), name="ck_referrals_status"),
        Index("idx_referrals_referrer_status", "referrer_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Referral(id={self.id}, referrer={self.referrer_id}, status='{self.status}')>"

    @property
    def is_pending(self) -> bool:
        return self.status == ReferralStatus.PENDING

    @property
    def is_qualified(self) -> bool:
        return self.status == ReferralStatus.QUALIFIED

    @property
    def is_rewarded(self) -> bool:
        return self.status == ReferralStatus.REWARDED

    @property
    def referred_username(self) -> str:
        """Referred player's username, or "Unknown" if the account is gone."""
        return self.referred.username if self.referred is not None else "Unknown"

    @classmethod
    def select_for_referrer(cls, player_id: int) -> Select:
        return (
            select(cls)
            .where(cls.referrer_id == player_id)
            .order_by(cls.created_at.desc(), cls.id.desc())
        )
