"""Player model for the Demesne game system.

Players are the user accounts that own bank accounts and houses, stand in
elections, join guilds, and refer other players.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, Session, mapped_column, object_session, relationship

from .base import Base, TimestampMixin, UTCDateTime
from .references import LocationRef, resolve_reference

if TYPE_CHECKING:
    from .bank import BankAccount, BankTransaction
    from .disease import DiseaseInfection
    from .guild import GuildMember
    from .house import PlayerHouse
    from .referral import Referral
    from .world import Village


class Player(Base, TimestampMixin):
    """Represents a player account in the game.

    Attributes:
        id: Primary key
        username: Unique username
        email: Email address
        gold: Gold carried on hand
        combat_level: Combat level used for tournament and referral checks
        title_tier: Rank of the player's highest title (1 = peasant)
        current_location_type: Kind of place the player is at (nullable while travelling)
        current_location_id: Id of that place
        home_village_id: Village the player resides in
        referral_code: Code other players sign up with (nullable until generated)
        email_verified_at: When the email address was verified
    """

    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    home_village_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("villages.id", ondelete="SET NULL"), nullable=True
    )

    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    gold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    combat_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    title_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_location_type: Mapped[str | None] = mapped_column(String, nullable=True)
    current_location_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    referral_code: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)
    email_verified_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )

    home_village: Mapped[Optional["Village"]] = relationship("Village")
    bank_accounts: Mapped[list["BankAccount"]] = relationship(
        "BankAccount", back_populates="player", cascade="all, delete-orphan"
    )
    bank_transactions: Mapped[list["BankTransaction"]] = relationship(
        "BankTransaction", back_populates="player", cascade="all, delete-orphan"
    )
    house: Mapped[Optional["PlayerHouse"]] = relationship(
        "PlayerHouse", back_populates="player", uselist=False, cascade="all, delete-orphan"
    )
    guild_memberships: Mapped[list["GuildMember"]] = relationship(
        "GuildMember", back_populates="player", cascade="all, delete-orphan"
    )
    infections: Mapped[list["DiseaseInfection"]] = relationship(
        "DiseaseInfection", back_populates="player", cascade="all, delete-orphan"
    )
    referrals_made: Mapped[list["Referral"]] = relationship(
        "Referral",
        back_populates="referrer",
        foreign_keys="Referral.referrer_id",
        cascade="all, delete-orphan",
    )
    referred_by: Mapped[Optional["Referral"]] = relationship(
        "Referral",
        back_populates="referred",
        foreign_keys="Referral.referred_id",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, username='{self.username}')>"

    @property
    def display_name(self) -> str:
        return self.username

    @property
    def has_verified_email(self) -> bool:
        return self.email_verified_at is not None

    @property
    def current_location_ref(self) -> LocationRef | None:
        """Where the player stands, or None while travelling."""
        return LocationRef.parse(self.current_location_type, self.current_location_id)

    @property
    def is_traveling(self) -> bool:
        return self.current_location_ref is None

    def current_location(self, session: Session | None = None) -> Any | None:
        """Resolve the place the player stands in, or None while travelling."""
        session = session or object_session(self)
        if session is None:
            return None
        return resolve_reference(session, self.current_location_type, self.current_location_id)

    def current_location_name(self, session: Session | None = None) -> str:
        place = self.current_location(session)
        return place.name if place is not None else "Unknown"
