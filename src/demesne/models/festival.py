"""Festival models for the Demesne game system.

This module contains models for:
- FestivalTypes (catalog of seasonal, religious, royal, and special festivals)
- Festivals (one scheduled celebration at a location)
- FestivalParticipants (who attended and what they spent or earned)
- RoyalEvents (coronations, weddings, funerals, declarations, treaty signings)
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Select,
    String,
    Text,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import (
    FestivalCategory,
    FestivalStatus,
    LocationKind,
    ParticipantRole,
    RoyalEventType,
    check_in,
)
from .references import LocatedMixin

if TYPE_CHECKING:
    from .player import Player
    from .tournament import Tournament


class FestivalType(Base, TimestampMixin):
    """Catalog entry for a kind of festival.

    Attributes:
        id: Primary key
        name: Display name
        slug: Unique identifier
        description: Flavour text
        category: seasonal/religious/royal/special
        season: Season the festival falls in (nullable)
        duration_days: Default length
        bonuses: JSON map of bonus name to value, e.g. {"trade_bonus": 10}
        activities: JSON list of activity names on offer
        is_recurring: Whether the festival repeats every year
    """

    __tablename__ = "festival_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    season: Mapped[str | None] = mapped_column(String, nullable=True)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    bonuses: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    activities: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    festivals: Mapped[list["Festival"]] = relationship(
        "Festival", back_populates="festival_type", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("category", FestivalCategory), name="ck_festival_types_category"),
    )

    def __repr__(self) -> str:
        return f"<FestivalType(id={self.id}, slug='{self.slug}')>"


class Festival(LocatedMixin, Base, TimestampMixin):
    """A scheduled festival at a village, town, barony, or kingdom.

    Attributes:
        id: Primary key
        festival_type_id: Kind of festival
        location_type: Kind of host location
        location_id: Id of the host
        name: Display name (may differ from the type's)
        status: scheduled/active/completed/cancelled
        starts_at: Opening time
        ends_at: Closing time
        budget: Gold the organizer spent
        organized_by_id: Organizing player
        attendance_count: Visitors so far
        results: JSON document of outcomes (winners, prizes)
    """

    __tablename__ = "festivals"

    LOCATION_TYPES = frozenset(
        {LocationKind.VILLAGE, LocationKind.TOWN, LocationKind.BARONY, LocationKind.KINGDOM}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    festival_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("festival_types.id", ondelete="CASCADE"), nullable=False
    )
    organized_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=FestivalStatus.SCHEDULED)
    starts_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    budget: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attendance_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    results: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    festival_type: Mapped["FestivalType"] = relationship("FestivalType", back_populates="festivals")
    organizer: Mapped[Optional["Player"]] = relationship("Player")
    participants: Mapped[list["FestivalParticipant"]] = relationship(
        "FestivalParticipant", back_populates="festival", cascade="all, delete-orphan"
    )
    tournaments: Mapped[list["Tournament"]] = relationship(
        "Tournament", back_populates="festival"
    )

    __table_args__ = (
        CheckConstraint(check_in("status", FestivalStatus), name="ck_festivals_status"),
        Index("idx_festivals_location", "location_type", "location_id"),
        Index("idx_festivals_status", "status"),
        Index("idx_festivals_starts_at", "starts_at"),
    )

    def __repr__(self) -> str:
        return f"<Festival(id={self.id}, name='{self.name}', status='{self.status}')>"

    @property
    def is_active(self) -> bool:
        return self.status == FestivalStatus.ACTIVE

    def is_running(self, now: datetime | None = None) -> bool:
        """Active and inside its start/end window."""
        moment = resolve_now(now)
        return self.is_active and as_utc(self.starts_at) <= moment < as_utc(self.ends_at)

    def days_remaining(self, now: datetime | None = None) -> int:
        """Whole days until the festival closes; 0 once it has."""
        return max(0, (as_utc(self.ends_at) - resolve_now(now)).days)

    @property
    def net_revenue(self) -> int:
        """Gold earned minus gold spent across all participants."""
        return sum(p.gold_earned - p.gold_spent for p in self.participants)

    @classmethod
    def select_upcoming(cls, now: datetime | None = None) -> Select:
        moment = resolve_now(now)
        return (
            select(cls)
            .where(cls.status == FestivalStatus.SCHEDULED, cls.starts_at > moment)
            .order_by(cls.starts_at)
        )


class FestivalParticipant(Base, TimestampMixin):
    """A player's attendance at a festival."""

    __tablename__ = "festival_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    festival_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("festivals.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    role: Mapped[str] = mapped_column(String, nullable=False, default=ParticipantRole.ATTENDEE)
    gold_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    activities_completed: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    festival: Mapped["Festival"] = relationship("Festival", back_populates="participants")
    player: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("festival_id", "player_id", name="uq_festival_participants"),
        CheckConstraint(check_in("role", ParticipantRole), name="ck_festival_participants_role"),
    )

    def __repr__(self) -> str:
        return f"<FestivalParticipant(id={self.id}, player={self.player_id}, role='{self.role}')>"


class RoyalEvent(LocatedMixin, Base, TimestampMixin):
    """A ceremonial event involving one or two principal players.

    Attributes:
        id: Primary key
        event_type: coronation/royal_wedding/royal_funeral/declaration/treaty_signing
        location_type: Kind of host location
        location_id: Id of the host
        title: Display title
        description: Announcement text
        status: scheduled/active/completed/cancelled
        scheduled_at: When the event takes place
        completed_at: When it concluded
        primary_participant_id: Principal (e.g. the monarch being crowned)
        secondary_participant_id: Second principal (e.g. a spouse), nullable
        details: JSON document of extra data
    """

    __tablename__ = "royal_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    primary_participant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    secondary_participant_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    event_type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default=FestivalStatus.SCHEDULED)
    scheduled_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)

    primary_participant: Mapped["Player"] = relationship(
        "Player", foreign_keys=[primary_participant_id]
    )
    secondary_participant: Mapped[Optional["Player"]] = relationship(
        "Player", foreign_keys=[secondary_participant_id]
    )

    __table_args__ = (
        CheckConstraint(check_in("event_type", RoyalEventType), name="ck_royal_events_type"),
        CheckConstraint(check_in("status", FestivalStatus), name="ck_royal_events_status"),
        Index("idx_royal_events_location", "location_type", "location_id"),
        Index("idx_royal_events_type", "event_type"),
    )

    def __repr__(self) -> str:
        return f"<RoyalEvent(id={self.id}, type='{self.event_type}')>"

    @property
    def event_type_display(self) -> str:
        return self.event_type.replace("_", " ").title()
