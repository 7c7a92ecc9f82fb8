"""Player housing models for the Demesne game system.

A house has a tier (cottage, house, manor) fixing its room grid, storage and
weekly upkeep. Missing upkeep wears the condition down; poor condition shuts
off buffs, then portals and storage, until the house is abandoned at zero.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    JSON,
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

from demesne.rules_config import DEFAULT_RULES, HouseTier

from .base import Base, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import HouseTierName, check_in
from .references import LocatedMixin

if TYPE_CHECKING:
    from .player import Player
    from .world import Kingdom


class PlayerHouse(LocatedMixin, Base, TimestampMixin):
    """A player's house; each player owns at most one.

    Attributes:
        id: Primary key
        player_id: Owner
        kingdom_id: Kingdom the house stands in
        location_type: Kind of settlement the house stands in
        location_id: Id of that settlement
        name: House name
        tier: cottage/house/manor
        condition: Upkeep condition (0-100)
        upkeep_due_at: When the next upkeep payment falls due
        last_upkeep_paid_at: When upkeep was last paid
    """

    __tablename__ = "player_houses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    kingdom_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("kingdoms.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    tier: Mapped[str] = mapped_column(String, nullable=False, default=HouseTierName.COTTAGE)
    condition: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_RULES.houses.max_condition
    )
    upkeep_due_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    last_upkeep_paid_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )

    player: Mapped["Player"] = relationship("Player", back_populates="house")
    kingdom: Mapped[Optional["Kingdom"]] = relationship("Kingdom")
    rooms: Mapped[list["HouseRoom"]] = relationship(
        "HouseRoom", back_populates="house", cascade="all, delete-orphan"
    )
    storage: Mapped[list["HouseStorage"]] = relationship(
        "HouseStorage", back_populates="house", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("tier", HouseTierName), name="ck_player_houses_tier"),
        CheckConstraint("condition >= 0 AND condition <= 100", name="ck_player_houses_condition"),
        Index("idx_player_houses_location", "location_type", "location_id"),
        Index("idx_player_houses_upkeep", "upkeep_due_at"),
    )

    def __repr__(self) -> str:
        return f"<PlayerHouse(id={self.id}, player={self.player_id}, tier='{self.tier}')>"

    @property
    def tier_config(self) -> HouseTier | None:
        return DEFAULT_RULES.houses.tiers.get(self.tier)

    @property
    def storage_capacity(self) -> int:
        config = self.tier_config
        return config.storage if config is not None else 0

    @property
    def storage_used(self) -> int:
        return sum(entry.quantity for entry in self.storage)

    @property
    def max_rooms(self) -> int:
        config = self.tier_config
        return config.max_rooms if config is not None else 0

    @property
    def can_add_room(self) -> bool:
        return len(self.rooms) < self.max_rooms

    def is_upkeep_overdue(self, now: datetime | None = None) -> bool:
        return as_utc(self.upkeep_due_at) < resolve_now(now)

    def days_until_upkeep(self, now: datetime | None = None) -> int:
        """Whole days before upkeep falls due; 0 when due or overdue."""
        return max(0, (as_utc(self.upkeep_due_at) - resolve_now(now)).days)

    @property
    def are_buffs_disabled(self) -> bool:
        return self.condition <= DEFAULT_RULES.houses.buffs_disabled_at

    @property
    def are_portals_disabled(self) -> bool:
        return self.condition <= DEFAULT_RULES.houses.portals_disabled_at

    @property
    def is_storage_disabled(self) -> bool:
        return self.condition <= DEFAULT_RULES.houses.storage_disabled_at

    @property
    def is_abandoned(self) -> bool:
        return self.condition <= 0

    @classmethod
    def select_overdue(cls, now: datetime | None = None) -> Select:
        """Houses past their upkeep date that have not yet been abandoned."""
        return select(cls).where(cls.upkeep_due_at < resolve_now(now), cls.condition > 0)


class HouseRoom(Base, TimestampMixin):
    """A room placed on a house's grid."""

    __tablename__ = "house_rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_house_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("player_houses.id", ondelete="CASCADE"), nullable=False
    )

    room_type: Mapped[str] = mapped_column(String, nullable=False)
    grid_x: Mapped[int] = mapped_column(Integer, nullable=False)
    grid_y: Mapped[int] = mapped_column(Integer, nullable=False)
    furnishings: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    house: Mapped["PlayerHouse"] = relationship("PlayerHouse", back_populates="rooms")

    __table_args__ = (
        UniqueConstraint("player_house_id", "grid_x", "grid_y", name="uq_house_rooms_cell"),
        Index("idx_house_rooms_type", "player_house_id", "room_type"),
    )

    def __repr__(self) -> str:
        return f"<HouseRoom(id={self.id}, type='{self.room_type}')>"


class HouseStorage(Base, TimestampMixin):
    """Quantity of one item kept in a house's storage."""

    __tablename__ = "house_storage"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_house_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("player_houses.id", ondelete="CASCADE"), nullable=False
    )

    item_name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    house: Mapped["PlayerHouse"] = relationship("PlayerHouse", back_populates="storage")

    __table_args__ = (
        UniqueConstraint("player_house_id", "item_name", name="uq_house_storage_item"),
    )

    def __repr__(self) -> str:
        return f"<HouseStorage(id={self.id}, item='{self.item_name}', qty={self.quantity})>"
