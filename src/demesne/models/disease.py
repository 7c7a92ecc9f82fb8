"""Disease and epidemic models for the Demesne game system.

This module contains models for:
- DiseaseTypes (catalog of illnesses)
- DiseaseOutbreaks (an illness spreading through one location)
- DiseaseInfections (one player or NPC carrying an illness)
- DiseaseImmunities (protection against re-infection, optionally expiring)
- QuarantineOrders (an official order sealing off a location)
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
    or_,
    select,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from demesne.rules_config import DEFAULT_RULES

from .base import Base, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import (
    DiseaseSeverity,
    ImmunityType,
    InfectionStatus,
    OutbreakStatus,
    QuarantineStatus,
    check_in,
)
from .references import LocatedMixin

if TYPE_CHECKING:
    from .player import Player

_ACTIVE_OUTBREAK_STATUSES = (
    OutbreakStatus.EMERGING,
    OutbreakStatus.ACTIVE,
    OutbreakStatus.DECLINING,
)
_ACTIVE_INFECTION_STATUSES = (
    InfectionStatus.INCUBATING,
    InfectionStatus.SYMPTOMATIC,
    InfectionStatus.RECOVERING,
)


class DiseaseType(Base, TimestampMixin):
    """Catalog entry describing one illness.

    Attributes:
        id: Primary key
        name: Display name
        slug: Unique identifier
        description: Flavour text
        severity: minor/moderate/severe/plague
        base_spread_rate: Percent chance to spread per day
        mortality_rate: Percent chance of death per day when untreated
        base_duration_days: Typical length of an infection
        incubation_days: Days before symptoms appear
        symptoms: JSON list of symptom names
        stat_penalties: JSON map of stat to penalty, e.g. {"max_hp": -20}
        is_contagious: Whether the illness spreads between people
        grants_immunity: Whether recovering grants immunity
    """

    __tablename__ = "disease_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String, nullable=False)
    base_spread_rate: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    mortality_rate: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    base_duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    incubation_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    symptoms: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    stat_penalties: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    is_contagious: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    grants_immunity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    outbreaks: Mapped[list["DiseaseOutbreak"]] = relationship(
        "DiseaseOutbreak", back_populates="disease_type", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("severity", DiseaseSeverity), name="ck_disease_types_severity"),
    )

    def __repr__(self) -> str:
        return f"<DiseaseType(id={self.id}, slug='{self.slug}', severity='{self.severity}')>"


class DiseaseOutbreak(LocatedMixin, Base, TimestampMixin):
    """An illness spreading through one location.

    Attributes:
        id: Primary key
        disease_type_id: Foreign key to the illness
        location_type: Kind of place affected
        location_id: Id of that place
        status: emerging/active/declining/contained/ended
        infected_count: People currently infected
        recovered_count: People who recovered
        death_count: People who died
        peak_infected: Highest infected_count seen
        started_at: When the outbreak began
        peaked_at: When peak_infected was reached
        ended_at: When the outbreak ended
        is_quarantined: Whether a quarantine is in force
    """

    __tablename__ = "disease_outbreaks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    disease_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("disease_types.id", ondelete="CASCADE"), nullable=False
    )

    status: Mapped[str] = mapped_column(String, nullable=False, default=OutbreakStatus.EMERGING)
    infected_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recovered_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    death_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    peak_infected: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    peaked_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    ended_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    is_quarantined: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    disease_type: Mapped["DiseaseType"] = relationship("DiseaseType", back_populates="outbreaks")
    infections: Mapped[list["DiseaseInfection"]] = relationship(
        "DiseaseInfection", back_populates="outbreak"
    )
    quarantine_orders: Mapped[list["QuarantineOrder"]] = relationship(
        "QuarantineOrder", back_populates="outbreak", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("status", OutbreakStatus), name="ck_disease_outbreaks_status"),
        Index("idx_disease_outbreaks_location", "location_type", "location_id"),
        Index("idx_disease_outbreaks_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<DiseaseOutbreak(id={self.id}, type={self.disease_type_id}, "
            f"status='{self.status}')>"
        )

    @property
    def is_active(self) -> bool:
        return self.status in _ACTIVE_OUTBREAK_STATUSES

    @property
    def mortality_ratio(self) -> float:
        """Share of resolved cases that ended in death; 0.0 before any resolve."""
        resolved = self.death_count + self.recovered_count
        if resolved == 0:
            return 0.0
        return self.death_count / resolved

    def duration_days(self, now: datetime | None = None) -> int:
        """Whole days from start to end, or to now while still running."""
        end = as_utc(self.ended_at) or resolve_now(now)
        return max(0, (end - as_utc(self.started_at)).days)

    @classmethod
    def select_active(cls) -> Select:
        return select(cls).where(cls.status.in_(_ACTIVE_OUTBREAK_STATUSES))


class DiseaseInfection(Base, TimestampMixin):
    """One player or NPC carrying an illness.

    Attributes:
        id: Primary key
        disease_outbreak_id: Outbreak this infection belongs to (nullable)
        disease_type_id: Foreign key to the illness
        player_id: Infected player (nullable for NPCs)
        npc_id: Infected NPC id (nullable for players)
        status: incubating/symptomatic/recovering/recovered/deceased
        severity_modifier: Individual variation added to mortality
        days_infected: Days since infection
        days_symptomatic: Days showing symptoms
        is_treated: Whether a healer has treated the infection
        infected_at: Infection time
        symptoms_started_at: When symptoms appeared
        recovered_at: Recovery time
    """

    __tablename__ = "disease_infections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    disease_outbreak_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("disease_outbreaks.id", ondelete="SET NULL"), nullable=True
    )
    disease_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("disease_types.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=True
    )
    npc_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(
        String, nullable=False, default=InfectionStatus.INCUBATING
    )
    severity_modifier: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    days_infected: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    days_symptomatic: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_treated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    infected_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    symptoms_started_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    recovered_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    outbreak: Mapped[Optional["DiseaseOutbreak"]] = relationship(
        "DiseaseOutbreak", back_populates="infections"
    )
    disease_type: Mapped["DiseaseType"] = relationship("DiseaseType")
    player: Mapped[Optional["Player"]] = relationship("Player", back_populates="infections")

    __table_args__ = (
        CheckConstraint(check_in("status", InfectionStatus), name="ck_disease_infections_status"),
        CheckConstraint(
            "player_id IS NOT NULL OR npc_id IS NOT NULL", name="ck_disease_infections_host"
        ),
        Index("idx_disease_infections_player_status", "player_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<DiseaseInfection(id={self.id}, player={self.player_id}, status='{self.status}')>"

    @property
    def is_active(self) -> bool:
        return self.status in _ACTIVE_INFECTION_STATUSES

    @property
    def is_symptomatic(self) -> bool:
        return self.status == InfectionStatus.SYMPTOMATIC

    @property
    def effective_mortality_rate(self) -> int:
        """Daily death chance in percent; 0 once treated, else clamped to 1..50."""
        if self.is_treated or self.disease_type.mortality_rate <= 0:
            return 0
        rules = DEFAULT_RULES.disease
        chance = self.disease_type.mortality_rate + self.severity_modifier
        return max(rules.min_mortality_chance, min(rules.max_mortality_chance, chance))

    @classmethod
    def select_active(cls) -> Select:
        return select(cls).where(cls.status.in_(_ACTIVE_INFECTION_STATUSES))


class DiseaseImmunity(Base, TimestampMixin):
    """Protection a player holds against one illness.

    Attributes:
        id: Primary key
        disease_type_id: Foreign key to the illness
        player_id: Immune player
        immunity_type: recovered/vaccinated/natural
        acquired_at: When the immunity was gained
        expires_at: When it lapses (None means permanent)
    """

    __tablename__ = "disease_immunities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    disease_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("disease_types.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=True
    )

    immunity_type: Mapped[str] = mapped_column(String, nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    disease_type: Mapped["DiseaseType"] = relationship("DiseaseType")
    player: Mapped[Optional["Player"]] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("disease_type_id", "player_id", name="uq_disease_immunities"),
        CheckConstraint(
            check_in("immunity_type", ImmunityType), name="ck_disease_immunities_type"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<DiseaseImmunity(id={self.id}, player={self.player_id}, "
            f"type={self.disease_type_id})>"
        )

    def is_active(self, now: datetime | None = None) -> bool:
        """Permanent immunities are always active; others until expires_at."""
        expires_at = as_utc(self.expires_at)
        return expires_at is None or expires_at > resolve_now(now)

    @classmethod
    def select_active(cls, now: datetime | None = None) -> Select:
        moment = resolve_now(now)
        return select(cls).where(or_(cls.expires_at.is_(None), cls.expires_at > moment))


class QuarantineOrder(LocatedMixin, Base, TimestampMixin):
    """An order sealing off a location during an outbreak.

    Attributes:
        id: Primary key
        disease_outbreak_id: Outbreak prompting the order
        location_type: Kind of place sealed off
        location_id: Id of that place
        ordered_by_id: Player who issued the order
        status: active/lifted
        ordered_at: Issue time
        lifted_at: When the order was lifted
        reason: Stated reason
    """

    __tablename__ = "quarantine_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    disease_outbreak_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("disease_outbreaks.id", ondelete="CASCADE"), nullable=False
    )
    ordered_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    status: Mapped[str] = mapped_column(String, nullable=False, default=QuarantineStatus.ACTIVE)
    ordered_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    lifted_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    outbreak: Mapped["DiseaseOutbreak"] = relationship(
        "DiseaseOutbreak", back_populates="quarantine_orders"
    )
    ordered_by: Mapped[Optional["Player"]] = relationship("Player")

    __table_args__ = (
        CheckConstraint(check_in("status", QuarantineStatus), name="ck_quarantine_orders_status"),
        Index("idx_quarantine_orders_location", "location_type", "location_id"),
    )

    def __repr__(self) -> str:
        return f"<QuarantineOrder(id={self.id}, outbreak={self.disease_outbreak_id})>"

    @property
    def is_active(self) -> bool:
        return self.status == QuarantineStatus.ACTIVE
