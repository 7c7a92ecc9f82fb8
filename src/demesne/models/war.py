"""Warfare models for the Demesne game system.

This module contains models for:
- Armies and ArmyUnits (owned by a player or a realm, stationed somewhere)
- Wars and WarParticipants (belligerents on either side)
- Battles and BattleParticipants (armies committed to one engagement)
- Sieges and SupplyLines
- PeaceTreaties (ending a war and imposing a truce)
- MercenaryCompanies (armies for hire)
- WarGoals (what a claimant wants out of a war)

Owners, belligerents, and claimants are polymorphic ``(type, id)`` pairs
exposed as ``EntityRef`` values; siege targets and supply sources are
``LocationRef`` values.
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
    select,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from demesne.rules_config import DEFAULT_RULES

from .base import Base, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import (
    ArmyStatus,
    BattleOutcome,
    BattlePhase,
    BattleStatus,
    BattleType,
    CasusBelli,
    LocationKind,
    MercenaryReputation,
    Side,
    SiegeStatus,
    SupplyLineStatus,
    TreatyType,
    UnitStatus,
    WarGoalType,
    WarRole,
    WarStatus,
    check_in,
)
from .references import EntityRef, LocatedMixin, LocationRef, resolve_for

if TYPE_CHECKING:
    from .player import Player
    from .world import Kingdom

_FIELD_LOCATIONS = frozenset(
    {LocationKind.VILLAGE, LocationKind.TOWN, LocationKind.CASTLE, LocationKind.BARONY}
)
_SIEGE_TARGETS = frozenset({LocationKind.VILLAGE, LocationKind.TOWN, LocationKind.CASTLE})
_ACTIVE_WAR_STATUSES = (WarStatus.ACTIVE, WarStatus.ATTACKER_WINNING, WarStatus.DEFENDER_WINNING)
_ACTIVE_SIEGE_STATUSES = (SiegeStatus.ACTIVE, SiegeStatus.ASSAULT)


# ---------------------------------------------------------------------------
# Armies


class Army(LocatedMixin, Base, TimestampMixin):
    """A field army.

    Attributes:
        id: Primary key
        name: Army name
        commander_id: Commanding player (nullable)
        npc_commander_id: Commanding NPC id (nullable)
        owner_type: Kind of owner (player, kingdom, barony...)
        owner_id: Id of the owner
        location_type: Kind of place the army stands in
        location_id: Id of that place
        status: mustering/marching/encamped/besieging/in_battle/disbanded
        morale: Morale (0-100)
        supplies: Days of supplies carried
        daily_supply_cost: Supplies consumed per day
        gold_upkeep: Gold owed per day
        composition: JSON summary of unit types
        mustered_at: When the army finished mustering
    """

    __tablename__ = "armies"

    LOCATION_TYPES = _FIELD_LOCATIONS

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    commander_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )
    npc_commander_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    owner_type: Mapped[str] = mapped_column(String, nullable=False)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=ArmyStatus.MUSTERING)
    morale: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    supplies: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    daily_supply_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold_upkeep: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    composition: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    mustered_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    commander: Mapped[Optional["Player"]] = relationship("Player")
    units: Mapped[list["ArmyUnit"]] = relationship(
        "ArmyUnit", back_populates="army", cascade="all, delete-orphan"
    )
    supply_lines: Mapped[list["SupplyLine"]] = relationship(
        "SupplyLine", back_populates="army", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("status", ArmyStatus), name="ck_armies_status"),
        Index("idx_armies_owner", "owner_type", "owner_id"),
        Index("idx_armies_location", "location_type", "location_id"),
        Index("idx_armies_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Army(id={self.id}, name='{self.name}', status='{self.status}')>"

    @property
    def owner_ref(self) -> EntityRef | None:
        return EntityRef.parse(self.owner_type, self.owner_id)

    def owner(self) -> Any | None:
        return resolve_for(self, self.owner_type, self.owner_id)

    @property
    def total_troops(self) -> int:
        return sum(unit.count for unit in self.units)

    @property
    def total_attack(self) -> int:
        return sum(unit.count * unit.attack for unit in self.units)

    @property
    def total_defense(self) -> int:
        return sum(unit.count * unit.defense for unit in self.units)

    @property
    def is_active(self) -> bool:
        return self.status != ArmyStatus.DISBANDED


class ArmyUnit(Base, TimestampMixin):
    """A body of soldiers of one type within an army."""

    __tablename__ = "army_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    army_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("armies.id", ondelete="CASCADE"), nullable=False
    )

    unit_type: Mapped[str] = mapped_column(String, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)
    max_count: Mapped[int] = mapped_column(Integer, nullable=False)
    attack: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    defense: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    morale_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    upkeep_per_soldier: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String, nullable=False, default=UnitStatus.READY)
    equipment: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    army: Mapped["Army"] = relationship("Army", back_populates="units")

    __table_args__ = (
        CheckConstraint(check_in("status", UnitStatus), name="ck_army_units_status"),
        Index("idx_army_units_type", "unit_type"),
    )

    def __repr__(self) -> str:
        return f"<ArmyUnit(id={self.id}, type='{self.unit_type}', count={self.count})>"

    @property
    def strength_ratio(self) -> float:
        """Fraction of full strength remaining."""
        if self.max_count <= 0:
            return 0.0
        return self.count / self.max_count


# ---------------------------------------------------------------------------
# Wars


class War(Base, TimestampMixin):
    """A declared war between two parties.

    Attributes:
        id: Primary key
        name: War name
        casus_belli: claim/conquest/rebellion/holy_war/defense/raid
        attacker_kingdom_id: Attacking kingdom (nullable)
        defender_kingdom_id: Defending kingdom (nullable)
        attacker_type: Kind of attacking party
        attacker_id: Id of the attacking party
        defender_type: Kind of defending party
        defender_id: Id of the defending party
        status: active/attacker_winning/defender_winning/white_peace/
            attacker_victory/defender_victory
        attacker_war_score: Attacker's accumulated war score
        defender_war_score: Defender's accumulated war score
        war_goals: JSON summary of the attacker's demands
        peace_terms: JSON summary of the terms that ended the war
        declared_at: Declaration time
        ended_at: End time
    """

    __tablename__ = "wars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    attacker_kingdom_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("kingdoms.id", ondelete="SET NULL"), nullable=True
    )
    defender_kingdom_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("kingdoms.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    casus_belli: Mapped[str] = mapped_column(String, nullable=False)
    attacker_type: Mapped[str | None] = mapped_column(String, nullable=True)
    attacker_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    defender_type: Mapped[str | None] = mapped_column(String, nullable=True)
    defender_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default=WarStatus.ACTIVE)
    attacker_war_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    defender_war_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    war_goals: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    peace_terms: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    declared_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    attacker_kingdom: Mapped[Optional["Kingdom"]] = relationship(
        "Kingdom", foreign_keys=[attacker_kingdom_id]
    )
    defender_kingdom: Mapped[Optional["Kingdom"]] = relationship(
        "Kingdom", foreign_keys=[defender_kingdom_id]
    )
    participants: Mapped[list["WarParticipant"]] = relationship(
        "WarParticipant", back_populates="war", cascade="all, delete-orphan"
    )
    battles: Mapped[list["Battle"]] = relationship("Battle", back_populates="war")
    sieges: Mapped[list["Siege"]] = relationship("Siege", back_populates="war")
    goals: Mapped[list["WarGoal"]] = relationship(
        "WarGoal", back_populates="war", cascade="all, delete-orphan"
    )
    treaties: Mapped[list["PeaceTreaty"]] = relationship(
        "PeaceTreaty", back_populates="war", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("casus_belli", CasusBelli), name="ck_wars_casus_belli"),
        CheckConstraint(check_in("status", WarStatus), name="ck_wars_status"),
        Index("idx_wars_status", "status"),
        Index("idx_wars_attacker", "attacker_type", "attacker_id"),
        Index("idx_wars_defender", "defender_type", "defender_id"),
    )

    def __repr__(self) -> str:
        return f"<War(id={self.id}, name='{self.name}', status='{self.status}')>"

    @property
    def attacker_ref(self) -> EntityRef | None:
        return EntityRef.parse(self.attacker_type, self.attacker_id)

    @property
    def defender_ref(self) -> EntityRef | None:
        return EntityRef.parse(self.defender_type, self.defender_id)

    def attacker(self) -> Any | None:
        return resolve_for(self, self.attacker_type, self.attacker_id)

    def defender(self) -> Any | None:
        return resolve_for(self, self.defender_type, self.defender_id)

    @property
    def is_active(self) -> bool:
        return self.status in _ACTIVE_WAR_STATUSES

    @property
    def war_score_balance(self) -> int:
        """Attacker score minus defender score; positive favours the attacker."""
        return self.attacker_war_score - self.defender_war_score

    def duration_days(self, now: datetime | None = None) -> int:
        end = as_utc(self.ended_at) or resolve_now(now)
        return max(0, (end - as_utc(self.declared_at)).days)

    def participants_on(self, side: Side) -> list["WarParticipant"]:
        return [p for p in self.participants if p.side == side]

    @classmethod
    def select_active(cls) -> Select:
        return select(cls).where(cls.status.in_(_ACTIVE_WAR_STATUSES))


class WarParticipant(Base, TimestampMixin):
    """A party fighting on one side of a war."""

    __tablename__ = "war_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    war_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("wars.id", ondelete="CASCADE"), nullable=False
    )

    participant_type: Mapped[str] = mapped_column(String, nullable=False)
    participant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    side: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False, default=WarRole.ALLY)
    is_war_leader: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    contribution_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    left_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    war: Mapped["War"] = relationship("War", back_populates="participants")

    __table_args__ = (
        CheckConstraint(check_in("side", Side), name="ck_war_participants_side"),
        CheckConstraint(check_in("role", WarRole), name="ck_war_participants_role"),
        Index("idx_war_participants_party", "participant_type", "participant_id"),
        Index("idx_war_participants_side", "side"),
    )

    def __repr__(self) -> str:
        return (
            f"<WarParticipant(id={self.id}, party={self.participant_type}:{self.participant_id}, "
            f"side='{self.side}')>"
        )

    @property
    def participant_ref(self) -> EntityRef | None:
        return EntityRef.parse(self.participant_type, self.participant_id)

    def participant(self) -> Any | None:
        return resolve_for(self, self.participant_type, self.participant_id)

    @property
    def has_left(self) -> bool:
        return self.left_at is not None


# ---------------------------------------------------------------------------
# Battles and sieges


class Battle(LocatedMixin, Base, TimestampMixin):
    """A single engagement.

    Attributes:
        id: Primary key
        name: Battle name (nullable)
        war_id: War the battle belongs to (nullable)
        location_type: Kind of battlefield location
        location_id: Id of that location
        battle_type: field/siege_assault/naval/skirmish
        status: ongoing/attacker_victory/defender_victory/draw/inconclusive
        phase: engagement/melee/pursuit/aftermath
        day: Day of fighting
        attacker_troops_start: Attacking troops at the outset
        defender_troops_start: Defending troops at the outset
        attacker_casualties: Attacking troops lost
        defender_casualties: Defending troops lost
        battle_log: JSON list of log entries
        terrain_modifiers: JSON map of terrain effects
        weather_modifiers: JSON map of weather effects
        started_at: Start time
        ended_at: End time
    """

    __tablename__ = "battles"

    LOCATION_TYPES = _FIELD_LOCATIONS

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    war_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("wars.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str | None] = mapped_column(String, nullable=True)
    battle_type: Mapped[str] = mapped_column(String, nullable=False, default=BattleType.FIELD)
    status: Mapped[str] = mapped_column(String, nullable=False, default=BattleStatus.ONGOING)
    phase: Mapped[str] = mapped_column(String, nullable=False, default=BattlePhase.ENGAGEMENT)
    day: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    attacker_troops_start: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    defender_troops_start: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attacker_casualties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    defender_casualties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    battle_log: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    terrain_modifiers: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    weather_modifiers: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    started_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    war: Mapped[Optional["War"]] = relationship("War", back_populates="battles")
    participants: Mapped[list["BattleParticipant"]] = relationship(
        "BattleParticipant", back_populates="battle", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("battle_type", BattleType), name="ck_battles_type"),
        CheckConstraint(check_in("status", BattleStatus), name="ck_battles_status"),
        CheckConstraint(check_in("phase", BattlePhase), name="ck_battles_phase"),
        Index("idx_battles_location", "location_type", "location_id"),
        Index("idx_battles_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Battle(id={self.id}, type='{self.battle_type}', status='{self.status}')>"

    @property
    def total_troops(self) -> int:
        return self.attacker_troops_start + self.defender_troops_start

    @property
    def total_casualties(self) -> int:
        return self.attacker_casualties + self.defender_casualties

    @property
    def casualty_ratio(self) -> float:
        """Share of all committed troops lost, 0.0 when none were committed."""
        if self.total_troops == 0:
            return 0.0
        return self.total_casualties / self.total_troops

    @property
    def is_ongoing(self) -> bool:
        return self.status == BattleStatus.ONGOING


class BattleParticipant(Base, TimestampMixin):
    """An army committed to one side of a battle."""

    __tablename__ = "battle_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    battle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("battles.id", ondelete="CASCADE"), nullable=False
    )
    army_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("armies.id", ondelete="CASCADE"), nullable=False
    )

    side: Mapped[str] = mapped_column(String, nullable=False)
    is_commander: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    troops_committed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    casualties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    morale_at_start: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    morale_at_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    outcome: Mapped[str | None] = mapped_column(String, nullable=True)

    battle: Mapped["Battle"] = relationship("Battle", back_populates="participants")
    army: Mapped["Army"] = relationship("Army")

    __table_args__ = (
        CheckConstraint(check_in("side", Side), name="ck_battle_participants_side"),
        CheckConstraint(
            check_in("outcome", BattleOutcome, nullable=True), name="ck_battle_participants_outcome"
        ),
        Index("idx_battle_participants_side", "side"),
    )

    def __repr__(self) -> str:
        return (
            f"<BattleParticipant(id={self.id}, army={self.army_id}, side='{self.side}', "
            f"committed={self.troops_committed})>"
        )

    @property
    def casualty_rate(self) -> float:
        """Percentage of committed troops lost; 0 when no troops were committed."""
        if not self.troops_committed:
            return 0.0
        return self.casualties / self.troops_committed * 100

    @property
    def morale_lost(self) -> int:
        if self.morale_at_end is None:
            return 0
        return self.morale_at_start - self.morale_at_end


class Siege(Base, TimestampMixin):
    """An army besieging a settlement.

    Attributes:
        id: Primary key
        war_id: War the siege belongs to (nullable)
        attacking_army_id: Besieging army
        target_type: castle/town/village
        target_id: Id of the besieged settlement
        status: active/assault/breached/captured/lifted/abandoned
        fortification_level: Remaining walls (0-100)
        garrison_strength: Defending troops
        garrison_morale: Defender morale (0-100)
        supplies_remaining: Defender supplies in percent
        days_besieged: Days the siege has lasted
        has_breach: Whether the walls have been breached
        siege_equipment: JSON map of engine type to count
        siege_log: JSON list of log entries
        started_at: Start time
        ended_at: End time
    """

    __tablename__ = "sieges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    war_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("wars.id", ondelete="SET NULL"), nullable=True
    )
    attacking_army_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("armies.id", ondelete="CASCADE"), nullable=False
    )

    target_type: Mapped[str] = mapped_column(String, nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=SiegeStatus.ACTIVE)
    fortification_level: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    garrison_strength: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    garrison_morale: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    supplies_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    days_besieged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    has_breach: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    siege_equipment: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    siege_log: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    started_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    war: Mapped[Optional["War"]] = relationship("War", back_populates="sieges")
    attacking_army: Mapped["Army"] = relationship("Army")

    __table_args__ = (
        CheckConstraint(check_in("status", SiegeStatus), name="ck_sieges_status"),
        CheckConstraint(check_in("target_type", LocationKind), name="ck_sieges_target_type"),
        Index("idx_sieges_target", "target_type", "target_id"),
        Index("idx_sieges_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Siege(id={self.id}, target={self.target_type}:{self.target_id})>"

    @property
    def target_ref(self) -> LocationRef | None:
        ref = LocationRef.parse(self.target_type, self.target_id)
        if ref is None or ref.kind not in _SIEGE_TARGETS:
            return None
        return ref

    def target(self) -> Any | None:
        return resolve_for(self, self.target_type, self.target_id, _SIEGE_TARGETS)

    @property
    def is_active(self) -> bool:
        return self.status in _ACTIVE_SIEGE_STATUSES

    def can_assault(self) -> bool:
        """An active siege may assault once the walls are breached or worn down."""
        if not self.is_active:
            return False
        return (
            self.has_breach
            or self.fortification_level <= DEFAULT_RULES.war.breach_fortification_level
        )


class SupplyLine(Base, TimestampMixin):
    """A route feeding supplies to an army from a settlement."""

    __tablename__ = "supply_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    army_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("armies.id", ondelete="CASCADE"), nullable=False
    )

    source_type: Mapped[str] = mapped_column(String, nullable=False)
    source_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=SupplyLineStatus.ACTIVE)
    supply_rate: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    distance: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    safety: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    route: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    army: Mapped["Army"] = relationship("Army", back_populates="supply_lines")

    __table_args__ = (
        CheckConstraint(check_in("status", SupplyLineStatus), name="ck_supply_lines_status"),
        Index("idx_supply_lines_source", "source_type", "source_id"),
        Index("idx_supply_lines_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<SupplyLine(id={self.id}, army={self.army_id}, status='{self.status}')>"

    @property
    def source_ref(self) -> LocationRef | None:
        ref = LocationRef.parse(self.source_type, self.source_id)
        if ref is None or ref.kind not in _SIEGE_TARGETS:
            return None
        return ref

    def source(self) -> Any | None:
        return resolve_for(self, self.source_type, self.source_id, _SIEGE_TARGETS)

    @property
    def effective_rate(self) -> int:
        """Supplies actually delivered per day given the line's status."""
        if self.status == SupplyLineStatus.SEVERED:
            return 0
        if self.status == SupplyLineStatus.DISRUPTED:
            return int(self.supply_rate * DEFAULT_RULES.war.disrupted_supply_factor)
        return self.supply_rate


# ---------------------------------------------------------------------------
# Peace, mercenaries, war goals


class PeaceTreaty(Base, TimestampMixin):
    """Terms ending a war, followed by a truce.

    Attributes:
        id: Primary key
        war_id: War ended by the treaty
        treaty_type: white_peace/surrender/negotiated
        winner_side: attacker, defender, or None for a white peace
        territory_changes: JSON list of transferred holdings
        gold_payment: Gold paid by the losing side
        prisoner_exchange: Prisoners exchanged
        other_terms: JSON document of further terms
        truce_days: Length of the enforced truce
        signed_at: Signing time
        truce_expires_at: When the truce lapses
    """

    __tablename__ = "peace_treaties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    war_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("wars.id", ondelete="CASCADE"), nullable=False
    )

    treaty_type: Mapped[str] = mapped_column(String, nullable=False)
    winner_side: Mapped[str | None] = mapped_column(String, nullable=True)
    territory_changes: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    gold_payment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prisoner_exchange: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    other_terms: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    truce_days: Mapped[int] = mapped_column(Integer, nullable=False, default=365)
    signed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    truce_expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    war: Mapped["War"] = relationship("War", back_populates="treaties")

    __table_args__ = (
        CheckConstraint(check_in("treaty_type", TreatyType), name="ck_peace_treaties_type"),
        CheckConstraint(
            check_in("winner_side", Side, nullable=True), name="ck_peace_treaties_winner"
        ),
    )

    def __repr__(self) -> str:
        return f"<PeaceTreaty(id={self.id}, war={self.war_id}, type='{self.treaty_type}')>"

    def is_truce_active(self, now: datetime | None = None) -> bool:
        return as_utc(self.truce_expires_at) > resolve_now(now)

    def truce_days_remaining(self, now: datetime | None = None) -> int:
        """Whole days left on the truce; 0 once it has expired."""
        return max(0, (as_utc(self.truce_expires_at) - resolve_now(now)).days)

    @classmethod
    def select_active_truce(cls, now: datetime | None = None) -> Select:
        return select(cls).where(cls.truce_expires_at > resolve_now(now))


class MercenaryCompany(Base, TimestampMixin):
    """A company of sellswords available for hire."""

    __tablename__ = "mercenary_companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    army_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("armies.id", ondelete="SET NULL"), nullable=True
    )
    hired_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    reputation: Mapped[str] = mapped_column(
        String, nullable=False, default=MercenaryReputation.UNKNOWN
    )
    hired_by_type: Mapped[str | None] = mapped_column(String, nullable=True)
    hired_by_entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    hire_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    daily_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    contract_days_remaining: Mapped[int | None] = mapped_column(Integer, nullable=True)
    specialization: Mapped[str | None] = mapped_column(String, nullable=True)
    home_region: Mapped[str | None] = mapped_column(String, nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    history: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    army: Mapped[Optional["Army"]] = relationship("Army")
    hired_by: Mapped[Optional["Player"]] = relationship("Player")

    __table_args__ = (
        CheckConstraint(
            check_in("reputation", MercenaryReputation), name="ck_mercenary_companies_reputation"
        ),
        Index("idx_mercenary_companies_available", "is_available"),
        Index("idx_mercenary_companies_reputation", "reputation"),
    )

    def __repr__(self) -> str:
        return f"<MercenaryCompany(id={self.id}, name='{self.name}')>"

    @property
    def employer_ref(self) -> EntityRef | None:
        return EntityRef.parse(self.hired_by_type, self.hired_by_entity_id)

    @property
    def is_under_contract(self) -> bool:
        return not self.is_available and self.hired_by_id is not None

    @classmethod
    def select_available(cls) -> Select:
        return select(cls).where(cls.is_available.is_(True))


class WarGoal(Base, TimestampMixin):
    """One demand a claimant pursues in a war."""

    __tablename__ = "war_goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    war_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("wars.id", ondelete="CASCADE"), nullable=False
    )

    goal_type: Mapped[str] = mapped_column(String, nullable=False)
    target_type: Mapped[str | None] = mapped_column(String, nullable=True)
    target_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    claimant_type: Mapped[str] = mapped_column(String, nullable=False)
    claimant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    is_achieved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    war_score_value: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    war: Mapped["War"] = relationship("War", back_populates="goals")

    __table_args__ = (
        CheckConstraint(check_in("goal_type", WarGoalType), name="ck_war_goals_type"),
        Index("idx_war_goals_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<WarGoal(id={self.id}, type='{self.goal_type}')>"

    @property
    def target_ref(self) -> LocationRef | None:
        return LocationRef.parse(self.target_type, self.target_id)

    @property
    def claimant_ref(self) -> EntityRef | None:
        return EntityRef.parse(self.claimant_type, self.claimant_id)

    def target(self) -> Any | None:
        return resolve_for(self, self.target_type, self.target_id, LocationKind)
