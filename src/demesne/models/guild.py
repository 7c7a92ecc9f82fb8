"""Guild models for the Demesne game system.

This module contains models for:
- GuildBenefits (catalog of perks unlocked by guild level)
- Guilds (crafting guilds seated in a town or barony)
- GuildMembers (membership with rank and contribution)
- GuildActivities (contribution log)
- GuildElections, GuildElectionCandidates, GuildElectionVotes
- GuildPriceControls (minimum prices the guild enforces)
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Select,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    select,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from demesne.rules_config import DEFAULT_RULES

from .base import Base, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import GuildActivityType, GuildElectionStatus, GuildRank, LocationKind, check_in
from .references import LocatedMixin

if TYPE_CHECKING:
    from .player import Player

_VOTING_RANKS = (GuildRank.GUILDMASTER, GuildRank.MASTER)
_OPEN_ELECTION_STATUSES = (GuildElectionStatus.NOMINATION, GuildElectionStatus.VOTING)

guild_benefit_guild = Table(
    "guild_benefit_guild",
    Base.metadata,
    Column("guild_id", Integer, ForeignKey("guilds.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "guild_benefit_id",
        Integer,
        ForeignKey("guild_benefits.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
)


class GuildBenefit(Base, TimestampMixin):
    """Catalog entry for a perk a guild can hold.

    Attributes:
        id: Primary key
        name: Unique benefit name
        description: What the benefit does
        icon: Icon name for display
        skill_name: Skill the benefit applies to (None for any)
        effects: JSON map of stat to bonus
        required_guild_level: Minimum guild level to hold the benefit
    """

    __tablename__ = "guild_benefits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(String, nullable=False, default="award")
    skill_name: Mapped[str | None] = mapped_column(String, nullable=True)
    effects: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    required_guild_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    guilds: Mapped[list["Guild"]] = relationship(
        "Guild", secondary=guild_benefit_guild, back_populates="benefits"
    )

    def __repr__(self) -> str:
        return f"<GuildBenefit(id={self.id}, name='{self.name}')>"


class Guild(LocatedMixin, Base, TimestampMixin):
    """Represents a crafting guild.

    Attributes:
        id: Primary key
        name: Unique guild name
        description: Charter text
        icon: Icon name for display
        color: Banner colour as a hex string
        primary_skill: Skill the guild practises
        location_type: town or barony
        location_id: Id of the seat
        founder_id: Player who founded the guild
        guildmaster_id: Current guildmaster
        treasury: Gold held by the guild
        level: Guild level (1-10)
        total_contribution: Lifetime contribution points
        founding_cost: Gold paid to found the guild
        membership_fee: Gold paid to join
        weekly_dues: Gold owed by members each week
        is_public: Whether anyone may apply
        has_monopoly: Whether the guild holds a trade monopoly at its seat
        monopoly_granted_at: When the monopoly was granted
        is_active: False once the guild is disbanded
    """

    __tablename__ = "guilds"

    LOCATION_TYPES = frozenset({LocationKind.TOWN, LocationKind.BARONY})

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    founder_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )
    guildmaster_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str] = mapped_column(String, nullable=False, default="users")
    color: Mapped[str] = mapped_column(String, nullable=False, default="#f59e0b")
    primary_skill: Mapped[str] = mapped_column(String, nullable=False)
    treasury: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_contribution: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    founding_cost: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_RULES.guilds.founding_cost
    )
    membership_fee: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_RULES.guilds.membership_fee
    )
    weekly_dues: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_RULES.guilds.weekly_dues
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    has_monopoly: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    monopoly_granted_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    founder: Mapped[Optional["Player"]] = relationship("Player", foreign_keys=[founder_id])
    guildmaster: Mapped[Optional["Player"]] = relationship(
        "Player", foreign_keys=[guildmaster_id]
    )
    members: Mapped[list["GuildMember"]] = relationship(
        "GuildMember", back_populates="guild", cascade="all, delete-orphan"
    )
    benefits: Mapped[list["GuildBenefit"]] = relationship(
        "GuildBenefit", secondary=guild_benefit_guild, back_populates="guilds"
    )
    activities: Mapped[list["GuildActivity"]] = relationship(
        "GuildActivity", back_populates="guild", cascade="all, delete-orphan"
    )
    elections: Mapped[list["GuildElection"]] = relationship(
        "GuildElection",
        back_populates="guild",
        cascade="all, delete-orphan",
        order_by="GuildElection.id",
    )
    price_controls: Mapped[list["GuildPriceControl"]] = relationship(
        "GuildPriceControl", back_populates="guild", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            f"level >= 1 AND level <= {DEFAULT_RULES.guilds.max_level}", name="ck_guilds_level"
        ),
        Index("idx_guilds_location", "location_type", "location_id"),
        Index("idx_guilds_skill_active", "primary_skill", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Guild(id={self.id}, name='{self.name}', level={self.level})>"

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def master_count(self) -> int:
        """Members holding voting rights."""
        return sum(1 for member in self.members if member.has_voting_rights)

    @property
    def can_accept_members(self) -> bool:
        return self.is_active and self.is_public

    def calculate_level(self) -> int:
        """Highest level whose contribution threshold has been reached."""
        rules = DEFAULT_RULES.guilds
        level = 1
        for candidate, threshold in sorted(rules.level_thresholds.items()):
            if self.total_contribution >= threshold:
                level = candidate
        return min(level, rules.max_level)

    @property
    def level_progress(self) -> float:
        """Percentage of the way from the current level to the next."""
        rules = DEFAULT_RULES.guilds
        if self.level >= rules.max_level:
            return 100.0
        level = max(self.level, 1)
        current = rules.level_thresholds[level]
        needed = rules.level_thresholds[level + 1] - current
        return (self.total_contribution - current) / needed * 100

    def combined_effects(self) -> dict[str, int]:
        """Sum of every held benefit's effects, keyed by stat."""
        effects: dict[str, int] = {}
        for benefit in self.benefits:
            for stat, value in (benefit.effects or {}).items():
                effects[stat] = effects.get(stat, 0) + value
        return effects

    @property
    def skill_display(self) -> str:
        return self.primary_skill[:1].upper() + self.primary_skill[1:]

    @property
    def active_election(self) -> Optional["GuildElection"]:
        for election in self.elections:
            if election.is_active:
                return election
        return None

    @property
    def has_active_election(self) -> bool:
        return self.active_election is not None

    @property
    def guildmaster_member(self) -> Optional["GuildMember"]:
        for member in self.members:
            if member.rank == GuildRank.GUILDMASTER:
                return member
        return None

    @classmethod
    def select_active(cls) -> Select:
        return select(cls).where(cls.is_active.is_(True))

    @classmethod
    def select_public(cls) -> Select:
        return cls.select_active().where(cls.is_public.is_(True))


_RANK_DISPLAY = {
    GuildRank.GUILDMASTER: "Guildmaster",
    GuildRank.MASTER: "Master",
    GuildRank.JOURNEYMAN: "Journeyman",
    GuildRank.APPRENTICE: "Apprentice",
}


class GuildMember(Base, TimestampMixin):
    """A player's membership in a guild.

    Attributes:
        id: Primary key
        player_id: Member
        guild_id: Guild
        rank: guildmaster/master/journeyman/apprentice
        contribution: Contribution points earned
        years_membership: Whole years of membership
        dues_paid: Whether the latest dues were paid
        dues_paid_until: When paid-up dues run out
        joined_at: Join time
        promoted_at: Last promotion time
    """

    __tablename__ = "guild_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    guild_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guilds.id", ondelete="CASCADE"), nullable=False
    )

    rank: Mapped[str] = mapped_column(String, nullable=False, default=GuildRank.APPRENTICE)
    contribution: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    years_membership: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dues_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    dues_paid_until: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    promoted_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    player: Mapped["Player"] = relationship("Player", back_populates="guild_memberships")
    guild: Mapped["Guild"] = relationship("Guild", back_populates="members")

    __table_args__ = (
        UniqueConstraint("player_id", "guild_id", name="uq_guild_members"),
        CheckConstraint(check_in("rank", GuildRank), name="ck_guild_members_rank"),
        Index("idx_guild_members_guild_rank", "guild_id", "rank"),
    )

    def __repr__(self) -> str:
        return f"<GuildMember(id={self.id}, guild={self.guild_id}, rank='{self.rank}')>"

    @property
    def has_voting_rights(self) -> bool:
        return self.rank in _VOTING_RANKS

    def are_dues_current(self, now: datetime | None = None) -> bool:
        if not self.dues_paid:
            return False
        paid_until = as_utc(self.dues_paid_until)
        return paid_until is None or paid_until > resolve_now(now)

    @property
    def rank_display(self) -> str:
        return _RANK_DISPLAY.get(self.rank, "Unknown")


class GuildActivity(Base, TimestampMixin):
    """Log entry for something a member did for the guild."""

    __tablename__ = "guild_activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    guild_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guilds.id", ondelete="CASCADE"), nullable=False
    )

    activity_type: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    contribution_gained: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    details: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)

    player: Mapped["Player"] = relationship("Player")
    guild: Mapped["Guild"] = relationship("Guild", back_populates="activities")

    __table_args__ = (
        CheckConstraint(
            check_in("activity_type", GuildActivityType), name="ck_guild_activities_type"
        ),
        Index("idx_guild_activities_guild_type", "guild_id", "activity_type"),
    )

    def __repr__(self) -> str:
        return f"<GuildActivity(id={self.id}, type='{self.activity_type}')>"


class GuildElection(Base, TimestampMixin):
    """An election for a guild's guildmaster.

    Nomination runs until ``nomination_ends_at``; voting then runs until
    ``voting_ends_at``.
    """

    __tablename__ = "guild_elections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    guild_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guilds.id", ondelete="CASCADE"), nullable=False
    )
    winner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    status: Mapped[str] = mapped_column(
        String, nullable=False, default=GuildElectionStatus.NOMINATION
    )
    nomination_ends_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    voting_ends_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    guild: Mapped["Guild"] = relationship("Guild", back_populates="elections")
    winner: Mapped[Optional["Player"]] = relationship("Player")
    candidates: Mapped[list["GuildElectionCandidate"]] = relationship(
        "GuildElectionCandidate", back_populates="election", cascade="all, delete-orphan"
    )
    votes: Mapped[list["GuildElectionVote"]] = relationship(
        "GuildElectionVote", back_populates="election", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("status", GuildElectionStatus), name="ck_guild_elections_status"),
        Index("idx_guild_elections_guild_status", "guild_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<GuildElection(id={self.id}, guild={self.guild_id}, status='{self.status}')>"

    def is_nominating(self, now: datetime | None = None) -> bool:
        return self.status == GuildElectionStatus.NOMINATION and as_utc(
            self.nomination_ends_at
        ) > resolve_now(now)

    def is_voting(self, now: datetime | None = None) -> bool:
        return self.status == GuildElectionStatus.VOTING and as_utc(
            self.voting_ends_at
        ) > resolve_now(now)

    @property
    def is_active(self) -> bool:
        return self.status in _OPEN_ELECTION_STATUSES


class GuildElectionCandidate(Base, TimestampMixin):
    __tablename__ = "guild_election_candidates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    guild_election_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guild_elections.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    platform: Mapped[str | None] = mapped_column(Text, nullable=True)
    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    election: Mapped["GuildElection"] = relationship("GuildElection", back_populates="candidates")
    player: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("guild_election_id", "player_id", name="uq_guild_election_candidates"),
    )

    def __repr__(self) -> str:
        return f"<GuildElectionCandidate(id={self.id}, player={self.player_id})>"


class GuildElectionVote(Base, TimestampMixin):
    __tablename__ = "guild_election_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    guild_election_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guild_elections.id", ondelete="CASCADE"), nullable=False
    )
    voter_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    candidate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guild_election_candidates.id", ondelete="CASCADE"), nullable=False
    )

    election: Mapped["GuildElection"] = relationship("GuildElection", back_populates="votes")
    voter: Mapped["Player"] = relationship("Player")
    candidate: Mapped["GuildElectionCandidate"] = relationship("GuildElectionCandidate")

    __table_args__ = (
        UniqueConstraint("guild_election_id", "voter_id", name="uq_guild_election_votes"),
    )

    def __repr__(self) -> str:
        return f"<GuildElectionVote(id={self.id}, voter={self.voter_id})>"


class GuildPriceControl(Base, TimestampMixin):
    """A floor (and optional ceiling) the guild sets on an item's price."""

    __tablename__ = "guild_price_controls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    guild_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guilds.id", ondelete="CASCADE"), nullable=False
    )

    item_name: Mapped[str] = mapped_column(String, nullable=False)
    min_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_quality: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    guild: Mapped["Guild"] = relationship("Guild", back_populates="price_controls")

    __table_args__ = (UniqueConstraint("guild_id", "item_name", name="uq_guild_price_controls"),)

    def __repr__(self) -> str:
        return f"<GuildPriceControl(id={self.id}, item='{self.item_name}')>"

    def allows_price(self, price: int) -> bool:
        """Whether ``price`` falls within the controlled range."""
        if price < self.min_price:
            return False
        return self.max_price is None or price <= self.max_price
