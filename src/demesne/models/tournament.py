"""Tournament models for the Demesne game system.

This module contains models for:
- TournamentTypes (catalog of melee, joust, archery, wrestling, mixed events)
- Tournaments (one bracket held at a location, optionally during a festival)
- TournamentCompetitors (entrants and their record)
- TournamentMatches (bouts; a missing second competitor is a bye)
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
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import CombatType, CompetitorStatus, MatchStatus, TournamentStatus, check_in
from .references import LocatedMixin

if TYPE_CHECKING:
    from .festival import Festival
    from .player import Player

_ACTIVE_COMPETITOR_STATUSES = (CompetitorStatus.REGISTERED, CompetitorStatus.ACTIVE)


class TournamentType(Base, TimestampMixin):
    """Catalog entry for a kind of tournament.

    Attributes:
        id: Primary key
        name: Display name
        slug: Unique identifier
        description: Flavour text
        combat_type: melee/joust/archery/wrestling/mixed
        primary_stat: Stat deciding bouts
        secondary_stat: Tie-breaking stat (nullable)
        entry_fee: Gold to enter
        min_level: Minimum combat level to enter
        max_participants: Bracket size
        prize_distribution: JSON map of placing to percent of the pool
        is_lethal: Whether losers can die
    """

    __tablename__ = "tournament_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    combat_type: Mapped[str] = mapped_column(String, nullable=False)
    primary_stat: Mapped[str] = mapped_column(String, nullable=False)
    secondary_stat: Mapped[str | None] = mapped_column(String, nullable=True)
    entry_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    min_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=16)
    prize_distribution: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    is_lethal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    tournaments: Mapped[list["Tournament"]] = relationship(
        "Tournament", back_populates="tournament_type", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("combat_type", CombatType), name="ck_tournament_types_combat"),
    )

    def __repr__(self) -> str:
        return f"<TournamentType(id={self.id}, slug='{self.slug}')>"


class Tournament(LocatedMixin, Base, TimestampMixin):
    """A tournament bracket.

    Attributes:
        id: Primary key
        tournament_type_id: Kind of tournament
        festival_id: Festival it is part of (nullable)
        location_type: Kind of host location
        location_id: Id of the host
        name: Display name
        status: registration/in_progress/completed/cancelled
        registration_ends_at: Last moment to enter
        starts_at: First bout time
        completed_at: When the final finished
        prize_pool: Gold to be awarded
        current_round: Round being fought
        total_rounds: Rounds in the bracket
        sponsored_by_id: Sponsoring player (nullable)
        sponsor_contribution: Gold the sponsor added to the pool
    """

    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tournament_types.id", ondelete="CASCADE"), nullable=False
    )
    festival_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("festivals.id", ondelete="SET NULL"), nullable=True
    )
    sponsored_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=TournamentStatus.REGISTRATION
    )
    registration_ends_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    prize_pool: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_round: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rounds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sponsor_contribution: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tournament_type: Mapped["TournamentType"] = relationship(
        "TournamentType", back_populates="tournaments"
    )
    festival: Mapped[Optional["Festival"]] = relationship("Festival", back_populates="tournaments")
    sponsor: Mapped[Optional["Player"]] = relationship("Player")
    competitors: Mapped[list["TournamentCompetitor"]] = relationship(
        "TournamentCompetitor",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="TournamentCompetitor.id",
    )
    matches: Mapped[list["TournamentMatch"]] = relationship(
        "TournamentMatch",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by=lambda: [TournamentMatch.round_number, TournamentMatch.match_number],
    )

    __table_args__ = (
        CheckConstraint(check_in("status", TournamentStatus), name="ck_tournaments_status"),
        Index("idx_tournaments_location", "location_type", "location_id"),
        Index("idx_tournaments_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Tournament(id={self.id}, name='{self.name}', status='{self.status}')>"

    def is_registration_open(self, now: datetime | None = None) -> bool:
        return self.status == TournamentStatus.REGISTRATION and as_utc(
            self.registration_ends_at
        ) > resolve_now(now)

    @property
    def competitor_count(self) -> int:
        return len(self.competitors)

    @property
    def is_full(self) -> bool:
        return self.competitor_count >= self.tournament_type.max_participants

    @property
    def active_competitors(self) -> list["TournamentCompetitor"]:
        return [c for c in self.competitors if c.status in _ACTIVE_COMPETITOR_STATUSES]


class TournamentCompetitor(Base, TimestampMixin):
    """A player's entry in a tournament.

    Attributes:
        id: Primary key
        tournament_id: Tournament entered
        player_id: Entrant
        seed: Bracket position (nullable until seeded)
        status: registered/active/eliminated/winner/withdrew
        wins: Bouts won
        losses: Bouts lost
        final_placement: Finishing position
        prize_won: Gold awarded
        fame_earned: Fame awarded
    """

    __tablename__ = "tournament_competitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    seed: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=CompetitorStatus.REGISTERED
    )
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    final_placement: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prize_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fame_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="competitors")
    player: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("tournament_id", "player_id", name="uq_tournament_competitors"),
        CheckConstraint(
            check_in("status", CompetitorStatus), name="ck_tournament_competitors_status"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<TournamentCompetitor(id={self.id}, player={self.player_id}, "
            f"record={self.wins}-{self.losses})>"
        )

    @property
    def bouts(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        """Percentage of bouts won; 0 before any bout is fought."""
        if self.bouts == 0:
            return 0.0
        return self.wins / self.bouts * 100

    @property
    def is_eliminated(self) -> bool:
        return self.status == CompetitorStatus.ELIMINATED


class TournamentMatch(Base, TimestampMixin):
    """A single bout between two competitors, or a bye for one."""

    __tablename__ = "tournament_matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )
    competitor1_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tournament_competitors.id", ondelete="CASCADE"), nullable=False
    )
    competitor2_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("tournament_competitors.id", ondelete="SET NULL"), nullable=True
    )
    winner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("tournament_competitors.id", ondelete="SET NULL"), nullable=True
    )

    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    match_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=MatchStatus.PENDING)
    competitor1_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    competitor2_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    combat_log: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="matches")
    competitor1: Mapped["TournamentCompetitor"] = relationship(
        "TournamentCompetitor", foreign_keys=[competitor1_id]
    )
    competitor2: Mapped[Optional["TournamentCompetitor"]] = relationship(
        "TournamentCompetitor", foreign_keys=[competitor2_id]
    )
    winner: Mapped[Optional["TournamentCompetitor"]] = relationship(
        "TournamentCompetitor", foreign_keys=[winner_id]
    )

    __table_args__ = (
        CheckConstraint(check_in("status", MatchStatus), name="ck_tournament_matches_status"),
        Index("idx_tournament_matches_round", "tournament_id", "round_number"),
    )

    def __repr__(self) -> str:
        return (
            f"<TournamentMatch(id={self.id}, round={self.round_number}, "
            f"match={self.match_number})>"
        )

    @property
    def is_bye(self) -> bool:
        return self.competitor2_id is None and self.competitor2 is None

    @property
    def loser(self) -> Optional["TournamentCompetitor"]:
        """The competitor who lost, or None for byes and undecided bouts."""
        if self.winner_id is None or self.is_bye:
            return None
        if self.winner_id == self.competitor1_id:
            return self.competitor2
        if self.winner_id == self.competitor2_id:
            return self.competitor1
        return None
