"""Election models for the Demesne game system.

This module contains models for:
- Elections (choosing a role holder for a village, town, barony, or kingdom)
- ElectionCandidates and ElectionVotes
- NoConfidenceVotes and NoConfidenceBallots (removing a sitting role holder)
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
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
from sqlalchemy.orm import Mapped, Session, mapped_column, object_session, relationship, validates

from .base import Base, TimestampCreatedMixin, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import ElectionStatus, LocationKind, NoConfidenceStatus, check_in
from .references import LocationRef, resolve_reference

if TYPE_CHECKING:
    from .player import Player

ELECTION_DOMAINS = frozenset(
    {LocationKind.VILLAGE, LocationKind.TOWN, LocationKind.BARONY, LocationKind.KINGDOM}
)


class _DomainMixin:
    """Polymorphic ``domain_type``/``domain_id`` pair naming the seat being contested."""

    domain_type: Mapped[str] = mapped_column(String, nullable=False)
    domain_id: Mapped[int] = mapped_column(Integer, nullable=False)

    @validates("domain_type")
    def validate_domain_type(self, key: str, value: str) -> str:  # noqa: ARG002
        if value not in ELECTION_DOMAINS:
            raise ValueError(f"Elections cannot be held for a '{value}'")
        return value

    @property
    def domain_ref(self) -> LocationRef | None:
        return LocationRef.parse(self.domain_type, self.domain_id)

    def domain(self, session: Session | None = None) -> Any | None:
        session = session or object_session(self)
        if session is None:
            return None
        return resolve_reference(session, self.domain_type, self.domain_id, ELECTION_DOMAINS)


def _window_open(starts_at: datetime | None, ends_at: datetime | None, now: datetime) -> bool:
    start = as_utc(starts_at)
    end = as_utc(ends_at)
    if start is not None and start > now:
        return False
    return end is None or end > now


class Election(_DomainMixin, Base, TimestampMixin):
    """An election for a role within a settlement or realm.

    Attributes:
        id: Primary key
        election_type: What is being elected (e.g. "village_elder")
        role: Role the winner takes up
        domain_type: Kind of place the role governs
        domain_id: Id of that place
        status: pending/open/closed/completed/failed
        voting_starts_at: When ballots may first be cast
        voting_ends_at: When balloting closes
        finalized_at: When results were certified
        quorum_required: Ballots needed for a valid result
        votes_cast: Ballots cast so far
        quorum_met: Whether quorum was reached at close
        winner_id: Player who won (nullable)
        is_self_appointment: Whether too few residents meant the role was claimed unopposed
        initiated_by_id: Player who called the election
        notes: Free-form remarks
    """

    __tablename__ = "elections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    winner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )
    initiated_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    election_type: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=ElectionStatus.PENDING)
    voting_starts_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    voting_ends_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    finalized_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    quorum_required: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes_cast: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quorum_met: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_self_appointment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    winner: Mapped[Optional["Player"]] = relationship("Player", foreign_keys=[winner_id])
    initiated_by: Mapped[Optional["Player"]] = relationship(
        "Player", foreign_keys=[initiated_by_id]
    )
    candidates: Mapped[list["ElectionCandidate"]] = relationship(
        "ElectionCandidate", back_populates="election", cascade="all, delete-orphan"
    )
    votes: Mapped[list["ElectionVote"]] = relationship(
        "ElectionVote", back_populates="election", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("status", ElectionStatus), name="ck_elections_status"),
        Index("idx_elections_domain", "domain_type", "domain_id"),
        Index("idx_elections_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Election(id={self.id}, role='{self.role}', status='{self.status}')>"

    def is_open(self, now: datetime | None = None) -> bool:
        """Open status and inside the voting window."""
        if self.status != ElectionStatus.OPEN:
            return False
        return _window_open(self.voting_starts_at, self.voting_ends_at, resolve_now(now))

    def has_ended(self, now: datetime | None = None) -> bool:
        ends_at = as_utc(self.voting_ends_at)
        return ends_at is not None and ends_at <= resolve_now(now)

    def can_vote(self, player_id: int, now: datetime | None = None) -> bool:
        """Whether the player may still cast a ballot."""
        if not self.is_open(now):
            return False
        return all(vote.voter_id != player_id for vote in self.votes)

    @property
    def active_candidates(self) -> list["ElectionCandidate"]:
        return [candidate for candidate in self.candidates if candidate.is_active]

    @property
    def quorum_progress(self) -> float:
        """Percentage of quorum reached, capped at 100."""
        if self.quorum_required <= 0:
            return 100.0
        return min(100.0, self.votes_cast / self.quorum_required * 100)

    @property
    def turnout_display(self) -> str:
        return f"{self.votes_cast}/{self.quorum_required}"

    @classmethod
    def select_open(cls, now: datetime | None = None) -> Select:
        """Open elections whose voting window contains ``now``."""
        moment = resolve_now(now)
        return select(cls).where(
            cls.status == ElectionStatus.OPEN,
            (cls.voting_starts_at.is_(None)) | (cls.voting_starts_at <= moment),
            (cls.voting_ends_at.is_(None)) | (cls.voting_ends_at > moment),
        )


class ElectionCandidate(Base, TimestampMixin):
    """A player standing in an election."""

    __tablename__ = "election_candidates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    election_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("elections.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    platform: Mapped[str | None] = mapped_column(Text, nullable=True)
    declared_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    withdrawn_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    election: Mapped["Election"] = relationship("Election", back_populates="candidates")
    player: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("election_id", "player_id", name="uq_election_candidates"),
    )

    def __repr__(self) -> str:
        return (
            f"<ElectionCandidate(id={self.id}, player={self.player_id}, "
            f"votes={self.vote_count})>"
        )

    def increment_vote_count(self) -> None:
        self.vote_count = (self.vote_count or 0) + 1

    @property
    def vote_share(self) -> float:
        """Percentage of ballots cast in the election; 0 before any are cast."""
        total = self.election.votes_cast if self.election is not None else 0
        if total <= 0:
            return 0.0
        return self.vote_count / total * 100


class ElectionVote(Base, TimestampCreatedMixin):
    """One ballot; each voter casts at most one per election."""

    __tablename__ = "election_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    election_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("elections.id", ondelete="CASCADE"), nullable=False
    )
    voter_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    candidate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("election_candidates.id", ondelete="CASCADE"), nullable=False
    )

    election: Mapped["Election"] = relationship("Election", back_populates="votes")
    voter: Mapped["Player"] = relationship("Player")
    candidate: Mapped["ElectionCandidate"] = relationship("ElectionCandidate")

    __table_args__ = (UniqueConstraint("election_id", "voter_id", name="uq_election_votes"),)

    def __repr__(self) -> str:
        return f"<ElectionVote(id={self.id}, election={self.election_id}, voter={self.voter_id})>"


class NoConfidenceVote(_DomainMixin, Base, TimestampMixin):
    """A motion to remove a sitting role holder.

    Attributes:
        id: Primary key
        target_player_id: Role holder facing removal
        target_role: Role under challenge
        domain_type: Kind of place the role governs
        domain_id: Id of that place
        initiated_by_id: Player who raised the motion
        status: pending/open/closed/passed/failed
        voting_starts_at: Start of balloting
        voting_ends_at: End of balloting
        finalized_at: When results were certified
        votes_for: Ballots for removal
        votes_against: Ballots against removal
        quorum_required: Ballots needed for a valid result
        notes: Free-form remarks
    """

    __tablename__ = "no_confidence_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    target_player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    initiated_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    target_role: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=NoConfidenceStatus.PENDING
    )
    voting_starts_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    voting_ends_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    finalized_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    votes_for: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes_against: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quorum_required: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    target_player: Mapped["Player"] = relationship("Player", foreign_keys=[target_player_id])
    initiated_by: Mapped[Optional["Player"]] = relationship(
        "Player", foreign_keys=[initiated_by_id]
    )
    ballots: Mapped[list["NoConfidenceBallot"]] = relationship(
        "NoConfidenceBallot", back_populates="vote", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(check_in("status", NoConfidenceStatus), name="ck_no_confidence_status"),
        Index("idx_no_confidence_domain", "domain_type", "domain_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<NoConfidenceVote(id={self.id}, target={self.target_player_id}, "
            f"status='{self.status}')>"
        )

    def is_open(self, now: datetime | None = None) -> bool:
        if self.status != NoConfidenceStatus.OPEN:
            return False
        return _window_open(self.voting_starts_at, self.voting_ends_at, resolve_now(now))

    def has_ended(self, now: datetime | None = None) -> bool:
        ends_at = as_utc(self.voting_ends_at)
        return ends_at is not None and ends_at <= resolve_now(now)

    @property
    def total_votes(self) -> int:
        return self.votes_for + self.votes_against

    @property
    def removal_share(self) -> float:
        """Percentage of ballots favouring removal; 0 before any are cast."""
        if self.total_votes == 0:
            return 0.0
        return self.votes_for / self.total_votes * 100


class NoConfidenceBallot(Base, TimestampCreatedMixin):
    """One ballot on a no-confidence motion."""

    __tablename__ = "no_confidence_ballots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    no_confidence_vote_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("no_confidence_votes.id", ondelete="CASCADE"), nullable=False
    )
    voter_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    vote_for_removal: Mapped[bool] = mapped_column(Boolean, nullable=False)

    vote: Mapped["NoConfidenceVote"] = relationship("NoConfidenceVote", back_populates="ballots")
    voter: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("no_confidence_vote_id", "voter_id", name="uq_no_confidence_ballots"),
    )

    def __repr__(self) -> str:
        return f"<NoConfidenceBallot(id={self.id}, voter={self.voter_id})>"
