"""Broadsheet models for the Demesne game system.

Broadsheets are player-published news sheets. They are read at the
settlement they were published in; enough endorsements spread them across
the barony and then the kingdom. Comments thread one level deep.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
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

from demesne.rules_config import DEFAULT_RULES

from .base import Base, TimestampMixin, UTCDateTime
from .enums import ReactionType, check_in
from .references import LocatedMixin

if TYPE_CHECKING:
    from .player import Player
    from .world import Barony, Kingdom


class Broadsheet(LocatedMixin, Base, TimestampMixin):
    """A published broadsheet.

    Attributes:
        id: Primary key
        author_id: Publishing player
        location_type: Kind of settlement it was published in
        location_id: Id of that settlement
        barony_id: Barony containing that settlement
        kingdom_id: Kingdom containing that settlement
        title: Headline
        content: Formatted body
        plain_text: Body stripped of formatting
        published_at: Publication time
        endorse_count: Endorsements received
        denounce_count: Denunciations received
        view_count: Times read
        comment_count: Comments posted
    """

    __tablename__ = "broadsheets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    barony_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("baronies.id", ondelete="SET NULL"), nullable=True
    )
    kingdom_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("kingdoms.id", ondelete="SET NULL"), nullable=True
    )

    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    plain_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    endorse_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    denounce_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    author: Mapped["Player"] = relationship("Player")
    barony: Mapped[Optional["Barony"]] = relationship("Barony")
    kingdom: Mapped[Optional["Kingdom"]] = relationship("Kingdom")
    comments: Mapped[list["BroadsheetComment"]] = relationship(
        "BroadsheetComment",
        back_populates="broadsheet",
        cascade="all, delete-orphan",
        order_by="BroadsheetComment.id",
    )
    reactions: Mapped[list["BroadsheetReaction"]] = relationship(
        "BroadsheetReaction", back_populates="broadsheet", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_broadsheets_location", "location_type", "location_id"),
        Index("idx_broadsheets_barony_endorse", "barony_id", "endorse_count"),
        Index("idx_broadsheets_kingdom_endorse", "kingdom_id", "endorse_count"),
    )

    def __repr__(self) -> str:
        return f"<Broadsheet(id={self.id}, title='{self.title}')>"

    @property
    def top_level_comments(self) -> list["BroadsheetComment"]:
        return [comment for comment in self.comments if comment.parent_id is None]

    @property
    def net_reactions(self) -> int:
        return self.endorse_count - self.denounce_count

    @classmethod
    def select_visible_in_barony(cls, barony_id: int) -> Select:
        """Broadsheets endorsed widely enough to spread across a barony, newest first."""
        return (
            select(cls)
            .where(
                cls.barony_id == barony_id,
                cls.endorse_count >= DEFAULT_RULES.broadsheets.barony_threshold,
            )
            .order_by(cls.published_at.desc())
        )

    @classmethod
    def select_visible_in_kingdom(cls, kingdom_id: int) -> Select:
        """Broadsheets endorsed widely enough to spread across a kingdom, most endorsed first."""
        return (
            select(cls)
            .where(
                cls.kingdom_id == kingdom_id,
                cls.endorse_count >= DEFAULT_RULES.broadsheets.kingdom_threshold,
            )
            .order_by(cls.endorse_count.desc(), cls.published_at.desc())
        )


class BroadsheetComment(Base, TimestampMixin):
    """A comment on a broadsheet, or a reply to a top-level comment.

    Deleting a comment deletes its replies.
    """

    __tablename__ = "broadsheet_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    broadsheet_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("broadsheets.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("broadsheet_comments.id", ondelete="CASCADE"), nullable=True
    )

    body: Mapped[str] = mapped_column(Text, nullable=False)

    broadsheet: Mapped["Broadsheet"] = relationship("Broadsheet", back_populates="comments")
    player: Mapped["Player"] = relationship("Player")
    parent: Mapped[Optional["BroadsheetComment"]] = relationship(
        "BroadsheetComment", remote_side=[id], back_populates="replies"
    )
    replies: Mapped[list["BroadsheetComment"]] = relationship(
        "BroadsheetComment",
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="BroadsheetComment.id",
    )

    __table_args__ = (Index("idx_broadsheet_comments_thread", "broadsheet_id", "parent_id"),)

    def __repr__(self) -> str:
        return f"<BroadsheetComment(id={self.id}, parent={self.parent_id})>"

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None or self.parent is not None

    @property
    def accepts_replies(self) -> bool:
        """Only top-level comments can be replied to."""
        return not self.is_reply

    @property
    def reply_count(self) -> int:
        return len(self.replies)


class BroadsheetReaction(Base, TimestampMixin):
    """One player's endorsement or denunciation of a broadsheet."""

    __tablename__ = "broadsheet_reactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    broadsheet_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("broadsheets.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )

    type: Mapped[str] = mapped_column(String, nullable=False)

    broadsheet: Mapped["Broadsheet"] = relationship("Broadsheet", back_populates="reactions")
    player: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("broadsheet_id", "player_id", name="uq_broadsheet_reactions"),
        CheckConstraint(check_in("type", ReactionType), name="ck_broadsheet_reactions_type"),
    )

    def __repr__(self) -> str:
        return f"<BroadsheetReaction(id={self.id}, type='{self.type}')>"
