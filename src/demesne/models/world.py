"""Settlement and realm models for the Demesne game world.

This module contains the places polymorphic location references resolve to:
- Kingdoms, Duchies, and Baronies (the feudal hierarchy)
- Towns, Villages, and Castles (settlements inside a barony)
"""

from typing import ClassVar, Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import LocationKind


class _Place:
    """Shared behaviour of every location kind."""

    KIND: ClassVar[LocationKind]
    TITLE: ClassVar[str | None] = None

    @property
    def display_name(self) -> str:
        """Name formatted for display, e.g. "Barony of Ashford"."""
        if self.TITLE is None:
            return self.name
        return f"{self.TITLE} of {self.name}"


class Kingdom(_Place, Base, TimestampMixin):
    """Top of the feudal hierarchy.

    Attributes:
        id: Primary key
        name: Unique kingdom name
        treasury: Royal treasury in gold
    """

    __tablename__ = "kingdoms"
    KIND = LocationKind.KINGDOM
    TITLE = "Kingdom"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    treasury: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    duchies: Mapped[list["Duchy"]] = relationship("Duchy", back_populates="kingdom")
    baronies: Mapped[list["Barony"]] = relationship("Barony", back_populates="kingdom")

    def __repr__(self) -> str:
        return f"<Kingdom(id={self.id}, name='{self.name}')>"


class Duchy(_Place, Base, TimestampMixin):
    """A grouping of baronies under a duke."""

    __tablename__ = "duchies"
    KIND = LocationKind.DUCHY
    TITLE = "Duchy"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kingdom_id: Mapped[int] = mapped_column(Integer, ForeignKey("kingdoms.id"), nullable=False)

    name: Mapped[str] = mapped_column(String, nullable=False)

    kingdom: Mapped["Kingdom"] = relationship("Kingdom", back_populates="duchies")
    baronies: Mapped[list["Barony"]] = relationship("Barony", back_populates="duchy")

    __table_args__ = (Index("idx_duchies_kingdom", "kingdom_id"),)

    def __repr__(self) -> str:
        return f"<Duchy(id={self.id}, name='{self.name}')>"


class Barony(_Place, Base, TimestampMixin):
    """A barony holding towns, villages, and castles.

    Attributes:
        id: Primary key
        kingdom_id: Kingdom this barony belongs to
        duchy_id: Duchy this barony belongs to (optional)
        name: Barony name
        tax_rate: Percentage levied on trade inside the barony
    """

    __tablename__ = "baronies"
    KIND = LocationKind.BARONY
    TITLE = "Barony"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kingdom_id: Mapped[int] = mapped_column(Integer, ForeignKey("kingdoms.id"), nullable=False)
    duchy_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("duchies.id"), nullable=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    tax_rate: Mapped[float] = mapped_column(Float, nullable=False, default=10.0)

    kingdom: Mapped["Kingdom"] = relationship("Kingdom", back_populates="baronies")
    duchy: Mapped[Optional["Duchy"]] = relationship("Duchy", back_populates="baronies")
    towns: Mapped[list["Town"]] = relationship("Town", back_populates="barony")
    villages: Mapped[list["Village"]] = relationship("Village", back_populates="barony")
    castles: Mapped[list["Castle"]] = relationship("Castle", back_populates="barony")

    __table_args__ = (
        Index("idx_baronies_kingdom", "kingdom_id"),
        Index("idx_baronies_duchy", "duchy_id"),
    )

    def __repr__(self) -> str:
        return f"<Barony(id={self.id}, name='{self.name}')>"


class Town(_Place, Base, TimestampMixin):
    """A chartered town."""

    __tablename__ = "towns"
    KIND = LocationKind.TOWN

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    barony_id: Mapped[int] = mapped_column(Integer, ForeignKey("baronies.id"), nullable=False)

    name: Mapped[str] = mapped_column(String, nullable=False)
    population: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tax_rate: Mapped[float] = mapped_column(Float, nullable=False, default=5.0)

    barony: Mapped["Barony"] = relationship("Barony", back_populates="towns")

    __table_args__ = (Index("idx_towns_barony", "barony_id"),)

    def __repr__(self) -> str:
        return f"<Town(id={self.id}, name='{self.name}')>"


class Village(_Place, Base, TimestampMixin):
    """A village; the smallest settlement a player can live in."""

    __tablename__ = "villages"
    KIND = LocationKind.VILLAGE

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    barony_id: Mapped[int] = mapped_column(Integer, ForeignKey("baronies.id"), nullable=False)

    name: Mapped[str] = mapped_column(String, nullable=False)
    population: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    barony: Mapped["Barony"] = relationship("Barony", back_populates="villages")

    __table_args__ = (Index("idx_villages_barony", "barony_id"),)

    def __repr__(self) -> str:
        return f"<Village(id={self.id}, name='{self.name}')>"


class Castle(_Place, Base, TimestampMixin):
    """A castle; the seat of a barony and a siege target."""

    __tablename__ = "castles"
    KIND = LocationKind.CASTLE

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    barony_id: Mapped[int] = mapped_column(Integer, ForeignKey("baronies.id"), nullable=False)

    name: Mapped[str] = mapped_column(String, nullable=False)
    fortification_level: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    barony: Mapped["Barony"] = relationship("Barony", back_populates="castles")

    __table_args__ = (Index("idx_castles_barony", "barony_id"),)

    def __repr__(self) -> str:
        return f"<Castle(id={self.id}, name='{self.name}')>"
