"""Polymorphic ``(type tag, id)`` references.

Several records point at "some place" or "some party" with a pair of columns:
a string tag naming the kind of record and the id of that record. This module
turns those pairs into tagged values (``LocationRef`` / ``EntityRef``) and
resolves them against the matching table. Unknown tags never raise on read;
they simply resolve to nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, Session, mapped_column, object_session, validates

from .enums import EntityKind, LocationKind

if TYPE_CHECKING:
    from .base import Base

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LocationRef:
    """A reference to one settlement or realm."""

    kind: LocationKind
    id: int

    @classmethod
    def parse(cls, type_tag: str | None, target_id: int | None) -> LocationRef | None:
        """Build a reference from stored columns, or None if the tag is unknown."""
        if type_tag is None or target_id is None:
            return None
        try:
            kind = LocationKind(type_tag)
        except ValueError:
            return None
        return cls(kind=kind, id=int(target_id))


@dataclass(frozen=True, slots=True)
class EntityRef:
    """A reference to a player or a location acting as a party (owner, claimant, belligerent)."""

    kind: EntityKind
    id: int

    @classmethod
    def parse(cls, type_tag: str | None, target_id: int | None) -> EntityRef | None:
        if type_tag is None or target_id is None:
            return None
        try:
            kind = EntityKind(type_tag)
        except ValueError:
            return None
        return cls(kind=kind, id=int(target_id))


def target_model(type_tag: str) -> type[Base] | None:
    """Return the mapped class a type tag points at, or None for unknown tags."""
    from .player import Player
    from .world import Barony, Castle, Duchy, Kingdom, Town, Village

    models: dict[str, type[Base]] = {
        EntityKind.PLAYER: Player,
        EntityKind.VILLAGE: Village,
        EntityKind.TOWN: Town,
        EntityKind.CASTLE: Castle,
        EntityKind.BARONY: Barony,
        EntityKind.DUCHY: Duchy,
        EntityKind.KINGDOM: Kingdom,
    }
    return models.get(type_tag)


def resolve_reference(
    session: Session,
    type_tag: str | None,
    target_id: int | None,
    allowed: Iterable[str] | None = None,
) -> Any | None:
    """Load the record a polymorphic reference names.

    Args:
        session: Session used for the lookup
        type_tag: Stored type column (e.g. "town")
        target_id: Stored id column
        allowed: Optional subset of tags the caller accepts

    Returns:
        The referenced record, or None when the tag is unknown or not allowed,
        the id is missing, or no such row exists
    """
    if type_tag is None or target_id is None:
        return None
    if allowed is not None and type_tag not in {str(tag) for tag in allowed}:
        return None
    model = target_model(type_tag)
    if model is None:
        logger.debug("Unrecognized reference type %r (id=%s)", type_tag, target_id)
        return None
    return session.get(model, target_id)


def resolve_for(
    instance: Any,
    type_tag: str | None,
    target_id: int | None,
    allowed: Iterable[str] | None = None,
) -> Any | None:
    """Resolve a reference stored on ``instance`` using the session it belongs to."""
    session = object_session(instance)
    if session is None:
        return None
    return resolve_reference(session, type_tag, target_id, allowed)


class LocatedMixin:
    """Adds a polymorphic ``location_type``/``location_id`` pair to a model.

    Subclasses narrow the accepted kinds with ``LOCATION_TYPES``. Writes of an
    unaccepted tag raise ``ValueError``; rows written around the ORM with an
    unknown tag resolve to None.
    """

    LOCATION_TYPES: ClassVar[frozenset[LocationKind]] = frozenset(LocationKind)

    location_type: Mapped[str] = mapped_column(String, nullable=False)
    location_id: Mapped[int] = mapped_column(Integer, nullable=False)

    @validates("location_type")
    def validate_location_type(self, key: str, value: str) -> str:  # noqa: ARG002
        if value not in self.LOCATION_TYPES:
            allowed = ", ".join(sorted(self.LOCATION_TYPES))
            raise ValueError(
                f"{type(self).__name__} cannot be located at a '{value}' "
                f"(expected one of: {allowed})"
            )
        return value

    @property
    def location_ref(self) -> LocationRef | None:
        ref = LocationRef.parse(self.location_type, self.location_id)
        if ref is None or ref.kind not in self.LOCATION_TYPES:
            return None
        return ref

    def location(self, session: Session | None = None) -> Any | None:
        """Resolve the location record, or None if it cannot be found."""
        session = session or object_session(self)
        if session is None:
            return None
        return resolve_reference(
            session, self.location_type, self.location_id, allowed=self.LOCATION_TYPES
        )

    def location_name(self, session: Session | None = None) -> str:
        """Name of the resolved location, or "Unknown"."""
        place = self.location(session)
        return place.name if place is not None else "Unknown"
