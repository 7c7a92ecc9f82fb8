"""Construction project model for the Demesne game system.

A construction project collects gold, labor, and materials for a building at
a settlement. Once every requirement is met the project waits on a timer
before it completes.
"""

import math
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from demesne.rules_config import DEFAULT_RULES

from .base import Base, TimestampMixin, UTCDateTime, as_utc, resolve_now
from .enums import ProjectStatus, ProjectType, check_in
from .references import LocatedMixin

if TYPE_CHECKING:
    from .player import Player

_PROJECT_TYPE_DISPLAY = {
    ProjectType.BUILD: "Build",
    ProjectType.UPGRADE: "Upgrade",
    ProjectType.REPAIR: "Repair",
}


class ConstructionProject(LocatedMixin, Base, TimestampMixin):
    """Represents a building project at a settlement.

    Attributes:
        id: Primary key
        location_type: Kind of settlement being built up
        location_id: Id of that settlement
        building: Name of the building being worked on
        project_type: build/upgrade/repair
        target_level: Level the building reaches on completion
        status: pending/in_progress/constructing/completed/cancelled
        progress: Percentage of requirements gathered (0-100)
        gold_required: Gold needed
        gold_invested: Gold contributed so far
        labor_required: Labor hours needed
        labor_invested: Labor hours contributed so far
        items_required: JSON map of item name to quantity needed
        items_invested: JSON map of item name to quantity contributed
        started_by_id: Player who opened the project
        started_at: First contribution time
        construction_ends_at: When the construction timer runs out
        completed_at: Completion time
    """

    __tablename__ = "construction_projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    started_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    building: Mapped[str] = mapped_column(String, nullable=False)
    project_type: Mapped[str] = mapped_column(String, nullable=False)
    target_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String, nullable=False, default=ProjectStatus.PENDING)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold_required: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold_invested: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    labor_required: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    labor_invested: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items_required: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    items_invested: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    construction_ends_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    started_by: Mapped[Optional["Player"]] = relationship("Player")

    __table_args__ = (
        CheckConstraint(
            check_in("project_type", ProjectType), name="ck_construction_projects_type"
        ),
        CheckConstraint(check_in("status", ProjectStatus), name="ck_construction_projects_status"),
        Index("idx_construction_projects_location", "location_type", "location_id"),
        Index("idx_construction_projects_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<ConstructionProject(id={self.id}, building='{self.building}', "
            f"status='{self.status}')>"
        )

    @property
    def is_complete(self) -> bool:
        return self.status == ProjectStatus.COMPLETED

    @property
    def is_active(self) -> bool:
        """Whether the project still accepts contributions."""
        return self.status in (ProjectStatus.PENDING, ProjectStatus.IN_PROGRESS)

    @property
    def is_constructing(self) -> bool:
        return self.status == ProjectStatus.CONSTRUCTING

    def is_construction_complete(self, now: datetime | None = None) -> bool:
        """True once a constructing project's timer has run out."""
        ends_at = as_utc(self.construction_ends_at)
        return self.is_constructing and ends_at is not None and ends_at <= resolve_now(now)

    @property
    def construction_time_hours(self) -> int:
        rules = DEFAULT_RULES.construction
        if self.project_type == ProjectType.UPGRADE:
            return rules.upgrade_hours.get(self.target_level, rules.default_upgrade_hours)
        return rules.build_hours.get(self.target_level, rules.default_build_hours)

    def remaining_seconds(self, now: datetime | None = None) -> int | None:
        """Seconds left on the timer; None unless the project is constructing."""
        ends_at = as_utc(self.construction_ends_at)
        if not self.is_constructing or ends_at is None:
            return None
        remaining = (ends_at - resolve_now(now)).total_seconds()
        return max(0, int(remaining))

    @property
    def project_type_display(self) -> str:
        return _PROJECT_TYPE_DISPLAY.get(self.project_type, "Unknown")

    @property
    def description(self) -> str:
        if self.project_type == ProjectType.BUILD:
            return f"Building {self.building}"
        if self.project_type == ProjectType.UPGRADE:
            return f"Upgrading {self.building} to Level {self.target_level}"
        if self.project_type == ProjectType.REPAIR:
            return f"Repairing {self.building}"
        return "Unknown Project"

    def _item_progress(self) -> float:
        required = self.items_required or {}
        if not required:
            return 100.0
        invested = self.items_invested or {}
        total_required = sum(required.values())
        if total_required == 0:
            return 100.0
        total_invested = sum(
            min(invested.get(item, 0), quantity) for item, quantity in required.items()
        )
        return total_invested / total_required * 100

    def calculate_progress(self) -> int:
        """Mean completion percentage over gold, labor, and items.

        A requirement of zero counts as fully met.
        """
        gold = (
            self.gold_invested / self.gold_required * 100 if self.gold_required > 0 else 100.0
        )
        labor = (
            self.labor_invested / self.labor_required * 100 if self.labor_required > 0 else 100.0
        )
        return math.floor((gold + labor + self._item_progress()) / 3)

    def requirements_met(self) -> bool:
        if self.gold_invested < self.gold_required:
            return False
        if self.labor_invested < self.labor_required:
            return False
        invested = self.items_invested or {}
        return all(
            invested.get(item, 0) >= quantity
            for item, quantity in (self.items_required or {}).items()
        )

    def contribute(
        self,
        gold: int = 0,
        labor: int = 0,
        items: dict[str, int] | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Apply a contribution, capped at what is still required.

        Returns:
            dict with gold_added, labor_added, and items_added
        """
        gold_added = max(0, min(gold, self.gold_required - self.gold_invested))
        labor_added = max(0, min(labor, self.labor_required - self.labor_invested))
        self.gold_invested += gold_added
        self.labor_invested += labor_added

        items_added: dict[str, int] = {}
        if items and self.items_required:
            invested = dict(self.items_invested or {})
            for item, quantity in items.items():
                if item not in self.items_required:
                    continue
                needed = self.items_required[item] - invested.get(item, 0)
                added = min(quantity, needed)
                if added > 0:
                    invested[item] = invested.get(item, 0) + added
                    items_added[item] = added
            # reassign so the JSON column is flagged dirty
            self.items_invested = invested

        self.progress = self.calculate_progress()

        if self.status == ProjectStatus.PENDING and (gold_added or labor_added or items_added):
            self.status = ProjectStatus.IN_PROGRESS
            if self.started_at is None:
                self.started_at = resolve_now(now)

        return {"gold_added": gold_added, "labor_added": labor_added, "items_added": items_added}

    def start_construction_timer(self, now: datetime | None = None) -> None:
        self.status = ProjectStatus.CONSTRUCTING
        self.progress = 100
        self.construction_ends_at = resolve_now(now) + timedelta(
            hours=self.construction_time_hours
        )

    def complete(self, now: datetime | None = None) -> None:
        self.status = ProjectStatus.COMPLETED
        self.progress = 100
        self.completed_at = resolve_now(now)

    def cancel(self) -> None:
        self.status = ProjectStatus.CANCELLED
