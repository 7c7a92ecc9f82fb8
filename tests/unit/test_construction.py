"""Unit tests for construction projects."""

from datetime import timedelta

import pytest

from demesne.models import ConstructionProject
from demesne.models.enums import ProjectStatus


@pytest.fixture
def project(session, village, player):
    project = ConstructionProject(
        location_type="village",
        location_id=village.id,
        building="Mill",
        project_type="upgrade",
        target_level=3,
        gold_required=1000,
        labor_required=10,
        items_required={"timber": 20},
        started_by_id=player.id,
    )
    session.add(project)
    session.commit()
    return project


class TestConstructionProjectModel:
    """Tests for the ConstructionProject model."""

    def test_defaults(self, project):
        assert project.status == ProjectStatus.PENDING
        assert project.progress == 0
        assert project.gold_invested == 0
        assert project.is_active
        assert not project.is_complete

    def test_description(self, project):
        assert project.description == "Upgrading Mill to Level 3"
        assert project.project_type_display == "Upgrade"
        assert project.location_name() == "Oakridge"

    @pytest.mark.parametrize(
        ("project_type", "expected"),
        [("build", "Building Well"), ("repair", "Repairing Well"), ("demolish", "Unknown Project")],
    )
    def test_description_per_type(self, project_type, expected):
        project = ConstructionProject(building="Well", project_type=project_type, target_level=1)
        assert project.description == expected

    def test_unknown_type_display(self):
        assert ConstructionProject(project_type="demolish").project_type_display == "Unknown"

    def test_calculate_progress(self, project):
        project.gold_invested = 500
        project.labor_invested = 10
        project.items_invested = {"timber": 10}
        # gold 50%, labor 100%, items 50%
        assert project.calculate_progress() == 66

    def test_zero_requirements_count_as_met(self):
        project = ConstructionProject(
            gold_required=0, gold_invested=0, labor_required=0, labor_invested=0
        )
        assert project.calculate_progress() == 100
        assert project.requirements_met()

    def test_contribute_caps_at_requirement(self, project, now):
        added = project.contribute(gold=2500, labor=4, items={"timber": 25, "stone": 5}, now=now)

        assert added == {"gold_added": 1000, "labor_added": 4, "items_added": {"timber": 20}}
        assert project.gold_invested == 1000
        assert project.items_invested == {"timber": 20}
        assert project.status == ProjectStatus.IN_PROGRESS
        assert project.started_at == now
        assert not project.requirements_met()

    def test_contribute_nothing_leaves_pending(self, project, now):
        project.contribute(now=now)
        assert project.status == ProjectStatus.PENDING
        assert project.started_at is None

    def test_contributions_persist(self, session, project, now):
        project.contribute(gold=1000, labor=10, items={"timber": 20}, now=now)
        session.commit()
        session.refresh(project)

        assert project.items_invested == {"timber": 20}
        assert project.progress == 100
        assert project.requirements_met()

    def test_construction_timer(self, session, project, now):
        project.start_construction_timer(now)
        session.commit()

        assert project.is_constructing
        assert project.construction_time_hours == 6
        assert project.remaining_seconds(now) == 6 * 3600
        assert not project.is_construction_complete(now)
        assert project.is_construction_complete(now + timedelta(hours=6))
        assert project.remaining_seconds(now + timedelta(hours=8)) == 0

    def test_remaining_seconds_none_unless_constructing(self, project, now):
        assert project.remaining_seconds(now) is None

    def test_construction_hours_fall_back(self):
        unknown_upgrade = ConstructionProject(project_type="upgrade", target_level=9)
        known_build = ConstructionProject(project_type="build", target_level=4)
        unknown_build = ConstructionProject(project_type="build", target_level=9)

        assert unknown_upgrade.construction_time_hours == 2
        assert known_build.construction_time_hours == 8
        assert unknown_build.construction_time_hours == 1

    def test_complete_and_cancel(self, project, now):
        project.complete(now)
        assert project.is_complete
        assert project.completed_at == now
        assert not project.is_active

        project.cancel()
        assert project.status == ProjectStatus.CANCELLED
