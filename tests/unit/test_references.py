"""Unit tests for polymorphic (type, id) references."""

import pytest
from sqlalchemy import update

from demesne.models import (
    BankAccount,
    EntityRef,
    Kingdom,
    LocationRef,
    Player,
    Town,
    resolve_for,
    resolve_reference,
    target_model,
)
from demesne.models.enums import EntityKind, LocationKind


class TestLocationRef:
    """Tests for parsing stored location columns."""

    def test_parse_known_tag(self):
        ref = LocationRef.parse("town", 3)
        assert ref == LocationRef(kind=LocationKind.TOWN, id=3)

    def test_parse_unknown_tag_is_none(self):
        assert LocationRef.parse("swamp", 1) is None

    @pytest.mark.parametrize(("tag", "target_id"), [(None, 1), ("town", None), (None, None)])
    def test_parse_missing_column_is_none(self, tag, target_id):
        assert LocationRef.parse(tag, target_id) is None

    def test_player_is_not_a_location(self):
        assert LocationRef.parse("player", 1) is None


class TestEntityRef:
    def test_parse_player(self):
        assert EntityRef.parse("player", 2) == EntityRef(kind=EntityKind.PLAYER, id=2)

    def test_parse_unknown_tag_is_none(self):
        assert EntityRef.parse("guild", 2) is None


class TestResolution:
    """Tests for loading the record a reference names."""

    def test_target_model(self):
        assert target_model("kingdom") is Kingdom
        assert target_model("player") is Player
        assert target_model("dragon") is None

    def test_resolve_known_reference(self, session, town):
        assert resolve_reference(session, "town", town.id) is town

    def test_resolve_unknown_tag(self, session, town):
        assert resolve_reference(session, "swamp", town.id) is None

    def test_resolve_missing_row(self, session, town):  # noqa: ARG002
        assert resolve_reference(session, "town", 9999) is None

    def test_resolve_disallowed_tag(self, session, town):
        allowed = {LocationKind.VILLAGE, LocationKind.CASTLE}
        assert resolve_reference(session, "town", town.id, allowed=allowed) is None

    def test_resolve_for_detached_instance(self, town):
        account = BankAccount(player_id=1, location_type="town", location_id=town.id, balance=0)
        assert resolve_for(account, "town", town.id) is None


class TestLocatedMixin:
    """Tests for models carrying a location_type/location_id pair."""

    def test_location_resolves(self, session, player, town):
        account = BankAccount(player_id=player.id, location_type="town", location_id=town.id)
        session.add(account)
        session.commit()

        assert account.location_ref == LocationRef(kind=LocationKind.TOWN, id=town.id)
        assert isinstance(account.location(), Town)
        assert account.location_name() == "Marketon"

    def test_rejects_kind_outside_location_types(self, player, barony):
        with pytest.raises(ValueError, match="cannot be located at a 'barony'"):
            BankAccount(player_id=player.id, location_type="barony", location_id=barony.id)

    def test_unknown_tag_written_outside_orm_resolves_to_none(self, session, player, town):
        account = BankAccount(player_id=player.id, location_type="town", location_id=town.id)
        session.add(account)
        session.commit()

        session.execute(
            update(BankAccount.__table__)
            .where(BankAccount.__table__.c.id == account.id)
            .values(location_type="swamp")
        )
        session.commit()
        session.refresh(account)

        assert account.location_type == "swamp"
        assert account.location_ref is None
        assert account.location() is None
        assert account.location_name() == "Unknown"

    def test_missing_location_row_reads_unknown(self, session, player):
        account = BankAccount(player_id=player.id, location_type="village", location_id=4242)
        session.add(account)
        session.commit()

        assert account.location() is None
        assert account.location_name() == "Unknown"
