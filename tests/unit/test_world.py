"""Unit tests for settlements, realms, and players."""

import pytest
from sqlalchemy.exc import IntegrityError

from demesne.models import Kingdom, LocationRef, Player
from demesne.models.enums import LocationKind


class TestPlaces:
    def test_display_names(self, kingdom, barony, town, village, castle):
        assert kingdom.display_name == "Kingdom of Albion"
        assert barony.display_name == "Barony of Ashford"
        assert town.display_name == "Marketon"
        assert village.display_name == "Oakridge"
        assert castle.display_name == "Greywall"

    def test_hierarchy(self, kingdom, barony, town, village, castle):
        assert barony.kingdom is kingdom
        assert town in barony.towns
        assert village in barony.villages
        assert castle in barony.castles

    def test_kingdom_names_unique(self, session, kingdom):  # noqa: ARG002
        session.add(Kingdom(name="Albion"))
        with pytest.raises(IntegrityError):
            session.commit()


class TestPlayerModel:
    """Tests for the Player model."""

    def test_create_player(self, player):
        assert player.id is not None
        assert player.display_name == "aldric"
        assert player.gold == 0
        assert player.created_at is not None

    def test_usernames_unique(self, session, player):  # noqa: ARG002
        session.add(Player(username="aldric", email="other@example.com"))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_current_location(self, make_player, town):
        player = make_player(current_location_type="town", current_location_id=town.id)
        assert player.current_location_ref == LocationRef(kind=LocationKind.TOWN, id=town.id)
        assert not player.is_traveling

    def test_traveling_player_has_no_location(self, player):
        assert player.current_location_ref is None
        assert player.is_traveling
        assert player.current_location() is None
        assert player.current_location_name() == "Unknown"

    def test_resolves_current_location(self, session, make_player, castle):
        player = make_player(current_location_type="castle", current_location_id=castle.id)
        assert player.current_location() is castle
        assert player.current_location(session) is castle
        assert player.current_location_name() == "Greywall"

    def test_unknown_location_tag(self, make_player):
        player = make_player(current_location_type="castel", current_location_id=1)
        assert player.current_location_ref is None
        assert player.current_location() is None
        assert player.current_location_name() == "Unknown"

    def test_missing_location_row(self, make_player):
        player = make_player(current_location_type="town", current_location_id=999)
        assert player.current_location() is None
        assert player.current_location_name() == "Unknown"

    def test_email_verification(self, make_player, now):
        assert not make_player().has_verified_email
        assert make_player(email_verified_at=now).has_verified_email
