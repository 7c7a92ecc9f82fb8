"""Shared pytest fixtures.

Adds ``src/`` to ``sys.path`` so the ``demesne`` package imports without an
editable install, and provides an in-memory SQLite database with foreign
keys enforced plus a small game world to attach records to.
"""

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from demesne.models import Barony, Base, Castle, Kingdom, Player, Town, Village  # noqa: E402

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _enable_foreign_keys(dbapi_connection, connection_record):  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def now():
    """Fixed reference time for time-based predicates."""
    return NOW


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing and dispose it after use."""
    engine = create_engine("sqlite:///:memory:")
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine)  # noqa: N806
    session = Session()
    yield session
    session.close()


@pytest.fixture
def kingdom(session):
    kingdom = Kingdom(name="Albion", treasury=10_000)
    session.add(kingdom)
    session.commit()
    return kingdom


@pytest.fixture
def rival_kingdom(session):
    kingdom = Kingdom(name="Valdor", treasury=5_000)
    session.add(kingdom)
    session.commit()
    return kingdom


@pytest.fixture
def barony(session, kingdom):
    barony = Barony(kingdom_id=kingdom.id, name="Ashford")
    session.add(barony)
    session.commit()
    return barony


@pytest.fixture
def town(session, barony):
    town = Town(barony_id=barony.id, name="Marketon", population=1200)
    session.add(town)
    session.commit()
    return town


@pytest.fixture
def village(session, barony):
    village = Village(barony_id=barony.id, name="Oakridge", population=150)
    session.add(village)
    session.commit()
    return village


@pytest.fixture
def castle(session, barony):
    castle = Castle(barony_id=barony.id, name="Greywall", fortification_level=80)
    session.add(castle)
    session.commit()
    return castle


@pytest.fixture
def make_player(session):
    """Factory creating committed players with unique usernames."""
    created = []

    def _make(username=None, **kwargs):
        name = username or f"player{len(created) + 1}"
        player = Player(username=name, email=f"{name}@example.com", **kwargs)
        session.add(player)
        session.commit()
        created.append(player)
        return player

    return _make


@pytest.fixture
def player(make_player):
    return make_player("aldric")
