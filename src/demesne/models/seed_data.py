"""Seed data initialization for catalog tables.

This module fills the catalog tables (festival types, tournament types,
disease types, and guild benefits) with the base game data. Each seeder is a
no-op when its table already holds rows.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .disease import DiseaseType
from .enums import CombatType, DiseaseSeverity, FestivalCategory
from .festival import FestivalType
from .guild import GuildBenefit
from .tournament import TournamentType

logger = logging.getLogger(__name__)


def _already_seeded(session: Session, model: type) -> bool:
    result = session.execute(select(model).limit(1))
    return result.scalar_one_or_none() is not None


def seed_festival_types(session: Session) -> None:
    """Seed the four seasonal festivals.

    Args:
        session: SQLAlchemy session to use for database operations
    """
    if _already_seeded(session, FestivalType):
        return

    festival_types = [
        FestivalType(
            name="Planting Festival",
            slug="planting-festival",
            description=(
                "Celebrate the beginning of the planting season with fertility rites "
                "and new beginnings."
            ),
            category=FestivalCategory.SEASONAL,
            season="spring",
            duration_days=3,
            bonuses={"farming_bonus": 10, "happiness": 5},
            activities=["dancing", "seed_blessing", "fertility_rites"],
        ),
        FestivalType(
            name="Midsummer Fair",
            slug="midsummer-fair",
            description=(
                "The grandest celebration of the year with trade, tournaments, and revelry."
            ),
            category=FestivalCategory.SEASONAL,
            season="summer",
            duration_days=7,
            bonuses={"trade_bonus": 15, "happiness": 10},
            activities=["tournaments", "trade_fair", "feasting", "music"],
        ),
        FestivalType(
            name="Harvest Festival",
            slug="harvest-festival",
            description="Give thanks for the bounty of the harvest with feasting and celebration.",
            category=FestivalCategory.SEASONAL,
            season="autumn",
            duration_days=5,
            bonuses={"food_bonus": 20, "happiness": 8},
            activities=["feasting", "thanksgiving", "competitions"],
        ),
        FestivalType(
            name="Midwinter Feast",
            slug="midwinter-feast",
            description="Gather together during the coldest months for warmth and community.",
            category=FestivalCategory.SEASONAL,
            season="winter",
            duration_days=3,
            bonuses={"morale": 10, "happiness": 5},
            activities=["feasting", "storytelling", "gift_giving"],
        ),
    ]
    session.add_all(festival_types)
    session.commit()
    logger.info("Seeded %d festival types", len(festival_types))


def seed_tournament_types(session: Session) -> None:
    """Seed the five tournament formats.

    Args:
        session: SQLAlchemy session to use for database operations
    """
    if _already_seeded(session, TournamentType):
        return

    tournament_types = [
        TournamentType(
            name="Grand Melee",
            slug="grand-melee",
            description="A chaotic free-for-all battle where the last fighter standing wins.",
            combat_type=CombatType.MELEE,
            primary_stat="attack",
            secondary_stat="defense",
            entry_fee=100,
            min_level=5,
            max_participants=16,
            prize_distribution={"1st": 50, "2nd": 30, "3rd": 20},
            is_lethal=False,
        ),
        TournamentType(
            name="Joust",
            slug="joust",
            description="Noble knights clash on horseback in tests of skill and valor.",
            combat_type=CombatType.JOUST,
            primary_stat="strength",
            secondary_stat="defense",
            entry_fee=250,
            min_level=10,
            max_participants=8,
            prize_distribution={"1st": 60, "2nd": 30, "3rd": 10},
            is_lethal=False,
        ),
        TournamentType(
            name="Archery Contest",
            slug="archery-contest",
            description="Test your aim and precision against the finest archers in the realm.",
            combat_type=CombatType.ARCHERY,
            primary_stat="attack",
            entry_fee=50,
            min_level=1,
            max_participants=32,
            prize_distribution={"1st": 50, "2nd": 30, "3rd": 20},
            is_lethal=False,
        ),
        TournamentType(
            name="Wrestling Match",
            slug="wrestling",
            description="A test of raw strength and grappling skill.",
            combat_type=CombatType.WRESTLING,
            primary_stat="strength",
            entry_fee=25,
            min_level=1,
            max_participants=16,
            prize_distribution={"1st": 60, "2nd": 40},
            is_lethal=False,
        ),
        TournamentType(
            name="Trial by Combat",
            slug="trial-by-combat",
            description="A deadly duel to resolve disputes through combat.",
            combat_type=CombatType.MIXED,
            primary_stat="combat_level",
            entry_fee=0,
            min_level=1,
            max_participants=2,
            prize_distribution={"1st": 100},
            is_lethal=True,
        ),
    ]
    session.add_all(tournament_types)
    session.commit()
    logger.info("Seeded %d tournament types", len(tournament_types))


def seed_disease_types(session: Session) -> None:
    """Seed one illness per severity band.

    Args:
        session: SQLAlchemy session to use for database operations
    """
    if _already_seeded(session, DiseaseType):
        return

    disease_types = [
        DiseaseType(
            name="Common Cold",
            slug="common-cold",
            description="A runny nose and a sore throat. Rarely more than a nuisance.",
            severity=DiseaseSeverity.MINOR,
            base_spread_rate=25,
            mortality_rate=0,
            base_duration_days=3,
            incubation_days=1,
            symptoms=["sneezing", "sore_throat"],
            stat_penalties={"energy_regen": -5},
            grants_immunity=False,
        ),
        DiseaseType(
            name="Camp Fever",
            slug="camp-fever",
            description="A fever that festers wherever people crowd together in filth.",
            severity=DiseaseSeverity.MODERATE,
            base_spread_rate=15,
            mortality_rate=3,
            base_duration_days=7,
            incubation_days=2,
            symptoms=["fever", "chills", "weakness"],
            stat_penalties={"max_hp": -10, "attack": -2},
        ),
        DiseaseType(
            name="Bloody Flux",
            slug="bloody-flux",
            description="A wasting sickness of the gut spread by foul water.",
            severity=DiseaseSeverity.SEVERE,
            base_spread_rate=12,
            mortality_rate=10,
            base_duration_days=10,
            incubation_days=2,
            symptoms=["cramps", "dehydration", "weakness"],
            stat_penalties={"max_hp": -20, "strength": -3},
        ),
        DiseaseType(
            name="Great Pestilence",
            slug="great-pestilence",
            description="The black death. Whole villages have been emptied by it.",
            severity=DiseaseSeverity.PLAGUE,
            base_spread_rate=30,
            mortality_rate=25,
            base_duration_days=14,
            incubation_days=3,
            symptoms=["buboes", "fever", "delirium"],
            stat_penalties={"max_hp": -40, "attack": -5, "defense": -5},
        ),
    ]
    session.add_all(disease_types)
    session.commit()
    logger.info("Seeded %d disease types", len(disease_types))


def seed_guild_benefits(session: Session) -> None:
    """Seed the guild benefits unlocked as guilds level up.

    Args:
        session: SQLAlchemy session to use for database operations
    """
    if _already_seeded(session, GuildBenefit):
        return

    guild_benefits = [
        GuildBenefit(
            name="Apprenticeship Program",
            description="Members earn more experience in the guild's skill.",
            icon="book-open",
            effects={"xp_bonus": 5},
            required_guild_level=1,
        ),
        GuildBenefit(
            name="Bulk Purchasing",
            description="Members pay less for raw materials.",
            icon="coins",
            effects={"material_discount": 10},
            required_guild_level=3,
        ),
        GuildBenefit(
            name="Master's Secrets",
            description="Members craft goods of higher quality.",
            icon="sparkles",
            effects={"quality_bonus": 5, "xp_bonus": 5},
            required_guild_level=5,
        ),
        GuildBenefit(
            name="Royal Charter",
            description="The crown recognises the guild; its goods sell for more.",
            icon="crown",
            effects={"sell_price_bonus": 10},
            required_guild_level=8,
        ),
    ]
    session.add_all(guild_benefits)
    session.commit()
    logger.info("Seeded %d guild benefits", len(guild_benefits))


def seed_all_catalog_data(session: Session) -> None:
    """Seed all catalog tables with base game data.

    Args:
        session: SQLAlchemy session to use for database operations
    """
    seed_festival_types(session)
    seed_tournament_types(session)
    seed_disease_types(session)
    seed_guild_benefits(session)
