"""SQLAlchemy models for the Demesne game system.

This module exports all database models and provides access to the
declarative base, polymorphic reference helpers, and seed data functions.
"""

# Base classes
from .base import (
    Base,
    TimestampCreatedMixin,
    TimestampMixin,
    UTCDateTime,
    as_utc,
    resolve_now,
    utc_now,
)

# Banking models
from .bank import BankAccount, BankTransaction

# Broadsheet models
from .broadsheet import Broadsheet, BroadsheetComment, BroadsheetReaction

# Construction models
from .construction import ConstructionProject

# Disease models
from .disease import (
    DiseaseImmunity,
    DiseaseInfection,
    DiseaseOutbreak,
    DiseaseType,
    QuarantineOrder,
)

# Election models
from .election import (
    Election,
    ElectionCandidate,
    ElectionVote,
    NoConfidenceBallot,
    NoConfidenceVote,
)

# Festival models
from .festival import Festival, FestivalParticipant, FestivalType, RoyalEvent

# Guild models
from .guild import (
    Guild,
    GuildActivity,
    GuildBenefit,
    GuildElection,
    GuildElectionCandidate,
    GuildElectionVote,
    GuildMember,
    GuildPriceControl,
    guild_benefit_guild,
)

# House models
from .house import HouseRoom, HouseStorage, PlayerHouse

# Player models
from .player import Player

# Polymorphic references
from .references import (
    EntityRef,
    LocatedMixin,
    LocationRef,
    resolve_for,
    resolve_reference,
    target_model,
)

# Referral models
from .referral import Referral

# Seed data functions
from .seed_data import (
    seed_all_catalog_data,
    seed_disease_types,
    seed_festival_types,
    seed_guild_benefits,
    seed_tournament_types,
)

# Tournament models
from .tournament import Tournament, TournamentCompetitor, TournamentMatch, TournamentType

# War models
from .war import (
    Army,
    ArmyUnit,
    Battle,
    BattleParticipant,
    MercenaryCompany,
    PeaceTreaty,
    Siege,
    SupplyLine,
    War,
    WarGoal,
    WarParticipant,
)

# World models
from .world import Barony, Castle, Duchy, Kingdom, Town, Village

__all__ = [
    "Army",
    "ArmyUnit",
    "BankAccount",
    "BankTransaction",
    "Barony",
    "Base",
    "Battle",
    "BattleParticipant",
    "Broadsheet",
    "BroadsheetComment",
    "BroadsheetReaction",
    "Castle",
    "ConstructionProject",
    "DiseaseImmunity",
    "DiseaseInfection",
    "DiseaseOutbreak",
    "DiseaseType",
    "Duchy",
    "Election",
    "ElectionCandidate",
    "ElectionVote",
    "EntityRef",
    "Festival",
    "FestivalParticipant",
    "FestivalType",
    "Guild",
    "GuildActivity",
    "GuildBenefit",
    "GuildElection",
    "GuildElectionCandidate",
    "GuildElectionVote",
    "GuildMember",
    "GuildPriceControl",
    "HouseRoom",
    "HouseStorage",
    "Kingdom",
    "LocatedMixin",
    "LocationRef",
    "MercenaryCompany",
    "NoConfidenceBallot",
    "NoConfidenceVote",
    "PeaceTreaty",
    "Player",
    "PlayerHouse",
    "QuarantineOrder",
    "Referral",
    "RoyalEvent",
    "Siege",
    "SupplyLine",
    "TimestampCreatedMixin",
    "TimestampMixin",
    "Tournament",
    "TournamentCompetitor",
    "TournamentMatch",
    "TournamentType",
    "Town",
    "UTCDateTime",
    "Village",
    "War",
    "WarGoal",
    "WarParticipant",
    "as_utc",
    "guild_benefit_guild",
    "resolve_for",
    "resolve_now",
    "resolve_reference",
    "seed_all_catalog_data",
    "seed_disease_types",
    "seed_festival_types",
    "seed_guild_benefits",
    "seed_tournament_types",
    "target_model",
    "utc_now",
]
