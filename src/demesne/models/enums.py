"""Closed string enumerations used by status and type columns."""

from __future__ import annotations

from enum import StrEnum


def check_in(column: str, values: type[StrEnum], *, nullable: bool = False) -> str:
    """Build the SQL text of a CHECK constraint limiting ``column`` to ``values``."""
    allowed = ", ".join(f"'{member.value}'" for member in values)
    clause = f"{column} IN ({allowed})"
    if nullable:
        return f"{column} IS NULL OR {clause}"
    return clause


class LocationKind(StrEnum):
    """Places a polymorphic location reference can point at."""

    VILLAGE = "village"
    TOWN = "town"
    CASTLE = "castle"
    BARONY = "barony"
    DUCHY = "duchy"
    KINGDOM = "kingdom"


class EntityKind(StrEnum):
    """Parties that can own, claim, or fight: players plus every location kind."""

    PLAYER = "player"
    VILLAGE = "village"
    TOWN = "town"
    CASTLE = "castle"
    BARONY = "barony"
    DUCHY = "duchy"
    KINGDOM = "kingdom"


# Banking


class TransactionType(StrEnum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


# Construction


class ProjectType(StrEnum):
    BUILD = "build"
    UPGRADE = "upgrade"
    REPAIR = "repair"


class ProjectStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    CONSTRUCTING = "constructing"  # requirements met, waiting on timer
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Disease


class DiseaseSeverity(StrEnum):
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"
    PLAGUE = "plague"


class OutbreakStatus(StrEnum):
    EMERGING = "emerging"
    ACTIVE = "active"
    DECLINING = "declining"
    CONTAINED = "contained"
    ENDED = "ended"


class InfectionStatus(StrEnum):
    INCUBATING = "incubating"
    SYMPTOMATIC = "symptomatic"
    RECOVERING = "recovering"
    RECOVERED = "recovered"
    DECEASED = "deceased"


class ImmunityType(StrEnum):
    RECOVERED = "recovered"
    VACCINATED = "vaccinated"
    NATURAL = "natural"


class QuarantineStatus(StrEnum):
    ACTIVE = "active"
    LIFTED = "lifted"


# Elections


class ElectionStatus(StrEnum):
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"
    COMPLETED = "completed"
    FAILED = "failed"


class NoConfidenceStatus(StrEnum):
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"
    PASSED = "passed"
    FAILED = "failed"


# Guilds


class GuildRank(StrEnum):
    GUILDMASTER = "guildmaster"
    MASTER = "master"
    JOURNEYMAN = "journeyman"
    APPRENTICE = "apprentice"


class GuildActivityType(StrEnum):
    CRAFT = "craft"
    DONATION = "donation"
    MEETING = "meeting"
    TRAINING = "training"
    PROMOTION = "promotion"
    ELECTION = "election"
    DUES = "dues"


class GuildElectionStatus(StrEnum):
    NOMINATION = "nomination"
    VOTING = "voting"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Festivals and tournaments


class FestivalCategory(StrEnum):
    SEASONAL = "seasonal"
    RELIGIOUS = "religious"
    ROYAL = "royal"
    SPECIAL = "special"


class FestivalStatus(StrEnum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipantRole(StrEnum):
    ATTENDEE = "attendee"
    PERFORMER = "performer"
    VENDOR = "vendor"
    ORGANIZER = "organizer"
    COMPETITOR = "competitor"


class RoyalEventType(StrEnum):
    CORONATION = "coronation"
    ROYAL_WEDDING = "royal_wedding"
    ROYAL_FUNERAL = "royal_funeral"
    DECLARATION = "declaration"
    TREATY_SIGNING = "treaty_signing"


class CombatType(StrEnum):
    MELEE = "melee"
    JOUST = "joust"
    ARCHERY = "archery"
    WRESTLING = "wrestling"
    MIXED = "mixed"


class TournamentStatus(StrEnum):
    REGISTRATION = "registration"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CompetitorStatus(StrEnum):
    REGISTERED = "registered"
    ACTIVE = "active"
    ELIMINATED = "eliminated"
    WINNER = "winner"
    WITHDREW = "withdrew"


class MatchStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Warfare


class ArmyStatus(StrEnum):
    MUSTERING = "mustering"
    MARCHING = "marching"
    ENCAMPED = "encamped"
    BESIEGING = "besieging"
    IN_BATTLE = "in_battle"
    DISBANDED = "disbanded"


class UnitStatus(StrEnum):
    READY = "ready"
    EXHAUSTED = "exhausted"
    ROUTED = "routed"
    DESTROYED = "destroyed"


class CasusBelli(StrEnum):
    CLAIM = "claim"
    CONQUEST = "conquest"
    REBELLION = "rebellion"
    HOLY_WAR = "holy_war"
    DEFENSE = "defense"
    RAID = "raid"


class WarStatus(StrEnum):
    ACTIVE = "active"
    ATTACKER_WINNING = "attacker_winning"
    DEFENDER_WINNING = "defender_winning"
    WHITE_PEACE = "white_peace"
    ATTACKER_VICTORY = "attacker_victory"
    DEFENDER_VICTORY = "defender_victory"


class Side(StrEnum):
    ATTACKER = "attacker"
    DEFENDER = "defender"


class WarRole(StrEnum):
    PRIMARY = "primary"
    ALLY = "ally"
    VASSAL = "vassal"


class BattleType(StrEnum):
    FIELD = "field"
    SIEGE_ASSAULT = "siege_assault"
    NAVAL = "naval"
    SKIRMISH = "skirmish"


class BattleStatus(StrEnum):
    ONGOING = "ongoing"
    ATTACKER_VICTORY = "attacker_victory"
    DEFENDER_VICTORY = "defender_victory"
    DRAW = "draw"
    INCONCLUSIVE = "inconclusive"


class BattlePhase(StrEnum):
    ENGAGEMENT = "engagement"
    MELEE = "melee"
    PURSUIT = "pursuit"
    AFTERMATH = "aftermath"


class BattleOutcome(StrEnum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    ROUTED = "routed"
    WITHDREW = "withdrew"


class SiegeStatus(StrEnum):
    ACTIVE = "active"
    ASSAULT = "assault"
    BREACHED = "breached"
    CAPTURED = "captured"
    LIFTED = "lifted"
    ABANDONED = "abandoned"


class SupplyLineStatus(StrEnum):
    ACTIVE = "active"
    DISRUPTED = "disrupted"
    SEVERED = "severed"


class TreatyType(StrEnum):
    WHITE_PEACE = "white_peace"
    SURRENDER = "surrender"
    NEGOTIATED = "negotiated"


class MercenaryReputation(StrEnum):
    UNKNOWN = "unknown"
    POOR = "poor"
    AVERAGE = "average"
    GOOD = "good"
    LEGENDARY = "legendary"


class WarGoalType(StrEnum):
    CONQUER_TERRITORY = "conquer_territory"
    SUBJUGATION = "subjugation"
    INDEPENDENCE = "independence"
    RAID = "raid"
    HUMILIATE = "humiliate"


# Houses and referrals


class HouseTierName(StrEnum):
    COTTAGE = "cottage"
    HOUSE = "house"
    MANOR = "manor"


class ReferralStatus(StrEnum):
    PENDING = "pending"
    QUALIFIED = "qualified"
    REWARDED = "rewarded"


# Broadsheets


class ReactionType(StrEnum):
    ENDORSE = "endorse"
    DENOUNCE = "denounce"
