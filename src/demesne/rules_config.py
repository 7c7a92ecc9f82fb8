"""Declarative rule constants read by derived model values."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class HouseTier:
    """One purchasable house size."""

    name: str
    level: int
    title_level: int
    cost: int
    grid: int
    max_rooms: int
    storage: int
    upkeep: int


def _default_house_tiers() -> Mapping[str, HouseTier]:
    return MappingProxyType(
        {
            "cottage": HouseTier("Cottage", 1, 2, 50_000, 3, 3, 100, 250),
            "house": HouseTier("House", 20, 3, 250_000, 4, 6, 250, 750),
            "manor": HouseTier("Manor", 40, 4, 1_000_000, 5, 10, 500, 1500),
        }
    )


@dataclass(frozen=True, slots=True)
class HouseRules:
    """House tiers, upkeep, and condition thresholds."""

    tiers: Mapping[str, HouseTier] = field(default_factory=_default_house_tiers)
    upkeep_interval_days: int = 7
    max_condition: int = 100
    overdue_condition_loss: int = 10
    buffs_disabled_at: int = 50  # condition at or below
    portals_disabled_at: int = 25
    storage_disabled_at: int = 25


def _default_guild_levels() -> Mapping[int, int]:
    return MappingProxyType(
        {
            1: 0,
            2: 10_000,
            3: 50_000,
            4: 150_000,
            5: 500_000,
            6: 1_500_000,
            7: 5_000_000,
            8: 15_000_000,
            9: 50_000_000,
            10: 150_000_000,
        }
    )


@dataclass(frozen=True, slots=True)
class GuildRules:
    """Guild founding costs and contribution thresholds per level."""

    level_thresholds: Mapping[int, int] = field(default_factory=_default_guild_levels)
    max_level: int = 10
    min_founding_members: int = 5
    founding_cost: int = 50_000
    membership_fee: int = 1000
    weekly_dues: int = 100
    guild_skills: tuple[str, ...] = (
        "smithing",
        "crafting",
        "cooking",
        "mining",
        "woodcutting",
        "fishing",
    )


def _default_upgrade_hours() -> Mapping[int, int]:
    return MappingProxyType({2: 2, 3: 6, 4: 12, 5: 24, 6: 48})


def _default_build_hours() -> Mapping[int, int]:
    return MappingProxyType({1: 1, 2: 2, 3: 4, 4: 8, 5: 12})


@dataclass(frozen=True, slots=True)
class ConstructionRules:
    """Hours on the construction timer once requirements are met."""

    upgrade_hours: Mapping[int, int] = field(default_factory=_default_upgrade_hours)
    build_hours: Mapping[int, int] = field(default_factory=_default_build_hours)
    default_upgrade_hours: int = 2
    default_build_hours: int = 1


@dataclass(frozen=True, slots=True)
class ReferralRules:
    referrer_reward: int = 250
    ip_cooldown_days: int = 30


@dataclass(frozen=True, slots=True)
class BroadsheetRules:
    """Endorsements needed before a broadsheet spreads past its settlement."""

    barony_threshold: int = 5
    kingdom_threshold: int = 15


@dataclass(frozen=True, slots=True)
class ElectionRules:
    self_appoint_threshold: int = 5


@dataclass(frozen=True, slots=True)
class DiseaseRules:
    min_mortality_chance: int = 1
    max_mortality_chance: int = 50


@dataclass(frozen=True, slots=True)
class WarRules:
    """Siege and supply thresholds."""

    breach_fortification_level: int = 30  # at or below counts as breached
    disrupted_supply_factor: float = 0.5


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Aggregate of every rule block."""

    houses: HouseRules = field(default_factory=HouseRules)
    guilds: GuildRules = field(default_factory=GuildRules)
    construction: ConstructionRules = field(default_factory=ConstructionRules)
    referrals: ReferralRules = field(default_factory=ReferralRules)
    broadsheets: BroadsheetRules = field(default_factory=BroadsheetRules)
    elections: ElectionRules = field(default_factory=ElectionRules)
    disease: DiseaseRules = field(default_factory=DiseaseRules)
    war: WarRules = field(default_factory=WarRules)


DEFAULT_RULES = RulesConfig()
