"""Explicit read queries over the Demesne models.

Every function takes an open ``Session`` and returns plain pydantic read
models from ``demesne.schemas``. Lookups by id raise ``RecordNotFoundError``;
``find_*`` functions return None instead.
"""

from .conflict import (
    find_active_truce,
    get_player_health,
    get_war,
    is_player_immune,
    list_active_outbreaks,
    list_active_wars,
)
from .economy import (
    find_player_house,
    get_bank_account,
    get_construction_status,
    get_referral_stats,
    list_bank_accounts,
    list_open_projects,
    list_overdue_houses,
    total_bank_balance,
)
from .errors import RecordNotFoundError
from .society import (
    get_broadsheet,
    get_election,
    get_festival,
    get_guild,
    get_tournament,
    list_barony_broadsheets,
    list_kingdom_broadsheets,
    list_local_broadsheets,
    list_open_elections,
    list_public_guilds,
    list_upcoming_festivals,
)

__all__ = [
    "RecordNotFoundError",
    "find_active_truce",
    "find_player_house",
    "get_bank_account",
    "get_broadsheet",
    "get_construction_status",
    "get_election",
    "get_festival",
    "get_guild",
    "get_player_health",
    "get_referral_stats",
    "get_tournament",
    "get_war",
    "is_player_immune",
    "list_active_outbreaks",
    "list_active_wars",
    "list_bank_accounts",
    "list_barony_broadsheets",
    "list_kingdom_broadsheets",
    "list_local_broadsheets",
    "list_open_elections",
    "list_open_projects",
    "list_overdue_houses",
    "list_public_guilds",
    "list_upcoming_festivals",
    "total_bank_balance",
]
