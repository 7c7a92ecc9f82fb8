from .bank import BankAccountSummary, BankTransactionRead
from .broadsheet import BroadsheetRead, CommentRead
from .construction import ConstructionStatus
from .disease import OutbreakSummary, PlayerHealth
from .election import CandidateStanding, ElectionSummary
from .festival import FestivalSummary
from .guild import GuildMemberRead, GuildSummary
from .house import HouseStatus
from .referral import ReferralRead, ReferralStats
from .tournament import CompetitorStanding, TournamentSummary
from .war import BattleSummary, PartyRead, TruceRead, WarSummary

__all__ = [
    "BankAccountSummary",
    "BankTransactionRead",
    "BattleSummary",
    "BroadsheetRead",
    "CandidateStanding",
    "CommentRead",
    "CompetitorStanding",
    "ConstructionStatus",
    "ElectionSummary",
    "FestivalSummary",
    "GuildMemberRead",
    "GuildSummary",
    "HouseStatus",
    "OutbreakSummary",
    "PartyRead",
    "PlayerHealth",
    "ReferralRead",
    "ReferralStats",
    "TournamentSummary",
    "TruceRead",
    "WarSummary",
]
