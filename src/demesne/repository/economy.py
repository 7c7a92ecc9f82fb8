"""Read queries for banking, construction, housing, and referrals."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from demesne.models import BankAccount, ConstructionProject, Player, PlayerHouse, Referral
from demesne.models.enums import ProjectStatus, ReferralStatus
from demesne.schemas import (
    BankAccountSummary,
    BankTransactionRead,
    ConstructionStatus,
    HouseStatus,
    ReferralRead,
    ReferralStats,
)

from ._lookup import get_or_raise

logger = logging.getLogger(__name__)

_RECENT_TRANSACTIONS = 10


def _account_summary(account: BankAccount, session: Session) -> BankAccountSummary:
    transactions = [
        BankTransactionRead(
            id=tx.id,
            type=tx.type,
            amount=tx.amount,
            signed_amount=tx.signed_amount,
            balance_after=tx.balance_after,
            description=tx.description,
            created_at=tx.created_at,
        )
        for tx in account.transactions[:_RECENT_TRANSACTIONS]
    ]
    return BankAccountSummary(
        id=account.id,
        player_id=account.player_id,
        location_type=account.location_type,
        location_id=account.location_id,
        location_name=account.location_name(session),
        balance=account.balance,
        recent_transactions=transactions,
    )


def get_bank_account(session: Session, account_id: int) -> BankAccountSummary:
    """Return one account with its latest ledger entries.

    Raises:
        RecordNotFoundError: If no account has this id
    """
    account = get_or_raise(session, BankAccount, account_id)
    return _account_summary(account, session)


def list_bank_accounts(
    session: Session, player_id: int, *, funded_only: bool = True
) -> list[BankAccountSummary]:
    accounts = session.scalars(BankAccount.select_for_player(player_id, funded_only=funded_only))
    return [_account_summary(account, session) for account in accounts]


def total_bank_balance(session: Session, player_id: int) -> int:
    """Gold held across every account the player has."""
    accounts = session.scalars(BankAccount.select_for_player(player_id, funded_only=False))
    return sum(account.balance for account in accounts)


def _construction_status(
    project: ConstructionProject, session: Session, now: datetime | None
) -> ConstructionStatus:
    return ConstructionStatus(
        id=project.id,
        description=project.description,
        project_type_display=project.project_type_display,
        status=project.status,
        progress=project.progress,
        location_name=project.location_name(session),
        requirements_met=project.requirements_met(),
        remaining_seconds=project.remaining_seconds(now),
    )


def get_construction_status(
    session: Session, project_id: int, now: datetime | None = None
) -> ConstructionStatus:
    project = get_or_raise(session, ConstructionProject, project_id)
    return _construction_status(project, session, now)


def list_open_projects(
    session: Session, location_type: str, location_id: int, now: datetime | None = None
) -> list[ConstructionStatus]:
    """Projects at a settlement that are not yet completed or cancelled."""
    stmt = (
        select(ConstructionProject)
        .where(
            ConstructionProject.location_type == location_type,
            ConstructionProject.location_id == location_id,
            ConstructionProject.status.not_in(
                (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED)
            ),
        )
        .order_by(ConstructionProject.id)
    )
    return [_construction_status(p, session, now) for p in session.scalars(stmt)]


def _house_status(house: PlayerHouse, session: Session, now: datetime | None) -> HouseStatus:
    return HouseStatus(
        id=house.id,
        player_id=house.player_id,
        name=house.name,
        tier=house.tier,
        location_name=house.location_name(session),
        condition=house.condition,
        storage_capacity=house.storage_capacity,
        storage_used=house.storage_used,
        room_count=len(house.rooms),
        max_rooms=house.max_rooms,
        upkeep_due_at=house.upkeep_due_at,
        is_upkeep_overdue=house.is_upkeep_overdue(now),
        days_until_upkeep=house.days_until_upkeep(now),
        are_buffs_disabled=house.are_buffs_disabled,
        are_portals_disabled=house.are_portals_disabled,
        is_storage_disabled=house.is_storage_disabled,
        is_abandoned=house.is_abandoned,
    )


def find_player_house(
    session: Session, player_id: int, now: datetime | None = None
) -> HouseStatus | None:
    """The player's house, or None if they have not bought one."""
    house = session.scalars(select(PlayerHouse).where(PlayerHouse.player_id == player_id)).first()
    if house is None:
        return None
    return _house_status(house, session, now)


def list_overdue_houses(session: Session, now: datetime | None = None) -> list[HouseStatus]:
    houses = session.scalars(PlayerHouse.select_overdue(now).order_by(PlayerHouse.upkeep_due_at))
    result = [_house_status(house, session, now) for house in houses]
    logger.debug("Found %d houses with overdue upkeep", len(result))
    return result


def get_referral_stats(session: Session, player_id: int) -> ReferralStats:
    """Counts and earnings for everyone a player has referred.

    Raises:
        RecordNotFoundError: If the player does not exist
    """
    get_or_raise(session, Player, player_id)
    referrals = list(session.scalars(Referral.select_for_referrer(player_id)))
    rewarded = [r for r in referrals if r.status == ReferralStatus.REWARDED]
    return ReferralStats(
        total=len(referrals),
        pending=sum(1 for r in referrals if r.status == ReferralStatus.PENDING),
        qualified=sum(1 for r in referrals if r.status == ReferralStatus.QUALIFIED),
        rewarded=len(rewarded),
        total_earned=sum(r.reward_amount for r in rewarded),
        referrals=[
            ReferralRead(
                id=r.id,
                referred_username=r.referred_username,
                status=r.status,
                reward_amount=r.reward_amount,
                qualified_at=r.qualified_at,
                rewarded_at=r.rewarded_at,
            )
            for r in referrals
        ],
    )

