"""Read queries for wars, truces, and disease outbreaks."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from demesne.models import (
    DiseaseImmunity,
    DiseaseInfection,
    DiseaseOutbreak,
    PeaceTreaty,
    War,
)
from demesne.models.references import EntityRef
from demesne.schemas import (
    BattleSummary,
    OutbreakSummary,
    PartyRead,
    PlayerHealth,
    TruceRead,
    WarSummary,
)

from ._lookup import get_or_raise

logger = logging.getLogger(__name__)


def _party(ref: EntityRef | None, record: Any | None) -> PartyRead | None:
    if ref is None:
        return None
    return PartyRead(kind=ref.kind, id=ref.id, name=record.display_name if record else "Unknown")


def _war_summary(war: War, now: datetime | None) -> WarSummary:
    return WarSummary(
        id=war.id,
        name=war.name,
        casus_belli=war.casus_belli,
        status=war.status,
        is_active=war.is_active,
        attacker=_party(war.attacker_ref, war.attacker()),
        defender=_party(war.defender_ref, war.defender()),
        war_score_balance=war.war_score_balance,
        duration_days=war.duration_days(now),
        battles=[
            BattleSummary(
                id=battle.id,
                name=battle.name,
                status=battle.status,
                casualty_ratio=battle.casualty_ratio,
            )
            for battle in war.battles
        ],
    )


def get_war(session: Session, war_id: int, now: datetime | None = None) -> WarSummary:
    war = get_or_raise(session, War, war_id)
    return _war_summary(war, now)


def list_active_wars(
    session: Session, kingdom_id: int | None = None, now: datetime | None = None
) -> list[WarSummary]:
    """Wars still being fought, optionally only those involving ``kingdom_id``."""
    stmt = War.select_active()
    if kingdom_id is not None:
        stmt = stmt.where(
            or_(War.attacker_kingdom_id == kingdom_id, War.defender_kingdom_id == kingdom_id)
        )
    return [_war_summary(war, now) for war in session.scalars(stmt.order_by(War.declared_at))]


def find_active_truce(
    session: Session, kingdom_a: int, kingdom_b: int, now: datetime | None = None
) -> TruceRead | None:
    """The truce currently binding two kingdoms, or None if they are free to fight."""
    stmt = (
        PeaceTreaty.select_active_truce(now)
        .join(PeaceTreaty.war)
        .where(
            or_(
                (War.attacker_kingdom_id == kingdom_a) & (War.defender_kingdom_id == kingdom_b),
                (War.attacker_kingdom_id == kingdom_b) & (War.defender_kingdom_id == kingdom_a),
            )
        )
        .order_by(PeaceTreaty.truce_expires_at.desc())
    )
    treaty = session.scalars(stmt).first()
    if treaty is None:
        return None
    return TruceRead(
        treaty_id=treaty.id,
        war_id=treaty.war_id,
        treaty_type=treaty.treaty_type,
        truce_expires_at=treaty.truce_expires_at,
        days_remaining=treaty.truce_days_remaining(now),
    )


def _outbreak_summary(
    outbreak: DiseaseOutbreak, session: Session, now: datetime | None
) -> OutbreakSummary:
    return OutbreakSummary(
        id=outbreak.id,
        disease_name=outbreak.disease_type.name,
        severity=outbreak.disease_type.severity,
        status=outbreak.status,
        location_name=outbreak.location_name(session),
        infected_count=outbreak.infected_count,
        recovered_count=outbreak.recovered_count,
        death_count=outbreak.death_count,
        mortality_ratio=outbreak.mortality_ratio,
        duration_days=outbreak.duration_days(now),
        is_quarantined=outbreak.is_quarantined,
    )


def list_active_outbreaks(
    session: Session,
    location_type: str | None = None,
    location_id: int | None = None,
    now: datetime | None = None,
) -> list[OutbreakSummary]:
    stmt = DiseaseOutbreak.select_active()
    if location_type is not None:
        stmt = stmt.where(DiseaseOutbreak.location_type == location_type)
    if location_id is not None:
        stmt = stmt.where(DiseaseOutbreak.location_id == location_id)
    outbreaks = session.scalars(stmt.order_by(DiseaseOutbreak.started_at))
    return [_outbreak_summary(o, session, now) for o in outbreaks]


def get_player_health(
    session: Session, player_id: int, now: datetime | None = None
) -> PlayerHealth:
    """Illnesses a player carries and the ones they are currently immune to."""
    infections = session.scalars(
        DiseaseInfection.select_active().where(DiseaseInfection.player_id == player_id)
    )
    immunities = session.scalars(
        DiseaseImmunity.select_active(now).where(DiseaseImmunity.player_id == player_id)
    )
    return PlayerHealth(
        player_id=player_id,
        active_infections=sorted(i.disease_type.slug for i in infections),
        immunities=sorted(i.disease_type.slug for i in immunities),
    )


def is_player_immune(
    session: Session, player_id: int, disease_type_id: int, now: datetime | None = None
) -> bool:
    stmt = select(DiseaseImmunity).where(
        DiseaseImmunity.player_id == player_id,
        DiseaseImmunity.disease_type_id == disease_type_id,
    )
    immunity = session.scalars(stmt).first()
    return immunity is not None and immunity.is_active(now)
