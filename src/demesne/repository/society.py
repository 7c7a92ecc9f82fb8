"""Read queries for guilds, elections, festivals, tournaments, and broadsheets."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from demesne.models import (
    Broadsheet,
    BroadsheetComment,
    Election,
    Festival,
    Guild,
    Tournament,
)
from demesne.models.enums import GuildRank
from demesne.schemas import (
    BroadsheetRead,
    CandidateStanding,
    CommentRead,
    CompetitorStanding,
    ElectionSummary,
    FestivalSummary,
    GuildMemberRead,
    GuildSummary,
    TournamentSummary,
)

from ._lookup import get_or_raise

logger = logging.getLogger(__name__)

_RANK_ORDER = {
    GuildRank.GUILDMASTER: 0,
    GuildRank.MASTER: 1,
    GuildRank.JOURNEYMAN: 2,
    GuildRank.APPRENTICE: 3,
}


# ---------------------------------------------------------------------------
# Guilds


def _guild_summary(guild: Guild, session: Session) -> GuildSummary:
    members = sorted(
        guild.members, key=lambda m: (_RANK_ORDER.get(m.rank, len(_RANK_ORDER)), -m.contribution)
    )
    return GuildSummary(
        id=guild.id,
        name=guild.name,
        skill_display=guild.skill_display,
        level=guild.level,
        level_progress=guild.level_progress,
        location_name=guild.location_name(session),
        member_count=guild.member_count,
        master_count=guild.master_count,
        can_accept_members=guild.can_accept_members,
        has_active_election=guild.has_active_election,
        combined_effects=guild.combined_effects(),
        members=[
            GuildMemberRead(
                player_id=m.player_id,
                username=m.player.username,
                rank=m.rank,
                rank_display=m.rank_display,
                contribution=m.contribution,
                has_voting_rights=m.has_voting_rights,
            )
            for m in members
        ],
    )


def get_guild(session: Session, guild_id: int) -> GuildSummary:
    guild = get_or_raise(session, Guild, guild_id)
    return _guild_summary(guild, session)


def list_public_guilds(session: Session, skill: str | None = None) -> list[GuildSummary]:
    """Active public guilds, optionally only those practising ``skill``."""
    stmt = Guild.select_public()
    if skill is not None:
        stmt = stmt.where(Guild.primary_skill == skill)
    return [_guild_summary(g, session) for g in session.scalars(stmt.order_by(Guild.name))]


# ---------------------------------------------------------------------------
# Elections


def _election_summary(
    election: Election, session: Session, now: datetime | None
) -> ElectionSummary:
    domain = election.domain(session)
    candidates = sorted(election.active_candidates, key=lambda c: (-c.vote_count, c.id))
    return ElectionSummary(
        id=election.id,
        role=election.role,
        status=election.status,
        domain_name=domain.name if domain is not None else "Unknown",
        is_open=election.is_open(now),
        voting_ends_at=election.voting_ends_at,
        quorum_progress=election.quorum_progress,
        turnout_display=election.turnout_display,
        candidates=[
            CandidateStanding(
                candidate_id=c.id,
                player_id=c.player_id,
                username=c.player.username,
                vote_count=c.vote_count,
                vote_share=c.vote_share,
            )
            for c in candidates
        ],
    )


def get_election(
    session: Session, election_id: int, now: datetime | None = None
) -> ElectionSummary:
    election = get_or_raise(session, Election, election_id)
    return _election_summary(election, session, now)


def list_open_elections(
    session: Session,
    domain_type: str | None = None,
    domain_id: int | None = None,
    now: datetime | None = None,
) -> list[ElectionSummary]:
    stmt = Election.select_open(now)
    if domain_type is not None:
        stmt = stmt.where(Election.domain_type == domain_type)
    if domain_id is not None:
        stmt = stmt.where(Election.domain_id == domain_id)
    elections = session.scalars(stmt.order_by(Election.voting_ends_at, Election.id))
    return [_election_summary(e, session, now) for e in elections]


# ---------------------------------------------------------------------------
# Festivals and tournaments


def _festival_summary(
    festival: Festival, session: Session, now: datetime | None
) -> FestivalSummary:
    return FestivalSummary(
        id=festival.id,
        name=festival.name,
        festival_type=festival.festival_type.slug,
        status=festival.status,
        location_name=festival.location_name(session),
        starts_at=festival.starts_at,
        ends_at=festival.ends_at,
        days_remaining=festival.days_remaining(now),
        attendance_count=festival.attendance_count,
        net_revenue=festival.net_revenue,
    )


def list_upcoming_festivals(
    session: Session, now: datetime | None = None
) -> list[FestivalSummary]:
    festivals = session.scalars(Festival.select_upcoming(now))
    return [_festival_summary(f, session, now) for f in festivals]


def get_festival(
    session: Session, festival_id: int, now: datetime | None = None
) -> FestivalSummary:
    festival = get_or_raise(session, Festival, festival_id)
    return _festival_summary(festival, session, now)


def get_tournament(
    session: Session, tournament_id: int, now: datetime | None = None
) -> TournamentSummary:
    """Tournament details with standings, most wins first."""
    tournament = get_or_raise(session, Tournament, tournament_id)
    standings = sorted(tournament.competitors, key=lambda c: (-c.wins, c.losses, c.id))
    return TournamentSummary(
        id=tournament.id,
        name=tournament.name,
        tournament_type=tournament.tournament_type.slug,
        status=tournament.status,
        location_name=tournament.location_name(session),
        competitor_count=tournament.competitor_count,
        max_participants=tournament.tournament_type.max_participants,
        is_full=tournament.is_full,
        is_registration_open=tournament.is_registration_open(now),
        standings=[
            CompetitorStanding(
                competitor_id=c.id,
                username=c.player.username,
                status=c.status,
                wins=c.wins,
                losses=c.losses,
                win_rate=c.win_rate,
            )
            for c in standings
        ],
    )


# ---------------------------------------------------------------------------
# Broadsheets


def _comment_read(comment: BroadsheetComment) -> CommentRead:
    return CommentRead(
        id=comment.id,
        username=comment.player.username if comment.player is not None else "Unknown",
        body=comment.body,
        created_at=comment.created_at,
        replies=[_comment_read(reply) for reply in comment.replies],
    )


def _broadsheet_read(
    broadsheet: Broadsheet, session: Session, *, with_comments: bool
) -> BroadsheetRead:
    comments = broadsheet.top_level_comments if with_comments else []
    return BroadsheetRead(
        id=broadsheet.id,
        title=broadsheet.title,
        author=broadsheet.author.username if broadsheet.author is not None else "Unknown",
        location_name=broadsheet.location_name(session),
        published_at=broadsheet.published_at,
        endorse_count=broadsheet.endorse_count,
        comment_count=broadsheet.comment_count,
        comments=[_comment_read(comment) for comment in comments],
    )


def get_broadsheet(session: Session, broadsheet_id: int) -> BroadsheetRead:
    """A broadsheet with its comment threads."""
    broadsheet = get_or_raise(session, Broadsheet, broadsheet_id)
    return _broadsheet_read(broadsheet, session, with_comments=True)


def list_local_broadsheets(
    session: Session, location_type: str, location_id: int
) -> list[BroadsheetRead]:
    stmt = (
        select(Broadsheet)
        .where(Broadsheet.location_type == location_type, Broadsheet.location_id == location_id)
        .order_by(Broadsheet.published_at.desc())
    )
    return [_broadsheet_read(b, session, with_comments=False) for b in session.scalars(stmt)]


def list_barony_broadsheets(session: Session, barony_id: int) -> list[BroadsheetRead]:
    stmt = Broadsheet.select_visible_in_barony(barony_id)
    return [_broadsheet_read(b, session, with_comments=False) for b in session.scalars(stmt)]


def list_kingdom_broadsheets(session: Session, kingdom_id: int) -> list[BroadsheetRead]:
    stmt = Broadsheet.select_visible_in_kingdom(kingdom_id)
    return [_broadsheet_read(b, session, with_comments=False) for b in session.scalars(stmt)]
