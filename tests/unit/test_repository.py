"""Tests for the read-side repository functions."""

from __future__ import annotations

import logging
from datetime import timedelta

import pytest
from sqlalchemy import select

from demesne.models import (
    BankAccount,
    BankTransaction,
    Battle,
    Broadsheet,
    BroadsheetComment,
    ConstructionProject,
    DiseaseImmunity,
    DiseaseInfection,
    DiseaseOutbreak,
    DiseaseType,
    Election,
    ElectionCandidate,
    Festival,
    FestivalType,
    Guild,
    GuildMember,
    PeaceTreaty,
    PlayerHouse,
    Referral,
    Tournament,
    TournamentCompetitor,
    TournamentType,
    War,
)
from demesne.models.seed_data import seed_festival_types, seed_tournament_types
from demesne.repository import (
    RecordNotFoundError,
    find_active_truce,
    find_player_house,
    get_bank_account,
    get_broadsheet,
    get_construction_status,
    get_election,
    get_festival,
    get_guild,
    get_player_health,
    get_referral_stats,
    get_tournament,
    get_war,
    is_player_immune,
    list_active_outbreaks,
    list_active_wars,
    list_bank_accounts,
    list_barony_broadsheets,
    list_kingdom_broadsheets,
    list_local_broadsheets,
    list_open_elections,
    list_open_projects,
    list_overdue_houses,
    list_public_guilds,
    list_upcoming_festivals,
    total_bank_balance,
)


class TestRecordNotFound:
    def test_message(self):
        error = RecordNotFoundError("War", 42)

        assert str(error) == "War 42 not found"
        assert error.model == "War"
        assert error.key == 42
        assert isinstance(error, LookupError)

    @pytest.mark.parametrize(
        "lookup",
        [
            get_bank_account,
            get_construction_status,
            get_guild,
            get_election,
            get_festival,
            get_tournament,
            get_broadsheet,
            get_war,
            get_referral_stats,
        ],
    )
    def test_missing_rows_raise(self, session, lookup):
        with pytest.raises(RecordNotFoundError, match="999 not found"):
            lookup(session, 999)


class TestBanking:
    """Tests for bank account queries."""

    def test_account_summary(self, session, player, town):
        account = BankAccount(
            player_id=player.id, location_type="town", location_id=town.id, balance=0
        )
        session.add(account)
        session.commit()
        for i in range(12):
            session.add(
                BankTransaction(
                    player_id=player.id,
                    bank_account_id=account.id,
                    type="deposit",
                    amount=10,
                    balance_after=10 * (i + 1),
                )
            )
        account.balance = 120
        session.commit()

        summary = get_bank_account(session, account.id)

        assert summary.location_name == "Marketon"
        assert summary.balance == 120
        assert len(summary.recent_transactions) == 10
        assert summary.recent_transactions[0].balance_after == 120

    def test_balances(self, session, player, town, village):
        session.add_all(
            [
                BankAccount(
                    player_id=player.id, location_type="town", location_id=town.id, balance=300
                ),
                BankAccount(
                    player_id=player.id, location_type="village", location_id=village.id, balance=0
                ),
            ]
        )
        session.commit()

        assert [a.balance for a in list_bank_accounts(session, player.id)] == [300]
        assert len(list_bank_accounts(session, player.id, funded_only=False)) == 2
        assert total_bank_balance(session, player.id) == 300

    def test_no_accounts(self, session, player):
        assert list_bank_accounts(session, player.id) == []
        assert total_bank_balance(session, player.id) == 0


class TestConstruction:
    def _project(self, session, village, **kwargs):
        project = ConstructionProject(
            location_type="village",
            location_id=village.id,
            building="Mill",
            project_type="upgrade",
            target_level=2,
            gold_required=500,
            **kwargs,
        )
        session.add(project)
        session.commit()
        return project

    def test_status(self, session, village, now):
        project = self._project(session, village, gold_invested=250)

        status = get_construction_status(session, project.id, now)

        assert status.location_name == "Oakridge"
        assert status.project_type_display == "Upgrade"
        assert not status.requirements_met

    def test_open_projects(self, session, village, town, now):
        open_project = self._project(session, village)
        self._project(session, village, status="completed")
        self._project(session, village, status="cancelled")

        projects = list_open_projects(session, "village", village.id, now)

        assert [p.id for p in projects] == [open_project.id]
        assert list_open_projects(session, "town", town.id, now) == []


class TestHousing:
    def test_find_player_house(self, session, player, town, now):
        assert find_player_house(session, player.id, now) is None

        session.add(
            PlayerHouse(
                player_id=player.id,
                name="Hearthstone",
                tier="house",
                condition=40,
                location_type="town",
                location_id=town.id,
                upkeep_due_at=now + timedelta(days=2),
            )
        )
        session.commit()

        status = find_player_house(session, player.id, now)
        assert status.location_name == "Marketon"
        assert status.storage_capacity == 250
        assert status.days_until_upkeep == 2
        assert status.are_buffs_disabled
        assert not status.is_abandoned

    def test_overdue_houses(self, session, make_player, town, now, caplog):
        late = make_player()
        session.add(
            PlayerHouse(
                player_id=late.id,
                name="Late",
                location_type="town",
                location_id=town.id,
                upkeep_due_at=now - timedelta(hours=1),
            )
        )
        session.commit()

        with caplog.at_level(logging.DEBUG, logger="demesne.repository"):
            overdue = list_overdue_houses(session, now)

        assert [h.player_id for h in overdue] == [late.id]
        assert overdue[0].is_upkeep_overdue
        assert "Found 1 houses with overdue upkeep" in caplog.text


class TestReferrals:
    def test_stats(self, session, make_player, now):
        referrer = make_player("aldric")
        statuses = ["pending", "qualified", "rewarded", "rewarded"]
        for i, status in enumerate(statuses):
            session.add(
                Referral(
                    referrer_id=referrer.id,
                    referred_id=make_player().id,
                    status=status,
                    created_at=now + timedelta(minutes=i),
                )
            )
        session.commit()

        stats = get_referral_stats(session, referrer.id)

        assert (stats.total, stats.pending, stats.qualified, stats.rewarded) == (4, 1, 1, 2)
        assert stats.total_earned == 500
        assert stats.referrals[0].status == "rewarded"

    def test_no_referrals(self, session, player):
        stats = get_referral_stats(session, player.id)
        assert stats.total == 0
        assert stats.referrals == []


class TestGuilds:
    def test_members_sorted_by_rank(self, session, town, make_player, now):
        founder = make_player("founder")
        guild = Guild(
            name="Weavers",
            primary_skill="tailoring",
            location_type="town",
            location_id=town.id,
            founder_id=founder.id,
            guildmaster_id=founder.id,
        )
        session.add(guild)
        session.commit()
        for player, rank, contribution in [
            (make_player("apprentice"), "apprentice", 900),
            (founder, "guildmaster", 10),
            (make_player("junior"), "master", 5),
            (make_player("senior"), "master", 50),
        ]:
            session.add(
                GuildMember(
                    guild_id=guild.id,
                    player_id=player.id,
                    rank=rank,
                    contribution=contribution,
                    joined_at=now,
                )
            )
        session.commit()

        summary = get_guild(session, guild.id)

        assert [m.username for m in summary.members] == [
            "founder",
            "senior",
            "junior",
            "apprentice",
        ]
        assert summary.location_name == "Marketon"

    def test_public_guilds(self, session, town, player):
        def _guild(name, skill, **kwargs):
            return Guild(
                name=name,
                primary_skill=skill,
                location_type="town",
                location_id=town.id,
                founder_id=player.id,
                **kwargs,
            )

        session.add_all(
            [
                _guild("Smiths", "smithing"),
                _guild("Bakers", "cooking"),
                _guild("Secret Smiths", "smithing", is_public=False),
                _guild("Old Smiths", "smithing", is_active=False),
            ]
        )
        session.commit()

        assert [g.name for g in list_public_guilds(session)] == ["Bakers", "Smiths"]
        assert [g.name for g in list_public_guilds(session, skill="smithing")] == ["Smiths"]


class TestElections:
    def _election(self, session, village, now, **kwargs):
        kwargs.setdefault("voting_ends_at", now + timedelta(days=1))
        kwargs.setdefault("voting_starts_at", now - timedelta(days=1))
        election = Election(
            election_type="village_elder",
            role="elder",
            domain_type="village",
            domain_id=village.id,
            status="open",
            **kwargs,
        )
        session.add(election)
        session.commit()
        return election

    def test_candidates_ranked_by_votes(self, session, village, make_player, now):
        election = self._election(session, village, now)
        trailing = ElectionCandidate(
            election_id=election.id, player_id=make_player("brom").id, declared_at=now, vote_count=2
        )
        leading = ElectionCandidate(
            election_id=election.id, player_id=make_player("cera").id, declared_at=now, vote_count=5
        )
        session.add_all([trailing, leading])
        session.commit()

        summary = get_election(session, election.id, now)

        assert summary.domain_name == "Oakridge"
        assert summary.is_open
        assert [c.username for c in summary.candidates] == ["cera", "brom"]

    def test_open_elections(self, session, village, now):
        soon = self._election(session, village, now, voting_ends_at=now + timedelta(hours=2))
        later = self._election(session, village, now, voting_ends_at=now + timedelta(days=3))
        self._election(session, village, now, voting_ends_at=now - timedelta(hours=1))
        self._election(
            session,
            village,
            now,
            voting_starts_at=now + timedelta(days=2),
            voting_ends_at=now + timedelta(days=5),
        )

        elections = list_open_elections(session, "village", village.id, now)

        assert [e.id for e in elections] == [soon.id, later.id]
        assert all(e.is_open for e in elections)
        assert list_open_elections(session, "town", now=now) == []


class TestFestivals:
    def test_upcoming_festivals(self, session, town, now):
        seed_festival_types(session)
        fair = session.scalars(
            select(FestivalType).where(FestivalType.slug == "midsummer-fair")
        ).one()

        def _festival(name, starts_in, status="scheduled"):
            return Festival(
                festival_type_id=fair.id,
                name=name,
                location_type="town",
                location_id=town.id,
                status=status,
                starts_at=now + starts_in,
                ends_at=now + starts_in + timedelta(days=7),
            )

        session.add_all(
            [
                _festival("Later Fair", timedelta(days=30)),
                _festival("Next Fair", timedelta(days=3)),
                _festival("Running Fair", timedelta(days=-1), status="active"),
            ]
        )
        session.commit()

        upcoming = list_upcoming_festivals(session, now)

        assert [f.name for f in upcoming] == ["Next Fair", "Later Fair"]
        assert upcoming[0].festival_type == "midsummer-fair"
        assert upcoming[0].location_name == "Marketon"

    def test_tournament_standings(self, session, town, make_player, now):
        seed_tournament_types(session)
        joust = session.scalars(select(TournamentType).where(TournamentType.slug == "joust")).one()
        tournament = Tournament(
            tournament_type_id=joust.id,
            name="Spring Joust",
            location_type="town",
            location_id=town.id,
            registration_ends_at=now + timedelta(hours=6),
            starts_at=now + timedelta(days=1),
        )
        session.add(tournament)
        session.commit()
        for name, wins, losses in [("ivo", 1, 2), ("jory", 3, 0), ("kell", 1, 1)]:
            session.add(
                TournamentCompetitor(
                    tournament_id=tournament.id,
                    player_id=make_player(name).id,
                    wins=wins,
                    losses=losses,
                )
            )
        session.commit()

        summary = get_tournament(session, tournament.id, now)

        assert [s.username for s in summary.standings] == ["jory", "kell", "ivo"]
        assert summary.max_participants == 8
        assert summary.competitor_count == 3
        assert not summary.is_full


class TestBroadsheets:
    def _broadsheet(self, session, author, town, barony, kingdom, now, title, endorsements):
        broadsheet = Broadsheet(
            author_id=author.id,
            title=title,
            content=title,
            location_type="town",
            location_id=town.id,
            barony_id=barony.id,
            kingdom_id=kingdom.id,
            published_at=now,
            endorse_count=endorsements,
        )
        session.add(broadsheet)
        session.commit()
        return broadsheet

    def test_comment_threads(self, session, player, make_player, town, barony, kingdom, now):
        broadsheet = self._broadsheet(session, player, town, barony, kingdom, now, "News", 0)
        reeve = make_player("reeve")
        top = BroadsheetComment(broadsheet=broadsheet, player_id=player.id, body="First")
        BroadsheetComment(
            broadsheet=broadsheet, parent=top, player_id=reeve.id, body="Reply"
        )
        session.add(top)
        session.commit()

        read = get_broadsheet(session, broadsheet.id)

        assert read.author == "aldric"
        assert [c.body for c in read.comments] == ["First"]
        assert read.comments[0].replies[0].username == "reeve"

    def test_visibility_lists(self, session, player, town, barony, kingdom, now):
        args = (session, player, town, barony, kingdom, now)
        self._broadsheet(*args, "Local", 1)
        self._broadsheet(*args, "Regional", 6)
        self._broadsheet(*args, "Famous", 20)

        assert len(list_local_broadsheets(session, "town", town.id)) == 3
        assert {b.title for b in list_barony_broadsheets(session, barony.id)} == {
            "Regional",
            "Famous",
        }
        assert [b.title for b in list_kingdom_broadsheets(session, kingdom.id)] == ["Famous"]
        assert all(b.comments == [] for b in list_local_broadsheets(session, "town", town.id))


class TestWars:
    def _war(self, session, attacker, defender, now, **kwargs):
        war = War(
            name=f"{attacker.name} against {defender.name}",
            casus_belli="conquest",
            attacker_kingdom_id=attacker.id,
            defender_kingdom_id=defender.id,
            attacker_type="kingdom",
            attacker_id=attacker.id,
            defender_type="kingdom",
            defender_id=defender.id,
            declared_at=now - timedelta(days=5),
            **kwargs,
        )
        session.add(war)
        session.commit()
        return war

    def test_war_summary(self, session, kingdom, rival_kingdom, village, now):
        war = self._war(session, kingdom, rival_kingdom, now)
        session.add(
            Battle(
                war_id=war.id,
                location_type="village",
                location_id=village.id,
                started_at=now,
                attacker_troops_start=100,
                defender_troops_start=100,
                attacker_casualties=10,
                defender_casualties=30,
            )
        )
        session.commit()

        summary = get_war(session, war.id, now)

        assert summary.attacker.name == "Kingdom of Albion"
        assert summary.defender.kind == "kingdom"
        assert summary.duration_days == 5
        assert summary.battles[0].casualty_ratio == 0.2

    def test_unresolvable_party(self, session, kingdom, rival_kingdom, now):
        war = self._war(session, kingdom, rival_kingdom, now)
        war.defender_type = "player"
        war.defender_id = 999
        session.commit()

        assert get_war(session, war.id, now).defender.name == "Unknown"

    def test_active_wars_for_kingdom(self, session, kingdom, rival_kingdom, now):
        war = self._war(session, kingdom, rival_kingdom, now)
        self._war(session, rival_kingdom, kingdom, now, status="defender_victory")

        assert [w.id for w in list_active_wars(session, kingdom.id, now)] == [war.id]
        assert list_active_wars(session, 999, now) == []

    def test_truce_either_direction(self, session, kingdom, rival_kingdom, now):
        war = self._war(session, kingdom, rival_kingdom, now, status="white_peace")
        session.add(
            PeaceTreaty(
                war_id=war.id,
                treaty_type="white_peace",
                signed_at=now - timedelta(days=5),
                truce_expires_at=now + timedelta(days=10),
            )
        )
        session.commit()

        truce = find_active_truce(session, rival_kingdom.id, kingdom.id, now)

        assert truce.war_id == war.id
        assert truce.days_remaining == 10
        later = now + timedelta(days=11)
        assert find_active_truce(session, kingdom.id, rival_kingdom.id, later) is None


class TestDisease:
    def test_outbreaks_and_health(self, session, player, village, town, now):
        plague = DiseaseType(
            name="Great Pestilence",
            slug="great-pestilence",
            description="Plague.",
            severity="plague",
        )
        flux = DiseaseType(
            name="Bloody Flux", slug="bloody-flux", description="Flux.", severity="severe"
        )
        session.add_all([plague, flux])
        session.commit()
        session.add_all(
            [
                DiseaseOutbreak(
                    disease_type_id=plague.id,
                    location_type="village",
                    location_id=village.id,
                    status="active",
                    started_at=now - timedelta(days=3),
                ),
                DiseaseOutbreak(
                    disease_type_id=flux.id,
                    location_type="town",
                    location_id=town.id,
                    status="ended",
                    started_at=now - timedelta(days=40),
                ),
                DiseaseInfection(disease_type_id=plague.id, player_id=player.id, infected_at=now),
                DiseaseImmunity(
                    disease_type_id=flux.id,
                    player_id=player.id,
                    immunity_type="recovered",
                    acquired_at=now - timedelta(days=20),
                    expires_at=now + timedelta(days=10),
                ),
            ]
        )
        session.commit()

        outbreaks = list_active_outbreaks(session, now=now)
        assert [o.disease_name for o in outbreaks] == ["Great Pestilence"]
        assert outbreaks[0].location_name == "Oakridge"
        assert outbreaks[0].duration_days == 3
        assert list_active_outbreaks(session, "town", town.id, now) == []

        health = get_player_health(session, player.id, now)
        assert health.active_infections == ["great-pestilence"]
        assert health.immunities == ["bloody-flux"]

        assert is_player_immune(session, player.id, flux.id, now)
        assert not is_player_immune(session, player.id, flux.id, now + timedelta(days=11))
        assert not is_player_immune(session, player.id, plague.id, now)
