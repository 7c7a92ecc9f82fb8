"""Unit tests for armies, wars, battles, sieges, and treaties."""

from datetime import timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from demesne.models import (
    Army,
    ArmyUnit,
    Battle,
    BattleParticipant,
    EntityRef,
    LocationRef,
    MercenaryCompany,
    PeaceTreaty,
    Siege,
    SupplyLine,
    War,
    WarGoal,
    WarParticipant,
)
from demesne.models.enums import EntityKind, LocationKind, Side


@pytest.fixture
def army(session, player, town):
    army = Army(
        name="Host of Ashford",
        owner_type="player",
        owner_id=player.id,
        commander_id=player.id,
        location_type="town",
        location_id=town.id,
    )
    session.add(army)
    session.commit()
    return army


@pytest.fixture
def war(session, kingdom, rival_kingdom, now):
    war = War(
        name="War of the Fords",
        casus_belli="claim",
        attacker_kingdom_id=kingdom.id,
        defender_kingdom_id=rival_kingdom.id,
        attacker_type="kingdom",
        attacker_id=kingdom.id,
        defender_type="kingdom",
        defender_id=rival_kingdom.id,
        declared_at=now - timedelta(days=12),
    )
    session.add(war)
    session.commit()
    return war


@pytest.fixture
def battle(session, war, village, now):
    battle = Battle(
        war_id=war.id,
        name="Battle of Oakridge",
        location_type="village",
        location_id=village.id,
        started_at=now,
    )
    session.add(battle)
    session.commit()
    return battle


class TestArmyModel:
    """Tests for the Army model."""

    def test_owner(self, army, player):
        assert army.owner_ref == EntityRef(kind=EntityKind.PLAYER, id=player.id)
        assert army.owner() is player
        assert army.is_active

    def test_totals(self, session, army):
        session.add_all(
            [
                ArmyUnit(army_id=army.id, unit_type="spearmen", count=100, max_count=120, attack=2),
                ArmyUnit(army_id=army.id, unit_type="archers", count=50, max_count=50, defense=3),
            ]
        )
        session.commit()

        assert army.total_troops == 150
        assert army.total_attack == 250
        assert army.total_defense == 250

    def test_strength_ratio(self):
        assert ArmyUnit(count=30, max_count=120).strength_ratio == 0.25
        assert ArmyUnit(count=0, max_count=0).strength_ratio == 0.0

    def test_cannot_stand_in_a_kingdom(self, player, kingdom):
        with pytest.raises(ValueError):
            Army(
                name="Lost",
                owner_type="player",
                owner_id=player.id,
                location_type="kingdom",
                location_id=kingdom.id,
            )

    def test_disbanded(self, army):
        army.status = "disbanded"
        assert not army.is_active


class TestWarModel:
    """Tests for the War model."""

    def test_belligerents(self, war, kingdom, rival_kingdom):
        assert war.attacker_ref == EntityRef(kind=EntityKind.KINGDOM, id=kingdom.id)
        assert war.attacker() is kingdom
        assert war.defender() is rival_kingdom
        assert war.attacker_kingdom is kingdom

    def test_war_score_and_duration(self, war, now):
        war.attacker_war_score = 40
        war.defender_war_score = 15
        assert war.war_score_balance == 25
        assert war.duration_days(now) == 12

        war.ended_at = now - timedelta(days=2)
        assert war.duration_days(now + timedelta(days=100)) == 10

    def test_participants_on_side(self, session, war, kingdom, player, now):
        session.add_all(
            [
                WarParticipant(
                    war_id=war.id,
                    participant_type="kingdom",
                    participant_id=kingdom.id,
                    side="attacker",
                    role="primary",
                    is_war_leader=True,
                    joined_at=now,
                ),
                WarParticipant(
                    war_id=war.id,
                    participant_type="player",
                    participant_id=player.id,
                    side="defender",
                    joined_at=now,
                ),
            ]
        )
        session.commit()

        (attacker,) = war.participants_on(Side.ATTACKER)
        (defender,) = war.participants_on(Side.DEFENDER)
        assert attacker.participant() is kingdom
        assert defender.participant() is player
        assert not defender.has_left

    def test_select_active(self, session, war, kingdom, rival_kingdom, now):
        session.add(
            War(
                name="Old War",
                casus_belli="raid",
                attacker_kingdom_id=rival_kingdom.id,
                defender_kingdom_id=kingdom.id,
                status="white_peace",
                declared_at=now - timedelta(days=400),
            )
        )
        session.commit()

        assert session.scalars(War.select_active()).all() == [war]

    def test_goals(self, session, war, kingdom, village):
        goal = WarGoal(
            war_id=war.id,
            goal_type="conquer_territory",
            target_type="village",
            target_id=village.id,
            claimant_type="kingdom",
            claimant_id=kingdom.id,
        )
        session.add(goal)
        session.commit()

        assert war.goals == [goal]
        assert goal.target_ref == LocationRef(kind=LocationKind.VILLAGE, id=village.id)
        assert goal.claimant_ref == EntityRef(kind=EntityKind.KINGDOM, id=kingdom.id)
        assert goal.target() is village


class TestBattleModel:
    """Tests for the Battle and BattleParticipant models."""

    def test_casualty_ratio(self, battle):
        battle.attacker_troops_start = 300
        battle.defender_troops_start = 100
        battle.attacker_casualties = 60
        battle.defender_casualties = 40
        assert battle.casualty_ratio == 0.25
        assert battle.is_ongoing

    def test_casualty_ratio_without_troops(self, battle):
        assert battle.total_troops == 0
        assert battle.casualty_ratio == 0.0

    def test_casualty_rate(self, session, battle, army):
        participant = BattleParticipant(
            battle_id=battle.id,
            army_id=army.id,
            side="attacker",
            troops_committed=200,
            casualties=30,
            morale_at_start=90,
            morale_at_end=60,
        )
        session.add(participant)
        session.commit()

        assert participant.casualty_rate == 15.0
        assert participant.morale_lost == 30
        assert battle.participants == [participant]

    def test_zero_troops_committed(self, session, battle, army):
        participant = BattleParticipant(
            battle_id=battle.id, army_id=army.id, side="defender", troops_committed=0, casualties=5
        )
        session.add(participant)
        session.commit()

        assert participant.casualty_rate == 0.0
        assert participant.morale_lost == 0

    def test_outcome_constraint(self, session, battle, army):
        session.add(
            BattleParticipant(battle_id=battle.id, army_id=army.id, side="attacker", outcome="fled")
        )
        with pytest.raises(IntegrityError):
            session.commit()


class TestSiegeModel:
    """Tests for the Siege model."""

    def _siege(self, session, army, castle, now, **kwargs):
        siege = Siege(
            attacking_army_id=army.id,
            target_type="castle",
            target_id=castle.id,
            started_at=now,
            **kwargs,
        )
        session.add(siege)
        session.commit()
        return siege

    def test_target(self, session, army, castle, now):
        siege = self._siege(session, army, castle, now)
        assert siege.target_ref == LocationRef(kind=LocationKind.CASTLE, id=castle.id)
        assert siege.target() is castle
        assert siege.is_active

    def test_realm_is_not_a_siege_target(self, session, army, barony, now):
        siege = Siege(
            attacking_army_id=army.id, target_type="barony", target_id=barony.id, started_at=now
        )
        session.add(siege)
        session.commit()

        assert siege.target_ref is None
        assert siege.target() is None

    @pytest.mark.parametrize(
        ("status", "fortification", "breach", "expected"),
        [
            ("active", 100, False, False),
            ("active", 30, False, True),
            ("active", 31, False, False),
            ("active", 90, True, True),
            ("assault", 10, False, True),
            ("lifted", 0, True, False),
        ],
    )
    def test_can_assault(self, session, army, castle, now, status, fortification, breach, expected):
        siege = self._siege(
            session,
            army,
            castle,
            now,
            status=status,
            fortification_level=fortification,
            has_breach=breach,
        )
        assert siege.can_assault() is expected


class TestSupplyLineModel:
    @pytest.mark.parametrize(
        ("status", "expected"), [("active", 25), ("disrupted", 12), ("severed", 0)]
    )
    def test_effective_rate(self, session, army, village, status, expected):
        line = SupplyLine(
            army_id=army.id,
            source_type="village",
            source_id=village.id,
            status=status,
            supply_rate=25,
        )
        session.add(line)
        session.commit()

        assert line.effective_rate == expected
        assert line.source() is village
        assert army.supply_lines == [line]

    @pytest.mark.parametrize("kind", ["barony", "kingdom", "castel"])
    def test_source_must_be_a_settlement(self, session, army, kind):
        line = SupplyLine(army_id=army.id, source_type=kind, source_id=1)
        session.add(line)
        session.commit()

        assert line.source_ref is None
        assert line.source() is None

    def test_source_ref(self, army, castle):
        line = SupplyLine(army_id=army.id, source_type="castle", source_id=castle.id)
        assert line.source_ref == LocationRef(kind=LocationKind.CASTLE, id=castle.id)


class TestPeaceTreatyModel:
    """Tests for the PeaceTreaty model."""

    def _treaty(self, session, war, signed_at, truce_days):
        treaty = PeaceTreaty(
            war_id=war.id,
            treaty_type="negotiated",
            truce_days=truce_days,
            signed_at=signed_at,
            truce_expires_at=signed_at + timedelta(days=truce_days),
        )
        session.add(treaty)
        session.commit()
        return treaty

    def test_active_truce(self, session, war, now):
        treaty = self._treaty(session, war, now - timedelta(days=10), 30)
        assert treaty.is_truce_active(now)
        assert treaty.truce_days_remaining(now) == 20

    def test_expired_truce(self, session, war, now):
        treaty = self._treaty(session, war, now - timedelta(days=40), 30)
        assert not treaty.is_truce_active(now)
        assert treaty.truce_days_remaining(now) == 0

    def test_select_active_truce(self, session, war, now):
        current = self._treaty(session, war, now - timedelta(days=1), 365)
        self._treaty(session, war, now - timedelta(days=400), 365)

        assert session.scalars(PeaceTreaty.select_active_truce(now)).all() == [current]
        assert len(war.treaties) == 2

    def test_offset_expiry_is_stored_as_utc(self, session, war, now):
        plus_two = timezone(timedelta(hours=2))
        expires = now.replace(hour=15, tzinfo=plus_two)
        treaty = PeaceTreaty(
            war_id=war.id,
            treaty_type="negotiated",
            truce_days=1,
            signed_at=now - timedelta(days=1),
            truce_expires_at=expires,
        )
        session.add(treaty)
        session.commit()
        session.expire_all()

        # 15:00+02:00 is 13:00 UTC
        assert treaty.truce_expires_at == expires
        assert treaty.truce_expires_at.utcoffset() == timedelta(0)
        half_past = now.replace(hour=13, minute=30)
        assert not treaty.is_truce_active(half_past)
        assert treaty.is_truce_active(now.replace(hour=12, minute=30))
        assert session.scalars(PeaceTreaty.select_active_truce(half_past)).all() == []

    def test_winner_side_is_optional(self, session, war, now):
        treaty = self._treaty(session, war, now, 365)
        assert treaty.winner_side is None


class TestMercenaryCompanyModel:
    def test_contract(self, session, player, kingdom):
        free = MercenaryCompany(name="Free Lances")
        hired = MercenaryCompany(
            name="Black Company",
            is_available=False,
            hired_by_id=player.id,
            hired_by_type="kingdom",
            hired_by_entity_id=kingdom.id,
        )
        session.add_all([free, hired])
        session.commit()

        assert not free.is_under_contract
        assert free.employer_ref is None
        assert hired.is_under_contract
        assert hired.employer_ref == EntityRef(kind=EntityKind.KINGDOM, id=kingdom.id)
        assert session.scalars(MercenaryCompany.select_available()).all() == [free]
