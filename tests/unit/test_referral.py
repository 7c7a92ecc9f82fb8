"""Unit tests for the Referral model."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from demesne.models import Referral


class TestReferralModel:
    """Tests for the Referral model."""

    def test_create_referral(self, session, make_player):
        referrer = make_player("aldric", referral_code="ALD-001")
        newcomer = make_player("bertram")
        referral = Referral(referrer_id=referrer.id, referred_id=newcomer.id, ip_address="10.0.0.7")
        session.add(referral)
        session.commit()

        assert referral.is_pending
        assert referral.reward_amount == 250
        assert referral.referred_username == "bertram"
        assert referrer.referrals_made == [referral]
        assert newcomer.referred_by is referral

    def test_player_referred_once(self, session, make_player):
        first, second, newcomer = make_player(), make_player(), make_player()
        session.add(Referral(referrer_id=first.id, referred_id=newcomer.id))
        session.add(Referral(referrer_id=second.id, referred_id=newcomer.id))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_referral_code_unique(self, session, make_player):
        make_player(referral_code="SAME")
        with pytest.raises(IntegrityError):
            make_player(referral_code="SAME")

    def test_status_progression(self, session, make_player, now):
        referral = Referral(referrer_id=make_player().id, referred_id=make_player().id)
        session.add(referral)
        session.commit()

        referral.status = "qualified"
        referral.qualified_at = now
        session.commit()
        assert referral.is_qualified

        referral.status = "rewarded"
        referral.rewarded_at = now + timedelta(hours=1)
        session.commit()
        assert referral.is_rewarded
        assert not referral.is_pending

    def test_invalid_status(self, session, make_player):
        session.add(Referral(referrer_id=make_player().id, status="revoked"))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_deleted_referred_player(self, session, make_player):
        referrer, newcomer = make_player(), make_player()
        referral = Referral(referrer_id=referrer.id, referred_id=newcomer.id)
        session.add(referral)
        session.commit()

        session.delete(newcomer)
        session.commit()
        session.refresh(referral)

        assert referral.referred_id is None
        assert referral.referred_username == "Unknown"

    def test_select_for_referrer_newest_first(self, session, make_player, now):
        referrer = make_player()
        older = Referral(
            referrer_id=referrer.id,
            referred_id=make_player().id,
            created_at=now - timedelta(days=2),
        )
        newer = Referral(referrer_id=referrer.id, referred_id=make_player().id, created_at=now)
        session.add_all([older, newer])
        session.add(Referral(referrer_id=make_player().id, created_at=now))
        session.commit()

        assert session.scalars(Referral.select_for_referrer(referrer.id)).all() == [newer, older]
