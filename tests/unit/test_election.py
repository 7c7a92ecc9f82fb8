"""Unit tests for elections and no-confidence votes."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from demesne.models import (
    Election,
    ElectionCandidate,
    ElectionVote,
    LocationRef,
    NoConfidenceBallot,
    NoConfidenceVote,
)
from demesne.models.enums import LocationKind


@pytest.fixture
def election(session, village, now):
    election = Election(
        election_type="village_elder",
        role="elder",
        domain_type="village",
        domain_id=village.id,
        status="open",
        voting_starts_at=now - timedelta(days=1),
        voting_ends_at=now + timedelta(days=2),
        quorum_required=4,
    )
    session.add(election)
    session.commit()
    return election


def _stand(session, election, player, now):
    candidate = ElectionCandidate(election_id=election.id, player_id=player.id, declared_at=now)
    session.add(candidate)
    session.commit()
    return candidate


class TestElectionModel:
    """Tests for the Election model."""

    def test_domain(self, election, village):
        assert election.domain_ref == LocationRef(kind=LocationKind.VILLAGE, id=village.id)
        assert election.domain() is village

    def test_rejects_domain_without_elections(self, castle):
        with pytest.raises(ValueError, match="castle"):
            Election(election_type="x", role="x", domain_type="castle", domain_id=castle.id)

    def test_open_inside_window(self, election, now):
        assert election.is_open(now)
        assert not election.has_ended(now)

    def test_not_open_before_start(self, election, now):
        assert not election.is_open(now - timedelta(days=2))

    def test_closed_after_end(self, election, now):
        later = now + timedelta(days=3)
        assert not election.is_open(later)
        assert election.has_ended(later)

    def test_not_open_unless_status_open(self, election, now):
        election.status = "pending"
        assert not election.is_open(now)

    def test_can_vote_once(self, session, election, player, make_player, now):
        candidate = _stand(session, election, make_player(), now)
        assert election.can_vote(player.id, now)

        session.add(
            ElectionVote(election_id=election.id, voter_id=player.id, candidate_id=candidate.id)
        )
        session.commit()

        assert not election.can_vote(player.id, now)

    def test_one_vote_per_voter(self, session, election, player, make_player, now):
        candidate = _stand(session, election, make_player(), now)
        for _ in range(2):
            session.add(
                ElectionVote(election_id=election.id, voter_id=player.id, candidate_id=candidate.id)
            )
        with pytest.raises(IntegrityError):
            session.commit()

    def test_quorum_progress(self, election):
        election.votes_cast = 2
        assert election.quorum_progress == 50.0
        assert election.turnout_display == "2/4"

        election.votes_cast = 10
        assert election.quorum_progress == 100.0

    def test_quorum_progress_without_quorum(self, election):
        election.quorum_required = 0
        assert election.quorum_progress == 100.0

    def test_select_open(self, session, election, village, now):
        session.add(
            Election(
                election_type="village_elder",
                role="elder",
                domain_type="village",
                domain_id=village.id,
                status="open",
                voting_ends_at=now - timedelta(hours=1),
            )
        )
        session.add(
            Election(
                election_type="village_elder",
                role="elder",
                domain_type="village",
                domain_id=village.id,
                status="open",
                voting_starts_at=now + timedelta(days=2),
            )
        )
        session.commit()

        assert session.scalars(Election.select_open(now)).all() == [election]


class TestElectionCandidateModel:
    def test_active_candidates(self, session, election, make_player, now):
        staying = _stand(session, election, make_player(), now)
        leaving = _stand(session, election, make_player(), now)
        leaving.is_active = False
        leaving.withdrawn_at = now

        assert election.active_candidates == [staying]

    def test_vote_share(self, session, election, player, now):
        candidate = _stand(session, election, player, now)
        assert candidate.vote_share == 0.0

        candidate.increment_vote_count()
        candidate.increment_vote_count()
        election.votes_cast = 8
        assert candidate.vote_count == 2
        assert candidate.vote_share == 25.0

    def test_candidate_once_per_election(self, session, election, player, now):
        _stand(session, election, player, now)
        with pytest.raises(IntegrityError):
            _stand(session, election, player, now)


class TestNoConfidenceVoteModel:
    """Tests for the NoConfidenceVote model."""

    @pytest.fixture
    def motion(self, session, town, player, now):
        motion = NoConfidenceVote(
            target_player_id=player.id,
            target_role="mayor",
            domain_type="town",
            domain_id=town.id,
            status="open",
            voting_ends_at=now + timedelta(days=1),
        )
        session.add(motion)
        session.commit()
        return motion

    def test_domain(self, motion, town):
        assert motion.domain() is town

    def test_window(self, motion, now):
        assert motion.is_open(now)
        assert motion.has_ended(now + timedelta(days=1))

    def test_removal_share(self, motion):
        assert motion.removal_share == 0.0
        motion.votes_for = 3
        motion.votes_against = 1
        assert motion.total_votes == 4
        assert motion.removal_share == 75.0

    def test_one_ballot_per_voter(self, session, motion, make_player):
        voter = make_player()
        session.add(
            NoConfidenceBallot(
                no_confidence_vote_id=motion.id, voter_id=voter.id, vote_for_removal=True
            )
        )
        session.commit()
        assert len(motion.ballots) == 1

        session.add(
            NoConfidenceBallot(
                no_confidence_vote_id=motion.id, voter_id=voter.id, vote_for_removal=False
            )
        )
        with pytest.raises(IntegrityError):
            session.commit()
