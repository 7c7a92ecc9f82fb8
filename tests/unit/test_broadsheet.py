"""Unit tests for broadsheets, their comment threads, and reactions."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from demesne.models import Broadsheet, BroadsheetComment, BroadsheetReaction


@pytest.fixture
def make_broadsheet(session, player, town, barony, kingdom, now):
    def _make(title="Harvest Report", **kwargs):
        kwargs.setdefault("published_at", now)
        broadsheet = Broadsheet(
            author_id=player.id,
            title=title,
            content="<p>The wheat is in.</p>",
            plain_text="The wheat is in.",
            location_type="town",
            location_id=town.id,
            barony_id=barony.id,
            kingdom_id=kingdom.id,
            **kwargs,
        )
        session.add(broadsheet)
        session.commit()
        return broadsheet

    return _make


class TestBroadsheetModel:
    """Tests for the Broadsheet model."""

    def test_create(self, make_broadsheet, player, town):
        broadsheet = make_broadsheet()

        assert broadsheet.author is player
        assert broadsheet.location() is town
        assert broadsheet.location_name() == "Marketon"
        assert broadsheet.net_reactions == 0

    def test_net_reactions(self, make_broadsheet):
        broadsheet = make_broadsheet(endorse_count=9, denounce_count=4)
        assert broadsheet.net_reactions == 5

    def test_barony_visibility(self, session, make_broadsheet, barony, now):
        make_broadsheet("Unnoticed", endorse_count=4)
        older = make_broadsheet("Old News", endorse_count=5, published_at=now - timedelta(days=3))
        newer = make_broadsheet("Fresh News", endorse_count=6)

        visible = session.scalars(Broadsheet.select_visible_in_barony(barony.id)).all()
        assert visible == [newer, older]

    def test_kingdom_visibility(self, session, make_broadsheet, kingdom):
        make_broadsheet("Barony Only", endorse_count=14)
        popular = make_broadsheet("Popular", endorse_count=15)
        famous = make_broadsheet("Famous", endorse_count=40)

        visible = session.scalars(Broadsheet.select_visible_in_kingdom(kingdom.id)).all()
        assert visible == [famous, popular]


class TestBroadsheetCommentModel:
    """Tests for comment threads."""

    def test_thread(self, session, make_broadsheet, player, make_player):
        broadsheet = make_broadsheet()
        replier = make_player()
        top = BroadsheetComment(broadsheet=broadsheet, player_id=player.id, body="Good news.")
        reply = BroadsheetComment(
            broadsheet=broadsheet, parent=top, player_id=replier.id, body="Agreed."
        )
        session.add_all([top, reply])
        session.commit()

        assert broadsheet.top_level_comments == [top]
        assert top.replies == [reply]
        assert top.reply_count == 1
        assert top.accepts_replies
        assert reply.is_reply
        assert not reply.accepts_replies

    def test_deleting_comment_deletes_replies(self, session, make_broadsheet, player):
        broadsheet = make_broadsheet()
        top = BroadsheetComment(broadsheet=broadsheet, player_id=player.id, body="First!")
        top.replies.append(
            BroadsheetComment(broadsheet=broadsheet, player_id=player.id, body="Second.")
        )
        session.add(top)
        session.commit()

        session.delete(top)
        session.commit()

        assert session.query(BroadsheetComment).count() == 0

    def test_deleting_broadsheet_deletes_comments(self, session, make_broadsheet, player):
        broadsheet = make_broadsheet()
        broadsheet.comments.append(BroadsheetComment(player_id=player.id, body="Hear, hear."))
        session.commit()

        session.delete(broadsheet)
        session.commit()

        assert session.query(BroadsheetComment).count() == 0


class TestBroadsheetReactionModel:
    def test_one_reaction_per_player(self, session, make_broadsheet, player):
        broadsheet = make_broadsheet()
        session.add(
            BroadsheetReaction(broadsheet_id=broadsheet.id, player_id=player.id, type="endorse")
        )
        session.commit()

        session.add(
            BroadsheetReaction(broadsheet_id=broadsheet.id, player_id=player.id, type="denounce")
        )
        with pytest.raises(IntegrityError):
            session.commit()

    def test_invalid_type(self, session, make_broadsheet, player):
        broadsheet = make_broadsheet()
        session.add(
            BroadsheetReaction(broadsheet_id=broadsheet.id, player_id=player.id, type="like")
        )
        with pytest.raises(IntegrityError):
            session.commit()
