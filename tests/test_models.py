from datetime import datetime, timedelta, timezone

from conftest import T0, make_astrologer, make_user
from nakshatra_talks.db import Astrologer, User
from nakshatra_talks.db.sessions import get_session

IST = timezone(timedelta(hours=5, minutes=30))


def test_timestamps_round_trip_as_aware_utc(engine):
    with get_session(engine) as session:
        user_id = make_user(session, created_at=T0).id
        tagged_id = make_astrologer(session, last_activity_at=datetime(2026, 1, 1, 15, 30, tzinfo=IST)).id
        naive_id = make_astrologer(session, last_activity_at=T0.replace(tzinfo=None)).id

    with get_session(engine) as session:
        created_at = session.get(User, user_id).created_at
        assert created_at == T0
        assert created_at.utcoffset() == timedelta(0)

        # other offsets are normalised to UTC; naive values are read as UTC
        assert session.get(Astrologer, tagged_id).last_activity_at == T0
        assert session.get(Astrologer, tagged_id).last_activity_at.tzinfo is not None
        assert session.get(Astrologer, naive_id).last_activity_at == T0


def test_default_timestamps_are_aware(engine):
    with get_session(engine) as session:
        user_id = make_user(session).id

    with get_session(engine) as session:
        user = session.get(User, user_id)
        assert user.created_at.tzinfo is not None
        assert user.updated_at.tzinfo is not None
