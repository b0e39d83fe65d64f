import uuid
from decimal import Decimal

from conftest import make_astrologer
from nakshatra_talks.db import ChatSession, SessionStatus, SessionType
from nakshatra_talks.db.sessions import get_session


def _completed_session(engine, seeded):
    with get_session(engine) as session:
        chat_session = ChatSession(
            user_id=seeded["ids"]["user"],
            astrologer_id=seeded["ids"]["astrologer"],
            session_type=SessionType.CHAT,
            price_per_minute=Decimal("10.00"),
            status=SessionStatus.COMPLETED,
        )
        session.add(chat_session)
        session.flush()
        return chat_session.id


def test_list_is_public_and_paginated(client, engine, seeded):
    with get_session(engine) as session:
        make_astrologer(session, name="Cheaper", chat_price="5.00")

    r = client.get("/api/v1/astrologers", params={"sortBy": "price", "limit": 1})

    assert r.status_code == 200
    body = r.json()
    assert body["pagination"]["totalItems"] == 2
    assert body["pagination"]["hasNext"] is True
    assert body["data"][0]["name"] == "Cheaper"
    assert body["data"][0]["chatPricePerMinute"] == 5.0


def test_detail_and_unknown(client, seeded):
    r = client.get(f"/api/v1/astrologers/{seeded['ids']['astrologer']}")
    assert r.status_code == 200
    assert r.json()["data"]["reviews"] == []
    assert r.json()["data"]["callPricePerMinute"] == 15.0

    missing = client.get(f"/api/v1/astrologers/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


def test_review_flow_updates_rating(client, engine, seeded):
    session_id = _completed_session(engine, seeded)
    astrologer_id = seeded["ids"]["astrologer"]

    r = client.post(
        f"/api/v1/astrologers/{astrologer_id}/reviews",
        json={"sessionId": str(session_id), "rating": 4, "comment": "Helpful <3"},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 201, r.text
    assert r.json()["data"]["comment"] == "Helpful 3"
    assert r.json()["data"]["userName"] == "Asha"

    duplicate = client.post(
        f"/api/v1/astrologers/{astrologer_id}/reviews",
        json={"sessionId": str(session_id), "rating": 1},
        headers=seeded["headers"]["user"],
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "CONFLICT"

    detail = client.get(f"/api/v1/astrologers/{astrologer_id}").json()["data"]
    assert detail["rating"] == 4.0
    assert detail["totalReviews"] == 1
    assert len(detail["reviews"]) == 1

    reviews = client.get(f"/api/v1/astrologers/{astrologer_id}/reviews").json()["data"]
    assert [rv["rating"] for rv in reviews] == [4]


def test_review_without_consultation_is_forbidden(client, seeded):
    r = client.post(
        f"/api/v1/astrologers/{seeded['ids']['astrologer']}/reviews",
        json={"sessionId": str(uuid.uuid4()), "rating": 5},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "You can only review astrologers you have consulted"


def test_review_rating_out_of_range(client, seeded):
    r = client.post(
        f"/api/v1/astrologers/{seeded['ids']['astrologer']}/reviews",
        json={"sessionId": str(uuid.uuid4()), "rating": 6},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 400


def test_heartbeat_and_availability_permissions(client, seeded):
    astrologer_id = seeded["ids"]["astrologer"]

    own = client.post(
        f"/api/v1/astrologers/{astrologer_id}/heartbeat", headers=seeded["headers"]["astrologer"]
    )
    assert own.status_code == 200
    assert own.json()["data"]["isLive"] is True

    other = client.post(
        f"/api/v1/astrologers/{astrologer_id}/heartbeat", headers=seeded["headers"]["user"]
    )
    assert other.status_code == 403

    by_user = client.patch(
        f"/api/v1/astrologers/{astrologer_id}/availability",
        json={"isAvailable": False},
        headers=seeded["headers"]["user"],
    )
    assert by_user.status_code == 403

    by_admin = client.patch(
        f"/api/v1/astrologers/{astrologer_id}/availability",
        json={"isAvailable": False},
        headers=seeded["headers"]["admin"],
    )
    assert by_admin.status_code == 200
    assert by_admin.json()["data"]["isAvailable"] is False

    listed = client.get("/api/v1/astrologers").json()
    assert listed["data"] == []
