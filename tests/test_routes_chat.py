import uuid

from sqlmodel import select

from nakshatra_talks.db import (SessionStatus, Transaction, TransactionType,
                                User)
from nakshatra_talks.db.sessions import get_session


def _start(client, seeded, session_type="chat"):
    r = client.post(
        "/api/v1/chat/sessions",
        json={"astrologerId": str(seeded["ids"]["astrologer"]), "sessionType": session_type},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_validate_balance_reports_chat_affordability(client, seeded):
    r = client.post(
        "/api/v1/chat/validate-balance",
        json={"astrologerId": str(seeded["ids"]["astrologer"]), "sessionType": "chat"},
        headers=seeded["headers"]["user"],
    )

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["canStart"] is True
    assert body["data"]["canStartChat"] is True
    assert body["data"]["estimatedMinutes"] == 10
    assert body["data"]["minimumRequired"] == 50.0


def test_validate_balance_insufficient_carries_shortfall(client, engine, seeded):
    # call price is 15/min, so 5 minutes need 75; wallet holds 100
    r = client.post(
        "/api/v1/chat/validate-balance",
        json={"astrologerId": str(seeded["ids"]["astrologer"]), "sessionType": "call"},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 200

    with get_session(engine) as session:
        session.get(User, seeded["ids"]["user"]).wallet_balance = 60
    r = client.post(
        "/api/v1/chat/validate-balance",
        json={"astrologerId": str(seeded["ids"]["astrologer"]), "sessionType": "call"},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 400
    error = r.json()["error"]
    assert error["code"] == "INSUFFICIENT_BALANCE"
    assert error["details"]["shortfall"] == 15.0
    assert error["details"]["canStart"] is False
    assert error["details"]["canStartCall"] is False


def test_three_minute_chat_end_to_end(client, engine, seeded, clock):
    started = _start(client, seeded)
    assert started["status"] == "active"
    assert started["totalCost"] is None
    assert started["astrologerName"] == "Pandit Sharma"

    active = client.get("/api/v1/chat/sessions/active", headers=seeded["headers"]["user"])
    assert active.json()["data"]["id"] == started["id"]

    clock.advance(180)
    r = client.post(
        f"/api/v1/chat/sessions/{started['id']}/end",
        json={"endReason": "user_ended"},
        headers=seeded["headers"]["user"],
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Chat session ended successfully. Total cost: ₹30.00 for 3.0 minutes"
    assert body["data"]["totalCost"] == 30.0
    assert body["data"]["remainingBalance"] == 70.0
    assert body["data"]["durationSeconds"] == 180
    assert body["data"]["endReason"] == "user_ended"

    balance = client.get("/api/v1/wallet/balance", headers=seeded["headers"]["user"])
    assert balance.json()["data"]["balance"] == 70.0

    with get_session(engine) as session:
        debits = session.exec(
            select(Transaction).where(Transaction.type == TransactionType.DEBIT)
        ).all()
        assert [float(t.amount) for t in debits] == [-30.0]

    after = client.get("/api/v1/chat/sessions/active", headers=seeded["headers"]["user"])
    assert after.json() == {"success": True, "data": None}


def test_short_session_message_uses_seconds(client, seeded, clock):
    started = _start(client, seeded)
    clock.advance(45)
    r = client.post(
        f"/api/v1/chat/sessions/{started['id']}/end", headers=seeded["headers"]["user"]
    )
    assert r.status_code == 200
    assert r.json()["message"].endswith("Total cost: ₹7.50 for 45 seconds")


def test_end_rejects_reserved_reason(client, seeded):
    started = _start(client, seeded)
    r = client.post(
        f"/api/v1/chat/sessions/{started['id']}/end",
        json={"endReason": "superseded"},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_end_unknown_session_is_not_found(client, seeded):
    r = client.post(
        f"/api/v1/chat/sessions/{uuid.uuid4()}/end", headers=seeded["headers"]["user"]
    )
    assert r.status_code == 404
    assert r.json() == {
        "success": False,
        "error": {"code": "NOT_FOUND", "message": "Active session not found"},
    }


def test_failed_settlement_keeps_session_active(client, seeded, clock):
    started = _start(client, seeded)
    clock.advance(11 * 60)  # 110 > 100 in the wallet

    r = client.post(
        f"/api/v1/chat/sessions/{started['id']}/end", headers=seeded["headers"]["user"]
    )

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INSUFFICIENT_BALANCE"
    detail = client.get(
        f"/api/v1/chat/sessions/{started['id']}", headers=seeded["headers"]["user"]
    )
    assert detail.json()["data"]["status"] == SessionStatus.ACTIVE.value


def test_start_without_enough_balance(client, engine, seeded):
    with get_session(engine) as session:
        session.get(User, seeded["ids"]["user"]).wallet_balance = 10
    r = client.post(
        "/api/v1/chat/sessions",
        json={"astrologerId": str(seeded["ids"]["astrologer"])},
        headers=seeded["headers"]["user"],
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INSUFFICIENT_BALANCE"


def test_rate_history_and_messages(client, seeded, clock):
    user_headers = seeded["headers"]["user"]
    astrologer_headers = seeded["headers"]["astrologer"]
    started = _start(client, seeded)

    sent = client.post(
        f"/api/v1/chat/sessions/{started['id']}/messages",
        json={"message": "Namaste"},
        headers=user_headers,
    )
    assert sent.status_code == 201
    assert sent.json()["data"]["senderType"] == "user"
    reply = client.post(
        f"/api/v1/chat/sessions/{started['id']}/messages",
        json={"message": "Namaste, how can I help?"},
        headers=astrologer_headers,
    )
    assert reply.json()["data"]["senderType"] == "astrologer"
    stranger = client.post(
        f"/api/v1/chat/sessions/{started['id']}/messages",
        json={"message": "hi"},
        headers=seeded["headers"]["admin"],
    )
    assert stranger.status_code == 403

    listed = client.get(f"/api/v1/chat/sessions/{started['id']}/messages", headers=user_headers)
    assert [m["message"] for m in listed.json()["data"]] == ["Namaste", "Namaste, how can I help?"]

    early = client.post(
        f"/api/v1/chat/sessions/{started['id']}/rating", json={"rating": 5}, headers=user_headers
    )
    assert early.status_code == 404

    clock.advance(60)
    client.post(f"/api/v1/chat/sessions/{started['id']}/end", headers=user_headers)
    rated = client.post(
        f"/api/v1/chat/sessions/{started['id']}/rating",
        json={"rating": 5, "review": "Clear guidance", "tags": ["career"]},
        headers=user_headers,
    )
    assert rated.status_code == 200
    assert rated.json()["data"] == {"sessionId": started["id"], "rating": 5}

    closed = client.post(
        f"/api/v1/chat/sessions/{started['id']}/messages",
        json={"message": "one more thing"},
        headers=user_headers,
    )
    assert closed.status_code == 400

    history = client.get("/api/v1/chat/sessions", params={"limit": 1}, headers=user_headers)
    body = history.json()
    assert body["pagination"] == {
        "currentPage": 1,
        "totalPages": 1,
        "totalItems": 1,
        "itemsPerPage": 1,
        "hasNext": False,
        "hasPrev": False,
    }
    assert body["data"][0]["rating"] == 5


def test_chat_routes_require_auth(client, seeded):
    r = client.get("/api/v1/chat/sessions")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"

    r = client.get("/api/v1/chat/sessions", headers={"Authorization": "Bearer unknown"})
    assert r.status_code == 401
