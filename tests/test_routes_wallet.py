import pytest


def test_balance_envelope(client, seeded):
    r = client.get("/api/v1/wallet/balance", headers=seeded["headers"]["user"])

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["userId"] == str(seeded["ids"]["user"])
    assert body["data"]["balance"] == 100.0
    assert body["data"]["currency"] == "INR"
    assert "lastUpdated" in body["data"]


def test_recharge_credits_and_lists_transaction(client, seeded):
    headers = seeded["headers"]["user"]
    r = client.post(
        "/api/v1/wallet/recharge",
        json={"amount": 250.5, "paymentMethod": "upi", "paymentId": "pay_777"},
        headers=headers,
    )

    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Wallet recharged successfully"
    data = r.json()["data"]
    assert data["amount"] == 250.5
    assert data["newBalance"] == 350.5
    assert data["status"] == "success"

    listed = client.get("/api/v1/wallet/transactions", headers=headers).json()
    assert listed["pagination"]["totalItems"] == 1
    (txn,) = listed["data"]
    assert txn["id"] == data["transactionId"]
    assert txn["type"] == "recharge"
    assert txn["balanceBefore"] == 100.0
    assert txn["balanceAfter"] == 350.5


@pytest.mark.parametrize(
    "body",
    [
        {"amount": 0, "paymentMethod": "upi", "paymentId": "p"},
        {"amount": -10, "paymentMethod": "upi", "paymentId": "p"},
        {"amount": 10, "paymentMethod": "upi"},
        {"amount": 10.123, "paymentMethod": "upi", "paymentId": "p"},
    ],
)
def test_recharge_validation_errors(client, seeded, body):
    r = client.post("/api/v1/wallet/recharge", json=body, headers=seeded["headers"]["user"])

    assert r.status_code == 400
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert isinstance(error["details"], list)


def test_transactions_pagination_and_type_filter(client, seeded):
    headers = seeded["headers"]["user"]
    for i in range(3):
        client.post(
            "/api/v1/wallet/recharge",
            json={"amount": 10, "paymentMethod": "upi", "paymentId": f"pay_{i}"},
            headers=headers,
        )

    page = client.get("/api/v1/wallet/transactions", params={"page": 2, "limit": 2}, headers=headers)
    assert page.json()["pagination"] == {
        "currentPage": 2,
        "totalPages": 2,
        "totalItems": 3,
        "itemsPerPage": 2,
        "hasNext": False,
        "hasPrev": True,
    }
    assert len(page.json()["data"]) == 1

    debits = client.get("/api/v1/wallet/transactions", params={"type": "debit"}, headers=headers)
    assert debits.json()["data"] == []


@pytest.mark.parametrize("limit", [0, 101])
def test_transactions_limit_bounds(client, seeded, limit):
    r = client.get(
        "/api/v1/wallet/transactions", params={"limit": limit}, headers=seeded["headers"]["user"]
    )
    assert r.status_code == 400


def test_wallet_requires_auth(client):
    r = client.get("/api/v1/wallet/balance")
    assert r.status_code == 401
    assert r.json() == {
        "success": False,
        "error": {"code": "UNAUTHORIZED", "message": "Access token required"},
    }
