"""HTTP surface: /api/v1/portfolio and /api/v1/stocks."""

from decimal import Decimal


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200


def test_requires_token(client):
    assert client.get("/api/v1/portfolio/").status_code == 401
    assert client.post("/api/v1/portfolio/buy", json={"symbol": "AAPL", "quantity": 1, "price": 1}).status_code == 401


def test_garbage_token_rejected(client):
    r = client.get("/api/v1/portfolio/", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_buy_then_sell_round_trip(client, make_user, auth_headers):
    u = make_user(cash="10000")
    h = auth_headers(u.id)

    r = client.post("/api/v1/portfolio/buy", json={"symbol": "aapl", "quantity": 10, "price": 100}, headers=h)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["msg"] == "Stock purchased successfully"
    assert Decimal(body["user"]["cash"]) == Decimal("9000")
    assert "password" not in body["user"]
    assert (body["holding"]["symbol"], body["holding"]["quantity"]) == ("AAPL", 10)
    assert Decimal(body["holding"]["avg_cost"]) == Decimal("100")
    assert body["transaction"]["type"] == "BUY"
    assert Decimal(body["transaction"]["price"]) == Decimal("100")

    r = client.post("/api/v1/portfolio/buy", json={"symbol": "AAPL", "quantity": 10, "price": 200}, headers=h)
    assert Decimal(r.json()["holding"]["avg_cost"]) == Decimal("150")

    r = client.post("/api/v1/portfolio/sell", json={"symbol": "AAPL", "quantity": 20, "price": 175.5}, headers=h)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["msg"] == "Stock sold successfully"
    assert body["holding"] is None
    assert Decimal(body["user"]["cash"]) == Decimal("10510")

    r = client.get("/api/v1/portfolio/", headers=h)
    assert r.status_code == 200
    p = r.json()
    assert p["holdings"] == []
    assert [t["type"] for t in p["transactions"]] == ["SELL", "BUY", "BUY"]
    assert p["user"]["username"] == u.username
    assert "password" not in p["user"]


def test_insufficient_funds_is_400(client, make_user, auth_headers):
    u = make_user(cash="10")
    r = client.post("/api/v1/portfolio/buy", json={"symbol": "AAPL", "quantity": 1, "price": 11}, headers=auth_headers(u.id))
    assert r.status_code == 400
    assert r.json()["code"] == "INSUFFICIENT_FUNDS"


def test_sell_errors(client, make_user, auth_headers):
    u = make_user()
    h = auth_headers(u.id)
    r = client.post("/api/v1/portfolio/sell", json={"symbol": "AAPL", "quantity": 1, "price": 1}, headers=h)
    assert (r.status_code, r.json()["code"]) == (400, "NO_SUCH_HOLDING")
    client.post("/api/v1/portfolio/buy", json={"symbol": "AAPL", "quantity": 1, "price": 1}, headers=h)
    r = client.post("/api/v1/portfolio/sell", json={"symbol": "AAPL", "quantity": 2, "price": 1}, headers=h)
    assert (r.status_code, r.json()["code"]) == (400, "INSUFFICIENT_SHARES")


def test_invalid_orders_are_400(client, make_user, auth_headers):
    u = make_user()
    h = auth_headers(u.id)
    bad = [
        {"symbol": "AAPL", "quantity": 0, "price": 1},
        {"symbol": "AAPL", "quantity": 1.5, "price": 1},
        {"symbol": "AAPL", "quantity": 1, "price": -1},
        {"symbol": "   ", "quantity": 1, "price": 1},
        {"symbol": "AAPL", "quantity": "10", "price": 1},
        {"symbol": "AAPL", "price": 1},
        {"symbol": "AAPL", "quantity": True, "price": 1},
    ]
    for payload in bad:
        r = client.post("/api/v1/portfolio/buy", json=payload, headers=h)
        assert r.status_code == 400, payload
        assert r.json()["code"] == "INVALID_ORDER", payload
    assert client.get("/api/v1/portfolio/", headers=h).json()["transactions"] == []


def test_unknown_user_is_404(client, auth_headers):
    r = client.get("/api/v1/portfolio/", headers=auth_headers(4242))
    assert r.status_code == 404
    assert r.json()["code"] == "USER_NOT_FOUND"
    r = client.post("/api/v1/portfolio/buy", json={"symbol": "AAPL", "quantity": 1, "price": 1}, headers=auth_headers(4242))
    assert r.status_code == 404


def test_quote_endpoint(client, make_user, auth_headers):
    u = make_user()
    r = client.get("/api/v1/stocks/quote/aapl", headers=auth_headers(u.id))
    assert r.status_code == 200
    body = r.json()
    assert Decimal(body.pop("price")) == Decimal("175.50")
    assert body == {"symbol": "AAPL", "name": "Apple Inc.", "sector": "Technology", "source": "static"}


def test_quote_unknown_symbol(client, make_user, auth_headers):
    u = make_user()
    r = client.get("/api/v1/stocks/quote/NOPE", headers=auth_headers(u.id))
    assert r.status_code == 404
    assert r.json()["code"] == "QUOTE_NOT_FOUND"


def test_money_is_echoed_exactly(client, make_user, auth_headers):
    u = make_user(cash="99999999999999")
    h = auth_headers(u.id)
    r = client.post("/api/v1/portfolio/buy", json={"symbol": "BRK", "quantity": 1, "price": "1234567890123.123457"}, headers=h)
    assert r.status_code == 200, r.text
    body = r.json()
    assert Decimal(body["transaction"]["price"]) == Decimal("1234567890123.123457")
    assert Decimal(body["user"]["cash"]) == Decimal("99999999999999") - Decimal("1234567890123.123457")
    p = client.get("/api/v1/portfolio/", headers=h).json()
    assert Decimal(p["user"]["cash"]) == Decimal(body["user"]["cash"])
    assert Decimal(p["transactions"][0]["price"]) == Decimal("1234567890123.123457")


def test_sale_beyond_cash_capacity_is_invalid_order(client, make_user, auth_headers):
    u = make_user(cash="1000")
    h = auth_headers(u.id)
    client.post("/api/v1/portfolio/buy", json={"symbol": "AAPL", "quantity": 1000, "price": 1}, headers=h)
    r = client.post("/api/v1/portfolio/sell", json={"symbol": "AAPL", "quantity": 1000, "price": 1e13}, headers=h)
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_ORDER"
    assert len(client.get("/api/v1/portfolio/", headers=h).json()["transactions"]) == 1
