"""
Integration tests for the HTTP API: auth, error mapping and the main flows
"""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from gamewallet.api.deps import get_gaming_service
from gamewallet.main import create_app
from tests.fixtures.database import create_test_casino_games, create_test_match, create_test_pool, create_test_wallet


@pytest.mark.integration
@pytest.mark.asyncio
async def test_wallet_flow(test_client, auth_headers):
    headers = auth_headers("alice")

    response = await test_client.post("/api/v1/wallet", headers=headers)
    assert response.status_code == 201
    assert response.json()["balances"]["BTC"] in ("0", "0E-8", "0.00000000")

    response = await test_client.post(
        "/api/v1/wallet/deposit", json={"currency": "BTC", "amount": "0.5"}, headers=headers
    )
    assert response.status_code == 200

    response = await test_client.post(
        "/api/v1/wallet/withdraw", json={"currency": "btc", "amount": "0.2"}, headers=headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["balances"]["BTC"]) == Decimal("0.3")

    response = await test_client.get("/api/v1/wallet/transactions", headers=headers)
    assert {t["tx_type"] for t in response.json()["transactions"]} == {"deposit", "withdrawal"}

    response = await test_client.get("/api/v1/wallet/summary", headers=headers)
    summary = response.json()
    assert Decimal(summary["usd_values"]["BTC"]) == Decimal("12000")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_requests_without_token_rejected(test_client):
    response = await test_client.get("/api/v1/wallet")
    assert response.status_code in (401, 403)

    response = await test_client.get("/api/v1/wallet", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.integration
@pytest.mark.asyncio
async def test_domain_errors_map_to_status_codes(test_client, auth_headers, service):
    headers = auth_headers("alice")
    await create_test_wallet(service, "alice", BTC="0.01")

    response = await test_client.post(
        "/api/v1/wallet/withdraw", json={"currency": "BTC", "amount": "1"}, headers=headers
    )
    assert response.status_code == 409
    assert response.json() == {"error": "insufficient_funds", "detail": "Insufficient BTC balance"}

    response = await test_client.post(
        "/api/v1/wallet/deposit", json={"currency": "BTC", "amount": "-1"}, headers=headers
    )
    assert response.status_code == 422
    assert response.json()["error"] == "invalid_amount"

    response = await test_client.get("/api/v1/wallet", headers=auth_headers("nobody"))
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_sports_bet_and_admin_settlement(test_client, auth_headers, service, session_factory):
    match = await create_test_match(session_factory)
    await create_test_wallet(service, "alice", BTC="0.1")

    response = await test_client.post(
        "/api/v1/sports/bets",
        json={"match_id": match.id, "selection": "home_win", "amount": "0.01", "currency": "BTC"},
        headers=auth_headers("alice"),
    )
    assert response.status_code == 201
    bet = response.json()
    assert bet["legs"][0]["selection"] == "home_win"

    # operators only
    response = await test_client.post(
        f"/api/v1/admin/matches/{match.id}/finish", json={"result": "home_win"}, headers=auth_headers("alice"),
    )
    assert response.status_code == 403

    response = await test_client.post(
        f"/api/v1/admin/matches/{match.id}/finish",
        json={"result": "home_win", "home_score": 3, "away_score": 1},
        headers=auth_headers("ops", role="admin"),
    )
    assert response.status_code == 200
    assert response.json()["won"] == 1

    response = await test_client.get(f"/api/v1/bets/{bet['id']}", headers=auth_headers("alice"))
    assert response.json()["status"] == "won"
    assert Decimal(response.json()["payout"]) == Decimal("0.0185")

    # other users cannot see the bet
    response = await test_client.get(f"/api/v1/bets/{bet['id']}", headers=auth_headers("bob"))
    assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
async def test_admin_settle_and_cancel(test_client, auth_headers, service):
    await create_test_wallet(service, "alice", ETH="1")
    bet = await service.place_bet("alice", "prediction", "m1", "0.5", "ETH", "2")
    admin = auth_headers("ops", role="admin")

    response = await test_client.post(
        f"/api/v1/admin/bets/{bet.id}/settle", json={"outcome": "maybe"}, headers=admin
    )
    assert response.status_code == 422

    response = await test_client.post(
        f"/api/v1/admin/bets/{bet.id}/settle", json={"outcome": "won"}, headers=admin
    )
    assert response.status_code == 200
    assert response.json()["status"] == "won"

    response = await test_client.post(f"/api/v1/admin/bets/{bet.id}/cancel", headers=admin)
    assert response.status_code == 409
    assert response.json()["error"] == "already_settled"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_casino_round_over_http(test_client, auth_headers, service, session_factory, randomizer):
    await create_test_casino_games(session_factory)
    await create_test_wallet(service, "alice", BTC="1")
    randomizer.push_ints(6, 6)

    response = await test_client.get("/api/v1/casino/games")
    assert len(response.json()["games"]) == 4

    response = await test_client.post(
        "/api/v1/casino/dice/play",
        json={"amount": "0.1", "currency": "BTC", "selection": {"target": 6}},
        headers=auth_headers("alice"),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "won"
    assert body["details"]["result"]["total"] == 12


@pytest.mark.integration
@pytest.mark.asyncio
async def test_positions_over_http(test_client, auth_headers, service, session_factory, clock):
    pool = await create_test_pool(session_factory)
    await create_test_wallet(service, "alice", BTC="2")

    response = await test_client.post(
        "/api/v1/staking/positions", json={"pool_id": pool.id, "amount": "1"}, headers=auth_headers("alice"),
    )
    assert response.status_code == 201
    position_id = response.json()["id"]

    response = await test_client.post(
        f"/api/v1/positions/{position_id}/complete", headers=auth_headers("alice"),
    )
    assert response.status_code == 409
    assert response.json()["error"] == "position_locked"

    response = await test_client.get(f"/api/v1/positions/{position_id}", headers=auth_headers("bob"))
    assert response.status_code == 404

    clock.advance(days=30)
    response = await test_client.get("/api/v1/positions?status=active", headers=auth_headers("alice"))
    positions = response.json()["positions"]
    assert [p["id"] for p in positions] == [position_id]
    assert Decimal(positions[0]["earned_rewards"]) > 0

    response = await test_client.get("/api/v1/vesting/projection?amount=1000&apy=10&lock_days=365")
    assert Decimal(response.json()["profit"]) == Decimal("100")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_metrics_endpoint(test_client):
    await test_client.get("/health")
    response = await test_client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "gaming_rejections_total" in response.text


class FakeRedis:
    """In-memory counter with the few calls the rate limiter makes"""

    def __init__(self):
        self.counts = {}

    async def get(self, key):
        return self.counts.get(key)

    async def ttl(self, key):
        return 42

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.keys = []

    def incr(self, key):
        self.keys.append(key)

    def expire(self, key, seconds):
        pass

    async def execute(self):
        for key in self.keys:
            self.redis.counts[key] = self.redis.counts.get(key, 0) + 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_wager_rate_limit(service, auth_headers, monkeypatch):
    from gamewallet.middleware import rate_limit

    monkeypatch.setattr(rate_limit.settings, "rate_limit_requests", 2)
    app = create_app(redis_client=FakeRedis())
    app.dependency_overrides[get_gaming_service] = lambda: service
    await create_test_wallet(service, "alice", BTC="1")
    headers = auth_headers("alice")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        statuses = []
        for _ in range(3):
            response = await client.post(
                "/api/v1/wallet/withdraw", json={"currency": "BTC", "amount": "0.1"}, headers=headers
            )
            statuses.append(response.status_code)

        # reads are never limited
        assert (await client.get("/api/v1/wallet", headers=headers)).status_code == 200

    assert statuses == [200, 200, 429]
    assert response.headers["Retry-After"] == "42"
    wallet = await service.get_wallet("alice")
    assert wallet.balance_of("BTC") == Decimal("0.8")
