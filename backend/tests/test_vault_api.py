"""
Vault API 테스트

TestClient로 샌드박스 전체 흐름(토큰 → 풀 → 볼트 → 예치/리밸런스/인출)을 검증합니다.
"""

import pytest
import sys
import os

# 경로 설정
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from app.config import settings
from app.core.sandbox import reset_sandbox
from app.main import app

E18 = 10 ** 18
OWNER = settings.FACTORY_OWNER.lower()
ALICE = "0x" + "2" * 40
BOB = "0x" + "3" * 40
CAROL = "0x" + "4" * 40
AFFILIATE = "0x" + "6" * 40


@pytest.fixture
def client():
    reset_sandbox()
    return TestClient(app)


@pytest.fixture
def vault_address(client):
    """TKA/TKB 1:1 풀과 볼트, alice가 1000/1000 예치"""
    client.post("/api/v1/tokens", json={"symbol": "TKA"})
    client.post("/api/v1/tokens", json={"symbol": "TKB"})
    assert client.post("/api/v1/pools", json={"token_a": "TKA", "token_b": "TKB", "fee": 3000}).status_code == 200

    response = client.post("/api/v1/vaults", json={
        "token_a": "TKA", "token_b": "TKB", "fee": 3000, "sender": OWNER
    })
    assert response.status_code == 200
    address = response.json()["address"]

    for symbol in ("TKA", "TKB"):
        client.post(f"/api/v1/tokens/{symbol}/mint", json={"to": ALICE, "amount": 10_000 * E18})
        client.post(f"/api/v1/tokens/{symbol}/approve", json={
            "owner": ALICE, "spender": address, "amount": 10_000 * E18
        })
        client.post(f"/api/v1/tokens/{symbol}/mint", json={"to": CAROL, "amount": 10_000 * E18})

    response = client.post(f"/api/v1/vaults/{address}/deposit", json={
        "amount0": 1000 * E18, "amount1": 1000 * E18, "to": ALICE, "sender": ALICE
    })
    assert response.status_code == 200
    return address


class TestHealth:
    """GET /health"""

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == settings.API_VERSION
        assert data["pools"] == 0
        assert data["vaults"] == 0

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/api/v1/health"


class TestTokensAndPools:
    """토큰/풀 엔드포인트"""

    def test_create_and_mint_token(self, client):
        response = client.post("/api/v1/tokens", json={"symbol": "WETH"})
        assert response.status_code == 200
        assert response.json()["address"].startswith("0x")

        response = client.post("/api/v1/tokens/WETH/mint", json={"to": ALICE, "amount": 5 * E18})
        assert response.json()["balance"] == 5 * E18

        response = client.get("/api/v1/tokens/WETH")
        assert response.json()["total_supply"] == 5 * E18

    def test_duplicate_token_rejected(self, client):
        client.post("/api/v1/tokens", json={"symbol": "WETH"})
        response = client.post("/api/v1/tokens", json={"symbol": "WETH"})
        assert response.status_code == 400

    def test_unknown_token_not_found(self, client):
        response = client.post("/api/v1/tokens/NOPE/mint", json={"to": ALICE, "amount": 1})
        assert response.status_code == 404

    def test_approve(self, client):
        client.post("/api/v1/tokens", json={"symbol": "WETH"})
        response = client.post("/api/v1/tokens/WETH/approve", json={
            "owner": ALICE, "spender": BOB, "amount": 7
        })
        assert response.status_code == 200
        assert response.json()["allowance"] == 7

    def test_create_pool_at_price(self, client):
        client.post("/api/v1/tokens", json={"symbol": "TKA"})
        client.post("/api/v1/tokens", json={"symbol": "TKB"})
        response = client.post("/api/v1/pools", json={
            "token_a": "TKA", "token_b": "TKB", "fee": 3000, "reserve_a": 1, "reserve_b": 1
        })
        assert response.status_code == 200
        data = response.json()
        assert data["tick"] == 0
        assert data["tick_spacing"] == 60
        assert data["sqrt_price_x96"] == 2 ** 96

    def test_pool_initialized_twice_rejected(self, client):
        client.post("/api/v1/tokens", json={"symbol": "TKA"})
        client.post("/api/v1/tokens", json={"symbol": "TKB"})
        client.post("/api/v1/pools", json={"token_a": "TKA", "token_b": "TKB"})
        response = client.post("/api/v1/pools", json={"token_a": "TKA", "token_b": "TKB"})
        assert response.status_code == 400

    def test_unknown_fee_tier_rejected(self, client):
        client.post("/api/v1/tokens", json={"symbol": "TKA"})
        client.post("/api/v1/tokens", json={"symbol": "TKB"})
        response = client.post("/api/v1/pools", json={"token_a": "TKA", "token_b": "TKB", "fee": 1234})
        assert response.status_code == 400

    def test_swap_without_pool_not_found(self, client):
        client.post("/api/v1/tokens", json={"symbol": "TKA"})
        client.post("/api/v1/tokens", json={"symbol": "TKB"})
        response = client.post("/api/v1/pools/swap", json={
            "token_in": "TKA", "token_out": "TKB", "amount_in": 1, "sender": ALICE
        })
        assert response.status_code == 404


class TestVaultLifecycle:
    """볼트 엔드포인트"""

    def test_create_vault_requires_factory_owner(self, client):
        client.post("/api/v1/tokens", json={"symbol": "TKA"})
        client.post("/api/v1/tokens", json={"symbol": "TKB"})
        response = client.post("/api/v1/vaults", json={"token_a": "TKA", "token_b": "TKB", "sender": BOB})
        assert response.status_code == 403
        assert response.json()["detail"] == "Ownable: caller is not the owner"

    def test_duplicate_vault_rejected(self, client, vault_address):
        response = client.post("/api/v1/vaults", json={"token_a": "TKB", "token_b": "TKA", "sender": OWNER})
        assert response.status_code == 400
        assert response.json()["detail"] == "create_vault: vault exists"

    def test_get_vault(self, client, vault_address):
        response = client.get(f"/api/v1/vaults/{vault_address}")
        assert response.status_code == 200
        data = response.json()
        assert data["owner"] == OWNER
        assert data["total_supply"] == 2000 * E18
        assert data["total_amount0"] == 1000 * E18
        assert data["total_amount1"] == 1000 * E18
        assert data["base"]["liquidity"] == 0
        assert data["tick"] == 0

    def test_list_vaults(self, client, vault_address):
        response = client.get("/api/v1/vaults")
        assert [v["address"] for v in response.json()["vaults"]] == [vault_address]

    def test_unknown_vault_not_found(self, client):
        response = client.get("/api/v1/vaults/0x" + "9" * 40)
        assert response.status_code == 404

    def test_deposit_zero_rejected(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/deposit", json={
            "amount0": 0, "amount1": 0, "to": ALICE, "sender": ALICE
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "deposit: deposits must be nonzero"

    def test_deposit_without_allowance_rejected(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/deposit", json={
            "amount0": E18, "amount1": 0, "to": BOB, "sender": BOB
        })
        assert response.status_code == 400
        data = client.get(f"/api/v1/vaults/{vault_address}").json()
        assert data["total_supply"] == 2000 * E18

    def test_negative_amount_rejected_by_schema(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/deposit", json={
            "amount0": -1, "amount1": 0, "to": ALICE, "sender": ALICE
        })
        assert response.status_code == 422

    def test_rebalance_and_withdraw(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/rebalance", json={
            "base_lower": -1800, "base_upper": 1800, "limit_lower": -600, "limit_upper": 0,
            "swap_amount": 0, "sender": OWNER
        })
        assert response.status_code == 200
        data = response.json()
        assert data["base"]["liquidity"] > 0
        assert data["base"]["tick_lower"] == -1800
        assert data["limit"]["tick_upper"] == 0

        response = client.post(f"/api/v1/vaults/{vault_address}/withdraw", json={
            "shares": 1000 * E18, "to": ALICE, "sender": ALICE
        })
        assert response.status_code == 200
        data = response.json()
        assert data["total_supply"] == 1000 * E18
        assert data["amount0"] + data["amount1"] > 1990 * E18 // 2

    def test_swap_moves_pool_and_pays_fees(self, client, vault_address):
        client.post(f"/api/v1/vaults/{vault_address}/rebalance", json={
            "base_lower": -1800, "base_upper": 1800, "limit_lower": -600, "limit_upper": 0,
            "sender": OWNER
        })
        vault = client.get(f"/api/v1/vaults/{vault_address}").json()
        response = client.post("/api/v1/pools/swap", json={
            "token_in": vault["token0"], "token_out": vault["token1"], "amount_in": 10 * E18, "sender": CAROL
        })
        assert response.status_code == 200
        assert response.json()["tick"] < 0

        data = client.get(f"/api/v1/vaults/{vault_address}").json()
        # 풀 수수료 0.3%가 볼트 자산으로 관측된다
        assert data["total_amount0"] > 1000 * E18

    def test_rebalance_requires_owner(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/rebalance", json={
            "base_lower": -1800, "base_upper": 1800, "limit_lower": -600, "limit_upper": 0,
            "sender": BOB
        })
        assert response.status_code == 403

    def test_rebalance_invalid_base_rejected(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/rebalance", json={
            "base_lower": -1801, "base_upper": 1800, "limit_lower": -600, "limit_upper": 0,
            "sender": OWNER
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "rebalance: base position invalid"


class TestVaultSettings:
    """POST /vaults/{address}/settings"""

    def test_update_settings(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/settings", json={
            "sender": OWNER,
            "deposit_max0": 5 * E18,
            "max_total_supply": 3000 * E18,
            "affiliate": AFFILIATE,
            "base_fee": 20
        })
        assert response.status_code == 200
        data = response.json()
        assert data["deposit_max0"] == 5 * E18
        assert data["deposit_max1"] == 0
        assert data["max_total_supply"] == 3000 * E18
        assert data["affiliate"] == AFFILIATE
        assert data["base_fee"] == 20

    def test_settings_all_or_nothing(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/settings", json={
            "sender": OWNER,
            "max_total_supply": 3000 * E18,
            "base_fee": 101
        })
        assert response.status_code == 400
        data = client.get(f"/api/v1/vaults/{vault_address}").json()
        assert data["max_total_supply"] == 0

    def test_settings_require_owner(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/settings", json={
            "sender": BOB, "base_fee": 5
        })
        assert response.status_code == 403

    def test_transfer_ownership(self, client, vault_address):
        response = client.post(f"/api/v1/vaults/{vault_address}/settings", json={
            "sender": OWNER, "owner": BOB
        })
        assert response.json()["owner"] == BOB

        response = client.post(f"/api/v1/vaults/{vault_address}/rebalance", json={
            "base_lower": -1800, "base_upper": 1800, "limit_lower": -600, "limit_upper": 0,
            "sender": BOB
        })
        assert response.status_code == 200


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
