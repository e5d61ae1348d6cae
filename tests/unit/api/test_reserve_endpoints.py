"""Unit tests for the reserve HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from reserve_engine import __version__
from reserve_engine.api import endpoints
from reserve_engine.api.endpoints import env_flag, get_api_keys, get_engine, parse_api_keys
from reserve_engine.api.main import app
from reserve_engine.errors import InvalidAddress
from tests.helpers import (
    ALICE,
    AUTHORITY,
    BOB,
    COLLECTOR,
    MALLORY,
    ONE_COIN,
    WALLET_FUNDING,
    make_engine,
    mint_from,
    token_balance,
)

API_KEYS = {
    "admin-key": AUTHORITY,
    "alice-key": ALICE,
    "bob-key": BOB,
    "mallory-key": MALLORY,
}


def as_caller(key: str) -> dict[str, str]:
    return {"X-API-Key": key}


@pytest.fixture
def client(engine, monkeypatch):
    """Test client bound to a fresh, initialized engine with wallet funding on."""
    monkeypatch.setattr(endpoints, "ALLOW_FUNDING", True)
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_api_keys] = lambda: API_KEYS
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}

    def test_error_model_documented(self, client) -> None:
        schema = client.get("/openapi.json").json()
        assert "ErrorResponse" in schema["components"]["schemas"]
        responses = schema["paths"]["/mint"]["post"]["responses"]
        assert responses["400"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorResponse"
        }


class TestCallerAuthentication:
    """State-changing routes act for the API key holder, never for a body field."""

    def test_missing_key(self, client) -> None:
        response = client.post("/mint", json={"amount": ONE_COIN})
        assert response.status_code == 401
        assert client.get(f"/wallets/{ALICE}").json()["base"] == WALLET_FUNDING

    def test_unknown_key(self, client) -> None:
        response = client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("stolen"))
        assert response.status_code == 401

    def test_spoofed_sender_without_key(self, client, engine) -> None:
        response = client.post(
            "/admin/authority", json={"sender": AUTHORITY, "new_address": MALLORY}
        )
        assert response.status_code == 401
        assert engine.authority() == AUTHORITY

    def test_spoofed_sender_with_own_key(self, client, engine) -> None:
        """A body ``sender`` is ignored; the caller is the key holder."""
        response = client.post(
            "/admin/authority",
            json={"sender": AUTHORITY, "new_address": MALLORY},
            headers=as_caller("mallory-key"),
        )
        assert response.status_code == 403
        assert response.json()["error"] == "NotAuthorized"
        assert engine.authority() == AUTHORITY

    def test_cannot_burn_another_wallet(self, client, engine) -> None:
        mint_from(engine, ALICE, ONE_COIN)
        response = client.post(
            "/burn",
            json={"sender": ALICE, "token_amount": 10**11},
            headers=as_caller("mallory-key"),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "LedgerError"
        assert token_balance(engine, ALICE) == 999_000_000_000

    def test_parse_api_keys(self) -> None:
        keys = parse_api_keys(" k1=0xa11ce , k2=0xb0b,")
        assert keys == {"k1": ALICE, "k2": BOB}
        assert parse_api_keys("") == {}

    @pytest.mark.parametrize("raw", ["no-separator", "=0xa11ce"])
    def test_parse_api_keys_malformed(self, raw) -> None:
        with pytest.raises(ValueError):
            parse_api_keys(raw)

    def test_parse_api_keys_bad_address(self) -> None:
        with pytest.raises(InvalidAddress):
            parse_api_keys("k1=not-hex")


class TestMintEndpoint:
    """Tests for POST /mint."""

    def test_bootstrap_mint(self, client) -> None:
        response = client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("alice-key"))
        assert response.status_code == 200
        assert response.json() == {
            "sui_amount": 1_000_000_000,
            "tokens_minted": 999_000_000_000,
            "backing_added": 999_500_000,
            "fee_collected": 500_000,
            "new_price": 1_000_500,
        }

    def test_wallets_updated(self, client) -> None:
        client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("alice-key"))
        alice = client.get(f"/wallets/{ALICE}").json()
        assert alice["base"] == WALLET_FUNDING - ONE_COIN
        assert alice["token"] == 999_000_000_000
        collector = client.get(f"/wallets/{COLLECTOR}").json()
        assert collector["base"] == 500_000

    def test_rejected_mint_keeps_wallet(self, client) -> None:
        """A rejected mint does not debit the caller's wallet."""
        response = client.post("/mint", json={"amount": 500}, headers=as_caller("alice-key"))
        assert response.status_code == 400
        assert response.json() == {
            "error": "InsufficientAmount",
            "code": 1,
            "detail": "Deposit 500 below minimum 1000",
        }
        assert client.get(f"/wallets/{ALICE}").json()["base"] == WALLET_FUNDING

    def test_unfunded_wallet(self, client) -> None:
        response = client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("mallory-key"))
        assert response.status_code == 400
        assert response.json()["error"] == "LedgerError"
        assert response.json()["code"] is None

    @pytest.mark.parametrize("amount", [-1, 2**64, "lots"])
    def test_invalid_amount_schema(self, client, amount) -> None:
        response = client.post("/mint", json={"amount": amount}, headers=as_caller("alice-key"))
        assert response.status_code == 422


class TestBurnEndpoint:
    """Tests for POST /burn."""

    def test_full_burn(self, client) -> None:
        client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("alice-key"))
        response = client.post(
            "/burn", json={"token_amount": 999_000_000_000}, headers=as_caller("alice-key")
        )
        assert response.status_code == 200
        assert response.json() == {
            "tokens_burned": 999_000_000_000,
            "sui_returned": 998_500_500,
            "fee_collected": 499_750,
            "new_price": 1_000_000,
        }

    def test_zero_burn(self, client) -> None:
        client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("alice-key"))
        response = client.post("/burn", json={"token_amount": 0}, headers=as_caller("alice-key"))
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAmount"

    def test_burn_more_than_held(self, client) -> None:
        client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("alice-key"))
        response = client.post("/burn", json={"token_amount": 10**6}, headers=as_caller("bob-key"))
        assert response.status_code == 400
        assert response.json()["error"] == "LedgerError"


class TestInitializeAndAdmin:
    """Tests for POST /initialize and /admin/*."""

    def test_initialize_twice(self, client) -> None:
        response = client.post(
            "/initialize", json={"fee_collector": BOB}, headers=as_caller("admin-key")
        )
        assert response.status_code == 409
        assert response.json()["error"] == "AlreadyInitialized"

    def test_initialize_fresh(self) -> None:
        engine = make_engine(initialized=False)
        app.dependency_overrides[get_engine] = lambda: engine
        app.dependency_overrides[get_api_keys] = lambda: API_KEYS
        try:
            client = TestClient(app)
            response = client.post(
                "/initialize", json={"fee_collector": COLLECTOR}, headers=as_caller("admin-key")
            )
            assert response.status_code == 200
            assert response.json()["new"] == COLLECTOR

            response = client.post(
                "/initialize", json={"fee_collector": "0x0"}, headers=as_caller("admin-key")
            )
            assert response.status_code == 409
        finally:
            app.dependency_overrides.clear()

    def test_set_fee_collector(self, client) -> None:
        response = client.post(
            "/admin/fee-collector", json={"new_address": BOB}, headers=as_caller("admin-key")
        )
        assert response.status_code == 200
        assert response.json() == {"previous": COLLECTOR, "new": BOB}

    def test_not_authorized(self, client) -> None:
        response = client.post(
            "/admin/authority", json={"new_address": ALICE}, headers=as_caller("alice-key")
        )
        assert response.status_code == 403
        assert response.json()["error"] == "NotAuthorized"
        assert response.json()["code"] == 8

    def test_transfer_authority(self, client, engine) -> None:
        response = client.post(
            "/admin/authority", json={"new_address": BOB}, headers=as_caller("admin-key")
        )
        assert response.status_code == 200
        assert engine.authority() == BOB

        response = client.post(
            "/admin/fee-collector", json={"new_address": BOB}, headers=as_caller("admin-key")
        )
        assert response.status_code == 403

    def test_null_address(self, client) -> None:
        response = client.post(
            "/admin/authority", json={"new_address": "0x0"}, headers=as_caller("admin-key")
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAddress"


class TestQueryEndpoints:
    """Tests for GET /info, /price and /quote/*."""

    def test_info(self, client) -> None:
        client.post("/mint", json={"amount": ONE_COIN}, headers=as_caller("alice-key"))
        info = client.get("/info").json()
        assert info == {
            "total_supply": 999_000_000_000,
            "total_backing": 999_500_000,
            "current_price": 1_000_500,
            "last_price": 1_000_500,
            "fee_collector": COLLECTOR,
            "total_fees_collected": 500_000,
            "authority": AUTHORITY,
        }

    def test_price(self, client) -> None:
        price = client.get("/price").json()
        assert price == {"current_price": 1_000_000, "last_price": 1_000_000, "price_scale": 10**9}

    def test_quote_mint(self, client) -> None:
        response = client.get("/quote/mint", params={"amount": ONE_COIN})
        assert response.status_code == 200
        quote = response.json()
        assert quote["bootstrap"] is True
        assert quote["tokens_out"] == 999_000_000_000
        # Quotes do not commit
        assert client.get("/info").json()["total_supply"] == 0

    def test_quote_burn_empty_pool(self, client) -> None:
        response = client.get("/quote/burn", params={"token_amount": 10**6})
        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientBacking"

    def test_quote_negative(self, client) -> None:
        response = client.get("/quote/mint", params={"amount": -5})
        assert response.status_code == 422


class TestWalletFunding:
    def test_fund(self, client) -> None:
        response = client.post("/wallets/0x77/fund", json={"amount": 5_000})
        assert response.status_code == 200
        assert response.json()["base"] == 5_000

    def test_fund_zero_rejected(self, client) -> None:
        response = client.post("/wallets/0x77/fund", json={"amount": 0})
        assert response.status_code == 422

    def test_funding_disabled(self, client, monkeypatch) -> None:
        monkeypatch.setattr(endpoints, "ALLOW_FUNDING", False)
        response = client.post("/wallets/0x77/fund", json={"amount": 5_000})
        assert response.status_code == 403
        assert client.get("/wallets/0x77").json()["base"] == 0

    def test_funding_off_by_default(self, monkeypatch) -> None:
        monkeypatch.delenv("RESERVE_ALLOW_FUNDING", raising=False)
        assert env_flag("RESERVE_ALLOW_FUNDING") is False
        monkeypatch.setenv("RESERVE_ALLOW_FUNDING", "yes")
        assert env_flag("RESERVE_ALLOW_FUNDING") is True

    def test_bad_wallet_address(self, client) -> None:
        response = client.get("/wallets/0xnothex")
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAddress"
