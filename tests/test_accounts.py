"""Tests for Account, tier derivation and ledger/session documents."""

import json
from decimal import Decimal

import pytest

from ecomarket.accounts import (
    Account,
    LedgerDocument,
    credentials_match,
    derive_tier,
    session_account_id,
    session_to_json,
)
from ecomarket.constants import Role, Tier


# ---------------------------------------------------------------------------
# derive_tier
# ---------------------------------------------------------------------------


class TestDeriveTier:
    @pytest.mark.parametrize(
        ("balance", "tier"),
        [
            (0, Tier.SEEDLING),
            (Decimal("99.99"), Tier.SEEDLING),
            (100, Tier.SPROUT),
            (Decimal("499.99"), Tier.SPROUT),
            (500, Tier.BLOOMER),
            (Decimal("999.99"), Tier.BLOOMER),
            (1000, Tier.HARVESTER),
            (Decimal("1000000"), Tier.HARVESTER),
        ],
    )
    def test_thresholds(self, balance, tier) -> None:
        assert derive_tier(balance) is tier

    def test_negative_balance_is_seedling(self) -> None:
        assert derive_tier(-50) is Tier.SEEDLING

    def test_accepts_floats_and_strings(self) -> None:
        assert derive_tier(100.0) is Tier.SPROUT
        assert derive_tier("500") is Tier.BLOOMER

    @pytest.mark.parametrize("balance", [Decimal("NaN"), float("nan"), "NaN", "garbage"])
    def test_nan_and_garbage_are_seedling(self, balance) -> None:
        assert derive_tier(balance) is Tier.SEEDLING

    def test_monotonic(self) -> None:
        balances = [Decimal(b) / 4 for b in range(-400, 4400, 7)]
        tiers = [derive_tier(b) for b in balances]
        assert tiers == sorted(tiers)

    def test_tier_labels(self) -> None:
        assert [t.label for t in Tier] == ["Seedling", "Sprout", "Bloomer", "Harvester"]


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


class TestAccount:
    def test_defaults(self) -> None:
        account = Account(id="u1", username="alice", credential="pw")
        assert account.balance == Decimal("0.00")
        assert account.role is Role.USER
        assert account.tier is Tier.SEEDLING

    def test_balance_quantized_to_cents(self) -> None:
        account = Account(id="u1", username="alice", credential="pw", balance=Decimal("10.005"))
        assert account.balance == Decimal("10.01")

    def test_tier_follows_balance(self) -> None:
        account = Account(id="u1", username="alice", credential="pw", balance=Decimal("99"))
        assert account.tier is Tier.SEEDLING
        account.balance = Decimal("150")
        assert account.tier is Tier.SPROUT

    def test_to_dict_has_no_tier(self) -> None:
        data = Account(id="u1", username="alice", credential="pw", balance=600).to_dict()
        assert "tier" not in data
        assert data["balance"] == "600.00"
        assert data["role"] == "user"

    def test_public_dict_hides_credential(self) -> None:
        data = Account(id="u1", username="alice", credential="pw", balance=600).to_public_dict()
        assert "credential" not in data
        assert data["tier"] == "Bloomer"

    def test_from_dict_numeric_balance(self) -> None:
        account = Account.from_dict({
            "id": "mod1", "username": "mod1", "credential": "x",
            "balance": 1500, "role": "moderator",
        })
        assert account.balance == Decimal("1500.00")
        assert account.role is Role.MODERATOR

    def test_from_dict_accepts_legacy_password_key(self) -> None:
        account = Account.from_dict({
            "id": "admin", "username": "admin", "password": "adminpassword123",
            "balance": 5000.0, "role": "admin",
        })
        assert account.credential == "adminpassword123"

    def test_from_dict_rejects_unknown_role(self) -> None:
        with pytest.raises(ValueError):
            Account.from_dict({"id": "x", "username": "x", "credential": "", "role": "root"})

    @pytest.mark.parametrize("balance", ["NaN", "Infinity", "-5", "abc", None, 1e30])
    def test_from_dict_rejects_unusable_balance(self, balance) -> None:
        with pytest.raises(ValueError):
            Account.from_dict({"id": "x", "username": "x", "credential": "", "balance": balance})

    def test_from_dict_missing_balance_is_zero(self) -> None:
        account = Account.from_dict({"id": "x", "username": "x", "credential": ""})
        assert account.balance == Decimal("0.00")


class TestCredentialsMatch:
    def test_exact_match(self) -> None:
        assert credentials_match("secret", "secret") is True

    def test_case_sensitive(self) -> None:
        assert credentials_match("secret", "Secret") is False

    def test_empty_supplied(self) -> None:
        assert credentials_match("secret", "") is False


# ---------------------------------------------------------------------------
# LedgerDocument
# ---------------------------------------------------------------------------


def _make_doc() -> LedgerDocument:
    return LedgerDocument(users=[
        Account(id="a", username="alice", credential="pw", balance=Decimal("10.50")),
        Account(id="b", username="bob", credential="pw", balance=Decimal("4.25")),
    ])


class TestLedgerDocument:
    def test_lookup(self) -> None:
        doc = _make_doc()
        assert doc.find_by_id("b").username == "bob"
        assert doc.find_by_username("alice").id == "a"
        assert doc.find_by_username("Alice") is None
        assert doc.has_id("zzz") is False

    def test_total_balance(self) -> None:
        assert _make_doc().total_balance == Decimal("14.75")

    def test_roundtrip(self) -> None:
        restored = LedgerDocument.from_json(_make_doc().to_json())
        assert [u.username for u in restored.users] == ["alice", "bob"]
        assert restored.users[0].balance == Decimal("10.50")

    def test_schema_version_and_shape(self) -> None:
        obj = json.loads(_make_doc().to_json())
        assert obj["v"] == 1
        assert isinstance(obj["users"], list)

    def test_from_json_none_is_absent(self) -> None:
        assert LedgerDocument.from_json(None) is None

    def test_from_json_corrupt_is_absent(self) -> None:
        assert LedgerDocument.from_json("{not json") is None

    def test_from_json_without_users_is_absent(self) -> None:
        assert LedgerDocument.from_json('{"v": 1}') is None
        assert LedgerDocument.from_json('["a"]') is None

    def test_from_json_malformed_account_is_absent(self) -> None:
        assert LedgerDocument.from_json('{"users": [{"username": "no-id"}]}') is None

    def test_from_json_nan_balance_is_absent(self) -> None:
        raw = json.dumps({"users": [{"id": "a", "username": "a", "credential": "", "balance": "NaN"}]})
        assert LedgerDocument.from_json(raw) is None

    def test_from_json_empty_user_list_is_valid(self) -> None:
        doc = LedgerDocument.from_json('{"users": []}')
        assert doc is not None
        assert doc.users == []


# ---------------------------------------------------------------------------
# Session document
# ---------------------------------------------------------------------------


class TestSessionDocument:
    def test_snapshot_omits_credential(self) -> None:
        account = Account(id="a", username="alice", credential="pw")
        obj = json.loads(session_to_json(account))
        assert obj["id"] == "a"
        assert "credential" not in obj

    def test_account_id_roundtrip(self) -> None:
        account = Account(id="a", username="alice", credential="pw")
        assert session_account_id(session_to_json(account)) == "a"

    def test_account_id_absent(self) -> None:
        assert session_account_id(None) is None

    def test_account_id_corrupt(self) -> None:
        assert session_account_id("garbage") is None
        assert session_account_id('{"username": "alice"}') is None
