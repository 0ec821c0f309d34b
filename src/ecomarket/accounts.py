"""Account model, tier derivation and the serialized ledger document.

Pure data model — no I/O. Balances are ``Decimal`` quantized to cents and
are written to JSON as strings. Tier is never stored: it is derived from
the balance every time it is read.
"""

from __future__ import annotations

import hmac
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from ecomarket.constants import (
    TIER_BLOOMER_FLOOR,
    TIER_HARVESTER_FLOOR,
    TIER_SPROUT_FLOOR,
    Role,
    Tier,
)
from ecomarket.money import MAX_BALANCE, Amount, parse_amount, round_money, to_decimal

logger = logging.getLogger(__name__)

_SCHEMA_VERSION = 1


def derive_tier(balance: Amount) -> Tier:
    """Map a balance to its membership tier.

    Total: negatives, NaN and unparseable values are Seedling.
    """
    amount = to_decimal(balance)
    if amount.is_nan():
        return Tier.SEEDLING
    if amount >= TIER_HARVESTER_FLOOR:
        return Tier.HARVESTER
    if amount >= TIER_BLOOMER_FLOOR:
        return Tier.BLOOMER
    if amount >= TIER_SPROUT_FLOOR:
        return Tier.SPROUT
    return Tier.SEEDLING


def credentials_match(stored: str, supplied: str) -> bool:
    """The one place credentials are compared.

    Credentials are stored in plaintext; swapping in a hash check here
    changes every login path at once.
    """
    return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@dataclass
class Account:
    """A wallet holder. ``tier`` is a property, not a field."""

    id: str
    username: str
    credential: str
    balance: Decimal = Decimal("0.00")
    role: Role = Role.USER

    def __post_init__(self) -> None:
        self.balance = round_money(self.balance)
        self.role = Role(self.role)

    @property
    def tier(self) -> Tier:
        return derive_tier(self.balance)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "credential": self.credential,
            "balance": str(self.balance),
            "role": self.role.value,
        }

    def to_public_dict(self) -> dict[str, Any]:
        """Credential-free view for sessions and rendering."""
        return {
            "id": self.id,
            "username": self.username,
            "balance": str(self.balance),
            "role": self.role.value,
            "tier": self.tier.label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Account:
        """Raises ValueError on a balance that is not a finite, non-negative amount."""
        balance = parse_amount(data.get("balance", 0), limit=MAX_BALANCE)
        if balance is None:
            raise ValueError(f"invalid balance for account {data.get('id')!r}")
        return cls(
            id=str(data["id"]),
            username=str(data["username"]),
            # Migration: documents written by the browser build used "password"
            credential=str(data.get("credential", data.get("password", ""))),
            balance=balance,
            role=Role(data.get("role", Role.USER.value)),
        )


# ---------------------------------------------------------------------------
# LedgerDocument
# ---------------------------------------------------------------------------


@dataclass
class LedgerDocument:
    """Every account, in creation order. Unique by id and by username."""

    users: list[Account] = field(default_factory=list)

    def find_by_id(self, account_id: str) -> Account | None:
        return next((u for u in self.users if u.id == account_id), None)

    def find_by_username(self, username: str) -> Account | None:
        return next((u for u in self.users if u.username == username), None)

    def has_id(self, account_id: str) -> bool:
        return self.find_by_id(account_id) is not None

    @property
    def total_balance(self) -> Decimal:
        return sum((u.balance for u in self.users), Decimal("0.00"))

    # -- serialization --------------------------------------------------------

    def to_json(self) -> str:
        return json.dumps({
            "v": _SCHEMA_VERSION,
            "users": [u.to_dict() for u in self.users],
        }, indent=2)

    @classmethod
    def from_json(cls, data: str | None) -> LedgerDocument | None:
        """Deserialize, or return None when the document is missing or corrupt.

        None means "absent": the caller re-seeds rather than failing.
        """
        if data is None:
            return None
        try:
            obj = json.loads(data)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Ledger document is corrupt; treating it as absent.")
            return None

        if not isinstance(obj, dict) or not isinstance(obj.get("users"), list):
            logger.warning("Ledger document has no user list; treating it as absent.")
            return None

        try:
            users = [Account.from_dict(u) for u in obj["users"]]
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Ledger document has a malformed account; treating it as absent.")
            return None

        return cls(users=users)


# ---------------------------------------------------------------------------
# Session document
# ---------------------------------------------------------------------------


def session_to_json(account: Account) -> str:
    """Snapshot written at login. Only ``id`` is ever read back."""
    return json.dumps(account.to_public_dict())


def session_account_id(data: str | None) -> str | None:
    """Extract the referenced account id, or None if absent/corrupt."""
    if data is None:
        return None
    try:
        obj = json.loads(data)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Session document is corrupt; ignoring it.")
        return None
    if not isinstance(obj, dict) or not isinstance(obj.get("id"), str):
        logger.warning("Session document has no account id; ignoring it.")
        return None
    return obj["id"]
