"""Wallet ledger: accounts, login session and balance mutations.

Every operation reads the whole ledger document from the store, mutates
it in memory and writes it back in one ``store()`` call. Within one
process that makes each operation atomic; across processes sharing a
store the last writer wins.

The session document only contributes an account id. The account itself
is looked up in the freshly read ledger each time, so a balance changed
elsewhere is never shadowed by a stale copy.
"""

from __future__ import annotations

import logging
import random
import uuid
from decimal import Decimal
from typing import Any, Callable, Protocol

from ecomarket.accounts import (
    Account,
    LedgerDocument,
    credentials_match,
    session_account_id,
    session_to_json,
)
from ecomarket.config import MarketConfig
from ecomarket.constants import (
    EVENT_BALANCE_CHANGED,
    EVENT_SESSION_CHANGED,
    SEED_STAFF,
    Role,
)
from ecomarket.errors import ErrorCode, OperationResult
from ecomarket.money import MAX_BALANCE, parse_amount, round_money
from ecomarket.store_backend import StoreBackend

logger = logging.getLogger(__name__)

Listener = Callable[[str, dict[str, Any]], None]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_SUFFIX_LENGTH = 6


class RandomSource(Protocol):
    """Uniform floats in [0, 1). ``random.Random`` satisfies this."""

    def random(self) -> float: ...


def _default_account_id() -> str:
    return "u" + uuid.uuid4().hex[:12]


def _base36(value: int, width: int) -> str:
    digits = []
    for _ in range(width):
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class LedgerService:
    """Account lifecycle and balance operations over a StoreBackend.

    - ``initialize()`` seeds the ledger once; later calls are no-ops.
    - Fallible operations return an ``OperationResult``; nothing here
      raises for a user mistake.
    - ``subscribe()`` registers listeners for ``balance-changed`` and
      ``session-changed``; they run after the write has landed.
    """

    def __init__(
        self,
        store: StoreBackend,
        config: MarketConfig | None = None,
        rng: RandomSource | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._config = config or MarketConfig()
        self._rng: RandomSource = rng or random.Random()
        self._new_id = id_factory or _default_account_id
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # -- seeding --------------------------------------------------------------

    def initialize(self) -> bool:
        """Seed the ledger if it is absent or unreadable. Returns True if seeded."""
        existing = LedgerDocument.from_json(self._store.fetch(self._config.ledger_key))
        if existing is not None:
            return False
        self._seed()
        return True

    def _seed(self) -> LedgerDocument:
        users = [
            Account(id=name, username=name, credential=credential, balance=balance, role=role)
            for name, credential, balance, role in SEED_STAFF
        ]
        for i in range(1, self._config.seed_user_count + 1):
            balance = Decimal(int(self._rng.random() * self._config.seed_balance_ceiling))
            suffix = _base36(int(self._rng.random() * 36 ** _SUFFIX_LENGTH), _SUFFIX_LENGTH)
            users.append(Account(
                id=f"user_{i}",
                username=f"user_{i}",
                credential=f"pass_{suffix}",
                balance=balance,
                role=Role.USER,
            ))

        doc = LedgerDocument(users=users)
        self._save(doc)
        logger.info("Seeded ledger with %d account(s).", len(users))
        return doc

    # -- document helpers -----------------------------------------------------

    def _load(self) -> LedgerDocument:
        """Read the ledger, re-seeding when it is missing or corrupt."""
        doc = LedgerDocument.from_json(self._store.fetch(self._config.ledger_key))
        if doc is None:
            doc = self._seed()
        return doc

    def _save(self, doc: LedgerDocument) -> None:
        self._store.store(self._config.ledger_key, doc.to_json())

    def _emit(self, event: str, payload: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    def _emit_balance(self, account: Account) -> None:
        self._emit(EVENT_BALANCE_CHANGED, {
            "account_id": account.id,
            "balance": account.balance,
            "tier": account.tier,
        })

    # -- session --------------------------------------------------------------

    def _resolve_session(self, doc: LedgerDocument) -> tuple[Account | None, ErrorCode | None]:
        """Resolve the session against ``doc``, tearing it down if it dangles."""
        raw = self._store.fetch(self._config.session_key)
        if raw is None:
            return None, ErrorCode.NOT_LOGGED_IN

        account_id = session_account_id(raw)
        if account_id is None:
            self._end_session()
            return None, ErrorCode.NOT_LOGGED_IN

        account = doc.find_by_id(account_id)
        if account is None:
            logger.warning("Session references unknown account %s; logging out.", account_id)
            self._end_session()
            return None, ErrorCode.ACCOUNT_NOT_FOUND

        return account, None

    def _end_session(self) -> None:
        """Drop the session; emits only if one was actually present."""
        if self._store.fetch(self._config.session_key) is None:
            return
        self._store.remove(self._config.session_key)
        self._emit(EVENT_SESSION_CHANGED, {"account_id": None})

    def current_account(self) -> Account | None:
        """Return the logged-in account as currently stored, or None."""
        account, _ = self._resolve_session(self._load())
        return account

    def logout(self) -> None:
        """End the session. Safe to call when nobody is logged in."""
        self._end_session()

    # -- account lifecycle ----------------------------------------------------

    def create_account(self, username: str, credential: str) -> OperationResult:
        """Register a new ``user`` account with a zero balance."""
        if not isinstance(username, str) or not isinstance(credential, str):
            return OperationResult.fail(ErrorCode.INVALID_CREDENTIALS)
        if not username.strip() or not credential:
            return OperationResult.fail(ErrorCode.INVALID_CREDENTIALS)

        doc = self._load()
        if doc.find_by_username(username) is not None:
            return OperationResult.fail(ErrorCode.DUPLICATE_USERNAME)

        account_id = self._new_id()
        while doc.has_id(account_id):
            account_id = self._new_id()

        account = Account(id=account_id, username=username, credential=credential)
        doc.users.append(account)
        self._save(doc)
        logger.info("Created account %s (%s).", account.id, account.username)
        return OperationResult.ok(account)

    def authenticate(self, username: str, credential: str) -> OperationResult:
        """Log in on an exact username/credential match."""
        if not isinstance(username, str) or not isinstance(credential, str):
            return OperationResult.fail(ErrorCode.INVALID_CREDENTIALS)

        doc = self._load()
        account = doc.find_by_username(username)
        if account is None or not credentials_match(account.credential, credential):
            return OperationResult.fail(ErrorCode.INVALID_CREDENTIALS)

        self._store.store(self._config.session_key, session_to_json(account))
        logger.info("Account %s logged in.", account.id)
        self._emit(EVENT_SESSION_CHANGED, {"account_id": account.id})
        return OperationResult.ok(account)

    def accounts(self) -> list[Account]:
        """All accounts in creation order."""
        return list(self._load().users)

    # -- balance mutations ----------------------------------------------------

    def top_up(self, amount: object) -> OperationResult:
        """Credit the logged-in account. Returns the new balance."""
        doc = self._load()
        account, error = self._resolve_session(doc)
        if account is None:
            return OperationResult.fail(error or ErrorCode.NOT_LOGGED_IN)

        value = parse_amount(amount)
        if value is None:
            return OperationResult.fail(ErrorCode.INVALID_AMOUNT)

        if account.balance + value > MAX_BALANCE:
            return OperationResult.fail(ErrorCode.INVALID_AMOUNT)

        account.balance = round_money(account.balance + value)
        self._save(doc)
        self._emit_balance(account)
        return OperationResult.ok(account.balance)

    def deduct(self, amount: object) -> OperationResult:
        """Debit the logged-in account if it can cover ``amount``."""
        doc = self._load()
        account, error = self._resolve_session(doc)
        if account is None:
            return OperationResult.fail(error or ErrorCode.NOT_LOGGED_IN)

        value = parse_amount(amount)
        if value is None:
            return OperationResult.fail(ErrorCode.INVALID_AMOUNT)
        if account.balance < value:
            return OperationResult.fail(ErrorCode.INSUFFICIENT_FUNDS)

        account.balance = round_money(account.balance - value)
        self._save(doc)
        self._emit_balance(account)
        return OperationResult.ok(account.balance)

    def transfer(self, recipient_username: str, amount: object) -> OperationResult:
        """Move ``amount`` from the logged-in account to ``recipient_username``.

        Checks run in a fixed order so the reported error is deterministic:
        session, recipient, self-transfer, amount, funds. Both balances are
        written in the same store call.
        """
        doc = self._load()
        sender, error = self._resolve_session(doc)
        if sender is None:
            return OperationResult.fail(error or ErrorCode.NOT_LOGGED_IN)

        recipient = (
            doc.find_by_username(recipient_username)
            if isinstance(recipient_username, str) else None
        )
        if recipient is None:
            return OperationResult.fail(ErrorCode.RECIPIENT_NOT_FOUND)
        if recipient.username == sender.username:
            return OperationResult.fail(ErrorCode.SELF_TRANSFER)

        value = parse_amount(amount)
        if value is None:
            return OperationResult.fail(ErrorCode.INVALID_AMOUNT)
        if sender.balance < value:
            return OperationResult.fail(ErrorCode.INSUFFICIENT_FUNDS)

        if recipient.balance + value > MAX_BALANCE:
            return OperationResult.fail(ErrorCode.INVALID_AMOUNT)

        sender.balance = round_money(sender.balance - value)
        recipient.balance = round_money(recipient.balance + value)
        self._save(doc)
        logger.info("Transferred %s from %s to %s.", value, sender.id, recipient.id)
        self._emit_balance(sender)
        self._emit_balance(recipient)
        return OperationResult.ok(sender.balance)
