#!/usr/bin/env python3
"""Seed a JSON file store with the bootstrap ledger.

Prints every account with its balance and tier so testers know which
credentials to log in with. Running it against an existing store leaves
the ledger untouched and just lists it.

Usage: python scripts/seed_store.py [STORE_PATH] [--seed N]
"""

from __future__ import annotations

import argparse
import logging
import random

from ecomarket import JsonFileStore, LedgerService


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path", nargs="?", default="ecomarket-store.json")
    parser.add_argument("--seed", type=int, default=None, help="random seed for balances")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    store = JsonFileStore(args.path)
    ledger = LedgerService(store, rng=random.Random(args.seed))
    seeded = ledger.initialize()

    print(f"=== Ledger at {store.path} ({'seeded' if seeded else 'existing'}) ===")
    print()
    print(f"{'username':<12} {'role':<10} {'balance':>10}  tier        credential")
    for account in ledger.accounts():
        print(
            f"{account.username:<12} {account.role.value:<10} {account.balance:>10}  "
            f"{account.tier.label:<11} {account.credential}"
        )


if __name__ == "__main__":
    main()
