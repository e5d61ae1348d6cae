"""Ledger collaborator: custody, token accounting and transfers."""

from reserve_engine.ledger.base import Asset, Coin, Ledger, LedgerError, TreasuryCap
from reserve_engine.ledger.memory import InMemoryLedger

__all__ = [
    "Asset",
    "Coin",
    "Ledger",
    "LedgerError",
    "TreasuryCap",
    "InMemoryLedger",
]
