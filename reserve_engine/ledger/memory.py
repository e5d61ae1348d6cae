"""In-memory ledger used by the HTTP service and the tests."""

from __future__ import annotations

import itertools
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from reserve_engine.ledger.base import Asset, Coin, LedgerError, TreasuryCap
from reserve_engine.models.types import normalize_address
from reserve_engine.safe_int import S

logger = structlog.get_logger()


@dataclass
class _Books:
    """Everything a transaction may need to restore."""

    wallets: dict[tuple[str, Asset], int] = field(default_factory=lambda: defaultdict(int))
    live_coins: dict[int, Coin] = field(default_factory=dict)
    vault: int = 0
    supply: int = 0


class InMemoryLedger:
    """Wallet balances per (address, asset) plus a base-asset reserve vault.

    Coins are withdrawn from wallets, handed to the engine, and consumed
    there. Tokens minted by the engine are credited straight to the
    recipient's wallet.
    """

    def __init__(self) -> None:
        self._books = _Books()
        self._cap: TreasuryCap | None = None
        self._coin_ids = itertools.count(1)
        self._depth = 0

    # --- Wallet side (outside the engine) ---

    def fund(self, address: str, amount: int) -> None:
        """Credit base asset to a wallet from outside the system."""
        owner = normalize_address(address)
        key = (owner, Asset.BASE)
        self._books.wallets[key] = (S(self._books.wallets[key]) + amount).to_u64()
        logger.debug("wallet_funded", address=owner[-8:], amount=amount)

    def balance_of(self, address: str, asset: Asset) -> int:
        return self._books.wallets.get((normalize_address(address), asset), 0)

    def withdraw(self, address: str, asset: Asset, amount: int) -> Coin:
        """Split ``amount`` of ``asset`` out of a wallet into a spendable coin.

        Raises:
            LedgerError: If the wallet balance is short
        """
        owner = normalize_address(address)
        key = (owner, asset)
        balance = self._books.wallets.get(key, 0)
        if amount < 0 or amount > balance:
            raise LedgerError(
                f"Cannot withdraw {amount} {asset.value} from {owner[-8:]} (balance {balance})"
            )
        self._books.wallets[key] = balance - amount
        coin = Coin(id=next(self._coin_ids), asset=asset, value=amount, owner=owner)
        self._books.live_coins[coin.id] = coin
        return coin

    # --- Capabilities used by the engine ---

    def create_currency(self) -> TreasuryCap:
        if self._cap is not None:
            raise LedgerError("Currency already created")
        self._cap = TreasuryCap(lambda: self._books.supply)
        return self._cap

    def mint_token(self, cap: TreasuryCap, amount: int, recipient: str) -> Coin:
        self._check_cap(cap)
        owner = normalize_address(recipient)
        self._books.supply = (S(self._books.supply) + amount).to_u64()
        key = (owner, Asset.TOKEN)
        self._books.wallets[key] = self._books.wallets[key] + amount
        return Coin(id=next(self._coin_ids), asset=Asset.TOKEN, value=amount, owner=owner)

    def burn_token(self, cap: TreasuryCap, coin: Coin) -> int:
        self._check_cap(cap)
        self.ensure_spendable(coin, Asset.TOKEN)
        del self._books.live_coins[coin.id]
        self._books.supply = (S(self._books.supply) - coin.value).value
        return coin.value

    def deposit_base_asset(self, coin: Coin) -> int:
        self.ensure_spendable(coin, Asset.BASE)
        del self._books.live_coins[coin.id]
        self._books.vault = (S(self._books.vault) + coin.value).to_u64()
        return coin.value

    def transfer_base_asset(self, amount: int, recipient: str) -> None:
        if amount > self._books.vault:
            raise LedgerError(f"Reserve vault holds {self._books.vault}, cannot pay {amount}")
        owner = normalize_address(recipient)
        self._books.vault -= amount
        key = (owner, Asset.BASE)
        self._books.wallets[key] = self._books.wallets[key] + amount

    def current_total_supply(self, cap: TreasuryCap) -> int:
        self._check_cap(cap)
        return self._books.supply

    def reserve_balance(self) -> int:
        return self._books.vault

    def ensure_spendable(self, coin: Coin, asset: Asset) -> None:
        if coin.asset is not asset:
            raise LedgerError(f"Coin {coin.id} holds {coin.asset.value}, expected {asset.value}")
        if self._books.live_coins.get(coin.id) is not coin:
            raise LedgerError(f"Coin {coin.id} is spent or unknown")

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Restore balances, coins and supply if the block raises.

        Nested transactions join the outermost one.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        saved = _Books(
            wallets=defaultdict(int, self._books.wallets),
            live_coins=dict(self._books.live_coins),
            vault=self._books.vault,
            supply=self._books.supply,
        )
        self._depth = 1
        try:
            yield
        except BaseException:
            self._books = saved
            logger.warning("ledger_transaction_rolled_back")
            raise
        finally:
            self._depth = 0

    def _check_cap(self, cap: TreasuryCap) -> None:
        if self._cap is None or cap is not self._cap:
            raise LedgerError("Treasury capability was not issued by this ledger")
