"""
Pooled-stake ledger
===================

  pool      everything the game holds
  locked    stakes of bets that are not settled yet
  fees      house fees accrued since the last sweep
  balances  amounts paid out per account (payouts and sweeps)

Invariant: pool >= locked. The surplus pool - locked (fees plus unsolicited
deposits) is the only part an admin sweep may take.
"""

import logging
import threading

from tinydb import Query

from zkflip.betting.errors import LedgerInvariantError

logger = logging.getLogger(__name__)

DATA = Query()
LEDGER_KEY = "ledger"


class Ledger:
    """Balances persisted as one document in the TinyDB ``ledger`` table.

    `lock` is the registry's store lock; balances are read and written under
    it, the same lock that guards bet records and events.
    """

    def __init__(self, db, lock=None):
        self._table = db.table("ledger")
        self._lock = lock if lock is not None else threading.RLock()
        with self._lock:
            rows = self._table.search(DATA.type == LEDGER_KEY)
        if rows:
            data = rows[0]["data"]
            self.pool = int(data["pool"])
            self.locked = int(data["locked"])
            self.fees = int(data["fees"])
            self.balances = {k: int(v) for k, v in data["balances"].items()}
        else:
            self.pool = 0
            self.locked = 0
            self.fees = 0
            self.balances = {}

    def _persist(self):
        data = {
            "pool": str(self.pool),
            "locked": str(self.locked),
            "fees": str(self.fees),
            "balances": {k: str(v) for k, v in self.balances.items()},
        }
        with self._lock:
            self._table.upsert({"type": LEDGER_KEY, "data": data}, DATA.type == LEDGER_KEY)

    def check_invariant(self):
        if self.pool < self.locked:
            raise LedgerInvariantError(
                f"pool {self.pool} is below locked stakes {self.locked}"
            )

    def lock_stake(self, amount):
        """A stake enters the pool and stays locked until settlement."""
        with self._lock:
            self.pool += amount
            self.locked += amount
            self._persist()

    def deposit(self, amount):
        """Unsolicited funds: pool grows, nothing is locked."""
        with self._lock:
            self.pool += amount
            self._persist()

    def settle(self, pooled, payout, fee, winner):
        """Release `pooled`, pay `payout` to the winner, keep `fee` in the pool."""
        with self._lock:
            if pooled > self.locked or payout > self.pool:
                raise LedgerInvariantError("settlement exceeds locked stakes")
            self.locked -= pooled
            self.pool -= payout
            self.fees += fee
            self.balances[winner] = self.balances.get(winner, 0) + payout
            self.check_invariant()
            self._persist()

    def surplus(self):
        with self._lock:
            self.check_invariant()
            return self.pool - self.locked

    def sweep(self, recipient):
        """Move the unlocked surplus to `recipient`; returns the amount."""
        with self._lock:
            self.check_invariant()
            amount = self.pool - self.locked
            self.pool -= amount
            self.fees = 0
            if amount:
                self.balances[recipient] = self.balances.get(recipient, 0) + amount
            self._persist()
        logger.info("swept %d to %s", amount, recipient)
        return amount

    def balance_of(self, account):
        with self._lock:
            return self.balances.get(account, 0)

    def snapshot(self):
        with self._lock:
            return {
                "pool": str(self.pool),
                "locked": str(self.locked),
                "fees": str(self.fees),
                "surplus": str(self.pool - self.locked),
                "balances": {k: str(v) for k, v in self.balances.items()},
            }
