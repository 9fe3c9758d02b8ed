"""
TinyDB persistence
==================

One TinyDB database holds four tables:

  bets      one document per bet, upserted by id, never removed
  events    append-only notification log (events.EventLog)
  ledger    single balance document (ledger.Ledger)
  settings  fee and limits changed by the admin (SettingsStore)

TinyDB is not thread-safe, so every table access goes through one shared
store lock.
"""

import threading

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from zkflip.betting.models import Bet

DATA = Query()


def open_db(path=None):
    """JSON file database at `path`, or an in-memory one."""
    if path:
        return TinyDB(path)
    return TinyDB(storage=MemoryStorage)


class BetStore:
    """Id-indexed bet records."""

    def __init__(self, db, lock=None):
        self._table = db.table("bets")
        self._lock = lock if lock is not None else threading.RLock()

    def get(self, bet_id):
        with self._lock:
            rows = self._table.search(DATA.id == bet_id)
        if not rows:
            return None
        return Bet.from_dict(rows[0])

    def save(self, bet):
        with self._lock:
            self._table.upsert(bet.to_dict(), DATA.id == bet.id)

    def all(self):
        with self._lock:
            rows = self._table.all()
        return sorted((Bet.from_dict(r) for r in rows), key=lambda b: b.id)

    def next_id(self):
        """One past the highest stored id; 0 for an empty table."""
        with self._lock:
            ids = [r["id"] for r in self._table.all()]
        return max(ids) + 1 if ids else 0

    def __len__(self):
        with self._lock:
            return len(self._table)


class SettingsStore:
    """Admin-changed game settings, one document in the ``settings`` table.

    Values are stored as strings; a key that was never changed is absent, so
    the configured default applies.
    """

    KEY = "game"

    def __init__(self, db, lock=None):
        self._table = db.table("settings")
        self._lock = lock if lock is not None else threading.RLock()

    def load(self):
        with self._lock:
            rows = self._table.search(DATA.type == self.KEY)
        return dict(rows[0]["data"]) if rows else {}

    def save(self, **values):
        with self._lock:
            data = self.load()
            data.update({k: str(v) for k, v in values.items()})
            self._table.upsert({"type": self.KEY, "data": data}, DATA.type == self.KEY)
