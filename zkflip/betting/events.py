"""
Notifications
=============

Every state change emits a named event. Events are appended to the TinyDB
``events`` table with a sequence number and pushed to subscribers.

  BetCreated, PlayerCommitted, HouseCommitted, RandomnessRequested,
  RandomnessFulfilled, BetSettled, HouseFeeUpdated, BetLimitsUpdated,
  EmergencyWithdrawal

BetSettled carries `player_bit` and `house_bit` as claimed by the settler.
They are checked only to XOR to the proven outcome, not against the
preimages, so they are informational and may differ from the real bits.
The proof binds the outcome alone.
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)

BET_CREATED = "BetCreated"
PLAYER_COMMITTED = "PlayerCommitted"
HOUSE_COMMITTED = "HouseCommitted"
RANDOMNESS_REQUESTED = "RandomnessRequested"
RANDOMNESS_FULFILLED = "RandomnessFulfilled"
BET_SETTLED = "BetSettled"
HOUSE_FEE_UPDATED = "HouseFeeUpdated"
BET_LIMITS_UPDATED = "BetLimitsUpdated"
EMERGENCY_WITHDRAWAL = "EmergencyWithdrawal"


class EventLog:
    """Append-only event journal with callback subscribers.

    Subscribers receive (name, payload) after the event is persisted. A
    failing subscriber is logged and does not undo the event.
    """

    def __init__(self, db, lock=None):
        self._table = db.table("events")
        self._lock = lock if lock is not None else threading.RLock()
        self._subscribers = []

    def subscribe(self, callback, name=None):
        """Register callback(name, payload); `name` filters to one event."""
        self._subscribers.append((name, callback))

    def emit(self, name, **payload):
        with self._lock:
            seq = len(self._table)
            record = {"seq": seq, "name": name, "timestamp": time.time(), "payload": payload}
            self._table.insert(record)
        logger.info("event %s %s", name, payload)
        for wanted, callback in list(self._subscribers):
            if wanted is not None and wanted != name:
                continue
            try:
                callback(name, payload)
            except Exception:
                logger.exception("event subscriber failed for %s", name)
        return record

    def all(self, name=None, bet_id=None):
        """Events in emission order, optionally filtered."""
        with self._lock:
            rows = self._table.all()
        rows = sorted(rows, key=lambda r: r["seq"])
        if name is not None:
            rows = [r for r in rows if r["name"] == name]
        if bet_id is not None:
            rows = [r for r in rows if r["payload"].get("bet_id") == bet_id]
        return [dict(r) for r in rows]
