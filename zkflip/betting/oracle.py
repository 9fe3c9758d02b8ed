"""
Randomness oracle adapter
=========================

Two-phase exchange keyed by bet id:

  1. the registry calls request_randomness(bet_id) once the house commits;
     the request is recorded and handed to the optional requester hook
     (the external VRF service)
  2. the oracle account later calls fulfill_randomness(bet_id, raw_word),
     and raw_word mod 512 becomes the bet's random index

The registry only accepts indices from the adapter attached to it.
"""

import logging
import threading
import time

from zkflip.betting.config import normalize_account
from zkflip.betting.errors import (
    DuplicateFulfillmentError,
    PreconditionError,
    RangeError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

INDEX_SPACE = 512
MAX_RAW_WORD = 2 ** 256


class RandomnessOracle:
    def __init__(self, config, requester=None):
        self.config = config
        self.requester = requester
        self.registry = None
        self._pending = {}
        self._next_request_id = 0
        self._lock = threading.Lock()

    def attach(self, registry):
        self.registry = registry

    def request_randomness(self, bet_id):
        """Record a pending request and forward it; returns the request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._pending[bet_id] = {
                "request_id": request_id,
                "bet_id": bet_id,
                "requested_at": int(time.time()),
            }
        logger.info("randomness requested for bet %d (request %d)", bet_id, request_id)
        if self.requester is not None:
            try:
                self.requester(request_id, bet_id)
            except Exception:
                # request stays pending and visible through pending_requests()
                logger.exception("requester hook failed for bet %d", bet_id)
        return request_id

    def fulfill_randomness(self, bet_id, raw_word, caller):
        """Deliver a raw random word for a pending request."""
        if normalize_account(caller) != self.config.oracle:
            raise UnauthorizedError("only the oracle account may fulfill randomness")
        if isinstance(raw_word, bool) or not isinstance(raw_word, int):
            raise RangeError("random word must be an integer")
        if not 0 <= raw_word < MAX_RAW_WORD:
            raise RangeError("random word must be in [0, 2^256)")

        with self._lock:
            request = self._pending.pop(bet_id, None)
        if request is None:
            raise DuplicateFulfillmentError(
                f"no pending randomness request for bet {bet_id}"
            )

        index = raw_word % INDEX_SPACE
        try:
            self.registry.fulfill_randomness(bet_id, index, source=self)
        except Exception:
            with self._lock:
                self._pending[bet_id] = request
            raise
        return index

    def pending_requests(self):
        with self._lock:
            return sorted(self._pending.values(), key=lambda r: r["request_id"])


class MockRandomnessOracle(RandomnessOracle):
    """Adapter that also lets the admin pick an index directly.

    Refuses to exist unless the configuration allows test randomness.
    """

    def __init__(self, config, requester=None):
        if not config.allow_test_randomness:
            raise PreconditionError("test randomness is disabled")
        super().__init__(config, requester)

    def set_random_index_for_test(self, bet_id, index, caller):
        if normalize_account(caller) != self.config.admin:
            raise UnauthorizedError("only the admin may set test randomness")
        with self._lock:
            request = self._pending.pop(bet_id, None)
        try:
            self.registry.fulfill_randomness(bet_id, index, source=self)
        except Exception:
            if request is not None:
                with self._lock:
                    self._pending[bet_id] = request
            raise
        logger.warning("test randomness %s set for bet %s", index, bet_id)
        return index
