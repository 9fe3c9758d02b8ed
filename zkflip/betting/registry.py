"""
Bet registry
============

Single owner of every Bet record. Each transition

  1. takes the bet's lock
  2. validates everything (raising before any mutation)
  3. under the store lock, persists the record, moves ledger value and
     appends its notifications

Readers (get_bet_info, pool_status, events) take the store lock too, so they
see a transition either entirely or not at all.

Lifecycle:

  create_bet         -> Created            (player stake locked)
  house_commit       -> HouseCommitted     (house stake locked, randomness requested)
  fulfill_randomness -> RandomnessFulfilled (attached oracle only)
  settle_with_proof  -> Settled            (proof verified, winner paid)

There is no cancel or expiry: a bet whose randomness never arrives, or whose
counterparties never settle, keeps its stakes locked.
"""

import logging
import threading

from zkflip.betting import events
from zkflip.betting.config import normalize_account
from zkflip.betting.errors import (
    AlreadyCommittedError,
    AlreadySettledError,
    InvalidCommitmentError,
    InvalidCounterpartyError,
    InvalidPublicInputError,
    PreconditionError,
    ProofRejectedError,
    RangeError,
    StakeMismatchError,
    UnauthorizedError,
    UnknownBetError,
)
from zkflip.betting.events import EventLog
from zkflip.betting.ledger import Ledger
from zkflip.betting.models import Bet, BetStatus, ZERO_ADDRESS
from zkflip.betting.settlement import SettlementEngine
from zkflip.betting.store import BetStore, SettingsStore, open_db
from zkflip.fairness.commitment import MAX_INDEX, is_commitment

logger = logging.getLogger(__name__)


class BetRegistry:
    """Owns bets, ledger and event log for one game instance.

    Args:
        config: GameConfig (roles, limits, fee)
        verifier: object with verify(proof, public_inputs) -> bool
        db: TinyDB instance; in-memory when omitted
        settlement: payout strategy, SettlementEngine(config) by default
        oracle: randomness adapter to attach (see attach_oracle)
    """

    def __init__(self, config, verifier, db=None, settlement=None, oracle=None):
        self.config = config
        self.verifier = verifier
        self.db = db if db is not None else open_db()
        self._store_lock = threading.RLock()
        self.store = BetStore(self.db, self._store_lock)
        self.events = EventLog(self.db, self._store_lock)
        self.ledger = Ledger(self.db, self._store_lock)
        self.settings = SettingsStore(self.db, self._store_lock)
        self._restore_settings()
        self.settlement = settlement if settlement is not None else SettlementEngine(config)
        self.oracle = None
        self._id_lock = threading.Lock()
        self._locks_guard = threading.Lock()
        self._bet_locks = {}
        self._next_id = self.store.next_id()
        self._admin_lock = threading.RLock()
        if oracle is not None:
            self.attach_oracle(oracle)

    def attach_oracle(self, oracle):
        """Make `oracle` the only accepted source of randomness.

        Bets still waiting for randomness (after a restart) are requested again.
        """
        self.oracle = oracle
        oracle.attach(self)
        for bet in self.list_bets(BetStatus.HOUSE_COMMITTED):
            oracle.request_randomness(bet.id)

    # -- helpers -------------------------------------------------------------

    def _restore_settings(self):
        """Re-apply fee and limits an admin changed before a restart."""
        saved = self.settings.load()
        if "house_fee_bp" in saved:
            self.config.set_house_fee(int(saved["house_fee_bp"]))
        if "min_bet" in saved and "max_bet" in saved:
            self.config.set_limits(int(saved["min_bet"]), int(saved["max_bet"]))
        if saved:
            logger.info("restored admin settings %s", saved)

    def _lock_for(self, bet_id):
        with self._locks_guard:
            lock = self._bet_locks.get(bet_id)
            if lock is None:
                lock = self._bet_locks[bet_id] = threading.RLock()
            return lock

    def _load(self, bet_id):
        bet = self.store.get(bet_id) if isinstance(bet_id, int) else None
        if bet is None:
            raise UnknownBetError(bet_id)
        return bet

    def _allocate_id(self):
        with self._id_lock:
            bet_id = self._next_id
            self._next_id += 1
            return bet_id

    def _check_stake(self, stake):
        if isinstance(stake, bool) or not isinstance(stake, int):
            raise RangeError("stake must be an integer")
        if not self.config.min_bet <= stake <= self.config.max_bet:
            raise RangeError(
                f"stake {stake} outside [{self.config.min_bet}, {self.config.max_bet}]"
            )

    def _require_admin(self, caller):
        if normalize_account(caller) != self.config.admin:
            raise UnauthorizedError("admin only")

    # -- transitions ---------------------------------------------------------

    def create_bet(self, caller, house, player_commit, stake):
        """Open a bet as `caller` (the player) against `house`."""
        player = normalize_account(caller)
        house = normalize_account(house)
        self._check_stake(stake)
        if not player:
            raise InvalidCounterpartyError("player account is required")
        if not house or house == ZERO_ADDRESS:
            raise InvalidCounterpartyError("Invalid house address")
        if house == player:
            raise InvalidCounterpartyError("Cannot bet against yourself")
        if not is_commitment(player_commit):
            raise InvalidCommitmentError("player commitment must be a field element")

        bet_id = self._allocate_id()
        with self._lock_for(bet_id):
            bet = Bet(bet_id, player, house, stake, player_commit)
            with self._store_lock:
                self.store.save(bet)
                self.ledger.lock_stake(stake)
                self.events.emit(events.BET_CREATED, bet_id=bet_id, player=player,
                                 house=house, amount=str(stake))
                self.events.emit(events.PLAYER_COMMITTED, bet_id=bet_id, player=player,
                                 player_commit=str(player_commit))
        logger.info("bet %d created: %s vs %s for %d", bet_id, player, house, stake)
        return bet.copy()

    def house_commit(self, bet_id, caller, house_commit, stake):
        """House answers with its commitment and an equal stake."""
        with self._lock_for(bet_id):
            bet = self._load(bet_id)
            if normalize_account(caller) != bet.house:
                raise UnauthorizedError("Only designated house can commit")
            if bet.status != BetStatus.CREATED:
                raise AlreadyCommittedError("House already committed")
            if not is_commitment(house_commit):
                raise InvalidCommitmentError("house commitment must be a field element")
            if isinstance(stake, bool) or not isinstance(stake, int) or stake != bet.amount:
                raise StakeMismatchError(f"house stake must equal {bet.amount}")
            if self.oracle is None:
                raise PreconditionError("no randomness oracle attached")

            bet.house_commit = house_commit
            with self._store_lock:
                self.store.save(bet)
                self.ledger.lock_stake(stake)
                self.events.emit(events.HOUSE_COMMITTED, bet_id=bet_id, house=bet.house,
                                 house_commit=str(house_commit))
            request_id = self.oracle.request_randomness(bet_id)
            self.events.emit(events.RANDOMNESS_REQUESTED, bet_id=bet_id,
                             request_id=request_id)
            return bet.copy()

    def fulfill_randomness(self, bet_id, index, source):
        """Callback from the attached oracle adapter."""
        if self.oracle is None or source is not self.oracle:
            raise UnauthorizedError("Only VRF coordinator can fulfill")
        with self._lock_for(bet_id):
            bet = self._load(bet_id)
            if bet.status != BetStatus.HOUSE_COMMITTED:
                raise PreconditionError(
                    f"bet {bet_id} is {bet.status.value}, expected house_committed"
                )
            if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= MAX_INDEX:
                raise RangeError(f"random index must be in [0, {MAX_INDEX}]")

            bet.random_index = index
            with self._store_lock:
                self.store.save(bet)
                self.events.emit(events.RANDOMNESS_FULFILLED, bet_id=bet_id,
                                 random_index=index)
            return bet.copy()

    def settle_with_proof(self, bet_id, caller, proof, public_inputs,
                          player_bit=None, house_bit=None):
        """Verify the fairness proof and pay the winner.

        public_inputs is [player_commit, house_commit, random_index, outcome].
        player_bit and house_bit are optional claimed disclosures. They must XOR
        to the proven outcome; nothing else checks them against the preimages.
        """
        with self._lock_for(bet_id):
            bet = self._load(bet_id)
            if not bet.is_counterparty(normalize_account(caller)):
                raise UnauthorizedError("Not authorized")
            if bet.settled:
                raise AlreadySettledError("Bet already settled")
            if bet.status != BetStatus.RANDOMNESS_FULFILLED:
                raise PreconditionError("Randomness not yet fulfilled")
            if self.verifier is None:
                raise PreconditionError("no verification key loaded")

            outcome = self._check_public_inputs(bet, public_inputs)
            self._check_disclosed_bits(player_bit, house_bit, outcome)
            if not self.verifier.verify(proof, list(public_inputs)):
                raise ProofRejectedError("Invalid proof")

            result = self.settlement.settle(bet, outcome)
            bet.settled = True
            bet.winner = result.winner
            bet.payout = result.payout
            bet.fee = result.fee
            bet.outcome = outcome
            with self._store_lock:
                self.ledger.settle(result.pooled, result.payout, result.fee, result.winner)
                self.store.save(bet)
                self.events.emit(events.BET_SETTLED, bet_id=bet_id, winner=result.winner,
                                 payout=str(result.payout), player_bit=player_bit,
                                 house_bit=house_bit, outcome=outcome)
        logger.info("bet %d settled: %s wins %d", bet_id, result.winner, result.payout)
        return bet.copy()

    def _check_public_inputs(self, bet, public_inputs):
        if not isinstance(public_inputs, (list, tuple)) or len(public_inputs) != 4:
            raise InvalidPublicInputError("expected 4 public inputs")
        for value in public_inputs:
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidPublicInputError("public inputs must be integers")
        values = list(public_inputs)
        if values[0] != bet.player_commit:
            raise InvalidPublicInputError("Invalid player commit")
        if values[1] != bet.house_commit:
            raise InvalidPublicInputError("Invalid house commit")
        if values[2] != bet.random_index:
            raise InvalidPublicInputError("Invalid random index")
        if values[3] not in (0, 1):
            raise InvalidPublicInputError("Invalid outcome")
        return values[3]

    @staticmethod
    def _check_disclosed_bits(player_bit, house_bit, outcome):
        if player_bit is None and house_bit is None:
            return
        if player_bit not in (0, 1) or house_bit not in (0, 1):
            raise InvalidPublicInputError("disclosed bits must both be 0 or 1")
        if player_bit ^ house_bit != outcome:
            raise InvalidPublicInputError("disclosed bits do not match the outcome")

    # -- reads ---------------------------------------------------------------

    def get_bet_info(self, bet_id):
        return self._load(bet_id).copy()

    @property
    def next_bet_id(self):
        with self._id_lock:
            return self._next_id

    def list_bets(self, status=None):
        bets = self.store.all()
        if status is not None:
            bets = [b for b in bets if b.status == status]
        return bets

    def pool_status(self):
        return self.ledger.snapshot()

    # -- admin ---------------------------------------------------------------

    def update_house_fee(self, caller, basis_points):
        self._require_admin(caller)
        with self._admin_lock, self._store_lock:
            old = self.config.house_fee_bp
            self.config.set_house_fee(basis_points)
            self.settings.save(house_fee_bp=basis_points)
            self.events.emit(events.HOUSE_FEE_UPDATED, old_fee=old, new_fee=basis_points)
        return basis_points

    def update_bet_limits(self, caller, min_bet, max_bet):
        self._require_admin(caller)
        with self._admin_lock, self._store_lock:
            self.config.set_limits(min_bet, max_bet)
            self.settings.save(min_bet=min_bet, max_bet=max_bet)
            self.events.emit(events.BET_LIMITS_UPDATED, min_bet=str(min_bet),
                             max_bet=str(max_bet))
        return min_bet, max_bet

    def emergency_withdraw(self, caller):
        """Sweep the unlocked surplus (fees, stray deposits) to the admin."""
        self._require_admin(caller)
        with self._admin_lock, self._store_lock:
            amount = self.ledger.sweep(self.config.admin)
            self.events.emit(events.EMERGENCY_WITHDRAWAL, recipient=self.config.admin,
                             amount=str(amount))
        return amount
