"""
Game configuration, bet records, error hierarchy and the event log
"""
import pytest

from zkflip.betting.config import DEFAULTS, GameConfig, normalize_account
from zkflip.betting.errors import (
    FeeTooHighError,
    FlipError,
    InvalidLimitsError,
    ProofRejectedError,
    RangeError,
    StateError,
    UnknownBetError,
    ValidationError,
)
from zkflip.betting.events import BET_CREATED, BET_SETTLED, EventLog
from zkflip.betting.models import Bet, BetStatus
from zkflip.betting.store import BetStore, open_db


class TestGameConfig:
    def test_defaults(self):
        """1% fee, 10% ceiling, test randomness off."""
        config = GameConfig()
        assert config.house_fee_bp == 100
        assert config.max_house_fee_bp == 1000
        assert config.min_bet == DEFAULTS["MIN_BET"]
        assert config.allow_test_randomness is False

    def test_from_mapping_strings(self):
        """Environment-style strings are converted."""
        config = GameConfig.from_mapping({
            "ADMIN": "0xABC", "MIN_BET": "5", "MAX_BET": "50",
            "HOUSE_FEE_BP": "200", "ALLOW_TEST_RANDOMNESS": "true",
        })
        assert config.admin == "0xabc"
        assert (config.min_bet, config.max_bet) == (5, 50)
        assert config.house_fee_bp == 200
        assert config.allow_test_randomness is True

    @pytest.mark.parametrize("fee", [1001, -1, True, "10"])
    def test_bad_fee(self, fee):
        """Fees above the ceiling or not non-negative ints are refused."""
        with pytest.raises(FeeTooHighError):
            GameConfig().set_house_fee(fee)

    @pytest.mark.parametrize("lo,hi", [(0, 1), (5, 4), (1.5, 2)])
    def test_bad_limits(self, lo, hi):
        """0 < min <= max, integers only."""
        with pytest.raises(InvalidLimitsError):
            GameConfig().set_limits(lo, hi)

    def test_to_dict(self):
        """Limits are strings, fees plain ints."""
        data = GameConfig().to_dict()
        assert data["min_bet"] == str(DEFAULTS["MIN_BET"])
        assert data["house_fee_bp"] == 100

    def test_normalize_account(self):
        """Lower-cased and stripped; None stays None."""
        assert normalize_account("  0xAB ") == "0xab"
        assert normalize_account(None) is None


class TestErrors:
    def test_families(self):
        """Concrete errors belong to their family and to FlipError."""
        assert issubclass(RangeError, ValidationError)
        assert issubclass(ValidationError, FlipError)
        assert not issubclass(ProofRejectedError, StateError)

    @pytest.mark.parametrize("exc,status", [
        (RangeError("x"), 400),
        (UnknownBetError(3), 404),
        (ProofRejectedError("x"), 422),
    ])
    def test_http_status(self, exc, status):
        """Each family maps to one HTTP status."""
        assert exc.http_status == status

    def test_to_dict(self):
        """The JSON body carries the stable code and the message."""
        assert UnknownBetError(3).to_dict() == {"error": "unknown_bet", "message": "bet 3 does not exist"}


class TestBet:
    def test_status_is_derived(self):
        """Status follows the fields that are set."""
        bet = Bet(0, "0xp", "0xh", 10, 1)
        assert bet.status == BetStatus.CREATED
        bet.house_commit = 2
        assert bet.status == BetStatus.HOUSE_COMMITTED
        bet.random_index = 0
        assert bet.status == BetStatus.RANDOMNESS_FULFILLED
        bet.settled = True
        assert bet.status == BetStatus.SETTLED

    def test_dict_round_trip(self):
        """Big integers survive the JSON representation."""
        bet = Bet(3, "0xp", "0xh", 10 ** 30, 2 ** 250, house_commit=5, random_index=511)
        data = bet.to_dict()
        assert data["amount"] == str(10 ** 30)
        assert data["status"] == "randomness_fulfilled"
        again = Bet.from_dict(data)
        assert (again.amount, again.player_commit, again.random_index) == (10 ** 30, 2 ** 250, 511)


class TestBetStore:
    def test_upsert_by_id(self):
        """Saving twice keeps one record per id."""
        store = BetStore(open_db())
        bet = Bet(0, "0xp", "0xh", 10, 1)
        store.save(bet)
        bet.house_commit = 2
        store.save(bet)
        assert len(store) == 1
        assert store.get(0).house_commit == 2
        assert store.get(1) is None
        assert store.next_id() == 1


class TestEventLog:
    def test_sequence_and_filters(self):
        """Events are numbered and filterable by name and bet."""
        log = EventLog(open_db())
        log.emit(BET_CREATED, bet_id=0)
        log.emit(BET_CREATED, bet_id=1)
        log.emit(BET_SETTLED, bet_id=0)
        assert [e["seq"] for e in log.all()] == [0, 1, 2]
        assert len(log.all(name=BET_CREATED)) == 2
        assert [e["name"] for e in log.all(bet_id=0)] == [BET_CREATED, BET_SETTLED]

    def test_subscribers(self):
        """Subscribers get (name, payload); a name filter narrows delivery."""
        log = EventLog(open_db())
        everything, settled = [], []
        log.subscribe(lambda name, payload: everything.append(name))
        log.subscribe(lambda name, payload: settled.append(payload), name=BET_SETTLED)
        log.emit(BET_CREATED, bet_id=0)
        log.emit(BET_SETTLED, bet_id=0, winner="0xp")
        assert everything == [BET_CREATED, BET_SETTLED]
        assert settled == [{"bet_id": 0, "winner": "0xp"}]

    def test_failing_subscriber_does_not_undo(self):
        """The event is recorded even when a subscriber raises."""
        log = EventLog(open_db())

        def broken(name, payload):
            raise RuntimeError("boom")

        log.subscribe(broken)
        log.emit(BET_CREATED, bet_id=0)
        assert len(log.all()) == 1
