"""
Bet records
===========

A bet moves Created -> HouseCommitted -> RandomnessFulfilled -> Settled and
never back. The status is derived from which fields are set, so it cannot
disagree with them.
"""

import enum
import time


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class BetStatus(enum.Enum):
    CREATED = "created"
    HOUSE_COMMITTED = "house_committed"
    RANDOMNESS_FULFILLED = "randomness_fulfilled"
    SETTLED = "settled"


class Bet:
    """One wager between a player and a house.

    Big integers (amount, commitments, payout, fee) are Python ints; to_dict()
    renders them as decimal strings for JSON.
    """

    def __init__(self, bet_id, player, house, amount, player_commit,
                 house_commit=None, random_index=None, settled=False,
                 timestamp=None, winner=None, payout=None, fee=None,
                 outcome=None):
        self.id = bet_id
        self.player = player
        self.house = house
        self.amount = amount
        self.player_commit = player_commit
        self.house_commit = house_commit
        self.random_index = random_index
        self.settled = settled
        self.timestamp = int(time.time()) if timestamp is None else timestamp
        self.winner = winner
        self.payout = payout
        self.fee = fee
        self.outcome = outcome

    @property
    def status(self):
        if self.settled:
            return BetStatus.SETTLED
        if self.random_index is not None:
            return BetStatus.RANDOMNESS_FULFILLED
        if self.house_commit is not None:
            return BetStatus.HOUSE_COMMITTED
        return BetStatus.CREATED

    def is_counterparty(self, account):
        return account in (self.player, self.house)

    def to_dict(self):
        return {
            "id": self.id,
            "player": self.player,
            "house": self.house,
            "amount": str(self.amount),
            "player_commit": str(self.player_commit),
            "house_commit": _opt_str(self.house_commit),
            "random_index": self.random_index,
            "settled": self.settled,
            "timestamp": self.timestamp,
            "status": self.status.value,
            "winner": self.winner,
            "payout": _opt_str(self.payout),
            "fee": _opt_str(self.fee),
            "outcome": self.outcome,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            bet_id=data["id"],
            player=data["player"],
            house=data["house"],
            amount=int(data["amount"]),
            player_commit=int(data["player_commit"]),
            house_commit=_opt_int(data.get("house_commit")),
            random_index=data.get("random_index"),
            settled=data.get("settled", False),
            timestamp=data.get("timestamp"),
            winner=data.get("winner"),
            payout=_opt_int(data.get("payout")),
            fee=_opt_int(data.get("fee")),
            outcome=data.get("outcome"),
        )

    def copy(self):
        return Bet.from_dict(self.to_dict())

    def __repr__(self):
        return f"Bet(id={self.id}, status={self.status.value}, amount={self.amount})"


def _opt_str(value):
    return None if value is None else str(value)


def _opt_int(value):
    return None if value is None else int(value)
