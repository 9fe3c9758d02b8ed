"""
Settlement
==========

    pooled = 2 * stake
    fee    = floor(pooled * house_fee_bp / 10000)
    payout = pooled - fee

outcome 1 pays the player, outcome 0 pays the house. The fee stays in the
pool as house revenue until an admin sweep.
"""

import logging

from zkflip.betting.config import BASIS_POINTS
from zkflip.betting.errors import InvalidPublicInputError

logger = logging.getLogger(__name__)

OUTCOME_HOUSE_WINS = 0
OUTCOME_PLAYER_WINS = 1


class Settlement:
    def __init__(self, winner, pooled, fee, payout, outcome):
        self.winner = winner
        self.pooled = pooled
        self.fee = fee
        self.payout = payout
        self.outcome = outcome

    def __repr__(self):
        return (f"Settlement(winner={self.winner}, payout={self.payout}, "
                f"fee={self.fee}, outcome={self.outcome})")


class SettlementEngine:
    """Payout rule for the dual-commitment game.

    The registry receives one at construction; a different game variant
    plugs in its own engine with the same `settle(bet, outcome)` method.
    """

    def __init__(self, config):
        self.config = config

    def split(self, stake):
        pooled = 2 * stake
        fee = pooled * self.config.house_fee_bp // BASIS_POINTS
        return pooled, fee, pooled - fee

    def winner(self, bet, outcome):
        if outcome == OUTCOME_PLAYER_WINS:
            return bet.player
        if outcome == OUTCOME_HOUSE_WINS:
            return bet.house
        raise InvalidPublicInputError(f"outcome must be 0 or 1, got {outcome}")

    def settle(self, bet, outcome):
        pooled, fee, payout = self.split(bet.amount)
        result = Settlement(self.winner(bet, outcome), pooled, fee, payout, outcome)
        logger.debug("bet %d: %r", bet.id, result)
        return result
