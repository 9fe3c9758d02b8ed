"""
Game configuration
==================

Plain values the core needs; the Flask app builds one from its config
(defaults, then ZKFLIP_* environment variables, then test overrides).
"""

from zkflip.betting.errors import FeeTooHighError, InvalidLimitsError

BASIS_POINTS = 10000

DEFAULTS = {
    "ADMIN": "0x00000000000000000000000000000000000000a0",
    "ORACLE": "0x00000000000000000000000000000000000000b0",
    "MIN_BET": 10 ** 15,
    "MAX_BET": 10 ** 20,
    "HOUSE_FEE_BP": 100,
    "MAX_HOUSE_FEE_BP": 1000,
    "ALLOW_TEST_RANDOMNESS": False,
}


def normalize_account(account):
    """Accounts are compared case-insensitively; '' and None stay falsy."""
    if account is None:
        return None
    return str(account).strip().lower()


class GameConfig:
    """Roles, stake limits and the fee schedule.

    Attributes:
        admin: account allowed to change fees and limits and to sweep
        oracle: account allowed to deliver randomness
        min_bet, max_bet: inclusive stake bounds
        house_fee_bp: fee in basis points of the pooled stake
        max_house_fee_bp: ceiling for house_fee_bp
        allow_test_randomness: enables MockRandomnessOracle
    """

    def __init__(self, admin=DEFAULTS["ADMIN"], oracle=DEFAULTS["ORACLE"],
                 min_bet=DEFAULTS["MIN_BET"], max_bet=DEFAULTS["MAX_BET"],
                 house_fee_bp=DEFAULTS["HOUSE_FEE_BP"],
                 max_house_fee_bp=DEFAULTS["MAX_HOUSE_FEE_BP"],
                 allow_test_randomness=DEFAULTS["ALLOW_TEST_RANDOMNESS"]):
        self.admin = normalize_account(admin)
        self.oracle = normalize_account(oracle)
        self.max_house_fee_bp = int(max_house_fee_bp)
        self.allow_test_randomness = bool(allow_test_randomness)
        self.min_bet = None
        self.max_bet = None
        self.house_fee_bp = None
        self.set_limits(min_bet, max_bet)
        self.set_house_fee(house_fee_bp)

    def set_limits(self, min_bet, max_bet):
        """Raises InvalidLimitsError unless 0 < min_bet <= max_bet."""
        for value in (min_bet, max_bet):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidLimitsError("bet limits must be integers")
        if min_bet <= 0:
            raise InvalidLimitsError("Invalid min bet")
        if max_bet < min_bet:
            raise InvalidLimitsError("Invalid max bet")
        self.min_bet = min_bet
        self.max_bet = max_bet

    def set_house_fee(self, basis_points):
        """Raises FeeTooHighError above the ceiling."""
        if isinstance(basis_points, bool) or not isinstance(basis_points, int) or basis_points < 0:
            raise FeeTooHighError("fee must be a non-negative integer")
        if basis_points > self.max_house_fee_bp:
            raise FeeTooHighError("Fee too high")
        self.house_fee_bp = basis_points

    @classmethod
    def from_mapping(cls, mapping):
        """Build from a Flask-style config mapping (missing keys use DEFAULTS)."""
        def get(key):
            return mapping.get(key, DEFAULTS[key])

        return cls(
            admin=get("ADMIN"),
            oracle=get("ORACLE"),
            min_bet=int(get("MIN_BET")),
            max_bet=int(get("MAX_BET")),
            house_fee_bp=int(get("HOUSE_FEE_BP")),
            max_house_fee_bp=int(get("MAX_HOUSE_FEE_BP")),
            allow_test_randomness=_as_bool(get("ALLOW_TEST_RANDOMNESS")),
        )

    def to_dict(self):
        return {
            "admin": self.admin,
            "oracle": self.oracle,
            "min_bet": str(self.min_bet),
            "max_bet": str(self.max_bet),
            "house_fee_bp": self.house_fee_bp,
            "max_house_fee_bp": self.max_house_fee_bp,
            "allow_test_randomness": self.allow_test_randomness,
        }


def _as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
