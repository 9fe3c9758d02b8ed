"""
Poseidon permutation and sponge over the BN254 scalar field
===========================================================

The commitment hash of the coin-flip protocol. The same parameters drive the
native hash here and the in-circuit hash in fairness.circuit.

**Parameters** (``DEFAULT_PARAMS``):
  - width t = 3 (capacity 1, rate 2)
  - S-box x^5
  - 8 full rounds (4 before, 4 after) and 57 partial rounds
  - Cauchy MDS matrix M[i][j] = 1 / (i + j + t)
  - round constants: SHA-256(tag || round || position) mod r

**Sponge**:
  state = [len(inputs), 0, 0]; inputs are added into the rate positions two
  at a time with one permutation per pair; the digest is state[1].

Usage:
    >>> poseidon_hash(list(range(1, 17)))
"""

import hashlib

from zkflip.plonk.field import CURVE_ORDER


ROUND_CONSTANT_TAG = b"zkflip.poseidon.bn254.t3"


class PoseidonParams:
    """Parameter set: width, round counts, S-box exponent, MDS and constants.

    rc holds one row of t constants per round (R_F + R_P rows).
    """

    def __init__(self, t, R_F, R_P, alpha, mds, rc):
        self.t = t
        self.R_F = R_F
        self.R_P = R_P
        self.alpha = alpha
        self.mds = mds
        self.rc = rc

    @property
    def rate(self):
        return self.t - 1

    def validate(self):
        if self.t < 2:
            raise ValueError("t must be >= 2")
        if self.R_F % 2 != 0:
            raise ValueError("R_F must be even")
        if self.alpha < 3 or self.alpha % 2 == 0:
            raise ValueError("alpha must be an odd integer >= 3")
        if len(self.mds) != self.t or any(len(row) != self.t for row in self.mds):
            raise ValueError("mds must be t x t")
        if len(self.rc) != self.R_F + self.R_P or any(len(row) != self.t for row in self.rc):
            raise ValueError(f"rc must be {self.R_F + self.R_P} x {self.t}")

    @classmethod
    def derive(cls, t=3, R_F=8, R_P=57, alpha=5, tag=ROUND_CONSTANT_TAG):
        """Build a parameter set from a domain tag."""
        mds = [
            [pow(i + j + t, CURVE_ORDER - 2, CURVE_ORDER) for j in range(t)]
            for i in range(t)
        ]
        rc = []
        for r in range(R_F + R_P):
            row = []
            for i in range(t):
                h = hashlib.sha256(
                    tag + r.to_bytes(2, "big") + i.to_bytes(2, "big")
                ).digest()
                row.append(int.from_bytes(h, "big") % CURVE_ORDER)
            rc.append(row)
        params = cls(t, R_F, R_P, alpha, mds, rc)
        params.validate()
        return params


def sbox(x, alpha=5):
    """x^alpha mod r, with the x·(x²)² fast path for alpha = 5."""
    if alpha == 5:
        x2 = x * x % CURVE_ORDER
        x4 = x2 * x2 % CURVE_ORDER
        return x4 * x % CURVE_ORDER
    return pow(x, alpha, CURVE_ORDER)


def apply_mds(state, mds):
    return [
        sum(m * s for m, s in zip(row, state)) % CURVE_ORDER
        for row in mds
    ]


def is_full_round(r, params):
    """Full rounds are the first and last R_F/2; the rest are partial."""
    half = params.R_F // 2
    return r < half or r >= half + params.R_P


def permute(state, params):
    """Poseidon permutation of a width-t state; returns a new list."""
    if len(state) != params.t:
        raise ValueError(f"state length {len(state)} != t={params.t}")

    x = [int(v) % CURVE_ORDER for v in state]
    for r in range(params.R_F + params.R_P):
        x = [(v + c) % CURVE_ORDER for v, c in zip(x, params.rc[r])]
        if is_full_round(r, params):
            x = [sbox(v, params.alpha) for v in x]
        else:
            x[0] = sbox(x[0], params.alpha)
        x = apply_mds(x, params.mds)
    return x


def poseidon_hash(inputs, params=None):
    """Sponge hash of field elements; the capacity is seeded with len(inputs).

    An odd-length input leaves the last rate slot untouched for the final
    permutation.
    """
    if params is None:
        params = DEFAULT_PARAMS
    rate = params.rate

    state = [0] * params.t
    state[0] = len(inputs) % CURVE_ORDER
    for start in range(0, len(inputs), rate):
        for offset, value in enumerate(inputs[start:start + rate]):
            state[1 + offset] = (state[1 + offset] + int(value)) % CURVE_ORDER
        state = permute(state, params)
    return state[1]


DEFAULT_PARAMS = PoseidonParams.derive()
