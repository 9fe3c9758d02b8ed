"""
PLONK prover round 1: wire polynomial commitments
=================================================

  1. absorb the public inputs into the transcript and build PI(x)
  2. interpolate a(x), b(x), c(x) from the wire values
  3. blind: a'(x) = a(x) + (b₁·x + b₂)·Z_H(x), values on H unchanged
  4. commit and append [a]₁, [b]₁, [c]₁ to the transcript
"""

import secrets

from zkflip.plonk.field import FR, CURVE_ORDER
from zkflip.plonk.polynomial import Polynomial
from zkflip.plonk.kzg import commit
from zkflip.plonk.utils import public_input_polynomial


def execute(state):
    n = state.n
    omega = state.omega

    for value in state.public_inputs:
        state.transcript.append_scalar(b"public_input", value)
    state.pi_poly = public_input_polynomial(state.public_inputs, n, omega)

    a_poly = Polynomial.from_evaluations(state.a_vals, omega)
    b_poly = Polynomial.from_evaluations(state.b_vals, omega)
    c_poly = Polynomial.from_evaluations(state.c_vals, omega)

    zh = Polynomial.vanishing(n)
    state.a_poly = _add_blinding(a_poly, zh, 2)
    state.b_poly = _add_blinding(b_poly, zh, 2)
    state.c_poly = _add_blinding(c_poly, zh, 2)

    state.proof.a_comm = commit(state.a_poly, state.srs)
    state.proof.b_comm = commit(state.b_poly, state.srs)
    state.proof.c_comm = commit(state.c_poly, state.srs)

    state.transcript.append_point(b"a_comm", state.proof.a_comm)
    state.transcript.append_point(b"b_comm", state.proof.b_comm)
    state.transcript.append_point(b"c_comm", state.proof.c_comm)


def _add_blinding(poly, zh, num_blinds):
    """poly + (r₀ + r₁·x + ...)·Z_H with random rᵢ."""
    blind_coeffs = [FR(secrets.randbelow(CURVE_ORDER)) for _ in range(num_blinds)]
    return poly + Polynomial(blind_coeffs) * zh
