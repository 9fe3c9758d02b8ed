"""
PLONK prover round 2: permutation accumulator
=============================================

Derives β, γ, computes the grand product z(x) and commits to it, blinded
with three random coefficients since z is opened at ζ and ζω.
"""

from zkflip.plonk.polynomial import Polynomial
from zkflip.plonk.kzg import commit
from zkflip.plonk.permutation import compute_accumulator
from zkflip.plonk.prover.round1 import _add_blinding


def execute(state):
    state.beta = state.transcript.challenge_scalar(b"beta")
    state.gamma = state.transcript.challenge_scalar(b"gamma")

    z_evals = compute_accumulator(
        state.a_vals, state.b_vals, state.c_vals,
        state.preprocessed.sigma, state.n, state.domain,
        state.beta, state.gamma
    )

    z_poly = Polynomial.from_evaluations(z_evals, state.omega)
    state.z_poly = _add_blinding(z_poly, Polynomial.vanishing(state.n), 3)

    state.proof.z_comm = commit(state.z_poly, state.srs)
    state.transcript.append_point(b"z_comm", state.proof.z_comm)
