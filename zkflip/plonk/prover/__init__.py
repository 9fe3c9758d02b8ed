"""
PLONK prover: five-round protocol driver
========================================

  public inputs  absorbed into the transcript first
  round 1        wire polynomials           [a], [b], [c]
  round 2        beta, gamma, accumulator   [z]
  round 3        alpha, quotient t(x)       [t_lo], [t_mid], [t_hi]
  round 4        zeta, evaluations          a, b, c, s_sigma1, s_sigma2, z(zeta*omega)
  round 5        v, linearisation           r, [W_zeta], [W_zeta_omega]

Usage:
    >>> from zkflip.plonk.prover import prove
    >>> proof = prove(circuit, a_vals, b_vals, c_vals, public_inputs, preprocessed, srs)
"""

import logging

from zkflip.plonk.field import FR
from zkflip.plonk.transcript import Transcript
from zkflip.plonk.prover import round1, round2, round3, round4, round5

logger = logging.getLogger(__name__)


class Proof:
    """PLONK proof: nine G1 commitments and seven scalar evaluations.

    Round 1: a_comm, b_comm, c_comm
    Round 2: z_comm
    Round 3: t_lo_comm, t_mid_comm, t_hi_comm
    Round 4: a_eval, b_eval, c_eval, s_sigma1_eval, s_sigma2_eval,
             z_omega_eval
    Round 5: r_eval, W_zeta_comm, W_zeta_omega_comm
    """

    COMMITMENT_FIELDS = (
        "a_comm", "b_comm", "c_comm", "z_comm",
        "t_lo_comm", "t_mid_comm", "t_hi_comm",
        "W_zeta_comm", "W_zeta_omega_comm",
    )
    EVALUATION_FIELDS = (
        "a_eval", "b_eval", "c_eval",
        "s_sigma1_eval", "s_sigma2_eval", "z_omega_eval", "r_eval",
    )

    def __init__(self):
        # Round 1
        self.a_comm = None
        self.b_comm = None
        self.c_comm = None
        # Round 2
        self.z_comm = None
        # Round 3
        self.t_lo_comm = None
        self.t_mid_comm = None
        self.t_hi_comm = None
        # Round 4
        self.a_eval = None
        self.b_eval = None
        self.c_eval = None
        self.s_sigma1_eval = None
        self.s_sigma2_eval = None
        self.z_omega_eval = None
        # Round 5
        self.r_eval = None
        self.W_zeta_comm = None
        self.W_zeta_omega_comm = None


class ProverState:
    """State shared between the rounds.

    Inputs: a_vals, b_vals, c_vals (padded to n), public_inputs,
    preprocessed, srs, transcript.

    Filled in by the rounds: pi_poly, a_poly, b_poly, c_poly, z_poly,
    t_lo_poly, t_mid_poly, t_hi_poly and the challenges
    beta, gamma, alpha, zeta, v.
    """

    def __init__(self, a_vals, b_vals, c_vals, public_inputs, preprocessed, srs):
        self.n = preprocessed.n
        self.omega = preprocessed.omega
        self.domain = preprocessed.domain

        self.a_vals = _pad(a_vals, self.n)
        self.b_vals = _pad(b_vals, self.n)
        self.c_vals = _pad(c_vals, self.n)
        self.public_inputs = [v if isinstance(v, FR) else FR(v) for v in public_inputs]
        self.preprocessed = preprocessed
        self.srs = srs

        self.transcript = Transcript()

        self.a_poly = None
        self.b_poly = None
        self.c_poly = None
        self.z_poly = None
        self.t_lo_poly = None
        self.t_mid_poly = None
        self.t_hi_poly = None
        self.pi_poly = None

        self.beta = None
        self.gamma = None
        self.alpha = None
        self.zeta = None
        self.v = None

        self.proof = Proof()

    def build_proof(self):
        return self.proof


def _pad(values, n):
    values = [v if isinstance(v, FR) else FR(v) for v in values]
    if len(values) > n:
        raise ValueError(f"witness has {len(values)} rows, domain has {n}")
    return values + [FR(0)] * (n - len(values))


def prove(circuit, a_vals, b_vals, c_vals, public_inputs, preprocessed, srs):
    """Run the five prover rounds and return a Proof.

    Args:
        circuit: the Circuit that was preprocessed
        a_vals, b_vals, c_vals: wire values per row (padded with zeros to n)
        public_inputs: values of the public-input rows, in order
        preprocessed: PreprocessedData for the circuit
        srs: SRS used for preprocessing

    Raises:
        ValueError: wrong number of public inputs, or the witness does not
            satisfy the circuit (detected in round 3)
    """
    if len(public_inputs) != preprocessed.num_public_inputs:
        raise ValueError(
            f"expected {preprocessed.num_public_inputs} public inputs, "
            f"got {len(public_inputs)}"
        )

    state = ProverState(a_vals, b_vals, c_vals, public_inputs, preprocessed, srs)
    logger.debug("proving over %d rows", state.n)

    round1.execute(state)
    round2.execute(state)
    round3.execute(state)
    round4.execute(state)
    round5.execute(state)

    return state.build_proof()
