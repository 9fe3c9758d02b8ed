"""
PLONK preprocessor
==================

Fixes the circuit structure once: selector and permutation polynomials are
interpolated and committed. The prover needs the polynomials, the verifier
only the commitments (see verifier.VerificationKey).

Usage:
    >>> preprocessed = preprocess(circuit, srs)
    >>> preprocessed.q_l_comm
"""

import logging

from zkflip.plonk.field import FR, get_root_of_unity, get_roots_of_unity
from zkflip.plonk.circuit import Gate
from zkflip.plonk.polynomial import Polynomial
from zkflip.plonk.kzg import commit
from zkflip.plonk.permutation import build_permutation_polynomials
from zkflip.plonk.utils import next_power_of_2

logger = logging.getLogger(__name__)


class PreprocessedData:
    """Preprocessed circuit shared by prover and verifier.

    Domain:
        n, omega, domain

    Selectors:
        q_l_poly, q_r_poly, q_o_poly, q_m_poly, q_c_poly and their *_comm

    Permutation:
        s_sigma1_poly, s_sigma2_poly, s_sigma3_poly and their *_comm,
        sigma (length 3n)

    Circuit:
        num_public_inputs
    """
    pass


def preprocess(circuit, srs):
    """Pad the circuit to a power of two, then interpolate and commit.

    The circuit is padded in place with all-zero gates, which every witness
    satisfies.
    """
    result = PreprocessedData()

    n = next_power_of_2(circuit.n)
    while len(circuit.gates) < n:
        circuit.gates.append(Gate(FR(0), FR(0), FR(0), FR(0), FR(0)))

    logger.info("preprocessing circuit with %d rows", n)
    result.n = n
    result.omega = get_root_of_unity(n)
    result.domain = get_roots_of_unity(n)

    q_l_evals, q_r_evals, q_o_evals, q_m_evals, q_c_evals = (
        circuit.get_selector_polynomials()
    )

    result.q_l_poly = Polynomial.from_evaluations(q_l_evals, result.omega)
    result.q_r_poly = Polynomial.from_evaluations(q_r_evals, result.omega)
    result.q_o_poly = Polynomial.from_evaluations(q_o_evals, result.omega)
    result.q_m_poly = Polynomial.from_evaluations(q_m_evals, result.omega)
    result.q_c_poly = Polynomial.from_evaluations(q_c_evals, result.omega)

    result.q_l_comm = commit(result.q_l_poly, srs)
    result.q_r_comm = commit(result.q_r_poly, srs)
    result.q_o_comm = commit(result.q_o_poly, srs)
    result.q_m_comm = commit(result.q_m_poly, srs)
    result.q_c_comm = commit(result.q_c_poly, srs)

    result.sigma = circuit.build_copy_constraints()
    s1_evals, s2_evals, s3_evals = build_permutation_polynomials(
        result.sigma, n, result.domain
    )

    result.s_sigma1_poly = Polynomial.from_evaluations(s1_evals, result.omega)
    result.s_sigma2_poly = Polynomial.from_evaluations(s2_evals, result.omega)
    result.s_sigma3_poly = Polynomial.from_evaluations(s3_evals, result.omega)

    result.s_sigma1_comm = commit(result.s_sigma1_poly, srs)
    result.s_sigma2_comm = commit(result.s_sigma2_poly, srs)
    result.s_sigma3_comm = commit(result.s_sigma3_poly, srs)

    result.num_public_inputs = circuit.num_public_inputs

    return result
