"""
PLONK verifier
==============

  1. replay the transcript (public inputs first) → β, γ, α, ζ, v, u
  2. compute Z_H(ζ), L₁(ζ) and PI(ζ) from the public values
  3. build the linearisation commitment [D]₁ and its constant part r₀
  4. fold everything opened at ζ into [F]₁ and the scalar E
  5. one pairing equation covers both openings:

       e([W_ζ]₁ + u·[W_ζω]₁, [τ]₂)
         == e(ζ·[W_ζ]₁ + u·ζω·[W_ζω]₁ + [F]₁ + u·[z]₁ - E·G₁, G₂)

The verifier needs only a VerificationKey (domain size, selector and
permutation commitments, two G2 points), never the SRS G1 powers.

Usage:
    >>> vk = VerificationKey.from_preprocessed(preprocessed, srs)
    >>> verify(proof, public_inputs, vk)
"""

import logging

from py_ecc import bn128

from zkflip.plonk.field import FR, G1, ec_mul, ec_add, ec_neg, ec_pairing
from zkflip.plonk.transcript import Transcript
from zkflip.plonk.permutation import K1, K2
from zkflip.plonk.utils import (
    vanishing_poly_eval,
    lagrange_basis_eval,
    public_input_poly_eval,
)

logger = logging.getLogger(__name__)


class VerificationKey:
    """Everything the verifier needs about one preprocessed circuit."""

    SELECTOR_FIELDS = (
        "q_l_comm", "q_r_comm", "q_o_comm", "q_m_comm", "q_c_comm",
        "s_sigma1_comm", "s_sigma2_comm", "s_sigma3_comm",
    )

    def __init__(self, n, omega, num_public_inputs, commitments, g2_powers):
        self.n = n
        self.omega = omega if isinstance(omega, FR) else FR(omega)
        self.num_public_inputs = num_public_inputs
        for name in self.SELECTOR_FIELDS:
            setattr(self, name, commitments[name])
        self.g2_powers = g2_powers

    @classmethod
    def from_preprocessed(cls, preprocessed, srs):
        commitments = {
            name: getattr(preprocessed, name) for name in cls.SELECTOR_FIELDS
        }
        return cls(
            preprocessed.n,
            preprocessed.omega,
            preprocessed.num_public_inputs,
            commitments,
            list(srs.g2_powers[:2]),
        )


def _well_formed(proof):
    for name in ("a_comm", "b_comm", "c_comm", "z_comm", "t_lo_comm",
                 "t_mid_comm", "t_hi_comm", "W_zeta_comm", "W_zeta_omega_comm"):
        point = getattr(proof, name, None)
        if point is not None and not bn128.is_on_curve(point, bn128.b):
            return False
    for name in ("a_eval", "b_eval", "c_eval", "s_sigma1_eval",
                 "s_sigma2_eval", "z_omega_eval", "r_eval"):
        if not isinstance(getattr(proof, name, None), FR):
            return False
    return True


def verify(proof, public_inputs, vk):
    """Verify a PLONK proof against a verification key.

    Args:
        proof: Proof from prover.prove()
        public_inputs: values of the public-input rows, in order
        vk: VerificationKey

    Returns:
        bool: True when the proof is accepted
    """
    if len(public_inputs) != vk.num_public_inputs:
        logger.debug("wrong public input count: %d", len(public_inputs))
        return False
    if not _well_formed(proof):
        logger.debug("malformed proof rejected")
        return False

    public_inputs = [v if isinstance(v, FR) else FR(v) for v in public_inputs]
    n = vk.n
    omega = vk.omega

    transcript = Transcript()
    for value in public_inputs:
        transcript.append_scalar(b"public_input", value)

    transcript.append_point(b"a_comm", proof.a_comm)
    transcript.append_point(b"b_comm", proof.b_comm)
    transcript.append_point(b"c_comm", proof.c_comm)

    beta = transcript.challenge_scalar(b"beta")
    gamma = transcript.challenge_scalar(b"gamma")

    transcript.append_point(b"z_comm", proof.z_comm)

    alpha = transcript.challenge_scalar(b"alpha")

    transcript.append_point(b"t_lo_comm", proof.t_lo_comm)
    transcript.append_point(b"t_mid_comm", proof.t_mid_comm)
    transcript.append_point(b"t_hi_comm", proof.t_hi_comm)

    zeta = transcript.challenge_scalar(b"zeta")

    transcript.append_scalar(b"a_eval", proof.a_eval)
    transcript.append_scalar(b"b_eval", proof.b_eval)
    transcript.append_scalar(b"c_eval", proof.c_eval)
    transcript.append_scalar(b"s_sigma1_eval", proof.s_sigma1_eval)
    transcript.append_scalar(b"s_sigma2_eval", proof.s_sigma2_eval)
    transcript.append_scalar(b"z_omega_eval", proof.z_omega_eval)

    v = transcript.challenge_scalar(b"v")
    u = transcript.challenge_scalar(b"u")

    a_eval = proof.a_eval
    b_eval = proof.b_eval
    c_eval = proof.c_eval
    s_sigma1_eval = proof.s_sigma1_eval
    s_sigma2_eval = proof.s_sigma2_eval
    z_omega_eval = proof.z_omega_eval

    zh_zeta = vanishing_poly_eval(n, zeta)
    if zh_zeta == FR(0):
        return False
    l1_zeta = lagrange_basis_eval(0, n, omega, zeta)
    pi_zeta = public_input_poly_eval(public_inputs, n, omega, zeta)

    # [D]₁: commitment to the non-constant part of r(x)
    D = ec_mul(vk.q_m_comm, a_eval * b_eval)
    D = ec_add(D, ec_mul(vk.q_l_comm, a_eval))
    D = ec_add(D, ec_mul(vk.q_r_comm, b_eval))
    D = ec_add(D, ec_mul(vk.q_o_comm, c_eval))
    D = ec_add(D, vk.q_c_comm)

    perm_z_scalar = (
        alpha
        * (a_eval + beta * zeta + gamma)
        * (b_eval + beta * K1 * zeta + gamma)
        * (c_eval + beta * K2 * zeta + gamma)
    )
    D = ec_add(D, ec_mul(proof.z_comm, perm_z_scalar + alpha * alpha * l1_zeta))

    ab_factor = (
        (a_eval + beta * s_sigma1_eval + gamma)
        * (b_eval + beta * s_sigma2_eval + gamma)
    )
    perm_s3_scalar = alpha * ab_factor * beta * z_omega_eval
    D = ec_add(D, ec_neg(ec_mul(vk.s_sigma3_comm, perm_s3_scalar)))

    # r₀: constant part of r(x)
    r_0 = (
        pi_zeta
        - alpha * ab_factor * z_omega_eval * (c_eval + gamma)
        - alpha * alpha * l1_zeta
    )

    zeta_n = zeta ** n
    zeta_2n = zeta_n * zeta_n
    t_comm = ec_add(
        proof.t_lo_comm,
        ec_add(
            ec_mul(proof.t_mid_comm, zeta_n),
            ec_mul(proof.t_hi_comm, zeta_2n)
        )
    )

    F = t_comm
    F = ec_add(F, ec_mul(D, v))
    F = ec_add(F, ec_mul(G1, v * r_0))

    v_pow = v * v
    for point in (proof.a_comm, proof.b_comm, proof.c_comm,
                  vk.s_sigma1_comm, vk.s_sigma2_comm):
        F = ec_add(F, ec_mul(point, v_pow))
        v_pow = v_pow * v

    # r(ζ) = t(ζ)·Z_H(ζ)
    r_eval = proof.r_eval
    t_eval = r_eval / zh_zeta

    e_scalar = t_eval + v * r_eval
    v_pow = v * v
    for value in (a_eval, b_eval, c_eval, s_sigma1_eval, s_sigma2_eval):
        e_scalar = e_scalar + v_pow * value
        v_pow = v_pow * v
    e_scalar = e_scalar + u * z_omega_eval

    E = ec_mul(G1, e_scalar)

    A = ec_add(proof.W_zeta_comm, ec_mul(proof.W_zeta_omega_comm, u))

    B = ec_mul(proof.W_zeta_comm, zeta)
    B = ec_add(B, ec_mul(proof.W_zeta_omega_comm, u * zeta * omega))
    B = ec_add(B, F)
    B = ec_add(B, ec_mul(proof.z_comm, u))
    B = ec_add(B, ec_neg(E))

    lhs = ec_pairing(vk.g2_powers[1], A)
    rhs = ec_pairing(vk.g2_powers[0], B)

    return lhs == rhs
