"""
PLONK prover round 5: linearisation and opening proofs
======================================================

r(x) keeps only the factors the verifier can rebuild from commitments
(selectors, z, S_σ3) and replaces everything else by its value at ζ:

  gate:        q_M(x)·ā·b̄ + q_L(x)·ā + q_R(x)·b̄ + q_O(x)·c̄ + q_C(x) + PI(ζ)
  permutation: α·(ā+βζ+γ)(b̄+βK1ζ+γ)(c̄+βK2ζ+γ)·z(x)
               - α·(ā+βs̄1+γ)(b̄+βs̄2+γ)·β·z̄ω·S_σ3(x)
               - α·(ā+βs̄1+γ)(b̄+βs̄2+γ)·(c̄+γ)·z̄ω
  boundary:    α²·L₁(ζ)·z(x) - α²·L₁(ζ)

W_ζ batches the openings of t, r, a, b, c, S_σ1, S_σ2 at ζ with powers of
v; W_ζω opens z at ζω.
"""

from zkflip.plonk.field import FR
from zkflip.plonk.polynomial import Polynomial, poly_div
from zkflip.plonk.kzg import commit
from zkflip.plonk.permutation import K1, K2
from zkflip.plonk.utils import lagrange_basis_eval


def execute(state):
    state.v = state.transcript.challenge_scalar(b"v")
    v = state.v

    n = state.n
    zeta = state.zeta
    omega = state.omega
    alpha = state.alpha
    beta = state.beta
    gamma = state.gamma
    pp = state.preprocessed
    proof = state.proof

    a_eval = proof.a_eval
    b_eval = proof.b_eval
    c_eval = proof.c_eval
    s_sigma1_eval = proof.s_sigma1_eval
    s_sigma2_eval = proof.s_sigma2_eval
    z_omega_eval = proof.z_omega_eval

    pi_zeta = state.pi_poly.evaluate(zeta)
    l1_zeta = lagrange_basis_eval(0, n, omega, zeta)

    r_poly = (
        pp.q_m_poly * (a_eval * b_eval)
        + pp.q_l_poly * a_eval
        + pp.q_r_poly * b_eval
        + pp.q_o_poly * c_eval
        + pp.q_c_poly
        + Polynomial([pi_zeta])
    )

    perm_z_scalar = (
        alpha
        * (a_eval + beta * zeta + gamma)
        * (b_eval + beta * K1 * zeta + gamma)
        * (c_eval + beta * K2 * zeta + gamma)
    )
    ab_factor = (
        (a_eval + beta * s_sigma1_eval + gamma)
        * (b_eval + beta * s_sigma2_eval + gamma)
    )
    perm_s3_scalar = alpha * ab_factor * beta * z_omega_eval
    perm_const = FR(0) - alpha * ab_factor * z_omega_eval * (c_eval + gamma)

    r_poly = r_poly + state.z_poly * perm_z_scalar
    r_poly = r_poly - pp.s_sigma3_poly * perm_s3_scalar
    r_poly = r_poly + Polynomial([perm_const])

    r_poly = r_poly + state.z_poly * (alpha * alpha * l1_zeta)
    r_poly = r_poly + Polynomial([FR(0) - alpha * alpha * l1_zeta])

    r_eval = r_poly.evaluate(zeta)
    proof.r_eval = r_eval

    zeta_n = zeta ** n
    zeta_2n = zeta_n * zeta_n
    t_combined = (
        state.t_lo_poly
        + state.t_mid_poly * zeta_n
        + state.t_hi_poly * zeta_2n
    )
    t_eval = t_combined.evaluate(zeta)

    numerator = t_combined - Polynomial([t_eval])
    v_power = v
    for poly, value in (
        (r_poly, r_eval),
        (state.a_poly, a_eval),
        (state.b_poly, b_eval),
        (state.c_poly, c_eval),
        (pp.s_sigma1_poly, s_sigma1_eval),
        (pp.s_sigma2_poly, s_sigma2_eval),
    ):
        numerator = numerator + (poly - Polynomial([value])) * v_power
        v_power = v_power * v

    W_zeta_poly, _ = poly_div(numerator, Polynomial([FR(0) - zeta, FR(1)]))

    W_zeta_omega_poly, _ = poly_div(
        state.z_poly - Polynomial([z_omega_eval]),
        Polynomial([FR(0) - zeta * omega, FR(1)]),
    )

    proof.W_zeta_comm = commit(W_zeta_poly, state.srs)
    proof.W_zeta_omega_comm = commit(W_zeta_omega_poly, state.srs)
