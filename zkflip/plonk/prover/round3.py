"""
PLONK prover round 3: quotient polynomial
=========================================

Combines every constraint into C(x) and divides by Z_H(x):

  Gate:        q_L·a + q_R·b + q_O·c + q_M·a·b + q_C + PI
  Permutation: α·[(a + βx + γ)(b + βK1x + γ)(c + βK2x + γ)·z(x)
                 - (a + βS_σ1 + γ)(b + βS_σ2 + γ)(c + βS_σ3 + γ)·z(ωx)]
  Boundary:    α²·(z(x) - 1)·L₁(x)

  t(x) = C(x) / Z_H(x) = t_lo(x) + xⁿ·t_mid(x) + x²ⁿ·t_hi(x)

C(x) has degree up to 4n+5, so every term is evaluated on a coset k·H' of a
larger domain H' (|H'| >= 4n+6) where Z_H never vanishes; the quotient is
taken pointwise and interpolated back with a coset IFFT. A witness that
breaks a constraint leaves a remainder, which shows up as a quotient of
degree above 3n+5.
"""

from zkflip.plonk.field import FR, get_root_of_unity
from zkflip.plonk.polynomial import Polynomial
from zkflip.plonk.kzg import commit
from zkflip.plonk.permutation import K1, K2
from zkflip.plonk.utils import coset_fft, coset_ifft, next_power_of_2, COSET_SHIFT


def _coset_evals(poly, omega_ext, size):
    coeffs = list(poly.coeffs) + [FR(0)] * (size - len(poly.coeffs))
    return coset_fft(coeffs, omega_ext)


def execute(state):
    state.alpha = state.transcript.challenge_scalar(b"alpha")

    n = state.n
    alpha = state.alpha
    beta = state.beta
    gamma = state.gamma
    pp = state.preprocessed

    size = next_power_of_2(4 * n + 6)
    omega_ext = get_root_of_unity(size)
    # z(ωx) on the coset is z shifted by size/n positions
    shift = size // n

    a = _coset_evals(state.a_poly, omega_ext, size)
    b = _coset_evals(state.b_poly, omega_ext, size)
    c = _coset_evals(state.c_poly, omega_ext, size)
    z = _coset_evals(state.z_poly, omega_ext, size)
    pi = _coset_evals(state.pi_poly, omega_ext, size)

    q_l = _coset_evals(pp.q_l_poly, omega_ext, size)
    q_r = _coset_evals(pp.q_r_poly, omega_ext, size)
    q_o = _coset_evals(pp.q_o_poly, omega_ext, size)
    q_m = _coset_evals(pp.q_m_poly, omega_ext, size)
    q_c = _coset_evals(pp.q_c_poly, omega_ext, size)

    s1 = _coset_evals(pp.s_sigma1_poly, omega_ext, size)
    s2 = _coset_evals(pp.s_sigma2_poly, omega_ext, size)
    s3 = _coset_evals(pp.s_sigma3_poly, omega_ext, size)

    # L₁(x) = (1 + x + ... + x^{n-1}) / n
    l1 = _coset_evals(Polynomial([FR(1) / FR(n)] * n), omega_ext, size)

    # (k·ω'ⁱ)ⁿ - 1 repeats with period size/n
    zh_inv = []
    k_n = COSET_SHIFT ** n
    step = omega_ext ** n
    for j in range(shift):
        zh_inv.append(FR(1) / (k_n * step ** j - FR(1)))

    alpha_sq = alpha * alpha
    t_evals = []
    x = COSET_SHIFT
    for i in range(size):
        gate = (
            q_l[i] * a[i] + q_r[i] * b[i] + q_o[i] * c[i]
            + q_m[i] * a[i] * b[i] + q_c[i] + pi[i]
        )
        perm_num = (
            (a[i] + beta * x + gamma)
            * (b[i] + beta * K1 * x + gamma)
            * (c[i] + beta * K2 * x + gamma)
            * z[i]
        )
        perm_den = (
            (a[i] + beta * s1[i] + gamma)
            * (b[i] + beta * s2[i] + gamma)
            * (c[i] + beta * s3[i] + gamma)
            * z[(i + shift) % size]
        )
        boundary = (z[i] - FR(1)) * l1[i]

        t_evals.append(
            (gate + alpha * (perm_num - perm_den) + alpha_sq * boundary)
            * zh_inv[i % shift]
        )
        x = x * omega_ext

    t_poly = Polynomial(coset_ifft(t_evals, omega_ext))
    if len(t_poly.coeffs) > 3 * n + 6:
        raise ValueError(
            "constraint polynomial is not divisible by Z_H(x); "
            "the witness does not satisfy the circuit"
        )

    t_coeffs = list(t_poly.coeffs)
    t_coeffs += [FR(0)] * (3 * n - len(t_coeffs))

    state.t_lo_poly = Polynomial(t_coeffs[:n])
    state.t_mid_poly = Polynomial(t_coeffs[n:2 * n])
    state.t_hi_poly = Polynomial(t_coeffs[2 * n:])

    state.proof.t_lo_comm = commit(state.t_lo_poly, state.srs)
    state.proof.t_mid_comm = commit(state.t_mid_poly, state.srs)
    state.proof.t_hi_comm = commit(state.t_hi_poly, state.srs)

    state.transcript.append_point(b"t_lo_comm", state.proof.t_lo_comm)
    state.transcript.append_point(b"t_mid_comm", state.proof.t_mid_comm)
    state.transcript.append_point(b"t_hi_comm", state.proof.t_hi_comm)
