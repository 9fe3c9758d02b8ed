"""
PLONK permutation argument
==========================

Copy constraints are encoded as a permutation σ over the 3n wire positions
and proven with a grand product.

The three wire columns are mapped to disjoint cosets of H:
  - a: H, b: K1·H, c: K2·H   (K1 = 2, K2 = 3)

Grand product accumulator:
  z(ω⁰) = 1
  z(ωⁱ⁺¹) = z(ωⁱ) · ∏ₖ (wₖ(ωⁱ) + β·id_k(ωⁱ) + γ) / (wₖ(ωⁱ) + β·σₖ(ωⁱ) + γ)
"""

from zkflip.plonk.field import FR


K1 = FR(2)
K2 = FR(3)


def build_permutation_polynomials(sigma, n, domain):
    """Return the evaluations of S_σ1, S_σ2, S_σ3 over the domain.

    Position p < n maps to ω^p, n <= p < 2n to K1·ω^(p-n) and the rest to
    K2·ω^(p-2n).
    """
    def position_to_value(pos):
        if pos < n:
            return domain[pos]
        elif pos < 2 * n:
            return K1 * domain[pos - n]
        else:
            return K2 * domain[pos - 2 * n]

    s_sigma1_evals = [position_to_value(sigma[i]) for i in range(n)]
    s_sigma2_evals = [position_to_value(sigma[n + i]) for i in range(n)]
    s_sigma3_evals = [position_to_value(sigma[2 * n + i]) for i in range(n)]

    return s_sigma1_evals, s_sigma2_evals, s_sigma3_evals


def compute_accumulator(a_vals, b_vals, c_vals, sigma, n, domain, beta, gamma):
    """Evaluations [z(ω⁰), ..., z(ω^{n-1})] of the grand product accumulator.

    With a valid wiring the running product wraps around to 1 at ω^n.
    """
    s1, s2, s3 = build_permutation_polynomials(sigma, n, domain)

    z_evals = [FR(1)]

    for i in range(n - 1):
        num = (
            (a_vals[i] + beta * domain[i] + gamma)
            * (b_vals[i] + beta * K1 * domain[i] + gamma)
            * (c_vals[i] + beta * K2 * domain[i] + gamma)
        )
        den = (
            (a_vals[i] + beta * s1[i] + gamma)
            * (b_vals[i] + beta * s2[i] + gamma)
            * (c_vals[i] + beta * s3[i] + gamma)
        )
        z_evals.append(z_evals[-1] * num / den)

    return z_evals
