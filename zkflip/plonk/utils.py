"""
Shared PLONK helpers
====================

  - vanishing_poly_eval: Z_H(ζ) = ζ^n - 1
  - lagrange_basis_eval: L_i(ζ) without building the polynomial
  - public_input_polynomial / public_input_poly_eval: PI(x), with
    PI(ωⁱ) = -x_i on the public-input rows
  - coset_fft / coset_ifft: evaluation on k·H' where Z_H has no zeros,
    used by the quotient computation
  - next_power_of_2, pad_to_power_of_2
"""

from zkflip.plonk.field import FR
from zkflip.plonk.polynomial import Polynomial, fft, ifft


# coset shift, not a member of any power-of-two subgroup
COSET_SHIFT = FR(5)


def vanishing_poly_eval(n, zeta):
    """Z_H(ζ) = ζ^n - 1."""
    return zeta ** n - FR(1)


def lagrange_basis_eval(i, n, omega, zeta):
    """L_i(ζ) = (ωⁱ / n) · (ζ^n - 1) / (ζ - ωⁱ); 1 when ζ = ωⁱ."""
    if not isinstance(zeta, FR):
        zeta = FR(zeta)

    omega_i = omega ** i
    denominator = zeta - omega_i
    if denominator == FR(0):
        return FR(1)

    n_inv = FR(1) / FR(n)
    return n_inv * vanishing_poly_eval(n, zeta) * omega_i / denominator


def public_input_polynomial(pub_inputs, n, omega):
    """PI(x) = -Σᵢ xᵢ·Lᵢ(x).

    Public-input rows carry q_O = 1, so the gate equation c + PI(ωⁱ) = 0
    pins the c wire of row i to xᵢ.
    """
    if not pub_inputs:
        return Polynomial.zero()

    evals = [FR(0)] * n
    for i, val in enumerate(pub_inputs):
        if not isinstance(val, FR):
            val = FR(val)
        evals[i] = FR(0) - val

    return Polynomial.from_evaluations(evals, omega)


def public_input_poly_eval(pub_inputs, n, omega, zeta):
    """PI(ζ) from the public values alone (verifier side)."""
    result = FR(0)
    for i, val in enumerate(pub_inputs):
        if not isinstance(val, FR):
            val = FR(val)
        result = result - val * lagrange_basis_eval(i, n, omega, zeta)
    return result


def coset_fft(coeffs, omega, k=None):
    """Evaluate on k·H: FFT of [c₀, k·c₁, k²·c₂, ...]."""
    if k is None:
        k = COSET_SHIFT
    shifted = []
    k_power = FR(1)
    for c in coeffs:
        if not isinstance(c, FR):
            c = FR(c)
        shifted.append(c * k_power)
        k_power = k_power * k
    return fft(shifted, omega)


def coset_ifft(evals, omega, k=None):
    """Inverse of coset_fft."""
    if k is None:
        k = COSET_SHIFT
    coeffs = ifft(evals, omega)
    k_inv = FR(1) / k
    k_inv_power = FR(1)
    result = []
    for c in coeffs:
        result.append(c * k_inv_power)
        k_inv_power = k_inv_power * k_inv
    return result


def pad_to_power_of_2(lst, fill=None):
    """Pad a list with `fill` (default FR(0)) to a power-of-two length."""
    if fill is None:
        fill = FR(0)
    target = next_power_of_2(len(lst))
    return list(lst) + [fill] * (target - len(lst))


def next_power_of_2(n):
    """Smallest power of two >= n.

    >>> next_power_of_2(5)  # 8
    """
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p
