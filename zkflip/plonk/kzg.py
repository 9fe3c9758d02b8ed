"""
KZG polynomial commitments
==========================

  - commit:          C = p(τ)·G1, computed from the SRS powers
  - create_witness:  π = commit((p(x) - p(z)) / (x - z))
  - verify_opening:  e(C - y·G1, G2) == e(π, [τ - z]₂)

Usage:
    >>> C = commit(poly, srs)
    >>> proof = create_witness(poly, FR(7), srs)
    >>> verify_opening(C, proof, FR(7), poly.evaluate(FR(7)), srs)  # True
"""

from zkflip.plonk.field import FR, G1, ec_mul, ec_add, ec_neg, ec_pairing
from zkflip.plonk.polynomial import Polynomial, poly_div


def commit(poly, srs):
    """KZG commitment C = Σ cᵢ·[τⁱ]₁.

    Raises:
        ValueError: the polynomial degree exceeds the SRS
    """
    if poly.degree > srs.max_degree:
        raise ValueError(
            f"polynomial degree {poly.degree} exceeds SRS max degree {srs.max_degree}"
        )

    result = None
    for i, coeff in enumerate(poly.coeffs):
        if coeff == FR(0):
            continue
        result = ec_add(result, ec_mul(srs.g1_powers[i], coeff))

    return result


def create_witness(poly, point, srs):
    """Opening proof for p at `point`: commit((p(x) - p(z)) / (x - z))."""
    if not isinstance(point, FR):
        point = FR(point)

    y = poly.evaluate(point)
    divisor = Polynomial([FR(0) - point, FR(1)])
    quotient, remainder = poly_div(poly - Polynomial([y]), divisor)

    if not remainder.is_zero():
        raise ValueError("opening failed: non-zero remainder")

    return commit(quotient, srs)


def verify_opening(commitment, proof, point, evaluation, srs):
    """Check e(C - y·G1, G2) == e(π, [τ - z]₂)."""
    if not isinstance(point, FR):
        point = FR(point)
    if not isinstance(evaluation, FR):
        evaluation = FR(evaluation)

    z_g2 = ec_mul(srs.g2_powers[0], point)
    tau_minus_z_g2 = ec_add(srs.g2_powers[1], ec_neg(z_g2))

    c_minus_y = ec_add(commitment, ec_neg(ec_mul(G1, evaluation)))

    lhs = ec_pairing(srs.g2_powers[0], c_minus_y)
    rhs = ec_pairing(tau_minus_z_g2, proof)

    return lhs == rhs
