"""
PLONK base module: scalar field and curve operations
====================================================

Algebraic building blocks shared by the whole proving engine.

**Scalar field FR**:
  The scalar field of the bn128 (BN254) curve. Every polynomial, witness
  value, commitment hash and public input of the coin-flip protocol lives here.
  - order r ~ 2^254, prime
  - r - 1 = 2^28 * m (m odd), so power-of-two domains up to 2^28 exist

**Curve operations**:
  G1/G2 group arithmetic and the optimal Ate pairing used by KZG.

Usage:
    >>> from zkflip.plonk.field import FR, G1, ec_mul
    >>> FR(3) * FR(7)          # FR(21)
    >>> P = ec_mul(G1, 5)      # 5·G1
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# Scalar field
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """Element of the bn128 scalar field (modulus = curve order).

    Inherits +, -, *, /, ** from py_ecc's FQ.

    Examples:
        >>> FR(3) ** 2        # FR(9)
        >>> FR(1) / FR(3)     # modular inverse of 3
    """
    field_modulus = bn128.curve_order


CURVE_ORDER = bn128.curve_order


# ─────────────────────────────────────────────────────────────────────
# Curve constants and operations
# ─────────────────────────────────────────────────────────────────────

G1 = bn128.G1
G2 = bn128.G2

# point at infinity; py_ecc represents it as None
Z1 = None


def ec_mul(point, scalar):
    """Scalar multiplication scalar·point (scalar may be an int or FR)."""
    if point is None:
        return None
    if isinstance(scalar, FR):
        scalar = int(scalar)
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    """Point addition p1 + p2 in the same group."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """Point negation."""
    return bn128.neg(point)


def ec_pairing(g2_point, g1_point):
    """Pairing e(g1_point, g2_point).

    Note that py_ecc takes the G2 argument first.
    """
    return bn128.pairing(g2_point, g1_point)


# ─────────────────────────────────────────────────────────────────────
# Roots of unity
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """Return a primitive n-th root of unity ω.

    ω = 5^((r-1)/n), valid for n a power of two not above 2^28.

    Raises:
        ValueError: n is not a power of two or exceeds 2^28
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n must be a power of two: {n}")
    if n > (1 << 28):
        raise ValueError(f"n must not exceed 2^28: {n}")
    if n == 1:
        return FR(1)

    g = FR(5)
    exponent = (CURVE_ORDER - 1) // n
    return g ** exponent


def get_roots_of_unity(n):
    """Return the evaluation domain H = [1, ω, ω², ..., ω^(n-1)]."""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
