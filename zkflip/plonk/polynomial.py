"""
PLONK base module: polynomials and FFT
======================================

Coefficient-form polynomials over FR, the radix-2 number theoretic transform
and long division.

  - Polynomial: p(x) = c₀ + c₁·x + c₂·x² + ...
  - fft / ifft: coefficients <-> evaluations over the domain H
  - poly_div: quotient and remainder, used for t(x) = C(x) / Z_H(x) and for
    KZG opening witnesses (p(x) - p(z)) / (x - z)

Usage:
    >>> p = Polynomial([FR(1), FR(2), FR(3)])   # 1 + 2x + 3x²
    >>> p.evaluate(FR(2))                       # FR(17)
"""

from zkflip.plonk.field import FR


class Polynomial:
    """Polynomial over FR stored as a coefficient list (lowest degree first).

    Trailing zero coefficients are trimmed so two equal polynomials always
    have equal coefficient lists.
    """

    def __init__(self, coeffs=None):
        if coeffs is None:
            self.coeffs = [FR(0)]
        else:
            self.coeffs = [c if isinstance(c, FR) else FR(c) for c in coeffs]
        self._trim()

    def _trim(self):
        while len(self.coeffs) > 1 and self.coeffs[-1] == FR(0):
            self.coeffs.pop()

    @property
    def degree(self):
        """Degree; the zero polynomial has degree 0."""
        if self.is_zero():
            return 0
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0] == FR(0)

    def evaluate(self, point):
        """Evaluate with Horner's rule."""
        if not isinstance(point, FR):
            point = FR(point)
        result = FR(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __add__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        size = max(len(self.coeffs), len(other.coeffs))
        result = []
        for i in range(size):
            a = self.coeffs[i] if i < len(self.coeffs) else FR(0)
            b = other.coeffs[i] if i < len(other.coeffs) else FR(0)
            result.append(a + b)
        return Polynomial(result)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        size = max(len(self.coeffs), len(other.coeffs))
        result = []
        for i in range(size):
            a = self.coeffs[i] if i < len(self.coeffs) else FR(0)
            b = other.coeffs[i] if i < len(other.coeffs) else FR(0)
            result.append(a - b)
        return Polynomial(result)

    def __rsub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        return other.__sub__(self)

    def __neg__(self):
        return Polynomial([FR(0) - c for c in self.coeffs])

    def __mul__(self, other):
        """Scalar product, or schoolbook O(n²) polynomial product."""
        if isinstance(other, (int, FR)):
            if isinstance(other, int):
                other = FR(other)
            return Polynomial([c * other for c in self.coeffs])
        result = [FR(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a == FR(0):
                continue
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return Polynomial(result)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        if not isinstance(other, Polynomial):
            return False
        return self.coeffs == other.coeffs

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == FR(0):
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*x")
            else:
                terms.append(f"{int(c)}*x^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    def __len__(self):
        return len(self.coeffs)

    @classmethod
    def zero(cls):
        return cls([FR(0)])

    @classmethod
    def one(cls):
        return cls([FR(1)])

    @classmethod
    def vanishing(cls, n):
        """Z_H(x) = x^n - 1, zero on every point of the size-n domain."""
        coeffs = [FR(0)] * (n + 1)
        coeffs[0] = FR(-1)
        coeffs[n] = FR(1)
        return cls(coeffs)

    @classmethod
    def from_evaluations(cls, evals, omega):
        """Interpolate the values [p(1), p(ω), ...] with an inverse FFT."""
        return cls(ifft(evals, omega))


# ─────────────────────────────────────────────────────────────────────
# FFT / IFFT
# ─────────────────────────────────────────────────────────────────────

def fft(coeffs, omega):
    """Recursive Cooley-Tukey NTT: coefficients -> evaluations on <ω>.

    len(coeffs) must be a power of two equal to the order of ω.
    """
    n = len(coeffs)
    if n == 1:
        return [coeffs[0] if isinstance(coeffs[0], FR) else FR(coeffs[0])]

    even_vals = fft(coeffs[0::2], omega * omega)
    odd_vals = fft(coeffs[1::2], omega * omega)

    result = [FR(0)] * n
    omega_k = FR(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega
    return result


def ifft(evals, omega):
    """Inverse NTT: run the FFT with ω⁻¹ and scale by 1/n."""
    n = len(evals)
    coeffs = fft(evals, FR(1) / omega)
    n_inv = FR(1) / FR(n)
    return [c * n_inv for c in coeffs]


# ─────────────────────────────────────────────────────────────────────
# Division and Lagrange basis
# ─────────────────────────────────────────────────────────────────────

def poly_div(a, b):
    """Long division a(x) = b(x)·q(x) + r(x).

    Returns:
        tuple: (q, r)

    Raises:
        ValueError: b is the zero polynomial
    """
    if b.is_zero():
        raise ValueError("division by the zero polynomial")

    remainder = list(a.coeffs)
    divisor = b.coeffs
    deg_b = len(divisor) - 1
    deg_a = len(remainder) - 1

    if deg_a < deg_b:
        return Polynomial.zero(), Polynomial(remainder)

    quotient = [FR(0)] * (deg_a - deg_b + 1)
    lead_inv = FR(1) / divisor[-1]
    # sparse divisors (x^n - 1, x - z) only touch their non-zero terms
    nonzero = [(j, d) for j, d in enumerate(divisor) if d != FR(0)]

    for i in range(deg_a - deg_b, -1, -1):
        coeff = remainder[i + deg_b] * lead_inv
        if coeff == FR(0):
            continue
        quotient[i] = coeff
        for j, d in nonzero:
            remainder[i + j] = remainder[i + j] - coeff * d

    return Polynomial(quotient), Polynomial(remainder)


def lagrange_basis(domain, i):
    """L_i(x) = ∏_{j≠i} (x - d_j) / (d_i - d_j), so that L_i(d_j) = δ_ij."""
    result = Polynomial([FR(1)])
    denominator = FR(1)
    for j, d_j in enumerate(domain):
        if j == i:
            continue
        result = result * Polynomial([FR(0) - d_j, FR(1)])
        denominator = denominator * (domain[i] - d_j)
    return result * (FR(1) / denominator)
