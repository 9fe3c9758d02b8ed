"""
Structured Reference String (universal setup)
=============================================

  SRS = {
      G1 powers: [G1, τ·G1, τ²·G1, ..., τ^d·G1]
      G2 powers: [G2, τ·G2]
  }

One SRS serves every circuit whose polynomials stay under degree d. Whoever
knows τ can forge proofs; the seeded variant derives τ from SHA-256 and only
suits tests and local demos.

Usage:
    >>> srs = SRS.generate(max_degree=16, seed=42)
    >>> len(srs.g1_powers)  # 17
"""

import hashlib
import logging
import secrets

from zkflip.plonk.field import FR, G1, G2, ec_mul, CURVE_ORDER

logger = logging.getLogger(__name__)


class SRS:
    """Public parameters for KZG commitments.

    Attributes:
        g1_powers: [G1, τ·G1, ..., τ^d·G1]
        g2_powers: [G2, τ·G2]
        max_degree: d
    """

    def __init__(self, g1_powers, g2_powers, max_degree):
        self.g1_powers = g1_powers
        self.g2_powers = g2_powers
        self.max_degree = max_degree

    @classmethod
    def generate(cls, max_degree, seed=None):
        """Generate an SRS supporting polynomials up to `max_degree`.

        Args:
            max_degree: PLONK needs about n + 6 for an n-row circuit
            seed: derive τ deterministically (tests and demos only);
                None draws τ from `secrets`
        """
        if seed is not None:
            h = hashlib.sha256(str(seed).encode()).digest()
            tau_int = int.from_bytes(h, "big") % CURVE_ORDER
        else:
            tau_int = secrets.randbelow(CURVE_ORDER - 1) + 1
        tau = FR(tau_int)

        logger.info("generating SRS with %d G1 powers", max_degree + 1)
        g1_powers = []
        tau_power = FR(1)
        for _ in range(max_degree + 1):
            g1_powers.append(ec_mul(G1, tau_power))
            tau_power = tau_power * tau

        g2_powers = [G2, ec_mul(G2, tau)]

        return cls(g1_powers, g2_powers, max_degree)
