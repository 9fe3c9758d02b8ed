"""
Key setup for the fairness circuit
==================================

The circuit shape never depends on the witness, so one SRS plus one
preprocessing of the template circuit yields keys for every bet.

  proving key:      SRS + PreprocessedData (polynomials and commitments)
  verification key: VerificationKey (commitments, n, ω, two G2 points)

Full-size setup commits to eight polynomials of ~2^14 coefficients in pure
Python and takes minutes; `setup-keys` runs it once and stores the result.
"""

import logging

from zkflip.plonk.srs import SRS
from zkflip.plonk.preprocessor import preprocess
from zkflip.plonk.verifier import VerificationKey
from zkflip.plonk.utils import next_power_of_2
from zkflip.fairness.circuit import circuit_template

logger = logging.getLogger(__name__)

# t_hi and the round-5 opening witness reach degree n + 5
SRS_DEGREE_MARGIN = 6


class FairnessKeys:
    """Proving and verification material for the fairness circuit."""

    def __init__(self, srs, preprocessed, vk):
        self.srs = srs
        self.preprocessed = preprocessed
        self.vk = vk

    @property
    def n(self):
        return self.preprocessed.n

    @classmethod
    def generate(cls, seed=None):
        """Run the trusted setup and preprocess the fairness circuit.

        Args:
            seed: deterministic τ for tests and local runs; None draws τ at
                random (it is then discarded with the process)
        """
        circuit = circuit_template().circuit
        n = next_power_of_2(circuit.n)
        logger.info("fairness circuit: %d gates, domain %d", circuit.n, n)

        srs = SRS.generate(n + SRS_DEGREE_MARGIN, seed=seed)
        pp = preprocess(circuit, srs)
        vk = VerificationKey.from_preprocessed(pp, srs)
        return cls(srs, pp, vk)
