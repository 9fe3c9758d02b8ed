"""
Fairness proof verifier
=======================

Thin wrapper around the PLONK verifier bound to the fairness verification
key. A bundle that cannot even be evaluated (wrong types, points off the
curve, missing fields) is rejected like an invalid proof.
"""

import logging

from zkflip.plonk.field import FR
from zkflip.plonk.verifier import verify
from zkflip.fairness.circuit import NUM_PUBLIC_INPUTS

logger = logging.getLogger(__name__)


class FairnessVerifier:
    """verify(proof, public_inputs) -> bool against a fixed key."""

    def __init__(self, vk):
        if vk.num_public_inputs != NUM_PUBLIC_INPUTS:
            raise ValueError(
                f"verification key expects {vk.num_public_inputs} public inputs, "
                f"fairness proofs carry {NUM_PUBLIC_INPUTS}"
            )
        self.vk = vk

    def verify(self, proof, public_inputs):
        if len(public_inputs) != NUM_PUBLIC_INPUTS:
            return False
        try:
            values = [v if isinstance(v, FR) else FR(int(v)) for v in public_inputs]
            return bool(verify(proof, values, self.vk))
        except (TypeError, ValueError, AttributeError, AssertionError, ZeroDivisionError) as exc:
            logger.warning("malformed proof bundle rejected: %s", exc)
            return False
