"""
Off-chain outcome prover
========================

Either counterparty, once the oracle index is known, builds the witness from
both preimages and produces the proof that settles the bet.

Usage:
    >>> result = prove_outcome(keys, player_words, house_words, bet.random_index)
    >>> inputs = [int(v) for v in result.public_inputs]
    >>> registry.settle_with_proof(bet_id, caller, result.proof, inputs)
"""

import logging

from zkflip.plonk.prover import prove
from zkflip.fairness.circuit import build_fairness_circuit
from zkflip.fairness.commitment import extract_bit

logger = logging.getLogger(__name__)


class OutcomeProof:
    """A proof plus everything needed to submit and explain it."""

    def __init__(self, proof, public_inputs, player_bit, house_bit):
        self.proof = proof
        self.public_inputs = public_inputs
        self.player_bit = player_bit
        self.house_bit = house_bit

    @property
    def outcome(self):
        return int(self.public_inputs[3])


def prove_outcome(keys, player_preimage, house_preimage, bit_index):
    """Prove the outcome at `bit_index` for two committed preimages.

    Raises:
        ValueError: invalid preimage or index, or a witness that does not
            satisfy the circuit
    """
    if isinstance(bit_index, bool) or not isinstance(bit_index, int):
        raise ValueError("bit index must be an integer")
    builder = build_fairness_circuit(player_preimage, house_preimage, bit_index)
    if not builder.check():
        raise ValueError("witness does not satisfy the fairness circuit")

    circuit, a_vals, b_vals, c_vals, public_inputs = builder.build()
    logger.info("proving outcome %d for index %d", int(public_inputs[3]), bit_index)
    proof = prove(circuit, a_vals, b_vals, c_vals, public_inputs,
                  keys.preprocessed, keys.srs)

    player_bit = extract_bit(player_preimage, bit_index)
    house_bit = extract_bit(house_preimage, bit_index)
    return OutcomeProof(proof, public_inputs, player_bit, house_bit)
