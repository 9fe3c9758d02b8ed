"""
Fairness circuit
================

Witness checks on the full-size circuit run in a few seconds. Generating
keys and proving at n = 16384 takes minutes in pure Python, so those tests
carry the `slow` marker.
"""
import pytest

from zkflip.plonk.field import FR
from zkflip.fairness.builder import CircuitBuilder
from zkflip.fairness.circuit import (
    NUM_PUBLIC_INPUTS,
    build_fairness_circuit,
    circuit_template,
    poseidon_gadget,
    public_inputs,
)
from zkflip.fairness.commitment import commit, expected_outcome
from zkflip.fairness.poseidon import poseidon_hash
from zkflip.fairness.prover import prove_outcome
from zkflip.fairness.setup import FairnessKeys
from zkflip.fairness.verifier import FairnessVerifier

PLAYER = list(range(1, 17))
HOUSE = list(range(100, 116))


@pytest.fixture(scope="module")
def honest():
    return build_fairness_circuit(PLAYER, HOUSE, 137)


class TestPoseidonGadget:
    @pytest.mark.parametrize("inputs", [[7, 9], [1, 2, 5], list(range(16))])
    def test_matches_native_hash(self, inputs):
        """The in-circuit sponge computes the same digest."""
        b = CircuitBuilder()
        digest = poseidon_gadget(b, [b.private(v) for v in inputs])
        assert int(digest) == poseidon_hash(inputs)
        assert b.check()


class TestFairnessCircuit:
    def test_honest_witness(self, honest):
        """Correct preimages, index and outcome satisfy every constraint."""
        assert honest.check()

    def test_public_inputs(self, honest):
        """Rows 0..3 carry the commitments, the index and the outcome."""
        assert honest.public_values == [
            FR(commit(PLAYER)), FR(commit(HOUSE)), FR(137), FR(0),
        ]
        assert honest.circuit.num_public_inputs == NUM_PUBLIC_INPUTS

    def test_shape_is_witness_independent(self, honest):
        """Selectors and wiring match the template used for setup."""
        template = circuit_template()
        assert template.num_gates == honest.num_gates
        assert template.circuit.copy_constraints == honest.circuit.copy_constraints
        for g1, g2 in zip(template.circuit.gates, honest.circuit.gates):
            assert (g1.q_l, g1.q_r, g1.q_o, g1.q_m, g1.q_c) == (g2.q_l, g2.q_r, g2.q_o, g2.q_m, g2.q_c)

    def test_fits_domain(self, honest):
        """The circuit fits a 2^14 domain."""
        assert 8192 < honest.num_gates <= 16384

    @pytest.mark.parametrize("index", [0, 31, 32, 300, 511])
    def test_outcome_follows_bits(self, index):
        """The honest outcome is the XOR of the two selected bits."""
        builder = build_fairness_circuit(PLAYER, HOUSE, index)
        assert int(builder.public_values[3]) == expected_outcome(PLAYER, HOUSE, index)
        assert builder.check()

    def test_wrong_outcome(self):
        """Claiming the flipped outcome cannot be satisfied."""
        builder = build_fairness_circuit(PLAYER, HOUSE, 137, outcome=1)
        assert not builder.check()

    def test_wrong_player_commitment(self):
        """A commitment to other words cannot be satisfied."""
        other = commit([0] * 16)
        assert not build_fairness_circuit(PLAYER, HOUSE, 137, player_commit=other).check()

    def test_wrong_house_commitment(self):
        """Same for the house side."""
        other = commit([0] * 16)
        assert not build_fairness_circuit(PLAYER, HOUSE, 137, house_commit=other).check()

    def test_index_out_of_range(self):
        """Index 512 fails the 9-bit decomposition."""
        assert not build_fairness_circuit(PLAYER, HOUSE, 512, outcome=0).check()

    def test_invalid_preimage(self):
        """Malformed preimages are refused before building."""
        with pytest.raises(ValueError):
            build_fairness_circuit(PLAYER[:15], HOUSE, 137)

    def test_public_inputs_helper(self):
        """The ordered public vector as field elements."""
        assert public_inputs(1, 2, 3, 0) == [FR(1), FR(2), FR(3), FR(0)]


@pytest.fixture(scope="module")
def keys():
    return FairnessKeys.generate(seed="fairness-tests")


@pytest.mark.slow
class TestFairnessProof:
    def test_prove_and_verify(self, keys):
        """An honest outcome proof verifies under the fairness key."""
        result = prove_outcome(keys, PLAYER, HOUSE, 137)
        verifier = FairnessVerifier(keys.vk)
        assert result.outcome == 0
        assert (result.player_bit, result.house_bit) == (0, 0)
        assert verifier.verify(result.proof, result.public_inputs)

    def test_flipped_outcome_rejected(self, keys):
        """The same proof does not verify for the other outcome."""
        result = prove_outcome(keys, PLAYER, HOUSE, 137)
        inputs = list(result.public_inputs)
        inputs[3] = FR(1)
        assert not FairnessVerifier(keys.vk).verify(result.proof, inputs)

    def test_other_index_rejected(self, keys):
        """The proof is bound to its index."""
        result = prove_outcome(keys, PLAYER, HOUSE, 137)
        inputs = list(result.public_inputs)
        inputs[2] = FR(138)
        assert not FairnessVerifier(keys.vk).verify(result.proof, inputs)


class TestFairnessVerifier:
    class _Key:
        num_public_inputs = 4

    def test_rejects_wrong_key_shape(self):
        """A key for another public-input count is refused."""
        key = self._Key()
        key.num_public_inputs = 1
        with pytest.raises(ValueError):
            FairnessVerifier(key)

    def test_wrong_length(self):
        """Three public inputs are rejected without evaluating the proof."""
        assert FairnessVerifier(self._Key()).verify(object(), [1, 2, 3]) is False

    def test_garbage_bundle(self):
        """A bundle that is not a proof is rejected, not raised."""
        verifier = FairnessVerifier(self._Key())
        assert verifier.verify(None, [1, 2, 3, 0]) is False
        assert verifier.verify(object(), ["x", 2, 3, 0]) is False

    def test_prove_outcome_rejects_bad_index(self):
        """Non-integer indices are refused before proving."""
        with pytest.raises(ValueError):
            prove_outcome(None, PLAYER, HOUSE, "137")
