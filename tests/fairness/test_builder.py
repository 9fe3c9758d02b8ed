"""
CircuitBuilder gadgets, checked directly and through the PLONK prover
"""
import pytest

from zkflip.plonk.field import FR
from zkflip.plonk.srs import SRS
from zkflip.plonk.preprocessor import preprocess
from zkflip.plonk.prover import prove
from zkflip.plonk.verifier import VerificationKey, verify
from zkflip.plonk.utils import next_power_of_2
from zkflip.fairness.builder import CircuitBuilder


def _prove_and_verify(builder, seed=3):
    circuit, a, b, c, pub = builder.build()
    n = next_power_of_2(circuit.n)
    srs = SRS.generate(max_degree=n + 6, seed=seed)
    pp = preprocess(circuit, srs)
    proof = prove(circuit, a, b, c, pub, pp, srs)
    vk = VerificationKey.from_preprocessed(pp, srs)
    return proof, vk, pub


class TestArithmetic:
    def test_toy_statement(self):
        """x³ + x + 5 == 35 with x = 3."""
        b = CircuitBuilder()
        out = b.public_input(35)
        x = b.private(3)
        x3 = b.mul(b.mul(x, x), x)
        b.assert_equal(b.add_constant(b.add(x3, x), 5), out)
        assert b.check()

    def test_wrong_public_value(self):
        """The same wiring with 36 as output fails."""
        b = CircuitBuilder()
        out = b.public_input(36)
        x = b.private(3)
        x3 = b.mul(b.mul(x, x), x)
        b.assert_equal(b.add_constant(b.add(x3, x), 5), out)
        assert not b.check()

    def test_values_tracked(self):
        """Helpers compute witness values as they emit gates."""
        b = CircuitBuilder()
        x, y = b.private(6), b.private(7)
        assert b.mul(x, y).value == FR(42)
        assert b.linear(x, y, 2, 3, 1).value == FR(34)
        assert b.one_minus(b.private(1)).value == FR(0)

    def test_constants_are_cached(self):
        """A repeated constant reuses its gate."""
        b = CircuitBuilder()
        k1 = b.constant(16)
        gates = b.num_gates
        k2 = b.constant(16)
        assert k1 is k2
        assert b.num_gates == gates

    def test_public_rows_first(self):
        """Public inputs after other gates are refused."""
        b = CircuitBuilder()
        b.add(b.private(1), b.private(2))
        with pytest.raises(ValueError):
            b.public_input(3)

    def test_tampered_witness_detected(self):
        """Editing a copied wire breaks a copy constraint."""
        b = CircuitBuilder()
        x = b.private(5)
        b.mul(x, x)
        b.add(x, x)
        b.b_vals[1] = FR(6)
        b.c_vals[1] = FR(11)
        assert not b.check()


class TestGadgets:
    @pytest.mark.parametrize("value", [0, 1, 22, 511])
    def test_to_bits(self, value):
        """Little-endian decomposition recomposes to the value."""
        b = CircuitBuilder()
        bits = b.to_bits(b.private(value), 9)
        assert sum(int(bit) << i for i, bit in enumerate(bits)) == value
        assert b.check()

    def test_to_bits_range(self):
        """512 does not fit in 9 bits."""
        b = CircuitBuilder()
        b.to_bits(b.private(512), 9)
        assert not b.check()

    def test_assert_boolean(self):
        """2 is not boolean."""
        b = CircuitBuilder()
        b.assert_boolean(b.private(2))
        assert not b.check()

    @pytest.mark.parametrize("index", [0, 5, 6, 7])
    def test_one_hot(self, index):
        """Exactly selector `index` is 1."""
        b = CircuitBuilder()
        bits = b.to_bits(b.private(index), 3)
        selectors = b.one_hot(bits)
        assert [int(s) for s in selectors] == [int(k == index) for k in range(8)]
        assert b.check()

    def test_inner_product(self):
        """Σ xᵢ·yᵢ."""
        b = CircuitBuilder()
        xs = [b.private(v) for v in (1, 2, 3)]
        ys = [b.private(v) for v in (4, 5, 6)]
        assert b.inner_product(xs, ys).value == FR(32)
        assert b.check()

    @pytest.mark.parametrize("x,y", [(0, 0), (0, 1), (1, 0), (1, 1)])
    def test_xor(self, x, y):
        """a + b - 2ab is XOR on bits."""
        b = CircuitBuilder()
        assert int(b.xor(b.private(x), b.private(y))) == x ^ y


class TestProving:
    def test_builder_circuit_proves(self):
        """A builder circuit with shared variables proves and verifies."""
        b = CircuitBuilder()
        out = b.public_input(35)
        x = b.private(3)
        x3 = b.mul(b.mul(x, x), x)
        b.assert_equal(b.add_constant(b.add(x3, x), 5), out)
        proof, vk, pub = _prove_and_verify(b)
        assert verify(proof, pub, vk)
        assert not verify(proof, [FR(36)], vk)

    def test_bit_selection_proves(self):
        """Decomposition plus one-hot selection survives the full protocol."""
        b = CircuitBuilder()
        index = b.public_input(5)
        selected = b.public_input(1)
        bits = b.to_bits(index, 3)
        selectors = b.one_hot(bits)
        values = [b.private(v) for v in (0, 0, 0, 0, 0, 1, 0, 0)]
        b.assert_equal(b.inner_product(selectors, values), selected)
        assert b.check()
        proof, vk, pub = _prove_and_verify(b, seed=8)
        assert verify(proof, pub, vk)
        assert not verify(proof, [FR(4), FR(1)], vk)
