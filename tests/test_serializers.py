"""
JSON serialisation of engine objects
"""
import json

import pytest

from flip_serializers import (
    deserialize_g1,
    deserialize_g2,
    deserialize_keys,
    deserialize_proof,
    deserialize_vk,
    parse_int,
    serialize_g1,
    serialize_g2,
    serialize_keys,
    serialize_proof,
    serialize_vk,
)
from zkflip.fairness.setup import FairnessKeys
from zkflip.plonk.circuit import Circuit
from zkflip.plonk.field import G1, G2, FR, ec_mul
from zkflip.plonk.preprocessor import preprocess
from zkflip.plonk.prover import Proof, prove
from zkflip.plonk.srs import SRS
from zkflip.plonk.verifier import VerificationKey, verify


@pytest.fixture(scope="module")
def toy():
    circuit, a, b, c, pub = Circuit.x3_plus_x_plus_5_eq_35()
    srs = SRS.generate(max_degree=8 + 6, seed=777)
    pp = preprocess(circuit, srs)
    proof = prove(circuit, a, b, c, pub, pp, srs)
    vk = VerificationKey.from_preprocessed(pp, srs)
    return {"circuit": circuit, "witness": (a, b, c), "public_inputs": pub,
            "srs": srs, "preprocessed": pp, "proof": proof, "vk": vk}


class TestParseInt:
    @pytest.mark.parametrize("value,expected", [
        (5, 5), ("42", 42), (" 7 ", 7), ("0xff", 255), ("0XFF", 255), ("-3", -3),
    ])
    def test_accepted(self, value, expected):
        """ints, decimal strings and 0x hex."""
        assert parse_int(value) == expected

    @pytest.mark.parametrize("value", [True, "ten", "", 1.5, None, "0x"])
    def test_rejected(self, value):
        """Everything else raises ValueError."""
        with pytest.raises(ValueError):
            parse_int(value)


class TestPoints:
    def test_g1(self):
        """G1 points survive as decimal pairs."""
        point = ec_mul(G1, 12345)
        assert deserialize_g1(serialize_g1(point)) == point
        assert serialize_g1(None) is None

    def test_g2(self):
        """G2 points survive as pairs of pairs."""
        point = ec_mul(G2, 99)
        assert deserialize_g2(serialize_g2(point)) == point


class TestProofJson:
    def test_proof_verifies_after_json(self, toy):
        """A proof passed through json.dumps still verifies."""
        text = json.dumps(serialize_proof(toy["proof"]))
        proof = deserialize_proof(json.loads(text))
        assert verify(proof, toy["public_inputs"], toy["vk"])

    def test_vk_round_trip(self, toy):
        """A deserialized key verifies the original proof."""
        vk = deserialize_vk(json.loads(json.dumps(serialize_vk(toy["vk"]))))
        assert vk.n == toy["vk"].n
        assert verify(toy["proof"], toy["public_inputs"], vk)

    def test_fields_are_strings(self, toy):
        """Every scalar is a decimal string."""
        data = serialize_proof(toy["proof"])
        assert set(data) == set(Proof.COMMITMENT_FIELDS) | set(Proof.EVALUATION_FIELDS)
        for name in Proof.EVALUATION_FIELDS:
            assert isinstance(data[name], str)

    @pytest.mark.parametrize("bundle", [None, [], {}, {"a_commit": ["1", "2"]}])
    def test_malformed(self, bundle):
        """Malformed bundles raise one of the documented errors."""
        with pytest.raises((KeyError, TypeError, ValueError)):
            deserialize_proof(bundle)

    def test_bad_scalar(self, toy):
        """Non-integer scalars raise ValueError."""
        data = serialize_proof(toy["proof"])
        data[Proof.EVALUATION_FIELDS[0]] = "abc"
        with pytest.raises(ValueError):
            deserialize_proof(data)


class TestKeysJson:
    def test_keys_prove_after_json(self, toy):
        """Keys loaded from JSON can prove and verify again."""
        keys = FairnessKeys(toy["srs"], toy["preprocessed"], toy["vk"])
        loaded = deserialize_keys(json.loads(json.dumps(serialize_keys(keys))))
        assert loaded.n == toy["preprocessed"].n
        a, b, c = toy["witness"]
        proof = prove(toy["circuit"], a, b, c, toy["public_inputs"],
                      loaded.preprocessed, loaded.srs)
        assert verify(proof, toy["public_inputs"], loaded.vk)
        assert not verify(proof, [FR(36)], loaded.vk)
