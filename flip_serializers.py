"""
JSON serialisation helpers
==========================

Converts engine objects (FR, G1, G2, Polynomial, SRS, PreprocessedData,
Proof, VerificationKey, FairnessKeys) to plain JSON and back, for HTTP
payloads and the key file written by `flask setup-keys`.

Big integers are decimal strings on the way out; parse_int also accepts
`0x` hex on the way in.
"""

from py_ecc import bn128
from py_ecc.fields import bn128_FQ as FQ

from zkflip.plonk.field import FR, get_roots_of_unity
from zkflip.plonk.polynomial import Polynomial
from zkflip.plonk.srs import SRS
from zkflip.plonk.preprocessor import PreprocessedData
from zkflip.plonk.prover import Proof
from zkflip.plonk.verifier import VerificationKey
from zkflip.fairness.setup import FairnessKeys


# ─── integers ───

def parse_int(value):
    """int, decimal string or 0x-hex string → int (ValueError otherwise)."""
    if isinstance(value, bool):
        raise ValueError("booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return int(text[2:], 16)
        if text.lstrip("-").isdigit():
            return int(text)
    raise ValueError(f"not an integer: {value!r}")


# ─── FR ───

def serialize_fr(val):
    return str(int(val))


def deserialize_fr(s):
    return FR(parse_int(s))


def serialize_fr_list(lst):
    return [str(int(v)) for v in lst]


# ─── G1 / G2 points ───

def serialize_g1(point):
    """G1 point → [x, y], None for the point at infinity"""
    if point is None:
        return None
    return [str(int(point[0])), str(int(point[1]))]


def deserialize_g1(data):
    if data is None:
        return None
    x, y = data
    return (FQ(parse_int(x)), FQ(parse_int(y)))


def serialize_g2(point):
    """G2 point → [[x0, x1], [y0, y1]]"""
    if point is None:
        return None
    return [
        [str(int(point[0].coeffs[0])), str(int(point[0].coeffs[1]))],
        [str(int(point[1].coeffs[0])), str(int(point[1].coeffs[1]))],
    ]


def deserialize_g2(data):
    if data is None:
        return None
    return (
        bn128.FQ2([parse_int(data[0][0]), parse_int(data[0][1])]),
        bn128.FQ2([parse_int(data[1][0]), parse_int(data[1][1])]),
    )


# ─── Polynomial ───

def serialize_poly(poly):
    return [str(int(c)) for c in poly.coeffs]


def deserialize_poly(data):
    return Polynomial([FR(int(s)) for s in data])


# ─── SRS ───

def serialize_srs(srs):
    return {
        "g1_powers": [serialize_g1(p) for p in srs.g1_powers],
        "g2_powers": [serialize_g2(p) for p in srs.g2_powers],
        "max_degree": srs.max_degree,
    }


def deserialize_srs(data):
    g1_powers = [deserialize_g1(p) for p in data["g1_powers"]]
    g2_powers = [deserialize_g2(p) for p in data["g2_powers"]]
    return SRS(g1_powers, g2_powers, data["max_degree"])


# ─── PreprocessedData ───

POLY_FIELDS = (
    "q_l_poly", "q_r_poly", "q_o_poly", "q_m_poly", "q_c_poly",
    "s_sigma1_poly", "s_sigma2_poly", "s_sigma3_poly",
)


def serialize_preprocessed(pp):
    data = {
        "n": pp.n,
        "omega": serialize_fr(pp.omega),
        "sigma": list(pp.sigma),
        "num_public_inputs": pp.num_public_inputs,
    }
    for name in POLY_FIELDS:
        data[name] = serialize_poly(getattr(pp, name))
    for name in VerificationKey.SELECTOR_FIELDS:
        data[name] = serialize_g1(getattr(pp, name))
    return data


def deserialize_preprocessed(data):
    """dict → PreprocessedData; the domain is recomputed from n."""
    pp = PreprocessedData()
    pp.n = data["n"]
    pp.omega = deserialize_fr(data["omega"])
    pp.domain = get_roots_of_unity(pp.n)
    pp.sigma = list(data["sigma"])
    pp.num_public_inputs = data["num_public_inputs"]
    for name in POLY_FIELDS:
        setattr(pp, name, deserialize_poly(data[name]))
    for name in VerificationKey.SELECTOR_FIELDS:
        setattr(pp, name, deserialize_g1(data[name]))
    return pp


# ─── VerificationKey ───

def serialize_vk(vk):
    return {
        "n": vk.n,
        "omega": serialize_fr(vk.omega),
        "num_public_inputs": vk.num_public_inputs,
        "commitments": {
            name: serialize_g1(getattr(vk, name))
            for name in VerificationKey.SELECTOR_FIELDS
        },
        "g2_powers": [serialize_g2(p) for p in vk.g2_powers],
    }


def deserialize_vk(data):
    commitments = {
        name: deserialize_g1(data["commitments"][name])
        for name in VerificationKey.SELECTOR_FIELDS
    }
    return VerificationKey(
        data["n"],
        deserialize_fr(data["omega"]),
        data["num_public_inputs"],
        commitments,
        [deserialize_g2(p) for p in data["g2_powers"]],
    )


# ─── Proof ───

def serialize_proof(proof):
    data = {}
    for name in Proof.COMMITMENT_FIELDS:
        data[name] = serialize_g1(getattr(proof, name))
    for name in Proof.EVALUATION_FIELDS:
        data[name] = serialize_fr(getattr(proof, name))
    return data


def deserialize_proof(data):
    """dict → Proof

    Raises KeyError, TypeError or ValueError for a malformed bundle; curve
    membership is left to the verifier.
    """
    if not isinstance(data, dict):
        raise TypeError("proof must be an object")
    proof = Proof()
    for name in Proof.COMMITMENT_FIELDS:
        setattr(proof, name, deserialize_g1(data[name]))
    for name in Proof.EVALUATION_FIELDS:
        setattr(proof, name, deserialize_fr(data[name]))
    return proof


# ─── FairnessKeys ───

def serialize_keys(keys):
    return {
        "srs": serialize_srs(keys.srs),
        "preprocessed": serialize_preprocessed(keys.preprocessed),
        "vk": serialize_vk(keys.vk),
    }


def deserialize_keys(data):
    srs = deserialize_srs(data["srs"])
    pp = deserialize_preprocessed(data["preprocessed"])
    return FairnessKeys(srs, pp, deserialize_vk(data["vk"]))
