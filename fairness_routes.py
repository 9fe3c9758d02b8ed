"""
Fairness tools Blueprint
========================

Off-chain helpers for the counterparties. Nothing here touches the registry.

  POST /fairness/commit        commitment of a 16-word preimage
  GET  /fairness/random-data   fresh random preimage and its commitment
  POST /fairness/outcome       bits and outcome at an index (no proof)
  POST /fairness/proof         full PLONK proof of the outcome
"""

from flask import Blueprint, jsonify, request

from zkflip.betting.errors import PreconditionError, ValidationError
from zkflip.betting.settlement import OUTCOME_PLAYER_WINS
from zkflip.fairness.commitment import (
    commit,
    extract_bit,
    random_preimage,
    split_index,
    validate_preimage,
)
from zkflip.fairness.prover import prove_outcome

from flip_serializers import parse_int, serialize_fr_list, serialize_proof

fairness_bp = Blueprint('fairness', __name__, url_prefix='/fairness')

# proving keys are injected by app.py; None disables /fairness/proof
KEYS = None


def init_fairness_bp(keys):
    global KEYS
    KEYS = keys


def _json():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def _preimage(data, name):
    words = data.get(name)
    if not isinstance(words, list):
        raise ValidationError(f"missing field '{name}'")
    try:
        return validate_preimage([parse_int(w) for w in words])
    except ValueError as exc:
        raise ValidationError(f"{name}: {exc}")


def _index(data):
    try:
        index = parse_int(data.get("bit_index"))
        split_index(index)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"bit_index: {exc}")
    return index


@fairness_bp.route("/commit", methods=["POST"])
def fairness_commit():
    words = _preimage(_json(), "preimage")
    return jsonify({"commitment": str(commit(words))})


@fairness_bp.route("/random-data", methods=["GET"])
def fairness_random_data():
    words = random_preimage()
    return jsonify({"preimage": words, "commitment": str(commit(words))})


@fairness_bp.route("/outcome", methods=["POST"])
def fairness_outcome():
    data = _json()
    player = _preimage(data, "player_preimage")
    house = _preimage(data, "house_preimage")
    index = _index(data)

    word_index, bit_offset = split_index(index)
    player_bit = extract_bit(player, index)
    house_bit = extract_bit(house, index)
    outcome = player_bit ^ house_bit
    return jsonify({
        "word_index": word_index,
        "bit_offset": bit_offset,
        "player_bit": player_bit,
        "house_bit": house_bit,
        "outcome": outcome,
        "winner": "player" if outcome == OUTCOME_PLAYER_WINS else "house",
    })


@fairness_bp.route("/proof", methods=["POST"])
def fairness_proof():
    if KEYS is None:
        raise PreconditionError("proving keys are not loaded")
    data = _json()
    player = _preimage(data, "player_preimage")
    house = _preimage(data, "house_preimage")
    index = _index(data)

    result = prove_outcome(KEYS, player, house, index)
    return jsonify({
        "proof": serialize_proof(result.proof),
        "public_inputs": serialize_fr_list(result.public_inputs),
        "player_bit": result.player_bit,
        "house_bit": result.house_bit,
        "outcome": result.outcome,
    })
