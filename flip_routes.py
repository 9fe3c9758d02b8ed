"""
Wager Flask Blueprint
=====================

JSON endpoints over the BetRegistry injected by app.py.

  POST /bets                          create a bet (caller is the player)
  GET  /bets, /bets/<id>              snapshots
  POST /bets/<id>/house-commit        house commitment and matching stake
  POST /bets/<id>/settle              proof-backed settlement
  POST /oracle/fulfill                oracle delivers a raw random word
  GET  /oracle/requests               pending randomness requests
  POST /oracle/test-index             admin picks an index (test mode only)
  GET  /pool, /events                 ledger and notification log
  POST /admin/house-fee, /admin/bet-limits, /admin/emergency-withdraw

The caller is the `X-Account` header. Big integers are decimal or 0x strings.
"""

import logging

from flask import Blueprint, jsonify, request

from zkflip.betting.errors import PreconditionError, ValidationError
from zkflip.betting.models import BetStatus
from zkflip.betting.oracle import MockRandomnessOracle

from flip_serializers import deserialize_proof, parse_int

logger = logging.getLogger(__name__)

flip_bp = Blueprint('flip', __name__)

# registry is injected by app.py
REGISTRY = None


def init_flip_bp(registry):
    global REGISTRY
    REGISTRY = registry


# ─── request helpers ───

def caller():
    return request.headers.get("X-Account")


def payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def field(data, name, parse=parse_int, required=True):
    if name not in data or data[name] is None:
        if required:
            raise ValidationError(f"missing field '{name}'")
        return None
    try:
        return parse(data[name])
    except (TypeError, ValueError):
        raise ValidationError(f"field '{name}' is not an integer")


def optional_bit(data, name):
    value = field(data, name, required=False)
    if value is not None and value not in (0, 1):
        raise ValidationError(f"field '{name}' must be 0 or 1")
    return value


# ─── bets ───

@flip_bp.route("/bets", methods=["POST"])
def create_bet():
    data = payload()
    house = data.get("house")
    if not isinstance(house, str):
        raise ValidationError("missing field 'house'")
    bet = REGISTRY.create_bet(
        caller(), house, field(data, "player_commit"), field(data, "amount")
    )
    return jsonify(bet.to_dict()), 201


@flip_bp.route("/bets", methods=["GET"])
def list_bets():
    status = request.args.get("status")
    if status is not None:
        try:
            status = BetStatus(status)
        except ValueError:
            raise ValidationError(f"unknown status '{status}'")
    bets = REGISTRY.list_bets(status)
    return jsonify({
        "bets": [b.to_dict() for b in bets],
        "next_bet_id": REGISTRY.next_bet_id,
    })


@flip_bp.route("/bets/<int:bet_id>", methods=["GET"])
def get_bet(bet_id):
    return jsonify(REGISTRY.get_bet_info(bet_id).to_dict())


@flip_bp.route("/bets/<int:bet_id>/house-commit", methods=["POST"])
def house_commit(bet_id):
    data = payload()
    bet = REGISTRY.house_commit(
        bet_id, caller(), field(data, "house_commit"), field(data, "amount")
    )
    return jsonify(bet.to_dict())


@flip_bp.route("/bets/<int:bet_id>/settle", methods=["POST"])
def settle(bet_id):
    data = payload()
    public_inputs = data.get("public_inputs")
    if not isinstance(public_inputs, list):
        raise ValidationError("missing field 'public_inputs'")
    try:
        public_inputs = [parse_int(v) for v in public_inputs]
    except ValueError:
        raise ValidationError("public inputs must be integers")

    try:
        proof = deserialize_proof(data.get("proof"))
    except (KeyError, TypeError, ValueError) as exc:
        # the verifier rejects a missing proof like an invalid one
        logger.info("malformed proof for bet %d: %s", bet_id, exc)
        proof = None

    bet = REGISTRY.settle_with_proof(
        bet_id, caller(), proof, public_inputs,
        player_bit=optional_bit(data, "player_bit"),
        house_bit=optional_bit(data, "house_bit"),
    )
    return jsonify(bet.to_dict())


# ─── oracle ───

@flip_bp.route("/oracle/fulfill", methods=["POST"])
def oracle_fulfill():
    data = payload()
    bet_id = field(data, "bet_id")
    index = REGISTRY.oracle.fulfill_randomness(bet_id, field(data, "random_word"), caller())
    return jsonify({"bet_id": bet_id, "random_index": index})


@flip_bp.route("/oracle/requests", methods=["GET"])
def oracle_requests():
    return jsonify({"requests": REGISTRY.oracle.pending_requests()})


@flip_bp.route("/oracle/test-index", methods=["POST"])
def oracle_test_index():
    if not isinstance(REGISTRY.oracle, MockRandomnessOracle):
        raise PreconditionError("test randomness is disabled")
    data = payload()
    bet_id = field(data, "bet_id")
    index = REGISTRY.oracle.set_random_index_for_test(bet_id, field(data, "index"), caller())
    return jsonify({"bet_id": bet_id, "random_index": index})


# ─── pool / events ───

@flip_bp.route("/pool", methods=["GET"])
def pool():
    status = REGISTRY.pool_status()
    status["house_fee_bp"] = REGISTRY.config.house_fee_bp
    status["min_bet"] = str(REGISTRY.config.min_bet)
    status["max_bet"] = str(REGISTRY.config.max_bet)
    return jsonify(status)


@flip_bp.route("/events", methods=["GET"])
def list_events():
    bet_id = request.args.get("bet_id", type=int)
    name = request.args.get("name")
    return jsonify({"events": REGISTRY.events.all(name=name, bet_id=bet_id)})


# ─── admin ───

@flip_bp.route("/admin/house-fee", methods=["POST"])
def admin_house_fee():
    data = payload()
    fee = REGISTRY.update_house_fee(caller(), field(data, "basis_points"))
    return jsonify({"house_fee_bp": fee})


@flip_bp.route("/admin/bet-limits", methods=["POST"])
def admin_bet_limits():
    data = payload()
    min_bet, max_bet = REGISTRY.update_bet_limits(
        caller(), field(data, "min_bet"), field(data, "max_bet")
    )
    return jsonify({"min_bet": str(min_bet), "max_bet": str(max_bet)})


@flip_bp.route("/admin/emergency-withdraw", methods=["POST"])
def admin_emergency_withdraw():
    amount = REGISTRY.emergency_withdraw(caller())
    return jsonify({"amount": str(amount), "recipient": REGISTRY.config.admin})
