"""
zkflip Flask application
========================

    flask --app app run
    flask --app app setup-keys --out keys.json

Configuration is layered: DEFAULT_CONFIG, then ZKFLIP_* environment
variables (e.g. ZKFLIP_HOUSE_FEE_BP=200, ZKFLIP_DB_PATH=db.json), then the
test_config mapping passed to create_app.
"""

import json
import logging
import os

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from zkflip.betting.config import DEFAULTS, GameConfig
from zkflip.betting.errors import FlipError
from zkflip.betting.oracle import MockRandomnessOracle, RandomnessOracle
from zkflip.betting.registry import BetRegistry
from zkflip.betting.store import open_db
from zkflip.fairness.setup import FairnessKeys
from zkflip.fairness.verifier import FairnessVerifier

from flip_routes import flip_bp, init_flip_bp
from fairness_routes import fairness_bp, init_fairness_bp
from flip_serializers import deserialize_keys, serialize_keys

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = dict(
    DEFAULTS,
    LOG_LEVEL="INFO",
    DB_PATH=None,        # None: in-memory TinyDB
    KEYS_PATH=None,      # JSON written by `setup-keys`
)


def load_keys(path):
    with open(path) as f:
        return deserialize_keys(json.load(f))


def create_app(test_config=None, verifier=None, keys=None):
    """Application factory.

    Args:
        test_config: mapping applied last, over defaults and environment
        verifier: proof verifier override; defaults to FairnessVerifier over
            the loaded keys
        keys: FairnessKeys to use instead of loading KEYS_PATH
    """
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env("ZKFLIP")
    if test_config is not None:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    game = GameConfig.from_mapping(app.config)

    keys_path = app.config["KEYS_PATH"]
    if keys is None and keys_path and os.path.exists(keys_path):
        logger.info("loading fairness keys from %s", keys_path)
        keys = load_keys(keys_path)
    if verifier is None and keys is not None:
        verifier = FairnessVerifier(keys.vk)
    if verifier is None:
        logger.warning("no verification key loaded; settlement is disabled")

    if game.allow_test_randomness:
        logger.warning("test randomness enabled: the admin can choose random indices")
        oracle = MockRandomnessOracle(game)
    else:
        oracle = RandomnessOracle(game)

    registry = BetRegistry(game, verifier, db=open_db(app.config["DB_PATH"]),
                           oracle=oracle)
    app.extensions["zkflip"] = registry

    init_flip_bp(registry)
    init_fairness_bp(keys)
    app.register_blueprint(flip_bp)
    app.register_blueprint(fairness_bp)

    @app.errorhandler(FlipError)
    def handle_flip_error(exc):
        return jsonify(exc.to_dict()), exc.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        code = exc.name.lower().replace(" ", "_")
        return jsonify({"error": code, "message": exc.description}), exc.code

    @app.cli.command("setup-keys")
    @click.option("--out", default=None, help="output path (defaults to KEYS_PATH)")
    @click.option("--seed", default=None, help="deterministic tau, for local testing only")
    def setup_keys(out, seed):
        """Run the trusted setup for the fairness circuit and save the keys."""
        path = out or app.config["KEYS_PATH"] or "keys.json"
        generated = FairnessKeys.generate(seed=seed)
        with open(path, "w") as f:
            json.dump(serialize_keys(generated), f)
        click.echo(f"wrote fairness keys (n={generated.n}) to {path}")

    return app
