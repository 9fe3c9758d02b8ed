"""
HTTP API
========

Drives the Flask app through its test client with a stub verifier, so a
full wager runs in milliseconds. Real proofs are covered by the fairness
tests.
"""
import pytest

from app import create_app
from zkflip.betting.config import DEFAULTS
from zkflip.plonk.prover import Proof

ADMIN = {"X-Account": DEFAULTS["ADMIN"]}
ORACLE = {"X-Account": DEFAULTS["ORACLE"]}
PLAYER_ADDR = "0x" + "11" * 20
HOUSE_ADDR = "0x" + "22" * 20
PLAYER = {"X-Account": PLAYER_ADDR}
HOUSE = {"X-Account": HOUSE_ADDR}
STAKE = 10 ** 16

PLAYER_WORDS = list(range(1, 17))
HOUSE_WORDS = list(range(100, 116))

# structurally valid proof payload; the stub verifier only checks its type
PROOF_JSON = dict(
    {name: ["1", "2"] for name in Proof.COMMITMENT_FIELDS},
    **{name: "0" for name in Proof.EVALUATION_FIELDS}
)


class StubVerifier:
    def __init__(self):
        self.result = True
        self.calls = []

    def verify(self, proof, public_inputs):
        self.calls.append(public_inputs)
        return self.result and isinstance(proof, Proof)


@pytest.fixture
def verifier():
    return StubVerifier()


@pytest.fixture
def client(verifier):
    app = create_app(test_config={"ALLOW_TEST_RANDOMNESS": True, "LOG_LEVEL": "WARNING"},
                     verifier=verifier)
    app.testing = True
    return app.test_client()


def _create(client, player_commit="1", amount=str(STAKE)):
    return client.post("/bets", headers=PLAYER, json={
        "house": HOUSE_ADDR, "player_commit": player_commit, "amount": amount,
    })


def _fulfilled(client, index=137):
    bet_id = _create(client).get_json()["id"]
    client.post(f"/bets/{bet_id}/house-commit", headers=HOUSE,
                json={"house_commit": "2", "amount": str(STAKE)})
    client.post("/oracle/test-index", headers=ADMIN, json={"bet_id": bet_id, "index": index})
    return bet_id


def _settle(client, bet_id, headers=PLAYER, outcome=1, **extra):
    body = {"proof": PROOF_JSON, "public_inputs": ["1", "2", "137", str(outcome)]}
    body.update(extra)
    return client.post(f"/bets/{bet_id}/settle", headers=headers, json=body)


class TestBets:
    def test_create(self, client):
        """201 with the bet snapshot; big integers as strings."""
        resp = _create(client)
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["id"] == 0
        assert data["player"] == PLAYER_ADDR
        assert data["amount"] == str(STAKE)
        assert data["status"] == "created"

    def test_hex_commitment(self, client):
        """0x strings are accepted for big integers."""
        data = _create(client, player_commit="0xff").get_json()
        assert data["player_commit"] == "255"

    def test_stake_out_of_range(self, client):
        """A stake under the minimum is a 400 with a stable code."""
        resp = _create(client, amount="1")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "out_of_range"

    def test_not_json(self, client):
        """Non-object bodies are refused."""
        resp = client.post("/bets", headers=PLAYER, data="nope", content_type="text/plain")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "validation_error"

    def test_bad_integer_field(self, client):
        """Unparseable integers are refused."""
        resp = _create(client, amount="ten")
        assert resp.status_code == 400

    def test_unknown_bet(self, client):
        """404 for a missing id."""
        resp = client.get("/bets/42")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "unknown_bet"

    def test_list_and_filter(self, client):
        """The listing reports the next id and filters by status."""
        _create(client)
        _fulfilled(client)
        data = client.get("/bets").get_json()
        assert data["next_bet_id"] == 2
        assert len(data["bets"]) == 2
        created = client.get("/bets?status=created").get_json()["bets"]
        assert [b["id"] for b in created] == [0]
        assert client.get("/bets?status=bogus").status_code == 400

    def test_house_commit(self, client):
        """The house matches the stake and randomness is requested."""
        bet_id = _create(client).get_json()["id"]
        resp = client.post(f"/bets/{bet_id}/house-commit", headers=HOUSE,
                           json={"house_commit": "2", "amount": str(STAKE)})
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "house_committed"
        requests = client.get("/oracle/requests").get_json()["requests"]
        assert [r["bet_id"] for r in requests] == [bet_id]

    def test_house_commit_wrong_caller(self, client):
        """Only the named house may commit."""
        bet_id = _create(client).get_json()["id"]
        resp = client.post(f"/bets/{bet_id}/house-commit", headers=PLAYER,
                           json={"house_commit": "2", "amount": str(STAKE)})
        assert resp.status_code == 403


class TestSettle:
    def test_player_wins(self, client, verifier):
        """Outcome 1 pays the player 2·stake minus the 1% fee."""
        bet_id = _fulfilled(client)
        resp = _settle(client, bet_id, player_bit=1, house_bit=0)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "settled"
        assert data["winner"] == PLAYER_ADDR
        assert data["payout"] == str(198 * 10 ** 14)
        assert verifier.calls == [[1, 2, 137, 1]]

    def test_rejected_proof(self, client, verifier):
        """A failing verification is a 422 and the bet stays open."""
        bet_id = _fulfilled(client)
        verifier.result = False
        resp = _settle(client, bet_id)
        assert resp.status_code == 422
        assert resp.get_json()["error"] == "proof_rejected"
        assert client.get(f"/bets/{bet_id}").get_json()["status"] == "randomness_fulfilled"

    def test_malformed_proof(self, client):
        """A proof that does not parse is rejected like a false one."""
        bet_id = _fulfilled(client)
        resp = _settle(client, bet_id, proof={"a_commit": "x"})
        assert resp.status_code == 422

    def test_stranger(self, client):
        """Only counterparties may settle."""
        bet_id = _fulfilled(client)
        resp = _settle(client, bet_id, headers={"X-Account": "0x" + "33" * 20})
        assert resp.status_code == 403

    def test_before_randomness(self, client):
        """Settling without an index is a 409."""
        bet_id = _create(client).get_json()["id"]
        resp = _settle(client, bet_id)
        assert resp.status_code == 409

    def test_wrong_index(self, client):
        """Public inputs must carry the stored index."""
        bet_id = _fulfilled(client, index=5)
        resp = _settle(client, bet_id)
        assert resp.status_code == 422
        assert resp.get_json()["error"] == "invalid_public_input"

    def test_events_recorded(self, client):
        """The full lifecycle is visible in /events."""
        bet_id = _fulfilled(client)
        _settle(client, bet_id)
        names = [e["name"] for e in client.get(f"/events?bet_id={bet_id}").get_json()["events"]]
        assert names == [
            "BetCreated", "PlayerCommitted", "HouseCommitted",
            "RandomnessRequested", "RandomnessFulfilled", "BetSettled",
        ]


class TestOracleRoutes:
    def test_fulfill(self, client):
        """The oracle account delivers a raw word; the index is word mod 512."""
        bet_id = _create(client).get_json()["id"]
        client.post(f"/bets/{bet_id}/house-commit", headers=HOUSE,
                    json={"house_commit": "2", "amount": str(STAKE)})
        resp = client.post("/oracle/fulfill", headers=ORACLE,
                           json={"bet_id": bet_id, "random_word": "1025"})
        assert resp.get_json() == {"bet_id": bet_id, "random_index": 1}

    def test_fulfill_wrong_caller(self, client):
        """Other accounts are refused."""
        resp = client.post("/oracle/fulfill", headers=PLAYER, json={"bet_id": 0, "random_word": "1"})
        assert resp.status_code == 403

    def test_test_index_disabled(self, verifier):
        """Without test randomness the admin shortcut is a 409."""
        app = create_app(test_config={"LOG_LEVEL": "WARNING"}, verifier=verifier)
        resp = app.test_client().post("/oracle/test-index", headers=ADMIN,
                                      json={"bet_id": 0, "index": 1})
        assert resp.status_code == 409


class TestAdmin:
    def test_pool(self, client):
        """The pool view carries the ledger and the fee schedule."""
        _create(client)
        data = client.get("/pool").get_json()
        assert data["pool"] == str(STAKE)
        assert data["locked"] == str(STAKE)
        assert data["house_fee_bp"] == 100

    def test_house_fee(self, client):
        """The admin may change the fee up to the ceiling."""
        resp = client.post("/admin/house-fee", headers=ADMIN, json={"basis_points": 250})
        assert resp.get_json() == {"house_fee_bp": 250}
        resp = client.post("/admin/house-fee", headers=ADMIN, json={"basis_points": 5000})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "fee_too_high"

    def test_house_fee_not_admin(self, client):
        """Others get a 403."""
        resp = client.post("/admin/house-fee", headers=PLAYER, json={"basis_points": 1})
        assert resp.status_code == 403

    def test_bet_limits(self, client):
        """New limits apply to the next bet."""
        resp = client.post("/admin/bet-limits", headers=ADMIN,
                           json={"min_bet": str(2 * STAKE), "max_bet": str(10 * STAKE)})
        assert resp.get_json() == {"min_bet": str(2 * STAKE), "max_bet": str(10 * STAKE)}
        assert _create(client).status_code == 400

    def test_emergency_withdraw(self, client):
        """Only the fee surplus leaves; locked stakes stay."""
        bet_id = _fulfilled(client)
        _settle(client, bet_id)
        _create(client)
        resp = client.post("/admin/emergency-withdraw", headers=ADMIN)
        assert resp.get_json()["amount"] == str(2 * 10 ** 14)
        data = client.get("/pool").get_json()
        assert data["pool"] == data["locked"] == str(STAKE)


class TestFairnessRoutes:
    def test_commit(self, client):
        """The commitment route matches the library."""
        from zkflip.fairness.commitment import commit
        resp = client.post("/fairness/commit", json={"preimage": PLAYER_WORDS})
        assert resp.get_json() == {"commitment": str(commit(PLAYER_WORDS))}

    def test_commit_bad_preimage(self, client):
        """Fifteen words are refused."""
        resp = client.post("/fairness/commit", json={"preimage": PLAYER_WORDS[:15]})
        assert resp.status_code == 400

    def test_random_data(self, client):
        """Sixteen 32-bit words and their commitment."""
        data = client.get("/fairness/random-data").get_json()
        assert len(data["preimage"]) == 16
        assert all(0 <= w < 2 ** 32 for w in data["preimage"])
        assert int(data["commitment"]) > 0

    @pytest.mark.parametrize("index,outcome,winner", [(0, 1, "player"), (137, 0, "house")])
    def test_outcome(self, client, index, outcome, winner):
        """Bits, outcome and winner at an index."""
        data = client.post("/fairness/outcome", json={
            "player_preimage": PLAYER_WORDS, "house_preimage": HOUSE_WORDS, "bit_index": index,
        }).get_json()
        assert data["word_index"] == index // 32
        assert data["bit_offset"] == index % 32
        assert data["outcome"] == outcome
        assert data["winner"] == winner

    def test_outcome_bad_index(self, client):
        """Index 512 is out of range."""
        resp = client.post("/fairness/outcome", json={
            "player_preimage": PLAYER_WORDS, "house_preimage": HOUSE_WORDS, "bit_index": 512,
        })
        assert resp.status_code == 400

    def test_proof_without_keys(self, client):
        """Proving needs keys; without them the route is a 409."""
        resp = client.post("/fairness/proof", json={
            "player_preimage": PLAYER_WORDS, "house_preimage": HOUSE_WORDS, "bit_index": 0,
        })
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "precondition_failed"


class TestHttpErrors:
    def test_not_found_is_json(self, client):
        """Werkzeug errors use the same JSON shape."""
        resp = client.get("/nowhere")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "not_found"
