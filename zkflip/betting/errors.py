"""
Errors raised by the wager core
===============================

FlipError
 ├─ ValidationError        bad arguments, nothing changed          (400)
 │   ├─ RangeError
 │   ├─ InvalidCounterpartyError
 │   ├─ InvalidCommitmentError
 │   ├─ StakeMismatchError
 │   ├─ FeeTooHighError
 │   └─ InvalidLimitsError
 ├─ UnauthorizedError      caller lacks the role                    (403)
 ├─ UnknownBetError        no bet with that id                      (404)
 ├─ StateError             wrong lifecycle state                    (409)
 │   ├─ PreconditionError
 │   ├─ AlreadyCommittedError
 │   ├─ AlreadySettledError
 │   └─ DuplicateFulfillmentError
 ├─ VerificationError      proof or public inputs rejected          (422)
 │   ├─ InvalidPublicInputError
 │   └─ ProofRejectedError
 └─ LedgerInvariantError   accounting invariant broken              (500)

Every error is raised before any mutation, so a rejected call leaves no
trace. ``code`` is the stable identifier returned over HTTP.
"""


class FlipError(Exception):
    code = "flip_error"
    http_status = 500

    def __init__(self, message=""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def __str__(self):
        return self.message

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class ValidationError(FlipError):
    code = "validation_error"
    http_status = 400


class RangeError(ValidationError):
    code = "out_of_range"


class InvalidCounterpartyError(ValidationError):
    code = "invalid_counterparty"


class InvalidCommitmentError(ValidationError):
    code = "invalid_commitment"


class StakeMismatchError(ValidationError):
    code = "stake_mismatch"


class FeeTooHighError(ValidationError):
    code = "fee_too_high"


class InvalidLimitsError(ValidationError):
    code = "invalid_limits"


class UnauthorizedError(FlipError):
    code = "unauthorized"
    http_status = 403


class UnknownBetError(FlipError):
    code = "unknown_bet"
    http_status = 404

    def __init__(self, bet_id):
        super().__init__(f"bet {bet_id} does not exist")
        self.bet_id = bet_id


class StateError(FlipError):
    code = "invalid_state"
    http_status = 409


class PreconditionError(StateError):
    code = "precondition_failed"


class AlreadyCommittedError(StateError):
    code = "already_committed"


class AlreadySettledError(StateError):
    code = "already_settled"


class DuplicateFulfillmentError(StateError):
    code = "duplicate_fulfillment"


class VerificationError(FlipError):
    code = "verification_failed"
    http_status = 422


class InvalidPublicInputError(VerificationError):
    code = "invalid_public_input"


class ProofRejectedError(VerificationError):
    code = "proof_rejected"


class LedgerInvariantError(FlipError):
    code = "ledger_invariant"
    http_status = 500
