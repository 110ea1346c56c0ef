class VotingError(Exception):
    """Base class for failures surfaced by the vote ledger.

    Each subclass carries the HTTP status and a stable machine-readable code so
    the route layer can render it without inspecting the exception type.
    """

    status_code = 500
    code = "voting_error"
    message = "Voting error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class BallotNotFound(VotingError):
    status_code = 404
    code = "ballot_not_found"
    message = "Ballot not found"


class BallotInactive(VotingError):
    status_code = 400
    code = "ballot_inactive"
    message = "Ballot is not active"


class OptionNotFound(VotingError):
    status_code = 404
    code = "option_not_found"
    message = "Ballot item not found"


class OptionMismatch(VotingError):
    status_code = 400
    code = "option_mismatch"
    message = "Ballot item does not belong to this ballot"


class InvalidVoteRequest(VotingError):
    status_code = 400
    code = "invalid_request"
    message = "option_id or ballot_item_id is required"


class VoteNotFound(VotingError):
    status_code = 404
    code = "vote_not_found"
    message = "No vote found for this ballot"


class VoteConflict(VotingError):
    # Retryable: another request for the same user and ballot won the race.
    status_code = 409
    code = "vote_conflict"
    message = "Vote was changed concurrently, please retry"


class StorageUnavailable(VotingError):
    status_code = 503
    code = "storage_unavailable"
    message = "Database error"
