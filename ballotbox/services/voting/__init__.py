from ballotbox.services.voting.consistency import find_tally_drift
from ballotbox.services.voting.ledger import cast_vote, get_user_vote
from ballotbox.services.voting.results import tally_ballot_results

__all__ = [
    "cast_vote",
    "find_tally_drift",
    "get_user_vote",
    "tally_ballot_results",
]
