from ballotbox.models.ballot import Ballot
from ballotbox.models.ballot_item import BallotItem
from ballotbox.models.user import User
from ballotbox.models.vote import Vote

__all__ = [
    "User",
    "Ballot",
    "BallotItem",
    "Vote",
]
