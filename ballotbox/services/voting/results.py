from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ballotbox.extensions import db
from ballotbox.models import Ballot, BallotItem
from ballotbox.services.voting.errors import BallotNotFound, StorageUnavailable


def tally_ballot_results(ballot_id):
    # Closed ballots stay readable; only existence is checked.
    try:
        ballot = db.session.get(Ballot, ballot_id)
        if ballot is None:
            raise BallotNotFound()
        options = BallotItem.query.filter_by(ballot_id=ballot_id).all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Loading results for ballot %s failed", ballot_id)
        raise StorageUnavailable() from exc

    results = [
        {"option": option, "vote_count": option.vote_count or 0} for option in options
    ]
    results.sort(key=lambda row: (-row["vote_count"], row["option"].id))

    return {
        "ballot": ballot,
        "results": results,
        "total_votes": sum(row["vote_count"] for row in results),
    }
