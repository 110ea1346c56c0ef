from sqlalchemy import func

from ballotbox.extensions import db
from ballotbox.models import BallotItem, Vote


def find_tally_drift(ballot_id=None):
    """Compare stored ``vote_count`` values with the votes actually recorded.

    Returns one entry per option whose counter disagrees with ``COUNT(*)`` of
    the votes pointing at it. Nothing is rewritten.
    """
    counted_query = db.session.query(Vote.ballot_item_id, func.count(Vote.id)).group_by(
        Vote.ballot_item_id
    )
    options_query = BallotItem.query
    if ballot_id is not None:
        counted_query = counted_query.filter(Vote.ballot_id == ballot_id)
        options_query = options_query.filter_by(ballot_id=ballot_id)

    counted = dict(counted_query.all())

    drift = []
    for option in options_query.order_by(BallotItem.ballot_id, BallotItem.id).all():
        counted_votes = counted.get(option.id, 0)
        if option.vote_count != counted_votes:
            drift.append(
                {
                    "ballot_id": option.ballot_id,
                    "option_id": option.id,
                    "stored": option.vote_count,
                    "counted": counted_votes,
                }
            )
    return drift
