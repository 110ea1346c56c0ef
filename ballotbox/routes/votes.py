from flask import current_app, request
from flask_login import current_user, login_required

from ballotbox.services.voting import cast_vote, get_user_vote, tally_ballot_results
from ballotbox.services.voting.errors import (
    InvalidVoteRequest,
    VoteConflict,
    VotingError,
)


def _read_option_id(payload):
    # option_id is canonical; ballot_item_id is the older client's name and
    # is only consulted when option_id is absent.
    if "option_id" in payload and payload["option_id"] is not None:
        raw = payload["option_id"]
    elif "ballot_item_id" in payload and payload["ballot_item_id"] is not None:
        raw = payload["ballot_item_id"]
    else:
        raise InvalidVoteRequest()

    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidVoteRequest("option_id must be an integer")
    if raw <= 0:
        raise InvalidVoteRequest("option_id must be a positive integer")
    return raw


def _vote_to_dict(vote):
    return {
        "id": vote.id,
        "user_id": vote.user_id,
        "ballot_id": vote.ballot_id,
        "ballot_item_id": vote.ballot_item_id,
        "option_id": vote.option_id,
        "created_at": vote.created_at.isoformat() if vote.created_at else None,
    }


def register_vote_routes(app):
    @app.errorhandler(VotingError)
    def handle_voting_error(error):
        headers = {}
        if isinstance(error, VoteConflict):
            headers["Retry-After"] = "1"
        return error.to_dict(), error.status_code, headers

    @app.route("/api/v1/ballots/<int:ballot_id>/vote", methods=["POST"])
    @login_required
    def vote_on_ballot(ballot_id):
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise InvalidVoteRequest("Request body must be a JSON object")

        option_id = _read_option_id(payload)
        cast_vote(current_user.id, ballot_id, option_id)
        return {"message": "Vote recorded successfully"}

    @app.route("/api/v1/ballots/<int:ballot_id>/my-vote")
    @login_required
    def my_vote(ballot_id):
        vote = get_user_vote(current_user.id, ballot_id)
        return _vote_to_dict(vote)

    @app.route("/api/v1/ballots/<int:ballot_id>/results")
    def ballot_results(ballot_id):
        tally = tally_ballot_results(ballot_id)
        current_app.logger.debug(
            "Results for ballot %s: %s votes", ballot_id, tally["total_votes"]
        )
        return {
            "ballot_id": tally["ballot"].id,
            "results": [
                {
                    "id": row["option"].id,
                    "option_id": row["option"].id,
                    "ballot_id": row["option"].ballot_id,
                    "title": row["option"].title,
                    "option_title": row["option"].title,
                    "description": row["option"].description or "",
                    "vote_count": row["vote_count"],
                }
                for row in tally["results"]
            ],
            "total_votes": tally["total_votes"],
        }
