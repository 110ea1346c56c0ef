from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from ballotbox.extensions import db
from ballotbox.models import Ballot, BallotItem, Vote
from ballotbox.services.voting.errors import (
    BallotInactive,
    BallotNotFound,
    OptionMismatch,
    OptionNotFound,
    StorageUnavailable,
    VoteConflict,
    VoteNotFound,
    VotingError,
)

VOTE_UNIQUE_CONSTRAINT = "uq_votes_user_ballot"

# MySQL deadlock / lock wait timeout, PostgreSQL deadlock / serialization failure.
LOCK_CONFLICT_CODES = {1213, 1205, "40P01", "40001"}


def _is_duplicate_vote(exc):
    message = str(exc.orig)
    # SQLite reports the columns instead of the constraint name.
    return (
        VOTE_UNIQUE_CONSTRAINT in message
        or "votes.user_id, votes.ballot_id" in message
    )


def _is_lock_conflict(exc):
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is None and getattr(orig, "args", None):
        code = orig.args[0]
    return isinstance(code, (int, str)) and code in LOCK_CONFLICT_CODES


def _find_existing_vote(user_id, ballot_id):
    # FOR UPDATE serializes concurrent changes of the same (user, ballot) vote.
    return (
        Vote.query.filter_by(user_id=user_id, ballot_id=ballot_id)
        .with_for_update()
        .first()
    )


def _adjust_vote_count(option_id, delta):
    db.session.execute(
        update(BallotItem)
        .where(BallotItem.id == option_id)
        .values(vote_count=BallotItem.vote_count + delta)
        .execution_options(synchronize_session=False)
    )


def _validate_vote_target(ballot_id, option_id):
    ballot = db.session.get(Ballot, ballot_id)
    if ballot is None:
        raise BallotNotFound()
    if not ballot.is_active:
        raise BallotInactive()

    option = db.session.get(BallotItem, option_id)
    if option is None:
        raise OptionNotFound()
    if option.ballot_id != ballot.id:
        raise OptionMismatch()

    return ballot, option


def cast_vote(user_id, ballot_id, option_id):
    """Record ``user_id``'s choice of ``option_id`` on ``ballot_id``.

    Creates the user's vote on first use and repoints it on later calls,
    moving one count from the previous option to the new one. Resubmitting
    the current choice writes nothing. All row changes are committed in a
    single transaction; on any failure the session is rolled back and the
    previous vote and counters stay as they were.

    Raises a ``VotingError`` subclass for every failure mode.
    """
    try:
        _validate_vote_target(ballot_id, option_id)

        vote = _find_existing_vote(user_id, ballot_id)
        if vote is None:
            vote = Vote(user_id=user_id, ballot_id=ballot_id, ballot_item_id=option_id)
            db.session.add(vote)
            try:
                db.session.flush()
            except IntegrityError as exc:
                if _is_duplicate_vote(exc):
                    raise VoteConflict() from exc
                raise
            _adjust_vote_count(option_id, 1)
            outcome = "created"
        elif vote.ballot_item_id == option_id:
            outcome = "unchanged"
        else:
            previous_option_id = vote.ballot_item_id
            _adjust_vote_count(previous_option_id, -1)
            vote.ballot_item_id = option_id
            _adjust_vote_count(option_id, 1)
            outcome = "changed"

        db.session.commit()
    except VoteConflict:
        db.session.rollback()
        current_app.logger.warning(
            "Concurrent vote write for user %s on ballot %s", user_id, ballot_id
        )
        raise
    except VotingError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        if isinstance(exc, OperationalError) and _is_lock_conflict(exc):
            current_app.logger.warning(
                "Lock conflict on vote for user %s on ballot %s", user_id, ballot_id
            )
            raise VoteConflict() from exc
        current_app.logger.exception(
            "Vote for user %s on ballot %s failed", user_id, ballot_id
        )
        raise StorageUnavailable() from exc

    current_app.logger.info(
        "Vote %s: user %s ballot %s option %s", outcome, user_id, ballot_id, option_id
    )
    return vote


def get_user_vote(user_id, ballot_id):
    try:
        vote = Vote.query.filter_by(user_id=user_id, ballot_id=ballot_id).first()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(
            "Loading vote for user %s on ballot %s failed", user_id, ballot_id
        )
        raise StorageUnavailable() from exc

    if vote is None:
        current_app.logger.debug("User %s has not voted on ballot %s", user_id, ballot_id)
        raise VoteNotFound()
    return vote
