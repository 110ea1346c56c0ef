import pytest
from sqlalchemy import text

from ballotbox.models import Ballot, BallotItem
from ballotbox.services.voting import cast_vote, find_tally_drift, tally_ballot_results
from ballotbox.services.voting.errors import BallotNotFound, StorageUnavailable


def _summary(result):
    return [(row["option"].id, row["vote_count"]) for row in result["results"]]


def test_results_follow_votes_and_switches(db_session, voter, ballot, options):
    go, python = options

    cast_vote(voter.id, ballot.id, go.id)
    result = tally_ballot_results(ballot.id)
    assert _summary(result) == [(go.id, 1), (python.id, 0)]
    assert result["total_votes"] == 1

    cast_vote(voter.id, ballot.id, python.id)
    result = tally_ballot_results(ballot.id)
    assert _summary(result) == [(python.id, 1), (go.id, 0)]
    assert result["total_votes"] == 1


def test_results_break_ties_by_option_id(db_session, voter, other_voter, ballot, options):
    go, python = options
    db_session.add(BallotItem(ballot_id=ballot.id, title="Rust"))
    db_session.commit()
    rust = BallotItem.query.filter_by(title="Rust").one()

    cast_vote(voter.id, ballot.id, rust.id)
    cast_vote(other_voter.id, ballot.id, python.id)

    result = tally_ballot_results(ballot.id)
    assert _summary(result) == [(python.id, 1), (rust.id, 1), (go.id, 0)]
    assert result["total_votes"] == 2


def test_results_for_ballot_without_options(db_session, voter):
    empty = Ballot(title="Nothing yet", creator_id=voter.id)
    db_session.add(empty)
    db_session.commit()

    result = tally_ballot_results(empty.id)

    assert result["results"] == []
    assert result["total_votes"] == 0


def test_results_are_readable_for_inactive_ballots(db_session, inactive_ballot):
    result = tally_ballot_results(inactive_ballot.id)

    assert result["ballot"].id == inactive_ballot.id
    assert result["total_votes"] == 0
    assert [row["vote_count"] for row in result["results"]] == [0]


def test_results_for_unknown_ballot(db_session):
    with pytest.raises(BallotNotFound):
        tally_ballot_results(999)


def test_no_drift_after_normal_voting(db_session, voter, other_voter, ballot, options):
    go, python = options
    cast_vote(voter.id, ballot.id, go.id)
    cast_vote(other_voter.id, ballot.id, go.id)
    cast_vote(voter.id, ballot.id, python.id)

    assert find_tally_drift() == []
    assert find_tally_drift(ballot.id) == []


def test_drift_reports_tampered_counter(db_session, voter, ballot, options):
    go, python = options
    cast_vote(voter.id, ballot.id, go.id)

    python.vote_count = 3
    db_session.commit()

    assert find_tally_drift(ballot.id) == [
        {"ballot_id": ballot.id, "option_id": python.id, "stored": 3, "counted": 0}
    ]


def test_results_storage_failure(db_session, ballot, break_query):
    break_query(BallotItem)

    with pytest.raises(StorageUnavailable) as excinfo:
        tally_ballot_results(ballot.id)

    assert "Lost connection" not in excinfo.value.message


def test_rows_inserted_outside_the_orm_get_server_defaults(db_session, voter):
    db_session.execute(
        text("INSERT INTO ballots (title, creator_id) VALUES ('Raw ballot', :creator)"),
        {"creator": voter.id},
    )
    ballot = Ballot.query.filter_by(title="Raw ballot").one()
    db_session.execute(
        text("INSERT INTO ballot_items (ballot_id, title) VALUES (:ballot, 'Raw option')"),
        {"ballot": ballot.id},
    )
    option = BallotItem.query.filter_by(title="Raw option").one()
    db_session.execute(
        text(
            "INSERT INTO votes (user_id, ballot_id, ballot_item_id) "
            "VALUES (:user, :ballot, :option)"
        ),
        {"user": voter.id, "ballot": ballot.id, "option": option.id},
    )
    db_session.commit()

    assert ballot.is_active is True
    assert ballot.created_at is not None
    assert ballot.updated_at is not None
    assert option.vote_count == 0
    vote = ballot.votes[0]
    assert vote.created_at is not None
