from ballotbox.extensions import db


class BallotItem(db.Model):
    __tablename__ = "ballot_items"

    id = db.Column(db.Integer, primary_key=True)
    ballot_id = db.Column(
        db.Integer, db.ForeignKey("ballots.id"), nullable=False, index=True
    )
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    # Only ever changed through relative UPDATEs in services.voting.ledger.
    vote_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    votes = db.relationship("Vote", backref="ballot_item", lazy=True)

    __table_args__ = (
        db.CheckConstraint("vote_count >= 0", name="ck_ballot_items_vote_count"),
    )
