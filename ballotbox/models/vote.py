from datetime import datetime

from ballotbox.extensions import db


class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    ballot_id = db.Column(
        db.Integer, db.ForeignKey("ballots.id"), nullable=False, index=True
    )
    ballot_item_id = db.Column(
        db.Integer, db.ForeignKey("ballot_items.id"), nullable=False, index=True
    )
    created_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, server_default=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint("user_id", "ballot_id", name="uq_votes_user_ballot"),
    )

    @property
    def option_id(self):
        return self.ballot_item_id
