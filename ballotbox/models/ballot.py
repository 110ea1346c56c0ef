from datetime import datetime

from sqlalchemy import true

from ballotbox.extensions import db


class Ballot(db.Model):
    __tablename__ = "ballots"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True)
    superstate = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    creator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    is_active = db.Column(
        db.Boolean, nullable=False, default=True, server_default=true()
    )
    created_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        server_default=db.func.now(),
    )

    items = db.relationship("BallotItem", backref="ballot", lazy=True)
    votes = db.relationship("Vote", backref="ballot", lazy=True)
