from billing.extensions import db


class Settings(db.Model):
    """Single-row application settings stored as one JSON document."""
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    data = db.Column(db.JSON, nullable=False, default=dict)
