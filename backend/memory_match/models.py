from memory_match import db


class StoredRecord(db.Model):
    """A named JSON document; the leaderboard lives in one of these."""
    __tablename__ = 'stored_record'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False, index=True)
    payload = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.Float, nullable=True)
