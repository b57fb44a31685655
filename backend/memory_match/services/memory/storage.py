import copy
import json
import logging
import time

from sqlalchemy.exc import SQLAlchemyError

from memory_match import db
from memory_match.models import StoredRecord


class MemoryStorage:
    """Process-local storage; mostly useful for tests."""

    def __init__(self, data=None):
        self.data = data
        self.saves = 0

    def load(self):
        return copy.deepcopy(self.data) if self.data is not None else {}

    def save(self, table) -> None:
        self.data = copy.deepcopy(table)
        self.saves += 1


class SqlRecordStorage:
    """Keeps the whole table as JSON in one named ``StoredRecord`` row.

    Must be used inside an application context.
    """

    def __init__(self, name: str, logger=None):
        self.name = name
        self.logger = logger or logging.getLogger(__name__)

    def load(self):
        try:
            record = StoredRecord.query.filter_by(name=self.name).first()
        except SQLAlchemyError as exc:
            db.session.rollback()
            self.logger.warning(f"[leaderboard-load] record={self.name} unreadable: {exc}")
            return {}
        if not record or not record.payload:
            return {}
        try:
            data = json.loads(record.payload)
        except ValueError as exc:
            self.logger.warning(f"[leaderboard-load] record={self.name} malformed JSON: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, table) -> None:
        try:
            record = StoredRecord.query.filter_by(name=self.name).first()
            if record is None:
                record = StoredRecord(name=self.name)
            record.payload = json.dumps(table, ensure_ascii=False)
            record.updated_at = time.time()
            db.session.add(record)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            self.logger.exception(f"[leaderboard-save] record={self.name} write failed")
            raise
