from postgrest.exceptions import APIError
from sqlalchemy.exc import SQLAlchemyError

from waiver_intake.errors import PersistenceError
from waiver_intake.models import db, Waiver, TEXT_COLUMNS, BOOLEAN_COLUMNS, get_now_utc


def build_record(payload, waiver_id):
    """
    Flattens a submission into a `waivers` row.
    Only known columns survive; embedded images must already be swapped for paths.
    """
    record = {}
    for col in TEXT_COLUMNS:
        value = payload.get(col)
        if value is None or value == '':
            record[col] = None
        else:
            record[col] = value if isinstance(value, str) else str(value)

    for col in BOOLEAN_COLUMNS:
        record[col] = bool(payload.get(col))

    record['waiver_id'] = waiver_id
    return record


class SupabaseWaiverStore:
    """Inserts into the Supabase `waivers` table."""

    def __init__(self, client, table='waivers'):
        self.client = client
        self.table = table

    def insert(self, record):
        row = dict(record)
        row['created_at'] = get_now_utc().isoformat()
        try:
            self.client.table(self.table).insert(row).execute()
        except APIError as e:
            raise PersistenceError(e.message, details=e.details, hint=e.hint) from e
        return row


class SqlWaiverStore:
    """Flask-SQLAlchemy fallback (SQLite locally, Postgres via DATABASE_URL)."""

    def insert(self, record):
        waiver = Waiver(**record)
        try:
            db.session.add(waiver)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            origin = getattr(e, 'orig', None)
            raise PersistenceError(str(origin or e), details=type(e).__name__) from e
        return waiver.to_dict()
