# database.py

import json

from databases import Database
import sqlalchemy
from sqlalchemy.orm import declarative_base

from fitcoach.core.config import DATABASE_URL

database = Database(DATABASE_URL)

# Tables are declared on Base in models.py; the sync engine is only used to create them.
Base = declarative_base()
engine = sqlalchemy.create_engine(DATABASE_URL)


def create_tables():
    from fitcoach import models  # noqa: F401  (registers the tables on Base)

    Base.metadata.create_all(bind=engine)


def row_to_dict(row, json_fields: tuple[str, ...] = ()) -> dict | None:
    """Convert a `databases` record to a plain dict, decoding JSON text columns."""
    if row is None:
        return None
    data = dict(row._mapping)
    for field in json_fields:
        if data.get(field) is not None:
            data[field] = json.loads(data[field])
    return data


def rows_to_dicts(rows, json_fields: tuple[str, ...] = ()) -> list[dict]:
    return [row_to_dict(row, json_fields) for row in rows]
