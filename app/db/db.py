import json
import sqlite3

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app import config


def _json_serializer(value):
    # keep non-ASCII text searchable inside JSON columns
    return json.dumps(value, ensure_ascii=False)


def _unicode_lower(value):
    if isinstance(value, str):
        return value.lower()
    return value


@event.listens_for(Engine, "connect")
def _register_sqlite_functions(dbapi_connection, connection_record):
    # SQLite's built-in lower() only folds ASCII letters
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    config.DATABASE_URL,
    echo=config.SQL_ECHO,
    connect_args=connect_args,
    json_serializer=_json_serializer,
)


def create_db_and_tables(bind=None):
    # models must be imported so their tables are registered on the metadata
    from app.models import hostel, interest, item, user  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
