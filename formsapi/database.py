import logging
import os
import sqlite3
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import databases
import sqlalchemy
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from formsapi.errors import StoreFailure

logger = logging.getLogger(__name__)

metadata = sqlalchemy.MetaData()


form_table = sqlalchemy.Table(
    "forms",
    metadata,
    sqlalchemy.Column("form_id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String(256), nullable=False),
    sqlalchemy.Column("description", sqlalchemy.Text),
    sqlalchemy.Column("status", sqlalchemy.String(32), nullable=False),  # draft, published, closed
    sqlalchemy.Column("date_created", sqlalchemy.String(64), nullable=False),
    sqlalchemy.Column("date_updated", sqlalchemy.String(64), nullable=False),
    sqlalchemy.Column("date_published", sqlalchemy.String(64)),
    sqlalchemy.Column("date_closed", sqlalchemy.String(64)),
)

field_table = sqlalchemy.Table(
    "fields",
    metadata,
    sqlalchemy.Column("field_id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("form_id", sqlalchemy.Integer, nullable=False, index=True),
    sqlalchemy.Column("question_text", sqlalchemy.Text, nullable=False),
    sqlalchemy.Column("answer_type", sqlalchemy.String(32), nullable=False),  # text, checkbox, radio
    sqlalchemy.Column("options_json", sqlalchemy.Text),
    sqlalchemy.Column("date_updated", sqlalchemy.String(64), nullable=False),
)

client_table = sqlalchemy.Table(
    "clients",
    metadata,
    sqlalchemy.Column("client_id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String(256), nullable=False),
    sqlalchemy.Column("email", sqlalchemy.String(320), nullable=False),
    sqlalchemy.Column("form_id", sqlalchemy.Integer, index=True),
    sqlalchemy.Column("date_responded", sqlalchemy.String(64), nullable=False),
    # one submission per email per form
    sqlalchemy.UniqueConstraint("email", "form_id", name="uq_clients_email_form"),
)

response_table = sqlalchemy.Table(
    "responses",
    metadata,
    sqlalchemy.Column("response_id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("client_id", sqlalchemy.Integer, nullable=False, index=True),
    sqlalchemy.Column("field_id", sqlalchemy.Integer, nullable=False, index=True),
    sqlalchemy.Column("response_text", sqlalchemy.Text, nullable=False),
)


@dataclass
class ExecuteResult:
    rows_affected: int
    inserted_id: Optional[int]


class Store:
    """Handle on the embedded SQLite store.

    Wraps one ``databases.Database``. The three query primitives translate any
    driver failure into ``StoreFailure`` tagged with the operation name
    (``get``, ``all``, ``run``); schema setup uses ``init``. Nothing here
    retries.
    """

    def __init__(self, database_url: str, force_rollback: bool = False, wal: bool = True):
        self.database_url = database_url
        self.wal = wal
        self.database = databases.Database(database_url, force_rollback=force_rollback)

    @property
    def is_connected(self) -> bool:
        return self.database.is_connected

    async def connect(self) -> None:
        await self.database.connect()

    async def disconnect(self) -> None:
        await self.database.disconnect()

    def init_schema(self) -> None:
        """Create missing tables and indexes. Safe to run any number of times."""
        try:
            url = make_url(self.database_url)
            if url.database and url.database != ":memory:":
                directory = os.path.dirname(os.path.abspath(url.database))
                os.makedirs(directory, exist_ok=True)

            engine = sqlalchemy.create_engine(
                url.set(drivername=url.get_backend_name()),
                connect_args={"check_same_thread": False},
            )
            try:
                if self.wal:
                    with engine.connect() as connection:
                        connection.exec_driver_sql("PRAGMA journal_mode=WAL")
                metadata.create_all(engine)
            finally:
                engine.dispose()
        except (SQLAlchemyError, OSError) as e:
            raise StoreFailure("init", e) from e
        logger.info(f"Schema ready on {url.database}")

    @asynccontextmanager
    async def transaction(self):
        """Run the block in one transaction; BEGIN and COMMIT failures are tagged ``run``."""
        transaction = self.database.transaction()
        try:
            await transaction.start()
        except Exception as e:
            raise StoreFailure("run", e) from e

        try:
            yield transaction
        except BaseException:
            try:
                await transaction.rollback()
            except Exception:
                # keep the block's exception
                logger.error("Rollback failed", exc_info=True)
            raise

        try:
            await transaction.commit()
        except Exception as e:
            raise StoreFailure("run", e) from e

    async def fetch_one(self, query, values: Optional[Mapping[str, Any]] = None):
        try:
            return await self.database.fetch_one(query, values)
        except Exception as e:
            raise StoreFailure("get", e) from e

    async def fetch_all(self, query, values: Optional[Mapping[str, Any]] = None) -> List:
        try:
            return await self.database.fetch_all(query, values)
        except Exception as e:
            raise StoreFailure("all", e) from e

    async def execute(self, query, values: Optional[Mapping[str, Any]] = None) -> ExecuteResult:
        try:
            async with self.database.connection() as connection:
                inserted_id = await connection.execute(query, values)
                rows_affected = await connection.fetch_val("SELECT changes()")
        except Exception as e:
            raise StoreFailure("run", e) from e
        return ExecuteResult(rows_affected=rows_affected or 0, inserted_id=inserted_id)


def is_unique_violation(failure: StoreFailure) -> bool:
    cause = failure.cause
    if isinstance(cause, IntegrityError):
        cause = cause.orig
    return isinstance(cause, sqlite3.IntegrityError) and "UNIQUE" in str(cause)
