# Overview: Service-layer operations for concurrency; row locks, write transactions and retry.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    populate_existing() refreshes rows already held in the session identity
    map, so callers always see the values read under the lock, never a
    stale copy loaded earlier in the request.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_write_transaction()
    takes the database write lock up front instead.
    """
    return query.with_for_update().populate_existing()


def begin_write_transaction(lock_timeout_ms: int = 0) -> None:
    """
    Open the transaction boundary for a unit of work that writes shared rows.

    - SQLite: BEGIN IMMEDIATE, so concurrent writers queue on the database
      write lock instead of failing on upgrade.
    - PostgreSQL: optional SET LOCAL lock_timeout, so a request blocked on a
      hot row eventually gives up and rolls back.
    """
    dialect = db.session.get_bind().dialect.name

    if dialect == "sqlite":
        raw = db.session.connection().connection.dbapi_connection
        if not raw.in_transaction:
            db.session.execute(text("BEGIN IMMEDIATE"))
    elif dialect == "postgresql" and lock_timeout_ms:
        db.session.execute(text(f"SET LOCAL lock_timeout = {int(lock_timeout_ms)}"))


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlock victim, database locked, lock
    timeout). The session is rolled back before every retry, so each attempt
    starts from a clean unit of work. Any other exception propagates at once.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Transient database error, retrying (attempt %s of %s): %s",
                attempt + 1, attempts, exc.orig,
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
