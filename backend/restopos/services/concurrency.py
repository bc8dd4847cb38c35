# Overview: Transaction helpers shared by the ledger services (row locks, retry on conflicts).

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Lock the selected rows until the surrounding transaction commits.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; Postgres honors it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run a unit of work that ends in a commit, retrying on lock/version conflicts.

    Retries on OperationalError (deadlocks, lock timeouts) and StaleDataError
    (Order.version_id mismatch). Any other exception rolls the session back
    and propagates, so a failed multi-step operation leaves nothing behind.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Write conflict, retrying (attempt %d of %d)", attempt + 2, attempts
            )
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
