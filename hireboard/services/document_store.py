"""
Table-level document store over a SQLAlchemy session.

Repositories talk to storage only through this class: equality queries with
ordering and limits, insert/update/delete by id, and an atomic counter bump.
Every backend failure surfaces as ``StoreError``; unique-constraint violations
surface as ``DuplicateError`` so callers can tell them apart.
"""
from contextlib import contextmanager
import logging
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.application import Application
from ..models.candidate import Candidate
from ..models.job import Job
from ..models.recruiter import Recruiter
from ..models.user import User
from ..utils.error_handlers import DuplicateError, NotFoundError, StoreError, get_error_message

logger = logging.getLogger(__name__)

TABLES = {
    "users": User,
    "jobs": Job,
    "candidates": Candidate,
    "applications": Application,
    "recruiters": Recruiter,
}


def _is_unique_violation(error: IntegrityError) -> bool:
    msg = str(getattr(error, "orig", None) or error).lower()
    return "unique" in msg or "duplicate" in msg


class DocumentStore:
    def __init__(self, db: Session):
        self.db = db
        self._in_transaction = False

    # ------------------------------------------------------------------ helpers

    def _model(self, table: str):
        model = TABLES.get(table)
        if model is None:
            raise StoreError(f"Unknown table: {table}")
        return model

    def _primary_key(self, table: str):
        model = self._model(table)
        return model.__mapper__.primary_key[0]

    def _commit(self) -> None:
        if self._in_transaction:
            self.db.flush()
            return
        self.db.commit()

    def _run(self, operation: str, fn: Callable[[], Any]) -> Any:
        try:
            result = fn()
            self._commit()
            return result
        except IntegrityError as e:
            self.db.rollback()
            if _is_unique_violation(e):
                logger.info("Unique constraint hit during %s", operation)
                raise DuplicateError(details={"operation": operation}) from e
            logger.error("Integrity error during %s: %s", operation, e)
            raise StoreError(
                "Invalid reference. The related record may have been deleted.",
                details={"operation": operation},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error during %s: %s", operation, e)
            raise StoreError(get_error_message("database_error"), details={"operation": operation}) from e

    @contextmanager
    def transaction(self):
        """Group several writes into one commit; any failure rolls all of them back."""
        if self._in_transaction:
            yield self
            return
        self._in_transaction = True
        try:
            yield self
            self._in_transaction = False
            self._run("commit", lambda: None)
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._in_transaction = False

    # ------------------------------------------------------------------ reads

    def get(self, table: str, record_id: Any):
        model = self._model(table)
        if record_id is None:
            return None
        try:
            return self.db.get(model, record_id)
        except SQLAlchemyError as e:
            logger.error("Database error reading %s/%s: %s", table, record_id, e)
            raise StoreError(get_error_message("database_error")) from e

    def query(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list:
        """
        Equality query. A list/tuple/set filter value matches any of its members.
        """
        model = self._model(table)
        q = self.db.query(model)
        for column, value in (filters or {}).items():
            attr = getattr(model, column, None)
            if attr is None:
                raise StoreError(f"Unknown column: {table}.{column}")
            if isinstance(value, (list, tuple, set, frozenset)):
                if not value:
                    return []
                q = q.filter(attr.in_(list(value)))
            else:
                q = q.filter(attr == value)
        if order_by:
            attr = getattr(model, order_by, None)
            if attr is None:
                raise StoreError(f"Unknown column: {table}.{order_by}")
            q = q.order_by(attr.desc() if descending else attr.asc())
        if limit is not None:
            q = q.limit(int(limit))
        try:
            return q.all()
        except SQLAlchemyError as e:
            logger.error("Database error querying %s: %s", table, e)
            raise StoreError(get_error_message("database_error")) from e

    def first(self, table: str, filters: dict[str, Any], order_by: str | None = None):
        rows = self.query(table, filters, order_by=order_by, limit=1)
        return rows[0] if rows else None

    # ------------------------------------------------------------------ writes

    def insert(self, table: str, record: dict[str, Any]):
        model = self._model(table)
        obj = model(**record)

        def _do():
            self.db.add(obj)
            self.db.flush()
            return obj

        return self._run(f"insert {table}", _do)

    def update(self, table: str, record_id: Any, patch: dict[str, Any]):
        obj = self.get(table, record_id)
        if obj is None:
            raise NotFoundError(f"{table} record not found", details={"id": record_id})

        unknown = [key for key in patch if not hasattr(obj, key)]
        if unknown:
            raise StoreError(f"Unknown column: {table}.{unknown[0]}")

        def _do():
            for key, value in patch.items():
                setattr(obj, key, value)
            self.db.flush()
            return obj

        return self._run(f"update {table}", _do)

    def increment(self, table: str, record_id: Any, column: str, by: int = 1) -> None:
        """Atomic ``column = column + by`` evaluated by the database."""
        model = self._model(table)
        attr = getattr(model, column)
        pk = self._primary_key(table)

        def _do():
            updated = (
                self.db.query(model)
                .filter(pk == record_id)
                .update({attr: attr + int(by)}, synchronize_session="fetch")
            )
            if not updated:
                raise NotFoundError(f"{table} record not found", details={"id": record_id})

        self._run(f"increment {table}.{column}", _do)

    def delete(self, table: str, record_id: Any) -> bool:
        obj = self.get(table, record_id)
        if obj is None:
            return False

        def _do():
            self.db.delete(obj)
            return True

        return self._run(f"delete {table}", _do)

