# grocery/utils/db_errors.py
import re
from contextlib import contextmanager

from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import DisconnectionError, IntegrityError, OperationalError

from grocery.data.database import Base
from grocery.domain.errors import (
    ConstraintViolation,
    ReferentialIntegrityError,
    StoreError,
    TransientStorageError,
)

_FOREIGN_KEY_SQLSTATE = "23503"

_SQLITE_CHECK = re.compile(r"CHECK constraint failed: (\w+)")
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: ([\w., ]+)")
_SQLITE_NOT_NULL = re.compile(r"NOT NULL constraint failed: ([\w.]+)")


def _unique_constraint_for(columns: list[str]) -> str:
    """Map sqlite's ``table.col, table.col`` message back to the constraint name."""
    table_name = columns[0].split(".")[0]
    column_names = {c.split(".")[1] for c in columns}
    table = Base.metadata.tables.get(table_name)
    if table is not None:
        for constraint in table.constraints:
            if isinstance(constraint, UniqueConstraint) and constraint.name:
                if {c.name for c in constraint.columns} == column_names:
                    return constraint.name
    return "unique:" + ",".join(sorted(columns))


def classify_integrity_error(exc: IntegrityError) -> StoreError:
    orig = exc.orig
    message = str(orig)

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == _FOREIGN_KEY_SQLSTATE or "FOREIGN KEY constraint failed" in message:
        return ReferentialIntegrityError("foreign_key", message)

    # psycopg exposes the constraint name directly
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return ConstraintViolation(constraint_name, message)

    match = _SQLITE_CHECK.search(message)
    if match:
        return ConstraintViolation(match.group(1), message)

    match = _SQLITE_UNIQUE.search(message)
    if match:
        columns = [c.strip() for c in match.group(1).split(",")]
        return ConstraintViolation(_unique_constraint_for(columns), message)

    match = _SQLITE_NOT_NULL.search(message)
    if match:
        return ConstraintViolation("not_null:" + match.group(1), message)

    return ConstraintViolation("integrity", message)


def translate(exc: Exception) -> StoreError:
    if isinstance(exc, IntegrityError):
        return classify_integrity_error(exc)
    if isinstance(exc, (OperationalError, DisconnectionError)):
        return TransientStorageError(f"Storage unavailable: {exc}")
    raise TypeError(f"Cannot translate {type(exc).__name__}")


@contextmanager
def storage_errors():
    """Re-raise SQLAlchemy failures as the store's own error types."""
    try:
        yield
    except (IntegrityError, OperationalError, DisconnectionError) as exc:
        raise translate(exc) from exc
