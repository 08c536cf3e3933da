"""Internal types for the policy engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class StatementType(enum.Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CREATE = "CREATE"
    ALTER = "ALTER"
    DROP = "DROP"
    TRUNCATE = "TRUNCATE"
    GRANT = "GRANT"
    REVOKE = "REVOKE"
    UNKNOWN = "UNKNOWN"  # Anything we can't classify → blocked


# SELECT has its own allow path; DDL and admin statements are never allowed.
ALLOWED_DML = frozenset({StatementType.INSERT, StatementType.UPDATE, StatementType.DELETE})


@dataclass(frozen=True)
class ClassificationResult:
    valid: bool
    statement_type: StatementType
    error: str | None = None
    is_allowed_dml: bool = False

    def to_dict(self) -> dict[str, object]:
        d: dict[str, object] = {
            "valid": self.valid,
            "statementType": self.statement_type.value,
        }
        if self.error is not None:
            d["error"] = self.error
        return d
