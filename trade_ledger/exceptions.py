"""
Typed errors for the ledger and reconciliation layers.

Validation of incoming requests still raises ValueError. The classes
here cover the cases a caller must be able to tell apart by type:
an id that does not exist, and stored data that breaks a ledger
invariant. Neither is ever reported as a zero balance.
"""

from typing import Any


class LedgerError(Exception):
    """Base class for ledger errors."""

    code: str = "LEDGER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class NotFound(LedgerError):
    """An unknown id was passed to a ledger operation."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity} {entity_id} not found",
            {"entity": entity, "entity_id": entity_id},
        )


class InvalidLedgerState(LedgerError):
    """
    Stored records violate a ledger invariant.

    Fatal to the single operation. No partial result is produced.
    """

    code = "INVALID_LEDGER_STATE"


class CurrencyMismatchError(InvalidLedgerState):
    """Two amounts in different currencies were combined."""

    code = "CURRENCY_MISMATCH"

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot combine {left} and {right} amounts",
            {"left": left, "right": right},
        )
