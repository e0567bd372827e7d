"""Error types raised by ClaimsPro services.

Services raise these; endpoints and the application-level exception handlers
translate them to HTTP responses. Calculation helpers never raise.
"""

from typing import Any, Dict, Optional


class ClaimsProError(Exception):
    """Base class for all domain errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ClaimsProError):
    """A referenced contract, claim, attachment or settings record does not exist"""

    def __init__(self, entity: str, entity_id: Any = None):
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(message, {"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailedError(ClaimsProError):
    """Input is malformed or out of range"""


class PersistenceFailureError(ClaimsProError):
    """The underlying storage operation failed"""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        details = {}
        if original_exception is not None:
            details["cause"] = str(original_exception)
        super().__init__(message, details)
        self.original_exception = original_exception
