"""Error values returned by the split engine and the services around it."""
from dataclasses import dataclass
from typing import Dict, Any

from splitledger.utils.enums import ErrorCode


@dataclass(frozen=True)
class LedgerError:
    """
    A rejected precondition.

    Returned as the second element of a ``(result, error)`` tuple, never
    raised. Every rejected rule carries its own ``code`` so callers can tell
    them apart without parsing ``message``.
    """
    code: ErrorCode
    message: str
    http_status: int = 400

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code.value}


def internal_error(message: str = "Internal error") -> LedgerError:
    return LedgerError(ErrorCode.INTERNAL_ERROR, message, 500)
