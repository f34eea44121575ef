"""Success/failure tagged results returned by the service facade."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ErrorKind, LinkbioError


@dataclass(frozen=True)
class OperationResult:
    success: bool
    value: Any = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def ok(cls, value: Any = None, message: str = "") -> "OperationResult":
        return cls(success=True, value=value, message=message)

    @classmethod
    def fail(cls, error: LinkbioError) -> "OperationResult":
        return cls(success=False, error_kind=error.kind, message=error.message)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "value": self.value, "message": self.message}
        kind = self.error_kind.value if self.error_kind is not None else None
        return {"success": False, "error_kind": kind, "error": self.message}
