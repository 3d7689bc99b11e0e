"""
Explicit success/failure results for bill operations
"""

from dataclasses import dataclass
from typing import Any, Optional

from exceptions import PatunganError


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a model mutation or a settlement computation"""
    value: Any = None
    error: Optional[PatunganError] = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: PatunganError) -> "OperationResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, raising the carried error on failure"""
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
