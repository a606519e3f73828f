"""
Two-variant result value returned by every client call.

A ``Result`` is either a success carrying a value or a failure carrying a
classified ``ApifyError``. Network and parsing failures never cross a layer
boundary as raised exceptions; callers inspect ``ok`` or call ``unwrap()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from apify_rest.errors import ApifyError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a client call.

    Attributes:
        ok: True for success, False for failure
        value: Success value (None on failure)
        error: Classified error (None on success)
    """

    ok: bool
    value: T | None = None
    error: ApifyError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ApifyError) -> Result[T]:
        return cls(ok=False, error=error)

    def __bool__(self) -> bool:
        return self.ok

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Apply ``fn`` to the success value; failures pass through unchanged."""
        if not self.ok:
            return Result.failure(self.error)  # type: ignore[arg-type]
        return Result.success(fn(self.value))  # type: ignore[arg-type]

    def unwrap(self) -> T:
        """Return the value, or raise the carried ApifyError."""
        if not self.ok:
            raise self.error  # type: ignore[misc]
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: Any) -> Any:
        return self.value if self.ok else default

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "ok": self.ok,
            "value": self.value,
            "error": self.error.to_dict() if self.error else None,
        }
