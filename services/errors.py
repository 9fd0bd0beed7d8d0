"""Domain error kinds and the result value every service operation returns."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHENTICATION_FAILURE = "authentication_failure"


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class Result:
    value: Any = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value=None):
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str):
        return cls(error=ServiceError(kind, message))

    @classmethod
    def not_found(cls, message="Resource not found"):
        return cls.failure(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message="Integrity violation"):
        return cls.failure(ErrorKind.CONFLICT, message)

    @classmethod
    def authentication_failure(cls, message="Invalid user"):
        return cls.failure(ErrorKind.AUTHENTICATION_FAILURE, message)
