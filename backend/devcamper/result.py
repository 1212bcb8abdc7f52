"""
Explicit success/failure values returned by the service layer.

Services return `Ok(value)` or `Err(ApiError)` instead of raising for
expected outcomes (not found, forbidden, bad upload). Routes hand the result
to `devcamper.responses.render()`, which is the only place an `Err` becomes
an HTTP error response.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from devcamper.exceptions import ApiError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: ApiError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
