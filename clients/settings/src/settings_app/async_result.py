"""Explicit async-load result type used by screen state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Uninitialized:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: BaseException

    def __eq__(self, other: object) -> bool:
        # Exceptions compare by identity; compare by type and message instead.
        if not isinstance(other, Failure):
            return NotImplemented
        return type(self.error) is type(other.error) and self.error.args == other.error.args

    def __hash__(self) -> int:
        return hash((type(self.error), self.error.args))


AsyncResult = Union[Uninitialized, Loading, Success[T], Failure]

UNINITIALIZED = Uninitialized()
LOADING = Loading()


def value_or_none(result: "AsyncResult[T]") -> T | None:
    if isinstance(result, Success):
        return result.value
    return None
