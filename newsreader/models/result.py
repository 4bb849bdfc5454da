"""Tri-state wrapper for in-flight and completed fetches.

A stream carries exactly one of these at a time:

    match state:
        case Loading():
            ...
        case Success(payload=page):
            ...
        case Error(message=message, payload=page):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Loading:
    pass


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    payload: T


@dataclass(frozen=True, slots=True)
class Error(Generic[T]):
    message: str
    payload: T | None = None


ResultState = Union[Loading, Success[T], Error[T]]
