"""
Outcome of an `INSERT ... ON CONFLICT DO NOTHING RETURNING ...` statement.

Postgres returns the new row, or nothing when a uniqueness constraint
suppressed the insert. Repositories turn that into an explicit branch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Inserted:
    row: dict[str, Any]


@dataclass(frozen=True)
class AlreadyExists:
    pass


InsertResult = Union[Inserted, AlreadyExists]


def insert_outcome(row: dict[str, Any] | None) -> InsertResult:
    if row is None:
        return AlreadyExists()
    return Inserted(row)
