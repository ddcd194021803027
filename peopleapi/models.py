"""Domain model for the people resource."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Mapping, Union


@dataclass(frozen=True)
class Person:
    """A row of the ``people`` table."""

    id: int
    name: str
    email: str


def person_from_row(row: Union[sqlite3.Row, Mapping[str, object]]) -> Person:
    """Build a :class:`Person` from a ``people`` row.

    ``NULL`` text columns come back as empty strings so the JSON shape stays
    stable for rows written outside the service.
    """

    name = row["name"]
    email = row["email"]
    return Person(
        id=int(row["id"]),
        name="" if name is None else str(name),
        email="" if email is None else str(email),
    )


__all__ = ["Person", "person_from_row"]
