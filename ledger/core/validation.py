"""Tagged validation results for field normalization.

Normalizing a raw field has three possible outcomes:

* :class:`Accepted`  — the raw value was recognized and canonicalized.
* :class:`Defaulted` — the raw value was absent or unrecognized and a
  conservative default was substituted.  Processing continues.
* :class:`Rejected`  — the raw value cannot be used without corrupting
  financial data.  The whole record must be skipped.

Batch callers (CSV import, API create/update) inspect the result type instead
of catching exceptions, so they can aggregate every problem in one pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True, slots=True)
class Accepted:
    value: Any


@dataclass(frozen=True, slots=True)
class Defaulted:
    """A substituted value.  ``raw`` keeps the input for uncategorized reports."""

    value: Any
    raw: Any = None


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: str

    @property
    def value(self) -> None:
        return None


FieldResult = Union[Accepted, Defaulted, Rejected]


@dataclass(frozen=True, slots=True)
class FieldError:
    """A hard-fail problem on a single field of a single record."""

    field: str
    message: str
    row: Optional[int] = None

    def __str__(self) -> str:
        if self.row is not None:
            return f"Row {self.row}: {self.message}"
        return f"{self.field}: {self.message}"
