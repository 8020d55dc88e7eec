"""Validation results: lists of error and warning messages."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel


class Message(BaseModel):
    """A validation message, optionally tied to an entity id."""

    id: str = ""
    msg: str

    def render(self, level: str) -> str:
        prefix = f"ID {self.id} " if self.id else ""
        return f"{prefix}{level}: {self.msg}"


class Result(BaseModel):
    """Collection of errors and warnings.

    Results are values: the combinators return new results and never
    modify the instances they are called on.
    """

    errors: List[Message] = []
    warnings: List[Message] = []

    def concat(self, other: Result) -> Result:
        return Result(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def add_error(self, error: Message) -> Result:
        return Result(errors=self.errors + [error], warnings=list(self.warnings))

    def add_warning(self, warning: Message) -> Result:
        return Result(errors=list(self.errors), warnings=self.warnings + [warning])

    def ok(self) -> bool:
        return not self.errors and not self.warnings

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def __str__(self) -> str:
        lines = [w.render("WARNING") for w in self.warnings]
        lines += [e.render("ERROR") for e in self.errors]
        return "".join(f"{line}\n" for line in lines)
