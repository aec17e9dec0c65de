from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationIssue:
    """
    One problem with user input, e.g. an empty Text1 in the send dialog.

    `field` names the form field so the UI can point at it; None for form-wide issues.
    """
    code: str
    message: str
    field: str | None = None


class ValidationError(Exception):
    """Every issue found in one pass, so the dialog can list them together."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("\n".join(f"{i.code}: {i.message}" for i in issues))

    @property
    def fields(self) -> set[str]:
        return {i.field for i in self.issues if i.field}
