from __future__ import annotations

from sheetdash.services.templates import HEADER_IMAGE, HEADER_KINDS, HEADER_TEXT, MessageForm
from sheetdash.validation.errors import ValidationError, ValidationIssue

DATA_URL_PREFIX = "data:"


def validate_message_form(form: MessageForm) -> None:
    issues: list[ValidationIssue] = []

    if form.header not in HEADER_KINDS:
        issues.append(ValidationIssue("MESSAGE_HEADER_KIND", "Header type is required.", "header"))

    if form.header == HEADER_TEXT and not (form.header_text or "").strip():
        issues.append(ValidationIssue("MESSAGE_HEADER_TEXT", "Header can't be empty.", "header_text"))

    if form.header == HEADER_IMAGE:
        if not form.image:
            issues.append(ValidationIssue("MESSAGE_IMAGE", "Image is required.", "image"))
        elif not form.image.startswith(DATA_URL_PREFIX) or ";base64," not in form.image:
            issues.append(ValidationIssue("MESSAGE_IMAGE_FORMAT", "Image must be a base64 data URL.", "image"))

    if not form.text1.strip():
        issues.append(ValidationIssue("MESSAGE_TEXT1", "Text1 can't be empty.", "text1"))

    if issues:
        raise ValidationError(issues)
