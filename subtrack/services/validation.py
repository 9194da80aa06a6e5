"""Validation gates for the subscription pipeline.

Client bodies are checked with :func:`validate_create` / :func:`validate_update`
and failures surface as 400s. Rows coming back out of storage are checked with
:func:`validate_stored_row`; a failure there is a data integrity fault and
surfaces as a 500.
"""
from typing import Any

import pydantic

from subtrack.errors import DataIntegrityError, ValidationError
from subtrack.schemas.subscription import (
    StoredSubscription,
    SubscriptionCreate,
    SubscriptionUpdate,
)


def format_issues(exc: pydantic.ValidationError) -> list[str]:
    """One ``path: reason`` entry per offending field."""
    issues = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        issues.append(f"{path}: {error['msg']}" if path else error["msg"])
    return issues


def validate_create(body: Any) -> SubscriptionCreate:
    try:
        return SubscriptionCreate.model_validate(body)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Validation failed: {', '.join(format_issues(exc))}")


def validate_update(body: Any) -> SubscriptionUpdate:
    try:
        payload = SubscriptionUpdate.model_validate(body)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Validation failed: {', '.join(format_issues(exc))}")

    if not payload.model_fields_set:
        raise ValidationError(
            "Validation failed: At least one field must be provided for update"
        )
    return payload


def validate_stored_row(row: Any) -> StoredSubscription:
    try:
        return StoredSubscription.model_validate(row, from_attributes=True)
    except pydantic.ValidationError as exc:
        row_id = row.get("id") if isinstance(row, dict) else getattr(row, "id", None)
        raise DataIntegrityError(
            f"Stored subscription id={row_id} is malformed: {', '.join(format_issues(exc))}"
        )
