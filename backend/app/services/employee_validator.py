"""Validation, lifecycle hooks and derived values for employee records."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from app.models.employee import (
    FIELD_MESSAGES,
    FIELD_ORDER,
    EmployeeRecord,
    document_field_name,
)

logger = logging.getLogger(__name__)

_TIMESTAMP = TypeAdapter(datetime)

# pydantic error type → key into FIELD_MESSAGES
_ERROR_KINDS: dict[str, str] = {
    "missing": "required",
    "string_too_short": "min_length",
    "string_too_long": "max_length",
    "string_pattern_mismatch": "pattern",
    "literal_error": "enum",
    "greater_than_equal": "min",
    "float_parsing": "type",
    "float_type": "type",
    "finite_number": "type",
}


class FieldViolation(BaseModel):
    field: str
    message: str


class EmployeeValidationError(Exception):
    def __init__(self, violations: Iterable[FieldViolation]) -> None:
        self.violations: list[FieldViolation] = list(violations)
        detail = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(f"Employee validation failed: {detail}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_document(data: EmployeeRecord | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, EmployeeRecord):
        return data.model_dump(by_alias=True)
    return dict(data)


def _violation_from_error(error: Mapping[str, Any]) -> FieldViolation:
    loc = error.get("loc") or ("",)
    field = document_field_name(str(loc[0]))
    messages = FIELD_MESSAGES.get(field, {})

    kind = _ERROR_KINDS.get(error["type"])
    if error["type"] != "missing" and "required" in messages and _is_blank(error.get("input")):
        kind = "required"

    message = messages.get(kind) if kind else None
    return FieldViolation(field=field, message=message or error["msg"])


def _negative_salary(document: Mapping[str, Any]) -> FieldViolation | None:
    if "salary" not in document:
        return None
    try:
        amount = float(document["salary"])
    except (TypeError, ValueError):
        return None
    if amount < 0:
        return FieldViolation(field="salary", message=FIELD_MESSAGES["salary"]["negative"])
    return None


def _field_position(violation: FieldViolation) -> int:
    try:
        return FIELD_ORDER.index(violation.field)
    except ValueError:
        return len(FIELD_ORDER)


def violations_from(exc: ValidationError) -> list[FieldViolation]:
    """Translate a pydantic error into field violations with the declared messages."""
    return sorted((_violation_from_error(error) for error in exc.errors()), key=_field_position)


def _created_on(document: Mapping[str, Any]) -> datetime | None:
    raw = document.get("createdOn", document.get("created_on"))
    if raw is None:
        return None
    try:
        value = _TIMESTAMP.validate_python(raw)
    except ValidationError:
        # Reported by the model check.
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _collect_violations(document: Mapping[str, Any]) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    try:
        EmployeeRecord.model_validate(document)
    except ValidationError as exc:
        violations.extend(violations_from(exc))

    # Runs alongside the minimum check, so a negative salary reports both.
    negative = _negative_salary(document)
    if negative is not None:
        violations.append(negative)

    return sorted(violations, key=_field_position)


def full_name(record: EmployeeRecord) -> str:
    return record.full_name


def formatted_salary(record: EmployeeRecord) -> str:
    return record.formatted_salary


def compile_name_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise ValueError(f"Invalid first name pattern {pattern!r}: {e}") from e


def find_by_first_name(records: Iterable[EmployeeRecord], pattern: str) -> Iterator[EmployeeRecord]:
    """Lazily yield records whose first name matches ``pattern`` (case-insensitive).

    Each call walks ``records`` afresh, so calling again after the collection
    changes reflects its current contents.
    """
    regex = compile_name_pattern(pattern)
    for record in records:
        if regex.search(record.first_name):
            yield record


class EmployeeValidator:
    """Checks employee records and stamps their lifecycle timestamps.

    ``clock`` returns the current time; it defaults to UTC now.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.clock: Callable[[], datetime] = clock or _utcnow

    def _check(self, document: Mapping[str, Any]) -> list[FieldViolation]:
        violations = _collect_violations(document)

        # createdOn must never end up later than the updatedOn stamped on save.
        created_on = _created_on(document)
        if created_on is not None:
            now = self.clock()
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            if created_on > now:
                violations.append(
                    FieldViolation(field="createdOn", message=FIELD_MESSAGES["createdOn"]["future"])
                )

        return sorted(violations, key=_field_position)

    def validate(self, data: EmployeeRecord | Mapping[str, Any]) -> list[FieldViolation]:
        """Return every violation in field order; an empty list means valid."""
        return self._check(_as_document(data))

    def validate_patch(self, patch: Mapping[str, Any]) -> list[FieldViolation]:
        """Validate only the fields present in a partial update."""
        present = {document_field_name(key) for key in patch}
        return [v for v in self._check(dict(patch)) if v.field in present]

    def ensure_valid(self, data: EmployeeRecord | Mapping[str, Any]) -> EmployeeRecord:
        document = _as_document(data)
        violations = self._check(document)
        if violations:
            logger.debug("Employee record rejected with %d violation(s)", len(violations))
            raise EmployeeValidationError(violations)
        return EmployeeRecord.model_validate(document)

    def before_create(self, record: EmployeeRecord) -> EmployeeRecord:
        now = self.clock()
        record.updated_on = now
        if record.created_on is None:
            record.created_on = now
        return record

    def before_update(self, patch: dict[str, Any]) -> dict[str, Any]:
        patch.pop("updated_on", None)
        patch["updatedOn"] = self.clock()
        return patch
