"""Employee record model stored in Cosmos DB."""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, StringConstraints
from pydantic_core import PydanticCustomError

# All employees share one logical partition so the unique key on /email is global.
EMPLOYEE_KIND = "employee"

CURRENCY_LABEL = "CAD"

GENDERS: tuple[str, ...] = ("male", "Male", "Female", "female", "non-binary", "prefer not to say")

EMAIL_PATTERN = re.compile(r"^([\w.-]+@([\w-]+\.)+[\w-]{2,4})?$", re.ASCII)

# Uniqueness is declared here and enforced by the container's unique key policy.
UNIQUE_FIELDS: tuple[str, ...] = ("email",)

FIELD_ORDER: tuple[str, ...] = (
    "firstName",
    "lastName",
    "email",
    "gender",
    "city",
    "designation",
    "salary",
    "createdOn",
    "updatedOn",
)

FIELD_MESSAGES: dict[str, dict[str, str]] = {
    "firstName": {
        "required": "Firstname cannot be empty",
        "min_length": "Firstname must be at least 2 characters",
        "max_length": "Firstname cannot be more than 30 characters",
    },
    "lastName": {
        "required": "Last name cannot be empty",
    },
    "email": {
        "required": "Email cannot be empty",
        "min_length": "Email must be at least 5 characters",
        "max_length": "Email cannot be more than 50 characters",
        "pattern": "Email cannot be incorrect format. Please correct it and try again.",
        "unique": "Employee with same email already exists",
    },
    "gender": {
        "required": "Gender cannot be empty",
        "enum": (
            "Gender must be one of the following: "
            + ", ".join(f"'{value}'" for value in GENDERS)
        ),
    },
    "city": {
        "required": "City cannot be empty",
    },
    "designation": {
        "required": "Designation cannot be empty",
    },
    "salary": {
        "required": "Salary cannot be empty",
        "type": "Salary must be a number",
        "min": "Salary must be at least 100",
        "negative": "Negative salary not allowed",
    },
    "createdOn": {
        "future": "Created on cannot be in the future",
    },
}

# snake_case attribute names and the `surname` alias → document field names
_DOCUMENT_NAMES: dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "surname": "lastName",
    "created_on": "createdOn",
    "updated_on": "updatedOn",
}


def document_field_name(name: str) -> str:
    return _DOCUMENT_NAMES.get(name, name)


def _check_email_format(value: str) -> str:
    if not EMAIL_PATTERN.match(value):
        raise PydanticCustomError("string_pattern_mismatch", FIELD_MESSAGES["email"]["pattern"])
    return value


def _format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]

Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_lower=True, min_length=5, max_length=50),
    AfterValidator(_check_email_format),
]

Gender = Literal["male", "Male", "Female", "female", "non-binary", "prefer not to say"]


class _Timestamps(BaseModel):
    created_on: datetime | None = Field(default=None, alias="createdOn")
    updated_on: datetime | None = Field(default=None, alias="updatedOn")


class EmployeeRecord(BaseModel):
    """One employee document.

    Attributes are snake_case; the stored document uses camelCase keys.
    ``surname`` is accepted on input and readable/writable as an attribute,
    but is never stored. ``full_name`` is derived from the stored names and
    assigning to it leaves them unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: Literal["employee"] = EMPLOYEE_KIND

    first_name: TrimmedStr = Field(alias="firstName", min_length=2, max_length=30)
    last_name: TrimmedStr = Field(
        alias="lastName",
        validation_alias=AliasChoices("lastName", "surname", "last_name"),
        min_length=1,
    )
    email: Email
    gender: Gender
    city: TrimmedStr = Field(min_length=1)
    designation: TrimmedStr = Field(min_length=1)
    salary: float = Field(default=0.0, ge=100, allow_inf_nan=False, validate_default=True)

    created_on: datetime | None = Field(default=None, alias="createdOn")
    updated_on: datetime | None = Field(default=None, alias="updatedOn")

    @property
    def surname(self) -> str:
        return self.last_name

    @surname.setter
    def surname(self, value: str) -> None:
        self.last_name = value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @full_name.setter
    def full_name(self, value: str) -> None:
        # Derived value; first and last name stay as stored.
        pass

    @property
    def formatted_salary(self) -> str:
        return f"{CURRENCY_LABEL} {_format_amount(self.salary)}"

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON document written to Cosmos DB."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> EmployeeRecord:
        """Load a stored document without re-checking field constraints.

        Timestamps are still parsed; everything else is taken as stored.
        """
        values: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if key in doc:
                values[name] = doc[key]
            elif name in doc:
                values[name] = doc[name]
        stamps = _Timestamps.model_validate(
            {"createdOn": values.get("created_on"), "updatedOn": values.get("updated_on")}
        )
        values["created_on"] = stamps.created_on
        values["updated_on"] = stamps.updated_on
        return cls.model_construct(**values)
