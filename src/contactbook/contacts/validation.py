"""
Field rules for contact records.

Every rule in `CONTACT_RULES` is evaluated against a candidate field set,
so a caller gets all violations on a record at once rather than the first
one found. Uniqueness is not checked here; it needs the stored records and
belongs to the service.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic.alias_generators import to_camel

from contactbook.shared.exceptions import ContactValidationError

NAME_PATTERN = re.compile(r"[a-zA-Z\s]*")
PHONE_PATTERN = re.compile(r"[0-9\-+]{9,15}")
ADDITIONAL_INFO_MAX_LENGTH = 5000

REQUIRED_FIELDS = frozenset({"first_name", "last_name", "email", "phone"})


class RuleKind(str, Enum):
    """Category of a field rule."""

    REQUIRED = "required"
    FORMAT = "format"
    LENGTH = "length"


@dataclass(frozen=True)
class FieldViolation:
    """One broken rule, named by the field's wire name."""

    field: str
    kind: RuleKind
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class FieldRule:
    field: str
    kind: RuleKind
    check: Callable[[Any], bool]
    message: str


@dataclass(frozen=True)
class ValidatedFields:
    """A field set that passed every applicable rule."""

    values: dict[str, Any] = field(default_factory=dict)
    partial: bool = False

    def as_dict(self) -> dict[str, Any]:
        return dict(self.values)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __len__(self) -> int:
        return len(self.values)


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def _is_present(value: Any) -> bool:
    return value is not None


def _is_not_blank(value: Any) -> bool:
    return not _is_blank(value)


def _when_given(check: Callable[[Any], bool]) -> Callable[[Any], bool]:
    """Skip a format rule for missing or blank values; those are `required` failures."""

    def wrapped(value: Any) -> bool:
        if value is None or _is_blank(value):
            return True
        return check(value)

    return wrapped


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and NAME_PATTERN.fullmatch(value) is not None


def _is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _is_phone(value: Any) -> bool:
    return isinstance(value, str) and PHONE_PATTERN.fullmatch(value) is not None


def _is_optional_text(value: Any) -> bool:
    return value is None or isinstance(value, str)


def _fits_additional_info(value: Any) -> bool:
    return not isinstance(value, str) or len(value) <= ADDITIONAL_INFO_MAX_LENGTH


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _required_rules(name: str, label: str) -> tuple[FieldRule, ...]:
    return (
        FieldRule(name, RuleKind.REQUIRED, _is_present, f"{label} is required"),
        FieldRule(name, RuleKind.REQUIRED, _is_not_blank, f"{label} cannot be empty"),
    )


CONTACT_RULES: tuple[FieldRule, ...] = (
    *_required_rules("first_name", "First name"),
    FieldRule(
        "first_name",
        RuleKind.FORMAT,
        _when_given(_is_name),
        "First name can only contain letters and spaces",
    ),
    *_required_rules("last_name", "Last name"),
    FieldRule(
        "last_name",
        RuleKind.FORMAT,
        _when_given(_is_name),
        "Last name can only contain letters and spaces",
    ),
    *_required_rules("email", "Email"),
    FieldRule(
        "email",
        RuleKind.FORMAT,
        _when_given(_is_email),
        "Please enter a valid email address",
    ),
    *_required_rules("phone", "Phone number"),
    FieldRule(
        "phone",
        RuleKind.FORMAT,
        _when_given(_is_phone),
        "Phone number format is invalid. It should be between 9 and 15 digits "
        "and may include '-' or '+'",
    ),
    FieldRule(
        "additional_info",
        RuleKind.FORMAT,
        _is_optional_text,
        "Additional information must be text",
    ),
    FieldRule(
        "additional_info",
        RuleKind.LENGTH,
        _fits_additional_info,
        f"Additional information must not exceed {ADDITIONAL_INFO_MAX_LENGTH} characters",
    ),
    FieldRule(
        "verified",
        RuleKind.FORMAT,
        _is_bool,
        "Verified must be true or false",
    ),
)

WRITABLE_FIELDS: tuple[str, ...] = tuple(dict.fromkeys(rule.field for rule in CONTACT_RULES))
_BY_WIRE_NAME = {to_camel(name): name for name in WRITABLE_FIELDS}


def wire_name(name: str) -> str:
    """Name of a field as callers see it (``first_name`` -> ``firstName``)."""
    return to_camel(name)


def normalize_field_names(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Accept wire names as well as attribute names for incoming fields."""
    return {_BY_WIRE_NAME.get(key, key): value for key, value in fields.items()}


def collect_violations(
    fields: Mapping[str, Any],
    *,
    partial: bool = False,
) -> list[FieldViolation]:
    """Evaluate every applicable rule against a field set.

    Args:
        fields: Candidate values keyed by attribute or wire name.
        partial: True for updates; absent fields are then left unchecked.

    Returns:
        Violations in rule order; empty when the field set is valid.
    """
    candidate = normalize_field_names(fields)
    violations: list[FieldViolation] = []

    for rule in CONTACT_RULES:
        if rule.field not in candidate and (partial or rule.field not in REQUIRED_FIELDS):
            continue
        if not rule.check(candidate.get(rule.field)):
            violations.append(
                FieldViolation(field=wire_name(rule.field), kind=rule.kind, message=rule.message)
            )

    return violations


def validate_contact_fields(
    fields: Mapping[str, Any],
    *,
    partial: bool = False,
) -> ValidatedFields:
    """Validate a complete (create) or partial (update) field set.

    Keys outside the writable fields, ``id`` included, are dropped.

    Raises:
        ContactValidationError: If any rule is broken.
    """
    violations = collect_violations(fields, partial=partial)
    if violations:
        raise ContactValidationError(violations)

    candidate = normalize_field_names(fields)
    return ValidatedFields(
        values={name: candidate[name] for name in WRITABLE_FIELDS if name in candidate},
        partial=partial,
    )
