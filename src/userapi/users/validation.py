"""
=============================================================================
USER VALIDATION
=============================================================================

Validation is an explicit rule table: for each field, an ordered list of
(predicate, message) pairs.

    USER_RULES
    ──────────
    name   required                      "Name is required"
           1..100 UTF-16 units           "Name must be between 1 and 100 characters"
    title  required                      "Title is required"
           1..100 UTF-16 units           "Title must be between 1 and 100 characters"
    email  required                      "Email is required"
           valid address                 "Please enter a valid email address"
           at most 255 UTF-16 units      "Email cannot exceed 255 characters"

Evaluation is exhaustive across fields, so a client gets every problem
in one response. Inside one field a failed "required" rule stops that
field: an absent value has no length and no format worth reporting.

    validate_user(UserPayload(name="", title="", email="not-an-email"))
        → ["Name is required",
           "Title is required",
           "Please enter a valid email address"]

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional
import re

from .models import UserPayload


# WHATWG "valid e-mail address": dot-atom-ish local part, then one or more
# LDH labels (max 63 chars each) separated by dots.
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


class Rule(NamedTuple):
    """One check on one field value."""
    check: Callable[[str], bool]
    message: str
    required: bool = False


class ValidationError(ValueError):
    """Raised by the store when handed a user that fails USER_RULES."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def is_present(value: Optional[str]) -> bool:
    """Non-null and not just whitespace."""
    return value is not None and value.strip() != ""


def utf16_length(value: str) -> int:
    """Length in UTF-16 code units; characters outside the BMP count twice."""
    return len(value.encode("utf-16-le", errors="surrogatepass")) // 2


def length_between(minimum: int, maximum: int) -> Callable[[str], bool]:
    return lambda value: minimum <= utf16_length(value) <= maximum


def is_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


USER_RULES: Dict[str, List[Rule]] = {
    "name": [
        Rule(is_present, "Name is required", required=True),
        Rule(length_between(1, 100), "Name must be between 1 and 100 characters"),
    ],
    "title": [
        Rule(is_present, "Title is required", required=True),
        Rule(length_between(1, 100), "Title must be between 1 and 100 characters"),
    ],
    "email": [
        Rule(is_present, "Email is required", required=True),
        Rule(is_email, "Please enter a valid email address"),
        Rule(length_between(0, 255), "Email cannot exceed 255 characters"),
    ],
}


def validate_user(payload: UserPayload, rules: Dict[str, List[Rule]] = USER_RULES) -> ValidationResult:
    """
    Check a payload against every rule.

    Args:
        payload: The candidate user fields.
        rules: Rule table, field name → ordered rules.

    Returns:
        ValidationResult whose errors are in field order, then rule order.
    """
    result = ValidationResult()

    for field_name, field_rules in rules.items():
        value = getattr(payload, field_name)
        for rule in field_rules:
            if rule.check(value):
                continue
            result.errors.append(rule.message)
            if rule.required:
                break

    return result
