"""
Validators Module

Advisory format checks for corrected field values.

A failing check never blocks a save: the reviewer may store a value that does
not parse, and the error text is shown next to it. Empty values are always
valid; a missing value is a different state from a malformed one.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, TYPE_CHECKING

from .field_types import FieldType

if TYPE_CHECKING:
    from ..review.review_data import DocumentData, ExtractedField


INVALID_DATE_MESSAGE = 'Invalid date format (e.g., YYYY-MM-DD or MM/DD/YYYY)'
INVALID_NUMBER_MESSAGE = 'Must be a number'

# Each accepted shape paired with the strptime format that checks the calendar
DATE_FORMATS = [
    (re.compile(r'^\d{4}-\d{2}-\d{2}$'), '%Y-%m-%d'),
    (re.compile(r'^\d{2}/\d{2}/\d{4}$'), '%m/%d/%Y'),
]

# Plain decimal or exponent notation; no digit separators
NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


def is_valid_date(value: str) -> bool:
    """Whether value is YYYY-MM-DD or MM/DD/YYYY and names a real day."""
    if not value:
        return True
    for pattern, fmt in DATE_FORMATS:
        if pattern.match(value):
            try:
                datetime.strptime(value, fmt)
                return True
            except ValueError:
                return False
    return False


def is_numeric(value: str) -> bool:
    """Whether value parses to a finite number."""
    if not value:
        return True
    value = value.strip()
    if not NUMBER_PATTERN.match(value):
        return False
    return math.isfinite(float(value))


def validate_value(value: str, field_type: FieldType) -> Optional[str]:
    """
    Check a value against a field type.

    Args:
        value: Value as typed by the reviewer
        field_type: Declared type of the field

    Returns:
        Error message, or None when the value is acceptable
    """
    if not value:
        return None

    if field_type == FieldType.DATE:
        return None if is_valid_date(value) else INVALID_DATE_MESSAGE
    if field_type == FieldType.NUMBER:
        return None if is_numeric(value) else INVALID_NUMBER_MESSAGE
    return None


@dataclass
class ValidationResult:
    """Result of validating a single field."""
    field_id: str
    label: str
    value: str
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


class FieldValidator:
    """
    Validates the effective values of extracted fields.

    Usage:
        validator = FieldValidator()
        result = validator.validate_field(field)
        if not result.is_valid:
            print(result.error)
    """

    def validate_field(self, field: 'ExtractedField') -> ValidationResult:
        """Validate a field's effective value against its type."""
        value = field.effective_value
        return ValidationResult(
            field_id=field.id,
            label=field.label,
            value=value,
            error=validate_value(value, field.field_type),
        )

    def validate_document(self, document: 'DocumentData') -> List[ValidationResult]:
        """Return the failing fields of a document, in field order."""
        results = [self.validate_field(f) for f in document.extracted_fields]
        return [r for r in results if not r.is_valid]
