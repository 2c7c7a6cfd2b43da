"""
Field Model

Field type inference and advisory value validation.
"""

from .field_types import FieldType, FIELD_TYPE_MAP, infer_field_type
from .validators import (
    FieldValidator,
    ValidationResult,
    validate_value,
    is_valid_date,
    is_numeric,
)

__all__ = [
    'FieldType',
    'FIELD_TYPE_MAP',
    'infer_field_type',
    'FieldValidator',
    'ValidationResult',
    'validate_value',
    'is_valid_date',
    'is_numeric',
]
