"""
Field Types

Data types assigned to extracted fields. A field's type is inferred once from
its display label when the field is created and never changes afterwards.
"""

from enum import Enum
from typing import List, Tuple


class FieldType(Enum):
    """Types of field values the reviewer can correct."""

    TEXT = 'TEXT'
    NUMBER = 'NUMBER'
    DATE = 'DATE'


# Ordered label fragment -> type table. The first fragment contained in the
# lower-cased label wins.
FIELD_TYPE_MAP: List[Tuple[str, FieldType]] = [
    ('date', FieldType.DATE),
    ('due date', FieldType.DATE),
    ('pickup date', FieldType.DATE),
    ('delivery date', FieldType.DATE),
    ('amount', FieldType.NUMBER),
    ('total', FieldType.NUMBER),
    ('tax', FieldType.NUMBER),
    ('rate', FieldType.NUMBER),
    ('weight', FieldType.NUMBER),
    # Numeric looking identifiers stay text
    ('invoice #', FieldType.TEXT),
    ('po #', FieldType.TEXT),
    ('category', FieldType.TEXT),
    ('description', FieldType.TEXT),
    ('vendor', FieldType.TEXT),
    ('shipper', FieldType.TEXT),
    ('consignee', FieldType.TEXT),
    ('load #', FieldType.TEXT),
]


def infer_field_type(label: str) -> FieldType:
    """
    Infer a field's type from its display label.

    Args:
        label: Human-readable label, e.g. "Due Date" or "Invoice #"

    Returns:
        Matching FieldType, TEXT when nothing matches
    """
    label_lower = (label or '').lower()
    for fragment, field_type in FIELD_TYPE_MAP:
        if fragment in label_lower:
            return field_type
    return FieldType.TEXT
