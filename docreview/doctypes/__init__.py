"""
Document Types

Standard field templates for invoices, bills of lading and receipts.
"""

from .templates import (
    FieldTemplate,
    INVOICE_TEMPLATE,
    BOL_TEMPLATE,
    RECEIPT_TEMPLATE,
    UNKNOWN_TEMPLATE,
    TEMPLATES,
    get_template,
    missing_standard_fields,
)

__all__ = [
    'FieldTemplate',
    'INVOICE_TEMPLATE',
    'BOL_TEMPLATE',
    'RECEIPT_TEMPLATE',
    'UNKNOWN_TEMPLATE',
    'TEMPLATES',
    'get_template',
    'missing_standard_fields',
]
