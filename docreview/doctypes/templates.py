"""
Standard Field Templates

The fields a reviewer expects to see on each document type. Templates are
suggestions only: reclassifying a document changes which template is shown,
it never adds or removes fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Any, TYPE_CHECKING

from ..fields.field_types import FieldType, infer_field_type
from ..review.review_data import DocType

if TYPE_CHECKING:
    from ..review.review_data import DocumentData


@dataclass(frozen=True)
class FieldTemplate:
    """Standard fields for one document type."""
    doc_type: DocType
    title: str
    labels: List[str] = field(default_factory=list)

    def field_types(self) -> Dict[str, FieldType]:
        return {label: infer_field_type(label) for label in self.labels}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'doc_type': self.doc_type.value,
            'title': self.title,
            'fields': [
                {'label': label, 'field_type': ft.value}
                for label, ft in self.field_types().items()
            ],
        }


INVOICE_TEMPLATE = FieldTemplate(
    doc_type=DocType.INVOICE,
    title='Standard Invoice Fields',
    labels=['Vendor', 'Invoice #', 'Date', 'Amount', 'PO #', 'Tax', 'Total'],
)

BOL_TEMPLATE = FieldTemplate(
    doc_type=DocType.BOL,
    title='Standard Bill of Lading Fields',
    labels=['Shipper', 'Consignee', 'Load #', 'Weight', 'Rate', 'Pickup Date', 'Delivery Date'],
)

RECEIPT_TEMPLATE = FieldTemplate(
    doc_type=DocType.RECEIPT,
    title='Standard Receipt Fields',
    labels=['Vendor', 'Date', 'Amount', 'Category', 'Tax', 'Description'],
)

UNKNOWN_TEMPLATE = FieldTemplate(
    doc_type=DocType.UNKNOWN,
    title='Unknown Document Type',
)

TEMPLATES: Dict[DocType, FieldTemplate] = {
    t.doc_type: t
    for t in (INVOICE_TEMPLATE, BOL_TEMPLATE, RECEIPT_TEMPLATE, UNKNOWN_TEMPLATE)
}


def get_template(doc_type: DocType) -> FieldTemplate:
    return TEMPLATES.get(doc_type, UNKNOWN_TEMPLATE)


def missing_standard_fields(document: 'DocumentData') -> List[str]:
    """Template labels the document has no field for (case-insensitive)."""
    template = get_template(document.doc_type)
    return [label for label in template.labels if not document.has_label(label)]
