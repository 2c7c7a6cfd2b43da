"""
Review Data Structures

Tagged records for documents under review and the fields extracted from them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any

from ..config import ConfidenceThresholds
from ..fields.field_types import FieldType, infer_field_type
from ..intake import SourceFile


class DocType(Enum):
    """Classified type of an uploaded document."""

    INVOICE = 'INVOICE'
    BOL = 'BOL'
    RECEIPT = 'RECEIPT'
    UNKNOWN = 'UNKNOWN'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'DocType':
        """Map a wire value to a DocType, UNKNOWN for anything unrecognised."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


class DocStatus(Enum):
    """Review status of a document."""

    PROCESSING = 'Processing'
    EXTRACTED = 'Extracted'
    REVIEW_NEEDED = 'Review Needed'
    APPROVED = 'Approved'
    FAILED = 'Failed'

    @property
    def is_reviewable(self) -> bool:
        """Whether the document has left processing and awaits approval."""
        return self in (DocStatus.EXTRACTED, DocStatus.REVIEW_NEEDED)

    @property
    def is_terminal(self) -> bool:
        return self in (DocStatus.APPROVED, DocStatus.FAILED)


class ConfidenceLevel(Enum):
    """Confidence tier of a field."""

    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'
    MANUAL = 'manual'  # Set by a human, trusted absolutely


def classify_confidence(
    confidence: float,
    thresholds: Optional[ConfidenceThresholds] = None,
) -> ConfidenceLevel:
    """
    Tier a model confidence score.

    Args:
        confidence: Score between 0.0 and 1.0
        thresholds: Tier boundaries, defaults to 0.95 / 0.85

    Returns:
        HIGH, MEDIUM or LOW
    """
    thresholds = thresholds or ConfidenceThresholds()
    if confidence >= thresholds.high:
        return ConfidenceLevel.HIGH
    if confidence >= thresholds.medium:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


@dataclass
class Vertex:
    """A normalized point on the page, both coordinates in [0, 1]."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {'x': round(self.x, 4), 'y': round(self.y, 4)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vertex':
        return cls(x=float(data['x']), y=float(data['y']))


@dataclass
class ExtractedField:
    """
    One recognized datum on a document.

    Labels are display keys and may repeat within a document (line items);
    ids are unique within the document.
    """
    id: str
    field_name: str
    label: str
    extracted_value: str
    confidence: float
    confidence_level: ConfidenceLevel
    field_type: FieldType
    user_correction: Optional[str] = None
    bounding_box: Optional[List[Vertex]] = None

    @classmethod
    def create(
        cls,
        field_id: str,
        field_name: str,
        label: str,
        extracted_value: str,
        confidence: float,
        bounding_box: Optional[List[Vertex]] = None,
        thresholds: Optional[ConfidenceThresholds] = None,
    ) -> 'ExtractedField':
        """Create a fresh, uncorrected field; type and tier are derived here."""
        return cls(
            id=field_id,
            field_name=field_name,
            label=label,
            extracted_value=extracted_value,
            confidence=confidence,
            confidence_level=classify_confidence(confidence, thresholds),
            field_type=infer_field_type(label),
            bounding_box=bounding_box or None,
        )

    @property
    def effective_value(self) -> str:
        """Corrected value if the reviewer edited the field, else the extracted one."""
        if self.user_correction is not None:
            return self.user_correction
        return self.extracted_value

    @property
    def is_corrected(self) -> bool:
        return self.user_correction is not None

    @property
    def needs_review(self) -> bool:
        """Low confidence and not yet corrected by a human."""
        return self.confidence_level == ConfidenceLevel.LOW and not self.is_corrected

    def apply_correction(self, new_value: str) -> None:
        """Record a manual correction."""
        self.user_correction = new_value
        self.confidence_level = ConfidenceLevel.MANUAL
        self.confidence = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'field_name': self.field_name,
            'label': self.label,
            'extracted_value': self.extracted_value,
            'user_correction': self.user_correction,
            'confidence': round(self.confidence, 4),
            'confidence_level': self.confidence_level.value,
            'field_type': self.field_type.value,
            'bounding_box': (
                [v.to_dict() for v in self.bounding_box] if self.bounding_box else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractedField':
        bounding_box = None
        if data.get('bounding_box'):
            bounding_box = [Vertex.from_dict(v) for v in data['bounding_box']]

        return cls(
            id=data['id'],
            field_name=data['field_name'],
            label=data['label'],
            extracted_value=data.get('extracted_value', ''),
            user_correction=data.get('user_correction'),
            confidence=data.get('confidence', 0.0),
            confidence_level=ConfidenceLevel(data.get('confidence_level', 'low')),
            field_type=FieldType(data.get('field_type', 'TEXT')),
            bounding_box=bounding_box,
        )


@dataclass
class DocumentData:
    """
    One uploaded file and its extraction state.
    """
    id: str
    file_name: str
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: DocStatus = DocStatus.PROCESSING
    doc_type: DocType = DocType.UNKNOWN
    image_url: str = ''
    extracted_fields: List[ExtractedField] = field(default_factory=list)
    source: Optional[SourceFile] = None

    @classmethod
    def placeholder(cls, source: SourceFile) -> 'DocumentData':
        """Create the PROCESSING stand-in inserted at upload time."""
        return cls(
            id=f"doc-{uuid.uuid4().hex}",
            file_name=source.name,
            image_url=source.url,
            source=source,
        )

    @property
    def low_confidence_fields(self) -> List[ExtractedField]:
        """Fields still blocking approval-readiness."""
        return [f for f in self.extracted_fields if f.needs_review]

    def get_field(self, field_id: str) -> Optional[ExtractedField]:
        for f in self.extracted_fields:
            if f.id == field_id:
                return f
        return None

    def fields_with_label(self, label: str) -> List[ExtractedField]:
        """All fields sharing a display label, in field order."""
        return [f for f in self.extracted_fields if f.label == label]

    def has_label(self, label: str) -> bool:
        """Case-insensitive label lookup."""
        label_lower = label.lower()
        return any(f.label.lower() == label_lower for f in self.extracted_fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'file_name': self.file_name,
            'uploaded_at': self.uploaded_at.isoformat(),
            'status': self.status.value,
            'doc_type': self.doc_type.value,
            'image_url': self.image_url,
            'extracted_fields': [f.to_dict() for f in self.extracted_fields],
            'source': self.source.to_dict() if self.source else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocumentData':
        uploaded_at = datetime.now(timezone.utc)
        if data.get('uploaded_at'):
            uploaded_at = datetime.fromisoformat(data['uploaded_at'])

        source = None
        if data.get('source'):
            source = SourceFile.from_dict(data['source'])

        return cls(
            id=data['id'],
            file_name=data['file_name'],
            uploaded_at=uploaded_at,
            status=DocStatus(data.get('status', DocStatus.PROCESSING.value)),
            doc_type=DocType.parse(data.get('doc_type')),
            image_url=data.get('image_url', ''),
            extracted_fields=[
                ExtractedField.from_dict(f) for f in data.get('extracted_fields', [])
            ],
            source=source,
        )
