"""
Human-in-the-Loop Review

Document and field records, the lifecycle engine that moves documents
through review, the collection they live in, and saved review sessions.
"""

from .review_data import (
    DocType,
    DocStatus,
    ConfidenceLevel,
    Vertex,
    ExtractedField,
    DocumentData,
    classify_confidence,
)
from .collection import (
    ALL,
    DocumentCollection,
    ReviewQueue,
    filter_by_type,
    group_by_type,
    counts_by_type,
    available_types,
)
from .lifecycle import (
    LifecycleEngine,
    SmartAddOutcome,
    SmartAddResult,
    derive_status,
)
from .session import ReviewSession

__all__ = [
    'DocType',
    'DocStatus',
    'ConfidenceLevel',
    'Vertex',
    'ExtractedField',
    'DocumentData',
    'classify_confidence',
    'ALL',
    'DocumentCollection',
    'ReviewQueue',
    'filter_by_type',
    'group_by_type',
    'counts_by_type',
    'available_types',
    'LifecycleEngine',
    'SmartAddOutcome',
    'SmartAddResult',
    'derive_status',
    'ReviewSession',
]
