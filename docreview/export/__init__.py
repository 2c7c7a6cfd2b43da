"""
Export

Serializers for approved documents.
"""

from .serializer import (
    ExportFormat,
    ExportConfig,
    ExportArtifact,
    ExportResult,
    ReviewExporter,
    collect_labels,
    approved_documents,
    iso_instant,
)

__all__ = [
    'ExportFormat',
    'ExportConfig',
    'ExportArtifact',
    'ExportResult',
    'ReviewExporter',
    'collect_labels',
    'approved_documents',
    'iso_instant',
]
