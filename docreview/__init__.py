"""
Document Review Workbench

Human-in-the-loop review of AI-extracted document fields.

Features:
- Review state machine per document (Processing / Extracted / Review Needed /
  Approved / Failed) driven by field confidence
- Manual corrections, optionally applied to every field sharing a label
- Filtering, grouping and navigation by document type
- Single-field lookups ("smart add") against the extraction service
- CSV and JSON export of approved documents

Quick Start:
    import asyncio
    from pathlib import Path
    from docreview import ReviewWorkbench, SidecarGateway, ExportFormat, collect_files

    workbench = ReviewWorkbench(SidecarGateway())
    asyncio.run(workbench.upload(collect_files([Path('inbox/')])))

    workbench.approve_batch()
    result = workbench.export(ExportFormat.CSV)
    print(result.artifact.content)

CLI Usage:
    docreview ingest ./inbox/
    docreview list --type INVOICE
    docreview correct <doc> <field> "15.00" --all
    docreview approve --all
    docreview export --format json
"""

__version__ = '1.0.0'

# Configuration
from .config import (
    WorkbenchConfig,
    ConfidenceThresholds,
    GatewaySettings,
    load_config,
)

# Errors and notices
from .exceptions import (
    DocReviewException,
    GatewayError,
    MalformedResponseError,
    ConfigurationError,
    SessionError,
)
from .notices import Notice, NoticeKind, NoticeLevel

# Fields
from .fields import FieldType, FieldValidator, infer_field_type, validate_value

# Intake
from .intake import SourceFile, collect_files

# Review
from .review import (
    DocType,
    DocStatus,
    ConfidenceLevel,
    ExtractedField,
    DocumentData,
    DocumentCollection,
    ReviewQueue,
    LifecycleEngine,
    SmartAddOutcome,
    ReviewSession,
    filter_by_type,
    group_by_type,
    counts_by_type,
)

# Document types
from .doctypes import FieldTemplate, get_template, missing_standard_fields

# Gateway
from .gateway import (
    ExtractionGateway,
    SidecarGateway,
    HTTPExtractionGateway,
    DocumentExtractionResponse,
    SingleFieldExtractionResponse,
)

# Export
from .export import ExportFormat, ReviewExporter, ExportResult

# Orchestration
from .workbench import ReviewWorkbench

__all__ = [
    '__version__',

    # Configuration
    'WorkbenchConfig',
    'ConfidenceThresholds',
    'GatewaySettings',
    'load_config',

    # Errors and notices
    'DocReviewException',
    'GatewayError',
    'MalformedResponseError',
    'ConfigurationError',
    'SessionError',
    'Notice',
    'NoticeKind',
    'NoticeLevel',

    # Fields
    'FieldType',
    'FieldValidator',
    'infer_field_type',
    'validate_value',

    # Intake
    'SourceFile',
    'collect_files',

    # Review
    'DocType',
    'DocStatus',
    'ConfidenceLevel',
    'ExtractedField',
    'DocumentData',
    'DocumentCollection',
    'ReviewQueue',
    'LifecycleEngine',
    'SmartAddOutcome',
    'ReviewSession',
    'filter_by_type',
    'group_by_type',
    'counts_by_type',

    # Document types
    'FieldTemplate',
    'get_template',
    'missing_standard_fields',

    # Gateway
    'ExtractionGateway',
    'SidecarGateway',
    'HTTPExtractionGateway',
    'DocumentExtractionResponse',
    'SingleFieldExtractionResponse',

    # Export
    'ExportFormat',
    'ReviewExporter',
    'ExportResult',

    # Orchestration
    'ReviewWorkbench',
]
