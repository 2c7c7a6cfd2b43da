"""
Review Workbench

Ties intake, extraction, review and export together behind one object that a
front end (the CLI, a web view) drives.

Usage:
    workbench = ReviewWorkbench(SidecarGateway())
    await workbench.upload(collect_files([Path('inbox/')]))

    doc = workbench.selected_document
    workbench.update_field(doc.id, doc.extracted_fields[0].id, 'ACME Corp')
    workbench.approve(doc.id)

    result = workbench.export(ExportFormat.CSV)
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional, List, Dict, Any, Iterable

from loguru import logger

from .config import WorkbenchConfig
from .doctypes.templates import FieldTemplate, get_template, missing_standard_fields
from .export.serializer import ExportFormat, ExportResult, ReviewExporter
from .fields.validators import FieldValidator, ValidationResult
from .gateway.base import ExtractionGateway
from .intake import SourceFile, is_supported
from .notices import Notice, NoticeKind, NoticeLevel, success, warning
from .review.collection import (
    DocumentCollection,
    ReviewQueue,
    TypeFilter,
    ALL,
    available_types,
    counts_by_type,
    group_by_type,
)
from .review.lifecycle import LifecycleEngine, SmartAddResult
from .review.review_data import DocumentData, DocType, ExtractedField


class ReviewWorkbench:
    """
    Human-in-the-loop review over a collection of extracted documents.

    Every recoverable problem is reported as a Notice, appended to
    `notices` and returned from the call that produced it.
    """

    def __init__(
        self,
        gateway: ExtractionGateway,
        config: Optional[WorkbenchConfig] = None,
        collection: Optional[DocumentCollection] = None,
        exporter: Optional[ReviewExporter] = None,
        type_filter: TypeFilter = ALL,
    ):
        self.config = config or WorkbenchConfig()
        self.collection = collection if collection is not None else DocumentCollection()
        self.queue = ReviewQueue(self.collection, type_filter)
        self.engine = LifecycleEngine(self.collection, gateway, self.config.thresholds)
        self.validator = FieldValidator()
        self.exporter = exporter or ReviewExporter()
        self.notices: List[Notice] = []
        self._in_flight = 0

    def _notify(self, notice: Optional[Notice]) -> Optional[Notice]:
        if notice is None:
            return None
        self.notices.append(notice)
        if notice.level in (NoticeLevel.WARNING, NoticeLevel.DANGER):
            logger.warning(notice.message)
        else:
            logger.info(notice.message)
        return notice

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    @property
    def is_processing(self) -> bool:
        return self._in_flight > 0

    async def upload(self, sources: Iterable[SourceFile]) -> List[DocumentData]:
        """
        Queue files and extract them concurrently.

        Placeholders for every file are inserted before any extraction
        starts; each completion replaces its own placeholder by id.

        Returns:
            The documents created for this upload, in upload order
        """
        accepted = []
        for source in sources:
            if is_supported(source.name, self.config.extensions):
                accepted.append(source)
            else:
                self._notify(warning(NoticeKind.UNSUPPORTED_FILE, f"Unsupported file type: {source.name}"))

        placeholders = self.collection.insert_placeholders(accepted)
        if not placeholders:
            return []

        self.queue.resolve_selection()
        doc_ids = [p.id for p in placeholders]

        self._in_flight += len(doc_ids)
        try:
            await asyncio.gather(*(self._extract(doc_id) for doc_id in doc_ids))
        finally:
            self.queue.resolve_selection()

        return [self.collection.get(doc_id) for doc_id in doc_ids]

    async def _extract(self, doc_id: str) -> None:
        try:
            await self.engine.extract(doc_id)
        finally:
            self._in_flight -= 1

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    def update_field(
        self,
        doc_id: str,
        field_id: str,
        new_value: str,
        propagate: bool = False,
    ) -> List[ExtractedField]:
        """Save a correction; a failing format check adds a warning but still saves."""
        touched = self.engine.update_field(doc_id, field_id, new_value, propagate)
        if touched:
            result = self.validator.validate_field(touched[0])
            if not result.is_valid:
                self._notify(warning(NoticeKind.VALIDATION_WARNING, f"{result.label}: {result.error}"))
        return touched

    def update_doc_type(self, doc_id: str, new_type: DocType) -> bool:
        changed = self.engine.update_doc_type(doc_id, new_type)
        if changed:
            self.queue.resolve_selection()
        return changed

    def validation_errors(self, doc_id: str) -> List[ValidationResult]:
        doc = self.collection.get(doc_id)
        return self.validator.validate_document(doc) if doc else []

    def template_for(self, doc_id: str) -> Optional[FieldTemplate]:
        doc = self.collection.get(doc_id)
        return get_template(doc.doc_type) if doc else None

    def missing_fields(self, doc_id: str) -> List[str]:
        doc = self.collection.get(doc_id)
        return missing_standard_fields(doc) if doc else []

    async def smart_add_field(self, field_name: str, doc_id: Optional[str] = None) -> SmartAddResult:
        """Look up a named field on a document (the selection by default)."""
        target = doc_id if doc_id is not None else self.queue.selected_id
        result = await self.engine.smart_add_field(target, field_name)
        self._notify(result.notice)
        return result

    def approve(self, doc_id: str) -> bool:
        return self.engine.approve(doc_id)

    def approve_batch(self) -> int:
        approved = self.engine.approve_batch()
        self._notify(success(NoticeKind.BATCH_APPROVED, "Batch approved successfully!"))
        return approved

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def selected_id(self) -> Optional[str]:
        return self.queue.selected_id

    @property
    def selected_document(self) -> Optional[DocumentData]:
        return self.queue.selected_document

    def select(self, doc_id: str) -> Optional[str]:
        return self.queue.select(doc_id)

    def set_filter(self, type_filter: TypeFilter) -> Optional[str]:
        return self.queue.set_filter(type_filter)

    def next(self) -> Optional[str]:
        """Advance the selection; at the end of the view an END_OF_LIST notice is raised."""
        selected, notice = self.queue.next()
        self._notify(notice)
        return selected

    def filtered(self) -> List[DocumentData]:
        return self.queue.filtered()

    def available_types(self) -> List[DocType]:
        return available_types(self.collection)

    def counts(self) -> Dict[str, int]:
        return counts_by_type(self.collection)

    def groups(self) -> Dict[DocType, List[DocumentData]]:
        return group_by_type(self.collection)

    def get_statistics(self) -> Dict[str, Any]:
        stats = self.collection.get_statistics()
        stats['counts'] = self.counts()
        stats['type_filter'] = self.queue.type_filter if self.queue.type_filter == ALL else self.queue.type_filter.value
        stats['selected_id'] = self.selected_id
        return stats

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, format: ExportFormat, now: Optional[datetime] = None) -> ExportResult:
        result = self.exporter.export(self.collection, format, now)
        self._notify(result.notice)
        return result
