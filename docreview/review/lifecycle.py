"""
Document Lifecycle Engine

Status state machine per document and the correction propagation rule.

    PROCESSING --extraction ok--> EXTRACTED | REVIEW_NEEDED
    PROCESSING --extraction raised--> FAILED (terminal)
    EXTRACTED <--corrections--> REVIEW_NEEDED
    EXTRACTED | REVIEW_NEEDED --approve--> APPROVED (terminal)

A document needs review while any field has LOW confidence and no manual
correction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, List, Set, Iterable

from loguru import logger

from ..config import ConfidenceThresholds
from ..gateway.base import (
    ExtractionGateway,
    DocumentExtractionResponse,
    FieldPayload,
    ensure_document_response,
    ensure_field_response,
)
from ..notices import Notice, NoticeKind, success, warning, danger
from .collection import DocumentCollection
from .review_data import (
    DocumentData,
    DocStatus,
    DocType,
    ExtractedField,
    Vertex,
)


def derive_status(fields: Iterable[ExtractedField]) -> DocStatus:
    """REVIEW_NEEDED if any field still needs review, else EXTRACTED."""
    if any(f.needs_review for f in fields):
        return DocStatus.REVIEW_NEEDED
    return DocStatus.EXTRACTED


def build_field(
    payload: FieldPayload,
    field_id: str,
    thresholds: Optional[ConfidenceThresholds] = None,
) -> ExtractedField:
    """Convert a validated gateway payload into an ExtractedField."""
    bounding_box = None
    if payload.bounding_box:
        bounding_box = [Vertex(x=v.x, y=v.y) for v in payload.bounding_box]

    return ExtractedField.create(
        field_id=field_id,
        field_name=payload.field_name,
        label=payload.label,
        extracted_value=payload.extracted_value,
        confidence=payload.confidence,
        bounding_box=bounding_box,
        thresholds=thresholds,
    )


class SmartAddOutcome(Enum):
    """Result of a single-field lookup request."""

    ADDED = auto()
    NOT_FOUND = auto()
    ALREADY_EXISTS = auto()
    BUSY = auto()           # Another lookup for this document is in flight
    NOT_READY = auto()      # Document still processing or failed
    NO_DOCUMENT = auto()
    FAILED = auto()         # Gateway raised


@dataclass
class SmartAddResult:
    outcome: SmartAddOutcome
    notice: Notice
    field: Optional[ExtractedField] = None

    @property
    def added(self) -> bool:
        return self.outcome == SmartAddOutcome.ADDED


class LifecycleEngine:
    """
    Applies extraction results, corrections and approvals to a collection.

    Usage:
        engine = LifecycleEngine(collection, gateway)
        await engine.extract(doc_id)
        engine.update_field(doc_id, field_id, '15.00', propagate=True)
        engine.approve(doc_id)
    """

    def __init__(
        self,
        collection: DocumentCollection,
        gateway: ExtractionGateway,
        thresholds: Optional[ConfidenceThresholds] = None,
    ):
        self.collection = collection
        self.gateway = gateway
        self.thresholds = thresholds or ConfidenceThresholds()
        self._smart_add_pending: Set[str] = set()

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def extract(self, doc_id: str) -> Optional[DocumentData]:
        """
        Run bulk extraction for a placeholder and apply the outcome.

        Gateway errors are absorbed here: the document becomes FAILED.

        Returns:
            The updated document, or None if it is missing or not PROCESSING
        """
        doc = self.collection.get(doc_id)
        if doc is None or doc.status != DocStatus.PROCESSING:
            return None

        try:
            if doc.source is None:
                raise ValueError(f"Document {doc_id} has no source file")
            response = ensure_document_response(
                await self.gateway.extract_document(doc.source)
            )
        except Exception as e:
            logger.error(f"Extraction failed for {doc.file_name}: {e}")
            return self.mark_failed(doc_id)

        return self.apply_extraction(doc_id, response)

    def apply_extraction(
        self,
        doc_id: str,
        response: DocumentExtractionResponse,
    ) -> Optional[DocumentData]:
        """Replace a placeholder's fields, type and status from a gateway result."""
        doc = self.collection.get(doc_id)
        if doc is None or doc.status != DocStatus.PROCESSING:
            return None

        fields = [
            build_field(payload, f"{payload.field_name}-{index}", self.thresholds)
            for index, payload in enumerate(response.extracted_fields)
        ]
        extracted = DocumentData(
            id=doc.id,
            file_name=doc.file_name,
            uploaded_at=doc.uploaded_at,
            status=derive_status(fields),
            doc_type=DocType.parse(response.doc_type),
            image_url=doc.image_url,
            extracted_fields=fields,
            source=doc.source,
        )
        self.collection.replace(doc_id, extracted)

        logger.info(
            f"Extracted {doc.file_name}: {extracted.doc_type.value}, "
            f"{len(fields)} field(s), {extracted.status.value}"
        )
        return extracted

    def mark_failed(self, doc_id: str) -> Optional[DocumentData]:
        """Move a PROCESSING document to the terminal FAILED state."""
        def _fail(doc: DocumentData) -> DocumentData:
            doc.status = DocStatus.FAILED
            doc.doc_type = DocType.UNKNOWN
            doc.extracted_fields = []
            return doc

        doc = self.collection.get(doc_id)
        if doc is None or doc.status != DocStatus.PROCESSING:
            return None
        return self.collection.update(doc_id, _fail)

    # ------------------------------------------------------------------
    # Corrections
    # ------------------------------------------------------------------

    def _rederive(self, doc: DocumentData) -> None:
        # Only documents awaiting approval move between the review states
        if doc.status.is_reviewable:
            doc.status = derive_status(doc.extracted_fields)

    def update_field(
        self,
        doc_id: str,
        field_id: str,
        new_value: str,
        propagate: bool = False,
    ) -> List[ExtractedField]:
        """
        Record a manual correction.

        Args:
            doc_id: Document id
            field_id: Field the reviewer edited
            new_value: Corrected value, saved even if it fails validation
            propagate: Apply to every field sharing the target's label

        Returns:
            Fields that were corrected; empty if document or field is missing
        """
        doc = self.collection.get(doc_id)
        if doc is None:
            return []
        target = doc.get_field(field_id)
        if target is None:
            return []

        def _correct(doc: DocumentData) -> List[ExtractedField]:
            touched = doc.fields_with_label(target.label) if propagate else [target]
            for f in touched:
                f.apply_correction(new_value)
            self._rederive(doc)
            return touched

        touched = self.collection.update(doc_id, _correct)
        logger.debug(
            f"Corrected {len(touched)} field(s) labelled '{target.label}' "
            f"on {doc.file_name}; status {doc.status.value}"
        )
        return touched

    def update_doc_type(self, doc_id: str, new_type: DocType) -> bool:
        """Reclassify a document; fields and status are left alone."""
        def _reclassify(doc: DocumentData) -> bool:
            doc.doc_type = new_type
            return True

        return bool(self.collection.update(doc_id, _reclassify))

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    def approve(self, doc_id: str) -> bool:
        """
        Approve one document.

        Returns:
            True if the document moved to APPROVED
        """
        doc = self.collection.get(doc_id)
        if doc is None or not doc.status.is_reviewable:
            return False

        def _approve(doc: DocumentData) -> bool:
            doc.status = DocStatus.APPROVED
            return True

        self.collection.update(doc_id, _approve)
        logger.info(f"Approved {doc.file_name}")
        return True

    def approve_batch(self) -> int:
        """
        Approve every EXTRACTED or REVIEW_NEEDED document in one pass.

        Returns:
            Number of documents approved
        """
        def _approve(doc: DocumentData) -> None:
            doc.status = DocStatus.APPROVED

        approved = self.collection.update_many(lambda d: d.status.is_reviewable, _approve)
        logger.info(f"Batch approved {approved} document(s)")
        return approved

    # ------------------------------------------------------------------
    # Smart add
    # ------------------------------------------------------------------

    def is_adding_field(self, doc_id: str) -> bool:
        return doc_id in self._smart_add_pending

    def _next_field_id(self, doc: DocumentData, field_name: str) -> str:
        index = len(doc.extracted_fields)
        while doc.get_field(f"{field_name}-{index}") is not None:
            index += 1
        return f"{field_name}-{index}"

    async def smart_add_field(self, doc_id: str, field_name: str) -> SmartAddResult:
        """
        Ask the gateway for one named field and append it to a document.

        Only one request per document may be in flight; later requests are
        rejected, not queued.
        """
        doc = self.collection.get(doc_id)
        if doc is None:
            return SmartAddResult(
                SmartAddOutcome.NO_DOCUMENT,
                warning(NoticeKind.NO_DOCUMENT_SELECTED, "No document selected."),
            )
        if doc.status == DocStatus.PROCESSING:
            return SmartAddResult(
                SmartAddOutcome.NOT_READY,
                warning(NoticeKind.DOCUMENT_PROCESSING, f"{doc.file_name} is still processing."),
            )
        if doc.status == DocStatus.FAILED:
            return SmartAddResult(
                SmartAddOutcome.NOT_READY,
                warning(NoticeKind.DOCUMENT_FAILED, f"{doc.file_name} failed extraction; fields cannot be added."),
            )
        if doc_id in self._smart_add_pending:
            return SmartAddResult(
                SmartAddOutcome.BUSY,
                warning(NoticeKind.SMART_ADD_BUSY, "A field lookup is already running for this document."),
            )

        self._smart_add_pending.add(doc_id)
        try:
            if doc.source is None:
                raise ValueError(f"Document {doc_id} has no source file")
            response = ensure_field_response(
                await self.gateway.extract_field(doc.source, field_name)
            )
        except Exception as e:
            logger.error(f"Field lookup '{field_name}' failed for {doc.file_name}: {e}")
            return SmartAddResult(
                SmartAddOutcome.FAILED,
                danger(NoticeKind.SMART_ADD_FAILED, f"An error occurred while adding the field: {e}"),
            )
        finally:
            self._smart_add_pending.discard(doc_id)

        if not response.found:
            return SmartAddResult(
                SmartAddOutcome.NOT_FOUND,
                warning(NoticeKind.FIELD_NOT_FOUND, f'Could not find field "{field_name}" in the document.'),
            )

        # The document may have changed while the lookup was pending
        doc = self.collection.get(doc_id)
        if doc is None:
            return SmartAddResult(
                SmartAddOutcome.NO_DOCUMENT,
                warning(NoticeKind.NO_DOCUMENT_SELECTED, "No document selected."),
            )
        if doc.has_label(response.label):
            return SmartAddResult(
                SmartAddOutcome.ALREADY_EXISTS,
                warning(NoticeKind.DUPLICATE_FIELD, f'Field "{response.label}" already exists in this document.'),
            )

        new_field = build_field(response, self._next_field_id(doc, response.field_name), self.thresholds)

        def _append(doc: DocumentData) -> ExtractedField:
            doc.extracted_fields.append(new_field)
            self._rederive(doc)
            return new_field

        self.collection.update(doc_id, _append)
        logger.info(f"Added field '{new_field.label}' to {doc.file_name}")
        return SmartAddResult(
            SmartAddOutcome.ADDED,
            success(NoticeKind.FIELD_ADDED, f"Successfully added field: {new_field.label}"),
            field=new_field,
        )
