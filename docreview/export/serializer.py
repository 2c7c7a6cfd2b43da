"""
Review Export

Serializes approved documents to delimited text (CSV) or structured JSON.
Only documents in the APPROVED state are exported.
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable

from loguru import logger

from ..notices import Notice, NoticeKind, success, warning
from ..review.review_data import DocumentData, DocStatus


class ExportFormat(Enum):
    """Supported export formats."""

    CSV = 'CSV'
    JSON = 'JSON'
    EXCEL = 'EXCEL'  # Not implemented; reported as unsupported

    @property
    def extension(self) -> str:
        return {'CSV': 'csv', 'JSON': 'json', 'EXCEL': 'xlsx'}[self.value]

    @property
    def media_type(self) -> str:
        return {
            'CSV': 'text/csv',
            'JSON': 'application/json',
            'EXCEL': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        }[self.value]


@dataclass
class ExportConfig:
    """Configuration for export."""
    indent: int = 2
    filename_prefix: str = 'export'


@dataclass
class ExportArtifact:
    """A named, downloadable export file held in memory."""
    filename: str
    content: str
    media_type: str
    document_count: int


@dataclass
class ExportResult:
    """Outcome of an export request: an artifact, or only a notice."""
    notice: Notice
    artifact: Optional[ExportArtifact] = None

    @property
    def produced(self) -> bool:
        return self.artifact is not None


def iso_instant(moment: datetime) -> str:
    """UTC ISO-8601 instant with millisecond precision, e.g. 2024-01-01T12:00:00.000Z"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def approved_documents(documents: Iterable[DocumentData]) -> List[DocumentData]:
    return [d for d in documents if d.status == DocStatus.APPROVED]


def collect_labels(documents: Iterable[DocumentData]) -> List[str]:
    """Union of field labels across documents, in first-seen order."""
    labels: Dict[str, None] = {}
    for doc in documents:
        for f in doc.extracted_fields:
            labels.setdefault(f.label, None)
    return list(labels)


class ReviewExporter:
    """
    Export approved documents.

    Usage:
        exporter = ReviewExporter()
        result = exporter.export(collection, ExportFormat.CSV)
        if result.produced:
            exporter.write(result.artifact, Path('exports'))
    """

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def export(
        self,
        documents: Iterable[DocumentData],
        format: ExportFormat = ExportFormat.CSV,
        now: Optional[datetime] = None,
    ) -> ExportResult:
        """
        Serialize the approved subset of documents.

        Args:
            documents: Whole collection; non-approved documents are ignored
            format: Export format
            now: Creation instant embedded in the filename

        Returns:
            ExportResult with an artifact, or with a warning and no artifact
        """
        approved = approved_documents(documents)
        if not approved:
            return ExportResult(
                notice=warning(NoticeKind.EMPTY_EXPORT_SET, "No approved documents to export."),
            )

        if format == ExportFormat.CSV:
            content = self.to_csv(approved)
        elif format == ExportFormat.JSON:
            content = self.to_json(approved)
        else:
            logger.warning(f"Export format {format.value} requested but not implemented")
            return ExportResult(
                notice=warning(
                    NoticeKind.UNSUPPORTED_EXPORT_FORMAT,
                    f"{format.value.title()} export is not yet implemented.",
                ),
            )

        artifact = ExportArtifact(
            filename=self.filename(format, now),
            content=content,
            media_type=format.media_type,
            document_count=len(approved),
        )
        logger.info(f"Exported {len(approved)} document(s) as {format.value}")
        return ExportResult(
            notice=success(NoticeKind.EXPORT_COMPLETE, f"{format.value} export complete!"),
            artifact=artifact,
        )

    def filename(self, format: ExportFormat, now: Optional[datetime] = None) -> str:
        instant = iso_instant(now or datetime.now(timezone.utc))
        return f"{self.config.filename_prefix}_{instant}.{format.extension}"

    def to_csv(self, documents: List[DocumentData]) -> str:
        """
        One row per document: fileName, docType, then each label's effective
        value. Values are always quoted; a missing label yields "".
        """
        labels = collect_labels(documents)

        header = io.StringIO()
        csv.writer(header, lineterminator='\n').writerow(['fileName', 'docType', *labels])

        body = io.StringIO()
        writer = csv.writer(body, quoting=csv.QUOTE_ALL, lineterminator='\n')
        for doc in documents:
            # Later fields with a repeated label win
            values = {f.label: f.effective_value for f in doc.extracted_fields}
            writer.writerow([
                doc.file_name,
                doc.doc_type.value,
                *(values.get(label) or '' for label in labels),
            ])

        return (header.getvalue() + body.getvalue()).rstrip('\n')

    def to_json(self, documents: List[DocumentData]) -> str:
        """Pretty-printed list of documents with a field_name -> value mapping."""
        return json.dumps(
            [self._prepare_document_data(doc) for doc in documents],
            indent=self.config.indent,
            ensure_ascii=False,
        )

    def _prepare_document_data(self, doc: DocumentData) -> Dict[str, Any]:
        # Keyed by field_name: a later field with the same name overwrites an
        # earlier one even when their labels differ.
        extracted_data = {}
        for f in doc.extracted_fields:
            extracted_data[f.field_name] = f.effective_value

        return {
            'id': doc.id,
            'fileName': doc.file_name,
            'docType': doc.doc_type.value,
            'uploadedAt': iso_instant(doc.uploaded_at),
            'status': doc.status.value,
            'extractedData': extracted_data,
        }

    def write(self, artifact: ExportArtifact, output_dir: Path) -> Path:
        """Write an artifact into a directory and return its path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / artifact.filename

        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(artifact.content)

        logger.info(f"Wrote {artifact.filename} ({artifact.document_count} document(s))")
        return path
