"""
Tests for exporting approved documents.
"""

import json
from datetime import datetime, timezone

import pytest

from docreview.export import ExportFormat, ReviewExporter
from docreview.notices import NoticeKind, NoticeLevel
from docreview.review.review_data import DocStatus, DocType


NOW = datetime(2024, 3, 5, 14, 7, 9, 123000, tzinfo=timezone.utc)


class TestReviewExporter:
    """Tests for CSV and JSON export."""

    def setup_method(self):
        self.exporter = ReviewExporter()

    def test_nothing_approved(self, make_doc):
        docs = [make_doc(status=DocStatus.EXTRACTED), make_doc(status=DocStatus.FAILED)]

        result = self.exporter.export(docs, ExportFormat.CSV, NOW)

        assert not result.produced
        assert result.notice.kind == NoticeKind.EMPTY_EXPORT_SET
        assert result.notice.message == 'No approved documents to export.'

    def test_excel_not_implemented(self, make_doc):
        result = self.exporter.export([make_doc(status=DocStatus.APPROVED)], ExportFormat.EXCEL, NOW)

        assert not result.produced
        assert result.notice.kind == NoticeKind.UNSUPPORTED_EXPORT_FORMAT
        assert result.notice.message == 'Excel export is not yet implemented.'

    def test_empty_set_checked_before_format(self):
        result = self.exporter.export([], ExportFormat.EXCEL, NOW)
        assert result.notice.kind == NoticeKind.EMPTY_EXPORT_SET

    def test_filename(self, make_doc):
        result = self.exporter.export([make_doc(status=DocStatus.APPROVED)], ExportFormat.JSON, NOW)

        assert result.artifact.filename == 'export_2024-03-05T14:07:09.123Z.json'
        assert result.artifact.media_type == 'application/json'
        assert result.notice.level == NoticeLevel.SUCCESS

    def test_csv_union_of_labels(self, make_doc, make_field):
        invoice = make_doc(
            doc_type=DocType.INVOICE,
            status=DocStatus.APPROVED,
            file_name='inv.pdf',
            fields=[make_field('Vendor', 'Acme'), make_field('Total', '10.00')],
        )
        receipt = make_doc(
            doc_type=DocType.RECEIPT,
            status=DocStatus.APPROVED,
            file_name='rec.jpg',
            fields=[make_field('Merchant', 'Cafe'), make_field('Total', '4.50')],
        )
        pending = make_doc(status=DocStatus.REVIEW_NEEDED, fields=[make_field('Ignored', 'x')])

        result = self.exporter.export([invoice, pending, receipt], ExportFormat.CSV, NOW)

        assert result.notice.message == 'CSV export complete!'
        assert result.artifact.document_count == 2
        assert result.artifact.content.split('\n') == [
            'fileName,docType,Vendor,Total,Merchant',
            '"inv.pdf","INVOICE","Acme","10.00",""',
            '"rec.jpg","RECEIPT","","4.50","Cafe"',
        ]

    def test_csv_uses_corrections_and_escapes(self, make_doc, make_field):
        vendor = make_field('Vendor', 'Acme')
        vendor.apply_correction('Acme, "The" Company')
        doc = make_doc(status=DocStatus.APPROVED, file_name='a.pdf', fields=[vendor])

        content = self.exporter.to_csv([doc])

        assert content.split('\n')[1] == '"a.pdf","INVOICE","Acme, ""The"" Company"'

    def test_csv_last_label_wins(self, make_doc, make_field):
        doc = make_doc(
            status=DocStatus.APPROVED,
            file_name='a.pdf',
            fields=[make_field('Amount', '1', field_name='a'), make_field('Amount', '2', field_name='b')],
        )

        content = self.exporter.to_csv([doc])

        assert content.split('\n') == ['fileName,docType,Amount', '"a.pdf","INVOICE","2"']

    def test_json_structure(self, make_doc, make_field):
        field = make_field('Invoice #', 'INV-1', field_name='invoiceNumber')
        doc = make_doc(status=DocStatus.APPROVED, file_name='ñ.pdf', fields=[field])
        doc.uploaded_at = NOW

        result = self.exporter.export([doc], ExportFormat.JSON, NOW)
        data = json.loads(result.artifact.content)

        assert data == [{
            'id': doc.id,
            'fileName': 'ñ.pdf',
            'docType': 'INVOICE',
            'uploadedAt': '2024-03-05T14:07:09.123Z',
            'status': 'Approved',
            'extractedData': {'invoiceNumber': 'INV-1'},
        }]
        assert 'ñ.pdf' in result.artifact.content
        assert '\n  ' in result.artifact.content

    def test_json_same_field_name_overwrites(self, make_doc, make_field):
        doc = make_doc(
            status=DocStatus.APPROVED,
            fields=[
                make_field('Line Amount', '1', field_name='amount'),
                make_field('Tax Amount', '2', field_name='amount'),
            ],
        )

        data = json.loads(self.exporter.to_json([doc]))

        assert data[0]['extractedData'] == {'amount': '2'}

    def test_write(self, tmp_path, make_doc):
        result = self.exporter.export([make_doc(status=DocStatus.APPROVED)], ExportFormat.CSV, NOW)

        path = self.exporter.write(result.artifact, tmp_path / 'out')

        assert path.exists()
        assert path.read_text(encoding='utf-8') == result.artifact.content

    @pytest.mark.parametrize('format,extension', [
        (ExportFormat.CSV, 'csv'),
        (ExportFormat.JSON, 'json'),
        (ExportFormat.EXCEL, 'xlsx'),
    ])
    def test_extensions(self, format, extension):
        assert format.extension == extension
