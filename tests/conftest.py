"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Optional, List

import pytest

from docreview.exceptions import GatewayError
from docreview.gateway.base import (
    ExtractionGateway,
    parse_document_response,
    parse_field_response,
    not_found,
)
from docreview.intake import SourceFile
from docreview.review.collection import DocumentCollection
from docreview.review.lifecycle import LifecycleEngine
from docreview.review.review_data import DocumentData, DocStatus, DocType, ExtractedField


class FakeGateway(ExtractionGateway):
    """
    In-memory extraction service.

    `documents` maps file name to a response payload or an exception;
    `fields` maps a lower-cased field name to a payload or an exception.
    Setting `gate` to an asyncio.Event holds every call until it is set.
    """

    def __init__(self):
        self.documents = {}
        self.fields = {}
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()

    async def extract_document(self, source):
        self.calls.append(('document', source.name))
        await self._wait()
        result = self.documents.get(source.name)
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise GatewayError(f"No result for {source.name}")
        return parse_document_response(result)

    async def extract_field(self, source, field_name):
        self.calls.append(('field', source.name, field_name))
        await self._wait()
        result = self.fields.get(field_name.lower())
        if isinstance(result, Exception):
            raise result
        if result is None:
            return not_found(field_name)
        return parse_field_response(result)


def field_payload(field_name, label, value, confidence=0.99, bounding_box=None):
    payload = {
        'fieldName': field_name,
        'label': label,
        'extractedValue': value,
        'confidence': confidence,
    }
    if bounding_box is not None:
        payload['boundingBox'] = bounding_box
    return payload


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def collection() -> DocumentCollection:
    return DocumentCollection()


@pytest.fixture
def engine(collection, gateway) -> LifecycleEngine:
    return LifecycleEngine(collection, gateway)


@pytest.fixture
def make_field():
    """Factory for uncorrected fields."""
    counter = {'n': 0}

    def _make(label, value, confidence=0.99, field_name=None):
        counter['n'] += 1
        name = field_name or label.lower().replace(' ', '_').replace('#', 'no')
        return ExtractedField.create(
            field_id=f"{name}-{counter['n']}",
            field_name=name,
            label=label,
            extracted_value=value,
            confidence=confidence,
        )

    return _make


@pytest.fixture
def make_doc():
    """Factory for documents that have already left PROCESSING."""
    counter = {'n': 0}

    def _make(doc_type=DocType.INVOICE, fields=None, status=None, file_name=None):
        counter['n'] += 1
        fields = fields or []
        if status is None:
            needs_review = any(f.needs_review for f in fields)
            status = DocStatus.REVIEW_NEEDED if needs_review else DocStatus.EXTRACTED
        name = file_name or f"doc{counter['n']}.pdf"
        return DocumentData(
            id=f"doc-{counter['n']}",
            file_name=name,
            status=status,
            doc_type=doc_type,
            extracted_fields=fields,
            source=SourceFile.from_bytes(name, b'%PDF-1.4'),
        )

    return _make
