"""
Tests for response validation and the sidecar / HTTP gateways.
"""

import json

import httpx
import pytest

from docreview.config import GatewaySettings
from docreview.exceptions import ConfigurationError, GatewayError, MalformedResponseError
from docreview.gateway import HTTPExtractionGateway, SidecarGateway
from docreview.gateway.base import parse_document_response, parse_field_response, not_found
from docreview.intake import SourceFile


class TestResponseParsing:
    """Tests for boundary validation of service payloads."""

    def test_document_response(self):
        response = parse_document_response({
            'docType': 'BOL',
            'extractedFields': [
                {'fieldName': 'weight', 'label': 'Weight', 'extractedValue': 1200, 'confidence': 0.91},
            ],
        })

        assert response.doc_type == 'BOL'
        assert response.extracted_fields[0].extracted_value == '1200'

    def test_missing_doc_type_defaults_unknown(self):
        response = parse_document_response({'extractedFields': []})
        assert response.doc_type == 'UNKNOWN'

    @pytest.mark.parametrize('payload', [
        None,
        [],
        {'docType': 'INVOICE'},
        {'extractedFields': [{'fieldName': 'x', 'label': 'X', 'extractedValue': 'v'}]},
        {'extractedFields': [{'fieldName': 'x', 'label': 'X', 'extractedValue': 'v', 'confidence': 1.5}]},
    ])
    def test_malformed_document_response(self, payload):
        with pytest.raises(MalformedResponseError):
            parse_document_response(payload)

    def test_vertices_clamped(self):
        response = parse_field_response({
            'fieldName': 'total',
            'label': 'Total',
            'extractedValue': '5',
            'confidence': 0.9,
            'boundingBox': [{'x': -0.2, 'y': 1.4}],
        })

        assert response.bounding_box[0].x == 0.0
        assert response.bounding_box[0].y == 1.0

    def test_found(self):
        assert not not_found('Total').found
        assert not parse_field_response(
            {'fieldName': 'total', 'label': 'Total', 'extractedValue': '', 'confidence': 0.0}
        ).found


class TestSidecarGateway:
    """Tests for the JSON sidecar gateway."""

    def setup_method(self):
        self.gateway = SidecarGateway()

    def _write(self, tmp_path, payload, name='invoice.pdf'):
        document = tmp_path / name
        document.write_bytes(b'%PDF-1.4')
        sidecar = tmp_path / (name + '.extraction.json')
        sidecar.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding='utf-8')
        return SourceFile.from_path(document)

    @pytest.mark.asyncio
    async def test_extract_document(self, tmp_path):
        source = self._write(tmp_path, {
            'docType': 'INVOICE',
            'extractedFields': [
                {'fieldName': 'vendor', 'label': 'Vendor', 'extractedValue': 'Acme', 'confidence': 0.97},
            ],
        })

        response = await self.gateway.extract_document(source)

        assert response.doc_type == 'INVOICE'
        assert response.extracted_fields[0].label == 'Vendor'

    @pytest.mark.asyncio
    async def test_extract_field_from_additional(self, tmp_path):
        source = self._write(tmp_path, {
            'docType': 'INVOICE',
            'extractedFields': [],
            'additionalFields': [
                {'fieldName': 'poNumber', 'label': 'PO Number', 'extractedValue': 'PO-1', 'confidence': 0.8},
            ],
        })

        by_label = await self.gateway.extract_field(source, 'po number')
        by_name = await self.gateway.extract_field(source, 'PONUMBER')
        missing = await self.gateway.extract_field(source, 'Tracking')

        assert by_label.found and by_label.extracted_value == 'PO-1'
        assert by_name.found
        assert not missing.found

    @pytest.mark.asyncio
    async def test_missing_sidecar(self, tmp_path):
        document = tmp_path / 'scan.png'
        document.write_bytes(b'\x89PNG')

        with pytest.raises(GatewayError):
            await self.gateway.extract_document(SourceFile.from_path(document))

    @pytest.mark.asyncio
    async def test_in_memory_source(self):
        with pytest.raises(GatewayError):
            await self.gateway.extract_document(SourceFile.from_bytes('a.pdf', b'x'))

    @pytest.mark.asyncio
    @pytest.mark.parametrize('payload', ['{not json', '[1, 2]'])
    async def test_malformed_sidecar(self, tmp_path, payload):
        source = self._write(tmp_path, payload)

        with pytest.raises(MalformedResponseError):
            await self.gateway.extract_document(source)


class TestHTTPExtractionGateway:
    """Tests for the HTTP gateway using a mock transport."""

    def _gateway(self, handler, **settings):
        settings.setdefault('url', 'https://extract.example.com/api')
        return HTTPExtractionGateway(
            GatewaySettings(**settings),
            transport=httpx.MockTransport(handler),
        )

    def test_requires_url(self):
        with pytest.raises(ConfigurationError):
            HTTPExtractionGateway(GatewaySettings())

    @pytest.mark.asyncio
    async def test_extract_document(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['auth'] = request.headers.get('Authorization')
            seen['body'] = request.content
            return httpx.Response(200, json={'docType': 'RECEIPT', 'extractedFields': []})

        gateway = self._gateway(handler, api_key='secret')
        response = await gateway.extract_document(SourceFile.from_bytes('r.jpg', b'jpegdata'))

        assert response.doc_type == 'RECEIPT'
        assert seen['url'] == 'https://extract.example.com/api/extract'
        assert seen['auth'] == 'Bearer secret'
        assert b'jpegdata' in seen['body']

    @pytest.mark.asyncio
    async def test_extract_field_sends_name(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['body'] = request.content
            return httpx.Response(200, json={
                'fieldName': 'total', 'label': 'Total', 'extractedValue': '9.99', 'confidence': 0.99,
            })

        gateway = self._gateway(handler)
        response = await gateway.extract_field(SourceFile.from_bytes('r.jpg', b'x'), 'Total')

        assert response.found
        assert seen['url'].endswith('/extract-field')
        assert b'name="fieldName"' in seen['body']

    @pytest.mark.asyncio
    async def test_http_error(self):
        gateway = self._gateway(lambda request: httpx.Response(503, text='down'))

        with pytest.raises(GatewayError):
            await gateway.extract_document(SourceFile.from_bytes('a.pdf', b'x'))

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError('refused', request=request)

        gateway = self._gateway(handler)

        with pytest.raises(GatewayError):
            await gateway.extract_document(SourceFile.from_bytes('a.pdf', b'x'))

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        gateway = self._gateway(lambda request: httpx.Response(200, text='<html>'))

        with pytest.raises(MalformedResponseError):
            await gateway.extract_document(SourceFile.from_bytes('a.pdf', b'x'))
