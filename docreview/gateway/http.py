"""
HTTP Extraction Gateway

Client for a remote extraction service. The file is posted as multipart form
data and the JSON response is validated against the gateway schemas.

Endpoints, relative to the configured base URL:
    POST /extract        -> {docType, extractedFields[]}
    POST /extract-field  -> {fieldName, label, extractedValue, confidence, boundingBox}
"""

from __future__ import annotations

from typing import Optional, Dict, Any

import httpx
from loguru import logger

from ..config import GatewaySettings
from ..exceptions import GatewayError, MalformedResponseError, ConfigurationError
from ..intake import SourceFile
from .base import (
    ExtractionGateway,
    DocumentExtractionResponse,
    SingleFieldExtractionResponse,
    parse_document_response,
    parse_field_response,
)


class HTTPExtractionGateway(ExtractionGateway):
    """
    Extraction gateway over HTTP.

    Args:
        settings: Base URL, API key, timeout and model name
        transport: Optional httpx transport, for tests
    """

    def __init__(
        self,
        settings: GatewaySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.url:
            raise ConfigurationError("Extraction gateway URL is not configured")
        self.settings = settings
        self.transport = transport

    def get_service_name(self) -> str:
        return f"HTTP extraction ({self.settings.url})"

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.settings.api_key:
            headers['Authorization'] = f"Bearer {self.settings.api_key}"
        return headers

    async def _post(self, path: str, source: SourceFile, data: Dict[str, Any]) -> Any:
        url = self.settings.url.rstrip('/') + path
        files = {'file': (source.name, source.read_bytes(), source.content_type)}
        if self.settings.model:
            data = {**data, 'model': self.settings.model}

        async with httpx.AsyncClient(
            timeout=self.settings.timeout,
            headers=self._headers(),
            transport=self.transport,
        ) as client:
            try:
                response = await client.post(url, files=files, data=data)
                response.raise_for_status()
            except httpx.TimeoutException as e:
                logger.error(f"Extraction timed out for {source.name}: {e}")
                raise GatewayError(
                    f"Extraction timed out after {self.settings.timeout}s", e
                ) from e
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                logger.error(f"Extraction request failed for {source.name}: {e}")
                raise GatewayError(f"Extraction service request failed: {e}", e) from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Extraction service returned non-JSON body: {e}", e) from e

    async def extract_document(self, source: SourceFile) -> DocumentExtractionResponse:
        payload = await self._post('/extract', source, {})
        return parse_document_response(payload)

    async def extract_field(
        self,
        source: SourceFile,
        field_name: str,
    ) -> SingleFieldExtractionResponse:
        payload = await self._post('/extract-field', source, {'fieldName': field_name})
        return parse_field_response(payload)
