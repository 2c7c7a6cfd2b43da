"""
Sidecar Gateway

Replays extraction results stored next to each source file, e.g.
`invoice.pdf.extraction.json` beside `invoice.pdf`. The sidecar holds a
whole-document response; single-field lookups search its `extractedFields`
and an optional `additionalFields` list of values the model found but did
not return in bulk.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List

from loguru import logger

from ..exceptions import GatewayError, MalformedResponseError
from ..intake import SourceFile
from .base import (
    ExtractionGateway,
    DocumentExtractionResponse,
    SingleFieldExtractionResponse,
    parse_document_response,
    parse_field_response,
    not_found,
)


class SidecarGateway(ExtractionGateway):
    """
    Gateway backed by JSON files beside the documents.

    Usage:
        gateway = SidecarGateway()
        response = await gateway.extract_document(SourceFile.from_path(path))
    """

    def __init__(self, suffix: str = '.extraction.json'):
        self.suffix = suffix

    def sidecar_path(self, source: SourceFile) -> Path:
        if source.path is None:
            raise GatewayError(f"No sidecar for in-memory file {source.name}")
        return source.path.with_name(source.path.name + self.suffix)

    async def _load(self, source: SourceFile) -> Dict[str, Any]:
        path = self.sidecar_path(source)
        try:
            text = await asyncio.to_thread(path.read_text, encoding='utf-8')
        except OSError as e:
            raise GatewayError(f"Cannot read sidecar {path}: {e}", e) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Sidecar {path} is not valid JSON: {e}", e) from e

        if not isinstance(data, dict):
            raise MalformedResponseError(f"Sidecar {path} must hold a JSON object")
        return data

    async def extract_document(self, source: SourceFile) -> DocumentExtractionResponse:
        data = await self._load(source)
        response = parse_document_response(data)
        logger.debug(
            f"Sidecar for {source.name}: {response.doc_type}, "
            f"{len(response.extracted_fields)} field(s)"
        )
        return response

    async def extract_field(
        self,
        source: SourceFile,
        field_name: str,
    ) -> SingleFieldExtractionResponse:
        data = await self._load(source)
        candidates: List[Any] = list(data.get('extractedFields') or [])
        candidates.extend(data.get('additionalFields') or [])

        wanted = field_name.strip().lower()
        for candidate in candidates:
            if not isinstance(candidate, dict):
                continue
            names = (candidate.get('fieldName'), candidate.get('label'))
            if any(isinstance(n, str) and n.lower() == wanted for n in names):
                return parse_field_response(candidate)

        return not_found(field_name)
