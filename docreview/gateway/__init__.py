"""
Extraction Gateway

Clients for the external extraction service.
"""

from .base import (
    ExtractionGateway,
    DocumentExtractionResponse,
    SingleFieldExtractionResponse,
    FieldPayload,
    VertexPayload,
    parse_document_response,
    parse_field_response,
    ensure_document_response,
    ensure_field_response,
)
from .sidecar import SidecarGateway
from .http import HTTPExtractionGateway

__all__ = [
    'ExtractionGateway',
    'DocumentExtractionResponse',
    'SingleFieldExtractionResponse',
    'FieldPayload',
    'VertexPayload',
    'parse_document_response',
    'parse_field_response',
    'ensure_document_response',
    'ensure_field_response',
    'SidecarGateway',
    'HTTPExtractionGateway',
]
