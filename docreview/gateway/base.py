"""
Extraction Gateway

Interface to the external AI extraction service, plus the response shapes the
workbench accepts from it. Payloads are validated here, at the boundary; a
malformed payload is reported as a gateway failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import MalformedResponseError
from ..intake import SourceFile


class VertexPayload(BaseModel):
    """Normalized bounding polygon vertex."""

    x: float
    y: float

    @field_validator('x', 'y')
    @classmethod
    def clamp_unit(cls, v: float) -> float:
        """Keep coordinates on the page."""
        return min(max(v, 0.0), 1.0)


class FieldPayload(BaseModel):
    """One field as returned by the extraction service."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    field_name: str = Field(alias='fieldName')
    label: str
    extracted_value: str = Field(alias='extractedValue')
    confidence: float = Field(ge=0.0, le=1.0)
    bounding_box: Optional[List[VertexPayload]] = Field(default=None, alias='boundingBox')


class DocumentExtractionResponse(BaseModel):
    """Whole-document extraction result."""

    model_config = ConfigDict(populate_by_name=True)

    doc_type: str = Field(default='UNKNOWN', alias='docType')
    extracted_fields: List[FieldPayload] = Field(alias='extractedFields')


class SingleFieldExtractionResponse(FieldPayload):
    """
    Single-field lookup result.

    An empty extracted value means the field was not found on the document.
    """

    @property
    def found(self) -> bool:
        return bool(self.extracted_value)


def parse_document_response(data: Any) -> DocumentExtractionResponse:
    """
    Validate a whole-document payload.

    Raises:
        MalformedResponseError: If the payload does not match the schema
    """
    try:
        return DocumentExtractionResponse.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Malformed extraction response: {e}", e) from e


def parse_field_response(data: Any) -> SingleFieldExtractionResponse:
    """
    Validate a single-field payload.

    Raises:
        MalformedResponseError: If the payload does not match the schema
    """
    try:
        return SingleFieldExtractionResponse.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Malformed field response: {e}", e) from e


def ensure_document_response(data: Any) -> DocumentExtractionResponse:
    """Accept a gateway result as-is if already validated, else validate it."""
    if isinstance(data, DocumentExtractionResponse):
        return data
    return parse_document_response(data)


def ensure_field_response(data: Any) -> SingleFieldExtractionResponse:
    """Accept a single-field result as-is if already validated, else validate it."""
    if isinstance(data, SingleFieldExtractionResponse):
        return data
    return parse_field_response(data)


def not_found(field_name: str) -> SingleFieldExtractionResponse:
    """Response for a field the service could not locate."""
    return SingleFieldExtractionResponse(
        field_name=field_name,
        label=field_name,
        extracted_value='',
        confidence=0.0,
    )


class ExtractionGateway(ABC):
    """
    Abstract base class for extraction service clients.

    Implementations may raise any exception; callers treat every raise as a
    gateway failure.
    """

    @abstractmethod
    async def extract_document(self, source: SourceFile) -> DocumentExtractionResponse:
        """
        Extract the document type and all fields from a file.

        Args:
            source: Uploaded file

        Returns:
            DocumentExtractionResponse

        Raises:
            GatewayError: If the service call fails
        """
        pass

    @abstractmethod
    async def extract_field(
        self,
        source: SourceFile,
        field_name: str,
    ) -> SingleFieldExtractionResponse:
        """
        Look up one named field on a file.

        Args:
            source: Uploaded file
            field_name: Field the reviewer asked for, e.g. "Due Date"

        Returns:
            SingleFieldExtractionResponse, with an empty value if not found

        Raises:
            GatewayError: If the service call fails
        """
        pass

    def get_service_name(self) -> str:
        return type(self).__name__

    def describe(self) -> Dict[str, Any]:
        return {'service': self.get_service_name()}
