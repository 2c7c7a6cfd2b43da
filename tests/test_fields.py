"""
Tests for field type inference and value validation.
"""

import pytest

from docreview.fields.field_types import FieldType, infer_field_type
from docreview.fields.validators import (
    FieldValidator,
    validate_value,
    INVALID_DATE_MESSAGE,
    INVALID_NUMBER_MESSAGE,
)
from docreview.review.review_data import DocumentData


class TestInferFieldType:
    """Tests for label based type inference."""

    @pytest.mark.parametrize('label', ['Date', 'Due Date', 'Invoice Date', 'Pickup Date', 'DELIVERY DATE'])
    def test_dates(self, label):
        assert infer_field_type(label) == FieldType.DATE

    @pytest.mark.parametrize('label', ['Amount', 'Total', 'Tax', 'Freight Rate', 'Gross Weight', 'total amount'])
    def test_numbers(self, label):
        assert infer_field_type(label) == FieldType.NUMBER

    @pytest.mark.parametrize('label', ['Invoice #', 'PO #', 'Load #', 'Vendor', 'Consignee', 'Category'])
    def test_identifiers_stay_text(self, label):
        assert infer_field_type(label) == FieldType.TEXT

    def test_unmatched_defaults_to_text(self):
        assert infer_field_type('Remit To') == FieldType.TEXT
        assert infer_field_type('') == FieldType.TEXT

    def test_type_fixed_at_creation(self, make_field):
        field = make_field('Amount', '10.00')
        field.label = 'Vendor'
        assert field.field_type == FieldType.NUMBER


class TestValidateValue:
    """Tests for advisory value validation."""

    @pytest.mark.parametrize('field_type', list(FieldType))
    def test_empty_is_valid(self, field_type):
        assert validate_value('', field_type) is None

    @pytest.mark.parametrize('value', ['2024-01-15', '01/15/2024', '2024-02-29'])
    def test_valid_dates(self, value):
        assert validate_value(value, FieldType.DATE) is None

    @pytest.mark.parametrize('value', ['2024-02-30', '13/01/2024', '2023-02-29', '2024/01/15', 'Jan 15, 2024', '1/5/2024'])
    def test_invalid_dates(self, value):
        assert validate_value(value, FieldType.DATE) == INVALID_DATE_MESSAGE

    @pytest.mark.parametrize('value', ['12.50', '-3', '+3', '0', '.5', '5.', '1e3', '2.5E-2', ' 42 '])
    def test_valid_numbers(self, value):
        assert validate_value(value, FieldType.NUMBER) is None

    @pytest.mark.parametrize('value', ['abc', '$12.50', '12,50', 'nan', 'inf', '1_000', '1e999'])
    def test_invalid_numbers(self, value):
        assert validate_value(value, FieldType.NUMBER) == INVALID_NUMBER_MESSAGE

    def test_text_always_valid(self):
        assert validate_value('anything at all ###', FieldType.TEXT) is None


class TestFieldValidator:
    """Tests for field and document validation."""

    def setup_method(self):
        self.validator = FieldValidator()

    def test_validates_effective_value(self, make_field):
        field = make_field('Total', '100.00')
        field.apply_correction('one hundred')

        result = self.validator.validate_field(field)

        assert not result.is_valid
        assert result.value == 'one hundred'
        assert result.error == INVALID_NUMBER_MESSAGE

    def test_validate_document_returns_failures_only(self, make_field):
        doc = DocumentData(
            id='doc-1',
            file_name='a.pdf',
            extracted_fields=[
                make_field('Vendor', 'Acme'),
                make_field('Date', 'yesterday'),
                make_field('Amount', '10'),
            ],
        )

        failures = self.validator.validate_document(doc)

        assert [r.label for r in failures] == ['Date']
