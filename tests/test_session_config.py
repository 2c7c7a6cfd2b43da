"""
Tests for session persistence and configuration loading.
"""

import json

import pytest

from docreview.config import ConfidenceThresholds, WorkbenchConfig, load_config
from docreview.exceptions import ConfigurationError, SessionError
from docreview.intake import SourceFile, collect_files
from docreview.review.collection import ALL
from docreview.review.review_data import (
    ConfidenceLevel,
    DocStatus,
    DocType,
    DocumentData,
    Vertex,
)
from docreview.review.session import ReviewSession


class TestReviewSession:
    """Tests for saving and restoring a review session."""

    def test_save_and_load(self, tmp_path, make_doc, make_field):
        corrected = make_field('Total', '10.00', 0.3)
        corrected.apply_correction('12.00')
        corrected.bounding_box = [Vertex(0.1, 0.2), Vertex(0.5, 0.2)]
        doc = make_doc(doc_type=DocType.BOL, fields=[corrected, make_field('Shipper', 'Acme')])
        session = ReviewSession.create('morning batch')
        session.collection.add(doc)
        session.type_filter = 'BOL'
        session.selected_id = doc.id

        path = session.save(tmp_path / 'session.json')
        restored = ReviewSession.load(path)

        assert restored.session_id == session.session_id
        assert restored.active_filter == DocType.BOL
        assert restored.selected_id == doc.id
        restored_doc = restored.collection.get(doc.id)
        assert restored_doc.doc_type == DocType.BOL
        assert restored_doc.status == DocStatus.EXTRACTED
        field = restored_doc.extracted_fields[0]
        assert field.user_correction == '12.00'
        assert field.confidence_level == ConfidenceLevel.MANUAL
        assert field.bounding_box[1].x == 0.5
        assert restored_doc.extracted_fields[1].bounding_box is None

    def test_session_file_layout(self, tmp_path, make_doc):
        session = ReviewSession.create()
        session.collection.add(make_doc(status=DocStatus.APPROVED))

        data = json.loads(session.save(tmp_path / 's.json').read_text(encoding='utf-8'))

        assert data['format_version'] == 1
        assert data['type_filter'] == ALL
        assert data['statistics']['by_status']['Approved'] == 1
        assert data['documents'][0]['source']['name'].endswith('.pdf')

    def test_in_memory_content_not_persisted(self):
        source = SourceFile.from_bytes('a.pdf', b'secret')
        assert 'content' not in source.to_dict()

    def test_load_or_create(self, tmp_path):
        session = ReviewSession.load_or_create(tmp_path / 'new.json')
        assert len(session.collection) == 0

    @pytest.mark.parametrize('content', ['{broken', '{"documents": []}'])
    def test_invalid_session(self, tmp_path, content):
        path = tmp_path / 'bad.json'
        path.write_text(content, encoding='utf-8')

        with pytest.raises(SessionError):
            ReviewSession.load(path)

    def test_unknown_doc_type_restored_as_unknown(self):
        doc = DocumentData.from_dict({'id': 'doc-1', 'file_name': 'a.pdf', 'doc_type': 'MEMO', 'status': 'Extracted'})
        assert doc.doc_type == DocType.UNKNOWN


class TestConfig:
    """Tests for YAML configuration loading."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('DOCREVIEW_GATEWAY_URL', raising=False)
        config = load_config()

        assert config.thresholds.high == 0.95
        assert config.thresholds.medium == 0.85
        assert config.gateway.url is None
        assert '.tiff' in config.extensions

    def test_load_yaml(self, tmp_path, monkeypatch):
        monkeypatch.delenv('DOCREVIEW_GATEWAY_URL', raising=False)
        path = tmp_path / 'workbench.yaml'
        path.write_text(
            "confidence:\n"
            "  high: 0.9\n"
            "  medium: 0.7\n"
            "intake:\n"
            "  extensions: [PDF, .png]\n"
            "export:\n"
            "  directory: out\n"
            "gateway:\n"
            "  url: https://extract.example.com\n"
            "  timeout: 15\n",
            encoding='utf-8',
        )

        config = load_config(path)

        assert config.thresholds == ConfidenceThresholds(high=0.9, medium=0.7)
        assert config.extensions == ['.pdf', '.png']
        assert config.export_dir.name == 'out'
        assert config.gateway.url == 'https://extract.example.com'
        assert config.gateway.timeout == 15.0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv('DOCREVIEW_GATEWAY_URL', 'https://env.example.com')
        monkeypatch.setenv('DOCREVIEW_API_KEY', 'k')

        config = WorkbenchConfig().apply_env()

        assert config.gateway.url == 'https://env.example.com'
        assert config.gateway.api_key == 'k'

    def test_bad_thresholds(self):
        with pytest.raises(ConfigurationError):
            ConfidenceThresholds(high=0.5, medium=0.9)

    @pytest.mark.parametrize('content', ['- a\n- b\n', 'confidence: {high: lots}\n', 'a: [unclosed\n'])
    def test_invalid_file(self, tmp_path, content):
        path = tmp_path / 'bad.yaml'
        path.write_text(content, encoding='utf-8')

        with pytest.raises(ConfigurationError):
            load_config(path)


class TestCollectFiles:
    """Tests for intake file discovery."""

    def test_directory_scan(self, tmp_path):
        for name in ('b.pdf', 'a.PNG', 'notes.txt', 'a.PNG.extraction.json'):
            (tmp_path / name).write_bytes(b'x')
        (tmp_path / 'sub').mkdir()
        (tmp_path / 'sub' / 'c.jpg').write_bytes(b'x')

        flat = collect_files([tmp_path], exclude_suffix='.extraction.json')
        deep = collect_files([tmp_path], recursive=True, exclude_suffix='.extraction.json')

        assert [s.name for s in flat] == ['a.PNG', 'b.pdf']
        assert flat[0].content_type == 'image/png'
        assert sorted(s.name for s in deep) == ['a.PNG', 'b.pdf', 'c.jpg']

    def test_missing_path(self, tmp_path):
        with pytest.raises(ValueError):
            collect_files([tmp_path / 'nope.pdf'])
