"""
Review Session

Saves and restores a document collection so review can continue across
runs of the command line tool.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any

from loguru import logger

from ..exceptions import SessionError
from .collection import DocumentCollection, ALL
from .review_data import DocumentData, DocType


SESSION_FORMAT_VERSION = 1


@dataclass
class ReviewSession:
    """
    A named review session over one document collection.
    """
    session_id: str
    name: str
    collection: DocumentCollection = field(default_factory=DocumentCollection)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    type_filter: str = ALL
    selected_id: Optional[str] = None

    @classmethod
    def create(cls, name: str = 'review') -> 'ReviewSession':
        """Create a new, empty review session."""
        return cls(session_id=str(uuid.uuid4()), name=name)

    @property
    def active_filter(self):
        """The stored filter as 'all' or a DocType."""
        if self.type_filter == ALL:
            return ALL
        return DocType.parse(self.type_filter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'format_version': SESSION_FORMAT_VERSION,
            'session_id': self.session_id,
            'name': self.name,
            'created_at': self.created_at.isoformat(),
            'type_filter': self.type_filter,
            'selected_id': self.selected_id,
            'documents': [d.to_dict() for d in self.collection],
            'statistics': self.collection.get_statistics(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReviewSession':
        documents = [DocumentData.from_dict(d) for d in data.get('documents', [])]

        created_at = datetime.now(timezone.utc)
        if data.get('created_at'):
            created_at = datetime.fromisoformat(data['created_at'])

        return cls(
            session_id=data['session_id'],
            name=data.get('name', 'review'),
            collection=DocumentCollection(documents),
            created_at=created_at,
            type_filter=data.get('type_filter', ALL),
            selected_id=data.get('selected_id'),
        )

    def save(self, path: Path) -> Path:
        """Write the session as JSON."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise SessionError(f"Cannot write session {path}: {e}") from e

        logger.debug(f"Saved session {self.session_id} ({len(self.collection)} docs) to {path}")
        return path

    @classmethod
    def load(cls, path: Path) -> 'ReviewSession':
        """
        Read a session file.

        Raises:
            SessionError: If the file is missing or not a valid session
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return cls.from_dict(data)
        except (OSError, json.JSONDecodeError) as e:
            raise SessionError(f"Cannot read session {path}: {e}") from e
        except (KeyError, ValueError, TypeError) as e:
            raise SessionError(f"Invalid session file {path}: {e}") from e

    @classmethod
    def load_or_create(cls, path: Path, name: str = 'review') -> 'ReviewSession':
        path = Path(path)
        if path.exists():
            return cls.load(path)
        logger.info(f"Starting new session at {path}")
        return cls.create(name)
