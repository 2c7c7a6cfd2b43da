"""
User Notices

Transient, non-fatal messages surfaced to the reviewer. Every recoverable
condition in the workbench is reported as a Notice value rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Dict, Any


class NoticeLevel(Enum):
    """Display severity of a notice."""

    SUCCESS = 'success'
    INFO = 'info'
    WARNING = 'warning'
    DANGER = 'danger'


class NoticeKind(Enum):
    """What happened."""

    FIELD_NOT_FOUND = auto()
    DUPLICATE_FIELD = auto()
    FIELD_ADDED = auto()
    SMART_ADD_BUSY = auto()
    DOCUMENT_PROCESSING = auto()
    DOCUMENT_FAILED = auto()
    SMART_ADD_FAILED = auto()
    VALIDATION_WARNING = auto()
    EMPTY_EXPORT_SET = auto()
    UNSUPPORTED_EXPORT_FORMAT = auto()
    EXPORT_COMPLETE = auto()
    BATCH_APPROVED = auto()
    END_OF_LIST = auto()
    NO_DOCUMENT_SELECTED = auto()
    UNSUPPORTED_FILE = auto()


@dataclass
class Notice:
    """A message for the reviewer."""
    kind: NoticeKind
    level: NoticeLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_warning(self) -> bool:
        return self.level in (NoticeLevel.WARNING, NoticeLevel.DANGER)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.name,
            'level': self.level.value,
            'message': self.message,
            'created_at': self.created_at.isoformat(),
        }


def success(kind: NoticeKind, message: str) -> Notice:
    return Notice(kind=kind, level=NoticeLevel.SUCCESS, message=message)


def info(kind: NoticeKind, message: str) -> Notice:
    return Notice(kind=kind, level=NoticeLevel.INFO, message=message)


def warning(kind: NoticeKind, message: str) -> Notice:
    return Notice(kind=kind, level=NoticeLevel.WARNING, message=message)


def danger(kind: NoticeKind, message: str) -> Notice:
    return Notice(kind=kind, level=NoticeLevel.DANGER, message=message)
