"""
File Intake

Collects uploaded files the workbench can send to the extraction service.
Accepted types are PDF, PNG, JPG/JPEG and TIFF.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable, Sequence

from loguru import logger


CONTENT_TYPES = {
    '.pdf': 'application/pdf',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.tiff': 'image/tiff',
}


@dataclass
class SourceFile:
    """
    A file payload handed in at upload time.

    Either `path` points at the bytes on disk or `content` carries them
    in memory.
    """
    name: str
    content_type: str
    path: Optional[Path] = None
    content: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: Path) -> 'SourceFile':
        path = Path(path)
        return cls(
            name=path.name,
            content_type=content_type_for(path.name),
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, content: bytes) -> 'SourceFile':
        return cls(name=name, content_type=content_type_for(name), content=content)

    @property
    def url(self) -> str:
        """Renderable reference to the source bytes."""
        if self.path is not None:
            return self.path.resolve().as_uri()
        if self.content is not None:
            encoded = base64.b64encode(self.content).decode('ascii')
            return f"data:{self.content_type};base64,{encoded}"
        return ''

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise ValueError(f"Source file {self.name} has no content")
        return self.path.read_bytes()

    def to_dict(self) -> Dict[str, Any]:
        # In-memory content is not persisted
        return {
            'name': self.name,
            'content_type': self.content_type,
            'path': str(self.path) if self.path else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SourceFile':
        return cls(
            name=data['name'],
            content_type=data.get('content_type', ''),
            path=Path(data['path']) if data.get('path') else None,
        )


def content_type_for(name: str) -> str:
    return CONTENT_TYPES.get(Path(name).suffix.lower(), 'application/octet-stream')


def is_supported(name: str, extensions: Optional[Sequence[str]] = None) -> bool:
    """Whether a file name has an accepted extension."""
    extensions = extensions or list(CONTENT_TYPES)
    return Path(name).suffix.lower() in extensions


def collect_files(
    inputs: Iterable[Path],
    extensions: Optional[Sequence[str]] = None,
    recursive: bool = False,
    exclude_suffix: Optional[str] = None,
) -> List[SourceFile]:
    """
    Find accepted files among paths given on intake.

    Directories are expanded; unsupported files are skipped with a warning.

    Args:
        inputs: Files and/or directories
        extensions: Accepted extensions, lower case with leading dot
        recursive: Descend into subdirectories
        exclude_suffix: Suffix of companion files to ignore silently

    Returns:
        SourceFile per accepted file, in the order given

    Raises:
        ValueError: If an input path does not exist
    """
    extensions = extensions or list(CONTENT_TYPES)
    sources: List[SourceFile] = []

    for input_path in inputs:
        path = Path(input_path)

        if path.is_dir():
            pattern = '**/*' if recursive else '*'
            candidates = sorted(p for p in path.glob(pattern) if p.is_file())
        elif path.is_file():
            candidates = [path]
        else:
            raise ValueError(f"Path not found: {input_path}")

        for candidate in candidates:
            if exclude_suffix and candidate.name.endswith(exclude_suffix):
                continue
            if not is_supported(candidate.name, extensions):
                logger.warning(f"Skipping unsupported file: {candidate}")
                continue
            sources.append(SourceFile.from_path(candidate))

    logger.debug(f"Collected {len(sources)} file(s) for intake")
    return sources
