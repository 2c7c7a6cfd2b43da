"""
Workbench Configuration

Settings for the review workbench, loaded from an optional YAML file with
environment overrides for the extraction gateway.

Example config/workbench.yaml:

    confidence:
      high: 0.95
      medium: 0.85
    intake:
      extensions: [.pdf, .png, .jpg, .jpeg, .tiff]
      sidecar_suffix: .extraction.json
    export:
      directory: ./exports
    gateway:
      url: https://extract.example.com/v1
      timeout: 60
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any

import yaml
from loguru import logger

from .exceptions import ConfigurationError


DEFAULT_EXTENSIONS = ['.pdf', '.png', '.jpg', '.jpeg', '.tiff']

ENV_GATEWAY_URL = 'DOCREVIEW_GATEWAY_URL'
ENV_API_KEY = 'DOCREVIEW_API_KEY'


@dataclass
class ConfidenceThresholds:
    """
    Boundaries between confidence tiers.

    A score at or above `high` is HIGH, at or above `medium` is MEDIUM,
    anything lower is LOW.
    """
    high: float = 0.95
    medium: float = 0.85

    def __post_init__(self):
        if not (0.0 <= self.medium <= self.high <= 1.0):
            raise ConfigurationError(
                f"Confidence thresholds must satisfy 0 <= medium <= high <= 1, "
                f"got medium={self.medium}, high={self.high}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {'high': self.high, 'medium': self.medium}


@dataclass
class GatewaySettings:
    """Connection settings for the HTTP extraction service."""
    url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 60.0
    model: Optional[str] = None


@dataclass
class WorkbenchConfig:
    """Configuration for the review workbench."""

    thresholds: ConfidenceThresholds = field(default_factory=ConfidenceThresholds)

    # Intake
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    sidecar_suffix: str = '.extraction.json'

    # Export
    export_dir: Path = Path('exports')

    gateway: GatewaySettings = field(default_factory=GatewaySettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkbenchConfig':
        """Create config from a parsed YAML mapping."""
        confidence = data.get('confidence') or {}
        intake = data.get('intake') or {}
        export = data.get('export') or {}
        gateway = data.get('gateway') or {}

        try:
            thresholds = ConfidenceThresholds(
                high=float(confidence.get('high', 0.95)),
                medium=float(confidence.get('medium', 0.85)),
            )
            timeout = float(gateway.get('timeout', 60.0))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        extensions = [
            ext.lower() if ext.startswith('.') else f'.{ext.lower()}'
            for ext in intake.get('extensions', DEFAULT_EXTENSIONS)
        ]

        return cls(
            thresholds=thresholds,
            extensions=extensions,
            sidecar_suffix=intake.get('sidecar_suffix', '.extraction.json'),
            export_dir=Path(export.get('directory', 'exports')),
            gateway=GatewaySettings(
                url=gateway.get('url'),
                api_key=gateway.get('api_key'),
                timeout=timeout,
                model=gateway.get('model'),
            ),
        )

    def apply_env(self) -> 'WorkbenchConfig':
        """Override gateway settings from the environment."""
        url = os.environ.get(ENV_GATEWAY_URL)
        if url:
            self.gateway.url = url
        api_key = os.environ.get(ENV_API_KEY)
        if api_key:
            self.gateway.api_key = api_key
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'confidence': self.thresholds.to_dict(),
            'intake': {
                'extensions': self.extensions,
                'sidecar_suffix': self.sidecar_suffix,
            },
            'export': {'directory': str(self.export_dir)},
            'gateway': {
                'url': self.gateway.url,
                'timeout': self.gateway.timeout,
                'model': self.gateway.model,
            },
        }


def load_config(config_path: Optional[Path] = None) -> WorkbenchConfig:
    """
    Load workbench configuration.

    Args:
        config_path: Path to a YAML config file, or None for defaults

    Returns:
        WorkbenchConfig with environment overrides applied

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid values
    """
    if config_path is None:
        logger.debug("No config file given, using defaults")
        return WorkbenchConfig().apply_env()

    logger.info(f"Loading configuration from: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config: {e}")
        raise ConfigurationError(f"Cannot read config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {config_path} must be a mapping")

    return WorkbenchConfig.from_dict(data).apply_env()
