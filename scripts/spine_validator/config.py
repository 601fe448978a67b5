"""
Configuration management for the skeleton asset validator.
Supports TOML and JSON configuration files with validation.
"""

import os
import json
from dataclasses import dataclass, field

# Handle tomllib import for different Python versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python < 3.11 with tomli package
    except ImportError:
        tomllib = None  # Fallback if no TOML support
from typing import Dict, List, Any, Union
from pathlib import Path


DEFAULT_NON_TEXTURE_TYPES = ["clipping", "boundingbox", "path", "point", "vertex"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class ValidatorConfig:
    """Main configuration class for the validator."""

    # Extraction settings
    non_texture_types: List[str] = field(default_factory=lambda: list(DEFAULT_NON_TEXTURE_TYPES))
    empty_marker_prefix: str = "__empty"
    max_walk_depth: int = 512

    # Atlas settings
    atlas_extensions: List[str] = field(default_factory=lambda: [".atlas", ".atlas.txt"])
    image_extensions: List[str] = field(default_factory=lambda: [".png", ".jpg", ".jpeg", ".webp"])
    check_page_images: bool = True

    # Output settings
    strict: bool = False
    show_contexts: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ValidatorConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            return cls._from_toml(config_path)
        elif config_path.suffix.lower() == '.json':
            return cls._from_json(config_path)
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_toml(cls, config_path: Path) -> "ValidatorConfig":
        """Load configuration from TOML file."""
        if tomllib is None:
            raise ImportError("TOML support not available. Install tomli package for Python < 3.11")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "ValidatorConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ValidatorConfig":
        """Create configuration from dictionary."""
        config_data = {}

        # Handle extraction settings
        if 'extraction' in data:
            extraction = data['extraction']
            if 'non_texture_types' in extraction:
                config_data['non_texture_types'] = [str(t).lower() for t in extraction['non_texture_types']]
            config_data['empty_marker_prefix'] = extraction.get('empty_marker_prefix', '__empty')
            config_data['max_walk_depth'] = extraction.get('max_walk_depth', 512)

        # Handle atlas settings
        if 'atlas' in data:
            atlas = data['atlas']
            if 'atlas_extensions' in atlas:
                config_data['atlas_extensions'] = list(atlas['atlas_extensions'])
            if 'image_extensions' in atlas:
                config_data['image_extensions'] = list(atlas['image_extensions'])
            config_data['check_page_images'] = atlas.get('check_page_images', True)

        # Handle output settings
        if 'output' in data:
            output = data['output']
            config_data['strict'] = output.get('strict', False)
            config_data['show_contexts'] = output.get('show_contexts', False)
            config_data['log_level'] = str(output.get('log_level', 'INFO')).upper()

        return cls(**config_data)

    @classmethod
    def default(cls) -> "ValidatorConfig":
        """Create default configuration with environment variable overrides."""
        config = cls()

        # Apply environment variable overrides
        config = cls._apply_env_overrides(config)

        return config

    @classmethod
    def from_env(cls) -> "ValidatorConfig":
        """Create configuration from environment variables only."""
        config = cls()
        return cls._apply_env_overrides(config)

    @classmethod
    def _apply_env_overrides(cls, config: "ValidatorConfig") -> "ValidatorConfig":
        """Apply environment variable overrides to configuration."""

        # Extraction settings
        if os.getenv('SPINE_VALIDATOR_NON_TEXTURE_TYPES'):
            config.non_texture_types = [
                t.strip().lower()
                for t in os.getenv('SPINE_VALIDATOR_NON_TEXTURE_TYPES', '').split(',')
                if t.strip()
            ]

        if os.getenv('SPINE_VALIDATOR_EMPTY_MARKER_PREFIX'):
            config.empty_marker_prefix = os.getenv('SPINE_VALIDATOR_EMPTY_MARKER_PREFIX', '__empty')

        if os.getenv('SPINE_VALIDATOR_MAX_WALK_DEPTH'):
            config.max_walk_depth = int(os.getenv('SPINE_VALIDATOR_MAX_WALK_DEPTH', '512'))

        # Atlas settings
        if os.getenv('SPINE_VALIDATOR_CHECK_PAGE_IMAGES'):
            config.check_page_images = os.getenv('SPINE_VALIDATOR_CHECK_PAGE_IMAGES', 'true').lower() == 'true'

        # Output settings
        if os.getenv('SPINE_VALIDATOR_STRICT'):
            config.strict = os.getenv('SPINE_VALIDATOR_STRICT', 'false').lower() == 'true'

        if os.getenv('SPINE_VALIDATOR_LOG_LEVEL'):
            config.log_level = os.getenv('SPINE_VALIDATOR_LOG_LEVEL', 'INFO').upper()

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.max_walk_depth <= 0:
            errors.append("max_walk_depth must be positive")

        if not self.non_texture_types:
            errors.append("non_texture_types must not be empty")

        if not self.atlas_extensions:
            errors.append("atlas_extensions must not be empty")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        return errors
