"""Configuration management for the business card generator."""

import yaml
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional

from .placeholder_resolver import FormattingPolicy, load_default_position_mapping


def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


@dataclass
class ProcessingOptions:
    """Limits and tuning for batch processing.

    Attributes:
        max_template_file_size_mb: Template size ceiling.
        max_excel_file_size_mb: Spreadsheet size ceiling for imports.
        max_header_search_rows: Rows scanned for the spreadsheet header.
        max_batch_size: Maximum records per batch.
        max_workers: Worker threads; 1 processes records sequentially.
        batch_timeout_seconds: Overall batch deadline, or None for no limit.
        output_dir: Where archives are written (system temp dir if None).
    """
    max_template_file_size_mb: int = 50
    max_excel_file_size_mb: int = 10
    max_header_search_rows: int = 5
    max_batch_size: int = 1000
    max_workers: int = 1
    batch_timeout_seconds: Optional[float] = None
    output_dir: Optional[Path] = None

    @property
    def max_template_file_size_bytes(self) -> int:
        return self.max_template_file_size_mb * 1024 * 1024

    @property
    def max_excel_file_size_bytes(self) -> int:
        return self.max_excel_file_size_mb * 1024 * 1024

    def validate(self):
        """Check option ranges.

        Raises:
            ValueError: If any option is out of range.
        """
        problems = []
        if not 1 <= self.max_template_file_size_mb <= 100:
            problems.append("max_template_file_size_mb must be between 1 and 100")
        if not 1 <= self.max_excel_file_size_mb <= 100:
            problems.append("max_excel_file_size_mb must be between 1 and 100")
        if not 1 <= self.max_header_search_rows <= 20:
            problems.append("max_header_search_rows must be between 1 and 20")
        if not 1 <= self.max_batch_size <= 10000:
            problems.append("max_batch_size must be between 1 and 10000")
        if self.max_workers < 1:
            problems.append("max_workers must be at least 1")
        if self.batch_timeout_seconds is not None and self.batch_timeout_seconds <= 0:
            problems.append("batch_timeout_seconds must be positive")
        if problems:
            raise ValueError("Invalid processing options: " + "; ".join(problems))


class Config:
    """Configuration manager that loads config.yaml and exposes typed views."""

    def __init__(self, config_path: str = 'config.yaml'):
        """Initialize configuration by loading the main config file.

        Args:
            config_path: Path to main configuration file
        """
        self.config_path = Path(config_path)
        config_dir = self.config_path.parent

        main_config = load_yaml_file(self.config_path)

        # Set up project_root from paths.project_root if present
        paths_config = main_config.get('paths', {}) or {}
        if 'project_root' in paths_config:
            self.project_root = (config_dir / paths_config['project_root']).resolve()
        else:
            self.project_root = Path.cwd()

        self._config = main_config
        self._paths = paths_config

        logging.debug(f"Loaded main config from: {self.config_path}")
        self._setup_logging()

    @classmethod
    def from_dict(cls, main_config: Dict[str, Any], config_dir: Optional[Path] = None) -> "Config":
        """Create Config instance from an in-memory dictionary.

        Args:
            main_config: Configuration dictionary (already loaded)
            config_dir: Directory used for relative path resolution

        Returns:
            Configured Config instance
        """
        config = cls.__new__(cls)
        config_dir = config_dir or Path.cwd()
        config.config_path = config_dir / "config.yaml"  # Virtual path

        paths_config = main_config.get('paths', {}) or {}
        if 'project_root' in paths_config:
            config.project_root = (config_dir / paths_config['project_root']).resolve()
        else:
            config.project_root = Path.cwd()

        config._config = main_config.copy()
        config._paths = paths_config

        config._setup_logging()
        return config

    def _resolve_path_value(self, value: str) -> Path:
        """Resolve a path value relative to project_root if not absolute.

        Args:
            value: Path string to resolve

        Returns:
            Resolved Path object
        """
        if not value:
            return Path()
        p = Path(value)
        if not p.is_absolute():
            return self.project_root / p
        return p.resolve()

    def _setup_logging(self):
        """Setup logging based on configuration."""
        log_level = self.get('settings.logging.level', 'INFO')
        numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)
        logging.basicConfig(
            level=numeric_level,
            format='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'processing.max_batch_size')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set_path(self, key: str, value: str):
        """Override a configured path (used for CLI overrides)."""
        self._paths[key] = value
        self._config['paths'] = self._paths

    def get_path(self, key: str) -> Path:
        """Get a path from configuration, resolved relative to project_root.

        Args:
            key: Path key in config (e.g., 'template', 'records')

        Returns:
            Resolved Path object
        """
        path_str = self._paths.get(key)
        if path_str is None:
            raise ValueError(f"Path '{key}' not found in configuration")
        return self._resolve_path_value(path_str)

    def has_path(self, key: str) -> bool:
        return bool(self._paths.get(key))

    def validate_paths(self):
        """Validate that required paths exist using resolved paths."""
        required_paths = ['template', 'records']
        missing = []

        for path_key in required_paths:
            try:
                path = self.get_path(path_key)
                if not path.exists():
                    missing.append(f"{path_key}: {path}")
            except ValueError:
                missing.append(f"{path_key}: not configured")

        if missing:
            raise FileNotFoundError(
                f"Required files not found:\n" + "\n".join(f"  - {p}" for p in missing)
            )

    @property
    def template_path(self) -> Path:
        """Get card template (.pptx) path."""
        return self.get_path('template')

    @property
    def records_path(self) -> Path:
        """Get employee records (.xlsx or .yaml) path."""
        return self.get_path('records')

    @property
    def output_dir(self) -> Optional[Path]:
        """Get the archive output directory, if configured."""
        if not self.has_path('output_dir'):
            return None
        return self.get_path('output_dir')

    @property
    def processing_options(self) -> ProcessingOptions:
        """Build processing options from the 'processing' section."""
        section = self.get('processing', {}) or {}
        defaults = ProcessingOptions()
        timeout = section.get('batch_timeout_seconds', defaults.batch_timeout_seconds)
        options = ProcessingOptions(
            max_template_file_size_mb=int(section.get('max_template_file_size_mb', defaults.max_template_file_size_mb)),
            max_excel_file_size_mb=int(section.get('max_excel_file_size_mb', defaults.max_excel_file_size_mb)),
            max_header_search_rows=int(section.get('max_header_search_rows', defaults.max_header_search_rows)),
            max_batch_size=int(section.get('max_batch_size', defaults.max_batch_size)),
            max_workers=int(section.get('max_workers', defaults.max_workers)),
            batch_timeout_seconds=float(timeout) if timeout is not None else None,
            output_dir=self.output_dir,
        )
        options.validate()
        return options

    @property
    def formatting_policy(self) -> FormattingPolicy:
        """Build the contact formatting policy from 'formatting' and 'position_mapping'.

        Entries in 'position_mapping' extend (and override) the packaged table.
        """
        defaults = FormattingPolicy()
        mobile = self.get('formatting.mobile', {}) or {}
        extension = self.get('formatting.extension', {}) or {}

        mapping = dict(load_default_position_mapping())
        mapping.update({str(k): str(v) for k, v in (self.get('position_mapping', {}) or {}).items()})

        labels = dict(defaults.removal_labels)
        for field_name, fragments in (self.get('line_removal.labels', {}) or {}).items():
            labels[field_name] = tuple(str(f) for f in fragments or ())

        empty_values = self.get('formatting.empty_values')
        return FormattingPolicy(
            mobile_prefix=str(mobile.get('national_prefix', defaults.mobile_prefix)),
            extension_prefix=str(extension.get('prefix', defaults.extension_prefix)),
            extension_expansion=str(extension.get('expansion', defaults.extension_expansion)),
            empty_values=tuple(str(v) for v in empty_values) if empty_values is not None else defaults.empty_values,
            position_mapping=mapping,
            removal_labels=labels,
        )
