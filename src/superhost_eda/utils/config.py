# ========================
# src/superhost_eda/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the listings pipeline with environment support.
"""

import json
import os
from datetime import date
from pathlib import Path
from typing import Dict, Any, Optional

DEFAULT_SOURCE_URL = (
    "https://data.insideairbnb.com/united-states/ny/new-york-city/"
    "2024-05-03/data/listings.csv.gz"
)

# Look-ahead floor for column type inference
MIN_TYPE_GUESS_ROWS = 1000


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


class Config:
    """
    Configuration class for the listings pipeline.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides. Keys are
                matched case-insensitively, so both ``price_ceiling`` and
                ``PRICE_CEILING`` work.
        """
        # Snapshot
        self.SOURCE_URL = os.getenv('PIPELINE_SOURCE_URL', DEFAULT_SOURCE_URL)
        self.SNAPSHOT_DATE = os.getenv('PIPELINE_SNAPSHOT_DATE', '2024-05-03')
        self.CITY_LABEL = os.getenv('PIPELINE_CITY_LABEL', 'nyc')

        # Cleaning thresholds
        self.PRICE_CEILING = int(os.getenv('PIPELINE_PRICE_CEILING', '1000'))

        # File Paths
        self.OUTPUT_DIR = os.getenv('PIPELINE_OUTPUT_DIR', 'data/processed')
        self.RAW_DATA_DIR = os.getenv('PIPELINE_RAW_DATA_DIR', 'data/raw')
        self.RAW_COPY_FILENAME = os.getenv('PIPELINE_RAW_COPY_FILENAME', 'listings_raw.csv')
        self.SAVE_RAW_COPY = _env_flag('PIPELINE_SAVE_RAW_COPY', 'true')

        # Ingestion
        self.CHUNK_SIZE = int(os.getenv('PIPELINE_CHUNK_SIZE', '5000'))
        self.TYPE_GUESS_ROWS = int(os.getenv('PIPELINE_TYPE_GUESS_ROWS', '10000'))

        # Reporting
        self.MAKE_PLOTS = _env_flag('PIPELINE_MAKE_PLOTS', 'true')
        self.FIT_MODEL = _env_flag('PIPELINE_FIT_MODEL', 'true')

        # Sample data
        self.GENERATE_SAMPLE = _env_flag('PIPELINE_GENERATE_SAMPLE', 'false')
        self.SAMPLE_ROWS = int(os.getenv('PIPELINE_SAMPLE_ROWS', '5000'))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

        # Override with provided config
        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def artifact_name(self, kind: str, extension: str = 'parquet') -> str:
        """
        Build a date-stamped artifact file name.

        Args:
            kind (str): Artifact kind, e.g. ``select_variables`` or
                ``analysis_dataset``
            extension (str): File extension without the dot

        Returns:
            str: ``<snapshot_date>-<city_label>-airbnblistings-<kind>.<extension>``
        """
        return f"{self.SNAPSHOT_DATE}-{self.CITY_LABEL}-airbnblistings-{kind}.{extension}"

    def get_data_paths(self) -> Dict[str, Path]:
        """Get all configured data paths as Path objects."""
        output_dir = Path(self.OUTPUT_DIR)
        return {
            'output_dir': output_dir,
            'raw_data_dir': Path(self.RAW_DATA_DIR),
            'figures_dir': output_dir / 'figures',
            'logs_dir': Path('logs'),
        }

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        paths = self.get_data_paths()
        for path_name, path in paths.items():
            if path_name.endswith('_dir'):
                path.mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['source_url'] = bool(str(self.SOURCE_URL).strip())
        validations['snapshot_date'] = self._is_iso_date(self.SNAPSHOT_DATE)
        validations['city_label'] = bool(str(self.CITY_LABEL).strip()) and '/' not in str(self.CITY_LABEL)
        validations['price_ceiling'] = int(self.PRICE_CEILING) > 0
        validations['chunk_size'] = int(self.CHUNK_SIZE) > 0
        validations['type_guess_rows'] = int(self.TYPE_GUESS_ROWS) >= MIN_TYPE_GUESS_ROWS
        validations['sample_rows'] = int(self.SAMPLE_ROWS) > 0

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations

    @staticmethod
    def _is_iso_date(value: Any) -> bool:
        try:
            date.fromisoformat(str(value))
            return True
        except ValueError:
            return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if not attr.startswith('_') and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        """String representation of configuration."""
        lines = ["Configuration Settings:"]
        config_dict = self.to_dict()
        for key, value in sorted(config_dict.items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
