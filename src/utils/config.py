# ========================
# src/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the trip analysis with environment support.
"""

import os
from pathlib import Path
from typing import Dict, Any, List, Optional

DEFAULT_MONTHS = '2021-01,2021-02,2021-03,2021-04'


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """
    Configuration class for the trip analysis.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # File Paths
        self.DATA_DIR = os.getenv('TRIPSTATS_DATA_DIR', 'data/raw')
        self.OUTPUT_DIR = os.getenv('TRIPSTATS_OUTPUT_DIR', 'data/reports')
        self.SAMPLE_MONTHS = _split_list(os.getenv('TRIPSTATS_SAMPLE_MONTHS', DEFAULT_MONTHS))
        self.INPUT_FILES = _split_list(os.getenv('TRIPSTATS_INPUT_FILES', ''))
        self.EXPORT_REPORTS = os.getenv('TRIPSTATS_EXPORT_REPORTS', 'true').lower() == 'true'

        # Ingestion
        self.CHUNK_SIZE = int(os.getenv('TRIPSTATS_CHUNK_SIZE', '10000'))

        # Analysis Settings
        self.REFERENCE_YEAR = int(os.getenv('TRIPSTATS_REFERENCE_YEAR', '2021'))
        self.MIN_GROUP_SIZE = int(os.getenv('TRIPSTATS_MIN_GROUP_SIZE', '10'))
        self.DROP_NULL_KEYS = os.getenv('TRIPSTATS_DROP_NULL_KEYS', 'true').lower() == 'true'

        # Sample Data Generation
        self.SAMPLE_ROWS_PER_MONTH = int(os.getenv('TRIPSTATS_SAMPLE_ROWS', '5000'))
        self.SAMPLE_SEED = int(os.getenv('TRIPSTATS_SAMPLE_SEED', '42'))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_FILE = os.getenv('TRIPSTATS_LOG_FILE', 'tripstats.log')
        self.LOG_DIR = os.getenv('TRIPSTATS_LOG_DIR', 'logs')

        # Override with provided config
        if config_dict:
            self._update_from_dict(config_dict)

        # Default to the monthly files expected in DATA_DIR
        if not self.INPUT_FILES:
            self.INPUT_FILES = [
                str(Path(self.DATA_DIR) / self.month_file_name(month)) for month in self.SAMPLE_MONTHS
            ]

    @staticmethod
    def month_file_name(month: str) -> str:
        """File name of a monthly export, e.g. '2021-01' -> '202101-citibike-tripdata.csv'."""
        return f"{month.replace('-', '')}-citibike-tripdata.csv"

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def get_data_paths(self) -> Dict[str, Path]:
        """Get all configured data paths as Path objects."""
        return {
            'data_dir': Path(self.DATA_DIR),
            'output_dir': Path(self.OUTPUT_DIR),
            'logs_dir': Path(self.LOG_DIR),
        }

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        for path_name, path in self.get_data_paths().items():
            if path_name == 'output_dir' and not self.EXPORT_REPORTS:
                continue
            path.mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['chunk_size'] = self.CHUNK_SIZE > 0
        validations['min_group_size'] = self.MIN_GROUP_SIZE >= 0
        validations['reference_year'] = 1900 <= self.REFERENCE_YEAR <= 2100
        validations['sample_rows'] = self.SAMPLE_ROWS_PER_MONTH > 0
        validations['input_files'] = len(self.INPUT_FILES) > 0

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if not attr.startswith('_') and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        import json
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        import json
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

