# ========================
# src/tripstats/storage.py
# ========================

"""
Report Storage Module

Optional export of the finished reports: one CSV per report, a JSON run
summary and a data dictionary describing the columns.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .reporting import ROLLUP_LABEL
from .transformation import ROLLED_UP

logger = logging.getLogger(__name__)

COLUMN_DESCRIPTIONS = {
    'age': ('integer', 'Rider age, |birth year - reference year|'),
    'age_bucket': ('string', 'Half-open decade interval, e.g. "[20-30)"'),
    'gender_str': ('string', 'Male, Female or Unknown'),
    'user_type': ('string', 'Subscriber (member) or Customer (casual rider)'),
    'count': ('integer', 'Number of trips in the group'),
    'mean': ('float', 'Average of the measure over the group'),
    'min': ('float', 'Smallest value of the measure in the group'),
    'max': ('float', 'Largest value of the measure in the group'),
    'median': ('float', '50th percentile of the measure in the group'),
}


class ReportSaver:
    """
    Saves finished reports to an output directory.
    """

    def __init__(self, output_dir: str = "data/reports"):
        """
        Initialize the report saver.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"ReportSaver initialized with output directory: {self.output_dir}")

    def save_reports(self, reports: Sequence[Dict[str, Any]], summary: Dict[str, Any]) -> Dict[str, str]:
        """
        Save every report plus the run summary.

        Args:
            reports (list[dict]): Reports built by TripReporter
            summary (dict): Row counts and per-query statistics

        Returns:
            dict: Mapping of report name to saved file path
        """
        saved_files = {}

        for report in reports:
            file_path = self.output_dir / f"{report['name']}.csv"
            self._write_csv(file_path, report['columns'], report['rows'])
            saved_files[report['name']] = str(file_path)

        saved_files['summary'] = self._save_summary(summary)
        saved_files['data_dictionary'] = self.create_data_dictionary(reports)

        logger.info(f"Saved {len(saved_files)} files to {self.output_dir}")
        return saved_files

    def _save_summary(self, summary_data: Dict[str, Any]) -> str:
        file_path = self.output_dir / "run_summary.json"

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(summary_data, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def _write_csv(self, file_path: Path, headers: List[str], data_items: Sequence[Dict]) -> None:
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.DictWriter(f, fieldnames=headers, extrasaction='ignore')
                writer.writeheader()
                writer.writerows(
                    {key: ROLLUP_LABEL if value is ROLLED_UP else value for key, value in item.items()}
                    for item in data_items
                )

            logger.info(f"Saved {len(data_items)} rows to {file_path}")

        except OSError as e:
            logger.error(f"Error writing CSV file {file_path}: {e}")
            raise

    def create_data_dictionary(self, reports: Sequence[Dict[str, Any]]) -> str:
        """Write a markdown file describing each exported report."""
        file_path = self.output_dir / "DATA_DICTIONARY.md"

        lines = [
            "# Data Dictionary",
            "",
            "Every report excludes round trips (same start and end station).",
            f"A key cell of `{ROLLUP_LABEL}` in a report with totals covers every value of that column.",
            "An empty key cell is a missing value, e.g. a rider age outside every age bucket.",
            "",
        ]
        for number, report in enumerate(reports, start=1):
            lines.extend([
                f"## {number}. {report['name']}.csv",
                report['title'],
                "",
                "| Column | Type | Description |",
                "|--------|------|-------------|",
            ])
            for column in report['columns']:
                column_type, description = COLUMN_DESCRIPTIONS.get(column, ('', ''))
                lines.append(f"| {column} | {column_type} | {description} |")
            lines.append("")

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines))

        logger.info(f"Data dictionary created at {file_path}")
        return str(file_path)
