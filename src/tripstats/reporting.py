# ========================
# src/tripstats/reporting.py
# ========================

"""
Reporting Module

Orders and truncates aggregate results and renders them as plain-text
tables for the console.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .transformation import ROLLED_UP

logger = logging.getLogger(__name__)

ROLLUP_LABEL = '(all)'
MISSING_LABEL = '(none)'


def rank(rows: Sequence[Dict[str, Any]],
         metric: str,
         top_n: Optional[int] = None,
         descending: bool = True) -> List[Dict[str, Any]]:
    """
    Sort result rows by a metric, keeping input order between ties.

    Rows whose metric is None always come last.

    Args:
        rows (list[dict]): Aggregate rows
        metric (str): Column to sort by
        top_n (int): Keep only the first N rows
        descending (bool): Highest values first

    Returns:
        list[dict]: The ordered, possibly truncated rows
    """
    present = [row for row in rows if row.get(metric) is not None]
    absent = [row for row in rows if row.get(metric) is None]

    # sorted() is stable with reverse=True as well
    ordered = sorted(present, key=lambda row: row[metric], reverse=descending) + absent

    if top_n is not None:
        ordered = ordered[:top_n]
    return ordered


def _format_value(value: Any) -> str:
    if value is ROLLED_UP:
        return ROLLUP_LABEL
    if value is None:
        return MISSING_LABEL
    if isinstance(value, float):
        return f"{value:,.2f}"
    if isinstance(value, int):
        return f"{value:,}"
    return str(value)


def format_table(rows: Sequence[Dict[str, Any]], columns: Sequence[str]) -> str:
    """Render rows as a left/right aligned text table."""
    cells = [[_format_value(row.get(column)) for column in columns] for row in rows]
    widths = [
        max([len(column)] + [len(line[i]) for line in cells])
        for i, column in enumerate(columns)
    ]
    numeric = [
        any(isinstance(row.get(column), (int, float)) for row in rows)
        for column in columns
    ]

    def _line(values):
        return "  ".join(
            value.rjust(width) if is_numeric else value.ljust(width)
            for value, width, is_numeric in zip(values, widths, numeric)
        ).rstrip()

    lines = [_line(columns), _line(['-' * width for width in widths])]
    lines.extend(_line(line) for line in cells)
    if not rows:
        lines.append("(no rows)")
    return "\n".join(lines)


class TripReporter:
    """Turns query results into ordered, display-ready reports."""

    def build_report(self, query, rows: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Apply the query's ordering and truncation to its result rows.

        Returns:
            dict: name, title, columns and ordered rows of the report
        """
        if query.order_by:
            ordered = rank(rows, query.order_by, top_n=query.top_n, descending=query.descending)
        else:
            ordered = list(rows[:query.top_n]) if query.top_n is not None else list(rows)

        columns = list(query.keys) + list(query.stats)
        logger.debug(f"Report '{query.name}' has {len(ordered)} rows")
        return {
            'name': query.name,
            'title': query.title,
            'columns': columns,
            'rows': ordered,
        }

    def render(self, report: Dict[str, Any]) -> str:
        title = report['title']
        return f"{title}\n{'=' * len(title)}\n{format_table(report['rows'], report['columns'])}"

    def render_all(self, reports: Sequence[Dict[str, Any]]) -> str:
        return "\n\n".join(self.render(report) for report in reports)
