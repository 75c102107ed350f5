"""
Spreadsheet and CSV rendering for splitview.

OOXML workbooks are read with openpyxl so merged cells keep their spans,
legacy .xls goes through pandas/xlrd, and CSV rows become a pandas DataFrame
rendered as a single synthetic sheet. Spreadsheet bytes with no workbook
container are read as CSV.
"""

import csv
import datetime
import html
import io
import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from openpyxl import load_workbook

from ..detector import looks_like_ole, looks_like_zip
from ..errors import ParseError
from ..fetcher import FetchResult
from ..state import Table, sheet_dom_id
from .base import BaseRenderer, RenderContext, decode_text

logger = logging.getLogger(__name__)

CSV_SHEET_NAME = 'Sheet1'
CSV_SEPARATORS = [',', ';', '\t', '|']
# Inline style DataFrame.to_html puts on the header row
HEADER_ROW_STYLE = ' style="text-align: right;"'


def format_cell(value: Any) -> str:
    """Display text for a spreadsheet cell value."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, float):
        if value != value:  # NaN
            return ''
        if value.is_integer():
            return str(int(value))
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=' ')
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


class SpreadsheetRenderer(BaseRenderer):
    """
    Workbook to one HTML table per sheet.

    Features:
    - Merged ranges rendered with rowspan/colspan
    - Cached formula values instead of formula text
    - Legacy .xls support through pandas
    """

    def render(self, result: FetchResult, context: RenderContext) -> Table:
        data = result.data
        if not data:
            raise ParseError('Spreadsheet is empty', result.url)

        if looks_like_zip(data):
            sheets = self._read_ooxml(data, result.url)
        elif looks_like_ole(data):
            sheets = self._read_legacy(data, result.url)
        else:
            # Windows labels .csv uploads application/vnd.ms-excel
            logger.info("No workbook container found, reading as delimited text")
            return CSVRenderer(self.config).render(result, context)

        if not sheets:
            raise ParseError('No valid sheets found in the Excel file', result.url)

        logger.info(f"Sheets parsed: {list(sheets)}")
        return Table(sheets=sheets, active_sheet=next(iter(sheets)))

    def _read_ooxml(self, data: bytes, url: str) -> Dict[str, str]:
        try:
            workbook = load_workbook(io.BytesIO(data), data_only=True)
        except Exception as e:
            raise ParseError(f"Failed to read workbook: {e}", url, e)

        try:
            return {ws.title: worksheet_to_html(ws) for ws in workbook.worksheets}
        finally:
            workbook.close()

    def _read_legacy(self, data: bytes, url: str) -> Dict[str, str]:
        try:
            frames = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None,
                                   dtype=object, engine='xlrd')
        except Exception as e:
            raise ParseError(f"Failed to read workbook: {e}", url, e)

        sheets = {}
        for name, frame in frames.items():
            rows = [[format_cell(None if pd.isna(v) else v) for v in row]
                    for row in frame.itertuples(index=False, name=None)]
            sheets[str(name)] = pd.DataFrame(rows).to_html(
                header=False, index=False, border=1, table_id=sheet_dom_id(str(name)))
        return sheets


def worksheet_to_html(worksheet) -> str:
    """Render an openpyxl worksheet as an HTML table, honouring merged cells."""
    spans: Dict[Tuple[int, int], Tuple[int, int]] = {}
    covered = set()
    for merged in worksheet.merged_cells.ranges:
        anchor = (merged.min_row, merged.min_col)
        spans[anchor] = (merged.max_row - merged.min_row + 1,
                         merged.max_col - merged.min_col + 1)
        for row in range(merged.min_row, merged.max_row + 1):
            for col in range(merged.min_col, merged.max_col + 1):
                if (row, col) != anchor:
                    covered.add((row, col))

    parts = [f'<table id="{sheet_dom_id(worksheet.title)}">']
    for row in worksheet.iter_rows(min_row=1, max_row=worksheet.max_row,
                                   min_col=1, max_col=worksheet.max_column):
        parts.append('<tr>')
        for cell in row:
            position = (cell.row, cell.column)
            if position in covered:
                continue
            attrs = ''
            if position in spans:
                rowspan, colspan = spans[position]
                if rowspan > 1:
                    attrs += f' rowspan="{rowspan}"'
                if colspan > 1:
                    attrs += f' colspan="{colspan}"'
            parts.append(f'<td{attrs}>{html.escape(format_cell(cell.value))}</td>')
        parts.append('</tr>')
    parts.append('</table>')
    return ''.join(parts)


class CSVRenderer(BaseRenderer):
    """
    CSV to a single-sheet table.

    The first row names the columns; blank header cells become ``Column N``
    and short rows are padded with empty cells.
    """

    def render(self, result: FetchResult, context: RenderContext) -> Table:
        text = decode_text(result.data, result.content_type)
        rows = self._parse_rows(text, result.url)
        if not rows:
            raise ParseError('No data found in the CSV file', result.url)

        header = rows[0]
        columns = [name if name else f'Column {index + 1}' for index, name in enumerate(header)]
        width = len(columns)

        body = rows[1:]
        max_rows = self.config.max_csv_rows
        if max_rows and len(body) > max_rows:
            logger.warning(f"CSV has {len(body)} rows, showing the first {max_rows}")
            body = body[:max_rows]

        padded = [[row[i] if i < len(row) else '' for i in range(width)] for row in body]
        frame = pd.DataFrame(padded, columns=columns)
        table_html = frame.to_html(index=False, border=1, na_rep='',
                                   table_id=sheet_dom_id(CSV_SHEET_NAME))
        table_html = table_html.replace(HEADER_ROW_STYLE, '')

        logger.info(f"Parsed CSV with {len(padded)} rows and {width} columns")
        return Table(sheets={CSV_SHEET_NAME: table_html}, active_sheet=CSV_SHEET_NAME)

    def _parse_rows(self, text: str, url: Optional[str]) -> List[List[str]]:
        separator = detect_separator(text)
        try:
            return [row for row in csv.reader(io.StringIO(text, newline=''), delimiter=separator) if row]
        except csv.Error as e:
            raise ParseError(f"CSV parsing error: {e}", url, e)


def detect_separator(text: str) -> str:
    """Pick the most frequent separator on the first non-empty line."""
    first_line = next((line for line in text.splitlines() if line.strip()), '')
    counts = {sep: first_line.count(sep) for sep in CSV_SEPARATORS}
    best = max(CSV_SEPARATORS, key=lambda sep: counts[sep])
    detected = best if counts[best] else ','
    logger.debug(f"Detected CSV separator: {detected!r}")
    return detected
