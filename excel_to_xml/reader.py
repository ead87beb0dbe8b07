"""
Workbook Reader
===============
Decodes an ``.xlsx`` file with openpyxl into the read-only model used by the
projection engine.

The file is opened twice: once with formulas and once with the cached values
Excel stored for them (``data_only=True``).  Only cells that physically carry
a value or a style are kept, mirroring how the file itself is sparse.
"""

import datetime
import logging
import warnings
import zipfile

import openpyxl
from lxml import etree
from openpyxl.cell.cell import MergedCell
from openpyxl.chartsheet import Chartsheet
from openpyxl.utils.datetime import to_excel
from openpyxl.utils.exceptions import InvalidFileException

from .errors import ReaderError
from .model import Cell, CellType, Row, Sheet, Workbook

logger = logging.getLogger(__name__)

_DATE_TYPES = (datetime.datetime, datetime.date, datetime.time, datetime.timedelta)

# Damaged parts inside a valid zip surface as parse or value errors
_READ_ERRORS = (OSError, InvalidFileException, zipfile.BadZipFile, KeyError,
                ValueError, TypeError, SyntaxError, etree.Error)


# ------------------------------------------------------------------
# Value classification
# ------------------------------------------------------------------

def _classify(value, data_type):
    """Return ``(CellType, value)`` for a non-formula cell value."""
    if data_type == "e":
        return CellType.ERROR, value
    if value is None:
        return CellType.BLANK, None
    if isinstance(value, bool):
        return CellType.BOOLEAN, value
    if isinstance(value, (int, float)):
        return CellType.NUMERIC, value
    if isinstance(value, _DATE_TYPES):
        # Dates are numbers in the file; keep the Excel serial value
        return CellType.NUMERIC, to_excel(value)
    return CellType.STRING, str(value)


def _formula_text(value):
    # ArrayFormula / DataTableFormula carry their text separately
    text = getattr(value, "text", None)
    if text is None:
        text = "" if value is None else str(value)
    return text[1:] if text.startswith("=") else text


def _build_cell(cell, cached):
    row = cell.row - 1
    col = cell.column - 1
    if cell.data_type == "f":
        cached_type, cached_value = _classify(
            cached.value, cached.data_type) if cached is not None else (None, None)
        return Cell(
            row=row,
            column=col,
            cell_type=CellType.FORMULA,
            formula=_formula_text(cell.value),
            cached_type=cached_type,
            cached_value=cached_value,
        )
    cell_type, value = _classify(cell.value, cell.data_type)
    return Cell(row=row, column=col, cell_type=cell_type, value=value)


def _is_present(cell) -> bool:
    if isinstance(cell, MergedCell):
        return False
    return cell.value is not None or cell.has_style


# ------------------------------------------------------------------
# Sheet / workbook
# ------------------------------------------------------------------

def read_sheet(ws, ws_values=None) -> Sheet:
    """Convert one openpyxl worksheet into a :class:`Sheet`.

    *ws_values* is the same sheet loaded with ``data_only=True``; without it
    formula cells fall back to their formula text.
    """
    sheet = Sheet(name=ws.title)
    for cells in ws.iter_rows():
        present = [c for c in cells if _is_present(c)]
        if not present:
            continue
        row = Row(index=present[0].row - 1)
        for cell in present:
            cached = None
            if ws_values is not None and cell.data_type == "f":
                cached = ws_values.cell(row=cell.row, column=cell.column)
            row.cells.append(_build_cell(cell, cached))
        sheet.rows.append(row)
    return sheet


def read_workbook(file_path: str) -> Workbook:
    """Load *file_path* and return its sheets in workbook order.

    Raises:
        ReaderError: if the file is missing or is not a readable workbook.
    """
    logger.info(f"Reading workbook: {file_path}")
    # openpyxl warns about unsupported extensions (data validation etc.)
    warnings.filterwarnings("ignore", category=UserWarning, module="openpyxl")
    try:
        wb = openpyxl.load_workbook(file_path, data_only=False)
        wb_values = openpyxl.load_workbook(file_path, data_only=True)
    except _READ_ERRORS as exc:
        raise ReaderError(f"Cannot read workbook '{file_path}': {exc}") from exc

    try:
        workbook = Workbook(source_path=str(file_path))
        # Chartsheets count towards sheet positions but hold no cells
        for name in wb.sheetnames:
            ws = wb[name]
            if isinstance(ws, Chartsheet):
                sheet = Sheet(name=ws.title)
            else:
                sheet = read_sheet(ws, wb_values[name])
            logger.debug(f"  Sheet '{sheet.name}': {len(sheet.rows)} rows")
            workbook.sheets.append(sheet)
    finally:
        wb.close()
        wb_values.close()
    return workbook
