"""
Sheet projection: write one sheet as ``<sheet>``/``<columns>``/``<row>``/``<cell>``
elements into an open lxml incremental writer (``etree.xmlfile``).

The first row of a sheet is its header: its values become the column titles
that annotate every following data cell.  Every element is built in full
before it is written, so a value lxml rejects (control characters and the
like) surfaces as a :class:`MarkupError` without leaving a half-written
element behind.
"""

import logging
from typing import Optional

from lxml import etree

from .cell_values import resolve_value
from .errors import MarkupError
from .model import Row, Sheet

logger = logging.getLogger(__name__)

NO_LABEL_PREFIX = "NoLabel"


class ColumnTitles:
    """Column index -> title map of one sheet, filled from its header row.

    The map is only written while the header row is processed; after
    :meth:`freeze` it is read-only.
    """

    def __init__(self):
        self._titles = {}
        self.frozen = False

    def record(self, col: int, title: str):
        if self.frozen:
            raise RuntimeError("column titles are read-only after the header row")
        self._titles[col] = title

    def get(self, col: int) -> Optional[str]:
        return self._titles.get(col)

    def freeze(self):
        self.frozen = True

    def as_dict(self) -> dict:
        return dict(self._titles)

    def __contains__(self, col):
        return col in self._titles

    def __len__(self):
        return len(self._titles)


# ------------------------------------------------------------------
# Element builders
# ------------------------------------------------------------------

def _needs_cdata(value: str) -> bool:
    # "]]>" cannot appear inside a CDATA section; escaped text is safe instead
    return ("<" in value or ">" in value) and "]]>" not in value


def build_cell(row: int, col: int, value: Optional[str],
               titles: ColumnTitles) -> etree._Element:
    """Return the ``<cell>`` element for one grid position."""
    attrib = {"row": str(row), "col": str(col)}
    title = titles.get(col)
    if title is not None:
        attrib["title"] = title
    try:
        element = etree.Element("cell", attrib)
        if value is None:
            element.set("empty", "true")
        elif _needs_cdata(value):
            element.text = etree.CDATA(value)
        else:
            element.text = value
    except ValueError as exc:
        raise MarkupError(f"cell value cannot be written as XML: {exc}",
                          row=row, col=col) from exc
    return element


def build_column(col: int, title: str, empty: bool = False) -> etree._Element:
    """Return a ``<column>`` element of the header."""
    try:
        if empty:
            return etree.Element("column", {
                "empty": "true", "col": str(col), "title": title})
        return etree.Element("column", {"title": title, "col": str(col)})
    except ValueError as exc:
        raise MarkupError(f"column title cannot be written as XML: {exc}",
                          col=col) from exc


def write_any_cell(xf, row: int, col: int, value: Optional[str],
                   titles: ColumnTitles):
    """Write one ``<cell>``; *value* None produces an ``empty="true"`` cell."""
    xf.write(build_cell(row, col, value, titles))


# ------------------------------------------------------------------
# Rows
# ------------------------------------------------------------------

def write_header_row(xf, row: Row, titles: ColumnTitles,
                     include_empty_cells: bool = False) -> list:
    """Write the ``<columns>`` element and record the column titles.

    Returns the list of :class:`MarkupError` for columns that were skipped.
    """
    errors = []
    count = 0
    with xf.element("columns"):
        for cell in row.cells:
            if include_empty_cells:
                while count < cell.column:
                    label = f"{NO_LABEL_PREFIX}{count}"
                    xf.write(build_column(count, label, empty=True))
                    titles.record(count, label)
                    count += 1

            value = resolve_value(cell, count)
            if value is not None:
                try:
                    element = build_column(cell.column, value)
                except MarkupError as exc:
                    exc.row = row.index
                    errors.append(exc)
                else:
                    xf.write(element)
                    titles.record(cell.column, value)
            count += 1
    titles.freeze()
    return errors


def write_data_row(xf, row: Row, titles: ColumnTitles,
                   include_empty_cells: bool = False) -> list:
    """Write one ``<row>`` element with its cells.

    Returns the list of :class:`MarkupError` for cells that were skipped.
    """
    errors = []
    count = 0
    with xf.element("row", {"row": str(row.index)}):
        for cell in row.cells:
            if include_empty_cells:
                while count < cell.column:
                    write_any_cell(xf, row.index, count, None, titles)
                    count += 1
            try:
                write_any_cell(xf, row.index, cell.column,
                               resolve_value(cell), titles)
            except MarkupError as exc:
                errors.append(exc)
            count += 1
    return errors


# ------------------------------------------------------------------
# Sheet
# ------------------------------------------------------------------

def write_sheet(xf, sheet: Sheet, include_empty_cells: bool = False) -> list:
    """Write one ``<sheet>`` element: header row first, data rows after.

    The column titles live only for the duration of this call.  Cells that
    cannot be written are logged and skipped; the list of those
    :class:`MarkupError` is returned.
    """
    titles = ColumnTitles()
    errors = []
    with xf.element("sheet", {"name": sheet.name}):
        for position, row in enumerate(sheet.rows):
            if position == 0:
                errors.extend(write_header_row(xf, row, titles, include_empty_cells))
            else:
                errors.extend(write_data_row(xf, row, titles, include_empty_cells))

    for exc in errors:
        logger.warning(f"Sheet '{sheet.name}': skipped row {exc.row} "
                       f"col {exc.col}: {exc}")
    logger.info(f"  Sheet '{sheet.name}': {max(len(sheet.rows) - 1, 0)} rows, "
                f"{len(titles)} columns")
    return errors
