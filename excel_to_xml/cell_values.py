"""
Cell value resolution: turn one cell into the text written to XML.
"""

from typing import Optional

from .model import Cell, CellType

_LITERAL_TYPES = (CellType.STRING, CellType.NUMERIC, CellType.BOOLEAN)


def format_number(value) -> str:
    """Canonical text for a numeric cell.

    ``repr`` of a float is the shortest string that reads back to the same
    float, so ``float(format_number(x)) == float(x)`` always holds.
    """
    return repr(float(value))


def _literal_text(cell_type: CellType, value) -> Optional[str]:
    if cell_type is CellType.STRING:
        return "" if value is None else str(value)
    if cell_type is CellType.NUMERIC:
        return format_number(value)
    if cell_type is CellType.BOOLEAN:
        return "true" if value else "false"
    return None


def resolve_value(cell: Cell, blank_index: int = -1) -> Optional[str]:
    """Return the textual value of *cell*, or ``None`` when it has none.

    Blank cells resolve to ``"BLANK<n>"`` when *blank_index* is non-negative
    (used for header rows).  Formula cells use their cached result and fall
    back to the formula text when there is no usable cached value.
    """
    cell_type = cell.cell_type
    if cell_type in _LITERAL_TYPES:
        return _literal_text(cell_type, cell.value)
    if cell_type is CellType.BLANK:
        if blank_index >= 0:
            return f"BLANK{blank_index}"
        return None
    if cell_type is CellType.FORMULA:
        if cell.cached_type in _LITERAL_TYPES:
            return _literal_text(cell.cached_type, cell.cached_value)
        return cell.formula
    return None
