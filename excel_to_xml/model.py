"""
Data Model
==========
Read-only view of a workbook as consumed by the projection engine, plus the
options and result records of an export run.

Indices are zero-based throughout: ``Row.index`` is the sheet row number
minus one and ``Cell.column`` is the sheet column number minus one.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Optional


class CellType(enum.Enum):
    STRING = "string"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    BLANK = "blank"
    FORMULA = "formula"
    ERROR = "error"


@dataclass
class Cell:
    """A single present cell."""
    row: int
    column: int
    cell_type: CellType
    value: Any = None
    formula: Optional[str] = None  # Formula text without the leading '='
    cached_type: Optional[CellType] = None
    cached_value: Any = None


@dataclass
class Row:
    """A sheet row holding only the cells that are physically present."""
    index: int
    cells: list = field(default_factory=list)  # list[Cell], ascending column


@dataclass
class Sheet:
    name: str
    rows: list = field(default_factory=list)  # list[Row], ascending index


@dataclass
class Workbook:
    source_path: Optional[str] = None
    sheets: list = field(default_factory=list)  # list[Sheet]


def normalize_selector(entries: Any) -> frozenset:
    """Lowercase and trim sheet names/indices, dropping empty entries.

    A single string (or number) is split on commas, so ``"Summary, 2"`` and
    ``["Summary", 2]`` select the same sheets.
    """
    if isinstance(entries, (str, int)):
        entries = str(entries).split(",")
    normalized = set()
    for entry in entries or ():
        text = str(entry).strip().lower()
        if text:
            normalized.add(text)
    return frozenset(normalized)


@dataclass(frozen=True)
class ExportOptions:
    """Immutable settings for one export run."""
    include_empty_cells: bool = False
    sheets: frozenset = frozenset()
    single_file: bool = False
    template: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "sheets", normalize_selector(self.sheets))

    @property
    def export_all_sheets(self) -> bool:
        return not self.sheets

    @property
    def transform(self) -> bool:
        return self.template is not None

    def selects(self, name: str, index: int) -> bool:
        """Return True when the sheet at *index* named *name* is exported.

        Names and positional indices share one selector set, so a sheet
        literally named ``"1"`` also matches the second sheet's index.
        *index* counts every sheet of the workbook, chartsheets included.
        """
        if self.export_all_sheets:
            return True
        return (name.strip().lower() in self.sheets
                or str(index) in self.sheets)

    @classmethod
    def from_config(cls, config: dict) -> "ExportOptions":
        """Build options from a config dict as returned by ``load_config``."""
        return cls(
            include_empty_cells=bool(config.get("include_empty_cells", False)),
            sheets=config.get("sheets"),
            single_file=bool(config.get("single_file", False)),
            template=config.get("template") or None,
        )


@dataclass
class SheetFailure:
    """A sheet or destination that could not be (fully) written."""
    sheet: Optional[str]
    destination: Optional[str]
    error: BaseException

    def __str__(self):
        where = self.sheet if self.sheet is not None else self.destination
        return f"{where}: {self.error}"


@dataclass
class ExportResult:
    outputs: list = field(default_factory=list)  # list[str] of written paths
    failures: list = field(default_factory=list)  # list[SheetFailure]
    sheets_written: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures
