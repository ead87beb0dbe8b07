"""Excel-to-XML Exporter.

Exports the worksheets of an ``.xlsx`` workbook as XML:

  * every sheet becomes a ``<sheet>`` element whose first row is written as
    ``<columns>`` and provides the titles of the data columns;
  * every following row becomes a ``<row>`` of ``<cell>`` elements, each
    annotated with its column title;
  * sheets are written into one ``<workbook>`` document or one file each;
  * the result can be post-processed through an XSLT stylesheet before it is
    written to disk.
"""

from .errors import ExportError, MarkupError, ReaderError, TransformError
from .exporter import export_to_stream, export_workbook, output_paths
from .model import ExportOptions, ExportResult
from .reader import read_workbook

__all__ = [
    "ExportError",
    "ExportOptions",
    "ExportResult",
    "MarkupError",
    "ReaderError",
    "TransformError",
    "export_to_stream",
    "export_workbook",
    "output_paths",
    "read_workbook",
]
