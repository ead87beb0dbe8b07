"""
Workbook export: drive sheet projection into one or more XML documents.

Two layouts are supported:

  * **single file** – one ``<workbook>`` document holding every selected
    sheet, written to ``<output_base><output_extension>``;
  * **per sheet** – one document per selected sheet, written to
    ``<output_base>.<sheet name><output_extension>``.

A sheet that fails is logged and recorded on the :class:`ExportResult`; the
remaining sheets are still exported and every document is closed properly.
"""

import logging
import os
from typing import BinaryIO, Optional

from lxml import etree

from .errors import ExportError
from .model import ExportOptions, ExportResult, SheetFailure, Workbook
from .projector import write_sheet
from .reader import read_workbook
from .transform import TransformingSink, open_destination

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".xml"
ENCODING = "utf-8"


def output_paths(output: Optional[str], input_path: Optional[str] = None):
    """Split a user supplied output name into ``(base, extension)``.

    The extension is kept so per-sheet files can be named
    ``<base>.<sheet><extension>``.  Without an output name the input path is
    used as base, e.g. ``book.xlsx`` -> ``book.xlsx.xml``.
    """
    if not output:
        return input_path, DEFAULT_EXTENSION
    base, ext = os.path.splitext(output)
    return base, ext or DEFAULT_EXTENSION


def selected_sheets(workbook: Workbook, options: ExportOptions):
    """Yield ``(index, sheet)`` for every sheet the options select."""
    for index, sheet in enumerate(workbook.sheets):
        if options.selects(sheet.name, index):
            yield index, sheet


def _write_sheets(xf, workbook, options, result, destination):
    for _index, sheet in selected_sheets(workbook, options):
        try:
            write_sheet(xf, sheet, options.include_empty_cells)
        except Exception as exc:
            logger.exception(f"Failed to export sheet '{sheet.name}'")
            result.failures.append(SheetFailure(sheet.name, destination, exc))
        else:
            result.sheets_written += 1


def _write_workbook_document(sink, workbook, options, result, destination):
    with etree.xmlfile(sink, encoding=ENCODING) as xf:
        xf.write_declaration()
        with xf.element("workbook"):
            _write_sheets(xf, workbook, options, result, destination)


def _record_transform_error(sink, result, sheet_name, destination):
    if sink.error is not None:
        result.failures.append(SheetFailure(sheet_name, destination, sink.error))


# ------------------------------------------------------------------
# Layouts
# ------------------------------------------------------------------

def export_single_file(workbook: Workbook, output_base: str,
                       output_extension: str = DEFAULT_EXTENSION,
                       options: Optional[ExportOptions] = None) -> ExportResult:
    """Write all selected sheets into one ``<workbook>`` document.

    Raises:
        ExportError: if the destination cannot be opened.
    """
    options = options or ExportOptions()
    result = ExportResult()
    path = f"{output_base}{output_extension}"
    logger.info(f"Exporting workbook to {path}")

    with open_destination(path, options.template) as sink:
        result.outputs.append(path)
        _write_workbook_document(sink, workbook, options, result, path)
    _record_transform_error(sink, result, None, path)
    return result


def export_per_sheet(workbook: Workbook, output_base: str,
                     output_extension: str = DEFAULT_EXTENSION,
                     options: Optional[ExportOptions] = None) -> ExportResult:
    """Write every selected sheet into its own document."""
    options = options or ExportOptions()
    result = ExportResult()

    for _index, sheet in selected_sheets(workbook, options):
        path = f"{output_base}.{sheet.name}{output_extension}"
        logger.info(f"Exporting sheet '{sheet.name}' to {path}")
        sink = None
        try:
            sink = open_destination(path, options.template)
            with sink:
                result.outputs.append(path)
                with etree.xmlfile(sink, encoding=ENCODING) as xf:
                    xf.write_declaration()
                    write_sheet(xf, sheet, options.include_empty_cells)
        except ExportError as exc:
            logger.error(str(exc))
            result.failures.append(SheetFailure(sheet.name, path, exc))
        except Exception as exc:
            logger.exception(f"Failed to export sheet '{sheet.name}' to {path}")
            result.failures.append(SheetFailure(sheet.name, path, exc))
        else:
            result.sheets_written += 1
        finally:
            # a partial document is still transformed when its sink closes
            if sink is not None:
                _record_transform_error(sink, result, sheet.name, path)

    return result


def export_to_stream(workbook: Workbook, stream: BinaryIO,
                     options: Optional[ExportOptions] = None) -> ExportResult:
    """Write the selected sheets as one ``<workbook>`` document to *stream*.

    The stream is flushed but left open for the caller.
    """
    options = options or ExportOptions()
    result = ExportResult()
    with TransformingSink(stream, options.template, close_destination=False) as sink:
        _write_workbook_document(sink, workbook, options, result, None)
    _record_transform_error(sink, result, None, None)
    return result


def export_workbook(input_path: str, output_base: Optional[str] = None,
                    output_extension: str = DEFAULT_EXTENSION,
                    options: Optional[ExportOptions] = None) -> ExportResult:
    """Read *input_path* and export it according to *options*.

    Parameters
    ----------
    input_path : str
        Path to the source ``.xlsx`` workbook.
    output_base : str or None
        Output path without extension.  Defaults to *input_path*.
    output_extension : str
        Extension appended to every output file (including the dot).
    options : ExportOptions or None
        Export settings; defaults export every sheet, one file each.

    Returns
    -------
    ExportResult
        Written paths and any per-sheet failures.
    """
    options = options or ExportOptions()
    output_base = output_base or input_path
    workbook = read_workbook(input_path)

    if options.single_file:
        result = export_single_file(workbook, output_base, output_extension, options)
    else:
        result = export_per_sheet(workbook, output_base, output_extension, options)

    logger.info(f"Exported {result.sheets_written} sheet(s) into "
                f"{len(result.outputs)} file(s)")
    for failure in result.failures:
        logger.warning(f"  Failed: {failure}")
    return result
