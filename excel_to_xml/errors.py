"""
Error types raised while exporting a workbook to XML.

Everything derives from :class:`ExportError` so callers can catch the whole
family in one place.  The exporter decides, per error type, whether a
failure stops the run or only the current sheet.
"""


class ExportError(Exception):
    """Base class for all export failures."""


class ReaderError(ExportError):
    """The input workbook could not be opened or decoded."""


class MarkupError(ExportError):
    """A single value could not be emitted as XML (e.g. control characters)."""

    def __init__(self, message, row=None, col=None):
        super().__init__(message)
        self.row = row
        self.col = col


class TransformError(ExportError):
    """Buffered XML could not be parsed or the XSLT template failed."""

    def __init__(self, message, template=None):
        super().__init__(message)
        self.template = template
