"""
Deferred-Transform Sink
=======================
A write-only byte sink wrapping the final destination of an XML document.

Without a template every write goes straight to the destination.  With an
XSLT template the bytes are buffered in memory and, when the sink is closed,
the complete document is parsed, transformed with lxml and the result is
written to the destination.  The whole document is held in memory while
transforming, so this suits moderately sized workbooks only.
"""

import io
import logging
import os
from typing import BinaryIO, Optional

from lxml import etree

from .errors import ExportError, TransformError

logger = logging.getLogger(__name__)


def load_stylesheet(template_path: str) -> etree.XSLT:
    """Parse the XSLT template at *template_path*.

    Raises:
        TransformError: if the file is missing or not a valid stylesheet.
    """
    try:
        return etree.XSLT(etree.parse(template_path))
    except (OSError, etree.XMLSyntaxError, etree.XSLTParseError) as exc:
        raise TransformError(
            f"Cannot load stylesheet '{template_path}': {exc}",
            template=template_path,
        ) from exc


def apply_stylesheet(xml_bytes: bytes, template_path: str) -> bytes:
    """Transform the serialized document *xml_bytes* with the template."""
    try:
        document = etree.fromstring(xml_bytes).getroottree()
    except etree.XMLSyntaxError as exc:
        raise TransformError(
            f"Buffered XML is not well-formed: {exc}", template=template_path
        ) from exc

    stylesheet = load_stylesheet(template_path)
    try:
        result = stylesheet(document)
    except etree.XSLTApplyError as exc:
        raise TransformError(
            f"Stylesheet '{template_path}' failed: {exc}", template=template_path
        ) from exc
    # bytes() honours <xsl:output> (method, encoding, indent)
    return bytes(result)


class TransformingSink:
    """Byte sink that optionally runs an XSLT transform when closed.

    Args:
        destination: binary stream receiving the final output.
        template: path to an XSLT stylesheet, or None to pass writes through.
        close_destination: close *destination* when the sink is closed.

    Transform failures never raise out of :meth:`close`; they are logged and
    kept on :attr:`error` for the caller to report.
    """

    def __init__(self, destination: BinaryIO, template: Optional[str] = None,
                 close_destination: bool = True):
        self.destination = destination
        self.template = template
        self.close_destination = close_destination
        self.error: Optional[TransformError] = None
        self.closed = False
        self._buffer = io.BytesIO() if template is not None else None

    @property
    def transforming(self) -> bool:
        return self._buffer is not None

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("write to closed sink")
        if self._buffer is not None:
            return self._buffer.write(data)
        return self.destination.write(data)

    def flush(self):
        if self._buffer is None and not self.closed:
            self.destination.flush()

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            if self._buffer is not None:
                self._run_transform()
        finally:
            if self.close_destination:
                self.destination.close()
            else:
                self.destination.flush()

    def _run_transform(self):
        xml_bytes = self._buffer.getvalue()
        self._buffer = None
        try:
            self.destination.write(apply_stylesheet(xml_bytes, self.template))
        except TransformError as exc:
            logger.error(f"Transform with '{self.template}' failed: {exc}")
            self.error = exc

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_destination(path: str, template: Optional[str] = None) -> TransformingSink:
    """Recreate the file at *path* and return a sink writing to it.

    Raises:
        ExportError: if the file cannot be removed or opened.
    """
    try:
        if os.path.exists(path):
            os.remove(path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        stream = open(path, "wb")
    except OSError as exc:
        raise ExportError(f"Cannot open output '{path}': {exc}") from exc
    return TransformingSink(stream, template)
