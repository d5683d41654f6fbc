"""Outer envelope framing — named parts of a multipart/form-data-shaped stream.

Every part starts with ``\\r\\n--<boundary>\\r\\n`` and a
``Content-Disposition: form-data; name=<name>`` header.  Only
:meth:`EnvelopeWriter.write_error` closes the envelope.
"""

from __future__ import annotations

import json
from typing import BinaryIO

from .errors import TemplateError

PLACEHOLDER = "FILENAME"


class EnvelopeWriter:
    """Write framed parts to a binary sink.

    The JSON metadata template is split around its ``FILENAME"`` marker
    once, at construction; a template without the marker raises
    :class:`TemplateError` before anything is written.
    """

    def __init__(self, sink: BinaryIO, boundary: str, json_template: str) -> None:
        pos = json_template.find(PLACEHOLDER + '"')
        if pos < 0:
            raise TemplateError("Expected placeholder 'FILENAME' to exist in JSON template")
        self._sink = sink
        self._boundary = boundary
        self._template_head = json_template[:pos].encode("utf-8")
        self._template_tail = json_template[pos + len(PLACEHOLDER):].encode("utf-8")

    @property
    def sink(self) -> BinaryIO:
        return self._sink

    @property
    def boundary(self) -> str:
        return self._boundary

    def _part_header(self, name: str) -> bytes:
        return (
            f"\r\n--{self._boundary}\r\n"
            f"Content-Disposition: form-data; name={name}\r\n\r\n"
        ).encode("utf-8")

    def write_part(self, name: str, body: bytes = b"") -> None:
        self._sink.write(self._part_header(name))
        if body:
            self._sink.write(body)

    def write_indexed_part(self, index: int, ext: str, body: bytes = b"") -> None:
        self.write_part(f"{index}{ext}", body)

    def write_json(self, index: int, filename: str) -> None:
        """Write ``<index>.json``: the template with *filename* spliced in."""
        escaped = json.dumps(filename, ensure_ascii=False)[1:-1]
        self.write_indexed_part(index, ".json")
        self._sink.write(self._template_head)
        self._sink.write(escaped.encode("utf-8"))
        self._sink.write(self._template_tail)

    def open_blob(self, index: int) -> BinaryIO:
        """Write the ``<index>.blob`` part header; the caller streams the payload."""
        self.write_indexed_part(index, ".blob")
        return self._sink

    def write_progress(self, processed: int, total: int) -> None:
        payload = json.dumps(
            {"children": {"nProcessed": processed, "nTotal": total}},
            separators=(",", ":"),
        )
        self.write_part("progress", payload.encode("utf-8"))

    def write_error(self, message: str) -> None:
        write_error(self._sink, self._boundary, message)


def write_error(sink: BinaryIO, boundary: str, message: str) -> None:
    """Write the terminal ``error`` part and the closing boundary.

    Usable without an :class:`EnvelopeWriter` so that a rejected template
    can still be reported.
    """
    sink.write(
        (
            f"\r\n--{boundary}\r\n"
            "Content-Disposition: form-data; name=error\r\n\r\n"
            f"{message}"
            f"\r\n--{boundary}--"
        ).encode("utf-8")
    )
    sink.flush()
