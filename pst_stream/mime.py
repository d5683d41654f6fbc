"""MIME encoder: writes one email-like item as a complete RFC 822 document.

The document is streamed straight to the output: reconstructed headers,
synthesized headers for whatever the header blob lacked, the body parts,
calendar parts of meeting requests, pseudo-attachments built from the
RTF and encrypted bodies, and finally the real attachments.  Embedded
messages recurse into :meth:`EmailEncoder.write_email`.
"""

from __future__ import annotations

import base64
import re
from typing import BinaryIO

import structlog

from pst_schema import ArchiveItem, Attachment, AttachMethod, EmailFields, ItemKind, ItemType, classify

from . import lzfu
from .context import ConversionContext
from .errors import RtfDecompressionError
from .headers import HeaderBlock, next_rfc822_headers, reconstruct_headers
from .ical import write_schedule_request
from .rfc import (
    EPOCH_DATE,
    format_address,
    header_value,
    quote_string,
    rfc2047_encode,
    rfc2231_encode,
    rfc2822_date,
)
from .store import ItemStore

logger = structlog.get_logger()

MIME_TYPE_DEFAULT = "application/octet-stream"
RFC822 = "message/rfc822"
RTF_ATTACH_NAME = "rtf-body.rtf"
RTF_ATTACH_TYPE = "application/rtf"
DEFAULT_CHARSET = "utf-8"
DEFAULT_REPORT_TYPE = "delivery-status"
MAILER_DAEMON = "MAILER-DAEMON"

# Control bytes other than TAB and LF mark a body as binary.
_BINARY_BYTES = re.compile(rb"[\x00-\x08\x0b-\x1f]")

# 57 input bytes encode to one 76-character base64 line.
_B64_CHUNK = 57 * 1024


def needs_base64(data: bytes) -> bool:
    return _BINARY_BYTES.search(data) is not None


def _write(out: BinaryIO, *chunks: str) -> None:
    for chunk in chunks:
        out.write(chunk.encode("utf-8"))


def _write_base64(out: BinaryIO, data: bytes) -> None:
    for start in range(0, len(data), _B64_CHUNK):
        out.write(base64.encodebytes(data[start : start + _B64_CHUNK]))


class EmailEncoder:
    """Serialize email-like items, resolving attachments through the store."""

    def __init__(self, store: ItemStore, context: ConversionContext) -> None:
        self._store = store
        self._context = context

    def _new_boundary(self) -> str:
        return f"--boundary-pst-stream-{self._context.rng.randrange(2**31)}_-_-"

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def write_email(
        self,
        item: ArchiveItem,
        out: BinaryIO,
        *,
        embedding: bool = False,
        extra_headers: str | None = None,
        depth: int = 0,
    ) -> None:
        """Write *item* as a ``message/rfc822`` document.

        *extra_headers* is the leftover embedded-MIME header text of the
        enclosing message; it stands in for the item's own header blob
        when that blob is unusable.  Only the outermost call records its
        own leftover text for the embedded messages below it.
        """
        fields = item.email or EmailFields()
        block = reconstruct_headers(fields.header, extra_headers)

        charset = fields.body_charset or DEFAULT_CHARSET
        report_type = DEFAULT_REPORT_TYPE
        sender = fields.sender_address if fields.sender_address and "@" in fields.sender_address else None
        if block is not None:
            if not embedding and extra_headers is None:
                extra_headers = block.embedded_tail
            charset = block.charset or charset
            report_type = block.report_type or report_type
            if sender is None and block.sender:
                sender = block.sender
        sender = sender or MAILER_DAEMON

        boundary = self._new_boundary()
        is_report = item.item_type is ItemType.REPORT

        self._write_headers(out, item, fields, block, sender)
        _write(out, "MIME-Version: 1.0\n")
        if is_report:
            _write(out, f'Content-Type: multipart/report; report-type={report_type};\n\tboundary="{boundary}"\n')
        else:
            _write(out, f'Content-Type: multipart/mixed;\n\tboundary="{boundary}"\n')
        _write(out, "\n")

        if is_report and fields.report_text is not None:
            self._write_body_part(out, fields.report_text, "text/plain", charset, boundary)
            _write(out, "\n")
        self._write_bodies(out, item, fields, charset, boundary)

        if item.item_type is ItemType.SCHEDULE and item.appointment is not None:
            self._write_schedule_parts(out, item, fields, sender, boundary)

        for source in self._body_sources(fields):
            self._write_attachment(out, source, boundary)

        for attachment in item.attachments:
            if attachment.method is AttachMethod.EMBEDDED:
                extra_headers = next_rfc822_headers(extra_headers)
                self._write_embedded(out, attachment, boundary, extra_headers, depth)
            elif attachment.data is not None or attachment.blob_id is not None:
                self._write_attachment(out, attachment, boundary)

        _write(out, f"\n--{boundary}--\n\n")

    def _write_headers(
        self,
        out: BinaryIO,
        item: ArchiveItem,
        fields: EmailFields,
        block: HeaderBlock | None,
        sender: str,
    ) -> None:
        if block is not None and block.text:
            _write(out, block.text)

        if item.read:
            _write(out, "Status: RO\n")

        if block is None or not block.has_from:
            _write(out, f"From: {format_address(fields.sender_name, sender)}\n")
        if block is None or not block.has_subject:
            _write(out, f"Subject: {rfc2047_encode(item.subject) if item.subject else ''}\n")
        if (block is None or not block.has_to) and fields.sentto_address:
            _write(out, f"To: {rfc2047_encode(fields.sentto_address)}\n")
        if (block is None or not block.has_cc) and fields.cc_address:
            _write(out, f"Cc: {rfc2047_encode(fields.cc_address)}\n")
        if block is None or not block.has_date:
            date = rfc2822_date(fields.sent_date) if fields.sent_date else EPOCH_DATE
            _write(out, f"Date: {date}\n")
        if (block is None or not block.has_messageid) and fields.messageid:
            _write(out, f"Message-Id: {header_value(fields.messageid)}\n")

        # Forensic headers keep store data that mail clients do not use.
        raw_sender = fields.sender_address
        if raw_sender and "@" not in raw_sender and raw_sender != ".":
            _write(out, f"X-libpst-forensic-sender: {header_value(raw_sender)}\n")
        if fields.bcc_address:
            _write(out, f"X-libpst-forensic-bcc: {header_value(fields.bcc_address)}\n")

    # ------------------------------------------------------------------
    # Bodies
    # ------------------------------------------------------------------

    def _write_bodies(
        self,
        out: BinaryIO,
        item: ArchiveItem,
        fields: EmailFields,
        charset: str,
        boundary: str,
    ) -> None:
        both = item.body is not None and fields.htmlbody is not None
        part_boundary = boundary
        if both:
            part_boundary = f"alt-{boundary}"
            _write(out, f"\n--{boundary}\n", f'Content-Type: multipart/alternative;\n\tboundary="{part_boundary}"\n')

        if item.body is not None:
            self._write_body_part(out, item.body, "text/plain", charset, part_boundary)
        if fields.htmlbody is not None:
            self._write_body_part(out, fields.htmlbody, "text/html", charset, part_boundary)

        if both:
            _write(out, f"\n--{part_boundary}--\n")

    def _write_body_part(
        self,
        out: BinaryIO,
        body: str | bytes,
        mimetype: str,
        charset: str,
        boundary: str,
    ) -> None:
        """Write one text body, base64-encoding it if it holds control bytes.

        ``str`` bodies were converted to UTF-8 by the store; ``bytes``
        bodies are in the message charset.
        """
        if isinstance(body, str):
            raw = body.encode("utf-8")
            charset = "utf-8"
        else:
            raw = body
        text = raw.replace(b"\r", b"")
        binary = needs_base64(text)

        _write(out, f"\n--{boundary}\n", f'Content-Type: {mimetype}; charset="{charset}"\n')
        if binary:
            _write(out, "Content-Transfer-Encoding: base64\n")
        _write(out, "\n")
        if binary:
            # Bodies in NUL-bearing encodings such as UTF-16 end up here.
            _write_base64(out, raw)
        else:
            out.write(text)

    def _body_sources(self, fields: EmailFields) -> list[Attachment]:
        """Pseudo-attachments carrying the encrypted and RTF bodies, in output order."""
        sources: list[Attachment] = []
        if fields.encrypted_htmlbody is not None:
            sources.append(Attachment(data=fields.encrypted_htmlbody))
        if fields.encrypted_body is not None:
            sources.append(Attachment(data=fields.encrypted_body))
        if fields.rtf_compressed is not None:
            try:
                rtf = lzfu.decompress(fields.rtf_compressed)
            except RtfDecompressionError as exc:
                logger.warning("rtf_body_skipped", reason=str(exc))
            else:
                sources.append(
                    Attachment(data=rtf, filename_long=RTF_ATTACH_NAME, mimetype=RTF_ATTACH_TYPE)
                )
        return sources

    def _write_schedule_parts(
        self,
        out: BinaryIO,
        item: ArchiveItem,
        fields: EmailFields,
        sender: str,
        boundary: str,
    ) -> None:
        method = "REQUEST"
        calendar = write_schedule_request(item, sender, fields.sender_name, method)

        _write(
            out,
            f"\n--{boundary}\n",
            f'Content-Type: text/calendar; method="{method}"; charset="utf-8"\n\n',
            calendar,
            "\n",
        )

        filename = f"i{self._context.rng.randrange(2**31)}.ics"
        _write(
            out,
            f"\n--{boundary}\n",
            f'Content-Type: text/calendar; charset="utf-8"; name="{filename}"\n',
            f'Content-Disposition: attachment; filename="{filename}"\n\n',
            calendar,
            "\n",
        )

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def _write_attachment(self, out: BinaryIO, attachment: Attachment, boundary: str) -> None:
        data = self._store.read_attachment(attachment)
        if data is None:
            logger.warning("attachment_payload_missing", blob_id=attachment.blob_id)
            return

        _write(
            out,
            f"\n--{boundary}\n",
            f"Content-Type: {attachment.mimetype or MIME_TYPE_DEFAULT}\n",
            "Content-Transfer-Encoding: base64\n",
        )
        if attachment.content_id:
            _write(out, f"Content-ID: <{attachment.content_id}>\n")

        if attachment.filename_long:
            # filename* is the standard form; the quoted UTF-8 filename= is
            # for clients that ignore RFC 2231.
            _write(
                out,
                "Content-Disposition: attachment; \n",
                f"        filename*={rfc2231_encode(attachment.filename_long)};\n",
                f'        filename="{quote_string(attachment.filename_long)}"\n\n',
            )
        elif attachment.filename_short:
            _write(out, f'Content-Disposition: attachment; filename="{attachment.filename_short}"\n\n')
        else:
            _write(out, "Content-Disposition: inline\n\n")

        _write_base64(out, data)
        _write(out, "\n\n")

    def _write_embedded(
        self,
        out: BinaryIO,
        attachment: Attachment,
        boundary: str,
        extra_headers: str | None,
        depth: int,
    ) -> None:
        if depth >= self._context.max_embedding_depth:
            logger.warning("embedded_message_too_deep", depth=depth + 1)
            return

        embedded = self._store.load_embedded(attachment)
        if embedded is None:
            logger.warning("embedded_message_unparsable", blob_id=attachment.blob_id)
            return
        kind = classify(embedded)
        if kind is not ItemKind.EMAIL:
            logger.warning("embedded_message_not_email", kind=kind.value, item_type=embedded.item_type.value)
            return

        _write(out, f"\n--{boundary}\n", f"Content-Type: {RFC822}\n\n")
        self.write_email(embedded, out, embedding=True, extra_headers=extra_headers, depth=depth + 1)
