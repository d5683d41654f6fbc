"""Header reconstruction from the raw transport-header blob of an item.

Header blobs stored in an archive are untrustworthy: some are fragments of
the message body, some carry the MIME headers of the original multipart
structure after the real RFC 822 headers.  This module decides whether a
blob is usable, separates the real headers from the trailing MIME headers,
detects which fields are present, and removes the fields the encoder
writes itself.

All field searches are case-insensitive and match a field either on the
first line of the blob or after a newline.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()

# Blob prefixes seen on genuine header blocks.  A trailing space also
# matches a wrapped header (``Name:\r\n\t``).
VALID_PREFIXES = (
    "Content-Type: ",
    "Date: ",
    "From: ",
    "MIME-Version: ",
    "Microsoft Mail Internet Headers",
    "Received: ",
    "Return-Path: ",
    "Subject: ",
    "To: ",
    "X-ASG-Debug-ID: ",
    "X-Barracuda-URL: ",
    "X-x: ",
)

# Fields regenerated by the encoder and therefore removed from the blob.
STRIPPED_FIELDS = (
    "Microsoft Mail Internet Headers",
    "MIME-Version:",
    "Content-Type:",
    "Content-Transfer-Encoding:",
    "Content-class:",
    "X-MimeOLE:",
    "X-From_:",
)

RFC822 = "message/rfc822"


def _prefix_matches(text: str, prefix: str) -> bool:
    n = len(prefix)
    if text[:n].lower() == prefix.lower():
        return True
    if prefix.endswith(" ") and text[: n - 1].lower() == prefix[:-1].lower():
        return text[n - 1 : n + 2] == "\r\n\t"
    return False


def is_valid_header_blob(text: str | None) -> bool:
    """True if *text* starts like a real RFC 822 header block."""
    if not text:
        return False
    if any(_prefix_matches(text, prefix) for prefix in VALID_PREFIXES):
        return True
    if len(text) > 2:
        logger.debug("header_blob_ignored", prefix=text[:40])
    return False


def find_field(headers: str, name: str) -> int | None:
    """Locate field *name* (e.g. ``"From:"``).

    Returns the index of the newline preceding the field, ``0`` when the
    field is the first line, or ``None``.
    """
    lowered = headers.lower()
    needle = name.lower()
    pos = lowered.find("\n" + needle)
    if pos >= 0:
        return pos
    if lowered.startswith(needle):
        return 0
    return None


def field_end(headers: str, pos: int) -> int | None:
    """Index of the newline ending the field at *pos*, skipping continuation lines.

    ``None`` when the field runs to the end of *headers*.
    """
    end = headers.find("\n", pos + 1)
    while end >= 0 and headers[end + 1 : end + 2] in (" ", "\t"):
        end = headers.find("\n", end + 1)
    return end if end >= 0 else None


def _field_start(headers: str, pos: int) -> int:
    return pos + 1 if headers.startswith("\n", pos) else pos


def has_field(headers: str, name: str) -> bool:
    return find_field(headers, name) is not None


def get_subfield(headers: str, pos: int | None, subfield: str) -> str | None:
    """Value of parameter *subfield* inside the field starting at *pos*.

    Quoted values run to the closing quote; bare values stop at ``;`` or
    the end of the line.  The search never leaves the field.
    """
    if pos is None:
        return None
    end = field_end(headers, pos)
    field = headers[_field_start(headers, pos) : end if end is not None else len(headers)]
    match = re.search(rf"(?<=[\s;]){re.escape(subfield)}=", field, re.IGNORECASE)
    if match is None:
        return None
    start = match.end()
    if field[start : start + 1] == '"':
        start += 1
        stop = field.find('"', start)
    else:
        stops = [i for i in (field.find(";", start), field.find("\n", start)) if i >= 0]
        stop = min(stops) if stops else -1
    value = field[start:] if stop < 0 else field[start:stop]
    return value.strip()


def strip_field(headers: str, name: str) -> str:
    """Remove every occurrence of field *name*, continuation lines included."""
    pos = find_field(headers, name)
    while pos is not None:
        end = field_end(headers, pos)
        if end is None:
            headers = headers[:pos]
        else:
            if pos == 0:
                # the field is the first line: drop its newline too
                end += 1
            headers = headers[:pos] + headers[end:]
        pos = find_field(headers, name)
    return headers


def recover_sender(headers: str) -> str | None:
    """First ``<address>`` on the first physical line of the ``From:`` field."""
    pos = find_field(headers, "From:")
    if pos is None:
        return None
    start = _field_start(headers, pos)
    newline = headers.find("\n", start)
    if newline < 0:
        newline = len(headers)
    left = headers.find("<", start)
    right = headers.find(">", start)
    if 0 <= left < right < newline:
        return headers[left + 1 : right]
    return None


def next_rfc822_headers(extra: str | None) -> str | None:
    """Advance leftover embedded-MIME header text to the next message's headers.

    *extra* is a sequence of header blocks separated by blank lines.  The
    text following the first block whose ``Content-Type`` is
    ``message/rfc822`` is returned; when no block matches, the final
    remainder is returned.
    """
    if extra is None:
        return None
    headers = extra
    cut = headers.find("\n\n")
    while cut >= 0:
        block, rest = headers[: cut + 1], headers[cut + 2 :]
        pos = find_field(block, "Content-Type:")
        if pos is not None:
            line_end = block.find("\n", pos + 1)
            line = block[_field_start(block, pos) : line_end if line_end >= 0 else len(block)]
            value = line.partition(":")[2].split(";", 1)[0].strip()
            if value.lower() == RFC822:
                logger.debug("rfc822_headers_found")
                return rest
        headers = rest
        cut = headers.find("\n\n")
    return headers


@dataclass
class HeaderBlock:
    """Validated header text of one message plus what was learnt from it."""

    text: str
    embedded_tail: str | None
    has_from: bool
    has_to: bool
    has_subject: bool
    has_date: bool
    has_cc: bool
    has_messageid: bool
    charset: str | None
    report_type: str | None
    sender: str | None


def reconstruct_headers(own: str | None, fallback: str | None) -> HeaderBlock | None:
    """Build a :class:`HeaderBlock` from the item's blob or, failing that, *fallback*.

    Returns ``None`` when neither blob looks like real headers.
    """
    text = own if is_valid_header_blob(own) else fallback
    if text is None or not is_valid_header_blob(text):
        return None

    text = text.replace("\r", "")
    tail: str | None = None
    cut = text.find("\n\n")
    if cut >= 0:
        tail = text[cut + 2 :]
        text = text[: cut + 1]

    content_type = find_field(text, "Content-Type:")
    block = HeaderBlock(
        text=text,
        embedded_tail=tail,
        has_from=has_field(text, "From:"),
        has_to=has_field(text, "To:"),
        has_subject=has_field(text, "Subject:"),
        has_date=has_field(text, "Date:"),
        has_cc=has_field(text, "CC:"),
        has_messageid=has_field(text, "Message-Id:"),
        charset=get_subfield(text, content_type, "charset"),
        report_type=get_subfield(text, content_type, "report-type"),
        sender=recover_sender(text),
    )

    for name in STRIPPED_FIELDS:
        text = strip_field(text, name)
    if text and not text.endswith("\n"):
        text += "\n"
    block.text = text
    return block
