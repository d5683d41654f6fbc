"""Text helpers for the RFC formats written by the serializers.

Covers RFC 2426 value escaping, RFC 2445/2425 timestamps, RFC 2822 dates,
RFC 2047 encoded words and RFC 2231 parameter encoding.
"""

from __future__ import annotations

import email.header
import email.utils
import re
from datetime import datetime, timezone

EPOCH_DATE = "Thu, 01 Jan 1970 00:00:00 +0000"

_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")
_RFC2231_SPECIALS = frozenset("*'%()<>@,;:\\\"/[]?=")


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from the store are already UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_text(value: str | bytes, charset: str | None = None) -> str:
    """Text of a store string field; byte fields are decoded with *charset*, else UTF-8."""
    if isinstance(value, bytes):
        try:
            return value.decode(charset or "utf-8", errors="replace")
        except LookupError:
            return value.decode("utf-8", errors="replace")
    return value


def header_value(value: str) -> str:
    """Collapse line breaks so *value* stays on one header line."""
    return _LINE_BREAKS.sub(" ", value)


def rfc2426_escape(value: str) -> str:
    """Escape a vCard/iCalendar text value."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r", "")
        .replace("\n", "\\n")
    )


def rfc2445_datetime(value: datetime) -> str:
    """``YYYYMMDDTHHMMSSZ`` in UTC."""
    return _as_utc(value).strftime("%Y%m%dT%H%M%SZ")


def rfc2445_now() -> str:
    return rfc2445_datetime(datetime.now(timezone.utc))


def rfc2425_datetime(value: datetime) -> str:
    """``YYYY-MM-DDTHH:MM:SSZ`` in UTC, as used by vCard ``BDAY``."""
    return _as_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def rfc2822_date(value: datetime) -> str:
    return email.utils.format_datetime(_as_utc(value))


def rfc2047_encode(value: str) -> str:
    """Return *value* unchanged if ASCII, else as UTF-8 encoded words."""
    value = header_value(value)
    if value.isascii():
        return value
    return email.header.Header(value, "utf-8").encode()


def format_address(name: str | None, address: str) -> str:
    """``Name <address>`` with the display name quoted or encoded as needed."""
    address = header_value(address)
    if not name:
        return f"<{address}>"
    return email.utils.formataddr((header_value(name), address), charset="utf-8")


def rfc2231_encode(filename: str) -> str:
    """Percent-encode *filename* for a ``filename*=`` parameter when it needs it."""
    if all(32 < ord(c) < 128 and c not in _RFC2231_SPECIALS for c in filename):
        return filename
    return email.utils.encode_rfc2231(filename, "utf-8")


def quote_string(value: str) -> str:
    """Backslash-escape double quotes and backslashes."""
    return value.replace("\\", "\\\\").replace('"', '\\"')
