"""Shared fixtures and item-tree builders for the pst-stream test suite."""

from __future__ import annotations

import io
import itertools
import random
from datetime import datetime, timezone

import pytest

from pst_schema import (
    AppointmentFields,
    ArchiveDocument,
    ArchiveItem,
    ContactFields,
    EmailFields,
    FolderFields,
    ItemType,
    StoreNode,
)
from pst_stream.context import ConversionContext
from pst_stream.store import JsonItemStore

BOUNDARY = "ENVELOPE-BOUNDARY"
JSON_TEMPLATE = '{"name":"FILENAME","kind":"archive-item"}'

_node_ids = itertools.count(100)


@pytest.fixture
def context() -> ConversionContext:
    return ConversionContext(
        boundary=BOUNDARY,
        json_template=JSON_TEMPLATE,
        rng=random.Random(1234),
    )


@pytest.fixture
def sink() -> io.BytesIO:
    return io.BytesIO()


@pytest.fixture
def empty_store() -> JsonItemStore:
    return JsonItemStore(_build_archive([]))


# ------------------------------------------------------------------
# Item builders
# ------------------------------------------------------------------


def _build_email(
    *,
    subject: str | None = "Test Subject",
    body: str | bytes | None = "Hello, World!",
    item_type: ItemType = ItemType.NOTE,
    **email_fields,
) -> ArchiveItem:
    """Build an email-like item; keyword arguments go to :class:`EmailFields`."""
    return ArchiveItem(
        item_type=item_type,
        subject=subject,
        body=body,
        email=EmailFields(**email_fields),
    )


def _build_contact(**contact_fields) -> ArchiveItem:
    return ArchiveItem(
        item_type=ItemType.CONTACT,
        contact=ContactFields(**contact_fields),
    )


def _build_appointment(
    *,
    subject: str | None = "Standup",
    block_id: int = 0x2A,
    **appointment_fields,
) -> ArchiveItem:
    appointment_fields.setdefault("start", datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc))
    appointment_fields.setdefault("end", datetime(2024, 3, 4, 9, 15, tzinfo=timezone.utc))
    return ArchiveItem(
        item_type=ItemType.APPOINTMENT,
        subject=subject,
        block_id=block_id,
        appointment=AppointmentFields(**appointment_fields),
    )


# ------------------------------------------------------------------
# Tree builders
# ------------------------------------------------------------------


def _node(item: ArchiveItem | None, children: list[StoreNode] | None = None, **kw) -> StoreNode:
    return StoreNode(node_id=next(_node_ids), item=item, children=children or [], **kw)


def _build_folder(name: str | None, children: list[StoreNode], item_count: int = 0) -> StoreNode:
    item = ArchiveItem(
        item_type=ItemType.FOLDER,
        display_name=name,
        folder=FolderFields(item_count=item_count),
    )
    return _node(item, children)


def _build_archive(
    children: list[StoreNode],
    *,
    root_item_count: int = 0,
    blobs: dict[int, bytes] | None = None,
) -> ArchiveDocument:
    """An archive whose root record is also the top of folders."""
    root_item = ArchiveItem(
        item_type=ItemType.FOLDER,
        display_name="Personal Folders",
        message_store=True,
        folder=FolderFields(item_count=root_item_count),
    )
    return ArchiveDocument(root=StoreNode(node_id=1, item=root_item, children=children), blobs=blobs or {})


# ------------------------------------------------------------------
# Output parsing
# ------------------------------------------------------------------


def _parse_parts(raw: bytes, boundary: str = BOUNDARY) -> list[tuple[str, bytes]]:
    """Split an envelope into ``(name, body)`` pairs, in stream order."""
    delimiter = f"\r\n--{boundary}\r\n".encode()
    chunks = raw.split(delimiter)
    assert chunks[0] == b""
    parts = []
    for chunk in chunks[1:]:
        head, _, body = chunk.partition(b"\r\n\r\n")
        name = head.decode().split("name=", 1)[1]
        parts.append((name, body))
    return parts
