"""Tests for pst_stream.store."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from tests.conftest import _build_archive, _build_email, _build_folder, _node

from pst_schema import ArchiveDocument, Attachment, ItemKind, ItemType, classify
from pst_stream.errors import StoreError
from pst_stream.store import JsonItemStore


def _document_json(**overrides) -> dict:
    document = {
        "root": {
            "node_id": 1,
            "item": {"item_type": "folder", "display_name": "Root", "message_store": True},
            "children": [
                {
                    "node_id": 2,
                    "item": {
                        "item_type": "folder",
                        "display_name": "Inbox",
                        "folder": {"item_count": 1},
                    },
                    "children": [
                        {
                            "node_id": 3,
                            "item": {
                                "item_type": "note",
                                "subject": "Hi",
                                "body": "hello",
                                "email": {
                                    "sender_address": "a@example.com",
                                    "sent_date": "2024-03-04T09:00:00Z",
                                },
                                "attachments": [{"blob_id": 9, "filename_short": "A.BIN"}],
                            },
                        },
                        {"node_id": 4, "has_description": False},
                    ],
                }
            ],
        },
        "blobs": {"9": base64.b64encode(b"blob bytes").decode()},
    }
    document.update(overrides)
    return document


class TestJsonItemStoreLoading:
    def test_from_json(self):
        store = JsonItemStore.from_json(json.dumps(_document_json()))
        root = store.root()
        assert store.node_id(root) == 1
        [inbox] = store.children(root)
        [email_node, missing] = store.children(inbox)
        item = store.load_item(email_node)
        assert item is not None
        assert item.item_type is ItemType.NOTE
        assert item.email is not None and item.email.sent_date is not None
        assert store.has_description(email_node)
        assert not store.has_description(missing)
        assert store.load_item(missing) is None

    def test_from_path(self, tmp_path: Path):
        path = tmp_path / "archive.json"
        path.write_text(json.dumps(_document_json()))
        store = JsonItemStore.from_path(path)
        assert store.node_id(store.root()) == 1

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(StoreError, match="error opening archive"):
            JsonItemStore.from_path(tmp_path / "nope.json")

    def test_invalid_document(self):
        with pytest.raises(StoreError, match="error loading archive index"):
            JsonItemStore.from_json('{"root": {"children": []}}')

    def test_malformed_json(self):
        with pytest.raises(StoreError):
            JsonItemStore.from_json("{not json")


class TestJsonItemStoreNavigation:
    def test_top_of_folders_defaults_to_root(self):
        store = JsonItemStore.from_json(json.dumps(_document_json()))
        root = store.root()
        assert store.top_of_folders(root, store.load_item(root)) is root

    def test_top_of_folders_by_id(self):
        store = JsonItemStore.from_json(json.dumps(_document_json(top_of_folders=2)))
        root = store.root()
        top = store.top_of_folders(root, store.load_item(root))
        assert top is not None and store.node_id(top) == 2

    def test_top_of_folders_missing(self):
        store = JsonItemStore.from_json(json.dumps(_document_json(top_of_folders=99)))
        root = store.root()
        assert store.top_of_folders(root, store.load_item(root)) is None

    def test_read_attachment(self):
        store = JsonItemStore.from_json(json.dumps(_document_json()))
        assert store.read_attachment(Attachment(blob_id=9)) == b"blob bytes"
        assert store.read_attachment(Attachment(data=b"inline", blob_id=9)) == b"inline"
        assert store.read_attachment(Attachment(blob_id=10)) is None
        assert store.read_attachment(Attachment()) is None

    def test_load_embedded(self):
        inner = _build_email(subject="inner")
        store = JsonItemStore(_build_archive([]))
        assert store.load_embedded(Attachment(embedded=inner)) is inner
        assert store.load_embedded(Attachment()) is None


class TestDocumentRoundTrip:
    def test_bytes_survive_json(self):
        item = _build_email(body=b"\x00\x01raw", rtf_compressed=b"LZFu-bytes")
        document = _build_archive([_build_folder("Inbox", [_node(item)])], blobs={1: b"\xff\xfe"})
        restored = ArchiveDocument.model_validate_json(document.model_dump_json())
        restored_item = restored.root.children[0].children[0].item
        assert restored_item is not None
        assert restored_item.email is not None
        assert restored_item.email.rtf_compressed == b"LZFu-bytes"
        assert restored.blobs == {1: b"\xff\xfe"}


class TestClassify:
    def test_kinds(self):
        assert classify(_build_email()) is ItemKind.EMAIL
        assert classify(_build_email(item_type=ItemType.SCHEDULE)) is ItemKind.EMAIL
        assert classify(_build_email(item_type=ItemType.CONTACT)) is ItemKind.UNKNOWN
        folder = _build_folder("Inbox", []).item
        assert folder is not None and classify(folder) is ItemKind.FOLDER
        nameless = _build_folder(None, []).item
        assert nameless is not None and classify(nameless) is ItemKind.UNKNOWN
        root = _build_archive([]).root.item
        assert root is not None and classify(root) is ItemKind.FOLDER
